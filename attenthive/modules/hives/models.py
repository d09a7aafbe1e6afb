# Supabase table: hives
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

hives:
- id: uuid (primary key)
- recipient_id: uuid (foreign key to care_recipients.id, not null, on delete cascade)
- user_id: uuid (foreign key to users.id, not null, on delete cascade)
- role: text (not null, default: 'CAREGIVER') - values: OWNER, CAREGIVER, VIEWER
- created_at: timestamp (default: now())
- unique constraint on (recipient_id, user_id)

A row with role OWNER is a co-owner. The primary owner is
care_recipients.owner_id and never has a row here.
There is no pending state: a row grants access as soon as it exists.
"""
