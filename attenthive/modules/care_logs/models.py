# Supabase table: care_logs
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

care_logs:
- id: uuid (primary key)
- recipient_id: uuid (foreign key to care_recipients.id, not null, on delete cascade)
- user_id: uuid (foreign key to users.id, not null) - who did the activity
- activity_type: text (not null) - see config/activity_config.py ACTIVITY_TYPES
- notes: text (nullable)
- metadata: jsonb (nullable) - e.g. walk timer: {durationSeconds, bathroomEvents: [...]}
- photo_url: text (nullable)
- created_at: timestamp (default: now())
- edited_at: timestamp (nullable) - set on every edit
"""
