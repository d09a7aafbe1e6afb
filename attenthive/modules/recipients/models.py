# Supabase table: care_recipients; Storage bucket: pet-photos
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

care_recipients:
- id: uuid (primary key)
- owner_id: uuid (foreign key to users.id, not null) - primary owner, never reassigned
- name: text (not null)
- category: text (not null, default: 'PET') - values: PET, PLANT, PERSON
- subtype: text (not null) - e.g. DOG, CAT, INDOOR, ELDER (see config/activity_config.py)
- breed: text (nullable)
- gender: text (nullable) - values: MALE, FEMALE
- birth_date: date (nullable)
- weight: numeric (nullable)
- characteristics: text[] (not null, default: '{}')
- description: text (nullable)
- special_notes: text (nullable)
- image_url: text (nullable) - public URL in the pet-photos bucket
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Storage bucket pet-photos (public read):
- pets/<recipient_id>/<epoch_ms>.<ext>
"""
