# Supabase tables: users, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

users:
- id: uuid (primary key, default: gen_random_uuid())
- email: text (unique, not null) - identity link to auth.users
- name: text (not null, default: '')
- phone: text (nullable)
- address: text (nullable)
- password_hash: text (not null) - 'supabase-auth' placeholder; credentials live in auth.users
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Rows are created on registration, or on the first authenticated request of an
account that was created directly in Supabase Auth (get-or-create by email).
"""
