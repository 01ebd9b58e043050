# Supabase table: users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

users:
- id: uuid (primary key, references auth.users.id)
- email: text (unique, not null)
- name: text (nullable)
- role: text (not null, default 'Developer') - one of Owner, Admin, Developer
- email_confirmed: boolean (not null, default false)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Role changes are written only through the transition_user_role function
(see modules/permissions/models.py) so the role and the permission ledger
change in the same transaction.
"""
