# Supabase tables: groups, group_members
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in store.py

"""
Expected Supabase table structure:

groups:
- id: uuid (primary key, assigned by the application)
- name: text (not null)
- admin_id: uuid (foreign key to user_profiles.id, not null) - single admin, never transferred
- is_public: boolean (not null, default: false)
- created_at: timestamp (not null)

group_members:
- id: uuid (primary key, assigned by the application)
- group_id: uuid (foreign key to groups.id, not null)
- user_id: uuid (not null)
- created_at: timestamp (not null)
- unique constraint on (group_id, user_id) - makes "add to set" atomic
"""
