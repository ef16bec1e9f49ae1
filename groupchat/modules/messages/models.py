# Supabase table: messages
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in store.py

"""
Expected Supabase table structure:

messages:
- id: uuid (primary key, assigned by the application)
- seq: bigint generated always as identity - insertion order, breaks timestamp ties
- group_id: uuid (foreign key to groups.id, not null)
- sender_id: uuid (not null)
- sender_name: text (not null)
- text: text (nullable) - stored trimmed
- file_url: text (nullable)
- file_type: text (nullable) - values: image, video, document, audio
- created_at: timestamp (not null, assigned by the application)
- check (text is not null or file_url is not null)
- index on (group_id, created_at, seq)
"""
