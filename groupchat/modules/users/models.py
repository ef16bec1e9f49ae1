# Supabase table: user_profiles (read-only from this service)
# Registration and credentials live in the external identity store;
# this backend only resolves user ids and emails to profile details.

"""
Expected Supabase table structure:

user_profiles:
- id: uuid (primary key, references auth.users.id)
- email: text (unique, not null)
- full_name: text (nullable)
- avatar_url: text (nullable)
- created_at: timestamp (default: now())
"""
