# Supabase table: profiles
# Avatars are stored in the avatars bucket as <user_id>/avatar.<ext>

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- display_name: text (nullable)
- avatar_url: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
