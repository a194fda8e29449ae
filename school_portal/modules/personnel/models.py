# Supabase table: personnel
# Photos are stored in the avatars bucket under personnel/

"""
Expected Supabase table structure:

personnel:
- id: uuid (primary key)
- full_name: text (not null)
- position: text (nullable)
- department: text (nullable)
- subject_group: text (nullable)
- email: text (nullable)
- phone: text (nullable)
- photo_url: text (nullable)
- additional_details: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
