# Supabase tables: user_roles, user_permissions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

user_roles:
- id: uuid (primary key)
- user_id: text (not null) - auth user id, or a synthesized id for CSV imports
- role: text (not null) - one of "teacher", "student", "guardian", "admin"
- email: text (nullable)
- approved: boolean (default: false)
- pending_approval: boolean (default: true)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

user_permissions:
- id: uuid (primary key)
- user_id: text (not null)
- permission_name: text (not null) - e.g., "menu_library", "create_news"
- granted: boolean (default: false)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
- unique constraint on (user_id, permission_name)
"""
