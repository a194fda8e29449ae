# Supabase Auth
# This module uses Supabase's built-in authentication system
# No custom tables are required

"""
Supabase Auth provides:
- auth.sign_up() - Register new users
- auth.sign_in_with_password() - Authenticate users
- auth.sign_in_with_oauth() - Build the provider authorize URL (PKCE flow)
- auth.exchange_code_for_session() - Trade the callback ?code= for a session
- auth.get_user() - Get current user from JWT token
- auth.sign_out() - Logout users
- auth.admin.list_users() - Email lookup for the admin console (service role key)

Roles and permissions are not stored in auth metadata; see access/models.py.
"""
