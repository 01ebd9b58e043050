# Supabase Auth
# This module only verifies bearer tokens issued by Supabase Auth.
# Registration, login and session management are handled outside this service.

"""
Supabase Auth provides:
- auth.get_user() - Get current user from JWT token

The verified user id is the key into the users table, which owns the role
used by the permission resolver.
"""
