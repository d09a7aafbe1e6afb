# Supabase Auth
# This module uses Supabase's built-in authentication system
# Supabase Auth handles:
# - User registration (auth.users table)
# - User login and session management
# - JWT token generation and validation
# - Password hashing and security

"""
Supabase Auth provides:
- auth.sign_up() - Register new users
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Get current user from JWT token
- auth.sign_out() - Logout users

Credentials stay in auth.users. The application's own users table (see
modules/users/models.py) is keyed by email and holds the profile; a row is
created at registration or on the first request of an account that signed up
elsewhere.
"""
