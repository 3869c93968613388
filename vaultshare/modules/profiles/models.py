# Supabase table: profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in repository.py

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- full_name: text (nullable)
- phone_number: text (nullable)
- bio: text (nullable)
- gender: text (nullable)
- avatar_url: text (nullable)
- notifications_enabled: boolean (default: true)
- email_updates_enabled: boolean (default: false)
- two_factor_enabled: boolean (default: false)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Rows are created on the first profile save and only partially updated
afterwards; this layer never deletes them.
"""
