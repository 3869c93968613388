# Supabase table: photos, storage bucket: photos
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in repository.py and storage.py

"""
Expected Supabase table structure:

photos:
- id: uuid (primary key)
- vault_id: uuid (foreign key to vaults.id, on delete cascade)
- uploaded_by: uuid (foreign key to auth.users.id, not null)
- title: text (not null)
- description: text (nullable)
- file_url: text (not null) - public URL of the object in the photos bucket
- created_at: timestamp (default: now())

Storage bucket "photos":
- {user_id}/{vault_id}/{timestamp_ms}.{ext} - vault photos
- {user_id}/avatar.{ext} - profile avatars (overwritten on change)

Deleting a photo row leaves its object in the bucket.
"""
