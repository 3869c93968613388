# Supabase tables: vaults, vault_members
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in repository.py and membership.py

"""
Expected Supabase table structure:

vaults:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- color: text (not null) - opaque display tag, e.g. "bg-blue-500"
- created_by: uuid (foreign key to auth.users.id, not null)
- created_at: timestamp (default: now())

vault_members:
- id: uuid (primary key)
- vault_id: uuid (foreign key to vaults.id, on delete cascade)
- user_id: uuid (foreign key to auth.users.id, not null)
- role: text (not null, default: 'member') - values: owner, admin, member
- created_at: timestamp (default: now())
- unique constraint on (vault_id, user_id)

Deleting a vault cascades to its photos and memberships in the database.
"""
