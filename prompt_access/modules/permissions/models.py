# Supabase table: user_permissions, function: transition_user_role
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in ledger.py

"""
Expected Supabase table structure:

user_permissions:
- id: uuid (primary key, default gen_random_uuid())
- user_id: uuid (foreign key to users.id, not null, on delete cascade)
- permission: text (not null) - one of VIEW_PROMPTS, CREATE_PROMPTS, EDIT_PROMPTS,
  DELETE_PROMPTS, MANAGE_USERS
- is_revoked: boolean (not null, default false)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())
- unique constraint on (user_id, permission)

A row with is_revoked = false is an explicit grant, a row with is_revoked = true
is an explicit revocation, no row defers to the role baseline.

Role transitions run as one transaction through this function:

create or replace function transition_user_role(
    p_user_id uuid,
    p_role text,
    p_permissions text[]
) returns void
language plpgsql
as $$
begin
    update users set role = p_role, updated_at = now() where id = p_user_id;
    if not found then
        raise exception 'User % not found', p_user_id using errcode = 'P0002';
    end if;
    delete from user_permissions where user_id = p_user_id;
    insert into user_permissions (user_id, permission, is_revoked)
    select p_user_id, unnest(p_permissions), false
    on conflict (user_id, permission) do nothing;
end;
$$;
"""
