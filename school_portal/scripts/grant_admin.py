"""
Grant Admin Script
Bootstraps the first administrator: inserts an approved admin role row and
grants every permission in the catalog.

Usage: python -m school_portal.scripts.grant_admin <user_id> <email>
"""

import argparse
import logging

from supabase import Client

from school_portal.config.access_config import PERMISSION_CATALOG, Role
from school_portal.database.supabase_client import get_service_supabase

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def ensure_admin_role(supabase: Client, user_id: str, email: str) -> bool:
    """Insert or approve the admin role row; returns True when a row was created"""
    existing = supabase.table("user_roles")\
        .select("id")\
        .eq("user_id", user_id)\
        .eq("role", Role.ADMIN.value)\
        .execute()
    if existing.data:
        supabase.table("user_roles")\
            .update({"approved": True, "pending_approval": False})\
            .eq("user_id", user_id)\
            .eq("role", Role.ADMIN.value)\
            .execute()
        logger.info(f"Admin role already present for {user_id}; marked approved")
        return False
    supabase.table("user_roles").insert({
        "user_id": user_id,
        "role": Role.ADMIN.value,
        "email": email,
        "approved": True,
        "pending_approval": False
    }).execute()
    logger.info(f"Created admin role for {user_id}")
    return True


def grant_all_permissions(supabase: Client, user_id: str) -> int:
    granted = 0
    for name in PERMISSION_CATALOG:
        try:
            supabase.table("user_permissions").upsert({
                "user_id": user_id,
                "permission_name": name,
                "granted": True
            }, on_conflict="user_id,permission_name").execute()
            granted += 1
        except Exception as e:
            logger.error(f"Error granting {name} to {user_id}: {e}")
    logger.info(f"Granted {granted}/{len(PERMISSION_CATALOG)} permissions to {user_id}")
    return granted


def main():
    parser = argparse.ArgumentParser(description="Make a user an approved administrator")
    parser.add_argument("user_id")
    parser.add_argument("email")
    args = parser.parse_args()

    supabase = get_service_supabase()
    ensure_admin_role(supabase, args.user_id, args.email)
    grant_all_permissions(supabase, args.user_id)


if __name__ == "__main__":
    main()
