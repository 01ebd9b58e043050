"""
Sync Permissions Script
Reconciles every user's permission ledger with their role.
Can be run manually or as part of a nightly job:

    python -m prompt_access.scripts.sync_permissions [--remove-extra] [--initialize-missing]
"""

import argparse
import sys
import logging

from prompt_access.config import settings
from prompt_access.database.supabase_client import get_service_supabase
from prompt_access.modules.permissions.ledger import PermissionLedger
from prompt_access.modules.permissions.resolver import PermissionResolver
from prompt_access.modules.permissions.schemas import AuthorizedActor
from prompt_access.modules.permissions.service import PermissionService
from prompt_access.modules.permissions.sync import PermissionSyncService
from prompt_access.modules.users.service import UserService

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

SYSTEM_ACTOR = AuthorizedActor(actor_id="system:permission-sync", authorized=True)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Reconcile user permissions with their roles")
    parser.add_argument(
        "--remove-extra",
        action=argparse.BooleanOptionalAction,
        default=settings.sync_remove_extra_default,
        help="Revoke permissions beyond the role baseline (--no-remove-extra for an additive run)",
    )
    parser.add_argument(
        "--initialize-missing",
        action="store_true",
        help="Seed the ledger of users that have no permission rows yet",
    )
    parser.add_argument("--workers", type=int, default=settings.sync_max_workers)
    return parser.parse_args(argv)


def initialize_missing(permission_service: PermissionService, users: UserService) -> int:
    """Run the initialization gate for every user"""
    initialized = 0
    for user in users.list_all_users():
        try:
            if permission_service.ensure_user_initialized(user.id) is not None:
                initialized += 1
        except Exception as e:
            logger.error(f"Error initializing permissions for user {user.id}: {e}")
    logger.info(f"Initialized permissions for {initialized} users")
    return initialized


def main(argv=None) -> int:
    """Main function to sync permissions"""
    args = parse_args(argv)
    try:
        supabase = get_service_supabase()
        users = UserService(supabase)
        ledger = PermissionLedger(supabase)
        resolver = PermissionResolver(users, ledger)

        if args.initialize_missing:
            initialize_missing(PermissionService(users, ledger, resolver), users)

        logger.info(f"Starting permission sync (remove_extra={args.remove_extra})...")
        sync_service = PermissionSyncService(users, ledger, resolver, max_workers=args.workers)
        batch = sync_service.sync_all_users(SYSTEM_ACTOR, remove_extra=args.remove_extra)

        for outcome in batch.results:
            if not outcome.success:
                logger.warning(f"User {outcome.user_id} ({outcome.email}) failed: {outcome.error}")
        logger.info(f"{batch.message}: {batch.succeeded} succeeded, {batch.failed} failed")
        return 1 if batch.failed else 0
    except Exception as e:
        logger.error(f"Error during permission sync: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
