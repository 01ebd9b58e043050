from typing import Optional

from prompt_access.core.exceptions import UnauthorizedError
from prompt_access.modules.permissions.schemas import AuthorizedActor


def require_authorized(actor: Optional[AuthorizedActor], action: str) -> AuthorizedActor:
    """Mutating operations refuse to run without explicit authorization evidence."""
    if actor is None or not actor.authorized:
        raise UnauthorizedError(
            f"Not authorized to {action}",
            details={"actor_id": actor.actor_id if actor is not None else None},
        )
    return actor
