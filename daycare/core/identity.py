# daycare/core/identity.py
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from daycare.core.exceptions import UnauthenticatedError
from daycare.core.logging import logger
from daycare.core.security import verify_token
from daycare.schemas.enums import UserRole


@dataclass(frozen=True)
class Actor:
    """The authenticated caller every policy decision is made for.

    ``child_ids`` is a snapshot of the children a parent owns at the time
    the request was authenticated.
    """
    id: int
    role: UserRole
    is_active: bool = True
    child_ids: FrozenSet[int] = field(default_factory=frozenset)

    @classmethod
    def from_user(cls, user) -> "Actor":
        return cls(
            id=user.id,
            role=UserRole(user.role),
            is_active=bool(user.is_active),
            child_ids=frozenset(user.child_ids or ()),
        )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


async def resolve_actor(db: AsyncSession, token: Optional[str]) -> Optional[Actor]:
    """
    Turn a bearer token into an Actor.
    Returns None when there is no token, the token is invalid or the
    user no longer exists; the policy engine denies such calls.
    """
    from daycare.models.user import User

    if not token:
        return None

    try:
        payload = verify_token(token)
    except UnauthenticatedError as e:
        logger.warning(f"Rejected bearer token: {e.message}")
        return None

    user = await db.get(User, int(payload["sub"]))
    if user is None:
        logger.warning(f"Token subject {payload['sub']} does not resolve to a user")
        return None

    return Actor.from_user(user)
