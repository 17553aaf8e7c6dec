from daycare.core.identity import Actor
from daycare.core.security import create_access_token
from daycare.models import User


def as_actor(user: User) -> Actor:
    """Snapshot the user as the caller; rebuild after linking children to a parent"""
    return Actor.from_user(user)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}
