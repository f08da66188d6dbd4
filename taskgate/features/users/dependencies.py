"""
FastAPI dependencies for authentication.
"""
from typing import Annotated
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from taskgate.core import config
from taskgate.core.database.engine import get_db
from taskgate.core.errors import Unauthenticated
from taskgate.features.permissions.identity import Actor
from taskgate.features.users.auth import verify_access_token
from taskgate.features.users.service import AuthService


security = HTTPBearer(auto_error=False)


async def get_current_actor(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> Actor:
    """
    Resolve the authenticated identity from the bearer token.

    The token subject is re-read from storage so role and organization are
    always current.

    Usage:
        @router.get("/me")
        async def get_me(actor: Actor = Depends(get_current_actor)):
            return actor
    """
    if credentials is None:
        raise Unauthenticated("Authentication required")

    payload = verify_access_token(credentials.credentials)
    user_id = payload.get("sub")
    if not user_id:
        raise Unauthenticated("Invalid token payload")

    user = await AuthService(db).get_by_id(user_id)
    if user is None:
        raise Unauthenticated("User no longer exists")

    return Actor.from_user(user)


# Login and signup are unauthenticated, so limits are keyed on the client address
limiter = Limiter(key_func=get_remote_address, enabled=config.RATE_LIMIT_ENABLED)
