"""FastAPI authentication dependencies for route protection."""

import logging
from collections.abc import AsyncIterator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from globalstay.auth.jwt import ACCESS, TokenError, subject_from_token
from globalstay.models.user import User
from globalstay.repositories import Repositories

logger = logging.getLogger(__name__)

# Strict bearer: rejects requests without a token
_bearer_scheme = HTTPBearer()


async def get_repositories(request: Request) -> AsyncIterator[Repositories]:
    """Yield repositories bound to one unit of work for the request.

    Commits when the handler returns, rolls back if it raises.
    """
    async with request.app.state.storage.session() as repos:
        yield repos


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
    repos: Repositories = Depends(get_repositories),
) -> User:
    """Resolve the bearer access token to a stored user.

    Raises:
        HTTPException 401: If the token is invalid, expired, wrong type, or the user is gone.
    """
    try:
        user_id = subject_from_token(credentials.credentials, ACCESS)
    except TokenError as exc:
        logger.debug("Rejected bearer token: %s", exc)
        raise _unauthorized(str(exc)) from None

    user = await repos.users.find_by_id(user_id)
    if user is None:
        raise _unauthorized("Could not validate credentials")
    return user


async def get_current_active_user(user: User = Depends(get_current_user)) -> User:
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is inactive")
    return user
