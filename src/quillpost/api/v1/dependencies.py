"""Shared API dependencies for authentication and common functionality."""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from quillpost.core.security import decode_access_token
from quillpost.core.settings import settings
from quillpost.db.session import get_db
from quillpost.models import User
from quillpost.services.pagination import PageWindow

logger = logging.getLogger(__name__)

# Missing credentials are handled here so the status code is always 401.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
CredentialsDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _resolve_user(token: str, db: Session) -> User:
    """Resolve a bearer token into an active user.

    Raises:
        HTTPException: If the token is invalid or the account is unusable.
    """
    try:
        payload = decode_access_token(token)
    except JWTError as err:
        raise _unauthorized("Could not validate credentials") from err

    subject = payload.get("sub")
    if not isinstance(subject, str):
        raise _unauthorized("Could not validate credentials")

    user = db.get(User, subject)
    if user is None:
        raise _unauthorized("User not found")
    if not user.is_active:
        raise _unauthorized("Account is deactivated")
    return user


def get_current_user(credentials: CredentialsDep, db: SessionDep) -> User:
    """Get the current authenticated user from the JWT bearer token.

    Args:
        credentials: HTTP Bearer token credentials, if any were sent
        db: Database session

    Returns:
        User object for the authenticated user

    Raises:
        HTTPException: If no token was sent, the token is invalid or the user
            does not exist
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")
    return _resolve_user(credentials.credentials, db)


def get_optional_user(credentials: CredentialsDep, db: SessionDep) -> User | None:
    """Like ``get_current_user`` but anonymous requests resolve to None.

    A token that is present but invalid is still rejected.
    """
    if credentials is None:
        return None
    return _resolve_user(credentials.credentials, db)


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]


def require_admin(current_user: CurrentUserDep) -> User:
    """Reject callers that do not hold the admin role."""
    if not current_user.is_admin:
        logger.debug("Admin access denied for user %s", current_user.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Admin role required.",
        )
    return current_user


AdminUserDep = Annotated[User, Depends(require_admin)]


def get_page_window(
    page: int = Query(1, ge=1, description="1-based page number"),
    limit: int = Query(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Number of items per page",
    ),
) -> PageWindow:
    """Translate page/limit query parameters into an offset window."""
    return PageWindow(page=page, limit=limit)


PageDep = Annotated[PageWindow, Depends(get_page_window)]
