"""
FastAPI Dependencies - Bearer token authentication.

All dependencies return typed objects.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from app.db.models import User
from app.db.session import get_db
from app.exceptions import AuthenticationError
from app.services.auth import UserAuthService

logger = get_logger(__name__)

# Bearer token scheme for JWT auth
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    FastAPI dependency to resolve the caller from an Authorization header.

    Accepts: Authorization: Bearer {token}

    Usage:
        @router.get("/api/auth/me")
        async def me(user: User = Depends(get_current_user)):
            ...

    Raises:
        HTTPException 401 if no token, an invalid token, or an unknown user
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    service = UserAuthService(db)
    try:
        user_id = service.verify_token(credentials.credentials)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc

    user = await service.get_user(user_id)
    if user is None:
        logger.warning("token_user_not_found", user_id=str(user_id))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user
