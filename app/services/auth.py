"""
User authentication service - registration, login and bearer tokens.

Passwords are hashed with Argon2id; tokens are HS256 JWTs whose sub
claim is the user id.
"""

from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from app.config import settings
from app.db.models import User, utc_now
from app.exceptions import AuthenticationError, UserAlreadyExistsError
from app.models.domain import AuthResult
from app.services.credits import CreditService, profile_from_user

logger = get_logger(__name__)


class UserAuthService:
    """User registration, login and token verification."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.password_hasher = PasswordHasher()

    async def register(self, name: str, email: str, password: str) -> AuthResult:
        """
        Create a user with a full daily credit balance.

        Raises:
            UserAlreadyExistsError: Email already registered
        """
        if await self.get_user_by_email(email) is not None:
            raise UserAlreadyExistsError(email)

        user = User(
            id=uuid4(),
            name=name,
            email=email,
            password_hash=self.password_hasher.hash(password),
            ai_credits=settings.daily_credit_limit,
            last_credit_reset=utc_now(),
        )
        self.session.add(user)

        try:
            await self.session.flush()
            await self.session.commit()
        except IntegrityError as e:
            # Race condition - same email registered by another request
            logger.warning("user_registration_integrity_error", email=email, error=str(e))
            await self.session.rollback()
            raise UserAlreadyExistsError(email) from e

        logger.info("user_registered", user_id=str(user.id))
        return AuthResult(profile=profile_from_user(user), token=self.create_token(user.id))

    async def login(self, email: str, password: str) -> AuthResult:
        """
        Verify credentials, resolve today's credits and issue a token.

        Raises:
            AuthenticationError: Unknown email or wrong password
        """
        user = await self.get_user_by_email(email)
        if user is None:
            logger.warning("login_unknown_email")
            raise AuthenticationError("Invalid email or password")

        try:
            self.password_hasher.verify(user.password_hash, password)
        except (VerifyMismatchError, InvalidHashError) as e:
            logger.warning("login_bad_password", user_id=str(user.id))
            raise AuthenticationError("Invalid email or password") from e

        user = await CreditService(self.session).check_and_reset_daily(user)

        logger.info("user_logged_in", user_id=str(user.id))
        return AuthResult(profile=profile_from_user(user), token=self.create_token(user.id))

    def create_token(self, user_id: UUID) -> str:
        """Issue a signed bearer token for the user."""
        now = datetime.now(UTC)
        payload = {
            "sub": str(user_id),
            "iat": now,
            "exp": now + timedelta(hours=settings.jwt_expire_hours),
        }
        return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)

    def verify_token(self, token: str) -> UUID:
        """
        Validate a bearer token and return the user id it carries.

        Raises:
            AuthenticationError: Expired, tampered or malformed token
        """
        try:
            payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        except jwt.ExpiredSignatureError as e:
            logger.warning("jwt_token_expired")
            raise AuthenticationError("Token expired") from e
        except jwt.InvalidTokenError as e:
            logger.warning("jwt_token_invalid", error=str(e))
            raise AuthenticationError("Invalid token") from e

        try:
            return UUID(str(payload["sub"]))
        except (ValueError, KeyError) as e:
            raise AuthenticationError("Invalid token payload") from e

    async def get_user(self, user_id: UUID) -> User | None:
        """Get user by ID."""
        return await self.session.get(User, user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        """Get user by (lowercased) email."""
        stmt = select(User).where(User.email == email.lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
