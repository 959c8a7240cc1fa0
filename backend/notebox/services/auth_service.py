"""
Notebox Backend — Credential Store Service
============================================

What:  User registration and password authentication.
How:   Trims and validates input, hashes passwords with passlib's bcrypt
       scheme, and persists users through the async session. bcrypt work is
       pushed to Starlette's threadpool so it does not stall the event loop.
Who:   Called by the /api/register and /api/login route handlers.

Error Mapping:
    too-short username/password → ValidationError  (400)
    duplicate username          → ConflictError    (409)
    unknown user / bad password → UnauthorizedError (401, one message for both)
    other database failures     → DatabaseError    (500)
"""

import logging

from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from notebox.exceptions import (
    ConflictError,
    DatabaseError,
    UnauthorizedError,
    ValidationError,
)
from notebox.models.user import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

INVALID_CREDENTIALS = "Invalid username or password"


class AuthService:
    """
    Stateless credential operations over the `users` table.

    Responsibilities:
        - register(): validate, hash, insert
        - authenticate(): look up by username and compare hashes
    """

    MIN_USERNAME_LENGTH = 3
    MIN_PASSWORD_LENGTH = 6

    async def hash_password(self, password: str) -> str:
        return await run_in_threadpool(pwd_context.hash, password)

    async def verify_password(self, password: str, hashed: str) -> bool:
        """Compare a password to a stored hash; an unrecognised hash is a mismatch."""
        try:
            return await run_in_threadpool(pwd_context.verify, password, hashed)
        except ValueError:
            logger.warning("Stored password hash could not be identified")
            return False

    async def register(self, db: AsyncSession, username: str, password: str) -> User:
        """
        Create a new user.

        Args:
            db: Async database session
            username: Requested login name (surrounding whitespace is dropped)
            password: Plain-text password (surrounding whitespace is dropped)

        Returns:
            The persisted User (id assigned)

        Raises:
            ValidationError: username < 3 or password < 6 characters
            ConflictError: username already taken
            DatabaseError: insert failed for any other reason
        """
        username = username.strip()
        password = password.strip()

        if (
            len(username) < self.MIN_USERNAME_LENGTH
            or len(password) < self.MIN_PASSWORD_LENGTH
        ):
            raise ValidationError(
                message=(
                    f"Username must be at least {self.MIN_USERNAME_LENGTH} chars and "
                    f"password {self.MIN_PASSWORD_LENGTH} chars"
                ),
                context={
                    "min_username_length": self.MIN_USERNAME_LENGTH,
                    "min_password_length": self.MIN_PASSWORD_LENGTH,
                },
            )

        hashed = await self.hash_password(password)

        try:
            user = User(username=username, password=hashed)
            db.add(user)
            await db.flush()
            await db.commit()
            logger.info("Registered user %s (id=%s)", username, user.id)
            return user

        except IntegrityError:
            await db.rollback()
            logger.info("Registration rejected: username %r already exists", username)
            raise ConflictError(message="Username already exists")
        except Exception as e:
            logger.error("Database error registering user: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Registration failed",
                context={"error_type": type(e).__name__},
            )

    async def authenticate(self, db: AsyncSession, username: str, password: str) -> User:
        """
        Return the user whose credentials match.

        Raises:
            UnauthorizedError: no such user, or the password does not match
            DatabaseError: lookup failed
        """
        try:
            result = await db.execute(
                select(User).where(User.username == username.strip())
            )
            user = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error during login: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Login failed",
                context={"error_type": type(e).__name__},
            )

        if user is None:
            # Spend comparable time on unknown usernames
            await run_in_threadpool(pwd_context.dummy_verify)
            raise UnauthorizedError(message=INVALID_CREDENTIALS)

        if not await self.verify_password(password.strip(), user.password):
            raise UnauthorizedError(message=INVALID_CREDENTIALS)

        return user


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
