"""
Notebox Backend — Session Token Service
=========================================

What:  Issues and verifies signed, time-limited session tokens (JWT).
How:   python-jose HMAC signing with the secret from Settings. The payload
       carries the user id claim plus `iat` and `exp`; verification checks
       signature, algorithm, expiry and the shape of the user id claim.
Who:   AuthService login route (issue) and the authorization gate (verify).

Token payload:
    {"user_id": 42, "iat": 1700000000, "exp": 1700086400}

There is no refresh and no revocation list: `exp` is the only lifetime bound.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from notebox.config import Settings
from notebox.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionClaim:
    """Identity asserted by a verified token. Never persisted."""
    user_id: int
    expires_at: datetime


class TokenService:
    """
    Signs and verifies session tokens with one shared secret.

    Built once per application by create_app() and stored on app.state.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expire_hours: int = 24):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self.algorithm = algorithm
        self.lifetime = timedelta(hours=expire_hours)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expire_hours=settings.jwt_expire_hours,
        )

    def issue(self, user_id: int, now: Optional[datetime] = None) -> str:
        """
        Create a token for `user_id` expiring `lifetime` after `now`.

        Args:
            user_id: Authenticated user's id
            now: Issue instant (defaults to current UTC time)

        Returns:
            Compact JWS string
        """
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "user_id": user_id,
            "iat": issued_at,
            "exp": issued_at + self.lifetime,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> SessionClaim:
        """
        Validate a token and return its claim.

        Raises:
            UnauthorizedError: bad signature, unexpected algorithm, expired
                token, missing `exp`, or a missing/non-integer user id claim
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require_exp": True},
            )
        except ExpiredSignatureError:
            raise UnauthorizedError(message="Token has expired")
        except JWTError as e:
            logger.debug("Token rejected: %s", str(e))
            raise UnauthorizedError(message="Invalid token")

        user_id = payload.get("user_id")
        # bool is a subclass of int; reject it explicitly
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise UnauthorizedError(message="Invalid token")

        return SessionClaim(
            user_id=user_id,
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
