"""
Notebox Backend — Request Dependencies & Authorization Gate
=============================================================

What:  FastAPI dependencies giving handlers the per-app token service and
       the authenticated caller.
How:   create_app() stores Settings, Database and TokenService on app.state;
       the accessor below reads the token service back from the current request.

Authorization Gate (two states per request):

    Unauthenticated ──valid bearer token──▶ Authenticated (AuthenticatedUser)
          │
          └──missing header / wrong scheme / bad token──▶ Rejected (401)

    The verified identity is handed to the handler as an explicit
    AuthenticatedUser parameter; nothing is stashed in ambient context.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from notebox.exceptions import UnauthorizedError
from notebox.services.token_service import TokenService

logger = logging.getLogger(__name__)

# auto_error=False: the gate raises UnauthorizedError itself so every
# rejection goes through the same 401 handler.
bearer_scheme = HTTPBearer(auto_error=False, description="Session token from /api/login")


@dataclass(frozen=True)
class AuthenticatedUser:
    """The caller of a protected route, as asserted by a verified token."""
    user_id: int
    token_expires_at: datetime


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    token_service: TokenService = Depends(get_token_service),
) -> AuthenticatedUser:
    """
    Gate for protected routes.

    Raises:
        UnauthorizedError: no Authorization header, a non-Bearer scheme, or
            a token that fails verification
    """
    if credentials is None or not credentials.credentials:
        logger.debug("Rejected request without bearer credentials")
        raise UnauthorizedError(message="Authorization header required")

    claim = token_service.verify(credentials.credentials)
    return AuthenticatedUser(user_id=claim.user_id, token_expires_at=claim.expires_at)
