"""
Notebox Backend — Authentication Route Handlers
=================================================

What:  POST /api/register and POST /api/login.
How:   Delegates credential rules to AuthService and token signing to the
       application's TokenService. Neither route requires a token.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from notebox.database import get_db_session
from notebox.dependencies import get_token_service
from notebox.schemas.auth import CredentialsRequest, LoginResponse, RegisterResponse
from notebox.schemas.note import ErrorResponse
from notebox.services.auth_service import auth_service
from notebox.services.token_service import TokenService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Authentication"])


@router.post(
    "/register",
    status_code=201,
    response_model=RegisterResponse,
    responses={
        400: {"description": "Username or password too short", "model": ErrorResponse},
        409: {"description": "Username already exists", "model": ErrorResponse},
        429: {"description": "Rate limit exceeded", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create an account",
)
async def register(
    payload: CredentialsRequest,
    db: AsyncSession = Depends(get_db_session),
) -> RegisterResponse:
    """
    Register a new user.

    Username and password are trimmed; the username needs 3+ characters and
    the password 6+. The password is stored only as a salted hash.
    """
    user = await auth_service.register(db, payload.username, payload.password)
    return RegisterResponse(id=user.id, username=user.username)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Malformed request body", "model": ErrorResponse},
        401: {"description": "Invalid username or password", "model": ErrorResponse},
        429: {"description": "Rate limit exceeded", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Exchange credentials for a session token",
)
async def login(
    payload: CredentialsRequest,
    db: AsyncSession = Depends(get_db_session),
    token_service: TokenService = Depends(get_token_service),
) -> LoginResponse:
    """
    Authenticate and issue a session token.

    The token is sent back on protected routes as
    `Authorization: Bearer <token>` and expires after 24 hours by default.
    """
    user = await auth_service.authenticate(db, payload.username, payload.password)
    token = token_service.issue(user.id)
    logger.info("User %s logged in", user.id)
    return LoginResponse(token=token, user_id=user.id, username=user.username)
