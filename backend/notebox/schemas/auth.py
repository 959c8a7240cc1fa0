"""
Notebox Backend — Authentication Schemas
==========================================

What:  Request/response bodies for /api/register and /api/login.
How:   Only the JSON shape is enforced here; trimming and length rules live in
       AuthService so the same rules apply to any caller.
"""

from pydantic import BaseModel, Field


class CredentialsRequest(BaseModel):
    """Body of POST /api/register and POST /api/login."""
    username: str = Field(description="Login name (3+ characters after trimming)")
    password: str = Field(description="Plain-text password (6+ characters after trimming)")


class RegisterResponse(BaseModel):
    """Returned with HTTP 201 after a successful registration. Never carries the hash."""
    id: int = Field(description="New user id")
    username: str = Field(description="Stored (trimmed) username")

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    """
    What:  Session token plus the identity it was issued for.
    How:   Clients send the token back as `Authorization: Bearer <token>`.
    """
    token: str = Field(description="Signed session token, valid for 24 hours by default")
    user_id: int = Field(description="Authenticated user id")
    username: str = Field(description="Authenticated username")
