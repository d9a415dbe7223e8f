"""
API request and response models for SessionGate REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

Request models only check shape (types, presence). Business rules such as the
minimum password length live in auth/signup.py so the CLI gets them too.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import UserRecord

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class CredentialsRequest(BaseModel):
    """Request body for POST /login and POST /token."""

    username: str = Field(max_length=255)
    password: str = Field(max_length=255)


class SessionRequest(BaseModel):
    """Request body for POST /auth.

    sessionID is optional so a missing token reaches the gateway and gets the
    403 "go to login" answer rather than a schema error.
    """

    sessionID: Optional[str] = None  # noqa: N815


class SignupRequest(BaseModel):
    """Request body for POST /signup. Unknown extra fields are ignored."""

    model_config = ConfigDict(extra="ignore")

    username: str
    email: str
    password: str = Field(max_length=255)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class LoginResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    sessionID: str  # noqa: N815


class TokenResponse(BaseModel):
    """Response for POST /token -- bearer credential for GET /whoAmI."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: str = "bearer"
    expires_in: int


class UserResponse(BaseModel):
    """A created user record. Never carries a password or digest."""

    model_config = ConfigDict(frozen=True)

    id: str
    username: str
    email: str
    created_at: str

    @classmethod
    def from_record(cls, user: UserRecord) -> "UserResponse":
        return cls(
            id=user.id or "",
            username=user.username,
            email=user.email,
            created_at=user.created_at or "",
        )


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class ErrorResponse(BaseModel):
    """Fixed error envelope returned on every 4xx/5xx response."""

    model_config = ConfigDict(frozen=True)

    statusCode: int  # noqa: N815
    code: str = "error"
    message: str


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
