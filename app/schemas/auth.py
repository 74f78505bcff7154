"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str = Field(..., min_length=3, max_length=255, description="Account email")
    password: str = Field(..., min_length=8, max_length=128, description="Password")


class TokenResponse(BaseModel):
    """JWT access token returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")


class CurrentActor(BaseModel):
    """Authenticated account (id, email, role) for dependency injection."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    role: str
