"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Verification request fields are optional: presence and format
checks belong to the domain, which reports them as outcome codes.
Legacy field names (email, type, otp, newPassword) are accepted as aliases.
"""

from pydantic import AliasChoices, BaseModel, EmailStr, Field


class IssueChallengeRequest(BaseModel):
    """Request model for issuing a one-time code."""

    identity: str | None = Field(
        None,
        validation_alias=AliasChoices("identity", "email"),
        description="Email address to verify",
    )
    purpose: str | None = Field(
        "signup",
        validation_alias=AliasChoices("purpose", "type"),
        description='"signup" or "credential_reset"; omitted means signup',
    )


class VerifyChallengeRequest(BaseModel):
    """Request model for submitting a one-time code."""

    identity: str | None = Field(None, validation_alias=AliasChoices("identity", "email"))
    code: str | None = Field(
        None,
        validation_alias=AliasChoices("code", "otp"),
        description="6-digit code received by email",
    )
    purpose: str | None = Field("signup", validation_alias=AliasChoices("purpose", "type"))


class ChallengeResponse(BaseModel):
    """Response model for successful issuance and verification."""

    success: bool = True
    message: str
    identity: str
    purpose: str


class ResetCredentialRequest(BaseModel):
    """Request model for setting a new password after verification."""

    identity: str | None = Field(None, validation_alias=AliasChoices("identity", "email"))
    new_credential: str | None = Field(
        None,
        validation_alias=AliasChoices("new_credential", "newPassword"),
        description="New password (min 6 characters)",
    )


class ResetCredentialResponse(BaseModel):
    """Response model for a successful password reset."""

    success: bool = True
    message: str


class SignInRequest(BaseModel):
    """Request model for password sign-in."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class SignInResponse(BaseModel):
    """Response model for successful sign-in."""

    success: bool = True
    token: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    success: bool = False
    error: str
    detail: str
