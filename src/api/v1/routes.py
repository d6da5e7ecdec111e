"""
API v1 routes.

Defines REST endpoints for OTP verification and credential reset:
- POST /v1/auth/otp/send - Issue a one-time code
- POST /v1/auth/otp/verify - Submit a one-time code
- POST /v1/auth/password/reset - Set a new password after verification
- POST /v1/auth/signin - Exchange email and password for a session token
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from src.api.dependencies import get_sign_in_service, get_verification_workflow
from src.api.models import (
    ChallengeResponse,
    ErrorResponse,
    IssueChallengeRequest,
    ResetCredentialRequest,
    ResetCredentialResponse,
    SignInRequest,
    SignInResponse,
    VerifyChallengeRequest,
)
from src.domain.authentication import SignInService
from src.domain.exceptions import ConfigurationError
from src.domain.models import Purpose
from src.domain.ports import IssueOutcome, ResetOutcome, VerifyOutcome
from src.domain.verification import VerificationWorkflow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["v1"])

RESET_REQUESTED_MESSAGE = "If an account exists with this email, a reset code has been sent."
_INVALID_PURPOSE_MESSAGE = 'Purpose must be "signup" or "credential_reset"'

_ISSUE_ERRORS: dict[IssueOutcome, tuple[int, str]] = {
    IssueOutcome.MISSING_IDENTITY: (status.HTTP_400_BAD_REQUEST, "Email is required"),
    IssueOutcome.INVALID_IDENTITY: (status.HTTP_400_BAD_REQUEST, "Invalid email format"),
    IssueOutcome.INVALID_PURPOSE: (status.HTTP_400_BAD_REQUEST, _INVALID_PURPOSE_MESSAGE),
}

_VERIFY_ERRORS: dict[VerifyOutcome, tuple[int, str]] = {
    VerifyOutcome.MISSING_PARAMETERS: (status.HTTP_400_BAD_REQUEST, "Email and code are required"),
    VerifyOutcome.INVALID_CODE_FORMAT: (status.HTTP_400_BAD_REQUEST, "Code must be exactly 6 digits"),
    VerifyOutcome.INVALID_PURPOSE: (status.HTTP_400_BAD_REQUEST, _INVALID_PURPOSE_MESSAGE),
    VerifyOutcome.NOT_FOUND: (status.HTTP_400_BAD_REQUEST, "Code not found or expired"),
    VerifyOutcome.EXPIRED: (status.HTTP_400_BAD_REQUEST, "Code has expired"),
    VerifyOutcome.TOO_MANY_ATTEMPTS: (
        status.HTTP_429_TOO_MANY_REQUESTS,
        "Too many attempts. Please request a new code",
    ),
    VerifyOutcome.MISMATCH: (status.HTTP_400_BAD_REQUEST, "Invalid code"),
}

_RESET_ERRORS: dict[ResetOutcome, tuple[int, str]] = {
    ResetOutcome.MISSING_PARAMETERS: (
        status.HTTP_400_BAD_REQUEST,
        "Email and new password are required",
    ),
    ResetOutcome.INVALID_CREDENTIAL: (
        status.HTTP_400_BAD_REQUEST,
        "Password must be at least 6 characters and at most 72 bytes long",
    ),
    ResetOutcome.NOT_VERIFIED: (
        status.HTTP_400_BAD_REQUEST,
        "Please verify your code before resetting the password",
    ),
    ResetOutcome.VERIFICATION_EXPIRED: (
        status.HTTP_400_BAD_REQUEST,
        "Verification has expired. Please request a new code",
    ),
    ResetOutcome.ACCOUNT_NOT_FOUND: (status.HTTP_404_NOT_FOUND, "Account not found"),
}


def _error(status_code: int, error: str, detail: str) -> JSONResponse:
    body = ErrorResponse(error=error, detail=detail)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _success_message(purpose: Purpose, verb: str) -> str:
    if purpose is Purpose.CREDENTIAL_RESET:
        return f"Code {verb} for password reset"
    return f"Code {verb} for email verification"


@router.post(
    "/otp/send",
    response_model=ChallengeResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid email or purpose"}},
    summary="Issue a one-time code",
    description="Generate a 6-digit code for the email address and deliver it in the "
    "background. For credential_reset the response is identical whether or not "
    "an account exists.",
)
async def issue_challenge(
    request_data: IssueChallengeRequest,
    workflow: VerificationWorkflow = Depends(get_verification_workflow),
) -> ChallengeResponse | JSONResponse:
    """
    Issue a one-time code.

    - **identity**: Email address
    - **purpose**: "signup" or "credential_reset"
    """
    result = workflow.issue_challenge(request_data.identity, request_data.purpose)

    if result.outcome is not IssueOutcome.SUCCESS:
        status_code, detail = _ISSUE_ERRORS[result.outcome]
        return _error(status_code, result.outcome.name, detail)

    if result.purpose is Purpose.CREDENTIAL_RESET:
        message = RESET_REQUESTED_MESSAGE
    else:
        message = _success_message(result.purpose, "sent")
    return ChallengeResponse(
        message=message, identity=result.identity, purpose=result.purpose.value
    )


@router.post(
    "/otp/verify",
    response_model=ChallengeResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid, expired or unknown code"},
        429: {"model": ErrorResponse, "description": "Too many attempts"},
    },
    summary="Verify a one-time code",
    description="Submit the 6-digit code. A verified credential_reset code allows one "
    "password reset within the authorization window.",
)
async def verify_challenge(
    request_data: VerifyChallengeRequest,
    workflow: VerificationWorkflow = Depends(get_verification_workflow),
) -> ChallengeResponse | JSONResponse:
    """
    Verify a one-time code.

    - **identity**: Email address the code was sent to
    - **code**: 6-digit code
    - **purpose**: "signup" or "credential_reset"
    """
    result = workflow.verify_challenge(
        request_data.identity, request_data.code, request_data.purpose
    )

    if result.outcome is not VerifyOutcome.SUCCESS:
        status_code, detail = _VERIFY_ERRORS[result.outcome]
        return _error(status_code, result.outcome.name, detail)

    return ChallengeResponse(
        message=_success_message(result.purpose, "verified"),
        identity=result.identity,
        purpose=result.purpose.value,
    )


@router.post(
    "/password/reset",
    response_model=ResetCredentialResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing input or not verified"},
        404: {"model": ErrorResponse, "description": "Account not found"},
    },
    summary="Reset password after verification",
)
async def reset_credential(
    request_data: ResetCredentialRequest,
    workflow: VerificationWorkflow = Depends(get_verification_workflow),
) -> ResetCredentialResponse | JSONResponse:
    """
    Set a new password.

    Requires a successful credential_reset verification within the
    authorization window. Each verification allows one reset.
    """
    outcome = workflow.reset_credential(request_data.identity, request_data.new_credential)

    if outcome is not ResetOutcome.SUCCESS:
        status_code, detail = _RESET_ERRORS[outcome]
        return _error(status_code, outcome.name, detail)

    return ResetCredentialResponse(message="Password reset successfully")


@router.post(
    "/signin",
    response_model=SignInResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        500: {"model": ErrorResponse, "description": "Server misconfigured"},
    },
    summary="Sign in with email and password",
)
async def sign_in(
    request_data: SignInRequest,
    service: SignInService = Depends(get_sign_in_service),
) -> SignInResponse | JSONResponse:
    """Exchange email and password for a signed session token."""
    try:
        token = service.sign_in(request_data.email, request_data.password)
    except ConfigurationError:
        logger.exception("Sign-in failed: server configuration error")
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "SERVER_MISCONFIGURED",
            "Server configuration error",
        )

    if token is None:
        # Same response for unknown email and wrong password
        return _error(status.HTTP_401_UNAUTHORIZED, "INVALID_CREDENTIALS", "Invalid credentials")

    return SignInResponse(token=token)
