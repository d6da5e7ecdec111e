"""
FastAPI dependencies - Dependency injection factories.

Domain services are built once during app lifespan startup and stored in
app.state; the workflow owns the store locks, so it must be a singleton.
"""

from fastapi import Request

from src.domain.authentication import SignInService
from src.domain.verification import VerificationWorkflow


def get_verification_workflow(request: Request) -> VerificationWorkflow:
    """Get the verification workflow from app state."""
    return request.app.state.workflow


def get_sign_in_service(request: Request) -> SignInService:
    """Get the sign-in service from app state."""
    return request.app.state.sign_in_service
