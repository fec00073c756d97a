"""Auth router for the IDCS SSO login endpoints.

Endpoints:
    POST /auth/oci/initiate  - Submit username/password, returns the AuthOutcome
    POST /auth/oci/complete  - Finish the login for a requestState, returns the profile
    GET  /auth/oci/status    - Whether IDCS service credentials are configured

A non-success protocol outcome (mfa_required, failure) from /initiate is a
normal 200 response. Flow errors become HTTP errors whose ``detail`` is the
plain error message.
"""
import logging
from typing import Any, Callable, Dict, TypeVar

from fastapi import APIRouter, HTTPException

from oci_auth.config import get_config

from .errors import AuthFlowError
from .schemas import CompleteAuthRequest, InitiateAuthRequest
from .service import OCIAuthService, build_auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth/oci", tags=["auth"])

T = TypeVar("T")


def _service() -> OCIAuthService:
    return build_auth_service(get_config())


def _run_flow(flow: Callable[[], T], label: str) -> T:
    """Run one login call, turning flow errors into HTTP errors.

    Args:
        flow: Zero-argument callable performing the login call.
        label: Label for logging (e.g., "initiate", "complete").
    """
    try:
        return flow()
    except AuthFlowError as e:
        logger.error("IDCS %s failed (%s)", label, e.error_code)
        raise HTTPException(status_code=e.http_status, detail=str(e))


@router.post("/initiate")
def initiate_auth(request: InitiateAuthRequest) -> Dict[str, Any]:
    """Start an IDCS login with the user's credentials.

    Returns the provider's AuthOutcome with IDCS field names. The caller
    inspects ``status`` and passes ``requestState`` to /complete.
    """
    outcome = _run_flow(
        lambda: _service().begin_login(
            request.username,
            request.password.get_secret_value(),
        ),
        "initiate",
    )
    return outcome.to_wire()


@router.post("/complete")
def complete_auth(request: CompleteAuthRequest) -> Dict[str, Any]:
    """Finish an IDCS login and return the user's profile document."""
    return _run_flow(
        lambda: _service().finish_login(request.request_state),
        "complete",
    )


@router.get("/status")
def auth_status() -> dict:
    """Report whether the IDCS service credentials are present (never their values)."""
    config = get_config()
    return {
        "configured": config.has_service_credentials(),
        "base_url": config.identity.base_url,
    }
