"""Pydantic schemas for the IDCS login flow.

Wire names follow the IDCS SSO SDK (camelCase); Python attributes are
snake_case. Token-like fields are excluded from ``repr`` so they never end
up in log lines or tracebacks by accident.
"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr


AuthStatus = Literal["success", "mfa_required", "failure"]

# Provider-defined document, passed through untouched.
UserProfile = Dict[str, Any]


class ServiceCredentials(BaseModel):
    """Confidential client credentials for the IDCS application."""
    client_id: str = Field(..., min_length=1)
    client_secret: SecretStr


class ServiceToken(BaseModel):
    """OAuth2 token response from ``/oauth2/v1/token``."""
    access_token: str = Field(..., repr=False)
    token_type: str
    expires_in: int

    def bearer_header(self) -> str:
        return f"Bearer {self.access_token}"


class AuthSession(BaseModel):
    """Handle for one in-progress SSO negotiation."""
    model_config = ConfigDict(populate_by_name=True)

    request_state: str = Field(..., alias="requestState", repr=False)


class CauseMessage(BaseModel):
    code: str
    message: str


class AuthOutcome(BaseModel):
    """The provider's decision for one credential submission.

    ``status`` is the protocol-level verdict; a ``failure`` or
    ``mfa_required`` outcome is still a normal return value.
    ``authn_token`` is only present on ``success``.
    """
    model_config = ConfigDict(populate_by_name=True)

    status: AuthStatus
    ec_id: str = Field(default="", alias="ecId")
    display_name: str = Field(default="", alias="displayName")
    next_auth_factors: List[str] = Field(default_factory=list, alias="nextAuthFactors")
    cause: List[CauseMessage] = Field(default_factory=list)
    next_op: List[str] = Field(default_factory=list, alias="nextOp")
    scenario: str = ""
    request_state: str = Field(..., alias="requestState", repr=False)
    authn_token: Optional[str] = Field(default=None, alias="authnToken", repr=False)

    def to_wire(self) -> Dict[str, Any]:
        """Serialise with IDCS field names, omitting an absent authnToken."""
        return self.model_dump(by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Boundary request bodies
# ---------------------------------------------------------------------------


class InitiateAuthRequest(BaseModel):
    """Request body for starting a login."""
    username: str = Field(..., min_length=1)
    password: SecretStr


class CompleteAuthRequest(BaseModel):
    """Request body for finishing a login started with /initiate."""
    model_config = ConfigDict(populate_by_name=True)

    request_state: str = Field(..., alias="requestState", min_length=1)
