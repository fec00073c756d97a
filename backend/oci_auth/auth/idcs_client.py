"""Oracle IDCS protocol client.

One method per round trip of the IDCS custom SSO login:

1. ``get_client_credentials_token``: POST /oauth2/v1/token (client_credentials)
2. ``initialize_authentication``   : GET  /sso/v1/sdk/authenticate
3. ``submit_credentials``          : POST /sso/v1/sdk/authenticate (credSubmit)
4. ``complete_authentication``     : POST /sso/v1/sdk/authenticate (requestState only)
5. ``exchange_assertion``          : POST /oauth2/v1/token (jwt-bearer)
6. ``get_user_profile``            : GET  /admin/v1/Me

The client never retries. Any transport failure, non-2xx status or
undecodable body raises an ``AuthFlowError`` subclass. Request and response
bodies are only logged after redaction.
"""
import json
import logging
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .errors import DecodeError, InvariantViolation, ProtocolError, TransportError
from .redaction import redact, redact_authorization, redact_text
from .schemas import AuthOutcome, AuthSession, ServiceToken, UserProfile

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

TOKEN_PATH = "/oauth2/v1/token"
AUTHENTICATE_PATH = "/sso/v1/sdk/authenticate"
PROFILE_PATH = "/admin/v1/Me"

DEFAULT_SCOPE = "urn:opc:idm:__myscopes__"
CLIENT_CREDENTIALS_GRANT = "client_credentials"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
CRED_SUBMIT_OP = "credSubmit"

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"


class IdcsClient:
    """Performs the individual IDCS SSO round trips over a caller-owned client.

    Args:
        http: An ``httpx.Client`` whose ``base_url`` is the IDCS instance.
            The caller owns its lifetime.
        scope: OAuth2 scope requested by both token grants.
    """

    def __init__(self, http: httpx.Client, scope: str = DEFAULT_SCOPE):
        self._http = http
        self.scope = scope

    # -----------------------------------------------------------------------
    # Protocol steps
    # -----------------------------------------------------------------------

    def get_client_credentials_token(self, basic_auth: str) -> ServiceToken:
        """Obtain a service-level access token (client_credentials grant).

        Args:
            basic_auth: ``Basic <base64(client_id:client_secret)>``.
        """
        text = self._send(
            "POST",
            TOKEN_PATH,
            label="token",
            failure_prefix="Failed to get token",
            headers={"Authorization": basic_auth, "Content-Type": FORM_CONTENT_TYPE},
            data={"grant_type": CLIENT_CREDENTIALS_GRANT, "scope": self.scope},
            log_body=f"grant_type={CLIENT_CREDENTIALS_GRANT}, scope={self.scope}",
        )
        return self._decode(text, ServiceToken, "token response")

    def initialize_authentication(self, bearer: str) -> AuthSession:
        """Open an SSO session and return its request-state handle."""
        text = self._send(
            "GET",
            AUTHENTICATE_PATH,
            label="auth init",
            failure_prefix="Failed to initialize auth",
            headers={"Authorization": bearer, "Content-Type": JSON_CONTENT_TYPE},
        )
        return self._decode(text, AuthSession, "init response")

    def submit_credentials(
        self, bearer: str, request_state: str, username: str, password: str
    ) -> AuthOutcome:
        """Submit username/password against an open SSO session.

        A 2xx response is returned as an ``AuthOutcome`` whatever its
        ``status`` field says; only the HTTP status decides failure here.
        """
        body = {
            "op": CRED_SUBMIT_OP,
            "credentials": {"username": username, "password": password},
            "requestState": request_state,
        }
        text = self._send(
            "POST",
            AUTHENTICATE_PATH,
            label="credential submit",
            failure_prefix="Failed to get response",
            headers={"Authorization": bearer, "Content-Type": JSON_CONTENT_TYPE},
            json_body=body,
            log_body=json.dumps(redact(body)),
        )
        outcome = self._decode(text, AuthOutcome, "response")
        logger.info(
            "Credential submission returned status=%s next_auth_factors=%s",
            outcome.status,
            outcome.next_auth_factors,
        )
        return outcome

    def complete_authentication(self, bearer: str, request_state: str) -> str:
        """Finalize the SSO session and return the signed authnToken.

        Raises:
            ProtocolError: Non-2xx status, or ``status`` other than "success".
            InvariantViolation: The success response carries no authnToken.
        """
        body = {"op": CRED_SUBMIT_OP, "requestState": request_state}
        text = self._send(
            "POST",
            AUTHENTICATE_PATH,
            label="auth complete",
            failure_prefix="Authentication failed",
            headers={"Authorization": bearer, "Content-Type": JSON_CONTENT_TYPE},
            json_body=body,
            log_body=json.dumps(redact(body)),
        )
        data = self._decode_object(text, "response JSON")

        if data.get("status") != "success":
            logger.error("Authentication completion returned status=%r", data.get("status"))
            raise ProtocolError(f"Authentication failed: {text}", body=text)

        authn_token = data.get("authnToken")
        if not isinstance(authn_token, str) or not authn_token:
            logger.error("Authentication completed without an authnToken")
            raise InvariantViolation(
                "Authentication completed with status 'success' but no authnToken was returned"
            )
        return authn_token

    def exchange_assertion(self, basic_auth: str, assertion: str) -> ServiceToken:
        """Trade the authnToken for a user-scoped access token (jwt-bearer grant)."""
        if not assertion:
            raise InvariantViolation("Cannot exchange an empty assertion for a token")
        text = self._send(
            "POST",
            TOKEN_PATH,
            label="token exchange",
            failure_prefix="Failed to get token",
            headers={"Authorization": basic_auth, "Content-Type": FORM_CONTENT_TYPE},
            data={
                "grant_type": JWT_BEARER_GRANT,
                "scope": self.scope,
                "assertion": assertion,
            },
            log_body=f"grant_type={JWT_BEARER_GRANT}, scope={self.scope}, assertion=*****",
        )
        return self._decode(text, ServiceToken, "token response")

    def get_user_profile(self, bearer: str) -> UserProfile:
        """Fetch the signed-in user's profile document.

        The /admin/v1/Me response is a SCIM User resource, so the body must be
        a JSON object; any other JSON value raises ``DecodeError``.
        """
        text = self._send(
            "GET",
            PROFILE_PATH,
            label="user profile",
            failure_prefix="Failed to get user profile",
            headers={"Authorization": bearer},
        )
        return self._decode_object(text, "profile response")

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    def _send(
        self,
        method: str,
        path: str,
        *,
        label: str,
        failure_prefix: str,
        headers: Dict[str, str],
        data: Optional[Dict[str, str]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        log_body: Optional[str] = None,
    ) -> str:
        """Issue one request and return the full response text.

        Raises:
            TransportError: The request could not be completed.
            ProtocolError: The response status is not 2xx.
        """
        url = self._http.base_url.join(path.lstrip("/"))
        logger.info("Making %s request to URL: %s", label, url)
        logger.debug(
            "Request headers: %s",
            {k: redact_authorization(v) if k == "Authorization" else v for k, v in headers.items()},
        )
        if log_body is not None:
            logger.debug("Request body: %s", log_body)

        try:
            response = self._http.request(method, path, headers=headers, data=data, json=json_body)
        except httpx.HTTPError as e:
            logger.error("%s request failed: %s", label, e)
            raise TransportError(f"{failure_prefix}: {e}") from e

        text = response.text
        logger.info("Response status: %s", response.status_code)
        logger.debug("Response body: %s", redact_text(text))

        if not response.is_success:
            logger.error("%s request returned HTTP %s", label, response.status_code)
            raise ProtocolError(
                f"{failure_prefix} (HTTP {response.status_code}): {text}",
                body=text,
                status_code=response.status_code,
            )
        return text

    @staticmethod
    def _decode(text: str, model: Type[ModelT], what: str) -> ModelT:
        try:
            return model.model_validate_json(text)
        except ValidationError as e:
            logger.error("Failed to parse %s into %s", what, model.__name__)
            raise DecodeError(
                f"Failed to parse {what}: {e}. Response text: {text}",
                body=text,
                cause=str(e),
            ) from e

    @staticmethod
    def _decode_object(text: str, what: str) -> Dict[str, Any]:
        try:
            data = json.loads(text)
        except ValueError as e:
            logger.error("Failed to parse %s: not valid JSON", what)
            raise DecodeError(
                f"Failed to parse {what}: {e}. Response text: {text}",
                body=text,
                cause=str(e),
            ) from e
        if not isinstance(data, dict):
            logger.error("Failed to parse %s: expected a JSON object", what)
            raise DecodeError(
                f"Failed to parse {what}: expected a JSON object. Response text: {text}",
                body=text,
                cause="expected a JSON object",
            )
        return data
