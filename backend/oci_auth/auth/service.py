"""IDCS login orchestrator.

Runs the IDCS custom SSO login as two stateless calls:

``begin_login(username, password)``
    1. client_credentials token
    2. open SSO session
    3. submit credentials -> ``AuthOutcome`` (success, mfa_required or failure)

``finish_login(request_state)``
    1. a fresh client_credentials token
    4. complete the SSO session -> authnToken
    5. jwt-bearer exchange -> user-scoped token
    6. fetch the user profile

The only state carried between the two calls is the ``request_state``
string the caller takes from the ``AuthOutcome``. Each call opens its own
``httpx.Client`` and closes it before returning, so concurrent logins share
nothing.
"""
import base64
import logging
from typing import Optional

import httpx

from oci_auth.config import DEFAULT_BASE_URL, OciAuthConfig

from .errors import InvariantViolation
from .idcs_client import DEFAULT_SCOPE, IdcsClient
from .schemas import AuthOutcome, ServiceCredentials, UserProfile

logger = logging.getLogger(__name__)


def basic_auth_header(credentials: ServiceCredentials) -> str:
    """Build ``Basic <base64(client_id:client_secret)>``."""
    raw = f"{credentials.client_id}:{credentials.client_secret.get_secret_value()}"
    return "Basic " + base64.b64encode(raw.encode("utf-8")).decode("ascii")


class OCIAuthService:
    """Logs users in against one IDCS instance.

    Args:
        credentials: Confidential client credentials of the IDCS application.
        base_url: IDCS instance URL. A request_state is only valid here.
        scope: OAuth2 scope for both token grants.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests inject ``httpx.MockTransport``).
    """

    def __init__(
        self,
        credentials: ServiceCredentials,
        base_url: str = DEFAULT_BASE_URL,
        scope: str = DEFAULT_SCOPE,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url
        self.scope = scope
        self.timeout = timeout
        self._basic_auth = basic_auth_header(credentials)
        self._transport = transport

    def _open_client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )

    def begin_login(self, username: str, password: str) -> AuthOutcome:
        """Start a login and return the provider's verdict.

        A ``mfa_required`` or ``failure`` outcome is returned, not raised;
        the caller decides what to do with it.

        Raises:
            AuthFlowError: Any step failed; later steps were not attempted.
        """
        with self._open_client() as http:
            idcs = IdcsClient(http, scope=self.scope)

            logger.info("Step 1: Getting client credentials token")
            service_token = idcs.get_client_credentials_token(self._basic_auth)
            logger.info("Successfully obtained access token")

            logger.info("Step 2: Initializing authentication")
            session = idcs.initialize_authentication(service_token.bearer_header())
            logger.info("Successfully initialized authentication")

            logger.info("Step 3: Submitting credentials")
            outcome = idcs.submit_credentials(
                service_token.bearer_header(),
                session.request_state,
                username,
                password,
            )

        logger.info("Login started: status=%s", outcome.status)
        return outcome

    def finish_login(self, request_state: str) -> UserProfile:
        """Finish a login started by ``begin_login`` and return the user profile.

        Args:
            request_state: ``AuthOutcome.request_state`` from ``begin_login``,
                passed through unmodified.

        Raises:
            InvariantViolation: ``request_state`` is empty.
            AuthFlowError: Any step failed; later steps were not attempted.
        """
        if not request_state:
            raise InvariantViolation("A request_state from begin_login is required to finish login")

        with self._open_client() as http:
            idcs = IdcsClient(http, scope=self.scope)

            logger.info("Step 1: Getting client credentials token")
            service_token = idcs.get_client_credentials_token(self._basic_auth)
            logger.info("Successfully obtained access token")

            logger.info("Step 4: Completing authentication")
            authn_token = idcs.complete_authentication(service_token.bearer_header(), request_state)

            logger.info("Step 5: Exchanging token for access token")
            user_token = idcs.exchange_assertion(self._basic_auth, authn_token)

            logger.info("Step 6: Getting user profile")
            profile = idcs.get_user_profile(user_token.bearer_header())

        logger.info("Successfully retrieved user profile")
        return profile


def build_auth_service(
    config: OciAuthConfig, transport: Optional[httpx.BaseTransport] = None
) -> OCIAuthService:
    """Create an ``OCIAuthService`` from application config.

    Raises:
        ConfigurationError: Service credentials are not configured. Raised
            before any network activity.
    """
    return OCIAuthService(
        credentials=config.service_credentials(),
        base_url=config.identity.base_url,
        scope=config.identity.scope,
        timeout=config.identity.timeout_seconds,
        transport=transport,
    )
