"""OCI Auth Backend Application.

Serves the IDCS login flow to the desktop front end, which calls
/auth/oci/initiate and then /auth/oci/complete.

Modules:
    - auth: IDCS custom SSO login (client, orchestrator, router)
    - config: YAML settings + secrets
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from oci_auth.auth.router import router as auth_router
from oci_auth.config import get_config
from oci_auth.logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown events."""
    # Startup
    config = get_config()
    configure_logging(config.logging)

    if config.has_service_credentials():
        logger.info("IDCS service credentials configured for %s", config.identity.base_url)
    else:
        logger.warning(
            "IDCS service credentials missing; set OCI_CLIENT_ID and OCI_CLIENT_SECRET. "
            "Login requests will fail until they are configured."
        )

    yield  # Application runs here

    # Shutdown
    logger.info("Application shutdown complete")


app = FastAPI(
    title="OCI Auth API",
    description="Oracle IDCS custom SSO login backend",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(auth_router)


@app.get("/health")
async def health() -> dict:
    """Health check endpoint.

    Returns:
        dict: Status object indicating the server is running.
    """
    return {"status": "ok"}
