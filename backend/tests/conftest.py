"""Shared test fixtures and configuration for backend tests."""
import httpx
import pytest
from fastapi.testclient import TestClient

from oci_auth.auth.schemas import ServiceCredentials
from oci_auth.auth.service import OCIAuthService
from oci_auth.config import set_config
from oci_auth.main import app

from stubs import BASE_URL, IdcsStub


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
    """Keep real credentials and cached config out of every test."""
    monkeypatch.delenv("OCI_CLIENT_ID", raising=False)
    monkeypatch.delenv("OCI_CLIENT_SECRET", raising=False)
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def credentials():
    return ServiceCredentials(client_id="cid", client_secret="csecret")


@pytest.fixture
def idcs_stub():
    return IdcsStub()


@pytest.fixture
def auth_service(credentials, idcs_stub):
    return OCIAuthService(
        credentials,
        base_url=BASE_URL,
        timeout=5.0,
        transport=httpx.MockTransport(idcs_stub),
    )


@pytest.fixture
def api_client():
    """Provide a TestClient for the main FastAPI app."""
    return TestClient(app)
