"""Tests for the IDCS protocol client (one round trip per method)."""
import base64
import logging

import httpx
import pytest

from oci_auth.auth.errors import (
    DecodeError,
    InvariantViolation,
    ProtocolError,
    TransportError,
)
from oci_auth.auth.idcs_client import IdcsClient, JWT_BEARER_GRANT
from oci_auth.auth.service import basic_auth_header

from stubs import BASE_URL, IdcsStub

BASIC = "Basic " + base64.b64encode(b"cid:csecret").decode()
BEARER = "Bearer T1"


@pytest.fixture
def stub():
    return IdcsStub()


@pytest.fixture
def idcs(stub):
    with httpx.Client(base_url=BASE_URL, transport=httpx.MockTransport(stub)) as http:
        yield IdcsClient(http)


class TestBasicAuthHeader:

    def test_encodes_id_and_secret(self, credentials):
        assert basic_auth_header(credentials) == BASIC

    def test_secret_not_in_credentials_repr(self, credentials):
        assert "csecret" not in repr(credentials)


class TestClientCredentialsToken:
    """Tests for IdcsClient.get_client_credentials_token."""

    def test_fields_match_response(self, idcs, stub):
        stub.respond("token", body={"access_token": "abc.def", "token_type": "Bearer", "expires_in": 1200})

        token = idcs.get_client_credentials_token(BASIC)

        assert token.access_token == "abc.def"
        assert token.token_type == "Bearer"
        assert token.expires_in == 1200

    def test_request_shape(self, idcs, stub):
        idcs.get_client_credentials_token(BASIC)

        request = stub.request_for("token")
        assert request.method == "POST"
        assert request.headers["Authorization"] == BASIC
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert stub.form("token") == {
            "grant_type": "client_credentials",
            "scope": "urn:opc:idm:__myscopes__",
        }

    def test_token_not_in_repr(self, idcs, stub):
        token = idcs.get_client_credentials_token(BASIC)
        assert "T1" not in repr(token)

    def test_missing_field_is_decode_error(self, idcs, stub):
        stub.respond("token", body={"token_type": "Bearer", "expires_in": 3600})

        with pytest.raises(DecodeError) as exc_info:
            idcs.get_client_credentials_token(BASIC)
        assert "access_token" in str(exc_info.value)

    def test_transport_error(self, idcs, stub):
        stub.fail("token", httpx.ConnectError("connection refused"))

        with pytest.raises(TransportError, match="connection refused"):
            idcs.get_client_credentials_token(BASIC)

    def test_timeout_is_transport_error(self, idcs, stub):
        stub.fail("token", httpx.ReadTimeout("timed out"))

        with pytest.raises(TransportError, match="timed out"):
            idcs.get_client_credentials_token(BASIC)


class TestInitializeAuthentication:
    """Tests for IdcsClient.initialize_authentication."""

    def test_returns_request_state(self, idcs, stub):
        stub.respond("init", body={"requestState": "opaque-state==", "other": 1})

        session = idcs.initialize_authentication(BEARER)

        assert session.request_state == "opaque-state=="
        request = stub.request_for("init")
        assert request.method == "GET"
        assert request.headers["Authorization"] == BEARER

    def test_missing_request_state_is_decode_error(self, idcs, stub):
        stub.respond("init", body={"status": "ok"})

        with pytest.raises(DecodeError):
            idcs.initialize_authentication(BEARER)


class TestSubmitCredentials:
    """Tests for IdcsClient.submit_credentials."""

    def test_request_body(self, idcs, stub):
        idcs.submit_credentials(BEARER, "RS1", "alice", "pw")

        assert stub.json_body("cred_submit") == {
            "op": "credSubmit",
            "credentials": {"username": "alice", "password": "pw"},
            "requestState": "RS1",
        }
        assert stub.request_for("cred_submit").headers["Authorization"] == BEARER

    def test_success_outcome(self, idcs, stub):
        outcome = idcs.submit_credentials(BEARER, "RS1", "alice", "pw")

        assert outcome.status == "success"
        assert outcome.authn_token == "AT1"
        assert outcome.request_state == "RS1"

    def test_failure_status_is_not_an_error(self, idcs, stub):
        stub.respond("cred_submit", body={
            "status": "failure",
            "ecId": "ec-9",
            "cause": [{"code": "AUTH-3001", "message": "You entered an incorrect user name or password."}],
            "nextOp": ["credSubmit"],
            "requestState": "RS2",
        })

        outcome = idcs.submit_credentials(BEARER, "RS1", "alice", "wrong")

        assert outcome.status == "failure"
        assert outcome.cause[0].code == "AUTH-3001"
        assert outcome.authn_token is None
        assert outcome.request_state == "RS2"

    def test_unknown_status_is_decode_error(self, idcs, stub):
        stub.respond("cred_submit", body={"status": "pending", "requestState": "RS1"})

        with pytest.raises(DecodeError):
            idcs.submit_credentials(BEARER, "RS1", "alice", "pw")

    def test_protocol_error_never_contains_password(self, idcs, stub):
        stub.respond("cred_submit", status=401, text='{"detail":"bad credentials"}')

        with pytest.raises(ProtocolError) as exc_info:
            idcs.submit_credentials(BEARER, "RS1", "alice", "hunter2")
        assert "hunter2" not in str(exc_info.value)
        assert '{"detail":"bad credentials"}' in str(exc_info.value)


class TestCompleteAuthentication:
    """Tests for IdcsClient.complete_authentication."""

    def test_returns_authn_token(self, idcs, stub):
        assert idcs.complete_authentication(BEARER, "RS1") == "AT2"
        assert stub.json_body("complete") == {"op": "credSubmit", "requestState": "RS1"}

    def test_non_success_status_is_protocol_error(self, idcs, stub):
        stub.respond("complete", text='{"status":"failure"}')

        with pytest.raises(ProtocolError) as exc_info:
            idcs.complete_authentication(BEARER, "RS1")
        assert '{"status":"failure"}' in str(exc_info.value)

    def test_missing_authn_token_is_invariant_violation(self, idcs, stub):
        stub.respond("complete", body={"status": "success"})

        with pytest.raises(InvariantViolation):
            idcs.complete_authentication(BEARER, "RS1")

    def test_empty_authn_token_is_invariant_violation(self, idcs, stub):
        stub.respond("complete", body={"status": "success", "authnToken": ""})

        with pytest.raises(InvariantViolation):
            idcs.complete_authentication(BEARER, "RS1")

    def test_json_array_is_decode_error(self, idcs, stub):
        stub.respond("complete", text="[1, 2]")

        with pytest.raises(DecodeError):
            idcs.complete_authentication(BEARER, "RS1")


class TestExchangeAssertion:
    """Tests for IdcsClient.exchange_assertion."""

    def test_jwt_bearer_form(self, idcs, stub):
        token = idcs.exchange_assertion(BASIC, "AT2")

        assert token.access_token == "U1"
        assert stub.request_for("exchange").headers["Authorization"] == BASIC
        assert stub.form("exchange") == {
            "grant_type": JWT_BEARER_GRANT,
            "scope": "urn:opc:idm:__myscopes__",
            "assertion": "AT2",
        }

    def test_empty_assertion_makes_no_request(self, idcs, stub):
        with pytest.raises(InvariantViolation):
            idcs.exchange_assertion(BASIC, "")
        assert stub.calls == []


class TestGetUserProfile:
    """Tests for IdcsClient.get_user_profile."""

    def test_returns_document_untouched(self, idcs, stub):
        stub.respond("profile", body={"userName": "alice", "custom": {"nested": [1, 2]}})

        profile = idcs.get_user_profile("Bearer U1")

        assert profile == {"userName": "alice", "custom": {"nested": [1, 2]}}
        request = stub.request_for("profile")
        assert request.method == "GET"
        assert request.headers["Authorization"] == "Bearer U1"

    def test_unauthorized_is_protocol_error(self, idcs, stub):
        stub.respond("profile", status=401, text="Unauthorized")

        with pytest.raises(ProtocolError) as exc_info:
            idcs.get_user_profile("Bearer U1")
        assert exc_info.value.status_code == 401
        assert exc_info.value.body == "Unauthorized"

    def test_json_array_is_decode_error(self, idcs, stub):
        stub.respond("profile", text='[{"userName": "alice"}]')

        with pytest.raises(DecodeError) as exc_info:
            idcs.get_user_profile("Bearer U1")
        assert "expected a JSON object" in str(exc_info.value)


class TestRequestLogging:
    """Logged URLs match where requests are actually sent."""

    def test_base_url_with_path_prefix(self, stub, caplog):
        base = "https://idcs.example.com/tenant1"
        with httpx.Client(base_url=base, transport=httpx.MockTransport(stub)) as http:
            with caplog.at_level(logging.INFO):
                IdcsClient(http).get_client_credentials_token(BASIC)

        assert stub.request_for("token").url.path == "/tenant1/oauth2/v1/token"
        assert "https://idcs.example.com/tenant1/oauth2/v1/token" in caplog.text
        assert "https://idcs.example.com/oauth2/v1/token" not in caplog.text
