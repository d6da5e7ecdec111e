"""
Integration tests for the complete verification flow.

Runs the real application (lifespan included) with in-memory stores, the
in-memory account directory and the console email provider, so no
database or mail server is needed. Codes are read back from the
challenge store the way an operator would recover them.
"""

import bcrypt
import pytest
from fastapi.testclient import TestClient

from src.api.main import app
from src.config.settings import get_settings
from src.domain.models import Purpose


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch) -> TestClient:
    """Application client configured for in-process backends."""
    monkeypatch.setenv("VERIFICATION_STORE_BACKEND", "memory")
    monkeypatch.setenv("ACCOUNT_DIRECTORY_BACKEND", "memory")
    monkeypatch.setenv("EMAIL_PROVIDER", "console")
    monkeypatch.setenv("JWT_SECRET", "integration-test-secret-with-enough-length")
    monkeypatch.setenv("BCRYPT_COST", "4")
    monkeypatch.delenv("SENDGRID_API_KEY", raising=False)
    get_settings.cache_clear()

    with TestClient(app) as test_client:
        yield test_client

    get_settings.cache_clear()


@pytest.fixture
def workflow(client: TestClient):
    return client.app.state.workflow


@pytest.fixture
def account(workflow):
    password_hash = bcrypt.hashpw(b"original-pass", bcrypt.gensalt(4)).decode()
    return workflow.accounts.add("owner@example.com", password_hash)


def current_code(workflow, identity: str, purpose: Purpose) -> str:
    return workflow.challenges.get(identity, purpose).code


class TestHealth:
    """Tests for GET /health."""

    def test_healthy_without_database(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestSignupVerification:
    """Signup challenge lifecycle."""

    def test_issue_then_verify(self, client: TestClient, workflow) -> None:
        issued = client.post(
            "/v1/auth/otp/send", json={"email": "New.User@Example.com", "type": "signup"}
        )
        assert issued.status_code == 200
        assert issued.json()["identity"] == "new.user@example.com"

        code = current_code(workflow, "new.user@example.com", Purpose.SIGNUP)
        verified = client.post(
            "/v1/auth/otp/verify",
            json={"email": "new.user@example.com", "otp": code, "type": "signup"},
        )

        assert verified.status_code == 200
        assert workflow.challenges.get("new.user@example.com", Purpose.SIGNUP) is None

    def test_code_is_single_use(self, client: TestClient, workflow) -> None:
        client.post("/v1/auth/otp/send", json={"identity": "single@example.com"})
        code = current_code(workflow, "single@example.com", Purpose.SIGNUP)
        body = {"identity": "single@example.com", "code": code}

        assert client.post("/v1/auth/otp/verify", json=body).status_code == 200
        replay = client.post("/v1/auth/otp/verify", json=body)

        assert replay.status_code == 400
        assert replay.json()["error"] == "NOT_FOUND"

    def test_lockout_after_three_wrong_codes(self, client: TestClient, workflow) -> None:
        client.post("/v1/auth/otp/send", json={"identity": "locked@example.com"})
        code = current_code(workflow, "locked@example.com", Purpose.SIGNUP)
        wrong = "000000" if code != "000000" else "111111"
        body = {"identity": "locked@example.com", "code": wrong}

        statuses = [client.post("/v1/auth/otp/verify", json=body).status_code for _ in range(3)]
        after = client.post(
            "/v1/auth/otp/verify", json={"identity": "locked@example.com", "code": code}
        )

        assert statuses == [400, 400, 429]
        assert after.json()["error"] == "NOT_FOUND"


class TestPasswordReset:
    """Full credential reset: request, verify, reset, sign in."""

    def test_full_reset_flow(self, client: TestClient, workflow, account) -> None:
        requested = client.post(
            "/v1/auth/otp/send",
            json={"identity": "owner@example.com", "purpose": "credential_reset"},
        )
        assert requested.status_code == 200

        code = current_code(workflow, "owner@example.com", Purpose.CREDENTIAL_RESET)
        verified = client.post(
            "/v1/auth/otp/verify",
            json={"identity": "owner@example.com", "code": code, "purpose": "credential_reset"},
        )
        assert verified.status_code == 200

        reset = client.post(
            "/v1/auth/password/reset",
            json={"email": "owner@example.com", "newPassword": "brand-new-pass"},
        )
        assert reset.status_code == 200

        old_login = client.post(
            "/v1/auth/signin", json={"email": "owner@example.com", "password": "original-pass"}
        )
        new_login = client.post(
            "/v1/auth/signin", json={"email": "owner@example.com", "password": "brand-new-pass"}
        )
        assert old_login.status_code == 401
        assert new_login.status_code == 200
        assert new_login.json()["token"]

    def test_second_reset_requires_new_verification(
        self, client: TestClient, workflow, account
    ) -> None:
        client.post(
            "/v1/auth/otp/send",
            json={"identity": "owner@example.com", "purpose": "credential_reset"},
        )
        code = current_code(workflow, "owner@example.com", Purpose.CREDENTIAL_RESET)
        client.post(
            "/v1/auth/otp/verify",
            json={"identity": "owner@example.com", "code": code, "purpose": "credential_reset"},
        )
        body = {"identity": "owner@example.com", "new_credential": "brand-new-pass"}

        first = client.post("/v1/auth/password/reset", json=body)
        second = client.post("/v1/auth/password/reset", json=body)

        assert first.status_code == 200
        assert second.status_code == 400
        assert second.json()["error"] == "NOT_VERIFIED"

    def test_reset_before_verify_rejected(self, client: TestClient, workflow, account) -> None:
        client.post(
            "/v1/auth/otp/send",
            json={"identity": "owner@example.com", "purpose": "credential_reset"},
        )

        response = client.post(
            "/v1/auth/password/reset",
            json={"identity": "owner@example.com", "new_credential": "brand-new-pass"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "NOT_VERIFIED"

    def test_unknown_account_gets_same_response_and_no_challenge(
        self, client: TestClient, workflow, account
    ) -> None:
        known = client.post(
            "/v1/auth/otp/send",
            json={"identity": "owner@example.com", "purpose": "credential_reset"},
        )
        unknown = client.post(
            "/v1/auth/otp/send",
            json={"identity": "nobody@example.com", "purpose": "credential_reset"},
        )

        assert known.json()["message"] == unknown.json()["message"]
        assert workflow.challenges.get("nobody@example.com", Purpose.CREDENTIAL_RESET) is None
