"""Tests of the auth gateways and session observers."""

import pytest
import requests

from cineflix_admin.errors import AuthFailure, GatewayFailure
from cineflix_admin.gateways.auth import FIREBASE_SIGN_IN_URL, AuthGateway, AuthSession, CredentialAuth, FirebaseAuth


class _Response:
    def __init__(self, status_code, payload=None):
        self.status_code = status_code
        self._payload = payload or {}

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class _Http:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


def test_auth_gateway_needs_a_backend() -> None:
    with pytest.raises(TypeError):
        AuthGateway()

    class NoBackend(AuthGateway):
        pass

    with pytest.raises(TypeError):
        NoBackend()


def test_credential_login_and_logout_notify_observers(auth) -> None:
    seen = []
    auth.observe_session(seen.append)

    session = auth.login("admin@cineflix.test", "s3cret")
    auth.logout()

    assert seen == [None, session, None]
    assert session == AuthSession(uid="admin@cineflix.test", email="admin@cineflix.test")
    assert auth.current_session is None


@pytest.mark.parametrize("user,password", [("admin@cineflix.test", "wrong"), ("other", "s3cret"), ("", ""), ("admin@cineflix.test", "")])
def test_credential_login_rejects_bad_credentials(auth, user, password) -> None:
    with pytest.raises(AuthFailure, match="Invalid admin credentials"):
        auth.login(user, password)
    assert auth.current_session is None


def test_unsubscribed_observer_is_not_called() -> None:
    auth = CredentialAuth("a", "b")
    seen = []
    unsubscribe = auth.observe_session(seen.append)
    unsubscribe()

    auth.login("a", "b")

    assert seen == [None]


def test_firebase_login_posts_credentials() -> None:
    http = _Http(_Response(200, {"localId": "uid-1", "email": "ops@cineflix.test", "idToken": "tok"}))
    auth = FirebaseAuth("api-key", http=http)

    session = auth.login("ops@cineflix.test", "pw")

    assert session == AuthSession(uid="uid-1", email="ops@cineflix.test", id_token="tok")
    url, kwargs = http.calls[0]
    assert url == FIREBASE_SIGN_IN_URL
    assert kwargs["params"] == {"key": "api-key"}
    assert kwargs["json"] == {"email": "ops@cineflix.test", "password": "pw", "returnSecureToken": True}
    assert kwargs["timeout"] > 0


def test_firebase_rejected_credentials_leak_no_detail() -> None:
    auth = FirebaseAuth("api-key", http=_Http(_Response(400, {"error": {"message": "INVALID_PASSWORD"}})))

    with pytest.raises(AuthFailure) as excinfo:
        auth.login("ops@cineflix.test", "bad")

    assert "INVALID_PASSWORD" not in str(excinfo.value)


@pytest.mark.parametrize("response", [requests.ConnectionError("offline"), _Response(503)])
def test_firebase_service_errors_are_gateway_failures(response) -> None:
    auth = FirebaseAuth("api-key", http=_Http(response))

    with pytest.raises(GatewayFailure):
        auth.login("ops@cineflix.test", "pw")
    assert auth.current_session is None
