"""Operator authentication gateways."""

import hmac
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional

import requests

from ..config import HTTP_TIMEOUT
from ..errors import AuthFailure, GatewayFailure

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid admin credentials"

FIREBASE_SIGN_IN_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"

SessionCallback = Callable[[Optional["AuthSession"]], None]


@dataclass(frozen=True)
class AuthSession:
    uid: str
    email: str
    id_token: Optional[str] = None


class AuthGateway(ABC):
    """Session state shared by every auth backend.

    Subclasses implement ``_authenticate``; observers are told about every
    login and logout.
    """

    def __init__(self) -> None:
        self._session: Optional[AuthSession] = None
        self._observers: List[SessionCallback] = []

    @property
    def current_session(self) -> Optional[AuthSession]:
        return self._session

    def login(self, identifier: str, secret: str) -> AuthSession:
        if not identifier or not secret:
            raise AuthFailure(INVALID_CREDENTIALS)
        session = self._authenticate(identifier.strip(), secret)
        logger.info("Operator %s signed in", session.email)
        self._set_session(session)
        return session

    def logout(self) -> None:
        if self._session is not None:
            logger.info("Operator %s signed out", self._session.email)
        self._set_session(None)

    def observe_session(self, callback: SessionCallback) -> Callable[[], None]:
        """Call ``callback`` now with the current session, then on every change."""
        self._observers.append(callback)
        callback(self._session)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def _set_session(self, session: Optional[AuthSession]) -> None:
        if session == self._session:
            return
        self._session = session
        for callback in list(self._observers):
            callback(session)

    @abstractmethod
    def _authenticate(self, identifier: str, secret: str) -> AuthSession:
        """Check the credentials and return the new session, or raise ``AuthFailure``."""


class CredentialAuth(AuthGateway):
    """Checks against the admin username/password from the environment."""

    def __init__(self, username: str, password: str) -> None:
        super().__init__()
        self._username = username
        self._password = password

    def _authenticate(self, identifier: str, secret: str) -> AuthSession:
        user_ok = hmac.compare_digest(identifier.encode(), self._username.encode())
        password_ok = hmac.compare_digest(secret.encode(), self._password.encode())
        if not (user_ok and password_ok):
            raise AuthFailure(INVALID_CREDENTIALS)
        return AuthSession(uid=identifier, email=identifier)


class FirebaseAuth(AuthGateway):
    """Email/password sign-in through the Firebase Identity Toolkit REST API."""

    def __init__(self, api_key: str, http: Optional[requests.Session] = None) -> None:
        super().__init__()
        self._api_key = api_key
        self._http = http or requests.Session()

    def _authenticate(self, identifier: str, secret: str) -> AuthSession:
        payload = {"email": identifier, "password": secret, "returnSecureToken": True}
        try:
            res = self._http.post(FIREBASE_SIGN_IN_URL, params={"key": self._api_key}, json=payload, timeout=HTTP_TIMEOUT)
        except requests.RequestException as e:
            logger.error("Auth service unreachable: %s", e)
            raise GatewayFailure("Auth service unreachable") from e

        if res.status_code == 400:
            # EMAIL_NOT_FOUND, INVALID_PASSWORD, USER_DISABLED... all look the same to the operator
            logger.warning("Sign-in rejected for %s", identifier)
            raise AuthFailure(INVALID_CREDENTIALS)
        try:
            res.raise_for_status()
            data = res.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("Auth service error: %s", e)
            raise GatewayFailure("Auth service error") from e

        return AuthSession(uid=data.get("localId", ""), email=data.get("email", identifier), id_token=data.get("idToken"))
