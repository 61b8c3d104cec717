from .auth import AuthGateway, AuthSession, CredentialAuth, FirebaseAuth
from .store import MongoCatalogStore

__all__ = ["AuthGateway", "AuthSession", "CredentialAuth", "FirebaseAuth", "MongoCatalogStore"]
