"""Identity provider backed by Firebase Authentication."""

import logging

import firebase_admin
from firebase_admin import auth, credentials
from firebase_admin.exceptions import FirebaseError

from shop.clients.interfaces import IdentityProvider
from shop.domain import Identity
from shop.domain.errors import UnauthorizedError

logger = logging.getLogger(__name__)


class FirebaseIdentityProvider(IdentityProvider):
    """Verifies Firebase ID tokens with the Admin SDK."""

    def __init__(self, credentials_path: str = "") -> None:
        self._credentials_path = credentials_path
        self._app: firebase_admin.App | None = None

    def _get_app(self) -> firebase_admin.App:
        if self._app is None:
            try:
                self._app = firebase_admin.get_app()
            except ValueError:
                # Without a service-account file the SDK falls back to
                # application default credentials.
                cred = (
                    credentials.Certificate(self._credentials_path)
                    if self._credentials_path
                    else None
                )
                self._app = firebase_admin.initialize_app(cred)
        return self._app

    def verify(self, id_token: str) -> Identity:
        app = self._get_app()
        try:
            claims = auth.verify_id_token(id_token, app=app, check_revoked=True)
        except (ValueError, FirebaseError) as exc:
            logger.info("Rejected ID token", extra={"reason": type(exc).__name__})
            raise UnauthorizedError("Invalid or expired token") from exc
        return Identity(uid=claims["uid"], email=(claims.get("email") or "").lower())
