"""Identity providers - turn an opaque sign-in credential into an Identity.

GoogleIdentityProvider validates Google ID tokens (the credential returned by
"Sign in with Google") against Google's tokeninfo endpoint.
LocalIdentityProvider treats the credential as a display name, for local
development without an OAuth client.

Failures raise AuthFailedError and never touch the session.
"""

import logging
from abc import ABC, abstractmethod

import requests

from placefinder.constants import AuthConfig
from placefinder.model.exceptions import AuthFailedError
from placefinder.model.identity import Identity

logger = logging.getLogger(__name__)


class IdentityProvider(ABC):
    """Resolves a sign-in credential to an Identity."""

    @abstractmethod
    def authenticate(self, credential: str) -> Identity:
        """Return the identity for ``credential``.

        Raises:
            AuthFailedError: If the credential is empty, invalid or cannot be verified.
        """
        raise NotImplementedError


class LocalIdentityProvider(IdentityProvider):
    """Development provider: the credential is the display name."""

    def __init__(self, avatar_ref: str = AuthConfig.DEFAULT_AVATAR) -> None:
        self.avatar_ref = avatar_ref

    def authenticate(self, credential: str) -> Identity:
        display_name = (credential or "").strip()
        if not display_name:
            raise AuthFailedError("Display name is empty")
        return Identity(display_name=display_name, avatar_ref=self.avatar_ref)


class GoogleIdentityProvider(IdentityProvider):
    """Validates Google ID tokens via the tokeninfo endpoint.

    Args:
        client_id: Expected "aud" claim (the OAuth client id of this app)
    """

    def __init__(
        self,
        client_id: str = AuthConfig.GOOGLE_CLIENT_ID,
        session: requests.Session | None = None,
        timeout_s: float = AuthConfig.TIMEOUT_S,
    ) -> None:
        if not client_id:
            raise ValueError("GoogleIdentityProvider requires a client id")
        self.client_id = client_id
        self.session = session or requests.Session()
        self.timeout_s = timeout_s

    def authenticate(self, credential: str) -> Identity:
        token = (credential or "").strip()
        if not token:
            raise AuthFailedError("Credential is empty")

        try:
            response = self.session.get(AuthConfig.TOKENINFO_URL, params={"id_token": token}, timeout=self.timeout_s)
            response.raise_for_status()
            claims = response.json()
        except (requests.RequestException, ValueError) as e:
            raise AuthFailedError(f"Token verification failed: {e}") from e

        if claims.get("aud") != self.client_id:
            raise AuthFailedError("Token was issued for a different client")

        subject = claims.get("sub")
        if not subject:
            raise AuthFailedError("Token has no subject")

        identity = Identity(
            display_name=claims.get("name") or claims.get("email") or subject,
            avatar_ref=claims.get("picture") or AuthConfig.DEFAULT_AVATAR,
            subject=subject,
        )
        logger.info(f"[SESSION] Verified Google identity {identity.display_name!r}")
        return identity


def create_identity_provider(client_id: str = AuthConfig.GOOGLE_CLIENT_ID) -> IdentityProvider:
    """Google provider when a client id is configured, local provider otherwise."""
    if client_id:
        return GoogleIdentityProvider(client_id=client_id)
    logger.info("[SESSION] GOOGLE_CLIENT_ID not set - using local identity provider")
    return LocalIdentityProvider()
