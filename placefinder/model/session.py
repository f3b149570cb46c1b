"""SessionContext - the signed-in identity of one browser session.

Holds at most one Identity. Sign-in goes through an IdentityProvider; a
failed sign-in leaves the session exactly as it was.

Listeners (objects with optional after_sign_in/after_sign_out methods) are
notified after the identity changed, e.g. MarkerReconciler reloads the
favourites view on sign-in.
"""

import logging
from typing import TYPE_CHECKING, Any

from placefinder.model.identity import Identity

if TYPE_CHECKING:
    from placefinder.core.identity_provider import IdentityProvider

logger = logging.getLogger(__name__)


class SessionContext:
    """Current identity plus sign-in/sign-out transitions."""

    def __init__(self, identity_provider: "IdentityProvider") -> None:
        self.identity_provider = identity_provider
        self._identity: Identity | None = None
        self._listeners: list[Any] = []

    def add_listener(self, listener: Any) -> None:
        self._listeners.append(listener)

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def is_signed_in(self) -> bool:
        return self._identity is not None

    def sign_in(self, credential: str) -> Identity:
        """Authenticate ``credential`` and make it the current identity.

        Raises:
            AuthFailedError: From the identity provider. Session unchanged.
        """
        identity = self.identity_provider.authenticate(credential=credential)
        return self.sign_in_identity(identity=identity)

    def sign_in_identity(self, identity: Identity) -> Identity:
        """Set an already verified identity (replaces any current one)."""
        previous = self._identity
        self._identity = identity
        logger.info(f"[SESSION] Signed in as {identity.display_name!r} (previous: {previous})")
        self._notify(hook="after_sign_in", identity=identity)
        return identity

    def sign_out(self) -> Identity | None:
        """Clear the identity. No-op when nobody is signed in.

        Returns:
            The identity that was signed out, or None.
        """
        identity = self._identity
        if identity is None:
            return None
        self._identity = None
        logger.info(f"[SESSION] Signed out {identity.display_name!r}")
        self._notify(hook="after_sign_out", identity=identity)
        return identity

    def _notify(self, hook: str, identity: Identity) -> None:
        for listener in self._listeners:
            callback = getattr(listener, hook, None)
            if callback is not None:
                callback(identity)

    def __repr__(self) -> str:
        return f"SessionContext(identity={self._identity}, listeners={len(self._listeners)})"
