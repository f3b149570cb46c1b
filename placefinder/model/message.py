"""Message - User-facing messages for the Place Finder UI.

Architecture:
- LEFT (sidebar): ONE blue info message with the session status
- RIGHT (details panel): ONE yellow instruction when no marker is selected
- Toasts: transient feedback about user actions (errors and confirmations)

Messages are frozen dataclasses that know their own text, icon and level.
The action layer returns them and the caller decides when to display them.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from placefinder.constants import PopupConfig


class MessageLevel(Enum):
    """Display level for UI messages."""

    INFO = "info"  # Blue - context/status
    WARNING = "warning"  # Yellow - action instructions
    ERROR = "error"  # Red - failures


@dataclass(frozen=True)
class Message(ABC):
    """Abstract base class for messages displayed inline (sidebar/panels).

    Rendered as st.info/st.warning/st.error blocks that persist until replaced.
    """

    @property
    @abstractmethod
    def message(self) -> str:
        """Formatted message for display in Streamlit."""
        raise NotImplementedError

    @property
    @abstractmethod
    def level(self) -> MessageLevel:
        raise NotImplementedError

    def display(self) -> None:
        """Render this message using the appropriate Streamlit function."""
        import streamlit as st

        render_fn = {
            MessageLevel.INFO: st.info,
            MessageLevel.WARNING: st.warning,
            MessageLevel.ERROR: st.error,
        }[self.level]
        render_fn(self.message)


@dataclass(frozen=True)
class ToastMessage(ABC):
    """Abstract base class for transient popup notifications.

    Good for: failed searches, sign-in problems, favourite confirmations
    Bad for: status displays, instruction panels
    """

    @property
    @abstractmethod
    def message(self) -> str:
        """Formatted message for the toast notification."""
        raise NotImplementedError

    @property
    @abstractmethod
    def icon(self) -> str:
        raise NotImplementedError

    def display(self) -> None:
        """Show this message as a toast notification and log it."""
        import streamlit as st

        logger = logging.getLogger(__name__)
        logger.info(f"[TOAST] {self.icon} {self.message}")
        st.toast(f"{self.icon} {self.message}")


# =============================================================================
# TOAST MESSAGES - Errors
# =============================================================================


@dataclass(frozen=True)
class BlankLocationMessage(ToastMessage):
    """Search pressed with an empty location field."""

    @property
    def icon(self) -> str:
        return "✏️"

    @property
    def message(self) -> str:
        return "Enter a location to search for."


@dataclass(frozen=True)
class GeocodeNotFoundMessage(ToastMessage):
    """The geocoder has no match for the typed location."""

    location_text: str

    @property
    def icon(self) -> str:
        return "🔍"

    @property
    def message(self) -> str:
        return f"Location Not Found — nothing matches '{self.location_text}'."


@dataclass(frozen=True)
class ProviderErrorMessage(ToastMessage):
    """A geocode or place search call failed."""

    operation: str  # e.g. "Search nearby", "Geocoding"
    detail: str

    @property
    def icon(self) -> str:
        return "⚠️"

    @property
    def message(self) -> str:
        return f"{self.operation} failed — {self.detail}"


@dataclass(frozen=True)
class SignInRequiredMessage(ToastMessage):
    """A favourite action was attempted while signed out."""

    action: str = "add places to favourites"

    @property
    def icon(self) -> str:
        return "🔒"

    @property
    def message(self) -> str:
        return f"Sign In Required — sign in to {self.action}."


@dataclass(frozen=True)
class AuthFailedMessage(ToastMessage):
    """The identity provider rejected the credential."""

    detail: str

    @property
    def icon(self) -> str:
        return "🚫"

    @property
    def message(self) -> str:
        return f"Sign-in failed — {self.detail}"


@dataclass(frozen=True)
class MarkerGoneMessage(ToastMessage):
    """The clicked or selected marker is no longer on the map."""

    @property
    def icon(self) -> str:
        return "📍"

    @property
    def message(self) -> str:
        return "This place is no longer on the map."


@dataclass(frozen=True)
class FavouritesStoreErrorMessage(ToastMessage):
    """The favourites file could not be read or written."""

    detail: str

    @property
    def icon(self) -> str:
        return "💾"

    @property
    def message(self) -> str:
        return f"Favourites unavailable — {self.detail}"


# =============================================================================
# TOAST MESSAGES - Confirmations
# =============================================================================


@dataclass(frozen=True)
class FavouriteAddedMessage(ToastMessage):
    name: str

    @property
    def icon(self) -> str:
        return PopupConfig.FAVOURITE_ICON

    @property
    def message(self) -> str:
        return f"'{self.name}' added to favourites."


@dataclass(frozen=True)
class FavouriteRemovedMessage(ToastMessage):
    name: str

    @property
    def icon(self) -> str:
        return PopupConfig.NOT_FAVOURITE_ICON

    @property
    def message(self) -> str:
        return f"'{self.name}' removed from favourites."


@dataclass(frozen=True)
class SearchResultMessage(ToastMessage):
    """Nearby search finished."""

    count: int

    @property
    def icon(self) -> str:
        return "📍"

    @property
    def message(self) -> str:
        if self.count == 0:
            return "No places found in this area."
        return f"Found {self.count} place{'s' if self.count != 1 else ''} nearby."


@dataclass(frozen=True)
class FavouritesShownMessage(ToastMessage):
    count: int

    @property
    def icon(self) -> str:
        return PopupConfig.FAVOURITE_ICON

    @property
    def message(self) -> str:
        if self.count == 0:
            return "You have no favourites yet."
        return f"Showing your {self.count} favourite{'s' if self.count != 1 else ''}."


@dataclass(frozen=True)
class SignedInMessage(ToastMessage):
    display_name: str

    @property
    def icon(self) -> str:
        return "👋"

    @property
    def message(self) -> str:
        return f"Signed in as {self.display_name}."


@dataclass(frozen=True)
class SignedOutMessage(ToastMessage):
    @property
    def icon(self) -> str:
        return "👋"

    @property
    def message(self) -> str:
        return "Signed out."


# =============================================================================
# PANEL MESSAGES
# =============================================================================


@dataclass(frozen=True)
class SessionStatusMessage(Message):
    """Sidebar status: who is signed in and what is on the map."""

    display_name: str | None
    marker_count: int
    is_search_pending: bool

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.INFO

    @property
    def message(self) -> str:
        who = f"Signed in as **{self.display_name}**" if self.display_name else "Not signed in"
        places = f"{self.marker_count} place{'s' if self.marker_count != 1 else ''} on the map"
        pending = " · search pending" if self.is_search_pending else ""
        return f"{who} · {places}{pending}"


@dataclass(frozen=True)
class SelectPlaceMessage(Message):
    """Details panel instruction when nothing is selected."""

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.WARNING

    @property
    def message(self) -> str:
        return "Click a place marker to see its details, or click the map to search around that point."
