"""Validators - Input validation for Place Finder.

Validators return Optional[ToastMessage]:
- None if valid
- A ToastMessage if invalid (caller displays it)

No exceptions for expected validation failures; the caller decides when
to display the message.
"""

from placefinder.model.identity import Identity
from placefinder.model.message import BlankLocationMessage, SignInRequiredMessage, ToastMessage


def validate_location_text(location_text: str | None) -> ToastMessage | None:
    """Validate that a location was typed before geocoding.

    Returns:
        None if valid, BlankLocationMessage if empty or whitespace only.
    """
    if not location_text or not location_text.strip():
        return BlankLocationMessage()
    return None


def validate_signed_in(identity: Identity | None, action: str = "add places to favourites") -> ToastMessage | None:
    """Validate that someone is signed in before a favourites action.

    Returns:
        None if signed in, SignInRequiredMessage otherwise.
    """
    if identity is None:
        return SignInRequiredMessage(action=action)
    return None
