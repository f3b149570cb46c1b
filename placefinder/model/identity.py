"""Identity - The signed-in user context gating favourite mutations."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """A signed-in user.

    Attributes:
        display_name: Name shown in the user info panel
        avatar_ref: Avatar image URL
        subject: Stable account id from the identity provider (Google "sub"),
            None for local development identities

    The favourites partition is keyed by ``key``: the subject when known,
    otherwise the display name.
    """

    display_name: str
    avatar_ref: str | None = None
    subject: str | None = None

    @property
    def key(self) -> str:
        """Storage partition key for this identity."""
        return self.subject or self.display_name
