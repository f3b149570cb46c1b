"""FavouritesStore - Durable per-identity persistence of favourite markers.

Favourites are keyed by geographic identity (Position.key), not by marker
id: a new search may return a different id for the same physical place.

Persisted layout (JSON object, one partition per identity key):

    {
      "Jan": [
        {"id": 7, "name": "Church A", "position": {"lat": 51.9194, "lng": 19.1451},
         "description": "...", "address": "...", "hours": "...", "isFavourite": true}
      ]
    }

Concurrency:
    Every mutation is a read-modify-write of one identity's partition and runs
    under that identity's lock. Partition writes reload the whole document under
    a file lock and replace only their own partition, then write atomically
    (temp file + rename), so writers for different identities never lose
    each other's updates.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path

from placefinder.constants import StorageConfig
from placefinder.model.exceptions import FavouritesStoreError, NotAuthenticatedError
from placefinder.model.identity import Identity
from placefinder.model.marker import Marker
from placefinder.model.position import GeoKey, Position

logger = logging.getLogger(__name__)


class FavouritesStore:
    """Favourite marker snapshots persisted to a JSON file, scoped per identity.

    Example:
        store = FavouritesStore(path=Path("favourites.json"))
        store.add(identity=jan, entry=marker)
        store.contains(identity=jan, position=marker.position)  # True
    """

    def __init__(self, path: Path = StorageConfig.FAVOURITES_PATH) -> None:
        """Initialize store backed by ``path`` (created on first write)."""
        self.path = Path(path)
        self._file_lock = threading.Lock()
        self._locks_guard = threading.Lock()
        # One lock per identity seen by this process, kept for the process lifetime
        self._identity_locks: dict[str, threading.Lock] = {}

    def _lock_for(self, identity: Identity) -> threading.Lock:
        with self._locks_guard:
            lock = self._identity_locks.get(identity.key)
            if lock is None:
                lock = threading.Lock()
                self._identity_locks[identity.key] = lock
            return lock

    # =========================================================================
    # File Access
    # =========================================================================

    def _load_document(self) -> dict[str, list[dict]]:
        """Read the whole JSON document. Caller must hold _file_lock."""
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise FavouritesStoreError(f"Cannot read favourites from {self.path}: {e}") from e
        if not isinstance(document, dict):
            raise FavouritesStoreError(f"Favourites file {self.path} must contain a JSON object")
        return document

    def _write_document(self, document: dict[str, list[dict]]) -> None:
        """Write the whole JSON document atomically. Caller must hold _file_lock."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=StorageConfig.JSON_INDENT, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise FavouritesStoreError(f"Cannot write favourites to {self.path}: {e}") from e

    def _read_partition(self, identity: Identity) -> list[Marker]:
        with self._file_lock:
            document = self._load_document()
        partition = document.get(identity.key, [])
        if not isinstance(partition, list):
            raise FavouritesStoreError(f"Favourites of {identity.key!r} in {self.path} must be a JSON list")
        try:
            return [Marker.from_dict(data=entry) for entry in partition]
        except (KeyError, TypeError, ValueError) as e:
            raise FavouritesStoreError(f"Malformed favourite of {identity.key!r} in {self.path}: {e!r}") from e

    def _write_partition(self, identity: Identity, entries: list[Marker]) -> None:
        with self._file_lock:
            document = self._load_document()
            document[identity.key] = [entry.to_dict() for entry in entries]
            self._write_document(document=document)

    @staticmethod
    def _require_identity(identity: Identity | None) -> Identity:
        if identity is None:
            raise NotAuthenticatedError()
        return identity

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, identity: Identity | None) -> list[Marker]:
        """Return all favourites of ``identity`` in insertion order (empty if signed out)."""
        if identity is None:
            return []
        return self._read_partition(identity=identity)

    def keys(self, identity: Identity | None) -> set[GeoKey]:
        """Return the geographic identities of all favourites of ``identity``."""
        return {entry.geo_key for entry in self.get(identity=identity)}

    def contains(self, identity: Identity | None, position: Position) -> bool:
        """Check if a favourite with the same geographic identity exists."""
        return position.key in self.keys(identity=identity)

    # =========================================================================
    # Mutations (read-modify-write under the identity's lock)
    # =========================================================================

    def add(self, identity: Identity | None, entry: Marker) -> bool:
        """Add a favourite snapshot.

        Returns:
            True if added, False if a favourite at the same position already exists.

        Raises:
            NotAuthenticatedError: If identity is None.
        """
        identity = self._require_identity(identity)
        with self._lock_for(identity):
            return self._add_locked(identity=identity, entry=entry)

    def remove(self, identity: Identity | None, position: Position) -> bool:
        """Remove the favourite with the same geographic identity as ``position``.

        Returns:
            True if removed, False if there was none.

        Raises:
            NotAuthenticatedError: If identity is None.
        """
        identity = self._require_identity(identity)
        with self._lock_for(identity):
            return self._remove_locked(identity=identity, position=position)

    def toggle(self, identity: Identity | None, entry: Marker) -> bool:
        """Atomically flip the favourite state of ``entry``'s position.

        Returns:
            The new state: True if now a favourite, False if removed.

        Raises:
            NotAuthenticatedError: If identity is None.
        """
        identity = self._require_identity(identity)
        with self._lock_for(identity):
            if self._remove_locked(identity=identity, position=entry.position):
                return False
            self._add_locked(identity=identity, entry=entry)
            return True

    def _add_locked(self, identity: Identity, entry: Marker) -> bool:
        entries = self._read_partition(identity=identity)
        if any(existing.geo_key == entry.geo_key for existing in entries):
            return False
        entries.append(entry.with_favourite(True))
        self._write_partition(identity=identity, entries=entries)
        logger.info(f"[FAVOURITES] Added {entry.name!r} at {entry.geo_key} for {identity.key!r}")
        return True

    def _remove_locked(self, identity: Identity, position: Position) -> bool:
        entries = self._read_partition(identity=identity)
        kept = [existing for existing in entries if existing.geo_key != position.key]
        if len(kept) == len(entries):
            return False
        self._write_partition(identity=identity, entries=kept)
        logger.info(f"[FAVOURITES] Removed favourite at {position.key} for {identity.key!r}")
        return True
