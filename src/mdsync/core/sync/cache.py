"""
Fingerprint cache: which document states are already in the store.

A fingerprint is ``<relative path>:<md5 of the merged document>``. When a
document's fingerprint is cached, the store already holds exactly that
state and the document is skipped without touching the store.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mdsync.core.store.base import Store

    from .kinds import Kind

logger = logging.getLogger(__name__)


class FingerprintCache:
    """
    Map of fingerprint to store identifier.

    Each fingerprint maps to at most one identifier; recording a different
    identifier for a known fingerprint replaces the old one.
    """

    def __init__(self, entries: Mapping[str, str] | None = None) -> None:
        self._entries: dict[str, str] = dict(entries or {})

    @classmethod
    def load(cls, store: "Store", kinds: Iterable["Kind"]) -> "FingerprintCache":
        """
        Populate a cache from every kind's fingerprint source.

        Args:
            store: Store to query
            kinds: Registered resource kinds

        Returns:
            FingerprintCache holding the store's known fingerprints
        """
        cache = cls()
        for kind in kinds:
            if kind.fingerprint_source is None:
                continue
            for fingerprint, identifier in kind.fingerprint_source(store).items():
                cache.record(fingerprint, identifier)
        logger.debug(f"Loaded {len(cache)} cached fingerprints")
        return cache

    def __contains__(self, fingerprint: object) -> bool:
        return fingerprint in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, fingerprint: str) -> str | None:
        """Return the identifier recorded for ``fingerprint``, if any."""
        return self._entries.get(fingerprint)

    def record(self, fingerprint: str, identifier: str) -> None:
        """Remember that ``fingerprint`` is stored as ``identifier``."""
        previous = self._entries.get(fingerprint)
        if previous is not None and previous != identifier:
            logger.warning(
                f"Fingerprint {fingerprint} moved from record {previous} to {identifier}"
            )
        self._entries[fingerprint] = identifier
