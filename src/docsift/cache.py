"""
Caller-owned cache of sanitized document text.

The cache never checks whether a document changed. Whoever replaces or
removes a document must invalidate its key.
"""

from __future__ import annotations

import threading
from typing import Dict, Optional

from .extractor.models import ExtractionOutcome


class SanitizedTextCache:
    """Thread-safe mapping from a caller-chosen document key to its outcome."""

    def __init__(self) -> None:
        self._entries: Dict[str, ExtractionOutcome] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[ExtractionOutcome]:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, outcome: ExtractionOutcome) -> None:
        with self._lock:
            self._entries[key] = outcome

    def invalidate(self, key: str) -> bool:
        """Drop one entry. Returns whether anything was cached for the key."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
