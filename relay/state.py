"""Last-seen state for the two channels.

Each channel owns one store and receives it at construction. Stores are only
touched from the event loop thread and never across an ``await``, so they
need no locking: a check-and-update is a single synchronous call.
"""

from enum import Enum
from typing import Dict, Optional

from relay.utils.logger import log_debug


class RemoteObservation(Enum):
    """Outcome of comparing a fetched fingerprint against the stored one."""

    UNCHANGED = "unchanged"
    BASELINE = "baseline"  # first sighting since start, recorded only
    CHANGED = "changed"


class LocalMarkerStore:
    """Modification time (ns) of the last local flag that was dispatched."""

    def __init__(self):
        self._last_handled: Dict[str, int] = {}
        self._stats = {"claimed": 0, "stale": 0}

    def get(self, name: str) -> Optional[int]:
        return self._last_handled.get(name)

    def claim(self, name: str, mtime_ns: int) -> bool:
        """Record ``mtime_ns`` as handled if it is newer than the stored value.

        Args:
            name: Signal name
            mtime_ns: Modification time of the flag file in nanoseconds

        Returns:
            True if the caller now owns this occurrence and must dispatch it,
            False if it was already handled (equal or older timestamp)
        """
        previous = self._last_handled.get(name)
        if previous is not None and mtime_ns <= previous:
            self._stats["stale"] += 1
            return False

        self._last_handled[name] = mtime_ns
        self._stats["claimed"] += 1
        log_debug("Local flag claimed", signal=name, mtime_ns=mtime_ns, previous=previous)
        return True

    def get_stats(self) -> Dict[str, int]:
        return dict(self._stats)


class RemoteMarkerStore:
    """Last known remote fingerprint (blob SHA) per signal."""

    def __init__(self):
        self._last_known: Dict[str, str] = {}
        self._stats = {"baselines": 0, "changes": 0, "unchanged": 0}

    def get(self, name: str) -> Optional[str]:
        return self._last_known.get(name)

    def observe(self, name: str, version: str) -> RemoteObservation:
        """Compare ``version`` with the stored fingerprint and record it.

        The first fingerprint seen for a signal is a baseline: it is stored so
        later ticks compare against it, but it is not an occurrence.
        """
        previous = self._last_known.get(name)
        if previous == version:
            self._stats["unchanged"] += 1
            return RemoteObservation.UNCHANGED

        self._last_known[name] = version
        if previous is None:
            self._stats["baselines"] += 1
            return RemoteObservation.BASELINE

        self._stats["changes"] += 1
        return RemoteObservation.CHANGED

    def get_stats(self) -> Dict[str, int]:
        return dict(self._stats)
