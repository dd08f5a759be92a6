"""Value objects passed between the channels and the dispatcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

LOCAL_CHANNEL = "local"
REMOTE_CHANNEL = "remote"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class NotificationEvent:
    """A new occurrence of a signal, ready to be announced.

    Attributes:
        from_agent: Agent that left the message (the signal's source agent).
        context: Trimmed flag content; empty when the flag carried none.
        signal: Name of the signal that fired.
        channel: ``"local"`` or ``"remote"``.
        emitted_at: UTC time the occurrence was detected.
    """

    from_agent: str
    context: str = ""
    signal: Optional[str] = None
    channel: Optional[str] = None
    emitted_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class RemoteMarker:
    """Remote flag state returned by a successful fetch."""

    sha: str
    content: str = ""
