"""Signal catalog shared by both channels.

A signal is a named, one-directional alert slot: ``source_agent`` raises it by
writing the flag file named ``name``; ``target_agent`` is the party who should
go and read the message. The catalog is fixed for the lifetime of the process.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from relay.config import Config


@dataclass(frozen=True)
class Signal:
    """A watched flag name and the two agents it connects."""

    name: str
    source_agent: str
    target_agent: str


DEFAULT_SIGNALS: Tuple[Signal, ...] = (
    Signal(name="notify-cascade", source_agent="Cascade", target_agent="Replit"),
    Signal(name="notify-replit", source_agent="Replit", target_agent="Cascade"),
)


class SignalRegistry:
    """Ordered, read-only collection of signals keyed by name."""

    def __init__(self, signals: Iterable[Signal]):
        ordered: List[Signal] = list(signals)
        if not ordered:
            raise ValueError("Signal registry needs at least one signal")

        by_name: Dict[str, Signal] = {}
        for signal in ordered:
            if signal.name in by_name:
                raise ValueError(f"Duplicate signal name: {signal.name}")
            by_name[signal.name] = signal

        self._signals: Tuple[Signal, ...] = tuple(ordered)
        self._by_name = by_name

    def __iter__(self) -> Iterator[Signal]:
        return iter(self._signals)

    def __len__(self) -> int:
        return len(self._signals)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    @property
    def signals(self) -> Tuple[Signal, ...]:
        return self._signals

    def names(self) -> List[str]:
        return [signal.name for signal in self._signals]

    def get(self, name: str) -> Optional[Signal]:
        """Return the signal called ``name`` or None."""
        return self._by_name.get(name)


def build_registry(config: Optional[Config] = None) -> SignalRegistry:
    """Build the registry from the ``SIGNALS_JSON`` override or the defaults."""
    entries = config.get_signal_entries() if config is not None else []
    if not entries:
        return SignalRegistry(DEFAULT_SIGNALS)
    return SignalRegistry(
        Signal(
            name=entry["name"],
            source_agent=entry["source_agent"],
            target_agent=entry["target_agent"],
        )
        for entry in entries
    )
