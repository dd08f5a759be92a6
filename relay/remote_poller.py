"""Remote channel: poll the repository copy of each flag.

Each signal has its own loop: one fetch at start, then one every ``interval``
seconds, so a slow request only delays its own signal. The first fingerprint
seen for a signal is recorded as a baseline and not announced, so a restart
does not replay flags handled in a previous run.
"""

import asyncio
from typing import List, Optional

from relay.events import REMOTE_CHANNEL, NotificationEvent
from relay.github_async import AsyncGitHubClient
from relay.signals import Signal, SignalRegistry
from relay.state import RemoteMarkerStore, RemoteObservation
from relay.utils.logger import log_error, log_info, log_signal_detected


class RemoteChannelPoller:
    """Fingerprint-based change detection over the remote flags."""

    def __init__(
        self,
        registry: SignalRegistry,
        client: AsyncGitHubClient,
        dispatcher,
        store: Optional[RemoteMarkerStore] = None,
        interval: float = 10.0,
    ):
        """Initialize the poller.

        Args:
            registry: Signals to poll
            client: Open GitHub client (the caller owns its context)
            dispatcher: Object with ``async dispatch(event)``
            store: Fingerprint store owned by this poller
            interval: Seconds between ticks
        """
        self.registry = registry
        self.client = client
        self.dispatcher = dispatcher
        self.store = store if store is not None else RemoteMarkerStore()
        self.interval = interval
        self._tasks: List[asyncio.Task] = []

    async def poll_once(self) -> int:
        """Run one tick over every signal.

        Returns:
            Number of notifications dispatched in this tick
        """
        results = await asyncio.gather(
            *(self._poll_signal(signal) for signal in self.registry),
            return_exceptions=True,
        )

        dispatched = 0
        for signal, result in zip(self.registry, results):
            if isinstance(result, Exception):
                log_error("Remote poll failed", signal=signal.name, error=str(result))
                continue
            if result:
                dispatched += 1
        return dispatched

    async def _poll_signal(self, signal: Signal) -> bool:
        marker = await self.client.fetch_marker(signal.name)
        if marker is None:
            return False

        observation = self.store.observe(signal.name, marker.sha)
        if observation is RemoteObservation.UNCHANGED:
            return False
        if observation is RemoteObservation.BASELINE:
            log_info(f"[remote] tracking {signal.name} (sha: {marker.sha[:7]})")
            return False

        log_signal_detected(REMOTE_CHANNEL, signal.name, sha=marker.sha[:7])
        await self.dispatcher.dispatch(
            NotificationEvent(
                from_agent=signal.source_agent,
                context=marker.content,
                signal=signal.name,
                channel=REMOTE_CHANNEL,
            )
        )
        return True

    async def _run_signal(self, signal: Signal) -> None:
        while True:
            try:
                await self._poll_signal(signal)
            except Exception as e:
                log_error("Remote poll failed", signal=signal.name, error=str(e))
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        """Start one polling loop per signal: an immediate tick, then one every ``interval`` seconds."""
        if self._tasks:
            return
        log_info(f"[remote] polling every {self.interval:g}s", signals=self.registry.names())
        self._tasks = [asyncio.create_task(self._run_signal(signal)) for signal in self.registry]

    async def stop(self) -> None:
        if not self._tasks:
            return
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
