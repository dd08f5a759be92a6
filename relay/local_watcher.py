"""Local channel: watch the flag directory for new or updated flag files.

Two inputs feed the same check:

- watchdog change events, debounced per signal so a burst of writes (editors
  that write then rename, several appends) collapses into one check;
- a fallback scan of every signal at a fixed interval, for platforms and
  filesystems where change events are missed.

A check only dispatches when the file's modification time is strictly newer
than the last one handled for that signal. The store is updated before the
dispatch, so the redundant scan after a debounced check finds nothing to do.
"""

import asyncio
import os
from functools import partial
from pathlib import Path
from typing import Callable, Dict, Optional, Set

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from relay.events import LOCAL_CHANNEL, NotificationEvent
from relay.signals import Signal, SignalRegistry
from relay.state import LocalMarkerStore
from relay.utils.logger import log_debug, log_error, log_info, log_signal_detected, log_warning

WATCHED_EVENT_TYPES = frozenset({"created", "modified", "moved", "closed"})


class _FlagEventHandler(FileSystemEventHandler):
    """Forward events for known flag names from the observer thread to the loop."""

    def __init__(self, watcher: "LocalChannelWatcher", loop: asyncio.AbstractEventLoop):
        super().__init__()
        self.watcher = watcher
        self.loop = loop

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in WATCHED_EVENT_TYPES:
            return
        for raw_path in (event.src_path, getattr(event, "dest_path", "")):
            if not raw_path:
                continue
            name = os.path.basename(os.fsdecode(raw_path))
            if name in self.watcher.registry:
                self.loop.call_soon_threadsafe(self.watcher.schedule_check, name)


class LocalChannelWatcher:
    """Change detection over the local flag directory."""

    def __init__(
        self,
        registry: SignalRegistry,
        flag_dir: Path,
        dispatcher,
        store: Optional[LocalMarkerStore] = None,
        debounce_seconds: float = 0.75,
        poll_interval: float = 5.0,
        observer_factory: Callable[[], Observer] = Observer,
    ):
        """Initialize the watcher.

        Args:
            registry: Signals to watch
            flag_dir: Directory holding one flag file per signal
            dispatcher: Object with ``async dispatch(event)``
            store: Last-handled timestamps owned by this watcher
            debounce_seconds: Quiet period after the last change event
            poll_interval: Seconds between fallback scans
            observer_factory: Builds the watchdog observer
        """
        self.registry = registry
        self.flag_dir = Path(flag_dir)
        self.dispatcher = dispatcher
        self.store = store if store is not None else LocalMarkerStore()
        self.debounce_seconds = debounce_seconds
        self.poll_interval = poll_interval
        self._observer_factory = observer_factory

        # One pending debounce timer per signal name
        self._timers: Dict[str, asyncio.TimerHandle] = {}
        self._tasks: Set[asyncio.Task] = set()
        self._scan_task: Optional[asyncio.Task] = None
        self._observer = None

    # ------------------------------------------------------------------
    # Debounce
    # ------------------------------------------------------------------

    def schedule_check(self, name: str) -> None:
        """Schedule a check of ``name`` after the debounce window, replacing any pending one."""
        signal = self.registry.get(name)
        if signal is None:
            return

        pending = self._timers.pop(name, None)
        if pending is not None:
            pending.cancel()

        loop = asyncio.get_running_loop()
        self._timers[name] = loop.call_later(self.debounce_seconds, self._fire, signal)

    def pending_checks(self) -> Set[str]:
        return set(self._timers)

    def _fire(self, signal: Signal) -> None:
        self._timers.pop(signal.name, None)
        self._spawn(self.check_signal(signal))

    def _spawn(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log_error("[local] notification failed", error=str(exc))

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    async def detect(self, signal: Signal) -> Optional[NotificationEvent]:
        """Claim the flag for ``signal`` if it is newer than the last handled one.

        Returns:
            The event to announce, or None when there is no new occurrence
        """
        path = self.flag_dir / signal.name
        loop = asyncio.get_running_loop()
        try:
            stat = await loop.run_in_executor(None, path.stat)
        except FileNotFoundError:
            return None
        except OSError as e:
            log_error("[local] stat failed", signal=signal.name, error=str(e))
            return None

        if not self.store.claim(signal.name, stat.st_mtime_ns):
            return None

        context = await self._read_context(path)
        log_signal_detected(LOCAL_CHANNEL, signal.name, has_context=bool(context))
        return NotificationEvent(
            from_agent=signal.source_agent,
            context=context,
            signal=signal.name,
            channel=LOCAL_CHANNEL,
        )

    async def check_signal(self, signal: Signal) -> bool:
        """Detect and dispatch the flag for ``signal``.

        Returns:
            True if a notification was dispatched
        """
        event = await self.detect(signal)
        if event is None:
            return False
        await self.dispatcher.dispatch(event)
        return True

    async def _read_context(self, path: Path) -> str:
        loop = asyncio.get_running_loop()
        try:
            text = await loop.run_in_executor(None, partial(path.read_text, encoding="utf-8", errors="replace"))
        except OSError as e:
            log_debug("[local] flag content unreadable", path=str(path), error=str(e))
            return ""
        return text.strip()

    async def scan(self) -> int:
        """Check every signal once.

        Dispatches run as background tasks, so a slow transport never holds
        up the next scan.

        Returns:
            Number of notifications started
        """
        results = await asyncio.gather(
            *(self.detect(signal) for signal in self.registry),
            return_exceptions=True,
        )

        started = 0
        for signal, result in zip(self.registry, results):
            if isinstance(result, Exception):
                log_error("[local] scan failed", signal=signal.name, error=str(result))
            elif result is not None:
                self._spawn(self.dispatcher.dispatch(result))
                started += 1
        return started

    async def _scan_loop(self) -> None:
        while True:
            await asyncio.sleep(self.poll_interval)
            await self.scan()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _start_observer(self) -> None:
        handler = _FlagEventHandler(self, asyncio.get_running_loop())
        try:
            observer = self._observer_factory()
            observer.schedule(handler, str(self.flag_dir), recursive=False)
            observer.start()
        except OSError as e:
            log_warning("[local] change events unavailable; relying on the fallback scan", error=str(e))
            return
        self._observer = observer

    def start(self) -> None:
        """Start the observer and the fallback scan."""
        if self._scan_task is not None:
            return
        self._start_observer()
        self._scan_task = asyncio.create_task(self._scan_loop())
        log_info(f"[local] watching {self.flag_dir}", poll_seconds=self.poll_interval, events=self._observer is not None)

    async def stop(self) -> None:
        """Cancel pending checks, stop the scan and the observer."""
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()

        tasks = list(self._tasks)
        if self._scan_task is not None:
            tasks.append(self._scan_task)
            self._scan_task = None
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        if self._observer is not None:
            observer, self._observer = self._observer, None
            observer.stop()
            await asyncio.get_running_loop().run_in_executor(None, observer.join, 2.0)
