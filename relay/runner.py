"""Wire both channels to the dispatcher and keep them running."""

import asyncio
from pathlib import Path
from typing import Optional

import httpx

from relay.config import Config
from relay.errors import RelayStartupError
from relay.github_async import AsyncGitHubClient
from relay.local_watcher import LocalChannelWatcher
from relay.notify.dispatcher import NotificationDispatcher
from relay.remote_poller import RemoteChannelPoller
from relay.signals import SignalRegistry, build_registry
from relay.utils.logger import log_error, log_info


def ensure_flag_dir(path: Path) -> Path:
    """Create the local flag directory (and parents) if needed.

    Raises:
        RelayStartupError: if the directory cannot be created
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        log_error("Cannot create local flag directory", path=str(path), error=repr(e))
        raise RelayStartupError(f"Cannot create local flag directory {path}: {e}", path=str(path)) from e
    return path


def _print_ready(registry: SignalRegistry, config: Config, flag_dir: Path) -> None:
    print("")
    print("Ready! Waiting for agent notifications...")
    for signal in registry:
        print(f"- {signal.source_agent} -> {signal.target_agent}: {flag_dir / signal.name}")
    if config.remote_enabled:
        print(f"- remote: {config.github_owner_repo()}@{config.github_branch} every {config.remote_poll_seconds:g}s")
    print("")


async def run_relay(
    config: Config,
    stop_event: Optional[asyncio.Event] = None,
    dispatcher=None,
    registry: Optional[SignalRegistry] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> None:
    """Run the relay until ``stop_event`` is set (forever when None).

    Args:
        config: Relay configuration
        stop_event: Event that ends the run; tests and signal handlers set it
        dispatcher: Notification dispatcher (built from config when None)
        registry: Signal catalog (built from config when None)
        transport: Optional httpx transport for the GitHub client

    Raises:
        RelayStartupError: if the local flag directory cannot be created
    """
    flag_dir = ensure_flag_dir(Path(config.local_flag_dir).expanduser().resolve())
    registry = registry or build_registry(config)
    dispatcher = dispatcher or NotificationDispatcher.from_config(config)
    stop_event = stop_event or asyncio.Event()

    local = LocalChannelWatcher(
        registry,
        flag_dir,
        dispatcher,
        debounce_seconds=config.debounce_ms / 1000.0,
        poll_interval=config.local_poll_seconds,
    )

    async with AsyncGitHubClient(config, transport=transport) as client:
        remote = None
        if config.remote_enabled:
            remote = RemoteChannelPoller(
                registry,
                client,
                dispatcher,
                interval=config.remote_poll_seconds,
            )

        local.start()
        if remote is not None:
            remote.start()
        _print_ready(registry, config, flag_dir)

        try:
            await stop_event.wait()
        finally:
            log_info("Stopping relay")
            await local.stop()
            if remote is not None:
                await remote.stop()
