"""Pytest configuration and fixtures for agent-relay tests."""

import asyncio
import base64
import os
import pytest
from typing import Dict, List, Optional

# Add the project root to the Python path
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from relay.config import Config
from relay.events import NotificationEvent, RemoteMarker
from relay.signals import DEFAULT_SIGNALS, SignalRegistry

RELAY_ENV_VARS = [
    "GITHUB_REPO",
    "GITHUB_BRANCH",
    "GITHUB_TOKEN",
    "GITHUB_API_URL",
    "GITHUB_REMOTE_DIR",
    "GITHUB_TIMEOUT",
    "REMOTE_POLL_SECONDS",
    "REMOTE_ENABLED",
    "LOCAL_FLAG_DIR",
    "LOCAL_POLL_SECONDS",
    "DEBOUNCE_MS",
    "CLIPBOARD_ENABLED",
    "TOAST_ENABLED",
    "TOAST_TITLE",
    "SIGNALS_JSON",
    "LOG_LEVEL",
    "LOG_FORMAT",
]


class RecordingDispatcher:
    """Dispatcher double that records every event it receives."""

    def __init__(self, fail_for: Optional[str] = None):
        self.events: List[NotificationEvent] = []
        self.fail_for = fail_for

    async def dispatch(self, event: NotificationEvent):
        if self.fail_for and event.from_agent == self.fail_for:
            raise RuntimeError(f"transport exploded for {event.from_agent}")
        self.events.append(event)
        return None


class FakeGitHubClient:
    """GitHub client double returning scripted markers per signal, one per call."""

    def __init__(self, responses: Dict[str, list]):
        self.responses = {name: list(seq) for name, seq in responses.items()}
        self.calls: List[str] = []

    async def fetch_marker(self, name: str) -> Optional[RemoteMarker]:
        self.calls.append(name)
        seq = self.responses.get(name, [])
        if not seq:
            return None
        item = seq.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def contents_payload(sha: str, text: str) -> dict:
    """Build a GitHub contents API payload (base64 wrapped like the real API)."""
    return {
        "type": "file",
        "name": "flag",
        "sha": sha,
        "encoding": "base64",
        "content": base64.encodebytes(text.encode("utf-8")).decode("ascii"),
    }


async def wait_for(predicate, timeout: float = 2.0, interval: float = 0.02) -> bool:
    """Poll ``predicate`` until it is true or ``timeout`` elapses."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        if predicate():
            return True
        await asyncio.sleep(interval)
    return predicate()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove relay settings from the environment for the duration of a test."""
    for name in RELAY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield monkeypatch


@pytest.fixture
def registry():
    """Default two-signal registry."""
    return SignalRegistry(DEFAULT_SIGNALS)


@pytest.fixture
def recording_dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def flag_dir(tmp_path):
    path = tmp_path / ".handoff"
    path.mkdir()
    return path


@pytest.fixture
def relay_config(clean_env, tmp_path):
    """Configuration pointing at a temporary flag directory with fast timers."""
    return Config(
        _env_file=None,
        local_flag_dir=str(tmp_path / ".handoff"),
        local_poll_seconds=0.2,
        debounce_ms=50,
        remote_poll_seconds=1.0,
        clipboard_enabled=False,
        toast_enabled=False,
    )


def write_flag(directory: Path, name: str, text: str, mtime_ns: Optional[int] = None) -> Path:
    """Write a flag file and optionally pin its modification time."""
    path = directory / name
    path.write_text(text, encoding="utf-8")
    if mtime_ns is not None:
        os.utime(path, ns=(mtime_ns, mtime_ns))
    return path
