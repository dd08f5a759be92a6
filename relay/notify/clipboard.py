"""Clipboard providers tried in order until one succeeds.

The library provider comes first; the shell providers are per-OS fallbacks
for machines where pyperclip finds no usable mechanism. Every provider reports
success as a bool and never raises.
"""

from __future__ import annotations

import abc
import asyncio
import sys
from typing import List, Optional, Sequence, Tuple

import pyperclip

from relay.utils.logger import log_debug, log_warning

WINDOWS = ("win32", "cygwin")
MACOS = ("darwin",)


class ClipboardProvider(abc.ABC):
    """Abstract base for clipboard writers."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Short machine-readable name for logs."""

    def supports(self, platform: str) -> bool:
        """Whether this provider can run on ``platform`` (a ``sys.platform`` value)."""
        return True

    @abc.abstractmethod
    async def write(self, text: str) -> bool:
        """Copy ``text``; return True on success."""


class PyperclipProvider(ClipboardProvider):
    """Cross-platform clipboard through pyperclip."""

    @property
    def name(self) -> str:
        return "pyperclip"

    async def write(self, text: str) -> bool:
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, pyperclip.copy, text)
            return True
        except (pyperclip.PyperclipException, OSError) as e:
            log_debug("pyperclip unavailable", error=str(e))
            return False


class ShellClipboardProvider(ClipboardProvider):
    """Pipe the text into an OS command that fills the clipboard."""

    def __init__(
        self,
        name: str,
        command: Sequence[str],
        platforms: Optional[Tuple[str, ...]] = None,
        exclude: Tuple[str, ...] = (),
        timeout: float = 5.0,
    ):
        """
        Args:
            name: Provider name for logs
            command: argv of the command; the text is written to its stdin
            platforms: ``sys.platform`` values the command exists on (None = any)
            exclude: ``sys.platform`` values it never runs on
            timeout: Seconds to wait for the command to exit
        """
        self._name = name
        self.command = list(command)
        self.platforms = platforms
        self.exclude = exclude
        self.timeout = timeout

    @property
    def name(self) -> str:
        return self._name

    def supports(self, platform: str) -> bool:
        if platform in self.exclude:
            return False
        return self.platforms is None or platform in self.platforms

    async def write(self, text: str) -> bool:
        # No output pipes: xclip forks a child that keeps the selection and
        # would hold them open until another app takes the clipboard.
        try:
            proc = await asyncio.create_subprocess_exec(
                *self.command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            log_debug("Clipboard command failed to start", provider=self.name, error=str(e))
            return False

        try:
            returncode = await asyncio.wait_for(self._feed(proc, text), self.timeout)
        except asyncio.TimeoutError:
            log_warning("Clipboard command timed out", provider=self.name, timeout=self.timeout)
            await self._kill(proc)
            return False
        except OSError as e:
            # Broken pipe when the command exits without reading its input
            log_debug("Clipboard command rejected input", provider=self.name, error=str(e))
            await self._kill(proc)
            return False

        if returncode != 0:
            log_debug("Clipboard command exited with error", provider=self.name, returncode=returncode)
            return False
        return True

    @staticmethod
    async def _feed(proc: asyncio.subprocess.Process, text: str) -> int:
        proc.stdin.write(text.encode("utf-8"))
        await proc.stdin.drain()
        proc.stdin.close()
        return await proc.wait()

    @staticmethod
    async def _kill(proc: asyncio.subprocess.Process) -> None:
        if proc.returncode is not None:
            return
        try:
            proc.kill()
        except ProcessLookupError:
            return
        await proc.wait()


def build_default_providers() -> List[ClipboardProvider]:
    """Build the default ordered chain: library first, then one command per OS family."""
    return [
        PyperclipProvider(),
        ShellClipboardProvider(
            "powershell",
            ["powershell", "-NoProfile", "-Command", "$input | Set-Clipboard"],
            platforms=WINDOWS,
        ),
        ShellClipboardProvider("pbcopy", ["pbcopy"], platforms=MACOS),
        ShellClipboardProvider(
            "xclip",
            ["xclip", "-selection", "clipboard"],
            exclude=WINDOWS + MACOS,
        ),
    ]


class ClipboardChain:
    """Try each provider supported on this platform until one succeeds.

    Args:
        providers: Ordered providers. Defaults to ``build_default_providers()``.
        platform: Platform to filter on. Defaults to ``sys.platform``.
    """

    def __init__(self, providers: Optional[List[ClipboardProvider]] = None, platform: Optional[str] = None):
        self.providers = providers if providers is not None else build_default_providers()
        self.platform = platform or sys.platform

    async def write(self, text: str) -> Optional[str]:
        """Copy ``text`` with the first working provider.

        Returns:
            Name of the provider that succeeded, or None if all failed
        """
        for provider in self.providers:
            if not provider.supports(self.platform):
                continue
            try:
                copied = await provider.write(text)
            except Exception as e:
                log_debug("Clipboard provider raised", provider=provider.name, error=str(e))
                continue
            if copied:
                log_debug("Prompt copied to clipboard", provider=provider.name)
                return provider.name

        log_warning("No clipboard provider succeeded", platform=self.platform)
        return None
