"""Desktop toast through plyer."""

from __future__ import annotations

import asyncio

from plyer import notification

from relay.utils.logger import log_debug, log_info

APP_NAME = "agent-relay"


class DesktopNotifier:
    """Show a title + message toast; degrade to a log line on failure."""

    def __init__(self, title: str = "Agent Relay", timeout: int = 10):
        self.title = title
        self.timeout = timeout

    def _notify(self, message: str) -> None:
        notification.notify(
            title=self.title,
            message=message,
            app_name=APP_NAME,
            timeout=self.timeout,
        )

    async def notify(self, message: str) -> bool:
        """Show the toast.

        Returns:
            True if the toast backend accepted it, False if the fallback line was logged
        """
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._notify, message)
            return True
        except Exception as e:
            log_debug("Desktop notification failed", error=str(e))
            log_info(f"[notify-fallback] {message}")
            return False
