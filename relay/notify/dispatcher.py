"""Fan a notification event out to clipboard, desktop toast and console.

Transports are independent: a failing clipboard does not stop the toast, and
neither stops the console banner, which is always written last.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, TextIO

from relay.config import Config
from relay.events import NotificationEvent
from relay.notify.clipboard import ClipboardChain
from relay.notify.console import print_banner
from relay.notify.desktop import DesktopNotifier
from relay.utils.logger import log_dispatch, log_error

PROMPT_TEMPLATE = (
    "{agent} has a message for you. Check .ai/dialogue.json and .handoff/collab.json, "
    "then respond to continue the conversation."
)
TOAST_TEMPLATE = "Message from {agent} - paste to continue"


def build_prompt(from_agent: str, context: str = "") -> str:
    """Compose the paste-ready prompt; the context clause is omitted when empty."""
    prompt = PROMPT_TEMPLATE.format(agent=from_agent)
    if context:
        prompt += f" Context: {context}"
    return prompt


@dataclass
class DispatchResult:
    """Outcome of a single dispatch.

    Attributes:
        prompt: Text that was copied / printed.
        clipboard_provider: Provider that filled the clipboard, None when all
            failed or the clipboard is disabled.
        toast_shown: Whether the desktop toast backend accepted the message.
    """

    prompt: str
    clipboard_provider: Optional[str] = None
    toast_shown: bool = False


class NotificationDispatcher:
    """Announce events on every configured transport.

    Args:
        clipboard: Clipboard chain, or None to skip the clipboard.
        desktop: Desktop notifier, or None to skip the toast.
        stream: Stream for the console banner (stdout by default).
    """

    def __init__(
        self,
        clipboard: Optional[ClipboardChain] = None,
        desktop: Optional[DesktopNotifier] = None,
        stream: Optional[TextIO] = None,
    ):
        self.clipboard = clipboard
        self.desktop = desktop
        self.stream = stream

    @classmethod
    def from_config(cls, config: Config) -> "NotificationDispatcher":
        return cls(
            clipboard=ClipboardChain() if config.clipboard_enabled else None,
            desktop=DesktopNotifier(title=config.toast_title) if config.toast_enabled else None,
        )

    async def dispatch(self, event: NotificationEvent) -> DispatchResult:
        prompt = build_prompt(event.from_agent, event.context)
        result = DispatchResult(prompt=prompt)

        if self.clipboard is not None:
            try:
                result.clipboard_provider = await self.clipboard.write(prompt)
            except Exception as e:
                log_error("Clipboard transport failed", error=str(e))

        if self.desktop is not None:
            try:
                result.toast_shown = await self.desktop.notify(TOAST_TEMPLATE.format(agent=event.from_agent))
            except Exception as e:
                log_error("Desktop transport failed", error=str(e))

        print_banner(event.from_agent, prompt, stream=self.stream)

        log_dispatch(
            event.from_agent,
            event.channel or "unknown",
            signal=event.signal,
            clipboard_provider=result.clipboard_provider,
            toast_shown=result.toast_shown,
            emitted_at=event.emitted_at.isoformat(),
        )
        return result
