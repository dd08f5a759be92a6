"""Notification transports for the relay.

- Clipboard: ordered provider chain (pyperclip, then one shell command per OS)
- Desktop: plyer toast with a log-line fallback
- Console: banner that is always printed
"""

from .clipboard import ClipboardChain, ClipboardProvider, PyperclipProvider, ShellClipboardProvider
from .desktop import DesktopNotifier
from .dispatcher import DispatchResult, NotificationDispatcher, build_prompt

__all__ = [
    "ClipboardChain",
    "ClipboardProvider",
    "PyperclipProvider",
    "ShellClipboardProvider",
    "DesktopNotifier",
    "DispatchResult",
    "NotificationDispatcher",
    "build_prompt",
]
