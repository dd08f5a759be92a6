"""Agent relay: watch handoff flags locally and on GitHub, alert on new ones.

Entry point lives in the root ``main.py``; ``relay.runner.run_relay`` wires the
local watcher and the remote poller to the notification dispatcher.
"""

from relay.events import NotificationEvent
from relay.signals import DEFAULT_SIGNALS, Signal, SignalRegistry

__all__ = ["NotificationEvent", "Signal", "SignalRegistry", "DEFAULT_SIGNALS"]
