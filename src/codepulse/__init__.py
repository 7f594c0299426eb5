"""
Codepulse - a client-side coding activity heartbeat agent.

This package turns editor activity signals into heartbeats and delivers
them to a time-tracking service, with:

- Focus and inactivity aware activity detection
- Heartbeat emission on edits, saves, editor switches and a fixed timer
- Durable offline queue replayed in ordered batches
- Daily total reconciliation against the server's summary
"""

__version__ = "1.0.0"
__license__ = "MIT"

from .core import HeartbeatAgent
from .models import DailyTotal, DocumentInfo, Heartbeat
from .state import ConnectivityState, StatusListener

__all__ = [
    "HeartbeatAgent",
    "Heartbeat",
    "DocumentInfo",
    "DailyTotal",
    "ConnectivityState",
    "StatusListener",
]
