#!/usr/bin/env python3
"""
Connectivity and credential state shared by the delivery path and the UI.
"""

from typing import Callable, Optional

from .log import AgentLogger
from .utils import format_duration


class StatusListener:
    """Outbound UI interface. The default implementation ignores everything."""

    def update_time(self, seconds: int) -> None:
        pass

    def start_tracking(self) -> None:
        pass

    def stop_tracking(self) -> None:
        pass

    def set_online(self, online: bool) -> None:
        pass

    def set_credentials_valid(self, valid: bool) -> None:
        pass


class ConsoleStatus(StatusListener):
    """Reports status changes through the agent logger."""

    def __init__(self, logger: AgentLogger):
        self.logger = logger
        self.total_seconds = 0
        self.is_tracking = False
        self.online = True
        self.credentials_valid = True

    @property
    def label(self) -> str:
        text = f"{format_duration(self.total_seconds)} coding"
        if not self.credentials_valid:
            return f"{text} (invalid API key)"
        if not self.online:
            return f"{text} (offline)"
        return text

    def update_time(self, seconds: int) -> None:
        self.total_seconds = seconds
        self.logger.info(f"Today: {self.label}")

    def start_tracking(self) -> None:
        if not self.is_tracking:
            self.is_tracking = True
            self.logger.info("Started time tracking")

    def stop_tracking(self) -> None:
        if self.is_tracking:
            self.is_tracking = False
            self.logger.info("Stopped time tracking")

    def set_online(self, online: bool) -> None:
        self.online = online
        self.logger.info("Connection restored" if online else "Working offline")

    def set_credentials_valid(self, valid: bool) -> None:
        self.credentials_valid = valid
        if not valid:
            self.logger.warning("API key was rejected by the server")


class ConnectivityState:
    """Edge-triggered online/credential flags.

    Setters only notify the listener when the value actually changes. Going
    from offline to online also fires ``on_reconnect``.
    """

    def __init__(
        self,
        listener: Optional[StatusListener] = None,
        on_reconnect: Optional[Callable[[], None]] = None,
    ):
        self.online = True
        self.credentials_valid = True
        self.listener = listener or StatusListener()
        self.on_reconnect = on_reconnect

    def set_online(self, online: bool) -> bool:
        """Update the online flag. Returns True if it changed."""
        if online == self.online:
            return False

        self.online = online
        self.listener.set_online(online)
        if online and self.on_reconnect:
            self.on_reconnect()
        return True

    def set_credentials_valid(self, valid: bool) -> bool:
        """Update the credential flag. Returns True if it changed."""
        if valid == self.credentials_valid:
            return False

        self.credentials_valid = valid
        self.listener.set_credentials_valid(valid)
        return True
