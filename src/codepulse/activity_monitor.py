#!/usr/bin/env python3
"""
Activity monitoring for the heartbeat agent.
Turns host editor signals into an active document and an active/idle judgment.
"""

import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .models import DailyTotal, DocumentInfo
from .state import StatusListener

DEFAULT_INACTIVITY_MINUTES = 15


@dataclass
class MonitorConfig:
    """Configuration for ActivityMonitor."""

    inactivity_threshold: float = DEFAULT_INACTIVITY_MINUTES * 60  # seconds


class ActivityMonitor:
    """Tracks the focused document and whether the user is effectively active."""

    def __init__(
        self,
        daily_total: DailyTotal,
        inactivity_minutes: float = DEFAULT_INACTIVITY_MINUTES,
        status: Optional[StatusListener] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = MonitorConfig(inactivity_threshold=inactivity_minutes * 60)
        self.daily_total = daily_total
        self.status = status or StatusListener()
        self.clock = clock

        self.active_document: Optional[DocumentInfo] = None
        self.window_focused = True
        self.last_interaction_time = clock()

    @property
    def inactivity_threshold(self) -> float:
        """Inactivity threshold in seconds."""
        return self.config.inactivity_threshold

    def set_inactivity_threshold(self, minutes: float) -> bool:
        """Change the threshold. Non-positive and non-finite values are ignored."""
        try:
            minutes = float(minutes)
        except (TypeError, ValueError):
            return False
        if not math.isfinite(minutes) or minutes <= 0:
            return False

        self.config.inactivity_threshold = minutes * 60
        return True

    def set_active_document(self, path: str, language: Optional[str] = None) -> None:
        self.active_document = DocumentInfo(path=path, language=language)

    def is_effectively_active(self) -> bool:
        """Window focused and within the threshold of the last interaction."""
        elapsed = self.clock() - self.last_interaction_time
        return self.window_focused and elapsed < self.inactivity_threshold

    def record_interaction(self) -> int:
        """
        Mark the user as interacting now.

        The gap since the previous interaction counts as coding time only
        while focused and strictly below the threshold; longer gaps are idle.
        Returns the number of seconds accumulated.
        """
        now = self.clock()
        added = 0

        if self.is_effectively_active():
            added = int(now - self.last_interaction_time)
            if added > 0:
                self.daily_total.add_local(added)
                self.status.update_time(self.daily_total.display_seconds)

        self.last_interaction_time = now
        self.status.start_tracking()
        return added

    def set_window_focused(self, focused: bool) -> bool:
        """Apply a focus change. Returns the previous focus state."""
        was_focused = self.window_focused

        if was_focused and not focused:
            # Account for time up to the blur, then stop the live counter
            self.record_interaction()
            self.window_focused = False
            self.status.stop_tracking()
        elif focused and not was_focused:
            self.window_focused = True
            self.last_interaction_time = self.clock()
            self.status.start_tracking()

        return was_focused
