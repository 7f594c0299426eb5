#!/usr/bin/env python3
"""
Heartbeat emission rules.
Decides, per activity signal or timer tick, whether a heartbeat is due and
builds it.
"""

import time
from datetime import datetime, timezone
from typing import Callable, Optional

from .activity_monitor import ActivityMonitor
from .config import Config
from .http_sync import DeviceIdentifier
from .log import AgentLogger
from .models import DocumentInfo, Heartbeat
from .state import StatusListener

ProjectResolver = Callable[[DocumentInfo], Optional[str]]
BranchResolver = Callable[[DocumentInfo], Optional[str]]


class HeartbeatEmitter:
    """Builds at most one heartbeat per trigger evaluation."""

    def __init__(
        self,
        config: Config,
        monitor: ActivityMonitor,
        project_resolver: ProjectResolver,
        branch_resolver: Optional[BranchResolver] = None,
        status: Optional[StatusListener] = None,
        logger: Optional[AgentLogger] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config
        self.monitor = monitor
        self.project_resolver = project_resolver
        self.branch_resolver = branch_resolver
        self.status = status or StatusListener()
        self.logger = logger or AgentLogger(verbose=False)
        self.clock = clock

        self.os_name = DeviceIdentifier.get_os_name()
        self.last_heartbeat_time: Optional[float] = None
        self.last_file: Optional[str] = None
        self.heartbeat_count = 0

    def _interval_elapsed(self, now: float) -> bool:
        if self.last_heartbeat_time is None:
            return True
        return now - self.last_heartbeat_time >= self.config.heartbeat_interval

    def evaluate(self, force: bool = False) -> Optional[Heartbeat]:
        """Activity trigger. Forced triggers skip the interval check."""
        document = self.monitor.active_document
        if document is None:
            self.logger.info("No active document info, skipping heartbeat")
            return None

        if not force:
            file_changed = document.path != self.last_file
            if not (file_changed or self._interval_elapsed(self.clock())):
                return None

        return self._build(document)

    def evaluate_timer(self) -> Optional[Heartbeat]:
        """Periodic trigger. Requires an active document and an active user."""
        document = self.monitor.active_document
        if document is None or not self.monitor.is_effectively_active():
            self.logger.info("User inactive or no active document, skipping heartbeat")
            if not self.monitor.is_effectively_active():
                self.status.stop_tracking()
            return None

        return self._build(document)

    def _build(self, document: DocumentInfo) -> Optional[Heartbeat]:
        if not self.config.enabled:
            self.logger.info("Tracking disabled, skipping heartbeat")
            return None
        if not self.config.api_key:
            self.logger.info("No API key configured, skipping heartbeat")
            return None
        if not self.config.base_url:
            self.logger.info("No base URL configured, skipping heartbeat")
            return None

        project = self.project_resolver(document)
        if not project:
            self.logger.info(f"No project found for {document.path}, skipping heartbeat")
            return None

        branch = self.branch_resolver(document) if self.branch_resolver else None

        now = self.clock()
        # Keep timestamps non-decreasing if the wall clock steps back
        if self.last_heartbeat_time is not None and now < self.last_heartbeat_time:
            now = self.last_heartbeat_time

        self.last_heartbeat_time = now
        self.last_file = document.path
        self.heartbeat_count += 1

        heartbeat = Heartbeat(
            timestamp=_iso_utc(now),
            project=project,
            language=document.language,
            file=document.file,
            branch=branch,
            editor=self.config.editor,
            os=self.os_name,
        )
        self.logger.info(
            f"Preparing heartbeat #{self.heartbeat_count} for file: {heartbeat.file} "
            f"(project: {project}, language: {heartbeat.language})"
        )
        return heartbeat


def _iso_utc(epoch_seconds: float) -> str:
    stamp = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")
