#!/usr/bin/env python3
"""
Summary reconciliation for the heartbeat agent.
Merges the server's authoritative daily total with unsynced local seconds.
"""

import asyncio
from typing import Callable, Optional

from .config import Config
from .http_sync import DeliveryOutcome, HttpSyncClient, SummaryResult
from .log import AgentLogger
from .models import DailyTotal
from .state import ConnectivityState, StatusListener
from .utils import utc_offset_seconds


class SummaryReconciler:
    """Fetches today's total and keeps the displayed counter in sync."""

    def __init__(
        self,
        config: Config,
        client: HttpSyncClient,
        daily_total: DailyTotal,
        state: ConnectivityState,
        status: Optional[StatusListener] = None,
        logger: Optional[AgentLogger] = None,
        offset_provider: Callable[[], int] = utc_offset_seconds,
    ):
        self.config = config
        self.client = client
        self.daily_total = daily_total
        self.state = state
        self.status = status or StatusListener()
        self.logger = logger or AgentLogger(verbose=False)
        self.offset_provider = offset_provider
        self._fetching = False
        self._refetch_pending = False

    async def reconcile(self) -> bool:
        """
        Fetch today's summary and merge it. Returns True on success.

        On failure the last acknowledged total is kept, so the displayed
        value never drops below it.
        """
        if not self.config.enabled or not self.config.is_configured():
            self.logger.info("Not configured, skipping daily summary fetch")
            return False
        if self._fetching:
            # The fetch in flight may predate the caller's delivery
            self._refetch_pending = True
            return False

        self._fetching = True
        try:
            while True:
                self._refetch_pending = False
                offset = self.offset_provider()
                self.logger.info(f"Fetching daily summary (UTC offset {offset}s)")
                result = await asyncio.to_thread(
                    self.client.fetch_daily_summary, offset
                )
                self._apply(result)
                if not self._refetch_pending:
                    break
        finally:
            self._fetching = False
            self._refetch_pending = False

        return result.outcome is DeliveryOutcome.SUCCESS

    def _apply(self, result: SummaryResult) -> None:
        if result.outcome is DeliveryOutcome.SUCCESS:
            self.daily_total.acknowledge(result.total_seconds or 0)
            self.state.set_credentials_valid(True)
            self.state.set_online(True)
            self.logger.info(
                f"Daily summary received: {self.daily_total.server_acknowledged_seconds} "
                f"seconds total"
            )
        elif result.outcome is DeliveryOutcome.INVALID_CREDENTIALS:
            self.state.set_credentials_valid(False)
        else:
            self.logger.info("Daily summary unavailable, keeping last known total")
            self.state.set_online(False)

        self.status.update_time(self.daily_total.display_seconds)
