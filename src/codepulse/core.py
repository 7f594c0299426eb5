#!/usr/bin/env python3
"""
Codepulse heartbeat agent.
Turns editor activity into heartbeats, delivers them, and keeps undelivered
ones in a durable offline queue until the service accepts them.
"""

import asyncio
import time
from typing import Callable, Coroutine, Iterable, List, Optional, Set

from .activity_monitor import ActivityMonitor
from .config import Config, get_config
from .emitter import BranchResolver, HeartbeatEmitter, ProjectResolver
from .http_sync import DeliveryOutcome, HttpSyncClient, SyncResultCollector
from .log import AgentLogger
from .models import DailyTotal, Heartbeat
from .project import WorkspaceProjectResolver
from .state import ConnectivityState, ConsoleStatus, StatusListener
from .storage import OfflineQueue, OfflineQueueStore
from .sync import SummaryReconciler
from .utils import format_duration


class HeartbeatAgent:
    """
    One agent per host session. Owns all mutable tracking state.

    Uses composition to delegate responsibilities to specialized classes;
    the host adapter only calls the ``on_*`` signal methods.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        status: Optional[StatusListener] = None,
        workspace_folders: Optional[Iterable[str]] = None,
        project_resolver: Optional[ProjectResolver] = None,
        branch_resolver: Optional[BranchResolver] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the agent.

        Args:
            config: Agent configuration. Defaults to the global config.
            status: UI collaborator receiving totals and state changes.
            workspace_folders: Folders used to resolve project names when no
                project_resolver is given.
            project_resolver: Maps the active document to a project name.
            branch_resolver: Maps the active document to a VCS branch.
            clock: Time source in epoch seconds.
        """
        self.config = config or get_config()
        self.logger = AgentLogger(verbose=self.config.verbose_logging)
        self.status = status or ConsoleStatus(self.logger)

        self.daily_total = DailyTotal()
        self.stats = SyncResultCollector()
        self.state = ConnectivityState(self.status, on_reconnect=self._schedule_flush)

        self.monitor = ActivityMonitor(
            self.daily_total,
            inactivity_minutes=self.config.keystroke_timeout,
            status=self.status,
            clock=clock,
        )
        self.emitter = HeartbeatEmitter(
            self.config,
            self.monitor,
            project_resolver or WorkspaceProjectResolver(workspace_folders),
            branch_resolver=branch_resolver,
            status=self.status,
            logger=self.logger,
            clock=clock,
        )
        self.client = HttpSyncClient(
            self.config.base_url,
            self.config.api_key,
            api_prefix=self.config.api_prefix,
            timeout=self.config.request_timeout,
            logger=self.logger,
        )
        self.queue = OfflineQueue(
            OfflineQueueStore(str(self.config.data_dir), self.logger),
            batch_size=self.config.batch_size,
            logger=self.logger,
        )
        self.reconciler = SummaryReconciler(
            self.config,
            self.client,
            self.daily_total,
            self.state,
            status=self.status,
            logger=self.logger,
        )

        self.running = False
        self._loops: List[asyncio.Task] = []
        self._tasks: Set[asyncio.Task] = set()

    # Inbound signals from the host adapter

    def on_document_changed(self, path: str, language: Optional[str] = None) -> None:
        self.monitor.set_active_document(path, language)
        self.monitor.record_interaction()
        self._dispatch(self.emitter.evaluate())

    def on_document_saved(self, path: str, language: Optional[str] = None) -> None:
        self.monitor.set_active_document(path, language)
        self.monitor.record_interaction()
        self._dispatch(self.emitter.evaluate(force=True))

    def on_active_document_switched(
        self, path: str, language: Optional[str] = None
    ) -> None:
        self.logger.info(f"Editor changed: {path} ({language})")
        self.monitor.set_active_document(path, language)
        self.monitor.record_interaction()
        self._dispatch(self.emitter.evaluate(force=True))

    def on_window_focus_changed(self, focused: bool) -> None:
        was_focused = self.monitor.set_window_focused(focused)
        self.logger.info(f"Window focus state changed: {was_focused} -> {focused}")
        if focused and not was_focused:
            self._dispatch(self.emitter.evaluate(force=True))

    # Delivery

    def apply_outcome(self, outcome: DeliveryOutcome) -> None:
        """Update shared state from a delivery outcome."""
        if outcome is DeliveryOutcome.SUCCESS:
            self.state.set_credentials_valid(True)
            self.state.set_online(True)
            self.daily_total.reset_unsynced()
            self.status.update_time(self.daily_total.display_seconds)
        elif outcome is DeliveryOutcome.INVALID_CREDENTIALS:
            self.state.set_credentials_valid(False)
        else:
            self.state.set_online(False)

    async def deliver(self, heartbeat: Heartbeat) -> DeliveryOutcome:
        """Send one heartbeat; anything but success lands in the offline queue."""
        self.stats.record_sent()
        count = self.stats.results["sent"]
        outcome = await asyncio.to_thread(self.client.send_one, heartbeat)
        self.apply_outcome(outcome)

        if outcome is DeliveryOutcome.SUCCESS:
            self.stats.record_success()
            self.logger.log_heartbeat_sent(count)
            if len(self.queue):
                self._schedule_flush()
            self._spawn(self.reconcile())
        else:
            self.stats.record_failure()
            self.stats.record_queued()
            self.logger.info(f"Heartbeat #{count} failed ({outcome.value})")
            self.queue.enqueue(heartbeat)

        return outcome

    async def _send_batch(self, batch: List[Heartbeat]) -> bool:
        outcome = await asyncio.to_thread(self.client.send_batch, batch)
        self.apply_outcome(outcome)
        if outcome is DeliveryOutcome.SUCCESS:
            self.stats.record_success(len(batch))
            return True

        self.stats.record_failure(len(batch))
        return False

    async def flush_offline_queue(self) -> int:
        """Replay the offline queue. Returns the number delivered."""
        if not self.config.enabled or not self.config.is_configured():
            return 0
        if not len(self.queue):
            return 0

        delivered = await self.queue.flush(self._send_batch)
        if delivered:
            await self.reconcile()
        return delivered

    async def reconcile(self) -> bool:
        return await self.reconciler.reconcile()

    async def load_user_settings(self) -> None:
        """Apply the remote inactivity timeout, if the server provides one."""
        if not self.config.is_configured():
            self.logger.info("Can't fetch user settings: missing API key or base URL")
            return

        settings = await asyncio.to_thread(self.client.fetch_user_settings)
        if settings and settings.get("keystrokeTimeout") is not None:
            if self.monitor.set_inactivity_threshold(settings["keystrokeTimeout"]):
                self.logger.info(
                    f"Keystroke timeout fetched from API: "
                    f"{settings['keystrokeTimeout']} minutes"
                )

    def update_credentials(
        self, api_key: Optional[str] = None, base_url: Optional[str] = None
    ) -> None:
        """Swap in a new API key or base URL for subsequent requests."""
        if api_key is not None:
            self.config.api_key = api_key
            self.client.api_key = api_key
        if base_url is not None:
            self.config.base_url = base_url
            self.client.base_url = self.config.base_url
        self.logger.info("Credentials updated")

    # Task plumbing

    def _spawn(self, coro: Coroutine) -> Optional[asyncio.Task]:
        try:
            task = asyncio.get_running_loop().create_task(coro)
        except RuntimeError:
            coro.close()
            return None

        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _dispatch(self, heartbeat: Optional[Heartbeat]) -> None:
        """Deliver in the background so the caller never waits on the network."""
        if heartbeat is None:
            return
        if self._spawn(self.deliver(heartbeat)) is None:
            # No event loop to send from; keep it for the next flush
            self.queue.enqueue(heartbeat)

    def _schedule_flush(self) -> None:
        self._spawn(self.flush_offline_queue())

    async def _heartbeat_tick(self) -> None:
        self._dispatch(self.emitter.evaluate_timer())

    async def _summary_tick(self) -> None:
        await self.reconcile()
        self.logger.log_stats(self.stats.get_results(), len(self.queue))

    async def _run_periodic(
        self, interval: float, callback: Callable[[], Coroutine], name: str
    ) -> None:
        while self.running:
            await asyncio.sleep(interval)
            try:
                await callback()
            except Exception as e:
                self.logger.error(f"Error in {name} loop: {e}")

    # Lifecycle

    async def start(self) -> None:
        """Load settings, replay the queue, fetch the total, start timers."""
        if self.running:
            return

        self.running = True
        self.logger.info("Initializing heartbeat agent")

        await self.load_user_settings()
        await self.flush_offline_queue()
        await self.reconcile()

        loop = asyncio.get_running_loop()
        self._loops = [
            loop.create_task(
                self._run_periodic(
                    self.config.heartbeat_interval, self._heartbeat_tick, "heartbeat"
                )
            ),
            loop.create_task(
                self._run_periodic(
                    self.config.flush_interval, self.flush_offline_queue, "flush"
                )
            ),
            loop.create_task(
                self._run_periodic(
                    self.config.summary_interval, self._summary_tick, "summary"
                )
            ),
        ]

    async def stop(self) -> None:
        """Stop timers and let in-flight requests finish or time out."""
        self.running = False
        for task in self._loops:
            task.cancel()
        await asyncio.gather(*self._loops, return_exceptions=True)
        self._loops = []

        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self.logger.info("Heartbeat agent stopped")


def main():
    """Command line interface for inspecting and flushing the agent."""
    import sys

    if len(sys.argv) == 1 or "--help" in sys.argv or "-h" in sys.argv:
        print("Codepulse")
        print("Usage: python -m codepulse [command] [options]")
        print("Commands:")
        print("  status    Show configuration and offline queue status")
        print("  flush     Send queued offline heartbeats now")
        print("  summary   Fetch today's tracked time")
        print("Options:")
        print("  --quiet, -q   Only print warnings and errors")
        print("\nEnvironment Variables:")
        print("  CODEPULSE_API_KEY     Bearer token for authentication")
        print("  CODEPULSE_BASE_URL    Service base URL")
        print("  CODEPULSE_DATA_DIR    Directory for the offline queue")
        return

    config = get_config()
    if "--quiet" in sys.argv or "-q" in sys.argv:
        config.verbose_logging = False

    command = sys.argv[1]
    agent = HeartbeatAgent(config=config, status=StatusListener())

    if command == "status":
        print("Codepulse Status:")
        print(f"  Endpoint: {config.base_url}{config.api_prefix}")
        print(f"  API key configured: {'yes' if config.api_key else 'no'}")
        print(f"  Tracking enabled: {'yes' if config.enabled else 'no'}")
        print(f"  Offline heartbeats: {len(agent.queue)}")
        print(f"  Queue file: {agent.queue.store.queue_file}")
        reachable = agent.client.test_connection()
        print(f"  Server reachable: {'yes' if reachable else 'no'}")

    elif command == "flush":
        if not config.is_configured():
            print("Error: No API key or base URL configured.")
            return
        pending = len(agent.queue)
        delivered = asyncio.run(agent.flush_offline_queue())
        print(
            f"Flush completed: {delivered} delivered, "
            f"{pending - delivered} remaining"
        )

    elif command == "summary":
        if not config.is_configured():
            print("Error: No API key or base URL configured.")
            return
        if asyncio.run(agent.reconcile()):
            print(f"Today: {format_duration(agent.daily_total.display_seconds)}")
        else:
            print("Could not fetch today's summary")

    else:
        print(f"Unknown command: {command}")
        print("Use --help for usage information")


if __name__ == "__main__":
    main()
