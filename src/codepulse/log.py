#!/usr/bin/env python3
"""
Console logging for the heartbeat agent.
Every line carries a local timestamp; informational output can be silenced.
"""

from datetime import datetime


class AgentLogger:
    """Handles logging and output for the heartbeat agent."""

    def __init__(self, verbose: bool = True):
        self.verbose = verbose

    @staticmethod
    def _stamp() -> str:
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    def info(self, message: str) -> None:
        """Log an informational message (verbose mode only)."""
        if not self.verbose:
            return

        print(f"[{self._stamp()}] {message}")

    def warning(self, message: str) -> None:
        """Log a warning. Always printed."""
        print(f"[{self._stamp()}] WARNING: {message}")

    def error(self, message: str) -> None:
        """Log an error. Always printed."""
        print(f"[{self._stamp()}] ERROR: {message}")

    def log_heartbeat_sent(self, count: int) -> None:
        self.info(f"Heartbeat #{count} sent successfully")

    def log_heartbeat_queued(self, queue_length: int) -> None:
        self.info(
            f"Queued heartbeat for offline sending. "
            f"Total offline heartbeats: {queue_length}"
        )

    def log_stats(self, stats: dict, queue_length: int) -> None:
        """Log the periodic heartbeat statistics line."""
        self.info(
            f"Heartbeat stats - Total: {stats['sent']}, "
            f"Success: {stats['succeeded']}, Failed: {stats['failed']}, "
            f"Offline: {queue_length}"
        )
