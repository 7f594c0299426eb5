#!/usr/bin/env python3
"""
Durable offline queue for undelivered heartbeats.
Handles all file I/O for the queue; storage errors never reach the caller.
"""

import json
from pathlib import Path
from typing import Awaitable, Callable, List, Optional

from .log import AgentLogger
from .models import Heartbeat

QUEUE_FILENAME = "offline_heartbeats.json"


class OfflineQueueStore:
    """Reads and writes the queue as a JSON array in the data directory."""

    def __init__(self, data_dir: str, logger: Optional[AgentLogger] = None):
        self.data_dir = Path(data_dir)
        self.queue_file = self.data_dir / QUEUE_FILENAME
        self.logger = logger or AgentLogger(verbose=False)

    def load(self) -> List[Heartbeat]:
        """Load queued heartbeats. Any failure degrades to an empty queue."""
        if not self.queue_file.exists():
            return []

        try:
            with open(self.queue_file, "r", encoding="utf-8") as f:
                records = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            self.logger.error(f"Error loading offline heartbeats: {e}")
            return []

        if not isinstance(records, list):
            self.logger.error(
                f"Error loading offline heartbeats: expected a list in {self.queue_file}"
            )
            return []

        heartbeats = []
        for record in records:
            try:
                heartbeats.append(Heartbeat.from_dict(record))
            except (ValueError, TypeError) as e:
                self.logger.warning(f"Skipping malformed offline heartbeat: {e}")

        self.logger.info(
            f"Loaded {len(heartbeats)} offline heartbeats from {self.queue_file}"
        )
        return heartbeats

    def save(self, heartbeats: List[Heartbeat]) -> bool:
        """Rewrite the queue file. Returns False if the write failed."""
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            tmp_file = self.queue_file.with_suffix(".json.tmp")
            with open(tmp_file, "w", encoding="utf-8") as f:
                json.dump([hb.to_dict() for hb in heartbeats], f, ensure_ascii=False)
            tmp_file.replace(self.queue_file)
            return True
        except OSError as e:
            self.logger.error(f"Error saving offline heartbeats: {e}")
            return False


class OfflineQueue:
    """Ordered, persisted queue of heartbeats awaiting delivery."""

    def __init__(
        self,
        store: OfflineQueueStore,
        batch_size: int = 1000,
        logger: Optional[AgentLogger] = None,
    ):
        self.store = store
        self.batch_size = max(1, batch_size)
        self.logger = logger or AgentLogger(verbose=False)
        self._items: List[Heartbeat] = store.load()
        self._flushing = False

    def __len__(self) -> int:
        return len(self._items)

    @property
    def is_flushing(self) -> bool:
        return self._flushing

    def snapshot(self) -> List[Heartbeat]:
        return list(self._items)

    def enqueue(self, heartbeat: Heartbeat) -> None:
        """Append a heartbeat and persist immediately."""
        self._items.append(heartbeat)
        self.store.save(self._items)
        self.logger.log_heartbeat_queued(len(self._items))

    async def flush(
        self, send_batch: Callable[[List[Heartbeat]], Awaitable[bool]]
    ) -> int:
        """
        Replay queued heartbeats in order, one batch at a time.

        A batch stays at the front of the queue until ``send_batch`` reports
        success, so a failure (or a crash mid-request) leaves the queue as it
        was. Stops at the first failed batch. Overlapping calls return 0
        without sending. Returns the number of heartbeats delivered.
        """
        if self._flushing:
            return 0

        self._flushing = True
        delivered = 0
        try:
            while self._items:
                batch = self._items[: self.batch_size]
                self.logger.info(
                    f"Attempting to sync {len(batch)} of "
                    f"{len(self._items)} offline heartbeats"
                )

                if not await send_batch(batch):
                    # Batch is still at the front; persist to be safe
                    self.store.save(self._items)
                    break

                # Only flush removes from the front, enqueue only appends
                del self._items[: len(batch)]
                self.store.save(self._items)
                delivered += len(batch)
                self.logger.info(
                    f"Successfully synced {len(batch)} offline heartbeats. "
                    f"{len(self._items)} remaining."
                )
        finally:
            self._flushing = False

        return delivered
