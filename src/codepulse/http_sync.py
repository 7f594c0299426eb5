#!/usr/bin/env python3
"""
HTTP client for the heartbeat service.
Handles all HTTP communication with the remote endpoints and classifies
every response as success, invalid credentials or a retryable failure.
"""

import math
import platform
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import requests

from .log import AgentLogger
from .models import Heartbeat


class DeliveryOutcome(Enum):
    SUCCESS = "success"
    INVALID_CREDENTIALS = "invalid_credentials"
    FAILURE = "failure"

    @classmethod
    def from_status(cls, status_code: int) -> "DeliveryOutcome":
        if 200 <= status_code < 300:
            return cls.SUCCESS
        if status_code == 401:
            return cls.INVALID_CREDENTIALS
        return cls.FAILURE


@dataclass(frozen=True)
class SummaryResult:
    """Outcome of a daily summary fetch."""

    outcome: DeliveryOutcome
    total_seconds: Optional[int] = None


class DeviceIdentifier:
    """Static identifiers of the host environment."""

    OS_NAMES = {"Darwin": "macOS", "Windows": "Windows", "Linux": "Linux"}

    @classmethod
    def get_os_name(cls) -> str:
        system = platform.system()
        return cls.OS_NAMES.get(system, system or "unknown")


def parse_summary_total(payload: Any) -> int:
    """
    Extract today's total seconds from a /stats response body.

    Accepts either a bare array of daily summaries or an object holding
    them under ``summaries``. An empty array means nothing tracked today.
    Raises ValueError on any other shape or a non-finite total.
    """
    summaries = payload.get("summaries") if isinstance(payload, dict) else payload
    if not isinstance(summaries, list):
        raise ValueError(f"Unexpected summary payload: {payload!r}")
    if not summaries:
        return 0

    today = summaries[0]
    if not isinstance(today, dict) or "totalSeconds" not in today:
        raise ValueError(f"Summary entry has no totalSeconds: {today!r}")
    try:
        total = float(today["totalSeconds"])
    except (TypeError, ValueError, OverflowError):
        raise ValueError(f"totalSeconds is not a number: {today!r}")
    if not math.isfinite(total):
        raise ValueError(f"totalSeconds is not finite: {today!r}")
    return int(total)


class HttpSyncClient:
    """HTTP client for delivering heartbeats and reading summaries."""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",  # nosec B107
        api_prefix: str = "/api/external",
        timeout: Tuple[float, float] = (5, 15),
        logger: Optional[AgentLogger] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.api_prefix = api_prefix
        self.timeout = timeout
        self.logger = logger or AgentLogger(verbose=False)

    def url_for(self, path: str) -> str:
        return f"{self.base_url}{self.api_prefix}{path}"

    def _get_headers(self) -> Dict[str, str]:
        """Get request headers including authentication if configured."""
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _post(self, path: str, payload: Any, label: str) -> DeliveryOutcome:
        try:
            response = requests.post(
                self.url_for(path),
                json=payload,
                headers=self._get_headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            self.logger.info(f"Network error sending {label}: {e}")
            return DeliveryOutcome.FAILURE

        outcome = DeliveryOutcome.from_status(response.status_code)
        if outcome is DeliveryOutcome.SUCCESS:
            self.logger.info(f"Sent {label} (HTTP {response.status_code})")
        else:
            self.logger.info(
                f"Sending {label} failed: HTTP {response.status_code} - {response.text}"
            )
        return outcome

    def send_one(self, heartbeat: Heartbeat) -> DeliveryOutcome:
        """POST a single heartbeat."""
        return self._post("/heartbeat", heartbeat.to_dict(), "heartbeat")

    def send_batch(self, heartbeats: List[Heartbeat]) -> DeliveryOutcome:
        """POST a batch of heartbeats as one JSON array."""
        payload = [heartbeat.to_dict() for heartbeat in heartbeats]
        return self._post("/batch", payload, f"batch of {len(heartbeats)} heartbeats")

    def fetch_daily_summary(self, midnight_offset_seconds: int) -> SummaryResult:
        """GET today's total, with the local UTC offset for the day boundary."""
        params = {
            "timeRange": "today",
            "midnightOffsetSeconds": str(midnight_offset_seconds),
        }
        try:
            response = requests.get(
                self.url_for("/stats"),
                params=params,
                headers=self._get_headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            self.logger.info(f"Network error fetching daily summary: {e}")
            return SummaryResult(DeliveryOutcome.FAILURE)

        outcome = DeliveryOutcome.from_status(response.status_code)
        if outcome is not DeliveryOutcome.SUCCESS:
            self.logger.info(
                f"Daily summary request failed: HTTP {response.status_code}"
            )
            return SummaryResult(outcome)

        try:
            total = parse_summary_total(response.json())
        except (ValueError, TypeError, OverflowError) as e:
            # requests' JSONDecodeError subclasses ValueError
            self.logger.info(f"Invalid daily summary response: {e}")
            return SummaryResult(DeliveryOutcome.FAILURE)

        return SummaryResult(DeliveryOutcome.SUCCESS, total)

    def fetch_user_settings(self) -> Optional[Dict[str, Any]]:
        """GET the user's remote settings, or None on any failure."""
        try:
            response = requests.get(
                self.url_for("/user"),
                headers=self._get_headers(),
                timeout=self.timeout,
            )
            if response.status_code != 200:
                self.logger.info(
                    f"Error fetching user settings: HTTP {response.status_code}"
                )
                return None
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            self.logger.info(f"Failed to fetch user settings: {e}")
            return None

        return data if isinstance(data, dict) else None

    def test_connection(self) -> bool:
        """Test connection to the heartbeat service."""
        try:
            response = requests.get(self.base_url, timeout=(3, 10))
            return response.status_code < 500
        except requests.exceptions.RequestException:
            return False


class SyncResultCollector:
    """Collects heartbeat delivery counters."""

    def __init__(self):
        self.results = {"sent": 0, "succeeded": 0, "failed": 0, "queued": 0}

    def record_sent(self):
        self.results["sent"] += 1

    def record_success(self, count: int = 1):
        self.results["succeeded"] += count

    def record_failure(self, count: int = 1):
        self.results["failed"] += count

    def record_queued(self):
        self.results["queued"] += 1

    def get_results(self) -> Dict[str, int]:
        """Get a copy of the counters."""
        return self.results.copy()
