"""Data records shared by the heartbeat agent components."""

import os
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Heartbeat:
    """A single timestamped coding-activity event.

    Optional fields left as None are omitted from the wire form, so new
    fields can be added without breaking older servers.
    """

    timestamp: str
    project: Optional[str] = None
    language: Optional[str] = None
    file: Optional[str] = None
    branch: Optional[str] = None
    editor: Optional[str] = None
    os: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        """Serialize to the JSON body shape, dropping unset fields."""
        return {key: value for key, value in asdict(self).items() if value is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Heartbeat":
        """Build a heartbeat from a decoded JSON object.

        Unknown keys are ignored. Raises ValueError when the record has no
        timestamp.
        """
        if not isinstance(data, dict) or not data.get("timestamp"):
            raise ValueError(f"Not a heartbeat record: {data!r}")

        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})


@dataclass(frozen=True)
class DocumentInfo:
    """The document currently focused in the host editor."""

    path: str
    language: Optional[str] = None

    @property
    def file(self) -> str:
        return os.path.basename(self.path)


@dataclass
class DailyTotal:
    """Today's tracked seconds as shown to the user."""

    server_acknowledged_seconds: int = 0
    unsynced_local_seconds: int = 0

    @property
    def display_seconds(self) -> int:
        return self.server_acknowledged_seconds + self.unsynced_local_seconds

    def add_local(self, seconds: int) -> None:
        """Accumulate locally observed coding time."""
        if seconds > 0:
            self.unsynced_local_seconds += seconds

    def reset_unsynced(self) -> None:
        self.unsynced_local_seconds = 0

    def acknowledge(self, server_seconds: int) -> None:
        """Adopt the server's authoritative total for today."""
        self.server_acknowledged_seconds = max(0, int(server_seconds))
        self.unsynced_local_seconds = 0
