#!/usr/bin/env python3
"""
Small helpers shared across the agent: data directory, time formatting.
"""

import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


def get_data_directory() -> Path:
    """Return the per-user data directory, creating it if needed."""
    if sys.platform == "darwin":
        path = Path.home() / "Library" / "Application Support" / "Codepulse"
    elif sys.platform.startswith("win"):
        path = Path(os.getenv("APPDATA", Path.home())) / "Codepulse"
    else:
        path = Path.home() / ".codepulse"

    path.mkdir(parents=True, exist_ok=True)
    return path


def utc_offset_seconds(now: Optional[datetime] = None) -> int:
    """Offset of local time from UTC in seconds (east positive)."""
    local = (now or datetime.now()).astimezone()
    offset = local.utcoffset()
    return int(offset.total_seconds()) if offset else 0


def format_duration(seconds: int) -> str:
    """Format seconds as the status label text, e.g. '2 hrs 5 mins'."""
    seconds = max(0, int(seconds))
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    return f"{hours} hrs {minutes} mins"
