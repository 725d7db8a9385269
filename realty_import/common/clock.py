from __future__ import annotations

import uuid
from datetime import datetime


def generate_run_id(now: datetime | None = None) -> str:
    """
    Назначение:
        run_id вида 20240301T101500-1a2b3c4d: время запуска + случайный суффикс.
    """
    moment = now or datetime.now()
    return f"{moment:%Y%m%dT%H%M%S}-{uuid.uuid4().hex[:8]}"


def getNowIso() -> str:
    return datetime.now().astimezone().isoformat(timespec="seconds")


def getDurationMs(startMonotonic: float, endMonotonic: float) -> int:
    return max(0, round((endMonotonic - startMonotonic) * 1000))
