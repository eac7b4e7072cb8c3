"""Append-only grief-stage log per (user, pet).

Each memorial-mode message is classified on its own; this log only keeps
the readings in arrival order so an orchestrator can look at how a family's
grief has moved over time. It never enforces or predicts transitions.

Usage::

    trajectory = GriefTrajectory()
    trajectory.record("user42", "pet7", "denial", 0.35)
    trajectory.latest("user42", "pet7")
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque

from companion.defaults import GRIEF_TRAJECTORY_MAX_READINGS
from companion.models import GriefStage, utc_now_iso

__all__ = ["GriefReading", "GriefTrajectory"]

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class GriefReading:
    stage: GriefStage
    confidence: float
    timestamp: str = field(default_factory=utc_now_iso)


class GriefTrajectory:
    """In-memory bounded log of grief readings.

    Parameters
    ----------
    max_readings:
        Readings kept per ``(user_id, pet_id)``; the oldest are dropped first.
    """

    def __init__(self, max_readings: int = GRIEF_TRAJECTORY_MAX_READINGS) -> None:
        self.max_readings = max_readings
        self._logs: dict[tuple[str, str], Deque[GriefReading]] = {}

    def record(
        self,
        user_id: str,
        pet_id: str,
        stage: GriefStage,
        confidence: float,
        timestamp: str | None = None,
    ) -> GriefReading:
        reading = GriefReading(
            stage=stage,
            confidence=confidence,
            timestamp=timestamp or utc_now_iso(),
        )
        key = (user_id, pet_id)
        if key not in self._logs:
            self._logs[key] = deque(maxlen=self.max_readings)
        self._logs[key].append(reading)
        logger.debug("Grief reading %s/%s: %s %.2f", user_id, pet_id, stage, confidence)
        return reading

    def readings(self, user_id: str, pet_id: str) -> list[GriefReading]:
        """Readings oldest first. A copy; mutating it does not touch the log."""
        return list(self._logs.get((user_id, pet_id), ()))

    def latest(self, user_id: str, pet_id: str) -> GriefReading | None:
        log = self._logs.get((user_id, pet_id))
        if not log:
            return None
        return log[-1]
