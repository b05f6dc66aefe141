from __future__ import annotations

from ...core.enums import AttendanceStatus
from ..model import DayMetrics, ShiftPolicy
from .base import AttendanceStrategy, StatusDecision


class HalfDayStrategy(AttendanceStrategy):
    """Worked less than the half-day threshold; overrides late/early flags."""

    def decide(self, *, metrics: DayMetrics, policy: ShiftPolicy) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.HALF_DAY)
