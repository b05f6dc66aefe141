from __future__ import annotations

from ...core.enums import AttendanceStatus
from ..model import DayMetrics, ShiftPolicy
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """First punch after shift start + grace."""

    def decide(self, *, metrics: DayMetrics, policy: ShiftPolicy) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE)


class LateAndEarlyOutStrategy(AttendanceStrategy):
    def decide(self, *, metrics: DayMetrics, policy: ShiftPolicy) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE_AND_EARLY_OUT)
