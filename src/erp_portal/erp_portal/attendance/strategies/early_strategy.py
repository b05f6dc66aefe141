from __future__ import annotations

from ...core.enums import AttendanceStatus
from ..model import DayMetrics, ShiftPolicy
from .base import AttendanceStrategy, StatusDecision


class EarlyOutStrategy(AttendanceStrategy):
    """Last punch before shift end."""

    def decide(self, *, metrics: DayMetrics, policy: ShiftPolicy) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.EARLY_OUT)
