from __future__ import annotations

from ...core.enums import AttendanceStatus
from ..model import DayMetrics, ShiftPolicy
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """On-time in, left at or after shift end."""

    def decide(self, *, metrics: DayMetrics, policy: ShiftPolicy) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
