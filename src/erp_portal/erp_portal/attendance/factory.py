from __future__ import annotations

from dataclasses import dataclass

from .model import DayMetrics, ShiftPolicy
from .strategies.base import AttendanceStrategy
from .strategies.early_strategy import EarlyOutStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.late_strategy import LateAndEarlyOutStrategy, LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules.

    First match wins: half day, late & early out, late, early out, present.
    """

    def for_day(self, *, metrics: DayMetrics, policy: ShiftPolicy) -> AttendanceStrategy:
        if metrics.worked_hours < policy.half_day_hours:
            return HalfDayStrategy()

        is_late = metrics.late_by_minutes > 0
        is_early = metrics.early_out_minutes > 0
        if is_late and is_early:
            return LateAndEarlyOutStrategy()
        if is_late:
            return LateStrategy()
        if is_early:
            return EarlyOutStrategy()
        return NormalStrategy()
