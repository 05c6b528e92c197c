from __future__ import annotations
from typing import List, Optional
from db import WorkoutRepository, SettingsRepository
from tools import TotalsAggregator, ExerciseTotal


class StatisticsService:
    """Compute rep totals for the totals screen."""

    def __init__(
        self,
        workout_repo: WorkoutRepository,
        settings_repo: SettingsRepository | None = None,
    ) -> None:
        self.workouts = workout_repo
        self.settings = settings_repo

    def _top_n(self) -> int:
        if self.settings is not None:
            return self.settings.get_int("top_n", 10)
        return 10

    def exercise_totals(self, limit: Optional[int] = None) -> List[ExerciseTotal]:
        """Return totals per exercise group, largest first, truncated to ``limit``."""
        totals = TotalsAggregator.aggregate(self.workouts.get_all_sets())
        return TotalsAggregator.top(totals, limit if limit is not None else self._top_n())

    def all_time_total(self) -> int:
        return TotalsAggregator.grand_total(self.workouts.get_all_sets())

    def active_day_count(self) -> int:
        return len(self.workouts.list_active_dates())

    def summary(self) -> dict:
        sets = self.workouts.get_all_sets()
        totals = TotalsAggregator.aggregate(sets)
        return {
            "all_time_total": TotalsAggregator.grand_total(sets),
            "active_days": self.active_day_count(),
            "top": [
                {"name": t.name, "total_reps": t.total_reps}
                for t in TotalsAggregator.top(totals, self._top_n())
            ],
        }
