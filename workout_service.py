import datetime
import logging
from typing import Iterable, List

from db import WorkoutRepository, SettingsRepository, StorageError
from tools import ExerciseRow, ExerciseNameTools, RepTools

logger = logging.getLogger(__name__)


class WorkoutService:
    """Load and save the per-day exercise grid."""

    SAVED = "Saved."
    SAVE_FAILED = "Save failed."

    def __init__(
        self,
        workout_repo: WorkoutRepository,
        settings_repo: SettingsRepository | None = None,
    ) -> None:
        self.workouts = workout_repo
        self.settings = settings_repo

    @property
    def set_count(self) -> int:
        if self.settings is None:
            return 3
        return self.settings.get_int("set_count", 3)

    @property
    def suggestion_limit(self) -> int:
        if self.settings is None:
            return 8
        return self.settings.get_int("suggestion_limit", 8)

    def blank_row(self) -> ExerciseRow:
        return ExerciseRow("", [""] * self.set_count)

    def load_day(self, date: datetime.date | str) -> List[ExerciseRow]:
        """Return the stored exercises for ``date`` as editable rows.

        Sets beyond the configured set count and sets without a matching
        exercise are left out.
        """
        count = self.set_count
        exercises = self.workouts.get_exercises(date)
        reps = {e.name: [""] * count for e in exercises}
        for s in self.workouts.get_sets(date):
            slots = reps.get(s.exercise_name)
            if slots is not None and 0 <= s.set_index < count:
                slots[s.set_index] = str(s.reps)
        return [ExerciseRow(e.name, reps[e.name]) for e in exercises]

    def save_day(self, date: datetime.date | str, rows: Iterable) -> str:
        """Replace the stored day and return a status line for the user."""
        try:
            self.workouts.replace_day(date, rows)
        except StorageError as e:
            logger.error("Saving workout day %s failed: %s", date, e)
            return self.SAVE_FAILED
        return self.SAVED

    @staticmethod
    def row_total(row: ExerciseRow) -> int:
        return RepTools.row_total(row.reps)

    @classmethod
    def grid_total(cls, rows: Iterable[ExerciseRow]) -> int:
        return sum(cls.row_total(r) for r in rows)

    def exercise_suggestions(self) -> List[str]:
        return ExerciseNameTools.suggestions(
            self.workouts.list_distinct_exercise_names()
        )

    def filter_suggestions(self, query: str) -> List[str]:
        return ExerciseNameTools.filter_suggestions(
            self.exercise_suggestions(), query, self.suggestion_limit
        )
