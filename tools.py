import re
import calendar
import datetime
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, List, NamedTuple, Optional, Tuple


class ParseError(ValueError):
    """Raised when a rep count cannot be read as an integer."""


@dataclass
class ExerciseRow:
    """Editable grid row: an exercise name and one rep text per set slot."""

    name: str = ""
    reps: List[str] = field(default_factory=list)


class ExerciseTotal(NamedTuple):
    name: str
    total_reps: int


class ExerciseNameTools:
    """Group spelling variants of exercise names."""

    _NON_ALNUM = re.compile(r"[^a-z0-9]")

    @classmethod
    def normalize(cls, name: str) -> str:
        """Return the grouping key for ``name``.

        The key is lowercase ASCII alphanumerics with a single trailing ``s``
        dropped once longer than three characters. This is deliberately naive:
        ``"Press"`` becomes ``"pres"`` and every blank name shares the key ``""``.
        """
        cleaned = cls._NON_ALNUM.sub("", name.strip().lower())
        if cleaned.endswith("s") and len(cleaned) > 3:
            return cleaned[:-1]
        return cleaned

    @staticmethod
    def choose_display_name(names: Iterable[str]) -> str:
        """Pick the most used spelling, then the shortest, then the smallest."""
        counts = Counter(n.strip() for n in names)
        if not counts:
            return ""
        best = min(counts.items(), key=lambda kv: (-kv[1], len(kv[0]), kv[0]))[0]
        return best[:1].title() + best[1:]

    @classmethod
    def build_display_map(cls, names: Iterable[str]) -> dict[str, str]:
        grouped: dict[str, list[str]] = {}
        for n in names:
            grouped.setdefault(cls.normalize(n), []).append(n)
        return {key: cls.choose_display_name(group) for key, group in grouped.items()}

    @classmethod
    def suggestions(cls, names: Iterable[str]) -> List[str]:
        display = cls.build_display_map(names)
        return sorted({v for v in display.values() if v})

    @staticmethod
    def filter_suggestions(
        suggestions: List[str], query: str, limit: int = 8
    ) -> List[str]:
        if not query.strip():
            return suggestions[:limit]
        q = query.lower()
        return [s for s in suggestions if q in s.lower()][:limit]


class RepTools:
    """Helpers for rep count text entered in the grid."""

    MAX_REPS = 2**31 - 1
    _INTEGER = re.compile(r"[+-]?[0-9]+")

    @classmethod
    def parse_reps(cls, text: str | int | None) -> int:
        if text is None or isinstance(text, bool):
            raise ParseError(f"invalid rep count: {text!r}")
        raw = str(text)
        if not cls._INTEGER.fullmatch(raw):
            raise ParseError(f"invalid rep count: {text!r}")
        value = int(raw)
        if abs(value) > cls.MAX_REPS:
            raise ParseError(f"rep count out of range: {text!r}")
        return value

    @classmethod
    def positive_reps(cls, text: str | int | None) -> Optional[int]:
        """Return the rep count or ``None`` when the slot holds no set."""
        try:
            value = cls.parse_reps(text)
        except ParseError:
            return None
        return value if value > 0 else None

    @classmethod
    def row_total(cls, reps: Iterable[str]) -> int:
        return sum(cls.positive_reps(r) or 0 for r in reps)


class DayBuilder:
    """Derive the rows stored for one day from the editable grid."""

    @staticmethod
    def _unpack(row) -> Tuple[str, List[str]]:
        if isinstance(row, ExerciseRow):
            return row.name, list(row.reps)
        name, reps = row
        return name, list(reps)

    @classmethod
    def build(
        cls, rows: Iterable
    ) -> Tuple[List[Tuple[str, int]], List[Tuple[str, int, int]]]:
        """Return ``(exercises, sets)`` for the given grid rows.

        ``exercises`` holds ``(name, position)`` and ``sets`` holds
        ``(exercise_name, set_index, reps)``.
        """
        cleaned = []
        for row in rows:
            name, reps = cls._unpack(row)
            name = (name or "").strip()
            if name:
                cleaned.append((name, reps))
        exercises = [(name, idx) for idx, (name, _reps) in enumerate(cleaned)]
        sets = []
        for name, reps in cleaned:
            for set_index, text in enumerate(reps):
                value = RepTools.positive_reps(text)
                if value is not None:
                    sets.append((name, set_index, value))
        return exercises, sets


class TotalsAggregator:
    """Sum reps per exercise across differently spelled names."""

    @staticmethod
    def aggregate(sets: Iterable) -> List[ExerciseTotal]:
        """Group sets by normalized name and sort by total reps.

        ``sets`` yields objects with ``exercise_name`` and ``reps`` attributes.
        Ties are ordered by display name, then by grouping key.
        """
        totals: dict[str, int] = {}
        names: dict[str, list[str]] = {}
        for s in sets:
            key = ExerciseNameTools.normalize(s.exercise_name)
            totals[key] = totals.get(key, 0) + s.reps
            names.setdefault(key, []).append(s.exercise_name)
        ranked = []
        for key, total in totals.items():
            display = ExerciseNameTools.choose_display_name(names[key])
            ranked.append((-total, display, key, ExerciseTotal(display, total)))
        ranked.sort(key=lambda r: r[:3])
        return [r[3] for r in ranked]

    @staticmethod
    def grand_total(sets: Iterable) -> int:
        return sum(s.reps for s in sets)

    @staticmethod
    def top(totals: List[ExerciseTotal], limit: int = 10) -> List[ExerciseTotal]:
        return totals[:limit]


class CalendarTools:
    """Build month grids for the activity calendar."""

    @staticmethod
    def month_grid(
        year: int,
        month: int,
        active_dates: Iterable[str] = (),
        week_start: str = "monday",
    ) -> List[List[Optional[Tuple[int, str, bool]]]]:
        """Return the weeks of a month as rows of seven cells.

        Padding cells are ``None``; day cells are
        ``(day_number, iso_date, is_active)``.
        """
        if week_start not in ("monday", "sunday"):
            raise ValueError("week_start must be 'monday' or 'sunday'")
        active = set(active_dates)
        first = datetime.date(year, month, 1)
        leading = first.weekday()
        if week_start == "sunday":
            leading = (leading + 1) % 7
        days = calendar.monthrange(year, month)[1]
        cells: List[Optional[Tuple[int, str, bool]]] = [None] * leading
        for day in range(1, days + 1):
            iso = datetime.date(year, month, day).isoformat()
            cells.append((day, iso, iso in active))
        while len(cells) % 7:
            cells.append(None)
        return [cells[i : i + 7] for i in range(0, len(cells), 7)]

    @staticmethod
    def weekday_labels(week_start: str = "monday") -> List[str]:
        labels = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        if week_start == "sunday":
            return labels[-1:] + labels[:-1]
        return labels

    @staticmethod
    def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
        index = year * 12 + (month - 1) + delta
        return index // 12, index % 12 + 1

    @staticmethod
    def month_title(year: int, month: int) -> str:
        return f"{calendar.month_name[month]} {year}"
