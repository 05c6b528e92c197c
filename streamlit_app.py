import datetime
import os
import pandas as pd
import streamlit as st
import altair as alt
from altair.utils.deprecation import AltairDeprecationWarning
import warnings

warnings.filterwarnings("ignore", category=AltairDeprecationWarning)
from db import WorkoutRepository, SettingsRepository
from workout_service import WorkoutService
from stats_service import StatisticsService
from tools import CalendarTools, ExerciseRow, ExerciseNameTools
from localization import translator

_ = translator.gettext


class RepTrackerApp:
    """Streamlit application for logging reps per exercise and day."""

    def __init__(
        self, db_path: str = "workout.db", yaml_path: str = "settings.yaml"
    ) -> None:
        self.settings_repo = SettingsRepository(db_path, yaml_path)
        self.workouts = WorkoutRepository(db_path)
        self.workout_service = WorkoutService(self.workouts, self.settings_repo)
        self.stats = StatisticsService(self.workouts, self.settings_repo)
        self.week_start = self.settings_repo.get_text("week_start", "monday")
        translator.set_language(self.settings_repo.get_text("language", "en"))
        self._configure_page()
        self._state_init()

    def _configure_page(self) -> None:
        st.set_page_config(page_title="Rep Tracker", page_icon="🏋️")

    def _state_init(self) -> None:
        today = datetime.date.today()
        if "cal_year" not in st.session_state:
            st.session_state.cal_year = today.year
        if "cal_month" not in st.session_state:
            st.session_state.cal_month = today.month
        if "track_date" not in st.session_state:
            st.session_state.track_date = today
        if "track_rows" not in st.session_state:
            st.session_state.track_rows = []
        if "track_loaded_for" not in st.session_state:
            st.session_state.track_loaded_for = None
        if "track_version" not in st.session_state:
            st.session_state.track_version = 0
        if "track_status" not in st.session_state:
            st.session_state.track_status = ""

    # Home

    def _shift_month(self, delta: int) -> None:
        year, month = CalendarTools.shift_month(
            st.session_state.cal_year, st.session_state.cal_month, delta
        )
        st.session_state.cal_year = year
        st.session_state.cal_month = month

    def _calendar_frame(self, year: int, month: int, active: list[str]) -> pd.DataFrame:
        labels = CalendarTools.weekday_labels(self.week_start)
        rows = []
        for week_idx, week in enumerate(
            CalendarTools.month_grid(year, month, active, self.week_start)
        ):
            for col_idx, cell in enumerate(week):
                if cell is None:
                    continue
                day, iso, is_active = cell
                rows.append(
                    {
                        "week": week_idx,
                        "weekday": labels[col_idx],
                        "day": day,
                        "date": iso,
                        "active": is_active,
                    }
                )
        return pd.DataFrame(rows)

    def _home_tab(self) -> None:
        st.header(_("Welcome back"))
        st.caption(_("Your workout streaks this month"))
        year = st.session_state.cal_year
        month = st.session_state.cal_month
        cols = st.columns([1, 3, 1])
        with cols[0]:
            st.button("◀", key="cal_prev", help=_("Previous"), on_click=self._shift_month, args=(-1,))
        with cols[1]:
            st.subheader(CalendarTools.month_title(year, month))
        with cols[2]:
            st.button("▶", key="cal_next", help=_("Next"), on_click=self._shift_month, args=(1,))
        active = self.workouts.list_active_dates()
        df = self._calendar_frame(year, month, active)
        labels = CalendarTools.weekday_labels(self.week_start)
        base = alt.Chart(df).encode(
            x=alt.X("weekday:N", sort=labels, title=None),
            y=alt.Y("week:O", axis=None),
        )
        cells = base.mark_rect(cornerRadius=4).encode(
            color=alt.condition(
                "datum.active",
                alt.value("seagreen"),
                alt.value("lightgray"),
            ),
            tooltip=["date", "active"],
        )
        text = base.mark_text().encode(text="day:Q")
        st.altair_chart(cells + text, use_container_width=True)
        st.metric(_("Active days"), len(active))

    # Track

    def _shift_day(self, delta: int) -> None:
        st.session_state.track_date = st.session_state.track_date + datetime.timedelta(
            days=delta
        )

    def _row_keys(self, iso: str, idx: int) -> tuple[str, list[str]]:
        prefix = f"{iso}_{st.session_state.track_version}_{idx}"
        return (
            f"ex_name_{prefix}",
            [f"ex_reps_{prefix}_{s}" for s in range(self.workout_service.set_count)],
        )

    def _current_rows(self, iso: str) -> list[ExerciseRow]:
        rows = []
        for idx, row in enumerate(st.session_state.track_rows):
            name_key, rep_keys = self._row_keys(iso, idx)
            reps = [
                st.session_state.get(k, row.reps[s] if s < len(row.reps) else "")
                for s, k in enumerate(rep_keys)
            ]
            rows.append(ExerciseRow(st.session_state.get(name_key, row.name), reps))
        return rows

    def _load_day(self, iso: str) -> None:
        st.session_state.track_rows = self.workout_service.load_day(iso)
        st.session_state.track_loaded_for = iso
        st.session_state.track_version += 1

    def _add_row(self) -> None:
        st.session_state.track_rows.append(self.workout_service.blank_row())

    def _save_day(self) -> None:
        iso = st.session_state.track_date.isoformat()
        rows = self._current_rows(iso)
        st.session_state.track_status = self.workout_service.save_day(iso, rows)
        self._load_day(iso)

    def _track_tab(self) -> None:
        st.header(_("Track workout"))
        cols = st.columns([1, 3, 1])
        with cols[0]:
            st.button("◀", key="day_prev", on_click=self._shift_day, args=(-1,))
        with cols[1]:
            st.date_input(_("Date"), key="track_date")
        with cols[2]:
            st.button("▶", key="day_next", on_click=self._shift_day, args=(1,))
        iso = st.session_state.track_date.isoformat()
        if st.session_state.track_loaded_for != iso:
            self._load_day(iso)
            st.session_state.track_status = ""
        st.button(
            _("Save workout"),
            key="save_day",
            on_click=self._save_day,
        )
        if st.session_state.track_status:
            st.caption(_(st.session_state.track_status))

        st.subheader(_("Exercises"))
        set_count = self.workout_service.set_count
        widths = [3] + [1] * set_count + [1]
        header = st.columns(widths)
        header[0].markdown(f"**{_('Exercise')}**")
        for s in range(set_count):
            header[s + 1].markdown(f"**{_('Set')} {s + 1}**")
        header[-1].markdown(f"**{_('Total')}**")

        suggestions = self.workout_service.exercise_suggestions()
        limit = self.workout_service.suggestion_limit
        current = []
        for idx, row in enumerate(st.session_state.track_rows):
            name_key, rep_keys = self._row_keys(iso, idx)
            cols = st.columns(widths)
            name = cols[0].text_input(
                _("Exercise"),
                value=row.name,
                key=name_key,
                label_visibility="collapsed",
            )
            reps = []
            for s, key in enumerate(rep_keys):
                reps.append(
                    cols[s + 1].text_input(
                        f"{_('Set')} {s + 1}",
                        value=row.reps[s] if s < len(row.reps) else "",
                        key=key,
                        label_visibility="collapsed",
                    )
                )
            entered = ExerciseRow(name, reps)
            cols[-1].markdown(f"**{WorkoutService.row_total(entered)}**")
            if name.strip() and name.strip() not in suggestions:
                matches = ExerciseNameTools.filter_suggestions(
                    suggestions, name.strip(), limit
                )
                if matches:
                    st.caption(f"{_('Suggestions')}: " + ", ".join(matches))
            current.append(entered)

        st.button("+ " + _("Exercise"), key="add_row", on_click=self._add_row)
        st.markdown(
            f"{_('Total reps (all exercises)')}: **{WorkoutService.grid_total(current)}**"
        )

    # Totals

    def _totals_tab(self) -> None:
        st.header(_("Totals"))
        st.metric(_("All-time total reps"), self.stats.all_time_total())
        st.subheader(_("Top exercises"))
        totals = self.stats.exercise_totals()
        for idx, item in enumerate(totals, start=1):
            st.markdown(f"{idx}. {item.name}: **{item.total_reps}**")
        if totals:
            df = pd.DataFrame(
                [{"exercise": t.name, "reps": t.total_reps} for t in totals]
            )
            chart = (
                alt.Chart(df)
                .mark_bar()
                .encode(
                    x=alt.X("reps:Q"),
                    y=alt.Y("exercise:N", sort="-x"),
                    tooltip=["exercise", "reps"],
                )
            )
            st.altair_chart(chart, use_container_width=True)
        st.button(_("Refresh totals"), key="refresh_totals")

    def run(self) -> None:
        st.title("Rep Tracker")
        home_tab, track_tab, totals_tab = st.tabs(
            [_("Home"), _("Track"), _("Totals")]
        )
        with home_tab:
            self._home_tab()
        with track_tab:
            self._track_tab()
        with totals_tab:
            self._totals_tab()


if __name__ == "__main__":
    db_path = os.environ.get("DB_PATH", "workout.db")
    yaml_path = os.environ.get("YAML_PATH", "settings.yaml")
    RepTrackerApp(db_path=db_path, yaml_path=yaml_path).run()
