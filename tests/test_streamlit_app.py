import os
import sys
import sqlite3
import unittest
import warnings
import datetime
import yaml
from altair.utils.deprecation import AltairDeprecationWarning

warnings.simplefilter("ignore", AltairDeprecationWarning)

from streamlit.testing.v1 import AppTest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import WorkoutRepository


class StreamlitAppTest(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_gui.db"
        self.yaml_path = "test_gui_settings.yaml"
        if os.path.exists(self.db_path):
            os.remove(self.db_path)
        if os.path.exists(self.yaml_path):
            os.remove(self.yaml_path)
        os.environ["DB_PATH"] = self.db_path
        os.environ["YAML_PATH"] = self.yaml_path
        self.today = datetime.date.today().isoformat()

    def tearDown(self) -> None:
        if os.path.exists(self.db_path):
            os.remove(self.db_path)
        if os.path.exists(self.yaml_path):
            os.remove(self.yaml_path)

    def _app(self) -> AppTest:
        script = os.path.join(os.path.dirname(os.path.dirname(__file__)), "streamlit_app.py")
        at = AppTest.from_file(script, default_timeout=20)
        at.run(timeout=20)
        self.assertFalse(at.exception)
        return at

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def test_tabs_render(self) -> None:
        at = self._app()
        labels = [t.label for t in at.tabs]
        self.assertEqual(labels, ["Home", "Track", "Totals"])

    def test_add_exercise_and_save(self) -> None:
        at = self._app()
        at.button(key="add_row").click().run()
        version = at.session_state["track_version"]
        prefix = f"{self.today}_{version}_0"
        at.text_input(key=f"ex_name_{prefix}").input("  Squats ").run()
        at.text_input(key=f"ex_reps_{prefix}_0").input("12").run()
        at.text_input(key=f"ex_reps_{prefix}_1").input("abc").run()
        at.text_input(key=f"ex_reps_{prefix}_2").input("8").run()
        at.button(key="save_day").click().run()
        self.assertFalse(at.exception)
        self.assertIn("Saved.", [c.value for c in at.caption])

        conn = self._connect()
        cur = conn.cursor()
        cur.execute("SELECT date FROM workout_days;")
        self.assertEqual(cur.fetchall(), [(self.today,)])
        cur.execute("SELECT name, position FROM workout_exercises;")
        self.assertEqual(cur.fetchall(), [("Squats", 0)])
        cur.execute("SELECT set_index, reps FROM workout_sets ORDER BY set_index;")
        self.assertEqual(cur.fetchall(), [(0, 12), (2, 8)])
        conn.close()

    def test_existing_day_is_loaded(self) -> None:
        WorkoutRepository(self.db_path).replace_day(
            self.today, [("Dip", ["6", "", "4"])]
        )
        at = self._app()
        version = at.session_state["track_version"]
        prefix = f"{self.today}_{version}_0"
        self.assertEqual(at.text_input(key=f"ex_name_{prefix}").value, "Dip")
        self.assertEqual(at.text_input(key=f"ex_reps_{prefix}_2").value, "4")

    def test_clearing_name_removes_day(self) -> None:
        WorkoutRepository(self.db_path).replace_day(
            self.today, [("Dip", ["6", "", ""])]
        )
        at = self._app()
        version = at.session_state["track_version"]
        at.text_input(key=f"ex_name_{self.today}_{version}_0").input(" ").run()
        at.button(key="save_day").click().run()
        self.assertEqual(WorkoutRepository(self.db_path).list_active_dates(), [])

    def test_totals_tab(self) -> None:
        repo = WorkoutRepository(self.db_path)
        repo.replace_day("2024-01-01", [("Squat", ["10", "", ""]), ("Squats", ["", "5", ""])])
        repo.replace_day("2024-01-02", [("pushup", ["20", "", ""])])
        at = self._app()
        metrics = {m.label: m.value for m in at.metric}
        self.assertEqual(metrics["All-time total reps"], "35")
        self.assertEqual(metrics["Active days"], "2")
        texts = [m.value for m in at.markdown]
        self.assertIn("1. Pushup: **20**", texts)
        self.assertIn("2. Squat: **15**", texts)

    def test_track_labels_are_translated(self) -> None:
        at = self._app()
        self.assertEqual(at.date_input(key="track_date").label, "Date")
        self.assertIn(
            "Total reps (all exercises): **0**", [m.value for m in at.markdown]
        )
        with open(self.yaml_path, "w", encoding="utf-8") as fh:
            yaml.safe_dump({"language": "es"}, fh)
        at = self._app()
        self.assertEqual(at.date_input(key="track_date").label, "Fecha")
        self.assertIn(
            "Repeticiones totales (todos los ejercicios): **0**",
            [m.value for m in at.markdown],
        )

    def test_month_navigation(self) -> None:
        at = self._app()
        year = at.session_state["cal_year"]
        month = at.session_state["cal_month"]
        at.button(key="cal_next").click().run()
        expected = (year + 1, 1) if month == 12 else (year, month + 1)
        self.assertEqual(
            (at.session_state["cal_year"], at.session_state["cal_month"]), expected
        )

    def test_day_navigation_reloads_rows(self) -> None:
        yesterday = (datetime.date.today() - datetime.timedelta(days=1)).isoformat()
        WorkoutRepository(self.db_path).replace_day(
            yesterday, [("Lunge", ["3", "", ""])]
        )
        at = self._app()
        self.assertEqual(at.session_state["track_rows"], [])
        at.button(key="day_prev").click().run()
        self.assertEqual(at.session_state["track_loaded_for"], yesterday)
        self.assertEqual(
            [r.name for r in at.session_state["track_rows"]], ["Lunge"]
        )


if __name__ == "__main__":
    unittest.main()
