import os
import csv
import sys
import unittest
sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from cli import (
    export_sets,
    backup_db,
    restore_db,
    demo_data,
    print_totals,
)
from db import WorkoutRepository

class CLIToolsTest(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_cli.db"
        self.yaml_path = "test_cli.yaml"
        for path in [self.db_path, self.yaml_path]:
            if os.path.exists(path):
                os.remove(path)
        self.workouts = WorkoutRepository(self.db_path)

    def tearDown(self) -> None:
        for path in [self.db_path, self.yaml_path, "backup.db", "test_sets.csv"]:
            if os.path.exists(path):
                os.remove(path)

    def test_export_backup_restore(self) -> None:
        self.workouts.replace_day("2024-02-01", [("Squat", ["10", "", "8"])])
        count = export_sets(self.db_path, "test_sets.csv")
        self.assertEqual(count, 2)
        with open("test_sets.csv", newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        self.assertEqual(rows[0], ["date", "exercise", "set", "reps"])
        self.assertEqual(rows[1], ["2024-02-01", "Squat", "1", "10"])
        self.assertEqual(rows[2], ["2024-02-01", "Squat", "3", "8"])
        backup_db(self.db_path, "backup.db")
        self.assertTrue(os.path.exists("backup.db"))
        os.remove(self.db_path)
        restore_db("backup.db", self.db_path)
        self.assertEqual(WorkoutRepository(self.db_path).list_active_dates(), ["2024-02-01"])

    def test_demo_data(self) -> None:
        demo_data(self.db_path)
        demo_data(self.db_path)
        workouts = WorkoutRepository(self.db_path)
        self.assertEqual(len(workouts.list_active_dates()), 1)
        self.assertEqual(workouts.all_time_total(), 63)

    def test_print_totals(self) -> None:
        self.workouts.replace_day("2024-02-01", [("Squats", ["10", "", ""]), ("squat", ["5", "", ""])])
        from io import StringIO
        from contextlib import redirect_stdout
        buf = StringIO()
        with redirect_stdout(buf):
            print_totals(self.db_path, self.yaml_path)
        lines = buf.getvalue().splitlines()
        self.assertEqual(lines[0], "All-time total reps: 15")
        self.assertEqual(lines[1], "1. Squat: 15")

if __name__ == "__main__":
    unittest.main()
