import argparse
import csv
import datetime
import logging
import shutil

from db import WorkoutRepository, SettingsRepository
from stats_service import StatisticsService
from tools import ExerciseRow


def export_sets(db_path: str, out_path: str) -> int:
    """Write every stored set to ``out_path`` as CSV and return the row count."""
    workouts = WorkoutRepository(db_path)
    sets = workouts.get_all_sets()
    with open(out_path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["date", "exercise", "set", "reps"])
        for s in sets:
            writer.writerow([s.date, s.exercise_name, s.set_index + 1, s.reps])
    return len(sets)


def backup_db(db_path: str, backup_path: str) -> None:
    shutil.copy(db_path, backup_path)


def restore_db(backup_path: str, db_path: str) -> None:
    shutil.copy(backup_path, db_path)


def demo_data(db_path: str) -> None:
    """Populate the database with a demo workout day if empty."""
    workouts = WorkoutRepository(db_path)
    if workouts.list_active_dates():
        print("Database already contains workouts")
        return
    workouts.replace_day(
        datetime.date.today(),
        [
            ExerciseRow("Squats", ["10", "10", "8"]),
            ExerciseRow("Push-ups", ["20", "15", ""]),
        ],
    )
    print("Demo data inserted")


def print_totals(db_path: str, yaml_path: str) -> None:
    stats = StatisticsService(
        WorkoutRepository(db_path), SettingsRepository(db_path, yaml_path)
    )
    print(f"All-time total reps: {stats.all_time_total()}")
    for idx, item in enumerate(stats.exercise_totals(), start=1):
        print(f"{idx}. {item.name}: {item.total_reps}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Utility commands")
    parser.add_argument("--verbose", action="store_true")
    sub = parser.add_subparsers(dest="cmd", required=True)

    exp = sub.add_parser("export")
    exp.add_argument("--db", default="workout.db")
    exp.add_argument("--out", default="sets.csv")

    bkp = sub.add_parser("backup")
    bkp.add_argument("--db", default="workout.db")
    bkp.add_argument("--out", default="backup.db")

    rst = sub.add_parser("restore")
    rst.add_argument("--in", dest="src", default="backup.db")
    rst.add_argument("--db", default="workout.db")

    demo = sub.add_parser("demo")
    demo.add_argument("--db", default="workout.db")

    tot = sub.add_parser("totals")
    tot.add_argument("--db", default="workout.db")
    tot.add_argument("--yaml", default="settings.yaml")

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if args.cmd == "export":
        count = export_sets(args.db, args.out)
        print(f"Exported {count} sets to {args.out}")
    elif args.cmd == "backup":
        backup_db(args.db, args.out)
    elif args.cmd == "restore":
        restore_db(args.src, args.db)
    elif args.cmd == "demo":
        demo_data(args.db)
    elif args.cmd == "totals":
        print_totals(args.db, args.yaml)


if __name__ == "__main__":
    main()
