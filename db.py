import sqlite3
import datetime
import logging
from contextlib import contextmanager
from typing import List, Tuple, Iterable, NamedTuple

from config import YamlConfig
from settings_schema import validate_settings, SettingsSchema
from tools import DayBuilder

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Raised when the local database cannot complete an operation."""


class Exercise(NamedTuple):
    date: str
    name: str
    position: int


class SetEntry(NamedTuple):
    date: str
    exercise_name: str
    set_index: int
    reps: int


def _date_key(date: datetime.date | str) -> str:
    if isinstance(date, datetime.datetime):
        return date.date().isoformat()
    if isinstance(date, datetime.date):
        return date.isoformat()
    return datetime.date.fromisoformat(str(date)).isoformat()


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "workout_days": (
            """CREATE TABLE workout_days (
                    date TEXT PRIMARY KEY
                );""",
            ["date"],
        ),
        "workout_exercises": (
            """CREATE TABLE workout_exercises (
                    date TEXT NOT NULL,
                    name TEXT NOT NULL,
                    position INTEGER NOT NULL,
                    PRIMARY KEY (date, name)
                );""",
            ["date", "name", "position"],
        ),
        "workout_sets": (
            """CREATE TABLE workout_sets (
                    date TEXT NOT NULL,
                    exercise_name TEXT NOT NULL,
                    set_index INTEGER NOT NULL,
                    reps INTEGER NOT NULL,
                    PRIMARY KEY (date, exercise_name, set_index)
                );""",
            ["date", "exercise_name", "set_index", "reps"],
        ),
        "settings": (
            """CREATE TABLE settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );""",
            ["key", "value"],
        ),
    }

    def __init__(self, db_path: str = "workout.db") -> None:
        self._db_path = db_path
        try:
            self._ensure_schema()
            self._init_settings()
        except sqlite3.Error as e:
            logger.error("Cannot initialize database %s: %s", db_path, e)
            raise StorageError(str(e)) from e

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        logger.info("Rebuilding table %s with columns %s", table, columns)
        conn.execute(f"DROP TABLE IF EXISTS {table}_old;")
        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)

        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            missing = [c for c in columns if c not in existing_cols]
            if missing:
                def default_val(col: str) -> str:
                    if col in ("position", "set_index"):
                        return "0"
                    return "NULL"

                defaults = ", ".join(default_val(c) for c in missing)
                conn.execute(
                    f"INSERT OR IGNORE INTO {table} ({cols}, {', '.join(missing)}) SELECT {cols}, {defaults} FROM {table}_old;"
                )
            else:
                conn.execute(
                    f"INSERT OR IGNORE INTO {table} ({cols}) SELECT {cols} FROM {table}_old;"
                )
        conn.execute(f"DROP TABLE {table}_old;")

    def _init_settings(self) -> None:
        defaults = {
            key: str(value) for key, value in SettingsSchema().model_dump().items()
        }
        with self._connection() as conn:
            for key, value in defaults.items():
                conn.execute(
                    "INSERT OR IGNORE INTO settings (key, value) VALUES (?, ?);",
                    (key, value),
                )


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def execute(self, query: str, params: Tuple = ()) -> int:
        try:
            with self._connection() as conn:
                cursor = conn.cursor()
                cursor.execute(query, params)
                return cursor.lastrowid
        except sqlite3.Error as e:
            logger.error("Query failed: %s", e)
            raise StorageError(str(e)) from e

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        try:
            with self._connection() as conn:
                cursor = conn.cursor()
                cursor.execute(query, params)
                return cursor.fetchall()
        except sqlite3.Error as e:
            logger.error("Query failed: %s", e)
            raise StorageError(str(e)) from e


class WorkoutRepository(BaseRepository):
    """Repository for workout days, their exercises and sets."""

    def list_active_dates(self) -> List[str]:
        rows = self.fetch_all("SELECT date FROM workout_days ORDER BY date DESC;")
        return [r[0] for r in rows]

    def list_distinct_exercise_names(self) -> List[str]:
        rows = self.fetch_all(
            "SELECT DISTINCT name FROM workout_exercises ORDER BY name ASC;"
        )
        return [r[0] for r in rows]

    def get_exercises(self, date: datetime.date | str) -> List[Exercise]:
        rows = self.fetch_all(
            "SELECT date, name, position FROM workout_exercises WHERE date = ? ORDER BY position ASC;",
            (_date_key(date),),
        )
        return [Exercise(*r) for r in rows]

    def get_sets(self, date: datetime.date | str) -> List[SetEntry]:
        rows = self.fetch_all(
            "SELECT date, exercise_name, set_index, reps FROM workout_sets WHERE date = ? "
            "ORDER BY exercise_name, set_index;",
            (_date_key(date),),
        )
        return [SetEntry(*r) for r in rows]

    def get_all_sets(self) -> List[SetEntry]:
        rows = self.fetch_all(
            "SELECT date, exercise_name, set_index, reps FROM workout_sets "
            "ORDER BY date, exercise_name, set_index;"
        )
        return [SetEntry(*r) for r in rows]

    def all_time_total(self) -> int:
        rows = self.fetch_all("SELECT COALESCE(SUM(reps), 0) FROM workout_sets;")
        return int(rows[0][0])

    def replace_day(self, date: datetime.date | str, rows: Iterable) -> None:
        """Atomically replace every exercise and set stored for ``date``.

        ``rows`` is an ordered iterable of ``ExerciseRow`` objects or
        ``(name, reps)`` pairs where ``reps`` holds one text value per set slot.
        Blank names are dropped and only positive integer reps are stored. When
        nothing survives the day itself is removed.
        """
        key = _date_key(date)
        exercises, sets = DayBuilder.build(rows)
        try:
            with self._connection() as conn:
                conn.execute("BEGIN;")
                conn.execute("DELETE FROM workout_sets WHERE date = ?;", (key,))
                conn.execute("DELETE FROM workout_exercises WHERE date = ?;", (key,))
                if not exercises:
                    conn.execute("DELETE FROM workout_days WHERE date = ?;", (key,))
                    logger.debug("Cleared workout day %s", key)
                    return
                conn.execute(
                    "INSERT OR REPLACE INTO workout_days (date) VALUES (?);", (key,)
                )
                conn.executemany(
                    "INSERT OR REPLACE INTO workout_exercises (date, name, position) VALUES (?, ?, ?);",
                    [(key, name, position) for name, position in exercises],
                )
                if sets:
                    conn.executemany(
                        "INSERT OR REPLACE INTO workout_sets (date, exercise_name, set_index, reps) VALUES (?, ?, ?, ?);",
                        [(key, name, idx, reps) for name, idx, reps in sets],
                    )
        except sqlite3.Error as e:
            logger.error("Failed to replace workout day %s: %s", key, e)
            raise StorageError(str(e)) from e
        logger.debug(
            "Replaced workout day %s with %d exercises and %d sets",
            key,
            len(exercises),
            len(sets),
        )

    def delete_day(self, date: datetime.date | str) -> None:
        self.replace_day(date, [])


class SettingsRepository(BaseRepository):
    """Repository for application settings synchronized with YAML."""

    def __init__(
        self, db_path: str = "workout.db", yaml_path: str = "settings.yaml"
    ) -> None:
        super().__init__(db_path)
        self._yaml = YamlConfig(yaml_path)
        self._sync_from_yaml()
        self._sync_to_yaml()

    def _raw_all_settings(self) -> dict:
        rows = self.fetch_all("SELECT key, value FROM settings ORDER BY key;")
        result: dict[str, int | str] = {}
        for k, v in rows:
            try:
                result[k] = int(v)
            except ValueError:
                result[k] = v
        return result

    def _sync_from_yaml(self) -> None:
        data = self._yaml.load()
        if not data:
            return
        validate_settings(data)
        with self._connection() as conn:
            for key, value in data.items():
                conn.execute(
                    "INSERT INTO settings (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
                    (key, str(value)),
                )

    def _sync_to_yaml(self) -> None:
        self._yaml.save(self._raw_all_settings())

    def get_text(self, key: str, default: str) -> str:
        self._sync_from_yaml()
        rows = self.fetch_all("SELECT value FROM settings WHERE key = ?;", (key,))
        return rows[0][0] if rows else default

    def get_int(self, key: str, default: int) -> int:
        try:
            return int(float(self.get_text(key, str(default))))
        except ValueError:
            return default

    def set_text(self, key: str, value: str) -> None:
        current = self._raw_all_settings()
        current[key] = value
        validate_settings(current)
        self.execute(
            "INSERT INTO settings (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
            (key, value),
        )
        self._sync_to_yaml()

    def set_int(self, key: str, value: int) -> None:
        self.set_text(key, str(int(value)))

    def all_settings(self) -> dict:
        self._sync_from_yaml()
        return self._raw_all_settings()
