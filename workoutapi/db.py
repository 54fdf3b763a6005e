"""SQLite connection setup, schema and table resets."""

from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime, timezone
from os import PathLike
from typing import Union


class NotFoundError(LookupError):
    """Raised when a query that must yield a row finds none."""


SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id UUID PRIMARY KEY,
    created_at TIMESTAMPTZ NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL,
    last_name TEXT NOT NULL,
    first_name TEXT NOT NULL,
    username TEXT NOT NULL,
    email TEXT NOT NULL,
    password TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS refresh_tokens (
    token TEXT PRIMARY KEY,
    created_at TIMESTAMPTZ NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL,
    user_id UUID NOT NULL,
    expires_at TIMESTAMPTZ NOT NULL,
    revoked_at TIMESTAMPTZ
);
CREATE TABLE IF NOT EXISTS exercises (
    id UUID PRIMARY KEY,
    name TEXT NOT NULL,
    tool TEXT NOT NULL,
    user_id UUID NOT NULL
);
CREATE TABLE IF NOT EXISTS workout_routines (
    id UUID PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT NOT NULL,
    total_duration INTEGER NOT NULL,
    rounds_per_exercise INTEGER NOT NULL,
    round_duration INTEGER NOT NULL,
    rest_duration INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS workout_exercises (
    id UUID PRIMARY KEY,
    workout_id UUID NOT NULL,
    exercise_id UUID NOT NULL,
    position INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS rounds (
    id UUID PRIMARY KEY,
    date TIMESTAMPTZ NOT NULL,
    round_number INTEGER NOT NULL,
    reps_completed REAL NOT NULL,
    workout_exercise_id UUID NOT NULL,
    user_id UUID NOT NULL
);
CREATE TABLE IF NOT EXISTS workout_summaries (
    id UUID PRIMARY KEY,
    date TIMESTAMPTZ NOT NULL,
    weight_in_kg INTEGER NOT NULL,
    workout_number INTEGER NOT NULL,
    total_reps REAL NOT NULL,
    work_capacity REAL NOT NULL,
    user_id UUID NOT NULL,
    workout_routine_id UUID NOT NULL
);
"""


def _adapt_datetime(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _convert_datetime(raw: bytes) -> datetime:
    return datetime.fromisoformat(raw.decode())


def _convert_uuid(raw: bytes) -> uuid.UUID:
    return uuid.UUID(raw.decode())


sqlite3.register_adapter(uuid.UUID, str)
sqlite3.register_adapter(datetime, _adapt_datetime)
sqlite3.register_converter("UUID", _convert_uuid)
sqlite3.register_converter("TIMESTAMPTZ", _convert_datetime)


def connect(path: Union[str, "PathLike[str]"]) -> sqlite3.Connection:
    """Open the database at ``path``, creating the tables if needed."""
    conn = sqlite3.connect(
        path,
        detect_types=sqlite3.PARSE_DECLTYPES,
        isolation_level=None,
        check_same_thread=False,
    )
    conn.row_factory = sqlite3.Row
    conn.executescript(SCHEMA)
    return conn


def reset_users(conn: sqlite3.Connection) -> None:
    """Delete every user."""
    conn.execute("DELETE FROM users")


def reset_exercises(conn: sqlite3.Connection) -> None:
    """Delete every exercise."""
    conn.execute("DELETE FROM exercises")


def reset_workout_routines(conn: sqlite3.Connection) -> None:
    """Delete every workout routine."""
    conn.execute("DELETE FROM workout_routines")


def reset_workout_exercises(conn: sqlite3.Connection) -> None:
    """Delete every exercise-to-workout link."""
    conn.execute("DELETE FROM workout_exercises")