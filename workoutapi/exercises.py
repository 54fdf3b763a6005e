"""Queries on the exercises table."""

from __future__ import annotations

import sqlite3
import uuid
from typing import List

from workoutapi.db import NotFoundError
from workoutapi.models import Exercise

_COLUMNS = "id, name, tool, user_id"


class ExerciseStore:
    """Create, read, update and delete exercises."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def create(self, name: str, tool: str, user_id: uuid.UUID) -> Exercise:
        exercise_id = uuid.uuid4()
        self._conn.execute(
            "INSERT INTO exercises (id, name, tool, user_id) VALUES (?, ?, ?, ?)",
            (exercise_id, name, tool, user_id),
        )
        return self.get(exercise_id)

    def delete(self, exercise_id: uuid.UUID) -> None:
        self._conn.execute("DELETE FROM exercises WHERE id = ?", (exercise_id,))

    def list_all(self) -> List[Exercise]:
        rows = self._conn.execute(f"SELECT {_COLUMNS} FROM exercises")
        return [Exercise(**dict(row)) for row in rows]

    def get(self, exercise_id: uuid.UUID) -> Exercise:
        row = self._conn.execute(
            f"SELECT {_COLUMNS} FROM exercises WHERE id = ?", (exercise_id,)
        ).fetchone()
        if row is None:
            raise NotFoundError(f"exercise {exercise_id} not found")
        return Exercise(**dict(row))

    def list_for_user(self, user_id: uuid.UUID) -> List[Exercise]:
        rows = self._conn.execute(
            f"SELECT {_COLUMNS} FROM exercises WHERE user_id = ?", (user_id,)
        )
        return [Exercise(**dict(row)) for row in rows]

    def update(self, exercise_id: uuid.UUID, name: str, tool: str) -> Exercise:
        cursor = self._conn.execute(
            "UPDATE exercises SET name = ?, tool = ? WHERE id = ?",
            (name, tool, exercise_id),
        )
        if cursor.rowcount == 0:
            raise NotFoundError(f"exercise {exercise_id} not found")
        return self.get(exercise_id)