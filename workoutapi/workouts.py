"""Queries on workout routines, their exercises, rounds and summaries."""

from __future__ import annotations

import sqlite3
import struct
import uuid
from datetime import datetime
from typing import List

from workoutapi.db import NotFoundError
from workoutapi.models import (
    Round,
    WorkoutExercise,
    WorkoutRoutine,
    WorkoutSummary,
)

_ROUTINE_COLUMNS = (
    "id, name, description, total_duration, rounds_per_exercise, "
    "round_duration, rest_duration"
)
_WORKOUT_EXERCISE_COLUMNS = "id, workout_id, exercise_id, position"
_ROUND_COLUMNS = "id, date, round_number, reps_completed, workout_exercise_id, user_id"
_SUMMARY_COLUMNS = (
    "id, date, weight_in_kg, workout_number, total_reps, work_capacity, "
    "user_id, workout_routine_id"
)


def _real(value: float) -> float:
    """Round a number to single precision, as a REAL column holds it."""
    return struct.unpack("f", struct.pack("f", float(value)))[0]


class WorkoutStore:
    """Create, read, update and delete workout data."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def _one(self, query: str, params: tuple, what: str):
        row = self._conn.execute(query, params).fetchone()
        if row is None:
            raise NotFoundError(f"{what} not found")
        return dict(row)

    def add_exercise(
        self, workout_id: uuid.UUID, exercise_id: uuid.UUID, position: int
    ) -> WorkoutExercise:
        """Link an exercise to a workout routine at the given position."""
        link_id = uuid.uuid4()
        self._conn.execute(
            f"INSERT INTO workout_exercises ({_WORKOUT_EXERCISE_COLUMNS}) "
            "VALUES (?, ?, ?, ?)",
            (link_id, workout_id, exercise_id, position),
        )
        return WorkoutExercise(
            **self._one(
                f"SELECT {_WORKOUT_EXERCISE_COLUMNS} FROM workout_exercises WHERE id = ?",
                (link_id,),
                f"workout exercise {link_id}",
            )
        )

    def create_round(
        self,
        date: datetime,
        round_number: int,
        reps_completed: float,
        workout_exercise_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> Round:
        round_id = uuid.uuid4()
        self._conn.execute(
            f"INSERT INTO rounds ({_ROUND_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
            (
                round_id,
                date,
                round_number,
                _real(reps_completed),
                workout_exercise_id,
                user_id,
            ),
        )
        return Round(
            **self._one(
                f"SELECT {_ROUND_COLUMNS} FROM rounds WHERE id = ?",
                (round_id,),
                f"round {round_id}",
            )
        )

    def create_routine(
        self,
        name: str,
        description: str,
        total_duration: int,
        rounds_per_exercise: int,
        round_duration: int,
        rest_duration: int,
    ) -> WorkoutRoutine:
        routine_id = uuid.uuid4()
        self._conn.execute(
            f"INSERT INTO workout_routines ({_ROUTINE_COLUMNS}) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                routine_id,
                name,
                description,
                total_duration,
                rounds_per_exercise,
                round_duration,
                rest_duration,
            ),
        )
        return self.get_routine(routine_id)

    def create_summary(
        self,
        workout_routine_id: uuid.UUID,
        date: datetime,
        weight_in_kg: int,
        workout_number: int,
        total_reps: float,
        work_capacity: float,
        user_id: uuid.UUID,
    ) -> WorkoutSummary:
        summary_id = uuid.uuid4()
        self._conn.execute(
            f"INSERT INTO workout_summaries ({_SUMMARY_COLUMNS}) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (
                summary_id,
                date,
                weight_in_kg,
                workout_number,
                _real(total_reps),
                _real(work_capacity),
                user_id,
                workout_routine_id,
            ),
        )
        return self.get_summary(summary_id)

    def delete_routine(self, routine_id: uuid.UUID) -> None:
        self._conn.execute("DELETE FROM workout_routines WHERE id = ?", (routine_id,))

    def delete_summary(self, summary_id: uuid.UUID) -> None:
        self._conn.execute("DELETE FROM workout_summaries WHERE id = ?", (summary_id,))

    def get_routine(self, routine_id: uuid.UUID) -> WorkoutRoutine:
        return WorkoutRoutine(
            **self._one(
                f"SELECT {_ROUTINE_COLUMNS} FROM workout_routines WHERE id = ?",
                (routine_id,),
                f"workout routine {routine_id}",
            )
        )

    def get_summary(self, summary_id: uuid.UUID) -> WorkoutSummary:
        return WorkoutSummary(
            **self._one(
                f"SELECT {_SUMMARY_COLUMNS} FROM workout_summaries WHERE id = ?",
                (summary_id,),
                f"workout summary {summary_id}",
            )
        )

    def find_workout_exercise(
        self, workout_id: uuid.UUID, exercise_id: uuid.UUID
    ) -> WorkoutExercise:
        """Return the link between a routine and one of its exercises."""
        return WorkoutExercise(
            **self._one(
                f"SELECT {_WORKOUT_EXERCISE_COLUMNS} FROM workout_exercises "
                "WHERE workout_id = ? AND exercise_id = ? ORDER BY rowid",
                (workout_id, exercise_id),
                f"exercise {exercise_id} in workout {workout_id}",
            )
        )

    def routine_exercises(self, workout_id: uuid.UUID) -> List[WorkoutExercise]:
        rows = self._conn.execute(
            f"SELECT {_WORKOUT_EXERCISE_COLUMNS} FROM workout_exercises "
            "WHERE workout_id = ? ORDER BY rowid",
            (workout_id,),
        )
        return [WorkoutExercise(**dict(row)) for row in rows]

    def list_routines(self) -> List[WorkoutRoutine]:
        rows = self._conn.execute(
            f"SELECT {_ROUTINE_COLUMNS} FROM workout_routines ORDER BY rowid"
        )
        return [WorkoutRoutine(**dict(row)) for row in rows]

    def list_summaries(self, user_id: uuid.UUID) -> List[WorkoutSummary]:
        rows = self._conn.execute(
            f"SELECT {_SUMMARY_COLUMNS} FROM workout_summaries "
            "WHERE user_id = ? ORDER BY rowid",
            (user_id,),
        )
        return [WorkoutSummary(**dict(row)) for row in rows]

    def update_exercise_positions(
        self, workout_id: uuid.UUID, position: int
    ) -> WorkoutExercise:
        """Set the position of every exercise in a workout; return the first."""
        cursor = self._conn.execute(
            "UPDATE workout_exercises SET position = ? WHERE workout_id = ?",
            (position, workout_id),
        )
        if cursor.rowcount == 0:
            raise NotFoundError(f"workout {workout_id} has no exercises")
        return WorkoutExercise(
            **self._one(
                f"SELECT {_WORKOUT_EXERCISE_COLUMNS} FROM workout_exercises "
                "WHERE workout_id = ? ORDER BY rowid",
                (workout_id,),
                f"workout {workout_id} exercises",
            )
        )

    def update_routine(
        self,
        routine_id: uuid.UUID,
        name: str,
        description: str,
        total_duration: int,
        rounds_per_exercise: int,
        round_duration: int,
        rest_duration: int,
    ) -> WorkoutRoutine:
        cursor = self._conn.execute(
            "UPDATE workout_routines SET name = ?, description = ?, total_duration = ?, "
            "rounds_per_exercise = ?, round_duration = ?, rest_duration = ? WHERE id = ?",
            (
                name,
                description,
                total_duration,
                rounds_per_exercise,
                round_duration,
                rest_duration,
                routine_id,
            ),
        )
        if cursor.rowcount == 0:
            raise NotFoundError(f"workout routine {routine_id} not found")
        return self.get_routine(routine_id)