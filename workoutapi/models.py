"""Records stored by the API and their JSON forms."""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

NIL_UUID = uuid.UUID(int=0)
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1
_RFC3339 = re.compile(
    r"^(\d{4}-\d{2}-\d{2})T(\d{2}:\d{2}:\d{2})(?:\.(\d{1,9}))?(Z|[+-]\d{2}:\d{2})$"
)


def _format_time(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset() or timedelta(0)
    if not offset:
        return text + "Z"
    minutes = int(offset.total_seconds()) // 60
    sign = "+" if minutes >= 0 else "-"
    hours, mins = divmod(abs(minutes), 60)
    return f"{text}{sign}{hours:02d}:{mins:02d}"


def _lookup(data: Mapping[str, Any], key: str) -> Any:
    if key in data:
        return data[key]
    folded = key.casefold()
    for name, value in data.items():
        if isinstance(name, str) and name.casefold() == folded:
            return value
    return None


def _check_mapping(data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


def _uuid(data: Mapping[str, Any], key: str) -> uuid.UUID:
    value = _lookup(data, key)
    if value is None:
        return NIL_UUID
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        raise ValueError(f"{key}: expected a UUID string")
    return uuid.UUID(value)


def _str(data: Mapping[str, Any], key: str) -> str:
    value = _lookup(data, key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key}: expected a string")
    return value


def _int32(data: Mapping[str, Any], key: str) -> int:
    value = _lookup(data, key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key}: expected an integer")
    if not _INT32_MIN <= value <= _INT32_MAX:
        raise ValueError(f"{key}: {value} overflows a 32-bit integer")
    return value


def _float(data: Mapping[str, Any], key: str) -> float:
    value = _lookup(data, key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key}: expected a number")
    return float(value)


def _time(data: Mapping[str, Any], key: str) -> datetime:
    value = _lookup(data, key)
    if value is None:
        return ZERO_TIME
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValueError(f"{key}: expected an RFC 3339 time string")
    match = _RFC3339.match(value)
    if match is None:
        raise ValueError(f"{key}: {value!r} is not an RFC 3339 time")
    day, clock, fraction, zone = match.groups()
    text = f"{day}T{clock}"
    if fraction:
        text += "." + fraction[:6].ljust(6, "0")
    text += "+00:00" if zone == "Z" else zone
    return datetime.fromisoformat(text)


@dataclass
class Exercise:
    id: uuid.UUID
    name: str
    tool: str
    user_id: uuid.UUID

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "tool": self.tool,
            "user_id": str(self.user_id),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Exercise":
        data = _check_mapping(data)
        return cls(
            id=_uuid(data, "id"),
            name=_str(data, "name"),
            tool=_str(data, "tool"),
            user_id=_uuid(data, "user_id"),
        )


@dataclass
class RefreshToken:
    token: str
    created_at: datetime
    updated_at: datetime
    user_id: uuid.UUID
    expires_at: datetime
    revoked_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "token": self.token,
            "created_at": _format_time(self.created_at),
            "updated_at": _format_time(self.updated_at),
            "user_id": str(self.user_id),
            "expires_at": _format_time(self.expires_at),
            "revoked_at": {
                "Time": _format_time(self.revoked_at or ZERO_TIME),
                "Valid": self.revoked_at is not None,
            },
        }


@dataclass
class Round:
    id: uuid.UUID
    date: datetime
    round_number: int
    reps_completed: float
    workout_exercise_id: uuid.UUID
    user_id: uuid.UUID

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "date": _format_time(self.date),
            "round_number": self.round_number,
            "reps_completed": self.reps_completed,
            "workout_exercise_id": str(self.workout_exercise_id),
            "user_id": str(self.user_id),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Round":
        data = _check_mapping(data)
        return cls(
            id=_uuid(data, "id"),
            date=_time(data, "date"),
            round_number=_int32(data, "round_number"),
            reps_completed=_float(data, "reps_completed"),
            workout_exercise_id=_uuid(data, "workout_exercise_id"),
            user_id=_uuid(data, "user_id"),
        )


@dataclass
class User:
    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    last_name: str
    first_name: str
    username: str
    email: str
    password: str = ""

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "created_at": _format_time(self.created_at),
            "updated_at": _format_time(self.updated_at),
            "last_name": self.last_name,
            "first_name": self.first_name,
            "username": self.username,
            "email": self.email,
            "password": self.password,
        }


@dataclass
class WorkoutExercise:
    id: uuid.UUID
    workout_id: uuid.UUID
    exercise_id: uuid.UUID
    position: int

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "workout_id": str(self.workout_id),
            "exercise_id": str(self.exercise_id),
            "position": self.position,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "WorkoutExercise":
        data = _check_mapping(data)
        return cls(
            id=_uuid(data, "id"),
            workout_id=_uuid(data, "workout_id"),
            exercise_id=_uuid(data, "exercise_id"),
            position=_int32(data, "position"),
        )


@dataclass
class WorkoutRoutine:
    id: uuid.UUID
    name: str
    description: str
    total_duration: int
    rounds_per_exercise: int
    round_duration: int
    rest_duration: int

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "description": self.description,
            "total_duration": self.total_duration,
            "rounds_per_exercise": self.rounds_per_exercise,
            "round_duration": self.round_duration,
            "rest_duration": self.rest_duration,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "WorkoutRoutine":
        data = _check_mapping(data)
        return cls(
            id=_uuid(data, "id"),
            name=_str(data, "name"),
            description=_str(data, "description"),
            total_duration=_int32(data, "total_duration"),
            rounds_per_exercise=_int32(data, "rounds_per_exercise"),
            round_duration=_int32(data, "round_duration"),
            rest_duration=_int32(data, "rest_duration"),
        )


@dataclass
class WorkoutSummary:
    id: uuid.UUID
    date: datetime
    weight_in_kg: int
    workout_number: int
    total_reps: float
    work_capacity: float
    user_id: uuid.UUID
    workout_routine_id: uuid.UUID

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "date": _format_time(self.date),
            "weight_in_kg": self.weight_in_kg,
            "workout_number": self.workout_number,
            "total_reps": self.total_reps,
            "work_capacity": self.work_capacity,
            "user_id": str(self.user_id),
            "workout_routine_id": str(self.workout_routine_id),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "WorkoutSummary":
        data = _check_mapping(data)
        return cls(
            id=_uuid(data, "id"),
            date=_time(data, "date"),
            weight_in_kg=_int32(data, "weight_in_kg"),
            workout_number=_int32(data, "workout_number"),
            total_reps=_float(data, "total_reps"),
            work_capacity=_float(data, "work_capacity"),
            user_id=_uuid(data, "user_id"),
            workout_routine_id=_uuid(data, "workout_routine_id"),
        )