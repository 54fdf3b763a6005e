"""The WSGI application: routes, request handlers and the server entry point."""

from __future__ import annotations

import argparse
import contextlib
import json
import logging
import os
import sqlite3
import sys
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from operator import attrgetter
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence

from dotenv import load_dotenv
from werkzeug.exceptions import HTTPException, MethodNotAllowed, NotFound
from werkzeug.http import HTTP_STATUS_CODES
from werkzeug.routing import Map, Rule
from werkzeug.security import safe_join
from werkzeug.serving import run_simple
from werkzeug.utils import send_from_directory
from werkzeug.wrappers import Request, Response

from workoutapi import db as database
from workoutapi.db import NotFoundError
from workoutapi.exercises import ExerciseStore
from workoutapi.models import NIL_UUID, Exercise, WorkoutExercise, WorkoutRoutine
from workoutapi.responses import ApiError, error_response, json_response
from workoutapi.workouts import WorkoutStore

log = logging.getLogger(__name__)

PORT = 8080
_STORE_ERRORS = (NotFoundError, sqlite3.Error)
_PLAIN_TEXT = "text/plain; charset=utf-8"


@dataclass
class ApiConfig:
    """Settings shared by every handler."""

    db: sqlite3.Connection
    platform: str = ""
    jwt_secret: str = ""
    static_dir: Path = field(default_factory=lambda: Path("front-end"))


@contextmanager
def _failing(status: int, message: str, errors=_STORE_ERRORS) -> Iterator[None]:
    try:
        yield
    except errors as exc:
        raise ApiError(status, message) from exc


def _parse_uuid(text: str, message: str) -> uuid.UUID:
    try:
        return uuid.UUID(text)
    except ValueError as exc:
        raise ApiError(400, message) from exc


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON value {name}")


_DECODER = json.JSONDecoder(parse_constant=_reject_constant)


def _decode_body(request: Request) -> Dict[str, Any]:
    """Decode the first JSON value of the body, which must be an object or null."""
    value, _ = _DECODER.raw_decode(request.get_data(as_text=True).lstrip())
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError("expected a JSON object")
    return value


def _field(data: Mapping[str, Any], key: str) -> Any:
    if key in data:
        return data[key]
    folded = key.casefold()
    return next(
        (value for name, value in data.items() if name.casefold() == folded), None
    )


def _without(data: Mapping[str, Any], *keys: str) -> Dict[str, Any]:
    dropped = {key.casefold() for key in keys}
    return {name: value for name, value in data.items() if name.casefold() not in dropped}


def _list(value: Any) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError("expected a JSON array")
    return value


def _uuid_list(value: Any) -> Optional[List[uuid.UUID]]:
    if value is None:
        return None
    ids = []
    for item in _list(value):
        if item is None:
            ids.append(NIL_UUID)
        elif isinstance(item, str):
            ids.append(uuid.UUID(item))
        else:
            raise ValueError("expected a UUID string")
    return ids


def _object(value: Any) -> Any:
    return {} if value is None else value


class _Api:
    """The WSGI callable that routes requests to handlers."""

    def __init__(self, config: ApiConfig) -> None:
        self.config = config
        self.exercises = ExerciseStore(config.db)
        self.workouts = WorkoutStore(config.db)
        self.url_map = Map(
            [
                Rule("/app/", endpoint=self._static),
                Rule("/app/<path:path>", endpoint=self._static),
                Rule("/healthz", methods=["GET"], endpoint=self._readiness),
                Rule("/admin/reset", methods=["POST"], endpoint=self._reset),
                Rule("/api/exercises", methods=["GET"], endpoint=self._get_exercises),
                Rule(
                    "/api/users/<user_id>/exercises",
                    methods=["GET"],
                    endpoint=self._get_user_exercises,
                ),
                Rule(
                    "/api/exercises/<exercise_id>",
                    methods=["GET"],
                    endpoint=self._get_single_exercise,
                ),
                Rule(
                    "/api/exercises/<exercise_id>",
                    methods=["PUT"],
                    endpoint=self._update_exercise,
                ),
                Rule(
                    "/api/exercises/<exercise_id>",
                    methods=["DELETE"],
                    endpoint=self._delete_exercise,
                ),
                Rule("/api/workouts", methods=["POST"], endpoint=self._create_workout),
                Rule("/api/workouts", methods=["GET"], endpoint=self._get_workouts),
                Rule(
                    "/api/workouts/<workout_id>",
                    methods=["GET"],
                    endpoint=self._get_workout,
                ),
                Rule(
                    "/api/workouts/<workout_id>",
                    methods=["PUT"],
                    endpoint=self._update_workout,
                ),
                Rule(
                    "/api/workouts/<workout_id>",
                    methods=["DELETE"],
                    endpoint=self._delete_workout,
                ),
                Rule(
                    "/api/workout_summaries/<workout_summary_id>",
                    methods=["GET"],
                    endpoint=self._get_single_workout_summary,
                ),
            ]
        )

    def __call__(self, environ, start_response):
        request = Request(environ)
        return self._dispatch(request)(environ, start_response)

    def _dispatch(self, request: Request) -> Response:
        adapter = self.url_map.bind_to_environ(request.environ)
        try:
            handler, values = adapter.match()
            return handler(request, **values)
        except ApiError as exc:
            return error_response(exc.status, exc.message, exc.__cause__)
        except MethodNotAllowed as exc:
            return Response(
                "Method Not Allowed\n",
                status=405,
                headers={"Allow": ", ".join(exc.valid_methods or [])},
                content_type=_PLAIN_TEXT,
            )
        except NotFound:
            return Response("404 page not found\n", status=404, content_type=_PLAIN_TEXT)
        except HTTPException as exc:
            return exc.get_response(request.environ)

    def _static(self, request: Request, path: str = "") -> Response:
        directory = str(self.config.static_dir)
        target = path or "index.html"
        if target.endswith("/"):
            target += "index.html"
        joined = safe_join(directory, target)
        if joined is None:
            raise NotFound()
        if os.path.isdir(joined):
            target = target.rstrip("/") + "/index.html"
        return send_from_directory(directory, target, request.environ)

    def _readiness(self, request: Request) -> Response:
        return Response(
            f"{HTTP_STATUS_CODES[200]}\n",
            status=200,
            headers={"Content-Type": "plain/text, charset=utf-8"},
        )

    def _reset(self, request: Request) -> Response:
        body = []
        status = 200
        # A non-dev platform is answered with 401, but the tables are still cleared.
        if self.config.platform != "dev":
            status = 401
            body.append("Forbidden")
        for reset in (
            database.reset_users,
            database.reset_exercises,
            database.reset_workout_routines,
            database.reset_workout_exercises,
        ):
            with contextlib.suppress(sqlite3.Error):
                reset(self.config.db)
        body.append("database reset to initial state\n")
        return Response("".join(body), status=status, content_type=_PLAIN_TEXT)

    def _get_exercises(self, request: Request) -> Response:
        with _failing(404, "couldn't get exercises from db"):
            items = self.exercises.list_all()
        return json_response(200, items or None)

    def _get_single_exercise(self, request: Request, exercise_id: str) -> Response:
        ident = _parse_uuid(exercise_id, "couldn't get exercise ID")
        with _failing(404, "couldn't find exercise"):
            exercise = self.exercises.get(ident)
        return json_response(200, exercise)

    def _get_user_exercises(self, request: Request, user_id: str) -> Response:
        ident = _parse_uuid(user_id, "Couldn't get UUID")
        with _failing(404, "Couldn't get exercises by user_id"):
            items = self.exercises.list_for_user(ident)
        return json_response(200, items)

    def _update_exercise(self, request: Request, exercise_id: str) -> Response:
        ident = _parse_uuid(exercise_id, "coudn't get UUID")
        with _failing(500, "Couldn't decode parameters", (ValueError,)):
            params = Exercise.from_dict(_without(_decode_body(request), "id", "user_id"))
        with _failing(500, "couldn't update exercise"):
            exercise = self.exercises.update(ident, params.name, params.tool)
        return json_response(200, exercise)

    def _delete_exercise(self, request: Request, exercise_id: str) -> Response:
        ident = _parse_uuid(exercise_id, "Invalid exercise ID")
        with _failing(500, "Couldn't delete exercise"):
            self.exercises.delete(ident)
        return Response(status=204)

    def _create_workout(self, request: Request) -> Response:
        with _failing(500, "couldn't decode parameters", (ValueError,)):
            body = _decode_body(request)
            params = WorkoutRoutine.from_dict(_without(body, "id"))
            exercise_ids = _uuid_list(_field(body, "exercises"))
        with _failing(500, "couldn't create workout"):
            routine = self.workouts.create_routine(
                params.name,
                params.description,
                params.total_duration,
                params.rounds_per_exercise,
                params.round_duration,
                params.rest_duration,
            )
        with _failing(500, "couldn't create Workouts Exercise data"):
            for position, exercise_id in enumerate(exercise_ids or [], start=1):
                self.workouts.add_exercise(routine.id, exercise_id, position)
        return json_response(201, {"Workout": routine, "Exercises": exercise_ids})

    def _get_workouts(self, request: Request) -> Response:
        with _failing(404, "couldn't get workout routines"):
            routines = self.workouts.list_routines()
        return json_response(200, routines or None)

    def _get_workout(self, request: Request, workout_id: str) -> Response:
        ident = _parse_uuid(workout_id, "couldn't get workout ID")
        with _failing(500, "couldn't get exercises based on workout ID"):
            links = self.workouts.routine_exercises(ident)
        exercise_ids = [
            link.exercise_id for link in sorted(links, key=attrgetter("position"))
        ]
        with _failing(404, "couldn't get workout routines"):
            routine = self.workouts.get_routine(ident)
        return json_response(
            200, {"Workout": routine, "ExerciseIDs": exercise_ids or None}
        )

    def _update_workout(self, request: Request, workout_id: str) -> Response:
        ident = _parse_uuid(workout_id, "couldn't get UUID")
        with _failing(500, "couldn't decode parameters", (ValueError,)):
            body = _decode_body(request)
            params = WorkoutRoutine.from_dict(_object(_field(body, "workout_routine")))
            wanted = [
                WorkoutExercise.from_dict(_object(item))
                for item in _list(_field(body, "exercises"))
            ]
        with _failing(500, "couldn't update workout routine"):
            routine = self.workouts.update_routine(
                ident,
                params.name,
                params.description,
                params.total_duration,
                params.rounds_per_exercise,
                params.round_duration,
                params.rest_duration,
            )
        updated = []
        with _failing(500, "couldn't update workout exercises"):
            for exercise in wanted:
                updated.append(
                    self.workouts.update_exercise_positions(ident, exercise.position)
                )
        payload = routine.to_dict()
        payload["Exercises"] = updated or None
        return json_response(200, payload)

    def _delete_workout(self, request: Request, workout_id: str) -> Response:
        ident = _parse_uuid(workout_id, "couldn't parse UUID")
        with _failing(500, "couldn't delete workout routine"):
            self.workouts.delete_routine(ident)
        return Response(status=204)

    def _get_single_workout_summary(
        self, request: Request, workout_summary_id: str
    ) -> Response:
        ident = _parse_uuid(workout_summary_id, "couldn't parse uuid")
        with _failing(500, "couldn't get summary data"):
            summary = self.workouts.get_summary(ident)
        return json_response(200, summary)


def create_app(config: ApiConfig) -> Callable:
    """Build the WSGI application for ``config``."""
    return _Api(config)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Load settings from the environment and serve the API."""
    parser = argparse.ArgumentParser(prog="workoutapi", description="Serve the workout API.")
    parser.parse_args(argv)
    load_dotenv()
    logging.basicConfig(level=logging.INFO)

    try:
        connection = database.connect(os.environ.get("DB_URL") or "workout.db")
    except sqlite3.Error as exc:
        print(f"Error connecting to DB: {exc}", file=sys.stderr)
        return 1

    config = ApiConfig(
        db=connection,
        platform=os.environ.get("PLATFORM", ""),
        jwt_secret=os.environ.get("JWT_SECRET", ""),
        static_dir=Path(".") / "front-end",
    )
    log.info("Serving files from http://localhost:%s/app/", PORT)
    run_simple("0.0.0.0", PORT, create_app(config))
    return 1