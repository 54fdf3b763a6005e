# workoutapi

A small JSON HTTP API for exercises, workout routines and workout
summaries. It is a WSGI application built on Werkzeug and keeps its data
in an SQLite database file.

## Installing

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Running the server

```
workoutapi
```

The command takes no options. It loads a `.env` file from the working
directory if there is one, opens the database and serves on port 8080 on
all interfaces. Settings come from the environment:

| Variable     | Meaning                                                              |
|--------------|----------------------------------------------------------------------|
| `DB_URL`     | Path of the SQLite database file; `workout.db` when unset or empty   |
| `PLATFORM`   | Deployment name; anything but `dev` makes the reset endpoint answer 401 |
| `JWT_SECRET` | Stored in the configuration; none of the current endpoints use it    |

The tables are created on first use. Files under `./front-end` are served
at `/app/` (a directory answers with its `index.html`).

## Endpoints

Request and response bodies are JSON. Failures answer with
`{"error": "<message>"}` and a status code; an unknown path answers
`404 page not found` as plain text, and a known path with the wrong method
answers 405.

Admin

- `GET /healthz` answers `OK`.
- `POST /admin/reset` deletes every user, exercise, workout routine and
  routine-to-exercise link. On a platform other than `dev` the answer is
  401 with `Forbidden` in front of the message, but the tables are cleared
  all the same. Rounds, summaries and refresh tokens are left alone.

Exercises

- `GET /api/exercises` lists every exercise (`null` when there are none).
- `GET /api/exercises/{exercise_id}` returns one exercise, or 404.
- `PUT /api/exercises/{exercise_id}` sets `name` and `tool`.
- `DELETE /api/exercises/{exercise_id}` answers 204.
- `GET /api/users/{user_id}/exercises` lists the exercises owned by a user.

Workout routines

- `POST /api/workouts` creates a routine from `name`, `description`,
  `total_duration`, `rounds_per_exercise`, `round_duration`,
  `rest_duration` and `exercises`, an ordered list of exercise ids that are
  linked at positions 1, 2, 3 and so on. Answers 201 with
  `{"Workout": {...}, "Exercises": [...]}`.
- `GET /api/workouts` lists every routine (`null` when there are none).
- `GET /api/workouts/{workout_id}` answers
  `{"Workout": {...}, "ExerciseIDs": [...]}`, the ids sorted by position.
- `PUT /api/workouts/{workout_id}` takes
  `{"workout_routine": {...}, "exercises": [{"position": n}, ...]}`. The
  routine's fields are replaced; for each entry in `exercises`, every
  exercise of the routine is given that position. The answer is the routine
  with an added `Exercises` list.
- `DELETE /api/workouts/{workout_id}` answers 204.

Workout summaries

- `GET /api/workout_summaries/{workout_summary_id}` returns one summary.

## Using it as a library

```python
from workoutapi.app import ApiConfig, create_app
from workoutapi.db import connect

config = ApiConfig(db=connect("workout.db"), platform="dev")
app = create_app(config)  # a WSGI callable
```

`ApiConfig` holds `db`, `platform`, `jwt_secret` and `static_dir`.

The storage layer works on its own:

- `workoutapi.db`: `connect(path)`, the `reset_*` functions and
  `NotFoundError`, raised when a row that must exist is missing.
- `workoutapi.exercises.ExerciseStore`
- `workoutapi.users.UserStore` and `workoutapi.users.RefreshTokenStore`
- `workoutapi.workouts.WorkoutStore`, for routines, their exercise links,
  rounds and summaries.
- `workoutapi.models` holds the record dataclasses with `to_dict` (and,
  where input is read, `from_dict`).
- `workoutapi.responses` builds JSON and error responses.

## What it does not do

The HTTP API has no user accounts or sign-in: there are no endpoints to
register, read, change or delete users, to log in, or to refresh or revoke
tokens, and no endpoint checks a bearer token. Users and refresh tokens can
only be managed through `UserStore` and `RefreshTokenStore`; nothing in the
package hashes passwords or issues tokens. Exercises cannot be created over
HTTP, and workout summaries can only be fetched one at a time by id; they
are created, listed and deleted through `ExerciseStore` and `WorkoutStore`.