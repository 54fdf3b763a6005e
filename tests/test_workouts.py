import uuid
from datetime import datetime, timezone

import pytest

from workoutapi.db import NotFoundError, connect
from workoutapi.workouts import WorkoutStore


@pytest.fixture
def store():
    conn = connect(":memory:")
    yield WorkoutStore(conn)
    conn.close()


def _routine(store, name="Swings"):
    return store.create_routine(name, "kettlebell work", 1200, 5, 60, 30)


def test_create_routine_round_trip(store):
    routine = _routine(store)
    assert routine.name == "Swings"
    assert routine.description == "kettlebell work"
    assert routine.total_duration == 1200
    assert routine.rounds_per_exercise == 5
    assert routine.round_duration == 60
    assert routine.rest_duration == 30
    assert store.get_routine(routine.id) == routine


def test_list_routines_in_insertion_order(store):
    first = _routine(store, "A")
    second = _routine(store, "B")
    assert store.list_routines() == [first, second]


def test_get_missing_routine_raises(store):
    with pytest.raises(NotFoundError):
        store.get_routine(uuid.uuid4())


def test_delete_routine(store):
    routine = _routine(store)
    store.delete_routine(routine.id)
    assert store.list_routines() == []
    with pytest.raises(NotFoundError):
        store.get_routine(routine.id)


def test_update_routine(store):
    routine = _routine(store)
    updated = store.update_routine(routine.id, "Snatch", "new", 900, 3, 45, 15)
    assert updated.id == routine.id
    assert updated.name == "Snatch"
    assert updated.rest_duration == 15
    assert store.get_routine(routine.id) == updated


def test_update_missing_routine_raises(store):
    with pytest.raises(NotFoundError):
        store.update_routine(uuid.uuid4(), "x", "y", 1, 1, 1, 1)


def test_add_and_list_routine_exercises(store):
    routine = _routine(store)
    exercise_ids = [uuid.uuid4(), uuid.uuid4()]
    links = [
        store.add_exercise(routine.id, exercise_id, position)
        for position, exercise_id in enumerate(exercise_ids, start=1)
    ]
    listed = store.routine_exercises(routine.id)
    assert listed == links
    assert [link.exercise_id for link in listed] == exercise_ids
    assert [link.position for link in listed] == [1, 2]
    assert store.routine_exercises(uuid.uuid4()) == []


def test_find_workout_exercise(store):
    routine = _routine(store)
    exercise_id = uuid.uuid4()
    link = store.add_exercise(routine.id, exercise_id, 1)
    assert store.find_workout_exercise(routine.id, exercise_id) == link
    with pytest.raises(NotFoundError):
        store.find_workout_exercise(routine.id, uuid.uuid4())


def test_update_exercise_positions_sets_all(store):
    routine = _routine(store)
    store.add_exercise(routine.id, uuid.uuid4(), 1)
    store.add_exercise(routine.id, uuid.uuid4(), 2)
    first = store.update_exercise_positions(routine.id, 7)
    assert first.workout_id == routine.id
    assert first.position == 7
    assert {link.position for link in store.routine_exercises(routine.id)} == {7}


def test_update_exercise_positions_without_exercises_raises(store):
    with pytest.raises(NotFoundError):
        store.update_exercise_positions(uuid.uuid4(), 1)


def test_create_round_round_trip(store):
    date = datetime(2024, 5, 1, 7, 30, tzinfo=timezone.utc)
    link_id = uuid.uuid4()
    user_id = uuid.uuid4()
    rnd = store.create_round(date, 2, 12.5, link_id, user_id)
    assert rnd.date == date
    assert rnd.round_number == 2
    assert rnd.reps_completed == 12.5
    assert rnd.workout_exercise_id == link_id
    assert rnd.user_id == user_id


def test_create_summary_and_get(store):
    routine = _routine(store)
    user_id = uuid.uuid4()
    date = datetime(2024, 5, 1, tzinfo=timezone.utc)
    summary = store.create_summary(routine.id, date, 24, 3, 40.0, 960.0, user_id)
    assert summary.workout_routine_id == routine.id
    assert summary.user_id == user_id
    assert summary.date == date
    assert summary.weight_in_kg == 24
    assert summary.workout_number == 3
    assert summary.total_reps == 40.0
    assert summary.work_capacity == 960.0
    assert store.get_summary(summary.id) == summary


def test_list_summaries_filters_by_user(store):
    routine = _routine(store)
    owner = uuid.uuid4()
    other = uuid.uuid4()
    date = datetime(2024, 5, 1, tzinfo=timezone.utc)
    mine = store.create_summary(routine.id, date, 16, 1, 10.0, 160.0, owner)
    store.create_summary(routine.id, date, 16, 1, 10.0, 160.0, other)
    assert store.list_summaries(owner) == [mine]
    assert store.list_summaries(uuid.uuid4()) == []


def test_delete_summary(store):
    routine = _routine(store)
    user_id = uuid.uuid4()
    date = datetime(2024, 5, 1, tzinfo=timezone.utc)
    summary = store.create_summary(routine.id, date, 16, 1, 10.0, 160.0, user_id)
    store.delete_summary(summary.id)
    with pytest.raises(NotFoundError):
        store.get_summary(summary.id)
    assert store.list_summaries(user_id) == []