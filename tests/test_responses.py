import json
import logging
import uuid

from workoutapi.models import Exercise
from workoutapi.responses import ApiError, error_response, json_response


def test_json_response_encodes_record():
    exercise = Exercise(
        id=uuid.uuid4(), name="Squat", tool="Kettlebell", user_id=uuid.uuid4()
    )
    response = json_response(201, exercise)
    assert response.status_code == 201
    assert response.headers["Content-Type"] == "application/json"
    assert json.loads(response.get_data()) == exercise.to_dict()


def test_json_response_none_is_null():
    assert json_response(200, None).get_data() == b"null"


def test_json_response_is_compact_and_ordered():
    body = json_response(200, {"b": "x", "a": "y"}).get_data()
    assert body == b'{"b":"x","a":"y"}'


def test_integral_float_has_no_fraction():
    assert json_response(200, {"value": 10.0}).get_data() == b'{"value":10}'


def test_float_uses_shortest_single_precision_form():
    response = json_response(200, [0.1])
    assert response.get_data() == b"[0.1]"
    assert json.loads(response.get_data()) == [0.1]


def test_html_characters_are_escaped():
    body = json_response(200, {"name": "<b>&"}).get_data()
    assert b"<" not in body and b">" not in body and b"&" not in body
    assert json.loads(body) == {"name": "<b>&"}


def test_unencodable_payload_gives_empty_body():
    response = json_response(200, {"value": float("nan")})
    assert response.status_code == 200
    assert response.get_data() == b""


def test_uuid_payload_is_string():
    ident = uuid.uuid4()
    assert json.loads(json_response(200, [ident]).get_data()) == [str(ident)]


def test_error_response_body():
    response = error_response(404, "couldn't find exercise", None)
    assert response.status_code == 404
    assert json.loads(response.get_data()) == {"error": "couldn't find exercise"}


def test_error_response_logs_server_errors(caplog):
    with caplog.at_level(logging.ERROR, logger="workoutapi.responses"):
        response = error_response(500, "boom", ValueError("cause"))
    assert response.status_code == 500
    assert "Responding with 5XX error: boom" in caplog.text
    assert "cause" in caplog.text


def test_error_response_client_error_not_logged_as_5xx(caplog):
    with caplog.at_level(logging.ERROR, logger="workoutapi.responses"):
        error_response(400, "bad", None)
    assert "5XX" not in caplog.text


def test_api_error_carries_status_and_message():
    error = ApiError(400, "couldn't parse uuid")
    assert error.status == 400
    assert error.message == "couldn't parse uuid"
    assert str(error) == "couldn't parse uuid"