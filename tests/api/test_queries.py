from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.badge_checkin.badge_checkin.api.queries import CheckInTag, TagsGet, UserGet, UserSearch
from src.badge_checkin.badge_checkin.core.exceptions import InvalidParameters, TransportError


def user_json(user_id: str = "u-1", **overrides) -> dict:
    data = {
        "id": user_id,
        "name": "Jane Doe",
        "email": "jane@example.org",
        "applied": True,
        "accepted": True,
        "confirmed": True,
        "confirmationBranch": "Participant",
        "application": {"type": "Participant"},
        "confirmation": {"type": "Participant"},
        "questions": [
            {"name": "school", "value": "Georgia Tech", "values": None},
            {"name": "tshirt-size", "value": "M", "values": None},
            {"name": "optional-items", "value": None, "values": ["laptop", "monitor"]},
        ],
    }
    data.update(overrides)
    return data


def tag_json(name: str = "venue-entrance", checked_in: bool = True, success: bool = True) -> dict:
    return {
        "tag": {"name": name},
        "checked_in": checked_in,
        "checkin_success": success,
        "last_successful_checkin": {"checked_in_date": "2026-10-17T09:30:00Z", "checked_in_by": "kiosk-1"},
    }


@pytest.mark.parametrize(
    "build",
    [
        lambda: UserSearch("", 10),
        lambda: UserSearch("   ", 10),
        lambda: UserSearch("jane", 0),
        lambda: UserSearch("jane", -3),
        lambda: UserSearch("jane", True),
        lambda: UserGet(""),
        lambda: CheckInTag("", "venue-entrance", True),
        lambda: CheckInTag("u-1", "", True),
        lambda: CheckInTag("u-1", "venue-entrance", "yes"),
        lambda: TagsGet("yes"),
    ],
)
def test_invalid_parameters_rejected_on_construction(build):
    with pytest.raises(InvalidParameters):
        build()


def test_user_search_request_shape():
    request = UserSearch("jane", 10).request()

    assert request.operation_name == "UserSearch"
    assert request.variables == {"text": "jane", "n": 10}
    assert "search_user_simple(search: $text, offset: 0, n: $n" in request.document
    assert "confirmed: true" in request.document and "accepted: true" in request.document
    assert "fragment UserData on User" in request.document
    assert "fragment TagData on TagState" in request.document


def test_check_in_request_shape():
    request = CheckInTag("u-1", "venue-entrance", False).request()

    assert request.variables == {"id": "u-1", "tag": "venue-entrance", "checkin": False}
    assert "check_in(user: $id, tag: $tag, checkin: $checkin)" in request.document
    for field in ("checked_in", "checkin_success", "checked_in_date", "checked_in_by", "confirmationBranch"):
        assert field in request.document
    for question in ("major", "school", "tshirt-size", "dietary-restrictions", "optional-items"):
        assert f'"{question}"' in request.document


def test_tags_get_request_shape():
    request = TagsGet(True).request()

    assert request.variables == {"only_current": True}
    assert "tags(only_current: $only_current)" in request.document


def test_user_get_parses_user_and_tags():
    response = {"data": {"user": {"user": user_json(), "tags": [tag_json(), tag_json("lunch", False, False)]}}}

    found = UserGet("u-1").parse(response)

    assert found.user.id == "u-1"
    assert found.user.confirmation_branch == "Participant"
    assert found.user.application_type == "Participant"
    assert found.user.questions["school"] == "Georgia Tech"
    assert found.user.questions["optional-items"] == "laptop, monitor"
    entrance = found.tag("venue-entrance")
    assert entrance.checked_in is True
    assert entrance.last_checked_in_at == datetime(2026, 10, 17, 9, 30, tzinfo=timezone.utc)
    assert entrance.last_checked_in_by == "kiosk-1"
    assert found.tag("lunch").checked_in is False
    assert found.tag("missing") is None


def test_user_get_null_user_is_none():
    assert UserGet("nobody").parse({"data": {"user": None}}) is None


def test_search_parses_list():
    response = {"data": {"search_user_simple": [{"user": user_json("a"), "tags": []}, {"user": user_json("b"), "tags": []}]}}

    found = UserSearch("jane", 2).parse(response)

    assert [f.user.id for f in found] == ["a", "b"]


def test_tags_get_parses_names():
    assert TagsGet().parse({"data": {"tags": [{"name": "lunch"}, {"name": "dinner"}]}}) == ["lunch", "dinner"]


def test_check_in_null_payload_is_none():
    assert CheckInTag("nobody", "lunch").parse({"data": {"check_in": None}}) is None


def test_graphql_errors_raise_transport_error():
    with pytest.raises(TransportError) as exc:
        UserGet("u-1").parse({"errors": [{"message": "Not authorized"}], "data": None})

    assert exc.value.errors == ["Not authorized"]


@pytest.mark.parametrize("response", [{}, {"data": None}, [], "oops"])
def test_missing_data_raises_transport_error(response):
    with pytest.raises(TransportError):
        TagsGet().parse(response)


def test_malformed_tag_state_raises_transport_error():
    response = {"data": {"check_in": {"user": user_json(), "tags": [{"checked_in": True}]}}}

    with pytest.raises(TransportError):
        CheckInTag("u-1", "lunch").parse(response)
