from __future__ import annotations

import pytest

from src.badge_checkin.badge_checkin.checkin.model import ScanResult
from src.badge_checkin.badge_checkin.core.enums import ScanOutcome, ScanState
from src.badge_checkin.badge_checkin.core.exceptions import (
    CheckInRejected,
    InvalidParameters,
    MalformedTag,
    ReaderError,
    Timeout,
    TransportError,
    UnknownUser,
)
from src.badge_checkin.badge_checkin.kiosk.controller import status_for
from src.badge_checkin.badge_checkin.main import create_app

TAG = "venue-entrance"

BADGE = bytes([0xD1, 0x01, 0x06, 0x54, 0x02]) + b"enu-1"


def user_tags(checked_in: bool = False, success: bool = False) -> dict:
    return {
        "user": {"id": "u-1", "name": "Jane Doe", "email": "jane@example.org", "accepted": True, "confirmed": True},
        "tags": [{"tag": {"name": TAG}, "checked_in": checked_in, "checkin_success": success}],
    }


class KioskTransport:
    def __init__(self, **responses):
        self.responses = {
            "UserGet": {"data": {"user": user_tags()}},
            "CheckInTag": {"data": {"check_in": user_tags(True, True)}},
            "UserSearch": {"data": {"search_user_simple": [user_tags()]}},
            "TagsGet": {"data": {"tags": [{"name": TAG}, {"name": "lunch"}]}},
        }
        self.responses.update(responses)
        self.calls = []

    def execute(self, document, variables, *, operation_name=None, timeout=None):
        self.calls.append((operation_name, variables))
        response = self.responses[operation_name]
        if isinstance(response, BaseException):
            raise response
        return response


class StaticReader:
    def __init__(self, data: bytes):
        self.data = data

    def open_session(self, timeout):
        return object()

    def read_tag_bytes(self, handle, timeout):
        return self.data

    def close_session(self, handle):
        pass


@pytest.fixture
def make_client(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")

    def _make(transport=None, reader=None):
        app = create_app(transport=transport or KioskTransport(), reader=reader)
        return app, app.test_client()

    return _make


def test_health_reports_reader(make_client):
    _, client = make_client()

    res = client.get("/health")

    assert res.status_code == 200
    assert res.get_json() == {"status": "ok", "reader": False}


def test_tags_lists_names(make_client):
    transport = KioskTransport()
    _, client = make_client(transport)

    res = client.get("/api/tags?current=1")

    assert res.get_json() == {"success": True, "tags": [TAG, "lunch"]}
    assert transport.calls == [("TagsGet", {"only_current": True})]


def test_search_users(make_client):
    transport = KioskTransport()
    _, client = make_client(transport)

    res = client.get("/api/users/search?q=jane")

    body = res.get_json()
    assert res.status_code == 200
    assert body["users"][0]["user"]["id"] == "u-1"
    assert body["users"][0]["tags"][0]["name"] == TAG
    assert transport.calls == [("UserSearch", {"text": "jane", "n": 10})]


@pytest.mark.parametrize("query", ["/api/users/search?q=", "/api/users/search?q=jane&n=abc", "/api/users/search?q=jane&n=0"])
def test_search_rejects_bad_parameters(make_client, query):
    transport = KioskTransport()
    _, client = make_client(transport)

    res = client.get(query)

    assert res.status_code == 400
    assert res.get_json()["success"] is False
    assert transport.calls == []


def test_search_timeout_is_gateway_timeout(make_client):
    _, client = make_client(KioskTransport(UserSearch=Timeout("UserSearch timed out")))

    res = client.get("/api/users/search?q=jane")

    assert res.status_code == 504
    assert res.get_json()["error"] == "Timeout"


def test_manual_check_in(make_client):
    transport = KioskTransport()
    _, client = make_client(transport)

    res = client.post("/api/checkin", json={"user_id": "u-1"})

    body = res.get_json()
    assert res.status_code == 200
    assert body["outcome"] == "COMPLETED"
    assert body["tag"] == TAG
    assert body["mutation_sent"] is True
    assert body["tag_state"]["checked_in"] is True
    assert [name for name, _ in transport.calls] == ["UserGet", "CheckInTag"]


@pytest.mark.parametrize(
    "transport, payload, status, error",
    [
        (KioskTransport(UserGet={"data": {"user": None}}), {"user_id": "nobody"}, 404, "UnknownUser"),
        (KioskTransport(), {"user_id": "u-1", "checkin": "yes"}, 400, "InvalidParameters"),
        (KioskTransport(CheckInTag=Timeout("CheckInTag timed out")), {"user_id": "u-1"}, 504, "Timeout"),
        (KioskTransport(CheckInTag=TransportError("HTTP 500")), {"user_id": "u-1"}, 502, "TransportError"),
    ],
)
def test_manual_check_in_failures(make_client, transport, payload, status, error):
    _, client = make_client(transport)

    res = client.post("/api/checkin", json=payload)

    assert res.status_code == status
    assert res.get_json()["error"] == error
    assert res.get_json()["success"] is False


def test_manual_check_in_requires_user_id(make_client):
    _, client = make_client()

    res = client.post("/api/checkin", json={})

    assert res.status_code == 400


def test_non_object_body_is_rejected(make_client):
    transport = KioskTransport()
    _, client = make_client(transport, reader=StaticReader(BADGE))

    assert client.post("/api/checkin", json=["u-1"]).status_code == 400
    assert client.post("/api/scan", json=[True]).status_code == 400
    assert transport.calls == []


def test_scan_without_reader(make_client):
    _, client = make_client()

    assert client.post("/api/scan").status_code == 503
    assert client.get("/api/scan/last").status_code == 404


def test_scan_with_reader(make_client):
    app, client = make_client(reader=StaticReader(BADGE))

    res = client.post("/api/scan", json={"checkin": True})

    assert res.status_code == 200
    assert res.get_json()["badge"] == "u-1"
    assert client.get("/api/scan/last").status_code == 404

    app.extensions["badge_checkin"].scan_loop.run_once()
    last = client.get("/api/scan/last")
    assert last.status_code == 200
    assert last.get_json()["outcome"] == "COMPLETED"


def test_scan_with_malformed_badge(make_client):
    _, client = make_client(reader=StaticReader(b"\xd1\x01"))

    res = client.post("/api/scan")

    assert res.status_code == 400
    assert res.get_json()["error"] == "MalformedTag"


def failed(error) -> ScanResult:
    return ScanResult(outcome=ScanOutcome.FAILED, state=ScanState.FAILED, history=(ScanState.IDLE, ScanState.FAILED), error=error)


@pytest.mark.parametrize(
    "error, status",
    [
        (InvalidParameters("tag must not be empty"), 400),
        (MalformedTag("Buffer is empty"), 400),
        (UnknownUser("No user"), 404),
        (CheckInRejected("declined"), 409),
        (Timeout("slow"), 504),
        (TransportError("HTTP 500"), 502),
        (ReaderError("unplugged"), 502),
    ],
)
def test_status_for_failures(error, status):
    assert status_for(failed(error)) == status


def test_status_for_success_and_cancel():
    history = (ScanState.IDLE, ScanState.COMPLETED)
    assert status_for(ScanResult(ScanOutcome.ALREADY_IN_STATE, ScanState.COMPLETED, history)) == 200
    assert status_for(ScanResult(ScanOutcome.CANCELLED, ScanState.CANCELLED, history)) == 409
