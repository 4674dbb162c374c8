from __future__ import annotations

import logging
from typing import Any, Optional

from flask import Flask, jsonify, request

from ..api.model import TagState, UserRecord, UserTags
from ..checkin.model import ScanResult
from ..container import Container
from ..core.enums import ScanOutcome
from ..core.exceptions import (
    CheckinError,
    CheckInRejected,
    InvalidParameters,
    MalformedTag,
    Timeout,
    UnknownUser,
)

logger = logging.getLogger(__name__)

_FAILURE_STATUS = (
    (InvalidParameters, 400),
    (MalformedTag, 400),
    (UnknownUser, 404),
    (CheckInRejected, 409),
    (Timeout, 504),
)


def status_for(result: ScanResult) -> int:
    if result.ok:
        return 200
    if result.outcome == ScanOutcome.CANCELLED:
        return 409
    for kind, status in _FAILURE_STATUS:
        if isinstance(result.error, kind):
            return status
    # TransportError, ReaderError
    return 502


def register(app: Flask, container: Container) -> None:
    @app.route("/health", endpoint="health")
    def health():
        return jsonify({"status": "ok", "reader": container.orchestrator.has_reader})

    @app.route("/api/tags", endpoint="api_tags")
    def api_tags():
        only_current = request.args.get("current", "0") in {"1", "true", "yes"}
        try:
            names = container.client.get_tag_names(only_current)
        except CheckinError as e:
            return _error(e, 504 if isinstance(e, Timeout) else 502)
        return jsonify({"success": True, "tags": names})

    @app.route("/api/users/search", endpoint="api_user_search")
    def api_user_search():
        text = request.args.get("q", "")
        try:
            limit = int(request.args.get("n", container.search_limit))
            users = container.client.search_users(text, limit)
        except ValueError:
            return jsonify({"success": False, "message": "n must be an integer"}), 400
        except InvalidParameters as e:
            return _error(e, 400)
        except CheckinError as e:
            return _error(e, 504 if isinstance(e, Timeout) else 502)
        return jsonify({"success": True, "users": [_user_tags_json(u) for u in users]})

    @app.route("/api/checkin", methods=["POST"], endpoint="api_checkin")
    def api_checkin():
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            return _bad_body()
        user_id = str(data.get("user_id") or "").strip()
        if not user_id:
            return jsonify({"success": False, "message": "user_id must not be empty"}), 400

        result = container.orchestrator.submit(
            user_id,
            checkin=data.get("checkin", True),
            tag=data.get("tag"),
        )
        return jsonify(_result_json(result)), status_for(result)

    @app.route("/api/scan", methods=["POST"], endpoint="api_scan")
    def api_scan():
        if not container.orchestrator.has_reader:
            return jsonify({"success": False, "message": "No badge reader attached"}), 503
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            return _bad_body()
        result = container.orchestrator.scan(checkin=data.get("checkin", True), tag=data.get("tag"))
        return jsonify(_result_json(result)), status_for(result)

    @app.route("/api/scan/last", endpoint="api_scan_last")
    def api_scan_last():
        last = container.scan_loop.last_result if container.scan_loop is not None else None
        if last is None:
            return jsonify({"success": False, "message": "No badge scanned yet"}), 404
        return jsonify(_result_json(last)), 200


def _bad_body():
    return jsonify({"success": False, "message": "Request body must be a JSON object"}), 400


def _error(e: CheckinError, status: int):
    logger.warning("kiosk request failed: %s", e)
    return jsonify({"success": False, "error": type(e).__name__, "message": str(e)}), status


def _result_json(result: ScanResult) -> dict:
    return {
        "success": result.ok,
        "outcome": result.outcome.value,
        "state": result.state.value,
        "message": result.message,
        "error": result.error_kind,
        "badge": str(result.badge) if result.badge is not None else None,
        "checkin": result.request.checkin if result.request else None,
        "tag": result.request.tag if result.request else None,
        "mutation_sent": result.mutation_sent,
        "user": _user_json(result.user),
        "tag_state": _tag_json(result.tag_state),
    }


def _user_tags_json(found: UserTags) -> dict:
    return {"user": _user_json(found.user), "tags": [_tag_json(t) for t in found.tags]}


def _user_json(user: Optional[UserRecord]) -> Optional[dict[str, Any]]:
    if user is None:
        return None
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "applied": user.applied,
        "accepted": user.accepted,
        "confirmed": user.confirmed,
        "confirmation_branch": user.confirmation_branch,
        "application_type": user.application_type,
        "confirmation_type": user.confirmation_type,
        "questions": dict(user.questions),
    }


def _tag_json(state: Optional[TagState]) -> Optional[dict[str, Any]]:
    if state is None:
        return None
    return {
        "name": state.name,
        "checked_in": state.checked_in,
        "checkin_success": state.checkin_success,
        "last_checked_in_at": state.last_checked_in_at.isoformat() if state.last_checked_in_at else None,
        "last_checked_in_by": state.last_checked_in_by,
    }
