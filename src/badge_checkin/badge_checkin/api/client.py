from __future__ import annotations

import logging
from typing import Optional, TypeVar

from ..core.constants import DEFAULT_REQUEST_TIMEOUT, DEFAULT_SEARCH_LIMIT
from ..core.exceptions import CheckInRejected, TransportError, UnknownUser
from .model import TagState, UserRecord, UserTags
from .queries import CheckInTag, Operation, TagsGet, UserGet, UserSearch
from .transport import Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")

CheckInReturn = tuple[bool, UserRecord, TagState]


class CheckinClient:
    """One-shot calls against the check-in API.

    Every method validates locally, executes exactly once and raises on
    failure. Nothing here retries: a check-in mutation that timed out may
    still have been applied.
    """

    def __init__(self, transport: Transport, *, timeout: Optional[float] = DEFAULT_REQUEST_TIMEOUT):
        self._transport = transport
        self._timeout = timeout

    def run(self, operation: Operation[T], *, timeout: Optional[float] = None) -> T:
        request = operation.request()
        response = self._transport.execute(
            request.document,
            request.variables,
            operation_name=request.operation_name,
            timeout=timeout if timeout is not None else self._timeout,
        )
        return operation.parse(response)

    def search_users(self, text: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[UserTags]:
        return self.run(UserSearch(text, limit))

    def get_user(self, user_id: str) -> Optional[UserTags]:
        return self.run(UserGet(user_id))

    def get_tag_names(self, only_current: bool = False) -> list[str]:
        """Tag names, optionally only those active right now (by start/end)."""
        return self.run(TagsGet(only_current))

    def check_in(self, user_id: str, tag: str) -> CheckInReturn:
        """Check a user into a tag.

        Returns ``(checkin_success, user, tag_state)`` for the requested tag.
        Raises CheckInRejected when the returned user is not accepted and
        confirmed.
        """
        return self._checkin_action(True, user_id, tag)

    def check_out(self, user_id: str, tag: str) -> CheckInReturn:
        """Check a user out of a tag. See ``check_in``."""
        return self._checkin_action(False, user_id, tag)

    def _checkin_action(self, checkin: bool, user_id: str, tag: str) -> CheckInReturn:
        operation = CheckInTag(user_id, tag, checkin)
        result = self.run(operation)
        if result is None:
            raise UnknownUser(f"No user with id {operation.id}")
        state = result.tag(operation.tag)
        if state is None:
            raise TransportError(f"Response did not include tag {operation.tag!r}")
        if not result.user.can_check_in:
            raise CheckInRejected("User not accepted and confirmed", reason="not accepted and confirmed")
        logger.debug("check_in user=%s tag=%s checkin=%s success=%s", operation.id, operation.tag, checkin, state.checkin_success)
        return state.checkin_success, result.user, state
