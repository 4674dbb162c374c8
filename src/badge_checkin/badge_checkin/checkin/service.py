from __future__ import annotations

import logging
import threading
from contextlib import ExitStack
from typing import Callable, Optional, TypeVar, Union

from ..api.client import CheckinClient
from ..api.model import TagState, UserRecord
from ..api.queries import CheckInTag, Operation, UserGet
from ..common.validators import require_bool, require_non_empty
from ..core.constants import DEFAULT_READ_TIMEOUT, DEFAULT_REQUEST_TIMEOUT
from ..core.enums import ScanOutcome, ScanState
from ..core.exceptions import (
    Cancelled,
    CheckinError,
    CheckInRejected,
    Timeout,
    TransportError,
    UnknownUser,
)
from ..ndef.decoder import decode
from ..ndef.model import BadgeIdentifier
from ..reader.session import ReaderSession, call_reader, opened
from .model import CheckInRequest, ScanResult
from .states import transition

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CheckInOrchestrator:
    """Use case: turn one badge tap into one check-in outcome.

    Scans are serialized: a badge is carried through to COMPLETED, FAILED or
    CANCELLED before the next one is accepted, so two check-ins for the same
    tag never race past the service's duplicate check.
    """

    def __init__(
        self,
        client: CheckinClient,
        reader: Optional[ReaderSession] = None,
        *,
        tag: Optional[str] = None,
        read_timeout: Optional[float] = DEFAULT_READ_TIMEOUT,
        request_timeout: Optional[float] = DEFAULT_REQUEST_TIMEOUT,
        resolve_before_submit: bool = True,
        require_confirmed: bool = True,
    ):
        self._client = client
        self._reader = reader
        self._tag = tag
        self._read_timeout = read_timeout
        self._request_timeout = request_timeout
        self._resolve = bool(resolve_before_submit)
        self._require_confirmed = bool(require_confirmed)
        self._lock = threading.Lock()

    @property
    def has_reader(self) -> bool:
        return self._reader is not None

    @property
    def tag(self) -> Optional[str]:
        return self._tag

    def scan(
        self,
        *,
        checkin: bool = True,
        tag: Optional[str] = None,
        cancel: Optional[threading.Event] = None,
    ) -> ScanResult:
        """Read a badge from the reader and check it in (or out)."""
        if self._reader is None:
            raise RuntimeError("No reader attached to this orchestrator")
        with self._lock:
            run = _ScanRun(self, tag=tag or self._tag, checkin=checkin, cancel=cancel)
            return run.execute(ScanState.READING)

    def submit(
        self,
        identifier: Union[str, BadgeIdentifier],
        *,
        checkin: bool = True,
        tag: Optional[str] = None,
        cancel: Optional[threading.Event] = None,
    ) -> ScanResult:
        """Check in an identifier obtained without the reader (e.g. manual search)."""
        with self._lock:
            run = _ScanRun(self, tag=tag or self._tag, checkin=checkin, cancel=cancel, identifier=identifier)
            return run.execute(ScanState.RESOLVING if self._resolve else ScanState.SUBMITTING)


class _ScanRun:
    """One pass through the state machine. Never reused across scans."""

    def __init__(
        self,
        owner: CheckInOrchestrator,
        *,
        tag: Optional[str],
        checkin: bool,
        cancel: Optional[threading.Event],
        identifier: Union[str, BadgeIdentifier, None] = None,
    ):
        self._owner = owner
        self._tag = tag
        self._checkin = checkin
        self._cancel = cancel
        self._identifier = identifier
        self._session: Optional[ExitStack] = None
        self._handle = None
        self._raw: Optional[bytes] = None

        self.state = ScanState.IDLE
        self.history: list[ScanState] = [ScanState.IDLE]
        self.badge: Optional[BadgeIdentifier] = None
        self.request: Optional[CheckInRequest] = None
        self.user: Optional[UserRecord] = None
        self.tag_state: Optional[TagState] = None
        self.prior_checked_in: Optional[bool] = None
        self.outcome: Optional[ScanOutcome] = None
        self.error: Optional[CheckinError] = None
        self.mutation_sent = False

        self._handlers: dict[ScanState, Callable[[], ScanState]] = {
            ScanState.READING: self._read,
            ScanState.DECODING: self._decode,
            ScanState.RESOLVING: self._resolve,
            ScanState.SUBMITTING: self._submit,
        }

    def execute(self, first: ScanState) -> ScanResult:
        with ExitStack() as session:
            self._session = session
            next_state = self._guard(lambda: self._prepare(first))
            self._enter(next_state)
            while not self.state.is_terminal:
                handler = self._handlers[self.state]
                self._enter(self._guard(handler))
        # The reader session is released here, before the outcome is reported.
        return self._finish()

    def _guard(self, step: Callable[[], ScanState]) -> ScanState:
        try:
            self._check_cancel()
            next_state = step()
            self._check_cancel()
            return next_state
        except Cancelled as exc:
            self.error = exc
            return ScanState.CANCELLED
        except CheckinError as exc:
            self.error = exc
            return ScanState.FAILED

    def _enter(self, target: ScanState) -> None:
        self.state = transition(self.state, target)
        self.history.append(target)
        logger.debug("scan %s -> %s", self.history[-2].value, target.value)

    def _check_cancel(self) -> None:
        if self._cancel is not None and self._cancel.is_set():
            if self.mutation_sent:
                raise Cancelled("Scan cancelled after the check-in was sent")
            raise Cancelled("Scan cancelled")

    # --- steps ------------------------------------------------------------

    def _prepare(self, first: ScanState) -> ScanState:
        self._tag = require_non_empty(self._tag, "tag")
        require_bool(self._checkin, "checkin")
        if self._identifier is not None:
            if isinstance(self._identifier, BadgeIdentifier):
                self.badge = self._identifier
            else:
                self.badge = BadgeIdentifier(require_non_empty(self._identifier, "identifier"))
        return first

    def _read(self) -> ScanState:
        reader = self._owner._reader
        timeout = self._owner._read_timeout
        self._handle = self._session.enter_context(opened(reader, timeout))
        self._raw = call_reader(reader.read_tag_bytes, self._handle, timeout)
        return ScanState.DECODING

    def _decode(self) -> ScanState:
        self.badge = decode(self._raw)
        logger.debug("badge decoded: %s", self.badge)
        return ScanState.RESOLVING if self._owner._resolve else ScanState.SUBMITTING

    def _resolve(self) -> ScanState:
        found = self._call(UserGet(self.badge.value))
        if found is None:
            raise UnknownUser(f"No user with id {self.badge}")
        self.user = found.user
        if self._owner._require_confirmed and not found.user.can_check_in:
            raise CheckInRejected("User not accepted and confirmed", reason="not accepted and confirmed")
        prior = found.tag(self._tag)
        # No state at this tag yet means the user was never checked in there.
        self.prior_checked_in = prior.checked_in if prior is not None else False
        return ScanState.SUBMITTING

    def _submit(self) -> ScanState:
        user_id = self.user.id if self.user is not None else self.badge.value
        self.request = CheckInRequest(badge=self.badge, user_id=user_id, tag=self._tag, checkin=self._checkin)
        operation = CheckInTag(user_id, self._tag, self._checkin)

        self.mutation_sent = True
        result = self._call(operation)
        if result is None:
            raise UnknownUser(f"No user with id {user_id}")
        state = result.tag(operation.tag)
        if state is None:
            raise TransportError(f"Response did not include tag {operation.tag!r}")
        self.user, self.tag_state = result.user, state
        # Without resolving, the returned user is the first chance to apply the policy.
        if self._owner._require_confirmed and not result.user.can_check_in:
            raise CheckInRejected("User not accepted and confirmed", reason="not accepted and confirmed")

        if state.checkin_success:
            self.outcome = ScanOutcome.COMPLETED
            return ScanState.COMPLETED

        prior = self.prior_checked_in if self.prior_checked_in is not None else state.checked_in
        if prior == self._checkin:
            self.outcome = ScanOutcome.ALREADY_IN_STATE
            return ScanState.COMPLETED
        direction = "check-in to" if self._checkin else "check-out of"
        raise CheckInRejected(f"Service declined {direction} {operation.tag}")

    def _call(self, operation: Operation[T]) -> T:
        try:
            return self._owner._client.run(operation, timeout=self._owner._request_timeout)
        except CheckinError:
            raise
        except TimeoutError as exc:
            raise Timeout(str(exc) or f"{operation.operation_name} timed out") from exc
        except Exception as exc:
            logger.exception("Transport raised an unexpected error during %s", operation.operation_name)
            raise TransportError(f"{operation.operation_name} failed: {exc}") from exc

    # --- outcome ------------------------------------------------------------

    def _finish(self) -> ScanResult:
        if self.state == ScanState.FAILED:
            self.outcome = ScanOutcome.FAILED
        elif self.state == ScanState.CANCELLED:
            self.outcome = ScanOutcome.CANCELLED

        result = ScanResult(
            outcome=self.outcome,
            state=self.state,
            history=tuple(self.history),
            request=self.request,
            badge=self.badge,
            user=self.user,
            tag_state=self.tag_state,
            error=self.error,
            mutation_sent=self.mutation_sent,
        )
        if result.outcome == ScanOutcome.FAILED:
            logger.warning("scan failed (%s): %s", result.error_kind, result.message)
        else:
            logger.info("scan %s: %s", result.outcome.value, result.message)
        return result
