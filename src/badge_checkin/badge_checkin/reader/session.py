from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Protocol

from ..core.exceptions import CheckinError, ReaderError, Timeout

logger = logging.getLogger(__name__)


class ReaderSession(Protocol):
    """Capability interface over one NFC reader.

    Implementations raise ReaderError on hardware failures and Timeout when
    the given timeout elapses without a badge.
    """

    def open_session(self, timeout: Optional[float]) -> Any:
        raise NotImplementedError

    def read_tag_bytes(self, handle: Any, timeout: Optional[float]) -> bytes:
        """Block until a badge is newly presented and return its memory.

        A badge that stays on the reader is only returned once.
        """
        raise NotImplementedError

    def close_session(self, handle: Any) -> None:
        raise NotImplementedError


@contextmanager
def opened(reader: ReaderSession, timeout: Optional[float]) -> Iterator[Any]:
    """Hold a reader session for one scan; it is closed on every exit path."""
    handle = call_reader(reader.open_session, timeout)
    try:
        yield handle
    finally:
        try:
            reader.close_session(handle)
        except Exception:
            # The scan outcome is already decided; a failed close is only logged.
            logger.exception("Failed to close reader session")


def call_reader(fn, *args):
    """Invoke a reader method, normalizing foreign exceptions."""
    try:
        return fn(*args)
    except CheckinError:
        raise
    except TimeoutError as exc:
        raise Timeout(str(exc) or "Reader timed out") from exc
    except Exception as exc:
        raise ReaderError(f"Reader failure: {exc}") from exc
