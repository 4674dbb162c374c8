from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .api.client import CheckinClient
from .api.transport import HttpTransport, Transport
from .checkin.runner import ScanLoop
from .checkin.service import CheckInOrchestrator
from .core.constants import DEFAULT_READ_TIMEOUT, DEFAULT_REQUEST_TIMEOUT, DEFAULT_SEARCH_LIMIT
from .reader.session import ReaderSession


@dataclass(frozen=True)
class Container:
    transport: Transport
    client: CheckinClient
    orchestrator: CheckInOrchestrator
    scan_loop: Optional[ScanLoop]
    search_limit: int = DEFAULT_SEARCH_LIMIT


def build_transport(settings: Any) -> Transport:
    base_url = getattr(settings, "CHECKIN_BASE_URL")
    token = getattr(settings, "CHECKIN_AUTH_TOKEN", None)
    if token:
        return HttpTransport.from_token(base_url, token)

    username = getattr(settings, "CHECKIN_USERNAME", None)
    password = getattr(settings, "CHECKIN_PASSWORD", None)
    if username and password:
        return HttpTransport.login(
            base_url,
            username,
            password,
            timeout=getattr(settings, "REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
        )
    raise RuntimeError("Set CHECKIN_AUTH_TOKEN or CHECKIN_USERNAME/CHECKIN_PASSWORD")


def build_container(
    *,
    settings: Any,
    reader: Optional[ReaderSession] = None,
    transport: Optional[Transport] = None,
) -> Container:
    request_timeout = float(getattr(settings, "REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT))

    transport = transport or build_transport(settings)
    client = CheckinClient(transport, timeout=request_timeout)
    orchestrator = CheckInOrchestrator(
        client,
        reader,
        tag=getattr(settings, "CHECKIN_TAG", None),
        read_timeout=float(getattr(settings, "READ_TIMEOUT", DEFAULT_READ_TIMEOUT)),
        request_timeout=request_timeout,
        resolve_before_submit=bool(getattr(settings, "RESOLVE_BEFORE_SUBMIT", True)),
        require_confirmed=bool(getattr(settings, "REQUIRE_CONFIRMED", True)),
    )
    scan_loop = ScanLoop(orchestrator) if reader is not None else None

    return Container(
        transport=transport,
        client=client,
        orchestrator=orchestrator,
        scan_loop=scan_loop,
        search_limit=int(getattr(settings, "SEARCH_LIMIT", DEFAULT_SEARCH_LIMIT)),
    )
