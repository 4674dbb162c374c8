from __future__ import annotations

import logging
import re
from typing import Any, Optional, Protocol
from urllib.parse import urljoin

import requests

from ..core.exceptions import Timeout, TransportError

logger = logging.getLogger(__name__)

_AUTH_COOKIE = re.compile(r"^auth=(?P<token>[a-f0-9]+);")


class Transport(Protocol):
    def execute(
        self,
        document: str,
        variables: dict,
        *,
        operation_name: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> dict:
        """Send one GraphQL request and return the decoded JSON body.

        Raises Timeout when ``timeout`` elapses and TransportError on any
        other network or protocol failure.
        """

        raise NotImplementedError


class HttpTransport:
    """GraphQL over HTTP against a check-in instance.

    Authenticates with the ``auth`` cookie the service hands out on login.
    """

    def __init__(self, base_url: str, auth_token: str, *, session: Optional[requests.Session] = None):
        self._base_url = base_url.rstrip("/") + "/"
        self._session = session or requests.Session()
        self._cookie = f"auth={auth_token}"

    @property
    def base_url(self) -> str:
        return self._base_url

    @classmethod
    def from_token(cls, base_url: str, auth_token: str, **kwargs) -> "HttpTransport":
        return cls(base_url, auth_token, **kwargs)

    @classmethod
    def login(
        cls,
        base_url: str,
        username: str,
        password: str,
        *,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> "HttpTransport":
        """Log in with a username / password and keep the issued token.

        Note: the server runs a slow PBKDF2, so this can block for seconds.
        """
        session = session or requests.Session()
        url = urljoin(base_url.rstrip("/") + "/", "api/user/login")
        try:
            response = session.post(url, data={"username": username, "password": password}, timeout=timeout)
        except requests.Timeout as exc:
            raise Timeout(f"Login timed out after {timeout}s") from exc
        except requests.RequestException as exc:
            raise TransportError(f"Login request failed: {exc}") from exc

        if not response.ok:
            raise TransportError("Invalid username or password")

        for cookie in _set_cookie_headers(response):
            match = _AUTH_COOKIE.match(cookie)
            if match:
                logger.info("Logged in to %s as %s", base_url, username)
                return cls(base_url, match.group("token"), session=session)
        raise TransportError("No auth token set by server")

    def execute(
        self,
        document: str,
        variables: dict,
        *,
        operation_name: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> dict:
        body: dict[str, Any] = {"query": document, "variables": variables}
        if operation_name:
            body["operationName"] = operation_name

        logger.debug("POST graphql %s variables=%s", operation_name, variables)
        try:
            response = self._session.post(
                urljoin(self._base_url, "graphql"),
                json=body,
                headers={"Cookie": self._cookie},
                timeout=timeout,
            )
        except requests.Timeout as exc:
            raise Timeout(f"{operation_name or 'request'} timed out after {timeout}s") from exc
        except requests.RequestException as exc:
            raise TransportError(f"{operation_name or 'request'} failed: {exc}") from exc

        if not response.ok:
            raise TransportError(f"{operation_name or 'request'} failed: HTTP {response.status_code}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportError(f"{operation_name or 'request'} returned a non-JSON body") from exc
        if not isinstance(payload, dict):
            raise TransportError(f"{operation_name or 'request'} returned an unexpected JSON body")
        return payload


def _set_cookie_headers(response: requests.Response) -> list[str]:
    raw = getattr(response, "raw", None)
    headers = getattr(raw, "headers", None)
    if headers is not None and hasattr(headers, "getlist"):
        return list(headers.getlist("Set-Cookie"))
    value = response.headers.get("Set-Cookie")
    return [value] if value else []
