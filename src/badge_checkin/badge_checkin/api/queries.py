from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, Mapping, Optional, TypeVar

from ..common.validators import require_bool, require_non_empty, require_positive_int
from ..core.exceptions import TransportError
from . import documents
from .model import UserTags

T = TypeVar("T")


@dataclass(frozen=True)
class GraphQLRequest:
    operation_name: str
    document: str
    variables: dict


class Operation(ABC, Generic[T]):
    """One of the four fixed service operations.

    Subclasses validate their parameters on construction, so an invalid
    operation never exists and never reaches a transport.
    """

    operation_name: ClassVar[str]
    document: ClassVar[str]

    @abstractmethod
    def variables(self) -> dict:
        raise NotImplementedError

    @abstractmethod
    def decode(self, data: Mapping[str, Any]) -> T:
        raise NotImplementedError

    def request(self) -> GraphQLRequest:
        return GraphQLRequest(self.operation_name, self.document, self.variables())

    def parse(self, response: Mapping[str, Any]) -> T:
        """Decode a full GraphQL response envelope (``data`` / ``errors``)."""
        if not isinstance(response, Mapping):
            raise TransportError(f"{self.operation_name}: response is not a JSON object")
        errors = response.get("errors")
        if errors:
            messages = [e.get("message", str(e)) if isinstance(e, Mapping) else str(e) for e in errors]
            raise TransportError(f"{self.operation_name}: " + "; ".join(messages), errors=messages)
        data = response.get("data")
        if not isinstance(data, Mapping):
            raise TransportError(f"{self.operation_name}: check-in API returned no data")
        return self.decode(data)


@dataclass(frozen=True)
class UserSearch(Operation[list[UserTags]]):
    operation_name: ClassVar[str] = "UserSearch"
    document: ClassVar[str] = documents.USER_SEARCH

    text: str
    limit: int

    def __post_init__(self):
        object.__setattr__(self, "text", require_non_empty(self.text, "search text"))
        require_positive_int(self.limit, "limit")

    def variables(self) -> dict:
        return {"text": self.text, "n": self.limit}

    def decode(self, data: Mapping[str, Any]) -> list[UserTags]:
        results = data.get("search_user_simple")
        if not isinstance(results, list):
            raise TransportError("UserSearch: missing search_user_simple")
        return [UserTags.from_json(item) for item in results]


@dataclass(frozen=True)
class UserGet(Operation[Optional[UserTags]]):
    operation_name: ClassVar[str] = "UserGet"
    document: ClassVar[str] = documents.USER_GET

    id: str

    def __post_init__(self):
        object.__setattr__(self, "id", require_non_empty(self.id, "user id"))

    def variables(self) -> dict:
        return {"id": self.id}

    def decode(self, data: Mapping[str, Any]) -> Optional[UserTags]:
        found = data.get("user")
        return UserTags.from_json(found) if found is not None else None


@dataclass(frozen=True)
class TagsGet(Operation[list[str]]):
    operation_name: ClassVar[str] = "TagsGet"
    document: ClassVar[str] = documents.TAGS_GET

    only_current: bool = False

    def __post_init__(self):
        require_bool(self.only_current, "only_current")

    def variables(self) -> dict:
        return {"only_current": self.only_current}

    def decode(self, data: Mapping[str, Any]) -> list[str]:
        tags = data.get("tags")
        if not isinstance(tags, list):
            raise TransportError("TagsGet: missing tags")
        try:
            return [str(t["name"]) for t in tags]
        except (KeyError, TypeError) as exc:
            raise TransportError(f"TagsGet: malformed tag {exc!r}") from exc


@dataclass(frozen=True)
class CheckInTag(Operation[Optional[UserTags]]):
    operation_name: ClassVar[str] = "CheckInTag"
    document: ClassVar[str] = documents.CHECK_IN_TAG

    id: str
    tag: str
    checkin: bool = True

    def __post_init__(self):
        object.__setattr__(self, "id", require_non_empty(self.id, "user id"))
        object.__setattr__(self, "tag", require_non_empty(self.tag, "tag"))
        require_bool(self.checkin, "checkin")

    def variables(self) -> dict:
        return {"id": self.id, "tag": self.tag, "checkin": self.checkin}

    def decode(self, data: Mapping[str, Any]) -> Optional[UserTags]:
        # A null payload means the id on the badge matches no user.
        result = data.get("check_in")
        return UserTags.from_json(result) if result is not None else None
