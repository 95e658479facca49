"""Client interfaces for the MARTA and Twitter APIs, with in-memory test doubles."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from thirdrail.schemas import Alerts


class ConfigurationError(RuntimeError):
    """Raised when a client cannot be built from the given settings."""


_TRAIN_RECORD_FIELDS = {
    "destination": "DESTINATION",
    "direction": "DIRECTION",
    "event_time": "EVENT_TIME",
    "line": "LINE",
    "next_arrival": "NEXT_ARR",
    "station": "STATION",
    "train_id": "TRAIN_ID",
    "waiting_seconds": "WAITING_SECONDS",
    "waiting_time": "WAITING_TIME",
}


@dataclass
class Train:
    """One real-time train event as reported by the MARTA API."""

    destination: str = ""
    direction: str = ""
    event_time: str = ""
    line: str = ""
    next_arrival: str = ""
    station: str = ""
    train_id: str = ""
    waiting_seconds: str = ""
    waiting_time: str = ""

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Train":
        """Build a train from one record of the MARTA rail API."""
        values = {}
        for attribute, record_field in _TRAIN_RECORD_FIELDS.items():
            raw = data.get(record_field)
            values[attribute] = "" if raw is None else str(raw)
        return cls(**values)


@dataclass
class Tweet:
    full_text: str = ""
    id: str = ""


@dataclass
class SearchParams:
    query: str
    tweet_mode: str = "extended"


@dataclass
class SearchResult:
    statuses: list[Tweet] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "SearchResult":
        """Build a result from a tweet search response body."""
        statuses = [
            Tweet(
                full_text=status.get("full_text") or status.get("text") or "",
                id=str(status.get("id_str") or status.get("id") or ""),
            )
            for status in data.get("statuses") or []
        ]
        return cls(statuses=statuses)


@runtime_checkable
class MartaClient(Protocol):
    def get_trains(self) -> list[Train]: ...

    def get_alerts(self) -> Alerts: ...


@runtime_checkable
class TwitterClient(Protocol):
    def search(self, search_key: str, params: SearchParams) -> SearchResult: ...


def _no_trains() -> list[Train]:
    return []


def _no_alerts() -> Alerts:
    return Alerts()


def _no_tweets(search_key: str, params: SearchParams) -> SearchResult:
    return SearchResult()


class MartaAPITestClient:
    """A MARTA client whose answers come from the given callables."""

    def __init__(
        self,
        get_trains: Callable[[], list[Train]] = _no_trains,
        get_alerts: Callable[[], Alerts] = _no_alerts,
    ) -> None:
        self._get_trains = get_trains
        self._get_alerts = get_alerts

    def get_trains(self) -> list[Train]:
        return self._get_trains()

    def get_alerts(self) -> Alerts:
        return self._get_alerts()


class TwitterTestClient:
    """A Twitter client whose searches are answered by the given callable."""

    def __init__(self, search: Callable[[str, SearchParams], SearchResult] = _no_tweets) -> None:
        self._search = search

    def search(self, search_key: str, params: SearchParams) -> SearchResult:
        return self._search(search_key, params)