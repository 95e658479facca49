"""HTTP client for the MARTA real-time train and alert feeds, with response caching."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any, TypeVar

import requests
from cachetools import TTLCache

from thirdrail.clients import ConfigurationError, Train
from thirdrail.schemas import Alerts

logger = logging.getLogger(__name__)

MARTA_ALERT_ENDPOINT = "https://martaalerts.com/webdata.aspx"
MARTA_TRAIN_ENDPOINT = (
    "http://developer.itsmarta.com/RealtimeTrain/RestServiceNextTrain/GetRealtimeArrivals"
)

_CACHE_SIZE = 1000
_TIMEOUT = 30.0

_T = TypeVar("_T")


class MartaAPIClient:
    """Fetches live trains and alerts, keeping each answer for ``cache_ttl`` seconds."""

    def __init__(
        self,
        api_key: str,
        cache_ttl: int,
        session: Any = None,
        timer: Callable[[], float] = time.monotonic,
        train_endpoint: str = MARTA_TRAIN_ENDPOINT,
        alert_endpoint: str = MARTA_ALERT_ENDPOINT,
    ) -> None:
        self.api_key = api_key
        self.cache_ttl = cache_ttl
        self.train_endpoint = train_endpoint
        self.alert_endpoint = alert_endpoint
        self._session = session if session is not None else requests.Session()
        self._cache: TTLCache | None = (
            TTLCache(maxsize=_CACHE_SIZE, ttl=cache_ttl, timer=timer) if cache_ttl >= 1 else None
        )

    def _cached(self, key: str, loader: Callable[[], _T]) -> _T:
        if self._cache is None:
            return loader()
        try:
            return self._cache[key]
        except KeyError:
            pass
        value = loader()
        self._cache[key] = value
        return value

    def _load_trains(self) -> list[Train]:
        logger.info("Fetching trains (no cache)")
        response = self._session.get(
            self.train_endpoint, params={"apikey": self.api_key}, timeout=_TIMEOUT
        )
        response.raise_for_status()
        return [Train.from_api(record) for record in response.json() or []]

    def _load_alerts(self) -> Alerts:
        logger.info("Fetching alerts (no cache)")
        response = self._session.get(self.alert_endpoint, timeout=_TIMEOUT)
        response.raise_for_status()
        return Alerts.from_xml(response.content)

    def get_trains(self) -> list[Train]:
        """Return the live train events."""
        return list(self._cached("trains", self._load_trains))

    def get_alerts(self) -> Alerts:
        """Return the current bus and rail alerts."""
        return self._cached("alerts", self._load_alerts)


def get_marta_client(api_key: str, cache_ttl: int) -> MartaAPIClient:
    """Build a MARTA client; raise ConfigurationError without an API key."""
    if not api_key:
        raise ConfigurationError("No MARTA API key found - real-time API results are unavailable.")
    if cache_ttl < 1:
        logger.warning("MARTA API caching set to < 1s - API results are not being cached.")
    return MartaAPIClient(api_key, cache_ttl)