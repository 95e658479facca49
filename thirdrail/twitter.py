"""Twitter search client using application-only authentication, with caching."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

import requests
from cachetools import TTLCache

from thirdrail.clients import ConfigurationError, SearchParams, SearchResult

logger = logging.getLogger(__name__)

TOKEN_URL = "https://api.twitter.com/oauth2/token"
SEARCH_URL = "https://api.twitter.com/1.1/search/tweets.json"

_CACHE_SIZE = 1000
_TIMEOUT = 30.0


class TwitterAPIClient:
    """Searches tweets, keeping each search's answer for ``cache_ttl`` seconds."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        cache_ttl: int,
        session: Any = None,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.cache_ttl = cache_ttl
        self._session = session if session is not None else requests.Session()
        self._token: str | None = None
        self._cache: TTLCache | None = (
            TTLCache(maxsize=_CACHE_SIZE, ttl=cache_ttl, timer=timer) if cache_ttl >= 1 else None
        )

    def _access_token(self) -> str:
        if self._token is None:
            response = self._session.post(
                TOKEN_URL,
                auth=(self.client_id, self.client_secret),
                data={"grant_type": "client_credentials"},
                timeout=_TIMEOUT,
            )
            response.raise_for_status()
            body = response.json() or {}
            token = body.get("access_token")
            if not token or str(body.get("token_type", "")).lower() != "bearer":
                raise ConfigurationError("Twitter did not issue a bearer token")
            self._token = token
        return self._token

    def _load(self, params: SearchParams) -> SearchResult:
        response = self._session.get(
            SEARCH_URL,
            params={"q": params.query, "tweet_mode": params.tweet_mode},
            headers={"Authorization": f"Bearer {self._access_token()}"},
            timeout=_TIMEOUT,
        )
        response.raise_for_status()
        return SearchResult.from_api(response.json() or {})

    def search(self, search_key: str, params: SearchParams) -> SearchResult:
        """Run ``params`` as a tweet search, cached under ``search_key``."""
        if self._cache is None:
            return self._load(params)
        try:
            return self._cache[search_key]
        except KeyError:
            pass
        result = self._load(params)
        self._cache[search_key] = result
        return result


def get_twitter_client(client_id: str, client_secret: str, cache_ttl: int) -> TwitterAPIClient:
    """Build a Twitter client; raise ConfigurationError without credentials."""
    if not client_id or not client_secret:
        raise ConfigurationError("Twitter API credentials not found - Twitter alerts are unavailable.")
    if cache_ttl < 1:
        logger.warning(
            "Twitter caching set to < 1s - Twitter results are not being cached and will be rate-limited."
        )
    return TwitterAPIClient(client_id, client_secret, cache_ttl)