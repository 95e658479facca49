import pytest
import requests

from thirdrail.clients import ConfigurationError, SearchParams
from thirdrail.twitter import TwitterAPIClient, get_twitter_client


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def json(self):
        return self.payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(str(self.status_code))


class FakeSession:
    def __init__(self, token_payload, *search_responses):
        self.token_payload = token_payload
        self.search_responses = list(search_responses)
        self.posts = []
        self.gets = []

    def post(self, url, **kwargs):
        self.posts.append((url, kwargs))
        return FakeResponse(self.token_payload)

    def get(self, url, **kwargs):
        self.gets.append((url, kwargs))
        return self.search_responses.pop(0)


TOKEN = {"token_type": "bearer", "access_token": "token"}


def tweets(*texts):
    return FakeResponse({"statuses": [{"full_text": text, "id_str": "1"} for text in texts]})


def make_client(session, ttl=15):
    return TwitterAPIClient("client-id", "secret", ttl, session=session)


def test_get_twitter_client_requires_credentials():
    with pytest.raises(ConfigurationError):
        get_twitter_client("", "secret", 15)
    with pytest.raises(ConfigurationError):
        get_twitter_client("client-id", "", 15)


def test_search_sends_query_and_bearer_token():
    session = FakeSession(TOKEN, tweets("Test parking update from MARTA"))
    client = make_client(session)
    params = SearchParams(query="from:@martaservice #parkingupdate")
    result = client.search("parking", params)
    assert [tweet.full_text for tweet in result.statuses] == ["Test parking update from MARTA"]
    sent = session.gets[0][1]
    assert sent["params"]["q"] == "from:@martaservice #parkingupdate"
    assert sent["params"]["tweet_mode"] == "extended"
    assert sent["headers"]["Authorization"] == "Bearer token"
    assert session.posts[0][1]["auth"] == ("client-id", "secret")


def test_search_is_cached_per_key_and_token_fetched_once():
    session = FakeSession(TOKEN, tweets("a"), tweets("b"))
    client = make_client(session)
    params = SearchParams(query="from:@martapolice")
    first = client.search("emergencies", params)
    again = client.search("emergencies", params)
    other = client.search("parking", params)
    assert first is again
    assert other.statuses[0].full_text == "b"
    assert len(session.gets) == 2
    assert len(session.posts) == 1


def test_zero_ttl_disables_cache():
    session = FakeSession(TOKEN, tweets("a"), tweets("b"))
    client = make_client(session, ttl=0)
    params = SearchParams(query="q")
    assert client.search("k", params).statuses[0].full_text == "a"
    assert client.search("k", params).statuses[0].full_text == "b"


def test_bad_token_response_raises():
    session = FakeSession({"token_type": "other"}, tweets("a"))
    client = make_client(session)
    with pytest.raises(ConfigurationError):
        client.search("k", SearchParams(query="q"))


def test_search_http_error_is_not_cached():
    session = FakeSession(TOKEN, FakeResponse({}, status_code=429), tweets("a"))
    client = make_client(session)
    params = SearchParams(query="q")
    with pytest.raises(requests.HTTPError):
        client.search("k", params)
    assert client.search("k", params).statuses[0].full_text == "a"