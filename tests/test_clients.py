import pytest

from thirdrail.clients import (
    MartaAPITestClient,
    MartaClient,
    SearchParams,
    SearchResult,
    Train,
    Tweet,
    TwitterClient,
    TwitterTestClient,
)
from thirdrail.schemas import Alerts, RailAlert

API_RECORD = {
    "DESTINATION": "North Springs Station",
    "DIRECTION": "N",
    "EVENT_TIME": "5/2/2020 1:01:01 AM",
    "LINE": "Red",
    "NEXT_ARR": "01:05:17 AM",
    "STATION": "Medical Center Station",
    "TRAIN_ID": "404306",
    "WAITING_SECONDS": "236",
    "WAITING_TIME": "3 min",
}


def test_train_from_api_reads_every_field():
    train = Train.from_api(API_RECORD)
    assert train == Train(
        destination="North Springs Station",
        direction="N",
        event_time="5/2/2020 1:01:01 AM",
        line="Red",
        next_arrival="01:05:17 AM",
        station="Medical Center Station",
        train_id="404306",
        waiting_seconds="236",
        waiting_time="3 min",
    )


def test_train_from_api_defaults_missing_fields():
    train = Train.from_api({"LINE": "Gold", "WAITING_SECONDS": 236})
    assert train.line == "Gold"
    assert train.waiting_seconds == "236"
    assert train.station == ""


def test_search_result_from_api():
    result = SearchResult.from_api(
        {"statuses": [{"full_text": "Test parking update from MARTA"}, {"text": "short"}]}
    )
    assert [t.full_text for t in result.statuses] == ["Test parking update from MARTA", "short"]
    assert SearchResult.from_api({}).statuses == []


def test_marta_test_client_delegates():
    trains = [Train.from_api(API_RECORD)]
    alerts = Alerts(rail=[RailAlert(id="135392")])
    client = MartaAPITestClient(get_trains=lambda: trains, get_alerts=lambda: alerts)
    assert isinstance(client, MartaClient)
    assert client.get_trains() == trains
    assert client.get_alerts().rail[0].id == "135392"


def test_marta_test_client_defaults_are_empty():
    client = MartaAPITestClient()
    assert client.get_trains() == []
    assert client.get_alerts() == Alerts()


def test_marta_test_client_propagates_errors():
    def failing():
        raise ConnectionError("down")

    with pytest.raises(ConnectionError):
        MartaAPITestClient(get_trains=failing).get_trains()


def test_twitter_test_client_passes_arguments():
    seen = []

    def search(key, params):
        seen.append((key, params.query, params.tweet_mode))
        return SearchResult([Tweet(full_text="Test emergency from MPD")])

    client = TwitterTestClient(search)
    assert isinstance(client, TwitterClient)
    result = client.search("emergencies", SearchParams(query="from:@martapolice"))
    assert result.statuses[0].full_text == "Test emergency from MPD"
    assert seen == [("emergencies", "from:@martapolice", "extended")]


def test_twitter_test_client_default_finds_nothing():
    assert TwitterTestClient().search("parking", SearchParams(query="x")).statuses == []