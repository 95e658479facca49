import pytest

from thirdrail.clients import MartaAPITestClient, Train
from thirdrail.live import LiveController
from thirdrail.schemas import Alerts, BusAlert, RailAlert


def sample_trains():
    return [
        Train(
            destination="North Springs Station",
            direction="N",
            event_time="5/2/2020 1:01:01 AM",
            line="Red",
            next_arrival="01:05:17 AM",
            station="Medical Center Station",
            train_id="404306",
            waiting_seconds="236",
            waiting_time="3 min",
        ),
        Train(
            destination="Doraville Station",
            direction="N",
            event_time="5/2/2020 1:01:01 AM",
            line="Gold",
            next_arrival="01:05:17 AM",
            station="Midtown Station",
            train_id="404307",
            waiting_seconds="236",
            waiting_time="3 min",
        ),
    ]


def sample_alerts():
    return Alerts(
        bus=[
            BusAlert(
                id="135400",
                title="5/2/2020 - Service Alert",
                desc="ROUTE 2: WESTBOUND TO NORTH AVENUE STATION @ 0930 WILL BE DELAYED.",
                expires="2020-05-02T10:10:58-07:00",
            )
        ],
        rail=[
            RailAlert(
                id="135392",
                title="5/2/2020 - Service Alert",
                desc="Park & Ride available at 23 MARTA rail stations.",
                expires="2020-05-03T06:05:00-07:00",
            )
        ],
    )


@pytest.fixture
def controller():
    return LiveController(MartaAPITestClient(get_trains=sample_trains, get_alerts=sample_alerts))


def test_schedule_by_line(controller):
    data = controller.get_schedule_by_line("red")["data"]
    assert len(data) == 1
    assert data[0]["station"]["line"] == "Red"
    assert data[0]["schedule"]["train_id"] == "404306"


def test_schedule_by_station(controller):
    data = controller.get_schedule_by_station("Medical Center Station")["data"]
    assert len(data) == 1
    assert data[0]["station"]["name"] == "Medical Center Station"
    assert data[0]["schedule"]["destination"] == "North Springs Station"


def test_schedule_direction_is_coerced(controller):
    data = controller.get_schedule_by_line("GOLD")["data"]
    assert data[0]["station"]["direction"] == "North"


def test_no_matching_trains_gives_null_data(controller):
    assert controller.get_schedule_by_line("Purple") == {"data": None}


def test_alerts(controller):
    data = controller.get_alerts()["data"]
    assert len(data["Rail"]) == 1
    assert len(data["Bus"]) == 1


def test_failing_client_yields_empty_results():
    def broken():
        raise RuntimeError("down")

    live = LiveController(MartaAPITestClient(get_trains=broken, get_alerts=broken))
    assert live.get_schedule_by_station("Midtown Station") == {"data": None}
    assert live.get_alerts() == {"data": Alerts().to_dict()}