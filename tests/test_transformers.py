from dataclasses import dataclass

import pytest

from thirdrail.clients import Train
from thirdrail.transformers import (
    EventTransformer,
    calculate_distance,
    filter_by_line,
    filter_by_station,
    sort_stations_by_distance,
)

TRAINS = [
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


@dataclass
class _Detail:
    location: str
    distance: float = 0.0


@dataclass
class _Station:
    name: str
    detail: _Detail


def test_filter_by_line_ignores_case():
    result = filter_by_line(TRAINS, "red")
    assert len(result) == 1
    assert result[0].line == "Red"


def test_filter_by_station():
    result = filter_by_station(TRAINS, "Medical Center Station")
    assert [t.train_id for t in result] == ["404306"]
    assert filter_by_station(TRAINS, "Nowhere") == []


def test_get_station_coerces_names():
    station = EventTransformer().get_station(TRAINS[0])
    assert station.line == "Red"
    assert station.direction == "North"
    assert station.name == "Medical Center Station"


def test_get_schedule_copies_fields():
    schedule = EventTransformer().get_schedule(TRAINS[0])
    assert schedule.destination == "North Springs Station"
    assert schedule.next_station == "Medical Center Station"
    assert schedule.train_id == "404306"
    assert schedule.waiting_seconds == "236"
    assert schedule.waiting_time == "3 min"
    assert schedule.next_arrival == "01:05:17 AM"


def test_unknown_names_become_empty():
    event = Train(station="Nowhere", destination="Nowhere", line="Purple", direction="Up")
    transformer = EventTransformer()
    station = transformer.get_station(event)
    assert (station.name, station.line, station.direction) == ("", "", "")
    assert transformer.get_schedule(event).destination == ""


def test_distance_to_self_is_zero():
    assert calculate_distance(33.78284, -84.38783, 33.78284, -84.38783) == 0.0


def test_distance_is_symmetric_and_positive():
    forward = calculate_distance(33.78284, -84.38783, 33.9, -84.2)
    backward = calculate_distance(33.9, -84.2, 33.78284, -84.38783)
    assert forward > 0
    assert forward == pytest.approx(backward)


def test_nearest_station_is_midtown():
    stations = [
        _Station("Five Points", _Detail("dn5bp8ezwy4k")),
        _Station("Midtown", _Detail("dn5bptxy8r41")),
        _Station("Airport", _Detail("djgzqkhjse84")),
        _Station("Arts Center", _Detail("dn5bpxphcqh3")),
    ]
    result = sort_stations_by_distance(33.782840, -84.387830, stations)
    assert result[0].name == "Midtown"
    assert result[0].detail.distance == pytest.approx(707.7872501578765, rel=1e-6)
    distances = [s.detail.distance for s in result]
    assert distances == sorted(distances)
    assert result[-1].name == "Airport"


def test_sort_of_nothing_is_empty():
    assert sort_stations_by_distance(0.0, 0.0, []) == []