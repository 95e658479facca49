"""Shaping of live train events and ordering of stations by distance."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from thirdrail.clients import Train
from thirdrail.geohash import decode
from thirdrail.schemas import Schedule, Station
from thirdrail.validators import CoercionError, EntityType, MartaEntitiesValidator

logger = logging.getLogger(__name__)

_EARTH_RADIUS_METERS = 6378100
_FEET_PER_METER = 3.2808399


@dataclass
class EventTransformer:
    """Turns raw train events into schedule and station records."""

    validator: MartaEntitiesValidator = field(default_factory=MartaEntitiesValidator)

    def _coerce(self, entity_type: EntityType, value: str, report: bool) -> str:
        try:
            return self.validator.coerce(entity_type, value)
        except CoercionError as err:
            if report:
                logger.error("Coercion miss: %s", err)
            return ""

    def get_station(self, event: Train) -> Station:
        return Station(
            direction=self._coerce(EntityType.DIRECTIONS, event.direction, report=False),
            line=self._coerce(EntityType.LINES, event.line, report=False),
            name=self._coerce(EntityType.STATIONS, event.station, report=True),
        )

    def get_schedule(self, event: Train) -> Schedule:
        return Schedule(
            destination=self._coerce(EntityType.STATIONS, event.destination, report=True),
            event_time=event.event_time,
            next_arrival=event.next_arrival,
            next_station=self._coerce(EntityType.STATIONS, event.station, report=True),
            train_id=event.train_id,
            waiting_seconds=event.waiting_seconds,
            waiting_time=event.waiting_time,
        )


def filter_by_line(events: Iterable[Train], line: str) -> list[Train]:
    """Events on ``line``, compared case-insensitively."""
    wanted = line.upper()
    return [event for event in events if event.line.upper() == wanted]


def filter_by_station(events: Iterable[Train], station: str) -> list[Train]:
    """Events at ``station``, compared case-insensitively."""
    wanted = station.upper()
    return [event for event in events if event.station.upper() == wanted]


def _half_versine(theta: float) -> float:
    value = math.sin(theta / 2)
    return value * value


def calculate_distance(
    start_latitude: float,
    start_longitude: float,
    end_latitude: float,
    end_longitude: float,
) -> float:
    """Great-circle distance in feet between two points given in degrees."""
    lat1 = start_latitude * math.pi / 180
    lng1 = start_longitude * math.pi / 180
    lat2 = end_latitude * math.pi / 180
    lng2 = end_longitude * math.pi / 180
    h = _half_versine(lat2 - lat1) + math.cos(lat1) * math.cos(lat2) * _half_versine(lng2 - lng1)
    return 2 * _EARTH_RADIUS_METERS * math.asin(math.sqrt(h)) * _FEET_PER_METER


def sort_stations_by_distance(latitude: float, longitude: float, stations: Iterable[Any]) -> list[Any]:
    """Return stations nearest first.

    Each station needs a ``detail`` with a geohash ``location``; its
    ``detail.distance`` is set to the distance in feet from the point.
    """
    located = []
    for station in stations:
        station_lat, station_lng = decode(station.detail.location)
        station.detail.distance = calculate_distance(latitude, longitude, station_lat, station_lng)
        located.append(station)
    return sorted(located, key=lambda s: s.detail.distance)