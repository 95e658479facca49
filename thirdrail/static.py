"""Static network endpoints: lines, directions, stations and nearest stations."""

from __future__ import annotations

import logging
import math
from http import HTTPStatus
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from thirdrail.models import Direction, Line, Station
from thirdrail.responses import ApiError, ErrorResponse
from thirdrail.transformers import sort_stations_by_distance

logger = logging.getLogger(__name__)

_UNKNOWN = "an unknown error occurred"


def _parse_coordinate(value: Any) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if not isinstance(value, str) or not value or value != value.strip() or "_" in value:
        raise ValueError(f"invalid decimal number: {value!r}")
    return float(value)


def _fetch_all(session: Session, model: Any, what: str, error_id: int) -> list[Any]:
    try:
        return list(
            session.scalars(select(model).where(model.deleted_at.is_(None)).order_by(model.id))
        )
    except SQLAlchemyError as err:
        session.rollback()
        logger.error("Failed to fetch %s: %s", what, err)
        raise ApiError(HTTPStatus.INTERNAL_SERVER_ERROR, ErrorResponse(error_id, _UNKNOWN)) from err


class StaticController:
    """Answers requests about the fixed rail network."""

    def get_static_schedule_by_station(self, schedule: str | None, station_name: str | None) -> dict[str, Any]:
        """Timetable for a station; both parameters are required."""
        if not schedule or not station_name:
            raise ApiError(HTTPStatus.UNPROCESSABLE_ENTITY)
        return {"data": None}

    def get_lines(self, session: Session) -> dict[str, Any]:
        lines = _fetch_all(session, Line, "lines", 1)
        return {"data": {"lines": [line.to_dict() for line in lines]}}

    def get_directions(self, session: Session) -> dict[str, Any]:
        directions = _fetch_all(session, Direction, "directions", 1)
        return {"data": {"directions": [direction.to_dict() for direction in directions]}}

    def get_stations(self, session: Session) -> dict[str, Any]:
        stations = _fetch_all(session, Station, "stations", 1)
        return {"data": {"stations": [station.to_dict() for station in stations]}}

    def get_locations(self, session: Session, latitude: Any, longitude: Any) -> dict[str, Any]:
        """Stations ordered from nearest to farthest from the given point."""
        try:
            lat = _parse_coordinate(latitude)
        except ValueError as err:
            raise ApiError(
                HTTPStatus.BAD_REQUEST,
                ErrorResponse(
                    1,
                    "URL parameter `latitude` must be provided and must be a valid decimal number",
                ),
            ) from err
        try:
            lng = _parse_coordinate(longitude)
        except ValueError as err:
            raise ApiError(
                HTTPStatus.BAD_REQUEST,
                ErrorResponse(
                    2,
                    "URL parameter `longitude` must be provided and must be a valid decimal number",
                ),
            ) from err
        if math.isnan(lat) or math.isnan(lng):
            logger.warning("Sorting stations from a NaN coordinate")

        stations = _fetch_all(session, Station, "stations to sort by location", 3)
        ordered = sort_stations_by_distance(lat, lng, stations)
        return {"data": [station.to_dict() for station in ordered] or None}