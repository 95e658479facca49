"""Crowd-sourced endpoints: station estimates, parking and emergency updates."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from http import HTTPStatus
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from thirdrail.clients import MartaClient, SearchParams, TwitterClient
from thirdrail.models import Direction, ScheduleEvent, Station
from thirdrail.responses import ApiError, ParkingEntry, ScheduleDetail

logger = logging.getLogger(__name__)

PARKING_QUERY = "from:@martaservice #parkingupdate"
EMERGENCY_QUERY = "from:@martapolice"


@dataclass
class LatestEstimate:
    """The most recent arrival estimate recorded for a train at a station."""

    destination: str = ""
    station: str = ""
    station_id: int | None = None
    direction: str = ""
    direction_id: int | None = None
    next_arrival: datetime | None = None


class MartaMirror(Protocol):
    """A store of recorded MARTA estimates."""

    def get_latest_estimates(self, station_id: int) -> list[LatestEstimate]:
        ...


def convert_sd_estimate(estimate: LatestEstimate) -> ScheduleDetail:
    """Turn a recorded estimate into a schedule detail with an unsaved event."""
    event = ScheduleEvent(
        destination=Station(name=estimate.destination),
        next_station=Station(id=estimate.station_id, name=estimate.station),
        direction=Direction(id=estimate.direction_id, name=estimate.direction),
        next_arrival=estimate.next_arrival,
    )
    return ScheduleDetail(event=event)


@dataclass
class SmartController:
    """Answers requests that combine MARTA data with other sources."""

    marta_client: MartaClient | None = None
    twitter_client: TwitterClient | None = None
    sd_client: MartaMirror | None = None

    def get_station_details(self, session: Session, station_id: Any) -> dict[str, Any]:
        """A station with the latest recorded estimates of trains heading to it."""
        try:
            key = int(station_id)
        except (TypeError, ValueError) as err:
            raise ApiError(HTTPStatus.UNPROCESSABLE_ENTITY) from err

        try:
            station = session.scalars(
                select(Station).where(Station.id == key, Station.deleted_at.is_(None))
            ).first()
        except SQLAlchemyError as err:
            session.rollback()
            logger.error("%s", err)
            raise ApiError(HTTPStatus.INTERNAL_SERVER_ERROR) from err
        if station is None:
            logger.error("record not found: station %s", key)
            raise ApiError(HTTPStatus.INTERNAL_SERVER_ERROR)

        if self.sd_client is None:
            logger.error("No estimate source configured")
            raise ApiError(HTTPStatus.INTERNAL_SERVER_ERROR)
        try:
            estimates = self.sd_client.get_latest_estimates(key)
        except Exception as err:
            logger.error("%s", err)
            raise ApiError(HTTPStatus.INTERNAL_SERVER_ERROR) from err

        schedule = [convert_sd_estimate(estimate).to_dict() for estimate in estimates or []]
        return {"data": {"station": station.to_dict(), "schedule": schedule or None}}

    def _updates(self, search_key: str, query: str) -> dict[str, Any]:
        if self.twitter_client is None:
            logger.error("No Twitter client configured")
            return {"data": []}
        try:
            result = self.twitter_client.search(
                search_key, SearchParams(query=query, tweet_mode="extended")
            )
        except Exception as err:
            logger.error("Twitter search failed: %s", err)
            result = None
        statuses = result.statuses if result is not None else []
        return {"data": [ParkingEntry(status=tweet.full_text).to_dict() for tweet in statuses]}

    def get_parking_status(self) -> dict[str, Any]:
        """Parking updates posted by MARTA."""
        return self._updates("parking", PARKING_QUERY)

    def get_emergency_status(self) -> dict[str, Any]:
        """Updates posted by the MARTA police."""
        return self._updates("emergencies", EMERGENCY_QUERY)