"""Administrative and rider endpoints."""

from __future__ import annotations

import hmac
import json
import logging
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from thirdrail.clients import MartaClient, Train
from thirdrail.models import Station
from thirdrail.responses import ApiError

logger = logging.getLogger(__name__)

_RIDER_STATION = "Midtown Station"


@dataclass
class AdminController:
    """Endpoints reserved to callers holding the admin key."""

    marta_client: MartaClient | None = None
    admin_key: str = ""

    def _is_admin(self, key: str | None) -> bool:
        return hmac.compare_digest((key or "").encode(), (self.admin_key or "").encode())

    def ingest_event(self, key: str | None, body: str | bytes) -> dict[str, Any]:
        """Accept a train event in the live-feed format."""
        if not self._is_admin(key):
            raise ApiError(HTTPStatus.UNAUTHORIZED)
        try:
            payload = json.loads(body)
        except (TypeError, ValueError) as err:
            logger.error("%s", err)
            raise ApiError(HTTPStatus.UNPROCESSABLE_ENTITY) from err
        if not isinstance(payload, dict):
            logger.error("train event must be a JSON object")
            raise ApiError(HTTPStatus.UNPROCESSABLE_ENTITY)
        try:
            Train.from_api(payload)
        except (KeyError, TypeError, ValueError) as err:
            logger.error("%s", err)
            raise ApiError(HTTPStatus.UNPROCESSABLE_ENTITY) from err
        return {"data": None}


class RiderController:
    """Endpoints for rider-facing alerts."""

    def get_rider_alerts(self, session: Session) -> dict[str, Any]:
        """The rider alert station, or an empty station when it does not exist."""
        station = session.scalars(
            select(Station)
            .where(Station.name == _RIDER_STATION, Station.deleted_at.is_(None))
            .order_by(Station.id)
        ).first()
        return (station if station is not None else Station()).to_dict()