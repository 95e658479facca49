"""Live schedule and alert endpoints backed by the MARTA real-time feed."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from thirdrail.clients import MartaClient, Train
from thirdrail.responses import ScheduleEntry
from thirdrail.schemas import Alerts
from thirdrail.transformers import EventTransformer, filter_by_line, filter_by_station

logger = logging.getLogger(__name__)


@dataclass
class LiveController:
    """Answers live schedule and alert requests."""

    marta_client: MartaClient
    transformer: EventTransformer = field(default_factory=EventTransformer)

    def _trains(self) -> list[Train]:
        try:
            return list(self.marta_client.get_trains() or [])
        except Exception as err:
            logger.error("Failed to fetch trains: %s", err)
            return []

    def _response(self, events: Iterable[Train]) -> dict[str, Any]:
        entries = [
            ScheduleEntry(
                schedule=self.transformer.get_schedule(event),
                station=self.transformer.get_station(event),
            ).to_dict()
            for event in events
        ]
        return {"data": entries or None}

    def get_schedule_by_line(self, line: str) -> dict[str, Any]:
        """Live schedules of every train on ``line``."""
        return self._response(filter_by_line(self._trains(), line))

    def get_schedule_by_station(self, station: str) -> dict[str, Any]:
        """Live schedules of every train approaching ``station``."""
        logger.info("Displaying schedules for %s", station)
        return self._response(filter_by_station(self._trains(), station))

    def get_alerts(self) -> dict[str, Any]:
        """Current MARTA alerts; empty when they cannot be fetched."""
        try:
            alerts = self.marta_client.get_alerts()
        except Exception as err:
            logger.error("Failed to fetch alerts: %s", err)
            alerts = Alerts()
        return {"data": alerts.to_dict()}