"""Response bodies and error signalling shared by the HTTP controllers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from thirdrail.schemas import Schedule, Station


@dataclass
class ErrorResponse:
    """An error body: a numeric id and a user-readable message."""

    error_id: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.error_id, "message": self.message}


class ApiError(Exception):
    """Raised by a controller to answer with an HTTP error status and optional body."""

    def __init__(self, status: int, error: ErrorResponse | None = None) -> None:
        super().__init__(error.message if error is not None else f"HTTP {status}")
        self.status = int(status)
        self.error = error

    @property
    def body(self) -> dict[str, Any] | None:
        return self.error.to_dict() if self.error is not None else None


@dataclass
class ScheduleEntry:
    """A live schedule paired with the station it refers to."""

    schedule: Schedule
    station: Station

    def to_dict(self) -> dict[str, Any]:
        return {"schedule": self.schedule.to_dict(), "station": self.station.to_dict()}


@dataclass
class ParkingEntry:
    """A parking status update, optionally bound to a station."""

    status: str
    station: Station = field(default_factory=Station)

    def to_dict(self) -> dict[str, Any]:
        return {"station": self.station.to_dict(), "status": self.status}


@dataclass
class ScheduleDetail:
    """A schedule event with its live or timetable details, when present."""

    event: Any
    real_time: Any = None
    static: Any = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"event": self.event.to_dict()}
        if self.real_time is not None:
            data["real_time_detail"] = self.real_time.to_dict()
        if self.static is not None:
            data["static_event_detail"] = self.static.to_dict()
        return data