"""Database models for the rail network, rider feedback and schedule events."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, TypeVar

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, and_, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    Session,
    foreign,
    mapped_column,
    relationship,
    validates,
)

from thirdrail import fuzzy

logger = logging.getLogger(__name__)

REALTIME_EVENT_SOURCE_ID = 2
"""Id of the seeded ``MARTA_RealTime`` schedule event source."""


class Base(DeclarativeBase):
    """Declarative base for every table."""


class NoMatchError(LookupError):
    """Raised when no station, line or direction matches a name."""


def _now() -> datetime:
    return datetime.now()


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _fk(target: str) -> ForeignKey:
    return ForeignKey(target, ondelete="RESTRICT", onupdate="RESTRICT")


class _Timestamps:
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_now, onupdate=_now)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, index=True)

    def _model_fields(self) -> dict[str, Any]:
        return {
            "ID": getattr(self, "id"),
            "CreatedAt": _iso(self.created_at),
            "UpdatedAt": _iso(self.updated_at),
            "DeletedAt": _iso(self.deleted_at),
        }


class _NamedElement:
    """Tags each alias added to ``aliases`` with the owner's table name."""

    @validates("aliases")
    def _tag_alias(self, key: str, alias: Alias) -> Alias:
        alias.named_element_type = getattr(self, "__tablename__")
        return alias


line_directions = Table(
    "line_directions",
    Base.metadata,
    Column("line_id", Integer, _fk("lines.id"), primary_key=True),
    Column("direction_id", Integer, _fk("directions.id"), primary_key=True),
)

station_lines = Table(
    "station_lines",
    Base.metadata,
    Column("station_id", Integer, _fk("stations.id"), primary_key=True),
    Column("line_id", Integer, _fk("lines.id"), primary_key=True),
)


class Alias(_Timestamps, Base):
    """An alternative name for a station, line or direction."""

    __tablename__ = "aliases"

    id: Mapped[int] = mapped_column(primary_key=True)
    named_element_type: Mapped[str] = mapped_column(String, nullable=False)
    named_element_id: Mapped[int] = mapped_column(Integer, nullable=False)
    alias: Mapped[str] = mapped_column(String, default="")
    description: Mapped[str] = mapped_column(String, default="")

    def to_dict(self) -> dict[str, Any]:
        return {
            "NamedElementType": self.named_element_type or "",
            "Alias": self.alias or "",
            "Description": self.description or "",
        }


class FeedbackSource(_Timestamps, Base):
    """Where a piece of feedback came from."""

    __tablename__ = "feedback_sources"

    id: Mapped[int] = mapped_column(primary_key=True)
    source_id: Mapped[str] = mapped_column(String, default="")
    source_type: Mapped[str] = mapped_column(String, default="")

    def _as_dict(self) -> dict[str, Any]:
        return {
            **self._model_fields(),
            "SourceID": self.source_id or "",
            "SourceType": self.source_type or "",
        }


class FeedbackType(_Timestamps, Base):
    """A category of feedback."""

    __tablename__ = "feedback_types"

    id: Mapped[int] = mapped_column(primary_key=True)
    description: Mapped[str] = mapped_column(String, nullable=False)

    def _as_dict(self) -> dict[str, Any]:
        return {**self._model_fields(), "Description": self.description or ""}


class Feedback(_Timestamps, Base):
    """Rider feedback about a station, line or direction."""

    __tablename__ = "feedbacks"

    id: Mapped[int] = mapped_column(primary_key=True)
    station_id: Mapped[int | None] = mapped_column(_fk("stations.id"))
    line_id: Mapped[int | None] = mapped_column(_fk("lines.id"))
    direction_id: Mapped[int | None] = mapped_column(_fk("directions.id"))
    source_id: Mapped[int | None] = mapped_column(_fk("feedback_sources.id"))
    source: Mapped[FeedbackSource | None] = relationship()
    type_id: Mapped[int | None] = mapped_column(_fk("feedback_types.id"))
    type: Mapped[FeedbackType | None] = relationship()
    description: Mapped[str] = mapped_column(String, nullable=False)
    thumbs_up: Mapped[int] = mapped_column(Integer, default=0)
    thumbs_down: Mapped[int] = mapped_column(Integer, default=0)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self._model_fields(),
            "StationID": self.station_id or 0,
            "LineID": self.line_id or 0,
            "DirectionID": self.direction_id or 0,
            "SourceID": self.source_id or 0,
            "Source": self.source._as_dict() if self.source is not None else None,
            "TypeID": self.type_id or 0,
            "Type": self.type._as_dict() if self.type is not None else None,
            "Description": self.description or "",
            "ThumbsUp": self.thumbs_up or 0,
            "ThumbsDown": self.thumbs_down or 0,
            "ExpiresAt": _iso(self.expires_at),
        }


class Direction(_NamedElement, _Timestamps, Base):
    """A direction of travel, such as Northbound."""

    __tablename__ = "directions"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    feedback: Mapped[list[Feedback]] = relationship(order_by=lambda: Feedback.id)
    lines: Mapped[list[Line]] = relationship(
        secondary=line_directions, back_populates="directions", order_by=lambda: Line.id
    )
    aliases: Mapped[list[Alias]] = relationship(
        primaryjoin=lambda: and_(
            Direction.id == foreign(Alias.named_element_id),
            Alias.named_element_type == "directions",
        ),
        order_by=lambda: Alias.id,
        cascade="all",
    )

    def _as_dict(self, nested: bool) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.feedback:
            data["Feedback"] = [item.to_dict() for item in self.feedback]
        if nested and self.lines:
            data["Lines"] = [line._as_dict(False) for line in self.lines]
        data["Name"] = self.name or ""
        if self.aliases:
            data["Aliases"] = [alias.to_dict() for alias in self.aliases]
        return data

    def to_dict(self) -> dict[str, Any]:
        return self._as_dict(True)


class Line(_NamedElement, _Timestamps, Base):
    """A rail line, such as Gold or Red."""

    __tablename__ = "lines"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    feedback: Mapped[list[Feedback]] = relationship(order_by=lambda: Feedback.id)
    directions: Mapped[list[Direction]] = relationship(
        secondary=line_directions, back_populates="lines", order_by=lambda: Direction.id
    )
    stations: Mapped[list[Station]] = relationship(
        secondary=station_lines, back_populates="lines", order_by=lambda: Station.id
    )
    aliases: Mapped[list[Alias]] = relationship(
        primaryjoin=lambda: and_(
            Line.id == foreign(Alias.named_element_id),
            Alias.named_element_type == "lines",
        ),
        order_by=lambda: Alias.id,
        cascade="all",
    )

    def _as_dict(self, nested: bool) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.feedback:
            data["Feedback"] = [item.to_dict() for item in self.feedback]
        if nested and self.directions:
            data["Directions"] = [direction._as_dict(False) for direction in self.directions]
        if nested and self.stations:
            data["Stations"] = [station._as_dict(False) for station in self.stations]
        data["Name"] = self.name or ""
        if self.aliases:
            data["Aliases"] = [alias.to_dict() for alias in self.aliases]
        return data

    def to_dict(self) -> dict[str, Any]:
        return self._as_dict(True)


class StationDetail(_Timestamps, Base):
    """A station's full description and geohash location."""

    __tablename__ = "station_details"

    id: Mapped[int] = mapped_column(primary_key=True)
    station_id: Mapped[int] = mapped_column(_fk("stations.id"), nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False)
    location: Mapped[str] = mapped_column(String, unique=True, nullable=False)

    # Distance in feet from a queried point; computed, never stored.
    distance = 0.0

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "Description": self.description or "",
            "Location": self.location or "",
        }
        if self.distance:
            data["Distance"] = self.distance
        return data


class Station(_NamedElement, _Timestamps, Base):
    """A rail station."""

    __tablename__ = "stations"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    feedback: Mapped[list[Feedback]] = relationship(order_by=lambda: Feedback.id)
    detail: Mapped[StationDetail | None] = relationship(cascade="all")
    aliases: Mapped[list[Alias]] = relationship(
        primaryjoin=lambda: and_(
            Station.id == foreign(Alias.named_element_id),
            Alias.named_element_type == "stations",
        ),
        order_by=lambda: Alias.id,
        cascade="all",
    )
    lines: Mapped[list[Line]] = relationship(
        secondary=station_lines, back_populates="stations", order_by=lambda: Line.id
    )

    def _as_dict(self, nested: bool) -> dict[str, Any]:
        data: dict[str, Any] = {"ID": self.id or 0}
        if self.feedback:
            data["Feedback"] = [item.to_dict() for item in self.feedback]
        data["Detail"] = (
            self.detail.to_dict() if self.detail is not None else {"Description": "", "Location": ""}
        )
        data["Aliases"] = [alias.to_dict() for alias in self.aliases]
        if nested:
            data["Lines"] = [line._as_dict(False) for line in self.lines]
        data["Name"] = self.name or ""
        return data

    def to_dict(self) -> dict[str, Any]:
        return self._as_dict(True)


class Train(_Timestamps, Base):
    """A train, identified by the id MARTA reports for it."""

    __tablename__ = "trains"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)


class ScheduleEventSource(_Timestamps, Base):
    """Where schedule events come from: the static timetable or the live feed."""

    __tablename__ = "schedule_event_sources"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False)

    def _as_dict(self) -> dict[str, Any]:
        return {"Name": self.name or "", "Description": self.description or ""}


class ScheduleEvent(_Timestamps, Base):
    """An expected arrival of a train at a station."""

    __tablename__ = "schedule_events"

    id: Mapped[int] = mapped_column(primary_key=True)
    event_type_id: Mapped[int | None] = mapped_column(_fk("schedule_event_sources.id"))
    event_type: Mapped[ScheduleEventSource | None] = relationship()
    destination_id: Mapped[int | None] = mapped_column(_fk("stations.id"))
    destination: Mapped[Station | None] = relationship(foreign_keys="ScheduleEvent.destination_id")
    next_arrival: Mapped[datetime | None] = mapped_column(DateTime)
    next_station_id: Mapped[int | None] = mapped_column(_fk("stations.id"))
    next_station: Mapped[Station | None] = relationship(
        foreign_keys="ScheduleEvent.next_station_id"
    )
    direction_id: Mapped[int | None] = mapped_column(ForeignKey("directions.id"))
    direction: Mapped[Direction | None] = relationship()
    expires_at: Mapped[datetime | None] = mapped_column(DateTime)

    def to_dict(self) -> dict[str, Any]:
        return {
            "EventType": self.event_type._as_dict() if self.event_type is not None else None,
            "Destination": self.destination.to_dict() if self.destination is not None else None,
            "NextArrival": _iso(self.next_arrival),
            "NextStation": self.next_station.to_dict() if self.next_station is not None else None,
            "Direction": self.direction.to_dict() if self.direction is not None else None,
            "ExpiresAt": _iso(self.expires_at),
        }


class RealTimeEventDetail(_Timestamps, Base):
    """Live-feed details attached to a schedule event."""

    __tablename__ = "real_time_event_details"

    id: Mapped[int] = mapped_column(primary_key=True)
    schedule_event_id: Mapped[int | None] = mapped_column(_fk("schedule_events.id"))
    schedule_event: Mapped[ScheduleEvent | None] = relationship()
    event_time: Mapped[datetime | None] = mapped_column(DateTime)
    train_id: Mapped[int | None] = mapped_column(_fk("trains.id"))
    train: Mapped[Train | None] = relationship()
    waiting_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    waiting_time: Mapped[str] = mapped_column(String, nullable=False, default="")

    def to_dict(self) -> dict[str, Any]:
        return {
            "EventTime": _iso(self.event_time),
            "Train": {"ID": self.train.id} if self.train is not None else None,
            "WaitingSeconds": self.waiting_seconds or 0,
            "WaitingTime": self.waiting_time or "",
        }


class StaticEventDetail(_Timestamps, Base):
    """Timetable details attached to a schedule event."""

    __tablename__ = "static_event_details"

    id: Mapped[int] = mapped_column(primary_key=True)
    schedule_event_id: Mapped[int | None] = mapped_column(_fk("schedule_events.id"))
    schedule_event: Mapped[ScheduleEvent | None] = relationship()
    scheduled_time: Mapped[datetime | None] = mapped_column(DateTime)
    static_schedule_type: Mapped[str] = mapped_column(String, nullable=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self._model_fields(),
            "ScheduleEventID": self.schedule_event_id or 0,
            "ScheduleEvent": (
                self.schedule_event.to_dict() if self.schedule_event is not None else None
            ),
            "ScheduledTime": _iso(self.scheduled_time),
            "StaticScheduleType": self.static_schedule_type or "",
        }


_Named = TypeVar("_Named", Station, Line, Direction)


def _live(model: Any):
    return select(model).where(model.deleted_at.is_(None)).order_by(model.id)


def _find_by_alias(name: str, session: Session, model: type[_Named], kind: str) -> _Named:
    aliases = session.scalars(
        _live(Alias).where(Alias.named_element_type == model.__tablename__)
    ).all()
    results = fuzzy.find(name, [alias.alias or "" for alias in aliases])
    if not results:
        raise NoMatchError(f"No {kind} match for name {name}")
    for match in results:
        logger.debug(
            "%s name: %s, match: %s, score: %d", kind, name, aliases[match.index].alias, match.score
        )
    element_id = aliases[results[0].index].named_element_id
    element = session.scalars(_live(model).where(model.id == element_id)).first()
    if element is None:
        raise NoMatchError(f"No {kind} match for name {name}")
    return element


def find_station_by_name(name: str, session: Session) -> Station:
    """Find a station by name or description, then by the closest alias."""
    wanted = name.upper()
    for station in session.scalars(_live(Station)):
        description = station.detail.description if station.detail is not None else ""
        candidates = {
            station.name.upper(),
            description.upper(),
            f"{station.name} Station".upper(),
            f"{description} Station".upper(),
        }
        if wanted in candidates:
            return station
    logger.info("No name or description match for station %s; searching by alias", name)
    return _find_by_alias(name, session, Station, "station")


def find_direction_by_name(name: str, session: Session) -> Direction:
    """Find a direction by name, then by the closest alias."""
    wanted = name.upper()
    for direction in session.scalars(_live(Direction)):
        if direction.name.upper() == wanted:
            return direction
    logger.info("No direction name match for %s; searching by alias", name)
    return _find_by_alias(name, session, Direction, "direction")


def find_line_by_name(name: str, session: Session) -> Line:
    """Find a line by name, then by the closest alias."""
    wanted = name.upper()
    for line in session.scalars(_live(Line)):
        if line.name.upper() == wanted:
            return line
    logger.info("No line name match for %s; searching by alias", name)
    return _find_by_alias(name, session, Line, "line")


def get_schedule_events_by_station_realtime(
    station_id: int, session: Session
) -> tuple[list[ScheduleEvent], list[RealTimeEventDetail | None]]:
    """The latest live event for each train heading to a station.

    Returns the events and their live details as two parallel lists,
    ordered by train id; an event without details pairs with None.
    """
    rows = session.execute(
        select(ScheduleEvent, RealTimeEventDetail)
        .outerjoin(RealTimeEventDetail, RealTimeEventDetail.schedule_event_id == ScheduleEvent.id)
        .where(
            ScheduleEvent.event_type_id == REALTIME_EVENT_SOURCE_ID,
            ScheduleEvent.next_station_id == station_id,
        )
        .order_by(RealTimeEventDetail.created_at.desc(), RealTimeEventDetail.id.desc())
    ).all()

    latest: dict[int | None, tuple[ScheduleEvent, RealTimeEventDetail | None]] = {}
    for event, detail in rows:
        latest.setdefault(detail.train_id if detail is not None else None, (event, detail))

    ordered = [latest[key] for key in sorted(latest, key=lambda k: (k is None, k or 0))]
    return [event for event, _ in ordered], [detail for _, detail in ordered]


def db_migrate(engine: Engine) -> None:
    """Create every table, index and foreign key that does not exist yet."""
    logger.info("Creating tables and indexes...")
    Base.metadata.create_all(engine)