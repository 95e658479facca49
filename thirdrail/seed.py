"""Seeding of the rail network: event sources, directions, lines and stations."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from thirdrail.models import Alias, Direction, Line, ScheduleEventSource, Station, StationDetail

logger = logging.getLogger(__name__)


class SeedError(RuntimeError):
    """Raised when the seed data cannot be written."""


_EVENT_SOURCES = (
    ("MARTA_StaticSchedule", "MARTA's Trip Schedule"),
    ("MARTA_RealTime", "MARTA's Real Time API"),
)

_DIRECTIONS = (
    ("Northbound", ("NB", "N", "North")),
    ("Southbound", ("SB", "S", "South")),
    ("Eastbound", ("EB", "E", "East")),
    ("Westbound", ("WB", "W", "West")),
)

_LINES = (
    ("Gold", ("Northbound", "Southbound")),
    ("Red", ("Northbound", "Southbound")),
    ("Blue", ("Eastbound", "Westbound")),
    ("Green", ("Eastbound", "Westbound")),
)

# (name, geohash, description, aliases, lines)
_STATIONS = (
    ("Doraville", "dnh0f5v6mxzj", "Doraville Station", (), ("Gold",)),
    ("Chamblee", "dnh0c94gqrm2", "Chamblee Station", (), ("Gold",)),
    ("Brookhaven", "dnh08u1fpng1", "Brookhaven Station", ("Brookhaven-Oglethorpe Station",), ("Gold",)),
    ("Lenox", "dnh0837g7frm", "Lenox Station", (), ("Gold",)),
    ("North Springs", "dnh107scwx23", "North Springs Station", (), ("Red",)),
    ("Sandy Springs", "dnh10939s87f", "Sandy Springs Station", (), ("Red",)),
    ("Dunwoody", "dnh0bxnr3hcj", "Dunwoody Station", (), ("Red",)),
    ("Medical Center", "dnh0bt32f0zr", "Medical Center Station", (), ("Red",)),
    ("Buckhead", "dnh084sbc4fj", "Buckhead Station", (), ("Red",)),
    ("Indian Creek", "dnh0579u6fcg", "Indian Creek Station", (), ("Blue",)),
    ("Kensington", "dnh04u1s7ycg", "Kensington Station", (), ("Blue",)),
    ("Avondale", "dnh04heebfzp", "Avondale Station", (), ("Blue",)),
    ("Decatur", "dnh01u9cru4h", "Decatur Station", (), ("Blue",)),
    ("East Lake", "dnh016v1ynv9", "East Lake Station", (), ("Blue",)),
    ("West Lake", "dn5bn2sgc1bc", "West Lake Station", (), ("Blue",)),
    (
        "H. E. Holmes",
        "dn5bjbfgcmr3",
        "Hamilton E. Holmes Station",
        ("Hamilton E. Holmes", "Hamilton E Holmes", "Hamilton E Holmes Station"),
        ("Blue",),
    ),
    ("Bankhead", "dn5bnu0ejdq9", "Bankhead Station", (), ("Green",)),
    (
        "Lindbergh Center",
        "dnh02jhnbebq",
        "Lindbergh Center Station",
        ("Lindbergh", "Lindbergh Station"),
        ("Gold", "Red"),
    ),
    ("Arts Center", "dn5bpxphcqh3", "Arts Center Station", (), ("Gold", "Red")),
    ("Midtown", "dn5bptxy8r41", "Midtown Station", (), ("Gold", "Red")),
    (
        "North Avenue",
        "dn5bpsp70th7",
        "North Avenue Station",
        ("North Ave", "North Ave Station"),
        ("Gold", "Red"),
    ),
    ("Civic Center", "dn5bpep496h7", "Civic Center Station", (), ("Gold", "Red")),
    ("Peachtree Center", "dn5bp9qxs9nh", "Peachtree Center Station", (), ("Gold", "Red")),
    ("Five Points", "dn5bp8ezwy4k", "Five Points Station", ("5 points",), ("Gold", "Red", "Blue", "Green")),
    ("Garnett", "djgzzxbb2xkd", "Garnett Station", (), ("Gold", "Red")),
    ("West End", "djgzzjeb581t", "West End Station", (), ("Gold", "Red")),
    ("Oakland City", "djgzyf5dfsmn", "Oakland City Station", ("Oakland",), ("Gold", "Red")),
    (
        "Lakewood",
        "djgzwz0c6suf",
        "Lakewood/Fort McPherson Station",
        ("Lakewood", "Lakewood Station", "Ft. Mcpherson"),
        ("Gold", "Red"),
    ),
    ("East Point", "djgzwdb63g2k", "East Point Station", (), ("Gold", "Red")),
    ("College Park", "djgzqq4k3j73", "College Park Station", (), ("Gold", "Red")),
    ("Airport", "djgzqkhjse84", "Airport Station", (), ("Gold", "Red")),
    ("Ashby", "dn5bp11qp0s9", "Ashby Station", (), ("Blue", "Green")),
    ("Vine City", "dn5bp34zmh5s", "Vine City Station", (), ("Blue", "Green")),
    (
        "Omni Dome",
        "dn5bp90pezjh",
        "Omni/Dome/GWCC/State Farm/CNN Center Station",
        (
            "Omni",
            "Omni Dome",
            "Omni Dome Station",
            "Georgia Dome",
            "CNN",
            "State Farm Arena",
            "Phillips Arena",
            "Georgia World Congress",
        ),
        ("Blue", "Green"),
    ),
    ("Georgia State", "dn5bp8pgdtcf", "Georgia State Station", ("GSU",), ("Blue", "Green")),
    ("King Memorial", "dn5bpbp8fe6s", "King Memorial Station", ("MLK",), ("Blue", "Green")),
    (
        "Inman Park",
        "dnh0092w0nxh",
        "Inman Park-Reynoldstown Station",
        ("Inman Park Station", "Reynoldstown"),
        ("Blue", "Green"),
    ),
    (
        "Edgewood-Candler Park",
        "dnh00f1wzrc6",
        "Edgewood-Candler Park Station",
        ("Edgewood", "Candler", "Edgewood Candler Park", "Edgewood Candler Park Station"),
        ("Blue", "Green"),
    ),
)


def _add_aliases(element: Direction | Line | Station, name: str, aliases: Iterable[str] | None) -> None:
    element.aliases.append(Alias(alias=name))
    for alias in aliases or ():
        element.aliases.append(Alias(alias=alias))


def _fail(session: Session, message: str, err: Exception) -> SeedError:
    session.rollback()
    return SeedError(f"{message}: {err}")


def insert_event_source(session: Session, name: str, description: str) -> ScheduleEventSource:
    """Return the event source with this name and description, creating it if missing."""
    try:
        source = session.scalars(
            select(ScheduleEventSource)
            .where(
                ScheduleEventSource.name == name,
                ScheduleEventSource.description == description,
                ScheduleEventSource.deleted_at.is_(None),
            )
            .order_by(ScheduleEventSource.id)
        ).first()
        if source is None:
            source = ScheduleEventSource(name=name, description=description)
            session.add(source)
            session.flush()
    except SQLAlchemyError as err:
        raise _fail(session, f"failed creating event source `{name}`", err) from err
    return source


def insert_direction(session: Session, name: str, aliases: Iterable[str] | None) -> Direction:
    """Create a direction aliased by its own name and by ``aliases``."""
    direction = Direction(name=name)
    _add_aliases(direction, name, aliases)
    try:
        session.add(direction)
        session.flush()
    except SQLAlchemyError as err:
        raise _fail(session, f"failed creating direction `{name}`", err) from err
    return direction


def insert_line(
    session: Session,
    name: str,
    aliases: Iterable[str] | None,
    directions: Sequence[Direction],
) -> Line:
    """Create a line aliased by its own name and by ``aliases``, running in ``directions``."""
    line = Line(name=name)
    _add_aliases(line, name, aliases)
    try:
        session.add(line)
        session.flush()
        line.directions.extend(directions)
        session.flush()
    except SQLAlchemyError as err:
        raise _fail(session, f"failed creating line `{name}`", err) from err
    return line


def insert_station(
    session: Session,
    name: str,
    location: str,
    description: str,
    aliases: Iterable[str] | None,
    lines: Sequence[Line],
) -> Station:
    """Create a station on ``lines`` with its geohash location and description."""
    station = Station(name=name)
    _add_aliases(station, name, aliases)
    try:
        session.add(station)
        session.flush()
        station.lines.extend(lines)
        session.flush()
        station.detail = StationDetail(description=description, location=location)
        session.flush()
    except SQLAlchemyError as err:
        raise _fail(session, f"failed creating station `{name}`", err) from err
    return station


def seed(session: Session) -> None:
    """Write the whole rail network and commit it."""
    for name, description in _EVENT_SOURCES:
        insert_event_source(session, name, description)

    logger.info("Creating Directions")
    directions = {name: insert_direction(session, name, aliases) for name, aliases in _DIRECTIONS}

    logger.info("Creating Lines")
    lines = {
        name: insert_line(session, name, None, [directions[d] for d in direction_names])
        for name, direction_names in _LINES
    }

    logger.info("Creating Stations")
    for name, location, description, aliases, line_names in _STATIONS:
        insert_station(session, name, location, description, aliases, [lines[n] for n in line_names])

    try:
        session.commit()
    except SQLAlchemyError as err:
        raise _fail(session, "failed committing seed data", err) from err