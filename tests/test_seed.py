import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session

from thirdrail.models import (
    Direction,
    Line,
    ScheduleEventSource,
    Station,
    db_migrate,
    find_station_by_name,
)
from thirdrail.seed import (
    SeedError,
    insert_direction,
    insert_event_source,
    insert_line,
    insert_station,
    seed,
)


@pytest.fixture
def session(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'seed.db'}")
    db_migrate(engine)
    with Session(engine) as db:
        yield db
    engine.dispose()


def _count(session, model):
    return session.scalar(select(func.count()).select_from(model))


def test_seed_creates_network(session):
    seed(session)
    assert _count(session, Station) == 38
    assert _count(session, Line) == 4
    assert _count(session, Direction) == 4
    assert _count(session, ScheduleEventSource) == 2


def test_seed_event_source_names(session):
    seed(session)
    names = set(session.scalars(select(ScheduleEventSource.name)))
    assert names == {"MARTA_StaticSchedule", "MARTA_RealTime"}


def test_insert_event_source_is_idempotent(session):
    first = insert_event_source(session, "MARTA_RealTime", "MARTA's Real Time API")
    second = insert_event_source(session, "MARTA_RealTime", "MARTA's Real Time API")
    assert first.id == second.id
    assert _count(session, ScheduleEventSource) == 1


def test_insert_direction_aliases(session):
    direction = insert_direction(session, "Northbound", ["NB", "N", "North"])
    assert [a.alias for a in direction.aliases] == ["Northbound", "NB", "N", "North"]
    assert all(a.named_element_type == "directions" for a in direction.aliases)
    assert all(a.named_element_id == direction.id for a in direction.aliases)


def test_insert_line_links_directions(session):
    north = insert_direction(session, "Northbound", [])
    south = insert_direction(session, "Southbound", [])
    line = insert_line(session, "Gold", None, [north, south])
    assert [d.name for d in line.directions] == ["Northbound", "Southbound"]
    assert [a.alias for a in line.aliases] == ["Gold"]
    assert line in north.lines


def test_insert_station_detail_and_lines(session):
    gold = insert_line(session, "Gold", None, [])
    red = insert_line(session, "Red", None, [])
    station = insert_station(session, "Midtown", "dn5bptxy8r41", "Midtown Station", None, [gold, red])
    assert station.detail.location == "dn5bptxy8r41"
    assert station.detail.description == "Midtown Station"
    assert station.detail.station_id == station.id
    assert [line.name for line in station.lines] == ["Gold", "Red"]


def test_duplicate_station_name_raises(session):
    insert_station(session, "Midtown", "dn5bptxy8r41", "Midtown Station", None, [])
    with pytest.raises(SeedError, match="Midtown"):
        insert_station(session, "Midtown", "dn5bp8ezwy4k", "Midtown Station", None, [])


def test_seed_twice_fails_on_unique_station(session):
    seed(session)
    with pytest.raises(SeedError):
        seed(session)


def test_seeded_stations_are_findable(session):
    seed(session)
    assert find_station_by_name("Medical Center Station", session).name == "Medical Center"
    five_points = find_station_by_name("5 points", session)
    assert five_points.name == "Five Points"
    assert len(five_points.lines) == 4


def test_seeded_midtown_location(session):
    seed(session)
    midtown = session.scalars(select(Station).where(Station.name == "Midtown")).one()
    assert midtown.detail.location == "dn5bptxy8r41"
    assert [line.name for line in midtown.lines] == ["Gold", "Red"]