import threading
from datetime import date, datetime, time, timedelta

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session, sessionmaker

from thirdrail.clients import MartaAPITestClient
from thirdrail.clients import Train as TrainEvent
from thirdrail.importer import RailRunner, import_live_events
from thirdrail.models import RealTimeEventDetail, ScheduleEvent, Train, db_migrate
from thirdrail.seed import seed

MEDICAL_CENTER = TrainEvent(
    destination="North Springs Station",
    direction="N",
    event_time="5/2/2020 1:01:01 AM",
    line="Red",
    next_arrival="01:05:17 AM",
    station="Medical Center Station",
    train_id="404306",
    waiting_seconds="236",
    waiting_time="3 min",
)

MIDTOWN = TrainEvent(
    destination="Doraville Station",
    direction="N",
    event_time="5/2/2020 1:01:01 AM",
    line="Gold",
    next_arrival="01:05:17 AM",
    station="Midtown Station",
    train_id="404307",
    waiting_seconds="236",
    waiting_time="3 min",
)


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'rail.db'}")
    db_migrate(engine)
    with Session(engine) as db:
        seed(db)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as db:
        yield db


def _count(session, model):
    return session.scalar(select(func.count()).select_from(model))


def test_import_resolves_stations_and_direction(session):
    [event] = import_live_events(session, [MEDICAL_CENTER])
    assert event.next_station.name == "Medical Center"
    assert event.destination.name == "North Springs"
    assert event.direction.name == "Northbound"
    assert event.event_type.name == "MARTA_RealTime"


def test_import_sets_arrival_today_and_expiry(session):
    before = datetime.now()
    [event] = import_live_events(session, [MEDICAL_CENTER])
    after = datetime.now()
    assert event.next_arrival.time() == time(1, 5, 17)
    assert event.next_arrival.date() == date.today()
    assert before + timedelta(minutes=20) <= event.expires_at <= after + timedelta(minutes=20)


def test_import_stores_real_time_detail(session):
    [event] = import_live_events(session, [MEDICAL_CENTER])
    detail = session.scalars(
        select(RealTimeEventDetail).where(RealTimeEventDetail.schedule_event_id == event.id)
    ).one()
    assert detail.waiting_seconds == 236
    assert detail.waiting_time == "3 min"
    assert detail.train.id == 404306
    assert detail.event_time == datetime(2020, 5, 2, 1, 1, 1)


def test_same_train_is_stored_once(session):
    import_live_events(session, [MEDICAL_CENTER, MEDICAL_CENTER])
    assert _count(session, ScheduleEvent) == 2
    assert _count(session, RealTimeEventDetail) == 2
    assert _count(session, Train) == 1


def test_unknown_names_leave_references_empty(session):
    unknown = TrainEvent(destination="Xyzzy", direction="Q", station="Xyzzy", train_id="404306")
    [event] = import_live_events(session, [unknown])
    assert event.next_station is None
    assert event.destination is None
    assert event.direction is None
    assert _count(session, ScheduleEvent) == 1


def test_unparseable_values_fall_back(session):
    broken = TrainEvent(
        destination="North Springs Station",
        direction="N",
        event_time="later",
        next_arrival="soon",
        station="Medical Center Station",
        train_id="abc",
        waiting_seconds="many",
        waiting_time="3 min",
    )
    [event] = import_live_events(session, [broken])
    detail = session.scalars(
        select(RealTimeEventDetail).where(RealTimeEventDetail.schedule_event_id == event.id)
    ).one()
    assert detail.waiting_seconds == 0
    assert detail.train is None
    assert detail.event_time is None
    assert event.next_arrival == datetime.combine(date.today(), time())


def test_rail_runner_import_events_counts(engine):
    client = MartaAPITestClient(get_trains=lambda: [MEDICAL_CENTER, MIDTOWN])
    runner = RailRunner(client, sessionmaker(engine))
    assert runner.import_events() == 2
    with Session(engine) as db:
        assert _count(db, ScheduleEvent) == 2


def test_rail_runner_survives_client_errors(engine):
    def failing():
        raise ConnectionError("down")

    runner = RailRunner(MartaAPITestClient(get_trains=failing), sessionmaker(engine))
    assert runner.import_events() == 0


def test_rail_runner_start_and_stop(engine):
    fetched = threading.Event()

    def get_trains():
        fetched.set()
        return [MEDICAL_CENTER]

    runner = RailRunner(MartaAPITestClient(get_trains=get_trains), sessionmaker(engine), interval=0.01)
    runner.start()
    assert runner.running
    assert fetched.wait(5)
    runner.stop()
    assert not runner.running
    with Session(engine) as db:
        assert _count(db, ScheduleEvent) >= 1