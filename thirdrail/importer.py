"""Import of live MARTA train events into the schedule tables."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from thirdrail.clients import MartaClient
from thirdrail.clients import Train as TrainEvent
from thirdrail.models import (
    NoMatchError,
    RealTimeEventDetail,
    ScheduleEvent,
    ScheduleEventSource,
    Train,
    find_direction_by_name,
    find_station_by_name,
)

logger = logging.getLogger(__name__)

_REALTIME_SOURCE_NAME = "MARTA_RealTime"
_EVENT_LIFETIME = timedelta(minutes=20)
_MAX_TRAIN_ID = 2**32 - 1


def _next_arrival(value: str, now: datetime) -> datetime:
    try:
        clock = datetime.strptime(value, "%I:%M:%S %p").time()
    except ValueError:
        clock = time()
    return datetime.combine(now.date(), clock)


def _event_time(value: str) -> datetime | None:
    try:
        return datetime.strptime(value, "%m/%d/%Y %I:%M:%S %p")
    except ValueError:
        return None


def _train_id(value: str) -> int | None:
    try:
        train_id = int(value, 10)
    except ValueError:
        return None
    return train_id if 0 <= train_id <= _MAX_TRAIN_ID else None


def _waiting_seconds(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0


def _lookup(finder: Callable, name: str, session: Session):
    try:
        return finder(name, session)
    except NoMatchError as err:
        logger.error("%s", err)
        return None


def import_live_events(session: Session, events: Iterable[TrainEvent]) -> list[ScheduleEvent]:
    """Store each live train event as a schedule event with its real-time detail.

    Names that match no station or direction leave that reference empty.
    Returns the schedule events created, after committing them.
    """
    source = session.scalars(
        select(ScheduleEventSource)
        .where(ScheduleEventSource.name == _REALTIME_SOURCE_NAME)
        .order_by(ScheduleEventSource.id)
    ).first()

    created: list[ScheduleEvent] = []
    for event in events:
        now = datetime.now()
        destination = _lookup(find_station_by_name, event.destination, session)
        next_station = _lookup(find_station_by_name, event.station, session)
        if next_station is None:
            logger.error("Unable to find %s", event.station)
        direction = _lookup(find_direction_by_name, event.direction, session)

        schedule_event = ScheduleEvent(
            event_type=source,
            destination=destination,
            next_arrival=_next_arrival(event.next_arrival, now),
            next_station=next_station,
            direction=direction,
            expires_at=datetime.now() + _EVENT_LIFETIME,
        )
        session.add(schedule_event)

        train = None
        train_id = _train_id(event.train_id)
        if train_id is not None:
            train = session.get(Train, train_id)
            if train is None:
                train = Train(id=train_id)
                session.add(train)

        session.add(
            RealTimeEventDetail(
                schedule_event=schedule_event,
                event_time=_event_time(event.event_time),
                train=train,
                waiting_seconds=_waiting_seconds(event.waiting_seconds),
                waiting_time=event.waiting_time,
            )
        )
        session.flush()
        created.append(schedule_event)

    session.commit()
    return created


@dataclass
class RailRunner:
    """Periodically pulls live trains from MARTA and imports them."""

    marta_client: MartaClient
    session_factory: Callable[[], Session]
    interval: float = 15.0
    _stop: threading.Event = field(default_factory=threading.Event, init=False, repr=False)
    _thread: threading.Thread | None = field(default=None, init=False, repr=False)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Begin importing every ``interval`` seconds in a background thread."""
        if self.running:
            return
        logger.info("Starting Rail Runner")
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="rail-runner", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop the background thread and wait for it to finish."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            logger.info("Fetch MARTA events at %s", datetime.now())
            try:
                self.import_events()
            except Exception:
                logger.exception("Rail Runner import failed")
            logger.info("Fetch finished")
        logger.info("Rail Runner finished.")

    def import_events(self) -> int:
        """Fetch live trains once and import them; return how many were stored."""
        try:
            events = self.marta_client.get_trains()
        except Exception as err:
            logger.error("%s", err)
            events = []
        with self.session_factory() as session:
            return len(import_live_events(session, events or []))