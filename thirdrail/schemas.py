"""Wire schemas for MARTA alerts, live schedules and stations."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field


def _local_name(tag: object) -> str:
    """Return an element tag without any namespace prefix."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _chardata(element: ET.Element) -> str:
    """Character data placed directly inside ``element``, children excluded."""
    return (element.text or "") + "".join(child.tail or "" for child in element)


@dataclass
class _Alert:
    id: str = ""
    title: str = ""
    desc: str = ""
    expires: str = ""
    text: str = ""

    @classmethod
    def _from_element(cls, element: ET.Element):
        values = {
            "id": element.get("id", ""),
            "title": element.get("title", ""),
            "text": _chardata(element),
        }
        for child in element:
            name = _local_name(child.tag)
            if name in ("desc", "expires"):
                values[name] = "".join(child.itertext())
        return cls(**values)

    def _as_dict(self) -> dict:
        data: dict = {}
        if self.text:
            data["text"] = self.text
        data.update(id=self.id, title=self.title, desc=self.desc, expires=self.expires)
        return data


@dataclass
class BusAlert(_Alert):
    """A service alert for a bus route."""

    def to_dict(self) -> dict:
        return self._as_dict()


@dataclass
class RailAlert(_Alert):
    """A service alert for the rail network."""

    def to_dict(self) -> dict:
        return self._as_dict()


@dataclass
class Alerts:
    """The alert feed: bus and rail alerts."""

    bus: list[BusAlert] = field(default_factory=list)
    rail: list[RailAlert] = field(default_factory=list)
    text: str = ""

    @classmethod
    def from_xml(cls, data: str | bytes) -> "Alerts":
        """Parse an ``<Alerts>`` document; raise ValueError if it is not one."""
        try:
            root = ET.fromstring(data)
        except ET.ParseError as exc:
            raise ValueError(f"malformed alerts document: {exc}") from exc
        root_name = _local_name(root.tag)
        if root_name != "Alerts":
            raise ValueError(f"expected element type <Alerts> but have <{root_name}>")
        alerts = cls(text=_chardata(root))
        for child in root:
            name = _local_name(child.tag)
            if name == "BUS":
                alerts.bus.append(BusAlert._from_element(child))
            elif name == "RAIL":
                alerts.rail.append(RailAlert._from_element(child))
        return alerts

    def to_dict(self) -> dict:
        data: dict = {}
        if self.text:
            data["text"] = self.text
        data["Bus"] = [alert.to_dict() for alert in self.bus]
        data["Rail"] = [alert.to_dict() for alert in self.rail]
        return data


@dataclass
class Schedule:
    """A live arrival estimate for one train at one station."""

    destination: str = ""
    event_time: str = ""
    next_arrival: str = ""
    next_station: str = ""
    train_id: str = ""
    waiting_seconds: str = ""
    waiting_time: str = ""

    def to_dict(self) -> dict:
        return {
            "destination": self.destination,
            "event_time": self.event_time,
            "next_arrival": self.next_arrival,
            "next_station": self.next_station,
            "train_id": self.train_id,
            "waiting_seconds": self.waiting_seconds,
            "waiting_time": self.waiting_time,
        }


@dataclass
class Station:
    """A station as seen by a train: its name, line and direction."""

    direction: str = ""
    line: str = ""
    name: str = ""

    def to_dict(self) -> dict:
        return {"direction": self.direction, "line": self.line, "name": self.name}


@dataclass
class StationLocation:
    """A station with its geohash location and distance from a point."""

    station_name: str = ""
    location: str = ""
    distance: float = 0.0

    def to_dict(self) -> dict:
        return {
            "station_name": self.station_name,
            "location": self.location,
            "distance": self.distance,
        }