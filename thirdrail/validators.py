"""Coercion of free-form MARTA names to canonical directions, lines and stations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EntityType(str, Enum):
    """The kinds of named MARTA entity."""

    DIRECTIONS = "Directions"
    LINES = "Lines"
    STATIONS = "Stations"


class CoercionError(LookupError):
    """Raised when a value cannot be coerced to a known entity."""


@dataclass(frozen=True)
class AliasStore:
    """A canonical name and the aliases that stand for it."""

    name: str
    aliases: tuple[str, ...] = ()

    def matches(self, value: str) -> bool:
        return self.name.upper() == value.upper() or value in self.aliases


@dataclass(frozen=True)
class MartaEntities:
    """All known directions, lines and stations."""

    directions: tuple[AliasStore, ...] = ()
    lines: tuple[AliasStore, ...] = ()
    stations: tuple[AliasStore, ...] = ()

    def of_type(self, entity_type: EntityType) -> tuple[AliasStore, ...]:
        return {
            EntityType.DIRECTIONS: self.directions,
            EntityType.LINES: self.lines,
            EntityType.STATIONS: self.stations,
        }[entity_type]


def _store(name: str, *aliases: str) -> AliasStore:
    return AliasStore(name=name, aliases=aliases)


ALIASES = MartaEntities(
    directions=(
        _store("North", "N", "NORTH", "NORTHBOUND"),
        _store("South", "S", "SOUTH", "SOUTHBOUND"),
        _store("East", "E", "EAST", "EASTBOUND"),
        _store("West", "W", "WEST", "WESTBOUND"),
    ),
    lines=(
        _store("Gold", "G", "GOLD", "Gold Line"),
        _store("Red", "R", "RED", "Red Line"),
        _store("Blue", "B", "BLUE", "Blue Line"),
        _store("Green", "GREEN", "Green Line"),
    ),
    stations=(
        _store("Doraville Station", "Doraville", "DORAVILLE"),
        _store("Chamblee Station", "Chamblee", "CHAMBLEE"),
        _store("Brookhaven Station", "Brookhaven", "Brookhaven/Oglethorpe", "BROOKHAVEN"),
        _store("Lenox Station", "Lenox", "LENOX"),
        _store("North Springs Station", "North Springs", "NORTH SPRINGS"),
        _store("Sandy Springs Station", "Sandy Springs", "SANDY SPRINGS"),
        _store("Dunwoody Station", "Dunwoody", "DUNWOODY"),
        _store("Medical Center Station", "Medical Center", "MEDICAL CENTER"),
        _store("Buckhead Station", "Buckhead", "BUCKHEAD STATION"),
        _store("Lindbergh Station", "Lindbergh", "Lindbergh Center", "LINDBERGH"),
        _store("Arts Center Station", "Arts Center", "ARTS CENTER"),
        _store("Midtown Station", "Midtown", "MIDTOWN"),
        _store("North Avenue Station", "North Avenue", "NORTH AVENUE", "NORTH AVE STATION"),
        _store("Civic Center Station", "Civic Center", "CIVIC CENTER"),
        _store("Peachtree Center Station", "Peachtree Center", "PEACHTREE CENTER"),
        _store("Five Points Station", "Five Points", "FIVE POINTS"),
        _store("Garnett Station", "Garnett", "GARNETT"),
        _store("West End Station", "West End", "WEST END"),
        _store("Oakland City Station", "Oakland City", "OAKLAND CITY"),
        _store("Lakewood Station", "Lakewood/Ft. McPherson", "Fort McPherson", "LAKEWOOD"),
        _store("East Point Station", "East Point", "EAST POINT"),
        _store("College Park Station", "College Park", "COLLEGE PARK"),
        _store("Airport Station", "Airport", "AIRPORT"),
        _store("Hamilton E Holmes Station", "Hamilton E Holmes", "HAMILTON E HOLMES", "HE Holmes"),
        _store("Bankhead Station", "Bankhead", "BANKHEAD"),
        _store("West Lake Station", "West Lake", "WEST LAKE"),
        _store("Ashby Station", "Ashby", "ASHBY"),
        _store("Vine City Station", "Vine Station", "VINE CITY"),
        _store(
            "Omni Dome Station",
            "Omni Dome",
            "CNN",
            "State Farm Arena",
            "Mercedes Benz Stadium",
            "GWCC",
            "OMNI DOME STATION",
        ),
        _store("Georgia State Station", "Georgia State", "GEORGIA STATE"),
        _store("King Memorial Station", "King Memorial", "KING MEMORIAL"),
        _store("Inman Park Station", "Inman Park", "Inman Park/Reynoldstown", "INMNAN PARK"),
        _store("Edgewood Candler Park Station", "Edgewood Candler Park", "EDGEWOOD CANDLER PARK"),
        _store("East Lake Station", "East Lake", "EAST LAKE"),
        _store("Decatur Station", "Decatur", "DECATUR"),
        _store("Avondale Station", "Avondale", "AVONDALE"),
        _store("Kensington Station", "Kensington", "KENSINGTON"),
        _store("Indian Creek Station", "Indian Creek", "INDIAN CREEK"),
    ),
)


def _entity_type(value: EntityType | str) -> EntityType:
    try:
        return EntityType(value)
    except ValueError:
        raise CoercionError(f"Unrecognized entity type: {value}") from None


@dataclass(frozen=True)
class MartaEntitiesValidator:
    """Maps names and aliases onto canonical entity names."""

    entities: MartaEntities = ALIASES

    def coerce(self, entity_type: EntityType | str, value: str) -> str:
        """Return the canonical name for ``value``; raise CoercionError if unknown."""
        kind = _entity_type(entity_type)
        for store in self.entities.of_type(kind):
            if store.matches(value):
                return store.name
        raise CoercionError(f"No {kind.value} found for {value}")

    def get_entities(self, entity_type: EntityType | str) -> list[str]:
        """Return every canonical name of the given type, in order."""
        kind = _entity_type(entity_type)
        return [store.name for store in self.entities.of_type(kind)]