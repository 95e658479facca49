import pytest

from thirdrail.validators import (
    AliasStore,
    CoercionError,
    EntityType,
    MartaEntities,
    MartaEntitiesValidator,
)


@pytest.fixture
def validator():
    return MartaEntitiesValidator()


def test_direction_alias_is_coerced(validator):
    assert validator.coerce(EntityType.DIRECTIONS, "N") == "North"


def test_line_name_matches_case_insensitively(validator):
    assert validator.coerce(EntityType.LINES, "red") == "Red"


def test_station_name_matches_itself(validator):
    assert validator.coerce(EntityType.STATIONS, "Medical Center Station") == "Medical Center Station"


def test_string_entity_type_is_accepted(validator):
    assert validator.coerce("Stations", "DORAVILLE") == "Doraville Station"


def test_aliases_are_case_sensitive(validator):
    with pytest.raises(CoercionError):
        validator.coerce(EntityType.STATIONS, "doraville")


def test_unknown_value_raises(validator):
    with pytest.raises(CoercionError, match="No Stations found for Nowhere"):
        validator.coerce(EntityType.STATIONS, "Nowhere")


def test_unknown_entity_type_raises(validator):
    with pytest.raises(CoercionError, match="Unrecognized entity type: Buses"):
        validator.coerce("Buses", "Red")
    with pytest.raises(CoercionError):
        validator.get_entities("Buses")


def test_get_entities_lists_lines(validator):
    assert validator.get_entities(EntityType.LINES) == ["Gold", "Red", "Blue", "Green"]


def test_there_are_38_stations(validator):
    assert len(validator.get_entities(EntityType.STATIONS)) == 38


@pytest.mark.parametrize("kind", list(EntityType))
def test_every_name_and_alias_coerces_to_its_store(validator, kind):
    for store in validator.entities.of_type(kind):
        assert validator.coerce(kind, store.name) == store.name
        for alias in store.aliases:
            assert validator.coerce(kind, alias) == store.name


def test_custom_entities():
    entities = MartaEntities(lines=(AliasStore("Silver", ("S",)),))
    custom = MartaEntitiesValidator(entities)
    assert custom.coerce(EntityType.LINES, "S") == "Silver"
    assert custom.get_entities(EntityType.STATIONS) == []