from __future__ import annotations

import pytest

from agents.facturi import LocationLookup, build_name_map


def test_build_name_map_maps_ids_to_names(countries) -> None:
    mapping = build_name_map(countries)

    assert mapping[54] == "Canada"
    assert mapping[175] == "Romania"
    assert len(mapping) == 3


def test_build_name_map_is_read_only(countries) -> None:
    mapping = build_name_map(countries)

    with pytest.raises(TypeError):
        mapping[1] = "Somewhere"  # type: ignore[index]


def test_build_name_map_accepts_string_ids() -> None:
    assert build_name_map([{"id": "7", "name": "Seven"}])[7] == "Seven"


@pytest.mark.parametrize(
    "country_id,state_id,expected",
    [
        (175, None, "Romania"),
        (249, 60, "New York, United States"),
        (None, 60, ""),
        (None, None, ""),
        (999, None, ""),
        (54, 999, ", Canada"),
        (999, 1, "Alberta, "),
    ],
)
def test_format_region(countries, states, country_id, state_id, expected) -> None:
    lookup = LocationLookup(countries, states)

    assert lookup.format_region(country_id, state_id) == expected


def test_unresolved_names_are_empty(countries, states) -> None:
    lookup = LocationLookup(countries, states)

    assert lookup.country_name(12345) == ""
    assert lookup.state_name(None) == ""
