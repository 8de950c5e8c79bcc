"""Country/state lookup maps used for client address formatting."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any, Optional


def build_name_map(records: Iterable[Mapping[str, Any]]) -> Mapping[int, str]:
    """Map ``id`` to ``name``; later duplicates win."""

    mapping = {int(record["id"]): str(record["name"]) for record in records}
    return MappingProxyType(mapping)


class LocationLookup:
    """Read-only id→name lookup for countries and states."""

    def __init__(
        self,
        countries: Iterable[Mapping[str, Any]],
        states: Iterable[Mapping[str, Any]],
    ) -> None:
        self.countries = build_name_map(countries)
        self.states = build_name_map(states)

    def country_name(self, country_id: Optional[int]) -> str:
        if country_id is None:
            return ""
        return self.countries.get(country_id, "")

    def state_name(self, state_id: Optional[int]) -> str:
        if state_id is None:
            return ""
        return self.states.get(state_id, "")

    def format_region(self, country_id: Optional[int], state_id: Optional[int]) -> str:
        if country_id is None:
            return ""
        if state_id is not None:
            return f"{self.state_name(state_id)}, {self.country_name(country_id)}"
        return self.country_name(country_id)
