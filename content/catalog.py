"""content.catalog

Id-indexed view over the content tables.

The engine never reads content.data directly; it asks a ContentCatalog for a country,
event, storyline, bill template, project or minister candidate by id. Tests build small
catalogs of their own through build_catalog().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.events import GameEvent, Storyline
from core.state import Bill, Minister, NationalProject

from . import data
from .schemas import (
    CountryTemplate,
    bill_from_mapping,
    country_from_mapping,
    event_from_mapping,
    minister_from_mapping,
    project_from_mapping,
    storyline_from_mapping,
)


@dataclass(frozen=True)
class ContentCatalog:
    countries: Dict[str, CountryTemplate] = field(default_factory=dict)
    events: Dict[str, GameEvent] = field(default_factory=dict)
    storylines: Dict[str, Storyline] = field(default_factory=dict)
    bills: Dict[str, Bill] = field(default_factory=dict)
    projects: Dict[str, NationalProject] = field(default_factory=dict)
    ministers: Dict[str, Minister] = field(default_factory=dict)

    def country(self, country_id: str) -> Optional[CountryTemplate]:
        return self.countries.get(country_id)

    def event(self, event_id: str) -> Optional[GameEvent]:
        return self.events.get(event_id)

    def storyline(self, storyline_id: str) -> Optional[Storyline]:
        return self.storylines.get(storyline_id)

    def bill(self, bill_id: str) -> Optional[Bill]:
        return self.bills.get(bill_id)

    def project(self, project_id: str) -> Optional[NationalProject]:
        return self.projects.get(project_id)

    def minister(self, minister_id: str) -> Optional[Minister]:
        return self.ministers.get(minister_id)

    def event_list(self) -> List[GameEvent]:
        return list(self.events.values())

    def storyline_of(self, event_id: str) -> Optional[str]:
        ev = self.events.get(event_id)
        return ev.storyline_id if ev is not None else None


def _index(items: Iterable[Any], what: str) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for it in items:
        if it.id in out:
            raise ValueError(f"duplicate {what} id {it.id!r}")
        out[it.id] = it
    return out


def validate_catalog(cat: ContentCatalog) -> None:
    """Cross-table references: delayed targets and storyline stage events must exist."""
    for ev in cat.events.values():
        for ch in ev.choices:
            d = ch.consequences.delayed
            if d is not None and d.event_id not in cat.events:
                raise ValueError(f"event {ev.id}: delayed target {d.event_id!r} is unknown")
        if ev.storyline_id is not None and ev.storyline_id not in cat.storylines:
            raise ValueError(f"event {ev.id}: unknown storyline {ev.storyline_id!r}")
    for sl in cat.storylines.values():
        for st in sl.stages:
            if st.event_id not in cat.events:
                raise ValueError(f"storyline {sl.id}: stage {st.stage} event {st.event_id!r} is unknown")


def build_catalog(
    *,
    countries: Iterable[Mapping[str, Any]] = (),
    events: Iterable[Mapping[str, Any]] = (),
    storylines: Iterable[Mapping[str, Any]] = (),
    bills: Iterable[Mapping[str, Any]] = (),
    projects: Iterable[Mapping[str, Any]] = (),
    ministers: Iterable[Mapping[str, Any]] = (),
) -> ContentCatalog:
    cat = ContentCatalog(
        countries=_index((country_from_mapping(c) for c in countries), "country"),
        events=_index((event_from_mapping(e) for e in events), "event"),
        storylines=_index((storyline_from_mapping(s) for s in storylines), "storyline"),
        bills=_index((bill_from_mapping(b) for b in bills), "bill"),
        projects=_index((project_from_mapping(p) for p in projects), "project"),
        ministers=_index((minister_from_mapping(m) for m in ministers), "minister"),
    )
    validate_catalog(cat)
    return cat


@lru_cache(maxsize=1)
def default_catalog() -> ContentCatalog:
    return build_catalog(
        countries=data.COUNTRIES,
        events=[*data.EVENTS, *data.REBELLION_EVENTS],
        storylines=data.STORYLINES,
        bills=data.BILLS,
        projects=data.PROJECTS,
        ministers=data.MINISTER_CANDIDATES,
    )
