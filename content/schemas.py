"""content.schemas

Contracts for static content tables:
- countries (CountryTemplate)
- events / choices / consequences / conditions (core.events types)
- storylines (stages + endings)
- bill templates, national projects and minister candidates

Content is authored as plain mappings (see content.data) and normalised here into the
frozen core dataclasses. Validation raises ValueError at catalog-build time: malformed
static data fails loudly, gameplay never does.

Key strategy:
- snake_case is canonical; camelCase aliases (politicalCapital, turnsDelay...) are accepted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

from core.effects import DELTA_KEYS
from core.events import EventCondition, GameEvent, StoryEnding, StoryStage, Storyline
from core.state import (
    ApprovalModifier,
    Bill,
    Country,
    Delta,
    DelayedEventSpec,
    EventChoice,
    EventConsequence,
    Minister,
    NationalProject,
)

ALLOWED_CATEGORIES = {
    "general",
    "economy",
    "politics",
    "social",
    "scandal",
    "disaster",
    "diplomacy",
    "storyline",
}
ALLOWED_BILL_TYPES = {"policy_change", "budget", "reform", "crisis_response", "constitutional"}
ALLOWED_POLICY_AREAS = {"economy", "social", "security", "education", "health", "environment", "foreign", "infrastructure"}
ALLOWED_URGENCY = {"low", "medium", "high", "crisis"}
ALLOWED_REGIONS = {"America", "Europe", "Asia", "Africa", "Oceania", "Other"}

KEY_ALIASES = {
    "politicalCapital": "political_capital",
    "humanRights": "human_rights",
    "researchPoints": "research_points",
    "socialTension": "social_tension",
    "taxRate": "tax_rate",
    "publicSpending": "public_spending",
}

_CONDITION_FIELDS = {
    "gdpMin": "gdp_min", "gdpMax": "gdp_max",
    "budgetMin": "budget_min", "budgetMax": "budget_max",
    "unemploymentMin": "unemployment_min", "unemploymentMax": "unemployment_max",
    "inflationMin": "inflation_min", "inflationMax": "inflation_max",
    "popularityMin": "popularity_min", "popularityMax": "popularity_max",
    "stabilityMin": "stability_min", "stabilityMax": "stability_max",
    "socialTensionMin": "social_tension_min",
}


def _as_float(x: Any, default: float = 0.0) -> float:
    try:
        return float(x)
    except (TypeError, ValueError):
        return float(default)


def _get(obj: Mapping[str, Any], key: str, alias: str, default: Any = None) -> Any:
    if key in obj:
        return obj[key]
    return obj.get(alias, default)


def normalize_delta(d: Optional[Mapping[str, Any]]) -> Delta:
    out: Dict[str, float] = {}
    for k, v in dict(d or {}).items():
        if v is None:
            continue
        out[KEY_ALIASES.get(str(k), str(k))] = _as_float(v, 0.0)
    return out


def normalize_strings(items: Any) -> List[str]:
    if items is None:
        return []
    if isinstance(items, str):
        return [items.strip()] if items.strip() else []
    return [str(x).strip() for x in items if str(x or "").strip()]


def _callable_or_none(x: Any, what: str) -> Optional[Callable]:
    if x is None:
        return None
    if not callable(x):
        raise ValueError(f"{what} must be callable")
    return x


# =========================
# Countries
# =========================


@dataclass(frozen=True)
class CountryTemplate:
    """Starting data for a playable country (stats are the country's own, not the player's)."""

    id: str
    name: str
    region: str
    ideology: str
    gdp: float
    population: float
    inflation: float
    unemployment: float
    stability: float

    def to_country(self) -> Country:
        return Country(id=self.id, name=self.name, region=self.region, ideology=self.ideology)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "region": self.region,
            "ideology": self.ideology,
            "gdp": self.gdp,
            "population": self.population,
            "inflation": self.inflation,
            "unemployment": self.unemployment,
            "stability": self.stability,
        }


def country_from_mapping(obj: Mapping[str, Any]) -> CountryTemplate:
    stats = dict(obj.get("stats") or obj)
    c = CountryTemplate(
        id=str(obj.get("id") or "").strip(),
        name=str(obj.get("name") or "").strip(),
        region=str(obj.get("region") or "Other").strip(),
        ideology=str(obj.get("ideology") or "Centrist").strip(),
        gdp=_as_float(stats.get("gdp"), 0.0),
        population=_as_float(stats.get("population"), 0.0),
        inflation=_as_float(stats.get("inflation"), 0.02),
        unemployment=_as_float(stats.get("unemployment"), 0.05),
        stability=_as_float(stats.get("stability"), 50.0),
    )
    validate_country(c)
    return c


def validate_country(c: CountryTemplate) -> None:
    if not c.id:
        raise ValueError("country.id is required")
    if len(c.name) < 2:
        raise ValueError(f"country {c.id}: name too short")
    if c.region not in ALLOWED_REGIONS:
        raise ValueError(f"country {c.id}: unknown region {c.region!r}")
    if c.gdp <= 0:
        raise ValueError(f"country {c.id}: gdp must be > 0")
    if c.population <= 0:
        raise ValueError(f"country {c.id}: population must be > 0")
    if not 0.0 <= c.unemployment <= 1.0:
        raise ValueError(f"country {c.id}: unemployment must be a 0..1 fraction")
    if not 0.0 <= c.stability <= 100.0:
        raise ValueError(f"country {c.id}: stability must be 0..100")


# =========================
# Events
# =========================


def condition_from_mapping(obj: Optional[Mapping[str, Any]]) -> Optional[EventCondition]:
    if obj is None:
        return None
    if isinstance(obj, EventCondition):
        return obj
    kwargs: Dict[str, Any] = {}
    for camel, snake in _CONDITION_FIELDS.items():
        v = _get(obj, snake, camel)
        if v is not None:
            kwargs[snake] = _as_float(v)

    trait = _get(obj, "has_minister_with_trait", "hasMinisterWithTrait")
    if trait is not None:
        kwargs["has_minister_with_trait"] = str(trait)
    count = _get(obj, "minister_count", "ministerCount")
    if count is not None:
        kwargs["minister_count"] = int(count)
    protest = _get(obj, "any_protest_active", "anyProtestActive")
    if protest is not None:
        kwargs["any_protest_active"] = bool(protest)
    months = _get(obj, "months_since_game_start", "monthsSinceGameStart")
    if months is not None:
        kwargs["months_since_game_start"] = int(months)

    return EventCondition(
        story_vars=dict(_get(obj, "story_vars", "storyVars") or {}),
        event_history_includes=normalize_strings(_get(obj, "event_history_includes", "eventHistoryIncludes")),
        event_history_excludes=normalize_strings(_get(obj, "event_history_excludes", "eventHistoryExcludes")),
        custom_check=_callable_or_none(_get(obj, "custom_check", "customCheck"), "condition.custom_check"),
        **kwargs,
    )


def consequence_from_mapping(obj: Optional[Mapping[str, Any]]) -> EventConsequence:
    obj = dict(obj or {})
    mods: List[ApprovalModifier] = []
    for m in _get(obj, "approval_modifiers", "approvalModifiers") or []:
        duration = m.get("duration")
        mods.append(
            ApprovalModifier(
                group_id=str(_get(m, "group_id", "groupId") or ""),
                change=_as_float(m.get("change", m.get("modifier")), 0.0),
                duration=None if duration is None else int(duration),
                reason=str(m.get("reason") or ""),
            )
        )

    delayed = None
    raw_delayed = obj.get("delayed")
    if raw_delayed:
        delayed = DelayedEventSpec(
            event_id=str(_get(raw_delayed, "event_id", "eventId") or ""),
            turns_delay=int(_get(raw_delayed, "turns_delay", "turnsDelay", 1)),
        )

    dismiss = _get(obj, "dismiss_minister_id", "dismissMinisterId")
    return EventConsequence(
        immediate=normalize_delta(obj.get("immediate")),
        story_vars=dict(_get(obj, "story_vars", "storyVars") or {}),
        approval_modifiers=mods,
        delayed=delayed,
        dismiss_minister_id=None if dismiss is None else str(dismiss),
        faction_stances={str(k): str(v) for k, v in (_get(obj, "faction_stances", "factionStanceChanges") or {}).items()},
        hidden=str(obj.get("hidden") or ""),
    )


def choice_from_mapping(obj: Mapping[str, Any]) -> EventChoice:
    return EventChoice(
        label=str(obj.get("label") or "").strip(),
        description=str(obj.get("description") or "").strip(),
        consequences=consequence_from_mapping(obj.get("consequences") or obj.get("effects")),
        requirements=normalize_delta(obj.get("requirements")),
    )


def event_from_mapping(obj: Mapping[str, Any]) -> GameEvent:
    stage = _get(obj, "story_stage", "storyStage")
    ev = GameEvent(
        id=str(obj.get("id") or "").strip(),
        title=str(obj.get("title") or "").strip(),
        description=str(obj.get("description") or "").strip(),
        category=str(obj.get("category") or "general").strip().lower(),
        choices=[choice_from_mapping(c) for c in obj.get("choices") or []],
        weight=_as_float(obj.get("weight"), 1.0),
        chain_id=_get(obj, "chain_id", "chainId"),
        storyline_id=_get(obj, "storyline_id", "storylineId"),
        story_stage=None if stage is None else int(stage),
        condition=condition_from_mapping(obj.get("condition")),
        trigger=_callable_or_none(obj.get("trigger"), "event.trigger"),
    )
    validate_event(ev)
    return ev


def validate_event(e: GameEvent) -> None:
    if not e.id:
        raise ValueError("event.id is required")
    if len(e.title) < 3:
        raise ValueError(f"event {e.id}: title too short")
    if e.category not in ALLOWED_CATEGORIES:
        raise ValueError(f"event {e.id}: invalid category {e.category!r}")
    if not e.choices:
        raise ValueError(f"event {e.id}: needs at least one choice")
    if e.weight <= 0:
        raise ValueError(f"event {e.id}: weight must be > 0")
    for i, ch in enumerate(e.choices):
        if len(ch.label) < 2:
            raise ValueError(f"event {e.id}: choice {i} label too short")
        unknown = [k for k in (*ch.consequences.immediate, *ch.requirements) if k not in DELTA_KEYS]
        if unknown:
            raise ValueError(f"event {e.id}: choice {i} has unknown keys {unknown}")
        if ch.consequences.delayed is not None and ch.consequences.delayed.turns_delay < 1:
            raise ValueError(f"event {e.id}: choice {i} delayed turns must be >= 1")
    if (e.storyline_id is None) != (e.story_stage is None):
        raise ValueError(f"event {e.id}: storyline_id and story_stage go together")


# =========================
# Storylines
# =========================


def storyline_from_mapping(obj: Mapping[str, Any]) -> Storyline:
    stages = [
        StoryStage(
            stage=int(s.get("stage")),
            title=str(s.get("title") or "").strip(),
            event_id=str(_get(s, "event_id", "eventId") or "").strip(),
            auto_advance=bool(_get(s, "auto_advance", "autoAdvance", False)),
            advance_condition=condition_from_mapping(_get(s, "advance_condition", "advanceCondition")),
        )
        for s in obj.get("stages") or []
    ]
    endings = [
        StoryEnding(
            id=str(e.get("id") or "").strip(),
            name=str(e.get("name") or "").strip(),
            description=str(e.get("description") or "").strip(),
            required_vars=dict(_get(e, "required_vars", "requiredVars") or {}),
            effects=consequence_from_mapping(e.get("effects")),
            is_game_ending=bool(_get(e, "is_game_ending", "isGameEnding", False)),
        )
        for e in _get(obj, "endings", "possibleEndings") or []
    ]
    sl = Storyline(
        id=str(obj.get("id") or "").strip(),
        name=str(obj.get("name") or "").strip(),
        description=str(obj.get("description") or "").strip(),
        stages=sorted(stages, key=lambda s: s.stage),
        endings=endings,
        required_conditions=condition_from_mapping(_get(obj, "required_conditions", "requiredConditions")),
    )
    validate_storyline(sl)
    return sl


def validate_storyline(s: Storyline) -> None:
    if not s.id:
        raise ValueError("storyline.id is required")
    if not s.stages:
        raise ValueError(f"storyline {s.id}: needs stages")
    numbers = [st.stage for st in s.stages]
    if numbers != list(range(1, len(numbers) + 1)):
        raise ValueError(f"storyline {s.id}: stages must be numbered 1..n")
    for st in s.stages:
        if not st.event_id:
            raise ValueError(f"storyline {s.id}: stage {st.stage} has no event")
    ids = [e.id for e in s.endings]
    if len(set(ids)) != len(ids):
        raise ValueError(f"storyline {s.id}: ending ids must be unique")


# =========================
# Bills / projects
# =========================


def bill_from_mapping(obj: Mapping[str, Any]) -> Bill:
    b = Bill(
        id=str(obj.get("id") or "").strip(),
        title=str(obj.get("title") or "").strip(),
        description=str(obj.get("description") or "").strip(),
        bill_type=str(_get(obj, "bill_type", "type", "policy_change")).strip(),
        policy_area=str(_get(obj, "policy_area", "policyArea", "economy")).strip(),
        effects=normalize_delta(obj.get("effects")),
        required_majority=_as_float(_get(obj, "required_majority", "requiredMajority", 50), 50.0),
        urgency=str(obj.get("urgency") or "medium").strip(),
    )
    validate_bill(b)
    return b


def validate_bill(b: Bill) -> None:
    if not b.id:
        raise ValueError("bill.id is required")
    if len(b.title) < 4:
        raise ValueError(f"bill {b.id}: title too short")
    if b.bill_type not in ALLOWED_BILL_TYPES:
        raise ValueError(f"bill {b.id}: invalid type {b.bill_type!r}")
    if b.policy_area not in ALLOWED_POLICY_AREAS:
        raise ValueError(f"bill {b.id}: invalid policy area {b.policy_area!r}")
    if b.urgency not in ALLOWED_URGENCY:
        raise ValueError(f"bill {b.id}: invalid urgency {b.urgency!r}")
    if not 0.0 < b.required_majority <= 100.0:
        raise ValueError(f"bill {b.id}: required_majority must be in (0, 100]")
    unknown = [k for k in b.effects if k not in DELTA_KEYS]
    if unknown:
        raise ValueError(f"bill {b.id}: unknown effect keys {unknown}")


def project_from_mapping(obj: Mapping[str, Any]) -> NationalProject:
    p = NationalProject(
        id=str(obj.get("id") or "").strip(),
        name=str(obj.get("name") or "").strip(),
        status="PLANNED",
        cost_per_turn=_as_float(_get(obj, "cost_per_turn", "costPerTurn"), 0.0),
    )
    if not p.id or not p.name:
        raise ValueError("project needs id and name")
    if p.cost_per_turn < 0:
        raise ValueError(f"project {p.id}: cost_per_turn must be >= 0")
    return p



def minister_from_mapping(obj: Mapping[str, Any]) -> Minister:
    m = Minister(
        id=str(obj.get("id") or "").strip(),
        name=str(obj.get("name") or "").strip(),
        ministry=str(obj.get("ministry") or "").strip(),
        traits=normalize_strings(obj.get("traits")),
        loyalty=_as_float(obj.get("loyalty"), 50.0),
        popularity=_as_float(obj.get("popularity"), 50.0),
        competence=_as_float(obj.get("competence"), 50.0),
        corruption=_as_float(obj.get("corruption"), 0.0),
        ambition=_as_float(obj.get("ambition"), 0.0),
    )
    if not m.id or not m.name or not m.ministry:
        raise ValueError("minister needs id, name and ministry")
    for attr in ("loyalty", "popularity", "competence", "corruption", "ambition"):
        if not 0.0 <= getattr(m, attr) <= 100.0:
            raise ValueError(f"minister {m.id}: {attr} must be 0..100")
    return m
