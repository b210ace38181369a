"""
core.events
Narrative event engine.

Responsibilities:
- declarative EventCondition + evaluate_condition (with a custom predicate escape hatch)
- eligibility: non-chain events fire once, chain events repeat; condition AND legacy trigger
- cumulative-weight selection
- consequence application (deltas, story vars, timed approval modifiers, delayed registrations)
- delayed countdowns (first ready wins)
- ministerial scandal synthesis
- storyline stage progression and endings

Content (the event / storyline tables) lives in content/, this module only interprets it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Tuple

from .effects import apply_delta, current_value
from .parliament import calculate_government_support
from .rng import RandomSource
from .social import register_modifiers
from .state import (
    ActiveStoryline,
    DelayedEvent,
    EventChoice,
    EventConsequence,
    GameState,
    PendingEvent,
    months_elapsed,
)

Predicate = Callable[[GameState], bool]

SCANDAL_TRAITS = ("Corrupt", "Incompetent")


@dataclass(frozen=True)
class EventCondition:
    gdp_min: Optional[float] = None
    gdp_max: Optional[float] = None
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    unemployment_min: Optional[float] = None
    unemployment_max: Optional[float] = None
    inflation_min: Optional[float] = None
    inflation_max: Optional[float] = None
    popularity_min: Optional[float] = None
    popularity_max: Optional[float] = None
    stability_min: Optional[float] = None
    stability_max: Optional[float] = None
    has_minister_with_trait: Optional[str] = None
    minister_count: Optional[int] = None
    any_protest_active: Optional[bool] = None
    social_tension_min: Optional[float] = None
    story_vars: Dict[str, Any] = field(default_factory=dict)
    event_history_includes: List[str] = field(default_factory=list)
    event_history_excludes: List[str] = field(default_factory=list)
    months_since_game_start: Optional[int] = None
    custom_check: Optional[Predicate] = None


@dataclass(frozen=True)
class GameEvent:
    id: str
    title: str
    description: str
    category: str = "general"
    choices: List[EventChoice] = field(default_factory=list)
    weight: float = 1.0
    chain_id: Optional[str] = None
    storyline_id: Optional[str] = None
    story_stage: Optional[int] = None
    condition: Optional[EventCondition] = None
    trigger: Optional[Predicate] = None

    def to_pending(self) -> PendingEvent:
        return PendingEvent(
            id=self.id,
            title=self.title,
            description=self.description,
            category=self.category,
            choices=list(self.choices),
            storyline_id=self.storyline_id,
            story_stage=self.story_stage,
        )


@dataclass(frozen=True)
class StoryStage:
    stage: int
    title: str
    event_id: str
    auto_advance: bool = False
    advance_condition: Optional[EventCondition] = None


@dataclass(frozen=True)
class StoryEnding:
    id: str
    name: str
    description: str
    required_vars: Dict[str, Any] = field(default_factory=dict)
    effects: EventConsequence = field(default_factory=EventConsequence)
    is_game_ending: bool = False


@dataclass(frozen=True)
class Storyline:
    id: str
    name: str
    description: str
    stages: List[StoryStage] = field(default_factory=list)
    endings: List[StoryEnding] = field(default_factory=list)
    required_conditions: Optional[EventCondition] = None

    def stage(self, number: int) -> Optional[StoryStage]:
        for s in self.stages:
            if s.stage == number:
                return s
        return None


# -------------------------
# Conditions
# -------------------------


def _outside(value: float, lo: Optional[float], hi: Optional[float]) -> bool:
    if lo is not None and value < lo:
        return True
    if hi is not None and value > hi:
        return True
    return False


def evaluate_condition(condition: EventCondition, state: GameState) -> bool:
    """True iff every populated check passes."""
    c = condition
    s = state
    if _outside(s.stats.gdp, c.gdp_min, c.gdp_max):
        return False
    if _outside(s.resources.budget, c.budget_min, c.budget_max):
        return False
    if _outside(s.stats.unemployment, c.unemployment_min, c.unemployment_max):
        return False
    if _outside(s.stats.inflation, c.inflation_min, c.inflation_max):
        return False
    if _outside(s.stats.popularity, c.popularity_min, c.popularity_max):
        return False
    if _outside(s.resources.stability, c.stability_min, c.stability_max):
        return False

    ministers = s.government.ministers
    if c.has_minister_with_trait is not None:
        if not any(c.has_minister_with_trait in m.traits for m in ministers):
            return False
    if c.minister_count is not None and len(ministers) < c.minister_count:
        return False

    if c.any_protest_active is not None and bool(s.social.active_protests) != c.any_protest_active:
        return False
    if c.social_tension_min is not None and s.social.social_tension < c.social_tension_min:
        return False

    for key, value in c.story_vars.items():
        if s.events.story_vars.get(key) != value:
            return False
    history = s.events.event_history
    if any(eid not in history for eid in c.event_history_includes):
        return False
    if any(eid in history for eid in c.event_history_excludes):
        return False

    if c.months_since_game_start is not None:
        if months_elapsed(s.time.start_date, s.time.date) < c.months_since_game_start:
            return False

    if c.custom_check is not None and not c.custom_check(s):
        return False
    return True


def is_eligible(event: GameEvent, state: GameState) -> bool:
    if event.chain_id is None and event.id in state.events.event_history:
        return False
    if event.condition is not None and not evaluate_condition(event.condition, state):
        return False
    if event.trigger is not None and not event.trigger(state):
        return False
    return True


def get_eligible_events(events: List[GameEvent], state: GameState) -> List[GameEvent]:
    """Events that may be drawn at random. Storyline events only fire through their storyline."""
    return [e for e in events if e.storyline_id is None and is_eligible(e, state)]


def select_weighted_event(events: List[GameEvent], rng: RandomSource) -> Optional[GameEvent]:
    # weight <= 0 takes an event out of the draw
    weighted = [e for e in events if float(e.weight) > 0]
    if not weighted:
        return None
    total = sum(float(e.weight) for e in weighted)
    roll = rng.random() * total
    for e in weighted:
        roll -= float(e.weight)
        if roll <= 0:
            return e
    return weighted[-1]


# -------------------------
# Consequences
# -------------------------


def meets_requirements(choice: EventChoice, state: GameState) -> bool:
    for key, needed in choice.requirements.items():
        try:
            if current_value(state, key) < float(needed):
                return False
        except KeyError:
            return False
    return True


def apply_consequences(consequence: EventConsequence, state: GameState) -> GameState:
    """Fold one consequence bundle into state (pure)."""
    out = apply_delta(state, consequence.immediate)

    events = out.events
    if consequence.story_vars:
        events = replace(events, story_vars={**events.story_vars, **consequence.story_vars})
    if consequence.delayed is not None:
        reg = DelayedEvent(event_id=consequence.delayed.event_id, triggers_in=int(consequence.delayed.turns_delay))
        events = replace(events, delayed_events=[*events.delayed_events, reg])
    if events is not out.events:
        out = replace(out, events=events)

    if consequence.approval_modifiers:
        groups, timed = register_modifiers(
            out.social.interest_groups, out.social.approval_modifiers, consequence.approval_modifiers
        )
        out = replace(out, social=replace(out.social, interest_groups=groups, approval_modifiers=timed))

    if consequence.dismiss_minister_id:
        ministers = [m for m in out.government.ministers if m.id != consequence.dismiss_minister_id]
        out = replace(out, government=replace(out.government, ministers=ministers))

    if consequence.faction_stances:
        p = out.government.parliament
        factions = [
            replace(f, stance=consequence.faction_stances[f.id]) if f.id in consequence.faction_stances else f
            for f in p.factions
        ]
        parliament = replace(
            p, factions=factions, government_support=calculate_government_support(factions, p.parties, p.total_seats)
        )
        out = replace(out, government=replace(out.government, parliament=parliament))
    return out


# -------------------------
# Delayed events / scandals
# -------------------------


def tick_delayed_events(delayed: List[DelayedEvent]) -> Tuple[Optional[str], List[DelayedEvent]]:
    """Count every registration down by one; the first one at <= 0 is popped."""
    ticked = [replace(d, triggers_in=d.triggers_in - 1) for d in delayed]
    for i, d in enumerate(ticked):
        if d.triggers_in <= 0:
            return d.event_id, ticked[:i] + ticked[i + 1:]
    return None, ticked


def generate_ministerial_scandal(state: GameState) -> Optional[PendingEvent]:
    minister = None
    for m in state.government.ministers:
        if any(t in m.traits for t in SCANDAL_TRAITS):
            minister = m
            break
    if minister is None:
        return None

    corrupt = "Corrupt" in minister.traits
    if corrupt:
        title = "Corruption Scandal"
        desc = f"{minister.name}, your {minister.ministry} minister, has been linked to a scheme diverting public funds."
    else:
        title = "Embarrassing Statement"
        desc = f"{minister.name}, your {minister.ministry} minister, made disastrous public remarks that hurt the government."

    return PendingEvent(
        id=f"scandal_{minister.id}_{state.time.date.isoformat()}",
        title=title,
        description=desc,
        category="scandal",
        choices=[
            EventChoice(
                label="Fire immediately",
                description="Cut your losses",
                consequences=EventConsequence(
                    immediate={"popularity": 5.0 if corrupt else 3.0},
                    story_vars={f"fired_{minister.id}": True},
                    dismiss_minister_id=minister.id,
                ),
            ),
            EventChoice(
                label="Defend the minister",
                description="Show loyalty, at a price",
                consequences=EventConsequence(
                    immediate={"popularity": -10.0 if corrupt else -5.0, "political_capital": -15.0},
                    story_vars={f"defended_{minister.id}": True},
                ),
            ),
        ],
    )


def select_contextual_event(
    events: List[GameEvent],
    state: GameState,
    rng: RandomSource,
    scandal_chance: float = 0.1,
) -> Optional[PendingEvent]:
    """Scandal injection first, then the weighted draw over eligible events."""
    if rng.random() < scandal_chance:
        scandal = generate_ministerial_scandal(state)
        if scandal is not None:
            return scandal
    picked = select_weighted_event(get_eligible_events(events, state), rng)
    return picked.to_pending() if picked is not None else None


# -------------------------
# Storylines
# -------------------------


def progress_storyline(active: ActiveStoryline, storyline: Storyline, state: GameState) -> Tuple[bool, int]:
    """(should_progress, next_stage) for a storyline whose current stage is resolved."""
    stage = storyline.stage(active.current_stage)
    if stage is None:
        return False, active.current_stage
    if stage.auto_advance:
        return True, active.current_stage + 1
    if stage.advance_condition is not None and evaluate_condition(stage.advance_condition, state):
        return True, active.current_stage + 1
    return False, active.current_stage


def _var_matches(actual: Any, required: Any) -> bool:
    if isinstance(required, dict):
        if actual is None or isinstance(actual, bool) or not isinstance(actual, (int, float)):
            return False
        lo = required.get("min")
        hi = required.get("max")
        if lo is not None and actual < lo:
            return False
        if hi is not None and actual > hi:
            return False
        return True
    return actual == required


def ending_matches(ending: StoryEnding, story_vars: Dict[str, Any]) -> bool:
    return all(_var_matches(story_vars.get(k), v) for k, v in ending.required_vars.items())


def select_ending(storyline: Storyline, story_vars: Dict[str, Any]) -> Optional[StoryEnding]:
    for ending in storyline.endings:
        if ending_matches(ending, story_vars):
            return ending
    return None
