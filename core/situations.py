"""
core.situations
Emergent crises (situations) and disaster emergency mode.

Situations are plain data; their spawn / resolve rules live in SITUATION_RULES so a
snapshot never carries callables.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Dict, List, Mapping, Tuple

from .effects import apply_delta, bounded
from .events import EventCondition, evaluate_condition
from .state import Delta, EmergencyMode, GameState, Situation

EXPLOSION_PROGRESS = 100.0

EMERGENCY_CATEGORIES = ("rescue", "medical", "infrastructure", "relief")
EMERGENCY_KINDS = ("earthquake", "flood", "pandemic", "drought")


@dataclass(frozen=True)
class SituationRule:
    id: str
    name: str
    spawn: EventCondition
    resolve: EventCondition
    severity: float
    progress: float
    weekly_effects: Delta = field(default_factory=dict)

    def make(self) -> Situation:
        return Situation(
            id=self.id,
            name=self.name,
            severity=self.severity,
            progress=self.progress,
            weekly_effects=dict(self.weekly_effects),
        )


SITUATION_RULES: Dict[str, SituationRule] = {
    "HYPERINFLATION": SituationRule(
        id="HYPERINFLATION",
        name="Hyperinflation",
        spawn=EventCondition(custom_check=lambda s: s.stats.inflation > 0.15),
        resolve=EventCondition(custom_check=lambda s: s.stats.inflation < 0.05),
        severity=60.0,
        progress=10.0,
        weekly_effects={"stability": -2.0, "popularity": -1.0, "gdp": -1.0, "inflation": 0.01},
    ),
    "INSURGENCY": SituationRule(
        id="INSURGENCY",
        name="Insurgency",
        spawn=EventCondition(custom_check=lambda s: s.resources.stability < 30),
        resolve=EventCondition(custom_check=lambda s: s.resources.stability > 50),
        severity=50.0,
        progress=5.0,
        weekly_effects={"stability": -3.0, "popularity": -1.0},
    ),
    "PANDEMIC": SituationRule(
        id="PANDEMIC",
        name="Health and jobs crisis",
        spawn=EventCondition(custom_check=lambda s: s.stats.unemployment > 0.20),
        resolve=EventCondition(custom_check=lambda s: s.stats.unemployment < 0.10),
        severity=40.0,
        progress=5.0,
        weekly_effects={"gdp": -0.5, "stability": -1.0},
    ),
}


def maybe_spawn_situations(state: GameState) -> Tuple[GameState, List[str]]:
    """Start any situation whose threshold is crossed. Never duplicates a tracked id."""
    tracked = {s.id for s in state.events.situations}
    new: List[Situation] = []
    messages: List[str] = []
    for rule in SITUATION_RULES.values():
        if rule.id in tracked:
            continue
        if evaluate_condition(rule.spawn, state):
            new.append(rule.make())
            messages.append(f"New crisis: {rule.name}.")
    if not new:
        return state, messages
    events = replace(state.events, situations=[*state.events.situations, *new])
    return replace(state, events=events), messages


def tick_situations(state: GameState) -> Tuple[GameState, List[str]]:
    """Advance every situation one step.

    progress += severity * 0.1 and severity += 1 (both capped at 100); a situation whose
    resolve rule holds is dropped, one that reaches 100 progress is flagged exploded once
    and stays tracked. Periodic effects of the remaining situations then apply.
    """
    messages: List[str] = []
    kept: List[Situation] = []
    for sit in state.events.situations:
        rule = SITUATION_RULES.get(sit.id)
        if rule is not None and evaluate_condition(rule.resolve, state):
            messages.append(f"Situation {sit.name} resolved.")
            continue

        progress = bounded("progress", sit.progress + sit.severity * 0.1)
        severity = bounded("severity", sit.severity + 1.0)
        exploded = sit.exploded
        if progress >= EXPLOSION_PROGRESS and not exploded:
            exploded = True
            messages.append(f"Situation {sit.name} exploded into a full crisis.")
        kept.append(replace(sit, progress=progress, severity=severity, exploded=exploded))

    out = replace(state, events=replace(state.events, situations=kept))
    for sit in kept:
        out = apply_delta(out, sit.weekly_effects)
    return out, messages


# -------------------------
# Emergency mode
# -------------------------


def enter_emergency(state: GameState, kind: str, severity: float = 75.0, turns: int = 3) -> GameState:
    if state.events.emergency.active:
        return state
    emergency = EmergencyMode(active=True, kind=kind, severity=bounded("severity", severity), turns_remaining=int(turns))
    return replace(
        state,
        events=replace(state.events, emergency=emergency),
        time=replace(state.time, is_playing=False),
    )


def emergency_effectiveness(allocation: Mapping[str, float]) -> float:
    """100 for a perfectly even split; 100 - 5 * stddev around 25, clamped to 0..100."""
    values = [float(allocation.get(k, 0.0)) for k in EMERGENCY_CATEGORIES]
    mean = 25.0
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return max(0.0, min(100.0, 100.0 - math.sqrt(variance) * 5.0))


@dataclass(frozen=True)
class EmergencyOutcome:
    effectiveness: float
    popularity_change: float
    stability_change: float
    budget_cost: float


def emergency_outcome(severity: float, allocation: Mapping[str, float]) -> EmergencyOutcome:
    eff = emergency_effectiveness(allocation)
    return EmergencyOutcome(
        effectiveness=eff,
        popularity_change=-(severity / 5.0) + (eff / 100.0) * 15.0,
        stability_change=-(severity / 10.0) + (eff / 100.0) * 5.0,
        budget_cost=(severity / 100.0) * 100.0 + 50.0,
    )


def resolve_emergency(state: GameState, allocation: Mapping[str, float]) -> Tuple[GameState, EmergencyOutcome]:
    """Close the emergency with a four-way allocation and resume time."""
    severity = float(state.events.emergency.severity or 50.0)
    outcome = emergency_outcome(severity, allocation)
    out = apply_delta(
        state,
        {
            "popularity": outcome.popularity_change,
            "stability": outcome.stability_change,
            "budget": -outcome.budget_cost,
        },
    )
    out = replace(
        out,
        events=replace(out.events, emergency=EmergencyMode()),
        time=replace(out.time, is_playing=True),
    )
    return out, outcome
