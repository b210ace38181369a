from __future__ import annotations

from dataclasses import replace

import pytest

from core.situations import (
    EMERGENCY_CATEGORIES,
    emergency_effectiveness,
    emergency_outcome,
    enter_emergency,
    maybe_spawn_situations,
    resolve_emergency,
    tick_situations,
)
from core.state import EventsState, GameState, Resources, Situation, Stats, TimeState


def _state(**stats) -> GameState:
    return GameState(
        started=True,
        resources=Resources(budget=500.0, stability=60.0),
        stats=Stats(gdp=500.0, popularity=50.0, **stats),
        time=TimeState(is_playing=True, speed=2),
    )


def test_spawn_is_idempotent() -> None:
    s = _state(inflation=0.2)
    s, msgs = maybe_spawn_situations(s)
    assert [x.id for x in s.events.situations] == ["HYPERINFLATION"]
    assert msgs

    again, msgs = maybe_spawn_situations(s)
    assert again is s
    assert msgs == []


def test_tick_grows_and_applies_effects() -> None:
    s, _ = maybe_spawn_situations(_state(inflation=0.2))
    out, _ = tick_situations(s)
    sit = out.events.situations[0]
    assert sit.progress == pytest.approx(10.0 + 60.0 * 0.1)
    assert sit.severity == pytest.approx(61.0)
    assert out.resources.stability == pytest.approx(58.0)
    assert out.stats.inflation == pytest.approx(0.21)


def test_situation_explodes_once_and_stays() -> None:
    hot = Situation(id="HYPERINFLATION", name="Hyperinflation", severity=60.0, progress=95.0)
    s = replace(_state(inflation=0.2), events=EventsState(situations=[hot]))

    s, msgs = tick_situations(s)
    sit = s.events.situations[0]
    assert sit.exploded and sit.progress == pytest.approx(100.0)
    assert any("exploded" in m for m in msgs)

    s, msgs = tick_situations(s)
    assert s.events.situations[0].exploded
    assert not any("exploded" in m for m in msgs)
    assert s.events.situations[0].severity <= 100.0


def test_situation_resolves_when_condition_clears() -> None:
    s, _ = maybe_spawn_situations(_state(inflation=0.2))
    s = replace(s, stats=replace(s.stats, inflation=0.03))
    out, msgs = tick_situations(s)
    assert out.events.situations == []
    assert any("resolved" in m for m in msgs)


def test_effectiveness() -> None:
    even = {k: 25.0 for k in EMERGENCY_CATEGORIES}
    assert emergency_effectiveness(even) == pytest.approx(100.0)
    lopsided = dict(zip(EMERGENCY_CATEGORIES, (100.0, 0.0, 0.0, 0.0)))
    assert emergency_effectiveness(lopsided) == pytest.approx(0.0)
    assert emergency_effectiveness({}) == pytest.approx(0.0)


def test_emergency_outcome() -> None:
    o = emergency_outcome(50.0, {k: 25.0 for k in EMERGENCY_CATEGORIES})
    assert o.popularity_change == pytest.approx(-10.0 + 15.0)
    assert o.stability_change == pytest.approx(-5.0 + 5.0)
    assert o.budget_cost == pytest.approx(100.0)


def test_enter_and_resolve_emergency() -> None:
    s = enter_emergency(_state(), "flood", severity=50.0)
    assert s.events.emergency.active
    assert s.events.emergency.kind == "flood"
    assert not s.time.is_playing
    assert enter_emergency(s, "earthquake") is s

    out, outcome = resolve_emergency(s, {k: 25.0 for k in EMERGENCY_CATEGORIES})
    assert not out.events.emergency.active
    assert out.time.is_playing
    assert out.resources.budget == pytest.approx(500.0 - outcome.budget_cost)
