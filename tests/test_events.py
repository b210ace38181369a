from __future__ import annotations

import random
from collections import Counter
from dataclasses import replace
from datetime import date

import pytest

from conftest import ScriptedRandom
from core.events import (
    EventCondition,
    GameEvent,
    apply_consequences,
    evaluate_condition,
    generate_ministerial_scandal,
    get_eligible_events,
    is_eligible,
    meets_requirements,
    progress_storyline,
    select_contextual_event,
    select_ending,
    select_weighted_event,
    tick_delayed_events,
)
from core.social import find_group, generate_interest_groups
from core.state import (
    ActiveStoryline,
    ApprovalModifier,
    DelayedEvent,
    DelayedEventSpec,
    EventChoice,
    EventConsequence,
    EventsState,
    GameState,
    Government,
    Minister,
    Resources,
    SocialState,
    Stats,
    TimeState,
)

START = date(2025, 1, 1)


def _state(**kw) -> GameState:
    base = GameState(
        started=True,
        resources=Resources(budget=100.0, political_capital=40.0, stability=50.0),
        stats=Stats(gdp=500.0, popularity=30.0, unemployment=0.08, inflation=0.05),
        social=SocialState(interest_groups=generate_interest_groups(50, "Center")),
        time=TimeState(date=date(2025, 4, 10), start_date=START),
    )
    return replace(base, **kw)


def _event(eid: str, weight: float = 1.0, **kw) -> GameEvent:
    return GameEvent(id=eid, title=eid.title(), description="", choices=[EventChoice(label="ok")], weight=weight, **kw)


def test_condition_ranges() -> None:
    s = _state()
    assert evaluate_condition(EventCondition(), s)
    assert evaluate_condition(EventCondition(popularity_max=40, gdp_min=100), s)
    assert not evaluate_condition(EventCondition(popularity_min=40), s)
    assert not evaluate_condition(EventCondition(budget_max=50), s)
    assert evaluate_condition(EventCondition(unemployment_min=0.05, inflation_max=0.06), s)


def test_condition_history_vars_and_time() -> None:
    s = _state(events=EventsState(event_history=["a"], story_vars={"coverup": True}))
    assert evaluate_condition(EventCondition(event_history_includes=["a"], story_vars={"coverup": True}), s)
    assert not evaluate_condition(EventCondition(event_history_excludes=["a"]), s)
    assert not evaluate_condition(EventCondition(story_vars={"coverup": False}), s)
    assert evaluate_condition(EventCondition(months_since_game_start=3), s)
    assert not evaluate_condition(EventCondition(months_since_game_start=4), s)
    assert not evaluate_condition(EventCondition(custom_check=lambda st: st.stats.gdp > 1000), s)


def test_condition_cabinet_and_protests() -> None:
    corrupt = Minister(id="m", name="M", ministry="Economy", traits=["Corrupt"])
    s = _state(government=Government(ministers=[corrupt]))
    assert evaluate_condition(EventCondition(has_minister_with_trait="Corrupt", minister_count=1), s)
    assert not evaluate_condition(EventCondition(minister_count=2), s)
    assert not evaluate_condition(EventCondition(any_protest_active=True), s)
    assert evaluate_condition(EventCondition(any_protest_active=False), s)


def test_eligibility_once_vs_chain() -> None:
    s = _state(events=EventsState(event_history=["once", "chain"]))
    assert not is_eligible(_event("once"), s)
    assert is_eligible(_event("chain", chain_id="energy"), s)


def test_legacy_trigger_and_condition_both_apply() -> None:
    s = _state()
    ev = _event("x", condition=EventCondition(popularity_max=40), trigger=lambda st: st.resources.budget < 0)
    assert not is_eligible(ev, s)
    assert is_eligible(ev, replace(s, resources=replace(s.resources, budget=-5.0)))


def test_storyline_events_are_never_drawn_at_random() -> None:
    events = [_event("free"), _event("stage", storyline_id="sl", story_stage=1)]
    assert [e.id for e in get_eligible_events(events, _state())] == ["free"]


def test_weighted_selection_frequencies() -> None:
    events = [_event("a", 1), _event("b", 1), _event("c", 2)]
    rng = random.Random(20250101)
    n = 20000
    counts = Counter(select_weighted_event(events, rng).id for _ in range(n))
    assert counts["a"] / n == pytest.approx(0.25, abs=0.02)
    assert counts["b"] / n == pytest.approx(0.25, abs=0.02)
    assert counts["c"] / n == pytest.approx(0.50, abs=0.02)
    assert select_weighted_event([], rng) is None


def test_zero_weight_is_never_drawn() -> None:
    events = [_event("muted", 0), _event("live", 1)]
    assert all(select_weighted_event(events, ScriptedRandom([r])).id == "live" for r in (0.0, 0.5, 0.99))
    assert select_weighted_event([_event("muted", 0)], ScriptedRandom([0.0])) is None


def test_delayed_first_ready_wins() -> None:
    ready, rest = tick_delayed_events([DelayedEvent("a", 2), DelayedEvent("b", 1), DelayedEvent("c", 1)])
    assert ready == "b"
    assert rest == [DelayedEvent("a", 1), DelayedEvent("c", 0)]

    ready, rest = tick_delayed_events([DelayedEvent("a", 3)])
    assert ready is None and rest == [DelayedEvent("a", 2)]


def test_apply_consequences() -> None:
    s = _state(events=EventsState(story_vars={"keep": 1}))
    rural = find_group(s.social.interest_groups, "rural").approval
    c = EventConsequence(
        immediate={"budget": -30.0, "popularity": 80.0},
        story_vars={"path": "diplomatic"},
        approval_modifiers=[ApprovalModifier("rural", 10.0, duration=3)],
        delayed=DelayedEventSpec("later", 2),
    )
    out = apply_consequences(c, s)
    assert out.resources.budget == pytest.approx(70.0)
    assert out.stats.popularity == pytest.approx(100.0)
    assert out.events.story_vars == {"keep": 1, "path": "diplomatic"}
    assert out.events.delayed_events == [DelayedEvent("later", 2)]
    assert find_group(out.social.interest_groups, "rural").approval == pytest.approx(rural + 10)
    assert len(out.social.approval_modifiers) == 1
    assert s.resources.budget == pytest.approx(100.0)


def test_requirements() -> None:
    s = _state()
    assert meets_requirements(EventChoice(label="a", requirements={"political_capital": 40}), s)
    assert not meets_requirements(EventChoice(label="b", requirements={"budget": 101}), s)
    assert not meets_requirements(EventChoice(label="c", requirements={"nonsense": 1}), s)


def test_ministerial_scandal() -> None:
    assert generate_ministerial_scandal(_state()) is None

    m = Minister(id="m_x", name="Tomas", ministry="Economy", traits=["Corrupt"])
    s = _state(government=Government(ministers=[m]))
    ev = generate_ministerial_scandal(s)
    assert ev is not None
    assert ev.title == "Corruption Scandal"
    assert ev.category == "scandal"
    fired = apply_consequences(ev.choices[0].consequences, s)
    assert fired.government.ministers == []


def test_contextual_draw_prefers_scandal() -> None:
    m = Minister(id="m_x", name="Pedro", ministry="Health", traits=["Incompetent"])
    s = _state(government=Government(ministers=[m]))
    events = [_event("plain")]

    scandal = select_contextual_event(events, s, ScriptedRandom([0.0]), scandal_chance=0.1)
    assert scandal is not None and scandal.category == "scandal"
    assert scandal.title == "Embarrassing Statement"

    plain = select_contextual_event(events, s, ScriptedRandom([0.5, 0.3]), scandal_chance=0.1)
    assert plain is not None and plain.id == "plain"


def test_progress_storyline(catalog) -> None:
    sl = catalog.storyline("rural_insurgency")
    s = _state()
    at_one = ActiveStoryline("rural_insurgency", 1, START, stage_fired=True, stage_resolved=True)
    assert progress_storyline(at_one, sl, s) == (True, 2)

    at_two = replace(at_one, current_stage=2)
    assert progress_storyline(at_two, sl, s) == (False, 2)
    ready = _state(events=EventsState(story_vars={"rebellion_stage_2_resolved": True}))
    assert progress_storyline(at_two, sl, ready) == (True, 3)


@pytest.mark.parametrize(
    "story_vars, ending",
    [
        ({"rebellion_path": "diplomatic", "insurgency_strength": 30, "government_brutality": 0}, "peace_negotiated"),
        ({"rebellion_path": "military", "insurgency_strength": 40, "government_brutality": 75}, "military_victory"),
        ({"rebellion_path": "neglect", "insurgency_strength": 75, "government_brutality": 65}, "civil_war"),
        ({"rebellion_path": "neglect", "insurgency_strength": 55, "government_brutality": 45}, "stalemate"),
    ],
)
def test_storyline_endings(catalog, story_vars, ending) -> None:
    picked = select_ending(catalog.storyline("rural_insurgency"), story_vars)
    assert picked is not None and picked.id == ending


def test_no_ending_without_variables(catalog) -> None:
    assert select_ending(catalog.storyline("rural_insurgency"), {}) is None
    assert catalog.storyline("rural_insurgency").endings[2].is_game_ending
