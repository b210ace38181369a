from __future__ import annotations

from dataclasses import replace

import pytest

from conftest import ScriptedRandom
from core.geopolitics import (
    apply_debt_trap,
    apply_diplomacy_action,
    can_debt_trap,
    decay_influence,
    foreign_direct_investment,
    initial_relation,
    relation_status,
)
from core.projects import find_project, pause_project, process_grand_projects, start_project
from core.state import Country, GameState, NationalProject, Policies, Resources

RAIL = NationalProject(id="HIGH_SPEED_RAIL", name="High-Speed Rail", cost_per_turn=15.0)
SPACE = NationalProject(id="SPACE_AGENCY", name="Space Agency", cost_per_turn=20.0)


def _state(budget: float = 100.0) -> GameState:
    return GameState(started=True, resources=Resources(budget=budget), policies=Policies())


def test_build_pays_and_progresses() -> None:
    s = start_project(_state(), RAIL)
    assert find_project(s.policies.active_projects, RAIL.id).status == "BUILDING"
    s, msgs = process_grand_projects(s)
    p = find_project(s.policies.active_projects, RAIL.id)
    assert p.progress == pytest.approx(5.0)
    assert s.resources.budget == pytest.approx(85.0)
    assert msgs == []


def test_shortfall_slows_progress_and_never_overdraws() -> None:
    s = start_project(_state(budget=10.0), RAIL)
    s, _ = process_grand_projects(s)
    assert find_project(s.policies.active_projects, RAIL.id).progress == pytest.approx(3.0)
    assert s.resources.budget == pytest.approx(0.0)


def test_payoff_applies_once() -> None:
    s = start_project(_state(), SPACE)
    s = replace(
        s,
        policies=replace(s.policies, active_projects=[replace(s.policies.active_projects[0], progress=95.0)]),
    )
    s, msgs = process_grand_projects(s)
    p = find_project(s.policies.active_projects, SPACE.id)
    assert p.status == "COMPLETED" and p.payoff_applied
    assert s.resources.research_points == pytest.approx(10.0)
    assert len(msgs) == 1

    budget = s.resources.budget
    s, msgs = process_grand_projects(s)
    assert s.resources.research_points == pytest.approx(10.0)
    assert s.resources.budget == pytest.approx(budget)
    assert msgs == []


def test_pause_and_resume() -> None:
    s = start_project(_state(), RAIL)
    paused = pause_project(s, RAIL.id)
    assert find_project(paused.policies.active_projects, RAIL.id).status == "PAUSED"
    assert pause_project(paused, RAIL.id) is paused

    after, _ = process_grand_projects(paused)
    assert after.resources.budget == pytest.approx(100.0)

    resumed = start_project(paused, RAIL)
    assert find_project(resumed.policies.active_projects, RAIL.id).status == "BUILDING"
    assert start_project(resumed, RAIL) is resumed


def _country(**kw) -> Country:
    return Country(id="nbr", name="Neighbourland", **kw)


def test_diplomacy_actions() -> None:
    c = _country(relation=98.0)
    assert apply_diplomacy_action(c, "IMPROVE").relation == pytest.approx(100.0)
    assert apply_diplomacy_action(c, "HARM").relation == pytest.approx(88.0)
    assert apply_diplomacy_action(c, "TRADE_TREATY").trade_treaty
    assert not apply_diplomacy_action(apply_diplomacy_action(c, "DEFENSE_TREATY"), "DEFENSE_TREATY").defense_treaty
    assert apply_diplomacy_action(c, "ANNEX") is c


def test_initial_relation() -> None:
    me = Country(id="x", name="X", region="Europe", ideology="Centrist")
    # uniform(-10, 10) draws 0 at the midpoint
    assert initial_relation("Europe", "Centrist", me, ScriptedRandom([0.5])) == pytest.approx(85.0)
    rival = replace(me, region="Asia", ideology="Authoritarian")
    assert initial_relation("Europe", "Centrist", rival, ScriptedRandom([0.5])) == pytest.approx(30.0)


def test_investment_and_debt_trap() -> None:
    countries = [_country()]
    countries = foreign_direct_investment(countries, "nbr", 100.0, debt_share=0.3)
    assert countries[0].player_influence == pytest.approx(1.0)
    assert not can_debt_trap(countries[0])
    assert apply_debt_trap(countries, "nbr") == countries

    countries = foreign_direct_investment(countries, "nbr", 100.0, debt_share=0.3)
    assert can_debt_trap(countries[0])
    countries = apply_debt_trap(countries, "nbr")
    assert countries[0].is_satellite
    assert countries[0].player_influence == pytest.approx(100.0)
    assert not can_debt_trap(countries[0])


def test_influence_decays_to_zero() -> None:
    countries = decay_influence([_country(player_influence=0.3)])
    assert countries[0].player_influence == pytest.approx(0.0)


@pytest.mark.parametrize("relation, label", [(95, "Ally"), (60, "Partner"), (45, "Neutral"), (25, "Rival"), (5, "Enemy")])
def test_relation_status(relation: float, label: str) -> None:
    assert relation_status(relation) == label
