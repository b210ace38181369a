from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from conftest import ScriptedRandom
from core.social import (
    adjust_group_approval,
    calculate_social_tension,
    censor_media,
    check_for_protests,
    create_protest,
    find_group,
    generate_interest_groups,
    hold_rally,
    launch_smear_campaign,
    protest_chance,
    register_modifiers,
    resolve_protest_action,
    tick_approval_modifiers,
    update_protests,
    weighted_popularity,
)
from core.state import ApprovalModifier, InterestGroup, MediaState

TODAY = date(2025, 3, 1)


def _group(approval: float, power: float = 100.0) -> InterestGroup:
    return InterestGroup(
        id="unions", group_type="Unions", name="Trade Unions",
        population_size=10.0, approval=approval, power=power,
    )


@pytest.mark.parametrize(
    "approval, expected",
    [(10, 0.8), (19.9, 0.8), (25, 0.4), (35, 0.1), (40, 0.0), (80, 0.0)],
)
def test_protest_chance_bands(approval: float, expected: float) -> None:
    assert protest_chance(_group(approval)) == pytest.approx(expected)


def test_protest_chance_scales_with_power() -> None:
    assert protest_chance(_group(10, power=50)) == pytest.approx(0.4)


def test_generate_interest_groups_by_leaning() -> None:
    left = {g.id: g for g in generate_interest_groups(100, "Left")}
    right = {g.id: g for g in generate_interest_groups(100, "Right")}
    assert len(left) == 6
    assert left["unions"].approval > right["unions"].approval
    assert right["business"].approval > left["business"].approval
    assert sum(g.population_size for g in left.values()) == pytest.approx(100.0)


def test_only_one_protest_per_group() -> None:
    groups = adjust_group_approval(generate_interest_groups(100, "Center"), "unions", -40)
    rng = ScriptedRandom([0.0, 0.9])

    protests = check_for_protests(groups, {}, TODAY, rng)
    assert list(protests) == ["unions"]
    p = protests["unions"]
    assert p.intensity == pytest.approx(90.0)
    assert p.participants == pytest.approx(25.0 * 90.0 / 200.0)
    assert len(p.demands) == 3
    assert p.economic_impact < 0 and p.stability_impact < 0

    again = check_for_protests(groups, protests, TODAY, ScriptedRandom([0.0]))
    assert again["unions"] is p
    assert len(again) == 1


def test_protest_fades_when_group_is_happy() -> None:
    groups = [_group(70)]
    p = replace(create_protest(_group(10), TODAY, ScriptedRandom()), intensity=20.0)
    assert update_protests({"unions": p}, groups, ScriptedRandom()) == {}


def test_protest_escalates_after_two_months() -> None:
    groups = [_group(20)]
    p = replace(create_protest(groups[0], TODAY, ScriptedRandom()), duration=2, intensity=80.0)
    out = update_protests({"unions": p}, groups, ScriptedRandom([0.1]))
    assert out["unions"].escalating
    assert out["unions"].intensity == pytest.approx(90.0)
    assert out["unions"].duration == 3


def test_suppress_and_concede_end_the_protest() -> None:
    g = _group(20)
    p = create_protest(g, TODAY, ScriptedRandom())

    res = resolve_protest_action(p, "suppress", g, 100.0, 100.0, ScriptedRandom())
    assert res.protest_ended
    assert res.human_rights_change == pytest.approx(-15.0)
    assert res.political_capital_cost == pytest.approx(30.0)

    res = resolve_protest_action(p, "concede", g, 100.0, 100.0, ScriptedRandom())
    assert res.protest_ended
    assert res.budget_cost == pytest.approx(p.intensity / 10.0)
    assert res.approval_change == pytest.approx(30.0)


def test_refusals_cost_nothing() -> None:
    g = _group(20)
    p = create_protest(g, TODAY, ScriptedRandom())

    broke = resolve_protest_action(p, "concede", g, 0.0, 100.0, ScriptedRandom())
    assert not broke.success and not broke.protest_ended
    assert broke.budget_cost == 0 and broke.political_capital_cost == 0

    no_pc = resolve_protest_action(p, "negotiate", g, 100.0, 5.0, ScriptedRandom())
    assert not no_pc.success
    assert no_pc.political_capital_cost == 0


def test_ignore_is_free_but_can_escalate() -> None:
    g = _group(20)
    p = create_protest(g, TODAY, ScriptedRandom())

    calm = resolve_protest_action(p, "ignore", g, 0.0, 0.0, ScriptedRandom([0.9]))
    assert calm.success and not calm.protest_ended and not calm.escalated
    assert calm.budget_cost == 0 and calm.political_capital_cost == 0

    worse = resolve_protest_action(p, "ignore", g, 0.0, 0.0, ScriptedRandom([0.1]))
    assert worse.escalated and not worse.protest_ended


def test_popularity_is_population_weighted() -> None:
    groups = [
        replace(_group(80), id="a", population_size=30.0),
        replace(_group(20), id="b", population_size=10.0),
    ]
    assert weighted_popularity(groups) == pytest.approx(65.0)
    assert weighted_popularity([]) == pytest.approx(50.0)


def test_social_tension() -> None:
    groups = [replace(_group(50), id=str(i)) for i in range(4)]
    assert calculate_social_tension(groups, {}) == pytest.approx(50.0)
    p = replace(create_protest(groups[0], TODAY, ScriptedRandom()), intensity=50.0)
    assert calculate_social_tension(groups, {"0": p}) == pytest.approx(60.5)


def test_timed_modifier_is_reversed_on_expiry() -> None:
    groups = generate_interest_groups(100, "Center")
    base = find_group(groups, "rural").approval
    groups, timed = register_modifiers(groups, [], [ApprovalModifier("rural", 10, duration=2)])
    assert find_group(groups, "rural").approval == pytest.approx(base + 10)

    groups, timed = tick_approval_modifiers(groups, timed)
    assert len(timed) == 1
    groups, timed = tick_approval_modifiers(groups, timed)
    assert timed == []
    assert find_group(groups, "rural").approval == pytest.approx(base)


@pytest.mark.parametrize("start, change", [(95.0, 15.0), (4.0, -10.0)])
def test_clamped_modifier_reverses_only_what_it_applied(start: float, change: float) -> None:
    groups = [replace(g, approval=start) if g.id == "business" else g for g in generate_interest_groups(100, "Center")]
    groups, timed = register_modifiers(groups, [], [ApprovalModifier("business", change, duration=1)])
    assert find_group(groups, "business").approval in (0.0, 100.0)

    groups, timed = tick_approval_modifiers(groups, timed)
    assert timed == []
    assert find_group(groups, "business").approval == pytest.approx(start)


def test_stacked_modifiers_share_the_clamped_change() -> None:
    groups = [replace(g, approval=90.0) if g.id == "business" else g for g in generate_interest_groups(100, "Center")]
    mods = [ApprovalModifier("business", 10, duration=1), ApprovalModifier("business", 10, duration=3)]
    groups, timed = register_modifiers(groups, [], mods)
    assert sum(t.change for t in timed) == pytest.approx(10.0)

    groups, timed = tick_approval_modifiers(groups, timed)
    assert find_group(groups, "business").approval == pytest.approx(95.0)
    for _ in range(2):
        groups, timed = tick_approval_modifiers(groups, timed)
    assert find_group(groups, "business").approval == pytest.approx(90.0)


def test_censorship_trades_freedom_for_support() -> None:
    m = censor_media(MediaState())
    assert m.censorship == pytest.approx(25.0)
    assert m.freedom == pytest.approx(50.0)
    assert m.support == pytest.approx(60.0)


def test_rally_cost_and_cap() -> None:
    assert hold_rally(0.2).cost == 0
    r = hold_rally(1.0)
    assert r.cost == pytest.approx(1.0)
    assert r.approval_change == pytest.approx(5.0)
    assert hold_rally(4.0).approval_change == pytest.approx(10.0)


def test_smear_campaign() -> None:
    assert launch_smear_campaign(0.5, 100.0, ScriptedRandom()).cost == 0
    assert launch_smear_campaign(10.0, 10.0, ScriptedRandom()).cost == 0

    backfire = launch_smear_campaign(10.0, 100.0, ScriptedRandom([0.1]))
    assert backfire.backfired and backfire.popularity_change < 0

    hit = launch_smear_campaign(10.0, 100.0, ScriptedRandom([0.9]))
    assert not hit.backfired
    assert hit.opposition_damage == pytest.approx(10.0)
