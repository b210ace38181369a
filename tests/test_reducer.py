from __future__ import annotations

from dataclasses import replace

import pytest

from conftest import TEST_COUNTRY, NEIGHBOUR, ScriptedRandom, small_catalog
from content.catalog import build_catalog
from core.parliament import calculate_government_support
from core.social import create_protest, find_group
from core.state import Campaign, GameState, initial_state
from engine import actions as A
from engine.config import EngineConfig
from engine.pipeline import advance_month, fire_event
from engine.reducer import reduce
from engine.snapshot import snapshot_to_dict

QUIET = EngineConfig(
    daily_event_chance=0.0,
    monthly_storyline_event_chance=0.0,
    parliamentary_event_chance=0.0,
    minister_event_scale=0.0,
)


def _reduce(state: GameState, action: object, catalog, rng=None, config: EngineConfig = QUIET) -> GameState:
    return reduce(state, action, catalog=catalog, config=config, rng=rng or ScriptedRandom())


def _with_budget(state: GameState, budget: float = 1000.0, pc: float = 100.0) -> GameState:
    return replace(state, resources=replace(state.resources, budget=budget, political_capital=pc))


# -------------------------
# Lifecycle / time
# -------------------------


def test_only_start_or_load_before_the_game(catalog) -> None:
    s = initial_state()
    assert _reduce(s, A.AdvanceDay(), catalog) is s
    assert _reduce(s, A.SetSpeed(2), catalog) is s
    assert _reduce(s, A.StartGame(country_id="atlantis"), catalog) is s


def test_start_game_sets_up_the_nation(started: GameState) -> None:
    s = started
    assert s.started
    assert s.player.country_id == "col" and s.player.party_name == "Unity"
    assert s.resources.budget == pytest.approx(340 * 0.25)
    assert s.policies.public_spending == pytest.approx(340 * 0.20)
    assert s.policies.tax_rate == pytest.approx(0.25)
    assert s.resources.stability == pytest.approx(50.0)
    assert s.resources.political_capital == pytest.approx(60.0)
    assert len(s.diplomacy.countries) == 11
    assert all(c.id != "col" for c in s.diplomacy.countries)
    assert len(s.social.interest_groups) == 6
    assert s.government.parliament.total_seats == 100
    assert not s.time.is_playing and s.time.speed == 1
    assert s.notifications and s.logs


def test_unknown_action_is_ignored(started, catalog) -> None:
    assert _reduce(started, object(), catalog) is started
    assert _reduce(started, A.DiplomacyAction("atlantis", "IMPROVE"), catalog) is started
    assert _reduce(started, A.StartProject("MOON_BASE"), catalog) is started


def test_speed_and_pause(started, catalog) -> None:
    fast = _reduce(started, A.SetSpeed(9), catalog)
    assert fast.time.speed == 3 and fast.time.is_playing
    paused = _reduce(fast, A.TogglePause(), catalog)
    assert not paused.time.is_playing
    assert not _reduce(fast, A.SetSpeed(0), catalog).time.is_playing


def test_policy_levers_are_clamped(started, catalog) -> None:
    s = _reduce(started, A.UpdatePolicy("tax_rate", 1.5), catalog)
    assert s.policies.tax_rate == pytest.approx(1.0)
    s = _reduce(s, A.UpdatePolicy("public_spending", -20), catalog)
    assert s.policies.public_spending == pytest.approx(0.0)
    assert _reduce(s, A.UpdatePolicy("interest_rate", 0.1), catalog) is s


def test_day_advances_and_active_event_freezes_time(started, catalog) -> None:
    nxt = _reduce(started, A.AdvanceDay(), catalog)
    assert (nxt.time.date - started.time.date).days == 1

    frozen = fire_event(nxt, catalog.event("tech_boom").to_pending())
    assert not frozen.time.is_playing
    assert _reduce(frozen, A.AdvanceDay(), catalog) is frozen
    assert _reduce(frozen, A.TogglePause(), catalog) is frozen


# -------------------------
# Events / notifications
# -------------------------


def test_resolve_event(started, catalog) -> None:
    s = _with_budget(fire_event(started, catalog.event("tech_boom").to_pending()))
    assert _reduce(s, A.ResolveEvent(7), catalog) is s

    out = _reduce(s, A.ResolveEvent(0), catalog)
    assert out.events.active_event is None
    assert out.events.event_history == ["tech_boom"]
    assert out.resources.budget == pytest.approx(980.0)
    assert out.resources.research_points == pytest.approx(15.0)
    assert not any(n.event_id == "tech_boom" for n in out.notifications)
    assert out.time.is_playing


def test_unaffordable_choice_is_rejected(started, catalog) -> None:
    s = fire_event(_with_budget(started, pc=5.0), catalog.event("opposition_motion").to_pending())
    assert _reduce(s, A.ResolveEvent(0), catalog) is s
    assert _reduce(s, A.ResolveEvent(1), catalog).events.active_event is None


def test_disaster_opens_emergency_mode(started, catalog) -> None:
    s = fire_event(started, catalog.event("earthquake_south").to_pending())
    out = _reduce(s, A.ResolveEvent(0), catalog)
    em = out.events.emergency
    assert em.active and em.kind == "earthquake"
    assert not out.time.is_playing

    even = {k: 25.0 for k in ("rescue", "medical", "infrastructure", "relief")}
    done = _reduce(out, A.ExitEmergencyMode(even), catalog)
    assert not done.events.emergency.active
    assert done.time.is_playing


def test_notifications(started, catalog) -> None:
    welcome = started.notifications[0]
    out = _reduce(started, A.OpenNotification(welcome.id), catalog)
    assert all(n.id != welcome.id for n in out.notifications)
    assert _reduce(out, A.DismissNotification("nope"), catalog) is out

    s = fire_event(started, catalog.event("tech_boom").to_pending())
    s = replace(s, time=replace(s.time, is_playing=True))
    note = next(n for n in s.notifications if n.event_id == "tech_boom")
    opened = _reduce(s, A.OpenNotification(note.id), catalog)
    assert not opened.time.is_playing
    assert next(n for n in opened.notifications if n.id == note.id).read


# -------------------------
# Diplomacy
# -------------------------


def test_diplomacy_costs_political_capital(started, catalog) -> None:
    target = started.diplomacy.countries[0]
    out = _reduce(started, A.DiplomacyAction(target.id, "TRADE_TREATY"), catalog)
    assert out.resources.political_capital == pytest.approx(started.resources.political_capital - 5)
    assert out.diplomacy.countries[0].trade_treaty

    broke = _with_budget(started, pc=2.0)
    assert _reduce(broke, A.DiplomacyAction(target.id, "IMPROVE"), catalog) is broke


def test_investment_leads_to_debt_trap(started, catalog) -> None:
    s = _with_budget(started, budget=1000.0)
    assert _reduce(s, A.ApplyDebtTrap("arg"), catalog) is s

    s = _reduce(s, A.ForeignInvestment("arg", 400.0), catalog)
    arg = next(c for c in s.diplomacy.countries if c.id == "arg")
    assert s.resources.budget == pytest.approx(600.0)
    assert arg.debt_held_by_player == pytest.approx(400.0 / 630.0)
    assert arg.player_influence == pytest.approx(4.0)

    s = _reduce(s, A.ApplyDebtTrap("arg"), catalog)
    assert next(c for c in s.diplomacy.countries if c.id == "arg").is_satellite
    assert _reduce(s, A.ForeignInvestment("arg", 5000.0), catalog) is s


# -------------------------
# Cabinet / parliament
# -------------------------


def test_appoint_and_fire_ministers(started, catalog) -> None:
    s = _reduce(started, A.AppointMinister("m_ortega"), catalog)
    assert [m.id for m in s.government.ministers] == ["m_ortega"]
    assert s.resources.political_capital == pytest.approx(started.resources.political_capital)
    assert s.government.ministers[0].appointment_date == s.time.date
    assert _reduce(s, A.AppointMinister("m_ortega"), catalog) is s

    # same ministry: the incumbent is displaced for half their loyalty
    swapped = _reduce(s, A.AppointMinister("m_varga"), catalog)
    assert [m.id for m in swapped.government.ministers] == ["m_varga"]
    assert swapped.resources.political_capital == pytest.approx(s.resources.political_capital - 30)

    fired = _reduce(s, A.FireMinister("m_ortega"), catalog)
    assert fired.government.ministers == []
    assert fired.resources.political_capital == pytest.approx(s.resources.political_capital - 28)


def test_bill_lifecycle(started, catalog) -> None:
    s = _reduce(started, A.ProposeBill("progressive_tax"), catalog)
    p = s.government.parliament
    assert p.active_bill is not None and p.active_bill.status == "in_vote"
    assert s.resources.political_capital == pytest.approx(started.resources.political_capital - 10)

    # one bill on the floor at a time
    assert _reduce(s, A.ProposeBill("pension_reform"), catalog) is s

    everyone = [replace(f, stance="supportive") for f in p.factions]
    s = replace(s, government=replace(s.government, parliament=replace(p, factions=everyone)))
    voted = _reduce(s, A.VoteOnBill(), catalog)
    vp = voted.government.parliament
    assert vp.active_bill is None
    assert vp.last_vote_result is not None and vp.last_vote_result.approved
    assert voted.resources.budget == pytest.approx(s.resources.budget + 50)

    cleared = _reduce(voted, A.ClearVoteResult(), catalog)
    assert cleared.government.parliament.last_vote_result is None


def test_rejected_bill_counts_as_failure(started, catalog) -> None:
    s = _reduce(started, A.ProposeBill("term_extension"), catalog)
    p = s.government.parliament
    nobody = [replace(f, stance="hostile") for f in p.factions]
    s = replace(s, government=replace(s.government, parliament=replace(p, factions=nobody)))
    voted = _reduce(s, A.VoteOnBill(), catalog)
    assert not voted.government.parliament.last_vote_result.approved
    assert voted.government.parliament.failed_bills_this_month == 1
    assert voted.resources.political_capital == pytest.approx(s.resources.political_capital)


def test_proposal_needs_political_capital(started, catalog) -> None:
    broke = _with_budget(started, pc=5.0)
    assert _reduce(broke, A.ProposeBill("progressive_tax"), catalog) is broke
    assert _reduce(started, A.ProposeBill("no_such_bill"), catalog) is started


def test_negotiation_with_too_little_capital_is_a_no_op(started, catalog) -> None:
    broke = _with_budget(started, pc=5.0)
    faction = broke.government.parliament.factions[0]
    assert _reduce(broke, A.NegotiateWithFaction(faction.id, 20.0), catalog) is broke


@pytest.mark.parametrize("offer", [0.0, -40.0])
def test_negotiation_offer_must_cost_capital(started, catalog, offer: float) -> None:
    faction = started.government.parliament.factions[0]
    out = _reduce(started, A.NegotiateWithFaction(faction.id, offer), catalog, rng=ScriptedRandom([0.1]))
    assert out is started


def test_successful_negotiation_promotes_stance(started, catalog) -> None:
    p = started.government.parliament
    hostile = replace(p.factions[-1], stance="hostile")
    factions = [*p.factions[:-1], hostile]
    s = replace(
        started,
        government=replace(
            started.government,
            parliament=replace(
                p,
                factions=factions,
                government_support=calculate_government_support(factions, p.parties, p.total_seats),
            ),
        ),
    )
    out = _reduce(s, A.NegotiateWithFaction(hostile.id, 20.0), catalog, rng=ScriptedRandom([0.1]))
    promoted = next(f for f in out.government.parliament.factions if f.id == hostile.id)
    assert promoted.stance == "neutral"
    assert out.resources.political_capital == pytest.approx(s.resources.political_capital - 20)
    assert out.government.parliament.government_support > s.government.parliament.government_support


def test_month_can_open_a_no_confidence_motion(started, catalog) -> None:
    p = started.government.parliament
    s = replace(
        _with_budget(started),
        government=replace(
            started.government,
            parliament=replace(p, factions=[replace(f, stance="hostile") for f in p.factions]),
        ),
        social=replace(
            started.social,
            interest_groups=[replace(g, approval=10.0) for g in started.social.interest_groups],
        ),
    )
    s = replace(s, resources=replace(s.resources, stability=60.0))

    out = advance_month(s, catalog=catalog, config=replace(QUIET, parliamentary_event_chance=1.0), rng=ScriptedRandom())
    assert out.events.active_event is not None
    assert out.events.active_event.id.startswith("no_confidence_")
    assert out.events.active_event.category == "parliament"
    assert not out.time.is_playing

    survived = _reduce(out, A.ResolveEvent(0), catalog)
    assert survived.events.active_event is None
    assert survived.resources.political_capital == pytest.approx(out.resources.political_capital - 50)

    # the same month with the chance at zero stays quiet
    calm = advance_month(s, catalog=catalog, config=QUIET, rng=ScriptedRandom())
    assert calm.events.active_event is None


# -------------------------
# Society
# -------------------------


def _with_protest(state: GameState, group_id: str = "unions") -> GameState:
    group = find_group(state.social.interest_groups, group_id)
    protest = create_protest(replace(group, approval=15.0), state.time.date, ScriptedRandom())
    return replace(state, social=replace(state.social, active_protests={group_id: protest}))


def test_suppress_protest(started, catalog) -> None:
    s = _with_budget(_with_protest(started))
    out = _reduce(s, A.ResolveProtest("unions", "suppress"), catalog)
    assert out.social.active_protests == {}
    assert out.social.human_rights == pytest.approx(s.social.human_rights - 15)
    assert out.resources.political_capital == pytest.approx(70.0)
    assert out.resources.stability == pytest.approx(s.resources.stability - 10)


def test_suppression_can_overdraw_political_capital(started, catalog) -> None:
    s = _with_budget(_with_protest(started), pc=10.0)
    out = _reduce(s, A.ResolveProtest("unions", "suppress"), catalog)
    assert out.social.active_protests == {}
    assert out.resources.political_capital == pytest.approx(-20.0)


def test_conceding_without_money_changes_nothing(started, catalog) -> None:
    s = _with_budget(_with_protest(started), budget=0.0)
    assert _reduce(s, A.ResolveProtest("unions", "concede"), catalog) is s
    assert _reduce(s, A.ResolveProtest("students", "suppress"), catalog) is s


def test_media_levers(started, catalog) -> None:
    censored = _reduce(started, A.CensorMedia(), catalog)
    assert censored.social.media_state.censorship > started.social.media_state.censorship

    broke = _with_budget(started, budget=0.5)
    assert _reduce(broke, A.FundPublicMedia(2.0), catalog) is broke
    funded = _reduce(_with_budget(started), A.FundPublicMedia(2.0), catalog)
    assert funded.resources.budget == pytest.approx(998.0)


def test_campaign_actions_need_a_campaign(started, catalog) -> None:
    s = _with_budget(started)
    assert _reduce(s, A.CampaignRally("unions", 1.0), catalog) is s
    assert _reduce(s, A.CampaignSmear(), catalog) is s

    s = replace(s, social=replace(s.social, campaign=Campaign(months_until_election=2, opposition_budget=5.0)))
    rallied = _reduce(s, A.CampaignRally("unions", 1.0), catalog)
    before = find_group(s.social.interest_groups, "unions").approval
    assert find_group(rallied.social.interest_groups, "unions").approval == pytest.approx(before + 5)
    assert rallied.social.campaign.rallies_held == 1
    assert rallied.resources.budget == pytest.approx(999.0)

    smeared = _reduce(s, A.CampaignSmear(), catalog, rng=ScriptedRandom([0.9]))
    assert smeared.social.campaign.opposition_budget == pytest.approx(4.5)
    assert smeared.resources.political_capital == pytest.approx(75.0)


# -------------------------
# Projects / emergency
# -------------------------


def test_projects(started, catalog) -> None:
    s = _reduce(started, A.StartProject("OLYMPICS"), catalog)
    assert s.policies.active_projects[0].status == "BUILDING"
    assert _reduce(s, A.StartProject("OLYMPICS"), catalog) is s
    paused = _reduce(s, A.PauseProject("OLYMPICS"), catalog)
    assert paused.policies.active_projects[0].status == "PAUSED"


def test_manual_emergency(started, catalog) -> None:
    assert _reduce(started, A.EnterEmergencyMode("meteor"), catalog) is started
    assert _reduce(started, A.ExitEmergencyMode({}), catalog) is started
    s = _reduce(started, A.EnterEmergencyMode("pandemic", severity=40.0), catalog)
    assert s.events.emergency.active and s.events.emergency.severity == pytest.approx(40.0)


# -------------------------
# Snapshots
# -------------------------


def test_load_snapshot(started, catalog) -> None:
    fresh = initial_state()
    assert _reduce(fresh, A.LoadSnapshot(started), catalog) is started
    loaded = _reduce(fresh, A.LoadSnapshot(snapshot_to_dict(started)), catalog)
    assert loaded == started
    assert _reduce(fresh, A.LoadSnapshot({"started": "yes"}), catalog) is fresh
    assert _reduce(fresh, A.LoadSnapshot("garbage"), catalog) is fresh


# -------------------------
# Storylines through the monthly pipeline
# -------------------------


def _stage(stage: int, eid: str, choice: dict) -> dict:
    return {
        "id": eid, "title": f"Chapter {stage}", "description": "", "category": "storyline",
        "storyline_id": "saga", "story_stage": stage, "choices": [choice],
    }


SAGA = {
    "id": "saga",
    "name": "Saga",
    "description": "Two chapters.",
    "stages": [
        {"stage": 1, "title": "One", "event_id": "saga_1", "auto_advance": True},
        {"stage": 2, "title": "Two", "event_id": "saga_2", "advance_condition": {"story_vars": {"saga_done": True}}},
    ],
    "endings": [
        {"id": "bad", "name": "Bad End", "description": "", "required_vars": {"path": "dark"}},
        {"id": "good", "name": "Good End", "description": "", "required_vars": {"path": "light"},
         "effects": {"immediate": {"budget": 100}}},
    ],
}


def _saga_catalog(delay_second: bool):
    first = {"label": "Begin", "consequences": {"story_vars": {"path": "light"}}}
    if delay_second:
        first["consequences"]["delayed"] = {"event_id": "saga_2", "turns_delay": 1}
    return small_catalog(
        events=[
            _stage(1, "saga_1", first),
            _stage(2, "saga_2", {"label": "Finish", "consequences": {"story_vars": {"saga_done": True}}}),
        ],
        storylines=[SAGA],
    )


def _month(state, cat, cfg):
    return advance_month(state, catalog=cat, config=cfg, rng=ScriptedRandom())


def test_storyline_runs_to_its_ending() -> None:
    cat = _saga_catalog(delay_second=False)
    cfg = EngineConfig(daily_event_chance=0.0, monthly_storyline_event_chance=1.0)
    s = _reduce(initial_state(), A.StartGame("tst"), cat, config=cfg)

    s = _month(s, cat, cfg)
    assert s.events.active_event is not None and s.events.active_event.id == "saga_1"
    s = _reduce(s, A.ResolveEvent(0), cat, config=cfg)
    assert s.events.active_storylines[0].stage_resolved

    s = _month(s, cat, cfg)
    assert s.events.active_event.id == "saga_2"
    assert s.events.active_storylines[0].current_stage == 2
    s = _reduce(s, A.ResolveEvent(0), cat, config=cfg)

    budget = s.resources.budget
    s = _month(s, cat, cfg)
    assert s.events.active_storylines == []
    assert s.events.completed_storylines == ["saga"]
    assert any("Good End" in line for line in s.logs)
    assert s.resources.budget > budget + 50

    # completed storylines never restart
    s = _month(s, cat, cfg)
    assert s.events.active_event is None


def test_delayed_registration_fires_the_next_stage_once() -> None:
    cat = _saga_catalog(delay_second=True)
    cfg = EngineConfig(daily_event_chance=0.0, monthly_storyline_event_chance=1.0)
    s = _reduce(initial_state(), A.StartGame("tst"), cat, config=cfg)

    s = _month(s, cat, cfg)
    s = _reduce(s, A.ResolveEvent(0), cat, config=cfg)
    assert [d.event_id for d in s.events.delayed_events] == ["saga_2"]

    s = _month(s, cat, cfg)
    assert s.events.active_event.id == "saga_2"
    assert s.events.delayed_events == []
    assert s.events.active_storylines[0].current_stage == 2
    s = _reduce(s, A.ResolveEvent(0), cat, config=cfg)
    assert s.events.event_history.count("saga_2") == 1


# -------------------------
# Catalog
# -------------------------


def test_default_catalog_is_consistent(catalog) -> None:
    assert len(catalog.countries) == 12
    assert catalog.storyline("rural_insurgency") is not None
    assert len(catalog.storyline("rural_insurgency").stages) == 5
    assert catalog.storyline_of("rebellion_stage_3") == "rural_insurgency"
    assert catalog.storyline_of("tech_boom") is None


def test_catalog_rejects_broken_references() -> None:
    dangling = {
        "id": "e1", "title": "Dangling", "description": "", "choices": [
            {"label": "Go", "consequences": {"delayed": {"event_id": "missing", "turns_delay": 1}}},
        ],
    }
    with pytest.raises(ValueError):
        build_catalog(events=[dangling])
    with pytest.raises(ValueError):
        build_catalog(countries=[TEST_COUNTRY, NEIGHBOUR, TEST_COUNTRY])
