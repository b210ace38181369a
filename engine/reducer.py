"""engine.reducer

reduce(state, action) -> state.

Responsibilities:
- one handler per action type, looked up in _HANDLERS
- unknown actions, unknown targets and unaffordable actions return the same snapshot
- every accepted transition leaves a dated log line

Handlers never mutate their input; they build the next snapshot with dataclasses.replace().
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Callable, Dict, Mapping, Optional

from core.effects import apply_delta, bounded
from core.events import apply_consequences, meets_requirements
from core.geopolitics import (
    DIPLOMACY_ACTIONS,
    apply_debt_trap,
    apply_diplomacy_action,
    can_debt_trap,
    find_country,
    foreign_direct_investment,
    seed_relations,
)
from core.ideology import get_ideology_spec
from core.parliament import (
    calculate_government_support,
    generate_parliament,
    negotiate_with_faction,
    simulate_bill_vote,
)
from core.projects import pause_project, start_project
from core.rng import RandomSource
from core.situations import EMERGENCY_KINDS, enter_emergency, resolve_emergency
from core.social import (
    PROTEST_ACTIONS,
    adjust_group_approval,
    calculate_social_tension,
    censor_media,
    find_group,
    fund_public_media,
    generate_interest_groups,
    hold_rally,
    launch_smear_campaign,
    resolve_protest_action,
)
from core.state import (
    Diplomacy,
    GameState,
    Government,
    Player,
    Policies,
    Resources,
    SocialState,
    Stats,
    TimeState,
    VoteResult,
    with_log,
)

from content.catalog import ContentCatalog

from . import actions as A
from .config import EngineConfig
from .pipeline import advance_day, advance_month, fire_event, notify
from .snapshot import snapshot_from_dict

POLICY_LEVERS = ("tax_rate", "public_spending")


@dataclass(frozen=True)
class _Ctx:
    catalog: ContentCatalog
    config: EngineConfig
    rng: RandomSource


Handler = Callable[[GameState, object, _Ctx], GameState]


def _pay(state: GameState, *, budget: float = 0.0, political_capital: float = 0.0) -> GameState:
    r = state.resources
    return replace(
        state,
        resources=replace(r, budget=r.budget - float(budget), political_capital=r.political_capital - float(political_capital)),
    )


def _with_parliament(state: GameState, **changes) -> GameState:
    gov = state.government
    return replace(state, government=replace(gov, parliament=replace(gov.parliament, **changes)))


# -------------------------
# Game lifecycle / time
# -------------------------


def _start_game(state: GameState, a: A.StartGame, ctx: _Ctx) -> GameState:
    tpl = ctx.catalog.country(a.country_id)
    if tpl is None:
        return state
    spec = get_ideology_spec(a.ideology)
    start = ctx.config.start_date
    party_name = a.party_name or "Governing Party"

    stats = Stats(
        gdp=bounded("gdp", tpl.gdp * spec.gdp_mult),
        population=tpl.population,
        inflation=bounded("inflation", tpl.inflation),
        unemployment=bounded("unemployment", tpl.unemployment + spec.unemployment),
        popularity=bounded("popularity", 50.0 + spec.popularity),
    )
    resources = Resources(
        budget=tpl.gdp * 0.25,
        political_capital=50.0 + spec.political_capital,
        stability=bounded("stability", tpl.stability + spec.stability),
    )
    policies = Policies(
        tax_rate=bounded("tax_rate", 0.25 + spec.tax_rate),
        public_spending=bounded("public_spending", tpl.gdp * 0.20 * spec.spending_mult),
    )

    others = [c.to_country() for c in ctx.catalog.countries.values() if c.id != tpl.id]
    groups = generate_interest_groups(tpl.population, spec.leaning)

    out = GameState(
        started=True,
        player=Player(
            name=a.player_name or "President",
            country_id=tpl.id,
            country_name=tpl.name,
            party_name=party_name,
            ideology=spec.key,
        ),
        resources=resources,
        stats=stats,
        policies=policies,
        diplomacy=Diplomacy(countries=seed_relations(others, tpl.region, spec.key, ctx.rng)),
        government=Government(
            parliament=generate_parliament(
                party_name,
                start,
                ctx.rng,
                seats=ctx.config.parliament_seats,
                election_years=ctx.config.election_interval_years,
            )
        ),
        social=SocialState(interest_groups=groups, social_tension=calculate_social_tension(groups, {})),
        time=TimeState(date=start, start_date=start, is_playing=False, speed=1),
    )
    out = with_log(out, f"{out.player.name} takes office in {tpl.name} ({spec.key}).")
    return notify(out, "info", "Welcome", f"You govern {tpl.name}. Appoint a cabinet and press play.")


def _advance_day(state: GameState, a: A.AdvanceDay, ctx: _Ctx) -> GameState:
    return advance_day(state, catalog=ctx.catalog, config=ctx.config, rng=ctx.rng)


def _advance_month(state: GameState, a: A.AdvanceMonth, ctx: _Ctx) -> GameState:
    return advance_month(state, catalog=ctx.catalog, config=ctx.config, rng=ctx.rng)


def _set_speed(state: GameState, a: A.SetSpeed, ctx: _Ctx) -> GameState:
    speed = max(0, min(3, int(a.speed)))
    playing = speed > 0 and state.events.active_event is None
    return replace(state, time=replace(state.time, speed=speed, is_playing=playing))


def _toggle_pause(state: GameState, a: A.TogglePause, ctx: _Ctx) -> GameState:
    if not state.time.is_playing and state.events.active_event is not None:
        return state
    return replace(state, time=replace(state.time, is_playing=not state.time.is_playing))


def _update_policy(state: GameState, a: A.UpdatePolicy, ctx: _Ctx) -> GameState:
    if a.key not in POLICY_LEVERS:
        return state
    value = bounded(a.key, float(a.value))
    out = replace(state, policies=replace(state.policies, **{a.key: value}))
    return with_log(out, f"Policy: {a.key} set to {value:g}")


# -------------------------
# Events / notifications
# -------------------------


def _disaster_kind(event_id: str) -> str:
    for kind in ("earthquake", "flood", "pandemic"):
        if kind in event_id:
            return kind
    return "drought"


def _resolve_event(state: GameState, a: A.ResolveEvent, ctx: _Ctx) -> GameState:
    ev = state.events.active_event
    if ev is None or not 0 <= int(a.choice_index) < len(ev.choices):
        return state
    choice = ev.choices[int(a.choice_index)]
    if not meets_requirements(choice, state):
        return state

    out = apply_consequences(choice.consequences, state)
    events = replace(out.events, active_event=None, event_history=[*out.events.event_history, ev.id])
    if ev.storyline_id is not None:
        events = replace(
            events,
            active_storylines=[
                replace(s, current_stage=int(ev.story_stage or s.current_stage), stage_fired=True, stage_resolved=True)
                if s.storyline_id == ev.storyline_id
                else s
                for s in events.active_storylines
            ],
        )
    out = replace(
        out,
        events=events,
        notifications=[n for n in out.notifications if n.event_id != ev.id],
    )
    out = with_log(out, f"Event resolved: {ev.title} - {choice.label}")

    if ev.category == "disaster" and not out.events.emergency.active:
        kind = _disaster_kind(ev.id)
        out = enter_emergency(out, kind)
        out = with_log(out, f"State of emergency declared ({kind}).")
        return notify(out, "warning", "State of emergency", "Allocate relief resources to end the emergency.")
    return replace(out, time=replace(out.time, is_playing=out.time.speed > 0))


def _open_notification(state: GameState, a: A.OpenNotification, ctx: _Ctx) -> GameState:
    note = next((n for n in state.notifications if n.id == a.notification_id), None)
    if note is None:
        return state
    if note.kind != "event":
        return replace(state, notifications=[n for n in state.notifications if n.id != note.id])

    out = replace(
        state,
        notifications=[replace(n, read=True) if n.id == note.id else n for n in state.notifications],
    )
    active = out.events.active_event
    if active is not None:
        return replace(out, time=replace(out.time, is_playing=False)) if active.id == note.event_id else out
    ev = ctx.catalog.event(note.event_id or "")
    if ev is None:
        return out
    out = replace(out, notifications=[n for n in out.notifications if n.id != note.id])
    return fire_event(out, ev.to_pending())


def _dismiss_notification(state: GameState, a: A.DismissNotification, ctx: _Ctx) -> GameState:
    kept = [n for n in state.notifications if n.id != a.notification_id]
    if len(kept) == len(state.notifications):
        return state
    return replace(state, notifications=kept)


# -------------------------
# Diplomacy / geopolitics
# -------------------------


def _diplomacy(state: GameState, a: A.DiplomacyAction, ctx: _Ctx) -> GameState:
    country = find_country(state.diplomacy.countries, a.country_id)
    cost = ctx.config.diplomacy_cost
    if country is None or a.action not in DIPLOMACY_ACTIONS or state.resources.political_capital < cost:
        return state
    updated = apply_diplomacy_action(country, a.action)
    countries = [updated if c.id == country.id else c for c in state.diplomacy.countries]
    out = _pay(replace(state, diplomacy=replace(state.diplomacy, countries=countries)), political_capital=cost)
    return with_log(out, f"Diplomacy: {a.action} with {country.name}")


def _foreign_investment(state: GameState, a: A.ForeignInvestment, ctx: _Ctx) -> GameState:
    country = find_country(state.diplomacy.countries, a.country_id)
    amount = float(a.amount)
    if country is None or amount <= 0 or state.resources.budget < amount:
        return state
    tpl = ctx.catalog.country(country.id)
    share = amount / tpl.gdp if tpl is not None and tpl.gdp > 0 else 0.0
    countries = foreign_direct_investment(state.diplomacy.countries, country.id, amount, debt_share=share)
    out = _pay(replace(state, diplomacy=replace(state.diplomacy, countries=countries)), budget=amount)
    return with_log(out, f"Direct investment of ${amount:.0f}B in {country.name}. Influence up.")


def _debt_trap(state: GameState, a: A.ApplyDebtTrap, ctx: _Ctx) -> GameState:
    country = find_country(state.diplomacy.countries, a.country_id)
    if country is None or not can_debt_trap(country):
        return state
    out = replace(state, diplomacy=replace(state.diplomacy, countries=apply_debt_trap(state.diplomacy.countries, country.id)))
    return with_log(out, f"{country.name} becomes a satellite state through its debt.")


# -------------------------
# Cabinet / parliament
# -------------------------


def _appoint_minister(state: GameState, a: A.AppointMinister, ctx: _Ctx) -> GameState:
    cand = ctx.catalog.minister(a.minister_id)
    ministers = state.government.ministers
    if cand is None or any(m.id == cand.id for m in ministers):
        return state
    displaced = next((m for m in ministers if m.ministry == cand.ministry), None)
    cost = math.floor(displaced.loyalty / 2.0) if displaced is not None else 0
    if state.resources.political_capital < cost:
        return state

    new = replace(cand, appointment_date=state.time.date)
    out = replace(
        state,
        government=replace(state.government, ministers=[*(m for m in ministers if m.ministry != cand.ministry), new]),
    )
    out = _pay(out, political_capital=cost)
    if displaced is not None:
        return with_log(out, f"{cand.name} replaces {displaced.name} at {cand.ministry} (-{cost} PC)")
    return with_log(out, f"{cand.name} appointed minister of {cand.ministry}")


def _fire_minister(state: GameState, a: A.FireMinister, ctx: _Ctx) -> GameState:
    m = next((x for x in state.government.ministers if x.id == a.minister_id), None)
    if m is None:
        return state
    cost = math.floor((m.loyalty + m.popularity) / 4.0)
    if state.resources.political_capital < cost:
        return state
    out = replace(
        state,
        government=replace(state.government, ministers=[x for x in state.government.ministers if x.id != m.id]),
    )
    return with_log(_pay(out, political_capital=cost), f"{m.name} dismissed from {m.ministry} (-{cost} PC)")


def _propose_bill(state: GameState, a: A.ProposeBill, ctx: _Ctx) -> GameState:
    parliament = state.government.parliament
    tpl = ctx.catalog.bill(a.bill_id)
    cost = ctx.config.bill_proposal_cost
    if parliament.active_bill is not None or tpl is None or state.resources.political_capital < cost:
        return state
    bill = replace(tpl, status="in_vote", proposed_by="government", date_proposed=state.time.date)
    out = _pay(_with_parliament(state, active_bill=bill), political_capital=cost)
    return with_log(out, f"Bill proposed: {bill.title}")


def _vote_on_bill(state: GameState, a: A.VoteOnBill, ctx: _Ctx) -> GameState:
    p = state.government.parliament
    bill = p.active_bill
    if bill is None:
        return state
    outcome = simulate_bill_vote(
        bill, p.factions, p.total_seats, bill.proposed_by == "government", ctx.rng, parties=p.parties
    )
    result = VoteResult(
        bill_id=bill.id,
        title=bill.title,
        approved=outcome.approved,
        yes=outcome.yes,
        no=outcome.no,
        abstain=outcome.abstain,
        date=state.time.date,
    )
    out = apply_delta(state, bill.effects) if outcome.approved else state
    out = _with_parliament(
        out,
        active_bill=None,
        last_vote_result=result,
        failed_bills_this_month=p.failed_bills_this_month + (0 if outcome.approved else 1),
    )
    verdict = "approved" if outcome.approved else "rejected"
    out = with_log(out, f"Bill {verdict}: {bill.title} ({outcome.yes} yes, {outcome.no} no, {outcome.abstain} abstain)")
    return notify(out, "info", f"Bill {verdict}", bill.title)


def _clear_vote_result(state: GameState, a: A.ClearVoteResult, ctx: _Ctx) -> GameState:
    if state.government.parliament.last_vote_result is None:
        return state
    return _with_parliament(state, last_vote_result=None)


def _negotiate(state: GameState, a: A.NegotiateWithFaction, ctx: _Ctx) -> GameState:
    p = state.government.parliament
    faction = next((f for f in p.factions if f.id == a.faction_id), None)
    if faction is None:
        return state
    res = negotiate_with_faction(faction, float(a.political_capital), state.resources.political_capital, ctx.rng)
    if not res.success and res.cost_paid == 0:
        return state

    factions = p.factions
    if res.success and res.new_stance is not None:
        factions = [replace(f, stance=res.new_stance) if f.id == faction.id else f for f in factions]
    out = _with_parliament(
        state,
        factions=factions,
        government_support=calculate_government_support(factions, p.parties, p.total_seats),
    )
    return with_log(_pay(out, political_capital=res.cost_paid), res.message)


# -------------------------
# Society / media / campaign
# -------------------------


def _resolve_protest(state: GameState, a: A.ResolveProtest, ctx: _Ctx) -> GameState:
    social = state.social
    protest = social.active_protests.get(a.group_id)
    group = find_group(social.interest_groups, a.group_id)
    if protest is None or group is None or a.action not in PROTEST_ACTIONS:
        return state

    res = resolve_protest_action(
        protest, a.action, group, state.resources.budget, state.resources.political_capital, ctx.rng
    )
    refused = (
        not res.success
        and not res.protest_ended
        and res.political_capital_cost == 0
        and res.approval_change == 0
        and res.stability_change == 0
    )
    if refused:
        return state

    protests = dict(social.active_protests)
    if res.protest_ended:
        del protests[a.group_id]
    elif res.escalated:
        protests[a.group_id] = replace(protest, escalating=True)
    groups = adjust_group_approval(social.interest_groups, a.group_id, res.approval_change)

    out = replace(
        state,
        social=replace(
            social,
            interest_groups=groups,
            active_protests=protests,
            social_tension=calculate_social_tension(groups, protests),
        ),
    )
    out = _pay(out, budget=res.budget_cost, political_capital=res.political_capital_cost)
    out = apply_delta(out, {"stability": res.stability_change, "human_rights": res.human_rights_change})
    return with_log(out, f"Protest ({group.name}) {a.action}: {'; '.join(res.consequences)}")


def _censor_media(state: GameState, a: A.CensorMedia, ctx: _Ctx) -> GameState:
    out = replace(state, social=replace(state.social, media_state=censor_media(state.social.media_state)))
    return with_log(out, "Media censorship tightened")


def _fund_media(state: GameState, a: A.FundPublicMedia, ctx: _Ctx) -> GameState:
    amount = float(a.amount)
    if amount <= 0 or state.resources.budget < amount:
        return state
    media = fund_public_media(state.social.media_state, amount)
    out = _pay(replace(state, social=replace(state.social, media_state=media)), budget=amount)
    return with_log(out, f"Public media funded with ${amount:.1f}B")


def _rally(state: GameState, a: A.CampaignRally, ctx: _Ctx) -> GameState:
    campaign = state.social.campaign
    group = find_group(state.social.interest_groups, a.target_group)
    if campaign is None or not campaign.active or group is None:
        return state
    res = hold_rally(float(a.budget))
    if res.cost == 0 or state.resources.budget < res.cost:
        return state
    campaign = replace(
        campaign,
        rallies_held=campaign.rallies_held + 1,
        momentum=campaign.momentum + res.momentum_change,
        government_budget=campaign.government_budget + res.cost,
    )
    groups = adjust_group_approval(state.social.interest_groups, group.id, res.approval_change)
    out = replace(state, social=replace(state.social, campaign=campaign, interest_groups=groups))
    return with_log(_pay(out, budget=res.cost), f"Rally for {group.name}: +{res.approval_change:.1f} approval")


def _smear(state: GameState, a: A.CampaignSmear, ctx: _Ctx) -> GameState:
    campaign = state.social.campaign
    if campaign is None or not campaign.active:
        return state
    res = launch_smear_campaign(state.resources.budget, state.resources.political_capital, ctx.rng)
    if res.cost == 0:
        return state
    campaign = replace(
        campaign,
        smear_campaigns=campaign.smear_campaigns + 1,
        momentum=campaign.momentum + res.momentum_change,
        opposition_budget=max(0.0, campaign.opposition_budget * (1.0 - res.opposition_damage / 100.0)),
    )
    out = replace(state, social=replace(state.social, campaign=campaign))
    out = _pay(out, budget=res.cost, political_capital=res.political_capital_cost)
    out = apply_delta(out, {"popularity": res.popularity_change})
    msg = "Smear campaign backfired" if res.backfired else "Smear campaign hurts the opposition"
    return with_log(out, msg)


# -------------------------
# Projects / emergency
# -------------------------


def _start_project(state: GameState, a: A.StartProject, ctx: _Ctx) -> GameState:
    tpl = ctx.catalog.project(a.project_id)
    if tpl is None:
        return state
    out = start_project(state, tpl)
    if out is state:
        return state
    return with_log(out, f"Construction started: {tpl.name}")


def _pause_project(state: GameState, a: A.PauseProject, ctx: _Ctx) -> GameState:
    out = pause_project(state, a.project_id)
    if out is state:
        return state
    return with_log(out, f"Project paused: {a.project_id}")


def _enter_emergency(state: GameState, a: A.EnterEmergencyMode, ctx: _Ctx) -> GameState:
    if a.kind not in EMERGENCY_KINDS:
        return state
    out = enter_emergency(state, a.kind, float(a.severity), int(a.turns_remaining))
    if out is state:
        return state
    return with_log(out, f"State of emergency declared ({a.kind}).")


def _exit_emergency(state: GameState, a: A.ExitEmergencyMode, ctx: _Ctx) -> GameState:
    if not state.events.emergency.active:
        return state
    out, outcome = resolve_emergency(state, dict(a.allocation))
    return with_log(
        out,
        f"Emergency over. Effectiveness {outcome.effectiveness:.0f}%, cost ${outcome.budget_cost:.0f}B",
    )


# -------------------------
# Snapshots
# -------------------------


def _load_snapshot(state: GameState, a: A.LoadSnapshot, ctx: _Ctx) -> GameState:
    snap = a.snapshot
    if isinstance(snap, GameState):
        return snap
    if isinstance(snap, Mapping):
        loaded: Optional[GameState] = snapshot_from_dict(snap)
        return loaded if loaded is not None else state
    return state


_HANDLERS: Dict[type, Handler] = {
    A.StartGame: _start_game,
    A.AdvanceDay: _advance_day,
    A.AdvanceMonth: _advance_month,
    A.SetSpeed: _set_speed,
    A.TogglePause: _toggle_pause,
    A.UpdatePolicy: _update_policy,
    A.ResolveEvent: _resolve_event,
    A.DiplomacyAction: _diplomacy,
    A.AppointMinister: _appoint_minister,
    A.FireMinister: _fire_minister,
    A.ProposeBill: _propose_bill,
    A.VoteOnBill: _vote_on_bill,
    A.NegotiateWithFaction: _negotiate,
    A.OpenNotification: _open_notification,
    A.DismissNotification: _dismiss_notification,
    A.ResolveProtest: _resolve_protest,
    A.LoadSnapshot: _load_snapshot,
    A.ClearVoteResult: _clear_vote_result,
    A.CensorMedia: _censor_media,
    A.FundPublicMedia: _fund_media,
    A.CampaignRally: _rally,
    A.CampaignSmear: _smear,
    A.StartProject: _start_project,
    A.PauseProject: _pause_project,
    A.ForeignInvestment: _foreign_investment,
    A.ApplyDebtTrap: _debt_trap,
    A.EnterEmergencyMode: _enter_emergency,
    A.ExitEmergencyMode: _exit_emergency,
}

# accepted before StartGame
_PREGAME = (A.StartGame, A.LoadSnapshot)


def reduce(
    state: GameState,
    action: object,
    *,
    catalog: ContentCatalog,
    config: EngineConfig,
    rng: RandomSource,
) -> GameState:
    """Apply one action. Anything the reducer does not recognise returns state unchanged."""
    handler = _HANDLERS.get(type(action))
    if handler is None:
        return state
    if not state.started and not isinstance(action, _PREGAME):
        return state
    return handler(state, action, _Ctx(catalog=catalog, config=config, rng=rng))
