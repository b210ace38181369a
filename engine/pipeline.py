"""engine.pipeline

Core day / month flow (headless).

Responsibilities:
- advance_day: calendar step, weekly situation tick, low-stability warning, contextual event draw
- advance_month: the fixed-order monthly update (economy -> society -> narrative -> parliament -> cabinet and parliamentary crises)
- helpers shared with the reducer for firing events and pushing notifications

This layer is UI-agnostic.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import timedelta
from typing import List, Optional

from core.cabinet import apply_resignations, apply_scandals, check_minister_resignations, check_minister_scandals
from core.economy import apply_monthly_economy
from core.effects import apply_delta, bounded
from core.events import (
    apply_consequences,
    evaluate_condition,
    progress_storyline,
    select_contextual_event,
    select_ending,
    tick_delayed_events,
)
from core.geopolitics import decay_influence
from core.parliament_events import check_parliamentary_crisis
from core.parliament import (
    calculate_government_support,
    next_election_after,
    party_cohesion,
    regenerate_political_capital,
    update_faction_stances,
)
from core.projects import process_grand_projects
from core.rng import RandomSource
from core.situations import maybe_spawn_situations, resolve_emergency, tick_situations
from core.social import (
    adjust_group_approval,
    apply_approval_modifiers,
    calculate_social_tension,
    check_for_protests,
    economic_approval_shifts,
    generate_media_scandal,
    growth_approval_shifts,
    popularity_drift,
    start_electoral_campaign,
    tick_approval_modifiers,
    update_campaign,
    update_protests,
    weighted_popularity,
)
from core.state import (
    ActiveStoryline,
    DelayedEvent,
    GameState,
    Notification,
    PendingEvent,
    months_elapsed,
    with_log,
    with_notification,
)

from content.catalog import ContentCatalog

from .config import EngineConfig

LOW_STABILITY_THRESHOLD = 30.0
LOW_STABILITY_NOTE = "low_stability"


# -------------------------
# Shared helpers
# -------------------------


def notify(state: GameState, kind: str, title: str, message: str, event_id: Optional[str] = None) -> GameState:
    """Push a notification with an id unique within the current feed."""
    base = f"{kind}-{state.time.date.isoformat()}"
    taken = {n.id for n in state.notifications}
    k = 1
    nid = f"{base}-{k}"
    while nid in taken:
        k += 1
        nid = f"{base}-{k}"
    note = Notification(id=nid, kind=kind, title=title, message=message, date=state.time.date, event_id=event_id)
    return with_notification(state, note)


def _log_all(state: GameState, messages: List[str], kind: str = "info", title: str = "") -> GameState:
    for msg in messages:
        state = with_log(state, msg)
        if title:
            state = notify(state, kind, title, msg)
    return state


def fire_event(state: GameState, pending: PendingEvent) -> GameState:
    """Occupy the active-event slot and pause time. Caller checks the slot is free."""
    events = replace(state.events, active_event=pending)
    if pending.storyline_id is not None:
        events = replace(
            events,
            active_storylines=[
                replace(
                    a,
                    current_stage=int(pending.story_stage or a.current_stage),
                    stage_fired=True,
                    stage_resolved=False,
                )
                if a.storyline_id == pending.storyline_id
                else a
                for a in events.active_storylines
            ],
        )
    out = replace(state, events=events, time=replace(state.time, is_playing=False))
    out = notify(out, "event", pending.title, pending.description, event_id=pending.id)
    return with_log(out, f"Event: {pending.title}")


def _storyline_active(state: GameState, storyline_id: str) -> bool:
    return any(a.storyline_id == storyline_id for a in state.events.active_storylines)


# -------------------------
# Day
# -------------------------


def advance_day(state: GameState, *, catalog: ContentCatalog, config: EngineConfig, rng: RandomSource) -> GameState:
    """One simulated day. A pending decision freezes the calendar."""
    if not state.started or state.events.active_event is not None:
        return state

    out = replace(state, time=replace(state.time, date=state.time.date + timedelta(days=1)))

    days = (out.time.date - out.time.start_date).days
    if config.situation_tick_days > 0 and days % config.situation_tick_days == 0:
        out, spawned = maybe_spawn_situations(out)
        out = _log_all(out, spawned, "warning", "Crisis")
        out, ticked = tick_situations(out)
        out = _log_all(out, ticked, "info", "Situation")

    if out.resources.stability < LOW_STABILITY_THRESHOLD and not any(n.id == LOW_STABILITY_NOTE for n in out.notifications):
        note = Notification(
            id=LOW_STABILITY_NOTE,
            kind="warning",
            title="Low stability",
            message="Stability is critically low. Unrest may follow.",
            date=out.time.date,
        )
        out = with_notification(out, note)

    if rng.random() < config.daily_event_chance:
        pending = select_contextual_event(catalog.event_list(), out, rng, scandal_chance=config.scandal_chance)
        if pending is not None:
            out = fire_event(out, pending)
    return out


# -------------------------
# Month
# -------------------------


def _society(state: GameState, growth_rate: float, rng: RandomSource) -> GameState:
    social = state.social
    groups = apply_approval_modifiers(
        social.interest_groups,
        [*economic_approval_shifts(state.stats), *growth_approval_shifts(growth_rate)],
    )
    groups, timed = tick_approval_modifiers(groups, social.approval_modifiers)

    before = set(social.active_protests)
    protests = check_for_protests(groups, social.active_protests, state.time.date, rng)
    started = [protests[gid] for gid in protests if gid not in before]
    protests = update_protests(protests, groups, rng)

    econ = sum(p.economic_impact for p in protests.values())
    stab = sum(p.stability_impact for p in protests.values())

    media = social.media_state
    scandal = generate_media_scandal(media, rng)
    if scandal is not None:
        groups = adjust_group_approval(groups, "business", scandal.approval_impact / 2.0)
        media = replace(media, scandals_exposed=media.scandals_exposed + 1)

    out = replace(
        state,
        social=replace(
            social,
            interest_groups=groups,
            approval_modifiers=timed,
            active_protests=protests,
            media_state=media,
            social_tension=calculate_social_tension(groups, protests),
        ),
    )
    out = apply_delta(out, {"gdp": out.stats.gdp * econ, "stability": stab})

    popularity = weighted_popularity(groups) + popularity_drift(out.stats, growth_rate, media)
    out = replace(out, stats=replace(out.stats, popularity=bounded("popularity", popularity)))

    for p in started:
        out = with_log(out, f"Protest: {p.group_name} take to the streets ({int(p.participants)}M)")
        out = notify(out, "warning", f"Protest: {p.group_name}", ", ".join(p.demands))
    if scandal is not None:
        out = with_log(out, f"Media scandal: {scandal.text}")
        out = notify(out, "warning", "Media scandal", scandal.text)
    return out


def _campaign(state: GameState, config: EngineConfig, rng: RandomSource) -> GameState:
    social = state.social
    parliament = state.government.parliament
    election = parliament.next_election_date
    campaign = social.campaign

    if campaign is not None and campaign.active:
        campaign = update_campaign(campaign)
        if campaign.months_until_election <= 0:
            nxt = next_election_after(election or state.time.date, config.election_interval_years)
            out = replace(
                state,
                social=replace(social, campaign=None),
                government=replace(state.government, parliament=replace(parliament, next_election_date=nxt)),
            )
            out = with_log(out, f"Election day. Next election on {nxt.isoformat()}.")
            return notify(out, "info", "Election", f"Final campaign momentum {campaign.momentum:.0f}.")
        return replace(state, social=replace(social, campaign=campaign))

    if election is None:
        return state
    months_left = months_elapsed(state.time.date, election)
    if 0 < months_left <= config.campaign_lead_months:
        out = replace(state, social=replace(social, campaign=start_electoral_campaign(months_left, rng)))
        out = with_log(out, f"Electoral campaign begins. Election in {months_left} months.")
        return notify(out, "info", "Campaign", "The electoral campaign has started.")
    return state


def _delayed(state: GameState, catalog: ContentCatalog) -> GameState:
    ready, remaining = tick_delayed_events(state.events.delayed_events)
    out = replace(state, events=replace(state.events, delayed_events=remaining))
    if ready is None:
        return out

    ev = catalog.event(ready)
    if ev is None:
        return with_log(out, f"Delayed event {ready} is unknown and was dropped.")
    if ev.storyline_id is not None and not _storyline_active(out, ev.storyline_id):
        return with_log(out, f"Delayed event {ready} dropped: storyline not active.")
    if out.events.active_event is not None:
        # slot busy: stays due and fires first next month
        return replace(out, events=replace(out.events, delayed_events=[DelayedEvent(ready, 0), *remaining]))
    return fire_event(out, ev.to_pending())


def _complete_storyline(state: GameState, catalog: ContentCatalog, active: ActiveStoryline) -> GameState:
    sl = catalog.storyline(active.storyline_id)
    events = replace(
        state.events,
        active_storylines=[a for a in state.events.active_storylines if a.storyline_id != active.storyline_id],
        completed_storylines=[*state.events.completed_storylines, active.storyline_id],
    )
    out = replace(state, events=events)
    if sl is None:
        return out

    ending = select_ending(sl, out.events.story_vars)
    if ending is None:
        out = with_log(out, f"Storyline {sl.name} ended without a clear outcome.")
        return notify(out, "info", sl.name, "The storyline has ended.")

    out = apply_consequences(ending.effects, out)
    out = with_log(out, f"Storyline {sl.name} ended: {ending.name}")
    return notify(out, "warning" if ending.is_game_ending else "info", f"{sl.name}: {ending.name}", ending.description)


def _maybe_start_storyline(state: GameState, catalog: ContentCatalog, config: EngineConfig, rng: RandomSource) -> GameState:
    if rng.random() >= config.monthly_storyline_event_chance:
        return state
    done = set(state.events.completed_storylines)
    for sl in catalog.storylines.values():
        if sl.id in done or _storyline_active(state, sl.id):
            continue
        if sl.required_conditions is not None and not evaluate_condition(sl.required_conditions, state):
            continue
        active = ActiveStoryline(storyline_id=sl.id, current_stage=1, started_at=state.time.date)
        out = replace(state, events=replace(state.events, active_storylines=[*state.events.active_storylines, active]))
        return with_log(out, f"Storyline started: {sl.name}")
    return state


def progress_storylines(state: GameState, *, catalog: ContentCatalog, config: EngineConfig, rng: RandomSource) -> GameState:
    """Start at most one storyline, advance resolved stages and fire the next stage event."""
    out = _maybe_start_storyline(state, catalog, config, rng)

    for active in list(out.events.active_storylines):
        sl = catalog.storyline(active.storyline_id)
        if sl is None:
            continue

        if active.stage_resolved:
            ok, nxt = progress_storyline(active, sl, out)
            if not ok:
                continue
            if nxt > len(sl.stages):
                out = _complete_storyline(out, catalog, active)
                continue
            active = replace(active, current_stage=nxt, stage_fired=False, stage_resolved=False)
            out = replace(
                out,
                events=replace(
                    out.events,
                    active_storylines=[
                        active if a.storyline_id == active.storyline_id else a for a in out.events.active_storylines
                    ],
                ),
            )

        if active.stage_fired or out.events.active_event is not None:
            continue
        # a choice already scheduled this storyline's next beat
        if any(catalog.storyline_of(d.event_id) == sl.id for d in out.events.delayed_events):
            continue
        stage = sl.stage(active.current_stage)
        if stage is None or stage.event_id in out.events.event_history:
            continue
        ev = catalog.event(stage.event_id)
        if ev is not None:
            out = fire_event(out, ev.to_pending())
    return out


def _parliament(state: GameState, rng: RandomSource) -> GameState:
    p = state.government.parliament
    factions = update_faction_stances(p.factions, state.stats.popularity, p.failed_bills_this_month, rng)
    gov = next((x for x in p.parties if x.is_government), None)
    cohesion = party_cohesion(factions, gov.id) if gov is not None else p.party_cohesion
    parliament = replace(
        p,
        factions=factions,
        government_support=calculate_government_support(factions, p.parties, p.total_seats),
        party_cohesion=cohesion,
        failed_bills_this_month=0,
    )
    pc = regenerate_political_capital(state.resources.political_capital, state.stats.popularity, cohesion)
    return replace(
        state,
        government=replace(state.government, parliament=parliament),
        resources=replace(state.resources, political_capital=max(pc, state.resources.political_capital)),
    )


def _cabinet(state: GameState, config: EngineConfig, rng: RandomSource) -> GameState:
    scale = float(config.minister_event_scale)
    if scale <= 0 or not state.government.ministers:
        return state
    scandals = check_minister_scandals(state.government.ministers, rng, scale)
    out, msgs = apply_scandals(state, scandals)
    out = _log_all(out, msgs, "warning", "Cabinet scandal")
    resignations = check_minister_resignations(out.government.ministers, out.stats.popularity, rng, scale)
    out, msgs = apply_resignations(out, resignations)
    return _log_all(out, msgs, "warning", "Resignation")


def _parliamentary_crisis(state: GameState, config: EngineConfig, rng: RandomSource) -> GameState:
    if state.events.active_event is not None:
        return state
    if rng.random() >= config.parliamentary_event_chance:
        return state
    crisis = check_parliamentary_crisis(state, rng)
    return fire_event(state, crisis) if crisis is not None else state


def _emergency(state: GameState) -> GameState:
    em = state.events.emergency
    if not em.active:
        return state
    left = em.turns_remaining - 1
    if left > 0:
        return replace(state, events=replace(state.events, emergency=replace(em, turns_remaining=left)))
    # nobody allocated resources in time
    out, outcome = resolve_emergency(state, {})
    return with_log(out, f"Emergency ({em.kind}) ran its course unmanaged. Cost ${outcome.budget_cost:.0f}B.")


def advance_month(state: GameState, *, catalog: ContentCatalog, config: EngineConfig, rng: RandomSource) -> GameState:
    """Monthly update in fixed order."""
    if not state.started:
        return state

    out, econ = apply_monthly_economy(state)
    out = _society(out, econ.growth_rate, rng)
    out = _campaign(out, config, rng)
    out = _delayed(out, catalog)
    out = progress_storylines(out, catalog=catalog, config=config, rng=rng)

    out, done = process_grand_projects(out)
    out = _log_all(out, done, "info", "Project completed")
    out = replace(out, diplomacy=replace(out.diplomacy, countries=decay_influence(out.diplomacy.countries)))

    out = _parliament(out, rng)
    out = _emergency(out)
    out = _cabinet(out, config, rng)
    out = _parliamentary_crisis(out, config, rng)
    return with_log(out, f"Month close. Growth {econ.growth_rate * 100:.1f}%")
