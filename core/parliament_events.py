"""
core.parliament_events
Parliamentary crises checked once a month.

A crisis is an ordinary PendingEvent (category "parliament") so it occupies the same
decision slot as every other event and resolves through apply_consequences. Faction
stance changes travel in EventConsequence.faction_stances.
"""

from __future__ import annotations

from typing import Optional

from .rng import RandomSource
from .state import EventChoice, EventConsequence, Faction, GameState, PendingEvent

CATEGORY = "parliament"

COALITION_BREAKDOWN_CHANCE = 0.15
FACTION_SPLIT_CHANCE = 0.10


def _choice(label: str, description: str, effects: dict, pc_needed: float = 0.0, stances: Optional[dict] = None) -> EventChoice:
    return EventChoice(
        label=label,
        description=description,
        consequences=EventConsequence(immediate=dict(effects), faction_stances=dict(stances or {})),
        requirements={"political_capital": pc_needed} if pc_needed > 0 else {},
    )


def _event(kind: str, state: GameState, title: str, description: str, *choices: EventChoice) -> PendingEvent:
    return PendingEvent(
        id=f"{kind}_{state.time.date.isoformat()}",
        title=title,
        description=description,
        category=CATEGORY,
        choices=list(choices),
    )


def no_confidence_motion(state: GameState) -> PendingEvent:
    support = state.government.parliament.government_support
    return _event(
        "no_confidence", state, "Motion of No Confidence",
        f"The opposition has tabled a motion of no confidence. Parliamentary support stands at {support:.1f}%.",
        _choice("Negotiate for survival", "Buy enough votes to defeat the motion.",
                {"political_capital": -50, "popularity": -3, "stability": -5}, pc_needed=50),
        _choice("Call a snap election", "Hand the question back to the voters.",
                {"popularity": -10, "stability": -15}),
        _choice("Face the vote", "Let the chamber decide.",
                {"popularity": -15, "stability": -20}),
    )


def party_rebellion(state: GameState, faction: Faction) -> PendingEvent:
    return _event(
        "party_rebellion", state, "Party Rebellion",
        f"{faction.name} has turned on the leadership and demands immediate changes.",
        _choice("Make concessions", f"{faction.name} stays, warily.",
                {"political_capital": -30, "popularity": -2}, pc_needed=30, stances={faction.id: "neutral"}),
        _choice("Purge the rebels", "Expel them and absorb the loss of seats.",
                {"political_capital": -20, "popularity": -5, "stability": -8}),
        _choice("Ignore their demands", f"{faction.name} forms an opposition bloc.",
                {"popularity": -7, "stability": -10}, stances={faction.id: "hostile"}),
    )


def coalition_breakdown(state: GameState, faction: Faction) -> PendingEvent:
    return _event(
        "coalition_breakdown", state, "Coalition Breakdown",
        f"{faction.name} threatens to leave the governing coalition.",
        _choice("Offer key ministries", f"{faction.name} stays in exchange for more power.",
                {"political_capital": -40}, pc_needed=40, stances={faction.id: "supportive"}),
        _choice("Concede on policy", "Water down the programme to hold the coalition together.",
                {"political_capital": -25, "popularity": -4}, stances={faction.id: "supportive"}),
        _choice("Let them leave", "Govern as a minority.",
                {"popularity": -8, "stability": -12}, stances={faction.id: "neutral"}),
    )


def faction_split(state: GameState, faction: Faction) -> PendingEvent:
    return _event(
        "faction_split", state, "Parliamentary Split",
        f"{faction.name} ({faction.size:.0f}% of the party) announces it will form a party of its own.",
        _choice("Prevent the split", "They stay, but their loyalty is fragile.",
                {"political_capital": -35}, pc_needed=35),
        _choice("Accept the split", "Fewer seats, more internal cohesion.",
                {"political_capital": 10, "popularity": -3, "stability": -5}),
    )


def snap_election_crisis(state: GameState) -> PendingEvent:
    support = state.government.parliament.government_support
    return _event(
        "snap_election", state, "Total Political Crisis",
        f"With {support:.1f}% parliamentary support and {state.stats.popularity:.1f}% popularity, "
        "pressure for early elections is overwhelming.",
        _choice("Resign with dignity", "Step down before the term ends.", {"popularity": 5}),
        _choice("Fight on", "Cling to office amid chaos.", {"popularity": -10, "stability": -25}),
    )


def check_parliamentary_crisis(state: GameState, rng: RandomSource) -> Optional[PendingEvent]:
    """First matching crisis, most severe first."""
    p = state.government.parliament
    support = float(p.government_support)
    popularity = float(state.stats.popularity)

    if support < 20 and state.resources.stability < 25 and popularity < 25:
        return snap_election_crisis(state)
    if support < 30 and popularity < 35:
        return no_confidence_motion(state)

    rebel = next(
        (f for f in p.factions if f.loyalty_to_leader < 30 and f.influence > 60 and f.stance == "hostile"), None
    )
    if rebel is not None:
        return party_rebellion(state, rebel)

    wavering = next(
        (f for f in p.factions if f.stance == "supportive" and popularity < 30 and f.loyalty_to_leader < 40), None
    )
    if wavering is not None and rng.random() < COALITION_BREAKDOWN_CHANCE:
        return coalition_breakdown(state, wavering)

    splitter = next(
        (f for f in p.factions if f.loyalty_to_leader < 25 and f.size > 20 and f.faction_type == "hardliner"), None
    )
    if splitter is not None and rng.random() < FACTION_SPLIT_CHANCE:
        return faction_split(state, splitter)
    return None
