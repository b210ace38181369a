"""
core.state
Core domain data models (UI independent).

Every model is a frozen dataclass. Transitions never mutate a snapshot in place;
they build a new one with dataclasses.replace() and fresh containers.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, List, Optional


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


Delta = Dict[str, float]

IDEOLOGIES = ("Socialist", "Capitalist", "Centrist", "Authoritarian")

START_DATE = date(2025, 1, 1)


# -------------------------
# Player / nation
# -------------------------


@dataclass(frozen=True)
class Player:
    name: str = "President"
    country_id: str = ""
    country_name: str = ""
    party_name: str = ""
    ideology: str = "Centrist"


@dataclass(frozen=True)
class Resources:
    """Spendable resources.

    budget is unbounded in sign (deficits are allowed);
    political_capital is >= 0 by convention only;
    stability is clamped to 0..100 by core.effects.
    """

    budget: float = 0.0
    political_capital: float = 50.0
    stability: float = 50.0
    research_points: float = 0.0


@dataclass(frozen=True)
class Stats:
    gdp: float = 1.0             # billions, > 0
    population: float = 0.0      # millions
    inflation: float = 0.02
    unemployment: float = 0.05   # 0.01..0.30
    popularity: float = 50.0     # 0..100


@dataclass(frozen=True)
class NationalProject:
    id: str
    name: str
    status: str = "PLANNED"  # PLANNED | BUILDING | PAUSED | COMPLETED
    progress: float = 0.0
    cost_per_turn: float = 0.0
    payoff_applied: bool = False


@dataclass(frozen=True)
class Policies:
    tax_rate: float = 0.25
    public_spending: float = 100.0
    active_projects: List[NationalProject] = field(default_factory=list)


@dataclass(frozen=True)
class Country:
    id: str
    name: str
    region: str = "Other"
    ideology: str = "Centrist"
    relation: float = 50.0
    trade_treaty: bool = False
    defense_treaty: bool = False
    player_influence: float = 0.0
    debt_held_by_player: float = 0.0
    is_satellite: bool = False


@dataclass(frozen=True)
class Diplomacy:
    countries: List[Country] = field(default_factory=list)


# -------------------------
# Government
# -------------------------


@dataclass(frozen=True)
class Minister:
    id: str
    name: str
    ministry: str
    traits: List[str] = field(default_factory=list)
    loyalty: float = 50.0
    popularity: float = 50.0
    competence: float = 50.0
    corruption: float = 0.0
    ambition: float = 0.0
    scandals: int = 0
    appointment_date: Optional[date] = None


@dataclass(frozen=True)
class Party:
    id: str
    name: str
    ideology: str
    seats: int
    is_government: bool = False


@dataclass(frozen=True)
class Faction:
    id: str
    name: str
    party_id: str
    faction_type: str            # hardliner | moderate | reformist | pragmatist
    ideology: str
    size: float                  # % of the party's seats
    influence: float
    priorities: List[str] = field(default_factory=list)
    stance: str = "neutral"      # supportive | neutral | hostile
    loyalty_to_leader: float = 50.0


@dataclass(frozen=True)
class Bill:
    id: str
    title: str
    description: str = ""
    bill_type: str = "policy_change"   # policy_change | budget | reform | crisis_response | constitutional
    policy_area: str = "economy"
    effects: Delta = field(default_factory=dict)
    proposed_by: str = "government"
    status: str = "pending"            # pending | in_vote | approved | rejected
    required_majority: float = 50.0    # % of total seats
    urgency: str = "medium"            # low | medium | high | crisis
    date_proposed: Optional[date] = None


@dataclass(frozen=True)
class VoteResult:
    bill_id: str
    title: str
    approved: bool
    yes: int
    no: int
    abstain: int
    date: date


@dataclass(frozen=True)
class Parliament:
    total_seats: int = 0
    parties: List[Party] = field(default_factory=list)
    factions: List[Faction] = field(default_factory=list)
    active_bill: Optional[Bill] = None
    government_support: float = 0.0
    party_cohesion: float = 50.0
    failed_bills_this_month: int = 0
    next_election_date: Optional[date] = None
    last_vote_result: Optional[VoteResult] = None


@dataclass(frozen=True)
class Government:
    ministers: List[Minister] = field(default_factory=list)
    parliament: Parliament = field(default_factory=Parliament)


# -------------------------
# Narrative
# -------------------------


@dataclass(frozen=True)
class ApprovalModifier:
    """Approval change for one interest group. duration is in months (None = permanent)."""
    group_id: str
    change: float
    duration: Optional[int] = None
    reason: str = ""


@dataclass(frozen=True)
class DelayedEventSpec:
    event_id: str
    turns_delay: int


@dataclass(frozen=True)
class EventConsequence:
    immediate: Delta = field(default_factory=dict)
    story_vars: Dict[str, Any] = field(default_factory=dict)
    approval_modifiers: List[ApprovalModifier] = field(default_factory=list)
    delayed: Optional[DelayedEventSpec] = None
    dismiss_minister_id: Optional[str] = None
    faction_stances: Dict[str, str] = field(default_factory=dict)  # faction id -> new stance
    hidden: str = ""


@dataclass(frozen=True)
class EventChoice:
    label: str
    description: str = ""
    consequences: EventConsequence = field(default_factory=EventConsequence)
    requirements: Delta = field(default_factory=dict)


@dataclass(frozen=True)
class PendingEvent:
    """The data half of a fired event: what the player must decide on."""
    id: str
    title: str
    description: str
    category: str = "general"
    choices: List[EventChoice] = field(default_factory=list)
    storyline_id: Optional[str] = None
    story_stage: Optional[int] = None


@dataclass(frozen=True)
class DelayedEvent:
    event_id: str
    triggers_in: int


@dataclass(frozen=True)
class Situation:
    id: str
    name: str
    severity: float
    progress: float
    weekly_effects: Delta = field(default_factory=dict)
    exploded: bool = False


@dataclass(frozen=True)
class ActiveStoryline:
    storyline_id: str
    current_stage: int
    started_at: date
    stage_fired: bool = False
    stage_resolved: bool = False


@dataclass(frozen=True)
class EmergencyMode:
    active: bool = False
    kind: Optional[str] = None      # earthquake | flood | pandemic | drought
    severity: float = 0.0
    turns_remaining: int = 0


@dataclass(frozen=True)
class EventsState:
    active_event: Optional[PendingEvent] = None
    situations: List[Situation] = field(default_factory=list)
    delayed_events: List[DelayedEvent] = field(default_factory=list)
    event_history: List[str] = field(default_factory=list)
    story_vars: Dict[str, Any] = field(default_factory=dict)
    active_storylines: List[ActiveStoryline] = field(default_factory=list)
    completed_storylines: List[str] = field(default_factory=list)
    emergency: EmergencyMode = field(default_factory=EmergencyMode)


# -------------------------
# Society
# -------------------------


@dataclass(frozen=True)
class InterestGroup:
    id: str
    group_type: str          # Unions | Business | Religious | Students | Military | Rural
    name: str
    population_size: float
    approval: float          # 0..100
    power: float             # 0..100
    ideology: str = "Center"
    concerns: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Protest:
    id: str
    group_id: str
    group_name: str
    start_date: date
    duration: int
    intensity: float
    participants: float
    demands: List[str] = field(default_factory=list)
    economic_impact: float = 0.0
    stability_impact: float = 0.0
    escalating: bool = False


@dataclass(frozen=True)
class MediaState:
    freedom: float = 70.0
    support: float = 50.0
    censorship: float = 10.0
    public_media_funding: float = 0.5
    scandals_exposed: int = 0


@dataclass(frozen=True)
class Campaign:
    active: bool = True
    months_until_election: int = 3
    government_budget: float = 0.0
    opposition_budget: float = 0.0
    rallies_held: int = 0
    smear_campaigns: int = 0
    momentum: float = 0.0


@dataclass(frozen=True)
class TimedModifier:
    group_id: str
    change: float
    months_remaining: int
    reason: str = ""


@dataclass(frozen=True)
class SocialState:
    interest_groups: List[InterestGroup] = field(default_factory=list)
    active_protests: Dict[str, Protest] = field(default_factory=dict)
    media_state: MediaState = field(default_factory=MediaState)
    campaign: Optional[Campaign] = None
    social_tension: float = 20.0
    human_rights: float = 80.0
    approval_modifiers: List[TimedModifier] = field(default_factory=list)


# -------------------------
# Time / feed
# -------------------------


@dataclass(frozen=True)
class TimeState:
    date: date = START_DATE
    start_date: date = START_DATE
    is_playing: bool = False
    speed: int = 1  # 0..3


@dataclass(frozen=True)
class Notification:
    id: str
    kind: str  # event | info | warning
    title: str
    message: str
    date: date
    event_id: Optional[str] = None
    read: bool = False


@dataclass(frozen=True)
class GameState:
    """Root snapshot. Owned by engine.session.GameSession; replaced on every transition."""
    started: bool = False
    player: Player = field(default_factory=Player)
    resources: Resources = field(default_factory=Resources)
    stats: Stats = field(default_factory=Stats)
    policies: Policies = field(default_factory=Policies)
    diplomacy: Diplomacy = field(default_factory=Diplomacy)
    government: Government = field(default_factory=Government)
    events: EventsState = field(default_factory=EventsState)
    social: SocialState = field(default_factory=SocialState)
    time: TimeState = field(default_factory=TimeState)
    notifications: List[Notification] = field(default_factory=list)
    logs: List[str] = field(default_factory=list)


def initial_state(start_date: date = START_DATE) -> GameState:
    """Empty pre-game snapshot (before StartGame)."""
    return GameState(time=TimeState(date=start_date, start_date=start_date))


def with_log(state: GameState, message: str) -> GameState:
    """Append a dated log line."""
    return replace(state, logs=[*state.logs, f"{state.time.date.isoformat()}: {message}"])


def with_notification(state: GameState, note: Notification) -> GameState:
    return replace(state, notifications=[*state.notifications, note])


def months_elapsed(start: date, current: date) -> int:
    return (current.year - start.year) * 12 + (current.month - start.month)
