"""
core.parliament
Parties, factions and bill votes.

Responsibilities:
- generate a parliament (parties + factions) for a new game
- per-faction support scoring and seat-weighted vote simulation
- monthly stance drift driven by popularity and failed bills
- government support aggregation
- faction negotiation
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, List, Optional

from .rng import RandomSource
from .state import Bill, Faction, Parliament, Party

STANCES = ("hostile", "neutral", "supportive")

NEGOTIATION_SUCCESS = 0.6

POLICY_PRIORITIES: Dict[str, List[str]] = {
    "Socialist": ["social", "health", "education", "economy"],
    "Liberal": ["social", "education", "environment", "foreign"],
    "Conservative": ["security", "economy", "foreign", "infrastructure"],
    "Nationalist": ["security", "foreign", "economy", "infrastructure"],
    "Centrist": ["economy", "education", "health", "infrastructure"],
    "Authoritarian": ["security", "economy", "infrastructure", "foreign"],
    "Capitalist": ["economy", "infrastructure", "foreign", "education"],
}

FACTION_LABELS: Dict[str, List[str]] = {
    "hardliner": ["Hardliners", "Old Guard", "Purists"],
    "moderate": ["Moderates", "Centre Wing", "Consensus Bloc"],
    "reformist": ["Reformers", "Renewal Wing", "Modernisers"],
    "pragmatist": ["Pragmatists", "Realists", "Results Caucus"],
}


# -------------------------
# Seats
# -------------------------


def majority_threshold(total_seats: int) -> int:
    return int(total_seats) // 2 + 1


def government_seats(parties: List[Party]) -> int:
    return sum(int(p.seats) for p in parties if p.is_government)


def total_seats(parties: List[Party]) -> int:
    return sum(int(p.seats) for p in parties)


def faction_seats(faction: Faction, parties: Optional[List[Party]], total: int) -> int:
    """Seats held by a faction: its share of the owning party's seats."""
    party_seats: Optional[int] = None
    for p in parties or []:
        if p.id == faction.party_id:
            party_seats = int(p.seats)
            break
    if party_seats is None:
        # party unknown: treat size as a share of the whole chamber
        party_seats = int(total)
    return int(round(float(faction.size) / 100.0 * party_seats))


# -------------------------
# Generation
# -------------------------


def generate_factions_for_party(party: Party, rng: RandomSource) -> List[Faction]:
    three = rng.random() > 0.7
    sizes = [50.0, 30.0, 20.0] if three else [60.0, 40.0]
    if three:
        types = ["moderate", "hardliner", "reformist" if rng.random() > 0.5 else "pragmatist"]
    else:
        types = ["moderate", "hardliner" if rng.random() > 0.5 else "pragmatist"]

    out: List[Faction] = []
    for i, (ftype, size) in enumerate(zip(types, sizes)):
        if party.is_government:
            if ftype == "moderate":
                stance = "supportive"
            elif ftype == "hardliner":
                stance = "supportive" if rng.random() > 0.3 else "neutral"
            else:
                stance = "neutral" if rng.random() > 0.6 else "supportive"
            loyalty = rng.uniform(60.0, 90.0)
        else:
            if ftype == "hardliner":
                stance = "hostile"
            elif ftype == "moderate":
                stance = "neutral" if rng.random() > 0.5 else "hostile"
            else:
                stance = "neutral"
            loyalty = rng.uniform(40.0, 80.0)

        out.append(
            Faction(
                id=f"faction-{party.id}-{i}",
                name=f"{party.name} - {rng.choice(FACTION_LABELS[ftype])}",
                party_id=party.id,
                faction_type=ftype,
                ideology=party.ideology,
                size=size,
                influence=rng.uniform(40.0, 80.0),
                priorities=list(POLICY_PRIORITIES.get(party.ideology, POLICY_PRIORITIES["Centrist"])[:3]),
                stance=stance,
                loyalty_to_leader=loyalty,
            )
        )
    return out


def default_parties(party_name: str, seats: int = 100) -> List[Party]:
    gov = int(round(seats * 0.55))
    opp1 = int(round(seats * 0.30))
    return [
        Party(id="gov_party", name=party_name or "Governing Party", ideology="Centrist", seats=gov, is_government=True),
        Party(id="opp_party_1", name="Conservative Opposition", ideology="Conservative", seats=opp1),
        Party(id="opp_party_2", name="Socialist Opposition", ideology="Socialist", seats=seats - gov - opp1),
    ]


def generate_parliament(party_name: str, today: date, rng: RandomSource, *, seats: int = 100, election_years: int = 4) -> Parliament:
    parties = default_parties(party_name, seats)
    factions: List[Faction] = []
    for p in parties:
        factions.extend(generate_factions_for_party(p, rng))
    total = total_seats(parties)
    return Parliament(
        total_seats=total,
        parties=parties,
        factions=factions,
        government_support=calculate_government_support(factions, parties, total),
        party_cohesion=75.0,
        next_election_date=_add_years(today, election_years),
    )


def _add_years(d: date, years: int) -> date:
    try:
        return d.replace(year=d.year + years)
    except ValueError:  # 29 Feb
        return d.replace(year=d.year + years, day=28)


def next_election_after(d: date, years: int) -> date:
    return _add_years(d, years)


# -------------------------
# Voting
# -------------------------


def faction_base_support(faction: Faction, bill: Bill, proposed_by_government: bool) -> float:
    support = 50.0
    if proposed_by_government:
        if faction.stance == "supportive":
            support += 30
        elif faction.stance == "hostile":
            support -= 30
    else:
        if faction.stance == "hostile":
            support += 20
        elif faction.stance == "supportive":
            support -= 20

    if bill.policy_area in faction.priorities:
        support += 15

    if bill.bill_type == "reform":
        if faction.faction_type == "reformist":
            support += 15
        elif faction.faction_type == "hardliner":
            support -= 15

    if bill.urgency == "crisis":
        support += 10

    return max(0.0, min(100.0, support))


@dataclass(frozen=True)
class FactionVote:
    faction_id: str
    vote: str  # yes | no | abstain
    seats: int
    base_support: float


@dataclass(frozen=True)
class VoteOutcome:
    approved: bool
    yes: int
    no: int
    abstain: int
    faction_votes: List[FactionVote] = field(default_factory=list)

    @property
    def votes(self) -> Dict[str, int]:
        return {"yes": self.yes, "no": self.no, "abstain": self.abstain}


def simulate_bill_vote(
    bill: Bill,
    factions: List[Faction],
    total_seats: int,
    proposed_by_government: bool,
    rng: RandomSource,
    parties: Optional[List[Party]] = None,
) -> VoteOutcome:
    yes = no = abstain = 0
    votes: List[FactionVote] = []
    for f in factions:
        support = faction_base_support(f, bill, proposed_by_government)
        if support >= 60:
            vote = "yes"
        elif support <= 40:
            vote = "no"
        elif rng.random() > 0.5:
            vote = "abstain"
        else:
            vote = "yes" if rng.random() > 0.5 else "no"

        seats = faction_seats(f, parties, total_seats)
        if vote == "yes":
            yes += seats
        elif vote == "no":
            no += seats
        else:
            abstain += seats
        votes.append(FactionVote(faction_id=f.id, vote=vote, seats=seats, base_support=support))

    approved = total_seats > 0 and (yes / float(total_seats)) * 100.0 >= float(bill.required_majority)
    return VoteOutcome(approved=approved, yes=yes, no=no, abstain=abstain, faction_votes=votes)


# -------------------------
# Monthly drift / support
# -------------------------


def update_faction_stances(
    factions: List[Faction],
    popularity: float,
    failed_bills: int,
    rng: RandomSource,
) -> List[Faction]:
    out: List[Faction] = []
    for f in factions:
        stance = f.stance
        if f.stance == "supportive":
            if (popularity < 30 or failed_bills >= 2) and rng.random() < 0.3:
                stance = "neutral"
        elif f.stance == "neutral":
            if popularity > 60:
                if rng.random() < 0.2:
                    stance = "supportive"
            elif popularity < 35:
                if rng.random() < 0.2:
                    stance = "hostile"
        elif f.stance == "hostile":
            if popularity > 70 and rng.random() < 0.1:
                stance = "neutral"
        out.append(f if stance == f.stance else replace(f, stance=stance))
    return out


def calculate_government_support(factions: List[Faction], parties: Optional[List[Party]], total: int) -> float:
    """Seat-weighted support in percent. Neutral factions count half."""
    if total <= 0:
        return 0.0
    seats = 0.0
    for f in factions:
        s = faction_seats(f, parties, total)
        if f.stance == "supportive":
            seats += s
        elif f.stance == "neutral":
            seats += s * 0.5
    return round(seats / float(total) * 100.0, 1)


def regenerate_political_capital(political_capital: float, popularity: float, cohesion: float) -> float:
    """Monthly regeneration: 5% of popularity plus 5% of party cohesion, capped at 100."""
    gain = float(popularity) * 0.05 + float(cohesion) * 0.05
    return max(0.0, min(100.0, float(political_capital) + gain))


def party_cohesion(factions: List[Faction], party_id: str) -> float:
    members = [f for f in factions if f.party_id == party_id]
    if not members:
        return 50.0
    return sum(float(f.loyalty_to_leader) for f in members) / len(members)


# -------------------------
# Negotiation
# -------------------------


@dataclass(frozen=True)
class NegotiationResult:
    success: bool
    faction_id: str
    cost_paid: float
    new_stance: Optional[str] = None
    message: str = ""


def promote_stance(stance: str) -> str:
    if stance == "hostile":
        return "neutral"
    if stance == "neutral":
        return "supportive"
    return stance


def negotiate_with_faction(faction: Faction, cost: float, political_capital: float, rng: RandomSource) -> NegotiationResult:
    if cost <= 0:
        return NegotiationResult(False, faction.id, 0.0, message="An offer must cost political capital")
    if political_capital < cost:
        return NegotiationResult(False, faction.id, 0.0, message="Not enough political capital")
    if rng.random() < NEGOTIATION_SUCCESS:
        return NegotiationResult(
            True, faction.id, float(cost), new_stance=promote_stance(faction.stance),
            message=f"{faction.name} accepts the deal",
        )
    return NegotiationResult(False, faction.id, float(cost), message=f"{faction.name} rejects the offer")
