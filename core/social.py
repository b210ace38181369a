"""
core.social
Interest groups, protests, media and campaign rules.

Responsibilities:
- protest ignition / escalation / decay (one protest per group id)
- player responses to a protest (negotiate, suppress, concede, ignore)
- population-weighted popularity and social tension
- media levers (censor, fund) and scandal exposure
- electoral campaign actions (rally, smear)
- timed approval modifiers (applied now, reversed on expiry)

All functions are pure; randomness comes from an injected RandomSource.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, List, Optional, Tuple

from .effects import bounded
from .rng import RandomSource
from .state import ApprovalModifier, Campaign, InterestGroup, MediaState, Protest, Stats, TimedModifier

PROTEST_ACTIONS = ("negotiate", "suppress", "concede", "ignore")

NEGOTIATE_COST = 20.0
# suppress and concede go ahead on any political capital; the balance may go negative
SUPPRESS_COST = 30.0
CONCEDE_PC_COST = 10.0
SUPPRESS_HUMAN_RIGHTS = -15.0

RALLY_COST = 0.5
SMEAR_COST = 1.0
SMEAR_PC_COST = 25.0

LEANINGS = ("Left", "Center", "Right")

DEMANDS: Dict[str, List[str]] = {
    "Unions": ["20% wage increase", "Shorter working week", "Better working conditions", "Protection against layoffs"],
    "Business": ["Lower corporate taxes", "Fewer labour regulations", "Open trade", "Business subsidies"],
    "Religious": ["Protect traditional values", "Religious education", "Family support", "More say in public policy"],
    "Students": ["Free quality education", "More university funding", "Youth job programmes", "Education reform"],
    "Military": ["Bigger defence budget", "Better equipment", "Decent pensions", "Tough on crime"],
    "Rural": ["Farm subsidies", "Rural infrastructure", "Fair crop prices", "Access to credit"],
}


def _approval(x: float) -> float:
    return bounded("approval", x)


# -------------------------
# Interest groups
# -------------------------


def generate_interest_groups(total_population: float, leaning: str = "Center") -> List[InterestGroup]:
    """Six fixed groups; initial approval depends on the government's leaning."""
    pop = float(total_population)

    def by_leaning(left: float, center: float, right: float) -> float:
        return {"Left": left, "Center": center, "Right": right}.get(leaning, center)

    return [
        InterestGroup(
            id="unions", group_type="Unions", name="Trade Unions",
            population_size=pop * 0.25, approval=by_leaning(65, 50, 40), power=75, ideology="Left",
            concerns=["Wages", "Labour rights", "Unemployment", "Social security"],
        ),
        InterestGroup(
            id="business", group_type="Business", name="Business Community",
            population_size=pop * 0.15, approval=by_leaning(35, 50, 70), power=80, ideology="Right",
            concerns=["Taxes", "Regulation", "Stability", "Trade"],
        ),
        InterestGroup(
            id="religious", group_type="Religious", name="Religious Groups",
            population_size=pop * 0.30, approval=55, power=60, ideology="Center",
            concerns=["Moral values", "Education", "Family"],
        ),
        InterestGroup(
            id="students", group_type="Students", name="Students and Youth",
            population_size=pop * 0.12, approval=by_leaning(60, 45, 45), power=70, ideology="Left",
            concerns=["Education", "Youth employment", "Environment"],
        ),
        InterestGroup(
            id="military", group_type="Military", name="Armed Forces",
            population_size=pop * 0.05, approval=60, power=95, ideology="Right",
            concerns=["Defence budget", "National security", "Public order"],
        ),
        InterestGroup(
            id="rural", group_type="Rural", name="Rural Sector",
            population_size=pop * 0.13, approval=50, power=55, ideology="Center",
            concerns=["Agriculture", "Rural infrastructure", "Subsidies"],
        ),
    ]


def find_group(groups: List[InterestGroup], group_id: str) -> Optional[InterestGroup]:
    for g in groups:
        if g.id == group_id:
            return g
    return None


def adjust_group_approval(groups: List[InterestGroup], group_id: str, change: float) -> List[InterestGroup]:
    return [replace(g, approval=_approval(g.approval + change)) if g.id == group_id else g for g in groups]


def weighted_popularity(groups: List[InterestGroup]) -> float:
    total = sum(float(g.population_size) for g in groups)
    if total <= 0:
        return 50.0
    return _approval(sum(float(g.approval) * float(g.population_size) for g in groups) / total)


def apply_approval_modifiers(groups: List[InterestGroup], modifiers: List[ApprovalModifier]) -> List[InterestGroup]:
    """Sum the modifiers per group id and apply them with clamping."""
    totals: Dict[str, float] = {}
    for m in modifiers:
        totals[m.group_id] = totals.get(m.group_id, 0.0) + float(m.change)
    return [replace(g, approval=_approval(g.approval + totals[g.id])) if g.id in totals else g for g in groups]


def register_modifiers(
    groups: List[InterestGroup],
    timed: List[TimedModifier],
    modifiers: List[ApprovalModifier],
) -> Tuple[List[InterestGroup], List[TimedModifier]]:
    """Apply modifiers now; the ones with a duration are remembered so they can be reversed.

    A timed modifier stores its share of the change that clamping let through.
    """
    before = {g.id: float(g.approval) for g in groups}
    groups = apply_approval_modifiers(groups, modifiers)
    after = {g.id: float(g.approval) for g in groups}
    requested: Dict[str, float] = {}
    for m in modifiers:
        requested[m.group_id] = requested.get(m.group_id, 0.0) + float(m.change)

    new_timed = list(timed)
    for m in modifiers:
        if m.duration is None or m.duration <= 0 or m.group_id not in after:
            continue
        change = float(m.change)
        asked = requested[m.group_id]
        if asked != 0:
            change *= (after[m.group_id] - before[m.group_id]) / asked
        new_timed.append(TimedModifier(group_id=m.group_id, change=change, months_remaining=int(m.duration), reason=m.reason))
    return groups, new_timed


def tick_approval_modifiers(
    groups: List[InterestGroup],
    timed: List[TimedModifier],
) -> Tuple[List[InterestGroup], List[TimedModifier]]:
    """One month passes: expired modifiers are reversed and dropped."""
    remaining: List[TimedModifier] = []
    for t in timed:
        left = int(t.months_remaining) - 1
        if left <= 0:
            groups = adjust_group_approval(groups, t.group_id, -float(t.change))
        else:
            remaining.append(replace(t, months_remaining=left))
    return groups, remaining


def economic_approval_shifts(stats: Stats) -> List[ApprovalModifier]:
    """Monthly group reactions to the macro picture."""
    out: List[ApprovalModifier] = []
    if stats.unemployment > 0.12:
        out.append(ApprovalModifier("unions", -8, reason="High unemployment"))
        out.append(ApprovalModifier("students", -6, reason="Youth unemployment"))
    if stats.inflation > 0.08:
        out.append(ApprovalModifier("unions", -5, reason="Inflation"))
        out.append(ApprovalModifier("rural", -4, reason="Input prices"))
    return out


def growth_approval_shifts(growth_rate: float) -> List[ApprovalModifier]:
    if growth_rate > 0.04:
        return [ApprovalModifier("business", 5, reason="Strong growth")]
    return []


def popularity_drift(stats: Stats, growth_rate: float, media: MediaState) -> float:
    """Monthly popularity nudge from the economy, amplified by media support."""
    mult = media_multiplier(media)
    drift = 0.0
    if stats.inflation > 0.10:
        drift -= 1.0 * mult
    if stats.unemployment > 0.10:
        drift -= 1.0 * mult
    if growth_rate > 0.03:
        drift += 0.5 * mult
    return drift


# -------------------------
# Protests
# -------------------------


def protest_chance(group: InterestGroup) -> float:
    a = float(group.approval)
    if a < 20:
        base = 0.8
    elif a < 30:
        base = 0.4
    elif a < 40:
        base = 0.1
    else:
        base = 0.0
    return base * float(group.power) / 100.0


def _impacts(intensity: float, power: float) -> Tuple[float, float]:
    return -(intensity * power) / 10000.0, -(intensity * power) / 1000.0


def _pick_demands(group: InterestGroup, rng: RandomSource) -> List[str]:
    pool = list(DEMANDS.get(group.group_type, []))
    n = 2 if rng.random() < 0.5 else 3
    out: List[str] = []
    while pool and len(out) < n:
        item = rng.choice(pool)
        pool.remove(item)
        out.append(item)
    return out


def create_protest(group: InterestGroup, today: date, rng: RandomSource) -> Protest:
    intensity = max(30.0, 100.0 - float(group.approval))
    econ, stab = _impacts(intensity, group.power)
    return Protest(
        id=f"protest_{group.id}_{today.isoformat()}",
        group_id=group.id,
        group_name=group.name,
        start_date=today,
        duration=0,
        intensity=intensity,
        participants=float(group.population_size) * intensity / 200.0,
        demands=_pick_demands(group, rng),
        economic_impact=econ,
        stability_impact=stab,
    )


def check_for_protests(
    groups: List[InterestGroup],
    protests: Dict[str, Protest],
    today: date,
    rng: RandomSource,
) -> Dict[str, Protest]:
    """Roll ignition for every group without an active protest."""
    out = dict(protests)
    for g in groups:
        if g.id in out:
            continue
        chance = protest_chance(g)
        if chance > 0 and rng.random() < chance:
            out[g.id] = create_protest(g, today, rng)
    return out


def update_protests(
    protests: Dict[str, Protest],
    groups: List[InterestGroup],
    rng: RandomSource,
) -> Dict[str, Protest]:
    """Advance each protest one step; protests whose intensity reaches 0 end."""
    out: Dict[str, Protest] = {}
    for gid, p in protests.items():
        group = find_group(groups, gid)
        if group is None:
            out[gid] = p
            continue

        duration = p.duration + 1
        escalating = p.escalating
        if not escalating and duration > 2 and group.approval < 25:
            escalating = rng.random() < 0.3

        intensity = float(p.intensity)
        if escalating:
            intensity = min(100.0, intensity + 10.0)
        if group.approval > 60:
            intensity = max(0.0, intensity - 20.0)

        if intensity <= 0:
            continue

        econ, stab = _impacts(intensity, group.power)
        out[gid] = replace(
            p,
            duration=duration,
            intensity=intensity,
            escalating=escalating,
            participants=float(group.population_size) * intensity / 200.0,
            economic_impact=econ,
            stability_impact=stab,
        )
    return out


@dataclass(frozen=True)
class ProtestResolution:
    success: bool
    protest_ended: bool
    approval_change: float = 0.0
    stability_change: float = 0.0
    political_capital_cost: float = 0.0
    budget_cost: float = 0.0
    human_rights_change: float = 0.0
    escalated: bool = False
    consequences: List[str] = field(default_factory=list)


def resolve_protest_action(
    protest: Protest,
    action: str,
    group: InterestGroup,
    budget: float,
    political_capital: float,
    rng: RandomSource,
) -> ProtestResolution:
    """Outcome of a player response. Refusals come back as success=False with zero costs."""
    if action == "negotiate":
        if political_capital < NEGOTIATE_COST:
            return ProtestResolution(False, False, consequences=["Not enough political capital"])
        if rng.random() < 0.6 + float(group.approval) / 200.0:
            return ProtestResolution(
                True, True, approval_change=15, stability_change=5, political_capital_cost=NEGOTIATE_COST,
                consequences=["Negotiation succeeded", f"{group.name} agrees to talks"],
            )
        return ProtestResolution(
            False, False, approval_change=-5, stability_change=-2, political_capital_cost=NEGOTIATE_COST,
            consequences=["Negotiation failed", "The protest continues"],
        )

    if action == "suppress":
        return ProtestResolution(
            True, True, approval_change=-25, stability_change=-10, political_capital_cost=SUPPRESS_COST,
            human_rights_change=SUPPRESS_HUMAN_RIGHTS,
            consequences=["Riot police deployed", f"{group.name} dispersed by force", "International criticism"],
        )

    if action == "concede":
        cost = float(protest.intensity) / 10.0
        if budget < cost:
            return ProtestResolution(False, False, consequences=["Not enough budget to meet the demands"])
        return ProtestResolution(
            True, True, approval_change=30, stability_change=3, political_capital_cost=CONCEDE_PC_COST,
            budget_cost=cost,
            consequences=["Government concedes", f"{group.name} celebrates", f"Cost: ${cost:.1f}B"],
        )

    # ignore (and anything unrecognised)
    if rng.random() < 0.4:
        return ProtestResolution(
            False, False, approval_change=-10, stability_change=-5, escalated=True,
            consequences=["Protest ignored", "The protest intensifies"],
        )
    return ProtestResolution(
        True, False, approval_change=-3, stability_change=-1,
        consequences=["Protest ignored", "Things stay calm for now"],
    )


def calculate_social_tension(groups: List[InterestGroup], protests: Dict[str, Protest]) -> float:
    if not groups:
        return bounded("social_tension", 10.0 * len(protests))
    avg = sum(float(g.approval) for g in groups) / len(groups)
    tension = 100.0 - avg
    tension += 10.0 * len(protests)
    tension += sum(float(p.intensity) for p in protests.values()) / 100.0
    return bounded("social_tension", tension)


# -------------------------
# Media
# -------------------------


def censor_media(media: MediaState) -> MediaState:
    return replace(
        media,
        censorship=bounded("censorship", media.censorship + 15),
        freedom=bounded("freedom", media.freedom - 20),
        support=bounded("support", media.support + 10),
    )


def fund_public_media(media: MediaState, amount: float) -> MediaState:
    amount = max(0.0, float(amount))
    return replace(
        media,
        public_media_funding=float(media.public_media_funding + amount),
        support=bounded("support", media.support + min(15.0, amount * 10.0)),
    )


def media_multiplier(media: MediaState) -> float:
    return 1.0 + (float(media.support) - 50.0) / 100.0


SCANDALS: List[Tuple[str, float]] = [
    ("Corruption in a public contract", -15.0),
    ("Minister caught peddling influence", -20.0),
    ("Misuse of public funds", -12.0),
    ("Nepotism in appointments", -10.0),
    ("Human rights cover-up", -25.0),
]


@dataclass(frozen=True)
class MediaScandal:
    text: str
    approval_impact: float


def generate_media_scandal(media: MediaState, rng: RandomSource) -> Optional[MediaScandal]:
    """Exposure needs a free press; censorship lowers the odds."""
    if media.freedom < 30:
        return None
    expose = (media.freedom / 100.0) * (1.0 - media.censorship / 100.0)
    if rng.random() > expose * 0.1:
        return None
    text, impact = rng.choice(SCANDALS)
    return MediaScandal(text=text, approval_impact=impact * media_multiplier(media))


# -------------------------
# Campaign
# -------------------------


def start_electoral_campaign(months_until_election: int, rng: RandomSource) -> Campaign:
    return Campaign(
        active=True,
        months_until_election=int(months_until_election),
        opposition_budget=rng.uniform(2.0, 7.0),
    )


@dataclass(frozen=True)
class RallyResult:
    cost: float
    approval_change: float
    momentum_change: float


def hold_rally(budget: float) -> RallyResult:
    """Spend budget (at least RALLY_COST) on a rally; approval gain is budget * 5, capped at 10."""
    if budget < RALLY_COST:
        return RallyResult(0.0, 0.0, 0.0)
    return RallyResult(float(budget), min(10.0, float(budget) * 5.0), 5.0)


@dataclass(frozen=True)
class SmearResult:
    cost: float
    political_capital_cost: float
    opposition_damage: float
    backfired: bool
    popularity_change: float = 0.0
    momentum_change: float = 0.0


def launch_smear_campaign(budget: float, political_capital: float, rng: RandomSource) -> SmearResult:
    if budget < SMEAR_COST or political_capital < SMEAR_PC_COST:
        return SmearResult(0.0, 0.0, 0.0, False)
    if rng.random() < 0.3:
        return SmearResult(SMEAR_COST, SMEAR_PC_COST, 0.0, True, popularity_change=-15.0, momentum_change=-10.0)
    return SmearResult(SMEAR_COST, SMEAR_PC_COST, 10.0, False, momentum_change=5.0)


def update_campaign(campaign: Optional[Campaign], spent: float = 0.0) -> Optional[Campaign]:
    if campaign is None or not campaign.active:
        return campaign
    return replace(
        campaign,
        months_until_election=campaign.months_until_election - 1,
        government_budget=float(campaign.government_budget + spent),
        momentum=max(-50.0, float(campaign.momentum) - 2.0),
    )
