"""
core.cabinet
Minister performance and the monthly cabinet check.

Responsibilities:
- ministry effectiveness (competence and loyalty, dragged down by heavy corruption)
- corruption-driven scandals with a severity ladder
- resignations from low loyalty, scandal pressure or personal ambition
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, List, Tuple

from .effects import apply_delta, bounded
from .rng import RandomSource
from .state import GameState, Minister

# trait -> (scandal multiplier, resignation multiplier)
TRAIT_MODIFIERS: Dict[str, Tuple[float, float]] = {
    "Technocrat": (0.5, 1.0),
    "Incompetent": (1.5, 0.8),
    "Loyal": (1.0, 0.3),
    "Opportunist": (1.2, 2.0),
    "Ambitious": (1.0, 1.5),
    "Corrupt": (3.0, 1.2),
    "Honest": (0.2, 1.0),
}

# severity -> (popularity loss, stability loss)
SCANDAL_PENALTIES: Dict[str, Tuple[float, float]] = {
    "minor": (2.0, 1.0),
    "major": (5.0, 3.0),
    "critical": (10.0, 5.0),
}
SCANDAL_PC_COST = 10.0

SCANDAL_HEADLINES = {
    "minor": "is accused of nepotism",
    "major": "is charged with corruption",
    "critical": "is arrested for grand corruption",
}

RESIGNATION_REASONS = {
    "disloyalty": "resigns over disagreements with the government",
    "scandal_pressure": "resigns under the weight of scandals",
    "ambition": "resigns to launch a presidential bid",
}


@dataclass(frozen=True)
class CabinetIncident:
    minister_id: str
    minister_name: str
    ministry: str
    kind: str    # scandal | resignation
    detail: str  # severity for scandals, reason for resignations


def ministry_effectiveness(m: Minister) -> float:
    score = float(m.competence) * 0.7 + float(m.loyalty) * 0.3
    if m.corruption > 50:
        score -= float(m.corruption) - 50.0
    return bounded("approval", score)


def cabinet_effectiveness(ministers: List[Minister]) -> float:
    if not ministers:
        return 0.0
    return sum(ministry_effectiveness(m) for m in ministers) / len(ministers)


def _trait_factor(m: Minister, index: int) -> float:
    factor = 1.0
    for t in m.traits:
        if t in TRAIT_MODIFIERS:
            factor *= TRAIT_MODIFIERS[t][index]
    return factor


def scandal_chance(m: Minister) -> float:
    """Monthly chance, at most 1% before trait multipliers."""
    return float(m.corruption) / 10000.0 * _trait_factor(m, 0)


def scandal_severity(m: Minister, rng: RandomSource) -> str:
    roll = rng.random()
    if m.corruption > 70:
        return "critical" if roll < 0.5 else "major"
    if m.corruption > 40:
        return "major" if roll < 0.3 else "minor"
    return "minor"


def resignation_chance(m: Minister, popularity: float) -> float:
    chance = (100.0 - float(m.loyalty)) / 2000.0
    chance += int(m.scandals) * 0.02
    if popularity < 30:
        chance += 0.01
    return chance * _trait_factor(m, 1)


def ambition_departure_chance(m: Minister) -> float:
    # a popular, ambitious minister may leave to run against the leader
    if m.ambition > 70 and m.popularity > 60:
        return 0.005
    return 0.0


def check_minister_scandals(ministers: List[Minister], rng: RandomSource, scale: float = 1.0) -> List[CabinetIncident]:
    out: List[CabinetIncident] = []
    for m in ministers:
        if rng.random() < scandal_chance(m) * scale:
            out.append(CabinetIncident(m.id, m.name, m.ministry, "scandal", scandal_severity(m, rng)))
    return out


def check_minister_resignations(
    ministers: List[Minister],
    popularity: float,
    rng: RandomSource,
    scale: float = 1.0,
) -> List[CabinetIncident]:
    out: List[CabinetIncident] = []
    for m in ministers:
        if rng.random() < resignation_chance(m, popularity) * scale:
            reason = "scandal_pressure" if m.scandals > 2 else "disloyalty"
            out.append(CabinetIncident(m.id, m.name, m.ministry, "resignation", reason))
        elif rng.random() < ambition_departure_chance(m) * scale:
            out.append(CabinetIncident(m.id, m.name, m.ministry, "resignation", "ambition"))
    return out


def apply_scandals(state: GameState, scandals: List[CabinetIncident]) -> Tuple[GameState, List[str]]:
    """Each scandal costs popularity, stability and up to 10 PC, and marks the minister's record."""
    msgs: List[str] = []
    out = state
    for s in scandals:
        pop_loss, stab_loss = SCANDAL_PENALTIES.get(s.detail, SCANDAL_PENALTIES["minor"])
        pc_loss = min(SCANDAL_PC_COST, max(out.resources.political_capital, 0.0))
        out = apply_delta(out, {"popularity": -pop_loss, "stability": -stab_loss, "political_capital": -pc_loss})
        ministers = [replace(m, scandals=m.scandals + 1) if m.id == s.minister_id else m for m in out.government.ministers]
        out = replace(out, government=replace(out.government, ministers=ministers))
        msgs.append(f"Scandal at {s.ministry}: {s.minister_name} {SCANDAL_HEADLINES.get(s.detail, SCANDAL_HEADLINES['minor'])}")
    return out, msgs


def apply_resignations(state: GameState, resignations: List[CabinetIncident]) -> Tuple[GameState, List[str]]:
    if not resignations:
        return state, []
    gone = {r.minister_id for r in resignations}
    ministers = [m for m in state.government.ministers if m.id not in gone]
    out = replace(state, government=replace(state.government, ministers=ministers))
    msgs = [f"{r.ministry}: {r.minister_name} {RESIGNATION_REASONS.get(r.detail, RESIGNATION_REASONS['disloyalty'])}" for r in resignations]
    return out, msgs
