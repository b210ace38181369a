"""
core.geopolitics
Bilateral relations, treaties and economic influence over other countries.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Dict, List, Optional

from .effects import bounded
from .rng import RandomSource
from .state import Country

DIPLOMACY_ACTIONS = ("IMPROVE", "HARM", "TRADE_TREATY", "DEFENSE_TREATY")

IMPROVE_STEP = 5.0
HARM_STEP = -10.0
INFLUENCE_DECAY = 0.5
DEBT_TRAP_THRESHOLD = 0.5

_REGIME: Dict[str, str] = {
    "Socialist": "socialist",
    "Capitalist": "capitalist",
    "Centrist": "democratic",
    "Authoritarian": "authoritarian",
}


def find_country(countries: List[Country], country_id: str) -> Optional[Country]:
    for c in countries:
        if c.id == country_id:
            return c
    return None


def _update(countries: List[Country], country_id: str, fn: Callable[[Country], Country]) -> List[Country]:
    return [fn(c) if c.id == country_id else c for c in countries]


def initial_relation(player_region: str, player_ideology: str, country: Country, rng: RandomSource) -> float:
    base = 50.0
    if country.region == player_region:
        base += 15.0
    mine = _REGIME.get(player_ideology, "democratic")
    theirs = _REGIME.get(country.ideology, "democratic")
    if mine == theirs:
        base += 20.0
    elif {mine, theirs} == {"authoritarian", "democratic"}:
        base -= 20.0
    return bounded("relation", base + rng.uniform(-10.0, 10.0))


def seed_relations(countries: List[Country], player_region: str, player_ideology: str, rng: RandomSource) -> List[Country]:
    return [replace(c, relation=initial_relation(player_region, player_ideology, c, rng)) for c in countries]


def apply_diplomacy_action(country: Country, action: str) -> Country:
    if action == "IMPROVE":
        return replace(country, relation=bounded("relation", country.relation + IMPROVE_STEP))
    if action == "HARM":
        return replace(country, relation=bounded("relation", country.relation + HARM_STEP))
    if action == "TRADE_TREATY":
        return replace(country, trade_treaty=not country.trade_treaty)
    if action == "DEFENSE_TREATY":
        return replace(country, defense_treaty=not country.defense_treaty)
    return country


def decay_influence(countries: List[Country]) -> List[Country]:
    return [replace(c, player_influence=max(0.0, c.player_influence - INFLUENCE_DECAY)) for c in countries]


def foreign_direct_investment(
    countries: List[Country], country_id: str, amount: float, debt_share: float = 0.0
) -> List[Country]:
    """Influence grows by amount / 100 and the player holds debt_share more of the country's debt.

    The caller pays the budget.
    """
    return _update(
        countries,
        country_id,
        lambda c: replace(
            c,
            player_influence=bounded("influence", c.player_influence + float(amount) / 100.0),
            debt_held_by_player=max(0.0, c.debt_held_by_player + float(debt_share)),
        ),
    )


def can_debt_trap(country: Country) -> bool:
    return country.debt_held_by_player >= DEBT_TRAP_THRESHOLD and not country.is_satellite


def apply_debt_trap(countries: List[Country], country_id: str) -> List[Country]:
    return _update(
        countries,
        country_id,
        lambda c: replace(c, player_influence=100.0, is_satellite=True) if can_debt_trap(c) else c,
    )


def relation_status(relation: float) -> str:
    if relation >= 90:
        return "Ally"
    if relation >= 60:
        return "Partner"
    if relation >= 40:
        return "Neutral"
    if relation >= 20:
        return "Rival"
    return "Enemy"
