"""
core.effects
Numeric deltas and clamp rules:
- one clamp table for every bounded quantity
- apply_delta: route a flat {key: delta} dict onto the nested GameState
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Dict, Tuple

from .state import Delta, GameState, clamp

INF = math.inf

CLAMPS: Dict[str, Tuple[float, float]] = {
    "stability": (0.0, 100.0),
    "popularity": (0.0, 100.0),
    "approval": (0.0, 100.0),
    "censorship": (0.0, 100.0),
    "freedom": (0.0, 100.0),
    "support": (0.0, 100.0),
    "social_tension": (0.0, 100.0),
    "human_rights": (0.0, 100.0),
    "relation": (0.0, 100.0),
    "influence": (0.0, 100.0),
    "progress": (0.0, 100.0),
    "severity": (0.0, 100.0),
    "intensity": (0.0, 100.0),
    "unemployment": (0.01, 0.30),
    "tax_rate": (0.0, 1.0),
    "public_spending": (0.0, INF),
    "gdp": (0.01, INF),
    "inflation": (-0.10, INF),
    "research_points": (0.0, INF),
}

# flat delta key -> (GameState attribute, nested attribute)
_ROUTES: Dict[str, Tuple[str, str]] = {
    "budget": ("resources", "budget"),
    "political_capital": ("resources", "political_capital"),
    "stability": ("resources", "stability"),
    "research_points": ("resources", "research_points"),
    "gdp": ("stats", "gdp"),
    "population": ("stats", "population"),
    "inflation": ("stats", "inflation"),
    "unemployment": ("stats", "unemployment"),
    "popularity": ("stats", "popularity"),
    "human_rights": ("social", "human_rights"),
    "social_tension": ("social", "social_tension"),
    "tax_rate": ("policies", "tax_rate"),
    "public_spending": ("policies", "public_spending"),
}

DELTA_KEYS = tuple(_ROUTES)


def bounded(key: str, value: float) -> float:
    """Clamp value to the range registered for key (unbounded if none)."""
    lo, hi = CLAMPS.get(key, (-INF, INF))
    return float(clamp(float(value), lo, hi))


def current_value(state: GameState, key: str) -> float:
    """Read the field a delta key routes to; KeyError for unknown keys."""
    section, attr = _ROUTES[key]
    return float(getattr(getattr(state, section), attr))


def apply_delta(state: GameState, delta: Delta) -> GameState:
    """Apply a flat delta with clamp rules (pure function). Unknown keys are ignored."""
    groups: Dict[str, Dict[str, float]] = {}
    for key, amount in dict(delta).items():
        route = _ROUTES.get(key)
        if route is None or not amount:
            continue
        section, attr = route
        current = groups.get(section, {}).get(attr, getattr(getattr(state, section), attr))
        groups.setdefault(section, {})[attr] = bounded(key, float(current) + float(amount))

    if not groups:
        return state
    return replace(state, **{section: replace(getattr(state, section), **vals) for section, vals in groups.items()})
