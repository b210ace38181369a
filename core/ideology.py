"""
core.ideology
Government ideology presets (starting adjustments + social leaning).

Kept in core so balancing lives in one place, but UI can still display labels.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class IdeologySpec:
    key: str
    desc: str
    leaning: str                     # Left | Center | Right (interest-group baseline)
    popularity: float = 0.0
    stability: float = 0.0
    political_capital: float = 0.0
    tax_rate: float = 0.0
    unemployment: float = 0.0
    spending_mult: float = 1.0
    gdp_mult: float = 1.0


DEFAULT_IDEOLOGIES: Dict[str, IdeologySpec] = {
    "Socialist": IdeologySpec(
        key="Socialist",
        desc="Popular at home, expensive state. Higher taxes and spending.",
        leaning="Left",
        popularity=10.0,
        tax_rate=0.05,
        spending_mult=1.1,
    ),
    "Capitalist": IdeologySpec(
        key="Capitalist",
        desc="Lean state, faster economy. Lower taxes.",
        leaning="Right",
        tax_rate=-0.05,
        unemployment=-0.005,
        gdp_mult=1.02,
    ),
    "Centrist": IdeologySpec(
        key="Centrist",
        desc="Balanced start with a little extra stability and capital.",
        leaning="Center",
        stability=5.0,
        political_capital=10.0,
    ),
    "Authoritarian": IdeologySpec(
        key="Authoritarian",
        desc="Order first. Very stable, less loved, lots of capital.",
        leaning="Center",
        popularity=-5.0,
        stability=15.0,
        political_capital=20.0,
    ),
}


def get_ideology_spec(key: str) -> IdeologySpec:
    return DEFAULT_IDEOLOGIES.get(key, DEFAULT_IDEOLOGIES["Centrist"])
