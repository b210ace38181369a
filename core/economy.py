"""
core.economy
Annual economy model plus the monthly slice the pipeline applies.

compute_economy is pure: (gdp, tax_rate, public_spending) -> EconomyResult.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from .effects import bounded
from .state import GameState

BASE_GROWTH = 0.02
TAX_PENALTY_THRESHOLD = 0.30
TAX_PENALTY_COEF = 0.5
STIMULUS_THRESHOLD = 0.20
STIMULUS_COEF = 0.2
BASE_INFLATION = 0.02
OVERHEAT_THRESHOLD = 0.40
OVERHEAT_SURCHARGE = 0.02

# unemployment drifts against growth: growth below this raises it
NATURAL_GROWTH = 0.02
UNEMPLOYMENT_SENSITIVITY = 0.05


@dataclass(frozen=True)
class EconomyResult:
    revenue: float
    expenses: float
    budget_surplus: float
    new_gdp: float
    inflation: float
    growth_rate: float

    def to_dict(self) -> dict:
        return {
            "revenue": self.revenue,
            "expenses": self.expenses,
            "budget_surplus": self.budget_surplus,
            "new_gdp": self.new_gdp,
            "inflation": self.inflation,
            "growth_rate": self.growth_rate,
        }


def compute_economy(gdp: float, tax_rate: float, public_spending: float) -> EconomyResult:
    gdp = float(gdp)
    tax_rate = float(tax_rate)
    public_spending = float(public_spending)

    revenue = gdp * tax_rate
    expenses = public_spending
    budget_surplus = revenue - expenses

    growth = BASE_GROWTH
    if tax_rate > TAX_PENALTY_THRESHOLD:
        growth -= (tax_rate - TAX_PENALTY_THRESHOLD) * TAX_PENALTY_COEF

    spending_ratio = public_spending / gdp if gdp > 0 else 0.0
    if spending_ratio > STIMULUS_THRESHOLD:
        growth += (spending_ratio - STIMULUS_THRESHOLD) * STIMULUS_COEF

    inflation = BASE_INFLATION + growth * 0.5
    if spending_ratio > OVERHEAT_THRESHOLD:
        inflation += OVERHEAT_SURCHARGE

    return EconomyResult(
        revenue=float(revenue),
        expenses=float(expenses),
        budget_surplus=float(budget_surplus),
        new_gdp=float(gdp * (1.0 + growth)),
        inflation=float(inflation),
        growth_rate=float(growth),
    )


def apply_monthly_economy(state: GameState) -> tuple[GameState, EconomyResult]:
    """Apply one twelfth of the annual result to state (pure)."""
    result = compute_economy(state.stats.gdp, state.policies.tax_rate, state.policies.public_spending)

    gdp = bounded("gdp", state.stats.gdp * (1.0 + result.growth_rate / 12.0))
    unemployment = bounded(
        "unemployment",
        state.stats.unemployment + (NATURAL_GROWTH - result.growth_rate) * UNEMPLOYMENT_SENSITIVITY,
    )
    stats = replace(
        state.stats,
        gdp=gdp,
        inflation=bounded("inflation", result.inflation),
        unemployment=unemployment,
    )
    resources = replace(state.resources, budget=float(state.resources.budget + result.budget_surplus / 12.0))
    return replace(state, stats=stats, resources=resources), result
