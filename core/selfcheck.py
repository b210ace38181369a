"""
core.selfcheck
Minimal "it runs" proof for the domain rules.

Run:
  python -m core.selfcheck
"""

from __future__ import annotations

from dataclasses import asdict, replace
from datetime import date

from .economy import apply_monthly_economy
from .projects import process_grand_projects, start_project
from .rng import rng_from
from .situations import maybe_spawn_situations, tick_situations
from .social import (
    calculate_social_tension,
    check_for_protests,
    generate_interest_groups,
    update_protests,
    weighted_popularity,
)
from .state import GameState, NationalProject, Policies, Resources, SocialState, Stats, TimeState


def run_24_months_smoke() -> None:
    base_seed = 42
    start = date(2025, 1, 1)

    groups = generate_interest_groups(51.0, "Left")
    state = GameState(
        started=True,
        resources=Resources(budget=85.0, political_capital=60.0, stability=45.0),
        stats=Stats(gdp=340.0, population=51.0, inflation=0.07, unemployment=0.11, popularity=50.0),
        # deliberately overspending so the crisis rules get exercised
        policies=Policies(tax_rate=0.45, public_spending=160.0),
        social=SocialState(interest_groups=groups),
        time=TimeState(date=start, start_date=start),
    )
    state = start_project(state, NationalProject(id="HIGH_SPEED_RAIL", name="High-Speed Rail", cost_per_turn=15.0))

    for m in range(1, 25):
        rng = rng_from("selfcheck", m, base_seed=base_seed)
        state = replace(state, time=replace(state.time, date=date(2025 + (m // 12), m % 12 + 1, 1)))

        state, econ = apply_monthly_economy(state)
        protests = check_for_protests(state.social.interest_groups, state.social.active_protests, state.time.date, rng)
        protests = update_protests(protests, state.social.interest_groups, rng)
        state = replace(
            state,
            social=replace(
                state.social,
                active_protests=protests,
                social_tension=calculate_social_tension(state.social.interest_groups, protests),
            ),
            stats=replace(state.stats, popularity=weighted_popularity(state.social.interest_groups)),
        )
        state, _ = process_grand_projects(state)
        state, _ = maybe_spawn_situations(state)
        for _week in range(4):
            state, _ = tick_situations(state)

        # invariants
        assert 0.0 <= state.resources.stability <= 100.0
        assert 0.0 <= state.stats.popularity <= 100.0
        assert 0.01 <= state.stats.unemployment <= 0.30
        assert state.stats.gdp >= 0.01
        assert 0.0 <= state.social.social_tension <= 100.0
        assert len(protests) == len({p.group_id for p in protests.values()})
        assert all(0.0 <= s.progress <= 100.0 and 0.0 <= s.severity <= 100.0 for s in state.events.situations)
        assert econ.inflation >= 0.02 or econ.growth_rate < 0

    print("OK: 24-month core smoke test passed.")
    print("Final stats:", asdict(state.stats))
    print("Situations:", [s.id for s in state.events.situations])


if __name__ == "__main__":
    run_24_months_smoke()
