"""engine.sim_runner

Headless runner for quick sanity checks.

Drives a GameSession day by day without the scheduler: pending events are resolved with
the first affordable choice and emergencies get an even allocation, so a run never stalls.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Tuple

from core.events import meets_requirements
from core.situations import EMERGENCY_CATEGORIES

from .actions import AdvanceDay, AdvanceMonth, AppointMinister, ExitEmergencyMode, ResolveEvent, StartGame
from .config import EngineConfig
from .session import GameSession

EVEN_SPLIT = {k: 25.0 for k in EMERGENCY_CATEGORIES}


def _settle(session: GameSession) -> None:
    """Clear whatever blocks the calendar."""
    state = session.state
    ev = state.events.active_event
    if ev is not None:
        idx = next((i for i, ch in enumerate(ev.choices) if meets_requirements(ch, state)), 0)
        session.dispatch(ResolveEvent(idx))
    if session.state.events.emergency.active:
        session.dispatch(ExitEmergencyMode(dict(EVEN_SPLIT)))


def run_headless_sim(
    months: int = 12,
    *,
    seed: int = 123,
    country_id: str = "col",
    ideology: str = "Centrist",
    cabinet: Tuple[str, ...] = ("m_ortega", "m_reyes", "m_klein", "m_mbeki", "m_silva", "m_chen"),
) -> Dict[str, Any]:
    """Run a deterministic simulation and return summary."""
    cfg = EngineConfig(base_seed=seed)
    session = GameSession(config=cfg)
    session.dispatch(StartGame(country_id=country_id, ideology=ideology, player_name="Headless"))
    for mid in cabinet:
        session.dispatch(AppointMinister(mid))

    end = _add_months(session.state.time.date, months)
    while session.state.time.date < end:
        _settle(session)
        before = session.state.time.date
        after = session.dispatch(AdvanceDay()).time.date
        if after == before:
            break  # stuck on a decision nobody can afford
        if (after.year, after.month) != (before.year, before.month):
            session.dispatch(AdvanceMonth())
    _settle(session)

    return {
        "months": months,
        "final": session.state,
        "logs": list(session.state.logs),
        "export": session.export_run(),
    }


def _add_months(d: date, months: int) -> date:
    y, m = divmod(d.month - 1 + int(months), 12)
    return date(d.year + y, m + 1, 1)
