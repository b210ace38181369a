"""
core.projects
Multi-month national projects with a one-time completion payoff.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from .effects import apply_delta, bounded
from .state import Delta, GameState, NationalProject

MONTHLY_PROGRESS = 5.0
SHORTFALL_PENALTY = 2.0

PROJECT_PAYOFFS: Dict[str, Tuple[Delta, str]] = {
    "NUCLEAR_PROGRAM": ({"stability": 5.0}, "Nuclear programme complete. Deterrence is active, sanctions are a risk."),
    "SPACE_AGENCY": ({"research_points": 10.0}, "Space agency complete. Research boosted."),
    "OLYMPICS": ({"popularity": 3.0}, "The Olympics were a success."),
    "HIGH_SPEED_RAIL": ({}, "High-speed rail line opened."),
    "NEW_CAPITAL_CITY": ({}, "The new capital city is inaugurated."),
}


def find_project(projects: List[NationalProject], project_id: str) -> Optional[NationalProject]:
    for p in projects:
        if p.id == project_id:
            return p
    return None


def _set_projects(state: GameState, projects: List[NationalProject]) -> GameState:
    return replace(state, policies=replace(state.policies, active_projects=projects))


def start_project(state: GameState, template: NationalProject) -> GameState:
    """Begin (or resume) building. Completed or already-building projects are left alone."""
    projects = list(state.policies.active_projects)
    existing = find_project(projects, template.id)
    if existing is None:
        projects.append(replace(template, status="BUILDING", progress=0.0, payoff_applied=False))
    elif existing.status in ("PLANNED", "PAUSED"):
        projects = [replace(p, status="BUILDING") if p.id == template.id else p for p in projects]
    else:
        return state
    return _set_projects(state, projects)


def pause_project(state: GameState, project_id: str) -> GameState:
    existing = find_project(state.policies.active_projects, project_id)
    if existing is None or existing.status != "BUILDING":
        return state
    return _set_projects(
        state,
        [replace(p, status="PAUSED") if p.id == project_id else p for p in state.policies.active_projects],
    )


def process_grand_projects(state: GameState) -> Tuple[GameState, List[str]]:
    """One month of construction: pay, progress, complete, and pay off once."""
    messages: List[str] = []
    budget = float(state.resources.budget)
    updated: List[NationalProject] = []
    payoffs: List[Delta] = []

    for p in state.policies.active_projects:
        if p.status != "BUILDING":
            updated.append(p)
            continue

        cost = float(p.cost_per_turn)
        progress = float(p.progress) + MONTHLY_PROGRESS
        if budget < cost:
            progress -= SHORTFALL_PENALTY
            cost = max(0.0, budget)
        budget -= cost

        progress = bounded("progress", progress)
        status = "COMPLETED" if progress >= 100.0 else p.status
        payoff_applied = p.payoff_applied
        if status == "COMPLETED" and not payoff_applied:
            delta, text = PROJECT_PAYOFFS.get(p.id, ({}, f"{p.name} completed."))
            payoffs.append(delta)
            messages.append(text)
            payoff_applied = True
        updated.append(replace(p, progress=progress, status=status, payoff_applied=payoff_applied))

    out = replace(
        _set_projects(state, updated),
        resources=replace(state.resources, budget=budget),
    )
    for delta in payoffs:
        out = apply_delta(out, delta)
    return out, messages
