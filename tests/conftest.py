from __future__ import annotations

from typing import Any, Dict, List, Sequence

import pytest

from content.catalog import ContentCatalog, build_catalog, default_catalog
from core.state import GameState
from engine.actions import StartGame
from engine.config import EngineConfig
from engine.session import GameSession


class ScriptedRandom:
    """RandomSource that replays fixed draws, then keeps returning `default`."""

    def __init__(self, values: Sequence[float] = (), default: float = 0.99) -> None:
        self.values: List[float] = list(values)
        self.default = default
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        if self.values:
            return self.values.pop(0)
        return self.default

    def uniform(self, a: float, b: float) -> float:
        return a + (b - a) * self.random()

    def choice(self, seq: Sequence[Any]) -> Any:
        return seq[0]


TEST_COUNTRY: Dict[str, Any] = {
    "id": "tst",
    "name": "Testland",
    "region": "Europe",
    "ideology": "Centrist",
    "stats": {"gdp": 1000, "population": 40, "inflation": 0.03, "unemployment": 0.06, "stability": 60},
}

NEIGHBOUR: Dict[str, Any] = {
    "id": "nbr",
    "name": "Neighbourland",
    "region": "Europe",
    "ideology": "Centrist",
    "stats": {"gdp": 200, "population": 10, "inflation": 0.04, "unemployment": 0.08, "stability": 50},
}


@pytest.fixture
def catalog() -> ContentCatalog:
    return default_catalog()


@pytest.fixture
def quiet_config() -> EngineConfig:
    # no random contextual events, so day ticks are predictable
    return EngineConfig(
        daily_event_chance=0.0,
        monthly_storyline_event_chance=0.0,
        parliamentary_event_chance=0.0,
        minister_event_scale=0.0,
    )


@pytest.fixture
def session(quiet_config: EngineConfig) -> GameSession:
    s = GameSession(config=quiet_config)
    s.dispatch(StartGame(country_id="col", ideology="Centrist", player_name="Tester", party_name="Unity"))
    return s


@pytest.fixture
def started(session: GameSession) -> GameState:
    return session.state


def small_catalog(**tables: Any) -> ContentCatalog:
    tables.setdefault("countries", [TEST_COUNTRY, NEIGHBOUR])
    return build_catalog(**tables)
