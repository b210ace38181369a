"""engine.session

GameSession: the single owner of the current snapshot.

dispatch() runs one action through the reducer and swaps the snapshot. Calls are applied
strictly one after another, whether they come from the scheduler or from the UI.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from core.rng import RandomSource, rng_from
from core.state import GameState, initial_state

from content.catalog import ContentCatalog, default_catalog

from .actions import StartGame
from .config import EngineConfig
from .logging import make_run_export
from .reducer import reduce


class GameSession:
    def __init__(
        self,
        catalog: Optional[ContentCatalog] = None,
        config: Optional[EngineConfig] = None,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self.catalog = catalog if catalog is not None else default_catalog()
        self.config = config if config is not None else EngineConfig()
        self.rng = rng if rng is not None else rng_from("session", base_seed=int(self.config.base_seed))
        self.state: GameState = initial_state(self.config.start_date)
        self.initial: Optional[GameState] = None

    def dispatch(self, action: Any) -> GameState:
        new = reduce(self.state, action, catalog=self.catalog, config=self.config, rng=self.rng)
        if isinstance(action, StartGame) and new is not self.state:
            self.initial = new
        self.state = new
        return new

    def export_run(self) -> Dict[str, Any]:
        return make_run_export(
            seed=int(self.config.base_seed),
            config=self.config,
            initial_state=self.initial if self.initial is not None else self.state,
            final_state=self.state,
        )
