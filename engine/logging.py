"""engine.logging

Small helpers for storing run logs.

A run log is JSON-serializable so it can be exported/imported later.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any, Dict

from core.state import GameState

from .config import EngineConfig
from .snapshot import snapshot_to_dict


def make_run_export(*, seed: int, config: EngineConfig, initial_state: GameState, final_state: GameState) -> Dict[str, Any]:
    cfg = asdict(config)
    cfg["start_date"] = config.start_date.isoformat()
    cfg["ms_per_day"] = list(config.ms_per_day)
    return {
        "version": 1,
        "seed": int(seed),
        "config": cfg,
        "initial_state": snapshot_to_dict(initial_state),
        "final_date": final_state.time.date.isoformat(),
        "logs": list(final_state.logs),
    }


def dumps_run_export(obj: Dict[str, Any]) -> str:
    return json.dumps(obj, ensure_ascii=False, indent=2, sort_keys=True)
