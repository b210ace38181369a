"""engine.config

Engine configuration passed from UI.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Tuple

from core.state import START_DATE


@dataclass(frozen=True)
class EngineConfig:
    base_seed: int = 42
    start_date: date = START_DATE
    # real milliseconds per simulated day, indexed by speed (0 = paused)
    ms_per_day: Tuple[int, int, int, int] = (0, 1000, 500, 200)
    frame_interval_ms: int = 50
    daily_event_chance: float = 0.05
    monthly_storyline_event_chance: float = 0.5
    scandal_chance: float = 0.10
    parliamentary_event_chance: float = 0.25
    # multiplies monthly minister scandal and resignation odds; 0 switches them off
    minister_event_scale: float = 1.0
    bill_proposal_cost: float = 10.0
    diplomacy_cost: float = 5.0
    situation_tick_days: int = 7
    parliament_seats: int = 100
    campaign_lead_months: int = 3
    election_interval_years: int = 4

    def day_interval_ms(self, speed: int) -> int:
        if speed <= 0 or speed >= len(self.ms_per_day):
            return 0
        return int(self.ms_per_day[speed])
