"""engine.actions

The closed set of transitions the reducer understands.

Every action is a small frozen dataclass; the reducer dispatches on its type.
Anything else passed to reduce() is a no-op.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Union


@dataclass(frozen=True)
class StartGame:
    country_id: str
    ideology: str = "Centrist"
    player_name: str = "President"
    party_name: str = ""


@dataclass(frozen=True)
class AdvanceDay:
    pass


@dataclass(frozen=True)
class AdvanceMonth:
    pass


@dataclass(frozen=True)
class SetSpeed:
    speed: int


@dataclass(frozen=True)
class TogglePause:
    pass


@dataclass(frozen=True)
class UpdatePolicy:
    key: str  # tax_rate | public_spending
    value: float


@dataclass(frozen=True)
class ResolveEvent:
    choice_index: int


@dataclass(frozen=True)
class DiplomacyAction:
    country_id: str
    action: str  # IMPROVE | HARM | TRADE_TREATY | DEFENSE_TREATY


@dataclass(frozen=True)
class AppointMinister:
    minister_id: str


@dataclass(frozen=True)
class FireMinister:
    minister_id: str


@dataclass(frozen=True)
class ProposeBill:
    bill_id: str


@dataclass(frozen=True)
class VoteOnBill:
    pass


@dataclass(frozen=True)
class NegotiateWithFaction:
    faction_id: str
    political_capital: float


@dataclass(frozen=True)
class OpenNotification:
    notification_id: str


@dataclass(frozen=True)
class DismissNotification:
    notification_id: str


@dataclass(frozen=True)
class ResolveProtest:
    group_id: str
    action: str  # negotiate | suppress | concede | ignore


@dataclass(frozen=True)
class LoadSnapshot:
    snapshot: Any  # GameState or its snapshot_to_dict() form


@dataclass(frozen=True)
class ClearVoteResult:
    pass


@dataclass(frozen=True)
class CensorMedia:
    pass


@dataclass(frozen=True)
class FundPublicMedia:
    amount: float


@dataclass(frozen=True)
class CampaignRally:
    target_group: str
    budget: float


@dataclass(frozen=True)
class CampaignSmear:
    pass


@dataclass(frozen=True)
class StartProject:
    project_id: str


@dataclass(frozen=True)
class PauseProject:
    project_id: str


@dataclass(frozen=True)
class ForeignInvestment:
    country_id: str
    amount: float


@dataclass(frozen=True)
class ApplyDebtTrap:
    country_id: str


@dataclass(frozen=True)
class EnterEmergencyMode:
    kind: str  # earthquake | flood | pandemic | drought
    severity: float = 75.0
    turns_remaining: int = 3


@dataclass(frozen=True)
class ExitEmergencyMode:
    allocation: Dict[str, float] = field(default_factory=dict)


Action = Union[
    StartGame,
    AdvanceDay,
    AdvanceMonth,
    SetSpeed,
    TogglePause,
    UpdatePolicy,
    ResolveEvent,
    DiplomacyAction,
    AppointMinister,
    FireMinister,
    ProposeBill,
    VoteOnBill,
    NegotiateWithFaction,
    OpenNotification,
    DismissNotification,
    ResolveProtest,
    LoadSnapshot,
    ClearVoteResult,
    CensorMedia,
    FundPublicMedia,
    CampaignRally,
    CampaignSmear,
    StartProject,
    PauseProject,
    ForeignInvestment,
    ApplyDebtTrap,
    EnterEmergencyMode,
    ExitEmergencyMode,
]
