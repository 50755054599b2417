"""Staking contract entry points, entry safety and the treasury boundary."""

from .events import Claim, Event, EventLog, RateChanged, Stake, TokenConfigured, Withdraw
from .guard import EntryGuard, Savepoint, nonreentrant
from .staking import StakingContract
from .treasury import TokenLike, Treasury

__all__ = [
    "StakingContract",
    "EntryGuard",
    "Savepoint",
    "nonreentrant",
    "Treasury",
    "TokenLike",
    "Event",
    "EventLog",
    "Stake",
    "Withdraw",
    "Claim",
    "RateChanged",
    "TokenConfigured",
]
