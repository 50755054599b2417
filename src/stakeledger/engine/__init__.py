"""Reward accrual engine: tick clock, reward index, stake ledger, rate control."""

from .accounting import GlobalState, StakeLedger, StakerAccount, accrued_reward
from .clock import BlockClock
from .rate import RateController
from .rewards import RewardIndex

__all__ = [
    "BlockClock",
    "GlobalState",
    "StakerAccount",
    "StakeLedger",
    "RewardIndex",
    "RateController",
    "accrued_reward",
]
