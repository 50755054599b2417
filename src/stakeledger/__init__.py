"""Staking ledger with index-based proportional reward accrual."""

from .contract.staking import StakingContract
from .engine.clock import BlockClock
from .errors import (
    ConfigurationError,
    InsufficientStake,
    InvalidAmount,
    NothingToClaim,
    ReentrantCall,
    StakingError,
    TokenNotConfigured,
    TransferFailed,
    Unauthorized,
)
from .token.basic_token import BasicToken
from .units import format_units, parse_units

__version__ = "0.1.0"

__all__ = [
    "StakingContract",
    "BlockClock",
    "BasicToken",
    "parse_units",
    "format_units",
    "StakingError",
    "InvalidAmount",
    "InsufficientStake",
    "Unauthorized",
    "ReentrantCall",
    "TransferFailed",
    "NothingToClaim",
    "ConfigurationError",
    "TokenNotConfigured",
]
