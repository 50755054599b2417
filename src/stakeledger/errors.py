"""Error taxonomy for the staking ledger.

Every error aborts the operation that raised it; the contract restores its
pre-call state before the exception reaches the caller.
"""


class StakingError(Exception):
    """Base class for all ledger and collaborator errors."""


class InvalidAmount(StakingError):
    """Zero, negative or non-integer amount argument."""


class InsufficientStake(StakingError):
    """Withdrawal exceeds the caller's recorded stake."""


class Unauthorized(StakingError):
    """Restricted operation invoked by a principal other than the owner."""


class ReentrantCall(StakingError):
    """Guarded entry point invoked while another guarded call is executing."""


class TransferFailed(StakingError):
    """The token collaborator rejected a transfer."""


class NothingToClaim(StakingError):
    """Claim would pay out zero reward."""


class ConfigurationError(StakingError):
    """Setup-time operation invoked in a state that no longer allows it."""


class TokenNotConfigured(ConfigurationError):
    """Mutating call issued before a token collaborator was configured."""


class TokenError(StakingError):
    """Raised by the in-memory token collaborator."""


class InsufficientBalance(TokenError):
    """Transfer amount exceeds the sender's token balance."""


class InsufficientAllowance(TokenError):
    """transfer_from amount exceeds the spender's allowance."""
