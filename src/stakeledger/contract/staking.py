"""Staking contract - public entry points over the reward-accrual ledger.

Every mutating call follows the same order:
1. validate arguments (no state touched yet)
2. sync the reward index to the current tick
3. settle the caller's reward against the synced index
4. mutate stake balances and emit the notification
5. issue the single external token transfer, last

Steps 2-5 run under the entry guard; a failure at any step restores the
state captured on entry.
"""

import logging
from dataclasses import replace
from typing import Optional

from ..access import require_owner
from ..engine.accounting import GlobalState, StakeLedger, StakerAccount
from ..engine.clock import BlockClock
from ..engine.rate import RateController
from ..engine.rewards import RewardIndex
from ..errors import (
    ConfigurationError,
    InsufficientStake,
    InvalidAmount,
    NothingToClaim,
    TokenNotConfigured,
)
from .events import Claim, EventLog, RateChanged, Stake, TokenConfigured, Withdraw
from .guard import EntryGuard, Savepoint, nonreentrant
from .treasury import TokenLike, Treasury

logger = logging.getLogger(__name__)


def _require_amount(amount) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmount(f"amount must be an integer number of base units, got {amount!r}")
    if amount <= 0:
        raise InvalidAmount(f"amount must be positive, got {amount}")
    return amount


class StakingContract:
    """Single-pool staking ledger paying a per-tick reward pro rata to stake."""

    def __init__(
        self,
        owner: str,
        reward_rate: int,
        clock: BlockClock,
        address: str = "staking",
        precision_decimals: int = 18
    ):
        """
        Initialize the contract.

        Args:
            owner: Identity allowed to change the rate and configure the token
            reward_rate: Initial reward base units distributed per tick
            clock: Tick source; the contract reads it but never advances it
            address: Identity of the contract on the token's books
            precision_decimals: Fixed-point scale of the reward index (S = 10**n)
        """
        if isinstance(reward_rate, bool) or not isinstance(reward_rate, int) or reward_rate < 0:
            raise InvalidAmount(f"reward rate must be a non-negative integer, got {reward_rate!r}")
        if precision_decimals < 0:
            raise ValueError("precision_decimals must be non-negative")

        self.address = address
        self.clock = clock
        self._state = GlobalState(
            owner=owner,
            scale=10 ** precision_decimals,
            reward_rate=reward_rate,
            last_sync_tick=clock.tick,
        )
        self._index = RewardIndex(self._state)
        self._ledger = StakeLedger(self._state)
        self._rates = RateController(self._index)
        self._guard = EntryGuard()
        self.events = EventLog()

        self._stake_treasury: Optional[Treasury] = None
        self._reward_treasury: Optional[Treasury] = None
        self.token_decimals: Optional[int] = None

    # ----- read-only views -----

    @property
    def owner(self) -> str:
        return self._state.owner

    @property
    def state(self) -> GlobalState:
        """Copy of the global accumulator state."""
        return replace(self._state)

    @property
    def total_staked(self) -> int:
        return self._state.total_staked

    @property
    def reward_rate(self) -> int:
        return self._state.reward_rate

    @property
    def acc_reward_per_share(self) -> int:
        return self._state.acc_reward_per_share

    @property
    def scale(self) -> int:
        return self._state.scale

    @property
    def stake_token(self) -> Optional[TokenLike]:
        return self._stake_treasury.token if self._stake_treasury else None

    @property
    def reward_token(self) -> Optional[TokenLike]:
        return self._reward_treasury.token if self._reward_treasury else None

    @property
    def accounts(self):
        """Addresses of every depositor the ledger has seen."""
        return [address for address, _ in self._ledger.items()]

    def account(self, address: str) -> Optional[StakerAccount]:
        """Copy of the stake record for ``address`` (``None`` if never deposited)."""
        account = self._ledger.get(address)
        return replace(account) if account is not None else None

    def balance_of(self, address: str) -> int:
        """Stake currently held by ``address``."""
        account = self._ledger.get(address)
        return account.staked_amount if account is not None else 0

    def pending_rewards(self, address: str) -> int:
        """
        Reward ``address`` could claim at the current tick.

        Computed from a preview of the index, so it has no side effects and
        matches what ``claim`` would pay with no intervening state change.
        """
        return self._ledger.pending_at(address, self._index.preview_at(self.clock.tick))

    def validate(self) -> list:
        """Run the ledger's conservation checks; returns error messages."""
        errors = []
        for check in (self._ledger.validate_conservation, self._ledger.validate_non_negative):
            ok, msg = check()
            if not ok:
                errors.append(msg)
        if self._state.last_sync_tick > self.clock.tick:
            errors.append(
                f"last_sync_tick {self._state.last_sync_tick} is ahead of tick {self.clock.tick}"
            )
        return errors

    # ----- owner operations -----

    @nonreentrant
    def configure_token(
        self,
        sender: str,
        token: TokenLike,
        decimals: int,
        reward_token: Optional[TokenLike] = None
    ) -> None:
        """
        Attach the token collaborator(s).

        Args:
            sender: Calling identity; must be the owner
            token: Token that is staked (and paid as reward unless
                ``reward_token`` is given)
            decimals: Token decimals, recorded for display
            reward_token: Optional separate reward token

        Raises:
            Unauthorized: If ``sender`` is not the owner
            ConfigurationError: If stake is already held by the ledger
        """
        require_owner(self._state.owner, sender)
        if self._state.total_staked != 0:
            raise ConfigurationError("token cannot be replaced while stake is held")
        if isinstance(decimals, bool) or not isinstance(decimals, int) or decimals < 0:
            raise ConfigurationError(f"invalid token decimals: {decimals!r}")

        self._stake_treasury = Treasury(token, self.address)
        self._reward_treasury = Treasury(reward_token or token, self.address)
        self.token_decimals = decimals
        self.events.emit(TokenConfigured(
            tick=self.clock.tick,
            token=getattr(token, "symbol", type(token).__name__),
            decimals=decimals,
        ))
        logger.debug("token configured by %s (decimals=%d)", sender, decimals)

    @nonreentrant
    def set_rate(self, sender: str, new_rate: int) -> None:
        """
        Change the reward rate from the current tick onwards.

        Raises:
            Unauthorized: If ``sender`` is not the owner
            InvalidAmount: If ``new_rate`` is negative
        """
        tick = self.clock.tick
        old_rate = self._rates.set_rate(sender, new_rate, tick)
        self.events.emit(RateChanged(tick=tick, new_rate=new_rate))
        logger.debug("rate %d -> %d at tick %d", old_rate, new_rate, tick)

    # ----- depositor operations -----

    @nonreentrant
    def deposit(self, sender: str, amount: int) -> None:
        """
        Stake ``amount`` base units pulled from ``sender``'s token balance.

        Raises:
            InvalidAmount: If ``amount`` is not a positive integer
            TokenNotConfigured: Before ``configure_token``
            TransferFailed: If the token rejects the pull (balance or allowance)
        """
        _require_amount(amount)
        treasury = self._require_treasury(self._stake_treasury)
        tick = self.clock.tick

        account = self._ledger.open(sender)
        self._ledger.settle(account, self._index.sync(tick))
        self._ledger.credit(account, amount)
        self.events.emit(Stake(tick=tick, account=sender, amount=amount))

        treasury.pull(sender, amount)
        logger.debug("deposit %s amount=%d tick=%d", sender, amount, tick)

    @nonreentrant
    def withdraw(self, sender: str, amount: int) -> None:
        """
        Return ``amount`` of ``sender``'s stake.

        Settled reward stays on the account; ``claim`` pays it out.

        Raises:
            InvalidAmount: If ``amount`` is not a positive integer
            InsufficientStake: If ``amount`` exceeds the recorded stake
            TransferFailed: If the token rejects the payout
        """
        _require_amount(amount)
        treasury = self._require_treasury(self._stake_treasury)
        staked = self.balance_of(sender)
        if amount > staked:
            raise InsufficientStake(f"{sender} has {staked} staked, cannot withdraw {amount}")
        tick = self.clock.tick

        account = self._ledger.get(sender)
        self._ledger.settle(account, self._index.sync(tick))
        self._ledger.debit(account, amount)
        self.events.emit(Withdraw(tick=tick, account=sender, amount=amount))

        treasury.push(sender, amount)
        logger.debug("withdraw %s amount=%d tick=%d", sender, amount, tick)

    @nonreentrant
    def claim(self, sender: str) -> int:
        """
        Pay out everything ``sender`` has earned up to the current tick.

        Returns:
            Reward paid

        Raises:
            NothingToClaim: If the payout would be zero
            TransferFailed: If the token rejects the payout
        """
        treasury = self._require_treasury(self._reward_treasury)
        tick = self.clock.tick
        index = self._index.sync(tick)

        account = self._ledger.get(sender)
        amount = 0
        if account is not None:
            self._ledger.settle(account, index)
            amount = self._ledger.take_pending(account)
        if amount == 0:
            raise NothingToClaim(f"{sender} has no reward to claim")
        self.events.emit(Claim(tick=tick, account=sender, amount=amount))

        treasury.push(sender, amount)
        logger.debug("claim %s amount=%d tick=%d", sender, amount, tick)
        return amount

    # ----- internals -----

    def _require_treasury(self, treasury: Optional[Treasury]) -> Treasury:
        if treasury is None:
            raise TokenNotConfigured("configure_token must be called first")
        return treasury

    def _savepoint(self, address: Optional[str]) -> Savepoint:
        return Savepoint.capture(self._state, self._ledger, self.events, address)

    def _rollback(self, savepoint: Savepoint) -> None:
        savepoint.restore(self._state, self._ledger, self.events)
