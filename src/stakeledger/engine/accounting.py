"""Stake ledger - per-depositor stake, reward checkpoint and settled reward.

Accounting Semantics:
- ``acc_reward_per_share`` is the cumulative reward earned by one unit of
  stake since inception, stored as a scaled integer (scale ``S``).
- An account's reward since its last settlement is
  ``staked_amount * (acc_reward_per_share - reward_checkpoint) // S``.
- Settling banks that amount in ``settled_pending`` and moves the checkpoint,
  so the stake can change without losing reward already earned.

Conservation Identity:
sum(staked_amount over all accounts) == total_staked
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple


def accrued_reward(staked: int, index: int, checkpoint: int, scale: int) -> int:
    """
    Reward earned by ``staked`` units between two accumulator values.

    Division happens last and rounds down, so the ledger never pays out more
    than it accrued.
    """
    return staked * (index - checkpoint) // scale


@dataclass
class GlobalState:
    """Ledger-wide accumulator state (one instance per contract)."""
    owner: str
    scale: int  # Fixed-point scale S
    total_staked: int = 0
    reward_rate: int = 0  # Reward base units per tick
    acc_reward_per_share: int = 0  # Scaled by S
    last_sync_tick: int = 0


@dataclass
class StakerAccount:
    """Stake position of a single depositor."""
    staked_amount: int = 0
    reward_checkpoint: int = 0  # acc_reward_per_share at last settlement
    settled_pending: int = 0  # Settled but not yet transferred


class StakeLedger:
    """Account book keyed by depositor identity."""

    def __init__(self, state: GlobalState):
        """
        Initialize the ledger.

        Args:
            state: Global accumulator state shared with the reward index
        """
        self.state = state
        self._accounts: Dict[str, StakerAccount] = {}

    def __contains__(self, address: str) -> bool:
        return address in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)

    def items(self) -> Iterator[Tuple[str, StakerAccount]]:
        return iter(self._accounts.items())

    def get(self, address: str) -> Optional[StakerAccount]:
        return self._accounts.get(address)

    def open(self, address: str) -> StakerAccount:
        """Return the account for ``address``, creating it on first use."""
        account = self._accounts.get(address)
        if account is None:
            account = StakerAccount(reward_checkpoint=self.state.acc_reward_per_share)
            self._accounts[address] = account
        return account

    def restore(self, address: str, account: Optional[StakerAccount]) -> None:
        """Put back a previously captured account (``None`` removes it)."""
        if account is None:
            self._accounts.pop(address, None)
        else:
            self._accounts[address] = account

    def settle(self, account: StakerAccount, current_index: int) -> int:
        """
        Bank reward earned since the account's last checkpoint.

        Args:
            account: Account to settle
            current_index: Current (synced) accumulator value

        Returns:
            Reward newly moved into ``settled_pending``
        """
        owed = accrued_reward(
            account.staked_amount, current_index, account.reward_checkpoint, self.state.scale
        )
        account.settled_pending += owed
        account.reward_checkpoint = current_index
        return owed

    def credit(self, account: StakerAccount, amount: int) -> None:
        account.staked_amount += amount
        self.state.total_staked += amount

    def debit(self, account: StakerAccount, amount: int) -> None:
        account.staked_amount -= amount
        self.state.total_staked -= amount

    def take_pending(self, account: StakerAccount) -> int:
        """Zero the account's settled reward and return what it held."""
        amount = account.settled_pending
        account.settled_pending = 0
        return amount

    def pending_at(self, address: str, index: int) -> int:
        """Reward owed to ``address`` if the accumulator stood at ``index``."""
        account = self._accounts.get(address)
        if account is None:
            return 0
        return accrued_reward(
            account.staked_amount, index, account.reward_checkpoint, self.state.scale
        ) + account.settled_pending

    def validate_conservation(self) -> Tuple[bool, Optional[str]]:
        """
        Validate that recorded stakes sum to ``total_staked``.

        Returns:
            (is_valid, error_message)
        """
        stake_sum = sum(acct.staked_amount for acct in self._accounts.values())
        if stake_sum != self.state.total_staked:
            return False, (
                f"Conservation violation: total_staked={self.state.total_staked}, "
                f"sum={stake_sum}, diff={stake_sum - self.state.total_staked}"
            )
        return True, None

    def validate_non_negative(self) -> Tuple[bool, Optional[str]]:
        """Validate every account bucket is non-negative."""
        for address, acct in self._accounts.items():
            if acct.staked_amount < 0:
                return False, f"Negative stake for {address}: {acct.staked_amount}"
            if acct.settled_pending < 0:
                return False, f"Negative settled reward for {address}: {acct.settled_pending}"
            if acct.reward_checkpoint > self.state.acc_reward_per_share:
                return False, (
                    f"Checkpoint ahead of index for {address}: "
                    f"{acct.reward_checkpoint} > {self.state.acc_reward_per_share}"
                )
        return True, None
