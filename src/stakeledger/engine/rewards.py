"""Reward index - lazily advanced cumulative reward per unit of stake.

Key Concepts:
- Accrual is priced in ticks: elapsed * reward_rate reward units per interval
- The increment per unit of stake is elapsed * rate * S // total_staked
- Intervals with nothing staked are skipped: that reward is never allocated
- sync must run before total_staked or reward_rate changes, so each interval
  is priced at the rate actually in force during it
"""

from .accounting import GlobalState


class RewardIndex:
    """Cumulative reward-per-share accumulator over a ``GlobalState``."""

    def __init__(self, state: GlobalState):
        """
        Initialize the index.

        Args:
            state: Global state whose accumulator this index advances
        """
        self.state = state

    def _increment(self, current_tick: int) -> int:
        if current_tick < self.state.last_sync_tick:
            raise ValueError(
                f"tick {current_tick} precedes last sync tick {self.state.last_sync_tick}"
            )
        elapsed = current_tick - self.state.last_sync_tick
        if elapsed == 0 or self.state.total_staked == 0:
            return 0
        return (
            elapsed * self.state.reward_rate * self.state.scale
            // self.state.total_staked
        )

    def preview_at(self, current_tick: int) -> int:
        """
        Accumulator value a sync at ``current_tick`` would produce.

        Args:
            current_tick: Tick to price up to

        Returns:
            Would-be ``acc_reward_per_share``; state is left untouched
        """
        return self.state.acc_reward_per_share + self._increment(current_tick)

    def sync(self, current_tick: int) -> int:
        """
        Advance the accumulator to ``current_tick``.

        Calling twice within one tick is a no-op the second time.

        Args:
            current_tick: Tick to price up to

        Returns:
            The synced ``acc_reward_per_share``

        Raises:
            ValueError: If ``current_tick`` is earlier than the last sync
        """
        self.state.acc_reward_per_share += self._increment(current_tick)
        self.state.last_sync_tick = current_tick
        return self.state.acc_reward_per_share
