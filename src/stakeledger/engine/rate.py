"""Owner-gated control of the reward-per-tick rate."""

from ..access import require_owner
from ..errors import InvalidAmount
from .rewards import RewardIndex


class RateController:
    """Changes ``reward_rate`` without re-pricing history."""

    def __init__(self, index: RewardIndex):
        self.index = index

    @property
    def rate(self) -> int:
        return self.index.state.reward_rate

    def set_rate(self, caller: str, new_rate: int, current_tick: int) -> int:
        """
        Replace the reward rate from ``current_tick`` onwards.

        The interval up to ``current_tick`` is indexed at the old rate before
        the new one is written.

        Args:
            caller: Identity issuing the change
            new_rate: Reward base units per tick
            current_tick: Tick at which the change takes effect

        Returns:
            The previous rate

        Raises:
            Unauthorized: If ``caller`` is not the owner
            InvalidAmount: If ``new_rate`` is negative or not an integer
        """
        state = self.index.state
        require_owner(state.owner, caller)
        if isinstance(new_rate, bool) or not isinstance(new_rate, int) or new_rate < 0:
            raise InvalidAmount(f"reward rate must be a non-negative integer, got {new_rate!r}")

        self.index.sync(current_tick)
        old_rate = state.reward_rate
        state.reward_rate = new_rate
        return old_rate
