"""Discrete tick source driving reward accrual."""


class BlockClock:
    """Monotonic block counter.

    Ledger operations read ``tick`` and never advance it; the caller (a test,
    the scenario runner) mines blocks explicitly.
    """

    def __init__(self, start: int = 0):
        if start < 0:
            raise ValueError("start tick must be non-negative")
        self._tick = start

    @property
    def tick(self) -> int:
        return self._tick

    def mine(self, blocks: int = 1) -> int:
        """Advance the clock by ``blocks`` ticks and return the new tick."""
        if blocks < 0:
            raise ValueError("cannot mine a negative number of blocks")
        self._tick += blocks
        return self._tick
