"""Entry safety - reentrancy guard and all-or-nothing operation scope.

Every public mutating entry point of the staking contract runs under
``nonreentrant``:

1. the per-instance busy flag is checked and set (``ReentrantCall`` if set),
2. a savepoint of the ledger state touched by the call is captured,
3. the operation runs; ledger mutation precedes its single external transfer,
4. on any exception the savepoint is restored before the error propagates,
5. the busy flag is cleared on every exit path.
"""

import functools
import logging
from contextlib import contextmanager
from dataclasses import dataclass, fields, replace
from typing import Iterator, Optional

from ..engine.accounting import GlobalState, StakeLedger, StakerAccount
from ..errors import ReentrantCall
from .events import EventLog

logger = logging.getLogger(__name__)


class EntryGuard:
    """Busy flag shared by all guarded entry points of one contract."""

    def __init__(self):
        self._busy: Optional[str] = None

    @property
    def busy(self) -> bool:
        return self._busy is not None

    @contextmanager
    def enter(self, operation: str) -> Iterator[None]:
        if self._busy is not None:
            raise ReentrantCall(f"{operation} called while {self._busy} is executing")
        self._busy = operation
        try:
            yield
        finally:
            self._busy = None


@dataclass
class Savepoint:
    """Copy of everything one operation may mutate."""
    state: GlobalState
    address: Optional[str]
    account: Optional[StakerAccount]
    event_count: int

    @classmethod
    def capture(
        cls,
        state: GlobalState,
        ledger: StakeLedger,
        events: EventLog,
        address: Optional[str] = None
    ) -> "Savepoint":
        account = ledger.get(address) if address is not None else None
        return cls(
            state=replace(state),
            address=address,
            account=replace(account) if account is not None else None,
            event_count=len(events),
        )

    def restore(self, state: GlobalState, ledger: StakeLedger, events: EventLog) -> None:
        # The live state object is shared by the index and the ledger, so copy
        # fields back in place rather than rebinding it.
        for f in fields(GlobalState):
            setattr(state, f.name, getattr(self.state, f.name))
        if self.address is not None:
            ledger.restore(self.address, self.account)
        events.truncate(self.event_count)


def nonreentrant(method):
    """Run a contract method under the entry guard inside a savepoint.

    The wrapped method must take the calling identity as its first argument.
    """
    @functools.wraps(method)
    def wrapper(self, sender, *args, **kwargs):
        with self._guard.enter(method.__name__):
            savepoint = self._savepoint(sender)
            try:
                return method(self, sender, *args, **kwargs)
            except Exception as exc:
                self._rollback(savepoint)
                logger.info(
                    "%s by %s rolled back: %s: %s",
                    method.__name__, sender, type(exc).__name__, exc
                )
                raise
    return wrapper
