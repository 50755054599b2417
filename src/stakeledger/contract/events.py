"""Notifications emitted by the staking contract."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterator, List, Type, TypeVar


@dataclass(frozen=True)
class Event:
    tick: int

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        return {"event": self.name, **asdict(self)}


@dataclass(frozen=True)
class Stake(Event):
    account: str
    amount: int


@dataclass(frozen=True)
class Withdraw(Event):
    account: str
    amount: int


@dataclass(frozen=True)
class Claim(Event):
    account: str
    amount: int


@dataclass(frozen=True)
class RateChanged(Event):
    new_rate: int


@dataclass(frozen=True)
class TokenConfigured(Event):
    token: str
    decimals: int


E = TypeVar("E", bound=Event)


class EventLog:
    """Append-only (except for rollback) record of emitted events."""

    def __init__(self):
        self._events: List[Event] = []

    def __iter__(self) -> Iterator[Event]:
        return iter(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def __getitem__(self, idx):
        return self._events[idx]

    def emit(self, event: Event) -> None:
        self._events.append(event)

    def truncate(self, length: int) -> None:
        del self._events[length:]

    def of_type(self, event_type: Type[E]) -> List[E]:
        return [e for e in self._events if isinstance(e, event_type)]
