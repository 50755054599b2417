"""Treasury boundary - the only place the ledger talks to the token."""

import logging
from typing import Callable, Protocol

from ..errors import ReentrantCall, TokenError, TransferFailed

logger = logging.getLogger(__name__)


class TokenLike(Protocol):
    """Fungible-token collaborator consumed by the ledger."""

    def transfer(self, sender: str, to: str, amount: int) -> None:
        ...

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> None:
        ...

    def balance_of(self, account: str) -> int:
        ...


class Treasury:
    """Moves tokens in and out of the contract's own token account."""

    def __init__(self, token: TokenLike, holder: str):
        """
        Args:
            token: Token collaborator
            holder: Identity of the contract on the token's books
        """
        self.token = token
        self.holder = holder

    def pull(self, depositor: str, amount: int) -> None:
        """Move ``amount`` from ``depositor`` into the contract (needs allowance)."""
        self._call(self.token.transfer_from, self.holder, depositor, self.holder, amount)

    def push(self, recipient: str, amount: int) -> None:
        """Pay ``amount`` out of the contract to ``recipient``."""
        self._call(self.token.transfer, self.holder, recipient, amount)

    def _call(self, fn: Callable[..., None], *args) -> None:
        try:
            fn(*args)
        except TokenError as exc:
            raise TransferFailed(str(exc)) from exc
        except ReentrantCall:
            # A receive hook called back into the ledger.
            raise
        except Exception as exc:
            logger.warning("token %s failed: %r", getattr(fn, "__name__", fn), exc)
            raise TransferFailed(str(exc)) from exc
