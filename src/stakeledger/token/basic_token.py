"""Basic fungible token with owner-only minting and receiver hooks.

Semantics:
- balances and allowances are integer base units
- mint is restricted to the owner; burn moves tokens to ZERO_ADDRESS, so
  total_supply always equals the sum of all balances including it
- transfer_from spends the spender's allowance
- a receiver may register a hook that runs after it is credited; if the hook
  raises, the transfer is reverted before the error propagates
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

from ..access import require_owner
from ..errors import InsufficientAllowance, InsufficientBalance, InvalidAmount

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

ReceiveHook = Callable[[str, int], None]


@dataclass(frozen=True)
class Transfer:
    sender: str
    to: str
    amount: int


@dataclass(frozen=True)
class Approval:
    owner: str
    spender: str
    amount: int


def _check_amount(amount) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        raise InvalidAmount(f"token amount must be a non-negative integer, got {amount!r}")


class BasicToken:
    """Minimal ERC20-style token kept entirely in memory."""

    def __init__(self, name: str, symbol: str, decimals: int = 18, owner: str = "owner"):
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.owner = owner
        self.total_supply = 0
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}
        self._hooks: Dict[str, ReceiveHook] = {}
        self.transfers: List[Transfer] = []
        self.approvals: List[Approval] = []

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def on_receive(self, account: str, hook: ReceiveHook) -> None:
        """Register ``hook(sender, amount)`` to run whenever ``account`` is credited."""
        self._hooks[account] = hook

    def mint(self, sender: str, to: str, amount: int) -> None:
        require_owner(self.owner, sender)
        _check_amount(amount)
        self._balances[to] = self.balance_of(to) + amount
        self.total_supply += amount
        self.transfers.append(Transfer(ZERO_ADDRESS, to, amount))

    def burn(self, sender: str, amount: int) -> None:
        self._move(sender, ZERO_ADDRESS, amount)

    def approve(self, owner: str, spender: str, amount: int) -> None:
        _check_amount(amount)
        self._allowances[(owner, spender)] = amount
        self.approvals.append(Approval(owner, spender, amount))

    def transfer(self, sender: str, to: str, amount: int) -> None:
        self._move(sender, to, amount)

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> None:
        _check_amount(amount)
        allowed = self.allowance(owner, spender)
        if amount > allowed:
            raise InsufficientAllowance(
                f"{spender} may spend {allowed} of {owner}'s tokens, not {amount}"
            )
        self._allowances[(owner, spender)] = allowed - amount
        try:
            self._move(owner, to, amount)
        except Exception:
            self._allowances[(owner, spender)] = allowed
            raise

    def _move(self, sender: str, to: str, amount: int) -> None:
        _check_amount(amount)
        balance = self.balance_of(sender)
        if amount > balance:
            raise InsufficientBalance(f"{sender} holds {balance}, cannot send {amount}")

        self._balances[sender] = balance - amount
        self._balances[to] = self.balance_of(to) + amount
        position = len(self.transfers)
        self.transfers.append(Transfer(sender, to, amount))

        hook = self._hooks.get(to)
        if hook is None:
            return
        try:
            hook(sender, amount)
        except Exception:
            self._balances[to] -= amount
            self._balances[sender] += amount
            del self.transfers[position]
            raise
