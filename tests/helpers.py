"""Shared setup for staking ledger tests."""

import os
import sys
from dataclasses import dataclass

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from stakeledger import BasicToken, BlockClock, StakingContract, parse_units

OWNER = "owner"
ALICE = "alice"
BOB = "bob"
CAROL = "carol"
MAX_ALLOWANCE = 10 ** 30


@dataclass
class Env:
    clock: BlockClock
    token: BasicToken
    contract: StakingContract


def make_env(rate: str = "10", depositors=(ALICE, BOB), reserve: str = "10000") -> Env:
    """Contract with the token configured, depositors funded with 10000 and approved."""
    clock = BlockClock()
    token = BasicToken("Basic Token", "BST", 18, owner=OWNER)
    contract = StakingContract(owner=OWNER, reward_rate=parse_units(rate), clock=clock)
    contract.configure_token(OWNER, token, 18)
    for who in depositors:
        token.mint(OWNER, who, parse_units("10000"))
        token.approve(who, contract.address, MAX_ALLOWANCE)
    token.mint(OWNER, contract.address, parse_units(reserve))
    return Env(clock=clock, token=token, contract=contract)
