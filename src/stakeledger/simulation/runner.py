"""Scenario runner - replay a scripted sequence of ledger operations.

Key Features:
- Builds a fresh clock, token and contract from the config for every run
- Funds depositors and the reward reserve, grants allowances
- Records a LedgerSnapshot after every action
- Rejected actions are collected, not raised, so a scenario can exercise
  failure paths; the ledger itself has already rolled them back
- Tracks reward emitted (rate x blocks mined with stake present, priced
  as each block is mined) so rounding dust can be reported
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..config.schema import Action, Config
from ..contract.events import Claim, Event
from ..contract.staking import StakingContract
from ..engine.clock import BlockClock
from ..errors import StakingError
from ..token.basic_token import BasicToken
from ..units import parse_units

logger = logging.getLogger(__name__)

UNLIMITED_ALLOWANCE = 10 ** 30


@dataclass
class LedgerSnapshot:
    """Ledger state after one scenario step."""
    step: int
    tick: int
    op: str
    sender: Optional[str]
    total_staked: int
    reward_rate: int
    acc_reward_per_share: int
    last_sync_tick: int
    contract_balance: int
    balances: Dict[str, int]
    pending: Dict[str, int]


@dataclass
class SimulationResult:
    """Complete scenario result."""
    config: Config
    snapshots: List[LedgerSnapshot]
    events: List[Event]
    final_metrics: Dict[str, Any]
    rejected: List[str] = field(default_factory=list)
    conservation_errors: List[str] = field(default_factory=list)


@dataclass
class Environment:
    """Objects one scenario runs against."""
    clock: BlockClock
    token: BasicToken
    contract: StakingContract


def build_environment(config: Config) -> Environment:
    """
    Create and fund a contract as described by ``config``.

    Args:
        config: Run configuration

    Returns:
        Environment with the token configured and depositors funded
    """
    decimals = config.token.decimals
    owner = config.ledger.owner

    clock = BlockClock()
    token = BasicToken(
        name=config.token.name,
        symbol=config.token.symbol,
        decimals=decimals,
        owner=owner,
    )
    contract = StakingContract(
        owner=owner,
        reward_rate=parse_units(config.ledger.reward_rate, decimals),
        clock=clock,
        address=config.ledger.address,
        precision_decimals=config.ledger.precision_decimals,
    )
    contract.configure_token(owner, token, decimals)

    for acct in config.accounts:
        token.mint(owner, acct.address, parse_units(acct.balance, decimals))
        if acct.approve:
            token.approve(acct.address, contract.address, UNLIMITED_ALLOWANCE)
    token.mint(owner, contract.address, parse_units(config.treasury.reward_reserve, decimals))

    return Environment(clock=clock, token=token, contract=contract)


def apply_action(env: Environment, action: Action, decimals: int) -> None:
    """
    Execute one scenario action.

    Raises:
        StakingError: Whatever the contract raised; its state is unchanged
    """
    contract = env.contract
    if action.op == "mine":
        env.clock.mine(action.blocks)
    elif action.op == "deposit":
        contract.deposit(action.sender, parse_units(action.amount, decimals))
    elif action.op == "withdraw":
        contract.withdraw(action.sender, parse_units(action.amount, decimals))
    elif action.op == "claim":
        contract.claim(action.sender)
    elif action.op == "set_rate":
        contract.set_rate(action.sender, parse_units(action.amount, decimals))
    else:
        raise ValueError(f"unknown operation: {action.op}")


class ScenarioRunner:
    """Replays ``config.scenario`` against a freshly built contract."""

    def __init__(self, config: Config):
        """
        Initialize scenario runner.

        Args:
            config: Run configuration
        """
        self.config = config
        self.env = build_environment(config)
        self._addresses = [acct.address for acct in config.accounts]

    def snapshot(self, step: int, action: Optional[Action] = None) -> LedgerSnapshot:
        contract = self.env.contract
        addresses = list(dict.fromkeys(self._addresses + contract.accounts))
        state = contract.state
        return LedgerSnapshot(
            step=step,
            tick=self.env.clock.tick,
            op=action.op if action is not None else "genesis",
            sender=action.sender if action is not None else None,
            total_staked=state.total_staked,
            reward_rate=state.reward_rate,
            acc_reward_per_share=state.acc_reward_per_share,
            last_sync_tick=state.last_sync_tick,
            contract_balance=self.env.token.balance_of(contract.address),
            balances={a: contract.balance_of(a) for a in addresses},
            pending={a: contract.pending_rewards(a) for a in addresses},
        )

    def run(self) -> SimulationResult:
        """
        Run the scenario.

        Returns:
            Simulation result
        """
        decimals = self.config.token.decimals
        automine = self.config.simulation.mine_after_each_action
        contract = self.env.contract

        snapshots = [self.snapshot(0)]
        rejected: List[str] = []
        conservation_errors: List[str] = []
        emitted = 0

        for step, action in enumerate(self.config.scenario, start=1):
            if action.op == "mine":
                emitted += self._emission(action.blocks)
            try:
                apply_action(self.env, action, decimals)
            except StakingError as exc:
                msg = f"step {step} ({action.op} by {action.sender}): {type(exc).__name__}: {exc}"
                logger.warning("rejected %s", msg)
                rejected.append(msg)
            if automine and action.op != "mine":
                emitted += self._emission(1)
                self.env.clock.mine(1)

            snapshots.append(self.snapshot(step, action))

            for err in contract.validate():
                conservation_errors.append(f"step {step}: {err}")

        return SimulationResult(
            config=self.config,
            snapshots=snapshots,
            events=list(contract.events),
            final_metrics=self._compute_final_metrics(snapshots[-1], emitted),
            rejected=rejected,
            conservation_errors=conservation_errors,
        )

    def _emission(self, blocks: int) -> int:
        """Reward the ledger allocates over the next ``blocks`` mined blocks."""
        contract = self.env.contract
        if contract.total_staked == 0:
            return 0
        return blocks * contract.reward_rate

    def _compute_final_metrics(self, final: LedgerSnapshot, emitted: int) -> Dict[str, Any]:
        claimed = sum(e.amount for e in self.env.contract.events.of_type(Claim))
        outstanding = sum(final.pending.values())
        return {
            'final_tick': final.tick,
            'final_total_staked': final.total_staked,
            'final_reward_rate': final.reward_rate,
            'final_acc_reward_per_share': final.acc_reward_per_share,
            'total_emitted': emitted,
            'total_claimed': claimed,
            'outstanding_rewards': outstanding,
            'rounding_dust': emitted - claimed - outstanding,
            'contract_balance': final.contract_balance,
            'num_depositors': sum(1 for v in final.balances.values() if v > 0),
        }
