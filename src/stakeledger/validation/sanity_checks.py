"""Sanity checks and validation for ledger configs and scenario output."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..config.schema import Config
from ..simulation.runner import LedgerSnapshot, SimulationResult
from ..units import parse_units


@dataclass
class ValidationWarning:
    """A validation warning with severity and message."""
    severity: str  # "warning" or "error"
    category: str  # e.g., "input", "conservation", "accrual"
    message: str
    details: Optional[str] = None


class SanityChecker:
    """Run sanity checks on configuration and ledger snapshots."""

    def __init__(self, config: Config):
        """Initialize with configuration."""
        self.config = config

    def check_config_inputs(self) -> List[ValidationWarning]:
        """
        Check configuration inputs for implausible values.

        Returns:
            List of validation warnings
        """
        warnings = []
        decimals = self.config.token.decimals

        # Amounts must be representable in base units
        amounts = [('ledger.reward_rate', self.config.ledger.reward_rate),
                   ('treasury.reward_reserve', self.config.treasury.reward_reserve)]
        amounts += [(f'accounts.{a.address}.balance', a.balance) for a in self.config.accounts]
        amounts += [(f'scenario[{i}].amount', step.amount)
                    for i, step in enumerate(self.config.scenario) if step.amount is not None]
        for name, value in amounts:
            try:
                parse_units(value, decimals)
            except ValueError as exc:
                warnings.append(ValidationWarning(
                    severity="error",
                    category="input",
                    message=f"{name} is not representable with {decimals} decimals",
                    details=str(exc)
                ))

        # Precision coarser than the token's smallest unit loses reward to rounding
        if self.config.ledger.precision_decimals < decimals:
            warnings.append(ValidationWarning(
                severity="warning",
                category="accrual",
                message="Index precision is coarser than the token's smallest unit",
                details=(f"precision_decimals={self.config.ledger.precision_decimals}, "
                         f"token decimals={decimals}")
            ))

        # Reserve covers the scripted horizon at the configured rate
        mined = sum(step.blocks for step in self.config.scenario if step.op == "mine")
        if self.config.simulation.mine_after_each_action:
            mined += sum(1 for step in self.config.scenario if step.op != "mine")
        needed = self.config.ledger.reward_rate * mined
        if needed > self.config.treasury.reward_reserve:
            warnings.append(ValidationWarning(
                severity="warning",
                category="bounds",
                message="Reward reserve may not cover the scenario at the initial rate",
                details=f"Needed ~{needed}, reserve {self.config.treasury.reward_reserve}"
            ))

        # Scenario senders should be funded accounts (or the owner)
        known = {a.address for a in self.config.accounts} | {self.config.ledger.owner}
        for i, step in enumerate(self.config.scenario):
            if step.sender is not None and step.sender not in known:
                warnings.append(ValidationWarning(
                    severity="warning",
                    category="input",
                    message=f"scenario[{i}] sender {step.sender!r} has no funded account",
                ))

        return warnings

    def check_state(self, snapshot: LedgerSnapshot) -> List[ValidationWarning]:
        """
        Check a single snapshot for invariant violations.

        Args:
            snapshot: Ledger snapshot

        Returns:
            List of validation warnings
        """
        warnings = []

        stake_sum = sum(snapshot.balances.values())
        if stake_sum != snapshot.total_staked:
            warnings.append(ValidationWarning(
                severity="error",
                category="conservation",
                message=f"Stakes sum to {stake_sum}, total_staked is {snapshot.total_staked}",
                details=f"step {snapshot.step}"
            ))

        if snapshot.last_sync_tick > snapshot.tick:
            warnings.append(ValidationWarning(
                severity="error",
                category="accrual",
                message="Index synced ahead of the current tick",
                details=f"last_sync_tick={snapshot.last_sync_tick}, tick={snapshot.tick}"
            ))

        negative = {a: p for a, p in snapshot.pending.items() if p < 0}
        if negative:
            warnings.append(ValidationWarning(
                severity="error",
                category="accrual",
                message="Negative pending reward",
                details=str(negative)
            ))

        return warnings

    def check_history(self, snapshots: List[LedgerSnapshot]) -> List[ValidationWarning]:
        """Check invariants spanning consecutive snapshots."""
        warnings = []
        for prev, curr in zip(snapshots, snapshots[1:]):
            if curr.acc_reward_per_share < prev.acc_reward_per_share:
                warnings.append(ValidationWarning(
                    severity="error",
                    category="accrual",
                    message="Reward index decreased",
                    details=(f"step {curr.step}: {prev.acc_reward_per_share} -> "
                             f"{curr.acc_reward_per_share}")
                ))
            if curr.tick < prev.tick:
                warnings.append(ValidationWarning(
                    severity="error",
                    category="accrual",
                    message="Tick went backwards",
                    details=f"step {curr.step}: {prev.tick} -> {curr.tick}"
                ))
        return warnings

    def check_metrics(self, metrics: Dict[str, Any]) -> List[ValidationWarning]:
        """
        Check final metrics.

        Args:
            metrics: Final metrics dictionary

        Returns:
            List of validation warnings
        """
        warnings = []

        dust = metrics.get('rounding_dust', 0)
        if dust < 0:
            warnings.append(ValidationWarning(
                severity="error",
                category="accrual",
                message="Ledger paid or owes more reward than it emitted",
                details=f"Overpaid by {-dust} base units"
            ))

        if metrics.get('contract_balance', 0) < metrics.get('final_total_staked', 0):
            warnings.append(ValidationWarning(
                severity="warning",
                category="bounds",
                message="Contract token balance is below total stake",
                details=(f"balance={metrics.get('contract_balance')}, "
                         f"staked={metrics.get('final_total_staked')}")
            ))

        return warnings


def validate_simulation_results(
    result: SimulationResult,
    check_all_states: bool = True
) -> List[ValidationWarning]:
    """
    Validate a complete scenario result.

    Args:
        result: Scenario result to validate
        check_all_states: If True, check every snapshot (slower)

    Returns:
        List of all validation warnings
    """
    checker = SanityChecker(result.config)
    warnings = []

    warnings.extend(checker.check_config_inputs())

    if check_all_states:
        for snapshot in result.snapshots:
            warnings.extend(checker.check_state(snapshot))
    elif result.snapshots:
        warnings.extend(checker.check_state(result.snapshots[-1]))

    warnings.extend(checker.check_history(result.snapshots))
    warnings.extend(checker.check_metrics(result.final_metrics))

    for error in result.conservation_errors:
        warnings.append(ValidationWarning(
            severity="error",
            category="conservation",
            message=error
        ))

    return warnings
