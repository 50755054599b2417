"""Monte Carlo runs - random operation sequences for invariant checking."""

import logging
from decimal import Decimal
from typing import Any, Dict, List

import numpy as np

from ..config.schema import AccountFunding, Action, Config, TreasuryParams
from .runner import ScenarioRunner, SimulationResult

logger = logging.getLogger(__name__)


class MonteCarloRunner:
    """Run many randomly generated scenarios from one base configuration."""

    def __init__(self, config: Config):
        """
        Initialize Monte Carlo runner.

        Args:
            config: Base configuration; its ledger, token and simulation
                sections are reused, accounts and scenario are generated
        """
        self.config = config

    def run(
        self,
        num_runs: int = None,
        random_seed: int = None
    ) -> List[SimulationResult]:
        """
        Run Monte Carlo simulation.

        Args:
            num_runs: Number of runs (defaults to config value)
            random_seed: Random seed (defaults to config value)

        Returns:
            List of simulation results
        """
        if num_runs is None:
            num_runs = self.config.simulation.monte_carlo_runs

        if random_seed is None:
            random_seed = self.config.simulation.random_seed

        results = []
        for run_idx in range(num_runs):
            sampled_config = self._sample_config(random_seed + run_idx)
            result = ScenarioRunner(sampled_config).run()
            logger.debug(
                "run %d: %d steps, %d rejected",
                run_idx, len(sampled_config.scenario), len(result.rejected)
            )
            results.append(result)

        return results

    def _sample_config(self, seed: int) -> Config:
        """Generate funded accounts and a random scenario."""
        rng = np.random.default_rng(seed)
        sim = self.config.simulation
        max_deposit = int(sim.max_deposit)
        max_rate = int(sim.max_rate)
        fractional = self.config.token.decimals >= 3

        addresses = [f"depositor-{i}" for i in range(sim.num_depositors)]
        accounts = [
            AccountFunding(address=a, balance=Decimal(max_deposit * sim.num_steps))
            for a in addresses
        ]

        ops = np.array(["deposit", "withdraw", "claim", "set_rate", "mine"])
        weights = np.array([0.35, 0.2, 0.15, 0.05, 0.25])
        scenario: List[Action] = []
        for _ in range(sim.num_steps):
            op = str(rng.choice(ops, p=weights))
            sender = str(rng.choice(addresses))
            if op == "deposit" or op == "withdraw":
                # Whole tokens plus an odd fraction to exercise rounding.
                amount = Decimal(int(rng.integers(1, max_deposit + 1)))
                if fractional:
                    amount += Decimal(int(rng.integers(0, 1000))) / 1000
                scenario.append(Action(op=op, sender=sender, amount=amount))
            elif op == "claim":
                scenario.append(Action(op=op, sender=sender))
            elif op == "set_rate":
                rate = Decimal(int(rng.integers(0, max_rate + 1)))
                scenario.append(Action(op=op, sender=self.config.ledger.owner, amount=rate))
            else:
                blocks = int(rng.integers(0, sim.max_blocks_between + 1))
                scenario.append(Action(op=op, blocks=blocks))

        # Enough reserve that payouts never dip into staked principal.
        peak_rate = max(max_rate, int(self.config.ledger.reward_rate) + 1)
        reserve = Decimal(peak_rate * sim.num_steps * max(sim.max_blocks_between, 1))
        return self.config.model_copy(
            update={
                "accounts": accounts,
                "scenario": scenario,
                "treasury": TreasuryParams(reward_reserve=reserve),
            },
            deep=True,
        )


def summarize(results: List[SimulationResult]) -> Dict[str, Any]:
    """Aggregate statistics over Monte Carlo results."""
    if not results:
        return {'runs': 0}

    # Base units overflow int64, keep Python ints.
    claimed = np.array([r.final_metrics['total_claimed'] for r in results], dtype=object)
    dust = np.array([r.final_metrics['rounding_dust'] for r in results], dtype=object)
    return {
        'runs': len(results),
        'total_claimed_mean': int(claimed.sum()) // len(results),
        'rounding_dust_max': int(dust.max()),
        'rounding_dust_min': int(dust.min()),
        'rejected_actions': sum(len(r.rejected) for r in results),
        'conservation_errors': sum(len(r.conservation_errors) for r in results),
    }
