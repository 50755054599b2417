"""Export functionality for CSV and JSON."""

import json

import pandas as pd

from ..simulation.runner import SimulationResult
from ..units import format_units


def snapshots_frame(result: SimulationResult) -> pd.DataFrame:
    """One row per snapshot, one stake/pending column pair per account."""
    decimals = result.config.token.decimals
    data = []
    for snap in result.snapshots:
        row = {
            'step': snap.step,
            'tick': snap.tick,
            'op': snap.op,
            'sender': snap.sender,
            'total_staked': format_units(snap.total_staked, decimals),
            'reward_rate': format_units(snap.reward_rate, decimals),
            'acc_reward_per_share': str(snap.acc_reward_per_share),
            'contract_balance': format_units(snap.contract_balance, decimals),
        }
        for address, staked in snap.balances.items():
            row[f'staked:{address}'] = format_units(staked, decimals)
        for address, pending in snap.pending.items():
            row[f'pending:{address}'] = format_units(pending, decimals)
        data.append(row)

    return pd.DataFrame(data)


def export_csv(result: SimulationResult, filepath: str):
    """Export scenario snapshots to CSV."""
    # Amounts are written as decimal strings; base units overflow float64.
    df = snapshots_frame(result)
    df.to_csv(filepath, index=False)


def export_json(result: SimulationResult, filepath: str):
    """Export scenario results to JSON."""
    export_data = {
        'config': result.config.to_dict(),
        'config_hash': result.config.compute_hash(),
        'snapshots': [
            {
                'step': snap.step,
                'tick': snap.tick,
                'op': snap.op,
                'sender': snap.sender,
                'total_staked': str(snap.total_staked),
                'reward_rate': str(snap.reward_rate),
                'acc_reward_per_share': str(snap.acc_reward_per_share),
                'balances': {a: str(v) for a, v in snap.balances.items()},
                'pending': {a: str(v) for a, v in snap.pending.items()},
            }
            for snap in result.snapshots
        ],
        'events': [
            {k: str(v) if k in ('amount', 'new_rate') else v
             for k, v in event.to_dict().items()}
            for event in result.events
        ],
        'final_metrics': {k: str(v) if isinstance(v, int) else v
                          for k, v in result.final_metrics.items()},
        'rejected': result.rejected,
        'conservation_errors': result.conservation_errors,
    }

    with open(filepath, 'w') as f:
        json.dump(export_data, f, indent=2)
