"""Pydantic schema for configuration validation."""

import hashlib
import json
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class LedgerParams(BaseModel):
    """Staking contract parameters."""
    owner: str = Field(default="owner", min_length=1, description="Identity allowed to set the rate")
    address: str = Field(default="staking", min_length=1, description="Contract identity on the token's books")
    reward_rate: Decimal = Field(ge=0, description="Reward per tick, in whole tokens")
    precision_decimals: int = Field(
        ge=0, le=36, default=18,
        description="Fixed-point scale of the reward index (S = 10**precision_decimals)"
    )


class TokenParams(BaseModel):
    """Token collaborator parameters."""
    name: str = Field(default="Basic Token", description="Token name")
    symbol: str = Field(default="BST", description="Token symbol")
    decimals: int = Field(ge=0, le=36, default=18, description="Token decimals")


class AccountFunding(BaseModel):
    """Initial token balance of a depositor."""
    address: str = Field(min_length=1, description="Depositor identity")
    balance: Decimal = Field(ge=0, description="Initial token balance in whole tokens")
    approve: bool = Field(default=True, description="Grant the contract an unlimited allowance")


class TreasuryParams(BaseModel):
    """Reward funding held by the contract."""
    reward_reserve: Decimal = Field(ge=0, description="Tokens minted to the contract for payouts")


class Action(BaseModel):
    """One step of a scripted scenario."""
    op: Literal["deposit", "withdraw", "claim", "set_rate", "mine"] = Field(description="Operation")
    sender: Optional[str] = Field(default=None, description="Calling identity")
    amount: Optional[Decimal] = Field(default=None, description="Amount or new rate, in whole tokens")
    blocks: int = Field(default=1, ge=0, description="Blocks mined by a 'mine' step")

    @model_validator(mode="after")
    def validate_arguments(self):
        """Ensure each operation carries the arguments it needs."""
        if self.op in ("deposit", "withdraw", "claim", "set_rate") and not self.sender:
            raise ValueError(f"'{self.op}' requires a sender")
        if self.op in ("deposit", "withdraw", "set_rate") and self.amount is None:
            raise ValueError(f"'{self.op}' requires an amount")
        return self


class Simulation(BaseModel):
    """Scenario replay and Monte Carlo parameters."""
    mine_after_each_action: bool = Field(
        default=False,
        description="Advance one block after every non-mine action (automine)"
    )
    monte_carlo_runs: int = Field(gt=0, default=20, description="Number of Monte Carlo runs")
    random_seed: int = Field(default=42, description="Random seed for reproducibility")
    num_depositors: int = Field(gt=0, le=1000, default=5, description="Depositors per Monte Carlo run")
    num_steps: int = Field(gt=0, default=200, description="Operations per Monte Carlo run")
    max_deposit: Decimal = Field(gt=0, default=Decimal("10000"), description="Largest random deposit")
    max_rate: Decimal = Field(ge=0, default=Decimal("50"), description="Largest random reward rate")
    max_blocks_between: int = Field(ge=0, default=3, description="Largest random gap in blocks")


class Config(BaseModel):
    """Complete configuration for a staking ledger run."""
    ledger: LedgerParams
    token: TokenParams = Field(default_factory=TokenParams)
    accounts: List[AccountFunding] = Field(default_factory=list)
    treasury: TreasuryParams
    scenario: List[Action] = Field(default_factory=list)
    simulation: Simulation = Field(default_factory=Simulation)

    @field_validator("accounts")
    @classmethod
    def validate_unique_accounts(cls, v):
        """Depositor identities must be unique."""
        seen = set()
        for acct in v:
            if acct.address in seen:
                raise ValueError(f"duplicate account: {acct.address}")
            seen.add(acct.address)
        return v

    @model_validator(mode="after")
    def validate_reserved_identities(self):
        """The contract cannot also be a depositor."""
        if any(acct.address == self.ledger.address for acct in self.accounts):
            raise ValueError(f"account {self.ledger.address!r} is the contract address")
        return self

    def compute_hash(self) -> str:
        """Compute config hash for reproducibility."""
        config_dict = self.model_dump(mode="json")
        config_str = json.dumps(config_dict, sort_keys=True)
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create config from dictionary."""
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return self.model_dump(mode="json")
