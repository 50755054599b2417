"""Tests for the staking contract entry points.

Amounts use 18 decimals and a reward rate of 10 tokens per block unless a
test says otherwise. Blocks are mined explicitly; every operation executes at
the clock's current tick.
"""

from fractions import Fraction

import pytest

from helpers import ALICE, BOB, CAROL, MAX_ALLOWANCE, OWNER, make_env
from stakeledger import (
    BasicToken,
    BlockClock,
    ConfigurationError,
    InsufficientStake,
    InvalidAmount,
    NothingToClaim,
    ReentrantCall,
    StakingContract,
    TokenNotConfigured,
    TransferFailed,
    Unauthorized,
    format_units,
    parse_units,
)
from stakeledger.contract.events import Claim, RateChanged, Stake, Withdraw


def units(value) -> int:
    return parse_units(value)


class TestDeposit:

    def test_deposit_and_accrue_one_block(self):
        """Single depositor earns the whole block reward."""
        env = make_env()
        env.contract.deposit(ALICE, units("10000"))

        assert env.contract.events[-1] == Stake(tick=0, account=ALICE, amount=units("10000"))
        assert env.contract.balance_of(ALICE) == units("10000")
        assert env.token.balance_of(ALICE) == 0

        env.clock.mine(1)
        assert env.contract.pending_rewards(ALICE) == units("10")

    def test_two_depositors_share_block(self):
        """A earns one full block plus half of the shared block; B earns half."""
        env = make_env()
        env.contract.deposit(ALICE, units("10000"))
        env.clock.mine(1)
        env.contract.deposit(BOB, units("10000"))
        env.clock.mine(1)

        assert env.contract.pending_rewards(ALICE) == units("15")
        assert env.contract.pending_rewards(BOB) == units("5")

    def test_top_up_keeps_earned_reward(self):
        env = make_env()
        env.contract.deposit(ALICE, units("5000"))
        env.clock.mine(2)
        env.contract.deposit(ALICE, units("5000"))
        account = env.contract.account(ALICE)
        assert account.settled_pending == units("20")
        assert env.contract.pending_rewards(ALICE) == units("20")

    @pytest.mark.parametrize("amount", [0, -5, 1.5, True, "10"])
    def test_invalid_amount(self, amount):
        env = make_env()
        before = env.contract.state
        with pytest.raises(InvalidAmount):
            env.contract.deposit(ALICE, amount)
        assert env.contract.state == before
        assert ALICE not in env.contract.accounts

    def test_missing_allowance_leaves_no_trace(self):
        """A failed pull rolls back the sync, the stake and the new account."""
        env = make_env()
        env.token.mint(OWNER, CAROL, units("100"))
        env.contract.deposit(ALICE, units("100"))
        env.clock.mine(3)
        before = env.contract.state
        events_before = len(env.contract.events)

        with pytest.raises(TransferFailed):
            env.contract.deposit(CAROL, units("100"))

        assert env.contract.state == before
        assert env.contract.account(CAROL) is None
        assert len(env.contract.events) == events_before
        assert env.token.balance_of(CAROL) == units("100")

    def test_insufficient_token_balance(self):
        env = make_env()
        with pytest.raises(TransferFailed):
            env.contract.deposit(ALICE, units("10001"))
        assert env.contract.total_staked == 0

    def test_requires_configured_token(self):
        contract = StakingContract(owner=OWNER, reward_rate=units("10"), clock=BlockClock())
        with pytest.raises(TokenNotConfigured):
            contract.deposit(ALICE, units("1"))
        with pytest.raises(TokenNotConfigured):
            contract.withdraw(ALICE, units("1"))
        with pytest.raises(TokenNotConfigured):
            contract.claim(ALICE)


class TestWithdraw:

    def test_withdraw_preserves_settled_reward(self):
        """After a partial withdrawal the next block is split 5000:10000."""
        env = make_env()
        env.contract.deposit(ALICE, units("10000"))
        env.clock.mine(1)
        env.contract.deposit(BOB, units("10000"))
        env.clock.mine(1)
        assert env.contract.pending_rewards(ALICE) == units("15")

        env.contract.withdraw(ALICE, units("5000"))
        assert env.contract.events[-1] == Withdraw(tick=2, account=ALICE, amount=units("5000"))
        assert env.contract.balance_of(ALICE) == units("5000")
        assert env.token.balance_of(ALICE) == units("5000")
        assert env.contract.pending_rewards(ALICE) == units("15")

        env.clock.mine(1)
        scale = env.contract.scale
        increment = units("10") * scale // units("15000")
        expected = units("15") + units("5000") * increment // scale
        pending = env.contract.pending_rewards(ALICE)
        assert pending == expected
        assert format_units(pending) == "18.33333333333333"

    def test_rounding_never_overpays(self):
        env = make_env()
        env.contract.deposit(ALICE, units("10000"))
        env.contract.deposit(BOB, units("5000"))
        env.clock.mine(1)
        exact = Fraction(units("10") * units("10000"), units("15000"))
        pending = env.contract.pending_rewards(ALICE)
        assert pending <= exact
        assert exact - pending < 1 + Fraction(units("10000"), env.contract.scale)

    def test_withdraw_does_not_auto_claim(self):
        env = make_env()
        env.contract.deposit(ALICE, units("10000"))
        env.clock.mine(4)
        env.contract.withdraw(ALICE, units("10000"))

        assert env.token.balance_of(ALICE) == units("10000")
        assert env.contract.pending_rewards(ALICE) == units("40")
        env.clock.mine(5)
        assert env.contract.pending_rewards(ALICE) == units("40")
        assert env.contract.claim(ALICE) == units("40")

    def test_zero_stake_account_is_kept(self):
        env = make_env()
        env.contract.deposit(ALICE, units("1"))
        env.contract.withdraw(ALICE, units("1"))
        assert ALICE in env.contract.accounts
        assert env.contract.balance_of(ALICE) == 0

    def test_exceeding_stake_fails(self):
        env = make_env()
        env.contract.deposit(ALICE, units("100"))
        before = env.contract.state
        with pytest.raises(InsufficientStake):
            env.contract.withdraw(ALICE, units("101"))
        assert env.contract.state == before

    def test_never_deposited_fails(self):
        env = make_env()
        with pytest.raises(InsufficientStake):
            env.contract.withdraw(CAROL, units("1"))
        assert env.contract.account(CAROL) is None

    def test_zero_withdraw_fails(self):
        env = make_env()
        env.contract.deposit(ALICE, units("100"))
        with pytest.raises(InvalidAmount):
            env.contract.withdraw(ALICE, 0)


class TestClaim:

    def test_claim_pays_pending_and_resets(self):
        env = make_env()
        env.contract.deposit(ALICE, units("10000"))
        env.clock.mine(10)
        pending = env.contract.pending_rewards(ALICE)
        assert pending == units("100")

        paid = env.contract.claim(ALICE)
        assert paid == pending
        assert env.contract.events[-1] == Claim(tick=10, account=ALICE, amount=paid)
        assert env.token.balance_of(ALICE) == paid
        assert env.contract.pending_rewards(ALICE) == 0

    def test_claim_in_later_block_includes_that_block(self):
        """Claim executes one block after the pending query."""
        env = make_env()
        env.contract.deposit(ALICE, units("10000"))
        env.clock.mine(1)
        env.contract.deposit(BOB, units("10000"))
        env.clock.mine(10)
        assert env.contract.pending_rewards(ALICE) == units("60")

        env.clock.mine(1)
        assert env.contract.claim(ALICE) == units("65")
        assert env.contract.pending_rewards(ALICE) == 0

    def test_nothing_to_claim(self):
        env = make_env()
        env.contract.deposit(ALICE, units("100"))
        before = env.contract.state
        with pytest.raises(NothingToClaim):
            env.contract.claim(ALICE)
        with pytest.raises(NothingToClaim):
            env.contract.claim(CAROL)
        assert env.contract.state == before

    def test_failed_payout_keeps_reward(self):
        """A reward token the contract cannot pay from leaves the reward owed."""
        clock = BlockClock()
        stake = BasicToken("Stake", "STK", 18, owner=OWNER)
        reward = BasicToken("Reward", "RWD", 18, owner=OWNER)
        contract = StakingContract(owner=OWNER, reward_rate=units("10"), clock=clock)
        contract.configure_token(OWNER, stake, 18, reward_token=reward)
        stake.mint(OWNER, ALICE, units("100"))
        stake.approve(ALICE, contract.address, MAX_ALLOWANCE)

        contract.deposit(ALICE, units("100"))
        clock.mine(2)
        with pytest.raises(TransferFailed):
            contract.claim(ALICE)
        assert contract.pending_rewards(ALICE) == units("20")

        reward.mint(OWNER, contract.address, units("20"))
        assert contract.claim(ALICE) == units("20")
        assert reward.balance_of(ALICE) == units("20")
        assert stake.balance_of(contract.address) == units("100")

    def test_token_side_ledger_error_becomes_transfer_failed(self):
        """A StakingError raised by the token itself is a failed transfer."""

        class RejectingToken(BasicToken):
            def transfer(self, sender, to, amount):
                raise InvalidAmount("token rejects payouts")

        clock = BlockClock()
        token = RejectingToken("Basic Token", "BST", 18, owner=OWNER)
        contract = StakingContract(owner=OWNER, reward_rate=units("10"), clock=clock)
        contract.configure_token(OWNER, token, 18)
        token.mint(OWNER, ALICE, units("100"))
        token.approve(ALICE, contract.address, MAX_ALLOWANCE)

        contract.deposit(ALICE, units("100"))
        clock.mine(1)
        with pytest.raises(TransferFailed) as excinfo:
            contract.claim(ALICE)
        assert isinstance(excinfo.value.__cause__, InvalidAmount)
        assert contract.pending_rewards(ALICE) == units("10")
        with pytest.raises(TransferFailed):
            contract.withdraw(ALICE, units("100"))
        assert contract.balance_of(ALICE) == units("100")

    def test_reentrant_call_is_not_wrapped(self):
        env = make_env()
        env.contract.deposit(ALICE, units("100"))
        env.clock.mine(1)
        env.token.on_receive(ALICE, lambda sender, amount: env.contract.claim(ALICE))
        with pytest.raises(ReentrantCall):
            env.contract.claim(ALICE)
        assert env.contract.pending_rewards(ALICE) == units("10")


class TestSetRate:

    def test_rate_change_is_not_retroactive(self):
        env = make_env()
        env.contract.deposit(ALICE, 10000)
        env.clock.mine(1)

        env.contract.set_rate(OWNER, units("20"))
        assert env.contract.events[-1] == RateChanged(tick=1, new_rate=units("20"))
        assert env.contract.pending_rewards(ALICE) == units("10")

        env.clock.mine(1)
        assert env.contract.pending_rewards(ALICE) == units("30")

    def test_non_owner_rejected(self):
        env = make_env()
        env.contract.deposit(ALICE, units("100"))
        env.clock.mine(1)
        before = env.contract.state
        events_before = len(env.contract.events)

        with pytest.raises(Unauthorized):
            env.contract.set_rate(ALICE, units("20"))

        assert env.contract.state == before
        assert env.contract.reward_rate == units("10")
        assert len(env.contract.events) == events_before

    def test_zero_rate_stops_accrual(self):
        env = make_env()
        env.contract.deposit(ALICE, units("100"))
        env.clock.mine(1)
        env.contract.set_rate(OWNER, 0)
        env.clock.mine(10)
        assert env.contract.pending_rewards(ALICE) == units("10")


class TestConfigureToken:

    def test_owner_only(self):
        contract = StakingContract(owner=OWNER, reward_rate=1, clock=BlockClock())
        with pytest.raises(Unauthorized):
            contract.configure_token(ALICE, BasicToken("T", "T"), 18)
        assert contract.stake_token is None

    def test_cannot_replace_while_staked(self):
        env = make_env()
        env.contract.deposit(ALICE, units("1"))
        with pytest.raises(ConfigurationError):
            env.contract.configure_token(OWNER, BasicToken("Other", "OTH"), 18)
        assert env.contract.stake_token is env.token

    def test_records_decimals(self):
        contract = StakingContract(owner=OWNER, reward_rate=1, clock=BlockClock())
        token = BasicToken("T", "TKN", 6)
        contract.configure_token(OWNER, token, 6)
        assert contract.token_decimals == 6
        assert contract.reward_token is token
        assert contract.events[-1].token == "TKN"


class TestReadOnlyQueries:

    def test_pending_is_stable_across_reads(self):
        env = make_env()
        env.contract.deposit(ALICE, units("3"))
        env.contract.deposit(BOB, units("7"))
        env.clock.mine(3)
        before = env.contract.state
        reads = {env.contract.pending_rewards(ALICE) for _ in range(5)}
        assert len(reads) == 1
        assert env.contract.state == before

    def test_pending_matches_claim(self):
        env = make_env()
        env.contract.deposit(ALICE, units("3"))
        env.clock.mine(1)
        env.contract.deposit(BOB, units("7"))
        env.clock.mine(7)
        pending = env.contract.pending_rewards(BOB)
        assert env.contract.claim(BOB) == pending

    def test_unknown_account(self):
        env = make_env()
        assert env.contract.balance_of(CAROL) == 0
        assert env.contract.pending_rewards(CAROL) == 0

    def test_state_view_is_a_copy(self):
        env = make_env()
        view = env.contract.state
        view.total_staked = 999
        assert env.contract.total_staked == 0

    def test_validate_clean_ledger(self):
        env = make_env()
        env.contract.deposit(ALICE, units("3"))
        env.clock.mine(2)
        env.contract.withdraw(ALICE, units("1"))
        assert env.contract.validate() == []
