"""Unit tests for reward accrual."""
import pytest
from stake_ledger.core.accrual import checked_add, checked_sub, reward
from stake_ledger.core.position import MAX_BALANCE, StakingPosition

@pytest.fixture
def position():
    return StakingPosition(stake_amount=10, last_settlement_time=100)

def test_reward_counts_elapsed_blocks(position):
    """Test one reward unit per elapsed block."""
    assert reward(position, 105) == 5
    assert reward(position, 101) == 1

def test_reward_ignores_stake_size():
    small = StakingPosition(stake_amount=1, last_settlement_time=0)
    large = StakingPosition(stake_amount=10**30, last_settlement_time=0)
    assert reward(small, 7) == reward(large, 7) == 7

def test_reward_is_zero_without_elapsed_time(position):
    """Test same-block and backwards clocks accrue nothing."""
    assert reward(position, 100) == 0
    assert reward(position, 3) == 0

def test_checked_add():
    assert checked_add(1, 2) == 3
    assert checked_add(MAX_BALANCE - 1, 1) == MAX_BALANCE
    assert checked_add(MAX_BALANCE, 1) is None

def test_checked_sub():
    assert checked_sub(5, 5) == 0
    assert checked_sub(5, 2) == 3
    assert checked_sub(2, 5) is None

def test_position_bounds():
    """Test positions reject values outside the balance range."""
    with pytest.raises(ValueError):
        StakingPosition(stake_amount=-1, last_settlement_time=0)
    with pytest.raises(ValueError):
        StakingPosition(stake_amount=MAX_BALANCE + 1, last_settlement_time=0)
