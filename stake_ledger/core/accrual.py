"""Reward accrual and checked balance arithmetic."""
from typing import Optional

from .position import MAX_BALANCE, StakingPosition

def checked_add(a: int, b: int, limit: int = MAX_BALANCE) -> Optional[int]:
    """Add two unsigned amounts, ``None`` if the sum exceeds ``limit``."""
    total = a + b
    if total > limit:
        return None
    return total

def checked_sub(a: int, b: int) -> Optional[int]:
    """Subtract two unsigned amounts, ``None`` on underflow."""
    if b > a:
        return None
    return a - b

def reward(position: StakingPosition, current_time: int) -> int:
    """Reward owed to ``position`` at block ``current_time``.

    Every elapsed block since the last settlement yields one reward unit.
    Stake size and the ledger rate do not enter the formula. A clock at or
    behind the settlement block yields nothing.
    """
    elapsed = checked_sub(current_time, position.last_settlement_time)
    if not elapsed:
        return 0
    return elapsed
