"""Staking position records."""
from pydantic import BaseModel, Field

MAX_BALANCE = 2**128 - 1
MAX_BLOCK_NUMBER = 2**32 - 1

class StakingPosition(BaseModel):
    """One participant's stake and the block it was last settled at."""
    stake_amount: int = Field(default=0, ge=0, le=MAX_BALANCE)
    last_settlement_time: int = Field(default=0, ge=0, le=MAX_BLOCK_NUMBER)

    model_config = {"frozen": True}

    @property
    def is_empty(self) -> bool:
        return self.stake_amount == 0

    def settled_at(self, block: int) -> "StakingPosition":
        """Same stake, settlement moved to ``block``."""
        return StakingPosition(stake_amount=self.stake_amount, last_settlement_time=block)
