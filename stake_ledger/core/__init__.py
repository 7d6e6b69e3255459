"""Staking ledger core."""
from .accrual import checked_add, checked_sub, reward
from .config import LedgerConfig, configure_logging, load_config
from .environment import Environment, LocalEnvironment
from .errors import (
    ClaimingRewardError,
    OtherError,
    StakingError,
    TransactionAborted,
    TransferError,
    UnstakeError,
)
from .events import Claimed, Staked, Unstaked
from .ledger import StakingLedger
from .position import MAX_BALANCE, MAX_BLOCK_NUMBER, StakingPosition
from .store import LedgerStore

__all__ = [
    "checked_add",
    "checked_sub",
    "reward",
    "LedgerConfig",
    "configure_logging",
    "load_config",
    "Environment",
    "LocalEnvironment",
    "ClaimingRewardError",
    "OtherError",
    "StakingError",
    "TransactionAborted",
    "TransferError",
    "UnstakeError",
    "Claimed",
    "Staked",
    "Unstaked",
    "StakingLedger",
    "MAX_BALANCE",
    "MAX_BLOCK_NUMBER",
    "StakingPosition",
    "LedgerStore",
]
