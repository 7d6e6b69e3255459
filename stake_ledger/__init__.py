"""Stake Ledger: staking positions with block-based reward accrual."""

__version__ = "0.1.0"
