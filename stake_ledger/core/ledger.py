"""Staking ledger: deposits, withdrawals and reward claims."""
import functools
import threading
from typing import List, Optional

from loguru import logger

from .accrual import checked_add, checked_sub, reward
from .environment import Environment
from .errors import (
    ClaimingRewardError,
    OtherError,
    StakingError,
    TransactionAborted,
    TransferError,
    UnstakeError,
)
from .events import Claimed, LedgerEvent, Staked, Unstaked
from .position import MAX_BALANCE, MAX_BLOCK_NUMBER, StakingPosition
from .store import LedgerStore

def message(func):
    """Run a ledger operation as one atomic transaction.

    Store changes are rolled back and buffered events dropped when the
    operation raises, unless a :class:`StakingError` asks to keep its state.
    Events are delivered to the environment only on success or kept state.
    Calls made while a transaction is already open join it.
    """
    @functools.wraps(func)
    def wrapper(self: "StakingLedger", *args, **kwargs):
        with self._lock:
            if self._pending is not None:
                return func(self, *args, **kwargs)

            snapshot = self.store.snapshot()
            self._pending = []
            try:
                result = func(self, *args, **kwargs)
            except StakingError as e:
                if e.keeps_state:
                    self._flush_events()
                else:
                    self.store.restore(snapshot)
                logger.warning(f"{func.__name__} failed: {e}")
                raise
            except Exception as e:
                self.store.restore(snapshot)
                logger.warning(f"{func.__name__} aborted: {e}")
                raise
            else:
                self._flush_events()
                return result
            finally:
                self._pending = None
    return wrapper

class StakingLedger:
    """Stakes, accrued rewards and the active staker set for one ledger."""

    def __init__(self,
                 env: Environment,
                 rate: int = 1000,
                 store: Optional[LedgerStore] = None,
                 reset_settlement_on_topup: bool = False):
        """Initialize the ledger.

        Args:
            env: Host environment supplying caller, block and custody
            rate: Ledger rate parameter, stored but not used by the reward formula
            store: Existing store to operate on, empty if omitted
            reset_settlement_on_topup: Restart reward accrual when stake is topped up
        """
        if rate < 0:
            raise ValueError("Rate must not be negative")
        self.env = env
        self.store = store if store is not None else LedgerStore()
        self.reset_settlement_on_topup = reset_settlement_on_topup
        self._rate = rate
        self._lock = threading.RLock()
        self._pending: Optional[List[LedgerEvent]] = None

    @classmethod
    def from_config(cls, env: Environment, config, store: Optional[LedgerStore] = None) -> "StakingLedger":
        """Build a ledger from a :class:`LedgerConfig`."""
        return cls(
            env,
            rate=config.rate,
            store=store,
            reset_settlement_on_topup=config.reset_settlement_on_topup,
        )

    @property
    def rate(self) -> int:
        return self._rate

    def _current_block(self) -> int:
        now = self.env.block_number()
        if not 0 <= now <= MAX_BLOCK_NUMBER:
            raise OtherError(f"block number {now} out of range")
        return now

    def _emit(self, event: LedgerEvent) -> None:
        self._pending.append(event)

    def _flush_events(self) -> None:
        for event in self._pending:
            self.env.emit_event(event)
        self._pending = []

    @message
    def stake(self) -> None:
        """Deposit the value sent with the call as stake for the caller.

        Raises:
            TransactionAborted: If no value was sent
            OtherError: If the new balance would overflow
        """
        amount = self.env.transferred_value()
        if amount <= 0:
            raise TransactionAborted("Must stake more than 0")

        caller = self.env.caller()
        now = self._current_block()
        position = self.store.get(caller)

        if position is not None:
            new_balance = checked_add(position.stake_amount, amount)
            if new_balance is None:
                raise OtherError("balance overflow")
            settled = now if self.reset_settlement_on_topup else position.last_settlement_time
            position = StakingPosition(stake_amount=new_balance, last_settlement_time=settled)
        else:
            if amount > MAX_BALANCE:
                raise OtherError("balance overflow")
            position = StakingPosition(stake_amount=amount, last_settlement_time=now)

        self.store.set(caller, position)
        self._emit(Staked(user=caller, amount=amount))
        logger.info(f"{caller} staked {amount} at block {now}, balance {position.stake_amount}")

    @message
    def unstake(self, amount: int) -> None:
        """Withdraw ``amount`` of the caller's stake.

        Withdrawing the whole stake first pays out any accrued reward and
        removes the caller from the active set. A partial withdrawal
        restarts accrual without paying the reward accrued so far.

        Raises:
            TransactionAborted: If amount is not positive or the payout fails
            UnstakeError: If the caller has no stake or not enough of it
            OtherError: If reward settlement fails on a full withdrawal
        """
        if amount <= 0:
            raise TransactionAborted("Must unstake more than 0")

        caller = self.env.caller()
        now = self._current_block()
        position = self.store.get(caller)
        if position is None or position.is_empty:
            raise UnstakeError("can only unstake if user has already staked")
        if amount > position.stake_amount:
            raise UnstakeError("unstake amount cannot be greater than staked amount")

        rest = checked_sub(position.stake_amount, amount)
        if rest is None:
            raise OtherError("subtraction overflow")

        if rest == 0:
            try:
                self._claim(caller)
            except ClaimingRewardError as e:
                raise OtherError(f"failed to claim rewards while fully unstaking: {e}") from e

        try:
            self.env.transfer(caller, amount)
        except TransferError as e:
            raise TransactionAborted(f"Failed to return {amount} to {caller}: {e}") from e

        self.store.set(caller, StakingPosition(stake_amount=rest, last_settlement_time=now))
        self._emit(Unstaked(user=caller, amount=amount))
        logger.info(f"{caller} unstaked {amount} at block {now}, balance {rest}")

    @message
    def claim_reward(self) -> int:
        """Pay the caller the reward accrued since the last settlement.

        Returns:
            Amount paid, 0 when nothing had accrued

        Raises:
            ClaimingRewardError: If the caller has no stake or the payout fails.
                A failed payout still advances the settlement block.
        """
        return self._claim(self.env.caller())

    def _claim(self, caller: str) -> int:
        position = self.store.get(caller)
        if position is None or position.is_empty:
            raise ClaimingRewardError("user doesn't have a stake")

        now = self._current_block()
        owed = reward(position, now)
        self.store.set(caller, position.settled_at(now))

        if owed > 0:
            try:
                self.env.transfer(caller, owed)
            except TransferError as e:
                raise ClaimingRewardError("failed to transfer claimed reward", keeps_state=True) from e
            self._emit(Claimed(user=caller, amount=owed))
            logger.info(f"{caller} claimed {owed} at block {now}")
        else:
            logger.debug(f"{caller} settled at block {now} with nothing owed")
        return owed

    def stake_of(self, account: str) -> int:
        """Current stake of an account, 0 if it has none."""
        with self._lock:
            position = self.store.get(account)
            return position.stake_amount if position is not None else 0

    def reward_of(self, account: str) -> int:
        """Reward the account could claim at the current block."""
        with self._lock:
            position = self.store.get(account)
            if position is None:
                return 0
            return reward(position, self.env.block_number())

    def stakers(self) -> List[str]:
        with self._lock:
            return self.store.active_identities()

    def is_staker(self, account: str) -> bool:
        with self._lock:
            return self.store.is_active(account)

    def total_staked(self) -> int:
        with self._lock:
            return self.store.total_staked()
