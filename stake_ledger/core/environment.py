"""Host environments the staking ledger runs against."""
from abc import ABC, abstractmethod
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional

from loguru import logger

from .errors import StakingError, TransactionAborted, TransferError
from .events import LedgerEvent, event_from_dict, event_to_dict
from .position import MAX_BLOCK_NUMBER

DEFAULT_ACCOUNTS = ("alice", "bob", "charlie", "django", "eve", "frank")
DEFAULT_BALANCE = 1_000_000
CONTRACT_ACCOUNT = "staking"

class Environment(ABC):
    """What the ledger needs from its host.

    The host resolves the caller, supplies the current block and the value
    sent with the call, holds the ledger's custody balance and delivers
    events.
    """

    @abstractmethod
    def caller(self) -> str:
        """Authenticated identity of the current caller."""
        pass

    @abstractmethod
    def transferred_value(self) -> int:
        """Value sent along with the current call."""
        pass

    @abstractmethod
    def block_number(self) -> int:
        """Current block height."""
        pass

    @abstractmethod
    def transfer(self, to: str, amount: int) -> None:
        """Pay ``amount`` out of the ledger's custody to ``to``.

        Raises:
            TransferError: If the payment cannot be made
        """
        pass

    @abstractmethod
    def emit_event(self, event: LedgerEvent) -> None:
        """Deliver a committed ledger event."""
        pass

class LocalEnvironment(Environment):
    """In-memory host with funded default accounts and a manual block clock."""

    def __init__(self,
                 accounts: Iterable[str] = DEFAULT_ACCOUNTS,
                 initial_balance: int = DEFAULT_BALANCE,
                 contract_account: str = CONTRACT_ACCOUNT,
                 contract_balance: int = DEFAULT_BALANCE,
                 block: int = 0):
        """Initialize the local host.

        Args:
            accounts: Account names funded at start
            initial_balance: Starting balance of every account
            contract_account: Account holding the ledger's custody
            contract_balance: Starting custody balance, funds reward payouts
            block: Starting block height
        """
        accounts = tuple(accounts)
        self.contract_account = contract_account
        self.balances: Dict[str, int] = {name: initial_balance for name in accounts}
        self.balances[contract_account] = contract_balance
        self.block = block
        self.events: List[LedgerEvent] = []
        self._caller: Optional[str] = accounts[0] if accounts else None
        self._transferred = 0
        self._lock = threading.RLock()

    def caller(self) -> str:
        if self._caller is None:
            raise RuntimeError("No caller set")
        return self._caller

    def transferred_value(self) -> int:
        return self._transferred

    def block_number(self) -> int:
        return self.block

    def transfer(self, to: str, amount: int) -> None:
        available = self.balances.get(self.contract_account, 0)
        if amount < 0 or amount > available:
            raise TransferError(
                f"Cannot transfer {amount} to {to}: custody holds {available}"
            )
        self.balances[self.contract_account] = available - amount
        self.balances[to] = self.balances.get(to, 0) + amount
        logger.debug(f"Transferred {amount} to {to}")

    def emit_event(self, event: LedgerEvent) -> None:
        self.events.append(event)

    def set_caller(self, account: str) -> None:
        self._caller = account

    def advance_block(self, blocks: int = 1) -> int:
        """Move the clock forward and return the new block height."""
        if blocks < 0:
            raise ValueError("Cannot move the block clock backwards")
        if self.block + blocks > MAX_BLOCK_NUMBER:
            raise ValueError(f"Block height would exceed {MAX_BLOCK_NUMBER}")
        with self._lock:
            self.block += blocks
            return self.block

    def recorded_events(self) -> List[LedgerEvent]:
        return list(self.events)

    def get_account_balance(self, account: str) -> Optional[int]:
        return self.balances.get(account)

    def call(self, message: Callable[..., Any], *args,
             value: int = 0, caller: Optional[str] = None) -> Any:
        """Run a ledger message as a single call.

        The transferred value moves into custody before the message runs.
        If the message aborts or fails without keeping its state, every
        balance change made during the call is reverted. Calls are
        serialized, so one call never sees another call's caller or value.

        Args:
            message: Bound ledger method to invoke
            value: Value sent with the call
            caller: Caller for this and subsequent calls

        Returns:
            Whatever the message returns
        """
        with self._lock:
            if caller is not None:
                self.set_caller(caller)
            payer = self.caller()
            checkpoint = dict(self.balances)
            if value > 0:
                held = self.balances.get(payer, 0)
                if held < value:
                    raise TransferError(f"{payer} holds {held}, cannot send {value}")
                self.balances[payer] = held - value
                self.balances[self.contract_account] = self.balances.get(self.contract_account, 0) + value
            self._transferred = value
            try:
                return message(*args)
            except TransactionAborted:
                self.balances = checkpoint
                raise
            except StakingError as e:
                if not e.keeps_state:
                    self.balances = checkpoint
                raise
            finally:
                self._transferred = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contract_account": self.contract_account,
            "block": self.block,
            "caller": self._caller,
            "balances": dict(sorted(self.balances.items())),
            "events": [event_to_dict(event) for event in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LocalEnvironment":
        env = cls(accounts=(), contract_account=data["contract_account"],
                  contract_balance=0, block=data["block"])
        env.balances = {name: int(amount) for name, amount in data["balances"].items()}
        env.events = [event_from_dict(event) for event in data.get("events", [])]
        env._caller = data.get("caller")
        return env
