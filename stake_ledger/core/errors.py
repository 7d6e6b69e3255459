"""Errors raised by the staking ledger."""


class TransactionAborted(Exception):
    """A contract violation that rejects the whole operation.

    The ledger rolls back every change made by the operation before this
    propagates to the caller.
    """


class TransferError(Exception):
    """The environment could not move value to an account."""


class StakingError(Exception):
    """Recoverable operation failure carrying a human-readable detail."""

    kind = "Other"

    def __init__(self, detail: str, keeps_state: bool = False):
        super().__init__(detail)
        self.detail = detail
        # The ledger keeps the operation's state changes instead of rolling back
        self.keeps_state = keeps_state

    def __eq__(self, other):
        if not isinstance(other, StakingError):
            return NotImplemented
        return type(self) is type(other) and self.detail == other.detail

    def __hash__(self):
        return hash((type(self), self.detail))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.detail!r})"

    def __str__(self) -> str:
        return f"{self.kind}: {self.detail}"


class UnstakeError(StakingError):
    kind = "UnstakeError"


class ClaimingRewardError(StakingError):
    kind = "ClaimingRewardError"


class OtherError(StakingError):
    kind = "Other"
