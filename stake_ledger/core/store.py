"""In-memory ledger store."""
from typing import Dict, List, Optional, Set, Tuple

from loguru import logger

from .position import StakingPosition

StoreSnapshot = Tuple[Dict[str, StakingPosition], Set[str]]

class LedgerStore:
    """Maps identities to staking positions and tracks active stakers.

    An identity is active exactly when it has a position with a non-zero
    stake. Both structures are only ever updated together.
    """

    def __init__(self):
        self._positions: Dict[str, StakingPosition] = {}
        self._active: Set[str] = set()

    def get(self, identity: str) -> Optional[StakingPosition]:
        """Get the position for an identity, if any."""
        return self._positions.get(identity)

    def set(self, identity: str, position: StakingPosition) -> None:
        """Store a position. A zero-stake position removes the identity."""
        if position.is_empty:
            self.remove(identity)
            return
        self._positions[identity] = position
        self._active.add(identity)

    def remove(self, identity: str) -> None:
        """Drop an identity's position and active membership."""
        self._positions.pop(identity, None)
        if identity in self._active:
            self._active.discard(identity)
            logger.debug(f"{identity} left the active set")

    def is_active(self, identity: str) -> bool:
        return identity in self._active

    def active_identities(self) -> List[str]:
        """Identities currently holding stake, in no particular order."""
        return list(self._active)

    def total_staked(self) -> int:
        return sum(position.stake_amount for position in self._positions.values())

    def __len__(self) -> int:
        return len(self._active)

    def snapshot(self) -> StoreSnapshot:
        # Positions are immutable, shallow copies are enough
        return dict(self._positions), set(self._active)

    def restore(self, snapshot: StoreSnapshot) -> None:
        positions, active = snapshot
        self._positions = dict(positions)
        self._active = set(active)

    def to_dict(self) -> Dict[str, dict]:
        """Serialize positions keyed by identity."""
        return {
            identity: position.model_dump()
            for identity, position in sorted(self._positions.items())
        }

    @classmethod
    def from_dict(cls, data: Dict[str, dict]) -> "LedgerStore":
        """Rebuild a store serialized by :meth:`to_dict`."""
        store = cls()
        for identity, fields in data.items():
            store.set(identity, StakingPosition(**fields))
        return store
