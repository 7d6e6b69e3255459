"""Notifications emitted by committed ledger operations."""
from typing import Union
from pydantic import BaseModel, Field

class Staked(BaseModel):
    """Stake deposited."""
    user: str
    amount: int = Field(gt=0)

class Unstaked(BaseModel):
    """Stake withdrawn."""
    user: str
    amount: int = Field(gt=0)

class Claimed(BaseModel):
    """Accrued reward paid out."""
    user: str
    amount: int = Field(gt=0)

LedgerEvent = Union[Staked, Unstaked, Claimed]

EVENT_TYPES = {cls.__name__: cls for cls in (Staked, Unstaked, Claimed)}

def event_to_dict(event: LedgerEvent) -> dict:
    """Serialize an event with its kind tag."""
    return {"kind": type(event).__name__, **event.model_dump()}

def event_from_dict(data: dict) -> LedgerEvent:
    """Rebuild an event serialized by :func:`event_to_dict`.

    Raises:
        ValueError: If the kind tag is unknown
    """
    data = dict(data)
    kind = data.pop("kind", None)
    if kind not in EVENT_TYPES:
        raise ValueError(f"Unknown event kind: {kind}")
    return EVENT_TYPES[kind](**data)
