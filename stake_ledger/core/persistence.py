"""Save and load a local chain with its ledger."""
import json
from pathlib import Path
from typing import Tuple

from loguru import logger

from .config import LedgerConfig
from .environment import LocalEnvironment
from .ledger import StakingLedger
from .store import LedgerStore

STATE_VERSION = 1

def save_chain(env: LocalEnvironment, ledger: StakingLedger, path: Path) -> None:
    """Write the environment and ledger state to ``path`` as JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    state = {
        "version": STATE_VERSION,
        "ledger": {
            "rate": ledger.rate,
            "reset_settlement_on_topup": ledger.reset_settlement_on_topup,
            "positions": ledger.store.to_dict(),
        },
        "environment": env.to_dict(),
    }
    tmp_path = path.with_suffix(".tmp")
    with open(tmp_path, 'w') as f:
        json.dump(state, f, indent=2)
    tmp_path.replace(path)
    logger.debug(f"Saved chain state to {path}")

def load_chain(path: Path) -> Tuple[LocalEnvironment, StakingLedger]:
    """Read a chain written by :func:`save_chain`.

    Raises:
        FileNotFoundError: If there is no saved chain
        ValueError: If the file is not a chain state this version understands
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"No chain state at {path}")
    try:
        with open(path) as f:
            state = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Corrupted chain state at {path}: {e}") from e

    if not isinstance(state, dict):
        raise ValueError(f"Corrupted chain state at {path}: expected an object")
    if state.get("version") != STATE_VERSION:
        raise ValueError(f"Unsupported chain state version: {state.get('version')}")

    try:
        env = LocalEnvironment.from_dict(state["environment"])
        ledger_state = state["ledger"]
        ledger = StakingLedger(
            env,
            rate=ledger_state["rate"],
            store=LedgerStore.from_dict(ledger_state["positions"]),
            reset_settlement_on_topup=ledger_state.get("reset_settlement_on_topup", False),
        )
    except (KeyError, TypeError) as e:
        raise ValueError(f"Corrupted chain state at {path}: missing or malformed {e}") from e
    return env, ledger

def new_chain(config: LedgerConfig) -> Tuple[LocalEnvironment, StakingLedger]:
    """Create a fresh local chain with funded default accounts."""
    env = LocalEnvironment()
    return env, StakingLedger.from_config(env, config)
