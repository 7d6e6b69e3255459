"""Test configuration and fixtures for Stake Ledger."""
import pytest
from stake_ledger.core.environment import LocalEnvironment
from stake_ledger.core.ledger import StakingLedger

@pytest.fixture
def env():
    """Local host with funded default accounts, alice calling."""
    env = LocalEnvironment()
    env.set_caller("alice")
    return env

@pytest.fixture
def ledger(env):
    """Ledger deployed with rate 1000."""
    return StakingLedger(env, rate=1000)

@pytest.fixture
def state_dir(tmp_path, monkeypatch):
    """Point configuration and chain state at a temporary directory."""
    monkeypatch.setenv("STAKE_LEDGER_STATE_DIR", str(tmp_path))
    for name in ("STAKE_LEDGER_RATE", "STAKE_LEDGER_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path
