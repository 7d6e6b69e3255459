"""Unit tests for saving and loading local chains."""
import json
import pytest
from stake_ledger.core.config import LedgerConfig
from stake_ledger.core.events import Staked
from stake_ledger.core.persistence import load_chain, new_chain, save_chain

@pytest.fixture
def chain_path(tmp_path):
    return tmp_path / "state" / "chain.json"

def test_save_and_load(chain_path, tmp_path):
    """Test a chain with stakes survives a save and load."""
    env, ledger = new_chain(LedgerConfig(rate=7, state_dir=tmp_path, reset_settlement_on_topup=True))
    env.call(ledger.stake, value=10, caller="alice")
    env.call(ledger.stake, value=20, caller="bob")
    env.advance_block(6)

    save_chain(env, ledger, chain_path)
    loaded_env, loaded = load_chain(chain_path)

    assert loaded.rate == 7
    assert loaded.reset_settlement_on_topup is True
    assert loaded.env is loaded_env
    assert sorted(loaded.stakers()) == ["alice", "bob"]
    assert loaded.stake_of("bob") == 20
    assert loaded.reward_of("alice") == 6
    assert loaded_env.get_account_balance("alice") == 999_990
    assert loaded_env.recorded_events()[0] == Staked(user="alice", amount=10)

    # The loaded chain keeps working
    loaded_env.call(loaded.unstake, 10, caller="alice")
    assert loaded.stakers() == ["bob"]

def test_load_missing(chain_path):
    with pytest.raises(FileNotFoundError):
        load_chain(chain_path)

def test_load_corrupted(chain_path):
    chain_path.parent.mkdir(parents=True)
    chain_path.write_text("{not json")
    with pytest.raises(ValueError, match="Corrupted"):
        load_chain(chain_path)

def test_load_unknown_version(chain_path):
    chain_path.parent.mkdir(parents=True)
    chain_path.write_text(json.dumps({"version": 99}))
    with pytest.raises(ValueError, match="Unsupported"):
        load_chain(chain_path)

@pytest.mark.parametrize("state", [
    {"version": 1},
    {"version": 1, "environment": {"contract_account": "staking", "block": 0, "balances": {}}},
    {"version": 1, "environment": {"contract_account": "staking", "block": 0, "balances": {}},
     "ledger": {"rate": 1000}},
    [1, 2],
])
def test_load_incomplete_state(chain_path, state):
    chain_path.parent.mkdir(parents=True)
    chain_path.write_text(json.dumps(state))
    with pytest.raises(ValueError, match="Corrupted"):
        load_chain(chain_path)
