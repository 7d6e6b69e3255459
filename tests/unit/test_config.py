"""Unit tests for configuration loading."""
import pytest
from pathlib import Path
from unittest.mock import patch
from pydantic import ValidationError
from stake_ledger.core.config import LedgerConfig, get_state_dir, load_config

def test_defaults(state_dir):
    """Test configuration without a file or overrides."""
    config = load_config()
    assert config.rate == 1000
    assert config.reset_settlement_on_topup is False
    assert config.log_level == "INFO"
    assert config.state_dir == state_dir
    assert config.chain_path == state_dir / "chain.json"

def test_default_config_file_in_state_dir(state_dir):
    (state_dir / "config.yaml").write_text("rate: 250\nlog_level: debug\n")

    config = load_config()
    assert config.rate == 250
    assert config.log_level == "DEBUG"

def test_explicit_file_and_env_override(state_dir, monkeypatch):
    """Test environment variables win over file values."""
    path = state_dir / "custom.yaml"
    path.write_text("rate: 250\nreset_settlement_on_topup: true\n")
    monkeypatch.setenv("STAKE_LEDGER_RATE", "42")

    config = load_config(path)
    assert config.rate == 42
    assert config.reset_settlement_on_topup is True

def test_missing_explicit_file(state_dir):
    with pytest.raises(FileNotFoundError):
        load_config(state_dir / "missing.yaml")

def test_non_mapping_file(state_dir):
    path = state_dir / "list.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ValueError):
        load_config(path)

@pytest.mark.parametrize("fields", [{"rate": -1}, {"log_level": "LOUD"}])
def test_invalid_values(fields):
    with pytest.raises(ValidationError):
        LedgerConfig(**fields)

def test_state_dir_paths(tmp_path, monkeypatch):
    """Test platform-specific state directories."""
    monkeypatch.delenv("STAKE_LEDGER_STATE_DIR", raising=False)

    with patch('platform.system', return_value='Darwin'), \
         patch('pathlib.Path.home', return_value=tmp_path):
        expected = tmp_path / 'Library' / 'Application Support' / 'stake-ledger'
        assert str(get_state_dir()) == str(expected)

    with patch('platform.system', return_value='Linux'), \
         patch('pathlib.Path.home', return_value=tmp_path):
        assert get_state_dir() == tmp_path / '.config' / 'stake-ledger'

def test_explicit_state_dir_reads_its_config_file(state_dir, tmp_path):
    """Test an explicit state directory wins and supplies the config file."""
    other = tmp_path / "other"
    other.mkdir()
    (other / "config.yaml").write_text("rate: 7\nstate_dir: /ignored\n")

    config = load_config(state_dir=other)
    assert config.rate == 7
    assert config.state_dir == other
