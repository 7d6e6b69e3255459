"""Ledger configuration and logging setup."""
import os
import sys
import platform
from pathlib import Path
from typing import Optional

import yaml
from loguru import logger
from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "STAKE_LEDGER_"
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")

def get_state_dir() -> Path:
    """Get platform-specific directory for ledger state."""
    if os.getenv(f"{ENV_PREFIX}STATE_DIR"):
        return Path(os.environ[f"{ENV_PREFIX}STATE_DIR"])
    if os.name == 'nt':  # Windows
        return Path(os.getenv('APPDATA', Path.home())) / 'stake-ledger'
    elif platform.system() == 'Darwin':  # macOS
        return Path.home() / 'Library' / 'Application Support' / 'stake-ledger'
    else:  # Linux and others
        return Path.home() / '.config' / 'stake-ledger'

class LedgerConfig(BaseModel):
    """Staking ledger configuration."""
    rate: int = Field(default=1000, ge=0)
    reset_settlement_on_topup: bool = False
    state_dir: Path = Field(default_factory=get_state_dir)
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level {value!r}, expected one of {', '.join(LOG_LEVELS)}")
        return level

    @property
    def chain_path(self) -> Path:
        return self.state_dir / "chain.json"

def _env_overrides() -> dict:
    overrides = {}
    for key in ("rate", "state_dir", "log_level"):
        value = os.getenv(f"{ENV_PREFIX}{key.upper()}")
        if value is not None:
            overrides[key] = value
    return overrides

def load_config(path: Optional[Path] = None, state_dir: Optional[Path] = None) -> LedgerConfig:
    """Load configuration from defaults, a YAML file and the environment.

    Environment variables win over the file, the file wins over defaults.

    Args:
        path: YAML file to read. Defaults to ``config.yaml`` in the state
            directory, skipped when missing.
        state_dir: State directory taking precedence over every other
            source, also where the default config file is looked up.

    Returns:
        Validated configuration

    Raises:
        pydantic.ValidationError: If a value is invalid
        FileNotFoundError: If an explicit path does not exist
    """
    data = {}
    if path is None:
        candidate = Path(state_dir or get_state_dir()) / "config.yaml"
        path = candidate if candidate.exists() else None
    elif not Path(path).exists():
        raise FileNotFoundError(f"Config file {path} not found")

    if path is not None:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        logger.debug(f"Loaded config from {path}")

    data.update(_env_overrides())
    if state_dir is not None:
        data["state_dir"] = Path(state_dir)
    return LedgerConfig(**data)

def configure_logging(level: str = "INFO") -> None:
    """Send log output to stderr at the given level."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper(),
               format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}")
