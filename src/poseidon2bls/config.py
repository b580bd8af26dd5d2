"""
poseidon2bls configuration

Loads config from:
  1. Defaults
  2. A JSON file (CLI --config, else $POSEIDON2BLS_HOME/config.json,
     else ~/.poseidon2bls/config.json)
  3. Environment variables

The prime field and the round schedule are fixed by the hash definition and
are never configurable; only operational choices live here.
"""
from __future__ import annotations

import copy
import json
import logging
import os
import shlex
from pathlib import Path
from typing import Optional

from .permutation import Variant
from .schedule import DEFAULT_SEED

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "variant": Variant.REFERENCE.value,
    "seed": DEFAULT_SEED,
    "log_level": "WARNING",
    "oracle": {
        # argv prefix; left and right are appended as decimal strings
        "command": None,
        "timeout_seconds": 30,
    },
}

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def default_config_path() -> Path:
    home = os.environ.get("POSEIDON2BLS_HOME")
    base = Path(home) if home else Path.home() / ".poseidon2bls"
    return base / "config.json"


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load configuration.

    An explicit ``config_path`` must exist. The implicit default file is
    skipped under pytest so tests never depend on the user's home directory.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path is not None:
        path: Optional[Path] = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"config file not found: {path}")
    elif os.environ.get("PYTEST_CURRENT_TEST"):
        path = None
    else:
        path = default_config_path()

    if path is not None and path.exists():
        file_cfg = _read_json(path)
        if file_cfg:
            config = _merge(config, file_cfg)
            logger.debug("loaded config from %s", path)

    _apply_env_overrides(config)
    return _validate(config)


def _read_json(path: Path) -> dict:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("could not read %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("ignoring %s: top level must be an object", path)
        return {}
    return data


def _merge(base: dict, override: dict) -> dict:
    """Deep merge override into base."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env_overrides(config: dict) -> None:
    """Apply explicit env var overrides after file/default loading."""
    oracle = config.setdefault("oracle", {})

    variant = os.environ.get("POSEIDON2BLS_VARIANT")
    if variant:
        config["variant"] = variant

    seed = os.environ.get("POSEIDON2BLS_SEED")
    if seed:
        config["seed"] = seed

    log_level = os.environ.get("POSEIDON2BLS_LOG_LEVEL")
    if log_level:
        config["log_level"] = log_level

    # a malformed file section is reported by _validate
    if not isinstance(oracle, dict):
        return

    oracle_cmd = os.environ.get("POSEIDON2BLS_ORACLE_CMD")
    if oracle_cmd:
        oracle["command"] = shlex.split(oracle_cmd)

    timeout = os.environ.get("POSEIDON2BLS_ORACLE_TIMEOUT")
    if timeout:
        try:
            oracle["timeout_seconds"] = float(timeout)
        except ValueError:
            logger.warning("invalid POSEIDON2BLS_ORACLE_TIMEOUT=%r", timeout)


def _validate(config: dict) -> dict:
    try:
        config["variant"] = Variant(config["variant"]).value
    except (ValueError, TypeError) as exc:
        raise ValueError(f"unknown variant {config['variant']!r} in configuration") from exc

    if not isinstance(config["seed"], str):
        raise ValueError(f"seed must be a string, got {config['seed']!r}")

    level = str(config.get("log_level", "WARNING")).upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"unknown log level {config['log_level']!r} in configuration")
    config["log_level"] = level

    oracle = config["oracle"]
    if not isinstance(oracle, dict):
        raise ValueError(f"oracle section must be an object, got {oracle!r}")

    command = oracle.get("command")
    if isinstance(command, str):
        command = shlex.split(command)
    elif command is not None and not (
        isinstance(command, list) and all(isinstance(arg, str) for arg in command)
    ):
        raise ValueError(f"oracle command must be a string or a list of strings, got {command!r}")
    oracle["command"] = command

    timeout = oracle.get("timeout_seconds", DEFAULT_CONFIG["oracle"]["timeout_seconds"])
    try:
        if isinstance(timeout, bool):
            raise TypeError(timeout)
        timeout = float(timeout)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"oracle timeout_seconds must be a number, got {timeout!r}") from exc
    if timeout <= 0:
        raise ValueError(f"oracle timeout_seconds must be positive, got {timeout!r}")
    oracle["timeout_seconds"] = timeout
    return config


__all__ = ["DEFAULT_CONFIG", "default_config_path", "load_config"]
