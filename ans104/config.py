"""
CLI configuration — ~/.ans104/config.toml

    wallet = "/path/to/wallet.json"   # default JWK for `ans104 create`
    log_level = "WARNING"
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "wallet": "",
    "log_level": "WARNING",
}

_DEFAULT_CONFIG_PATH = Path.home() / ".ans104" / "config.toml"


def _load_toml(path: Path) -> dict[str, Any] | None:
    try:
        import tomllib
    except ImportError:
        try:
            import tomli as tomllib
        except ImportError:
            log.warning("tomllib/tomli not available, using default config")
            return None

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        log.warning("Failed to load config from %s: %s", path, e)
        return None


def load_config(config_path: Path | str | None = None) -> dict[str, Any]:
    """Load CLI config from TOML, falling back to defaults.

    Priority: explicit path > ANS104_CONFIG env var > ~/.ans104/config.toml.
    Unknown keys are ignored.
    """
    config = dict(DEFAULT_CONFIG)

    env_path = os.environ.get("ANS104_CONFIG", "")
    path = Path(config_path or env_path or _DEFAULT_CONFIG_PATH)
    if path.is_file():
        file_config = _load_toml(path)
        if file_config:
            config.update({k: v for k, v in file_config.items() if k in DEFAULT_CONFIG})

    return config
