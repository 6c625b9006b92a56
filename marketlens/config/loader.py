import copy
from pathlib import Path
from typing import Optional

import yaml

from .defaults import DEFAULT_CONFIG


# -------------------------------------------------
# MAIN CONFIG LOADER
# -------------------------------------------------
def load_config(path: Optional[str] = None) -> dict:
    """
    Load and merge user config with framework defaults.

    Rules:
    - Defaults ALWAYS win if user omits fields
    - Nested sections merge key by key
    - output_dir MUST always exist
    """

    # -------------------------------------------------
    # 1️⃣ Load user config (if provided)
    # -------------------------------------------------
    user_config = {}

    if path:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}

        if not isinstance(user_config, dict):
            raise ValueError("Config file must contain a YAML dictionary")

    return merge_config(user_config)


def merge_config(overrides: Optional[dict] = None) -> dict:
    """
    Merge an in-memory override dict onto a fresh copy of the defaults.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(config.get(key), dict):
            config[key].update(value)
        else:
            config[key] = value

    config.setdefault("output_dir", "runs")
    return config
