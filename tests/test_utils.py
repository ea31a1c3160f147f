import json
from pathlib import Path
from typing import Any

import pytest


def load_config(config_path: Path) -> Any:
    """Load configuration from the given path and return the parsed JSON."""
    with open(config_path, "r") as f:
        return json.load(f)


def load_config_or_skip(config_path: Path) -> Any:
    """Load a dev config, skipping the calling test when it has not been created."""
    if not config_path.exists():
        pytest.skip(f"{config_path} not found; live tests need real credentials")
    return load_config(config_path)
