from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from utils import deep_merge


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "config.json"


def load_json_config(path: Path) -> Dict[str, Any]:
    """Load a JSON config file or raise a helpful error.

    Args:
        path: Path to the JSON configuration file.

    Returns:
        Parsed JSON data as a dictionary.

    Raises:
        FileNotFoundError: If the file does not exist.
        SystemExit: If JSON is invalid or not an object, with a friendly message.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        msg = (
            f"\nERROR: Your config is not valid JSON.\n"
            f"File: {path}\n"
            f"Line {e.lineno}, Col {e.colno}\n"
            f"{e.msg}\n"
        )
        raise SystemExit(msg)
    if not isinstance(data, dict):
        raise SystemExit(f"\nERROR: Config root must be a JSON object.\nFile: {path}\n")
    return data


def load_layered_config(user_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the bundled defaults and overlay an optional user config on top."""
    if DEFAULT_CONFIG_PATH.exists():
        cfg = load_json_config(DEFAULT_CONFIG_PATH)
    else:
        # installed (non-editable) copies ship without config.json; config_parsing
        # defaults mirror it value for value
        logger.info("no config.json at %s, using built-in defaults", DEFAULT_CONFIG_PATH)
        cfg = {}
    if user_path is not None:
        logger.info("overlaying user config %s", user_path)
        cfg = deep_merge(cfg, load_json_config(user_path))
    return cfg
