"""Configuration loader.

Reads extractor configuration files in YAML format (JSON is accepted
too, being a subset of YAML) and returns a dictionary.  Default
configuration files reside in the `configs/` directory at the project
root.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .logging import get_logger

logger = get_logger(__name__)


def load_config(path: str, section: Optional[str] = None) -> Dict[str, Any]:
    """Load a YAML configuration file into a dictionary.

    Parameters
    ----------
    path : str
        Path to the YAML configuration file.
    section : str, optional
        Top-level key to return instead of the whole document.  When
        the key is absent the whole document is returned.

    Returns
    -------
    dict
        Parsed configuration dictionary.  Returns an empty dict if the
        file does not exist or is empty.

    Raises
    ------
    ValueError
        If the file is not valid YAML or does not hold a mapping.
    """
    cfg_path = Path(path)
    if not cfg_path.is_file():
        logger.warning("Configuration file %s not found, using defaults.", cfg_path)
        return {}
    try:
        with open(cfg_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid configuration file {cfg_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {cfg_path} must contain a mapping")
    if section is not None and isinstance(data.get(section), dict):
        return data[section]
    return data
