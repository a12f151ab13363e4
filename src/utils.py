from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml


def setup_logging(level: int | str = "INFO") -> None:
    """Configure stdlib logging with a consistent, project-wide format."""
    root_logger = logging.getLogger()
    if root_logger.handlers:
        # Avoid duplicate handlers if called multiple times (e.g., service + CLI).
        root_logger.setLevel(level)
        return

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Read a YAML config file and return its top-level mapping."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    obj = yaml.safe_load(path.read_text())
    if obj is None:
        return {}
    if not isinstance(obj, dict):
        raise ValueError(f"Expected YAML mapping at {path}, got {type(obj)}")
    return obj


def config_section(cfg: dict[str, Any], name: str) -> dict[str, Any]:
    """Return `cfg[name]` if it is a mapping, else an empty dict."""
    section = cfg.get(name)
    return section if isinstance(section, dict) else {}
