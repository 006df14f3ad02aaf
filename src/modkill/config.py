"""User configuration for modkill.

Defaults for scan options live in ``~/.modkill/config.json``::

    {
      "target": "node_modules",
      "exclude": ["archive"],
      "exclude_hidden": true,
      "depth": 8
    }

Command-line flags override anything set here.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from modkill.models import DEFAULT_DEPTH, DEFAULT_MANIFEST, DEFAULT_TARGET, ScanOptions

log = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".modkill"
CONFIG_FILE = CONFIG_DIR / "config.json"


class Config(BaseModel):
    """Scan defaults read from the config file."""

    target: str = Field(DEFAULT_TARGET, description="Directory name to look for")
    manifest: str = Field(DEFAULT_MANIFEST, description="Manifest file next to the target")
    exclude: list[str] = Field(default_factory=list, description="Path substrings to skip")
    exclude_hidden: bool = Field(False, description="Skip hidden directories")
    hide_errors: bool = Field(False, description="Do not report traversal errors")
    depth: int = Field(DEFAULT_DEPTH, ge=0, description="Maximum scan depth")


def load_config(path: Path | None = None) -> Config:
    """
    Load configuration from disk.

    A missing file gives the defaults; an unreadable or invalid one is
    logged and also gives the defaults.
    """
    path = path or CONFIG_FILE
    if not path.exists():
        return Config()

    try:
        with open(path) as f:
            data = json.load(f)
        return Config.model_validate(data)
    except (json.JSONDecodeError, OSError, ValidationError) as e:
        log.warning("Ignoring config file %s: %s", path, e)
        return Config()


def build_scan_options(config: Config, **overrides: Any) -> ScanOptions:
    """
    Merge config defaults with command-line values.

    Overrides that are None are ignored. Exclude patterns from both sources
    are combined; boolean flags are enabled if either source enables them.
    """
    values: dict[str, Any] = {
        "target": config.target,
        "manifest": config.manifest,
        "exclude": tuple(config.exclude),
        "exclude_hidden": config.exclude_hidden,
        "hide_errors": config.hide_errors,
        "depth": config.depth,
    }

    for key, value in overrides.items():
        if value is None:
            continue
        if key == "exclude":
            values["exclude"] = tuple(values["exclude"]) + tuple(value)
        elif key in ("exclude_hidden", "hide_errors"):
            values[key] = values[key] or bool(value)
        elif key == "roots":
            values["roots"] = tuple(value)
        else:
            values[key] = value

    return ScanOptions(**values)
