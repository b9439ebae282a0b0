"""User configuration for leftovers."""

import json
import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(os.path.expanduser("~/.leftovers"))
CONFIG_FILE = CONFIG_DIR / "config.json"


class Settings(BaseModel):
    """Tunable scan settings."""

    stale_days: int = Field(365, ge=1, description="Age in days after which data counts as stale")
    max_workers: int = Field(4, ge=1, description="Parallel probe-location workers")
    entry_timeout: float = Field(
        30.0, gt=0, description="Seconds allowed to measure one entry before using a partial size"
    )
    include_brew_estimate: bool = Field(True, description="Ask Homebrew for a cleanup estimate")
    extra_exclusions: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Additional names to skip, keyed by probe location id",
    )
    protected_paths: list[str] = Field(
        default_factory=list,
        description="Paths (supports ~) that are never reported",
    )

    def exclusions_for(self, location_id: str) -> frozenset[str]:
        """Extra excluded names for one location."""
        return frozenset(self.extra_exclusions.get(location_id, []))

    def is_protected(self, path: Path) -> bool:
        """Whether path is, or is inside, a protected path."""
        path_str = str(path)
        for protected in self.protected_paths:
            protected_expanded = os.path.expanduser(protected).rstrip("/")
            if path_str == protected_expanded or path_str.startswith(protected_expanded + "/"):
                return True
        return False


def load_settings(config_file: Path | None = None) -> Settings:
    """
    Load settings from disk.

    A missing file gives defaults. An unreadable or invalid file is logged
    and also gives defaults.
    """
    path = config_file or CONFIG_FILE
    if not path.exists():
        return Settings()

    try:
        with open(path) as f:
            data = json.load(f)
        return Settings.model_validate(data)
    except (json.JSONDecodeError, OSError, ValidationError) as e:
        logger.warning("Ignoring invalid config %s: %s", path, e)
        return Settings()
