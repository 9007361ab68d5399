"""Configuration management for Compose Teardown."""

import json
import logging
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class TeardownConfig(BaseModel):
    """Settings for the runtime client and the teardown worker pool."""

    runtime: Literal["auto", "docker", "podman"] = Field(
        default="auto",
        description="Container runtime executable (auto prefers podman, then docker)",
    )
    max_workers: int = Field(
        default=8,
        ge=1,
        description="Maximum number of runtime calls in flight at once",
    )
    # None leaves each runtime command unbounded
    command_timeout: Optional[int] = Field(
        default=None,
        ge=1,
        description="Timeout in seconds for a single runtime command",
    )


class ConfigManager:
    """Manages configuration loading and saving."""

    DEFAULT_CONFIG_PATH = Path(".compose-teardown/config.json")

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or self.DEFAULT_CONFIG_PATH
        self._config: Optional[TeardownConfig] = None

    @classmethod
    def create_with_backtrack(
        cls, start_dir: Optional[Path] = None
    ) -> "ConfigManager":
        """Create a manager for the nearest config file at or above start_dir.

        Falls back to the default location under start_dir when no parent
        directory holds a config file.
        """
        start = (start_dir or Path.cwd()).resolve()
        for directory in [start, *start.parents]:
            candidate = directory / cls.DEFAULT_CONFIG_PATH
            if candidate.exists():
                logger.debug(f"Using config file: {candidate}")
                return cls(candidate)
        return cls(start / cls.DEFAULT_CONFIG_PATH)

    def load(self) -> TeardownConfig:
        """Load configuration from file, or defaults when the file is missing."""
        if self.config_path.exists():
            try:
                with open(self.config_path, "r") as f:
                    data = json.load(f)
                self._config = TeardownConfig(**data)
            except Exception as e:
                raise ValueError(f"Failed to load config from {self.config_path}: {e}")
        else:
            self._config = TeardownConfig()

        return self._config

    def save(self, config: Optional[TeardownConfig] = None) -> None:
        if config is None:
            config = self._config

        if config is None:
            raise ValueError("No configuration to save")

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w") as f:
            json.dump(config.model_dump(), f, indent=2)
        self._config = config
