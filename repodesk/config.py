"""repodesk configuration management using Pydantic."""

from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from repodesk.constants import (
    CONFIG_FILE,
    DEFAULT_GIT_BINARY,
    DEFAULT_PUSH_BRANCH,
    DEFAULT_REMOTE,
    DEFAULT_TIMEOUT_SECONDS,
    LOGS_DIR,
)
from repodesk.exceptions import ConfigurationError


class ExecutorConfig(BaseModel):
    """How git subprocesses are spawned."""

    git_binary: str = Field(default=DEFAULT_GIT_BINARY, min_length=1)
    timeout_seconds: int | None = Field(default=DEFAULT_TIMEOUT_SECONDS, ge=1, le=3600)
    non_interactive: bool = True


class OperationsConfig(BaseModel):
    """Defaults used by the operation catalog."""

    default_remote: str = Field(default=DEFAULT_REMOTE, min_length=1)
    default_push_branch: str = Field(default=DEFAULT_PUSH_BRANCH, min_length=1)
    verify_marker: bool = True


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="info", pattern="^(debug|info|warn|error)$")
    directory: str = LOGS_DIR
    json_output: bool = False
    console_output: bool = True


class RepodeskConfig(BaseModel):
    """Complete repodesk configuration."""

    executor: ExecutorConfig = Field(default_factory=ExecutorConfig)
    operations: OperationsConfig = Field(default_factory=OperationsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> "RepodeskConfig":
        """Load configuration from YAML file.

        Args:
            config_path: Path to config file. Defaults to .repodesk/config.yaml

        Returns:
            RepodeskConfig instance

        Raises:
            ConfigurationError: If the file cannot be parsed or validated
        """
        config_path = Path(CONFIG_FILE) if config_path is None else Path(config_path)

        if not config_path.exists():
            return cls()

        try:
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in {config_path}", details={"error": str(e)}
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping: {config_path}",
                details={"type": type(data).__name__},
            )

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RepodeskConfig":
        """Create configuration from dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            RepodeskConfig instance
        """
        try:
            return cls(**data)
        except PydanticValidationError as e:
            raise ConfigurationError(
                "Invalid configuration", details={"errors": e.errors(include_url=False)}
            ) from e

    def save(self, config_path: str | Path | None = None) -> None:
        """Save configuration to YAML file.

        Args:
            config_path: Path to save config. Defaults to .repodesk/config.yaml
        """
        config_path = Path(CONFIG_FILE) if config_path is None else Path(config_path)

        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump()
