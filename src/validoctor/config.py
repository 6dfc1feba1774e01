"""Configuration management for validoctor using Pydantic models."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

CONFIG_FILE_NAME = ".validoctor.json"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class TraitsConfig(BaseModel):
    """Execution traits of a Validoctor."""
    pedantic: bool = True
    exceptional: bool = False


class TraversalConfig(BaseModel):
    """Traversal limits section."""
    max_depth: int = Field(alias="maxDepth", default=64)

    @field_validator("max_depth")
    @classmethod
    def validate_max_depth(cls, v):
        if v < 1:
            raise ValueError("max_depth must be >= 1")
        return v

    model_config = ConfigDict(populate_by_name=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.WARN

    model_config = ConfigDict(use_enum_values=True)


class ValidoctorConfig(BaseModel):
    """Complete validoctor configuration model."""
    traits: TraitsConfig = Field(default_factory=TraitsConfig)
    traversal: TraversalConfig = Field(default_factory=TraversalConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")


def load_config(config_path: str | Path | None = None) -> ValidoctorConfig:
    """Read traits and limits from a ``.validoctor.json`` file.

    Without a path the nearest config file above the working directory is used.
    When no file exists the defaults apply.

    Raises:
        ValueError: If the file is not JSON, holds unknown keys or out-of-range values,
            or cannot be read
    """
    path = find_config_file() if config_path is None else Path(config_path)
    if path is None or not path.is_file():
        return create_default_config()

    try:
        return ValidoctorConfig.model_validate_json(path.read_bytes())
    except ValidationError as e:
        if any(error["type"] == "json_invalid" for error in e.errors()):
            raise ValueError(f"Invalid JSON in config file {path}: {e.errors()[0]['msg']}") from e
        raise ValueError(f"Invalid configuration in {path}:\n{e}") from e
    except OSError as e:
        raise ValueError(f"Cannot read config file {path}: {e}") from e


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Nearest ``.validoctor.json`` in ``start_dir`` (default: cwd) or one of its parents."""
    start = Path.cwd() if start_dir is None else Path(start_dir).resolve()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def create_default_config() -> ValidoctorConfig:
    """Create default configuration: pedantic, non-exceptional."""
    return ValidoctorConfig()
