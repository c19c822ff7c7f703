"""
Pipeline configuration management.

Loads settings from an optional YAML file and applies environment variable
overrides on top.

Expected YAML format:
```yaml
pipeline:
  input_file: data/CLIENTES_IN_0425.dat
  batch_size: 200
  delimiter: "|"
  encoding: utf-8
```
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from src.core.errors import ConfigurationError


DEFAULT_INPUT_FILE = "CLIENTES_IN_0425.dat"
DEFAULT_BATCH_SIZE = 200

# Environment variable -> config field
ENV_OVERRIDES = {
    "INGEST_INPUT_FILE": "input_file",
    "INGEST_BATCH_SIZE": "batch_size",
    "INGEST_DELIMITER": "delimiter",
    "INGEST_ENCODING": "encoding",
    "INGEST_PROGRESS_EVERY_BATCH": "progress_every_batch",
}


class PipelineConfig(BaseModel):
    """
    Settings of one ingestion pipeline.

    Attributes:
        input_file: Default input path, used when a run does not name one
        batch_size: Records accumulated before each flush
        delimiter: Field separator of the input file
        encoding: Text encoding of the input file
        progress_every_batch: Emit a progress log after every flush
    """

    input_file: str = DEFAULT_INPUT_FILE
    batch_size: int = Field(DEFAULT_BATCH_SIZE, ge=1)
    delimiter: str = Field("|", min_length=1)
    encoding: str = "utf-8"
    progress_every_batch: bool = True

    @field_validator("input_file")
    @classmethod
    def check_input_file(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("input_file must not be empty")
        return v

    class Config:
        frozen = True


def load_config(config_path: str | Path | None = None, **overrides: Any) -> PipelineConfig:
    """
    Build a PipelineConfig from YAML, environment and explicit overrides.

    Precedence, lowest first: defaults, YAML file, INGEST_* environment
    variables, keyword overrides (None values are ignored).

    Args:
        config_path: Optional path to a YAML file with a 'pipeline' section
        **overrides: Field values that win over every other source

    Returns:
        Validated PipelineConfig

    Raises:
        ConfigurationError: If the file is missing or a value is invalid
    """
    values: dict[str, Any] = {}

    if config_path is not None:
        values.update(_read_yaml(Path(config_path)))

    for env_name, field_name in ENV_OVERRIDES.items():
        env_value = os.getenv(env_name)
        if env_value is not None and env_value != "":
            values[field_name] = env_value

    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return PipelineConfig(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid pipeline configuration: {e}") from e


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    with open(path) as f:
        config = yaml.safe_load(f)

    if not config:
        return {}

    if not isinstance(config, dict) or not isinstance(config.get("pipeline", {}), dict):
        raise ConfigurationError("Configuration file must contain a 'pipeline' mapping")

    return dict(config.get("pipeline") or {})
