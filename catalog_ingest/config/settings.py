"""
Pipeline configuration management.

Settings come from an optional YAML file (``pipeline:`` section), overlaid
by environment variables. A .env file in the working directory is loaded
first so local runs can keep credentials out of the YAML.

Expected YAML format:
```yaml
pipeline:
  chunk_size: 100
  max_workers: 4
  catalog_base_url: https://catalog.internal/api
  catalog_timeout: 30
  log_level: INFO
  log_format: json
```
"""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from catalog_ingest.catalog.base import DEFAULT_MAX_BATCH_SIZE

# Environment variable -> settings field
ENV_VARS = {
    "CATALOG_CHUNK_SIZE": "chunk_size",
    "CATALOG_MAX_WORKERS": "max_workers",
    "CATALOG_BASE_URL": "catalog_base_url",
    "CATALOG_API_TOKEN": "catalog_token",
    "CATALOG_TIMEOUT": "catalog_timeout",
    "LOG_LEVEL": "log_level",
    "LOG_FORMAT": "log_format",
}


class PipelineSettings(BaseModel):
    """
    Runtime settings for the ingestion pipeline.

    Attributes:
        chunk_size: Items per catalog call; must not exceed the catalog's batch limit
        max_workers: Chunks reconciled concurrently within one batch
        catalog_base_url: Base URL of the catalog item service
        catalog_token: Optional bearer token for the catalog
        catalog_timeout: Per-request timeout in seconds
        log_level: Logging level name
        log_format: "json" or "text"
    """

    chunk_size: int = Field(DEFAULT_MAX_BATCH_SIZE, ge=1, le=1000)
    max_workers: int = Field(4, ge=1, le=64)
    catalog_base_url: str = "http://localhost:8080"
    catalog_token: str | None = None
    catalog_timeout: float = Field(30.0, gt=0.0, le=300.0)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "text"] = "json"


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path) as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping")

    section = config.get("pipeline", {})
    if not isinstance(section, dict):
        raise ValueError("'pipeline' section must be a mapping")
    return section


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
    load_env_file: bool = True,
) -> PipelineSettings:
    """
    Build settings from YAML, environment and explicit overrides (in that order).

    Args:
        config_path: Optional YAML file
        overrides: Values taking precedence over everything else (e.g. CLI flags);
            None values are ignored
        load_env_file: Whether to load a .env file first

    Returns:
        Validated PipelineSettings

    Raises:
        FileNotFoundError: If config_path does not exist
        ValueError: If any value is invalid
    """
    if load_env_file:
        load_dotenv(override=False)

    values: dict[str, Any] = {}
    if config_path is not None:
        values.update(_read_yaml(Path(config_path)))

    for env_var, field_name in ENV_VARS.items():
        raw = os.getenv(env_var)
        if raw is not None and raw != "":
            values[field_name] = raw.upper() if field_name == "log_level" else raw

    if overrides:
        values.update({k: v for k, v in overrides.items() if v is not None})

    unknown = set(values) - set(PipelineSettings.model_fields)
    if unknown:
        raise ValueError(f"Unknown pipeline settings: {', '.join(sorted(unknown))}")

    try:
        return PipelineSettings(**values)
    except PydanticValidationError as e:
        raise ValueError(f"Invalid pipeline settings: {e}") from e
