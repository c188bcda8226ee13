"""Configuration loader for the Research Engine layout backend."""
from __future__ import annotations

import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

LOGGER = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_ENV_FILE = REPO_ROOT / ".env"
DEFAULT_BACKEND_URL = "http://localhost:3000"

BACKEND_URL_ENV_VARS = (
    "RESEARCH_ENGINE_BACKEND_URL",
    "VITE_BACKEND_URL",
)


class ConfigError(RuntimeError):
    """Raised when configuration cannot be loaded."""


class _FrozenModel(BaseModel):
    """Base model enforcing immutability for config sections."""

    model_config = ConfigDict(frozen=True)


class PipelineConfig(_FrozenModel):
    """Pipeline-level configuration."""

    version: str = Field(..., min_length=1)


class TreeLayoutConfig(_FrozenModel):
    """Parameters for the initial tree placement of nodes."""

    depth_spacing: float = Field(10.0, gt=0)
    sibling_gap: float = Field(0.45, ge=0.0)
    min_radius: float = Field(0.45, gt=0)
    size_radius_scale: float = Field(0.11, ge=0.0)
    jitter_span: float = Field(4.2, ge=0.0)
    fallback_jitter_span: float = Field(4.8, ge=0.0)
    fallback_columns: int = Field(8, ge=1)
    fallback_row_spacing: float = Field(1.6, ge=0.0)
    fallback_row_offset: float = Field(5.5)


class RelaxationConfig(_FrozenModel):
    """Parameters for the collision relaxation pass."""

    iterations: int = Field(120, ge=0)
    padding: float = Field(0.35, ge=0.0)
    spring_strength: float = Field(0.065, ge=0.0, le=1.0)


class LayoutConfig(_FrozenModel):
    """Layout engine configuration."""

    tree: TreeLayoutConfig = Field(default_factory=TreeLayoutConfig)
    relaxation: RelaxationConfig = Field(default_factory=RelaxationConfig)
    cache_max_entries: int = Field(32, ge=0)


class UIConfig(_FrozenModel):
    """UI-specific configuration values."""

    backend_url: str = Field(DEFAULT_BACKEND_URL)
    allowed_origins: List[str] = Field(default_factory=list)
    camera_distance: float = Field(34.0, gt=0)

    @field_validator("backend_url")
    @classmethod
    def _normalize_backend(cls, value: str) -> str:
        return normalize_backend_url(value)


class AppConfig(_FrozenModel):
    """Top-level application configuration composed from config.yaml."""

    pipeline: PipelineConfig
    layout: LayoutConfig
    ui: UIConfig

    @staticmethod
    def default_path() -> Path:
        """Return the default location of the configuration file.

        Returns:
            Path: Absolute path to config.yaml at the repository root.
        """
        return REPO_ROOT / "config.yaml"


def normalize_backend_url(raw_url: Optional[str]) -> str:
    """Normalize a backend base URL supplied by configuration or environment.

    Blank values fall back to the local development backend, a single trailing
    slash is removed, and a bare host is assumed to be served over HTTPS.

    Args:
        raw_url: Raw URL string, possibly empty.

    Returns:
        str: Normalized absolute URL without a trailing slash.
    """

    trimmed = (raw_url or "").strip()
    if not trimmed:
        return DEFAULT_BACKEND_URL
    without_trailing_slash = re.sub(r"/$", "", trimmed)
    if re.match(r"^https?://", without_trailing_slash, flags=re.IGNORECASE):
        return without_trailing_slash
    return "https://" + re.sub(r"^/+", "", without_trailing_slash)


def _determine_env_file_path() -> Optional[Path]:
    """Return the path to the environment file if one should be loaded."""

    override = os.getenv("RESEARCH_ENGINE_ENV_FILE")
    if override:
        candidate = Path(override).expanduser()
        if candidate.exists():
            return candidate
        LOGGER.warning("Configured environment file override does not exist: %s", candidate)
        return None
    if os.getenv("RESEARCH_ENGINE_SKIP_ENV_FILE"):
        return None
    if DEFAULT_ENV_FILE.exists():
        return DEFAULT_ENV_FILE
    return None


def _strip_inline_comment(value: str) -> str:
    """Remove inline comments from an environment value when unquoted."""

    comment_index = value.find("#")
    if comment_index == -1:
        return value
    return value[:comment_index].rstrip()


def _parse_env_line(raw_line: str) -> Optional[Tuple[str, str]]:
    """Split one ``KEY=value`` line, returning ``None`` for blanks and comments."""

    line = raw_line.strip()
    if line.lower().startswith("export "):
        line = line[len("export ") :].lstrip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, _, value = line.partition("=")
    key = key.strip()
    if not key:
        return None
    value = value.strip()
    if len(value) >= 2 and value[0] in {'"', "'"} and value[-1] == value[0]:
        return key, value[1:-1]
    return key, _strip_inline_comment(value)


def _load_env_file(path: Path) -> None:
    """Export ``.env`` entries that are not already set to a non-blank value."""

    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError:
        LOGGER.warning("Unable to read environment file at %s", path)
        return
    for entry in filter(None, map(_parse_env_line, lines)):
        key, value = entry
        if os.environ.get(key, "").strip():
            continue
        os.environ[key] = value


def _backend_url_from_env() -> Optional[str]:
    """Return the first backend URL found in supported environment variables."""

    for key in BACKEND_URL_ENV_VARS:
        raw = os.getenv(key)
        if raw and raw.strip():
            return raw
    return None


def _apply_environment_overrides(raw_content: Dict[str, Any]) -> Dict[str, Any]:
    """Merge environment-based overrides into the raw configuration mapping.

    Args:
        raw_content: Parsed YAML configuration prior to Pydantic validation.

    Returns:
        Dict[str, Any]: Configuration mapping with environment overrides applied.
    """

    env_file_path = _determine_env_file_path()
    if env_file_path is not None:
        _load_env_file(env_file_path)

    backend_url = _backend_url_from_env()
    if backend_url is not None:
        ui_section = raw_content.setdefault("ui", {})
        ui_section["backend_url"] = backend_url
        LOGGER.info("UI backend URL overridden from environment")
    return raw_content


def _read_yaml(path: Path) -> Dict[str, Any]:
    """Read YAML content from disk.

    Args:
        path: Location of the YAML file.

    Returns:
        Dict[str, Any]: Parsed YAML content.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError as exc:
        LOGGER.error("Configuration file missing at %s", path)
        raise ConfigError("Configuration file not found") from exc
    except yaml.YAMLError as exc:
        LOGGER.error("Invalid YAML syntax in %s", path)
        raise ConfigError("Invalid YAML syntax") from exc
    if not isinstance(data, dict):
        LOGGER.error("Configuration root must be a mapping: %s", path)
        raise ConfigError("Configuration root must be a mapping")
    return data


@lru_cache(maxsize=1)
def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load application configuration from YAML.

    Args:
        path: Optional override path to the YAML file.

    Returns:
        AppConfig: Parsed configuration object.

    Raises:
        ConfigError: If the configuration cannot be loaded or validated.
    """
    config_path = path or AppConfig.default_path()
    raw_content = _read_yaml(config_path)
    raw_content = _apply_environment_overrides(raw_content)
    try:
        return AppConfig(**raw_content)
    except ValidationError as exc:
        LOGGER.error("Invalid configuration values: %s", exc)
        raise ConfigError("Configuration validation failed") from exc
