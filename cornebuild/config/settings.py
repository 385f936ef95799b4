"""Tool settings for Cornebuild.

Settings are loaded once at startup from several sources:
1. Environment variables prefixed with ``CORNEBUILD_`` (highest precedence)
2. A YAML config file given with ``--config`` or found in the current directory
3. Default values (lowest precedence)
"""

from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from cornebuild.cli.helpers.theme import IconMode
from cornebuild.core.errors import ConfigError
from cornebuild.core.logging import LOG_LEVELS
from cornebuild.core.structlog_logger import get_struct_logger


logger = get_struct_logger(__name__)

ENV_PREFIX = "CORNEBUILD_"

WORKSPACE_CONFIG_PATH = Path("/workspaces/zmk/zmk-config/config")
LOCAL_CONFIG_PATH = Path("zmk-config/config")

DEFAULT_CONFIG_FILES = [Path("cornebuild.yaml"), Path(".cornebuild.yml")]


class BuildSettings(BaseSettings):
    """Settings for locating the build tool, sources and outputs."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Environment variables override file configuration."""
        return (env_settings, init_settings)

    west_command: str = Field(
        default="west", description="Executable used to run the ZMK build"
    )
    source_dir: Path = Field(
        default=Path("app"), description="ZMK application directory passed to -s"
    )
    build_root: Path = Field(
        default=Path("build"), description="Root directory for build outputs"
    )
    board: str = Field(default="nice_nano", description="Board identifier")
    artifact_relpath: Path = Field(
        default=Path("zephyr/zmk.uf2"),
        description="Firmware image location inside a target's output directory",
    )
    config_candidates: Annotated[list[Path], NoDecode] = Field(
        default_factory=lambda: [WORKSPACE_CONFIG_PATH, LOCAL_CONFIG_PATH],
        description="ZMK config directories to try, in priority order",
    )
    log_level: str = "WARNING"
    icon_mode: IconMode = Field(
        default=IconMode.EMOJI,
        description="Icon display mode: 'emoji' (default), 'nerdfont', or 'text'",
    )

    @field_validator("config_candidates", mode="before")
    @classmethod
    def decode_config_candidates(cls, v: Any) -> list[Path]:
        if isinstance(v, str):
            return [Path(path.strip()) for path in v.split(",") if path.strip()]
        elif isinstance(v, list):
            return [Path(str(path).strip()) for path in v if str(path).strip()]
        raise ValueError("config_candidates must be a list or comma separated string")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a recognized value."""
        upper_v = v.strip().upper()
        if upper_v not in LOG_LEVELS:
            raise ValueError(f"Log level must be one of {LOG_LEVELS}")
        return upper_v

    @field_validator("west_command", "board")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Value cannot be empty")
        return v.strip()


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}", path=str(path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Config file {path} must contain a mapping", path=str(path)
        )
    return data


def load_settings(
    config_file: str | Path | None = None, cwd: Path | None = None
) -> BuildSettings:
    """Load settings from an optional YAML file and the environment.

    Args:
        config_file: Explicit config file path; it must exist
        cwd: Directory searched for default config files (defaults to cwd)

    Returns:
        Validated, immutable settings

    Raises:
        ConfigError: If the file cannot be read or values are invalid
    """
    data: dict[str, Any] = {}
    found_path: Path | None = None

    if config_file is not None:
        found_path = Path(config_file).expanduser()
        if not found_path.is_file():
            raise ConfigError(
                f"Config file not found: {found_path}", path=str(found_path)
            )
    else:
        base = cwd or Path.cwd()
        found_path = next(
            (base / name for name in DEFAULT_CONFIG_FILES if (base / name).is_file()),
            None,
        )

    if found_path is not None:
        data = _read_yaml(found_path)
        logger.debug("settings_file_loaded", path=str(found_path), keys=sorted(data))
    else:
        logger.debug("settings_file_not_found")

    try:
        return BuildSettings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e


__all__ = [
    "BuildSettings",
    "DEFAULT_CONFIG_FILES",
    "ENV_PREFIX",
    "LOCAL_CONFIG_PATH",
    "WORKSPACE_CONFIG_PATH",
    "load_settings",
]
