"""Settings loading and ZMK config discovery."""

from cornebuild.config.resolver import resolve_zmk_config
from cornebuild.config.settings import BuildSettings, load_settings


__all__ = ["BuildSettings", "load_settings", "resolve_zmk_config"]
