"""Discovery of the external ZMK config directory."""

from pathlib import Path

from cornebuild.cli.helpers.theme import ThemedConsole
from cornebuild.config.settings import BuildSettings
from cornebuild.core.structlog_logger import get_struct_logger
from cornebuild.models.build import ResolvedConfig


logger = get_struct_logger(__name__)


def resolve_zmk_config(
    settings: BuildSettings,
    cwd: Path | None = None,
    console: ThemedConsole | None = None,
) -> ResolvedConfig:
    """Find the first existing config directory among the candidates.

    Candidates are checked in the order given by the settings. Relative
    candidates are taken relative to ``cwd``. Finding nothing is a normal
    outcome and yields an absent config.
    """
    base = (cwd or Path.cwd()).absolute()

    for candidate in settings.config_candidates:
        path = candidate if candidate.is_absolute() else base / candidate
        if path.is_dir():
            resolved = ResolvedConfig(path=path.absolute(), source=str(candidate))
            logger.info(
                "zmk_config_found", path=str(resolved.path), source=str(candidate)
            )
            if console is not None:
                console.print_info(f"Using custom config from: {resolved.path}")
            return resolved

    logger.info(
        "zmk_config_not_found",
        candidates=[str(c) for c in settings.config_candidates],
    )
    if console is not None:
        console.print_info("No custom config found - using default configuration")
    return ResolvedConfig()


__all__ = ["resolve_zmk_config"]
