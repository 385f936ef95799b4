"""Themed console output with emoji, nerdfont or plain text icons."""

from enum import Enum

from rich.console import Console
from rich.theme import Theme


class IconMode(str, Enum):
    """Icon display modes."""

    EMOJI = "emoji"
    NERDFONT = "nerdfont"
    TEXT = "text"


class Colors:
    """Color palette for build output."""

    SUCCESS = "bold green"
    ERROR = "bold red"
    WARNING = "bold yellow"
    INFO = "bold blue"
    PRIMARY = "cyan"
    MUTED = "dim"
    TIMING = "cyan"


class Icons:
    """Icons for each kind of message, per icon mode."""

    SUCCESS = "✅"
    ERROR = "❌"
    WARNING = "⚠️"
    INFO = "ℹ️"
    BULLET = "•"
    BUILD = "🔨"
    CLOCK = "⏱️"

    _NERDFONT_ICONS = {
        "SUCCESS": "\uf058",  # nf-fa-check_circle
        "ERROR": "\uf057",  # nf-fa-times_circle
        "WARNING": "\uf071",  # nf-fa-warning
        "INFO": "\uf05a",  # nf-fa-info_circle
        "BULLET": "\uf111",  # nf-fa-circle
        "BUILD": "\uf6e3",  # nf-fa-hammer
        "CLOCK": "\uf017",  # nf-fa-clock_o
    }

    # Plain output for terminals without emoji; empty means no icon
    _TEXT_FALLBACKS = {
        "SUCCESS": "✓",
        "ERROR": "✗",
        "WARNING": "!",
        "BULLET": "-",
    }

    @classmethod
    def get_icon(cls, icon_name: str, icon_mode: str = "emoji") -> str:
        """Return the icon for ``icon_name`` in ``icon_mode``, or an empty string."""
        if icon_mode == IconMode.NERDFONT.value:
            return cls._NERDFONT_ICONS.get(icon_name, "")
        if icon_mode == IconMode.EMOJI.value:
            return str(getattr(cls, icon_name, ""))
        return cls._TEXT_FALLBACKS.get(icon_name, "")

    @classmethod
    def format_with_icon(
        cls, icon_name: str, text: str, icon_mode: str = "emoji"
    ) -> str:
        icon = cls.get_icon(icon_name, icon_mode)
        return f"{icon} {text}" if icon else text


CORNEBUILD_THEME = Theme(
    {
        "success": Colors.SUCCESS,
        "error": Colors.ERROR,
        "warning": Colors.WARNING,
        "info": Colors.INFO,
        "primary": Colors.PRIMARY,
        "muted": Colors.MUTED,
        "timing": Colors.TIMING,
    }
)


class ThemedConsole:
    """Console wrapper with Cornebuild theme applied.

    Messages are printed without markup or highlighting and with soft
    wrapping, so file paths reach the terminal exactly as given.
    """

    def __init__(self, icon_mode: str = "emoji", stderr: bool = False) -> None:
        """Initialize themed console.

        Args:
            icon_mode: Icon mode - "emoji", "nerdfont", or "text"
            stderr: Write to standard error instead of standard output
        """
        self.console = Console(
            theme=CORNEBUILD_THEME, stderr=stderr, highlight=False, soft_wrap=True
        )
        self.icon_mode = icon_mode

    def _print(self, message: str, style: str | None = None) -> None:
        self.console.print(message, style=style, markup=False, emoji=False)

    def print(self, message: str = "") -> None:
        """Print an unstyled line."""
        self._print(message)

    def print_success(self, message: str) -> None:
        """Print success message with icon and styling."""
        self._print(
            Icons.format_with_icon("SUCCESS", message, self.icon_mode), "success"
        )

    def print_error(self, message: str) -> None:
        """Print error message with icon and styling."""
        self._print(
            Icons.format_with_icon("ERROR", message, self.icon_mode), "error"
        )

    def print_warning(self, message: str) -> None:
        """Print warning message with icon and styling."""
        self._print(
            Icons.format_with_icon("WARNING", message, self.icon_mode), "warning"
        )

    def print_info(self, message: str) -> None:
        """Print info message with icon and styling."""
        self._print(
            Icons.format_with_icon("INFO", message, self.icon_mode), "info"
        )

    def print_step(self, message: str) -> None:
        """Print the start of a build step."""
        self._print(
            Icons.format_with_icon("BUILD", message, self.icon_mode), "primary"
        )

    def print_timing(self, message: str) -> None:
        """Print a timing line."""
        self._print(
            Icons.format_with_icon("CLOCK", message, self.icon_mode), "timing"
        )

    def print_list_item(self, message: str, indent: int = 1) -> None:
        """Print list item with bullet and styling."""
        spacing = "  " * indent
        bullet = Icons.get_icon("BULLET", self.icon_mode)
        self._print(f"{spacing}{bullet} {message}", "primary")

    def print_rule(self, heavy: bool = True) -> None:
        """Print a separator line for summary blocks."""
        self._print(("=" if heavy else "-") * 60, "muted")


def get_themed_console(icon_mode: str = "emoji", stderr: bool = False) -> ThemedConsole:
    """Get a themed console instance.

    Args:
        icon_mode: Icon mode - "emoji", "nerdfont", or "text"
        stderr: Write to standard error instead of standard output

    Returns:
        Configured ThemedConsole instance
    """
    return ThemedConsole(icon_mode=icon_mode, stderr=stderr)


__all__ = [
    "CORNEBUILD_THEME",
    "Colors",
    "IconMode",
    "Icons",
    "ThemedConsole",
    "get_themed_console",
]
