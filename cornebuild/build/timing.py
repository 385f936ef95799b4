"""Human readable durations."""


def format_duration(seconds: int) -> str:
    """Format a whole number of seconds as ``"Xs"`` or ``"Xm Ys"``.

    >>> format_duration(5)
    '5s'
    >>> format_duration(65)
    '1m 5s'
    """
    if seconds < 0:
        raise ValueError(f"Duration cannot be negative: {seconds}")
    if seconds < 60:
        return f"{seconds}s"
    minutes, remaining = divmod(seconds, 60)
    return f"{minutes}m {remaining}s"


def elapsed_seconds(start: float, end: float) -> int:
    """Whole seconds between two clock readings, never negative."""
    return max(0, int(end - start))


__all__ = ["elapsed_seconds", "format_duration"]
