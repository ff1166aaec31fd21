"""Clock helpers shared by the timer feature"""
import math
import time


def now_ms() -> int:
    """
    Current wall-clock instant in epoch milliseconds.

    Returns:
        int: milliseconds since the Unix epoch
    """
    return int(time.time() * 1000)


def format_duration(ms: int) -> str:
    """
    Render a countdown value the way the timer panel shows it.

    Partial seconds round up so a countdown reads "00:01" until it actually
    reaches zero.

    Args:
        ms: remaining time in milliseconds (negative values render as zero)

    Returns:
        str: "HH:MM:SS" when at least one hour remains, otherwise "MM:SS"
    """
    total_seconds = max(0, math.ceil(ms / 1000))
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)

    if hours:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"
