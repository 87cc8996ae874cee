"""Human-readable formatting of byte counts."""

import math

KB = 1024.0
MB = KB * 1024.0
GB = MB * 1024.0

NETWORK_GAUGE_SCALE = 2 * GB

_UNITS = ["B", "KB", "MB", "GB", "TB"]


def format_bytes(size: float) -> str:
    """Format a byte count with two decimals and a B..TB suffix."""
    unit_index = 0
    value = float(size)
    while value >= 1024.0 and unit_index < len(_UNITS) - 1:
        value /= 1024.0
        unit_index += 1
    return f"{value:.2f} {_UNITS[unit_index]}"


def _truncate(value: float) -> str:
    # Two decimals, truncated rather than rounded, trailing zeros dropped.
    return f"{math.trunc(value * 100) / 100:g}"


def format_network_bytes(size: int) -> str:
    """
    Format an interface byte counter for display.

    Returns an empty string when the scaled value falls outside the range
    the network view displays (10 GB and above, for instance).
    """
    if size >= GB:
        gb = size / GB
        if gb >= 10.0:
            return ""
        return f"{_truncate(gb)} GB"
    if size >= MB:
        mb = size / MB
        if mb >= 1000.0:
            return ""
        return f"{_truncate(mb)} MB"
    if size >= KB:
        kb = size / KB
        if kb >= 1_000_000.0 or kb < 0.01:
            return ""
        return f"{_truncate(kb)} KB"
    if size == 0:
        return "0 B"
    return f"{size} B"


def capped_ratio(size: float, scale: float = NETWORK_GAUGE_SCALE) -> float:
    """Fraction of scale that size represents, clamped to [0, 1]."""
    if scale <= 0:
        return 0.0
    return min(1.0, max(0.0, size / scale))
