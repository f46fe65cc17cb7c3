"""Human-readable byte sizes (1024 base)."""

_UNITS = ("Bytes", "KB", "MB", "GB", "TB", "PB")


def format_bytes_fixed(num_bytes: int) -> str:
    """Format with two fixed decimals, e.g. 1536 -> "1.50 KB"."""
    if num_bytes < 0:
        return "-" + format_bytes_fixed(-num_bytes)
    value = float(num_bytes)
    unit = 0
    while value >= 1024 and unit < len(_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{value:.2f} {_UNITS[unit]}"
