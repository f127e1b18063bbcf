"""
Human-readable sizes and durations for the fetch summary.
"""

_IEC_UNITS = ("KiB", "MiB", "GiB", "TiB")


def format_size(num_bytes: float) -> str:
    """Formats a byte count with binary units, e.g. '1 B', '12.5 MiB'."""
    if num_bytes < 1024:
        return f"{max(int(num_bytes), 0)} B"
    value = float(num_bytes)
    for unit in _IEC_UNITS:
        value /= 1024
        if value < 1024 or unit == _IEC_UNITS[-1]:
            return f"{value:.1f} {unit}"


def format_duration(seconds: float) -> str:
    """
    Formats elapsed time. Artifact fetches are usually short, so anything under
    a minute keeps two decimals ('0.42s'); longer runs read '3m 07s' or '1h 02m'.
    """
    if seconds < 60:
        return f"{max(seconds, 0.0):.2f}s"
    minutes, secs = divmod(int(seconds), 60)
    if minutes < 60:
        return f"{minutes}m {secs:02d}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes:02d}m"
