"""Display helpers for timer values."""


def format_timer_display(seconds: int) -> str:
    """Running-timer display: ``MM:SS`` under an hour, ``HH:MM:SS`` otherwise."""
    seconds = max(0, int(seconds))
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def format_total_time(seconds: int) -> str:
    """Friendly total, e.g. ``30s``, ``45m``, ``2h 15m``."""
    seconds = max(0, int(seconds))
    if seconds < 60:
        return f"{seconds}s"
    hours, remainder = divmod(seconds, 3600)
    minutes = remainder // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def split_hours_minutes(seconds: int) -> tuple[int, int]:
    seconds = max(0, int(seconds))
    return seconds // 3600, (seconds % 3600) // 60
