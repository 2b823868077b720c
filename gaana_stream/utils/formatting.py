"""
Helper functions for formatting data into human-readable strings.
"""


def format_duration(seconds: float) -> str:
    """
    Formats a duration in seconds into a human-readable string (e.g., '3m 42s').
    """
    s = int(seconds)
    hours, remainder = divmod(s, 3600)
    minutes, secs = divmod(remainder, 60)
    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)


def format_duration_ms(duration_ms: int) -> str:
    """Formats milliseconds, keeping sub-second precision for short segments."""
    if duration_ms < 60_000:
        return f"{duration_ms / 1000:.3g}s"
    return format_duration(round(duration_ms / 1000))


def shorten_url(url: str, max_length: int = 72) -> str:
    """Shortens a long URL for table display by eliding its middle."""
    if len(url) <= max_length:
        return url
    keep = (max_length - 1) // 2
    return f"{url[:keep]}…{url[-keep:]}"
