"""Display formatting for durations, sizes and thumbnails."""

import math

from mux_console.infrastructure.mux.helpers import thumbnail_url

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_duration(seconds: float) -> str:
    """Format seconds as ``H:MM:SS``, or ``M:SS`` below an hour."""
    total = max(0, math.floor(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_file_size(size_bytes: float) -> str:
    """Format a byte count with one decimal and the largest fitting unit."""
    if not math.isfinite(size_bytes) or size_bytes < 0:
        return "0.0 B"
    size = float(size_bytes)
    unit = 0
    while size >= 1024 and unit < len(_SIZE_UNITS) - 1:
        size /= 1024
        unit += 1
    return f"{size:.1f} {_SIZE_UNITS[unit]}"


def asset_thumbnail(playback_id: str, width: int = 320, height: int = 180) -> str:
    """Cropped thumbnail URL for a playback id."""
    url = thumbnail_url(playback_id, width=max(1, int(width)), height=max(1, int(height)))
    return f"{url}&fit_mode=crop"
