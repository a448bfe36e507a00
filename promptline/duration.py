"""The segment showing how long the previous command ran."""

import math

from .segment import Segment

_MICROSECOND = 1_000
_MILLISECOND = 1_000 * _MICROSECOND
_SECOND = 1_000 * _MILLISECOND
_MINUTE = 60 * _SECOND
_HOUR = 60 * _MINUTE
_INT64_LIMIT = 2**63


def _parse_float(text):
    if not text or text != text.strip() or "_" in text:
        raise ValueError(f"invalid number: {text!r}")
    return float(text)


def _to_nanoseconds(seconds):
    product = seconds * float(_SECOND)
    if not math.isfinite(product) or abs(product) >= _INT64_LIMIT:
        return 0
    return int(product)


def format_duration(duration, duration_min="", low_precision=False):
    """Return the text for a duration given in seconds, or None when nothing is shown."""
    if duration == "":
        return "No duration"

    value = duration.strip("'\"")
    minimum = duration_min.strip("'\"")
    has_precision = "." in value

    try:
        seconds = _parse_float(value)
    except ValueError:
        return f"Failed to convert '{duration}' to a number"
    try:
        min_seconds = _parse_float(minimum)
    except ValueError:
        min_seconds = 0.0

    if seconds < min_seconds:
        return None

    ns = _to_nanoseconds(seconds)
    if ns <= 0:
        return None

    if ns > _HOUR:
        hours, rest = divmod(ns, _HOUR)
        return f"{hours}h {rest // _MINUTE}m"
    if ns > _MINUTE:
        minutes, rest = divmod(ns, _MINUTE)
        return f"{minutes}m {rest // _SECOND}s"
    if not has_precision:
        return f"{ns // _SECOND}s"
    if ns > _SECOND:
        secs, rest = divmod(ns, _SECOND)
        return f"{secs}s {rest // _MILLISECOND}ms"
    if ns > _MILLISECOND or low_precision:
        millis, rest = divmod(ns, _MILLISECOND)
        if low_precision:
            return f"{millis}ms"
        return f"{millis}ms {rest // _MICROSECOND}\u00b5s"
    return f"{ns // _MICROSECOND}\u00b5s"


def segment_duration(p):
    """Build the duration segment from the prompt's configuration and theme."""
    content = format_duration(p.cfg.duration, p.cfg.duration_min, p.cfg.duration_low_precision)
    if content is None:
        return []
    return [
        Segment(
            name="duration",
            content=content,
            foreground=p.theme.duration_fg,
            background=p.theme.duration_bg,
        )
    ]