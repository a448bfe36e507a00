"""Prompt segments and terminal display-width helpers."""

from dataclasses import dataclass, fields

from wcwidth import wcwidth


def string_width(text):
    """Return the number of terminal cells *text* occupies; control characters count as zero."""
    return sum(max(wcwidth(char), 0) for char in text)


def truncate(text, width, tail):
    """Shorten *text* to at most *width* cells, ending it with *tail* when cut."""
    if string_width(text) <= width:
        return text
    room = width - string_width(tail)
    used = 0
    kept = []
    for char in text:
        char_width = max(wcwidth(char), 0)
        if used + char_width > room:
            break
        used += char_width
        kept.append(char)
    return "".join(kept) + tail


def _check_byte(value, label):
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 255:
        raise ValueError(f"{label}: expected an integer between 0 and 255")
    return value


def _check_int(value, label):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{label}: expected an integer")
    return value


def _check_str(value, label):
    if not isinstance(value, str):
        raise ValueError(f"{label}: expected a string")
    return value


def _check_bool(value, label):
    if not isinstance(value, bool):
        raise ValueError(f"{label}: expected a boolean")
    return value


@dataclass
class Segment:
    """One piece of information shown on the prompt."""

    name: str = ""
    content: str = ""
    foreground: int = 0
    background: int = 0
    separator: str = ""
    separator_foreground: int = 0
    priority: int = 0
    hide_separators: bool = False
    width: int = 0
    new_line: bool = False

    def compute_width(self, condensed):
        """Return the cells the segment takes, including its separator and padding."""
        width = string_width(self.content) + string_width(self.separator)
        return width if condensed else width + 2

    @classmethod
    def from_dict(cls, data):
        """Build a segment from a JSON object; keys match field names case-insensitively."""
        if not isinstance(data, dict):
            raise ValueError("segment: expected a JSON object")
        checks = {
            "name": _check_str,
            "content": _check_str,
            "foreground": _check_byte,
            "background": _check_byte,
            "separator": _check_str,
            "separator_foreground": _check_byte,
            "priority": _check_int,
            "hide_separators": _check_bool,
            "width": _check_int,
            "new_line": _check_bool,
        }
        by_key = {f.name.replace("_", "").lower(): f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            name = by_key.get(key.lower())
            if name is None or value is None:
                continue
            values[name] = checks[name](value, f"segment.{key}")
        return cls(**values)