"""The segments showing the current working directory."""

import os
from dataclasses import dataclass

from .renderer import Alignment
from .segment import Segment

ELLIPSIS = "\u2026"


@dataclass
class PathSegment:
    """One displayed component of the working directory."""

    path: str
    home: bool = False
    root: bool = False
    ellipsis: bool = False
    alias: bool = False


def _alias_matches_at(path_segments, start, parts):
    return all(
        part == segment.path
        for part, segment in zip(parts, path_segments[start:start + len(parts)])
    )


def alias_path_segments(path_segments, aliases):
    """Replace runs of path components with their configured short names.

    Longer aliases are tried first; each alias replaces at most one run.
    """
    if not aliases:
        return list(path_segments)
    segments = list(path_segments)
    for key in sorted(aliases, key=len, reverse=True):
        if not key:
            continue
        parts = key.strip(os.sep).split(os.sep)
        size = len(parts)
        if size > len(segments):
            continue
        for start in range(len(segments)):
            last = start + size - 1
            if last > len(segments) - start - 1:
                break
            if _alias_matches_at(segments, start, parts):
                segments[start:last + 1] = [PathSegment(path=aliases[key], alias=True)]
                break
    return segments


def cwd_to_path_segments(p, cwd):
    """Split *cwd* into path components, abbreviating the home directory to ``~``."""
    segments = []
    if cwd.startswith(p.home_dir):
        segments.append(PathSegment(path="~", home=True))
        cwd = cwd[len(p.home_dir):]
    elif cwd == os.sep:
        segments.append(PathSegment(path=os.sep, root=True))

    names = cwd.strip(os.sep).split(os.sep)
    if names[0] == "":
        names = names[1:]
    segments.extend(PathSegment(path=name) for name in names)
    return alias_path_segments(segments, p.cfg.path_aliases)


def shorten_name(name, max_size):
    """Cut *name* to *max_size* characters when a positive limit is set."""
    if max_size > 0 and len(name) > max_size:
        return name[:max_size]
    return name


def escape_variables(shell, text):
    """Escape characters the shell would otherwise expand inside a prompt."""
    text = text.replace("\\", shell.escaped_backslash)
    text = text.replace("`", shell.escaped_backtick)
    return text.replace("$", shell.escaped_dollar)


def _colors(p, segment, is_last):
    """Return foreground, background and whether the segment is drawn specially."""
    if segment.home and p.theme.home_special_display:
        return p.theme.home_fg, p.theme.home_bg, True
    if segment.alias:
        return p.theme.alias_fg, p.theme.alias_bg, True
    if is_last:
        return p.theme.cwd_fg, p.theme.path_bg, False
    return p.theme.path_fg, p.theme.path_bg, False


def _limit_depth(segments, max_depth):
    if len(segments) <= max_depth:
        return segments
    n_before = 2 if max_depth > 2 else max_depth - 1
    first = segments[:n_before]
    second = segments[len(segments) + n_before - max_depth:]
    return first + [PathSegment(path=ELLIPSIS, ellipsis=True)] + second


def _semifancy(segments):
    last = len(segments) - 1
    path = "".join(
        segment.path + ("" if idx == last else os.sep)
        for idx, segment in enumerate(segments)
        if not (segment.home or segment.alias)
    )
    first = segments[0]
    result = [first] if first.home or first.alias else []
    result.append(PathSegment(path=path))
    return result


def _plain_segment(p):
    cwd = p.cwd
    if cwd.startswith(p.home_dir):
        cwd = "~" + cwd[len(p.home_dir):]
    return [
        Segment(
            name="cwd",
            content=escape_variables(p.shell, cwd),
            foreground=p.theme.cwd_fg,
            background=p.theme.path_bg,
        )
    ]


def segment_cwd(p):
    """Segments for the working directory in the configured display mode."""
    if p.cfg.cwd_mode == "plain":
        return _plain_segment(p)

    path_segments = cwd_to_path_segments(p, p.cwd)
    if p.cfg.cwd_mode == "dironly":
        path_segments = path_segments[-1:]
    else:
        max_depth = p.cfg.cwd_max_depth
        if max_depth <= 0:
            p.warn("Ignoring -cwd-max-depth argument since it's smaller than or equal to 0")
        else:
            path_segments = _limit_depth(path_segments, max_depth)
        if p.cfg.cwd_mode == "semifancy" and len(path_segments) > 1:
            path_segments = _semifancy(path_segments)

    supports_right = p.supports_right_modules()
    last = len(path_segments) - 1
    segments = []
    for idx, path_segment in enumerate(path_segments):
        is_last = idx == last
        foreground, background, special = _colors(p, path_segment, is_last)
        segment = Segment(
            name="cwd" if is_last else "cwd-path",
            content=escape_variables(p.shell, shorten_name(path_segment.path, p.cfg.cwd_max_dir_size)),
            foreground=foreground,
            background=background,
        )
        if not special:
            if p.align is Alignment.RIGHT and supports_right and idx != 0:
                segment.separator = p.symbols.separator_reverse_thin
                segment.separator_foreground = p.theme.separator_fg
            elif (p.align is Alignment.LEFT or not supports_right) and not is_last:
                segment.separator = p.symbols.separator_thin
                segment.separator_foreground = p.theme.separator_fg
        segments.append(segment)
    return segments