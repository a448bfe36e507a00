"""Segments for goenv and rbenv versions."""

import os
import subprocess
from pathlib import Path

from .segment import Segment

GO_VERSION_FILE = ".go-version"
RUBY_VERSION_FILE = ".ruby-version"


def _read_stripped(path):
    try:
        return Path(path).read_bytes().decode("utf-8", errors="replace").strip()
    except OSError:
        return None


def _home_file(*parts):
    try:
        home = Path.home()
    except RuntimeError:
        return None
    return _read_stripped(home.joinpath(*parts))


def find_version_file(start, filename):
    """Stripped contents of *filename* in *start* or the nearest parent holding it.

    The filesystem root itself is not searched; None when nothing is found.
    """
    current = os.path.abspath(start)
    while current != "/":
        found = _read_stripped(os.path.join(current, filename))
        if found is not None:
            return found
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    return None


def _env_version(name):
    return os.environ.get(name, "") or None


def _tree_version(filename):
    try:
        cwd = os.getcwd()
    except OSError:
        return None
    return find_version_file(cwd, filename)


def _command_output(*args):
    try:
        completed = subprocess.run(
            list(args),
            stdin=subprocess.DEVNULL,
            capture_output=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    return completed.stdout.decode("utf-8", errors="replace")


def _goenv_output():
    out = _command_output("goenv", "version")
    if out is None:
        return None
    items = out.split(" ")
    return items[0] if len(items) > 1 else None


def _rbenv_output():
    out = _command_output("rbenv", "version")
    if out is None:
        return None
    return out.split(" ")[0]


def segment_goenv(p):
    """The goenv version, when it differs from the global one."""
    global_version = _home_file(".goenv", "version") or ""
    lookups = (
        lambda: _env_version("GOENV_VERSION"),
        lambda: _tree_version(GO_VERSION_FILE),
        _goenv_output,
    )
    for lookup in lookups:
        version = lookup()
        if version is not None and version != global_version:
            return [
                Segment(
                    name="goenv",
                    content=version,
                    foreground=p.theme.goenv_fg,
                    background=p.theme.goenv_bg,
                )
            ]
    return []


def segment_rbenv(p):
    """The rbenv ruby version from the environment, a version file or rbenv itself."""
    lookups = (
        lambda: _env_version("RBENV_VERSION"),
        lambda: _tree_version(RUBY_VERSION_FILE),
        lambda: _home_file(".rbenv", "version"),
        _rbenv_output,
    )
    version = next((found for found in (lookup() for lookup in lookups) if found is not None), None)
    if version is None:
        return []
    return [
        Segment(
            name="rbenv",
            content=version,
            foreground=p.theme.time_fg,
            background=p.theme.time_bg,
        )
    ]