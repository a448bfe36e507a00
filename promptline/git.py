"""Git repository segments."""

import os
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .segment import Segment
from .themes import home_env_name

BRANCH_PATTERN = re.compile(
    r"## (?P<local>\S+?)(\.{3}(?P<remote>\S+?)"
    r"( \[(ahead (?P<ahead>\d+)(, )?)?(behind (?P<behind>\d+))?\])?)?",
    re.ASCII,
)
CONFLICT_CODES = frozenset({"DD", "AU", "UD", "UA", "DU", "AA", "UU"})

_STAT_ORDER = (
    "ahead",
    "behind",
    "staged",
    "not_staged",
    "untracked",
    "conflicted",
    "stashed",
)
_DISABLE_NAMES = {
    "ahead": "ahead",
    "behind": "behind",
    "staged": "staged",
    "notStaged": "not_staged",
    "untracked": "untracked",
    "conflicted": "conflicted",
    "stashed": "stashed",
}
_GIT_ERRORS = (OSError, subprocess.CalledProcessError)


@dataclass
class RepoStats:
    """Counts of the different kinds of change in a working copy."""

    ahead: int = 0
    behind: int = 0
    untracked: int = 0
    not_staged: int = 0
    staged: int = 0
    conflicted: int = 0
    stashed: int = 0

    def dirty(self):
        """Whether the working copy holds uncommitted work."""
        return self.untracked + self.not_staged + self.staged + self.conflicted > 0

    def any(self):
        """Whether any count is non-zero."""
        return any(getattr(self, name) for name in _STAT_ORDER)

    def segments(self, p, name="git-status"):
        """One segment per non-zero count, in a fixed order."""
        result = []
        for stat in _STAT_ORDER:
            count = getattr(self, stat)
            if count <= 0:
                continue
            result.append(
                Segment(
                    name=name,
                    content=f"{count}{getattr(p.symbols, f'repo_{stat}')}",
                    foreground=getattr(p.theme, f"git_{stat}_fg"),
                    background=getattr(p.theme, f"git_{stat}_bg"),
                )
            )
        return result

    def symbols(self, p):
        """The counts as a string of symbols, with numbers in compact mode."""
        parts = []
        for stat in _STAT_ORDER:
            count = getattr(self, stat)
            if count <= 0:
                continue
            symbol = getattr(p.symbols, f"repo_{stat}")
            parts.append(f" {count}{symbol}" if p.cfg.git_mode == "compact" else symbol)
        return "".join(parts)


def _git_env():
    home = home_env_name()
    return {
        "LANG": "C",
        home: os.environ.get(home, ""),
        "PATH": os.environ.get("PATH", ""),
    }


def run_git_command(*args):
    """Run git with a minimal environment and return its output.

    Raises OSError when git cannot be started and CalledProcessError when it fails.
    """
    completed = subprocess.run(
        ["git", *args],
        env=_git_env(),
        stdin=subprocess.DEVNULL,
        capture_output=True,
        check=True,
    )
    return completed.stdout.decode("utf-8", errors="replace")


def parse_git_branch_info(status):
    """Fields of the ``## branch...remote [ahead n, behind m]`` header line.

    Returns an empty dict when the header does not match; absent parts are "".
    """
    if not status:
        return {}
    match = BRANCH_PATTERN.fullmatch(status[0])
    if match is None:
        return {}
    return match.groupdict(default="")


def parse_git_stats(status):
    """Count changes in porcelain status lines; the first line is the header."""
    stats = RepoStats()
    for line in status[1:]:
        if len(line) <= 2:
            continue
        code = line[:2]
        if code == "??":
            stats.untracked += 1
        elif code in CONFLICT_CODES:
            stats.conflicted += 1
        else:
            if code[0] != " ":
                stats.staged += 1
            if code[1] != " ":
                stats.not_staged += 1
    return stats


def _first_line(text):
    return text.split("\n", 1)[0]


def _detached_branch(p):
    try:
        out = run_git_command("rev-parse", "--short", "HEAD")
    except _GIT_ERRORS:
        try:
            return _first_line(run_git_command("symbolic-ref", "--short", "HEAD"))
        except _GIT_ERRORS:
            return "Error"
    return f"{p.symbols.repo_detached} {_first_line(out)}"


def _index_size(root):
    try:
        return (Path(root) / ".git" / "index").stat().st_size
    except OSError:
        return 0


def _count(text):
    return int(text) if text else 0


def segment_git(p):
    """The branch of the current repository and its change counts."""
    try:
        root = run_git_command("rev-parse", "--show-toplevel").strip()
    except _GIT_ERRORS:
        return []
    if root in p.ignore_repos:
        return []

    args = ["status", "--porcelain", "-b", "--ignore-submodules"]
    limit = p.cfg.git_assume_unchanged_size
    if limit > 0 and _index_size(p.cwd) > limit * 1024:
        args.append("-uno")
    try:
        out = run_git_command(*args)
    except _GIT_ERRORS:
        return []

    status = out.split("\n")
    stats = parse_git_stats(status)
    info = parse_git_branch_info(status)
    if info.get("local"):
        stats.ahead = _count(info.get("ahead", ""))
        stats.behind = _count(info.get("behind", ""))
        branch = info["local"]
    else:
        branch = _detached_branch(p)
    if p.symbols.repo_branch:
        branch = f"{p.symbols.repo_branch} {branch}"

    if stats.dirty():
        foreground, background = p.theme.repo_dirty_fg, p.theme.repo_dirty_bg
    else:
        foreground, background = p.theme.repo_clean_fg, p.theme.repo_clean_bg
    segments = [
        Segment(name="git-branch", content=branch, foreground=foreground, background=background)
    ]

    stash_enabled = True
    for stat in p.cfg.git_disable_stats:
        attr = _DISABLE_NAMES.get(stat)
        if attr is None:
            continue
        setattr(stats, attr, 0)
        if attr == "stashed":
            stash_enabled = False

    if stash_enabled:
        try:
            stats.stashed = run_git_command("rev-list", "-g", "refs/stash").count("\n")
        except _GIT_ERRORS:
            pass

    if p.cfg.git_mode == "simple":
        if stats.any():
            segments[0].content += " " + stats.symbols(p)
    elif p.cfg.git_mode == "compact":
        if stats.any():
            segments[0].content += stats.symbols(p)
    else:
        segments += stats.segments(p)
    return segments


def segment_git_lite(p):
    """Only the branch of the current repository, without status counts."""
    if p.ignore_repos:
        try:
            root = run_git_command("rev-parse", "--show-toplevel").strip()
        except _GIT_ERRORS:
            return []
        if root in p.ignore_repos:
            return []
    try:
        status = run_git_command("rev-parse", "--abbrev-ref", "HEAD").strip()
    except _GIT_ERRORS:
        return []
    branch = _detached_branch(p) if status == "HEAD" else status
    return [
        Segment(
            name="git-branch",
            content=branch,
            foreground=p.theme.repo_clean_fg,
            background=p.theme.repo_clean_bg,
        )
    ]