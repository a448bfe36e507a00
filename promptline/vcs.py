"""Segments for Bazaar, Fossil, Mercurial and Subversion working copies."""

import subprocess

from .git import RepoStats
from .segment import Segment


def _completed(*args):
    try:
        return subprocess.run(
            list(args),
            stdin=subprocess.DEVNULL,
            capture_output=True,
        )
    except OSError:
        return None


def _output(*args):
    """Standard output of a command whatever its exit status; "" if it cannot run."""
    completed = _completed(*args)
    if completed is None:
        return ""
    return completed.stdout.decode("utf-8", errors="replace")


def _checked_output(*args):
    """Standard output of a command that succeeded, otherwise None."""
    completed = _completed(*args)
    if completed is None or completed.returncode != 0:
        return None
    return completed.stdout.decode("utf-8", errors="replace")


def _classify(output, is_untracked, is_missing):
    modified = untracked = missing = False
    for line in output.split("\n"):
        if not line:
            continue
        if is_untracked(line):
            untracked = True
        elif is_missing(line):
            missing = True
        else:
            modified = True
    return modified, untracked, missing


def parse_bzr_status(output):
    """(modified, untracked, missing) flags from ``bzr status`` output."""
    return _classify(output, lambda line: line == "unknown:", lambda line: line == "missing:")


def parse_fossil_status(output):
    """(modified, untracked, missing) flags from ``fossil changes --differ`` output."""
    return _classify(
        output,
        lambda line: line.startswith("EXTRA"),
        lambda line: line.startswith("MISSING"),
    )


def parse_hg_status(output):
    """(modified, untracked, missing) flags from ``hg status`` output."""
    return _classify(output, lambda line: line[0] == "?", lambda line: line[0] == "!")


def _branch_segment(p, name, branch, flags, marks):
    modified, untracked, missing = flags
    if modified or untracked or missing:
        extra = "".join(
            mark for mark, present in zip(marks, (untracked, missing, untracked)) if present
        )
        content = f"{branch} {extra}"
        foreground, background = p.theme.repo_dirty_fg, p.theme.repo_dirty_bg
    else:
        content = branch
        foreground, background = p.theme.repo_clean_fg, p.theme.repo_clean_bg
    return [Segment(name=name, content=content, foreground=foreground, background=background)]


def _status_flags(parse, *args):
    out = _checked_output(*args)
    return parse(out) if out is not None else (False, False, False)


def segment_bzr(p):
    """The Bazaar branch nick, marked when the tree has changes."""
    branch = _output("bzr", "nick").split("\n", 1)[0]
    if not branch:
        return []
    flags = _status_flags(parse_bzr_status, "bzr", "status")
    return _branch_segment(p, "bzr", branch, flags, ("+", "!", "?"))


def segment_fossil(p):
    """The current Fossil branch, marked when the checkout has changes."""
    branch = _output("fossil", "branch", "current").split("\n", 1)[0]
    if not branch:
        return []
    flags = _status_flags(parse_fossil_status, "fossil", "changes", "--differ")
    return _branch_segment(p, "fossil", branch, flags, ("+", "!", "?"))


def segment_hg(p):
    """The current Mercurial branch, marked when the working copy has changes."""
    branch = _output("hg", "branch").split("\n", 1)[0]
    if not branch:
        return []
    flags = _status_flags(parse_hg_status, "hg", "status")
    return _branch_segment(p, "hg", branch, flags, ("+", "!", ""))


def parse_svn_info(output):
    """Key/value pairs from ``svn info`` output."""
    info = {}
    lines = output.split("\n")
    if len(lines) <= 1:
        return info
    for line in lines:
        items = line.split(": ")
        if len(items) >= 2:
            info[items[0]] = items[1]
    return info


def parse_svn_status(output):
    """Counts from ``svn status -u`` output.

    Returns the stats and the number of other non-blank status columns.
    """
    stats = RepoStats()
    other = 0
    lines = output.split("\n")
    if len(lines) <= 1:
        return stats, other
    for line in lines:
        if len(line) < 9:
            continue
        first = line[0]
        if first == "?":
            stats.untracked += 1
        elif first == "C":
            stats.conflicted += 1
        elif first in ("A", "D", "M"):
            stats.not_staged += 1
        elif first != " ":
            other += 1

        second = line[1]
        if second == "C":
            stats.conflicted += 1
        elif second == "M":
            stats.not_staged += 1
        elif second != " ":
            other += 1

        other += sum(1 for code in line[2:8] if code != " ")

        if line[8] == "*":
            stats.behind += 1
        elif line[8] != " ":
            other += 1
    return stats, other


def segment_subversion(p):
    """The relative URL of the Subversion working copy and its change counts."""
    out = _checked_output("svn", "info")
    if out is None:
        return []
    info = parse_svn_info(out)
    if info.get("URL") in p.ignore_repos or info.get("Relative URL") in p.ignore_repos:
        return []

    status = _checked_output("svn", "status", "-u")
    stats, other = parse_svn_status(status) if status is not None else (RepoStats(), 0)

    if stats.dirty() or other > 0:
        foreground, background = p.theme.repo_dirty_fg, p.theme.repo_dirty_bg
    else:
        foreground, background = p.theme.repo_clean_fg, p.theme.repo_clean_bg
    segments = [
        Segment(
            name="svn-branch",
            content=info.get("Relative URL", ""),
            foreground=foreground,
            background=background,
        )
    ]
    return segments + stats.segments(p, "svn-status")