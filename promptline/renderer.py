"""Collecting segments into rows and drawing the finished prompt."""

import enum
import getpass
import json
import os
import socket
import subprocess
import sys
import unicodedata
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

import psutil

from .segment import Segment, string_width, truncate
from .themes import ShellInfo, SymbolTemplate, Theme

try:
    import pwd
except ImportError:
    pwd = None

MAX_INTEGER = sys.maxsize
PLUGIN_PREFIX = "promptline-"
_ELLIPSIS = "\u2026"


class Alignment(enum.Enum):
    """Which side of the terminal a prompt is anchored to."""

    LEFT = "left"
    RIGHT = "right"


def detect_shell(shell_exe):
    """Guess the shell kind from the path of its executable."""
    name = shell_exe.rstrip("/").rsplit("/", 1)[-1]
    if "bash" in name:
        return "bash"
    if "zsh" in name:
        return "zsh"
    return "bare"


def _parse_int(text):
    """Parse an integer the way a base-prefixed literal is read: 0x, 0o, 0b or leading 0."""
    sign = 1
    body = text
    if body.startswith(("+", "-")):
        sign = -1 if body[0] == "-" else 1
        body = body[1:]
    lower = body.lower()
    if lower.startswith("0x"):
        base, digits = 16, body[2:]
    elif lower.startswith("0o"):
        base, digits = 8, body[2:]
    elif lower.startswith("0b"):
        base, digits = 2, body[2:]
    elif len(body) > 1 and body.startswith("0"):
        base, digits = 8, body[1:]
    else:
        base, digits = 10, body
    if (
        not digits
        or not digits.isascii()
        or digits != digits.strip()
        or digits.startswith("_")
        or digits.endswith("_")
    ):
        raise ValueError(f"invalid integer: {text!r}")
    return sign * int(digits, base)


def term_width():
    """Width of the terminal in columns, falling back to $COLUMNS, or 0 if unknown."""
    try:
        return os.get_terminal_size(sys.stdin.fileno()).columns
    except (AttributeError, OSError, ValueError):
        pass
    text = os.environ.get("COLUMNS")
    if text is None:
        return 0
    try:
        return _parse_int(text)
    except ValueError:
        return 0


def user_is_admin():
    """Whether the current user is the superuser."""
    getuid = getattr(os, "getuid", None)
    return getuid is not None and getuid() == 0


def segment_plugin(p, plugin):
    """Run an external segment provider; None when it cannot be run.

    A provider that runs but prints no valid JSON list of segments yields no segments.
    """
    try:
        completed = subprocess.run(
            [PLUGIN_PREFIX + plugin],
            stdin=subprocess.DEVNULL,
            capture_output=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    try:
        data = json.loads(completed.stdout)
    except ValueError:
        return []
    if not isinstance(data, list):
        return []
    try:
        return [Segment() if item is None else Segment.from_dict(item) for item in data]
    except ValueError:
        return []


def _current_user():
    if pwd is not None:
        try:
            entry = pwd.getpwuid(os.getuid())
            return entry.pw_name, entry.pw_dir
        except KeyError:
            pass
    try:
        name = getpass.getuser()
    except (OSError, KeyError, ImportError):
        name = ""
    home = os.path.expanduser("~")
    return name, "" if home == "~" else home


def _parent_executable():
    try:
        return psutil.Process(os.getppid()).exe()
    except (psutil.Error, OSError):
        return ""


def _format_template(template, arg):
    try:
        return template % (arg,)
    except (TypeError, ValueError):
        return template + arg


def _lowest_priority(row, eligible):
    best, best_idx = MAX_INTEGER, None
    for idx, seg in enumerate(row):
        if eligible(idx, seg) and seg.priority < best:
            best, best_idx = seg.priority, idx
    return best_idx


class Powerline:
    """A prompt built from the configured modules, optionally with a right-hand part."""

    def __init__(self, cfg, cwd, align=Alignment.LEFT, modules=None):
        self.cfg = cfg
        self.cwd = cwd
        self.align = align
        self.modules = dict(modules or {})
        self.user_name, self.home_dir = _current_user()
        self.hostname = socket.gethostname()

        prefix = f"{self.hostname}{os.sep}"
        if self.user_name.startswith(prefix):
            self.username = self.user_name[len(prefix):]
        else:
            self.username = self.user_name
        if cfg.trim_ad_domain:
            parts = self.username.split("\\", 1)
            if len(parts) > 1:
                self.username = parts[1]
        self.user_is_admin = user_is_admin()

        self.theme = cfg.themes.get(cfg.theme, Theme())
        shell_name = cfg.shell
        if shell_name == "autodetect":
            shell_name = detect_shell(_parent_executable() or os.environ.get("SHELL", ""))
        self.shell = cfg.shells.get(shell_name, ShellInfo())
        self.reset = _format_template(self.shell.color_template, "[0m")
        self.symbols = cfg.modes.get(cfg.mode, SymbolTemplate())
        count = len(cfg.priority)
        self.priorities = {name: count - idx for idx, name in enumerate(cfg.priority)}
        self.ignore_repos = {repo for repo in cfg.ignore_repos if repo}
        self.segments = [[]]
        self.right_powerline = None

        if align is Alignment.LEFT:
            mods = list(cfg.modules)
            if cfg.modules_right:
                if self.supports_right_modules():
                    self.right_powerline = Powerline(
                        replace(cfg, shell=shell_name), cwd, Alignment.RIGHT, self.modules
                    )
                else:
                    mods += cfg.modules_right
        else:
            mods = list(cfg.modules_right)
        self._init_segments(mods)

    def _run_module(self, name):
        func = self.modules.get(name)
        if func is not None:
            return func(self) or []
        found = segment_plugin(self, name)
        if found is None:
            print(f"Module not found: {name}", file=sys.stderr)
            return []
        return found

    def _init_segments(self, mods):
        if not mods:
            return
        with ThreadPoolExecutor(max_workers=min(32, len(mods))) as pool:
            results = list(pool.map(self._run_module, mods))
        for segments in results:
            for seg in segments:
                self.append_segment(seg.name, seg)

    def warn(self, msg):
        """Report a problem on stderr unless warnings are switched off."""
        if self.cfg.ignore_warnings:
            return
        print(f"[promptline] {msg}", file=sys.stderr)

    def color(self, prefix, code):
        """Escape sequence selecting colour *code*; the theme's reset code resets."""
        if code == self.theme.reset:
            return self.reset
        return _format_template(self.shell.color_template, f"[{prefix};5;{code}m")

    def fg_color(self, code):
        return self.color("38", code)

    def bg_color(self, code):
        return self.color("48", code)

    def append_segment(self, origin, segment):
        """Add a copy of *segment* with defaults filled in, or start a new row."""
        seg = replace(segment)
        if seg.foreground == seg.background == 0:
            seg.background = self.theme.default_bg
            seg.foreground = self.theme.default_fg
        if not seg.separator:
            if self.is_right_prompt():
                seg.separator = self.symbols.separator_reverse
            else:
                seg.separator = self.symbols.separator
        if seg.separator_foreground == 0:
            seg.separator_foreground = seg.background
        seg.priority += self.priorities.get(origin, 0)
        seg.width = seg.compute_width(self.cfg.condensed)
        if seg.new_line:
            self.new_row()
        else:
            self.segments[-1].append(seg)

    def new_row(self):
        """Start a new row unless the current one is still empty."""
        if self.segments[-1]:
            self.segments.append([])

    def truncate_row(self, row_num):
        """Shorten, then drop, the lowest-priority segments until the row fits."""
        limit = term_width() * self.cfg.max_width_percentage // 100
        if limit <= 0:
            return
        row = list(self.segments[row_num])
        length = sum(seg.width for seg in row)
        cut_width = self.cfg.truncate_segment_width

        if length > limit and cut_width > 0:
            shortened = set()
            while length > limit:
                idx = _lowest_priority(
                    row, lambda i, s: i not in shortened and s.width > cut_width
                )
                if idx is None:
                    break
                seg = row[idx]
                length -= seg.width
                content = truncate(seg.content, cut_width - string_width(seg.separator) - 3, _ELLIPSIS)
                seg = replace(seg, content=content)
                seg.width = seg.compute_width(self.cfg.condensed)
                row[idx] = seg
                length += seg.width
                shortened.add(idx)

        while length > limit:
            idx = _lowest_priority(row, lambda i, s: True)
            if idx is None:
                break
            length -= row.pop(idx).width
        self.segments[row_num] = row

    def _east_asian_count(self, content):
        if not self.cfg.east_asian_width:
            return 0
        return sum(1 for char in content if unicodedata.east_asian_width(char) == "A")

    def draw_row(self, row_num):
        """Render one row of segments with colours and separators."""
        row = self.segments[row_num]
        right = self.is_right_prompt()
        pad = "" if self.cfg.condensed else " "
        parts = []
        east_asian = 0

        if right:
            parts.append(" ")
        for idx, seg in enumerate(row):
            if seg.hide_separators:
                parts.append(seg.content)
                continue
            separator_bg = ""
            if right:
                separator_bg = self.reset if idx == 0 else self.bg_color(row[idx - 1].background)
                parts += [separator_bg, self.fg_color(seg.separator_foreground), seg.separator]
            elif idx >= len(row) - 1:
                if not self.has_right_modules() or self.supports_right_modules():
                    separator_bg = self.reset
                elif row_num >= len(self.segments) - 1:
                    following = self.right_powerline.segments[0][0]
                    separator_bg = self.bg_color(following.background)
            else:
                separator_bg = self.bg_color(row[idx + 1].background)
            parts += [self.fg_color(seg.foreground), self.bg_color(seg.background)]
            parts += [pad, seg.content, pad]
            east_asian += self._east_asian_count(seg.content)
            if not right:
                parts += [separator_bg, self.fg_color(seg.separator_foreground), seg.separator]
            parts.append(self.reset)

        if not right or not self.has_right_modules():
            parts.append(" ")
        if not right:
            parts.append(" " * east_asian)
        return "".join(parts)

    def draw(self):
        """Render the whole prompt, including the right-hand part in eval mode."""
        left = self.align is Alignment.LEFT
        parts = []
        if self.cfg.eval:
            if left:
                parts.append(self.shell.eval_prompt_prefix)
            elif self.supports_right_modules():
                parts.append(self.shell.eval_prompt_right_prefix)

        rows = []
        for row_num in range(len(self.segments)):
            self.truncate_row(row_num)
            rows.append(self.draw_row(row_num))
        parts.append("\n".join(rows))

        if self.cfg.prompt_on_new_line:
            if self.cfg.prev_error == 0 or self.cfg.static_prompt_indicator:
                foreground, background = self.theme.cmd_passed_fg, self.theme.cmd_passed_bg
            else:
                foreground, background = self.theme.cmd_failed_fg, self.theme.cmd_failed_bg
            parts += [
                "\n",
                self.fg_color(foreground),
                self.bg_color(background),
                self.shell.root_indicator,
                self.reset,
                self.fg_color(background),
                self.symbols.separator,
                self.reset,
                " ",
            ]

        if self.cfg.eval:
            if left:
                parts.append(self.shell.eval_prompt_suffix)
                if self.supports_right_modules():
                    parts.append("\n")
                    if not self.has_right_modules():
                        parts.append(
                            self.shell.eval_prompt_right_prefix + self.shell.eval_prompt_right_suffix
                        )
            elif self.supports_right_modules():
                parts = ["".join(parts)[:-1], self.shell.eval_prompt_right_suffix]
            if self.has_right_modules():
                parts.append(self.right_powerline.draw())

        return "".join(parts)

    def has_right_modules(self):
        return self.right_powerline is not None and bool(self.right_powerline.segments[0])

    def supports_right_modules(self):
        return bool(self.shell.eval_prompt_right_prefix or self.shell.eval_prompt_right_suffix)

    def is_right_prompt(self):
        return self.align is Alignment.RIGHT and self.supports_right_modules()