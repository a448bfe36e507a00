"""Small segments: exit status, jobs, user, host, title, load, node and friends."""

import hashlib
import json
import os
import subprocess
import sys
import time
from pathlib import Path

import psutil

from .exitcode import meaning_of_exit_code
from .renderer import MAX_INTEGER, _parse_int
from .segment import Segment

NODE_ICON = "\u2b22"
PACKAGE_FILE = Path("package.json")
TERRAFORM_WORKSPACE_FILE = Path(".terraform") / "environment"


def _single(name, content, foreground, background):
    return [Segment(name=name, content=content, foreground=foreground, background=background)]


def _command_output(*args):
    """Standard output of a command as text; raises OSError or CalledProcessError."""
    completed = subprocess.run(
        list(args),
        stdin=subprocess.DEVNULL,
        capture_output=True,
        check=True,
    )
    return completed.stdout.decode("utf-8", errors="replace")


def _status_colors(p):
    if p.cfg.prev_error == 0 or p.cfg.static_prompt_indicator:
        return p.theme.cmd_passed_fg, p.theme.cmd_passed_bg
    return p.theme.cmd_failed_fg, p.theme.cmd_failed_bg


def segment_exit_code(p):
    """The previous command's exit status, when it failed."""
    code = p.cfg.prev_error
    if code == 0:
        return []
    meaning = str(code) if p.cfg.numeric_exit_codes else meaning_of_exit_code(code)
    return _single("exit", meaning, p.theme.cmd_failed_fg, p.theme.cmd_failed_bg)


def segment_jobs(p):
    """The number of background jobs, when there are any."""
    if p.cfg.jobs <= 0:
        return []
    return _single("jobs", str(p.cfg.jobs), p.theme.jobs_fg, p.theme.jobs_bg)


def segment_newline(p):
    """A marker that starts a new row of the prompt."""
    return [Segment(new_line=True)]


def segment_root(p):
    """The shell's prompt indicator, coloured by the previous command's status."""
    foreground, background = _status_colors(p)
    return _single("root", p.shell.root_indicator, foreground, background)


def segment_time(p):
    """The current wall-clock time."""
    return _single("time", time.strftime("%H:%M:%S"), p.theme.time_fg, p.theme.time_bg)


def segment_user(p):
    """The user name, or the shell's escape for it."""
    if p.cfg.shell == "bash":
        prompt = "\\u"
    elif p.cfg.shell == "zsh":
        prompt = "%n"
    else:
        prompt = p.username
    background = p.theme.username_root_bg if p.user_is_admin else p.theme.username_bg
    return _single("user", prompt, p.theme.username_fg, background)


def segment_term_title(p):
    """An escape sequence setting the terminal title; never truncated or separated."""
    term = os.environ.get("TERM", "")
    if "xterm" not in term and "rxvt" not in term:
        return []
    if p.cfg.shell == "bash":
        title = "\\[\\e]0;\\u@\\h: \\w\\a\\]"
    elif p.cfg.shell == "zsh":
        title = "%{\033]0;%n@%m: %~\007%}"
    else:
        title = f"\033]0;{p.username}@{p.hostname}: {p.cwd}\007"
    return [
        Segment(
            name="termtitle",
            content=title,
            priority=MAX_INTEGER,
            hide_separators=True,
        )
    ]


def segment_terraform_workspace(p):
    """The selected terraform workspace of the working directory."""
    if not TERRAFORM_WORKSPACE_FILE.exists() or TERRAFORM_WORKSPACE_FILE.is_dir():
        return []
    try:
        workspace = TERRAFORM_WORKSPACE_FILE.read_bytes().decode("utf-8", errors="replace")
    except OSError:
        return []
    return _single("terraform-workspace", workspace, p.theme.tf_ws_fg, p.theme.tf_ws_bg)


def segment_perms(p):
    """A lock when the working directory is not writable."""
    if os.access(p.cwd, os.W_OK):
        return []
    return _single("perms", p.symbols.lock, p.theme.readonly_fg, p.theme.readonly_bg)


def host_name(fqdn):
    """The first label of a fully qualified domain name."""
    return fqdn.split(".", 1)[0]


def _parse_color(text):
    if text.startswith(("+", "-")):
        raise ValueError(f"invalid colour: {text!r}")
    value = _parse_int(text)
    if not 0 <= value <= 255:
        raise ValueError(f"colour out of range: {text!r}")
    return value


def _env_colors():
    try:
        foreground = _parse_color(os.environ.get("PLGO_HOSTNAMEFG", ""))
        background = _parse_color(os.environ.get("PLGO_HOSTNAMEBG", ""))
    except ValueError:
        return None
    return foreground, background


def segment_host(p):
    """The host name, optionally coloured by a hash of itself."""
    if p.cfg.hostname_only_if_ssh and not os.environ.get("SSH_CLIENT", ""):
        return []

    if p.cfg.colorize_hostname:
        prompt = host_name(p.hostname)
        colors = _env_colors()
        if colors is not None:
            foreground, background = colors
        else:
            background = hashlib.md5(prompt.encode("utf-8")).digest()[0] % 128
            foreground = p.theme.hostname_colorized_fg_map.get(background, 0)
    else:
        if p.cfg.shell == "bash":
            prompt = "\\h"
        elif p.cfg.shell == "zsh":
            prompt = "%m"
        else:
            prompt = host_name(p.hostname)
        foreground, background = p.theme.hostname_fg, p.theme.hostname_bg

    return _single("host", prompt, foreground, background)


def segment_load(p):
    """The five-minute load average, highlighted when the system is busy."""
    try:
        load1, load5, load15 = psutil.getloadavg()
    except (OSError, AttributeError, psutil.Error):
        return []
    cpus = os.cpu_count() or 1

    load = {1: load1, 15: load15}.get(p.theme.load_avg_value, load5)
    background = p.theme.load_bg
    if load > cpus * p.theme.load_threshold_bad:
        background = p.theme.load_high_bg
    return _single("load", f"{load5:.2f}", p.theme.load_fg, background)


def _node_version():
    try:
        out = _command_output("node", "--version")
    except (OSError, subprocess.CalledProcessError):
        return ""
    return out[:-1] if out.endswith("\n") else out


def _package_version():
    if not PACKAGE_FILE.exists() or PACKAGE_FILE.is_dir():
        return ""
    try:
        data = json.loads(PACKAGE_FILE.read_bytes())
    except (OSError, ValueError):
        return ""
    if data is None:
        return "!"
    if not isinstance(data, dict):
        return ""
    version = "!"
    for key, value in data.items():
        if key.lower() != "version" or value is None:
            continue
        if not isinstance(value, str):
            return ""
        version = value
    return version.strip()


def segment_node(p):
    """The node version and the version of the local package."""
    segments = []
    node_version = _node_version()
    if node_version:
        segments += _single(
            "node",
            f"{NODE_ICON} {node_version}",
            p.theme.node_version_fg,
            p.theme.node_version_bg,
        )
    package_version = _package_version()
    if package_version:
        segments += _single(
            "node-segment",
            f"{package_version} {NODE_ICON}",
            p.theme.node_fg,
            p.theme.node_bg,
        )
    return segments


def segment_gcp(p):
    """The active Google Cloud project; stops the program if gcloud cannot run."""
    try:
        out = _command_output("gcloud", "config", "list", "project", "--format", "value(core.project)")
    except (OSError, subprocess.CalledProcessError) as exc:
        print(exc, file=sys.stderr)
        raise SystemExit(1) from exc
    project = out[:-1] if out.endswith("\n") else out
    if not project:
        return []
    return _single("gcp", project, p.theme.gcp_fg, p.theme.gcp_bg)