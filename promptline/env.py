"""Segments driven by environment variables and marker files."""

import json
import os
from pathlib import Path
from urllib.parse import urlsplit

from .cwd import escape_variables
from .segment import Segment

DOCKER_ICON = "\U0001f433"
DOTENV_ICON = "\u2235"
NIX_SHELL_ICON = "\uf313"


def _env(name):
    return os.environ.get(name, "")


def _base_name(path):
    """Last element of a slash-separated path, ignoring trailing slashes."""
    stripped = path.rstrip("/")
    if not stripped:
        return "/" if path else "."
    return stripped.rsplit("/", 1)[-1]


def _url_host(text):
    try:
        netloc = urlsplit(text).netloc
    except ValueError:
        return ""
    return netloc.rpartition("@")[2]


def _single(name, content, foreground, background):
    return [Segment(name=name, content=content, foreground=foreground, background=background)]


def segment_aws(p):
    """The active AWS profile and, when set, its default region."""
    profile = _env("AWS_PROFILE")
    if not profile:
        return []
    region = _env("AWS_DEFAULT_REGION")
    suffix = f" ({region})" if region else ""
    return _single("aws", profile + suffix, p.theme.aws_fg, p.theme.aws_bg)


def segment_docker(p):
    """The docker machine name, or the host of DOCKER_HOST."""
    machine = _env("DOCKER_MACHINE_NAME")
    host = _env("DOCKER_HOST")
    docker = ""
    if machine:
        docker = machine
    elif host != " ":
        docker = _url_host(host)
    if not docker:
        return []
    return _single("docker", docker, p.theme.docker_machine_fg, p.theme.docker_machine_bg)


def segment_docker_context(p):
    """The current docker context, unless it is the default one."""
    context = "default"
    docker_dir = Path(_env("HOME")) / ".docker"
    if (docker_dir / "contexts").is_dir():
        try:
            data = json.loads((docker_dir / "config.json").read_text(encoding="utf-8"))
        except (OSError, ValueError):
            data = None
        if isinstance(data, dict):
            current = data.get("currentContext")
            if isinstance(current, str) and current:
                context = current
    if context == "default":
        return []
    return _single("docker-context", DOCKER_ICON + context, p.theme.pl_env_fg, p.theme.pl_env_bg)


def segment_dotenv(p):
    """A marker when the working directory holds a .env or .envrc file."""
    for name in (".env", ".envrc"):
        candidate = Path(name)
        if candidate.exists() and not candidate.is_dir():
            return _single("dotenv", DOTENV_ICON, p.theme.dot_env_fg, p.theme.dot_env_bg)
    return []


def segment_nix_shell(p):
    """A marker inside a nix shell."""
    if not _env("IN_NIX_SHELL"):
        return []
    return _single("nix-shell", NIX_SHELL_ICON, p.theme.nix_shell_fg, p.theme.nix_shell_bg)


def segment_perlbrew(p):
    """The perlbrew perl in use."""
    env = _env("PERLBREW_PERL")
    if not env:
        return []
    return _single("perlbrew", _base_name(env), p.theme.perlbrew_fg, p.theme.perlbrew_bg)


def segment_plenv(p):
    """The plenv perl version."""
    env = _env("PLENV_VERSION")
    if not env:
        return []
    return _single("plenv", env, p.theme.pl_env_fg, p.theme.pl_env_bg)


def segment_shenv(p):
    """The shenv shell version."""
    env = _env("SHENV_VERSION")
    if not env:
        return []
    return _single("shenv", env, p.theme.sh_env_fg, p.theme.sh_env_bg)


def segment_virtual_go(p):
    """The active virtualgo workspace."""
    env = _env("VIRTUALGO")
    if not env:
        return []
    return _single("vgo", env, p.theme.virtual_go_fg, p.theme.virtual_go_bg)


def segment_virtual_env(p):
    """The active Python virtualenv, conda or pyenv environment."""
    names = ("VIRTUAL_ENV", "CONDA_ENV_PATH", "CONDA_DEFAULT_ENV", "PYENV_VERSION")
    env = next((value for value in map(_env, names) if value), "")
    if not env:
        return []
    env_name = _base_name(env)
    limit = p.cfg.venv_name_size_limit
    if limit > 0 and len(env_name) > limit:
        env_name = p.symbols.venv_indicator
    return _single(
        "venv",
        escape_variables(p.shell, env_name),
        p.theme.virtual_env_fg,
        p.theme.virtual_env_bg,
    )


def segment_wsl(p):
    """The WSL distribution name."""
    distro = _env("WSL_DISTRO_NAME")
    host = _env("NAME")
    wsl = ""
    if distro:
        wsl = distro
    elif host != " ":
        wsl = _url_host(host)
    if not wsl:
        return []
    return _single("WSL", wsl, p.theme.wsl_machine_fg, p.theme.wsl_machine_bg)


def segment_ssh(p):
    """A network icon in an SSH session."""
    if not _env("SSH_CLIENT"):
        return []
    icon = p.symbols.network_alternate if p.cfg.ssh_alternate_icon else p.symbols.network
    return _single("ssh", icon, p.theme.ssh_fg, p.theme.ssh_bg)


def segment_shell_var(p):
    """The value of the configured environment variable."""
    name = p.cfg.shell_var
    content = os.environ.get(name) if name else None
    if content is None:
        if name:
            p.warn(f"Shell variable {name} does not exist.")
        return []
    if not content:
        if not p.cfg.shell_var_no_warn_empty:
            p.warn(f"Shell variable {name} is empty.")
        return []
    return _single("shell-var", content, p.theme.shell_var_fg, p.theme.shell_var_bg)