"""Symbols, themes, shell descriptions and the persisted configuration."""

import json
import sys
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import get_origin


@dataclass
class SymbolTemplate:
    """Glyphs used to draw separators and repository status."""

    lock: str = ""
    network: str = ""
    network_alternate: str = ""
    separator: str = ""
    separator_thin: str = ""
    separator_reverse: str = ""
    separator_reverse_thin: str = ""
    repo_detached: str = ""
    repo_branch: str = ""
    repo_ahead: str = ""
    repo_behind: str = ""
    repo_staged: str = ""
    repo_not_staged: str = ""
    repo_untracked: str = ""
    repo_conflicted: str = ""
    repo_stashed: str = ""
    venv_indicator: str = ""


@dataclass
class Theme:
    """256-colour codes for every kind of segment."""

    reset: int = 0
    default_fg: int = 0
    default_bg: int = 0
    username_fg: int = 0
    username_bg: int = 0
    username_root_bg: int = 0
    hostname_fg: int = 0
    hostname_bg: int = 0
    hostname_colorized_fg_map: dict[int, int] = field(default_factory=dict)
    home_special_display: bool = False
    home_fg: int = 0
    home_bg: int = 0
    alias_fg: int = 0
    alias_bg: int = 0
    path_fg: int = 0
    path_bg: int = 0
    cwd_fg: int = 0
    separator_fg: int = 0
    readonly_fg: int = 0
    readonly_bg: int = 0
    ssh_fg: int = 0
    ssh_bg: int = 0
    docker_machine_fg: int = 0
    docker_machine_bg: int = 0
    kube_cluster_fg: int = 0
    kube_cluster_bg: int = 0
    kube_namespace_fg: int = 0
    kube_namespace_bg: int = 0
    wsl_machine_fg: int = 0
    wsl_machine_bg: int = 0
    dot_env_fg: int = 0
    dot_env_bg: int = 0
    aws_fg: int = 0
    aws_bg: int = 0
    repo_clean_fg: int = 0
    repo_clean_bg: int = 0
    repo_dirty_fg: int = 0
    repo_dirty_bg: int = 0
    jobs_fg: int = 0
    jobs_bg: int = 0
    cmd_passed_fg: int = 0
    cmd_passed_bg: int = 0
    cmd_failed_fg: int = 0
    cmd_failed_bg: int = 0
    svn_changes_fg: int = 0
    svn_changes_bg: int = 0
    gcp_fg: int = 0
    gcp_bg: int = 0
    git_ahead_fg: int = 0
    git_ahead_bg: int = 0
    git_behind_fg: int = 0
    git_behind_bg: int = 0
    git_staged_fg: int = 0
    git_staged_bg: int = 0
    git_not_staged_fg: int = 0
    git_not_staged_bg: int = 0
    git_untracked_fg: int = 0
    git_untracked_bg: int = 0
    git_conflicted_fg: int = 0
    git_conflicted_bg: int = 0
    git_stashed_fg: int = 0
    git_stashed_bg: int = 0
    goenv_fg: int = 0
    goenv_bg: int = 0
    virtual_env_fg: int = 0
    virtual_env_bg: int = 0
    virtual_go_fg: int = 0
    virtual_go_bg: int = 0
    perlbrew_fg: int = 0
    perlbrew_bg: int = 0
    pl_env_fg: int = 0
    pl_env_bg: int = 0
    tf_ws_fg: int = 0
    tf_ws_bg: int = 0
    time_fg: int = 0
    time_bg: int = 0
    shell_var_fg: int = 0
    shell_var_bg: int = 0
    sh_env_fg: int = 0
    sh_env_bg: int = 0
    node_fg: int = 0
    node_bg: int = 0
    node_version_fg: int = 0
    node_version_bg: int = 0
    load_fg: int = 0
    load_bg: int = 0
    load_high_bg: int = 0
    load_avg_value: int = 0
    load_threshold_bad: float = 0.0
    nix_shell_fg: int = 0
    nix_shell_bg: int = 0
    duration_fg: int = 0
    duration_bg: int = 0


@dataclass
class ShellInfo:
    """How a particular shell wants colours, escapes and eval output."""

    root_indicator: str = ""
    color_template: str = ""
    escaped_dollar: str = ""
    escaped_backtick: str = ""
    escaped_backslash: str = ""
    eval_prompt_prefix: str = ""
    eval_prompt_suffix: str = ""
    eval_prompt_right_prefix: str = ""
    eval_prompt_right_suffix: str = ""


def _convert(value, kind, label, byte_ints):
    if kind is bool:
        if not isinstance(value, bool):
            raise ValueError(f"{label}: expected a boolean")
        return value
    if kind is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{label}: expected an integer")
        if byte_ints and not 0 <= value <= 255:
            raise ValueError(f"{label}: expected an integer between 0 and 255")
        return value
    if kind is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{label}: expected a number")
        return float(value)
    if kind is str:
        if not isinstance(value, str):
            raise ValueError(f"{label}: expected a string")
        return value
    raise TypeError(f"{label}: unsupported field type {kind!r}")


def _merge_byte_map(current, value, label):
    if not isinstance(value, dict):
        raise ValueError(f"{label}: expected a JSON object")
    merged = dict(current)
    for key, entry in value.items():
        try:
            code = int(key, 10)
        except ValueError:
            raise ValueError(f"{label}: key {key!r} is not an integer") from None
        if not 0 <= code <= 255:
            raise ValueError(f"{label}: key {key!r} is out of range")
        merged[code] = _convert(entry, int, f"{label}.{key}", True)
    return merged


def _merge_dataclass(base, data, label, byte_ints):
    if data is None:
        return replace(base)
    if not isinstance(data, dict):
        raise ValueError(f"{label}: expected a JSON object")
    by_key = {f.name.replace("_", "").lower(): f for f in fields(base)}
    changes = {}
    for key, value in data.items():
        f = by_key.get(key.lower())
        if f is None or value is None:
            continue
        current = changes.get(f.name, getattr(base, f.name))
        if isinstance(current, dict):
            changes[f.name] = _merge_byte_map(current, value, f"{label}.{key}")
        else:
            changes[f.name] = _convert(value, f.type, f"{label}.{key}", byte_ints)
    return replace(base, **changes)


def symbol_template_from_dict(data, base=None):
    """Return *base* with the symbols named in the JSON object *data* replaced."""
    return _merge_dataclass(base if base is not None else SymbolTemplate(), data, "mode", False)


def theme_from_dict(data, base=None):
    """Return *base* with the colours named in the JSON object *data* replaced."""
    return _merge_dataclass(base if base is not None else Theme(), data, "theme", True)


def home_env_name():
    """Name of the environment variable that holds the user's home directory."""
    return "USERPROFILE" if sys.platform == "win32" else "HOME"


def config_path():
    """Location of the user's configuration file."""
    return Path.home() / ".config" / "promptline" / "config.json"


def _opt(key, default=None, factory=None):
    metadata = {"json": key}
    if factory is not None:
        return field(default_factory=factory, metadata=metadata)
    return field(default=default, metadata=metadata)


@dataclass
class Config:
    """Every setting the prompt is drawn with; ``json`` metadata names the file key."""

    cwd_mode: str = _opt("cwd-mode", "")
    cwd_max_depth: int = _opt("cwd-max-depth", 0)
    cwd_max_dir_size: int = _opt("cwd-max-dir-size", 0)
    colorize_hostname: bool = _opt("colorize-hostname", False)
    hostname_only_if_ssh: bool = _opt("hostname-only-if-ssh", False)
    ssh_alternate_icon: bool = _opt("alternate-ssh-icon", False)
    east_asian_width: bool = _opt("east-asian-width", False)
    prompt_on_new_line: bool = _opt("newline", False)
    static_prompt_indicator: bool = _opt("static-prompt-indicator", False)
    venv_name_size_limit: int = _opt("venv-name-size-limit", 0)
    jobs: int = _opt(None, 0)
    git_assume_unchanged_size: int = _opt("git-assume-unchanged-size", 0)
    git_disable_stats: list[str] = _opt("git-disable-stats", factory=list)
    git_mode: str = _opt("git-mode", "")
    mode: str = _opt("mode", "")
    theme: str = _opt("theme", "")
    shell: str = _opt("shell", "")
    modules: list[str] = _opt("modules", factory=list)
    modules_right: list[str] = _opt("modules-right", factory=list)
    priority: list[str] = _opt("priority", factory=list)
    max_width_percentage: int = _opt("max-width-percentage", 0)
    truncate_segment_width: int = _opt("truncate-segment-width", 0)
    prev_error: int = _opt(None, 0)
    numeric_exit_codes: bool = _opt("numeric-exit-codes", False)
    ignore_repos: list[str] = _opt("ignore-repos", factory=list)
    shorten_gke_names: bool = _opt("shorten-gke-names", False)
    shorten_eks_names: bool = _opt("shorten-eks-names", False)
    shell_var: str = _opt("shell-var", "")
    shell_var_no_warn_empty: bool = _opt("shell-var-no-warn-empty", False)
    trim_ad_domain: bool = _opt("trim-ad-domain", False)
    path_aliases: dict[str, str] = _opt("path-aliases", factory=dict)
    duration: str = _opt(None, "")
    duration_min: str = _opt("duration-min", "")
    duration_low_precision: bool = _opt("duration-low-precision", False)
    eval: bool = _opt("eval", False)
    condensed: bool = _opt("condensed", False)
    ignore_warnings: bool = _opt("ignore-warnings", False)
    modes: dict[str, SymbolTemplate] = _opt("modes", factory=dict)
    shells: dict[str, ShellInfo] = _opt("shells", factory=dict)
    themes: dict[str, Theme] = _opt("themes", factory=dict)

    def load(self, path=None):
        """Update the settings from a JSON file; a file that cannot be read is skipped.

        New modes and themes start from the entry named by the current ``mode``
        and ``theme`` settings.
        """
        target = Path(path) if path is not None else config_path()
        try:
            text = target.read_text(encoding="utf-8")
        except OSError:
            return
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("configuration: expected a JSON object")
        mode_base = self.modes.get(self.mode, SymbolTemplate())
        theme_base = self.themes.get(self.theme, Theme())
        by_key = {
            f.metadata["json"].lower(): f for f in fields(self) if f.metadata.get("json")
        }
        for key, value in data.items():
            f = by_key.get(key.lower())
            if f is None:
                continue
            setattr(self, f.name, self._decode(f, value, mode_base, theme_base))

    def _decode(self, f, value, mode_base, theme_base):
        label = f.metadata["json"]
        origin = get_origin(f.type)
        if origin is list:
            if value is None:
                return []
            if not isinstance(value, list):
                raise ValueError(f"{label}: expected a list")
            return [_convert(item, str, label, False) for item in value]
        if origin is dict:
            if value is None:
                return {}
            if not isinstance(value, dict):
                raise ValueError(f"{label}: expected a JSON object")
            merged = dict(getattr(self, f.name))
            for key, entry in value.items():
                entry_label = f"{label}.{key}"
                if f.name == "modes":
                    merged[key] = symbol_template_from_dict(entry, mode_base)
                elif f.name == "themes":
                    merged[key] = theme_from_dict(entry, theme_base)
                elif f.name == "shells":
                    merged[key] = _merge_dataclass(ShellInfo(), entry, entry_label, False)
                else:
                    merged[key] = _convert(entry, str, entry_label, False)
            return merged
        if value is None:
            return getattr(self, f.name)
        return _convert(value, f.type, label, False)

    def save(self, path=None):
        """Write the settings as indented JSON, leaving modes, shells and themes empty."""
        target = Path(path) if path is not None else config_path()
        payload = {}
        for f in fields(self):
            key = f.metadata.get("json")
            if key is None:
                continue
            if f.name in ("modes", "shells", "themes"):
                payload[key] = {}
            else:
                payload[key] = getattr(self, f.name)
        target.write_text(json.dumps(payload, indent=4, ensure_ascii=False), encoding="utf-8")