# promptline

`promptline` is a library for building powerline-style shell prompts out of
small segments: the current directory, git and other version-control status,
the exit code of the last command, virtual environments, the Kubernetes
context, load average and more. The renderer emits colour escapes through a
shell-specific template, so its output can be placed in `PS1` or `PROMPT`.

## Installing

```
pip install .
```

## What is in the package

| Module | Contents |
| --- | --- |
| `promptline.segment` | `Segment`, the unit every module produces, with `compute_width(condensed)` |
| `promptline.themes` | `SymbolTemplate`, `Theme`, `ShellInfo`, `Config`, `symbol_template_from_dict`, `theme_from_dict`, `config_path`, `home_env_name` |
| `promptline.renderer` | `Powerline` (collects segments into rows, truncates and draws them), `Alignment`, `detect_shell`, `term_width`, `user_is_admin`, `segment_plugin` |
| `promptline.cwd` | `segment_cwd` and its helpers (`alias_path_segments`, `shorten_name`, `escape_variables`) |
| `promptline.git` | `segment_git`, `segment_git_lite`, `RepoStats`, `parse_git_stats`, `parse_git_branch_info` |
| `promptline.vcs` | `segment_bzr`, `segment_fossil`, `segment_hg`, `segment_subversion` and their status parsers |
| `promptline.env` | `segment_aws`, `segment_docker`, `segment_docker_context`, `segment_dotenv`, `segment_nix_shell`, `segment_perlbrew`, `segment_plenv`, `segment_shenv`, `segment_virtual_go`, `segment_virtual_env`, `segment_wsl`, `segment_ssh`, `segment_shell_var` |
| `promptline.misc` | `segment_exit_code`, `segment_jobs`, `segment_newline`, `segment_root`, `segment_time`, `segment_user`, `segment_term_title`, `segment_terraform_workspace`, `segment_perms`, `segment_host`, `segment_load`, `segment_node`, `segment_gcp` |
| `promptline.versions` | `segment_goenv`, `segment_rbenv`, `find_version_file` |
| `promptline.kube` | `segment_kube`, `read_kube_config`, `shorten_cluster_name` |
| `promptline.duration` | `segment_duration`, `format_duration` |
| `promptline.exitcode` | `signals_for`, `meaning_of_exit_code` |

Every segment function takes the `Powerline` being built and returns a list
of `Segment` objects (possibly empty).

## Drawing a prompt

`Powerline(cfg, cwd, align, modules)` takes a `Config`, the working
directory, an `Alignment` and a dict mapping module names to segment
functions. The names listed in `cfg.modules` are looked up in that dict and
run; `draw()` returns the finished prompt text.

```python
import os

from promptline.cwd import segment_cwd
from promptline.git import segment_git
from promptline.misc import segment_exit_code, segment_root
from promptline.renderer import Alignment, Powerline
from promptline.themes import Config, ShellInfo, SymbolTemplate, Theme

cfg = Config(
    cwd_mode="fancy",
    cwd_max_depth=5,
    git_mode="fancy",
    mode="simple",
    theme="mine",
    shell="bash",
    modules=["cwd", "git", "exit", "root"],
    max_width_percentage=50,
    modes={"simple": SymbolTemplate(separator=">", separator_thin="/")},
    themes={"mine": Theme(reset=255, path_fg=250, path_bg=237, cwd_fg=254,
                          cmd_passed_fg=15, cmd_passed_bg=236,
                          cmd_failed_fg=15, cmd_failed_bg=161)},
    shells={"bash": ShellInfo(root_indicator="\\$",
                              color_template="\\[\\e%s\\]",
                              escaped_dollar="\\$",
                              escaped_backtick="\\`",
                              escaped_backslash="\\\\")},
)

modules = {
    "cwd": segment_cwd,
    "git": segment_git,
    "exit": segment_exit_code,
    "root": segment_root,
}
print(Powerline(cfg, os.getcwd(), Alignment.LEFT, modules).draw())
```

Modules run concurrently; their segments are added in the order the modules
are listed. When the row is wider than `max_width_percentage` of the
terminal, segments wider than `truncate_segment_width` are shortened first
and then the lowest-priority segments are dropped; `priority` lists module
names from most to least important.

Setting `modules_right` with a shell whose `ShellInfo` has right-prompt eval
prefixes or suffixes builds a second, right-anchored prompt, drawn after the
left one when `eval` is set. Otherwise the right modules are appended to the
left row.

## Plugins

A module name that is not in the `modules` dict is run as an executable
called `promptline-NAME`. It should print a JSON list of segment objects;
keys match `Segment` field names case-insensitively (for example
`"Content"`, `"Foreground"`, `"HideSeparators"`). A plugin whose output is
not such a list contributes no segments; one that cannot be run is reported
on stderr.

## Configuration file

`Config.load()` reads `~/.config/promptline/config.json` (or a path you
pass) and updates the settings it names; a missing or unreadable file is
skipped. Keys are the option names, such as `"cwd-mode"`, `"git-mode"` or
`"path-aliases"`. Entries under `"themes"` and `"modes"` start from the theme
and mode currently selected and override only the fields they give.
`Config.save()` writes the settings back as indented JSON with `modes`,
`shells` and `themes` left empty.

## What the package does not do

There is no command-line program: the package does not parse options or
print a prompt by itself, so your own script has to build the `Config`, pick
the segment functions and call `draw()`. It also ships no built-in themes,
separator modes or shell descriptions; `Config()` starts with empty `themes`,
`modes` and `shells`, and these have to be supplied in code or in the
configuration file.