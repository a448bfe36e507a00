import json
from types import SimpleNamespace

import pytest

from promptline.env import (
    DOCKER_ICON,
    DOTENV_ICON,
    NIX_SHELL_ICON,
    segment_aws,
    segment_docker,
    segment_docker_context,
    segment_dotenv,
    segment_nix_shell,
    segment_perlbrew,
    segment_plenv,
    segment_shell_var,
    segment_shenv,
    segment_ssh,
    segment_virtual_env,
    segment_virtual_go,
    segment_wsl,
)
from promptline.themes import Config, ShellInfo, SymbolTemplate, Theme

ENV_VARS = [
    "AWS_PROFILE", "AWS_DEFAULT_REGION", "DOCKER_MACHINE_NAME", "DOCKER_HOST",
    "IN_NIX_SHELL", "PERLBREW_PERL", "PLENV_VERSION", "SHENV_VERSION", "VIRTUALGO",
    "VIRTUAL_ENV", "CONDA_ENV_PATH", "CONDA_DEFAULT_ENV", "PYENV_VERSION",
    "WSL_DISTRO_NAME", "NAME", "SSH_CLIENT", "PROMPT_TEST_VAR",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def make_prompt(**cfg):
    warnings = []
    return SimpleNamespace(
        cfg=Config(**cfg),
        theme=Theme(
            aws_fg=1, aws_bg=2, docker_machine_fg=3, docker_machine_bg=4,
            pl_env_fg=5, pl_env_bg=6, virtual_env_fg=7, virtual_env_bg=8,
            ssh_fg=9, ssh_bg=10, shell_var_fg=11, shell_var_bg=12,
        ),
        shell=ShellInfo(escaped_dollar="\\$", escaped_backtick="`", escaped_backslash="\\"),
        symbols=SymbolTemplate(network="N", network_alternate="ALT", venv_indicator="V"),
        warn=warnings.append,
        warnings=warnings,
    )


def test_aws_profile_and_region(monkeypatch):
    monkeypatch.setenv("AWS_PROFILE", "dev")
    assert segment_aws(make_prompt())[0].content == "dev"
    monkeypatch.setenv("AWS_DEFAULT_REGION", "eu-west-1")
    (seg,) = segment_aws(make_prompt())
    assert seg.content == "dev (eu-west-1)"
    assert (seg.name, seg.foreground, seg.background) == ("aws", 1, 2)


def test_aws_without_profile():
    assert segment_aws(make_prompt()) == []


def test_docker_machine_name(monkeypatch):
    monkeypatch.setenv("DOCKER_MACHINE_NAME", "box")
    monkeypatch.setenv("DOCKER_HOST", "tcp://ignored:1")
    assert segment_docker(make_prompt())[0].content == "box"


def test_docker_host(monkeypatch):
    host = "192.0.2.1:2376"
    monkeypatch.setenv("DOCKER_HOST", f"tcp://{host}")
    (seg,) = segment_docker(make_prompt())
    assert seg.content == host
    assert seg.name == "docker"


def test_docker_nothing_set():
    assert segment_docker(make_prompt()) == []


def write_docker_config(home, context):
    docker = home / ".docker"
    (docker / "contexts").mkdir(parents=True)
    (docker / "config.json").write_text(json.dumps({"currentContext": context}))


def test_docker_context(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    write_docker_config(tmp_path, "remote")
    (seg,) = segment_docker_context(make_prompt())
    assert seg.content == DOCKER_ICON + "remote"
    assert seg.name == "docker-context"


def test_docker_default_context_hidden(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    write_docker_config(tmp_path, "default")
    assert segment_docker_context(make_prompt()) == []


def test_docker_context_without_contexts_dir(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    (tmp_path / ".docker").mkdir()
    (tmp_path / ".docker" / "config.json").write_text(json.dumps({"currentContext": "remote"}))
    assert segment_docker_context(make_prompt()) == []


def test_dotenv(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    assert segment_dotenv(make_prompt()) == []
    (tmp_path / ".envrc").write_text("export A=1\n")
    assert segment_dotenv(make_prompt())[0].content == DOTENV_ICON


def test_dotenv_directory_ignored(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").mkdir()
    assert segment_dotenv(make_prompt()) == []


def test_nix_shell(monkeypatch):
    assert segment_nix_shell(make_prompt()) == []
    monkeypatch.setenv("IN_NIX_SHELL", "impure")
    assert segment_nix_shell(make_prompt())[0].content == NIX_SHELL_ICON


def test_perlbrew_uses_base_name(monkeypatch):
    monkeypatch.setenv("PERLBREW_PERL", "/opt/perl5/perls/perl-5.30/")
    assert segment_perlbrew(make_prompt())[0].content == "perl-5.30"


@pytest.mark.parametrize(
    "func,var,name",
    [
        (segment_plenv, "PLENV_VERSION", "plenv"),
        (segment_shenv, "SHENV_VERSION", "shenv"),
        (segment_virtual_go, "VIRTUALGO", "vgo"),
    ],
)
def test_plain_variable_segments(monkeypatch, func, var, name):
    assert func(make_prompt()) == []
    monkeypatch.setenv(var, "5.1")
    (seg,) = func(make_prompt())
    assert (seg.name, seg.content) == (name, "5.1")


def test_virtualenv_order_and_base_name(monkeypatch):
    monkeypatch.setenv("PYENV_VERSION", "3.11")
    assert segment_virtual_env(make_prompt())[0].content == "3.11"
    monkeypatch.setenv("VIRTUAL_ENV", "/srv/envs/project")
    (seg,) = segment_virtual_env(make_prompt())
    assert seg.content == "project"
    assert (seg.foreground, seg.background) == (7, 8)


def test_virtualenv_size_limit(monkeypatch):
    monkeypatch.setenv("VIRTUAL_ENV", "/srv/envs/project")
    assert segment_virtual_env(make_prompt(venv_name_size_limit=3))[0].content == "V"


def test_virtualenv_escapes(monkeypatch):
    monkeypatch.setenv("CONDA_DEFAULT_ENV", "a$b")
    assert segment_virtual_env(make_prompt())[0].content == "a\\$b"


def test_wsl(monkeypatch):
    assert segment_wsl(make_prompt()) == []
    monkeypatch.setenv("WSL_DISTRO_NAME", "Ubuntu")
    (seg,) = segment_wsl(make_prompt())
    assert (seg.name, seg.content) == ("WSL", "Ubuntu")


def test_ssh_icons(monkeypatch):
    assert segment_ssh(make_prompt()) == []
    monkeypatch.setenv("SSH_CLIENT", "192.0.2.5 5000 22")
    assert segment_ssh(make_prompt())[0].content == "N"
    assert segment_ssh(make_prompt(ssh_alternate_icon=True))[0].content == "ALT"


def test_shell_var_present(monkeypatch):
    monkeypatch.setenv("PROMPT_TEST_VAR", "hello")
    p = make_prompt(shell_var="PROMPT_TEST_VAR")
    (seg,) = segment_shell_var(p)
    assert (seg.name, seg.content) == ("shell-var", "hello")
    assert p.warnings == []


def test_shell_var_missing_warns():
    p = make_prompt(shell_var="PROMPT_TEST_VAR")
    assert segment_shell_var(p) == []
    assert len(p.warnings) == 1


def test_shell_var_unset_name_is_silent():
    p = make_prompt()
    assert segment_shell_var(p) == []
    assert p.warnings == []


def test_shell_var_empty(monkeypatch):
    monkeypatch.setenv("PROMPT_TEST_VAR", "")
    p = make_prompt(shell_var="PROMPT_TEST_VAR")
    assert segment_shell_var(p) == []
    assert len(p.warnings) == 1
    quiet = make_prompt(shell_var="PROMPT_TEST_VAR", shell_var_no_warn_empty=True)
    assert segment_shell_var(quiet) == []
    assert quiet.warnings == []