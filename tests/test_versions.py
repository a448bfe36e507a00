import subprocess
from types import SimpleNamespace

import pytest

from promptline import versions
from promptline.themes import Theme


def make_p():
    return SimpleNamespace(theme=Theme(goenv_fg=40, goenv_bg=41, time_fg=42, time_bg=43))


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    home = tmp_path / "home"
    work = tmp_path / "work" / "project"
    home.mkdir()
    work.mkdir(parents=True)
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.setenv("PATH", str(tmp_path / "nobin"))
    for name in ("GOENV_VERSION", "RBENV_VERSION"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(work)
    return SimpleNamespace(home=home, work=work, root=tmp_path)


def fake_run(stdout):
    def run(args, **kwargs):
        return subprocess.CompletedProcess(args, 0, stdout=stdout, stderr=b"")

    return run


def test_find_version_file_in_parent(tmp_path):
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    (tmp_path / "a" / ".go-version").write_text("1.16.3\n")
    assert versions.find_version_file(str(nested), ".go-version") == "1.16.3"


def test_find_version_file_prefers_nearest(tmp_path):
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    (tmp_path / "a" / ".ruby-version").write_text("2.0")
    (nested / ".ruby-version").write_text("3.1")
    assert versions.find_version_file(str(nested), ".ruby-version") == "3.1"


def test_find_version_file_skips_directories(isolated):
    (isolated.work / ".go-version").mkdir()
    assert versions.find_version_file(str(isolated.work), ".go-version") is None


def test_goenv_from_environment(isolated, monkeypatch):
    monkeypatch.setenv("GOENV_VERSION", "1.15")
    [seg] = versions.segment_goenv(make_p())
    assert seg.content == "1.15"
    assert (seg.foreground, seg.background) == (40, 41)


def test_goenv_skips_global_version(isolated, monkeypatch):
    (isolated.home / ".goenv").mkdir()
    (isolated.home / ".goenv" / "version").write_text("1.15\n")
    monkeypatch.setenv("GOENV_VERSION", "1.15")
    (isolated.work / ".go-version").write_text("1.14\n")
    [seg] = versions.segment_goenv(make_p())
    assert seg.content == "1.14"


def test_goenv_only_global_version_shows_nothing(isolated, monkeypatch):
    (isolated.home / ".goenv").mkdir()
    (isolated.home / ".goenv" / "version").write_text("1.15")
    monkeypatch.setenv("GOENV_VERSION", "1.15")
    assert versions.segment_goenv(make_p()) == []


def test_goenv_from_command(isolated, monkeypatch):
    monkeypatch.setattr(subprocess, "run", fake_run(b"1.16.0 (set by env)\n"))
    [seg] = versions.segment_goenv(make_p())
    assert seg.content == "1.16.0"


def test_goenv_command_without_space(isolated, monkeypatch):
    monkeypatch.setattr(subprocess, "run", fake_run(b"system\n"))
    assert versions.segment_goenv(make_p()) == []


def test_rbenv_from_environment(isolated, monkeypatch):
    monkeypatch.setenv("RBENV_VERSION", "2.7.2")
    [seg] = versions.segment_rbenv(make_p())
    assert seg.content == "2.7.2"
    assert (seg.foreground, seg.background) == (42, 43)


def test_rbenv_from_file(isolated):
    (isolated.work / ".ruby-version").write_text(" 3.0.1 \n")
    [seg] = versions.segment_rbenv(make_p())
    assert seg.content == "3.0.1"


def test_rbenv_from_global(isolated):
    (isolated.home / ".rbenv").mkdir()
    (isolated.home / ".rbenv" / "version").write_text("2.6.0\n")
    [seg] = versions.segment_rbenv(make_p())
    assert seg.content == "2.6.0"


def test_rbenv_from_command(isolated, monkeypatch):
    monkeypatch.setattr(subprocess, "run", fake_run(b"2.5.8 (set by file)\n"))
    [seg] = versions.segment_rbenv(make_p())
    assert seg.content == "2.5.8"


def test_rbenv_nothing_found(isolated):
    assert versions.segment_rbenv(make_p()) == []