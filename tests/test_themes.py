import json
import sys

import pytest

from promptline.themes import (
    Config,
    ShellInfo,
    SymbolTemplate,
    Theme,
    config_path,
    home_env_name,
    symbol_template_from_dict,
    theme_from_dict,
)


def test_home_env_name_on_windows(monkeypatch):
    monkeypatch.setattr(sys, "platform", "win32")
    assert home_env_name() == "USERPROFILE"


def test_home_env_name_elsewhere(monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    assert home_env_name() == "HOME"


def test_config_path_is_json_file_under_config_dir():
    path = config_path()
    assert path.name == "config.json"
    assert path.parent.parent.name == ".config"


def test_symbol_template_overrides_keep_base():
    base = SymbolTemplate(lock="L", separator="S")
    result = symbol_template_from_dict({"Separator": "X", "repoahead": "A", "Other": 1}, base)
    assert result.lock == "L"
    assert result.separator == "X"
    assert result.repo_ahead == "A"
    assert base.separator == "S"


def test_symbol_template_rejects_wrong_type():
    with pytest.raises(ValueError):
        symbol_template_from_dict({"Lock": 3})


def test_theme_overrides_and_merges_colour_map():
    base = Theme(path_bg=10, hostname_colorized_fg_map={1: 2})
    result = theme_from_dict(
        {"PathFg": 20, "HostnameColorizedFgMap": {"5": 6}, "LoadThresholdBad": 1}, base
    )
    assert result.path_bg == 10
    assert result.path_fg == 20
    assert result.hostname_colorized_fg_map == {1: 2, 5: 6}
    assert result.load_threshold_bad == 1.0
    assert base.hostname_colorized_fg_map == {1: 2}


@pytest.mark.parametrize(
    "data",
    [{"PathFg": 256}, {"PathFg": -1}, {"PathFg": True}, {"HostnameColorizedFgMap": {"x": 1}}, "nope"],
)
def test_theme_rejects_bad_values(data):
    with pytest.raises(ValueError):
        theme_from_dict(data)


def test_save_and_load_round_trip(tmp_path):
    path = tmp_path / "config.json"
    cfg = Config(
        cwd_mode="plain",
        modules=["cwd", "git"],
        path_aliases={"~/src": "S"},
        eval=True,
        jobs=3,
        theme="custom",
        themes={"custom": Theme(path_fg=4)},
    )
    cfg.save(path)
    loaded = Config()
    loaded.load(path)
    assert loaded.cwd_mode == cfg.cwd_mode
    assert loaded.modules == cfg.modules
    assert loaded.path_aliases == cfg.path_aliases
    assert loaded.eval is True
    assert loaded.theme == "custom"
    assert loaded.jobs == Config().jobs
    assert loaded.themes == {}


def test_save_uses_file_keys_and_skips_runtime_values(tmp_path):
    path = tmp_path / "config.json"
    Config(ssh_alternate_icon=True, themes={"t": Theme()}, shells={"s": ShellInfo()}).save(path)
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["alternate-ssh-icon"] is True
    assert data["themes"] == {}
    assert data["shells"] == {}
    assert "jobs" not in data
    assert "duration" not in data


def test_load_missing_file_changes_nothing(tmp_path):
    cfg = Config(cwd_mode="fancy")
    cfg.load(tmp_path / "absent.json")
    assert cfg == Config(cwd_mode="fancy")


def test_load_invalid_json_raises(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        Config().load(path)


def test_load_wrong_type_raises(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"cwd-max-depth": "deep"}), encoding="utf-8")
    with pytest.raises(ValueError):
        Config().load(path)


def test_load_new_mode_starts_from_current_mode(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"modes": {"custom": {"Separator": ">"}}}), encoding="utf-8")
    cfg = Config(mode="patched", modes={"patched": SymbolTemplate(lock="L")})
    cfg.load(path)
    assert cfg.modes["custom"].lock == "L"
    assert cfg.modes["custom"].separator == ">"
    assert cfg.modes["patched"] == SymbolTemplate(lock="L")


def test_load_shells_and_aliases_merge(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps({"Shells": {"fish": {"RootIndicator": "$"}}, "path-aliases": {"b": "B"}}),
        encoding="utf-8",
    )
    cfg = Config(path_aliases={"a": "A"})
    cfg.load(path)
    assert cfg.shells["fish"] == ShellInfo(root_indicator="$")
    assert cfg.path_aliases == {"a": "A", "b": "B"}