"""Tests for configuration loading."""
from __future__ import annotations

import pytest

from check_broken_packages import config
from check_broken_packages.config import AuditConfig, load_config
from check_broken_packages.errors import ConfigError


def test_defaults_when_no_file(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "DEFAULT_CONFIG_PATHS", (tmp_path / "absent.yaml",))

    cfg = load_config()
    assert cfg == AuditConfig()
    assert cfg.blacklist == ("/opt/", "/usr/share/")
    assert cfg.unit_globs == (
        "/etc/systemd/system/*.target.*",
        "/etc/systemd/user/*.target.*",
    )


def test_default_path_is_used_when_present(tmp_path, monkeypatch):
    path = tmp_path / "check-broken-packages.yaml"
    path.write_text("jobs: 2\n")
    monkeypatch.setattr(config, "DEFAULT_CONFIG_PATHS", (tmp_path / "absent.yaml", path))

    assert load_config().jobs == 2


def test_yaml_overrides(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text(
        "pacman: /usr/local/bin/pacman\n"
        "blacklist:\n"
        "  - /opt/\n"
        "  - /usr/lib/jvm/\n"
        "jobs: 8\n"
    )

    cfg = load_config(path)
    assert cfg.pacman == "/usr/local/bin/pacman"
    assert cfg.blacklist == ("/opt/", "/usr/lib/jvm/")
    assert cfg.jobs == 8
    assert cfg.ldd == "ldd"


def test_empty_file_means_defaults(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text("")

    assert load_config(path) == AuditConfig()


def test_empty_blacklist_warns(capsys):
    cfg = config.config_from_mapping({"blacklist": []})
    assert cfg.blacklist == ()
    assert "empty blacklist" in capsys.readouterr().err


@pytest.mark.parametrize("data,match", [
    ({"colour": True}, "unknown configuration key"),
    ({"jobs": -1}, "non-negative integer"),
    ({"jobs": True}, "non-negative integer"),
    ({"blacklist": "/opt/"}, "list of strings"),
    ({"ldd": ""}, "non-empty string"),
    (["pacman"], "must be a mapping"),
])
def test_invalid_values(data, match):
    with pytest.raises(ConfigError, match=match):
        config.config_from_mapping(data)


def test_bad_yaml_names_the_file(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text("blacklist: [unclosed\n")

    with pytest.raises(ConfigError, match="failed to parse"):
        load_config(path)


def test_invalid_value_names_the_file(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text("jobs: many\n")

    with pytest.raises(ConfigError, match=str(path)):
        load_config(path)
