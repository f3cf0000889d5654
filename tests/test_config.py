"""Tests for branchgoals.config."""

import tomllib
from pathlib import Path

import pytest
import tomli_w

from branchgoals.config import (
    DEFAULT_REFRESH_INTERVAL,
    create_default_config,
    get_config_path,
    get_pin_table,
    load_config,
    load_settings,
)
from branchgoals.domain.access import ADMIN, LEADER, AccessContext
from branchgoals.domain.models import BranchId


class TestConfigPath:
    """Tests for get_config_path."""

    def test_uses_xdg_config_home(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_config_path() == tmp_path / "branchgoals" / "config.toml"

    def test_falls_back_to_home(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert get_config_path() == tmp_path / ".config" / "branchgoals" / "config.toml"


class TestDefaultConfig:
    """Tests for create_default_config and load_settings."""

    def test_round_trips_through_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "branchgoals" / "config.toml"
        create_default_config(path)

        config = load_config(path)

        assert config["timezone"] == "America/Santo_Domingo"
        assert config["featured_branch"] == "santiago"
        assert [b["id"] for b in config["branches"]] == ["santiago", "moca", "la-vega", "jarabacoa", "puerto-plata"]

    def test_missing_config(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "missing.toml")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("timezone = ")
        with pytest.raises(tomllib.TOMLDecodeError):
            load_settings(path)

    def test_partial_config_gets_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        with open(path, "wb") as f:
            tomli_w.dump({"timezone": "UTC"}, f)

        settings = load_settings(path)

        assert settings["timezone"] == "UTC"
        assert settings["refresh_interval"] == DEFAULT_REFRESH_INTERVAL
        assert settings["pins"]["admin"] == "9999"
        assert settings["pins"]["branches"]["moca"] == "2345"
        assert len(settings["branches"]) == 5

    def test_custom_pins_replace_demo_pins(self, tmp_path: Path) -> None:
        """Should not keep demo leader PINs when [pins] omits branches."""
        path = tmp_path / "config.toml"
        with open(path, "wb") as f:
            tomli_w.dump({"pins": {"admin": "8271", "public": "5510"}}, f)

        table = get_pin_table(load_settings(path))

        assert table.resolve("8271") == AccessContext(role=ADMIN)
        assert table.resolve("1234") is None
        assert table.resolve("9999") is None

    def test_missing_admin_pin_grants_nothing(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        with open(path, "wb") as f:
            tomli_w.dump({"pins": {"public": "5510", "branches": {"moca": "2345"}}}, f)

        table = get_pin_table(load_settings(path))

        assert table.resolve("9999") is None
        assert table.resolve("") is None
        assert table.resolve("2345") == AccessContext(role=LEADER, branch_id=BranchId("moca"))


class TestPinTable:
    """Tests for get_pin_table."""

    def test_from_settings(self) -> None:
        settings = {"pins": {"admin": 9999, "public": "0000", "branches": {"moca": 2345}}}

        table = get_pin_table(settings)

        assert table.resolve("9999") == AccessContext(role=ADMIN)
        assert table.resolve("2345") == AccessContext(role=LEADER, branch_id=BranchId("moca"))
