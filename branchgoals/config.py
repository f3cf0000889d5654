"""Configuration file management for branchgoals."""

import os
import tomllib
from pathlib import Path
from typing import Any

import tomli_w

from branchgoals.dates import DEFAULT_TIMEZONE
from branchgoals.domain.access import StaticPinTable

DEFAULT_REFRESH_INTERVAL = 30

DEFAULT_BRANCHES: list[dict[str, Any]] = [
    {"id": "santiago", "name": "Santiago", "color": "blue", "goal": 200},
    {"id": "moca", "name": "Moca", "color": "magenta", "goal": 200},
    {"id": "la-vega", "name": "La Vega", "color": "cyan", "goal": 200},
    {"id": "jarabacoa", "name": "Jarabacoa", "color": "green", "goal": 200},
    {"id": "puerto-plata", "name": "Puerto Plata", "color": "yellow", "goal": 200},
]

# Demo PINs, change them after `branchgoals init`
DEFAULT_PINS: dict[str, Any] = {
    "admin": "9999",
    "public": "0000",
    "branches": {
        "santiago": "1234",
        "moca": "2345",
        "la-vega": "3456",
        "jarabacoa": "4567",
        "puerto-plata": "5678",
    },
}


def get_xdg_config_home() -> Path:
    """Get XDG config directory, with fallback to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_config_path() -> Path:
    """Get the config file path (XDG compliant).

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "branchgoals" / "config.toml"


def default_config() -> dict[str, Any]:
    """Build the default configuration for a new region."""
    return {
        "timezone": DEFAULT_TIMEZONE,
        "featured_branch": "santiago",
        "refresh_interval": DEFAULT_REFRESH_INTERVAL,
        "pins": {
            "admin": DEFAULT_PINS["admin"],
            "public": DEFAULT_PINS["public"],
            "branches": dict(DEFAULT_PINS["branches"]),
        },
        "branches": [dict(b) for b in DEFAULT_BRANCHES],
    }


def create_default_config(config_path: Path | None = None) -> None:
    """Create default config file with secure permissions.

    Args:
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)
    save_config(default_config(), config_path)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        tomllib.TOMLDecodeError: If config file is not valid TOML.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "rb") as f:
        return tomllib.load(f)


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Save configuration to TOML file.

    Args:
        config: Configuration dictionary.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)

    os.chmod(config_path, 0o600)


def load_settings(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration with defaults filled in for missing keys.

    Demo PINs are only used when the file has no [pins] table. A [pins]
    table replaces them entirely, so a missing key grants nothing.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
    """
    settings = default_config()
    config = load_config(config_path)

    settings.update(config)
    if "pins" in config:
        settings["pins"] = {**config["pins"], "branches": config["pins"].get("branches", {})}
    return settings


def get_pin_table(settings: dict[str, Any]) -> StaticPinTable:
    """Build the PIN authenticator from settings."""
    pins = settings.get("pins", {})
    return StaticPinTable(
        admin_pin=str(pins.get("admin", "")),
        public_pin=str(pins.get("public", "")),
        branch_pins={str(k): str(v) for k, v in pins.get("branches", {}).items()},
    )
