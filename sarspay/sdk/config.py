"""Configuration management for SARS Pay.

Settings live in settings.json, a machine-specific file of preferences:
   - default_tax_year: tax year used when a command is given none
   - tax_rules_dir: directory of {year}.yaml rate tables to use instead of
     the tables bundled with the package
   - company_annual_payroll: payroll figure used for SDL exemption when a
     payslip command is given none

Config directory resolution:
1. SARS_PAY_CONFIG_PATH environment variable (if set)
2. $XDG_CONFIG_HOME/sars-pay/ or ~/.config/sars-pay/

Tax rules directory resolution:
1. SARS_PAY_TAX_RULES_PATH environment variable (if set)
2. settings.json "tax_rules_dir" key
3. sarspay/tax_rules/ bundled with the package

The calculators never read settings; only the CLI and the default
tax year table do.
"""

import json
import os
from pathlib import Path
from typing import Any, Optional


APP_NAME = "sars-pay"
SETTINGS_FILENAME = "settings.json"
BUNDLED_TAX_RULES_DIR = Path(__file__).parent.parent / "tax_rules"
DEFAULT_TAX_YEAR = 2026


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Resolution order:
    1. SARS_PAY_CONFIG_PATH environment variable
    2. ~/.config/sars-pay/ (XDG_CONFIG_HOME)

    Returns:
        Path to the configuration directory
    """
    env_path = os.environ.get("SARS_PAY_CONFIG_PATH")
    if env_path:
        return Path(env_path)

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg_config_home) / APP_NAME


def get_settings_path() -> Path:
    """Get the path to settings.json (may not exist yet)."""
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Load settings from settings.json.

    Returns:
        Settings dictionary (empty dict if file doesn't exist)
    """
    settings_file = get_settings_path()

    if not settings_file.exists():
        return {}

    with open(settings_file, "r") as f:
        return json.load(f)


def save_settings(settings: dict) -> Path:
    """Save settings to settings.json.

    Args:
        settings: Settings dictionary to save

    Returns:
        Path to the saved settings file
    """
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    settings_file = config_dir / SETTINGS_FILENAME

    with open(settings_file, "w") as f:
        json.dump(settings, f, indent=2)

    return settings_file


def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value from settings.json."""
    settings = load_settings()
    return settings.get(key, default)


def set_setting(key: str, value: Any) -> Path:
    """Set a setting value in settings.json.

    Returns:
        Path to the saved settings file
    """
    settings = load_settings()
    settings[key] = value
    return save_settings(settings)


def unset_setting(key: str) -> bool:
    """Remove a setting. Returns False if it was not set."""
    settings = load_settings()
    if key not in settings:
        return False
    del settings[key]
    save_settings(settings)
    return True


def get_tax_rules_dir() -> Path:
    """Get the directory holding {year}.yaml tax rules.

    Resolution order:
    1. SARS_PAY_TAX_RULES_PATH environment variable
    2. settings.json "tax_rules_dir"
    3. Tables bundled with the package
    """
    env_path = os.environ.get("SARS_PAY_TAX_RULES_PATH")
    if env_path:
        return Path(env_path)

    custom_dir = get_setting("tax_rules_dir")
    if custom_dir:
        return Path(custom_dir).expanduser()

    return BUNDLED_TAX_RULES_DIR


def get_default_tax_year() -> int:
    """Tax year used when none is given (settings.json or DEFAULT_TAX_YEAR)."""
    return int(get_setting("default_tax_year", DEFAULT_TAX_YEAR))


def get_company_annual_payroll() -> Optional[str]:
    """Company payroll used for SDL exemption, if configured."""
    value = get_setting("company_annual_payroll")
    return None if value is None else str(value)
