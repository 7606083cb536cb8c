"""Settings CLI commands for SARS Pay.

Manages settings.json - default tax year, tax rules directory, company payroll.
"""

import click
from pathlib import Path

from sarspay.sdk import (
    load_settings,
    get_settings_path,
    get_tax_rules_dir,
    get_default_tax_year,
    set_setting,
    unset_setting,
)

KNOWN_SETTINGS = ("default_tax_year", "tax_rules_dir", "company_annual_payroll")


@click.group()
def settings():
    """Manage settings (settings.json).

    Available settings:
    - default_tax_year: tax year used when --year is not given
    - tax_rules_dir: directory of {year}.yaml tax rules
    - company_annual_payroll: payroll used for SDL exemption by default
    """
    pass


@settings.command("show")
def settings_show():
    """Show current settings and their values."""
    settings_path = get_settings_path()
    current = load_settings()

    click.echo(f"Settings file: {settings_path}")
    click.echo(f"File exists: {settings_path.exists()}")
    click.echo()

    if not current:
        click.echo("No settings configured (using defaults).")
    else:
        click.echo("Current settings:")
        for key, value in current.items():
            click.echo(f"  {key}: {value}")

    click.echo()
    click.echo("Effective values:")
    click.echo(f"  default_tax_year: {get_default_tax_year()}")
    click.echo(f"  tax_rules_dir: {get_tax_rules_dir()}")


@settings.command("set")
@click.argument("key", type=click.Choice(KNOWN_SETTINGS))
@click.argument("value")
def settings_set(key, value):
    """Set KEY to VALUE.

    Examples:
        sars-pay settings set default_tax_year 2025
        sars-pay settings set tax_rules_dir ~/sars-rules
    """
    if key == "default_tax_year":
        if not value.isdigit() or len(value) != 4:
            raise click.BadParameter(f"Invalid year '{value}'. Must be 4 digits.")
        stored = int(value)
    elif key == "tax_rules_dir":
        rules_path = Path(value).expanduser().resolve()
        if not rules_path.is_dir():
            raise click.ClickException(f"Not a directory: {rules_path}")
        stored = str(rules_path)
    else:
        try:
            amount = float(value)
        except ValueError:
            raise click.BadParameter(f"Invalid amount '{value}'.")
        if amount < 0:
            raise click.BadParameter("Payroll cannot be negative.")
        stored = value

    set_setting(key, stored)
    click.echo(f"Set {key}: {stored}")
    click.echo(f"Saved to: {get_settings_path()}")


@settings.command("unset")
@click.argument("key", type=click.Choice(KNOWN_SETTINGS))
def settings_unset(key):
    """Clear KEY, reverting to the default."""
    if unset_setting(key):
        click.echo(f"Cleared {key} setting.")
    else:
        click.echo(f"{key} was not set.")
