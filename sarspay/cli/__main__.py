"""SARS Pay CLI - Command-line interface for payroll tax calculations."""

import json
import logging
import os
from decimal import Decimal, InvalidOperation
from pathlib import Path

import click
import yaml
from pydantic import ValidationError
from rich.console import Console

from sarspay import __version__
from sarspay.sdk import (
    EtiCalculator,
    EtiEmployee,
    InvalidInputError,
    PayeCalculator,
    PayslipCalculator,
    PayslipInput,
    SdlCalculator,
    TaxRulesError,
    UifCalculator,
    UnsupportedTaxYearError,
    get_company_annual_payroll,
    get_configuration,
    get_default_tax_year,
    supported_years,
)

from .renderers.payslip_renderer import (
    render_bulk,
    render_eti,
    render_paye,
    render_payslip,
    render_rules,
    render_sdl,
    render_uif,
)
from .settings_commands import settings as settings_group

logger = logging.getLogger(__name__)

FORMAT_OPTION = click.option(
    "--format", "output_format", type=click.Choice(["table", "json"]), default="table",
    help="Output format (default: table)",
)
YEAR_OPTION = click.option(
    "--year", type=int, default=None,
    help="Tax year, e.g. 2026 for March 2025 - February 2026 (default: settings or 2026)",
)


class AmountType(click.ParamType):
    """Currency amount parsed straight to Decimal."""

    name = "amount"

    def convert(self, value, param, ctx):
        if isinstance(value, Decimal):
            return value
        try:
            amount = Decimal(str(value).replace(",", ""))
        except InvalidOperation:
            self.fail(f"'{value}' is not a valid amount", param, ctx)
        if not amount.is_finite():
            self.fail(f"'{value}' is not a finite amount", param, ctx)
        return amount


AMOUNT = AmountType()


def _load_config(year):
    """Resolve the tax year, turning SDK errors into click errors."""
    try:
        return get_configuration(year if year is not None else get_default_tax_year())
    except (UnsupportedTaxYearError, TaxRulesError) as e:
        raise click.ClickException(str(e))


def _emit(result, output_format: str, renderer) -> None:
    if output_format == "json":
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        renderer(Console(), result)


@click.group()
@click.version_option(version=__version__, prog_name="sars-pay")
def cli():
    """SARS Pay - South African payroll tax calculations.

    PAYE, UIF, SDL and ETI for the supported tax years, and full monthly
    payslips for one employee or a whole payroll file.

    Settings are loaded from (in order):

    \b
    1. SARS_PAY_CONFIG_PATH environment variable
    2. ~/.config/sars-pay/settings.json (XDG default)

    Set LOG_LEVEL=DEBUG to trace the calculations.
    """
    pass


cli.add_command(settings_group)


@cli.command("years")
def years():
    """List supported tax years."""
    try:
        for year in supported_years():
            click.echo(year)
    except TaxRulesError as e:
        raise click.ClickException(str(e))


@cli.group("rules")
def rules_group():
    """Inspect tax rules."""
    pass


@rules_group.command("show")
@click.argument("year", type=int)
@FORMAT_OPTION
def rules_show(year, output_format):
    """Show brackets, rebates and thresholds for YEAR."""
    _emit(_load_config(year), output_format, render_rules)


@cli.command("paye")
@click.argument("income", type=AMOUNT)
@click.option("--age", type=int, required=True, help="Age at the end of the tax year.")
@click.option("--medical-members", type=int, default=0, show_default=True,
              help="Medical aid members including the main member (0 = no medical aid).")
@click.option("--retirement", type=AMOUNT, default=Decimal("0"),
              help="Annual retirement fund contribution.")
@click.option("--monthly", is_flag=True, help="INCOME is monthly rather than annual.")
@YEAR_OPTION
@FORMAT_OPTION
def paye(income, age, medical_members, retirement, monthly, year, output_format):
    """Calculate PAYE on INCOME (annual unless --monthly)."""
    calculator = PayeCalculator(_load_config(year))
    annual_income = income * 12 if monthly else income
    try:
        result = calculator.calculate(annual_income, age, medical_members, retirement)
    except InvalidInputError as e:
        raise click.BadParameter(str(e))
    _emit(result, output_format, render_paye)


@cli.command("uif")
@click.argument("salary", type=AMOUNT)
@click.option("--annual", is_flag=True, help="SALARY is annual; use the annual ceiling.")
@YEAR_OPTION
@FORMAT_OPTION
def uif(salary, annual, year, output_format):
    """Calculate UIF on SALARY (monthly unless --annual)."""
    calculator = UifCalculator(_load_config(year).uif)
    try:
        result = calculator.calculate_annual(salary) if annual else calculator.calculate_monthly(salary)
    except InvalidInputError as e:
        raise click.BadParameter(str(e))
    _emit(result, output_format, render_uif)


@cli.command("sdl")
@click.argument("income", type=AMOUNT)
@click.option("--payroll", type=AMOUNT, required=True, help="Employer's total annual payroll.")
@click.option("--annual", is_flag=True, help="INCOME is annual rather than monthly.")
@YEAR_OPTION
@FORMAT_OPTION
def sdl(income, payroll, annual, year, output_format):
    """Calculate SDL on INCOME for an employer with annual PAYROLL."""
    calculator = SdlCalculator(_load_config(year).sdl)
    try:
        if annual:
            result = calculator.calculate_annual(income, payroll)
        else:
            result = calculator.calculate_monthly(income, payroll)
    except InvalidInputError as e:
        raise click.BadParameter(str(e))
    _emit(result, output_format, render_sdl)


@cli.command("eti")
@click.argument("salary", type=AMOUNT)
@click.option("--age", type=int, required=True)
@click.option("--months", type=int, default=0, show_default=True,
              help="Months already employed by this employer.")
@click.option("--not-first-time", is_flag=True, help="Employee has been employed before.")
@click.option("--sez", is_flag=True, help="Employee works in a special economic zone.")
@click.option("--hours", type=AMOUNT, default=None, help="Hours worked this month (prorates below 160).")
@YEAR_OPTION
@FORMAT_OPTION
def eti(salary, age, months, not_first_time, sez, hours, year, output_format):
    """Calculate the monthly Employment Tax Incentive for SALARY."""
    calculator = EtiCalculator(_load_config(year).eti)
    try:
        employee = EtiEmployee(
            age=age,
            monthly_salary=salary,
            employment_months=months,
            is_first_time_employee=not not_first_time,
            works_in_special_economic_zone=sez,
            hours_worked_in_month=hours,
        )
    except ValidationError as e:
        raise click.BadParameter(str(e))
    _emit(calculator.calculate_monthly(employee), output_format, render_eti)


@cli.command("payslip")
@click.option("--salary", type=AMOUNT, required=True, help="Gross salary (monthly unless --annual).")
@click.option("--annual", is_flag=True, help="--salary is annual.")
@click.option("--age", type=int, required=True)
@click.option("--name", default="", help="Employee name.")
@click.option("--medical-members", type=int, default=0, show_default=True)
@click.option("--medical-contribution", type=AMOUNT, default=Decimal("0"), help="Monthly medical aid contribution.")
@click.option("--retirement-pct", type=AMOUNT, default=None, help="Retirement contribution as a fraction (0.075).")
@click.option("--retirement-amount", type=AMOUNT, default=None, help="Fixed monthly retirement contribution.")
@click.option("--payroll", type=AMOUNT, default=None, help="Company annual payroll for SDL.")
@click.option("--eti/--no-eti", "claim_eti", default=False, help="Claim ETI for this employee.")
@click.option("--months", type=int, default=0, help="Months employed (ETI).")
@click.option("--not-first-time", is_flag=True, help="Employee has been employed before (ETI).")
@click.option("--sez", is_flag=True, help="Employee works in a special economic zone (ETI).")
@click.option("--hours", type=AMOUNT, default=None, help="Hours worked this month (ETI prorates below 160).")
@click.option("--other-deductions", type=AMOUNT, default=Decimal("0"), help="Other monthly deductions.")
@click.option("--employer-retirement", type=AMOUNT, default=Decimal("0"),
              help="Employer retirement fund contribution for the month.")
@click.option("--employer-medical", type=AMOUNT, default=Decimal("0"),
              help="Employer medical aid contribution for the month.")
@YEAR_OPTION
@FORMAT_OPTION
def payslip(salary, annual, age, name, medical_members, medical_contribution, retirement_pct,
            retirement_amount, payroll, claim_eti, months, not_first_time, sez, hours, other_deductions,
            employer_retirement, employer_medical, year, output_format):
    """Calculate a monthly payslip for one employee."""
    if retirement_pct is not None and retirement_amount is not None:
        raise click.UsageError("Use either --retirement-pct or --retirement-amount, not both.")

    retirement = None
    if retirement_pct is not None:
        retirement = {"kind": "percentage", "rate": retirement_pct}
    elif retirement_amount is not None:
        retirement = {"kind": "fixed", "amount": retirement_amount}

    data = {
        "employee_name": name,
        "age": age,
        "gross_salary": salary,
        "is_annual_salary": annual,
        "medical_aid_members": medical_members,
        "medical_aid_contribution": medical_contribution,
        "retirement": retirement,
        "claim_eti": claim_eti,
        "employment_months": months,
        "is_first_time_employee": not not_first_time,
        "works_in_special_economic_zone": sez,
        "hours_worked_in_month": hours,
        "other_deductions": other_deductions,
        "employer_retirement_contribution": employer_retirement,
        "employer_medical_aid_contribution": employer_medical,
    }
    payroll = payroll if payroll is not None else get_company_annual_payroll()
    if payroll is not None:
        data["company_annual_payroll"] = payroll

    try:
        payslip_input = PayslipInput.model_validate(data)
    except ValidationError as e:
        raise click.BadParameter(str(e))

    result = PayslipCalculator(_load_config(year)).calculate(payslip_input)
    _emit(result, output_format, render_payslip)


@cli.command("bulk")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--workers", type=int, default=None, help="Threads to spread employees over.")
@YEAR_OPTION
@FORMAT_OPTION
def bulk(input_file, workers, year, output_format):
    """Calculate payslips for every employee in INPUT_FILE.

    INPUT_FILE is YAML or JSON: a list of payslip inputs, or a mapping with
    an 'employees' list. Unknown fields are rejected.
    """
    with open(input_file, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise click.ClickException(f"Cannot parse {input_file}: {e}")

    if isinstance(data, dict):
        data = data.get("employees")
    if not isinstance(data, list):
        raise click.ClickException(f"{input_file} must contain a list of employees")

    default_payroll = get_company_annual_payroll()
    inputs = []
    for index, record in enumerate(data, start=1):
        if default_payroll is not None and isinstance(record, dict):
            record.setdefault("company_annual_payroll", default_payroll)
        try:
            inputs.append(PayslipInput.model_validate(record))
        except ValidationError as e:
            raise click.ClickException(f"Employee {index} in {Path(input_file).name}: {e}")

    logger.info("Calculating %d payslips from %s", len(inputs), input_file)
    result = PayslipCalculator(_load_config(year)).calculate_bulk(inputs, max_workers=workers)
    _emit(result, output_format, render_bulk)


def main():
    """Main entry point."""
    log_level = os.environ.get("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )
    cli()


if __name__ == "__main__":
    main()
