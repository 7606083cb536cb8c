"""Rich renderers for calculation results.

Transforms SDK result models into formatted Rich tables.
"""

from decimal import Decimal
from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from sarspay.sdk.schemas import (
    BulkPayslipResult,
    EtiResult,
    PayeResult,
    Payslip,
    SdlResult,
    UifResult,
)
from sarspay.sdk.taxes.schemas import TaxYearConfiguration


def render_payslip(console: Console, payslip: Payslip) -> None:
    """Render a payslip as a single table with employer costs underneath."""
    employee = payslip.employee
    period = payslip.period
    heading = employee.name or employee.employee_id or "Employee"
    when = f"{period.year}-{period.month:02d}" if period.year and period.month else f"tax year {period.tax_year}"

    table = Table(title=f"Payslip: {heading} ({when})", box=box.ROUNDED)
    table.add_column("", style="bold", min_width=28)
    table.add_column("Amount", justify="right", min_width=14)

    # Earnings
    table.add_row("[bold]EARNINGS[/bold]", "")
    table.add_row("  Basic Salary", _fmt(payslip.earnings.basic_salary))
    table.add_row("", "")

    # Deductions
    d = payslip.deductions
    table.add_row("[bold]DEDUCTIONS[/bold]", "")
    table.add_row("  PAYE", _fmt(d.paye))
    table.add_row("  UIF", _fmt(d.uif))
    if d.retirement_contribution:
        table.add_row("  Retirement Fund", _fmt(d.retirement_contribution))
    if d.medical_aid_contribution:
        table.add_row("  Medical Aid", _fmt(d.medical_aid_contribution))
    if d.other_deductions:
        table.add_row("  Other", _fmt(d.other_deductions))
    table.add_row("  [dim]Total Deductions[/dim]", f"[dim]{_fmt(d.total_deductions)}[/dim]")
    if d.medical_aid_tax_credit:
        table.add_row("  [dim]Medical Tax Credit (in PAYE)[/dim]", f"[dim]{_fmt(d.medical_aid_tax_credit)}[/dim]")
    table.add_row("", "")

    table.add_row(
        "[bold green]NET PAY[/bold green]",
        f"[bold green]{_fmt(payslip.summary.net_pay)}[/bold green]",
    )
    table.add_row("", "")

    # Employer side
    e = payslip.employer_contributions
    table.add_row("[bold]EMPLOYER CONTRIBUTIONS[/bold]", "")
    table.add_row("  UIF", _fmt(e.uif))
    table.add_row("  SDL", _fmt(e.sdl))
    if e.retirement_contribution:
        table.add_row("  Retirement Fund", _fmt(e.retirement_contribution))
    if e.medical_aid_contribution:
        table.add_row("  Medical Aid", _fmt(e.medical_aid_contribution))
    table.add_row("  [dim]Cost to Company[/dim]", f"[dim]{_fmt(payslip.summary.cost_to_company)}[/dim]")

    if payslip.eti is not None:
        table.add_row("", "")
        label = "  ETI" if payslip.eti.is_eligible else f"  ETI ([yellow]{payslip.eti.ineligibility_reason.value}[/yellow])"
        table.add_row(label, _fmt(payslip.eti.amount))
        table.add_row("  Net PAYE Payable", _fmt(payslip.summary.net_paye_payable))

    console.print(table)


def render_bulk(console: Console, result: BulkPayslipResult) -> None:
    """Render one row per payslip plus a totals row."""
    table = Table(title=f"Payroll ({result.summary.total_employees} employees)", box=box.ROUNDED)
    for column in ["Employee", "Gross", "PAYE", "UIF", "SDL", "ETI", "Net Pay", "CTC"]:
        table.add_column(column, justify="left" if column == "Employee" else "right")

    for p in result.payslips:
        table.add_row(
            p.employee.employee_id or p.employee.name or "-",
            _fmt(p.earnings.gross_earnings),
            _fmt(p.deductions.paye),
            _fmt(p.deductions.uif + p.employer_contributions.uif),
            _fmt(p.employer_contributions.sdl),
            _fmt(p.eti.amount if p.eti is not None else None),
            _fmt(p.summary.net_pay),
            _fmt(p.summary.cost_to_company),
        )

    s = result.summary
    table.add_section()
    table.add_row(
        "[bold]TOTAL[/bold]",
        _fmt(s.total_gross_earnings),
        _fmt(s.total_paye),
        _fmt(s.total_uif),
        _fmt(s.total_sdl),
        _fmt(s.total_eti),
        _fmt(s.total_net_pay),
        _fmt(s.total_cost_to_company),
        style="bold",
    )
    console.print(table)


def render_paye(console: Console, result: PayeResult) -> None:
    table = Table(title=f"PAYE {result.tax_year} (age {result.age})", box=box.ROUNDED, show_header=False)
    table.add_column("", style="bold", min_width=24)
    table.add_column("", justify="right", min_width=14)
    table.add_row("Gross Income", _fmt(result.gross_income))
    if result.retirement_deduction:
        table.add_row("Retirement Deduction", _fmt(result.retirement_deduction))
    table.add_row("Taxable Income", _fmt(result.taxable_income))
    table.add_row("Tax Threshold", _fmt(result.tax_threshold), style="dim")
    table.add_row("Tax per Brackets", _fmt(result.gross_tax))
    table.add_row("Rebates", _fmt(result.total_rebates))
    if result.medical_aid_credit:
        table.add_row("Medical Tax Credit", _fmt(result.medical_aid_credit))
    table.add_row("[bold green]Annual PAYE[/bold green]", f"[bold green]{_fmt(result.annual_paye)}[/bold green]")
    table.add_row("Monthly PAYE", _fmt(result.monthly_paye))
    console.print(table)


def render_uif(console: Console, result: UifResult) -> None:
    table = Table(title="UIF", box=box.ROUNDED, show_header=False)
    table.add_column("", style="bold", min_width=20)
    table.add_column("", justify="right", min_width=14)
    table.add_row("Contribution Base", _fmt(result.contribution_base))
    table.add_row("Employee", _fmt(result.employee_amount))
    table.add_row("Employer", _fmt(result.employer_amount))
    table.add_row("Total", _fmt(result.total_amount))
    table.add_row("Ceiling Applied", "yes" if result.ceiling_applied else "no", style="dim")
    console.print(table)


def render_sdl(console: Console, result: SdlResult) -> None:
    if result.is_exempt:
        console.print(Panel(
            f"Annual payroll {_fmt(result.annual_payroll)} is at or below "
            f"{_fmt(result.exemption_threshold)}: no SDL payable.",
            title="SDL exempt",
            border_style="yellow",
        ))
        return
    console.print(f"SDL at {result.rate * 100:.2f}%: [bold]{_fmt(result.amount)}[/bold]")


def render_eti(console: Console, result: EtiResult) -> None:
    if not result.is_eligible:
        console.print(Panel(
            f"[yellow]{result.detail}[/yellow]",
            title=f"Not eligible ({result.ineligibility_reason.value})",
            border_style="yellow",
        ))
        return
    band = result.band
    note = " (prorated by hours)" if result.prorated else ""
    console.print(
        f"ETI: [bold]{_fmt(result.amount)}[/bold]{note} "
        f"[dim]band {_fmt(band.min_salary)} - {_fmt(band.max_salary)}[/dim]"
    )


def render_rules(console: Console, config: TaxYearConfiguration) -> None:
    """Render a tax year's brackets, rebates and thresholds."""
    brackets = Table(title=f"Tax Brackets {config.year} ({config.start_date} to {config.end_date})", box=box.ROUNDED)
    brackets.add_column("From", justify="right")
    brackets.add_column("To", justify="right")
    brackets.add_column("Base Tax", justify="right")
    brackets.add_column("Rate", justify="right")
    for b in config.tax_brackets:
        brackets.add_row(_fmt(b.min_income), _fmt(b.max_income) if b.max_income is not None else "and above",
                         _fmt(b.base_tax), f"{b.rate}%")
    console.print(brackets)

    rebates = Table(title="Rebates and Thresholds", box=box.ROUNDED)
    rebates.add_column("")
    rebates.add_column("Ages")
    rebates.add_column("Amount", justify="right")
    for r in config.tax_rebates:
        ages = "all" if r.min_age is None else f"{r.min_age}+"
        rebates.add_row(f"{r.type.value.title()} rebate", ages, _fmt(r.amount))
    for t in config.tax_thresholds:
        ages = f"{t.min_age if t.min_age is not None else 0}-{t.max_age if t.max_age is not None else ''}"
        rebates.add_row("Threshold", ages, _fmt(t.amount))
    console.print(rebates)


def _fmt(amount: Optional[Decimal]) -> str:
    """Format currency amount."""
    if amount is None:
        return "-"
    return f"R{amount:,.2f}"
