"""Tests for the sars-pay CLI commands."""

import json

import pytest
import yaml
from click.testing import CliRunner

from sarspay.cli.__main__ import cli


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Empty settings directory and bundled tax rules."""
    config_dir = tmp_path / "config"
    monkeypatch.setenv("SARS_PAY_CONFIG_PATH", str(config_dir))
    monkeypatch.delenv("SARS_PAY_TAX_RULES_PATH", raising=False)
    return config_dir


def invoke_json(args):
    result = CliRunner().invoke(cli, args + ["--format", "json"])
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


class TestYearsAndRules:

    def test_years(self, isolated_config):
        result = CliRunner().invoke(cli, ["years"])
        assert result.exit_code == 0
        assert result.output.split() == ["2023", "2024", "2025", "2026"]

    def test_rules_show_json(self, isolated_config):
        data = invoke_json(["rules", "show", "2024"])
        assert data["end_date"] == "2024-02-29"
        assert data["uif"]["monthly_ceiling"] == "17712"

    def test_rules_show_table(self, isolated_config):
        result = CliRunner().invoke(cli, ["rules", "show", "2026"])
        assert result.exit_code == 0
        assert "Tax Brackets 2026" in result.output

    def test_rules_unsupported_year(self, isolated_config):
        result = CliRunner().invoke(cli, ["rules", "show", "2019"])
        assert result.exit_code == 1
        assert "Supported years are: 2023, 2024, 2025, 2026" in result.output


class TestStatutoryCommands:
    """paye, uif, sdl and eti."""

    def test_paye(self, isolated_config):
        data = invoke_json(["paye", "250000", "--age", "30", "--year", "2024"])
        assert data["annual_paye"] == "28796.74"
        assert data["monthly_paye"] == "2399.73"

    def test_paye_monthly_income(self, isolated_config):
        data = invoke_json(["paye", "20000", "--age", "30", "--monthly"])
        assert data["tax_year"] == 2026
        assert data["monthly_paye"] == "2183.06"

    def test_paye_table(self, isolated_config):
        result = CliRunner().invoke(cli, ["paye", "250,000", "--age", "30"])
        assert result.exit_code == 0
        assert "Annual PAYE" in result.output

    def test_paye_bad_amount(self, isolated_config):
        result = CliRunner().invoke(cli, ["paye", "lots", "--age", "30"])
        assert result.exit_code == 2
        assert "not a valid amount" in result.output

    @pytest.mark.parametrize("amount", ["nan", "inf", "Infinity"])
    def test_paye_non_finite_amount(self, isolated_config, amount):
        result = CliRunner().invoke(cli, ["paye", amount, "--age", "30"])
        assert result.exit_code == 2
        assert "not a finite amount" in result.output

    def test_uif_non_finite_amount(self, isolated_config):
        result = CliRunner().invoke(cli, ["uif", "Infinity"])
        assert result.exit_code == 2

    def test_paye_bad_age(self, isolated_config):
        result = CliRunner().invoke(cli, ["paye", "250000", "--age", "200"])
        assert result.exit_code == 2

    def test_uif_ceiling(self, isolated_config):
        data = invoke_json(["uif", "17713"])
        assert data["employee_amount"] == "177.12"
        assert data["ceiling_applied"] is True

    def test_sdl_exempt(self, isolated_config):
        data = invoke_json(["sdl", "20000", "--payroll", "500000"])
        assert data["is_exempt"] is True
        assert data["amount"] == "0.00"

    def test_eti(self, isolated_config):
        data = invoke_json(["eti", "2000", "--age", "22", "--months", "6", "--year", "2023"])
        assert data["is_eligible"] is True
        assert data["amount"] == "1500"

    def test_eti_ineligible_table(self, isolated_config):
        result = CliRunner().invoke(cli, ["eti", "2000", "--age", "40"])
        assert result.exit_code == 0
        assert "age_out_of_range" in result.output


class TestPayslipCommand:

    def test_payslip_json(self, isolated_config):
        data = invoke_json(["payslip", "--salary", "20000", "--age", "30"])
        assert data["deductions"]["paye"] == "2183.06"
        assert data["summary"]["net_pay"] == "17616.94"
        assert data["eti"] is None

    def test_payslip_table(self, isolated_config):
        result = CliRunner().invoke(cli, ["payslip", "--salary", "20000", "--age", "30", "--name", "Thandi"])
        assert result.exit_code == 0
        assert "NET PAY" in result.output

    def test_payslip_with_eti(self, isolated_config):
        data = invoke_json(["payslip", "--salary", "4000", "--age", "22", "--eti"])
        assert data["eti"]["amount"] == "1500"
        assert data["summary"]["net_paye_payable"] == "0.00"

    def test_payslip_eti_and_extra_contributions(self, isolated_config):
        data = invoke_json([
            "payslip", "--salary", "6000", "--age", "35", "--eti", "--sez", "--hours", "80",
            "--other-deductions", "100", "--employer-retirement", "500", "--employer-medical", "250",
        ])
        # (1500 - 500 x 0.75) x 80 / 160, cents dropped
        assert data["eti"]["amount"] == "562"
        assert data["deductions"]["other_deductions"] == "100"
        assert data["deductions"]["total_deductions"] == "160.00"
        assert data["employer_contributions"]["total_contributions"] == "870.00"

    def test_retirement_options_exclusive(self, isolated_config):
        result = CliRunner().invoke(cli, [
            "payslip", "--salary", "20000", "--age", "30",
            "--retirement-pct", "0.05", "--retirement-amount", "1000",
        ])
        assert result.exit_code == 2
        assert "not both" in result.output

    def test_payroll_setting_applies(self, isolated_config):
        runner = CliRunner()
        assert runner.invoke(cli, ["settings", "set", "company_annual_payroll", "400000"]).exit_code == 0
        data = invoke_json(["payslip", "--salary", "20000", "--age", "30"])
        assert data["employer_contributions"]["sdl"] == "0.00"


class TestBulkCommand:

    def test_bulk_json(self, isolated_config, tmp_path):
        input_file = tmp_path / "payroll.yaml"
        input_file.write_text(yaml.safe_dump({"employees": [
            {"employee_id": "E001", "age": 30, "gross_salary": "20000"},
            {"employee_id": "E002", "age": 22, "gross_salary": "4000", "claim_eti": True},
        ]}))
        data = invoke_json(["bulk", str(input_file), "--workers", "2"])
        assert [p["employee"]["employee_id"] for p in data["payslips"]] == ["E001", "E002"]
        assert data["summary"]["total_eti"] == "1500"

    def test_bulk_table(self, isolated_config, tmp_path):
        input_file = tmp_path / "payroll.yaml"
        input_file.write_text(yaml.safe_dump([{"employee_id": "E001", "age": 30, "gross_salary": "20000"}]))
        result = CliRunner().invoke(cli, ["bulk", str(input_file)])
        assert result.exit_code == 0
        assert "TOTAL" in result.output

    def test_bulk_rejects_unknown_field(self, isolated_config, tmp_path):
        input_file = tmp_path / "payroll.yaml"
        input_file.write_text(yaml.safe_dump([{"age": 30, "gross_salary": "20000", "salary": "1"}]))
        result = CliRunner().invoke(cli, ["bulk", str(input_file)])
        assert result.exit_code == 1
        assert "Employee 1" in result.output

    def test_bulk_rejects_non_list(self, isolated_config, tmp_path):
        input_file = tmp_path / "payroll.yaml"
        input_file.write_text("just text\n")
        result = CliRunner().invoke(cli, ["bulk", str(input_file)])
        assert result.exit_code == 1
        assert "must contain a list" in result.output


class TestSettingsCommands:

    def test_set_and_show(self, isolated_config):
        runner = CliRunner()
        result = runner.invoke(cli, ["settings", "set", "default_tax_year", "2025"])
        assert result.exit_code == 0
        result = runner.invoke(cli, ["settings", "show"])
        assert "default_tax_year: 2025" in result.output
        data = invoke_json(["paye", "250000", "--age", "30"])
        assert data["tax_year"] == 2025

    def test_set_invalid_year(self, isolated_config):
        result = CliRunner().invoke(cli, ["settings", "set", "default_tax_year", "25"])
        assert result.exit_code == 2

    def test_set_unknown_key(self, isolated_config):
        result = CliRunner().invoke(cli, ["settings", "set", "data_dir", "/tmp"])
        assert result.exit_code == 2

    def test_unset(self, isolated_config):
        runner = CliRunner()
        runner.invoke(cli, ["settings", "set", "default_tax_year", "2025"])
        result = runner.invoke(cli, ["settings", "unset", "default_tax_year"])
        assert "Cleared default_tax_year" in result.output
        result = runner.invoke(cli, ["settings", "unset", "default_tax_year"])
        assert "was not set" in result.output
