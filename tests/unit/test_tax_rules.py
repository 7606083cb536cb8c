"""Unit tests for tax year rules loading and validation."""

from datetime import date
from decimal import Decimal

import pytest
import yaml
from pydantic import ValidationError

from sarspay.sdk.config import BUNDLED_TAX_RULES_DIR
from sarspay.sdk.errors import TaxRulesError, UnsupportedTaxYearError
from sarspay.sdk.taxes.rules import TaxYearTable, load_tax_year_file, load_tax_year_table
from sarspay.sdk.taxes.schemas import MAX_AGE, EtiBand, TaxBracket


@pytest.fixture(scope="module")
def table():
    return load_tax_year_table(BUNDLED_TAX_RULES_DIR)


def load_bundled_data(year: int) -> dict:
    with open(BUNDLED_TAX_RULES_DIR / f"{year}.yaml") as f:
        return yaml.safe_load(f)


def write_rules(directory, name: str, data: dict):
    path = directory / name
    path.write_text(yaml.safe_dump(data))
    return path


class TestBundledRules:
    """The rate tables shipped with the package."""

    def test_supported_years(self, table):
        assert table.supported_years == [2023, 2024, 2025, 2026]
        assert len(table) == 4
        assert 2026 in table
        assert 2019 not in table

    def test_unsupported_year_lists_valid_years(self, table):
        with pytest.raises(UnsupportedTaxYearError) as exc_info:
            table.get(2020)
        assert str(exc_info.value) == (
            "Tax year 2020 is not supported. Supported years are: 2023, 2024, 2025, 2026"
        )
        assert exc_info.value.supported_years == [2023, 2024, 2025, 2026]

    @pytest.mark.parametrize("year", [2026.9, 2026.0, "2026", True])
    def test_non_integer_year_unsupported(self, table, year):
        with pytest.raises(UnsupportedTaxYearError, match="Supported years are"):
            table.get(year)

    def test_leap_year_end_date(self, table):
        config = table.get(2024)
        assert config.start_date == date(2023, 3, 1)
        assert config.end_date == date(2024, 2, 29)

    @pytest.mark.parametrize("year", [2023, 2024, 2025, 2026])
    def test_brackets_join_within_a_rand(self, table, year):
        """Tax at the top of a bracket matches the next bracket's base tax.

        Brackets start one rand above the previous maximum, so the published
        base tax can sit up to a rand above the lower bracket's ceiling tax.
        """
        brackets = table.get(year).tax_brackets
        for lower, upper in zip(brackets, brackets[1:]):
            assert abs(upper.base_tax - lower.calculate_tax(lower.max_income)) < 1

    @pytest.mark.parametrize("year", [2023, 2024, 2025, 2026])
    def test_every_age_has_one_threshold(self, table, year):
        config = table.get(year)
        for age in range(0, MAX_AGE + 1):
            assert sum(1 for t in config.tax_thresholds if t.applies_to(age)) == 1

    def test_rebates_by_age(self, table):
        config = table.get(2026)
        assert [r.amount for r in config.get_rebates(30)] == [Decimal("17235")]
        assert len(config.get_rebates(65)) == 2
        assert len(config.get_rebates(75)) == 3

    def test_thresholds_by_age(self, table):
        config = table.get(2026)
        assert config.get_tax_threshold(64) == Decimal("95750")
        assert config.get_tax_threshold(65) == Decimal("148217")
        assert config.get_tax_threshold(75) == Decimal("165689")

    def test_eti_bands_end_at_max_salary(self, table):
        for year in table:
            eti = table.get(year).eti
            assert eti.bands[0].min_salary == 0
            assert eti.bands[-1].max_salary == eti.max_qualifying_salary

    def test_2026_first_band_is_percentage_tier(self, table):
        band = table.get(2026).eti.bands[0]
        assert band.uses_salary_percentage
        assert band.salary_percentage(first_year=True) == Decimal("0.60")
        assert band.salary_percentage(first_year=False) == Decimal("0.30")


class TestImmutability:
    """Loaded rules are shared and cannot be changed."""

    def test_configuration_is_frozen(self, table):
        config = table.get(2026)
        with pytest.raises(ValidationError):
            config.year = 2030

    def test_table_mapping_is_read_only(self, table):
        with pytest.raises(TypeError):
            table._configurations[2030] = table.get(2026)

    def test_table_copies_input(self, table):
        source = {2026: table.get(2026)}
        copy = TaxYearTable(source)
        source[2027] = table.get(2026)
        assert 2027 not in copy


class TestRulesValidation:
    """Malformed rules files are rejected when loaded."""

    def test_year_must_match_filename(self, tmp_path):
        path = write_rules(tmp_path, "2027.yaml", load_bundled_data(2026))
        with pytest.raises(TaxRulesError, match="declares year 2026"):
            load_tax_year_file(path)

    def test_bracket_gap_rejected(self, tmp_path):
        data = load_bundled_data(2026)
        data["tax_brackets"][1]["min_income"] = "240000"
        path = write_rules(tmp_path, "2026.yaml", data)
        with pytest.raises(TaxRulesError, match="gap"):
            load_tax_year_file(path)

    def test_bracket_overlap_rejected(self, tmp_path):
        data = load_bundled_data(2026)
        data["tax_brackets"][1]["min_income"] = "200000"
        path = write_rules(tmp_path, "2026.yaml", data)
        with pytest.raises(TaxRulesError, match="overlapping"):
            load_tax_year_file(path)

    def test_overlapping_thresholds_rejected(self, tmp_path):
        data = load_bundled_data(2026)
        data["tax_thresholds"][0]["max_age"] = 70
        path = write_rules(tmp_path, "2026.yaml", data)
        with pytest.raises(TaxRulesError, match="matches 2 tax thresholds"):
            load_tax_year_file(path)

    def test_unknown_field_rejected(self, tmp_path):
        data = load_bundled_data(2026)
        data["uif"]["monthly_cap"] = "17712"
        path = write_rules(tmp_path, "2026.yaml", data)
        with pytest.raises(TaxRulesError):
            load_tax_year_file(path)

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "2026.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(TaxRulesError, match="does not contain a mapping"):
            load_tax_year_file(path)

    def test_empty_directory_rejected(self, tmp_path):
        with pytest.raises(TaxRulesError, match="No tax rules found"):
            load_tax_year_table(tmp_path)

    def test_custom_directory(self, tmp_path):
        write_rules(tmp_path, "2026.yaml", load_bundled_data(2026))
        table = load_tax_year_table(tmp_path)
        assert table.supported_years == [2026]

    def test_bracket_max_below_min_rejected(self):
        with pytest.raises(ValidationError):
            TaxBracket(min_income=Decimal("100"), max_income=Decimal("50"), base_tax=0, rate=18)

    def test_half_percentage_band_rejected(self):
        with pytest.raises(ValidationError, match="both first_year_percentage"):
            EtiBand(
                min_salary=0, max_salary=2000,
                first_year_amount=1500, second_year_amount=750,
                first_year_percentage=Decimal("0.6"),
            )
