"""Tax year rules loading.

Each supported tax year is a YAML file named {year}.yaml in the tax rules
directory (see sdk.config.get_tax_rules_dir). The files are validated into
frozen TaxYearConfiguration objects and collected into a TaxYearTable,
which is built once and then shared read-only by every calculator.
"""

import logging
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

import yaml
from pydantic import ValidationError

from ..config import get_tax_rules_dir
from ..errors import TaxRulesError, UnsupportedTaxYearError
from .schemas import TaxYearConfiguration

logger = logging.getLogger(__name__)


class TaxYearTable:
    """Immutable mapping of tax year -> TaxYearConfiguration."""

    def __init__(self, configurations: Mapping[int, TaxYearConfiguration]):
        self._configurations = MappingProxyType(dict(sorted(configurations.items())))

    def get(self, year: int) -> TaxYearConfiguration:
        """Get the configuration for a tax year.

        Raises:
            UnsupportedTaxYearError: If no rules exist for the year
        """
        if isinstance(year, bool) or not isinstance(year, int) or year not in self._configurations:
            raise UnsupportedTaxYearError(year, self._configurations.keys())
        return self._configurations[year]

    @property
    def supported_years(self) -> list[int]:
        return list(self._configurations.keys())

    def __contains__(self, year: object) -> bool:
        return year in self._configurations

    def __iter__(self) -> Iterator[int]:
        return iter(self._configurations)

    def __len__(self) -> int:
        return len(self._configurations)


def load_tax_year_file(path: Path) -> TaxYearConfiguration:
    """Load and validate a single {year}.yaml file.

    Raises:
        TaxRulesError: If the file is unreadable, malformed, or its year
            key does not match the filename
    """
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise TaxRulesError(f"Cannot read tax rules file {path}: {e}") from e

    if not isinstance(data, dict):
        raise TaxRulesError(f"Tax rules file {path} does not contain a mapping")

    try:
        config = TaxYearConfiguration.model_validate(data)
    except ValidationError as e:
        raise TaxRulesError(f"Invalid tax rules in {path}:\n{e}") from e

    if path.stem.isdigit() and int(path.stem) != config.year:
        raise TaxRulesError(f"{path.name} declares year {config.year}")

    return config


def load_tax_year_table(rules_dir: Optional[Path] = None) -> TaxYearTable:
    """Build a TaxYearTable from every {year}.yaml in rules_dir.

    Args:
        rules_dir: Directory to read (default: get_tax_rules_dir())

    Raises:
        TaxRulesError: If the directory has no rules or any file is invalid
    """
    rules_dir = Path(rules_dir) if rules_dir is not None else get_tax_rules_dir()
    files = sorted(p for p in rules_dir.glob("*.yaml") if p.stem.isdigit())
    if not files:
        raise TaxRulesError(f"No tax rules found in {rules_dir}")

    configurations = {}
    for path in files:
        config = load_tax_year_file(path)
        configurations[config.year] = config

    logger.info("Loaded tax rules for %s from %s", ", ".join(str(y) for y in configurations), rules_dir)
    return TaxYearTable(configurations)


@lru_cache(maxsize=None)
def _default_table(rules_dir: Path) -> TaxYearTable:
    return load_tax_year_table(rules_dir)


def default_tax_year_table() -> TaxYearTable:
    """Process-wide table for the configured rules directory, loaded on first use."""
    return _default_table(get_tax_rules_dir())


def get_configuration(year: int) -> TaxYearConfiguration:
    """Get the tax rules for a year.

    Raises:
        UnsupportedTaxYearError: Message lists the supported years
    """
    return default_tax_year_table().get(year)


def supported_years() -> list[int]:
    return default_tax_year_table().supported_years
