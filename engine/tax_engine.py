"""
Federal income tax calculator for retirement planning.
Standard deduction and bracket thresholds are indexed from the 2025 base
tables in utils.tax_utils by (1 + inflation) ** (tax_year - base_year).
"""
from dataclasses import dataclass
from typing import List, Tuple
import numpy as np
import logging

from models import FiscalParameters
from utils.currency import as_currency, format_currency_output
from utils.tax_utils import get_indexed_federal_constants, TaxFilingStatus

logger = logging.getLogger(__name__)


class TaxCalculationError(ValueError):
    """Computed tax is internally inconsistent (bad bracket or deduction data)."""


@dataclass(frozen=True)
class TaxResult:
    gross_taxable_income: float
    adjusted_gross_income: float
    standard_deduction: float
    taxable_income: float
    federal_tax_owed: float
    marginal_rate: float = 0.0

    @property
    def effective_tax_rate(self) -> float:
        if self.gross_taxable_income == 0:
            return 0.0
        return self.federal_tax_owed / self.gross_taxable_income

    @property
    def marginal_tax_rate(self) -> float:
        return self.marginal_rate

    @property
    def net_income(self) -> float:
        return as_currency(self.gross_taxable_income - self.federal_tax_owed)


# --- 1. Indexed Constants ---

def get_standard_deduction(fiscal: FiscalParameters, filing_status: TaxFilingStatus) -> float:
    """Standard deduction for `filing_status`, indexed to the fiscal tax year."""
    constants = get_indexed_federal_constants(
        fiscal.tax_year, fiscal.inflation_rate, filing_status, fiscal.tax_base_year
    )
    deduction = constants["std_deduction"]
    if not np.isfinite(deduction):
        logger.error(
            f"Standard deduction is not finite: inflation_rate={fiscal.inflation_rate}, "
            f"years_from_base={fiscal.years_from_base}"
        )
        raise TaxCalculationError("Standard deduction calculation failed")
    return as_currency(deduction)


def get_tax_brackets(fiscal: FiscalParameters, filing_status: TaxFilingStatus) -> List[Tuple[float, float]]:
    """Ordered (rate, up_to) pairs indexed to the fiscal tax year."""
    constants = get_indexed_federal_constants(
        fiscal.tax_year, fiscal.inflation_rate, filing_status, fiscal.tax_base_year
    )
    return constants["brackets"]


# --- 2. Bracket Walk ---

def federal_income_tax(taxable_income: float, brackets: List[Tuple[float, float]]) -> float:
    """
    Marginal tax on `taxable_income`: each slice min(income, up_to) - previous up_to
    is taxed at that bracket's rate, stopping once the income is covered.
    """
    tax = 0.0
    prev = 0.0
    for rate, up_to in brackets:
        slice_amount = min(taxable_income, up_to) - prev
        if slice_amount > 0:
            tax += slice_amount * rate
        if taxable_income <= up_to:
            break
        prev = up_to
    return tax


def marginal_rate(taxable_income: float, brackets: List[Tuple[float, float]]) -> float:
    if taxable_income <= 0:
        return 0.0
    for rate, up_to in brackets:
        if taxable_income <= up_to:
            return rate
    return brackets[-1][0]


def _is_calculation_valid(taxable_income: float, federal_tax: float, standard_deduction: float) -> bool:
    if taxable_income < 0 or federal_tax < 0 or standard_deduction < 0:
        return False

    # Federal taxes should never exceed the income they are levied on
    if federal_tax > taxable_income:
        return False

    return True


def determine_federal_income_tax(
    adjusted_gross_income: float,
    fiscal: FiscalParameters,
    filing_status: TaxFilingStatus,
) -> float:
    """
    Federal income tax owed on `adjusted_gross_income`.

    Income below the standard deduction owes nothing and the brackets are not
    consulted. Otherwise the deduction is subtracted and the remainder walked
    through the indexed brackets. Raises TaxCalculationError when the result is
    negative or larger than the income it was computed from.
    """
    standard_deduction = get_standard_deduction(fiscal, filing_status)
    if adjusted_gross_income < standard_deduction:
        return 0.0

    taxable_income = adjusted_gross_income - standard_deduction
    brackets = get_tax_brackets(fiscal, filing_status)
    tax = federal_income_tax(taxable_income, brackets)

    if not _is_calculation_valid(taxable_income, tax, standard_deduction):
        logger.error(
            f"Tax calculation validation failed: taxable_income={taxable_income}, "
            f"federal_tax={tax}, standard_deduction={standard_deduction}"
        )
        raise TaxCalculationError("Invalid tax calculation")

    return as_currency(tax)


# --- 3. Main Orchestrator Function ---

def calculate_taxes(
    gross_income: float,
    adjusted_gross_income: float,
    fiscal: FiscalParameters,
    filing_status: TaxFilingStatus,
) -> TaxResult:
    """
    Builds the year's TaxResult.

    Args:
        gross_income: every taxable revenue stream, Social Security at full gross.
        adjusted_gross_income: gross income less the non-taxable Social Security portion.
    """
    standard_deduction = get_standard_deduction(fiscal, filing_status)
    taxable_income = max(0.0, adjusted_gross_income - standard_deduction)
    federal_tax = determine_federal_income_tax(adjusted_gross_income, fiscal, filing_status)
    rate = marginal_rate(taxable_income, get_tax_brackets(fiscal, filing_status))

    logger.debug(
        f"{fiscal.tax_year} taxes: AGI {format_currency_output(adjusted_gross_income)}, "
        f"deduction {format_currency_output(standard_deduction)}, "
        f"federal tax {format_currency_output(federal_tax)}"
    )

    return TaxResult(
        gross_taxable_income=as_currency(gross_income),
        adjusted_gross_income=as_currency(adjusted_gross_income),
        standard_deduction=standard_deduction,
        taxable_income=as_currency(taxable_income),
        federal_tax_owed=federal_tax,
        marginal_rate=rate,
    )
