# utils/tax_utils.py
import numpy as np
from typing import List, Tuple, Dict, Literal, Union

# Define the acceptable set of filing statuses for type hinting
TaxFilingStatus = Literal["single", "married_filing_jointly"]
TAX_BASE_YEAR = 2025 # Base year for all Federal constants below

# =============================================================================
# 1. Federal Ordinary Income Tax Brackets (2025) as (rate, up_to)
# =============================================================================

TAX_BRACKETS_2025: Dict[TaxFilingStatus, List[Tuple[float, float]]] = {
    "single": [
        (0.10, 11_600), (0.12, 47_150), (0.22, 100_525), (0.24, 191_950),
        (0.32, 243_725), (0.35, 609_350), (0.37, np.inf),
    ],
    "married_filing_jointly": [
        (0.10, 23_200), (0.12, 94_300), (0.22, 201_050), (0.24, 383_900),
        (0.32, 487_450), (0.35, 731_200), (0.37, np.inf),
    ],
}

# =============================================================================
# 2. Federal Standard Deduction (2025, indexed from TAX_BASE_YEAR)
# =============================================================================
STANDARD_DEDUCTION_2025: Dict[TaxFilingStatus, float] = {
    "single": 14_600,
    "married_filing_jointly": 29_200,
}

# =============================================================================
# 3. Fixed / Non-Indexed Federal Tax Parameters
# =============================================================================

# Social Security provisional income thresholds (statutory and NOT indexed)
SS_TAX_THRESHOLDS: Dict[TaxFilingStatus, Tuple[float, float]] = {
    "single": (25_000, 34_000),
    "married_filing_jointly": (32_000, 44_000),
}

SS_TIER1_TAXABLE_RATE = 0.50
SS_TIER2_TAXABLE_RATE = 0.85


# =============================================================================
# 4. Core Utility Functions
# =============================================================================

def normalize_filing_status(filing_status: str) -> TaxFilingStatus:
    """
    Maps loose filing status labels ("married", "mfj", "married_joint") onto the
    two statuses the tables carry. Anything not married-joint is taxed as single.
    """
    status = (filing_status or "").strip().lower()
    if status in ("married_filing_jointly", "married_joint", "married", "mfj"):
        return "married_filing_jointly"
    return "single"


def inflation_factor(inflation_rate: float, years_from_base: int) -> float:
    """Compounded (1 + rate) ** years. Years before the base year deflate."""
    return (1.0 + inflation_rate) ** years_from_base


def get_indexed_federal_constants(
    tax_year: int,
    inflation_rate: float,
    filing_status: str,
    base_year: int = TAX_BASE_YEAR,
) -> Dict[str, Union[float, List, Tuple]]:
    """
    Returns a dictionary of the Federal brackets, standard deduction and
    Social Security thresholds indexed to `tax_year`.
    """
    status = normalize_filing_status(filing_status)
    factor = inflation_factor(inflation_rate, tax_year - base_year)

    brackets = [
        (rate, up_to * factor if np.isfinite(up_to) else np.inf)
        for rate, up_to in TAX_BRACKETS_2025[status]
    ]

    return {
        "brackets": brackets,
        "std_deduction": STANDARD_DEDUCTION_2025[status] * factor,
        "ss_thresholds": SS_TAX_THRESHOLDS[status],
        "inflation_factor": factor,
    }
