import numpy as np
import pytest

import engine.tax_engine as tax_engine
from engine.tax_engine import (
    TaxCalculationError,
    calculate_taxes,
    determine_federal_income_tax,
    federal_income_tax,
    get_standard_deduction,
    get_tax_brackets,
)


def test_income_below_deduction_owes_nothing(make_fiscal):
    fiscal = make_fiscal()
    assert determine_federal_income_tax(20_000, fiscal, "married_filing_jointly") == 0.0


@pytest.mark.parametrize("status, agi, expected", [
    ("married_filing_jointly", 29_200 + 23_200, 2_320.00),
    ("married_filing_jointly", 29_200 + 50_000, 5_536.00),
    ("single", 14_600 + 11_600, 1_160.00),
    ("single", 14_600 + 50_000, 6_053.00),
])
def test_bracket_walk(make_fiscal, status, agi, expected):
    fiscal = make_fiscal(filing_status=status)
    assert determine_federal_income_tax(agi, fiscal, status) == pytest.approx(expected)


def test_top_bracket_is_unbounded():
    brackets = [(0.10, 10_000), (0.20, np.inf)]
    assert federal_income_tax(1_010_000, brackets) == pytest.approx(1_000 + 200_000)


def test_deduction_indexed_by_inflation(make_fiscal):
    fiscal = make_fiscal(tax_year=2026, inflation_rate=0.10)
    assert get_standard_deduction(fiscal, "married_filing_jointly") == pytest.approx(32_120.00)
    first_bracket = get_tax_brackets(fiscal, "married_filing_jointly")[0]
    assert first_bracket == (0.10, pytest.approx(25_520.0))


def test_years_before_base_are_deflated(make_fiscal):
    fiscal = make_fiscal(tax_year=2023, inflation_rate=0.10)
    assert get_standard_deduction(fiscal, "single") == pytest.approx(12_066.12)
    assert get_tax_brackets(fiscal, "single")[0][1] == pytest.approx(11_600 / 1.21)


def test_calculate_taxes_result(make_fiscal):
    fiscal = make_fiscal()
    result = calculate_taxes(90_000, 29_200 + 50_000, fiscal, "married_filing_jointly")

    assert result.taxable_income == pytest.approx(50_000)
    assert result.federal_tax_owed == pytest.approx(5_536.00)
    assert result.marginal_tax_rate == 0.12
    assert result.effective_tax_rate == pytest.approx(5_536 / 90_000)
    assert result.net_income == pytest.approx(90_000 - 5_536)


def test_calculate_taxes_below_deduction(make_fiscal):
    result = calculate_taxes(10_000, 10_000, make_fiscal(), "married_filing_jointly")
    assert result.taxable_income == 0.0
    assert result.federal_tax_owed == 0.0
    assert result.marginal_tax_rate == 0.0


def test_inconsistent_brackets_raise(make_fiscal, monkeypatch):
    monkeypatch.setattr(tax_engine, "get_tax_brackets", lambda fiscal, status: [(1.5, np.inf)])
    with pytest.raises(TaxCalculationError):
        determine_federal_income_tax(100_000, make_fiscal(), "married_filing_jointly")
