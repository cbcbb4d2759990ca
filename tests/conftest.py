# tests/conftest.py
import pytest

from engine.account_year import (
    ACCOUNT_TYPES,
    AccountYear,
)
from models import Demographics, FiscalParameters

YEAR = 2025


@pytest.fixture
def make_fiscal():
    def _make(**overrides):
        params = dict(
            tax_year=YEAR,
            spend=0.0,
            inflation_rate=0.0,
            filing_status="married_filing_jointly",
        )
        params.update(overrides)
        return FiscalParameters(**params)
    return _make


@pytest.fixture
def make_demographics():
    def _make(**overrides):
        params = dict(
            age=65,
            ss_start_age=67,
            pension_start_age=65,
            subject_life_span=90,
            partner_age=63,
            partner_ss_start_age=67,
            partner_pension_start_age=65,
            partner_life_span=92,
            filing_status="married_filing_jointly",
        )
        params.update(overrides)
        return Demographics(**params)
    return _make


@pytest.fixture
def single_demographics():
    return Demographics(
        age=75,
        ss_start_age=67,
        pension_start_age=65,
        subject_life_span=95,
    )


@pytest.fixture
def make_ledger():
    """Every account present at zero unless a balance is given."""
    def _make(year=YEAR, **balances):
        values = {account: 0.0 for account in ACCOUNT_TYPES}
        values.update(balances)
        return AccountYear.from_balances(year, values)
    return _make
