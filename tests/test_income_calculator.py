import pytest

from engine.income_calculator import calculate_year_taxes
from models import WithdrawalPlan


@pytest.fixture
def plan_401k():
    return WithdrawalPlan(
        requested_ask=16_000,
        subject_401k_gross_withdrawal=20_000,
        subject_401k_net_withdrawal=16_000,
        combined_401k_gross_withdrawal=20_000,
        combined_401k_net_withdrawal=16_000,
        total_actual_withdrawals=16_000,
    )


def test_agi_below_deduction(make_fiscal, make_demographics, plan_401k):
    fiscal = make_fiscal(flat_ss_withholding_rate=0.07, flat_trad401k_withholding_rate=0.2)

    taxes = calculate_year_taxes(fiscal, make_demographics(), plan_401k, 20_000, 20_000)

    assert taxes.ss.taxable_amount == 4_000
    assert taxes.tax.gross_taxable_income == 60_000
    assert taxes.tax.adjusted_gross_income == 24_000
    assert taxes.tax.federal_tax_owed == 0.0
    assert taxes.ss_withholding == pytest.approx(2_800)
    assert taxes.trad401k_withholding == pytest.approx(4_000)
    assert taxes.taxes_due == pytest.approx(-6_800)


def test_pension_pushes_ss_into_second_tier(make_fiscal, make_demographics, plan_401k):
    taxes = calculate_year_taxes(
        make_fiscal(), make_demographics(), plan_401k, 20_000, 20_000, pension_income=40_000
    )

    assert taxes.ss.taxable_amount == pytest.approx(34_000)
    assert taxes.tax.adjusted_gross_income == pytest.approx(94_000)
    assert taxes.tax.federal_tax_owed == pytest.approx(7_312)
    assert taxes.taxes_due == pytest.approx(7_312 - 4_000)


def test_widowed_household_files_single(make_fiscal, make_demographics):
    widowed = make_demographics(age=80, partner_age=93)
    plan = WithdrawalPlan.empty(0)

    taxes = calculate_year_taxes(make_fiscal(), widowed, plan, 30_000, 0, other_taxable_income=30_000)

    assert (taxes.ss.tier1_threshold, taxes.ss.tier2_threshold) == (25_000, 34_000)
    assert taxes.tax.standard_deduction == pytest.approx(14_600)


def test_survivor_benefit_substitution_is_opt_in(make_fiscal, make_demographics):
    widowed = make_demographics(age=80, partner_age=93)
    plan = WithdrawalPlan.empty(0)

    as_reported = calculate_year_taxes(make_fiscal(), widowed, plan, 18_000, 30_000)
    substituted = calculate_year_taxes(
        make_fiscal(), widowed, plan, 18_000, 30_000, apply_survivor_benefit=True
    )

    assert as_reported.ss.total_benefits == 48_000
    assert substituted.ss.subject_benefits == 30_000
    assert substituted.ss.partner_benefits == 0.0
    assert substituted.ss.total_benefits == 30_000
