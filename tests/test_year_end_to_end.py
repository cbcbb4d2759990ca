import pytest

from engine import calculate_withdrawal_plan, calculate_year_taxes
from utils.input_adapter import get_demographics, get_fiscal_parameters


def test_retired_couple_year(make_ledger):
    fiscal = get_fiscal_parameters(spend=60_000)
    demographics = get_demographics(age=68, partner_age=66)
    ledger = make_ledger(
        savings=80_000,
        subject_roth_ira=40_000,
        partner_roth_ira=20_000,
        subject_401k=300_000,
        partner_401k=200_000,
    )
    subject_ss, partner_ss = 30_000, 18_000

    # Social Security arrives net of the flat withholding
    cash_on_hand = (subject_ss + partner_ss) * (1 - fiscal.flat_ss_withholding_rate)
    plan = calculate_withdrawal_plan(fiscal, demographics, ledger, cash_on_hand)
    taxes = calculate_year_taxes(fiscal, demographics, plan, subject_ss, partner_ss)

    assert plan.requested_ask == pytest.approx(15_360)
    assert plan.total_actual_withdrawals == pytest.approx(plan.requested_ask, abs=0.02)
    assert plan.shortfall == 0.0
    assert plan.combined_401k_gross_withdrawal > plan.combined_401k_net_withdrawal
    assert plan.subject_401k_net_withdrawal > plan.partner_401k_net_withdrawal
    assert taxes.trad401k_withholding == pytest.approx(
        plan.combined_401k_gross_withdrawal - plan.combined_401k_net_withdrawal
    )
    assert taxes.tax.federal_tax_owed >= 0
    assert taxes.ss.taxable_amount <= 0.85 * (subject_ss + partner_ss)
