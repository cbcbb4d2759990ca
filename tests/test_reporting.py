import pytest

from engine.withdrawal_engine import calculate_withdrawal_plan
from utils.reporting import allocation_table, format_allocation_table


@pytest.fixture
def plan(make_fiscal, make_demographics, make_ledger):
    ledger = make_ledger(savings=150, subject_roth_ira=30_000, partner_roth_ira=19_850)
    return calculate_withdrawal_plan(make_fiscal(spend=10_000), make_demographics(), ledger, cash_on_hand=0)


def test_one_row_per_account(plan):
    table = allocation_table(plan)

    assert list(table.index) == [
        "savings", "subject_roth_ira", "partner_roth_ira", "subject_401k", "partner_401k"
    ]
    assert table.loc["savings", "last_action"] == "drained"
    assert table.loc["subject_roth_ira", "last_action"] == "allocated"
    assert table.loc["subject_401k", "last_action"] == ""
    assert table["net"].sum() == pytest.approx(plan.total_actual_withdrawals)
    assert table["share_of_total"].sum() == pytest.approx(1.0, abs=0.002)


def test_formatted_copy(plan):
    formatted = format_allocation_table(allocation_table(plan))
    assert formatted.loc["savings", "net"] == "$150.00"
    assert formatted.loc["subject_401k", "share_of_total"] == "0.0%"
