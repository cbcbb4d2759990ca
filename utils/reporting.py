# utils/reporting.py
#
# Tabular views of a WithdrawalPlan for logs and notebooks
#

from typing import Dict, List

import pandas as pd

from engine.account_year import SAVINGS, SUBJECT_401K, PARTNER_401K, SUBJECT_ROTH_IRA, PARTNER_ROTH_IRA
from models import WithdrawalPlan
from utils.currency import as_percentage_of, format_currency_output, format_percent_output

# Plan-level decision keys -> ledger accounts they cover
_DECISION_ACCOUNTS: Dict[str, tuple] = {
    "savings": (SAVINGS,),
    "roth": (SUBJECT_ROTH_IRA, PARTNER_ROTH_IRA),
    "trad401k": (SUBJECT_401K, PARTNER_401K),
    "subject_401k": (SUBJECT_401K,),
    "partner_401k": (PARTNER_401K,),
}

COLUMNS = ["account", "gross", "net", "share_of_total", "last_action", "phase"]


def _last_decisions(plan: WithdrawalPlan) -> Dict[str, tuple]:
    last: Dict[str, tuple] = {}
    for decision in plan.decisions:
        for account in _DECISION_ACCOUNTS.get(decision.account, (decision.account,)):
            last[account] = (decision.action, decision.phase)
    return last


def allocation_table(plan: WithdrawalPlan) -> pd.DataFrame:
    """
    One row per ledger account: gross draw, take-home draw, share of the
    plan's total take-home and the last allocation decision touching it.
    """
    last = _last_decisions(plan)
    amounts = [
        (SAVINGS, plan.savings_withdrawal, plan.savings_withdrawal),
        (SUBJECT_ROTH_IRA, plan.subject_roth_withdrawal, plan.subject_roth_withdrawal),
        (PARTNER_ROTH_IRA, plan.partner_roth_withdrawal, plan.partner_roth_withdrawal),
        (SUBJECT_401K, plan.subject_401k_gross_withdrawal, plan.subject_401k_net_withdrawal),
        (PARTNER_401K, plan.partner_401k_gross_withdrawal, plan.partner_401k_net_withdrawal),
    ]

    rows: List[dict] = []
    for account, gross, net in amounts:
        action, phase = last.get(account, ("", ""))
        rows.append({
            "account": account,
            "gross": gross,
            "net": net,
            "share_of_total": as_percentage_of(net, plan.total_actual_withdrawals),
            "last_action": action,
            "phase": phase,
        })
    return pd.DataFrame(rows, columns=COLUMNS).set_index("account")


def format_allocation_table(table: pd.DataFrame) -> pd.DataFrame:
    """Display copy of `allocation_table` output with currency and percent strings."""
    formatted = table.copy()
    formatted["gross"] = formatted["gross"].map(format_currency_output)
    formatted["net"] = formatted["net"].map(format_currency_output)
    formatted["share_of_total"] = formatted["share_of_total"].map(format_percent_output)
    return formatted
