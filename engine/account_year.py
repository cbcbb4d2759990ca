# engine/account_year.py
#
# Read-only account balances for a tax year. The real ledger (deposits,
# withdrawals, transfers) lives with the simulation driver; the engine only
# ever reads starting/ending balances through this interface.
#

from typing import Dict, Iterable, Mapping

from models import AccountSnapshot

SAVINGS = "savings"
SUBJECT_401K = "subject_401k"
PARTNER_401K = "partner_401k"
SUBJECT_ROTH_IRA = "subject_roth_ira"
PARTNER_ROTH_IRA = "partner_roth_ira"

ACCOUNT_TYPES = (SAVINGS, SUBJECT_401K, PARTNER_401K, SUBJECT_ROTH_IRA, PARTNER_ROTH_IRA)


class AccountYear:
    """
    In-memory ledger view keyed by account and year.
    Unknown accounts or years raise KeyError, same as a misconfigured ledger.
    """
    def __init__(self, snapshots: Mapping[str, Mapping[int, AccountSnapshot]]):
        self._snapshots: Dict[str, Dict[int, AccountSnapshot]] = {
            account: dict(years) for account, years in snapshots.items()
        }

    @classmethod
    def for_year(cls, year: int, snapshots: Mapping[str, AccountSnapshot]) -> "AccountYear":
        return cls({account: {year: snap} for account, snap in snapshots.items()})

    @classmethod
    def from_balances(cls, year: int, balances: Mapping[str, float]) -> "AccountYear":
        """Convenience: no activity yet, so starting == ending balance."""
        return cls.for_year(
            year,
            {
                account: AccountSnapshot(starting_balance=float(bal), ending_balance=float(bal))
                for account, bal in balances.items()
            },
        )

    def snapshot(self, account: str, year: int) -> AccountSnapshot:
        if account not in self._snapshots:
            raise KeyError(f"Unknown account '{account}'")
        years = self._snapshots[account]
        if year not in years:
            raise KeyError(f"No balances recorded for '{account}' in {year}")
        return years[year]

    def starting_balance(self, account: str, year: int) -> float:
        return self.snapshot(account, year).starting_balance

    def ending_balance(self, account: str, year: int) -> float:
        return self.snapshot(account, year).ending_balance

    def available_funds(self, accounts: Iterable[str], year: int) -> float:
        return sum(max(0.0, self.ending_balance(account, year)) for account in accounts)
