# models.py
from dataclasses import dataclass, field
from typing import Optional, Protocol, Tuple

from config.withdrawal_assumptions import (
    minimum_withdrawal,
    immaterial_percentage,
    trad401k_access_age,
)
from utils.tax_utils import TAX_BASE_YEAR, TaxFilingStatus, normalize_filing_status


@dataclass(frozen=True)
class FiscalParameters:
    # Core
    tax_year: int
    spend: float
    inflation_rate: float
    filing_status: TaxFilingStatus

    # Rates of return
    retirement_account_rate_of_return: float = 0.0
    roth_rate_of_return: float = 0.0
    savings_rate_of_return: float = 0.0

    # Account usage flags
    use_rmd: bool = True
    use_savings: bool = True
    use_trad401k: bool = True
    use_roth: bool = True

    # Flat withholding
    flat_ss_withholding_rate: float = 0.0
    flat_trad401k_withholding_rate: float = 0.0

    # Limits & thresholds
    subject_401k_withdrawal_limit: Optional[float] = None
    partner_401k_withdrawal_limit: Optional[float] = None
    minimum_withdrawal: float = minimum_withdrawal
    immaterial_percentage: float = immaterial_percentage

    tax_base_year: int = TAX_BASE_YEAR

    def __post_init__(self):
        object.__setattr__(self, "filing_status", normalize_filing_status(self.filing_status))
        for name in ("flat_ss_withholding_rate", "flat_trad401k_withholding_rate"):
            rate = getattr(self, name)
            if not 0.0 <= rate < 1.0:
                raise ValueError(f"{name} must be in [0, 1), got {rate}")
        if self.spend < 0:
            raise ValueError(f"spend must not be negative, got {self.spend}")
        if self.minimum_withdrawal < 0:
            raise ValueError(f"minimum_withdrawal must not be negative, got {self.minimum_withdrawal}")
        if not 0.0 <= self.immaterial_percentage <= 1.0:
            raise ValueError(f"immaterial_percentage must be in [0, 1], got {self.immaterial_percentage}")

    @property
    def years_from_base(self) -> int:
        return self.tax_year - self.tax_base_year


@dataclass(frozen=True)
class Demographics:
    # Subject
    age: int
    ss_start_age: int
    pension_start_age: int
    subject_life_span: int

    # Partner (None when single)
    partner_age: Optional[int] = None
    partner_ss_start_age: Optional[int] = None
    partner_pension_start_age: Optional[int] = None
    partner_life_span: Optional[int] = None

    trad401k_access_age: int = trad401k_access_age
    partner_trad401k_access_age: int = trad401k_access_age
    filing_status: TaxFilingStatus = "single"

    def __post_init__(self):
        object.__setattr__(self, "filing_status", normalize_filing_status(self.filing_status))

    @property
    def has_partner(self) -> bool:
        return self.partner_age is not None

    @property
    def is_subject_alive(self) -> bool:
        return self.age <= self.subject_life_span

    @property
    def is_partner_alive(self) -> bool:
        if not self.has_partner:
            return False
        if self.partner_life_span is None:
            return True
        return self.partner_age <= self.partner_life_span

    @property
    def is_widowed(self) -> bool:
        return self.has_partner and (self.is_subject_alive != self.is_partner_alive)

    @property
    def effective_filing_status(self) -> TaxFilingStatus:
        """Joint filing only survives while both spouses are living."""
        if self.filing_status == "married_filing_jointly" and self.is_subject_alive and self.is_partner_alive:
            return "married_filing_jointly"
        return "single"

    @property
    def is_subject_eligible_for_401k(self) -> bool:
        return self.is_subject_alive and self.age >= self.trad401k_access_age

    @property
    def is_partner_eligible_for_401k(self) -> bool:
        return self.is_partner_alive and self.partner_age >= self.partner_trad401k_access_age

    @property
    def is_subject_eligible_for_ss(self) -> bool:
        return self.is_subject_alive and self.age >= self.ss_start_age

    @property
    def is_partner_eligible_for_ss(self) -> bool:
        return (
            self.is_partner_alive
            and self.partner_ss_start_age is not None
            and self.partner_age >= self.partner_ss_start_age
        )


@dataclass(frozen=True)
class AccountSnapshot:
    starting_balance: float = 0.0
    ending_balance: float = 0.0
    deposits: float = 0.0
    withdrawals: float = 0.0


class AccountLedger(Protocol):
    """Read-only view of the per-year ledger the engine consumes."""

    def starting_balance(self, account: str, year: int) -> float: ...

    def ending_balance(self, account: str, year: int) -> float: ...

    def snapshot(self, account: str, year: int) -> AccountSnapshot: ...


@dataclass(frozen=True)
class AllocationDecision:
    phase: str
    account: str
    action: str
    amount: float
    reason: str = ""


@dataclass(frozen=True)
class WithdrawalPlan:
    requested_ask: float
    savings_withdrawal: float = 0.0
    roth_withdrawal: float = 0.0
    subject_roth_withdrawal: float = 0.0
    partner_roth_withdrawal: float = 0.0
    subject_401k_gross_withdrawal: float = 0.0
    subject_401k_net_withdrawal: float = 0.0
    partner_401k_gross_withdrawal: float = 0.0
    partner_401k_net_withdrawal: float = 0.0
    combined_401k_gross_withdrawal: float = 0.0
    combined_401k_net_withdrawal: float = 0.0
    total_actual_withdrawals: float = 0.0
    shortfall: float = 0.0
    decisions: Tuple[AllocationDecision, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls, requested_ask: float) -> "WithdrawalPlan":
        return cls(requested_ask=requested_ask)

    @property
    def is_empty(self) -> bool:
        return self.total_actual_withdrawals == 0 and self.combined_401k_gross_withdrawal == 0
