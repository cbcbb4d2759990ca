# engine/social_security.py
#
# Taxable portion of Social Security benefits (IRS provisional income rules)
#

from dataclasses import dataclass
from typing import Tuple
import logging

from models import Demographics
from utils.currency import as_currency
from utils.tax_utils import SS_TAX_THRESHOLDS, SS_TIER1_TAXABLE_RATE, SS_TIER2_TAXABLE_RATE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SocialSecurityBreakdown:
    subject_benefits: float
    partner_benefits: float
    other_taxable_income: float
    tier1_threshold: float
    tier2_threshold: float
    taxable_amount: float = 0.0
    tier1_taxable_amount: float = 0.0
    tier2_taxable_amount: float = 0.0

    @property
    def total_benefits(self) -> float:
        return as_currency(self.subject_benefits + self.partner_benefits)

    @property
    def benefits_50pct(self) -> float:
        return as_currency(0.5 * self.total_benefits)

    @property
    def benefits_85pct(self) -> float:
        return as_currency(0.85 * self.total_benefits)

    @property
    def max_taxable(self) -> float:
        return self.benefits_85pct

    @property
    def provisional_income(self) -> float:
        return as_currency(self.benefits_50pct + self.other_taxable_income)

    @property
    def has_benefits(self) -> bool:
        return self.total_benefits > 0

    @property
    def taxation_tier(self) -> str:
        if self.provisional_income <= self.tier1_threshold:
            return "none"
        if self.provisional_income <= self.tier2_threshold:
            return "tier1"
        return "tier2"

    @property
    def non_taxable_amount(self) -> float:
        return as_currency(self.total_benefits - self.taxable_amount)

    @property
    def taxable_percentage(self) -> float:
        if self.total_benefits == 0:
            return 0.0
        return self.taxable_amount / self.total_benefits

    # --- per-person apportionment by share of gross benefits ---

    @property
    def subject_portion(self) -> float:
        if self.total_benefits == 0:
            return 0.0
        return self.subject_benefits / self.total_benefits

    @property
    def partner_portion(self) -> float:
        if self.total_benefits == 0:
            return 0.0
        return self.partner_benefits / self.total_benefits

    @property
    def subject_taxable_amount(self) -> float:
        return as_currency(self.subject_portion * self.taxable_amount)

    @property
    def partner_taxable_amount(self) -> float:
        return as_currency(self.partner_portion * self.taxable_amount)

    @property
    def subject_non_taxable_amount(self) -> float:
        return as_currency(self.subject_portion * self.non_taxable_amount)

    @property
    def partner_non_taxable_amount(self) -> float:
        return as_currency(self.partner_portion * self.non_taxable_amount)

    @property
    def is_calculation_valid(self) -> bool:
        if self.taxable_amount < 0 or self.taxable_amount > self.max_taxable:
            return False
        expected_provisional = self.benefits_50pct + self.other_taxable_income
        if abs(self.provisional_income - expected_provisional) > 0.01:
            return False
        return True


def _taxable_portion(total: float, half: float, max_taxable: float, provisional: float,
                     tier1: float, tier2: float) -> Tuple[float, float, float]:
    """Returns (taxable, tier1 piece, tier2 piece)."""
    # Case 1: No social security is taxable
    if total <= 0 or provisional <= tier1:
        return 0.0, 0.0, 0.0

    # Case 2: Provisional income exceeds Tier 1 but not Tier 2
    if provisional <= tier2:
        taxable = min(half, SS_TIER1_TAXABLE_RATE * (provisional - tier1))
        return as_currency(taxable), as_currency(taxable), 0.0

    # Case 3: Provisional income exceeds Tier 2
    tier1_piece = SS_TIER1_TAXABLE_RATE * (tier2 - tier1)
    tier2_piece = SS_TIER2_TAXABLE_RATE * (provisional - tier2)
    taxable = min(max_taxable, tier1_piece + tier2_piece)
    return as_currency(taxable), as_currency(tier1_piece), as_currency(tier2_piece)


def calculate_ss_breakdown(
    subject_benefits: float,
    partner_benefits: float,
    other_taxable_income: float,
    filing_jointly: bool,
) -> SocialSecurityBreakdown:
    """
    Determines how much of the household's gross Social Security is taxable.

    provisional = 0.5 * total benefits + other taxable income, compared with the
    filing-status thresholds (32,000/44,000 joint, 25,000/34,000 otherwise).
    """
    tier1, tier2 = SS_TAX_THRESHOLDS["married_filing_jointly" if filing_jointly else "single"]
    subject_benefits = max(0.0, subject_benefits)
    partner_benefits = max(0.0, partner_benefits)

    breakdown = SocialSecurityBreakdown(
        subject_benefits=subject_benefits,
        partner_benefits=partner_benefits,
        other_taxable_income=other_taxable_income,
        tier1_threshold=tier1,
        tier2_threshold=tier2,
    )

    taxable, tier1_piece, tier2_piece = _taxable_portion(
        breakdown.total_benefits,
        breakdown.benefits_50pct,
        breakdown.max_taxable,
        breakdown.provisional_income,
        tier1,
        tier2,
    )

    logger.debug(
        f"SS breakdown: provisional {breakdown.provisional_income}, "
        f"tier '{breakdown.taxation_tier}', taxable {taxable} of {breakdown.total_benefits}"
    )

    return SocialSecurityBreakdown(
        subject_benefits=subject_benefits,
        partner_benefits=partner_benefits,
        other_taxable_income=other_taxable_income,
        tier1_threshold=tier1,
        tier2_threshold=tier2,
        taxable_amount=taxable,
        tier1_taxable_amount=tier1_piece,
        tier2_taxable_amount=tier2_piece,
    )


def survivor_benefits(
    subject_benefits: float,
    partner_benefits: float,
    demographics: Demographics,
    apply_survivor_benefit: bool = False,
) -> Tuple[float, float]:
    """
    Optional survivor substitution: with exactly one spouse living, the survivor
    collects the larger of the two benefits and the deceased collects nothing.
    Returns the inputs unchanged unless `apply_survivor_benefit` is set.
    Reached through calculate_year_taxes(apply_survivor_benefit=True).
    """
    if not apply_survivor_benefit or not demographics.is_widowed:
        return subject_benefits, partner_benefits

    larger = max(subject_benefits, partner_benefits)
    if demographics.is_subject_alive:
        return larger, 0.0
    return 0.0, larger
