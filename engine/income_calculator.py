# income_calculator.py
#
# Assembles the year's taxable income (401k draws, pension, Social Security)
# once a withdrawal plan is known, and settles it against withholding
#

from dataclasses import dataclass
import logging

from engine.social_security import SocialSecurityBreakdown, calculate_ss_breakdown, survivor_benefits
from engine.tax_engine import TaxResult, calculate_taxes
from models import Demographics, FiscalParameters, WithdrawalPlan
from utils.currency import as_currency, format_currency_output

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class YearTaxes:
    ss: SocialSecurityBreakdown
    tax: TaxResult
    ss_withholding: float
    trad401k_withholding: float

    @property
    def total_withholding(self) -> float:
        return as_currency(self.ss_withholding + self.trad401k_withholding)

    @property
    def taxes_due(self) -> float:
        """Federal tax less withholding; negative means a refund."""
        return as_currency(self.tax.federal_tax_owed - self.total_withholding)


def calculate_year_taxes(
    fiscal: FiscalParameters,
    demographics: Demographics,
    plan: WithdrawalPlan,
    subject_ss: float,
    partner_ss: float,
    pension_income: float = 0.0,
    other_taxable_income: float = 0.0,
    apply_survivor_benefit: bool = False,
) -> YearTaxes:
    """
    Taxes for a year whose withdrawals follow `plan`.

    Savings and Roth draws are not income. The 401k gross draw, pension and
    any other taxable income make up the non-SS income that drives the SS
    provisional-income test; AGI is gross income less the non-taxable SS part.
    With `apply_survivor_benefit`, a widowed household's benefits go through
    survivor substitution first.
    """
    subject_ss, partner_ss = survivor_benefits(subject_ss, partner_ss, demographics, apply_survivor_benefit)
    filing_status = demographics.effective_filing_status
    non_ss_income = as_currency(plan.combined_401k_gross_withdrawal + pension_income + other_taxable_income)

    ss = calculate_ss_breakdown(
        subject_ss,
        partner_ss,
        non_ss_income,
        filing_jointly=filing_status == "married_filing_jointly",
    )

    gross_income = as_currency(non_ss_income + ss.total_benefits)
    adjusted_gross_income = as_currency(gross_income - ss.non_taxable_amount)
    tax = calculate_taxes(gross_income, adjusted_gross_income, fiscal, filing_status)

    ss_withholding = as_currency(ss.total_benefits * fiscal.flat_ss_withholding_rate)
    trad401k_withholding = as_currency(
        plan.combined_401k_gross_withdrawal - plan.combined_401k_net_withdrawal
    )

    result = YearTaxes(
        ss=ss,
        tax=tax,
        ss_withholding=ss_withholding,
        trad401k_withholding=trad401k_withholding,
    )
    logger.info(
        f"{fiscal.tax_year}: AGI {format_currency_output(adjusted_gross_income)}, "
        f"tax {format_currency_output(tax.federal_tax_owed)}, "
        f"due {format_currency_output(result.taxes_due)}"
    )
    return result
