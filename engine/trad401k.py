# engine/trad401k.py
#
# Traditional 401k availability (per person, gross and take-home) and the
# split of a combined 401k draw between subject and partner.
#

from dataclasses import dataclass
from typing import Optional
import logging

from config.withdrawal_assumptions import gross_up_max_iterations, gross_up_tolerance
from engine.account_year import SUBJECT_401K, PARTNER_401K
from engine.rmd_tables import calculate_rmd
from models import AccountLedger, Demographics, FiscalParameters
from utils.currency import as_currency

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# Gross <-> net (take-home) conversion under flat withholding
# ----------------------------------------------------------------------

def _check_rate(withholding_rate: float) -> None:
    if not 0.0 <= withholding_rate < 1.0:
        raise ValueError(f"Withholding rate must be in [0, 1), got {withholding_rate}")


def gross_to_net(gross: float, withholding_rate: float) -> float:
    _check_rate(withholding_rate)
    return gross * (1.0 - withholding_rate)


def net_to_gross(net: float, withholding_rate: float) -> float:
    _check_rate(withholding_rate)
    return net / (1.0 - withholding_rate)


def net_to_gross_search(
    net: float,
    withholding_rate: float,
    max_iterations: int = gross_up_max_iterations,
    tolerance: float = gross_up_tolerance,
) -> float:
    """
    Bisection variant of net_to_gross for calling code whose take-home
    function is not invertible in closed form. The engine itself uses the
    closed form. Bounded by `max_iterations`; stops once the bracket is
    narrower than `tolerance`.
    """
    _check_rate(withholding_rate)
    if net <= 0:
        return 0.0

    lo = net
    hi = net / (1.0 - withholding_rate) * 2 if withholding_rate > 0 else net
    for _ in range(max_iterations):
        if hi - lo <= tolerance:
            break
        mid = (lo + hi) / 2
        if gross_to_net(mid, withholding_rate) < net:
            lo = mid
        else:
            hi = mid
    return as_currency((lo + hi) / 2)


# ----------------------------------------------------------------------
# Availability
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class Trad401kAvailability:
    withholding_rate: float
    subject_gross_available: float = 0.0
    partner_gross_available: float = 0.0
    subject_rmd_gross: float = 0.0
    partner_rmd_gross: float = 0.0

    @property
    def subject_net_available(self) -> float:
        return as_currency(gross_to_net(self.subject_gross_available, self.withholding_rate))

    @property
    def partner_net_available(self) -> float:
        return as_currency(gross_to_net(self.partner_gross_available, self.withholding_rate))

    @property
    def subject_rmd_net(self) -> float:
        return as_currency(gross_to_net(self.subject_rmd_gross, self.withholding_rate))

    @property
    def partner_rmd_net(self) -> float:
        return as_currency(gross_to_net(self.partner_rmd_gross, self.withholding_rate))

    @property
    def combined_gross_available(self) -> float:
        return self.subject_gross_available + self.partner_gross_available

    @property
    def combined_net_available(self) -> float:
        return self.subject_net_available + self.partner_net_available

    @property
    def combined_rmd_gross(self) -> float:
        return self.subject_rmd_gross + self.partner_rmd_gross

    @property
    def combined_rmd_net(self) -> float:
        return self.subject_rmd_net + self.partner_rmd_net

    @property
    def has_rmd(self) -> bool:
        return self.combined_rmd_gross > 0

    @property
    def subject_portion(self) -> float:
        if self.combined_gross_available <= 0:
            return 0.0
        return self.subject_gross_available / self.combined_gross_available

    @property
    def partner_portion(self) -> float:
        if self.combined_gross_available <= 0:
            return 0.0
        return self.partner_gross_available / self.combined_gross_available


def _person_gross_available(
    enabled: bool,
    balance: float,
    rmd_gross: float,
    withdrawal_limit: Optional[float],
) -> float:
    available = max(0.0, balance) if enabled else 0.0
    if withdrawal_limit is not None:
        available = min(available, max(0.0, withdrawal_limit))
    # A due RMD is always reachable, whatever the access age, flags or ceiling
    if rmd_gross > 0:
        available = min(max(available, rmd_gross), max(0.0, balance))
    return as_currency(available)


def analyze_401k_funds(
    fiscal: FiscalParameters,
    demographics: Demographics,
    ledger: AccountLedger,
) -> Trad401kAvailability:
    """
    Per-person gross availability (starting balance once the owner has reached
    401k access age), the RMD for each account, and the flat withholding rate
    used to express both as take-home amounts.
    """
    year = fiscal.tax_year
    subject_balance = ledger.starting_balance(SUBJECT_401K, year)
    subject_rmd = (
        calculate_rmd(fiscal.use_rmd, demographics.age, subject_balance)
        if demographics.is_subject_alive else 0.0
    )
    subject_gross = _person_gross_available(
        fiscal.use_trad401k and demographics.is_subject_eligible_for_401k,
        subject_balance,
        subject_rmd,
        fiscal.subject_401k_withdrawal_limit,
    )

    partner_balance = 0.0
    partner_rmd = 0.0
    partner_gross = 0.0
    if demographics.has_partner:
        partner_balance = ledger.starting_balance(PARTNER_401K, year)
        partner_rmd = (
            calculate_rmd(fiscal.use_rmd, demographics.partner_age, partner_balance)
            if demographics.is_partner_alive else 0.0
        )
        partner_gross = _person_gross_available(
            fiscal.use_trad401k and demographics.is_partner_eligible_for_401k,
            partner_balance,
            partner_rmd,
            fiscal.partner_401k_withdrawal_limit,
        )

    availability = Trad401kAvailability(
        withholding_rate=fiscal.flat_trad401k_withholding_rate,
        subject_gross_available=subject_gross,
        partner_gross_available=partner_gross,
        subject_rmd_gross=subject_rmd,
        partner_rmd_gross=partner_rmd,
    )
    logger.debug(
        f"401k availability {year}: subject {subject_gross} (RMD {subject_rmd}), "
        f"partner {partner_gross} (RMD {partner_rmd})"
    )
    return availability


# ----------------------------------------------------------------------
# Portioner
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class Trad401kPortions:
    percentage_of_total_funds: float
    actualized_portion_of_ask: float
    subject_share_of_ask: float
    partner_share_of_ask: float
    subject_final_withdrawal_net: float
    partner_final_withdrawal_net: float
    subject_final_withdrawal_gross: float
    partner_final_withdrawal_gross: float
    subject_rmd_applied: bool = False
    partner_rmd_applied: bool = False

    @property
    def combined_final_withdrawal_gross(self) -> float:
        return as_currency(self.subject_final_withdrawal_gross + self.partner_final_withdrawal_gross)

    @property
    def combined_final_withdrawal_net(self) -> float:
        # Sum of the floored nets; re-deriving from combined gross could undercut an RMD
        return as_currency(self.subject_final_withdrawal_net + self.partner_final_withdrawal_net)


def _final_for_person(share: float, net_available: float, gross_available: float,
                      rmd_net: float, rmd_gross: float, withholding_rate: float):
    capped = min(max(0.0, share), net_available)
    final_net = as_currency(max(capped, rmd_net))
    gross = max(net_to_gross(final_net, withholding_rate), rmd_gross)
    final_gross = as_currency(min(gross, gross_available))
    return final_net, final_gross, rmd_net > capped


def portion_401k(
    ask: float,
    total_funds_available: float,
    availability: Trad401kAvailability,
) -> Trad401kPortions:
    """
    Splits the 401k pool's weighted share of `ask` between subject and partner.

    The pool's share is ask * (combined take-home available / total funds),
    split by each person's share of gross availability. Each person's share is
    capped at what they can take home and floored at their net RMD; gross is
    recovered from net through the flat withholding rate.
    """
    rate = availability.withholding_rate
    if total_funds_available > 0:
        pct = availability.combined_net_available / total_funds_available
    else:
        pct = 0.0

    portion_of_ask = as_currency(max(0.0, ask) * pct)
    subject_share = as_currency(portion_of_ask * availability.subject_portion)
    partner_share = as_currency(portion_of_ask - subject_share)

    subject_net, subject_gross, subject_floored = _final_for_person(
        subject_share,
        availability.subject_net_available,
        availability.subject_gross_available,
        availability.subject_rmd_net,
        availability.subject_rmd_gross,
        rate,
    )
    partner_net, partner_gross, partner_floored = _final_for_person(
        partner_share,
        availability.partner_net_available,
        availability.partner_gross_available,
        availability.partner_rmd_net,
        availability.partner_rmd_gross,
        rate,
    )

    return Trad401kPortions(
        percentage_of_total_funds=pct,
        actualized_portion_of_ask=portion_of_ask,
        subject_share_of_ask=subject_share,
        partner_share_of_ask=partner_share,
        subject_final_withdrawal_net=subject_net,
        partner_final_withdrawal_net=partner_net,
        subject_final_withdrawal_gross=subject_gross,
        partner_final_withdrawal_gross=partner_gross,
        subject_rmd_applied=subject_floored,
        partner_rmd_applied=partner_floored,
    )
