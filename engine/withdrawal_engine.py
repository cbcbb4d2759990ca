# withdrawal_engine.py
#
# Decides how much to draw from each spendable account to cover the year's ask
#

from typing import Dict, List, Optional, Tuple
import logging

import numpy as np

from engine.account_year import SAVINGS, SUBJECT_ROTH_IRA, PARTNER_ROTH_IRA
from engine.trad401k import Trad401kAvailability, Trad401kPortions, analyze_401k_funds, portion_401k
from models import AccountLedger, AllocationDecision, Demographics, FiscalParameters, WithdrawalPlan
from utils.currency import as_currency, format_currency_output

logger = logging.getLogger(__name__)

# Generic (non-401k) account keys used inside a plan
SAVINGS_KEY = "savings"
ROTH_KEY = "roth"
TRAD401K_KEY = "trad401k"


class WithdrawalEngine:
    """
    Allocates one year's cash shortfall ("ask") across savings, Roth and the
    combined traditional 401k pool.

    Phases run strictly in order, each consuming the ask left by the previous:
      1. ask = spend - cash on hand; nothing to do if it is not positive
      2. drain immaterial savings / Roth balances
      3. drain an immaterial 401k pool
      4. weighted 401k draw (RMD floors applied per person)
      5. proportional split of the rest across savings / Roth, eliminating
         sub-minimum withdrawals
      6. totals and shortfall
    """
    def __init__(self, fiscal: FiscalParameters, demographics: Demographics, ledger: AccountLedger):
        self.fiscal = fiscal
        self.demographics = demographics
        self.ledger = ledger

    # ------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------
    def _savings_available(self) -> float:
        if not self.fiscal.use_savings:
            return 0.0
        return as_currency(max(0.0, self.ledger.ending_balance(SAVINGS, self.fiscal.tax_year)))

    def _roth_available(self) -> Tuple[float, float]:
        """(subject, partner) Roth ending balances, zero when Roth use is off."""
        if not self.fiscal.use_roth:
            return 0.0, 0.0
        year = self.fiscal.tax_year
        subject = max(0.0, self.ledger.ending_balance(SUBJECT_ROTH_IRA, year))
        partner = 0.0
        if self.demographics.has_partner:
            partner = max(0.0, self.ledger.ending_balance(PARTNER_ROTH_IRA, year))
        return as_currency(subject), as_currency(partner)

    def _is_immaterial(self, balance: float, total_funds_available: float) -> bool:
        if balance <= 0:
            return False
        return (
            balance < self.fiscal.minimum_withdrawal
            or balance < self.fiscal.immaterial_percentage * total_funds_available
        )

    # ------------------------------------------------------------------
    # Phase 5 helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _proportional(ask: float, accounts: Dict[str, float]) -> Dict[str, float]:
        """Split `ask` by share of availability, never exceeding any account's balance."""
        names = list(accounts)
        if not names:
            return {}
        balances = np.array([accounts[n] for n in names], dtype=float)
        total = balances.sum()
        if total <= 0 or ask <= 0:
            return {n: 0.0 for n in names}

        amounts = np.minimum(balances, ask * balances / total)
        result = {n: as_currency(a) for n, a in zip(names, amounts)}

        # Last account absorbs the rounding so the split adds back up to the ask
        if ask <= total:
            last = names[-1]
            others = sum(result[n] for n in names[:-1])
            result[last] = as_currency(min(accounts[last], max(0.0, ask - others)))
        return result

    def _allocate_with_minimums(
        self,
        ask: float,
        accounts: Dict[str, float],
        decisions: List[AllocationDecision],
    ) -> Dict[str, float]:
        """
        Proportional allocation that drops the smallest positive-but-sub-minimum
        account and re-runs against the smaller set. A lone account whose share
        is below the minimum is dropped too; the unmet ask becomes shortfall.
        At most len(accounts) passes.
        """
        minimum = self.fiscal.minimum_withdrawal
        eligible = {n: a for n, a in accounts.items() if a > 0}
        allocations = {n: 0.0 for n in accounts}

        for _ in range(len(eligible)):
            amounts = self._proportional(ask, eligible)
            sub_minimum = {n: a for n, a in amounts.items() if 0 < a < minimum}
            if not sub_minimum:
                allocations.update(amounts)
                break

            smallest = min(sub_minimum, key=sub_minimum.get)
            decisions.append(AllocationDecision(
                "proportional", smallest, "eliminated", 0.0,
                f"share {format_currency_output(sub_minimum[smallest])} below minimum",
            ))
            logger.info(f"Eliminated {smallest}: share {format_currency_output(sub_minimum[smallest])} below minimum")
            del eligible[smallest]

        for name, amount in allocations.items():
            if amount > 0:
                decisions.append(AllocationDecision("proportional", name, "allocated", amount))
        return allocations

    # ------------------------------------------------------------------
    # Core Engine
    # ------------------------------------------------------------------
    def calculate_portions(self, cash_on_hand: float) -> WithdrawalPlan:
        """
        Returns the year's WithdrawalPlan for the shortfall between planned
        spend and `cash_on_hand`.
        """
        requested = as_currency(self.fiscal.spend - cash_on_hand)

        # 1. Determine ask
        if requested <= 0:
            logger.debug(f"{self.fiscal.tax_year}: no withdrawals needed (ask {requested})")
            return WithdrawalPlan.empty(requested)

        ask = requested
        decisions: List[AllocationDecision] = []

        subject_roth, partner_roth = self._roth_available()
        generic = {SAVINGS_KEY: self._savings_available(), ROTH_KEY: as_currency(subject_roth + partner_roth)}
        trad401k = analyze_401k_funds(self.fiscal, self.demographics, self.ledger)
        total_funds = sum(generic.values()) + trad401k.combined_net_available

        withdrawals = {SAVINGS_KEY: 0.0, ROTH_KEY: 0.0}

        # 2. Drain immaterial generic balances
        remaining: Dict[str, float] = {}
        for name, available in generic.items():
            if self._is_immaterial(available, total_funds):
                withdrawals[name] = available
                ask -= available
                decisions.append(AllocationDecision(
                    "immaterial_generic", name, "drained", available,
                    f"balance immaterial against {format_currency_output(total_funds)}",
                ))
                logger.info(f"Draining immaterial {name} balance {format_currency_output(available)}")
            elif available > 0:
                remaining[name] = available
        ask = max(0.0, as_currency(ask))

        # 3. Drain an immaterial 401k pool, otherwise 4. weighted 401k draw
        portions: Optional[Trad401kPortions] = None
        net_401k = trad401k.combined_net_available
        if self._is_immaterial(net_401k, total_funds):
            portions = portion_401k(net_401k, net_401k, trad401k)
            decisions.append(AllocationDecision(
                "immaterial_401k", TRAD401K_KEY, "drained", portions.combined_final_withdrawal_net,
                f"take-home balance immaterial against {format_currency_output(total_funds)}",
            ))
            logger.info(f"Draining immaterial 401k pool {format_currency_output(net_401k)}")
        elif net_401k > 0 and (ask > 0 or trad401k.has_rmd):
            pool = sum(remaining.values()) + net_401k
            portions = portion_401k(ask, pool, trad401k)
            decisions.append(AllocationDecision(
                "weighted_401k", TRAD401K_KEY, "allocated", portions.combined_final_withdrawal_net,
                f"{portions.percentage_of_total_funds:.1%} of remaining funds",
            ))
        if portions is not None:
            self._record_rmd_floors(portions, trad401k, decisions)
            ask = max(0.0, as_currency(ask - portions.combined_final_withdrawal_net))

        # 5. Proportional allocation with minimum elimination
        allocations = self._allocate_with_minimums(ask, remaining, decisions)
        for name, amount in allocations.items():
            withdrawals[name] = amount

        # 6. Totals
        return self._build_plan(requested, withdrawals, portions, subject_roth, partner_roth, decisions)

    def _record_rmd_floors(
        self,
        portions: Trad401kPortions,
        trad401k: Trad401kAvailability,
        decisions: List[AllocationDecision],
    ) -> None:
        for owner, applied, rmd in (
            ("subject_401k", portions.subject_rmd_applied, trad401k.subject_rmd_net),
            ("partner_401k", portions.partner_rmd_applied, trad401k.partner_rmd_net),
        ):
            if applied:
                decisions.append(AllocationDecision("weighted_401k", owner, "rmd_floor", rmd))
                logger.info(f"{owner} withdrawal raised to RMD {format_currency_output(rmd)} (take-home)")

    def _build_plan(
        self,
        requested: float,
        withdrawals: Dict[str, float],
        portions: Optional[Trad401kPortions],
        subject_roth: float,
        partner_roth: float,
        decisions: List[AllocationDecision],
    ) -> WithdrawalPlan:
        savings = as_currency(withdrawals[SAVINGS_KEY])
        roth = as_currency(withdrawals[ROTH_KEY])

        roth_total = subject_roth + partner_roth
        subject_roth_share = as_currency(roth * subject_roth / roth_total) if roth_total > 0 else 0.0
        partner_roth_share = as_currency(roth - subject_roth_share)

        if portions is not None:
            subject_net = portions.subject_final_withdrawal_net
            partner_net = portions.partner_final_withdrawal_net
            subject_gross = portions.subject_final_withdrawal_gross
            partner_gross = portions.partner_final_withdrawal_gross
        else:
            subject_net = partner_net = subject_gross = partner_gross = 0.0

        combined_net = as_currency(subject_net + partner_net)
        total = as_currency(savings + roth + combined_net)
        logger.debug(
            f"{self.fiscal.tax_year} plan: savings {savings}, roth {roth}, "
            f"401k net {combined_net} (gross {as_currency(subject_gross + partner_gross)})"
        )
        shortfall = as_currency(max(0.0, requested - total))
        if shortfall > 0:
            logger.warning(
                f"{self.fiscal.tax_year}: available funds leave a shortfall of {format_currency_output(shortfall)}"
            )

        return WithdrawalPlan(
            requested_ask=requested,
            savings_withdrawal=savings,
            roth_withdrawal=roth,
            subject_roth_withdrawal=subject_roth_share,
            partner_roth_withdrawal=partner_roth_share,
            subject_401k_gross_withdrawal=subject_gross,
            subject_401k_net_withdrawal=subject_net,
            partner_401k_gross_withdrawal=partner_gross,
            partner_401k_net_withdrawal=partner_net,
            combined_401k_gross_withdrawal=as_currency(subject_gross + partner_gross),
            combined_401k_net_withdrawal=combined_net,
            total_actual_withdrawals=total,
            shortfall=shortfall,
            decisions=tuple(decisions),
        )


def calculate_withdrawal_plan(
    fiscal: FiscalParameters,
    demographics: Demographics,
    ledger: AccountLedger,
    cash_on_hand: float,
) -> WithdrawalPlan:
    return WithdrawalEngine(fiscal, demographics, ledger).calculate_portions(cash_on_hand)
