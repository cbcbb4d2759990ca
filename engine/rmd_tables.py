# engine/rmd_tables.py

"""
RMD factor lookup using the 2022+ IRS Uniform Lifetime Table (ages 73-100).
Ages beyond 100 use a divisor declining 0.1 per year from the age-100 value,
never below 1.0.
"""

from typing import Dict

from config.withdrawal_assumptions import rmd_start_age
from utils.currency import as_currency

# =============================================================================
# IRS UNIFORM LIFETIME TABLE (AGES 73-100)
# =============================================================================
UNIFORM_LIFETIME_TABLE: Dict[int, float] = {
    73: 26.5, 74: 25.5, 75: 24.6, 76: 23.7, 77: 22.9, 78: 22.0,
    79: 21.1, 80: 20.2, 81: 19.4, 82: 18.5, 83: 17.7, 84: 16.8,
    85: 16.0, 86: 15.2, 87: 14.4, 88: 13.7, 89: 12.9, 90: 12.2,
    91: 11.5, 92: 10.8, 93: 10.1, 94: 9.5, 95: 8.9, 96: 8.4,
    97: 7.8, 98: 7.3, 99: 6.8, 100: 6.4,
}

MAX_TABLE_AGE = 100
DIVISOR_DECLINE_PER_YEAR = 0.1
MIN_DIVISOR = 1.0

# =============================================================================
# MAIN FUNCTIONS
# =============================================================================

def get_rmd_factor(age: int) -> float:
    """
    Returns the IRS divisor for RMD calculations.

    Parameters
    ----------
    age : int
        Owner's age in the distribution calendar year.

    Returns
    -------
    float
        RMD divisor for the given age, or 0.0 below the RMD start age.
    """
    if age < rmd_start_age:
        return 0.0

    if age <= MAX_TABLE_AGE:
        return UNIFORM_LIFETIME_TABLE.get(int(age), UNIFORM_LIFETIME_TABLE[MAX_TABLE_AGE])

    declined = UNIFORM_LIFETIME_TABLE[MAX_TABLE_AGE] - (age - MAX_TABLE_AGE) * DIVISOR_DECLINE_PER_YEAR
    return max(MIN_DIVISOR, declined)


def calculate_rmd(use_rmd: bool, age: int, balance: float) -> float:
    """
    Required minimum gross distribution for the year, rounded to cents.
    Zero when RMDs are disabled, the owner is under the start age,
    or the starting balance is not positive.
    """
    if not use_rmd or age < rmd_start_age or balance <= 0:
        return 0.0

    return as_currency(balance / get_rmd_factor(age))


__all__ = ["get_rmd_factor", "calculate_rmd", "UNIFORM_LIFETIME_TABLE"]
