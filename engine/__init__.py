# engine/__init__.py

# Expose the year-level entry points; helpers stay in their modules.
from .withdrawal_engine import WithdrawalEngine, calculate_withdrawal_plan
from .income_calculator import calculate_year_taxes
from .tax_engine import calculate_taxes
