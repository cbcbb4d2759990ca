# config/withdrawal_assumptions.py
# Defaults only; override them through FiscalParameters

# Allocation thresholds
minimum_withdrawal = 200.00          # smallest withdrawal worth making from any one account
immaterial_percentage = 0.01         # balances under 1% of spend-capable funds are drained

# Required minimum distributions (SECURE 2.0)
rmd_start_age = 73

# Traditional 401k access (59 1/2, modelled in whole years)
trad401k_access_age = 60

# Bounded gross-up search (bisection variant of net -> gross)
gross_up_max_iterations = 80
gross_up_tolerance = 0.01
