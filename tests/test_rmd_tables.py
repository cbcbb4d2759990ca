import pytest

from engine.rmd_tables import calculate_rmd, get_rmd_factor


@pytest.mark.parametrize("age, factor", [
    (60, 0.0),
    (72, 0.0),
    (73, 26.5),
    (75, 24.6),
    (90, 12.2),
    (100, 6.4),
    (101, 6.3),
    (110, 5.4),
    (160, 1.0),
])
def test_rmd_factor(age, factor):
    assert get_rmd_factor(age) == pytest.approx(factor)


def test_rmd_at_75_on_half_million():
    assert calculate_rmd(True, 75, 500_000) == 20_325.20


def test_no_rmd_below_start_age():
    assert calculate_rmd(True, 72, 500_000) == 0.0


def test_no_rmd_when_disabled():
    assert calculate_rmd(False, 80, 500_000) == 0.0


@pytest.mark.parametrize("balance", [0.0, -1_000.0])
def test_no_rmd_without_positive_balance(balance):
    assert calculate_rmd(True, 80, balance) == 0.0


def test_divisor_floor_caps_rmd_at_balance():
    assert calculate_rmd(True, 200, 10_000) == 10_000.0
