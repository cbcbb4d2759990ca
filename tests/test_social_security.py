import pytest

from engine.social_security import calculate_ss_breakdown, survivor_benefits


def test_joint_filers_in_first_tier():
    ss = calculate_ss_breakdown(20_000, 20_000, 20_000, filing_jointly=True)

    assert ss.provisional_income == 40_000
    assert ss.taxation_tier == "tier1"
    assert ss.taxable_amount == 4_000
    assert ss.non_taxable_amount == 36_000
    assert ss.taxable_percentage == pytest.approx(0.10)


def test_below_first_threshold_nothing_taxable():
    ss = calculate_ss_breakdown(30_000, 0, 10_000, filing_jointly=True)
    assert ss.taxation_tier == "none"
    assert ss.taxable_amount == 0.0


def test_second_tier_capped_at_85_percent():
    ss = calculate_ss_breakdown(20_000, 20_000, 60_000, filing_jointly=True)
    assert ss.taxation_tier == "tier2"
    assert ss.taxable_amount == pytest.approx(34_000)
    assert ss.tier1_taxable_amount == pytest.approx(6_000)
    assert ss.tier2_taxable_amount == pytest.approx(30_600)


def test_single_second_tier():
    ss = calculate_ss_breakdown(20_000, 0, 30_000, filing_jointly=False)
    assert (ss.tier1_threshold, ss.tier2_threshold) == (25_000, 34_000)
    assert ss.taxable_amount == pytest.approx(9_600)


@pytest.mark.parametrize("benefits, other, joint", [
    (40_000, 0, True),
    (40_000, 25_000, True),
    (40_000, 250_000, True),
    (12_000, 30_000, False),
    (60_000, 1_000_000, False),
])
def test_taxable_never_exceeds_85_percent(benefits, other, joint):
    ss = calculate_ss_breakdown(benefits, 0, other, filing_jointly=joint)
    assert 0 <= ss.taxable_amount <= 0.85 * benefits + 0.01
    assert ss.is_calculation_valid


def test_zero_benefits():
    ss = calculate_ss_breakdown(0, 0, 100_000, filing_jointly=True)
    assert not ss.has_benefits
    assert ss.taxable_amount == 0.0
    assert ss.taxable_percentage == 0.0
    assert ss.subject_portion == 0.0
    assert ss.partner_taxable_amount == 0.0


def test_taxable_amount_apportioned_by_benefit_share():
    ss = calculate_ss_breakdown(30_000, 10_000, 40_000, filing_jointly=True)

    assert ss.taxable_amount == pytest.approx(19_600)
    assert ss.subject_portion == pytest.approx(0.75)
    assert ss.subject_taxable_amount == pytest.approx(14_700)
    assert ss.partner_taxable_amount == pytest.approx(4_900)
    assert ss.subject_non_taxable_amount + ss.partner_non_taxable_amount == pytest.approx(20_400)


def test_survivor_takes_larger_benefit_when_enabled(make_demographics):
    widowed = make_demographics(age=80, partner_age=93)

    assert survivor_benefits(18_000, 30_000, widowed) == (18_000, 30_000)
    assert survivor_benefits(18_000, 30_000, widowed, apply_survivor_benefit=True) == (30_000, 0.0)


def test_survivor_ignored_while_both_living(make_demographics):
    couple = make_demographics()
    assert survivor_benefits(18_000, 30_000, couple, apply_survivor_benefit=True) == (18_000, 30_000)
