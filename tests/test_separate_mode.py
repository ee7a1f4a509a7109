"""Tests for the SIP-then-SWP report and the projection envelope."""

import pytest

from engine import chart_series, run_projection, simulate_separate
from formatting import round_half_up
from models import ReportMode, SeparateYearRow, SimulationParams, WithdrawalCapPolicy, YearRow


def _separate(**overrides):
    base = dict(
        monthly_contribution=1000.0,
        contribution_years=10,
        annual_rate_percent=12.0,
        contribution_step_up_percent=10.0,
        withdrawal_start=10,
        monthly_withdrawal=10000.0,
        withdrawal_step_up_percent=10.0,
        extension_years=10,
        withdrawal_cap_policy=WithdrawalCapPolicy.CAP_TO_AVAILABLE_BALANCE,
        report_mode=ReportMode.SEPARATE,
        tax_percent=12.5,
        inflation_percent=6.0,
    )
    base.update(overrides)
    return SimulationParams(**base)


def _after_tax(total, years):
    return round_half_up(total * (1 - 12.5 / 100) / (1 + 6.0 / 100) ** years)


def test_one_year_sip_then_swp():
    params = _separate(contribution_years=1, contribution_step_up_percent=0.0, withdrawal_start=2,
                       monthly_withdrawal=100.0, tax_percent=0.0, inflation_percent=0.0)
    rows = simulate_separate(params)
    assert len(rows) == 11

    first = rows[0]
    assert first.sip_monthly == 1000
    assert first.sip_invested == 12000
    assert first.sip_interest == 809
    assert first.sip_total == 12809
    assert first.sip_adjusted_total == 12809
    assert first.swp_begin is None
    assert first.swp_end is None

    second = rows[1]
    assert second.sip_monthly is None
    assert second.sip_total == 12809
    assert second.cumulative_invested == 12000
    assert second.swp_begin == 12809
    assert second.swp_monthly_withdrawal == 100
    assert second.swp_annual_withdrawal == 1200


def test_swp_seeded_from_prior_year_sip_total():
    rows = simulate_separate(_separate(contribution_years=3, withdrawal_start=3))
    assert rows[2].swp_begin == _after_tax(rows[1].sip_total, 2)
    assert rows[1].swp_begin is None


def test_swp_seed_after_sip_period_uses_final_total():
    params = _separate(contribution_years=2, withdrawal_start=5)
    rows = simulate_separate(params)
    assert rows[4].swp_begin == _after_tax(rows[1].sip_total, 2)


def test_adjusted_total_discounts_carried_forward_sip_total():
    rows = simulate_separate(_separate(contribution_years=2, withdrawal_start=5))
    assert rows[0].sip_adjusted_total == _after_tax(rows[0].sip_total, 1)
    assert rows[5].sip_adjusted_total == _after_tax(rows[1].sip_total, 6)


def test_sip_values_carried_forward():
    rows = simulate_separate(_separate())
    assert len(rows) == 19
    last_sip = rows[9]
    for row in rows[10:]:
        assert row.sip_monthly is None
        assert row.sip_invested is None
        assert row.sip_interest is None
        assert row.cumulative_invested == last_sip.cumulative_invested
        assert row.sip_total == last_sip.sip_total
    assert last_sip.cumulative_invested == sum(row.sip_invested for row in rows[:10])


def test_swp_from_year_one_has_nothing_to_draw():
    rows = simulate_separate(_separate(withdrawal_start=1))
    assert rows[0].swp_begin == 0
    assert rows[0].swp_annual_withdrawal == 0
    assert rows[0].swp_end == 0


def test_no_swp_without_withdrawal_amount():
    rows = simulate_separate(_separate(monthly_withdrawal=0.0))
    assert all(row.swp_begin is None and row.swp_end is None for row in rows)


def test_capped_swp_never_negative():
    rows = simulate_separate(_separate(monthly_withdrawal=100000.0))
    swp_rows = [row for row in rows if row.swp_end is not None]
    assert swp_rows
    assert all(row.swp_end >= 0 for row in swp_rows)
    assert swp_rows[-1].swp_end == 0


def test_uncapped_swp_goes_negative():
    rows = simulate_separate(_separate(monthly_withdrawal=100000.0,
                                       withdrawal_cap_policy=WithdrawalCapPolicy.UNCAPPED))
    assert rows[-1].swp_end < 0


def test_integrated_projection_summary_and_chart():
    params = SimulationParams(
        monthly_contribution=1000.0,
        contribution_years=10,
        annual_rate_percent=12.0,
        contribution_step_up_percent=10.0,
        withdrawal_start=10,
        monthly_withdrawal=1000.0,
        withdrawal_step_up_percent=10.0,
    )
    result = run_projection(params)
    assert result.success
    assert result.mode == ReportMode.INTEGRATED
    assert all(isinstance(row, YearRow) for row in result.rows)

    last = result.rows[-1]
    assert result.summary.final_corpus == last.end_balance
    assert result.summary.total_contributed == last.cumulative_contributed
    assert result.summary.total_withdrawn == last.cumulative_withdrawn
    assert result.summary.simulation_years == 29
    assert result.summary.final_corpus_formatted.startswith("₹")

    assert result.chart.year == list(range(1, 30))
    assert result.chart.end_balance == [row.end_balance for row in result.rows]
    assert result.chart.cumulative_contributed == [row.cumulative_contributed for row in result.rows]


def test_separate_projection_summary():
    result = run_projection(_separate())
    assert result.mode == ReportMode.SEPARATE
    assert all(isinstance(row, SeparateYearRow) for row in result.rows)
    assert result.summary.final_corpus == result.rows[-1].swp_end
    assert result.summary.total_withdrawn == pytest.approx(
        sum(row.swp_annual_withdrawal or 0 for row in result.rows))

    chart = chart_series(result.rows)
    assert chart.end_balance[:9] == [row.sip_total for row in result.rows[:9]]
    assert chart.end_balance[9:] == [row.swp_end for row in result.rows[9:]]
    assert chart.end_balance[-1] == result.summary.final_corpus


def test_half_rupee_sip_rounds_up():
    rows = simulate_separate(_separate(monthly_contribution=1000.5, contribution_years=1,
                                       annual_rate_percent=0.0, monthly_withdrawal=0.0))
    assert rows[0].sip_monthly == 1001
    assert rows[0].sip_invested == 12006
