import pytest

from engine import simulate
from formatting import INTEGRATED_COLUMNS, format_cr_lac, format_inr, round_half_up, rows_to_frame
from models import SimulationParams


@pytest.mark.parametrize("value, expected", [
    (0, "₹0"),
    (999, "₹999"),
    (1000, "₹1,000"),
    (100000, "₹1,00,000"),
    (1234567, "₹12,34,567"),
    (12345678.6, "₹1,23,45,679"),
    (-1234567, "-₹12,34,567"),
    (None, "-"),
])
def test_format_inr(value, expected):
    assert format_inr(value) == expected


@pytest.mark.parametrize("value, expected", [
    (12_500_000, "1.25 cr"),
    (250_000, "2.50 lac"),
    (999.5, "999.50"),
    (-150_000, "-1.50 lac"),
])
def test_format_cr_lac(value, expected):
    assert format_cr_lac(value) == expected


def _rows():
    params = SimulationParams(
        monthly_contribution=1000.0,
        contribution_years=2,
        annual_rate_percent=12.0,
        withdrawal_start=2,
        monthly_withdrawal=500.0,
        withdrawal_years=0,
    )
    return simulate(params)


def test_rows_to_frame_uses_ledger_column_order():
    df = rows_to_frame(_rows())
    assert list(df.columns) == list(INTEGRATED_COLUMNS.values())
    assert df["Year"].tolist() == [1, 2]


def test_rows_to_frame_formatted_uses_placeholder():
    df = rows_to_frame(_rows(), formatted=True)
    first = df.iloc[0]
    assert first["Monthly SWP Withdrawal (₹)"] == "-"
    assert first["Annual SWP Withdrawal (₹)"] == "-"
    assert first["SIP Invested (Annual ₹)"] == "₹12,000"
    assert df.iloc[1]["Monthly SWP Withdrawal (₹)"] == "₹500"


@pytest.mark.parametrize("value, ndigits, expected", [
    (1000.5, 0, 1001),
    (2.5, 0, 3),
    (-2.5, 0, -3),
    (1000.125, 2, 1000.13),
    (0.125, 2, 0.13),
    (12809.33, 0, 12809),
])
def test_round_half_up(value, ndigits, expected):
    assert round_half_up(value, ndigits) == expected


def test_format_inr_half_rupee_rounds_up():
    assert format_inr(2500.5) == "₹2,501"


@pytest.mark.parametrize("value", [None, float("nan")])
def test_format_cr_lac_placeholder(value):
    assert format_cr_lac(value) == "-"
