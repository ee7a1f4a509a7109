import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

import pandas as pd

from models import LedgerRow, SeparateYearRow

PLACEHOLDER = "-"

INTEGRATED_COLUMNS = {
    "year": "Year",
    "begin_balance": "Beginning Balance (₹)",
    "monthly_contribution": "Monthly SIP Investment (₹)",
    "annual_contribution": "SIP Invested (Annual ₹)",
    "cumulative_contributed": "Cumulative SIP Invested (₹)",
    "monthly_withdrawal": "Monthly SWP Withdrawal (₹)",
    "annual_withdrawal": "Annual SWP Withdrawal (₹)",
    "cumulative_withdrawn": "Cumulative SWP Withdrawals (₹)",
    "interest_earned": "Interest Earned (Annual ₹)",
    "end_balance": "Combined Total (₹)",
}

SEPARATE_COLUMNS = {
    "year": "Year",
    "sip_monthly": "Monthly SIP Investment (₹)",
    "sip_invested": "SIP Invested (Annual ₹)",
    "cumulative_invested": "Cumulative SIP Invested (₹)",
    "sip_interest": "SIP Interest (₹)",
    "sip_total": "SIP Total (₹)",
    "sip_adjusted_total": "Inflation Adjusted After Tax SIP Total (₹)",
    "swp_begin": "SWP Begin (₹)",
    "swp_interest": "SWP Interest (₹)",
    "swp_monthly_withdrawal": "SWP Monthly Withdrawal (₹)",
    "swp_annual_withdrawal": "SWP Annual Withdrawal (₹)",
    "swp_end": "SWP End (₹)",
}

# first comma 3 digits from the right, then every 2 digits
_LAKH_GROUPS = re.compile(r"\B(?=(\d{2})+(?!\d))")


def round_half_up(num: float, ndigits: int = 0) -> float:
    """Round halves away from zero: 1000.5 -> 1001, 1000.125 -> 1000.13 at ndigits=2."""
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(repr(float(num))).quantize(quantum, rounding=ROUND_HALF_UP))


def format_inr(num: Optional[float]) -> str:
    """Format a rupee amount in the Indian numbering system, e.g. 1234567 -> ₹12,34,567."""
    if num is None or pd.isna(num):
        return PLACEHOLDER
    value = int(round_half_up(num))
    sign = "-" if value < 0 else ""
    digits = str(abs(value))
    if len(digits) > 3:
        last3 = digits[-3:]
        rest = _LAKH_GROUPS.sub(",", digits[:-3])
        digits = f"{rest},{last3}"
    return f"{sign}₹{digits}"


def format_cr_lac(amount: Optional[float]) -> str:
    """Short crore/lakh form used in summaries, e.g. 12500000 -> 1.25 cr."""
    if amount is None or pd.isna(amount):
        return PLACEHOLDER
    sign = "-" if amount < 0 else ""
    amt = abs(amount)
    if amt >= 10_000_000:  # 1 crore
        return f"{sign}{amt/10_000_000:.2f} cr"
    if amt >= 100_000:  # 1 lakh
        return f"{sign}{amt/100_000:.2f} lac"
    return f"{sign}{amt:,.2f}"


def rows_to_frame(rows: Sequence[LedgerRow], formatted: bool = False) -> pd.DataFrame:
    """
    Build a display table from ledger rows, columns in ledger field order.

    With formatted=True every monetary cell is rendered with format_inr and
    empty cells show the placeholder dash.
    """
    is_separate = bool(rows) and isinstance(rows[0], SeparateYearRow)
    columns = SEPARATE_COLUMNS if is_separate else INTEGRATED_COLUMNS

    df = pd.DataFrame([row.model_dump() for row in rows], columns=list(columns))
    if formatted:
        for col in columns:
            if col != "year":
                df[col] = df[col].map(format_inr)
    return df.rename(columns=columns)
