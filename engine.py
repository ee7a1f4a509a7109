"""
SIP + SWP projection engine.

Two report styles are supported:

* integrated - contributions and withdrawals share one running balance,
  compounded monthly (``simulate``).
* separate - a pure SIP ledger for the contribution years, then an SWP ledger
  seeded with the tax- and inflation-discounted SIP corpus (``simulate_separate``).

All functions are pure; every call builds its ledger from scratch.
"""
import logging
from datetime import datetime
from typing import Dict, List, Sequence

from formatting import format_cr_lac, format_inr, round_half_up
from models import (
    ChartSeries,
    ConfigurationError,
    LedgerRow,
    ProjectionResponse,
    ProjectionSummary,
    ReportMode,
    SeparateYearRow,
    SimulationParams,
    WithdrawalCapPolicy,
    YearRow,
)

logger = logging.getLogger(__name__)


def validate_params(params: SimulationParams) -> None:
    """Reject parameter sets that cannot produce a meaningful ledger."""
    if params.contribution_years < 1:
        raise ConfigurationError("contribution_years must be at least 1")
    if params.withdrawal_start is not None and params.withdrawal_start < 1:
        raise ConfigurationError("withdrawal_start must be at least 1")
    if params.extension_years < 1:
        raise ConfigurationError("extension_years must be at least 1")
    if params.withdrawal_years is not None and params.withdrawal_years < 0:
        raise ConfigurationError("withdrawal_years cannot be negative")

    non_negative = {
        "monthly_contribution": params.monthly_contribution,
        "annual_rate_percent": params.annual_rate_percent,
        "contribution_step_up_percent": params.contribution_step_up_percent,
        "monthly_withdrawal": params.monthly_withdrawal,
        "withdrawal_step_up_percent": params.withdrawal_step_up_percent,
        "tax_percent": params.tax_percent,
        "inflation_percent": params.inflation_percent,
    }
    for name, value in non_negative.items():
        if value < 0:
            raise ConfigurationError(f"{name} cannot be negative (got {value})")
    if params.tax_percent > 100:
        raise ConfigurationError("tax_percent cannot exceed 100")

    if params.simulation_years < 1:
        raise ConfigurationError("simulation horizon must be at least 1 year")


def monthly_contribution_for_year(params: SimulationParams, year: int) -> float:
    if year > params.contribution_years:
        return 0.0
    step = 1 + params.contribution_step_up_percent / 100.0
    return round_half_up(params.monthly_contribution * step ** (year - 1), 2)


def monthly_withdrawal_for_year(params: SimulationParams, year: int) -> float:
    start = params.resolved_withdrawal_start
    if year < start:
        return 0.0
    step = 1 + params.withdrawal_step_up_percent / 100.0
    return round_half_up(params.monthly_withdrawal * step ** (year - start), 2)


# --- Integrated ledger ---
def simulate(params: SimulationParams) -> List[YearRow]:
    """
    Year-by-year ledger on a single balance.

    Each month the contribution is added, the withdrawal taken, then the balance
    compounds at annual_rate/12. Under CAP_TO_AVAILABLE_BALANCE a withdrawal never
    exceeds what is in the account; UNCAPPED subtracts the full amount and the
    balance may go negative.
    """
    validate_params(params)

    capped = params.withdrawal_cap_policy == WithdrawalCapPolicy.CAP_TO_AVAILABLE_BALANCE
    start = params.resolved_withdrawal_start
    growth = 1 + params.monthly_rate

    rows: List[YearRow] = []
    balance = 0.0
    cumulative_contributed = 0.0
    cumulative_withdrawn = 0.0

    for year in range(1, params.simulation_years + 1):
        contributing = year <= params.contribution_years
        withdrawing = year >= start
        monthly_sip = monthly_contribution_for_year(params, year)
        monthly_swp = monthly_withdrawal_for_year(params, year)
        annual_contribution = monthly_sip * 12

        year_begin = balance
        year_withdrawn = 0.0
        for _ in range(12):
            balance += monthly_sip
            withdraw = monthly_swp
            if capped:
                withdraw = min(monthly_swp, max(balance, 0.0))
            balance -= withdraw
            year_withdrawn += withdraw
            balance *= growth

        interest = balance - (year_begin + annual_contribution - year_withdrawn)
        cumulative_contributed += annual_contribution
        if withdrawing:
            cumulative_withdrawn += year_withdrawn

        rows.append(YearRow(
            year=year,
            begin_balance=round_half_up(year_begin),
            monthly_contribution=monthly_sip if contributing else None,
            annual_contribution=round_half_up(annual_contribution),
            cumulative_contributed=round_half_up(cumulative_contributed),
            monthly_withdrawal=monthly_swp if withdrawing else None,
            annual_withdrawal=round_half_up(year_withdrawn) if withdrawing else None,
            cumulative_withdrawn=round_half_up(cumulative_withdrawn),
            interest_earned=round_half_up(interest),
            end_balance=round_half_up(balance),
        ))

    return rows


# --- Separate SIP then SWP ledger ---
def _sip_ledger(params: SimulationParams) -> List[Dict[str, float]]:
    table = []
    total = 0.0
    current_sip = params.monthly_contribution
    growth = 1 + params.monthly_rate

    for _ in range(params.contribution_years):
        begin = total
        for _ in range(12):
            total = (total + current_sip) * growth
        invested = current_sip * 12
        table.append({
            "monthly_invested": round_half_up(current_sip),
            "invested": round_half_up(invested),
            "interest": round_half_up(total - begin - invested),
            "total": round_half_up(total),
        })
        current_sip *= 1 + params.contribution_step_up_percent / 100.0
    return table


def _discount(params: SimulationParams, amount: float, years: int) -> float:
    """After-tax value of amount, deflated by `years` of inflation."""
    return amount * (1 - params.tax_percent / 100.0) / (1 + params.inflation_percent / 100.0) ** years


def swp_seed_balance(params: SimulationParams, sip_table: Sequence[Dict[str, float]]) -> float:
    """Opening SWP corpus: the SIP total of the year before withdrawals, after tax and inflation."""
    start = params.resolved_withdrawal_start
    if start == 1:
        return 0.0
    if start <= params.contribution_years:
        return round_half_up(_discount(params, sip_table[start - 2]["total"], start - 1))
    return round_half_up(_discount(params, sip_table[-1]["total"], params.contribution_years))


def _swp_ledger(params: SimulationParams, seed: float, horizon: int) -> Dict[int, Dict[str, float]]:
    capped = params.withdrawal_cap_policy == WithdrawalCapPolicy.CAP_TO_AVAILABLE_BALANCE
    table = {}
    balance = seed
    current_withdrawal = params.monthly_withdrawal

    for year in range(params.resolved_withdrawal_start, horizon + 1):
        begin = balance
        year_interest = 0.0
        year_withdrawn = 0.0
        for _ in range(12):
            monthly_interest = balance * params.monthly_rate
            balance += monthly_interest
            year_interest += monthly_interest
            if capped and balance < current_withdrawal:
                withdraw = max(balance, 0.0)
                balance = 0.0
            else:
                withdraw = current_withdrawal
                balance -= current_withdrawal
            year_withdrawn += withdraw
        table[year] = {
            "begin": round_half_up(begin),
            "interest": round_half_up(year_interest),
            "monthly_withdrawal": round_half_up(current_withdrawal),
            "annual_withdrawal": round_half_up(year_withdrawn),
            "end": round_half_up(balance),
        }
        current_withdrawal *= 1 + params.withdrawal_step_up_percent / 100.0
    return table


def simulate_separate(params: SimulationParams) -> List[SeparateYearRow]:
    """
    SIP ledger and SWP ledger merged by year.

    SIP totals beyond the contribution period carry the final SIP values forward;
    SWP columns are empty for years before withdrawals start.
    """
    validate_params(params)

    years = params.contribution_years
    horizon = params.simulation_years
    start = params.resolved_withdrawal_start

    sip_table = _sip_ledger(params)
    cumulative_invested = []
    running = 0.0
    for entry in sip_table:
        running += entry["invested"]
        cumulative_invested.append(running)

    swp_table: Dict[int, Dict[str, float]] = {}
    if 1 <= start <= horizon and params.monthly_withdrawal > 0:
        seed = swp_seed_balance(params, sip_table)
        logger.debug("SWP seeded with %.0f from year %d", seed, start)
        swp_table = _swp_ledger(params, seed, horizon)

    rows: List[SeparateYearRow] = []
    for year in range(1, horizon + 1):
        in_sip = year <= years
        sip = sip_table[year - 1] if in_sip else sip_table[-1]
        swp = swp_table.get(year)
        rows.append(SeparateYearRow(
            year=year,
            sip_monthly=sip["monthly_invested"] if in_sip else None,
            sip_invested=sip["invested"] if in_sip else None,
            cumulative_invested=cumulative_invested[min(year, years) - 1],
            sip_interest=sip["interest"] if in_sip else None,
            sip_total=sip["total"],
            sip_adjusted_total=round_half_up(_discount(params, sip["total"], year)),
            swp_begin=swp["begin"] if swp else None,
            swp_interest=swp["interest"] if swp else None,
            swp_monthly_withdrawal=swp["monthly_withdrawal"] if swp else None,
            swp_annual_withdrawal=swp["annual_withdrawal"] if swp else None,
            swp_end=swp["end"] if swp else None,
        ))

    return rows


# --- Report helpers ---
def chart_series(rows: Sequence[LedgerRow]) -> ChartSeries:
    """
    Parallel year / invested / corpus arrays for a line chart.

    In the separate report the corpus follows the SWP balance once withdrawals
    have started, and the SIP total before that.
    """
    years, invested, corpus = [], [], []
    for row in rows:
        years.append(row.year)
        if isinstance(row, SeparateYearRow):
            invested.append(row.cumulative_invested)
            corpus.append(row.swp_end if row.swp_end is not None else row.sip_total)
        else:
            invested.append(row.cumulative_contributed)
            corpus.append(row.end_balance)
    return ChartSeries(year=years, cumulative_contributed=invested, end_balance=corpus)


def summarize(rows: Sequence[LedgerRow], params: SimulationParams) -> ProjectionSummary:
    last = rows[-1]
    if isinstance(last, SeparateYearRow):
        total_contributed = last.cumulative_invested
        total_withdrawn = sum(row.swp_annual_withdrawal or 0.0 for row in rows)
        swp_rows = [row for row in rows if row.swp_end is not None]
        final_corpus = swp_rows[-1].swp_end if swp_rows else last.sip_total
        total_interest = (
            sum(row.sip_interest or 0.0 for row in rows)
            + sum(row.swp_interest or 0.0 for row in rows)
        )
    else:
        total_contributed = last.cumulative_contributed
        total_withdrawn = last.cumulative_withdrawn
        final_corpus = last.end_balance
        total_interest = sum(row.interest_earned for row in rows)

    return ProjectionSummary(
        final_corpus=final_corpus,
        total_contributed=total_contributed,
        total_withdrawn=total_withdrawn,
        total_interest=total_interest,
        withdrawal_start=params.resolved_withdrawal_start,
        simulation_years=params.simulation_years,
        final_corpus_formatted=format_inr(final_corpus),
        final_corpus_cr_lac=format_cr_lac(final_corpus),
        total_contributed_formatted=format_inr(total_contributed),
        total_withdrawn_formatted=format_inr(total_withdrawn),
        total_interest_formatted=format_inr(total_interest),
    )


def run_projection(params: SimulationParams) -> ProjectionResponse:
    """Validate, simulate in the requested report mode and package the result."""
    logger.debug("Projection requested: %s", params.model_dump())

    if params.report_mode == ReportMode.SEPARATE:
        rows: List[LedgerRow] = list(simulate_separate(params))
    else:
        rows = list(simulate(params))

    summary = summarize(rows, params)
    logger.info(
        "%s projection: %d years, withdrawals from year %d, final corpus %s",
        params.report_mode.value,
        summary.simulation_years,
        summary.withdrawal_start,
        summary.final_corpus_formatted,
    )

    return ProjectionResponse(
        success=True,
        mode=params.report_mode,
        params=params,
        rows=rows,
        summary=summary,
        chart=chart_series(rows),
        timestamp=datetime.now().isoformat(),
    )
