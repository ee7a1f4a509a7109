import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request

import config
from engine import run_projection
from models import (
    ConfigurationError,
    DefaultsResponse,
    ProjectionResponse,
    ReportMode,
    SimulationParams,
    WithdrawalCapPolicy,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="SIP & SWP Projection API",
    description="Year-by-year projections of step-up SIP contributions and SWP withdrawals",
    version="1.0.0"
)


def _project(params: SimulationParams) -> ProjectionResponse:
    try:
        return run_projection(params)
    except ConfigurationError as e:
        logger.warning("Rejected projection parameters: %s", e)
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Projection failed")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@app.get("/sip-swp", response_model=ProjectionResponse)
async def sip_swp(
    sip: float = Query(config.DEFAULT_SIP, ge=0, description="Monthly SIP amount for Year 1"),
    years: int = Query(config.DEFAULT_YEARS, ge=1, le=100, description="Number of years to invest"),
    rate: float = Query(config.DEFAULT_RATE, ge=0, description="Annual return rate in percent (e.g., 12 for 12%)"),
    stepup: float = Query(config.DEFAULT_STEPUP, ge=0, description="Annual percentage increase in monthly SIP"),
    swp_start: Optional[int] = Query(config.DEFAULT_SWP_START, ge=1, description="Year withdrawals begin; omit with auto_start"),
    auto_start: bool = Query(False, description="Start withdrawals the year after the last SIP year"),
    swp_withdrawal: float = Query(config.DEFAULT_SWP_WITHDRAWAL, ge=0, description="Monthly SWP amount in its first year"),
    swp_stepup: float = Query(config.DEFAULT_SWP_STEPUP, ge=0, description="Annual percentage increase in monthly SWP"),
    swp_years: Optional[int] = Query(None, ge=0, le=100, description="Explicit number of withdrawal years after the SIP period"),
    extension_years: int = Query(config.INTEGRATED_EXTENSION_YEARS, ge=1, le=100, description="SWP years from swp_start when swp_years is not given"),
    cap_policy: WithdrawalCapPolicy = Query(WithdrawalCapPolicy.UNCAPPED, description="Whether withdrawals are limited to the available balance"),
    mode: ReportMode = Query(ReportMode.INTEGRATED, description="integrated balance or separate SIP/SWP ledgers"),
    tax: float = Query(config.DEFAULT_TAX, ge=0, le=100, description="Tax percent applied to the SIP corpus (separate mode)"),
    inflation: float = Query(config.DEFAULT_INFLATION, ge=0, description="Annual inflation percent (separate mode)"),
):
    """
    Combined SIP & SWP projection with monthly compounding and yearly step-ups.

    Returns one ledger row per year, a summary and chart-ready series.
    """
    params = SimulationParams(
        monthly_contribution=sip,
        contribution_years=years,
        annual_rate_percent=rate,
        contribution_step_up_percent=stepup,
        withdrawal_start=None if auto_start else swp_start,
        monthly_withdrawal=swp_withdrawal,
        withdrawal_step_up_percent=swp_stepup,
        withdrawal_years=swp_years,
        extension_years=extension_years,
        withdrawal_cap_policy=cap_policy,
        report_mode=mode,
        tax_percent=tax,
        inflation_percent=inflation,
    )
    return _project(params)


@app.post("/sip-swp/form", response_model=ProjectionResponse)
async def sip_swp_form(request: Request):
    """
    Projection from calculator form fields.

    Any missing or unparseable field falls back to its default; the ``preset``
    field picks one of the calculator styles in config.PRESETS.
    """
    form = await request.form()
    preset = form.get("preset") or config.DEFAULT_PRESET
    if preset not in config.PRESETS:
        raise HTTPException(status_code=400, detail=f"Unknown preset '{preset}'")
    return _project(config.params_from_form(form, preset))


@app.get("/sip-swp/defaults", response_model=DefaultsResponse)
async def sip_swp_defaults():
    return DefaultsResponse(defaults=config.DEFAULTS, presets=list(config.PRESETS))


# --- SIP endpoint ---
@app.get("/sip", response_model=ProjectionResponse)
async def sip(
    years: int = Query(..., ge=1, le=60, description="Number of years to invest"),
    annual_interest_rate: float = Query(..., ge=0, description="Annual return rate in percent (e.g., 16 for 16%)"),
    monthly_investment: float = Query(..., ge=0, description="Monthly SIP amount for Year 1"),
    yearly_increment_percent: float = Query(0, ge=0, description="Annual percentage increase in monthly SIP")
):
    """
    SIP-only calculator: monthly compounding with a yearly SIP increment and no withdrawals.
    """
    params = SimulationParams(
        monthly_contribution=monthly_investment,
        contribution_years=years,
        annual_rate_percent=annual_interest_rate,
        contribution_step_up_percent=yearly_increment_percent,
        withdrawal_years=0,
    )
    return _project(params)


if __name__ == "__main__":
    import uvicorn
    config.configure_logging()
    uvicorn.run(app, host=config.HOST, port=config.PORT)
