"""
Defaults, report presets and form parsing.

Defaulting happens here, on the caller side; the engine only ever sees a
fully populated SimulationParams.
"""
import logging
import os
from typing import Any, Callable, Dict, Mapping, Optional

from models import ReportMode, SimulationParams, WithdrawalCapPolicy

# Configuration
HOST = os.environ.get("SIP_SWP_HOST", "0.0.0.0")
PORT = int(os.environ.get("SIP_SWP_PORT", "8000"))
LOG_LEVEL = os.environ.get("SIP_SWP_LOG_LEVEL", "INFO")

# Form defaults
DEFAULT_SIP = 1000.0
DEFAULT_YEARS = 10
DEFAULT_RATE = 12.0
DEFAULT_STEPUP = 10.0
DEFAULT_SWP_START = 10
DEFAULT_SWP_WITHDRAWAL = 10000.0
DEFAULT_SWP_STEPUP = 10.0
DEFAULT_TAX = 12.5
DEFAULT_INFLATION = 6.0
DEFAULT_SWP_YEARS = 20

# How long the SWP phase runs past its start year when no explicit length is given
INTEGRATED_EXTENSION_YEARS = 20
SEPARATE_EXTENSION_YEARS = 10

DEFAULTS: Dict[str, Any] = {
    "sip": DEFAULT_SIP,
    "years": DEFAULT_YEARS,
    "rate": DEFAULT_RATE,
    "stepup": DEFAULT_STEPUP,
    "swp_start": DEFAULT_SWP_START,
    "swp_withdrawal": DEFAULT_SWP_WITHDRAWAL,
    "swp_stepup": DEFAULT_SWP_STEPUP,
    "tax": DEFAULT_TAX,
    "inflation": DEFAULT_INFLATION,
    "swp_years": DEFAULT_SWP_YEARS,
}

# preset name -> fixed policy fields
PRESETS: Dict[str, Dict[str, Any]] = {
    # contributions and withdrawals on one balance, withdrawals never capped
    "integrated": {
        "report_mode": ReportMode.INTEGRATED,
        "withdrawal_cap_policy": WithdrawalCapPolicy.UNCAPPED,
        "extension_years": INTEGRATED_EXTENSION_YEARS,
        "auto_start": False,
        "explicit_swp_years": False,
    },
    # SIP ledger, then an SWP ledger seeded from the discounted corpus
    "separate": {
        "report_mode": ReportMode.SEPARATE,
        "withdrawal_cap_policy": WithdrawalCapPolicy.CAP_TO_AVAILABLE_BALANCE,
        "extension_years": SEPARATE_EXTENSION_YEARS,
        "auto_start": False,
        "explicit_swp_years": False,
    },
    # withdrawals start after the last SIP year and stop when the money runs out
    "capped": {
        "report_mode": ReportMode.INTEGRATED,
        "withdrawal_cap_policy": WithdrawalCapPolicy.CAP_TO_AVAILABLE_BALANCE,
        "extension_years": INTEGRATED_EXTENSION_YEARS,
        "auto_start": True,
        "explicit_swp_years": True,
    },
}
DEFAULT_PRESET = "integrated"


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _to_int(v, d=0):
    try:
        return int(float(v))
    except (TypeError, ValueError, OverflowError):
        return d


def _to_float(v, d=0.0):
    try:
        value = float(v)
    except (TypeError, ValueError):
        return d
    # nan and inf fall back too
    return value if value == value and abs(value) != float("inf") else d


def _field(form: Mapping[str, Any], name: str, convert: Callable[[Any, Any], Any]):
    raw = form.get(name)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return DEFAULTS[name]
    return convert(raw, DEFAULTS[name])


def params_from_form(form: Mapping[str, Any], preset: str = DEFAULT_PRESET) -> SimulationParams:
    """
    Build SimulationParams from raw form fields.

    Missing, blank or unparseable fields fall back to the documented defaults.
    Unknown preset names raise KeyError.
    """
    policy = PRESETS[preset]

    swp_start = None if policy["auto_start"] else _field(form, "swp_start", _to_int)
    swp_years = _field(form, "swp_years", _to_int) if policy["explicit_swp_years"] else None

    return SimulationParams(
        monthly_contribution=_field(form, "sip", _to_float),
        contribution_years=_field(form, "years", _to_int),
        annual_rate_percent=_field(form, "rate", _to_float),
        contribution_step_up_percent=_field(form, "stepup", _to_float),
        withdrawal_start=swp_start,
        monthly_withdrawal=_field(form, "swp_withdrawal", _to_float),
        withdrawal_step_up_percent=_field(form, "swp_stepup", _to_float),
        withdrawal_years=swp_years,
        extension_years=policy["extension_years"],
        withdrawal_cap_policy=policy["withdrawal_cap_policy"],
        report_mode=policy["report_mode"],
        tax_percent=_field(form, "tax", _to_float),
        inflation_percent=_field(form, "inflation", _to_float),
    )
