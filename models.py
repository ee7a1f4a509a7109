from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict


class ConfigurationError(ValueError):
    """Raised when projection parameters cannot produce a meaningful ledger."""


class WithdrawalCapPolicy(str, Enum):
    UNCAPPED = "uncapped"
    CAP_TO_AVAILABLE_BALANCE = "cap_to_available_balance"


class ReportMode(str, Enum):
    INTEGRATED = "integrated"
    SEPARATE = "separate"


class SimulationParams(BaseModel):
    """
    Inputs for one projection run.

    withdrawal_start=None means withdrawals begin the year after the last SIP year.
    withdrawal_years, when given, fixes the horizon at contribution_years + withdrawal_years;
    otherwise the SWP phase is extended to last extension_years from withdrawal_start.
    """
    model_config = ConfigDict(frozen=True)

    monthly_contribution: float
    contribution_years: int
    annual_rate_percent: float
    contribution_step_up_percent: float = 0.0
    withdrawal_start: Optional[int] = None
    monthly_withdrawal: float = 0.0
    withdrawal_step_up_percent: float = 0.0
    withdrawal_years: Optional[int] = None
    extension_years: int = 20
    withdrawal_cap_policy: WithdrawalCapPolicy = WithdrawalCapPolicy.UNCAPPED
    report_mode: ReportMode = ReportMode.INTEGRATED
    tax_percent: float = 0.0
    inflation_percent: float = 0.0

    @property
    def resolved_withdrawal_start(self) -> int:
        if self.withdrawal_start is None:
            return self.contribution_years + 1
        return self.withdrawal_start

    @property
    def simulation_years(self) -> int:
        if self.withdrawal_years is not None:
            return self.contribution_years + self.withdrawal_years
        return max(self.contribution_years, self.resolved_withdrawal_start + self.extension_years - 1)

    @property
    def monthly_rate(self) -> float:
        return (self.annual_rate_percent / 100.0) / 12.0


# --- Ledger rows ---
class YearRow(BaseModel):
    year: int
    begin_balance: float
    monthly_contribution: Optional[float]
    annual_contribution: float
    cumulative_contributed: float
    monthly_withdrawal: Optional[float]
    annual_withdrawal: Optional[float]
    cumulative_withdrawn: float
    interest_earned: float
    end_balance: float


class SeparateYearRow(BaseModel):
    year: int
    sip_monthly: Optional[float]
    sip_invested: Optional[float]
    cumulative_invested: float
    sip_interest: Optional[float]
    sip_total: float
    sip_adjusted_total: float
    swp_begin: Optional[float] = None
    swp_interest: Optional[float] = None
    swp_monthly_withdrawal: Optional[float] = None
    swp_annual_withdrawal: Optional[float] = None
    swp_end: Optional[float] = None


LedgerRow = Union[YearRow, SeparateYearRow]


# --- Response models ---
class ProjectionSummary(BaseModel):
    final_corpus: float
    total_contributed: float
    total_withdrawn: float
    total_interest: float
    withdrawal_start: int
    simulation_years: int
    # formatted values
    final_corpus_formatted: str
    final_corpus_cr_lac: str
    total_contributed_formatted: str
    total_withdrawn_formatted: str
    total_interest_formatted: str


class ChartSeries(BaseModel):
    year: List[int]
    cumulative_contributed: List[float]
    end_balance: List[float]


class ProjectionResponse(BaseModel):
    success: bool
    mode: ReportMode
    params: SimulationParams
    rows: List[Union[YearRow, SeparateYearRow]]
    summary: ProjectionSummary
    chart: ChartSeries
    timestamp: str


class DefaultsResponse(BaseModel):
    defaults: Dict[str, Any]
    presets: List[str]
