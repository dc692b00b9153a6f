import logging
from fastapi import APIRouter, Depends, HTTPException, status as http_status
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field, validator

from app.analysis.digest import build_prompt_context, build_metrics_footer, build_fallback_summary
from app.analysis.metrics import metrics as service_metrics
from app.analysis.months import parse_year_month
from app.analysis.report import BehavioralReportService, UpstreamDataUnavailable
from app.analysis.snapshot import decode_behavioral_snapshot
from app.api.v1.endpoints.finance import get_repository, require_user
from app.core.config import settings
from app.db.repositories import FinanceRepository

logger = logging.getLogger(__name__)
router = APIRouter()


class BehavioralReportRequest(BaseModel):
    """Request model for a behavioral report."""
    user_id: int = Field(..., ge=1, description="User ID")
    current_month: Optional[str] = Field(
        default=None,
        description="Month to evaluate (YYYY-MM). Defaults to the current UTC month."
    )

    @validator('current_month')
    def validate_current_month(cls, v):
        if v is not None:
            parse_year_month(v)
        return v


class DigestRequest(BehavioralReportRequest):
    """Request model for the text digest of a report."""
    question: Optional[str] = Field(default=None, max_length=1000)


class TrendEntryDto(BaseModel):
    month: str
    total: float
    growth_pct: float


class AnomalyDto(BaseModel):
    category: str
    label: str
    current_total: float
    avg_past: float
    deviation_pct: float
    month: str


class RecurringMonthDto(BaseModel):
    month: str
    deviation: float


class RecurringPatternDto(BaseModel):
    category: str
    label: str
    months: List[RecurringMonthDto]
    confidence: float


class BehavioralMetricsDto(BaseModel):
    category_growth_rate: float
    behavioral_drift_index: float
    recurring_spike_confidence: float
    self_control_indicator: float
    behavioral_risk_level: str


class SplitComparisonDto(BaseModel):
    real: float
    ideal: float
    diff: float


class StructuralAnalysisDto(BaseModel):
    monthly_income: float
    fixed_expenses: float
    variable_expenses: float
    total_expenses: float
    savings_capacity: float
    savings_percent: float
    debt_income_ratio: float
    debt_total: float
    debt_monthly: float
    is_student: bool
    comparison: Dict[str, SplitComparisonDto]
    rule: Dict[str, float]


class BehavioralReportResponse(BaseModel):
    """Response model for a behavioral report."""
    user_id: int
    current_month: str
    monthly_income: float
    trends: Dict[str, List[TrendEntryDto]] = Field(default_factory=dict)
    months: List[str] = Field(default_factory=list)
    monthly_data: Dict[str, Dict[str, float]] = Field(default_factory=dict)
    anomalies: List[AnomalyDto] = Field(default_factory=list)
    recurring: List[RecurringPatternDto] = Field(default_factory=list)
    metrics: BehavioralMetricsDto
    structural_analysis: Optional[StructuralAnalysisDto] = None
    alerts: List[str] = Field(default_factory=list)
    split_recommendations: List[str] = Field(default_factory=list)
    profile: Optional[Dict[str, Any]] = None


class DigestResponse(BaseModel):
    """Text renderings of a report for the chat front-end."""
    prompt_context: str
    metrics_footer: str
    fallback_summary: str
    behavioral_risk_level: str


class RiskStateResponse(BaseModel):
    """Last persisted behavioral snapshot of a user."""
    user_id: int
    behavioral_risk_level: Optional[str] = None
    monthly_deviation_score: Optional[float] = None
    category_trends: Dict[str, List[TrendEntryDto]] = Field(default_factory=dict)
    recurring_spike_pattern: List[RecurringPatternDto] = Field(default_factory=list)


def _data_unavailable() -> HTTPException:
    return HTTPException(
        status_code=http_status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Failed to retrieve financial data"
    )


async def _build_report(request: BehavioralReportRequest, repository: FinanceRepository) -> Dict[str, Any]:
    try:
        await require_user(repository, request.user_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"User lookup failed for user {request.user_id}: {e}", exc_info=True)
        raise _data_unavailable()

    service = BehavioralReportService(repository)
    try:
        return await service.get_full_behavioral_report(request.user_id, request.current_month)
    except UpstreamDataUnavailable as e:
        logger.error(f"Behavioral report unavailable for user {request.user_id}: {e}")
        raise _data_unavailable()


@router.get(
    "/status",
    summary="Behavioral engine status",
    description="Returns the operational status, counters and thresholds of the behavioral engine"
)
async def behavior_status():
    """Get engine status and metrics."""
    return {
        "status": "operational",
        "service": "Behavioral Analysis",
        "version": settings.VERSION,
        "features": {
            "category_trends": "available",
            "anomaly_detection": "available",
            "recurring_spikes": "available",
            "split_recommendations": "available",
        },
        "metrics": service_metrics.get_stats(),
        "configuration": {
            "trend_months": settings.BEHAVIOR_TREND_MONTHS,
            "baseline_months": settings.BEHAVIOR_BASELINE_MONTHS,
            "anomaly_threshold": settings.BEHAVIOR_ANOMALY_THRESHOLD,
            "recurring_min_months": settings.BEHAVIOR_RECURRING_MIN_MONTHS,
            "drift_scale": settings.BEHAVIOR_DRIFT_SCALE,
        }
    }


@router.post(
    "/report",
    response_model=BehavioralReportResponse,
    summary="Full behavioral report",
    description="Analyzes monthly category spending for trends, anomalies and recurring spikes",
    responses={
        200: {"description": "Report generated successfully"},
        404: {"description": "Unknown user"},
        422: {"description": "Invalid request parameters"},
        503: {"description": "Financial data unavailable"}
    }
)
async def behavioral_report(
    request: BehavioralReportRequest,
    repository: FinanceRepository = Depends(get_repository),
):
    """
    Build the behavioral report for a user.

    Also overwrites the behavioral snapshot stored on the user's profile.
    """
    report = await _build_report(request, repository)
    return BehavioralReportResponse(**report)


@router.post(
    "/digest",
    response_model=DigestResponse,
    summary="Text digest of a behavioral report",
    description="Builds the prompt context for text generation plus user-facing summaries"
)
async def behavioral_digest(
    request: DigestRequest,
    repository: FinanceRepository = Depends(get_repository),
):
    report = await _build_report(request, repository)
    return DigestResponse(
        prompt_context=build_prompt_context(report, request.question),
        metrics_footer=build_metrics_footer(report),
        fallback_summary=build_fallback_summary(report),
        behavioral_risk_level=report["metrics"]["behavioral_risk_level"],
    )


@router.get(
    "/{user_id}/risk-state",
    response_model=RiskStateResponse,
    summary="Last known risk state",
    description="Reads the persisted behavioral snapshot without recomputing it"
)
async def risk_state(
    user_id: int,
    repository: FinanceRepository = Depends(get_repository),
):
    profile = await repository.get_financial_profile(user_id)
    if profile is None:
        raise HTTPException(
            status_code=http_status.HTTP_404_NOT_FOUND,
            detail=f"No financial profile for user {user_id}"
        )

    snapshot = decode_behavioral_snapshot(profile)
    return RiskStateResponse(user_id=user_id, **snapshot)
