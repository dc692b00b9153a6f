"""
Typed partial-update records for the financial profile store.

Only fields explicitly set on an instance are written; unset fields keep
their stored value. This replaces arbitrary key/value upserts.
"""

from typing import Optional, Dict, Any
from pydantic import BaseModel, Field, validator


PAYMENT_FREQUENCIES = ("semanal", "quincenal", "mensual", "weekly", "biweekly", "monthly")
RISK_LEVELS = ("normal", "bajo", "moderado", "alto")


class FinancialProfileUpdate(BaseModel):
    """Fields a user declares during onboarding or later profile edits."""
    salary: Optional[float] = Field(default=None, ge=0)
    payment_frequency: Optional[str] = None
    is_student: Optional[bool] = None
    study_cost: Optional[float] = Field(default=None, ge=0)
    transport_cost: Optional[float] = Field(default=None, ge=0)
    food_cost: Optional[float] = Field(default=None, ge=0)
    leisure_cost: Optional[float] = Field(default=None, ge=0)
    services_cost: Optional[float] = Field(default=None, ge=0)
    has_debt: Optional[bool] = None
    debt_total: Optional[float] = Field(default=None, ge=0)
    debt_monthly: Optional[float] = Field(default=None, ge=0)
    current_savings: Optional[float] = Field(default=None, ge=0)
    is_employed: Optional[bool] = None
    income_type: Optional[str] = None
    onboarding_completed: Optional[bool] = None

    @validator('payment_frequency')
    def validate_payment_frequency(cls, v):
        if v is None:
            return v
        normalized = v.strip().lower()
        if normalized not in PAYMENT_FREQUENCIES:
            raise ValueError(f"payment_frequency must be one of: {', '.join(PAYMENT_FREQUENCIES)}")
        return normalized

    def changes(self) -> Dict[str, Any]:
        return self.dict(exclude_unset=True)


class BehavioralSnapshot(BaseModel):
    """Derived behavioral fields written back after each report."""
    category_trends: Optional[str] = None
    monthly_deviation_score: Optional[float] = None
    recurring_spike_pattern: Optional[str] = None
    behavioral_risk_level: Optional[str] = None

    @validator('behavioral_risk_level')
    def validate_risk_level(cls, v):
        if v is not None and v not in RISK_LEVELS:
            raise ValueError(f"behavioral_risk_level must be one of: {', '.join(RISK_LEVELS)}")
        return v

    def changes(self) -> Dict[str, Any]:
        return self.dict(exclude_unset=True)
