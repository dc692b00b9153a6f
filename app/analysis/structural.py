"""
Static financial structure analysis.

Works from the declared onboarding profile only: normalizes income to a
monthly figure, splits declared costs into fixed and variable expenses,
compares them with the 50/30/20 rule and raises structural alerts.
"""

from typing import List, Dict, Any, Optional

from app.analysis.constants import RULE_50_30_20

FREQUENCY_MULTIPLIER = {
    "semanal": 4.33,  # ~52 weeks / 12 months
    "quincenal": 2,
    "mensual": 1,
    "weekly": 4.33,
    "biweekly": 2,
    "monthly": 1,
}

OVER_INDEBTEDNESS_RATIO = 0.4
MIN_SAVINGS_PERCENT = 0.1


def calculate_monthly_income(salary: Optional[float], frequency: Optional[str]) -> float:
    """Convert an amount per pay period into a monthly figure."""
    multiplier = FREQUENCY_MULTIPLIER.get((frequency or "").lower(), 1)
    return (salary or 0) * multiplier


def calculate_503020(income: float) -> Dict[str, float]:
    return {bucket: income * share for bucket, share in RULE_50_30_20.items()}


def analyze_financial_structure(profile: Dict[str, Any]) -> Dict[str, Any]:
    monthly_income = calculate_monthly_income(profile.get("salary"), profile.get("payment_frequency"))

    fixed_expenses = sum(
        profile.get(field) or 0
        for field in ("transport_cost", "food_cost", "services_cost", "study_cost", "debt_monthly")
    )
    variable_expenses = profile.get("leisure_cost") or 0

    total_expenses = fixed_expenses + variable_expenses
    savings_capacity = monthly_income - total_expenses
    savings_percent = savings_capacity / monthly_income if monthly_income > 0 else 0
    debt_monthly = profile.get("debt_monthly") or 0
    debt_income_ratio = debt_monthly / monthly_income if monthly_income > 0 else 0

    ideal = calculate_503020(monthly_income)
    real = {"needs": fixed_expenses, "wants": variable_expenses, "savings": savings_capacity}
    comparison = {
        bucket: {"real": real[bucket], "ideal": ideal[bucket], "diff": real[bucket] - ideal[bucket]}
        for bucket in ("needs", "wants", "savings")
    }

    return {
        "monthly_income": monthly_income,
        "fixed_expenses": fixed_expenses,
        "variable_expenses": variable_expenses,
        "total_expenses": total_expenses,
        "savings_capacity": savings_capacity,
        "savings_percent": savings_percent,
        "debt_income_ratio": debt_income_ratio,
        "debt_total": profile.get("debt_total") or 0,
        "debt_monthly": debt_monthly,
        "is_student": bool(profile.get("is_student")),
        "comparison": comparison,
        "rule": dict(RULE_50_30_20),
    }


def detect_alerts(analysis: Dict[str, Any]) -> List[str]:
    """Warning messages for an ``analyze_financial_structure`` result."""
    alerts = []
    income = analysis["monthly_income"]

    if analysis["debt_income_ratio"] > OVER_INDEBTEDNESS_RATIO:
        alerts.append(
            f"🚨 *Sobreendeudamiento:* tu deuda mensual representa el "
            f"{analysis['debt_income_ratio'] * 100:.1f}% de tu ingreso (umbral: 40%)."
        )

    if 0 <= analysis["savings_percent"] < MIN_SAVINGS_PERCENT:
        alerts.append(
            f"⚠️ *Ahorro bajo:* solo puedes ahorrar el "
            f"{analysis['savings_percent'] * 100:.1f}% de tu ingreso (mínimo recomendado: 10%)."
        )

    if analysis["savings_percent"] < 0:
        alerts.append(
            f"🔴 *Déficit:* tus gastos superan tu ingreso mensual. "
            f"Estás gastando ${abs(analysis['savings_capacity']):.2f} más de lo que ganas."
        )

    if analysis["comparison"]["wants"]["diff"] > 0 and income > 0:
        wants_pct = analysis["comparison"]["wants"]["real"] / income * 100
        alerts.append(f"⚠️ *Ocio elevado:* gastas {wants_pct:.1f}% en ocio (ideal: 30%).")

    if 0 < analysis["savings_capacity"] < income * MIN_SAVINGS_PERCENT:
        emergency_months = analysis["savings_capacity"] * 6 / income if income > 0 else 0
        alerts.append(
            f"💡 *Sin fondo de emergencia viable:* al ritmo actual, tardarías ~{emergency_months:.1f} meses "
            f"en juntar 1 mes de gastos. Se recomienda tener 3–6 meses."
        )

    return alerts
