"""
Plain-text digests of a behavioral report.

The prompt context is handed to an external text-generation service; the
footer and fallback summary are shown to the user directly.
"""

import re
from typing import Dict, Any, Optional

from app.analysis.constants import category_label

EMOJI_PATTERN = re.compile("[📉⚠️🔴💡🚨⚡️]")


def format_currency(amount: float) -> str:
    return f"${amount:,.2f}"


def format_percentage(fraction: float) -> str:
    return f"{fraction * 100:.1f}%"


def _pct(value: float) -> str:
    return f"{value * 100:.0f}%"


def build_prompt_context(report: Dict[str, Any], question: Optional[str] = None) -> str:
    structural = report.get("structural_analysis")
    metrics = report["metrics"]

    lines = ["DATOS FINANCIEROS ACTUALES:"]
    lines.append(f"- Ingreso mensual: {format_currency(report['monthly_income'])}")

    if structural:
        lines.append(f"- Gastos fijos (necesidades): {format_currency(structural['fixed_expenses'])}")
        lines.append(f"- Gastos variables (ocio): {format_currency(structural['variable_expenses'])}")
        lines.append(
            f"- Capacidad de ahorro: {format_currency(structural['savings_capacity'])} "
            f"({format_percentage(structural['savings_percent'])})"
        )
        lines.append(f"- Ratio deuda/ingreso: {format_percentage(structural['debt_income_ratio'])}")

        income = structural["monthly_income"]
        if income > 0:
            comparison = structural["comparison"]
            lines.append("")
            lines.append("DISTRIBUCIÓN ACTUAL vs IDEAL (50/30/20):")
            lines.append(f"- Necesidades: {format_percentage(comparison['needs']['real'] / income)} real vs 50% ideal")
            lines.append(f"- Ocio: {format_percentage(comparison['wants']['real'] / income)} real vs 30% ideal")
            lines.append(f"- Ahorro: {format_percentage(structural['savings_percent'])} real vs 20% ideal")

    if report["trends"]:
        lines.append("")
        lines.append("TENDENCIAS POR CATEGORÍA (últimos meses):")
        for category, entries in report["trends"].items():
            steps = [
                f"{e['month']}: {format_currency(e['total'])} ({'+' if e['growth_pct'] > 0 else ''}{e['growth_pct']}%)"
                for e in entries
            ]
            lines.append(f"- {category_label(category)}: {' → '.join(steps)}")

    if report["anomalies"]:
        lines.append("")
        lines.append("ANOMALÍAS DETECTADAS (incrementos >15% vs promedio):")
        for a in report["anomalies"]:
            lines.append(
                f"- {a['label']}: {a['deviation_pct']}% por encima del promedio "
                f"({format_currency(a['current_total'])} actual vs {format_currency(a['avg_past'])} promedio)"
            )

    if report["recurring"]:
        lines.append("")
        lines.append("PATRONES RECURRENTES:")
        for r in report["recurring"]:
            lines.append(
                f"- {r['label']}: pico sostenido por {len(r['months'])} meses consecutivos "
                f"(confianza: {_pct(r['confidence'])})"
            )

    lines.append("")
    lines.append("MÉTRICAS CONDUCTUALES:")
    lines.append(f"- Tasa de crecimiento por categoría: {metrics['category_growth_rate']}%")
    lines.append(f"- Índice de drift conductual: {_pct(metrics['behavioral_drift_index'])}")
    lines.append(f"- Confianza de pico recurrente: {_pct(metrics['recurring_spike_confidence'])}")
    lines.append(f"- Indicador de autocontrol: {_pct(metrics['self_control_indicator'])}")
    lines.append(f"- Nivel de riesgo conductual: {metrics['behavioral_risk_level']}")

    if report["alerts"]:
        lines.append("")
        lines.append("ALERTAS ACTIVAS:")
        for alert in report["alerts"]:
            lines.append(f"- {alert.replace('*', '')}")

    if report["split_recommendations"]:
        lines.append("")
        lines.append("RECOMENDACIONES DEL MOTOR DE ANÁLISIS:")
        for recommendation in report["split_recommendations"]:
            lines.append(f"- {EMOJI_PATTERN.sub('', recommendation).strip()}")

    if question:
        lines.append("")
        lines.append(f"PREGUNTA DEL USUARIO: {question}")

    lines.append("")
    lines.append("Responde a la pregunta del usuario usando EXCLUSIVAMENTE los datos anteriores.")
    return "\n".join(lines)


def build_metrics_footer(report: Dict[str, Any]) -> str:
    metrics = report["metrics"]
    return (
        "━━━━━━━━━━━━━━━━━━━━━━\n"
        "📊 *Métricas Conductuales*\n"
        f"• Autocontrol: {_pct(metrics['self_control_indicator'])}\n"
        f"• Drift: {_pct(metrics['behavioral_drift_index'])}\n"
        f"• Riesgo: {metrics['behavioral_risk_level']}\n"
        "━━━━━━━━━━━━━━━━━━━━━━"
    )


def build_fallback_summary(report: Dict[str, Any]) -> str:
    """Summary shown when no text-generation service is available."""
    sections = []

    if report["anomalies"]:
        sections.append("*Incrementos detectados:*")
        sections.extend(f"• {a['label']}: +{a['deviation_pct']}% vs promedio" for a in report["anomalies"])

    if report["recurring"]:
        sections.append("*Patrones recurrentes:*")
        sections.extend(f"• {r['label']}: {len(r['months'])} meses consecutivos" for r in report["recurring"])

    if report["split_recommendations"]:
        sections.append("*Recomendaciones:*")
        sections.extend(f"• {s}" for s in report["split_recommendations"])

    if not sections and not report["trends"]:
        return "_Sin suficientes datos para análisis conductual._"

    metrics = report["metrics"]
    sections.append(
        f"*Métricas:* Autocontrol {_pct(metrics['self_control_indicator'])} | "
        f"Drift {_pct(metrics['behavioral_drift_index'])} | "
        f"Riesgo: {metrics['behavioral_risk_level']}"
    )
    return "\n".join(sections)
