NEEDS = "necesidad"
WANTS = "gusto"
SAVINGS = "ahorro"

EXPENSE_CATEGORIES = (NEEDS, WANTS, SAVINGS)

CATEGORY_LABELS = {
    NEEDS: "Necesidades",
    WANTS: "Ocio",
    SAVINGS: "Ahorro",
}

RULE_50_30_20 = {
    "needs": 0.5,
    "wants": 0.3,
    "savings": 0.2,
}


def category_label(category: str) -> str:
    return CATEGORY_LABELS.get(category, category)
