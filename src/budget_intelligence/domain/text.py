from budget_intelligence.models import CategoryType

INVESTMENT_MARKER = "invest"


def normalize_description(description: str) -> str:
    return description.strip().lower()


def tokenize(description: str) -> list[str]:
    return description.split()


def mentions_investment(text: str) -> bool:
    return INVESTMENT_MARKER in text.lower()


def infer_category_type(category_name: str, amount: int) -> CategoryType:
    """Type implied by a category name and the sign of the amount.

    Investment names win over the sign; otherwise positive amounts are income.
    """
    if mentions_investment(category_name):
        return "investment"
    if amount > 0:
        return "income"
    return "expense"
