"""
Prompt construction for the FinanceAI advisor
"""

from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from financeai.calculators import as_number


class AdviceType(str, Enum):
    CHAT = "chat"
    EXPLAIN = "explain"
    BUDGET_HELP = "budget_help"
    PURCHASE_ADVICE = "purchase_advice"
    CREDIT_IMPROVEMENT = "credit_improvement"
    SUBSCRIPTION_OPT = "subscription_opt"
    UTILITY_OPT = "utility_opt"
    DEBT_ADVICE = "debt_advice"
    SAVINGS_ADVICE = "savings_advice"
    NEXT_STEPS = "next_steps"


PERSONA = "You are FinanceAI, a helpful financial advisor for young professionals. "

FALLBACK_SYSTEM_PROMPT = PERSONA + "Be concise and practical."

CLOSING_GUIDANCE = (
    "Provide practical, actionable financial advice. Be encouraging but realistic. "
    "If the user hasn't completed their profile, guide them to do so. "
    "Use rupees (₹) for all amounts."
)

NEW_USER_NOTE = (
    "Note: This user is new and hasn't completed their financial profile yet. "
    "Provide general financial advice and encourage them to complete their profile setup."
)

HISTORY_ROLES = {"user", "assistant"}


def _or_missing(value) -> str:
    return "Not provided" if value in (None, "") else str(value)


def format_amount(value) -> str:
    if value is None:
        return "Not provided"
    if isinstance(value, float):
        return f"₹{int(value)}" if value.is_integer() else f"₹{value:.2f}"
    return f"₹{value}"


def build_system_prompt(profile: Optional[Mapping[str, Any]],
                        goals: Iterable[Mapping[str, Any]] = (),
                        debts: Iterable[Mapping[str, Any]] = (),
                        budgets: Iterable[Mapping[str, Any]] = ()) -> str:
    lines = [PERSONA.strip()]

    if profile:
        lines.extend([
            "User's Financial Profile:",
            f"- Credit Score: {_or_missing(profile.get('credit_score'))}",
            f"- Monthly Income: {format_amount(profile.get('monthly_income'))}",
            f"- Monthly Expenses: {format_amount(profile.get('monthly_expenses'))}",
            f"- Savings: {format_amount(profile.get('savings_balance'))}",
            f"- Total Debt: {format_amount(profile.get('debt_amount'))}",
        ])
    else:
        lines.append(NEW_USER_NOTE)

    goals, debts, budgets = list(goals), list(debts), list(budgets)
    if goals:
        lines.append("Current Goals: " + ", ".join(
            f"{g['title']} ({format_amount(g.get('target_amount'))})" for g in goals
        ))
    if debts:
        lines.append("Active Debts/Subscriptions: " + ", ".join(
            f"{d['name']} ({format_amount(d.get('amount'))})" for d in debts
        ))
    if budgets:
        lines.append("Budget Categories: " + ", ".join(
            f"{b['name']}: {format_amount(b.get('allocated_amount'))}" for b in budgets
        ))

    return "\n".join(lines) + "\n\n" + CLOSING_GUIDANCE


def build_user_prompt(advice_type: str, message: str,
                      context: Optional[Mapping[str, Any]] = None,
                      profile: Optional[Mapping[str, Any]] = None,
                      has_debts: bool = False) -> str:
    """Rewrite the user's message into a type-specific request"""
    context = context or {}
    profile = profile or {}
    personalised = bool(profile)

    if advice_type == AdviceType.EXPLAIN:
        return (
            "Explain the following advice in simple, beginner-friendly terms. "
            f"Keep it concise but clear. Advice: \n{message}"
        )

    price = as_number(context.get("itemPrice"))
    if advice_type == AdviceType.PURCHASE_ADVICE and price and price > 0:
        prompt = (
            f"I want to buy {context.get('itemName', 'this item')} for {format_amount(price)}. "
            "Can I afford this? Should I buy it now or wait?"
        )
        if personalised:
            return prompt + " Consider my credit score, monthly budget, and financial goals."
        return prompt + (
            " (Note: I haven't completed my financial profile yet, so provide general advice "
            "and encourage me to complete my profile for personalized recommendations.)"
        )

    if advice_type == AdviceType.BUDGET_HELP:
        if profile.get("monthly_income"):
            return (
                f"Help me create a monthly budget plan based on my income of "
                f"{format_amount(profile['monthly_income'])}. Suggest allocations for different categories."
            )
        return (
            "Help me create a monthly budget plan. I haven't set up my financial profile yet, "
            "so provide general budgeting advice and encourage me to complete my profile for "
            "personalized recommendations."
        )

    if advice_type == AdviceType.CREDIT_IMPROVEMENT:
        if profile.get("credit_score"):
            return (
                f"My credit score is {profile['credit_score']}. Explain what this means "
                "and give me a specific plan to improve it."
            )
        return (
            "I want to improve my credit score. Explain what credit scores mean and give me "
            "general tips for improvement. Encourage me to complete my financial profile for "
            "personalized advice."
        )

    if advice_type == AdviceType.SUBSCRIPTION_OPT:
        if has_debts:
            return (
                "Review my subscriptions and recommend which ones I should cancel or "
                "downgrade to save money."
            )
        return (
            "I want to optimize my subscriptions. Since I haven't added any yet, provide general "
            "advice on subscription management and encourage me to add my subscriptions to get "
            "personalized recommendations."
        )

    if advice_type == AdviceType.UTILITY_OPT:
        return (
            "Analyze my recent electricity and gas bills and provide practical, personalized "
            "energy-saving actions I can take to lower my monthly utility costs. Keep suggestions "
            "realistic for an average apartment."
        )

    if advice_type == AdviceType.NEXT_STEPS:
        return (
            f"{message}\n\nBased on my financial profile, list the three most important next "
            "steps I should take this month, in priority order."
        )

    return message


def trim_history(history: Optional[Iterable[Mapping[str, Any]]], turns: int) -> List[Dict[str, str]]:
    """Last `turns` well-formed {role, content} messages"""
    if not history or turns <= 0:
        return []
    cleaned = [
        {"role": str(item["role"]), "content": str(item["content"])}
        for item in history
        if isinstance(item, Mapping)
        and item.get("role") in HISTORY_ROLES
        and item.get("content")
    ]
    return cleaned[-turns:]
