"""
Goal feasibility and monthly income allocation.

evaluate_goal() judges one savings goal against the income left after fixed
commitments (rent + subscriptions) and against every other goal on the list.

allocate() splits monthly income into named buckets: balance left, each goal,
each strategy, general savings, the expense categories and, when the subsidy
engine is on, claimed subsidies. Lifestyle optimizations shrink the displayed
expense buckets and the amount saved reappears in the balance bucket; the
cash-flow total itself is computed from the raw amounts.
"""
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Sequence

from .models import (
    Bucket,
    BucketKind,
    FinancialSnapshot,
    Goal,
    GoalAnalysis,
    InvalidGoal,
    LifestyleOptimization,
    Strategy,
    Verdict,
)

logger = logging.getLogger(__name__)


DANGER_SHARE      = 0.5   # one goal taking over half the free income
CHALLENGING_SHARE = 0.3

RATIONALES = {
    Verdict.DANGER:      "Highly aggressive. Uses over 50% of your free income.",
    Verdict.UNREALISTIC: "Requires more free income than possible.",
    Verdict.CHALLENGING: "Requires strict discipline.",
    Verdict.REALISTIC:   "Healthy progression. Very achievable.",
}

CATEGORY_ALIASES = {"transportation": "transport"}

# (bucket label, optimization category, snapshot field), in display order.
# Debt takes no optimization.
EXPENSE_BUCKETS = [
    ("Housing",       "housing",       "rent"),
    ("Transport",     "transport",     "transport_cost"),
    ("Food",          "food",          "food"),
    ("Utilities",     "utilities",     "utilities"),
    ("Debt",          None,            "debt"),
    ("Subscriptions", "subscriptions", "subscriptions"),
]


def required_monthly(goal: Goal) -> float:
    if goal.deadline_months <= 0:
        raise InvalidGoal(f"goal {goal.id!r} has deadline_months={goal.deadline_months}")
    return goal.target_amount / goal.deadline_months


def required_monthly_total(goals: Iterable[Goal]) -> float:
    return sum(required_monthly(g) for g in goals)


def fixed_commitments(snapshot: FinancialSnapshot) -> float:
    return snapshot.rent + snapshot.subscriptions


def safe_available(snapshot: FinancialSnapshot) -> float:
    return snapshot.income - fixed_commitments(snapshot)


def evaluate_goal(
    goal: Goal,
    snapshot: FinancialSnapshot,
    all_goals: Sequence[Goal],
    strategies: Sequence[Strategy] = (),
) -> GoalAnalysis:
    """
    Judge whether `goal` fits next to the rest of `all_goals`.

    `all_goals` must include `goal` itself. Strategies are accepted so every
    caller passes the same inputs, but they do not move the verdict: only
    rent and subscriptions count as fixed commitments here.

    Rules, first match wins:
      1. over 50% of safe available income        -> Danger
      2. negative margin once other goals are paid -> Unrealistic
      3. over 30% of safe available income        -> Challenging
      4. otherwise                                -> Realistic
    """
    required = required_monthly(goal)
    available = safe_available(snapshot)
    margin = available - required_monthly_total(all_goals) + required

    if required > available * DANGER_SHARE:
        verdict = Verdict.DANGER
    elif margin < 0:
        verdict = Verdict.UNREALISTIC
    elif required > available * CHALLENGING_SHARE:
        verdict = Verdict.CHALLENGING
    else:
        verdict = Verdict.REALISTIC

    logger.debug("goal %s: required=%.2f available=%.2f margin=%.2f -> %s",
                 goal.id, required, available, margin, verdict.value)
    return GoalAnalysis(
        goal_id=goal.id,
        required_monthly=required,
        verdict=verdict,
        rationale=RATIONALES[verdict],
    )


def analyze_goals(
    snapshot: FinancialSnapshot,
    goals: Sequence[Goal],
    strategies: Sequence[Strategy] = (),
) -> List[GoalAnalysis]:
    return [evaluate_goal(g, snapshot, goals, strategies) for g in goals]


def normalize_category(category: str) -> str:
    cat = category.strip().lower()
    return CATEGORY_ALIASES.get(cat, cat)


def normalize_optimizations(optimizations: Iterable[LifestyleOptimization]) -> Dict[str, float]:
    """Sum monthly savings per normalized category."""
    savings: Dict[str, float] = defaultdict(float)
    for opt in optimizations:
        savings[normalize_category(opt.category)] += opt.monthly_savings
    return dict(savings)


def _optimized_description(raw: float, saved: float) -> str:
    return f"{raw:.2f} budget - {saved:.2f} optimized savings"


def allocate(
    snapshot: FinancialSnapshot,
    goals: Sequence[Goal] = (),
    strategies: Sequence[Strategy] = (),
    optimizations: Sequence[LifestyleOptimization] = (),
    subsidies_enabled: bool = False,
    claimed_subsidies_total: float = 0.0,
) -> List[Bucket]:
    """
    Break monthly income into ordered buckets, omitting any bucket <= 0.

    Goals are assumed valid (deadline_months > 0); the store rejects the
    rest before they get here.
    """
    savings_by_category = normalize_optimizations(optimizations)
    total_optimized = sum(savings_by_category.values())

    goals_total = required_monthly_total(goals)
    strategy_total = sum(s.monthly_amount for s in strategies)
    # raw amounts: optimizations only change how the buckets are displayed
    expense_total = (snapshot.total_expenses + snapshot.savings
                     + goals_total + strategy_total)
    balance_left = max(0.0, snapshot.income - expense_total) + total_optimized

    buckets = [Bucket(label="Balance Left", amount=balance_left, kind=BucketKind.BALANCE)]
    buckets += [
        Bucket(label=g.name, amount=required_monthly(g), kind=BucketKind.GOAL)
        for g in goals
    ]
    buckets += [
        Bucket(label=s.label, amount=s.monthly_amount, kind=BucketKind.STRATEGY)
        for s in strategies
    ]
    buckets.append(Bucket(label="General Savings", amount=snapshot.savings,
                          kind=BucketKind.SAVINGS))

    for label, category, field in EXPENSE_BUCKETS:
        raw = getattr(snapshot, field)
        saved = savings_by_category.get(category, 0.0) if category else 0.0
        buckets.append(Bucket(
            label=label,
            amount=max(0.0, raw - saved),
            kind=BucketKind.EXPENSE,
            description=_optimized_description(raw, saved) if saved > 0 else None,
        ))

    if subsidies_enabled:
        buckets.append(Bucket(label="Subsidies", amount=max(0.0, claimed_subsidies_total),
                              kind=BucketKind.SUBSIDY))

    return [b for b in buckets if b.amount > 0]
