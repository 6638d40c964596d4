"""Household financial stress scoring and savings-goal allocation."""
from .allocation import allocate, analyze_goals, evaluate_goal
from .scoring import stress_score

__all__ = ["allocate", "analyze_goals", "evaluate_goal", "stress_score"]
