from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class InvalidGoal(ValueError):
    """Raised when a goal cannot be saved or allocated (blank name, target <= 0, deadline <= 0)."""


def _non_negative(value) -> float:
    # None / missing optional amounts count as 0, negatives are clamped
    if value is None:
        return 0.0
    return max(0.0, float(value))


class GoalCategory(str, Enum):
    CAR = "Car/Vehicle"
    EMERGENCY = "Emergency"
    HOUSE = "House"
    VACATION = "Vacation"
    EDUCATION = "Education"
    INVESTMENT = "Investment"
    GENERAL = "General"

    @classmethod
    def parse(cls, value) -> "GoalCategory":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        return cls.GENERAL


class RiskBand(str, Enum):
    LOW      = "Low"
    MODERATE = "Moderate"
    CRITICAL = "Critical"

    @property
    def label(self) -> str:
        return {
            RiskBand.LOW: "Low Stress",
            RiskBand.MODERATE: "Moderate Stress",
            RiskBand.CRITICAL: "Critical",
        }[self]


class Verdict(str, Enum):
    REALISTIC   = "Realistic"
    CHALLENGING = "Challenging"
    UNREALISTIC = "Unrealistic"
    DANGER      = "Danger"


class BucketKind(str, Enum):
    BALANCE  = "balance"
    GOAL     = "goal"
    STRATEGY = "strategy"
    SAVINGS  = "savings"
    EXPENSE  = "expense"
    SUBSIDY  = "subsidy"


class FinancialSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    income: float = 0.0
    rent: float = 0.0
    utilities: float = 0.0
    transport_cost: float = 0.0
    food: float = 0.0
    debt: float = 0.0               # monthly debt repayments
    subscriptions: float = 0.0
    emergency_savings: float = 0.0  # buffer pool, summed with savings
    savings: float = 0.0

    @field_validator("*", mode="before")
    @classmethod
    def clamp(cls, value):
        return _non_negative(value)

    @property
    def total_expenses(self) -> float:
        return (self.rent + self.utilities + self.transport_cost
                + self.food + self.debt + self.subscriptions)

    @property
    def total_buffer(self) -> float:
        return self.emergency_savings + self.savings


class Goal(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    target_amount: float
    deadline_months: int
    category: GoalCategory = GoalCategory.GENERAL
    created_at: int             # unix milliseconds, set by the store

    @field_validator("category", mode="before")
    @classmethod
    def default_category(cls, value):
        return GoalCategory.parse(value)


class GoalInput(BaseModel):
    """Add/edit payload. The store assigns id and created_at."""
    name: str
    target_amount: float
    deadline_months: int = 12
    category: GoalCategory = GoalCategory.GENERAL

    @field_validator("category", mode="before")
    @classmethod
    def default_category(cls, value):
        return GoalCategory.parse(value)


class Strategy(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    monthly_amount: float = 0.0

    @field_validator("monthly_amount", mode="before")
    @classmethod
    def clamp(cls, value):
        return _non_negative(value)


class LifestyleOptimization(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str               # free text, e.g. "Transportation", "food"
    monthly_savings: float = 0.0

    @field_validator("monthly_savings", mode="before")
    @classmethod
    def clamp(cls, value):
        return _non_negative(value)


class ClaimedSubsidy(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    monthly_benefit: float = 0.0

    @field_validator("monthly_benefit", mode="before")
    @classmethod
    def clamp(cls, value):
        return _non_negative(value)


class UserProfile(BaseModel):
    name: str
    finances: FinancialSnapshot = FinancialSnapshot()
    smart_goals: List[Goal] = []
    strategies: List[Strategy] = []
    lifestyle_optimizations: List[LifestyleOptimization] = []
    claimed_subsidies: List[ClaimedSubsidy] = []
    subsidies_enabled: bool = False


class StressResult(BaseModel):
    score: int
    band: RiskBand
    category: str               # display label of the band
    expense_sub: float
    buffer_sub: float
    debt_sub: float
    raw: float


class GoalAnalysis(BaseModel):
    goal_id: str
    required_monthly: float
    verdict: Verdict
    rationale: str


class Bucket(BaseModel):
    label: str
    amount: float
    kind: BucketKind
    description: Optional[str] = None
