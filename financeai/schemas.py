from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from financeai.ai.prompts import AdviceType

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


class FinancialProfileIn(BaseModel):
    monthly_income: Optional[float] = Field(default=None, ge=0)
    monthly_expenses: Optional[float] = Field(default=None, ge=0)
    savings_balance: Optional[float] = Field(default=None, ge=0)
    debt_amount: Optional[float] = Field(default=None, ge=0)
    credit_score: Optional[int] = Field(default=None, ge=300, le=900)


class UserProfileIn(BaseModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    occupation: Optional[str] = None
    phone: Optional[str] = None


class BudgetCategoryCreate(BaseModel):
    name: str = Field(min_length=1)
    allocated_amount: float = Field(gt=0)
    spent_amount: float = Field(default=0, ge=0)
    month_year: str = Field(pattern=MONTH_PATTERN)


class BudgetCategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    allocated_amount: Optional[float] = Field(default=None, gt=0)
    spent_amount: Optional[float] = Field(default=None, ge=0)
    month_year: Optional[str] = Field(default=None, pattern=MONTH_PATTERN)


class GoalCreate(BaseModel):
    title: str = Field(min_length=1)
    target_amount: float = Field(gt=0)
    current_amount: float = Field(default=0, ge=0)
    target_date: Optional[date] = None
    category: Optional[str] = None


class GoalUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    target_amount: Optional[float] = Field(default=None, gt=0)
    current_amount: Optional[float] = Field(default=None, ge=0)
    target_date: Optional[date] = None
    category: Optional[str] = None


class GoalProgress(BaseModel):
    current_amount: float = Field(ge=0)


DebtType = Literal["debt", "emi", "subscription"]
Frequency = Literal["weekly", "monthly", "yearly", "one-time"]


class DebtCreate(BaseModel):
    name: str = Field(min_length=1)
    type: DebtType
    amount: float = Field(gt=0)
    due_date: Optional[date] = None
    frequency: Frequency = "monthly"


class DebtUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    type: Optional[DebtType] = None
    amount: Optional[float] = Field(default=None, gt=0)
    due_date: Optional[date] = None
    frequency: Optional[Frequency] = None
    status: Optional[Literal["active", "paid"]] = None


class HistoryTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class AdviceIn(BaseModel):
    message: str = Field(min_length=1)
    type: AdviceType = AdviceType.CHAT
    context: Optional[Dict[str, Any]] = None
    history: List[HistoryTurn] = []


class FunctionAdviceIn(BaseModel):
    """Wire shape of the financial-ai-advisor function"""
    model_config = ConfigDict(populate_by_name=True)

    message: str = ""
    type: str = AdviceType.CHAT.value
    user_id: Optional[str] = Field(default=None, alias="userId")
    context: Optional[Dict[str, Any]] = None
    history: Optional[List[Dict[str, Any]]] = None


class PurchaseAnalyzeIn(BaseModel):
    item_name: str = Field(min_length=1)
    item_price: float = Field(gt=0)


class PayoffIn(BaseModel):
    principal: float = Field(gt=0)
    annual_rate: float = Field(ge=0)
    monthly_payment: float = Field(gt=0)


class GoalSimulationIn(BaseModel):
    goal_amount: float = Field(gt=0)
    monthly_saving: float = Field(gt=0)


class SubscriptionSimulationIn(BaseModel):
    monthly_cut: float = Field(gt=0)
    months: int = Field(gt=0)


class GrowthIn(BaseModel):
    principal: float = Field(ge=0)
    annual_rate: float = Field(ge=0)
    years: float = Field(gt=0)
    monthly_contribution: float = Field(default=0, ge=0)
    compounds_per_year: int = Field(default=12, gt=0)


class ScenarioIn(BaseModel):
    extra_savings: float = Field(default=5000, ge=0)
    extra_debt_payment: float = Field(default=2000, ge=0)
    timeframe_months: int = Field(default=12, gt=0)
    goal_amount: float = Field(default=50000, gt=0)
