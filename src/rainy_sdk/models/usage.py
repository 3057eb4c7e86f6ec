"""Usage and credit models."""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class TransactionType(str, Enum):
    """Kind of credit transaction."""

    USAGE = "usage"
    RESET = "reset"
    PURCHASE = "purchase"
    REFUND = "refund"


class CreditTransaction(BaseModel):
    """A single credit transaction."""

    id: str
    transaction_type: TransactionType
    credits_amount: float
    credits_balance_after: float
    provider: Optional[str] = None
    model: Optional[str] = None
    description: str
    created_at: datetime


class DailyUsage(BaseModel):
    """Usage totals for one day."""

    date: str
    credits_used: float
    requests: int
    tokens: int


class UsageStats(BaseModel):
    """Usage statistics over a period."""

    period_days: int = Field(description="Number of days covered")
    daily_usage: List[DailyUsage] = Field(default_factory=list)
    recent_transactions: List[CreditTransaction] = Field(default_factory=list)
    total_requests: int
    total_tokens: int


class CreditInfo(BaseModel):
    """Credit balance and cost estimates."""

    current_credits: float = Field(description="Credits currently available")
    estimated_cost: float = Field(description="Estimated cost over the period")
    credits_after_request: float = Field(description="Estimated balance afterwards")
    reset_date: str = Field(description="When the balance is next reset")


class CreditInfoEnvelope(BaseModel):
    """Wire wrapper of :class:`CreditInfo`."""

    credits: CreditInfo
