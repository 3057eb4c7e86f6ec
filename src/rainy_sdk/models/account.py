"""Account and API key models."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class User(BaseModel):
    """The account behind the API key."""

    id: str = Field(description="Unique ID of the user")
    user_id: str = Field(description="User identifier string")
    plan_name: str = Field(description="Name of the subscription plan")
    current_credits: float = Field(description="Current credit balance")
    credits_used_this_month: float = Field(description="Credits used in the current month")
    credits_reset_date: datetime = Field(description="When the monthly credits reset")
    is_active: bool = Field(description="Whether the account is active")
    created_at: datetime = Field(description="When the account was created")


class ApiKey(BaseModel):
    """An API key. ``key`` is only unmasked in the response that creates it."""

    id: str = Field(description="Unique ID of the key")
    key: str = Field(description="The key string, masked except on creation")
    owner_id: str = Field(description="ID of the owning user")
    is_active: bool = Field(description="Whether the key is active")
    created_at: datetime = Field(description="When the key was created")
    expires_at: Optional[datetime] = Field(None, description="Expiration, if any")
    description: Optional[str] = Field(None, description="What the key is used for")
    last_used_at: Optional[datetime] = Field(None, description="Last time the key was used")
