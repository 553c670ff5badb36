from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from decimal import Decimal
from enum import Enum
from app.utils.categories import ExpenseCategory, DEFAULT_CATEGORY


class SplitMethod(str, Enum):
    equal = "equal"
    custom = "custom"


class ExpenseBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    category: ExpenseCategory = DEFAULT_CATEGORY
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, value):
        return value.strip() if isinstance(value, str) else value


class ExpenseCreate(ExpenseBase):
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    paid_by: Optional[str] = None  # Defaults to the caller
    split_method: SplitMethod = SplitMethod.equal
    # user_id -> amount; values are validated by the split policy, not here
    custom_shares: Optional[Dict[str, Any]] = None

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, value: Optional[str]) -> Optional[str]:
        return value.upper() if value else value

    @model_validator(mode="after")
    def check_custom_shares(self):
        if self.split_method == SplitMethod.custom and not self.custom_shares:
            raise ValueError("custom_shares is required when split_method is 'custom'")
        return self


class ExpenseUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[ExpenseCategory] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, value: Optional[str]) -> Optional[str]:
        return value.upper() if value else value


class ExpenseOut(ExpenseBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    group_id: str
    currency: str
    paid_by: str
    created_at: datetime


class ExpenseShareOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    expense_id: str
    user_id: str
    amount: Decimal
    is_paid: bool


class ExpenseWithShares(ExpenseOut):
    category_icon: str = ""
    currency_symbol: str = ""
    shares: List[ExpenseShareOut] = []


class SharePaidUpdate(BaseModel):
    is_paid: bool


class ShareStatusChangeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    share_id: str
    changed_by: str
    from_paid: bool
    to_paid: bool
    changed_at: datetime


class MemberBalance(BaseModel):
    user_id: str
    balance: Decimal  # > 0: they owe the viewer, < 0: the viewer owes them
    label: str
    display: str


class BalanceSummary(BaseModel):
    user_id: str
    currency: str
    currency_symbol: str
    total_owed_by: Decimal  # what the viewer still owes others
    total_owed_to: Decimal  # what others still owe the viewer
    members: List[MemberBalance] = []
