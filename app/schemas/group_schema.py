from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime
from app.core.config import settings
from app.models.groups import MemberRole


class GroupBase(BaseModel):
    name: str = Field(..., max_length=100)
    destination: Optional[str] = Field(None, max_length=200)
    default_currency: str = Field(default_factory=lambda: settings.default_currency, min_length=3, max_length=3)

    @field_validator("default_currency")
    @classmethod
    def upper_currency(cls, value: str) -> str:
        return value.upper()


class GroupCreate(GroupBase):
    # Creator's profile as shown to other members
    display_name: Optional[str] = Field(None, max_length=100)
    avatar_url: Optional[str] = None


class GroupOut(GroupBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    slug: str
    created_by: str
    created_at: datetime


class GroupMemberBase(BaseModel):
    user_id: str
    display_name: Optional[str] = Field(None, max_length=100)
    avatar_url: Optional[str] = None
    role: MemberRole = MemberRole.member


class GroupMemberCreate(GroupMemberBase):
    pass


class GroupMemberOut(GroupMemberBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    group_id: str
    joined_at: datetime


class GroupWithMembers(GroupOut):
    model_config = ConfigDict(from_attributes=True)

    members: List[GroupMemberOut] = []
