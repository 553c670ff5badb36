import enum
import uuid
from sqlalchemy.sql import func
from sqlalchemy import Column, String, DateTime, Enum, ForeignKey, UniqueConstraint
from app.db.database import Base


class MemberRole(str, enum.Enum):
    organizer = "organizer"
    member = "member"


class TravelGroup(Base):
    __tablename__ = "travel_groups"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), unique=True, nullable=False)
    name = Column(String(100), nullable=False, index=True)
    slug = Column(String(120), nullable=False, unique=True, index=True)  # URL-friendly identifier
    destination = Column(String(200), nullable=True)
    created_by = Column(String, nullable=False)  # Reference to auth provider (no FK constraint)
    default_currency = Column(String(3), nullable=False, default="INR")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)


class GroupMember(Base):
    __tablename__ = "group_members"
    __table_args__ = (UniqueConstraint("group_id", "user_id", name="uq_group_member"),)

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), unique=True, nullable=False)
    group_id = Column(String, ForeignKey("travel_groups.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)  # Reference to auth provider
    display_name = Column(String(100), nullable=True)
    avatar_url = Column(String, nullable=True)
    role = Column(Enum(MemberRole), nullable=False, default=MemberRole.member)
    joined_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
