import uuid
from datetime import datetime, timezone
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from sqlalchemy import Column, String, DateTime, DECIMAL, Boolean, Enum, ForeignKey, UniqueConstraint
from app.db.database import Base
from app.utils.categories import ExpenseCategory


class Expense(Base):
    __tablename__ = "group_expenses"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), unique=True, nullable=False)
    group_id = Column(String, ForeignKey("travel_groups.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    category = Column(Enum(ExpenseCategory), nullable=False, default=ExpenseCategory.food)
    amount = Column(DECIMAL(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="INR")
    paid_by = Column(String, nullable=False, index=True)  # Reference to a group member's user id
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), server_default=func.now(), nullable=False, index=True)

    shares = relationship(
        "ExpenseShare",
        back_populates="expense",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ExpenseShare.user_id",
    )


class ExpenseShare(Base):
    __tablename__ = "expense_shares"
    __table_args__ = (UniqueConstraint("expense_id", "user_id", name="uq_expense_share_user"),)

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), unique=True, nullable=False)
    expense_id = Column(String, ForeignKey("group_expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)  # Reference to a group member's user id
    amount = Column(DECIMAL(10, 2), nullable=False)
    is_paid = Column(Boolean, nullable=False, default=False)

    expense = relationship("Expense", back_populates="shares")
    status_changes = relationship(
        "ShareStatusChange",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ShareStatusChange.changed_at",
    )


class ShareStatusChange(Base):
    """Append-only record of a share's paid flag being flipped"""
    __tablename__ = "share_status_changes"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), unique=True, nullable=False)
    share_id = Column(String, ForeignKey("expense_shares.id", ondelete="CASCADE"), nullable=False, index=True)
    changed_by = Column(String, nullable=False)
    from_paid = Column(Boolean, nullable=False)
    to_paid = Column(Boolean, nullable=False)
    changed_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False, index=True)
