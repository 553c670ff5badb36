import logging
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import SQLAlchemyError
from fastapi import HTTPException
from typing import List, Optional, Dict, Tuple
from decimal import Decimal
from app.models.expenses import Expense, ExpenseShare, ShareStatusChange
from app.models.groups import TravelGroup
from app.schemas.expense_schema import (
    ExpenseCreate, ExpenseUpdate, SplitMethod, BalanceSummary, MemberBalance
)
from app.services.group_service import (
    get_group, get_group_members, is_group_member, is_group_organizer, require_group_member
)
from app.utils.currency import currency_symbol, format_amount
from app.utils.ledger import (
    LedgerExpense, snapshot_expenses, total_owed_by, total_owed_to,
    net_balance, balance_label, pairwise_balances, ledger_participants
)
from app.utils.splits import SplitValidationError, equal_split, validate_custom_split

logger = logging.getLogger(__name__)


def build_shares(db: Session, group_id: str, expense_data: ExpenseCreate) -> Dict[str, Decimal]:
    """Apply the split policy; raises HTTPException(400) before anything is written"""
    member_ids = [member.user_id for member in get_group_members(db, group_id)]

    try:
        if expense_data.split_method == SplitMethod.equal:
            return equal_split(expense_data.amount, member_ids)

        shares = validate_custom_split(expense_data.amount, expense_data.custom_shares or {})
    except SplitValidationError as e:
        logger.info(f"Rejected expense split for group {group_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    outsiders = sorted(set(shares) - set(member_ids))
    if outsiders:
        raise HTTPException(status_code=400, detail=f"User {outsiders[0]} is not a member of this group")
    return shares


def create_expense(db: Session, group_id: str, expense_data: ExpenseCreate, created_by: str) -> Expense:
    """
    Create an expense together with its full set of shares.

    The expense row and its share rows are committed in a single
    transaction: if any insert fails everything is rolled back, so an
    expense never exists without its shares.
    """
    group = get_group(db, group_id)
    if not group:
        raise HTTPException(status_code=404, detail="Group not found")

    if not is_group_member(db, group_id, created_by):
        raise HTTPException(status_code=403, detail="Only group members can create expenses")

    paid_by = expense_data.paid_by or created_by
    if not is_group_member(db, group_id, paid_by):
        raise HTTPException(status_code=400, detail=f"Payer {paid_by} is not a member of this group")

    shares = build_shares(db, group_id, expense_data)

    expense = Expense(
        group_id=group_id,
        title=expense_data.title,
        category=expense_data.category,
        amount=expense_data.amount,
        currency=expense_data.currency or group.default_currency,
        paid_by=paid_by
    )
    try:
        db.add(expense)
        db.flush()

        for user_id, amount in shares.items():
            db.add(ExpenseShare(
                expense_id=expense.id,
                user_id=user_id,
                amount=amount,
                is_paid=False
            ))

        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create expense in group {group_id}, rolled back: {e}")
        raise HTTPException(status_code=500, detail="Failed to create expense")

    db.refresh(expense)
    logger.info(
        f"Created expense {expense.id} ({expense.amount} {expense.currency}) in group {group_id} "
        f"paid by {paid_by} with {len(shares)} shares"
    )
    return expense


def get_expense(db: Session, expense_id: str) -> Optional[Expense]:
    """Get an expense by ID"""
    return db.query(Expense)\
        .options(selectinload(Expense.shares))\
        .filter(Expense.id == expense_id)\
        .first()


def get_expense_for_member(db: Session, expense_id: str, user_id: str) -> Expense:
    expense = get_expense(db, expense_id)
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    require_group_member(db, expense.group_id, user_id)
    return expense


def get_group_expenses(db: Session, group_id: str) -> List[Expense]:
    """Get all expenses for a group with their shares, newest first"""
    return db.query(Expense)\
        .options(selectinload(Expense.shares))\
        .filter(Expense.group_id == group_id)\
        .order_by(Expense.created_at.desc())\
        .all()


def get_expense_shares(db: Session, expense_id: str) -> List[ExpenseShare]:
    """Get all shares for an expense"""
    return db.query(ExpenseShare)\
        .filter(ExpenseShare.expense_id == expense_id)\
        .order_by(ExpenseShare.user_id)\
        .all()


def _require_payer_or_organizer(db: Session, expense: Expense, user_id: str, action: str):
    if expense.paid_by != user_id and not is_group_organizer(db, expense.group_id, user_id):
        raise HTTPException(status_code=403, detail=f"Only the payer or a group organizer can {action} this expense")


def update_expense(db: Session, expense_id: str, update_data: ExpenseUpdate, user_id: str) -> Expense:
    """Update an expense's title, category or currency (payer or organizer only)"""
    expense = get_expense(db, expense_id)
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")

    _require_payer_or_organizer(db, expense, user_id, "update")

    for field, value in update_data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(expense, field, value)

    db.commit()
    db.refresh(expense)
    return expense


def delete_expense(db: Session, expense_id: str, user_id: str):
    """Delete an expense and its shares (payer or organizer only)"""
    expense = get_expense(db, expense_id)
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")

    _require_payer_or_organizer(db, expense, user_id, "delete")

    db.delete(expense)
    db.commit()
    logger.info(f"Deleted expense {expense_id} (by {user_id})")


def set_share_paid(db: Session, share_id: str, is_paid: bool, user_id: str) -> ExpenseShare:
    """
    Mark a share as paid or unpaid.

    Allowed for the member who owes the share and for the payer of the
    parent expense. The flag can be flipped either way; each effective
    change is appended to the share's status log. Concurrent writes are not
    coordinated, the last one wins.
    """
    share = db.query(ExpenseShare).filter(ExpenseShare.id == share_id).first()
    if not share:
        raise HTTPException(status_code=404, detail="Expense share not found")

    if user_id not in (share.user_id, share.expense.paid_by):
        raise HTTPException(status_code=403, detail="Only the member who owes this share or the payer can update it")

    if share.is_paid == is_paid:
        return share

    previous = share.is_paid
    share.is_paid = is_paid
    db.add(ShareStatusChange(
        share_id=share.id,
        changed_by=user_id,
        from_paid=previous,
        to_paid=is_paid
    ))
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update share {share_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update expense share")

    db.refresh(share)
    logger.info(f"Share {share_id} marked {'paid' if is_paid else 'unpaid'} by {user_id}")
    return share


def get_share_history(db: Session, share_id: str, user_id: str) -> List[ShareStatusChange]:
    """Paid/unpaid transitions of a share, oldest first"""
    share = db.query(ExpenseShare).filter(ExpenseShare.id == share_id).first()
    if not share:
        raise HTTPException(status_code=404, detail="Expense share not found")
    require_group_member(db, share.expense.group_id, user_id)

    return db.query(ShareStatusChange)\
        .filter(ShareStatusChange.share_id == share_id)\
        .order_by(ShareStatusChange.changed_at)\
        .all()


def get_group_ledger(db: Session, group_id: str) -> Tuple[LedgerExpense, ...]:
    """Immutable snapshot of every expense in the group"""
    return snapshot_expenses(get_group_expenses(db, group_id))


def get_balance_summary(db: Session, group: TravelGroup, user_id: str) -> BalanceSummary:
    """
    What the user owes, is owed, and stands at with every other member.

    Members who left the group but still pay or hold shares in its
    expenses are listed after the current members.
    """
    require_group_member(db, group.id, user_id)

    ledger = get_group_ledger(db, group.id)
    member_ids = [member.user_id for member in get_group_members(db, group.id)]
    member_ids += [user for user in ledger_participants(ledger) if user not in member_ids]
    currency = group.default_currency

    members = [
        MemberBalance(
            user_id=member_id,
            balance=balance,
            label=balance_label(balance),
            display=format_amount(abs(balance), currency)
        )
        for member_id, balance in pairwise_balances(ledger, user_id, member_ids)
    ]

    return BalanceSummary(
        user_id=user_id,
        currency=currency,
        currency_symbol=currency_symbol(currency),
        total_owed_by=total_owed_by(ledger, user_id),
        total_owed_to=total_owed_to(ledger, user_id),
        members=members
    )


def get_pair_balance(db: Session, group: TravelGroup, user_id: str, other_user_id: str) -> MemberBalance:
    """Net balance between the caller and one current or former member"""
    require_group_member(db, group.id, user_id)

    ledger = get_group_ledger(db, group.id)
    if not is_group_member(db, group.id, other_user_id) and other_user_id not in ledger_participants(ledger):
        raise HTTPException(status_code=404, detail="Member not found")

    balance = net_balance(ledger, user_id, other_user_id)
    return MemberBalance(
        user_id=other_user_id,
        balance=balance,
        label=balance_label(balance),
        display=format_amount(abs(balance), group.default_currency)
    )
