from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from app.db.database import get_db
from app.api.deps import get_current_user_id
from app.models.expenses import Expense
from app.services.expense_service import (
    create_expense, get_expense_for_member, get_group_expenses, update_expense,
    delete_expense, set_share_paid, get_share_history, get_expense_shares
)
from app.services.group_service import get_group_or_404, require_group_member
from app.schemas.expense_schema import (
    ExpenseCreate, ExpenseUpdate, ExpenseOut, ExpenseWithShares, ExpenseShareOut,
    SharePaidUpdate, ShareStatusChangeOut
)
from app.utils.currency import currency_symbol

router = APIRouter(prefix="/expenses", tags=["expenses"])


def to_expense_with_shares(expense: Expense) -> ExpenseWithShares:
    return ExpenseWithShares(
        id=expense.id,
        group_id=expense.group_id,
        title=expense.title,
        category=expense.category,
        category_icon=expense.category.icon,
        amount=expense.amount,
        currency=expense.currency,
        currency_symbol=currency_symbol(expense.currency),
        paid_by=expense.paid_by,
        created_at=expense.created_at,
        shares=[ExpenseShareOut.model_validate(share) for share in expense.shares]
    )


@router.post("/groups/{group_slug}", response_model=ExpenseWithShares)
def create_new_expense(
    group_slug: str,
    expense_data: ExpenseCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Create a new expense, splitting it equally or by custom shares"""
    group = get_group_or_404(db, group_slug)
    return to_expense_with_shares(create_expense(db, group.id, expense_data, user_id))


@router.get("/groups/{group_slug}", response_model=List[ExpenseWithShares])
def get_group_expenses_list(
    group_slug: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get all expenses for a group, newest first"""
    group = get_group_or_404(db, group_slug)
    require_group_member(db, group.id, user_id)

    return [to_expense_with_shares(expense) for expense in get_group_expenses(db, group.id)]


@router.get("/{expense_id}", response_model=ExpenseWithShares)
def get_expense_details(
    expense_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get expense details with shares"""
    return to_expense_with_shares(get_expense_for_member(db, expense_id, user_id))


@router.get("/{expense_id}/shares", response_model=List[ExpenseShareOut])
def get_expense_shares_list(
    expense_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get the shares of an expense"""
    get_expense_for_member(db, expense_id, user_id)
    return get_expense_shares(db, expense_id)


@router.patch("/{expense_id}", response_model=ExpenseOut)
def update_existing_expense(
    expense_id: str,
    update_data: ExpenseUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Update an expense (payer or organizer only)"""
    return update_expense(db, expense_id, update_data, user_id)


@router.delete("/{expense_id}")
def delete_existing_expense(
    expense_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Delete an expense (payer or organizer only)"""
    delete_expense(db, expense_id, user_id)
    return {"message": "Expense deleted successfully"}


@router.patch("/shares/{share_id}/paid", response_model=ExpenseShareOut)
def update_share_paid(
    share_id: str,
    paid_data: SharePaidUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Mark a share as paid or unpaid (ower or payer only)"""
    return set_share_paid(db, share_id, paid_data.is_paid, user_id)


@router.get("/shares/{share_id}/history", response_model=List[ShareStatusChangeOut])
def get_share_status_history(
    share_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get the paid/unpaid transitions of a share"""
    return get_share_history(db, share_id, user_id)
