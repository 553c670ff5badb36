from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.db.database import get_db
from app.api.deps import get_current_user_id
from app.services.expense_service import get_balance_summary, get_pair_balance
from app.services.group_service import get_group_or_404
from app.schemas.expense_schema import BalanceSummary, MemberBalance

router = APIRouter(prefix="/balances", tags=["balances"])


@router.get("/groups/{group_slug}", response_model=BalanceSummary)
def get_my_balance_summary(
    group_slug: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """What the caller owes, is owed, and stands at with each member"""
    group = get_group_or_404(db, group_slug)
    return get_balance_summary(db, group, user_id)


@router.get("/groups/{group_slug}/pair/{other_user_id}", response_model=MemberBalance)
def get_pair_balance_details(
    group_slug: str,
    other_user_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Net balance between the caller and one other member"""
    group = get_group_or_404(db, group_slug)
    return get_pair_balance(db, group, user_id, other_user_id)
