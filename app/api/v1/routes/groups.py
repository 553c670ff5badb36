from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from app.db.database import get_db
from app.api.deps import get_current_user_id
from app.services.group_service import (
    create_group, get_group_or_404, get_user_groups, add_member_by_organizer,
    remove_member_from_group, get_group_members, require_group_member
)
from app.schemas.group_schema import (
    GroupCreate, GroupOut, GroupMemberCreate, GroupMemberOut, GroupWithMembers
)

router = APIRouter(prefix="/groups", tags=["groups"])


@router.post("/", response_model=GroupOut)
def create_new_group(
    group_data: GroupCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Create a new travel group"""
    return create_group(db, group_data, user_id)


@router.get("/", response_model=List[GroupOut])
def get_my_groups(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get all groups for current user"""
    return get_user_groups(db, user_id)


@router.get("/{group_slug}", response_model=GroupWithMembers)
def get_group_details(
    group_slug: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get group details with members"""
    group = get_group_or_404(db, group_slug)
    require_group_member(db, group.id, user_id)

    members = get_group_members(db, group.id)
    return GroupWithMembers(
        id=group.id,
        name=group.name,
        slug=group.slug,
        destination=group.destination,
        default_currency=group.default_currency,
        created_by=group.created_by,
        created_at=group.created_at,
        members=[GroupMemberOut.model_validate(member) for member in members]
    )


@router.post("/{group_slug}/members", response_model=GroupMemberOut)
def add_group_member(
    group_slug: str,
    member_data: GroupMemberCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Add a member to the group (organizers only)"""
    group = get_group_or_404(db, group_slug)
    return add_member_by_organizer(db, group.id, member_data, user_id)


@router.delete("/{group_slug}/members/{member_user_id}")
def remove_group_member(
    group_slug: str,
    member_user_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Remove a member (organizers) or leave the group (members)"""
    group = get_group_or_404(db, group_slug)
    remove_member_from_group(db, group.id, member_user_id, user_id)
    return {"message": "Member removed successfully"}
