import logging
from sqlalchemy.orm import Session
from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from fastapi import HTTPException
from typing import List, Optional
from app.models.groups import TravelGroup, GroupMember, MemberRole
from app.schemas.group_schema import GroupCreate, GroupMemberCreate
from app.utils.slug_utils import create_group_slug

logger = logging.getLogger(__name__)


def create_group(db: Session, group_data: GroupCreate, created_by: str) -> TravelGroup:
    """Create a travel group; the creator joins as organizer"""
    slug = create_group_slug(group_data.name, db, group_data.destination)

    group = TravelGroup(
        name=group_data.name,
        slug=slug,
        destination=group_data.destination,
        created_by=created_by,
        default_currency=group_data.default_currency
    )
    db.add(group)
    db.flush()

    db.add(GroupMember(
        group_id=group.id,
        user_id=created_by,
        display_name=group_data.display_name,
        avatar_url=group_data.avatar_url,
        role=MemberRole.organizer
    ))
    db.commit()
    db.refresh(group)

    logger.info(f"Created travel group {group.slug} for organizer {created_by}")
    return group


def get_group(db: Session, group_id: str) -> Optional[TravelGroup]:
    """Get a group by ID"""
    return db.query(TravelGroup).filter(TravelGroup.id == group_id).first()


def get_group_by_slug(db: Session, slug: str) -> Optional[TravelGroup]:
    """Get a group by slug"""
    return db.query(TravelGroup).filter(TravelGroup.slug == slug).first()


def get_group_or_404(db: Session, slug: str) -> TravelGroup:
    group = get_group_by_slug(db, slug)
    if not group:
        raise HTTPException(status_code=404, detail="Group not found")
    return group


def get_user_groups(db: Session, user_id: str) -> List[TravelGroup]:
    """Get all groups the user belongs to"""
    return db.query(TravelGroup)\
        .join(GroupMember, GroupMember.group_id == TravelGroup.id)\
        .filter(GroupMember.user_id == user_id)\
        .order_by(TravelGroup.created_at.desc())\
        .all()


def add_member_to_group(db: Session, group_id: str, member_data: GroupMemberCreate) -> GroupMember:
    """Add a member to a group"""
    if get_group_member(db, group_id, member_data.user_id):
        raise HTTPException(status_code=400, detail="User is already a member of this group")

    member = GroupMember(
        group_id=group_id,
        user_id=member_data.user_id,
        display_name=member_data.display_name,
        avatar_url=member_data.avatar_url,
        role=member_data.role
    )
    db.add(member)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="User is already a member of this group")
    db.refresh(member)

    logger.info(f"Added {member.user_id} to group {group_id} as {member.role.value}")
    return member


def add_member_by_organizer(db: Session, group_id: str, member_data: GroupMemberCreate, organizer_id: str) -> GroupMember:
    """Add a member on behalf of an organizer"""
    if not is_group_organizer(db, group_id, organizer_id):
        raise HTTPException(status_code=403, detail="Only group organizers can add members")
    return add_member_to_group(db, group_id, member_data)


def remove_member_from_group(db: Session, group_id: str, user_id: str, remover_id: str):
    """Remove a member from a group"""
    member = get_group_member(db, group_id, user_id)
    if not member:
        raise HTTPException(status_code=404, detail="Member not found")

    # Organizers can remove anyone, members can only leave
    if user_id != remover_id and not is_group_organizer(db, group_id, remover_id):
        raise HTTPException(status_code=403, detail="Only group organizers can remove other members")

    if member.role == MemberRole.organizer and count_group_organizers(db, group_id) <= 1:
        raise HTTPException(status_code=400, detail="The last organizer cannot leave the group")

    db.delete(member)
    db.commit()
    logger.info(f"Removed {user_id} from group {group_id} (by {remover_id})")


def get_group_member(db: Session, group_id: str, user_id: str) -> Optional[GroupMember]:
    return db.query(GroupMember).filter(
        and_(GroupMember.group_id == group_id, GroupMember.user_id == user_id)
    ).first()


def is_group_organizer(db: Session, group_id: str, user_id: str) -> bool:
    """Check if user is an organizer of the group"""
    member = get_group_member(db, group_id, user_id)
    return member is not None and member.role == MemberRole.organizer


def count_group_organizers(db: Session, group_id: str) -> int:
    return db.query(GroupMember).filter(
        and_(GroupMember.group_id == group_id, GroupMember.role == MemberRole.organizer)
    ).count()


def is_group_member(db: Session, group_id: str, user_id: str) -> bool:
    """Check if user is member of the group"""
    return get_group_member(db, group_id, user_id) is not None


def require_group_member(db: Session, group_id: str, user_id: str):
    if not is_group_member(db, group_id, user_id):
        raise HTTPException(status_code=403, detail="You are not a member of this group")


def get_group_members(db: Session, group_id: str) -> List[GroupMember]:
    """Get all members of a group, oldest first"""
    return db.query(GroupMember)\
        .filter(GroupMember.group_id == group_id)\
        .order_by(GroupMember.joined_at, GroupMember.user_id)\
        .all()
