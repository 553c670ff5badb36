import re
import uuid
from typing import Optional
from sqlalchemy.orm import Session
from app.models.groups import TravelGroup

MAX_SLUG_LENGTH = 100


def _fallback_slug(length: int = 8) -> str:
    return f"trip-{uuid.uuid4().hex[:length]}"


def generate_slug(name: str, destination: Optional[str] = None) -> str:
    """
    Build a URL-friendly slug from a travel group's name and destination.

    "Goa Getaway" + "Goa, India" -> "goa-getaway-goa-india". The destination
    is skipped when the name already contains it.
    """
    parts = [name or ""]
    if destination and destination.strip().lower() not in (name or "").lower():
        parts.append(destination)

    slug = " ".join(parts).lower().strip()
    slug = re.sub(r'[\s_,]+', '-', slug)
    slug = re.sub(r'[^\w\-]', '', slug)
    slug = re.sub(r'-+', '-', slug).strip('-')

    if not slug:
        return _fallback_slug()

    if len(slug) > MAX_SLUG_LENGTH:
        slug = slug[:MAX_SLUG_LENGTH].rstrip('-')

    return slug


def make_slug_unique(slug: str, db: Session, exclude_group_id: Optional[str] = None) -> str:
    """Append -2, -3, ... until no other travel group uses the slug"""
    candidate = slug
    suffix = 1

    while True:
        query = db.query(TravelGroup.id).filter(TravelGroup.slug == candidate)
        if exclude_group_id:
            query = query.filter(TravelGroup.id != exclude_group_id)
        if query.first() is None:
            return candidate

        suffix += 1
        candidate = f"{slug}-{suffix}"


def create_group_slug(name: str, db: Session, destination: Optional[str] = None,
                      exclude_group_id: Optional[str] = None) -> str:
    slug = make_slug_unique(generate_slug(name, destination), db, exclude_group_id)
    if len(slug) < 3:
        slug = make_slug_unique(_fallback_slug(12), db, exclude_group_id)
    return slug
