"""Member accounts."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlmodel import Session, func, select

from ..core.errors import ValidationError
from ..models import Member

logger = logging.getLogger(__name__)


def member_to_dict(member: Member) -> Dict[str, Any]:
    return {
        "id": member.id,
        "email": member.email,
        "name": member.name or member.email.split("@")[0],
        "created_at": member.created_at.isoformat() if member.created_at else None,
    }


def login_or_register(session: Session, email: Optional[str], name: Optional[str] = None) -> Member:
    """Return the member for ``email``, creating it on first sight."""

    normalized = (email or "").strip().lower()
    if not normalized or "@" not in normalized:
        raise ValidationError("A valid email is required")
    name = (name or "").strip() or None
    if name and len(name) > 40:
        raise ValidationError("Name must be 40 characters or less")

    member = session.exec(
        select(Member).where(func.lower(Member.email) == normalized)
    ).first()
    if member:
        if name and member.name != name:
            member.name = name
            session.add(member)
            session.commit()
            session.refresh(member)
        return member

    member = Member(email=normalized, name=name)
    session.add(member)
    session.commit()
    session.refresh(member)
    logger.info("Registered member %s", member.id)
    return member


__all__ = ["login_or_register", "member_to_dict"]
