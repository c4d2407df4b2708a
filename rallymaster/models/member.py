"""Database model for rally members."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow


class Member(SQLModel, table=True):
    """Account vouched for by the credential issuer."""

    id: Optional[int] = ORMField(default=None, primary_key=True)
    email: str = ORMField(index=True, unique=True)
    name: Optional[str] = None
    created_at: datetime = ORMField(default_factory=utcnow)


__all__ = ["Member"]
