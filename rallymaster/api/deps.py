"""Request-scoped dependencies shared by the routers."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request
from sqlmodel import Session

from ..core import get_session
from ..models import Member


def _session_member(request: Request, session: Session) -> Optional[Member]:
    uid = request.session.get("uid")
    if uid is None:
        return None
    try:
        member = session.get(Member, int(uid))
    except (TypeError, ValueError):
        member = None
    if member is None:
        request.session.clear()
    return member


def get_current_member(
    request: Request, session: Session = Depends(get_session)
) -> Member:
    """The signed-in member, or 401."""

    member = _session_member(request, session)
    if member is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return member


def get_optional_member(
    request: Request, session: Session = Depends(get_session)
) -> Optional[Member]:
    """The signed-in member if any; anonymous callers get ``None``."""

    return _session_member(request, session)


__all__ = ["get_current_member", "get_optional_member"]
