"""Member login and profile endpoints.

Credential issuance is handled elsewhere; these routes only bind a member
id to the signed session cookie.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlmodel import Session, col, select

from ...core import get_session
from ...models import Member, RallyParticipant
from ...services.members import login_or_register, member_to_dict
from ...services.rallies import participant_to_dict
from ..deps import get_current_member, get_optional_member

router = APIRouter(tags=["members"])


@router.post("/members/login")
def login_member(
    body: Dict[str, Any], request: Request, session: Session = Depends(get_session)
):
    """Login or register a member by email."""

    member = login_or_register(session, body.get("email"), body.get("name"))
    request.session["uid"] = member.id
    return member_to_dict(member)


@router.post("/members/logout")
def logout_member(request: Request):
    request.session.clear()
    return JSONResponse({"ok": True})


@router.get("/me")
def me(member: Optional[Member] = Depends(get_optional_member)):
    return {"member": member_to_dict(member) if member else None}


@router.get("/me/rallies")
def my_rallies(
    member: Member = Depends(get_current_member),
    session: Session = Depends(get_session),
) -> List[Dict[str, Any]]:
    """Every roster row the current member holds."""

    rows = session.exec(
        select(RallyParticipant)
        .where(RallyParticipant.member_id == member.id)
        .order_by(col(RallyParticipant.id).asc())
    ).all()
    return [participant_to_dict(row) for row in rows]


__all__ = ["router"]
