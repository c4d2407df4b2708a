"""Rally management and discovery endpoints."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from ...core import get_session
from ...models import Member
from ...services import fields
from ...services import rallies as rally_service
from ...services.rally_search import search_rallies
from ..deps import get_current_member, get_optional_member

router = APIRouter(tags=["rallies"])


@router.post("/rally")
def create_rally(
    body: Dict[str, Any],
    member: Member = Depends(get_current_member),
    session: Session = Depends(get_session),
):
    """Create a rally; the caller becomes its organizer."""

    rally = rally_service.create_rally(session, member, body)
    viewer = rally_service.viewer_participant(session, member, rally)
    return rally_service.rally_to_dict(rally, viewer)


@router.patch("/rally/{rally_id}")
def update_rally(
    rally_id: int,
    body: Dict[str, Any],
    member: Member = Depends(get_current_member),
    session: Session = Depends(get_session),
):
    rally = rally_service.update_rally(session, member, rally_id, body)
    viewer = rally_service.viewer_participant(session, member, rally)
    return rally_service.rally_to_dict(rally, viewer)


@router.get("/rally/{rally_id}")
def get_rally(
    rally_id: int,
    member: Optional[Member] = Depends(get_optional_member),
    session: Session = Depends(get_session),
):
    rally = rally_service.get_rally(session, member, rally_id)
    viewer = rally_service.viewer_participant(session, member, rally)
    return rally_service.rally_to_dict(rally, viewer)


@router.get("/rallies")
def list_rallies(
    name: Optional[str] = None,
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    country: Optional[str] = None,
    region: Optional[str] = None,
    near_lat: Optional[float] = None,
    near_lng: Optional[float] = None,
    radius_miles: Optional[float] = None,
    page: int = 0,
    size: Optional[int] = None,
    all: bool = False,
    member: Optional[Member] = Depends(get_optional_member),
    session: Session = Depends(get_session),
):
    """Search rallies visible to the caller, ordered by start date."""

    result = search_rallies(
        session,
        member,
        name=name,
        date_from=date_from,
        date_to=date_to,
        country=country,
        region=region,
        near_lat=near_lat,
        near_lng=near_lng,
        radius_miles=radius_miles,
        page=page,
        size=size,
        unpaged=all,
    )
    return {
        "items": [rally_service.rally_to_dict(rally) for rally in result.items],
        "page": result.page,
        "size": result.size,
        "total": result.total,
        "total_pages": result.total_pages,
    }


@router.post("/rally/{rally_id}/register")
def register_for_rally(
    rally_id: int,
    member: Member = Depends(get_current_member),
    session: Session = Depends(get_session),
):
    participant = rally_service.register_rider(session, member, rally_id)
    return rally_service.participant_to_dict(participant)


@router.put("/rally/{rally_id}/promote")
def promote_participant(
    rally_id: int,
    body: Dict[str, Any],
    member: Member = Depends(get_current_member),
    session: Session = Depends(get_session),
):
    """Promote a participant to AIDE or ORGANIZER."""

    participant = rally_service.promote_participant(
        session,
        member,
        rally_id,
        fields.integer(body, "target_member_id"),
        body.get("new_role"),
    )
    return rally_service.participant_to_dict(participant)


@router.get("/rally/{rally_id}/participants")
def list_participants(
    rally_id: int,
    member: Optional[Member] = Depends(get_optional_member),
    session: Session = Depends(get_session),
):
    participants = rally_service.list_participants(session, member, rally_id)
    return [rally_service.participant_to_dict(p) for p in participants]


__all__ = ["router"]
