"""Scoring endpoints: odometers, claims and confirmations."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlmodel import Session

from ...core import get_session
from ...models import Member
from ...services import fields
from ...services import scoring as scoring_service
from ...services.rallies import participant_to_dict
from ..deps import get_current_member

router = APIRouter(tags=["scoring"])


@router.put("/rally/{rally_id}/odometer/start")
def update_start_odometer(
    rally_id: int,
    body: Dict[str, Any],
    member: Member = Depends(get_current_member),
    session: Session = Depends(get_session),
):
    participant = scoring_service.set_start_odometer(
        session,
        member,
        rally_id,
        fields.integer(body, "rider_id"),
        fields.integer(body, "odometer"),
    )
    return participant_to_dict(participant)


@router.put("/rally/{rally_id}/odometer/end")
def update_end_odometer(
    rally_id: int,
    body: Dict[str, Any],
    member: Member = Depends(get_current_member),
    session: Session = Depends(get_session),
):
    participant = scoring_service.set_end_odometer(
        session,
        member,
        rally_id,
        fields.integer(body, "rider_id"),
        fields.integer(body, "odometer"),
    )
    return participant_to_dict(participant)


@router.post("/rally/{rally_id}/earned-bonus-point")
def create_earned_bonus_point(
    rally_id: int,
    body: Dict[str, Any],
    member: Member = Depends(get_current_member),
    session: Session = Depends(get_session),
):
    """Claim a bonus point for yourself, or for a rider you score."""

    earned = scoring_service.submit_earned_bonus_point(
        session,
        member,
        rally_id,
        bonus_point_id=fields.integer(body, "bonus_point_id"),
        rider_id=fields.integer(body, "rider_id"),
        odometer=fields.integer(body, "odometer"),
        earned_at=fields.iso_datetime(body, "earned_at"),
        confirmed=fields.boolean(body, "confirmed"),
    )
    return scoring_service.earned_bonus_point_to_dict(earned)


@router.put("/earned-bonus-point/{earned_id}/confirm")
def confirm_earned_bonus_point(
    earned_id: int,
    body: Dict[str, Any],
    member: Member = Depends(get_current_member),
    session: Session = Depends(get_session),
):
    earned = scoring_service.confirm_earned_bonus_point(
        session, member, earned_id, fields.boolean(body, "confirmed")
    )
    return scoring_service.earned_bonus_point_to_dict(earned)


@router.post("/rally/{rally_id}/earned-combination")
def create_earned_combination(
    rally_id: int,
    body: Dict[str, Any],
    member: Member = Depends(get_current_member),
    session: Session = Depends(get_session),
):
    earned = scoring_service.submit_earned_combination(
        session,
        member,
        rally_id,
        combination_id=fields.integer(body, "combination_id"),
        rider_id=fields.integer(body, "rider_id"),
        confirmed=fields.boolean(body, "confirmed"),
    )
    return scoring_service.earned_combination_to_dict(earned)


@router.put("/earned-combination/{earned_id}/confirm")
def confirm_earned_combination(
    earned_id: int,
    body: Dict[str, Any],
    member: Member = Depends(get_current_member),
    session: Session = Depends(get_session),
):
    earned = scoring_service.confirm_earned_combination(
        session, member, earned_id, fields.boolean(body, "confirmed")
    )
    return scoring_service.earned_combination_to_dict(earned)


@router.get("/rally-participant/{rally_participant_id}/earned-bonus-points")
def list_earned_bonus_points(
    rally_participant_id: int,
    member: Member = Depends(get_current_member),
    session: Session = Depends(get_session),
):
    return [
        scoring_service.earned_bonus_point_to_dict(earned)
        for earned in scoring_service.list_earned_bonus_points(
            session, member, rally_participant_id
        )
    ]


@router.get("/rally-participant/{rally_participant_id}/earned-combinations")
def list_earned_combinations(
    rally_participant_id: int,
    member: Member = Depends(get_current_member),
    session: Session = Depends(get_session),
):
    return [
        scoring_service.earned_combination_to_dict(earned)
        for earned in scoring_service.list_earned_combinations(
            session, member, rally_participant_id
        )
    ]


__all__ = ["router"]
