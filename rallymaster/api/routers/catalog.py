"""Bonus point and combination endpoints."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session

from ...core import get_session
from ...models import Member
from ...services import rallies as rally_service
from ..deps import get_current_member, get_optional_member

router = APIRouter(tags=["catalog"])


@router.post("/rally/{rally_id}/bonuspoint")
def create_bonus_point(
    rally_id: int,
    body: Dict[str, Any],
    member: Member = Depends(get_current_member),
    session: Session = Depends(get_session),
):
    bonus_point = rally_service.create_bonus_point(session, member, rally_id, body)
    return rally_service.bonus_point_to_dict(bonus_point)


@router.get("/rally/{rally_id}/bonuspoints")
def list_bonus_points(
    rally_id: int,
    member: Optional[Member] = Depends(get_optional_member),
    session: Session = Depends(get_session),
):
    return [
        rally_service.bonus_point_to_dict(bp)
        for bp in rally_service.list_bonus_points(session, member, rally_id)
    ]


@router.get("/bonuspoint/{bonus_point_id}")
def get_bonus_point(
    bonus_point_id: int,
    member: Optional[Member] = Depends(get_optional_member),
    session: Session = Depends(get_session),
):
    bonus_point = rally_service.get_bonus_point(session, member, bonus_point_id)
    return rally_service.bonus_point_to_dict(bonus_point)


@router.patch("/bonuspoint/{bonus_point_id}")
def update_bonus_point(
    bonus_point_id: int,
    body: Dict[str, Any],
    member: Member = Depends(get_current_member),
    session: Session = Depends(get_session),
):
    bonus_point = rally_service.update_bonus_point(session, member, bonus_point_id, body)
    return rally_service.bonus_point_to_dict(bonus_point)


@router.delete("/bonuspoint/{bonus_point_id}")
def delete_bonus_point(
    bonus_point_id: int,
    member: Member = Depends(get_current_member),
    session: Session = Depends(get_session),
):
    rally_service.delete_bonus_point(session, member, bonus_point_id)
    return {"ok": True, "deleted_bonus_point": bonus_point_id}


@router.post("/rally/{rally_id}/combination")
def create_combination(
    rally_id: int,
    body: Dict[str, Any],
    member: Member = Depends(get_current_member),
    session: Session = Depends(get_session),
):
    """Create a combination, optionally with its bonus points inline."""

    combination = rally_service.create_combination(session, member, rally_id, body)
    points = rally_service.list_points_of(session, combination.id)
    return rally_service.combination_to_dict(combination, points)


@router.get("/rally/{rally_id}/combinations")
def list_combinations(
    rally_id: int,
    member: Optional[Member] = Depends(get_optional_member),
    session: Session = Depends(get_session),
):
    return [
        rally_service.combination_to_dict(
            combination, rally_service.list_points_of(session, combination.id)
        )
        for combination in rally_service.list_combinations(session, member, rally_id)
    ]


@router.get("/combination/{combination_id}")
def get_combination(
    combination_id: int,
    member: Optional[Member] = Depends(get_optional_member),
    session: Session = Depends(get_session),
):
    combination = rally_service.get_combination(session, member, combination_id)
    points = rally_service.list_points_of(session, combination.id)
    return rally_service.combination_to_dict(combination, points)


@router.patch("/combination/{combination_id}")
def update_combination(
    combination_id: int,
    body: Dict[str, Any],
    member: Member = Depends(get_current_member),
    session: Session = Depends(get_session),
):
    combination = rally_service.update_combination(session, member, combination_id, body)
    return rally_service.combination_to_dict(combination)


@router.delete("/combination/{combination_id}")
def delete_combination(
    combination_id: int,
    member: Member = Depends(get_current_member),
    session: Session = Depends(get_session),
):
    rally_service.delete_combination(session, member, combination_id)
    return {"ok": True, "deleted_combination": combination_id}


@router.post("/combination/{combination_id}/bonuspoint")
def add_combination_point(
    combination_id: int,
    body: Dict[str, Any],
    member: Member = Depends(get_current_member),
    session: Session = Depends(get_session),
):
    point = rally_service.add_combination_point(session, member, combination_id, body)
    return rally_service.combination_point_to_dict(point)


@router.get("/combination/{combination_id}/bonuspoints")
def list_combination_points(
    combination_id: int,
    member: Optional[Member] = Depends(get_optional_member),
    session: Session = Depends(get_session),
):
    return [
        rally_service.combination_point_to_dict(point)
        for point in rally_service.list_combination_points(session, member, combination_id)
    ]


@router.delete("/combinationpoint/{combination_point_id}")
def delete_combination_point(
    combination_point_id: int,
    member: Member = Depends(get_current_member),
    session: Session = Depends(get_session),
):
    rally_service.delete_combination_point(session, member, combination_point_id)
    return {"ok": True, "deleted_combination_point": combination_point_id}


__all__ = ["router"]
