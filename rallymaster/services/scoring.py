"""Odometer readings, claims and claim confirmation during a rally.

Riders may record data for themselves; organizers and aides may record it
for anyone in their rally. Only organizers and aides confirm claims.
Claims are never deduplicated, and combinations are never derived from
earned bonus points; both are asserted directly.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import Session, col, select

from ..core.errors import NotFoundError, ValidationError
from ..models import (
    BonusPoint,
    Combination,
    EarnedBonusPoint,
    EarnedCombination,
    Member,
    RallyParticipant,
)
from .access import find_participant, require_scorer_role, require_scoring_access

logger = logging.getLogger(__name__)


def earned_bonus_point_to_dict(earned: EarnedBonusPoint) -> Dict[str, Any]:
    return {
        "id": earned.id,
        "rally_participant_id": earned.rally_participant_id,
        "bonus_point_id": earned.bonus_point_id,
        "odometer": earned.odometer,
        "earned_at": earned.earned_at.isoformat() if earned.earned_at else None,
        "confirmed": earned.confirmed,
    }


def earned_combination_to_dict(earned: EarnedCombination) -> Dict[str, Any]:
    return {
        "id": earned.id,
        "rally_participant_id": earned.rally_participant_id,
        "combination_id": earned.combination_id,
        "confirmed": earned.confirmed,
    }


def _rider_for_rally(session: Session, rally_id: int, rider_id: int) -> RallyParticipant:
    participant = find_participant(session, rally_id, rider_id)
    if participant is None:
        raise NotFoundError("Rider not registered for this rally")
    return participant


def _participant(session: Session, participant_id: int) -> RallyParticipant:
    participant = session.get(RallyParticipant, participant_id)
    if participant is None:
        raise NotFoundError("Rally participant not found")
    return participant


def _require_odometer_args(rider_id: Optional[int], value: Optional[int]) -> None:
    if not rider_id:
        raise ValidationError("RIDER ID is required")
    if not value:
        raise ValidationError("ODOMETER is required")


def set_start_odometer(
    session: Session, actor: Member, rally_id: int, rider_id: Optional[int], value: Optional[int]
) -> RallyParticipant:
    _require_odometer_args(rider_id, value)
    participant = _rider_for_rally(session, rally_id, rider_id)
    require_scoring_access(session, actor, participant)

    participant.odometer_in = value
    session.add(participant)
    session.commit()
    session.refresh(participant)
    return participant


def set_end_odometer(
    session: Session, actor: Member, rally_id: int, rider_id: Optional[int], value: Optional[int]
) -> RallyParticipant:
    _require_odometer_args(rider_id, value)
    participant = _rider_for_rally(session, rally_id, rider_id)
    require_scoring_access(session, actor, participant)

    participant.odometer_out = value
    session.add(participant)
    session.commit()
    session.refresh(participant)
    return participant


def _check_confirmed_flag(
    session: Session, actor: Member, rally_id: int, confirmed: Optional[bool]
) -> bool:
    """A claim may only arrive pre-confirmed from a scorer."""

    if confirmed:
        require_scorer_role(session, actor, rally_id)
        return True
    return False


def submit_earned_bonus_point(
    session: Session,
    actor: Member,
    rally_id: int,
    *,
    bonus_point_id: Optional[int],
    rider_id: Optional[int] = None,
    odometer: Optional[int] = None,
    earned_at: Optional[datetime] = None,
    confirmed: Optional[bool] = None,
) -> EarnedBonusPoint:
    if bonus_point_id is None:
        raise ValidationError("bonus_point_id is required")

    participant = _rider_for_rally(session, rally_id, rider_id or actor.id)
    require_scoring_access(session, actor, participant)

    bonus_point = session.get(BonusPoint, bonus_point_id)
    if bonus_point is None:
        raise NotFoundError("Bonus point not found")
    if bonus_point.rally_id != rally_id:
        raise ValidationError("Bonus point does not belong to this rally")

    earned = EarnedBonusPoint(
        rally_participant_id=participant.id,
        bonus_point_id=bonus_point.id,
        odometer=odometer,
        earned_at=earned_at,
        confirmed=_check_confirmed_flag(session, actor, rally_id, confirmed),
    )
    session.add(earned)
    session.commit()
    session.refresh(earned)
    return earned


def confirm_earned_bonus_point(
    session: Session, actor: Member, earned_id: int, confirmed: Any
) -> EarnedBonusPoint:
    if not isinstance(confirmed, bool):
        raise ValidationError("confirmed must be true or false")

    earned = session.get(EarnedBonusPoint, earned_id)
    if earned is None:
        raise NotFoundError("Earned bonus point not found")
    participant = _participant(session, earned.rally_participant_id)
    require_scorer_role(session, actor, participant.rally_id)

    if earned.confirmed != confirmed:
        earned.confirmed = confirmed
        session.add(earned)
        session.commit()
        session.refresh(earned)
        logger.info(
            "Member %s set earned bonus point %s confirmed=%s", actor.id, earned.id, confirmed
        )
    return earned


def submit_earned_combination(
    session: Session,
    actor: Member,
    rally_id: int,
    *,
    combination_id: Optional[int],
    rider_id: Optional[int] = None,
    confirmed: Optional[bool] = None,
) -> EarnedCombination:
    if combination_id is None:
        raise ValidationError("combination_id is required")

    participant = _rider_for_rally(session, rally_id, rider_id or actor.id)
    require_scoring_access(session, actor, participant)

    combination = session.get(Combination, combination_id)
    if combination is None:
        raise NotFoundError("Combination not found")
    if combination.rally_id != rally_id:
        raise ValidationError("Combination does not belong to this rally")

    earned = EarnedCombination(
        rally_participant_id=participant.id,
        combination_id=combination.id,
        confirmed=_check_confirmed_flag(session, actor, rally_id, confirmed),
    )
    session.add(earned)
    session.commit()
    session.refresh(earned)
    return earned


def confirm_earned_combination(
    session: Session, actor: Member, earned_id: int, confirmed: Any
) -> EarnedCombination:
    if not isinstance(confirmed, bool):
        raise ValidationError("confirmed must be true or false")

    earned = session.get(EarnedCombination, earned_id)
    if earned is None:
        raise NotFoundError("Earned combination not found")
    participant = _participant(session, earned.rally_participant_id)
    require_scorer_role(session, actor, participant.rally_id)

    if earned.confirmed != confirmed:
        earned.confirmed = confirmed
        session.add(earned)
        session.commit()
        session.refresh(earned)
        logger.info(
            "Member %s set earned combination %s confirmed=%s", actor.id, earned.id, confirmed
        )
    return earned


def list_earned_bonus_points(
    session: Session, actor: Member, rally_participant_id: int
) -> List[EarnedBonusPoint]:
    participant = _participant(session, rally_participant_id)
    require_scoring_access(session, actor, participant)
    return list(
        session.exec(
            select(EarnedBonusPoint)
            .where(EarnedBonusPoint.rally_participant_id == participant.id)
            .order_by(col(EarnedBonusPoint.id).asc())
        ).all()
    )


def list_earned_combinations(
    session: Session, actor: Member, rally_participant_id: int
) -> List[EarnedCombination]:
    participant = _participant(session, rally_participant_id)
    require_scoring_access(session, actor, participant)
    return list(
        session.exec(
            select(EarnedCombination)
            .where(EarnedCombination.rally_participant_id == participant.id)
            .order_by(col(EarnedCombination.id).asc())
        ).all()
    )


__all__ = [
    "confirm_earned_bonus_point",
    "confirm_earned_combination",
    "earned_bonus_point_to_dict",
    "earned_combination_to_dict",
    "list_earned_bonus_points",
    "list_earned_combinations",
    "set_end_odometer",
    "set_start_odometer",
    "submit_earned_bonus_point",
    "submit_earned_combination",
]
