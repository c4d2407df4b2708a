"""Rally lifecycle, roster management and the bonus point catalog."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from sqlmodel import Session, col, select

from ..core import RALLY_DATE_WINDOW_YEARS, today
from ..core.errors import NotFoundError, ValidationError
from ..models import (
    BonusPoint,
    Combination,
    CombinationPoint,
    EarnedBonusPoint,
    EarnedCombination,
    Member,
    ParticipantRole,
    Privilege,
    Rally,
    RallyParticipant,
)
from . import fields
from .access import (
    find_participant,
    load_rally,
    require_master_access,
    require_view,
)
from .countries import normalize_country

logger = logging.getLogger(__name__)


# Serialisation --------------------------------------------------------------


def rally_to_dict(rally: Rally, viewer: Optional[RallyParticipant] = None) -> Dict[str, Any]:
    """Serialise a rally; sharing flags are only shown to its organizers."""

    is_organizer = viewer is not None and viewer.role.has(Privilege.MASTER)
    return {
        "id": rally.id,
        "name": rally.name,
        "description": rally.description,
        "start_date": fields.isoformat(rally.start_date),
        "end_date": fields.isoformat(rally.end_date),
        "latitude": rally.latitude,
        "longitude": rally.longitude,
        "location_city": rally.location_city,
        "location_state": rally.location_state,
        "location_country": rally.location_country,
        "country_code": rally.country_code,
        "is_public": rally.is_public,
        "points_public": rally.points_public if is_organizer else None,
        "riders_public": rally.riders_public if is_organizer else None,
        "organizers_public": rally.organizers_public if is_organizer else None,
        "my_role": viewer.role.value if viewer else None,
    }


def participant_to_dict(participant: RallyParticipant) -> Dict[str, Any]:
    return {
        "id": participant.id,
        "rally_id": participant.rally_id,
        "member_id": participant.member_id,
        "role": participant.role.value,
        "odometer_in": participant.odometer_in,
        "odometer_out": participant.odometer_out,
        "finisher": participant.finisher,
        "final_score": participant.final_score,
    }


def bonus_point_to_dict(bonus_point: BonusPoint) -> Dict[str, Any]:
    return bonus_point.model_dump()


def combination_point_to_dict(point: CombinationPoint) -> Dict[str, Any]:
    return point.model_dump()


def combination_to_dict(
    combination: Combination, points: Optional[List[CombinationPoint]] = None
) -> Dict[str, Any]:
    data = combination.model_dump()
    if points is not None:
        data["combination_points"] = [combination_point_to_dict(p) for p in points]
    return data


# Rallies --------------------------------------------------------------------


def _shift_years(value: date, years: int) -> date:
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        # Feb 29 in a non-leap target year.
        return value.replace(year=value.year + years, day=28)


def _check_window(value: Optional[date], label: str) -> None:
    if value is None:
        return
    now = today()
    earliest = _shift_years(now, -RALLY_DATE_WINDOW_YEARS)
    latest = _shift_years(now, RALLY_DATE_WINDOW_YEARS)
    if not earliest <= value <= latest:
        raise ValidationError(f"Invalid date: {label}")


def _check_order(start: Optional[date], end: Optional[date]) -> None:
    if start is not None and end is not None and end < start:
        raise ValidationError("Start date cannot be after end date")


def create_rally(session: Session, member: Member, body: Mapping[str, Any]) -> Rally:
    """Create a rally and make its creator the first organizer."""

    name = fields.required_text(body, "name", "Name")
    description = fields.required_text(body, "description", "Description")
    city = fields.required_text(body, "location_city", "Location City")
    state = fields.required_text(body, "location_state", "Location State")

    start_date = fields.iso_date(body, "start_date")
    end_date = fields.iso_date(body, "end_date")
    start_date = start_date or end_date
    end_date = end_date or start_date
    if start_date is None:
        raise ValidationError("Start Date may not be null/empty")
    _check_order(start_date, end_date)

    country = fields.text(body, "location_country")
    rally = Rally(
        name=name,
        description=description,
        start_date=start_date,
        end_date=end_date,
        latitude=fields.number(body, "latitude"),
        longitude=fields.number(body, "longitude"),
        location_city=city,
        location_state=state,
        location_country=country,
        country_code=normalize_country(country),
        is_public=bool(fields.boolean(body, "is_public")),
        points_public=bool(fields.boolean(body, "points_public")),
        riders_public=bool(fields.boolean(body, "riders_public")),
        organizers_public=bool(fields.boolean(body, "organizers_public")),
    )
    session.add(rally)
    session.flush()

    session.add(
        RallyParticipant(
            rally_id=rally.id,
            member_id=member.id,
            role=ParticipantRole.ORGANIZER,
        )
    )
    session.commit()
    session.refresh(rally)
    logger.info("Member %s created rally %s", member.id, rally.id)
    return rally


def update_rally(
    session: Session, member: Member, rally_id: int, body: Mapping[str, Any]
) -> Rally:
    """Overwrite only the fields supplied with a non-blank value."""

    rally = require_master_access(session, member, load_rally(session, rally_id))

    start_date = fields.iso_date(body, "start_date")
    end_date = fields.iso_date(body, "end_date")
    _check_window(start_date, "Start Date")
    _check_window(end_date, "End Date")

    merged_start = start_date or rally.start_date or end_date
    merged_end = end_date or rally.end_date or merged_start
    _check_order(merged_start, merged_end)
    rally.start_date = merged_start
    rally.end_date = merged_end

    for key in ("name", "description", "location_city", "location_state"):
        value = fields.text(body, key)
        if value is not None:
            setattr(rally, key, value)

    country = fields.text(body, "location_country")
    if country is not None:
        rally.location_country = country
        rally.country_code = normalize_country(country)

    for key in ("latitude", "longitude"):
        value = fields.number(body, key)
        if value is not None:
            setattr(rally, key, value)

    for key in ("is_public", "points_public", "riders_public", "organizers_public"):
        value = fields.boolean(body, key)
        if value is not None:
            setattr(rally, key, value)

    session.add(rally)
    session.commit()
    session.refresh(rally)
    return rally


def get_rally(session: Session, member: Optional[Member], rally_id: int) -> Rally:
    return require_view(session, member, load_rally(session, rally_id))


def viewer_participant(
    session: Session, member: Optional[Member], rally: Rally
) -> Optional[RallyParticipant]:
    return find_participant(session, rally.id, member.id if member else None)


def register_rider(session: Session, member: Member, rally_id: int) -> RallyParticipant:
    """Join a rally as a RIDER. Private rallies accept registrations too."""

    rally = load_rally(session, rally_id)

    if find_participant(session, rally.id, member.id) is not None:
        raise ValidationError("Member is already registered for this rally")

    participant = RallyParticipant(
        rally_id=rally.id, member_id=member.id, role=ParticipantRole.RIDER
    )
    session.add(participant)
    session.commit()
    session.refresh(participant)
    logger.info("Member %s registered for rally %s", member.id, rally.id)
    return participant


def promote_participant(
    session: Session,
    member: Member,
    rally_id: int,
    target_member_id: Optional[int],
    new_role: Any,
) -> RallyParticipant:
    """Raise another participant to AIDE or ORGANIZER. Roles never go down."""

    if isinstance(new_role, ParticipantRole) or not new_role:
        role = new_role or None
    else:
        try:
            role = ParticipantRole(str(new_role).strip().upper())
        except ValueError as exc:
            raise ValidationError(f"Unknown role: {new_role}") from exc
    if role is None or role is ParticipantRole.RIDER:
        raise ValidationError("Participants can only be promoted to ORGANIZER or AIDE")
    if target_member_id is None:
        raise ValidationError("Target member id is required")
    if isinstance(target_member_id, bool) or not isinstance(target_member_id, int):
        raise ValidationError("Target member id must be an integer")

    rally = require_master_access(session, member, load_rally(session, rally_id))

    target = find_participant(session, rally.id, target_member_id)
    if target is None:
        raise NotFoundError("Target member is not registered for this rally")

    if role.rank < target.role.rank:
        raise ValidationError(f"Cannot demote a {target.role.value} to {role.value}")
    if role is target.role:
        return target

    target.role = role
    session.add(target)
    session.commit()
    session.refresh(target)
    logger.info(
        "Member %s promoted member %s to %s in rally %s",
        member.id,
        target_member_id,
        role.value,
        rally.id,
    )
    return target


def list_participants(
    session: Session, member: Optional[Member], rally_id: int
) -> List[RallyParticipant]:
    """Roster as the caller may see it.

    Scorers see everyone. Others see riders when ``riders_public`` is set,
    aides and organizers when ``organizers_public`` is set, and themselves.
    """

    rally = get_rally(session, member, rally_id)
    viewer = viewer_participant(session, member, rally)
    roster = session.exec(
        select(RallyParticipant)
        .where(RallyParticipant.rally_id == rally.id)
        .order_by(col(RallyParticipant.id).asc())
    ).all()
    if viewer is not None and viewer.role.has(Privilege.SCORER):
        return list(roster)

    visible = []
    for participant in roster:
        if viewer is not None and participant.id == viewer.id:
            visible.append(participant)
        elif participant.role is ParticipantRole.RIDER and rally.riders_public:
            visible.append(participant)
        elif participant.role is not ParticipantRole.RIDER and rally.organizers_public:
            visible.append(participant)
    return visible


# Catalog --------------------------------------------------------------------


def _require_catalog_view(session: Session, member: Optional[Member], rally: Rally) -> None:
    """The catalog is open to the roster, and to everyone when ``points_public``."""

    require_view(session, member, rally)
    if rally.points_public:
        return
    if viewer_participant(session, member, rally) is None:
        raise NotFoundError(f"Bonus points for rally {rally.id} are not published")


def _load_bonus_point(session: Session, bonus_point_id: int) -> BonusPoint:
    bonus_point = session.get(BonusPoint, bonus_point_id)
    if bonus_point is None:
        raise NotFoundError("Bonus point not found")
    return bonus_point


def _load_combination(session: Session, combination_id: int) -> Combination:
    combination = session.get(Combination, combination_id)
    if combination is None:
        raise NotFoundError("Combination not found")
    return combination


_BONUS_POINT_TEXT = ("code", "name", "description", "address", "marker_color", "marker_icon")
_BONUS_POINT_FLAGS = ("required", "repeatable", "is_start", "is_finish")


def create_bonus_point(
    session: Session, member: Member, rally_id: int, body: Mapping[str, Any]
) -> BonusPoint:
    rally = require_master_access(session, member, load_rally(session, rally_id))

    bonus_point = BonusPoint(
        rally_id=rally.id,
        latitude=fields.number(body, "latitude"),
        longitude=fields.number(body, "longitude"),
        points=fields.integer(body, "points") or 0,
        **{key: fields.text(body, key) for key in _BONUS_POINT_TEXT},
        **{key: bool(fields.boolean(body, key)) for key in _BONUS_POINT_FLAGS},
    )
    session.add(bonus_point)
    session.commit()
    session.refresh(bonus_point)
    return bonus_point


def update_bonus_point(
    session: Session, member: Member, bonus_point_id: int, body: Mapping[str, Any]
) -> BonusPoint:
    bonus_point = _load_bonus_point(session, bonus_point_id)
    require_master_access(session, member, load_rally(session, bonus_point.rally_id))

    for key in _BONUS_POINT_TEXT:
        value = fields.text(body, key)
        if value is not None:
            setattr(bonus_point, key, value)
    for key in ("latitude", "longitude"):
        value = fields.number(body, key)
        if value is not None:
            setattr(bonus_point, key, value)
    points = fields.integer(body, "points")
    if points is not None:
        bonus_point.points = points
    for key in _BONUS_POINT_FLAGS:
        value = fields.boolean(body, key)
        if value is not None:
            setattr(bonus_point, key, value)

    session.add(bonus_point)
    session.commit()
    session.refresh(bonus_point)
    return bonus_point


def delete_bonus_point(session: Session, member: Member, bonus_point_id: int) -> None:
    bonus_point = _load_bonus_point(session, bonus_point_id)
    require_master_access(session, member, load_rally(session, bonus_point.rally_id))

    in_use = session.exec(
        select(CombinationPoint.id).where(CombinationPoint.bonus_point_id == bonus_point.id)
    ).first() or session.exec(
        select(EarnedBonusPoint.id).where(EarnedBonusPoint.bonus_point_id == bonus_point.id)
    ).first()
    if in_use is not None:
        raise ValidationError("Bonus point is used by a combination or a claim")

    session.delete(bonus_point)
    session.commit()


def get_bonus_point(
    session: Session, member: Optional[Member], bonus_point_id: int
) -> BonusPoint:
    bonus_point = _load_bonus_point(session, bonus_point_id)
    _require_catalog_view(session, member, load_rally(session, bonus_point.rally_id))
    return bonus_point


def list_bonus_points(
    session: Session, member: Optional[Member], rally_id: int
) -> List[BonusPoint]:
    rally = load_rally(session, rally_id)
    _require_catalog_view(session, member, rally)
    return list(
        session.exec(
            select(BonusPoint)
            .where(BonusPoint.rally_id == rally.id)
            .order_by(col(BonusPoint.id).asc())
        ).all()
    )


def _new_combination_point(
    session: Session, combination: Combination, body: Mapping[str, Any]
) -> CombinationPoint:
    bonus_point_id = fields.integer(body, "bonus_point_id")
    if bonus_point_id is None:
        raise ValidationError("bonus_point_id is required")
    bonus_point = session.get(BonusPoint, bonus_point_id)
    if bonus_point is None:
        raise NotFoundError(f"Bonus point not found: {bonus_point_id}")
    if bonus_point.rally_id != combination.rally_id:
        raise ValidationError("Bonus point does not belong to this rally")
    return CombinationPoint(
        combination_id=combination.id,
        bonus_point_id=bonus_point.id,
        required=bool(fields.boolean(body, "required")),
    )


def create_combination(
    session: Session, member: Member, rally_id: int, body: Mapping[str, Any]
) -> Combination:
    rally = require_master_access(session, member, load_rally(session, rally_id))

    num_required = fields.integer(body, "num_required")
    if num_required is not None and num_required < 0:
        raise ValidationError("num_required may not be negative")

    combination = Combination(
        rally_id=rally.id,
        code=fields.text(body, "code"),
        name=fields.text(body, "name"),
        description=fields.text(body, "description"),
        points=fields.integer(body, "points") or 0,
        requires_all=bool(fields.boolean(body, "requires_all")),
        num_required=num_required,
        marker_color=fields.text(body, "marker_color"),
        marker_icon=fields.text(body, "marker_icon"),
    )
    session.add(combination)
    session.flush()

    points = body.get("combination_points") or []
    if not isinstance(points, list):
        raise ValidationError("combination_points must be a list")
    for point_body in points:
        if not isinstance(point_body, Mapping):
            raise ValidationError("Invalid combination point payload")
        session.add(_new_combination_point(session, combination, point_body))

    session.commit()
    session.refresh(combination)
    logger.info(
        "Created combination %s with %d points in rally %s",
        combination.id,
        len(points),
        rally.id,
    )
    return combination


def update_combination(
    session: Session, member: Member, combination_id: int, body: Mapping[str, Any]
) -> Combination:
    combination = _load_combination(session, combination_id)
    require_master_access(session, member, load_rally(session, combination.rally_id))

    for key in ("code", "name", "description", "marker_color", "marker_icon"):
        value = fields.text(body, key)
        if value is not None:
            setattr(combination, key, value)
    points = fields.integer(body, "points")
    if points is not None:
        combination.points = points
    requires_all = fields.boolean(body, "requires_all")
    if requires_all is not None:
        combination.requires_all = requires_all
    num_required = fields.integer(body, "num_required")
    if num_required is not None:
        if num_required < 0:
            raise ValidationError("num_required may not be negative")
        combination.num_required = num_required

    session.add(combination)
    session.commit()
    session.refresh(combination)
    return combination


def delete_combination(session: Session, member: Member, combination_id: int) -> None:
    combination = _load_combination(session, combination_id)
    require_master_access(session, member, load_rally(session, combination.rally_id))

    claimed = session.exec(
        select(EarnedCombination.id).where(EarnedCombination.combination_id == combination.id)
    ).first()
    if claimed is not None:
        raise ValidationError("Combination has been claimed and cannot be deleted")

    for point in list_points_of(session, combination.id):
        session.delete(point)
    session.delete(combination)
    session.commit()


def get_combination(
    session: Session, member: Optional[Member], combination_id: int
) -> Combination:
    combination = _load_combination(session, combination_id)
    _require_catalog_view(session, member, load_rally(session, combination.rally_id))
    return combination


def list_combinations(
    session: Session, member: Optional[Member], rally_id: int
) -> List[Combination]:
    rally = load_rally(session, rally_id)
    _require_catalog_view(session, member, rally)
    return list(
        session.exec(
            select(Combination)
            .where(Combination.rally_id == rally.id)
            .order_by(col(Combination.id).asc())
        ).all()
    )


def list_points_of(session: Session, combination_id: int) -> List[CombinationPoint]:
    return list(
        session.exec(
            select(CombinationPoint)
            .where(CombinationPoint.combination_id == combination_id)
            .order_by(col(CombinationPoint.id).asc())
        ).all()
    )


def add_combination_point(
    session: Session, member: Member, combination_id: int, body: Mapping[str, Any]
) -> CombinationPoint:
    combination = _load_combination(session, combination_id)
    require_master_access(session, member, load_rally(session, combination.rally_id))

    point = _new_combination_point(session, combination, body)
    session.add(point)
    session.commit()
    session.refresh(point)
    return point


def delete_combination_point(session: Session, member: Member, combination_point_id: int) -> None:
    point = session.get(CombinationPoint, combination_point_id)
    if point is None:
        raise NotFoundError("Combination point not found")
    combination = _load_combination(session, point.combination_id)
    require_master_access(session, member, load_rally(session, combination.rally_id))

    session.delete(point)
    session.commit()


def list_combination_points(
    session: Session, member: Optional[Member], combination_id: int
) -> List[CombinationPoint]:
    combination = get_combination(session, member, combination_id)
    return list_points_of(session, combination.id)


__all__ = [
    "add_combination_point",
    "bonus_point_to_dict",
    "combination_point_to_dict",
    "combination_to_dict",
    "create_bonus_point",
    "create_combination",
    "create_rally",
    "delete_bonus_point",
    "delete_combination",
    "delete_combination_point",
    "get_bonus_point",
    "get_combination",
    "get_rally",
    "list_bonus_points",
    "list_combination_points",
    "list_combinations",
    "list_participants",
    "list_points_of",
    "participant_to_dict",
    "promote_participant",
    "rally_to_dict",
    "register_rider",
    "update_bonus_point",
    "update_combination",
    "update_rally",
    "viewer_participant",
]
