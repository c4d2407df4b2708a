"""Shared fixtures: in-memory database, members and rallies."""

import os

os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import date  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from rallymaster.app import app  # noqa: E402
from rallymaster.core import engine  # noqa: E402
from rallymaster.models import (  # noqa: E402
    BonusPoint,
    Combination,
    CombinationPoint,
    Member,
    ParticipantRole,
    Rally,
    RallyParticipant,
)
from rallymaster.services.countries import normalize_country  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_schema():
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield


@pytest.fixture
def session():
    with Session(engine) as db:
        yield db


@pytest.fixture
def make_member(session):
    def _make(email: str, name: str | None = None) -> Member:
        member = Member(email=email, name=name)
        session.add(member)
        session.commit()
        session.refresh(member)
        return member

    return _make


@pytest.fixture
def make_rally(session):
    """Insert a rally, optionally with its organizer on the roster."""

    def _make(organizer: Member | None = None, **overrides) -> Rally:
        values = {
            "name": "Test Rally",
            "description": "Four days in the saddle",
            "start_date": date(2024, 6, 1),
            "end_date": date(2024, 6, 5),
            "location_city": "Buffalo",
            "location_state": "NY",
            "location_country": "United States",
            "is_public": True,
        }
        values.update(overrides)
        values.setdefault("country_code", normalize_country(values.get("location_country")))
        rally = Rally(**values)
        session.add(rally)
        session.commit()
        session.refresh(rally)
        if organizer is not None:
            enroll(session, rally, organizer, ParticipantRole.ORGANIZER)
        return rally

    return _make


def enroll(session, rally: Rally, member: Member, role: ParticipantRole) -> RallyParticipant:
    participant = RallyParticipant(rally_id=rally.id, member_id=member.id, role=role)
    session.add(participant)
    session.commit()
    session.refresh(participant)
    return participant


@pytest.fixture
def enroll_member(session):
    def _enroll(rally, member, role=ParticipantRole.RIDER):
        return enroll(session, rally, member, role)

    return _enroll


@pytest.fixture
def make_bonus_point(session):
    def _make(rally: Rally, **overrides) -> BonusPoint:
        values = {"rally_id": rally.id, "code": "BP1", "name": "Niagara Falls", "points": 100}
        values.update(overrides)
        bonus_point = BonusPoint(**values)
        session.add(bonus_point)
        session.commit()
        session.refresh(bonus_point)
        return bonus_point

    return _make


@pytest.fixture
def make_combination(session):
    def _make(rally: Rally, bonus_points=(), **overrides) -> Combination:
        values = {"rally_id": rally.id, "code": "C1", "name": "Great Lakes", "points": 500}
        values.update(overrides)
        combination = Combination(**values)
        session.add(combination)
        session.commit()
        session.refresh(combination)
        for bonus_point in bonus_points:
            session.add(
                CombinationPoint(combination_id=combination.id, bonus_point_id=bonus_point.id)
            )
        session.commit()
        return combination

    return _make


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def login():
    """Return a fresh client signed in as ``email``."""

    def _login(email: str) -> TestClient:
        member_client = TestClient(app)
        response = member_client.post("/members/login", json={"email": email})
        assert response.status_code == 200, response.text
        return member_client

    return _login
