"""Shared fixtures: an in-memory store for the editing core and a SQLite-backed API."""

import datetime
import os

# Must be set before the app settings are first imported
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.api.dependencies import get_media_storage
from app.db.repositories.player import PlayerRepository
from app.db.session import get_db
from app.main import app
from app.models.team import Player, Team
from app.models.training_session import TrainingSession
from app.services.media_storage import MediaStorage
from tests.factories import FakeStore


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


# ======================================================================
# API
# ======================================================================


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def db(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def upload_storage(tmp_path) -> MediaStorage:
    return MediaStorage(root=str(tmp_path / "uploads"), base_url="http://testserver", max_bytes=1024)


@pytest.fixture
def client(engine, upload_storage):
    def _get_db():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_media_storage] = lambda: upload_storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def team(db) -> Team:
    """A team with three active players (jerseys 7, 3, 9) and one inactive player."""
    team = Team(name="U12 Blue", age_category="U12")
    db.add(team)
    db.commit()
    db.refresh(team)
    for first, jersey, active in [("Ana", 7, True), ("Ben", 3, True), ("Cem", 9, True), ("Dan", 4, False)]:
        db.add(Player(team_id=team.id, first_name=first, last_name="Test", jersey_number=jersey, position="CM",
                      is_active=active))
    db.commit()
    return team


@pytest.fixture
def roster_ids(db, team) -> list[int]:
    """Ids of the active players, in roster order."""
    return [p.id for p in PlayerRepository(db).get_roster(team.id)]


@pytest.fixture
def training(db, team) -> TrainingSession:
    entry = TrainingSession(team_id=team.id, date=datetime.date(2026, 10, 1), start_time=datetime.time(17, 0),
                            end_time=datetime.time(18, 30), type="tactical")
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry
