"""Service test fixtures — async DB, fake repository and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB session
    - get_plan_advisor overridden with a controllable fake SuggestionService
    - db_manager patched so the readiness probe checks the test engine

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (ADR: PostgreSQL-specific features not exercised here)
    - Fake service records its calls: tests assert what reached the AI boundary
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

import empirion.models  # noqa: F401  (registers tables on Base.metadata)
from empirion.api.dependencies import get_plan_advisor
from empirion.db.base import Base
from empirion.db.session import create_session_factory
from empirion.infrastructure import database as db_module
from empirion.infrastructure.database import DatabaseSessionManager, get_db
from empirion.main import app
from empirion.models.company_history import CompanyHistory
from empirion.services.plan_advisor import PlanAdvisor

from tests.services.fake_repository import InMemoryPlanRepository


class FakeSuggestionService:
    """SuggestionService fake: canned text, optional failure, call log."""

    def __init__(self, text: str = "Suggested text"):
        self.text = text
        self.error: Exception | None = None
        self.calls: list[dict] = []

    async def suggest_field(
        self, step_label, domain_hint, current_state_json, context_prompt, branch,
    ):
        self.calls.append({
            "op": "suggest_field",
            "step_label": step_label,
            "domain_hint": domain_hint,
            "current_state_json": current_state_json,
            "context_prompt": context_prompt,
            "branch": branch,
        })
        if self.error:
            raise self.error
        return self.text

    async def audit_plan(self, step_label, plan_snapshot_json, history):
        self.calls.append({
            "op": "audit_plan",
            "step_label": step_label,
            "plan_snapshot_json": plan_snapshot_json,
            "history": history,
        })
        if self.error:
            raise self.error
        return self.text


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return create_session_factory(test_engine)


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def fake_service():
    return FakeSuggestionService()


@pytest.fixture
def memory_repository():
    return InMemoryPlanRepository()


@pytest.fixture
async def client(test_engine, test_session_factory, fake_service):
    """FastAPI test client with DB and advisor dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_plan_advisor] = lambda: PlanAdvisor(fake_service)

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def seed_history(test_db):
    """Insert KPI snapshots: seed_history("team-1", {1: {...}, 3: {...}})."""
    async def _seed(team_id: str, by_round: dict[int, dict], championship_id="champ-1"):
        for round_number, kpis in by_round.items():
            test_db.add(CompanyHistory(
                team_id=team_id,
                championship_id=championship_id,
                round=round_number,
                kpis=kpis,
            ))
        await test_db.commit()
    return _seed
