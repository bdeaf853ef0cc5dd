"""SQL Plan Repository — persistence behaviour against an in-memory SQLite store.

Invariants:
    - Each save inserts a new row; earlier versions stay readable in the lineage
    - The store stamps each version as latest + 1; stale status downgrades fail
      with InvalidTransitionError and leave no open transaction
    - Stray keys in legacy rows are dropped on load
    - Team history comes back ordered by round
"""

from dataclasses import replace

import pytest
from sqlalchemy import select

from empirion.core.domain_types import CanvasBlock, PlanStatus
from empirion.core.errors import InvalidTransitionError, ValidationRejectedError
from empirion.core.plan_document import new_plan_document
from empirion.core.plan_updates import update_canvas_block
from empirion.infrastructure.plan_repository import SqlPlanRepository
from empirion.models.business_plan import BusinessPlan
from empirion.services.plan_lifecycle import PlanLifecycle


@pytest.fixture
def repository(test_db):
    return SqlPlanRepository(test_db, step_count=5)


def _doc(version: int, status: PlanStatus = PlanStatus.DRAFT, round_number: int = 1):
    return replace(
        new_plan_document("team-1", "champ-1", round_number),
        version=version, status=status,
    )


async def test_load_active_plan_none_when_missing(repository):
    assert await repository.load_active_plan("team-1", 1) is None


async def test_save_assigns_id_and_returns_document(repository):
    saved = await repository.save_plan(
        update_canvas_block(_doc(1), "key_partnerships", "Suppliers"),
    )
    assert saved.id is not None
    assert saved.version == 1
    assert saved.canvas[CanvasBlock.KEY_PARTNERSHIPS] == "Suppliers"


async def test_latest_version_wins(repository):
    await repository.save_plan(_doc(1))
    await repository.save_plan(_doc(2, PlanStatus.SUBMITTED))
    latest = await repository.load_active_plan("team-1", 1)
    assert (latest.version, latest.status) == (2, PlanStatus.SUBMITTED)


async def test_version_stamped_from_store_not_from_document(repository):
    await repository.save_plan(_doc(1))
    saved = await repository.save_plan(_doc(1))
    assert saved.version == 2
    lineage = await repository.load_lineage("team-1", 1)
    assert [d.version for d in lineage] == [1, 2]


async def test_stale_submitted_copy_saved_again_gets_next_version(repository):
    await repository.save_plan(_doc(1))
    saved = await repository.save_plan(_doc(5))
    assert saved.version == 2


async def test_stale_draft_after_submit_is_transition_error(repository, test_db):
    await repository.save_plan(_doc(1))
    await repository.save_plan(_doc(2))
    await repository.save_plan(_doc(3, PlanStatus.SUBMITTED))

    with pytest.raises(InvalidTransitionError):
        await repository.save_plan(_doc(2, PlanStatus.DRAFT))
    assert not test_db.in_transaction()
    latest = await repository.load_active_plan("team-1", 1)
    assert (latest.version, latest.status) == (3, PlanStatus.SUBMITTED)


async def test_lifecycle_over_store_rejects_stale_draft(repository):
    lifecycle = PlanLifecycle(repository, step_count=5)
    doc = await lifecycle.load_or_init("team-1", 1, "champ-1")
    v1 = await lifecycle.save(doc, "draft")
    v2 = await lifecycle.save(v1, "draft")
    await lifecycle.submit(v2)
    with pytest.raises(InvalidTransitionError):
        await lifecycle.save(v2, "draft")


async def test_two_saves_from_same_loaded_copy(repository):
    lifecycle = PlanLifecycle(repository, step_count=5)
    loaded = await lifecycle.load_or_init("team-1", 1, "champ-1")
    first = await lifecycle.save(lifecycle.update_step(loaded, 0, "mine"), "draft")
    second = await lifecycle.save(lifecycle.update_step(loaded, 0, "theirs"), "draft")
    assert (first.version, second.version) == (1, 2)
    latest = await repository.load_active_plan("team-1", 1)
    assert latest.step_text(0) == "theirs"


async def test_collision_with_concurrent_insert_is_restamped(repository, monkeypatch):
    await repository.save_plan(_doc(1))
    real_latest_row = repository._latest_row
    stale_reads = iter([None])

    async def latest_row_missing_concurrent_insert(team_id, round_number):
        for stale in stale_reads:
            return stale
        return await real_latest_row(team_id, round_number)

    monkeypatch.setattr(repository, "_latest_row", latest_row_missing_concurrent_insert)
    saved = await repository.save_plan(_doc(1))
    assert saved.version == 2


async def test_repeated_collisions_surface_as_version_conflict(
    repository, test_db, monkeypatch,
):
    await repository.save_plan(_doc(1))

    async def always_stale(team_id, round_number):
        return None

    monkeypatch.setattr(repository, "_latest_row", always_stale)
    with pytest.raises(ValidationRejectedError) as exc:
        await repository.save_plan(_doc(1))
    assert exc.value.code == "VERSION_CONFLICT"
    assert not test_db.in_transaction()


async def test_lineage_keeps_every_version(repository):
    await repository.save_plan(_doc(1))
    await repository.save_plan(_doc(2))
    await repository.save_plan(_doc(1, round_number=2))
    lineage = await repository.load_lineage("team-1", 1)
    assert [d.version for d in lineage] == [1, 2]


async def test_stray_keys_dropped_on_load(repository, test_db, caplog):
    test_db.add(BusinessPlan(
        championship_id="champ-1",
        team_id="team-1",
        round=1,
        version=1,
        status="draft",
        data={
            "canvas": {"channels": "web", "budget": "1M"},
            "steps": {"0": "legacy"},
            "notes": "x",
        },
    ))
    await test_db.commit()

    with caplog.at_level("WARNING"):
        doc = await repository.load_active_plan("team-1", 1)
    assert doc.canvas[CanvasBlock.CHANNELS] == "web"
    assert "budget" not in {b.value for b in doc.canvas}
    assert doc.steps == {0: {"text": "legacy"}}
    assert "canvas.budget" in caplog.text


async def test_saved_row_holds_plan_data(repository, test_db):
    await repository.save_plan(update_canvas_block(_doc(1), "channels", "web"))
    row = (await test_db.execute(select(BusinessPlan))).scalar_one()
    assert set(row.data) == {"steps", "canvas", "empathy", "epicenter"}
    assert row.data["canvas"]["channels"] == "web"
    assert row.visibility == "private"


async def test_team_history_ordered_by_round(repository, seed_history):
    await seed_history("team-1", {3: {"roi": 3}, 1: {"roi": 1}})
    await seed_history("team-2", {1: {"roi": 9}})
    snapshots = await repository.load_team_history("team-1")
    assert [s.round for s in snapshots] == [1, 3]
    assert snapshots[0].kpis == {"roi": 1}


async def test_team_history_empty(repository):
    assert await repository.load_team_history("nobody") == []
