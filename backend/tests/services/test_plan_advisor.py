"""Plan Advisor — fallback behaviour without HTTP."""

from empirion.core.kpi_history import KPISnapshot, aggregate
from empirion.core.plan_document import new_plan_document
from empirion.services.plan_advisor import (
    AUDIT_FALLBACK, SUGGESTION_FALLBACK, Advice, PlanAdvisor,
)


async def test_no_service_configured_uses_fallbacks():
    advisor = PlanAdvisor(None)
    assert await advisor.suggest_field("s", "d", {}, "", "industrial") == Advice(
        SUGGESTION_FALLBACK, fallback=True,
    )
    audit = await advisor.audit_plan(
        "s", new_plan_document("team-1", "champ-1", 1), aggregate([]),
    )
    assert audit == Advice(AUDIT_FALLBACK, fallback=True)


async def test_audit_passes_recorded_history_only(fake_service):
    history = aggregate([KPISnapshot(2, {"roi": 1.5, "bep": None})])
    advice = await PlanAdvisor(fake_service).audit_plan(
        "Review", new_plan_document("team-1", "champ-1", 3), history,
    )
    assert advice == Advice("Suggested text")
    assert fake_service.calls[0]["history"] == [{"round": 2, "kpis": {"roi": 1.5}}]


async def test_advisor_does_not_touch_document(fake_service):
    doc = new_plan_document("team-1", "champ-1", 1)
    before = (dict(doc.canvas), dict(doc.steps), doc.version)
    fake_service.error = RuntimeError("boom")
    await PlanAdvisor(fake_service).audit_plan("Review", doc, aggregate([]))
    assert (dict(doc.canvas), dict(doc.steps), doc.version) == before
