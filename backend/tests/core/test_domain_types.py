"""Domain Types — verifies the fixed plan schema enums.

Tests:
    - Canvas has exactly 9 blocks, empathy map exactly 6
    - Epicenter has the 4 strategic axes
    - PlanStatus has the 4 lifecycle states
    - Enums serialize to their string values
"""

from uuid import uuid4

from empirion.core.domain_types import (
    CanvasBlock, EmpathyBlock, Epicenter, PlanId, PlanStatus, TeamId,
    DEFAULT_WIZARD_STEP_COUNT,
)


def test_identity_types_wrap_values():
    uid = uuid4()
    assert PlanId(uid) == uid
    assert TeamId("team-1") == "team-1"


def test_canvas_has_nine_blocks():
    assert len(CanvasBlock) == 9
    assert CanvasBlock.VALUE_PROPOSITIONS.value == "value_propositions"
    assert CanvasBlock.KEY_PARTNERSHIPS.value == "key_partnerships"


def test_empathy_map_has_six_blocks():
    assert {b.value for b in EmpathyBlock} == {
        "sees", "hears", "thinks_feels", "says_does", "pains", "gains",
    }


def test_epicenter_has_four_axes():
    assert {e.value for e in Epicenter} == {"resource", "offer", "customer", "finance"}


def test_plan_status_has_four_states():
    assert [s.value for s in PlanStatus] == [
        "draft", "submitted", "approved", "finalized",
    ]


def test_str_enums_compare_to_values():
    assert PlanStatus.DRAFT == "draft"
    assert Epicenter.OFFER == "offer"


def test_default_wizard_has_five_pillars():
    assert DEFAULT_WIZARD_STEP_COUNT == 5
