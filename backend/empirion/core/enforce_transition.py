"""Plan Status Enforcement — state machine and version stamping for plan saves.

Invariants:
    - Transitions are one-directional: draft -> submitted -> approved -> finalized
    - A submitted (or later) lineage never accepts a draft save
    - Proposed version == previous version + 1 (first save => 1); the repository
      stamps the persisted version from the stored lineage
    - Every saved copy gets visibility=private, is_template=False, shared_with=()
    - prepare_for_save is PURE: returns a new document, the input is untouched

Design Decisions:
    - Guard is a function of the last known status only: no lock needed, the
      repository re-checks against the persisted lineage in the same transaction
    - Reviewer moves (submitted -> approved -> finalized) accepted here; who may
      perform them is an authorization concern outside this layer
"""

from dataclasses import replace

from empirion.core.domain_types import PlanStatus, Visibility
from empirion.core.errors import ErrorContext, InvalidTransitionError
from empirion.core.plan_document import PlanDocument


ALLOWED_TRANSITIONS: dict[PlanStatus | None, frozenset[PlanStatus]] = {
    None: frozenset({PlanStatus.DRAFT, PlanStatus.SUBMITTED}),
    PlanStatus.DRAFT: frozenset({PlanStatus.DRAFT, PlanStatus.SUBMITTED}),
    PlanStatus.SUBMITTED: frozenset({PlanStatus.APPROVED}),
    PlanStatus.APPROVED: frozenset({PlanStatus.FINALIZED}),
    PlanStatus.FINALIZED: frozenset(),
}


def is_transition_allowed(current: PlanStatus | None, target: PlanStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def ensure_transition(
    current: PlanStatus | None,
    target: PlanStatus,
    context: ErrorContext | None = None,
) -> None:
    """Raise InvalidTransitionError unless current -> target is allowed."""
    if not is_transition_allowed(current, target):
        raise InvalidTransitionError(
            current.value if current else None, target.value, context,
        )


def prepare_for_save(doc: PlanDocument, target: PlanStatus) -> PlanDocument:
    """Build the next version of doc, ready to hand to the repository."""
    ensure_transition(
        doc.lineage_status,
        target,
        ErrorContext(
            team_id=doc.team_id,
            round_number=doc.round,
            plan_version=doc.version,
        ),
    )
    return replace(
        doc,
        version=doc.version + 1,
        status=target,
        steps={idx: dict(record) for idx, record in doc.steps.items()},
        canvas=dict(doc.canvas),
        empathy=dict(doc.empathy),
        visibility=Visibility.PRIVATE,
        is_template=False,
        shared_with=(),
    )
