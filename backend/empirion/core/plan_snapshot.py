"""Plan Snapshot — serialization / merge-with-defaults for PlanDocument records.

Invariants:
    - plan_to_record produces a JSON-safe dict (no Enums, no int dict keys, no tuples)
    - plan_from_record reconstructs a PlanDocument from any persisted record
    - Missing blocks fall back to "" and missing epicenter to offer (forward-compatible)
    - Keys outside the fixed schema never reach the PlanDocument; find_stray_keys
      reports them so the shell can log what was dropped

Design Decisions:
    - Record shape mirrors the persisted row: data = {steps, canvas, empathy, epicenter}
    - Step keys stored as strings (JSON objects only have string keys), restored to int
"""

from uuid import UUID

from empirion.core.domain_types import (
    CanvasBlock, ChampionshipId, EmpathyBlock, Epicenter, PlanId, PlanStatus,
    TeamId, Visibility,
)
from empirion.core.errors import ValidationRejectedError
from empirion.core.plan_document import PlanDocument, default_canvas, default_empathy

_CANVAS_KEYS = frozenset(b.value for b in CanvasBlock)
_EMPATHY_KEYS = frozenset(b.value for b in EmpathyBlock)
_EPICENTER_VALUES = frozenset(e.value for e in Epicenter)


def plan_data_to_json(doc: PlanDocument) -> dict:
    """The `data` column payload of a plan record."""
    return {
        "steps": {str(idx): dict(record) for idx, record in sorted(doc.steps.items())},
        "canvas": {block.value: text for block, text in doc.canvas.items()},
        "empathy": {block.value: text for block, text in doc.empathy.items()},
        "epicenter": doc.epicenter.value,
    }


def plan_to_record(doc: PlanDocument) -> dict:
    """Serialize PlanDocument to the transport-agnostic record. Pure, no IO."""
    return {
        "id": str(doc.id) if doc.id else None,
        "championship_id": doc.championship_id,
        "team_id": doc.team_id,
        "round": doc.round,
        "version": doc.version,
        "status": doc.status.value,
        "data": plan_data_to_json(doc),
        "visibility": doc.visibility.value,
        "is_template": doc.is_template,
        "shared_with": list(doc.shared_with),
    }


def _merge_steps(raw: object, step_count: int) -> dict[int, dict]:
    steps: dict[int, dict] = {}
    if not isinstance(raw, dict):
        return steps
    for key, record in raw.items():
        idx = _step_index(key)
        if idx is None or idx >= step_count:
            continue
        if isinstance(record, dict):
            steps[idx] = {**record, "text": str(record.get("text") or "")}
        elif isinstance(record, str):
            # Legacy shape: step index -> plain text
            steps[idx] = {"text": record}
    return steps


def _step_index(key: object) -> int | None:
    try:
        idx = int(key)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        return None
    return idx if idx >= 0 else None


def merge_with_defaults(data: dict | None, step_count: int) -> dict:
    """Overlay persisted plan data on the schema defaults.

    Returns {steps, canvas, empathy, epicenter} with typed keys. Unknown keys
    and non-string block values are dropped.
    """
    data = data or {}
    canvas = default_canvas()
    for block in CanvasBlock:
        value = (data.get("canvas") or {}).get(block.value)
        if isinstance(value, str):
            canvas[block] = value
    empathy = default_empathy()
    for block in EmpathyBlock:
        value = (data.get("empathy") or {}).get(block.value)
        if isinstance(value, str):
            empathy[block] = value
    epicenter_val = data.get("epicenter")
    epicenter = (
        Epicenter(epicenter_val) if epicenter_val in _EPICENTER_VALUES
        else Epicenter.OFFER
    )
    return {
        "steps": _merge_steps(data.get("steps"), step_count),
        "canvas": canvas,
        "empathy": empathy,
        "epicenter": epicenter,
    }


def find_stray_keys(data: dict | None, step_count: int) -> list[str]:
    """Dotted paths present in persisted data but outside the plan schema."""
    data = data or {}
    stray = [
        key for key in data
        if key not in ("steps", "canvas", "empathy", "epicenter")
    ]
    stray += [
        f"canvas.{key}" for key in (data.get("canvas") or {})
        if key not in _CANVAS_KEYS
    ]
    stray += [
        f"empathy.{key}" for key in (data.get("empathy") or {})
        if key not in _EMPATHY_KEYS
    ]
    for key in (data.get("steps") or {}):
        idx = _step_index(key)
        if idx is None or idx >= step_count:
            stray.append(f"steps.{key}")
    epicenter_val = data.get("epicenter")
    if epicenter_val is not None and epicenter_val not in _EPICENTER_VALUES:
        stray.append(f"epicenter={epicenter_val}")
    return stray


def plan_from_record(record: dict, step_count: int) -> PlanDocument:
    """Reconstruct PlanDocument from a persisted record. Pure, no IO."""
    try:
        status = PlanStatus(record["status"])
    except (KeyError, ValueError):
        raise ValidationRejectedError(
            f"Persisted plan has invalid status {record.get('status')!r}",
            "INVALID_RECORD",
        ) from None
    try:
        visibility = Visibility(record.get("visibility") or Visibility.PRIVATE.value)
    except ValueError:
        visibility = Visibility.PRIVATE
    raw_id = record.get("id")
    merged = merge_with_defaults(record.get("data"), step_count)
    return PlanDocument(
        id=PlanId(raw_id if isinstance(raw_id, UUID) else UUID(str(raw_id)))
        if raw_id else None,
        team_id=TeamId(record["team_id"]),
        championship_id=ChampionshipId(record["championship_id"]),
        round=int(record["round"]),
        version=int(record["version"]),
        status=status,
        visibility=visibility,
        is_template=bool(record.get("is_template", False)),
        shared_with=tuple(record.get("shared_with") or ()),
        **merged,
    )
