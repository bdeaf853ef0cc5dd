"""Plan Audit Trail — field-level change log reconstructed from a plan lineage.

Invariants:
    - diff_plans is PURE and only compares schema fields (steps, canvas, empathy,
      epicenter, status); identifiers and access metadata are ignored
    - The first version of a lineage is diffed against the schema defaults
    - Entries are ordered by version, then by field path, with the status change last

Design Decisions:
    - Versions are immutable, so the change log is derived on demand instead of
      stored alongside each save
"""

from dataclasses import dataclass

from empirion.core.plan_document import PlanDocument, new_plan_document


@dataclass(frozen=True)
class AuditEntry:
    """One field changed by one saved version."""
    version: int
    field_path: str
    old_value: str | None
    new_value: str | None


def _flatten(doc: PlanDocument) -> dict[str, str]:
    fields: dict[str, str] = {
        f"canvas.{block.value}": text for block, text in doc.canvas.items()
    }
    fields.update({
        f"empathy.{block.value}": text for block, text in doc.empathy.items()
    })
    fields.update({
        f"steps.{idx}.text": record.get("text", "")
        for idx, record in doc.steps.items()
    })
    fields["epicenter"] = doc.epicenter.value
    return fields


def diff_plans(before: PlanDocument | None, after: PlanDocument) -> list[AuditEntry]:
    """Changes introduced by `after` relative to `before` (or the defaults)."""
    if before is None:
        before = new_plan_document(after.team_id, after.championship_id, after.round)
        old_status = None
    else:
        old_status = before.status.value
    old, new = _flatten(before), _flatten(after)
    entries = [
        AuditEntry(after.version, path, old.get(path), new.get(path))
        for path in sorted(old.keys() | new.keys())
        if old.get(path) != new.get(path)
    ]
    if old_status != after.status.value:
        entries.append(
            AuditEntry(after.version, "status", old_status, after.status.value),
        )
    return entries


def audit_trail(lineage: list[PlanDocument]) -> list[AuditEntry]:
    """Full change log for a lineage, oldest version first."""
    entries: list[AuditEntry] = []
    previous: PlanDocument | None = None
    for doc in sorted(lineage, key=lambda d: d.version):
        entries.extend(diff_plans(previous, doc))
        previous = doc
    return entries
