"""Plan Schemas — API contracts for loading, saving and auditing plans.

Invariants:
    - PlanSaveRequest.base_version, when sent, is the version the client last loaded
      (0 = new) and turns on the stale-copy check; omitted, the save always lands
    - Block names are NOT validated here: unknown names reach core and raise
      UnknownFieldError, so HTTP and in-process callers see the same error

Design Decisions:
    - Literal for status: Pydantic rejects garbage before the lifecycle runs
    - Responses built from plan_to_record: one serialization path for DB and API
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from empirion.core.plan_audit import AuditEntry
from empirion.core.plan_document import PlanDocument
from empirion.core.plan_snapshot import plan_to_record


class PlanSaveRequest(BaseModel):
    """Field edits plus the target status for the next plan version."""
    championship_id: str = Field(min_length=1, max_length=64)
    base_version: int | None = Field(None, ge=0)
    status: Literal["draft", "submitted", "approved", "finalized"] = "draft"
    steps: dict[int, str] = Field(default_factory=dict)
    canvas: dict[str, str] = Field(default_factory=dict)
    empathy: dict[str, str] = Field(default_factory=dict)
    epicenter: str | None = None

    @field_validator("championship_id")
    @classmethod
    def strip_championship_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("championship_id cannot be empty or whitespace")
        return v


class PlanResponse(BaseModel):
    """Public view of one plan version (version 0 = not saved yet)."""
    id: str | None
    championship_id: str
    team_id: str
    round: int
    version: int
    status: str
    steps: dict[int, dict]
    canvas: dict[str, str]
    empathy: dict[str, str]
    epicenter: str
    visibility: str
    is_template: bool
    shared_with: list[str]
    persisted: bool

    @classmethod
    def from_document(cls, doc: PlanDocument) -> "PlanResponse":
        record = plan_to_record(doc)
        data = record.pop("data")
        return cls(
            **record,
            steps={int(k): v for k, v in data["steps"].items()},
            canvas=data["canvas"],
            empathy=data["empathy"],
            epicenter=data["epicenter"],
            persisted=doc.is_persisted,
        )


class AuditEntryResponse(BaseModel):
    version: int
    field_path: str
    old_value: str | None
    new_value: str | None

    @classmethod
    def from_entry(cls, entry: AuditEntry) -> "AuditEntryResponse":
        return cls(
            version=entry.version,
            field_path=entry.field_path,
            old_value=entry.old_value,
            new_value=entry.new_value,
        )
