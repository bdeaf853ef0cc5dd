"""Plan Field Updates — schema-checked, pure edits of a PlanDocument.

Invariants:
    - Every operation returns a NEW PlanDocument; the input is never mutated
    - Unknown canvas/empathy block names and epicenter values raise UnknownFieldError
    - Step indices outside 0..step_count-1 raise InvalidStepError
    - A failed update leaves no trace (validation happens before copying)

Design Decisions:
    - Enum lookup by value for validation: the Enum is the single source of truth
      for the schema, so a stray key can never be created
    - update_step preserves extra keys on an existing step record (only text is replaced)
"""

from dataclasses import replace

from empirion.core.domain_types import (
    CanvasBlock, DEFAULT_WIZARD_STEP_COUNT, EmpathyBlock, Epicenter,
)
from empirion.core.errors import InvalidStepError, UnknownFieldError
from empirion.core.plan_document import PlanDocument


def _parse_canvas_block(name: str) -> CanvasBlock:
    try:
        return CanvasBlock(name)
    except ValueError:
        raise UnknownFieldError("canvas", str(name)) from None


def _parse_empathy_block(name: str) -> EmpathyBlock:
    try:
        return EmpathyBlock(name)
    except ValueError:
        raise UnknownFieldError("empathy", str(name)) from None


def parse_epicenter(value: str) -> Epicenter:
    try:
        return Epicenter(value)
    except ValueError:
        raise UnknownFieldError("epicenter", str(value)) from None


def ensure_valid_step(step_index: int, step_count: int) -> int:
    if (
        isinstance(step_index, bool)
        or not isinstance(step_index, int)
        or not 0 <= step_index < step_count
    ):
        raise InvalidStepError(step_index, step_count)
    return step_index


def update_step(
    doc: PlanDocument,
    step_index: int,
    text: str,
    step_count: int = DEFAULT_WIZARD_STEP_COUNT,
) -> PlanDocument:
    """Set the text of one wizard pillar."""
    ensure_valid_step(step_index, step_count)
    steps = {idx: dict(record) for idx, record in doc.steps.items()}
    steps[step_index] = {**steps.get(step_index, {}), "text": text}
    return replace(doc, steps=steps)


def update_canvas_block(doc: PlanDocument, block_name: str, text: str) -> PlanDocument:
    block = _parse_canvas_block(block_name)
    return replace(doc, canvas={**doc.canvas, block: text})


def update_empathy_block(doc: PlanDocument, block_name: str, text: str) -> PlanDocument:
    block = _parse_empathy_block(block_name)
    return replace(doc, empathy={**doc.empathy, block: text})


def set_epicenter(doc: PlanDocument, value: str) -> PlanDocument:
    return replace(doc, epicenter=parse_epicenter(value))
