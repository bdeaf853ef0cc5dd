"""Advisor Schemas — requests for AI field suggestions and plan audits.

Invariants:
    - fallback=True in AdviceResponse means the AI call failed and text is a placeholder
"""

from typing import Literal

from pydantic import BaseModel, Field

Branch = Literal[
    "industrial", "commercial", "services", "agribusiness", "finance", "construction",
]


class SuggestFieldRequest(BaseModel):
    step_label: str = Field(min_length=1, max_length=200)
    domain_hint: str = Field(min_length=1, max_length=200)
    context_prompt: str = Field("", max_length=2000)
    branch: Branch = "industrial"
    current_state: dict = Field(default_factory=dict)


class AuditPlanRequest(BaseModel):
    championship_id: str = Field(min_length=1, max_length=64)
    step_label: str = Field(min_length=1, max_length=200)


class AdviceResponse(BaseModel):
    text: str
    fallback: bool
