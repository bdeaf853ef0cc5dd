"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - PlanId wraps UUID; TeamId and ChampionshipId are opaque strings
    - Canvas has exactly 9 blocks, empathy map exactly 6 blocks
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (ADR: persisted record is JSON)
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

PlanId = NewType("PlanId", UUID)
TeamId = NewType("TeamId", str)
ChampionshipId = NewType("ChampionshipId", str)


# ─── Enums ───────────────────────────────────────────────────────

class PlanStatus(str, Enum):
    """Plan lifecycle states — maps to DB `status` column."""
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    FINALIZED = "finalized"


class Epicenter(str, Enum):
    """Declared primary axis of strategic change for a plan."""
    RESOURCE = "resource"
    OFFER = "offer"
    CUSTOMER = "customer"
    FINANCE = "finance"


class CanvasBlock(str, Enum):
    """The 9 Business Model Canvas blocks."""
    CUSTOMER_SEGMENTS = "customer_segments"
    VALUE_PROPOSITIONS = "value_propositions"
    CHANNELS = "channels"
    CUSTOMER_RELATIONSHIPS = "customer_relationships"
    REVENUE_STREAMS = "revenue_streams"
    KEY_RESOURCES = "key_resources"
    KEY_ACTIVITIES = "key_activities"
    KEY_PARTNERSHIPS = "key_partnerships"
    COST_STRUCTURE = "cost_structure"


class EmpathyBlock(str, Enum):
    """The 6 Empathy Map blocks."""
    SEES = "sees"
    HEARS = "hears"
    THINKS_FEELS = "thinks_feels"
    SAYS_DOES = "says_does"
    PAINS = "pains"
    GAINS = "gains"


class Visibility(str, Enum):
    """Access-control level of a persisted plan."""
    PRIVATE = "private"
    CHAMPIONSHIP = "championship"
    PUBLIC = "public"


# Wizard pillars: executive summary, market analysis, marketing plan,
# operational plan, financial interpretation. Overridable via Settings.
DEFAULT_WIZARD_STEP_COUNT: int = 5
