"""ORM Models — SQLAlchemy declarative models for persisted plans and KPI history.

Invariants:
    - All models inherit from Base (db/base.py)
    - Plans are append-only: every save inserts a new business_plans row

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all/autogenerate
"""

from empirion.models.business_plan import BusinessPlan  # noqa: F401
from empirion.models.company_history import CompanyHistory  # noqa: F401
