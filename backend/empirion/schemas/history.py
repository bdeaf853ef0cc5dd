"""History Schemas — KPI comparison table returned to the dashboard.

Invariants:
    - values[i] and deltas[i] belong to rounds[i]
    - None means "not recorded" — never rendered as 0
"""

from pydantic import BaseModel


class HistoryRow(BaseModel):
    indicator: str
    statement: bool
    values: list[float | None]
    deltas: list[float | None]


class HistoryResponse(BaseModel):
    team_id: str
    rounds: list[int]
    latest_round: int | None
    rows: list[HistoryRow]
