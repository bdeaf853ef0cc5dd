"""KPI History Aggregation — sparse per-round snapshots into a round-indexed table.

Invariants:
    - aggregate() never mutates its input list or the kpis dicts inside it
    - rounds are ascending and distinct; missing rounds are never synthesized
    - Duplicate rounds raise DuplicateRoundError, non-positive rounds InvalidRoundError
    - value_at returns None for "absent" — never 0 — so callers render a placeholder
    - Booleans, strings and NaN are not measured values and read as absent
    - Unknown indicator names raise UnknownIndicatorError (caller error, not absence)

Design Decisions:
    - Table holds deep copies of the snapshots: later mutation of the caller's
      history cannot leak into an already-built table
    - Frozen dataclass + tuple rounds: the table is a value, safe to share
"""

import copy
import math
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from empirion.core.errors import DuplicateRoundError
from empirion.core.kpi_catalogue import INDICATOR_CATALOGUE, get_indicator
from empirion.core.plan_document import ensure_valid_round


@dataclass(frozen=True)
class KPISnapshot:
    """KPIs recorded by the simulation engine for one completed round."""
    round: int
    kpis: Mapping = field(default_factory=dict)


def _as_measurement(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def _walk(kpis: Mapping, path: tuple[str, ...]) -> object:
    node: object = kpis
    for key in path:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return node


@dataclass(frozen=True)
class HistoryTable:
    """Round x indicator lookup over a team's KPI history."""
    rounds: tuple[int, ...] = ()
    _kpis_by_round: Mapping[int, Mapping] = field(default_factory=dict, repr=False)

    @property
    def is_empty(self) -> bool:
        return not self.rounds

    @property
    def latest_round(self) -> int | None:
        return self.rounds[-1] if self.rounds else None

    def value_at(self, round_number: int, indicator: str) -> float | None:
        """Raw value of indicator in round, or None when not recorded."""
        spec = get_indicator(indicator)
        kpis = self._kpis_by_round.get(round_number)
        if kpis is None:
            return None
        return _as_measurement(_walk(kpis, spec.path))

    def delta(self, round_number: int, indicator: str) -> float | None:
        """Change versus the previous recorded round (absent if either side is)."""
        get_indicator(indicator)
        if round_number not in self._kpis_by_round:
            return None
        idx = self.rounds.index(round_number)
        if idx == 0:
            return None
        current = self.value_at(round_number, indicator)
        previous = self.value_at(self.rounds[idx - 1], indicator)
        if current is None or previous is None:
            return None
        return current - previous

    def rows(self, indicators: Iterable[str]) -> list[dict]:
        """One row per indicator, one cell per round, in self.rounds order."""
        return [
            {
                "indicator": name,
                "statement": get_indicator(name).statement,
                "values": [self.value_at(r, name) for r in self.rounds],
            }
            for name in indicators
        ]

    def to_history_payload(self, indicators: Iterable[str] | None = None) -> list[dict]:
        """JSON-safe digest (recorded values only) for prompts and exports."""
        names = list(indicators) if indicators is not None else list(INDICATOR_CATALOGUE)
        payload = []
        for r in self.rounds:
            values = {name: self.value_at(r, name) for name in names}
            payload.append({
                "round": r,
                "kpis": {k: v for k, v in values.items() if v is not None},
            })
        return payload


def aggregate(snapshots: Iterable[KPISnapshot]) -> HistoryTable:
    """Build a HistoryTable from a team's snapshots. Pure — input untouched."""
    by_round: dict[int, Mapping] = {}
    for snapshot in snapshots:
        round_number = ensure_valid_round(snapshot.round)
        if round_number in by_round:
            raise DuplicateRoundError(round_number)
        by_round[round_number] = copy.deepcopy(dict(snapshot.kpis or {}))
    rounds = tuple(sorted(by_round))
    return HistoryTable(
        rounds=rounds,
        _kpis_by_round={r: by_round[r] for r in rounds},
    )
