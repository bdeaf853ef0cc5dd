"""KPI Catalogue — fixed set of indicators the history table can look up.

Invariants:
    - Every indicator has exactly one path into a snapshot's kpis mapping
    - Statement indicators live under statements.<statement>.<line>
    - Names are unique; statement indicators are prefixed with their statement
      (dre.net_profit) so they never collide with flat ones (net_profit)

Design Decisions:
    - Paths are tuples, not dotted strings parsed at lookup time: lookups are a
      plain walk, and a typo in the catalogue fails at import, not per request
    - Catalogue mirrors the simulation engine output; values are never computed here
"""

from dataclasses import dataclass

from empirion.core.errors import UnknownIndicatorError


@dataclass(frozen=True)
class IndicatorSpec:
    """Where to find one indicator inside a KPISnapshot.kpis mapping."""
    name: str
    path: tuple[str, ...]
    statement: bool = False


STATEMENT_LINES: dict[str, tuple[str, ...]] = {
    "dre": (
        "revenue", "cpv", "gross_profit", "opex", "operating_profit", "net_profit",
    ),
    "cash_flow": ("start", "inflow_total", "outflow_total", "final"),
    "balance_sheet": ("assets_total", "liabilities_total", "equity_total"),
}

_FLAT_INDICATORS: tuple[str, ...] = (
    "roi", "bep", "solvency_index", "liquidity_current", "equity",
    "net_profit", "market_share", "insolvency_index", "credit_limit",
)

_GROUPED_INDICATORS: dict[str, tuple[str, str]] = {
    "scissors_effect": ("scissors_effect", "gap"),
    "ncg": ("scissors_effect", "ncg"),
    "ccl": ("scissors_effect", "ccl"),
    "pmre": ("ciclos", "pmre"),
    "pmrv": ("ciclos", "pmrv"),
    "pmpc": ("ciclos", "pmpc"),
    "operating_cycle": ("ciclos", "operacional"),
    "financial_cycle": ("ciclos", "financeiro"),
    "banking_score": ("banking", "score"),
    "interest_rate": ("banking", "interest_rate"),
    "banking_credit_limit": ("banking", "credit_limit"),
}


def _build_catalogue() -> dict[str, IndicatorSpec]:
    catalogue = {name: IndicatorSpec(name, (name,)) for name in _FLAT_INDICATORS}
    for name, path in _GROUPED_INDICATORS.items():
        catalogue[name] = IndicatorSpec(name, path)
    for statement, lines in STATEMENT_LINES.items():
        for line in lines:
            name = f"{statement}.{line}"
            catalogue[name] = IndicatorSpec(
                name, ("statements", statement, line), statement=True,
            )
    return catalogue


INDICATOR_CATALOGUE: dict[str, IndicatorSpec] = _build_catalogue()


def get_indicator(name: str) -> IndicatorSpec:
    """Catalogue lookup; unknown names are a caller error."""
    spec = INDICATOR_CATALOGUE.get(name)
    if spec is None:
        raise UnknownIndicatorError(name)
    return spec


def statement_indicators(statement: str) -> list[str]:
    """Indicator names for one financial statement, in display order."""
    if statement not in STATEMENT_LINES:
        raise UnknownIndicatorError(statement)
    return [f"{statement}.{line}" for line in STATEMENT_LINES[statement]]
