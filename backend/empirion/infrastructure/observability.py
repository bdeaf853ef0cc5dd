"""Structured Logging — one JSON object per log line, with plan context fields.

Invariants:
    - Every line carries ts, level, logger and msg
    - Plan context passed via `extra=` (team_id, round_number, plan_version, ...)
      is copied to the top level only when set
    - setup_logging is idempotent: calling it twice does not duplicate output

Design Decisions:
    - stdlib logging + custom Formatter: no logging dependency to keep aligned
    - log_format="text" for local runs, "json" everywhere else
"""

import json
import logging
from datetime import datetime, timezone

CONTEXT_FIELDS: tuple[str, ...] = (
    "team_id", "round_number", "plan_version", "plan_status",
    "error_code", "path", "attempt", "input_tokens", "output_tokens",
)

_TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
_HANDLER_NAME = "empirion"


class JSONFormatter(logging.Formatter):
    """Render a LogRecord as a single-line JSON document."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        entry.update(
            (name, getattr(record, name))
            for name in CONTEXT_FIELDS
            if getattr(record, name, None) is not None
        )
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        JSONFormatter() if fmt == "json" else logging.Formatter(_TEXT_FORMAT),
    )
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
