"""JSON log formatter for machine-readable preflight logs.

Emits each log record as a single-line JSON object so that pipeline log
collectors can index preflight output without regex parsing.

Activate by setting ``PREFLIGHT_STRUCTURED_LOGGING=true``.

Output schema per line::

    {
        "timestamp": "2025-05-15T12:34:56.789012+00:00",
        "level": "WARNING",
        "logger": "preflight_engine.checks.registry",
        "message": "Preflight check ownership failed after 3 ms: ...",
        "check": "ownership",        // present when emitted for one check
        "exc_info": "Traceback ..."  // present only on exceptions
    }
"""

from __future__ import annotations

import json
import logging
import traceback
from datetime import UTC, datetime
from typing import Any


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        """Render *record* as a single JSON line."""
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Set by the registry via ``extra={"check": name}``.
        check = getattr(record, "check", None)
        if check is not None:
            payload["check"] = check

        if record.exc_info and record.exc_info[0] is not None:
            payload["exc_info"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(payload, default=str, ensure_ascii=False)
