"""Per-task key/value pairs prefixed to log lines (for example the agent run id)."""
from __future__ import annotations

import contextvars
import logging

_fields: contextvars.ContextVar[dict[str, object]] = contextvars.ContextVar(
    "log_context", default={}
)


class LogContext:
    def bind(self, **values: object) -> None:
        current = dict(_fields.get())
        current.update({k: v for k, v in values.items() if v is not None})
        _fields.set(current)

    def unbind(self, *keys: str) -> None:
        current = dict(_fields.get())
        for key in keys:
            current.pop(key, None)
        _fields.set(current)


class ContextFilter(logging.Filter):
    """Render the bound fields into ``record.context``."""

    def filter(self, record: logging.LogRecord) -> bool:
        # Records replayed by the queue listener already carry their context.
        if not hasattr(record, "context"):
            fields = _fields.get()
            record.context = "".join(f"{k}={v} " for k, v in fields.items())
        return True


log_context = LogContext()
