"""In-memory log buffer backing the debug endpoints."""
import logging
from collections import deque
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4


class TraceBuffer(logging.Handler):
    """Keeps the most recent log records as plain dicts.

    Records are tagged with a category taken from the last component of the
    emitting logger's name, so ``settlement.optimizer`` becomes ``optimizer``.
    Structured payloads passed as ``extra={"data": {...}}`` are kept as-is.
    """

    def __init__(self, capacity: int = 1000, level: int = logging.NOTSET):
        super().__init__(level)
        self.records: deque[dict] = deque(maxlen=capacity)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            self.handleError(record)
            return
        self.records.append({
            "id": uuid4().hex[:8],
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "category": record.name.rsplit(".", 1)[-1],
            "message": message,
            "data": getattr(record, "data", None),
        })

    def get_records(self, category: Optional[str] = None) -> list[dict]:
        # emit() appends under the handler lock, so snapshot under it too
        with self.lock:
            records = list(self.records)
        if category:
            return [r for r in records if r["category"] == category]
        return records

    def clear(self) -> None:
        with self.lock:
            self.records.clear()
