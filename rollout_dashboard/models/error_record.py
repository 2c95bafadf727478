from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for load-failure logging.

One record is written per failed workbook load. Row-level problems are never
recorded here; they are dropped silently by the extractors.

Serialised as JSON Lines with a fixed key set:
``timestamp, source, stage, error_type, message``.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: Workbook URL or path that was being loaded
        stage: Pipeline stage that failed (fetch, read, extract)
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable failure reason
    """
    timestamp: str
    source: str
    stage: str
    error_type: str
    message: str

    @staticmethod
    def create(source: str, stage: str, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            stage=stage,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
