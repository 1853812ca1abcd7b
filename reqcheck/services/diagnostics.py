"""
ReqCheck — Diagnostics Reporter
===============================

What:  Append-only log of DiagnosticRecords, one per dispatched request.
How:   Appends happen under a lock; each record is also written to the
       `reqcheck.diagnostics` logger as "VERB path - status - fault".
Who:   Written by the Router, read by GET /diagnostics, GET /health and tests.

Log levels follow the status class:
    5xx → ERROR, 4xx → WARNING, anything with an EmptyBody fault → WARNING,
    everything else → INFO
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Iterator, List, Optional

from reqcheck.schemas.diagnostics import DiagnosticFilter, DiagnosticRecord
from reqcheck.schemas.http import Fault

logger = logging.getLogger("reqcheck.diagnostics")


class DiagnosticQuery:
    """
    Lazy view over the records that existed when the query was made.

    Iterating walks the reporter's list in insertion order and applies the
    filter record by record. Each iteration starts over from the first record.
    """

    def __init__(
        self,
        records: List[DiagnosticRecord],
        stop: int,
        record_filter: Optional[DiagnosticFilter] = None,
    ):
        self._records = records
        self._stop = stop
        self._filter = record_filter

    def __iter__(self) -> Iterator[DiagnosticRecord]:
        # Indices below _stop never change: the list is only appended to
        for index in range(self._stop):
            record = self._records[index]
            if self._filter is None or self._filter.matches(record):
                yield record


class DiagnosticsReporter:
    """Owns the process-wide diagnostic log."""

    def __init__(self):
        self._records: List[DiagnosticRecord] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._records)

    def record(
        self,
        verb: str,
        path: str,
        status: int,
        fault: Optional[Fault] = None,
        *,
        route: Optional[str] = None,
        request_id: Optional[str] = None,
        duration_ms: Optional[float] = None,
    ) -> DiagnosticRecord:
        """Append one record and write it to the log sink."""
        with self._lock:
            entry = DiagnosticRecord(
                sequence=len(self._records) + 1,
                request_id=request_id or None,
                verb=verb.upper(),
                path=path,
                route=route,
                status=status,
                fault=fault,
                timestamp=datetime.now(timezone.utc),
                duration_ms=round(duration_ms, 2) if duration_ms is not None else None,
            )
            self._records.append(entry)

        if status >= 500:
            level = logging.ERROR
        elif status >= 400 or fault is not None:
            level = logging.WARNING
        else:
            level = logging.INFO

        logger.log(
            level,
            "%s [%s]",
            entry.log_line(),
            entry.request_id or "-",
            extra={
                "request_id": entry.request_id,
                "method": entry.verb,
                "path": entry.path,
                "status": entry.status,
                "duration_ms": entry.duration_ms,
            },
        )
        return entry

    def query(self, record_filter: Optional[DiagnosticFilter] = None) -> DiagnosticQuery:
        return DiagnosticQuery(self._records, len(self._records), record_filter)

    def last(self) -> Optional[DiagnosticRecord]:
        return self._records[-1] if self._records else None


# ── Singleton Instance ────────────────────────────────────────────────────
diagnostics_reporter = DiagnosticsReporter()
