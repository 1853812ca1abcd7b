"""
ReqCheck — Diagnostic Record Schemas
====================================

What:  One record per dispatched request, plus the filter used to find them.
Who:   Produced by DiagnosticsReporter, served by GET /diagnostics.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from reqcheck.schemas.http import Fault, FaultKind


class DiagnosticRecord(BaseModel):
    """
    What happened to a single request, the way a server log line would say it.

    Frozen: records are never mutated after the reporter appends them.
    """

    sequence: int = Field(description="Position in the log, starting at 1")
    request_id: Optional[str] = Field(default=None, description="X-Request-ID correlation id")
    verb: str = Field(description="HTTP method")
    path: str = Field(description="Request path")
    route: Optional[str] = Field(default=None, description="Matched route pattern, null on a miss")
    status: int = Field(description="Response status code")
    fault: Optional[Fault] = Field(default=None, description="Fault detected server-side")
    timestamp: datetime = Field(description="When the record was appended (UTC)")
    duration_ms: Optional[float] = Field(default=None, description="Dispatch time in milliseconds")

    model_config = {"frozen": True}

    def log_line(self) -> str:
        outcome = self.fault.describe() if self.fault else "ok"
        return f"{self.verb} {self.path} - {self.status} - {outcome}"


class DiagnosticFilter(BaseModel):
    """Every field left as None matches anything."""

    verb: Optional[str] = None
    path: Optional[str] = None
    status: Optional[int] = None
    fault_kind: Optional[FaultKind] = None
    faulted: Optional[bool] = None

    def matches(self, record: DiagnosticRecord) -> bool:
        if self.verb is not None and record.verb != self.verb.upper():
            return False
        if self.path is not None and record.path != self.path:
            return False
        if self.status is not None and record.status != self.status:
            return False
        if self.fault_kind is not None and (
            record.fault is None or record.fault.kind != self.fault_kind
        ):
            return False
        if self.faulted is not None and (record.fault is not None) != self.faulted:
            return False
        return True


class DiagnosticListResponse(BaseModel):
    """Returned by GET /diagnostics."""

    records: List[DiagnosticRecord] = Field(description="Matching records, oldest first")
    total_count: int = Field(description="Number of matching records")
