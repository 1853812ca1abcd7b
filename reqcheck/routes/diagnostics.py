"""
ReqCheck — Diagnostics Route
============================

What:  GET /diagnostics returns the diagnostic log as JSON, oldest first.
How:   Query parameters build a DiagnosticFilter; the reporter's lazy
       query is materialized and trimmed to the last `limit` records.
Who:   Developers reading "what happened" to a request, like tailing
       the server log.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query, Request

from reqcheck.schemas.diagnostics import DiagnosticFilter, DiagnosticListResponse
from reqcheck.schemas.http import FaultKind

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Diagnostics"])


@router.get(
    "/diagnostics",
    response_model=DiagnosticListResponse,
    summary="List diagnostic records",
)
async def list_diagnostics(
    request: Request,
    verb: Optional[str] = Query(default=None, description="Only records for this HTTP method"),
    path: Optional[str] = Query(default=None, description="Only records for this exact path"),
    status: Optional[int] = Query(default=None, ge=100, le=599, description="Only this status code"),
    fault_kind: Optional[FaultKind] = Query(default=None, description="Only records with this fault kind"),
    faulted: Optional[bool] = Query(default=None, description="Only records with (true) or without (false) a fault"),
    limit: int = Query(default=100, ge=1, le=1000, description="Return at most the last N matches"),
) -> DiagnosticListResponse:
    record_filter = DiagnosticFilter(
        verb=verb,
        path=path,
        status=status,
        fault_kind=fault_kind,
        faulted=faulted,
    )
    records = list(request.app.state.router.reporter.query(record_filter))
    return DiagnosticListResponse(records=records[-limit:], total_count=len(records))
