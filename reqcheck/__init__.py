"""
ReqCheck — Application Package Initializer
==========================================

What: HTTP request/response contract checker for frontend/backend debugging.
Who:  Imported by uvicorn (`uvicorn reqcheck.main:app`), pytest, and the client fetcher.

Architecture Note:
    ┌─────────────────────────────────────┐
    │   HTTP Host (FastAPI catch-all)     │  ← Starlette request → Request
    ├─────────────────────────────────────┤
    │   Router (dispatch + diagnostics)   │  ← status codes, faults, records
    ├─────────────────────────────────────┤
    │   Handlers (routes/movies.py)       │  ← return payload, nothing, or raise
    ├─────────────────────────────────────┤
    │   Encoder / Movie Store             │  ← JSON wire format, SQLAlchemy
    └─────────────────────────────────────┘

    The Client Fetcher sits on the other side of the wire and decodes
    whatever the host sends back, reporting parse faults locally.
"""

__version__ = "1.0.0"
