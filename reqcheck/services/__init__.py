# Services package init
"""
ReqCheck — Services Layer
=========================

Service Inventory:
    - Router: route table, dispatch, fault → status mapping
    - encoder: payload → JSON bytes
    - DiagnosticsReporter: append-only per-request log
    - MovieStore: SQLAlchemy-backed persistence for the movie handlers
    - ClientFetcher: httpx client that decodes responses like a browser
"""
