# Middleware package init
"""
ReqCheck — Middleware Package
=============================

Middleware Chain:
    Request → [Request ID] → [CORS] → Route Handler

    The request ID set here is copied into the DiagnosticRecord for
    requests the ReqCheck Router dispatches.
"""
