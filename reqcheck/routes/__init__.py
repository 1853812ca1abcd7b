# Routes package init
"""
ReqCheck — Routes Package
=========================

Route Inventory:
    - movies.py:       handlers registered on the ReqCheck Router
                       (/movies, /movies/{movie_id}, /demo/movies/*)
    - health.py:       GET /health       (native FastAPI route)
    - diagnostics.py:  GET /diagnostics  (native FastAPI route)

Handlers stay thin: read the Request, call the store, return a payload.
"""
