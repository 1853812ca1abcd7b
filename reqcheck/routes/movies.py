"""
ReqCheck — Movie Handlers
=========================

What:  Handlers for the movie routes, registered on the ReqCheck Router.
How:   Each handler receives a Request and returns a payload, returns
       nothing, or raises. The router decides the status code.
Who:   Registered by main.create_app() through register_movie_routes().

Route Inventory:
    GET  /movies                    → list movies (200)
    POST /movies                    → create a movie (201)
    GET  /movies/{movie_id}         → one movie (200, 404, 400)

    Demo routes (settings.demo_routes_enabled):
    POST /demo/movies/no-content    → creates the movie, returns nothing (204)
    GET  /demo/movies/crash         → references an undefined name (500)
"""

import logging
from typing import List, Optional

from reqcheck.exceptions import NotFoundError, ValidationError
from reqcheck.schemas.http import Request
from reqcheck.schemas.movie import MovieResponse
from reqcheck.services.movie_store import MovieStore
from reqcheck.services.router import Router

logger = logging.getLogger(__name__)


class MovieHandlers:
    """Thin handlers; persistence lives in MovieStore."""

    def __init__(self, store: MovieStore):
        self._store = store

    async def list_movies(self, request: Request) -> List[MovieResponse]:
        return await self._store.all()

    async def create_movie(self, request: Request) -> MovieResponse:
        fields = request.json()
        if not isinstance(fields, dict):
            raise ValidationError(
                message="Expected a JSON object with movie fields",
                field="body",
            )
        logger.debug("[%s] create_movie params: %s", request.request_id or "-", fields)
        return await self._store.create(fields)

    async def get_movie(self, request: Request) -> MovieResponse:
        raw_id = request.path_params.get("movie_id", "")
        try:
            movie_id = int(raw_id)
        except ValueError:
            raise ValidationError(
                message=f"Movie id must be an integer, got '{raw_id}'",
                field="movie_id",
            )
        movie = await self._store.get(movie_id)
        if movie is None:
            raise NotFoundError(resource="movie", resource_id=str(movie_id))
        return movie

    # ── Demo handlers ─────────────────────────────────────────────────────

    async def create_movie_no_content(self, request: Request) -> None:
        """Saves the movie but renders nothing, so the client gets an empty 204."""
        fields = request.json()
        if not isinstance(fields, dict):
            raise ValidationError(message="Expected a JSON object with movie fields", field="body")
        await self._store.create(fields)

    async def crash(self, request: Request) -> Optional[List[MovieResponse]]:
        """Filters on a variable that was never assigned, so it raises NameError."""
        year = selected_year  # noqa: F821
        movies = await self._store.all()
        return [movie for movie in movies if movie.year == year]


def register_movie_routes(
    router: Router,
    store: MovieStore,
    include_demo_routes: bool = True,
) -> MovieHandlers:
    handlers = MovieHandlers(store)

    router.add_route("GET", "/movies", handlers.list_movies)
    router.add_route("POST", "/movies", handlers.create_movie, status_code=201)
    router.add_route("GET", "/movies/{movie_id}", handlers.get_movie)

    if include_demo_routes:
        router.add_route("POST", "/demo/movies/no-content", handlers.create_movie_no_content)
        router.add_route("GET", "/demo/movies/crash", handlers.crash)

    return handlers
