"""
ReqCheck — Movie Store
======================

What:  Persistence collaborator the movie handlers call.
How:   One async SQLAlchemy session per operation; inserts are serialized
       by an asyncio.Lock so interleaved requests never lose a row.
Who:   Called by MovieHandlers in routes/movies.py.

Operations:
    create(fields) → MovieResponse   (validates with MovieCreate)
    all()          → [MovieResponse] (insertion order)
    get(movie_id)  → MovieResponse | None
"""

import asyncio
import logging
from typing import Any, List, Mapping, Optional

import pydantic
from sqlalchemy import asc, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from reqcheck.database import async_session_factory
from reqcheck.exceptions import DatabaseError, ValidationError
from reqcheck.models.movie import Movie
from reqcheck.schemas.movie import MovieCreate, MovieResponse

logger = logging.getLogger(__name__)


class MovieStore:
    """
    Stores and lists movies.

    Error Handling Strategy:
        Field validation failures become ValidationError (400).
        Anything the database raises is logged and wrapped in DatabaseError.
    """

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None):
        self._session_factory = session_factory or async_session_factory
        self._write_lock = asyncio.Lock()

    async def create(self, fields: Mapping[str, Any]) -> MovieResponse:
        """
        Validate and insert one movie.

        Raises:
            ValidationError: fields do not describe a movie (→ 400)
            DatabaseError: insert failed (→ 500)
        """
        try:
            data = MovieCreate.model_validate(dict(fields))
        except pydantic.ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first.get("loc", ())) or None
            raise ValidationError(
                message=f"Invalid movie: {first.get('msg', 'invalid value')}",
                field=field,
                context={"errors": len(e.errors())},
            ) from e

        async with self._write_lock:
            try:
                async with self._session_factory() as session:
                    movie = Movie(title=data.title, year=data.year)
                    session.add(movie)
                    await session.commit()
                    logger.info("Movie created: id=%s title=%r year=%s", movie.id, movie.title, movie.year)
                    return MovieResponse.model_validate(movie)
            except Exception as e:
                logger.error("Database error creating movie: %s", str(e), exc_info=True)
                raise DatabaseError(
                    message="Could not save the movie. Please try again.",
                    context={"error_type": type(e).__name__},
                ) from e

    async def all(self) -> List[MovieResponse]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(Movie).order_by(asc(Movie.id)))
                return [MovieResponse.model_validate(movie) for movie in result.scalars().all()]
        except Exception as e:
            logger.error("Database error listing movies: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve movies. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

    async def get(self, movie_id: int) -> Optional[MovieResponse]:
        try:
            async with self._session_factory() as session:
                movie = await session.get(Movie, movie_id)
        except Exception as e:
            logger.error("Database error fetching movie %s: %s", movie_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the movie. Please try again.",
                context={"movie_id": movie_id},
            ) from e
        return MovieResponse.model_validate(movie) if movie is not None else None
