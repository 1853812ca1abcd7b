"""
ReqCheck — Router
=================

What:  Maps (verb, path) to handlers and turns every call into exactly one
       Response and one DiagnosticRecord.
How:   Looks the route up, runs the handler, encodes what it returned,
       and converts anything it raised into a fault with a status code.
Who:   Called by the FastAPI catch-all endpoint in main.py and by tests.

Request Lifecycle:
    Received → Routed{matched|unmatched} → Handled{ok|faulted}
             → Encoded{ok|empty} → Logged

    Outcome table:
        no route                      → 404, empty body, NotFound
        handler raises ValidationError → 400, JSON error, BadRequest
        handler raises NotFoundError   → 404, JSON error, NotFound
        handler raises anything else   → 500, JSON error, ServerFault + location
        handler returns a payload      → route status or 200, JSON body
        handler returns None           → route status or 204, empty body

Path templates use Starlette's syntax: "/movies/{movie_id}" or
"/movies/{movie_id:int}". Converted values land in request.path_params.
"""

import inspect
import logging
import os
import re
import time
import traceback
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from starlette.convertors import Convertor
from starlette.routing import compile_path

from reqcheck.exceptions import NotFoundError, ValidationError
from reqcheck.schemas.http import Fault, FaultKind, Request, Response
from reqcheck.schemas.movie import ErrorResponse
from reqcheck.services.diagnostics import DiagnosticsReporter, diagnostics_reporter
from reqcheck.services.encoder import encode

logger = logging.getLogger(__name__)

Handler = Callable[[Request], Union[Any, Awaitable[Any]]]

SUPPORTED_VERBS = ("GET", "POST", "PUT", "PATCH", "DELETE")


def fault_from_exception(exc: BaseException) -> Fault:
    """
    Build a ServerFault naming the exception and the frame that raised it.

    Example: NameError: name 'selected_year' is not defined (movies.py:76 in crash)
    """
    frames = traceback.extract_tb(exc.__traceback__)
    location = "<unknown>"
    if frames:
        frame = frames[-1]
        location = f"{os.path.basename(frame.filename)}:{frame.lineno} in {frame.name}"
    message = f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__
    return Fault(kind=FaultKind.SERVER_FAULT, message=message, location=location)


def _fault_message(exc: Exception) -> str:
    return getattr(exc, "message", "") or type(exc).__name__


@dataclass(frozen=True)
class Route:
    """(verb, path template) → handler. Identity is (verb, path)."""

    verb: str
    path: str
    handler: Handler = field(compare=False)
    status_code: Optional[int] = None
    name: Optional[str] = None
    pattern: Optional[re.Pattern] = field(default=None, compare=False, repr=False)
    convertors: Dict[str, Convertor] = field(default_factory=dict, compare=False, repr=False)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.verb, self.path)

    @property
    def is_literal(self) -> bool:
        return not self.convertors

    def match(self, path: str) -> Optional[Dict[str, Any]]:
        if self.is_literal:
            return {} if path == self.path else None
        found = self.pattern.match(path)
        if found is None:
            return None
        return {
            key: self.convertors[key].convert(value)
            for key, value in found.groupdict().items()
        }


class Router:
    """
    Route table plus dispatch.

    Routes are immutable once registered; registering the same
    (verb, path) twice raises ValueError.
    """

    def __init__(
        self,
        reporter: Optional[DiagnosticsReporter] = None,
        expose_fault_details: bool = False,
    ):
        self._reporter = reporter if reporter is not None else diagnostics_reporter
        self._expose_fault_details = expose_fault_details
        self._exact: Dict[Tuple[str, str], Route] = {}
        self._patterns: List[Route] = []

    @property
    def reporter(self) -> DiagnosticsReporter:
        return self._reporter

    @property
    def routes(self) -> List[Route]:
        return list(self._exact.values()) + list(self._patterns)

    # ── Registration ──────────────────────────────────────────────────────

    def add_route(
        self,
        verb: str,
        path: str,
        handler: Handler,
        status_code: Optional[int] = None,
        name: Optional[str] = None,
    ) -> Route:
        normalized_verb = verb.upper().strip()
        if normalized_verb not in SUPPORTED_VERBS:
            raise ValueError(f"Unsupported verb '{verb}'. Must be one of: {SUPPORTED_VERBS}")
        if not path.startswith("/"):
            raise ValueError("path must start with '/'")
        if status_code is not None and not 200 <= status_code < 300:
            raise ValueError(f"Route status_code must be 2xx, got {status_code}")
        if any(route.key == (normalized_verb, path) for route in self.routes):
            raise ValueError(f"Route already registered: {normalized_verb} {path}")

        try:
            pattern, _, convertors = compile_path(path)
        except AssertionError as e:
            # Starlette asserts on unknown convertor names
            raise ValueError(str(e)) from e

        route = Route(
            verb=normalized_verb,
            path=path,
            handler=handler,
            status_code=status_code,
            name=name or getattr(handler, "__name__", None),
            pattern=pattern,
            convertors=convertors,
        )
        if route.is_literal:
            self._exact[route.key] = route
        else:
            self._patterns.append(route)
        logger.debug("Registered route %s %s", route.verb, route.path)
        return route

    def route(self, verb: str, path: str, status_code: Optional[int] = None):
        def decorator(handler: Handler) -> Handler:
            self.add_route(verb, path, handler, status_code=status_code)
            return handler
        return decorator

    def get(self, path: str, status_code: Optional[int] = None):
        return self.route("GET", path, status_code)

    def post(self, path: str, status_code: Optional[int] = None):
        return self.route("POST", path, status_code)

    def put(self, path: str, status_code: Optional[int] = None):
        return self.route("PUT", path, status_code)

    def patch(self, path: str, status_code: Optional[int] = None):
        return self.route("PATCH", path, status_code)

    def delete(self, path: str, status_code: Optional[int] = None):
        return self.route("DELETE", path, status_code)

    # ── Lookup ────────────────────────────────────────────────────────────

    def match(self, verb: str, path: str) -> Optional[Tuple[Route, Dict[str, Any]]]:
        """Literal routes first, then pattern routes in registration order."""
        normalized_verb = verb.upper().strip()
        route = self._exact.get((normalized_verb, path))
        if route is not None:
            return route, {}
        for candidate in self._patterns:
            if candidate.verb != normalized_verb:
                continue
            params = candidate.match(path)
            if params is not None:
                return candidate, params
        return None

    # ── Dispatch ──────────────────────────────────────────────────────────

    async def dispatch(self, request: Request) -> Response:
        """Run one request through the lifecycle. Always records exactly once."""
        start_time = time.perf_counter()
        matched = self.match(request.verb, request.path)

        if matched is None:
            response = Response(
                status=404,
                fault=Fault(
                    kind=FaultKind.NOT_FOUND,
                    message=f'No route matches [{request.verb}] "{request.path}"',
                ),
            )
            self._record(request, response, None, start_time)
            return response

        route, params = matched
        request = request.with_path_params(params)
        diagnostic_fault: Optional[Fault] = None

        try:
            payload = route.handler(request)
            if inspect.isawaitable(payload):
                payload = await payload
            encoded = encode(payload)
        except ValidationError as e:
            fault = Fault(kind=FaultKind.BAD_REQUEST, message=_fault_message(e))
            response = self._error_response(400, "validation_error", fault, request, e.context)
        except NotFoundError as e:
            fault = Fault(kind=FaultKind.NOT_FOUND, message=_fault_message(e))
            response = self._error_response(404, "not_found", fault, request)
        except Exception as e:
            fault = fault_from_exception(e)
            logger.error(
                "[%s] Unhandled error in %s %s: %s",
                request.request_id or "-",
                route.verb,
                route.path,
                fault.describe(),
                exc_info=True,
            )
            details = None
            if self._expose_fault_details:
                details = {"fault": fault.message, "location": fault.location}
            response = self._error_response(500, "internal_server_error", fault, request, details)
        else:
            headers = {}
            if encoded.content_type:
                headers["Content-Type"] = encoded.content_type
            if encoded.is_empty:
                status = route.status_code or 204
                diagnostic_fault = encoded.fault
            else:
                status = route.status_code or 200
            response = Response(status=status, headers=headers, body=encoded.body)

        self._record(request, response, route, start_time, diagnostic_fault)
        return response

    def _error_response(
        self,
        status: int,
        error: str,
        fault: Fault,
        request: Request,
        details: Optional[Dict[str, Any]] = None,
    ) -> Response:
        if status == 500 and not self._expose_fault_details:
            message = "An unexpected error occurred. Please try again or contact support."
        else:
            message = fault.message
        body = ErrorResponse(
            error=error,
            message=message,
            details=details or None,
            request_id=request.request_id or None,
        )
        encoded = encode(body)
        return Response(
            status=status,
            headers={"Content-Type": encoded.content_type},
            body=encoded.body,
            fault=fault,
        )

    def _record(
        self,
        request: Request,
        response: Response,
        route: Optional[Route],
        start_time: float,
        fault: Optional[Fault] = None,
    ) -> None:
        self._reporter.record(
            request.verb,
            request.path,
            response.status,
            response.fault or fault,
            route=route.path if route else None,
            request_id=request.request_id,
            duration_ms=(time.perf_counter() - start_time) * 1000,
        )
