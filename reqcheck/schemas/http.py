"""
ReqCheck — Request, Response, and Fault Types
=============================================

What:  The values that flow through the router: what came in, what goes
       out, and what went wrong.
Who:   Built by the HTTP host adapter and tests (Request), the router
       (Response, Fault), and the client fetcher (ParseError faults).

Fault Kinds:
    NotFound     → no route matches, or a handler reports a missing resource
    EmptyBody    → handler produced no payload (recorded in diagnostics only)
    ParseError   → client could not decode the body as JSON (client side only)
    ServerFault  → handler raised an unexpected exception
    BadRequest   → handler rejected the request input
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field
from starlette.datastructures import Headers

from reqcheck.exceptions import ValidationError


class FaultKind(str, Enum):
    NOT_FOUND = "NotFound"
    EMPTY_BODY = "EmptyBody"
    PARSE_ERROR = "ParseError"
    SERVER_FAULT = "ServerFault"
    BAD_REQUEST = "BadRequest"


class Fault(BaseModel):
    """
    A categorized error condition.

    location is "<file>:<line> in <function>" for server faults, the
    frame the exception was raised from.
    """

    kind: FaultKind = Field(description="Fault category")
    message: str = Field(min_length=1, description="Human-readable description")
    location: Optional[str] = Field(default=None, description="Source location marker")

    model_config = {"frozen": True}

    def describe(self) -> str:
        text = f"{self.kind.value}: {self.message}"
        if self.location:
            text = f"{text} ({self.location})"
        return text


@dataclass(frozen=True)
class Request:
    """
    One incoming call as the router sees it.

    Headers are case-insensitive. path_params is empty until the router
    matches a pattern route and hands the handler a copy with them set.
    """

    verb: str
    path: str
    headers: Headers = field(default_factory=Headers)
    body: bytes = b""
    query: Mapping[str, str] = field(default_factory=dict)
    path_params: Mapping[str, Any] = field(default_factory=dict)
    request_id: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "verb", self.verb.upper().strip())
        if isinstance(self.headers, Mapping) and not isinstance(self.headers, Headers):
            object.__setattr__(self, "headers", Headers(headers=dict(self.headers)))
        elif not isinstance(self.headers, Headers):
            # Sequence of (name, value) pairs; repeated names are kept
            raw = [
                (name.lower().encode("latin-1"), value.encode("latin-1"))
                for name, value in self.headers
            ]
            object.__setattr__(self, "headers", Headers(raw=raw))
        if self.body is None:
            object.__setattr__(self, "body", b"")

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")

    def with_path_params(self, params: Mapping[str, Any]) -> "Request":
        return replace(self, path_params=dict(params))

    def json(self) -> Any:
        """
        Decode the body as JSON.

        Raises:
            ValidationError: body is empty, not labelled as JSON, or malformed (→ 400)
        """
        if not self.body:
            raise ValidationError(
                message="Request body is empty; expected a JSON document",
                field="body",
            )
        if "json" not in self.content_type.lower():
            raise ValidationError(
                message=(
                    f"Unsupported Content-Type '{self.content_type or 'none'}'. "
                    "Send the payload as application/json"
                ),
                field="content-type",
            )
        try:
            return json.loads(self.body)
        except ValueError as e:
            raise ValidationError(
                message="Request body is not valid JSON",
                field="body",
                context={"error": str(e)},
            ) from e


@dataclass(frozen=True)
class Response:
    """
    What the router sends back. Only the router creates these.

    A response with status >= 400 always carries a fault.
    """

    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    fault: Optional[Fault] = None

    def __post_init__(self) -> None:
        if self.status >= 400 and self.fault is None:
            raise ValueError(f"Response with status {self.status} requires a fault")

    @property
    def is_error(self) -> bool:
        return self.status >= 400
