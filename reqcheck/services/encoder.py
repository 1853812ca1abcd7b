"""
ReqCheck — Response Encoder
===========================

What:  Turns a handler payload into wire bytes.
How:   fastapi.encoders.jsonable_encoder flattens pydantic models,
       datetimes and friends; json.dumps renders compact UTF-8 the same
       way Starlette's JSONResponse does.

Encoding rules:
    payload is None  → b"" and an EmptyBody fault for the diagnostics log
    anything else    → compact JSON, Content-Type: application/json
"""

import json
from dataclasses import dataclass
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder

from reqcheck.schemas.http import Fault, FaultKind

JSON_MEDIA_TYPE = "application/json"


@dataclass(frozen=True)
class EncodedBody:
    body: bytes
    content_type: Optional[str] = None
    fault: Optional[Fault] = None

    @property
    def is_empty(self) -> bool:
        return not self.body


def encode(payload: Any) -> EncodedBody:
    """
    Serialize a payload to JSON bytes.

    Raises:
        ValueError / TypeError: payload holds something JSON cannot represent
            (the router reports this as a ServerFault)
    """
    if payload is None:
        return EncodedBody(
            body=b"",
            fault=Fault(
                kind=FaultKind.EMPTY_BODY,
                message="Handler returned no payload; response body is empty",
            ),
        )

    body = json.dumps(
        jsonable_encoder(payload),
        ensure_ascii=False,
        allow_nan=False,
        indent=None,
        separators=(",", ":"),
    ).encode("utf-8")
    return EncodedBody(body=body, content_type=JSON_MEDIA_TYPE)


def decode(body: bytes) -> Any:
    """Inverse of encode for non-empty bodies. Raises ValueError on bad input."""
    return json.loads(body.decode("utf-8"))
