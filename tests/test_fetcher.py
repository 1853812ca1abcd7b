"""
ReqCheck — Client Fetcher Tests
===============================

What:  The browser-side view of each outcome: what status arrives and
       whether the body decodes.
How:   ClientFetcher talks to create_app() through httpx's ASGITransport;
       transport failures and odd bodies use httpx.MockTransport.

Scenarios covered:
    ✅ handler returns nothing → 204, empty body, ParseError on decode
    ✅ JSON round trip for the lesson's {"title": "", "year": 2021}
    ✅ undefined name in a handler → 500 ServerFault in the diagnostics
    ✅ unknown route → 404, empty body, ParseError
    ✅ connection refused → TransportError, no retry
"""

import logging

import httpx
import pytest

from reqcheck.exceptions import TransportError
from reqcheck.schemas.http import FaultKind, Request
from reqcheck.services.fetcher import ClientFetcher, decode_body
from reqcheck.services.router import Router


class TestFetchAgainstApp:

    @pytest.mark.asyncio
    async def test_handler_without_payload_breaks_client_decode(self, app, fetcher, reporter, lesson_movie):
        router = Router(reporter=reporter)

        async def create(request):
            request.json()
            return None
        router.add_route("POST", "/movies", create)
        app.state.router = router

        result = await fetcher.fetch_json("POST", "/movies", lesson_movie)

        assert result.status == 204
        assert result.body == b""
        assert result.payload is None
        assert result.fault.kind == FaultKind.PARSE_ERROR
        assert result.fault.message == "Unexpected end of JSON input"
        assert not result.ok
        # The server saw a successful request; the parse fault is client-only
        assert reporter.last().status == 204
        assert reporter.last().fault.kind == FaultKind.EMPTY_BODY

    @pytest.mark.asyncio
    async def test_demo_no_content_route_stores_but_returns_nothing(self, fetcher, movie_store, lesson_movie):
        result = await fetcher.fetch_json("POST", "/demo/movies/no-content", lesson_movie)

        assert result.status == 204
        assert result.fault.kind == FaultKind.PARSE_ERROR
        stored = await movie_store.all()
        assert [(m.title, m.year) for m in stored] == [("", 2021)]

    @pytest.mark.asyncio
    async def test_payload_round_trips(self, app, fetcher, reporter, lesson_movie):
        router = Router(reporter=reporter)
        router.add_route("POST", "/movies", lambda request: request.json(), status_code=201)
        app.state.router = router

        result = await fetcher.fetch_json("POST", "/movies", lesson_movie)

        assert result.status == 201
        assert result.ok
        assert result.payload == lesson_movie
        assert result.headers["content-type"] == "application/json"

    @pytest.mark.asyncio
    async def test_create_movie_returns_stored_record(self, fetcher, lesson_movie):
        result = await fetcher.fetch_json("POST", "/movies", lesson_movie)

        assert result.status == 201
        assert result.payload["title"] == ""
        assert result.payload["year"] == 2021
        assert isinstance(result.payload["id"], int)

    @pytest.mark.asyncio
    async def test_undefined_name_is_a_server_fault(self, fetcher, reporter):
        result = await fetcher.fetch_json("GET", "/demo/movies/crash")

        assert result.status == 500
        # Error bodies are JSON, so decoding succeeds even though the request failed
        assert result.fault is None
        assert result.payload["error"] == "internal_server_error"
        assert not result.ok

        record = reporter.last()
        assert record.fault.kind == FaultKind.SERVER_FAULT
        assert "selected_year" in record.fault.message
        assert record.fault.location.startswith("movies.py:")

    @pytest.mark.asyncio
    async def test_unknown_route_is_404_with_unparseable_body(self, fetcher, reporter):
        result = await fetcher.fetch_json("POST", "/movie")

        assert result.status == 404
        assert result.fault.kind == FaultKind.PARSE_ERROR
        assert reporter.last().fault.kind == FaultKind.NOT_FOUND
        assert reporter.last().path == "/movie"

    @pytest.mark.asyncio
    async def test_request_id_reaches_diagnostics(self, fetcher, reporter):
        result = await fetcher.fetch_json("GET", "/movies", headers={"X-Request-ID": "trace-42"})

        assert result.headers["x-request-id"] == "trace-42"
        assert reporter.last().request_id == "trace-42"

    @pytest.mark.asyncio
    async def test_parse_fault_is_logged_to_console(self, fetcher, caplog):
        caplog.set_level(logging.ERROR, logger="reqcheck.console")

        await fetcher.fetch_json("GET", "/nowhere")

        messages = [r.getMessage() for r in caplog.records if r.name == "reqcheck.console"]
        assert len(messages) == 1
        assert "Unexpected end of JSON input" in messages[0]


class TestFetchWithMockTransport:

    @pytest.mark.asyncio
    async def test_malformed_body_is_a_parse_error(self):
        def handler(request):
            return httpx.Response(200, content=b"<!DOCTYPE html><html></html>")

        async with ClientFetcher(base_url="http://test", transport=httpx.MockTransport(handler)) as fetcher:
            result = await fetcher.fetch(Request(verb="GET", path="/movies"))

        assert result.status == 200
        assert result.fault.kind == FaultKind.PARSE_ERROR
        assert result.fault.message.startswith("Unexpected token in JSON")

    @pytest.mark.asyncio
    async def test_connection_refused_raises_once(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("Connection refused", request=request)

        async with ClientFetcher(base_url="http://test", transport=httpx.MockTransport(handler)) as fetcher:
            with pytest.raises(TransportError) as excinfo:
                await fetcher.fetch_json("POST", "/movies", {"title": "Up"})

        assert len(calls) == 1
        assert excinfo.value.url == "http://test/movies"

    @pytest.mark.asyncio
    async def test_json_payload_sets_content_type(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(201, json={"id": 1})

        async with ClientFetcher(base_url="http://test", transport=httpx.MockTransport(handler)) as fetcher:
            result = await fetcher.fetch_json("POST", "/movies", {"title": "", "year": 2021})

        assert result.payload == {"id": 1}
        assert seen[0].headers["content-type"] == "application/json"
        assert seen[0].content == b'{"title":"","year":2021}'


    @pytest.mark.asyncio
    async def test_repeated_headers_survive_both_directions(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(
                200,
                headers=[("Set-Cookie", "a=1"), ("Set-Cookie", "b=2")],
                json=[],
            )

        request = Request(
            verb="GET",
            path="/movies",
            headers=[("X-Trace", "one"), ("X-Trace", "two")],
        )
        async with ClientFetcher(base_url="http://test", transport=httpx.MockTransport(handler)) as fetcher:
            result = await fetcher.fetch(request)

        assert seen[0].headers.get_list("x-trace") == ["one", "two"]
        assert result.headers.get_list("set-cookie") == ["a=1", "b=2"]


class TestDecodeBody:

    def test_whitespace_only_body_is_end_of_input(self):
        with pytest.raises(ValueError, match="Unexpected end of JSON input"):
            decode_body(b"  \n")

    def test_valid_body(self):
        assert decode_body(b'{"title":"","year":2021}') == {"title": "", "year": 2021}
