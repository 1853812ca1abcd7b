"""
ReqCheck — HTTP API Tests
=========================

What:  End-to-end requests through create_app(): native routes, the
       catch-all bridge into the Router, and error bodies on the wire.
How:   HTTPX AsyncClient with ASGITransport (no server process).
"""

import pytest

from reqcheck import __version__


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_reports_router_state(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == __version__
        assert data["database"] == "connected"
        assert data["routes"] == 5
        assert data["diagnostics_recorded"] == 0


class TestMovieRoutes:

    @pytest.mark.asyncio
    async def test_create_then_list_and_show(self, test_client, reporter):
        created = await test_client.post("/movies", json={"title": "Dune", "year": 2021})
        assert created.status_code == 201
        movie_id = created.json()["id"]

        listed = await test_client.get("/movies")
        assert listed.status_code == 200
        assert [m["title"] for m in listed.json()] == ["Dune"]

        shown = await test_client.get(f"/movies/{movie_id}")
        assert shown.status_code == 200
        assert shown.json()["year"] == 2021

        assert [r.status for r in reporter.query()] == [201, 200, 200]
        assert reporter.last().route == "/movies/{movie_id}"

    @pytest.mark.asyncio
    async def test_crash_route_fails_with_empty_store(self, test_client, movie_store, reporter):
        assert await movie_store.all() == []

        response = await test_client.get("/demo/movies/crash")

        assert response.status_code == 500
        assert response.json()["error"] == "internal_server_error"
        record = reporter.last()
        assert record.fault.kind.value == "ServerFault"
        assert record.fault.location.endswith("in crash")

    @pytest.mark.asyncio
    async def test_missing_movie_is_404_with_error_body(self, test_client):
        response = await test_client.get("/movies/999")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"
        assert "999" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_non_integer_id_is_400(self, test_client, reporter):
        response = await test_client.get("/movies/abc")

        assert response.status_code == 400
        assert response.json()["details"] == {"field": "movie_id"}
        assert reporter.last().fault.kind.value == "BadRequest"

    @pytest.mark.asyncio
    async def test_form_encoded_body_is_rejected(self, test_client):
        response = await test_client.post("/movies", data={"title": "Dune"})

        assert response.status_code == 400
        assert "application/json" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_malformed_json_is_rejected(self, test_client):
        response = await test_client.post(
            "/movies",
            content=b'{"title": ',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Request body is not valid JSON"

    @pytest.mark.asyncio
    async def test_unrouted_request_has_empty_404(self, test_client, reporter):
        response = await test_client.delete("/movies")

        assert response.status_code == 404
        assert response.content == b""
        assert len(reporter) == 1

    @pytest.mark.asyncio
    async def test_request_id_header_is_generated(self, test_client, reporter):
        response = await test_client.get("/movies")

        rid = response.headers["x-request-id"]
        assert len(rid) == 8
        assert reporter.last().request_id == rid


class TestDiagnosticsRoute:

    @pytest.mark.asyncio
    async def test_filtered_records(self, test_client):
        await test_client.get("/movies")
        await test_client.get("/nope")
        await test_client.get("/demo/movies/crash")

        everything = await test_client.get("/diagnostics")
        assert everything.json()["total_count"] == 3

        server_faults = await test_client.get("/diagnostics", params={"fault_kind": "ServerFault"})
        records = server_faults.json()["records"]
        assert len(records) == 1
        assert records[0]["status"] == 500
        assert "selected_year" in records[0]["fault"]["message"]

        misses = await test_client.get("/diagnostics", params={"status": 404})
        assert [r["path"] for r in misses.json()["records"]] == ["/nope"]

    @pytest.mark.asyncio
    async def test_limit_keeps_latest(self, test_client):
        for i in range(5):
            await test_client.get(f"/missing/{i}")

        response = await test_client.get("/diagnostics", params={"limit": 2})

        data = response.json()
        assert data["total_count"] == 5
        assert [r["path"] for r in data["records"]] == ["/missing/3", "/missing/4"]

    @pytest.mark.asyncio
    async def test_reading_diagnostics_does_not_add_records(self, test_client, reporter):
        await test_client.get("/diagnostics")
        await test_client.get("/health")

        assert len(reporter) == 0
