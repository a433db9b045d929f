"""
API endpoint tests.
"""
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
import pytest_asyncio

from app.services.geocoding import GeocodingResult
from app.services.routing import OptimizationClient, RouteOptimizer

API = "/api/v1"
USER = "driver-1"


@pytest.fixture(autouse=True)
def offline_optimization():
    """Route every optimization through the local fallback."""
    optimizer = RouteOptimizer(client=OptimizationClient(base_url=""))
    with patch("app.services.route_service.route_optimizer", optimizer), patch(
        "app.api.routes.routes.route_optimizer", optimizer
    ):
        yield optimizer


@pytest_asyncio.fixture
async def route(client):
    """A route for 2024-05-01 with three stops."""
    response = await client.post(f"{API}/routes", json={"user_id": USER, "date": "2024-05-01"})
    route_id = response.json()["id"]
    for i, (lat, name) in enumerate([(40.70, "Depot"), (40.80, "Far"), (40.71, "Near")]):
        await client.post(
            f"{API}/routes/{route_id}/stops",
            json={"address": f"{100 + i} Main St", "name": name, "latitude": lat, "longitude": -74.0},
        )
    response = await client.get(f"{API}/routes/{route_id}")
    return response.json()


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    @pytest.mark.asyncio
    async def test_health_check(self, client):
        response = await client.get(f"{API}/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_root_describes_service(self, client):
        response = await client.get("/")

        assert response.status_code == 200
        body = response.json()
        assert body["docs"] == f"{API}/docs"
        assert "optimizer" in body

    @pytest.mark.asyncio
    async def test_detailed_health_check(self, client):
        response = await client.get(f"{API}/health/detailed")

        assert response.status_code == 200
        data = response.json()
        assert data["checks"]["database"] == "healthy"
        assert "optimization" in data["checks"]

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, client):
        response = await client.get(f"{API}/health", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"


class TestRouteEndpoints:
    """Tests for route and stop endpoints."""

    @pytest.mark.asyncio
    async def test_create_route_is_idempotent_per_date(self, client):
        payload = {"user_id": USER, "date": "2024-05-01", "name": "Wednesday"}

        first = await client.post(f"{API}/routes", json=payload)
        second = await client.post(f"{API}/routes", json=payload)

        assert first.status_code == 201
        assert first.json()["id"] == second.json()["id"]
        assert first.json()["status"] == "planning"
        assert first.json()["stops"] == []

    @pytest.mark.asyncio
    async def test_get_by_date(self, client, route):
        response = await client.get(f"{API}/routes/by-date/{USER}/2024-05-01")

        assert response.status_code == 200
        assert response.json()["id"] == route["id"]

    @pytest.mark.asyncio
    async def test_list_routes(self, client, route):
        response = await client.get(f"{API}/routes", params={"user_id": USER})

        assert response.status_code == 200
        assert response.json()["total"] == 1

    @pytest.mark.asyncio
    async def test_missing_route(self, client):
        response = await client.get(f"{API}/routes/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "ROUTE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_stops_in_order(self, route):
        assert [s["name"] for s in route["stops"]] == ["Depot", "Far", "Near"]
        assert [s["order"] for s in route["stops"]] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_invalid_stop_coordinates(self, client, route):
        response = await client.post(
            f"{API}/routes/{route['id']}/stops",
            json={"address": "Nowhere", "latitude": 91, "longitude": 0},
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_reorder(self, client, route):
        response = await client.post(
            f"{API}/routes/{route['id']}/stops/reorder",
            json={"from_index": 2, "to_index": 1},
        )

        assert response.status_code == 200
        assert [s["name"] for s in response.json()["stops"]] == ["Depot", "Near", "Far"]

    @pytest.mark.asyncio
    async def test_remove_stop(self, client, route):
        response = await client.delete(f"{API}/routes/{route['id']}/stops/{route['stops'][0]['id']}")

        assert response.status_code == 200
        assert [s["order"] for s in response.json()["stops"]] == [0, 1]

    @pytest.mark.asyncio
    async def test_optimize(self, client, route):
        response = await client.post(f"{API}/routes/{route['id']}/optimize")

        assert response.status_code == 200
        data = response.json()
        assert [s["name"] for s in data["stops"]] == ["Depot", "Near", "Far"]
        assert data["optimized_order"] == [0, 2, 1]
        assert data["total_distance"] > 0

    @pytest.mark.asyncio
    async def test_optimize_needs_two_stops(self, client):
        created = await client.post(f"{API}/routes", json={"user_id": USER, "date": "2024-06-01"})
        route_id = created.json()["id"]
        await client.post(
            f"{API}/routes/{route_id}/stops",
            json={"address": "Only stop", "latitude": 40.7, "longitude": -74.0},
        )

        response = await client.post(f"{API}/routes/{route_id}/optimize")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INSUFFICIENT_DATA"

    @pytest.mark.asyncio
    async def test_stateless_optimize(self, client):
        response = await client.post(
            f"{API}/optimize",
            json={
                "points": [
                    {"latitude": 40.70, "longitude": -74.0},
                    {"latitude": 40.80, "longitude": -74.0},
                    {"latitude": 40.71, "longitude": -74.0},
                ]
            },
        )

        assert response.status_code == 200
        assert response.json()["order"] == [0, 2, 1]
        assert response.json()["source"] == "fallback"

    @pytest.mark.asyncio
    async def test_invalid_status_transition(self, client, route):
        response = await client.patch(f"{API}/routes/{route['id']}/status", json={"status": "completed"})

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "INVALID_STATUS_TRANSITION"

    @pytest.mark.asyncio
    async def test_depart_before_arrival(self, client, route):
        stop_id = route["stops"][0]["id"]
        base = f"{API}/routes/{route['id']}/stops/{stop_id}"
        await client.post(f"{base}/arrive", json={"timestamp": "2024-05-01T09:30:00Z"})

        response = await client.post(f"{base}/depart", json={"timestamp": "2024-05-01T09:00:00Z"})

        assert response.status_code == 400


class TestQuestionEndpoints:
    """Tests for question templates and responses."""

    @pytest.mark.asyncio
    async def test_default_questions(self, client):
        response = await client.get(f"{API}/questions", params={"user_id": USER})

        assert response.status_code == 200
        questions = response.json()
        assert len(questions) == 10
        assert questions[0]["text"] == "Contact Name"
        assert questions[2]["type"] == "multipleChoice"

    @pytest.mark.asyncio
    async def test_create_custom_question(self, client):
        response = await client.post(
            f"{API}/questions",
            json={"user_id": USER, "text": "Meter reading", "type": "number"},
        )

        assert response.status_code == 201
        assert response.json()["order"] == 11

    @pytest.mark.asyncio
    async def test_save_and_list_responses(self, client, route):
        questions = (await client.get(f"{API}/questions", params={"user_id": USER})).json()
        stop_id = route["stops"][0]["id"]

        saved = await client.put(
            f"{API}/stops/{stop_id}/responses/{questions[1]['id']}",
            json={"value": True},
        )
        listed = await client.get(f"{API}/stops/{stop_id}/responses")

        assert saved.status_code == 200
        assert saved.json()["question_text"] == "Was anyone present?"
        assert [r["value"] for r in listed.json()] == [True]

    @pytest.mark.asyncio
    async def test_response_for_missing_stop(self, client):
        questions = (await client.get(f"{API}/questions", params={"user_id": USER})).json()

        response = await client.put(
            f"{API}/stops/{uuid4()}/responses/{questions[0]['id']}",
            json={"value": "x"},
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "STOP_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_update_with_null_text_is_rejected(self, client):
        questions = (await client.get(f"{API}/questions", params={"user_id": USER})).json()
        question_url = f"{API}/questions/{questions[0]['id']}"

        response = await client.patch(question_url, json={"text": None})
        renamed = await client.patch(question_url, json={"text": "Site contact"})

        assert response.status_code == 400
        assert response.json()["error"]["details"] == {"fields": ["text"]}
        assert renamed.status_code == 200
        assert renamed.json()["text"] == "Site contact"

    @pytest.mark.asyncio
    async def test_import_questions(self, client):
        content = b"Text,Type,Options,Required\nGate code,text,,yes\nAccess,multipleChoice,Key|Code,\n"

        response = await client.post(
            f"{API}/questions/import",
            params={"user_id": USER},
            files={"file": ("questions.csv", content, "text/csv")},
        )
        questions = (await client.get(f"{API}/questions", params={"user_id": USER})).json()

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["imported"] == 2
        assert body["questions"][1]["options"] == ["Key", "Code"]
        assert [q["text"] for q in questions[-2:]] == ["Gate code", "Access"]

    @pytest.mark.asyncio
    async def test_import_unreadable_questions_file(self, client):
        response = await client.post(
            f"{API}/questions/import",
            params={"user_id": USER},
            files={"file": ("questions.csv", b"\xff\xfe\x00", "text/csv")},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_CSV"


class TestStopImportEndpoint:
    """Tests for stop CSV upload."""

    @pytest.mark.asyncio
    async def test_import_stops(self, client, route):
        async def search(query, limit=5):
            if query == "Unknown Rd":
                return []
            return [GeocodingResult(address=query, display_name=query, latitude=40.75, longitude=-73.99)]

        geocoder = AsyncMock()
        geocoder.search.side_effect = search
        content = b"address,name\n350 5th Ave,Empire State\nUnknown Rd,\n"

        with patch("app.services.route_service.geocoding_client", geocoder):
            response = await client.post(
                f"{API}/routes/{route['id']}/stops/import",
                files={"file": ("stops.csv", content, "text/csv")},
            )
        stops = (await client.get(f"{API}/routes/{route['id']}")).json()["stops"]

        assert response.status_code == 200
        body = response.json()
        assert body["imported"] == 1
        assert body["stops"][0]["name"] == "Empire State"
        assert body["stops"][0]["order"] == 3
        assert body["warnings"] == ['Row 3: Could not geocode "Unknown Rd"']
        assert len(stops) == 4

    @pytest.mark.asyncio
    async def test_import_into_missing_route(self, client):
        response = await client.post(
            f"{API}/routes/{uuid4()}/stops/import",
            files={"file": ("stops.csv", b"address\n1 Main St\n", "text/csv")},
        )

        assert response.status_code == 404


class TestReportEndpoints:
    """Tests for the end-of-day flow."""

    async def complete_day(self, client, route) -> str:
        route_url = f"{API}/routes/{route['id']}"
        depot, far, near = route["stops"]
        questions = {
            q["text"]: q["id"]
            for q in (await client.get(f"{API}/questions", params={"user_id": USER})).json()
        }

        await client.patch(f"{route_url}/status", json={"status": "active"})
        await client.post(f"{route_url}/stops/{depot['id']}/arrive", json={"timestamp": "2024-05-01T09:00:00Z"})
        await client.post(f"{route_url}/stops/{depot['id']}/depart", json={"timestamp": "2024-05-01T09:17:00Z"})
        await client.put(
            f"{API}/stops/{depot['id']}/responses/{questions['Any issues found?']}",
            json={"value": True},
        )
        await client.put(
            f"{API}/stops/{depot['id']}/responses/{questions['Issue description']}",
            json={"value": "broken lock"},
        )
        await client.put(
            f"{API}/stops/{depot['id']}/responses/{questions['Customer satisfaction']}",
            json={"value": 1},
        )
        await client.post(f"{route_url}/stops/{far['id']}/skip")
        await client.post(f"{route_url}/stops/{near['id']}/depart", json={"timestamp": "2024-05-01T10:00:00Z"})
        await client.patch(f"{route_url}/status", json={"status": "completed"})
        return route["id"]

    @pytest.mark.asyncio
    async def test_generate_report(self, client, route):
        route_id = await self.complete_day(client, route)

        response = await client.post(f"{API}/reports/routes/{route_id}")

        assert response.status_code == 201
        report = response.json()
        summary = report["summary"]
        assert report["date"] == "2024-05-01"
        assert summary["total_stops"] == 3
        assert summary["completed_stops"] == 2
        assert summary["skipped_stops"] == 1
        assert summary["total_on_site_time"] == 17
        assert [i["severity"] for i in summary["issues"]] == ["high", "medium", "low"]
        assert report["stop_reports"][0]["time_spent"] == 17
        assert report["stop_reports"][2]["time_spent"] == 0

    @pytest.mark.asyncio
    async def test_regenerate_keeps_id(self, client, route):
        route_id = await self.complete_day(client, route)

        first = await client.post(f"{API}/reports/routes/{route_id}")
        second = await client.post(f"{API}/reports/routes/{route_id}")
        listed = await client.get(f"{API}/reports", params={"user_id": USER})

        assert first.json()["id"] == second.json()["id"]
        assert listed.json()["total"] == 1

    @pytest.mark.asyncio
    async def test_report_for_missing_route(self, client):
        response = await client.post(f"{API}/reports/routes/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "ROUTE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_exports(self, client, route):
        route_id = await self.complete_day(client, route)
        report_id = (await client.post(f"{API}/reports/routes/{route_id}")).json()["id"]
        base = f"{API}/reports/{report_id}/export"

        csv_response = await client.get(f"{base}/csv")
        pdf_response = await client.get(f"{base}/pdf")
        text_response = await client.get(f"{base}/text")
        email_response = await client.get(f"{base}/email", params={"recipient": "boss@example.com"})

        assert csv_response.status_code == 200
        assert csv_response.headers["content-type"].startswith("text/csv")
        assert 'filename="route-report-2024-05-01.csv"' in csv_response.headers["content-disposition"]
        assert "Any issues found?" in csv_response.text.splitlines()[0]

        assert pdf_response.status_code == 200
        assert pdf_response.content.startswith(b"%PDF")

        assert text_response.status_code == 200
        assert text_response.text.startswith("EXECUTIVE SUMMARY - Wednesday, May 01, 2024")
        assert "[HIGH] Low satisfaction rating (1/5) at Depot" in text_response.text

        email = email_response.json()
        assert email["subject"] == "Route Report - 2024-05-01"
        assert email["mailto"].startswith("mailto:boss@example.com?")

    @pytest.mark.asyncio
    async def test_delete_report(self, client, route):
        route_id = await self.complete_day(client, route)
        report_id = (await client.post(f"{API}/reports/routes/{route_id}")).json()["id"]

        deleted = await client.delete(f"{API}/reports/{report_id}")
        missing = await client.get(f"{API}/reports/{report_id}")

        assert deleted.status_code == 204
        assert missing.status_code == 404
