"""Tests for position management endpoints."""

import pytest

from database.models.positions import Position

MISSING_ID = "cmissing00000000000000000"


class TestCreatePosition:
    async def test_create(self, client, auth_headers):
        response = await client.post(
            "/api/v1/positions",
            json={"title": "  Data Engineer ", "level": "Mid", "salaryRange": "$90k - $110k"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Position created successfully"
        assert body["data"]["title"] == "Data Engineer"
        assert body["data"]["salaryRange"] == "$90k - $110k"
        assert body["data"]["jobCount"] == 0
        assert body["data"]["id"].startswith("c")

    async def test_requires_authentication(self, client):
        response = await client.post(
            "/api/v1/positions",
            json={"title": "Data Engineer", "level": "Mid", "salaryRange": "$90k"},
        )
        assert response.status_code == 401

    @pytest.mark.parametrize("payload,field", [
        ({"level": "Mid", "salaryRange": "$90k"}, "title"),
        ({"title": "x" * 101, "level": "Mid", "salaryRange": "$90k"}, "title"),
        ({"title": "Engineer", "level": "", "salaryRange": "$90k"}, "level"),
        ({"title": "Engineer", "level": "Mid"}, "salaryRange"),
    ])
    async def test_invalid_body(self, client, auth_headers, payload, field):
        response = await client.post("/api/v1/positions", json=payload, headers=auth_headers)

        assert response.status_code == 400
        assert field in [detail["field"] for detail in response.json()["details"]]


class TestListPositions:
    @pytest.fixture
    async def positions(self, db_session):
        rows = [
            Position(title=f"Role {index}", level="Mid", salary_range="$100k")
            for index in range(12)
        ]
        db_session.add_all(rows)
        await db_session.commit()
        return rows

    async def test_paginates(self, client, auth_headers, positions):
        response = await client.get("/api/v1/positions?page=2&limit=5", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]) == 5
        assert body["pagination"] == {"page": 2, "limit": 5, "total": 12, "totalPages": 3}

    async def test_sorts_by_title(self, client, auth_headers, positions):
        response = await client.get(
            "/api/v1/positions?sortBy=title&sortOrder=asc&limit=3",
            headers=auth_headers,
        )

        titles = [position["title"] for position in response.json()["data"]]
        assert titles == ["Role 0", "Role 1", "Role 10"]

    async def test_unknown_sort_field(self, client, auth_headers, positions):
        response = await client.get("/api/v1/positions?sortBy=password", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "BAD_REQUEST"

    @pytest.mark.parametrize("query", [
        "page=0",
        "page=1000001",
        "page=100000000000000000000",
        "limit=0",
        "limit=101",
        "sortOrder=up",
    ])
    async def test_invalid_pagination(self, client, auth_headers, query):
        response = await client.get(f"/api/v1/positions?{query}", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid query parameters"

    async def test_job_count(self, client, auth_headers, job, position):
        response = await client.get("/api/v1/positions", headers=auth_headers)

        [listed] = response.json()["data"]
        assert listed["id"] == position.id
        assert listed["jobCount"] == 1

    async def test_all_sorted_by_title(self, client, auth_headers, db_session):
        db_session.add_all([
            Position(title="Zookeeper", level="Junior", salary_range="$40k"),
            Position(title="Architect", level="Senior", salary_range="$200k"),
        ])
        await db_session.commit()

        response = await client.get("/api/v1/positions/all", headers=auth_headers)

        assert response.status_code == 200
        assert [p["title"] for p in response.json()["data"]] == ["Architect", "Zookeeper"]
        assert "pagination" not in response.json()


class TestPositionDetail:
    async def test_get(self, client, auth_headers, position):
        response = await client.get(f"/api/v1/positions/{position.id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"]["title"] == "Backend Engineer"
        assert response.json()["data"]["jobCount"] == 0
        assert response.json()["data"]["createdAt"].endswith("+00:00")

    async def test_get_missing(self, client, auth_headers):
        response = await client.get(f"/api/v1/positions/{MISSING_ID}", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Position not found"

    async def test_get_malformed_id(self, client, auth_headers):
        response = await client.get("/api/v1/positions/123", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid route parameters"

    async def test_update(self, client, auth_headers, position):
        response = await client.put(
            f"/api/v1/positions/{position.id}",
            json={"level": "Staff"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["level"] == "Staff"
        assert data["title"] == "Backend Engineer"

    async def test_update_strips_whitespace(self, client, auth_headers, position):
        response = await client.put(
            f"/api/v1/positions/{position.id}",
            json={"level": "  Senior  ", "title": " Platform Engineer "},
            headers=auth_headers,
        )

        data = response.json()["data"]
        assert data["level"] == "Senior"
        assert data["title"] == "Platform Engineer"

    async def test_update_rejects_blank_text(self, client, auth_headers, position):
        response = await client.put(
            f"/api/v1/positions/{position.id}",
            json={"level": "   "},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert "level" in [detail["field"] for detail in response.json()["details"]]

    async def test_update_used_position(self, client, auth_headers, position, job):
        response = await client.put(
            f"/api/v1/positions/{position.id}",
            json={"level": "Staff"},
            headers=auth_headers,
        )

        assert response.status_code == 409
        assert response.json()["message"] == "Position is used by one or more jobs"

    async def test_delete(self, client, auth_headers, position):
        response = await client.delete(f"/api/v1/positions/{position.id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Position deleted successfully"}

        follow_up = await client.get(f"/api/v1/positions/{position.id}", headers=auth_headers)
        assert follow_up.status_code == 404

    async def test_delete_used_position(self, client, auth_headers, position, job):
        response = await client.delete(f"/api/v1/positions/{position.id}", headers=auth_headers)
        assert response.status_code == 409
