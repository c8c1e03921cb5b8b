"""
Tests for job posting endpoints.

Tests:
- Job CRUD with nested questions
- Slug uniqueness and position checks
- Public lookup by slug
- Cloning and status toggling
- Question management
- Locking once applications exist
"""

import pytest
from sqlalchemy import func, select

from database.models.applications import Answer, Application
from database.models.jobs import Question, QuestionOption

MISSING_ID = "cmissing00000000000000000"


def job_payload(position_id, **overrides):
    payload = {
        "title": "Frontend Engineer",
        "description": "Own our React applications.",
        "slug": "frontend-engineer",
        "requiresResume": True,
        "positionId": position_id,
        "questions": [
            {"label": "Portfolio link", "type": "SHORT_TEXT", "isRequired": True, "order": 0},
            {
                "label": "Favourite framework",
                "type": "SINGLE_CHOICE",
                "order": 1,
                "options": [{"label": "React"}, {"label": "Vue"}],
            },
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
async def application(db_session, job, text_question):
    application = Application(
        job_id=job.id,
        answers=[Answer(question_id=text_question.id, text_value="I love APIs")],
    )
    db_session.add(application)
    await db_session.commit()
    return application


class TestCreateJob:
    async def test_create_with_questions(self, client, auth_headers, position):
        response = await client.post(
            "/api/v1/jobs", json=job_payload(position.id), headers=auth_headers
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Job created successfully"
        data = body["data"]
        assert data["slug"] == "frontend-engineer"
        assert data["isActive"] is True
        assert data["requiresResume"] is True
        assert data["position"]["id"] == position.id
        assert data["applicationCount"] == 0
        assert [q["label"] for q in data["questions"]] == ["Portfolio link", "Favourite framework"]
        options = data["questions"][1]["options"]
        assert [(o["label"], o["orderIndex"]) for o in options] == [("React", 0), ("Vue", 1)]

    async def test_create_without_questions(self, client, auth_headers, position):
        payload = job_payload(position.id)
        del payload["questions"]

        response = await client.post("/api/v1/jobs", json=payload, headers=auth_headers)

        assert response.status_code == 201
        assert response.json()["data"]["questions"] == []

    async def test_duplicate_slug(self, client, auth_headers, position, job):
        response = await client.post(
            "/api/v1/jobs",
            json=job_payload(position.id, slug=job.slug),
            headers=auth_headers,
        )

        assert response.status_code == 409
        assert job.slug in response.json()["message"]

    async def test_unknown_position(self, client, auth_headers):
        response = await client.post(
            "/api/v1/jobs", json=job_payload(MISSING_ID), headers=auth_headers
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Position not found"

    @pytest.mark.parametrize("overrides,field", [
        ({"slug": "Not A Slug"}, "slug"),
        ({"slug": "x" * 101}, "slug"),
        ({"title": ""}, "title"),
        ({"description": "x" * 5001}, "description"),
        ({"positionId": "42"}, "positionId"),
        ({"questions": [{"label": "Q", "type": "ESSAY", "order": 0}]}, "questions.0.type"),
        ({"questions": [{"label": "Q", "type": "SHORT_TEXT", "order": -1}]}, "questions.0.order"),
    ])
    async def test_invalid_body(self, client, auth_headers, position, overrides, field):
        payload = job_payload(position.id, **overrides)

        response = await client.post("/api/v1/jobs", json=payload, headers=auth_headers)

        assert response.status_code == 400
        assert field in [detail["field"] for detail in response.json()["details"]]


class TestListAndGetJobs:
    async def test_list(self, client, auth_headers, job, application):
        response = await client.get("/api/v1/jobs", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        [listed] = body["data"]
        assert listed["id"] == job.id
        assert listed["applicationCount"] == 1
        assert listed["position"]["title"] == "Backend Engineer"
        assert "questions" not in listed
        assert body["pagination"]["total"] == 1

    async def test_get_detail(self, client, auth_headers, job):
        response = await client.get(f"/api/v1/jobs/{job.id}", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["applicationCount"] == 0
        assert [q["order"] for q in data["questions"]] == [0, 1]
        # Admins see inactive options too
        assert [o["label"] for o in data["questions"][1]["options"]] == ["Remote", "On-site", "Hybrid"]

    async def test_get_missing(self, client, auth_headers):
        response = await client.get(f"/api/v1/jobs/{MISSING_ID}", headers=auth_headers)
        assert response.status_code == 404


class TestPublicJob:
    async def test_no_authentication_needed(self, client, job):
        response = await client.get(f"/api/v1/jobs/public/{job.slug}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["title"] == job.title
        assert data["position"]["level"] == "Senior"

    async def test_only_active_options(self, client, job):
        response = await client.get(f"/api/v1/jobs/public/{job.slug}")

        options = response.json()["data"]["questions"][1]["options"]
        assert [o["label"] for o in options] == ["Remote", "On-site"]

    async def test_inactive_job_hidden(self, client, job, db_session):
        job.is_active = False
        await db_session.commit()

        response = await client.get(f"/api/v1/jobs/public/{job.slug}")

        assert response.status_code == 404
        assert response.json()["message"] == "Job not found or no longer accepting applications"

    async def test_unknown_slug(self, client):
        response = await client.get("/api/v1/jobs/public/does-not-exist")
        assert response.status_code == 404


class TestUpdateJob:
    async def test_partial_update(self, client, auth_headers, job):
        response = await client.put(
            f"/api/v1/jobs/{job.id}",
            json={"title": "Staff Backend Engineer", "isActive": False},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["title"] == "Staff Backend Engineer"
        assert data["isActive"] is False
        assert data["slug"] == job.slug

    async def test_slug_taken(self, client, auth_headers, job, resume_job):
        response = await client.put(
            f"/api/v1/jobs/{job.id}",
            json={"slug": resume_job.slug},
            headers=auth_headers,
        )
        assert response.status_code == 409

    async def test_same_slug_allowed(self, client, auth_headers, job):
        response = await client.put(
            f"/api/v1/jobs/{job.id}",
            json={"slug": job.slug},
            headers=auth_headers,
        )
        assert response.status_code == 200

    async def test_unknown_position(self, client, auth_headers, job):
        response = await client.put(
            f"/api/v1/jobs/{job.id}",
            json={"positionId": MISSING_ID},
            headers=auth_headers,
        )
        assert response.status_code == 404

    async def test_locked_by_applications(self, client, auth_headers, job, application):
        response = await client.put(
            f"/api/v1/jobs/{job.id}",
            json={"title": "Renamed"},
            headers=auth_headers,
        )

        assert response.status_code == 409
        assert response.json()["message"] == "Job has applications and cannot be modified"


class TestDeleteJob:
    async def test_delete_cascades(self, client, auth_headers, job, session_factory):
        response = await client.delete(f"/api/v1/jobs/{job.id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Job deleted successfully"

        async with session_factory() as session:
            questions = await session.execute(select(func.count()).select_from(Question))
            options = await session.execute(select(func.count()).select_from(QuestionOption))
            assert questions.scalar() == 0
            assert options.scalar() == 0

    async def test_locked_by_applications(self, client, auth_headers, job, application):
        response = await client.delete(f"/api/v1/jobs/{job.id}", headers=auth_headers)
        assert response.status_code == 409


class TestCloneAndToggle:
    async def test_clone_copies_questions_and_options(self, client, auth_headers, job, application):
        response = await client.post(
            f"/api/v1/jobs/{job.id}/clone",
            json={"title": "Backend Engineer (EU)", "slug": "backend-engineer-eu"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["id"] != job.id
        assert data["title"] == "Backend Engineer (EU)"
        assert data["description"] == job.description
        assert data["applicationCount"] == 0
        assert [q["label"] for q in data["questions"]] == [q.label for q in job.questions]
        assert len(data["questions"][1]["options"]) == 3

    async def test_clone_needs_unique_slug(self, client, auth_headers, job):
        response = await client.post(
            f"/api/v1/jobs/{job.id}/clone",
            json={"title": "Copy", "slug": job.slug},
            headers=auth_headers,
        )
        assert response.status_code == 409

    async def test_toggle_status(self, client, auth_headers, job):
        first = await client.patch(f"/api/v1/jobs/{job.id}/toggle-status", headers=auth_headers)
        second = await client.patch(f"/api/v1/jobs/{job.id}/toggle-status", headers=auth_headers)

        assert first.json()["data"]["isActive"] is False
        assert first.json()["message"] == "Job deactivated"
        assert second.json()["data"]["isActive"] is True
        assert second.json()["message"] == "Job activated"

    async def test_toggle_allowed_with_applications(self, client, auth_headers, job, application):
        response = await client.patch(f"/api/v1/jobs/{job.id}/toggle-status", headers=auth_headers)
        assert response.status_code == 200


class TestQuestions:
    async def test_add_question(self, client, auth_headers, job):
        response = await client.post(
            f"/api/v1/jobs/{job.id}/questions",
            json={
                "label": "Which languages do you use?",
                "type": "MULTIPLE_CHOICE",
                "isRequired": True,
                "order": 2,
                "options": [{"label": "Python"}, {"label": "Go"}],
            },
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["jobId"] == job.id
        assert data["type"] == "MULTIPLE_CHOICE"
        assert [o["label"] for o in data["options"]] == ["Python", "Go"]

    async def test_add_question_to_missing_job(self, client, auth_headers):
        response = await client.post(
            f"/api/v1/jobs/{MISSING_ID}/questions",
            json={"label": "Q", "type": "SHORT_TEXT", "order": 0},
            headers=auth_headers,
        )
        assert response.status_code == 404

    async def test_update_question_replaces_options(self, client, auth_headers, job, choice_question):
        response = await client.put(
            f"/api/v1/jobs/{job.id}/questions/{choice_question.id}",
            json={"label": "Work mode", "options": [{"label": "Anywhere"}]},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["label"] == "Work mode"
        assert [o["label"] for o in data["options"]] == ["Anywhere"]

    async def test_update_question_of_other_job(self, client, auth_headers, resume_job, choice_question):
        response = await client.put(
            f"/api/v1/jobs/{resume_job.id}/questions/{choice_question.id}",
            json={"label": "Hijacked"},
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Question not found"

    async def test_answered_question_is_locked(self, client, auth_headers, job, text_question, application):
        response = await client.put(
            f"/api/v1/jobs/{job.id}/questions/{text_question.id}",
            json={"label": "Changed"},
            headers=auth_headers,
        )
        assert response.status_code == 409

    async def test_delete_question(self, client, auth_headers, job, choice_question, session_factory):
        response = await client.delete(
            f"/api/v1/jobs/{job.id}/questions/{choice_question.id}",
            headers=auth_headers,
        )

        assert response.status_code == 200
        async with session_factory() as session:
            remaining = await session.execute(
                select(func.count()).select_from(QuestionOption)
                .where(QuestionOption.question_id == choice_question.id)
            )
            assert remaining.scalar() == 0
