"""
HTTP tests for the college endpoints.

The application runs in-process through httpx's ASGI transport, with
``get_db`` overridden to use the SQLite session factory.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from fest_api.core.config import settings
from fest_api.core.database import get_db
from fest_api.core.security import create_access_token
from fest_api.main import app
from fest_api.modules.applications.models import ApplicationStatus

ENDPOINTS = [
    "/api/review-applications",
    "/api/approved-students",
    "/api/final-approval",
    "/api/manager-dashboard",
]


@pytest_asyncio.fixture
async def client(session_maker):
    async def _override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


def _auth(college, role: str = "principal", user_id: int = 1) -> dict[str, str]:
    token = create_access_token(user_id, {"college_id": college.college_id, "role": role})
    return {"Authorization": f"Bearer {token}"}


class TestTransport:
    """Preflight, method and authentication envelopes."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ENDPOINTS)
    async def test_preflight(self, client, path):
        response = await client.options(path)

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert "POST" in response.headers["access-control-allow-methods"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ENDPOINTS)
    async def test_get_not_allowed(self, client, path):
        response = await client.get(path)

        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ENDPOINTS)
    async def test_missing_token(self, client, path):
        response = await client.post(path, json={"action": "get_pending_applications"})

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "message": "Token expired. Redirecting to login...",
            "redirect": settings.login_redirect_url,
        }

    @pytest.mark.asyncio
    async def test_wrong_role(self, client, seed):
        college = await seed.college()

        response = await client.post(
            "/api/manager-dashboard", headers=_auth(college, role="student")
        )

        assert response.status_code == 401
        assert "Principal or Manager" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.json() == {"status": "healthy"}


class TestReviewApplications:
    """POST /api/review-applications."""

    @pytest.mark.asyncio
    async def test_missing_and_invalid_action(self, client, seed):
        college = await seed.college()
        headers = _auth(college)

        missing = await client.post("/api/review-applications", json={}, headers=headers)
        invalid = await client.post(
            "/api/review-applications", json={"action": "delete_all"}, headers=headers
        )
        malformed = await client.post(
            "/api/review-applications", content=b"{nope", headers=headers
        )

        assert missing.status_code == 400
        assert missing.json()["error"] == "action is required"
        assert invalid.json()["error"] == "Invalid action"
        assert malformed.json()["error"] == "Invalid JSON body"

    @pytest.mark.asyncio
    async def test_pending_then_approve(self, client, seed):
        college = await seed.college()
        mime = await seed.event("mime", "Mime", 6)
        _, application = await seed.student(
            college, full_name="Asha Rao", documents={"Aadhar": "https://a"}
        )
        headers = _auth(college, role="MANAGER")

        pending = await client.post(
            "/api/review-applications",
            json={"action": "get_pending_applications"},
            headers=headers,
        )

        assert pending.status_code == 200
        body = pending.json()
        assert body["success"] is True
        assert [a["full_name"] for a in body["applications"]] == ["Asha Rao"]
        assert body["applications"][0]["documents"] == {"aadhar": "https://a"}

        approved = await client.post(
            "/api/review-applications",
            json={
                "action": "approve_student",
                "application_id": application.application_id,
                "participating_events": [mime.event_id],
            },
            headers=headers,
        )

        assert approved.status_code == 200
        assert approved.json() == {
            "success": True,
            "message": "Student approved successfully",
            "application_id": application.application_id,
            "student_id": application.student_id,
            "participating_events": [mime.event_id],
            "accompanying_events": [],
        }

    @pytest.mark.asyncio
    async def test_approve_requires_event_array(self, client, seed):
        college = await seed.college()

        response = await client.post(
            "/api/review-applications",
            json={"action": "approve_student", "application_id": 1, "participating_events": 3},
            headers=_auth(college),
        )

        assert response.status_code == 400
        assert response.json()["error"] == (
            "application_id is required and participating_events must be an array"
        )

    @pytest.mark.asyncio
    async def test_reject_requires_reason(self, client, seed):
        college = await seed.college()

        response = await client.post(
            "/api/review-applications",
            json={"action": "reject_student", "application_id": 1},
            headers=_auth(college),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "application_id and rejection_reason are required"

    @pytest.mark.asyncio
    async def test_unknown_application(self, client, seed):
        college = await seed.college()

        response = await client.post(
            "/api/review-applications",
            json={"action": "reject_student", "application_id": 999, "rejection_reason": "x"},
            headers=_auth(college),
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Application not found"

    @pytest.mark.asyncio
    async def test_edit_student_details(self, client, seed):
        college = await seed.college()
        _, application = await seed.student(college)

        response = await client.post(
            "/api/review-applications",
            json={
                "action": "edit_student_details",
                "application_id": application.application_id,
                "email": "new@example.com",
                "year_of_study": 3,
            },
            headers=_auth(college),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Student details updated successfully"
        assert body["updated_fields"] == ["email", "year_of_study"]


class TestApprovedStudentsAndFinalApproval:
    """POST /api/approved-students, /api/final-approval and /api/manager-dashboard."""

    @pytest.mark.asyncio
    async def test_full_flow(self, client, seed):
        college = await seed.college()
        mime = await seed.event("mime", "Mime", 6)
        quiz = await seed.event("quiz", "Quiz", 3)
        student, application = await seed.student(college, ApplicationStatus.APPROVED)
        await seed.assignment(student, mime)
        _, pending = await seed.student(college)
        headers = _auth(college)

        edited = await client.post(
            "/api/approved-students",
            json={
                "action": "edit_student_events",
                "student_id": student.student_id,
                "participating_events": [quiz.event_id],
            },
            headers=headers,
        )
        assert edited.status_code == 200
        assert edited.json()["message"] == "Events updated successfully"

        listed = await client.post(
            "/api/approved-students", json={"action": "get_approved_students"}, headers=headers
        )
        students = listed.json()["students"]
        assert students[0]["application_id"] == application.application_id
        assert students[0]["participating_events"] == [
            {"event_id": quiz.event_id, "event_name": "Quiz"}
        ]

        final = await client.post("/api/final-approval", headers=headers)
        assert final.status_code == 200
        assert final.json() == {
            "success": True,
            "message": "Final approval successful. All registrations are now locked.",
            "inserted_students": 1,
            "inserted_accompanists": 0,
            "total_records": 1,
        }

        locked = await client.post(
            "/api/review-applications",
            json={
                "action": "approve_student",
                "application_id": pending.application_id,
                "participating_events": [],
            },
            headers=headers,
        )
        assert locked.status_code == 403
        assert locked.json()["error"] == "Final approval is locked. Cannot approve students."

        again = await client.post("/api/final-approval", headers=headers)
        assert again.status_code == 403
        assert again.json()["error"] == "Final approval already submitted"

        dashboard = await client.post("/api/manager-dashboard", headers=headers)
        data = dashboard.json()["data"]
        assert data["is_final_approved"] is True
        assert data["final_approved_at"] is not None
        assert data["stats"]["approved_students"] == 1

    @pytest.mark.asyncio
    async def test_final_approval_without_eligible_students(self, client, seed):
        college = await seed.college()
        await seed.student(college, ApplicationStatus.APPROVED)

        response = await client.post("/api/final-approval", headers=_auth(college))

        assert response.status_code == 400
        assert response.json()["code"] == "NO_ELIGIBLE_STUDENTS"

    @pytest.mark.asyncio
    async def test_edit_events_of_pending_student(self, client, seed):
        college = await seed.college()
        mime = await seed.event("mime", "Mime", 6)
        student, _ = await seed.student(college)

        response = await client.post(
            "/api/approved-students",
            json={
                "action": "edit_student_events",
                "student_id": student.student_id,
                "participating_events": [mime.event_id],
            },
            headers=_auth(college),
        )

        assert response.status_code == 409
        assert response.json()["code"] == "STUDENT_NOT_APPROVED"

    @pytest.mark.asyncio
    async def test_move_to_rejected_requires_reason(self, client, seed):
        college = await seed.college()

        response = await client.post(
            "/api/approved-students",
            json={"action": "move_to_rejected", "student_id": 1},
            headers=_auth(college),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "student_id and rejection_reason are required"

    @pytest.mark.asyncio
    async def test_final_approval_is_rate_limited(self, client, seed):
        college = await seed.college()
        headers = _auth(college)

        statuses = [
            (await client.post("/api/final-approval", headers=headers)).status_code
            for _ in range(4)
        ]

        assert statuses[:3] == [400, 400, 400]
        assert statuses[3] == 429
