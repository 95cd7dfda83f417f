"""
Unit tests for the event assignment service layer.

These tests cover:
- Event existence and capacity validation
- Approved list shaping
- Assignment replacement ordering (delete before capacity check)
- Move to rejected
"""

from unittest.mock import AsyncMock, MagicMock, call, patch

import pytest

from fest_api.core.exceptions import CollegeLockedError
from fest_api.modules.applications.models import ApplicationStatus, Student, StudentApplication
from fest_api.modules.events.models import Event, EventType
from fest_api.modules.events.service import (
    EventFullError,
    EventNotFoundError,
    NoOpenApplicationError,
    StudentNotApprovedError,
    StudentNotFoundError,
    list_approved,
    move_to_rejected,
    replace_assignments,
    unique_ids,
    validate_event_assignments,
)

SERVICE = "fest_api.modules.events.service"


def _event(event_id, name, max_participants):
    event = MagicMock(spec=Event)
    event.event_id = event_id
    event.event_code = name.lower().replace(" ", "_")
    event.event_name = name
    event.max_participants_per_college = max_participants
    return event


@pytest.fixture
def student():
    student = MagicMock(spec=Student)
    student.student_id = 21
    student.full_name = "Asha Rao"
    student.usn = "4AB23CS021"
    student.email = "asha@example.com"
    student.phone = "9876500021"
    student.reapply_count = 0
    return student


class TestUniqueIds:
    def test_keeps_first_seen_order(self):
        assert unique_ids([3, 1, 3, 2, 1]) == [3, 1, 2]

    def test_empty(self):
        assert unique_ids([]) == []


class TestValidateEventAssignments:
    """Tests for validate_event_assignments."""

    @pytest.mark.asyncio
    async def test_unknown_participating_event(self, mock_db):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_events_by_ids = AsyncMock(return_value={})

            with pytest.raises(EventNotFoundError) as exc_info:
                await validate_event_assignments(mock_db, 1, [99], [])

        assert exc_info.value.message == "Event ID 99 not found"
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_accompanying_event(self, mock_db):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_events_by_ids = AsyncMock(return_value={1: _event(1, "Mime", 6)})
            mock_repo.count_participants = AsyncMock(return_value=0)

            with pytest.raises(EventNotFoundError) as exc_info:
                await validate_event_assignments(mock_db, 1, [1], [42])

        assert exc_info.value.message == "Event ID 42 not found"

    @pytest.mark.asyncio
    async def test_event_at_capacity(self, mock_db):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_events_by_ids = AsyncMock(return_value={1: _event(1, "Mime", 6)})
            mock_repo.count_participants = AsyncMock(return_value=6)

            with pytest.raises(EventFullError) as exc_info:
                await validate_event_assignments(mock_db, 1, [1], [])

        assert exc_info.value.message == 'Event "Mime" is full (6/6)'
        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_last_free_slot_is_allowed(self, mock_db):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_events_by_ids = AsyncMock(return_value={1: _event(1, "Mime", 6)})
            mock_repo.count_participants = AsyncMock(return_value=5)

            await validate_event_assignments(mock_db, 1, [1], [])

    @pytest.mark.asyncio
    async def test_accompanying_events_ignore_capacity(self, mock_db):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_events_by_ids = AsyncMock(return_value={1: _event(1, "Mime", 1)})
            mock_repo.count_participants = AsyncMock(return_value=1)

            await validate_event_assignments(mock_db, 1, [], [1])

        mock_repo.count_participants.assert_not_awaited()


class TestListApproved:
    """Tests for list_approved."""

    @pytest.mark.asyncio
    async def test_groups_events_by_type(self, mock_db, student):
        with (
            patch(f"{SERVICE}.applications_repository") as mock_apps,
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_apps.list_approved_students = AsyncMock(return_value=[(student, 5)])
            mock_repo.list_assignments_for_students = AsyncMock(
                return_value=[
                    (21, 1, "Classical Dance", EventType.PARTICIPATING),
                    (21, 2, "Mime", EventType.ACCOMPANYING),
                    (21, 3, "Quiz", EventType.PARTICIPATING),
                ]
            )

            result = await list_approved(mock_db, 1)

        assert result == [
            {
                "application_id": 5,
                "student_id": 21,
                "full_name": "Asha Rao",
                "usn": "4AB23CS021",
                "email": "asha@example.com",
                "phone": "9876500021",
                "participating_events": [
                    {"event_id": 1, "event_name": "Classical Dance"},
                    {"event_id": 3, "event_name": "Quiz"},
                ],
                "accompanying_events": [{"event_id": 2, "event_name": "Mime"}],
            }
        ]

    @pytest.mark.asyncio
    async def test_student_without_events(self, mock_db, student):
        with (
            patch(f"{SERVICE}.applications_repository") as mock_apps,
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_apps.list_approved_students = AsyncMock(return_value=[(student, 5)])
            mock_repo.list_assignments_for_students = AsyncMock(return_value=[])

            result = await list_approved(mock_db, 1)

        assert result[0]["participating_events"] == []
        assert result[0]["accompanying_events"] == []


class TestReplaceAssignments:
    """Tests for replace_assignments."""

    @pytest.mark.asyncio
    async def test_deletes_before_validating(self, mock_db, principal, student):
        order = MagicMock()

        with (
            patch(f"{SERVICE}.lock_unlocked_college", new_callable=AsyncMock) as mock_lock,
            patch(f"{SERVICE}.applications_repository") as mock_apps,
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.validate_event_assignments", new_callable=AsyncMock) as mock_validate,
        ):
            mock_apps.get_student_for_college = AsyncMock(return_value=student)
            mock_apps.has_approved_application = AsyncMock(return_value=True)
            mock_repo.delete_for_student = AsyncMock(return_value=2)
            mock_repo.add_assignments = AsyncMock()
            order.attach_mock(mock_repo.delete_for_student, "delete")
            order.attach_mock(mock_validate, "validate")
            order.attach_mock(mock_repo.add_assignments, "add")

            result = await replace_assignments(mock_db, principal, 21, [1, 1, 2], [3])

        mock_lock.assert_awaited_once_with(mock_db, 1, "edit events")
        assert [c[0] for c in order.mock_calls] == ["delete", "validate", "add"]
        assert order.mock_calls[1] == call.validate(mock_db, 1, [1, 2], [3])
        assert result == {
            "student_id": 21,
            "participating_events": [1, 2],
            "accompanying_events": [3],
        }

    @pytest.mark.asyncio
    async def test_student_of_other_college(self, mock_db, principal):
        with (
            patch(f"{SERVICE}.lock_unlocked_college", new_callable=AsyncMock),
            patch(f"{SERVICE}.applications_repository") as mock_apps,
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_apps.get_student_for_college = AsyncMock(return_value=None)
            mock_repo.delete_for_student = AsyncMock()

            with pytest.raises(StudentNotFoundError) as exc_info:
                await replace_assignments(mock_db, principal, 77, [1], [])

        assert exc_info.value.status_code == 404
        mock_repo.delete_for_student.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_student_without_approved_application(self, mock_db, principal, student):
        with (
            patch(f"{SERVICE}.lock_unlocked_college", new_callable=AsyncMock),
            patch(f"{SERVICE}.applications_repository") as mock_apps,
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_apps.get_student_for_college = AsyncMock(return_value=student)
            mock_apps.has_approved_application = AsyncMock(return_value=False)
            mock_repo.delete_for_student = AsyncMock()
            mock_repo.add_assignments = AsyncMock()

            with pytest.raises(StudentNotApprovedError) as exc_info:
                await replace_assignments(mock_db, principal, 21, [1], [])

        assert exc_info.value.status_code == 409
        assert exc_info.value.error_code == "STUDENT_NOT_APPROVED"
        mock_apps.has_approved_application.assert_awaited_once_with(mock_db, 21)
        mock_repo.delete_for_student.assert_not_awaited()
        mock_repo.add_assignments.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_locked_college(self, mock_db, principal):
        with patch(
            f"{SERVICE}.lock_unlocked_college",
            new_callable=AsyncMock,
            side_effect=CollegeLockedError("edit events"),
        ):
            with pytest.raises(CollegeLockedError) as exc_info:
                await replace_assignments(mock_db, principal, 21, [1], [])

        assert exc_info.value.message == "Final approval is locked. Cannot edit events."


class TestMoveToRejected:
    """Tests for move_to_rejected."""

    @pytest.mark.asyncio
    async def test_rejects_open_applications(self, mock_db, principal, student):
        application = MagicMock(spec=StudentApplication)
        application.status = ApplicationStatus.APPROVED

        with (
            patch(f"{SERVICE}.lock_unlocked_college", new_callable=AsyncMock) as mock_lock,
            patch(f"{SERVICE}.applications_repository") as mock_apps,
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_apps.get_student_for_college = AsyncMock(return_value=student)
            mock_apps.list_open_for_student = AsyncMock(return_value=[application])
            mock_apps.update_status = AsyncMock()
            mock_apps.increment_reapply_count = AsyncMock()
            mock_repo.delete_for_student = AsyncMock(return_value=3)

            result = await move_to_rejected(mock_db, principal, 21, "Not available on dates")

        mock_lock.assert_awaited_once_with(mock_db, 1, "reject students")
        status_call = mock_apps.update_status.await_args
        assert status_call.args[1] is application
        assert status_call.args[2] == ApplicationStatus.REJECTED
        assert status_call.kwargs["rejected_reason"] == "Not available on dates"
        mock_apps.increment_reapply_count.assert_awaited_once_with(mock_db, student)
        assert result == {"student_id": 21, "rejected_applications": 1, "removed_assignments": 3}

    @pytest.mark.asyncio
    async def test_nothing_left_to_reject(self, mock_db, principal, student):
        with (
            patch(f"{SERVICE}.lock_unlocked_college", new_callable=AsyncMock),
            patch(f"{SERVICE}.applications_repository") as mock_apps,
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_apps.get_student_for_college = AsyncMock(return_value=student)
            mock_apps.list_open_for_student = AsyncMock(return_value=[])
            mock_apps.increment_reapply_count = AsyncMock()
            mock_repo.delete_for_student = AsyncMock()

            with pytest.raises(NoOpenApplicationError) as exc_info:
                await move_to_rejected(mock_db, principal, 21, "reason")

        assert exc_info.value.status_code == 409
        assert exc_info.value.error_code == "NO_OPEN_APPLICATION"
        mock_apps.increment_reapply_count.assert_not_awaited()
        mock_repo.delete_for_student.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_student(self, mock_db, principal):
        with (
            patch(f"{SERVICE}.lock_unlocked_college", new_callable=AsyncMock),
            patch(f"{SERVICE}.applications_repository") as mock_apps,
        ):
            mock_apps.get_student_for_college = AsyncMock(return_value=None)

            with pytest.raises(StudentNotFoundError):
                await move_to_rejected(mock_db, principal, 21, "reason")
