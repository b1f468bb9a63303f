"""TaskService: ownership, status side effects, partial updates and listing."""
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from taskdesk.errors import InternalError, NotFound, ValidationError
from taskdesk.models.base import utcnow
from taskdesk.models.task import Task, TaskTag
from taskdesk.services.task_service import TaskService


class TestCreate:

    def test_owner_is_requester(self, alice, alice_tasks):
        task = alice_tasks.create({"title": "Write spec", "owner_id": "someone-else"})
        assert task.owner_id == alice.id
        assert task.status == "pending"
        assert task.priority == "medium"
        assert task.is_completed is False
        assert task.completed_at is None

    def test_created_completed_sets_completion_fields(self, alice_tasks):
        task = alice_tasks.create({"title": "done already", "status": "completed"})
        assert task.is_completed is True
        assert task.completed_at is not None

    def test_derived_fields_in_payload_ignored(self, alice_tasks):
        task = alice_tasks.create({"title": "t", "isCompleted": True, "completedAt": "2020-01-01T00:00:00"})
        assert task.is_completed is False
        assert task.completed_at is None

    def test_tags_stored_in_order(self, alice_tasks):
        task = alice_tasks.create({"title": "t", "tags": ["z", "a", "z"]})
        assert task.tag_values == ["z", "a", "z"]

    def test_invalid_payload_stores_nothing(self, session, alice_tasks):
        with pytest.raises(ValidationError):
            alice_tasks.create({"title": "", "priority": "nope"})
        assert session.exec(select(Task)).all() == []


class TestOwnership:

    @pytest.fixture
    def alice_task(self, alice_tasks):
        return alice_tasks.create({"title": "private"})

    def test_get_by_other_user_is_not_found(self, alice_task, bob_tasks):
        with pytest.raises(NotFound):
            bob_tasks.get(alice_task.id)

    def test_update_by_other_user_is_not_found(self, alice_task, bob_tasks, alice_tasks):
        with pytest.raises(NotFound):
            bob_tasks.update(alice_task.id, {"title": "hijacked"})
        assert alice_tasks.get(alice_task.id).title == "private"

    def test_delete_by_other_user_is_not_found(self, alice_task, bob_tasks, alice_tasks):
        with pytest.raises(NotFound):
            bob_tasks.delete(alice_task.id)
        assert alice_tasks.get(alice_task.id).id == alice_task.id

    def test_set_status_by_other_user_is_not_found(self, alice_task, bob_tasks):
        with pytest.raises(NotFound):
            bob_tasks.set_status(alice_task.id, "completed")

    def test_not_owned_matches_missing(self, alice_task, bob_tasks):
        with pytest.raises(NotFound) as not_owned:
            bob_tasks.get(alice_task.id)
        with pytest.raises(NotFound) as missing:
            bob_tasks.get("no-such-task")
        assert not_owned.value.message == missing.value.message

    def test_malformed_id_is_not_found(self, alice_tasks):
        with pytest.raises(NotFound):
            alice_tasks.get("../../etc")


class TestStatus:

    def test_complete_then_reopen(self, alice_tasks):
        task = alice_tasks.create({"title": "t"})

        task = alice_tasks.set_status(task.id, "completed")
        assert task.is_completed is True
        assert task.completed_at is not None

        for status in ("in-progress", "pending", "cancelled"):
            task = alice_tasks.set_status(task.id, "completed")
            task = alice_tasks.set_status(task.id, status)
            assert task.status == status
            assert task.is_completed is False
            assert task.completed_at is None

    def test_invalid_status_rejected(self, alice_tasks):
        task = alice_tasks.create({"title": "t"})
        with pytest.raises(ValidationError) as exc_info:
            alice_tasks.set_status(task.id, "done")
        assert exc_info.value.fields == ["status"]

    def test_complete_shortcut(self, alice_tasks):
        task = alice_tasks.create({"title": "t"})
        task = alice_tasks.complete(task.id)
        assert task.status == "completed"
        assert task.is_completed is True

    def test_status_change_touches_updated_at(self, alice_tasks):
        task = alice_tasks.create({"title": "t"})
        before = task.updated_at
        task = alice_tasks.set_status(task.id, "in-progress")
        assert task.updated_at >= before


class TestUpdate:

    def test_only_provided_fields_change(self, alice_tasks, tomorrow):
        task = alice_tasks.create({
            "title": "t",
            "description": "keep me",
            "priority": "high",
            "dueDate": tomorrow.isoformat(),
            "tags": ["a"],
        })
        task = alice_tasks.update(task.id, {"title": "renamed"})
        assert task.title == "renamed"
        assert task.description == "keep me"
        assert task.priority == "high"
        assert task.due_date == tomorrow
        assert task.tag_values == ["a"]

    def test_validation_failure_applies_nothing(self, alice_tasks):
        task = alice_tasks.create({"title": "t", "priority": "low"})
        with pytest.raises(ValidationError) as exc_info:
            alice_tasks.update(task.id, {"priority": "urgent", "title": "x" * 101})
        assert exc_info.value.fields == ["title"]
        reloaded = alice_tasks.get(task.id)
        assert reloaded.priority == "low"
        assert reloaded.title == "t"

    def test_null_title_rejected(self, alice_tasks):
        task = alice_tasks.create({"title": "t"})
        with pytest.raises(ValidationError) as exc_info:
            alice_tasks.update(task.id, {"title": None})
        assert exc_info.value.fields == ["title"]

    def test_null_due_date_clears_it(self, alice_tasks, tomorrow):
        task = alice_tasks.create({"title": "t", "dueDate": tomorrow.isoformat()})
        assert alice_tasks.update(task.id, {"dueDate": None}).due_date is None

    def test_status_in_update_keeps_derived_fields(self, alice_tasks):
        task = alice_tasks.create({"title": "t"})
        task = alice_tasks.update(task.id, {"status": "completed"})
        assert task.is_completed is True
        assert task.completed_at is not None
        task = alice_tasks.update(task.id, {"status": "pending"})
        assert task.is_completed is False
        assert task.completed_at is None

    def test_tags_replaced(self, session, alice_tasks):
        task = alice_tasks.create({"title": "t", "tags": ["a", "b"]})
        task = alice_tasks.update(task.id, {"tags": ["c"]})
        assert task.tag_values == ["c"]
        assert len(session.exec(select(TaskTag)).all()) == 1

    def test_owner_cannot_be_reassigned(self, alice, bob, alice_tasks):
        task = alice_tasks.create({"title": "t"})
        task = alice_tasks.update(task.id, {"owner_id": bob.id, "ownerId": bob.id})
        assert task.owner_id == alice.id


class TestDelete:

    def test_delete_removes_task_and_tags(self, session, alice_tasks):
        task = alice_tasks.create({"title": "t", "tags": ["a"]})
        alice_tasks.delete(task.id)
        with pytest.raises(NotFound):
            alice_tasks.get(task.id)
        assert session.exec(select(TaskTag)).all() == []

    def test_second_delete_is_not_found(self, alice_tasks):
        task = alice_tasks.create({"title": "t"})
        alice_tasks.delete(task.id)
        with pytest.raises(NotFound):
            alice_tasks.delete(task.id)


class TestList:

    def test_pagination_summary(self, alice_tasks):
        for i in range(7):
            alice_tasks.create({"title": f"task {i}"})

        first = alice_tasks.list_tasks({"limit": 3, "page": 1})
        last = alice_tasks.list_tasks({"limit": 3, "page": 3})

        assert first.pagination.total_pages == 3
        assert first.pagination.total_tasks == 7
        assert first.pagination.has_next is True
        assert first.pagination.has_prev is False
        assert len(first.tasks) == 3

        assert len(last.tasks) == 7 - 3 * 2
        assert last.pagination.has_next is False
        assert last.pagination.has_prev is True

    def test_exact_multiple_has_no_next_page(self, alice_tasks):
        for i in range(4):
            alice_tasks.create({"title": f"task {i}"})
        page = alice_tasks.list_tasks({"limit": 2, "page": 2})
        assert page.pagination.total_pages == 2
        assert page.pagination.has_next is False

    def test_empty_list(self, alice_tasks):
        page = alice_tasks.list_tasks()
        assert page.tasks == []
        assert page.pagination.total_tasks == 0
        assert page.pagination.total_pages == 0
        assert page.pagination.has_next is False

    def test_sorted_second_page(self, alice_tasks):
        for title in ("C", "A", "B", "D"):
            alice_tasks.create({"title": title})
        page = alice_tasks.list_tasks({"sortBy": "title", "sortOrder": "asc", "limit": 2, "page": 2})
        assert [task.title for task in page.tasks] == ["C", "D"]
        assert page.pagination.total_tasks == 4
        assert page.pagination.total_pages == 2
        assert page.pagination.has_next is False
        assert page.pagination.has_prev is True

    def test_huge_page_returns_empty_page(self, alice_tasks):
        alice_tasks.create({"title": "t"})
        page = alice_tasks.list_tasks({"page": 10 ** 19})
        assert page.tasks == []
        assert page.pagination.total_tasks == 1
        assert page.pagination.has_next is False
        assert page.pagination.has_prev is True

    def test_status_filter_scoped_to_requester(self, alice_tasks, bob_tasks):
        alice_tasks.create({"title": "mine done", "status": "completed"})
        alice_tasks.create({"title": "mine open"})
        bob_tasks.create({"title": "bob done", "status": "completed"})
        page = alice_tasks.list_tasks({"status": "completed"})
        assert [task.title for task in page.tasks] == ["mine done"]

    def test_search_across_fields(self, alice_tasks):
        alice_tasks.create({"title": "Alpha release"})
        alice_tasks.create({"title": "x", "description": "mentions ALPHA"})
        alice_tasks.create({"title": "y", "tags": ["alphanumeric"]})
        alice_tasks.create({"title": "z", "description": "nothing here"})
        page = alice_tasks.list_tasks({"search": "alpha"})
        assert sorted(task.title for task in page.tasks) == ["Alpha release", "x", "y"]

    def test_owner_summary_has_display_fields_only(self, alice, alice_tasks):
        alice_tasks.create({"title": "t"})
        owner = alice_tasks.list_tasks().tasks[0].owner.model_dump(by_alias=True)
        assert owner == {"id": alice.id, "username": "alice", "firstName": "Alice", "lastName": "Liddell"}

    def test_invalid_parameters_rejected(self, alice_tasks):
        with pytest.raises(ValidationError) as exc_info:
            alice_tasks.list_tasks({"page": 0, "sortOrder": "up"})
        assert set(exc_info.value.fields) == {"page", "sortOrder"}


def test_overdue_scenario(alice_tasks, bob_tasks, yesterday):
    task = alice_tasks.create({"title": "Write spec", "priority": "high", "dueDate": yesterday.isoformat()})

    with pytest.raises(NotFound):
        bob_tasks.get(task.id)

    stats = alice_tasks.stats()
    assert stats.overdue == 1
    assert stats.high == 1
    assert stats.total == 1


def test_persistence_failure_becomes_internal_error(session, alice, monkeypatch):
    service = TaskService(session, alice.id)

    def broken_exec(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(session, "exec", broken_exec)
    with pytest.raises(InternalError) as exc_info:
        service.get("any")
    assert "locked" not in exc_info.value.message


def test_is_overdue_reported_at_read_time(alice_tasks):
    task = alice_tasks.create({"title": "t", "dueDate": (utcnow() + timedelta(seconds=-1)).isoformat()})
    page = alice_tasks.list_tasks()
    assert page.tasks[0].is_overdue is True
    assert alice_tasks.get(task.id).is_overdue is True
