from uuid import uuid4

from familyhub.models.task import Task, TaskStatus
from familyhub.services.task_service import clean_task_text, set_task_status, toggle_task


def make_task(**overrides) -> Task:
    values = {"list_id": uuid4(), "family_id": uuid4(), "title": "Milk", "created_by": uuid4()}
    values.update(overrides)
    return Task(**values)


def test_completion_fields_follow_status() -> None:
    actor = uuid4()
    task = make_task()

    set_task_status(task, TaskStatus.DONE, actor_id=actor)
    assert task.status == TaskStatus.DONE
    assert task.completed_by == actor
    assert task.completed_at is not None

    set_task_status(task, TaskStatus.IN_PROGRESS, actor_id=actor)
    assert task.completed_at is None
    assert task.completed_by is None


def test_reasserting_done_keeps_original_completion() -> None:
    first, second = uuid4(), uuid4()
    task = make_task()
    set_task_status(task, TaskStatus.DONE, actor_id=first)
    stamped_at = task.completed_at

    set_task_status(task, TaskStatus.DONE, actor_id=second)
    assert task.completed_by == first
    assert task.completed_at == stamped_at


def test_toggle_is_binary() -> None:
    actor = uuid4()
    task = make_task(status=TaskStatus.IN_PROGRESS)

    toggle_task(task, actor_id=actor)
    assert task.status == TaskStatus.DONE
    toggle_task(task, actor_id=actor)
    assert task.status == TaskStatus.TODO


def test_clean_task_text_collapses_whitespace() -> None:
    assert clean_task_text("  buy   oat  milk ") == "buy oat milk"
    assert clean_task_text("   ") == ""
