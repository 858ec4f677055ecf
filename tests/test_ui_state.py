from __future__ import annotations

from datetime import datetime

import pytest

from assistia.domain.enums import ChatAction
from assistia.errors import RelayTransportError
from assistia.services.task_service import TaskService
from assistia.ui.state import (
    CHAT_ERROR_MESSAGE,
    ChatRoute,
    ChatSession,
    LoadState,
    TaskBoardState,
    TaskEditorState,
    extract_reply,
)

from fakes import FakeRelay, FakeRepo, make_task


def make_board_service() -> tuple[FakeRepo, TaskService]:
    repo = FakeRepo([
        make_task("a", status="not started"),
        make_task("b", status="Not Started"),
        make_task("c", status="pending"),
        make_task("d", status="completed"),
        make_task("e", status="blocked"),
    ])
    return repo, TaskService(repo, FakeRelay())


def test_board_refresh_and_filter() -> None:
    repo, service = make_board_service()
    board = TaskBoardState(service)
    assert board.state == LoadState.IDLE

    assert board.refresh() == LoadState.LOADED
    board.set_filter("todo")
    assert [task.id for task in board.visible_tasks] == ["a", "b"]

    board.set_filter("in-progress")
    assert [task.id for task in board.visible_tasks] == ["c"]

    board.set_filter("all")
    assert len(board.visible_tasks) == 5


def test_board_filter_does_not_refetch() -> None:
    repo, service = make_board_service()
    board = TaskBoardState(service)
    board.refresh()
    repo.fail = True

    board.set_filter("completed")

    assert [task.id for task in board.visible_tasks] == ["d"]
    assert board.state == LoadState.LOADED


def test_board_rejects_unknown_filter() -> None:
    _, service = make_board_service()
    board = TaskBoardState(service)

    with pytest.raises(ValueError):
        board.set_filter("blocked")


def test_board_failure_keeps_previous_list() -> None:
    repo, service = make_board_service()
    board = TaskBoardState(service)
    board.refresh()
    repo.fail = True

    assert board.refresh() == LoadState.FAILED
    assert board.error == "Failed to load tasks"
    assert len(board.tasks) == 5


def test_editor_reloads_latest_task() -> None:
    repo = FakeRepo([make_task(status="completed", assigned_to=None)])
    editor = TaskEditorState(TaskService(repo, FakeRelay()), make_task())

    editor.load()

    assert editor.task.status == "completed"
    assert editor.draft.status == "completed"
    assert editor.draft.assigned_to == ""


def test_editor_keeps_snapshot_when_task_missing() -> None:
    snapshot = make_task("gone")
    editor = TaskEditorState(TaskService(FakeRepo(), FakeRelay()), snapshot)

    assert editor.load() == snapshot


def test_editor_save_commits_draft_and_refreshes_parent() -> None:
    repo = FakeRepo([make_task()])
    relay = FakeRelay()
    refreshed = []
    editor = TaskEditorState(TaskService(repo, relay), make_task(), lambda: refreshed.append(True))

    editor.edit(status="pending", assigned_to="lee", due_date=datetime(2026, 3, 1))
    assert editor.save() is True

    assert repo.tasks["t1"].status == "pending"
    assert repo.tasks["t1"].assigned_to == "lee"
    assert repo.tasks["t1"].priority == "high"
    assert editor.task.status == "pending"
    assert editor.saving is False
    assert refreshed == [True]
    assert relay.payloads[0]["taskId"] == "t1"


def test_editor_save_failure_keeps_draft() -> None:
    repo = FakeRepo([make_task()])
    refreshed = []
    editor = TaskEditorState(TaskService(repo, FakeRelay()), make_task(), lambda: refreshed.append(True))
    editor.edit(status="completed")
    repo.fail = True

    assert editor.save() is False

    assert editor.draft.status == "completed"
    assert editor.task.status == "not started"
    assert editor.saving is False
    assert refreshed == []


def test_editor_refuses_concurrent_save() -> None:
    repo = FakeRepo([make_task()])
    editor = TaskEditorState(TaskService(repo, FakeRelay()), make_task())
    editor.saving = True

    assert editor.save() is False
    assert editor.edit(status="completed").status == "not started"
    assert repo.updates == []


def test_chat_route_from_params() -> None:
    assert ChatRoute.from_params({"action": "update", "taskId": "t1"}) == ChatRoute(ChatAction.UPDATE, "t1")
    assert ChatRoute.from_params({"action": "delete"}) == ChatRoute(None, None)
    assert ChatRoute.from_params({}) == ChatRoute()


def test_chat_seeds_create() -> None:
    session = ChatSession(TaskService(FakeRepo(), FakeRelay()), FakeRelay(), ChatRoute(ChatAction.CREATE))

    session.start()

    assert session.input_text == "Create "
    assert session.title == "Create New Task"
    assert session.messages[0].sender == "assistant"
    assert "creating a new task" in session.messages[0].content


def test_chat_seeds_update_with_task_title() -> None:
    service = TaskService(FakeRepo([make_task("X", title="Ship report")]), FakeRelay())
    session = ChatSession(service, FakeRelay(), ChatRoute.from_params({"action": "update", "taskId": "X"}))

    session.start()

    assert session.input_text == "Update Ship report "
    assert session.messages[0].content == (
        "You are updating the task: Ship report. Please specify what you want to update."
    )


def test_chat_seeds_update_with_empty_title_when_missing() -> None:
    session = ChatSession(
        TaskService(FakeRepo(), FakeRelay()),
        FakeRelay(),
        ChatRoute(ChatAction.UPDATE, "missing"),
    )

    session.start()

    assert session.input_text == "Update  "


def test_chat_send_relays_and_appends_reply() -> None:
    relay = FakeRelay(response={"message": "Done", "success": True})
    session = ChatSession(TaskService(FakeRepo(), FakeRelay()), relay, ChatRoute(ChatAction.UPDATE, "t1"))

    reply = session.send("Update Ship report priority high")

    assert relay.payloads == [
        {"action": "update", "taskId": "t1", "message": "Update Ship report priority high"},
    ]
    assert [message.sender for message in session.messages] == ["user", "assistant"]
    assert reply.content == "Done"
    assert session.input_text == ""
    assert session.sending is False


def test_chat_send_ignores_blank_and_in_flight() -> None:
    relay = FakeRelay()
    session = ChatSession(TaskService(FakeRepo(), FakeRelay()), relay, ChatRoute())

    assert session.send("   ") is None
    session.sending = True
    assert session.send("hello") is None
    assert relay.payloads == []
    assert session.messages == []


def test_chat_send_failure_appends_generic_error() -> None:
    relay = FakeRelay(error=RelayTransportError("HTTP 500"))
    session = ChatSession(TaskService(FakeRepo(), FakeRelay()), relay, ChatRoute(ChatAction.CREATE))

    reply = session.send("Create something")

    assert reply.content == CHAT_ERROR_MESSAGE
    assert session.sending is False


def test_extract_reply_priority() -> None:
    assert extract_reply({"result": "r", "message": "m", "success": True}) == "r"
    assert extract_reply({"message": "m", "success": True}) == "m"
    assert extract_reply({"success": True}) == "true"
    assert extract_reply({"status": "queued"}) == '{"status": "queued"}'
    assert extract_reply(["a"]) == '["a"]'
