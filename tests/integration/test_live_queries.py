"""SubscriptionSession pushes current values and re-pushes only on change."""

import asyncio
import json

import pytest

from taskboard.api.websocket import LiveQueryRegistry, SubscriptionSession, build_default_registry
from taskboard.api.websocket.manager import subscription_key
from taskboard.application.dtos.file import SafeFilePolicy, TaskFileCreate
from taskboard.application.dtos.task import NewTaskInfo
from taskboard.application.dtos.user import Principal
from taskboard.infrastructure.messaging.change_feed import ChangeEvent, ChangeFeed
from taskboard.infrastructure.persistence.repositories import (
    TaskFileRepository,
    TaskRepository,
    UserRepository,
)
from taskboard.schemas.websocket import SubscribeFrame


class FakeWebSocket:
    def __init__(self) -> None:
        self.sent: list[dict] = []

    async def send_json(self, data) -> None:
        self.sent.append(data)


@pytest.fixture
def live(session_factory):
    feed = ChangeFeed()
    websocket = FakeWebSocket()
    session = SubscriptionSession(
        websocket=websocket,
        registry=build_default_registry(),
        session_factory=session_factory,
        feed=feed,
        principal=Principal(subject="idp|erin", name="Erin"),
        policy=SafeFilePolicy(mime_types=("text/plain",), max_bytes=1024),
    )
    return session, websocket, feed


async def _create_task(session_factory, title: str) -> None:
    async with session_factory() as session:
        async with session.begin():
            repo = TaskRepository(session)
            await repo.create_task(await repo.next_number(), NewTaskInfo(title=title), None, None)


def test_subscription_key_ignores_argument_order() -> None:
    assert subscription_key("getTask", {"a": 1, "b": 2}) == subscription_key("getTask", {"b": 2, "a": 1})
    assert subscription_key("getTask", {"number": 1}) != subscription_key("getTask", {"number": 2})


async def test_subscribe_pushes_current_value(live) -> None:
    session, websocket, _ = live
    await session.subscribe(SubscribeFrame(type="subscribe", id="s1", operation="getCurrentUser"))
    assert websocket.sent == [{"type": "result", "id": "s1", "value": None}]
    assert session.subscription_count == 1


async def test_change_repushes_only_when_value_differs(live, session_factory) -> None:
    session, websocket, feed = live
    await session.subscribe(SubscribeFrame(type="subscribe", id="list", operation="listTasks", args={}))
    assert websocket.sent[-1]["value"]["page"] == []

    await _create_task(session_factory, "first")
    await session.apply_changes(feed.publish_nowait([ChangeEvent("task")]))
    assert len(websocket.sent) == 2
    assert [t["title"] for t in websocket.sent[-1]["value"]["page"]] == ["first"]

    await session.apply_changes(feed.publish_nowait([ChangeEvent("task")]))
    await session.apply_changes(feed.publish_nowait([ChangeEvent("comment")]))
    assert len(websocket.sent) == 2


async def test_same_query_under_two_ids_is_pushed_to_both(live, session_factory) -> None:
    session, websocket, feed = live
    for sub_id in ("a", "b"):
        await session.subscribe(SubscribeFrame(type="subscribe", id=sub_id, operation="getTask", args={"number": 1}))
    assert [f["value"]["state"] for f in websocket.sent] == ["not_found", "not_found"]

    await _create_task(session_factory, "now it exists")
    await session.apply_changes(feed.publish_nowait([ChangeEvent("task")]))
    pushed = websocket.sent[2:]
    assert sorted(f["id"] for f in pushed) == ["a", "b"]
    assert all(f["value"]["state"] == "found" for f in pushed)


async def test_user_save_updates_current_user(live, session_factory) -> None:
    session, websocket, feed = live
    await session.subscribe(SubscribeFrame(type="subscribe", id="me", operation="getCurrentUser"))
    async with session_factory() as db:
        async with db.begin():
            await UserRepository(db).create_user("idp|erin", "Erin", None)
    await session.apply_changes(feed.publish_nowait([ChangeEvent("app_user")]))
    assert websocket.sent[-1]["value"]["name"] == "Erin"


async def test_unknown_operation_and_bad_frames(live) -> None:
    session, websocket, _ = live
    await session.handle_text(json.dumps({"type": "subscribe", "id": "x", "operation": "dropTables"}))
    await session.handle_text("not json")
    await session.handle_text(json.dumps({"type": "subscribe", "id": "t", "operation": "getTask", "args": {}}))
    errors = [(f["id"], f["error"]) for f in websocket.sent]
    assert errors == [("x", "UNKNOWN_OPERATION"), (None, "BAD_FRAME"), ("t", "VALIDATION_ERROR")]
    assert all(f["type"] == "error" for f in websocket.sent)


async def test_unsubscribe_stops_pushes(live, session_factory) -> None:
    session, websocket, feed = live
    await session.handle_text(json.dumps({"type": "subscribe", "id": "l", "operation": "listTasks"}))
    await session.handle_text(json.dumps({"type": "unsubscribe", "id": "l"}))
    await _create_task(session_factory, "unseen")
    await session.apply_changes(feed.publish_nowait([ChangeEvent("task")]))
    assert len(websocket.sent) == 1
    assert session.subscription_count == 0


async def test_safe_files_never_reevaluated(live) -> None:
    session, websocket, feed = live
    await session.subscribe(SubscribeFrame(type="subscribe", id="safe", operation="getSafeFiles"))
    assert websocket.sent[0]["value"] == {"mime_types": ["text/plain"], "max_bytes": 1024}
    await session.apply_changes(feed.publish_nowait([ChangeEvent("task"), ChangeEvent("app_user")]))
    assert len(websocket.sent) == 1


async def test_list_files_returns_attachment_metadata(live, session_factory) -> None:
    session, websocket, _ = live
    async with session_factory() as db:
        async with db.begin():
            uploader = await UserRepository(db).create_user("idp|grace", "Grace", None)
            tasks = TaskRepository(db)
            task = await tasks.create_task(await tasks.next_number(), NewTaskInfo(title="with file"), None, None)
            await TaskFileRepository(db).create_file(
                TaskFileCreate(
                    id="f1", task_id=task.id, uploader_id=uploader.id, filename="a.txt",
                    mime_type="text/plain", file_size=3, checksum="c", storage_ref="tasks/x/files/f1/a.txt",
                )
            )
    for sub_id, task_id in (("files", task.id), ("none", "nope")):
        await session.subscribe(
            SubscribeFrame(type="subscribe", id=sub_id, operation="listFiles", args={"task_id": task_id})
        )
    files, missing = websocket.sent
    assert [f["filename"] for f in files["value"]] == ["a.txt"]
    assert "storage_ref" not in files["value"][0]
    assert missing["value"] == []


def _flaky_session(session_factory, websocket, feed) -> SubscriptionSession:
    outcomes = iter([1, RuntimeError("database went away"), 2])

    async def flaky(ctx, args):
        outcome = next(outcomes)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    registry = LiveQueryRegistry()
    registry.register("flaky", {"task"}, flaky)
    return SubscriptionSession(
        websocket=websocket,
        registry=registry,
        session_factory=session_factory,
        feed=feed,
        principal=None,
        policy=SafeFilePolicy(mime_types=("text/plain",), max_bytes=1024),
    )


async def _drain(pump: asyncio.Task, websocket: FakeWebSocket, frames: int) -> None:
    async def _received() -> None:
        while len(websocket.sent) < frames:
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_received(), timeout=2)
    pump.cancel()
    with pytest.raises(asyncio.CancelledError):
        await pump


async def test_failed_refresh_is_reported_and_next_change_still_pushed(session_factory) -> None:
    feed, websocket = ChangeFeed(), FakeWebSocket()
    session = _flaky_session(session_factory, websocket, feed)
    await session.subscribe(SubscribeFrame(type="subscribe", id="f", operation="flaky"))
    async with feed.subscribe() as changes:
        pump = asyncio.create_task(session._pump(changes))
        feed.publish_nowait([ChangeEvent("task")])
        feed.publish_nowait([ChangeEvent("task")])
        await _drain(pump, websocket, 3)
    assert [(f["type"], f.get("value"), f.get("error")) for f in websocket.sent] == [
        ("result", 1, None),
        ("error", None, "INTERNAL_ERROR"),
        ("result", 2, None),
    ]


class FlakySendWebSocket(FakeWebSocket):
    def __init__(self, failures: int) -> None:
        super().__init__()
        self.failures = failures

    async def send_json(self, data) -> None:
        if self.failures:
            self.failures -= 1
            raise RuntimeError("send failed")
        await super().send_json(data)


async def test_failed_send_does_not_stop_later_pushes(session_factory) -> None:
    feed, websocket = ChangeFeed(), FlakySendWebSocket(failures=0)
    session = SubscriptionSession(
        websocket=websocket,
        registry=build_default_registry(),
        session_factory=session_factory,
        feed=feed,
        principal=None,
        policy=SafeFilePolicy(mime_types=("text/plain",), max_bytes=1024),
    )
    await session.subscribe(SubscribeFrame(type="subscribe", id="l", operation="listTasks"))
    async with feed.subscribe() as changes:
        pump = asyncio.create_task(session._pump(changes))
        await _create_task(session_factory, "lost")
        websocket.failures = 1
        feed.publish_nowait([ChangeEvent("task")])
        while websocket.failures:
            await asyncio.sleep(0.01)
        await _create_task(session_factory, "delivered")
        feed.publish_nowait([ChangeEvent("task")])
        await _drain(pump, websocket, 2)
    titles = [t["title"] for t in websocket.sent[-1]["value"]["page"]]
    assert sorted(titles) == ["delivered", "lost"]
    assert len(websocket.sent) == 2
