"""Committed writes reach the change feed; rolled back writes never do."""

import asyncio

import pytest

from taskboard.application.dtos.task import NewTaskInfo
from taskboard.infrastructure.messaging.change_feed import ChangeEvent, get_change_feed
from taskboard.infrastructure.persistence.repositories import CommentRepository, TaskRepository, UserRepository


async def _create(session, title: str = "tracked"):
    repo = TaskRepository(session)
    return await repo.create_task(await repo.next_number(), NewTaskInfo(title=title), None, None)


async def test_commit_publishes_one_batch(session_factory) -> None:
    feed = get_change_feed()
    async with feed.subscribe() as changes:
        async with session_factory() as session:
            async with session.begin():
                task = await _create(session)
        batch = await asyncio.wait_for(changes.get(), timeout=1)
    assert batch.origin == feed.node_id
    assert ChangeEvent("task", task.id) in batch.changes
    assert "task_sequence" in batch.tables


async def test_rollback_publishes_nothing(session_factory) -> None:
    async with get_change_feed().subscribe() as changes:
        async with session_factory() as session:
            await _create(session, "discarded")
            await session.rollback()
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(changes.get(), timeout=0.1)


async def test_counter_update_is_reported_with_the_comment(session_factory) -> None:
    async with session_factory() as session:
        async with session.begin():
            user = await UserRepository(session).create_user("idp|dan", "Dan", None)
            task = await _create(session)
    async with get_change_feed().subscribe() as changes:
        async with session_factory() as session:
            async with session.begin():
                await CommentRepository(session).add_comment(task.id, user.id, "hello")
                await TaskRepository(session).increment_comment_count(task.id)
        batch = await asyncio.wait_for(changes.get(), timeout=1)
    assert {"comment", "task"} <= batch.tables
