"""Tests for the delivery orchestrator."""

from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import pytest

from fakes import FakeTransport, RecordingMailSender
from hrnotify.application.use_cases.notifications import (
    NotificationOrchestrator,
    SecondaryChannelDispatcher,
)
from hrnotify.domain.entities import (
    InvalidNotificationPayload,
    NotificationFilter,
    NotificationPayload,
)
from hrnotify.utils import utc_now

pytestmark = pytest.mark.anyio


@pytest.fixture
def orchestrator(store, directory, registry, mail_sender, clock):
    secondary = SecondaryChannelDispatcher(directory, mail_sender)
    return NotificationOrchestrator(store, directory, registry, secondary, clock=clock)


def _payload(**overrides) -> NotificationPayload:
    values = {
        "title": "Leave approved",
        "message": "Your leave request for 3 days has been approved",
        "type": "info",
        "category": "general",
        "metadata": None,
    }
    values.update(overrides)
    return NotificationPayload(**values)


async def test_end_to_end_notify_connected_user(orchestrator, registry, store, directory, mail_sender):
    directory.add(1, "employee")
    transport = FakeTransport()
    await registry.register(1, "employee", transport)

    record = await orchestrator.notify_user(
        1, _payload(title="T", type="warning", category="attendance", metadata={"sessionId": 9})
    )
    await orchestrator.wait_for_background()

    stored = store.for_recipient(1)
    assert len(stored) == 1
    assert stored[0].is_read is False
    assert stored[0].id == record.id

    frames = transport.notification_frames()
    assert len(frames) == 1
    assert frames[0]["id"] == record.id
    assert frames[0]["title"] == "T"
    assert frames[0]["type"] == "warning"
    assert frames[0]["category"] == "attendance"
    assert frames[0]["metadata"] == {"sessionId": 9}
    assert frames[0]["isRead"] is False
    assert frames[0]["createdAt"] == "2024-01-15T09:00:00.000Z"

    assert [recipient for _, _, recipient in mail_sender.sent] == ["user1@example.com"]


async def test_record_is_persisted_when_recipient_is_offline(orchestrator):
    record = await orchestrator.notify_user(5, _payload())

    page = await orchestrator.list_for_user(5)

    assert [item.id for item in page.items] == [record.id]
    assert page.items[0].title == "Leave approved"
    assert page.unread_count == 1


async def test_push_failure_does_not_affect_result(orchestrator, registry, store):
    transport = FakeTransport(fail_after=1)
    await registry.register(1, "employee", transport)

    record = await orchestrator.notify_user(1, _payload())

    assert record.id is not None
    assert len(store.for_recipient(1)) == 1
    assert not registry.is_connected(1)


async def test_store_failure_propagates_and_nothing_is_pushed(orchestrator, registry, store):
    transport = FakeTransport()
    await registry.register(1, "employee", transport)
    store.fail_writes = True

    with pytest.raises(RuntimeError):
        await orchestrator.notify_user(1, _payload())

    assert transport.notification_frames() == []


async def test_invalid_payload_is_rejected_before_persisting(orchestrator, store):
    with pytest.raises(InvalidNotificationPayload):
        await orchestrator.notify_user(1, _payload(title="  "))
    with pytest.raises(InvalidNotificationPayload):
        await orchestrator.notify_user(1, _payload(type="critical"))

    assert store.records == {}


async def test_role_fan_out_persists_for_all_members_and_pushes_to_live_ones(
    orchestrator, registry, store, directory
):
    for user_id in range(1, 6):
        directory.add(user_id, "HR")
    directory.add(50, "employee")
    transports = {user_id: FakeTransport() for user_id in (1, 2, 3)}
    for user_id, transport in transports.items():
        await registry.register(user_id, "HR", transport)

    result = await orchestrator.notify_role("HR", _payload(title="New employee added"))

    assert len(result.records) == 5
    assert sorted(record.recipient_id for record in result.records) == [1, 2, 3, 4, 5]
    assert result.pushed <= 3
    assert result.pushed == 3
    assert store.for_recipient(50) == []
    for transport in transports.values():
        frames = transport.notification_frames()
        assert len(frames) == 1
        assert frames[0]["role"] == "HR"
        assert frames[0]["id"] is None


async def test_notify_roles_keeps_duplicates_by_default(orchestrator, store, directory):
    directory.add(1, "HR")
    directory.add(2, "ADMIN")
    directory.grant(1, "ADMIN")

    result = await orchestrator.notify_roles(["HR", "ADMIN"], _payload())
    assert sorted(record.recipient_id for record in result.records) == [1, 1, 2]

    deduped = await orchestrator.notify_roles(["HR", "ADMIN", "HR"], _payload(), dedupe=True)
    assert sorted(record.recipient_id for record in deduped.records) == [1, 2]


async def test_notify_role_without_members_persists_nothing(orchestrator, store, registry):
    await registry.register(9, "ghost", FakeTransport())

    result = await orchestrator.notify_role("ghost", _payload())

    assert result.records == []
    assert result.pushed == 0
    assert store.records == {}


async def test_notify_role_reaches_connections_registered_in_other_case(
    orchestrator, directory, registry
):
    transports = {user_id: FakeTransport() for user_id in (1, 2, 3)}
    for user_id, transport in transports.items():
        directory.add(user_id, "HR")
        await registry.register(user_id, "HR", transport)

    result = await orchestrator.notify_role("hr", _payload(title="Payroll closes Friday"))

    assert len(result.records) == 3
    assert result.pushed == 3
    assert all(
        transport.notification_frames()[0]["title"] == "Payroll closes Friday"
        for transport in transports.values()
    )


async def test_broadcast_is_push_only(orchestrator, registry, store):
    transports = [FakeTransport() for _ in range(3)]
    for user_id, transport in enumerate(transports, start=1):
        await registry.register(user_id, "employee" if user_id != 3 else "hr", transport)

    delivered = await orchestrator.broadcast(_payload(title="Maintenance tonight"))

    assert delivered == 3
    assert store.records == {}
    assert all(
        transport.notification_frames()[0]["title"] == "Maintenance tonight"
        for transport in transports
    )


async def test_mark_read_is_scoped_to_owner(orchestrator, store):
    record = await orchestrator.notify_user(1, _payload())

    assert await orchestrator.mark_read(record.id, 2) is False
    assert store.records[record.id].is_read is False

    assert await orchestrator.mark_read(record.id, 1) is True
    assert store.records[record.id].is_read is True
    assert await orchestrator.mark_read(record.id, 1) is False


async def test_delete_is_scoped_to_owner(orchestrator, store):
    record = await orchestrator.notify_user(1, _payload())

    assert await orchestrator.delete(record.id, 2) is False
    assert record.id in store.records
    assert await orchestrator.delete(record.id, 1) is True
    assert record.id not in store.records


async def test_mark_many_and_all_read(orchestrator):
    records = [await orchestrator.notify_user(1, _payload()) for _ in range(4)]
    other = await orchestrator.notify_user(2, _payload())

    assert await orchestrator.mark_many_read([records[0].id, records[1].id, other.id], 1) == 2
    assert await orchestrator.unread_count(1) == 2
    assert await orchestrator.mark_all_read(1) == 2
    assert await orchestrator.unread_count(1) == 0
    assert await orchestrator.unread_count(2) == 1
    assert await orchestrator.mark_many_read([], 1) == 0


async def test_list_for_user_filters_and_paginates(orchestrator, clock):
    for index in range(5):
        clock.advance(60)
        await orchestrator.notify_user(
            1, _payload(title=f"n{index}", category="leave" if index % 2 else "payroll")
        )
    await orchestrator.mark_read(1, 1)

    first_page = await orchestrator.list_for_user(1, NotificationFilter(page=1, page_size=2))
    assert [item.title for item in first_page.items] == ["n4", "n3"]
    assert first_page.pagination.total == 5
    assert first_page.pagination.total_pages == 3
    assert first_page.pagination.has_more is True
    assert first_page.unread_count == 4

    last_page = await orchestrator.list_for_user(1, NotificationFilter(page=3, page_size=2))
    assert [item.title for item in last_page.items] == ["n0"]
    assert last_page.pagination.has_more is False

    leave = await orchestrator.list_for_user(1, NotificationFilter(category="leave"))
    assert [item.title for item in leave.items] == ["n3", "n1"]

    read = await orchestrator.list_for_user(1, NotificationFilter(is_read=True))
    assert [item.title for item in read.items] == ["n0"]


async def test_cleanup_removes_old_read_records(orchestrator, store):
    old_read = await orchestrator.notify_user(1, _payload())
    old_unread = await orchestrator.notify_user(1, _payload())
    recent_read = await orchestrator.notify_user(1, _payload())
    now = utc_now()
    store.records[old_read.id] = replace(
        store.records[old_read.id], is_read=True, created_at=now - timedelta(days=40)
    )
    store.records[old_unread.id] = replace(
        store.records[old_unread.id], created_at=now - timedelta(days=40)
    )
    store.records[recent_read.id] = replace(
        store.records[recent_read.id], is_read=True, created_at=now - timedelta(days=2)
    )

    result = await orchestrator.cleanup(30)

    assert result.deleted_count == 1
    assert set(store.records) == {old_unread.id, recent_read.id}

    with pytest.raises(ValueError):
        await orchestrator.cleanup(-1)


async def test_secondary_failure_never_fails_notify(store, directory, registry, clock):
    directory.add(1, "employee")
    sender = RecordingMailSender(error=RuntimeError("smtp down"))
    orchestrator = NotificationOrchestrator(
        store, directory, registry, SecondaryChannelDispatcher(directory, sender), clock=clock
    )

    record = await orchestrator.notify_user(1, _payload(type="error"))
    await orchestrator.wait_for_background()

    assert record.id in store.records


async def test_non_escalated_notification_skips_secondary_channel(orchestrator, directory, mail_sender):
    directory.add(1, "employee")

    await orchestrator.notify_user(1, _payload(type="info", category="general"))
    await orchestrator.wait_for_background()

    assert mail_sender.sent == []


async def test_role_notification_escalates_per_recipient(orchestrator, directory, mail_sender):
    directory.add(1, "HR")
    directory.add(2, "HR")

    await orchestrator.notify_role("HR", _payload(type="info", category="system"))
    await orchestrator.wait_for_background()

    assert sorted(recipient for _, _, recipient in mail_sender.sent) == [
        "user1@example.com",
        "user2@example.com",
    ]
