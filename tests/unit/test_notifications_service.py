from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

import pytest

from zipo.events.domain import models
from zipo.events.domain.notifications_service import NotificationService
from zipo.events.jobs.notification_gc import NotificationGarbageCollector
from zipo.exceptions import ValidationError
from zipo.obs import metrics as obs_metrics

NOW = datetime(2030, 3, 1, 12, 0, tzinfo=timezone.utc)


def _seed(events_repo, owner, initiator, count, *, expires_at=None):
	for index in range(count):
		events_repo.notifications.append(
			models.Notification(
				id=len(events_repo.notifications) + 1,
				owner=UUID(owner.id),
				initiator=UUID(initiator.id),
				type=models.NotificationType.TODO_ADDED,
				message=f"Added a Todo. item {index}",
				resource_id=uuid4(),
				created_at=NOW - timedelta(minutes=count - index),
				expires_at=expires_at or NOW + timedelta(days=180),
			)
		)


@pytest.mark.asyncio
async def test_first_page_is_newest_first_with_cursor(events_repo):
	owner = events_repo.add_user("Owner", "owner@zipo.me")
	actor = events_repo.add_user("Actor", "actor@zipo.me")
	_seed(events_repo, owner, actor, 3)
	service = NotificationService(repository=events_repo)

	page = await service.list_notifications(owner, limit=2, now=NOW)

	assert [item.id for item in page.data] == ["3", "2"]
	assert page.data[0].initiator.name == "Actor"
	assert page.data[0].type == "Todo Added"
	assert page.pagination.has_next_page is True
	assert page.pagination.next_cursor == "2"
	assert page.pagination.total_docs == 3
	assert page.pagination.docs_retrieved == 2


@pytest.mark.asyncio
async def test_following_the_cursor_reaches_the_end(events_repo):
	owner = events_repo.add_user("Owner", "owner@zipo.me")
	actor = events_repo.add_user("Actor", "actor@zipo.me")
	_seed(events_repo, owner, actor, 3)
	service = NotificationService(repository=events_repo)

	page = await service.list_notifications(owner, limit=2, cursor="2", now=NOW)

	assert [item.id for item in page.data] == ["1"]
	assert page.pagination.has_next_page is False
	assert page.pagination.next_cursor is None


@pytest.mark.asyncio
async def test_listing_resets_unread_counter(events_repo):
	owner = events_repo.add_user("Owner", "owner@zipo.me")
	events_repo.new_notifications[UUID(owner.id)] = 4
	service = NotificationService(repository=events_repo)

	page = await service.list_notifications(owner, now=NOW)

	assert page.data == []
	assert page.pagination.total_docs == 0
	assert events_repo.new_notifications[UUID(owner.id)] == 0


@pytest.mark.asyncio
async def test_other_users_notifications_are_hidden(events_repo):
	owner = events_repo.add_user("Owner", "owner@zipo.me")
	other = events_repo.add_user("Other", "other@zipo.me")
	_seed(events_repo, other, owner, 2)
	service = NotificationService(repository=events_repo)

	page = await service.list_notifications(owner, now=NOW)

	assert page.data == []


@pytest.mark.asyncio
async def test_invalid_cursor_is_rejected(events_repo):
	owner = events_repo.add_user("Owner", "owner@zipo.me")
	service = NotificationService(repository=events_repo)

	with pytest.raises(ValidationError):
		await service.list_notifications(owner, cursor="abc", now=NOW)


@pytest.mark.asyncio
async def test_limit_is_clamped(events_repo):
	owner = events_repo.add_user("Owner", "owner@zipo.me")
	actor = events_repo.add_user("Actor", "actor@zipo.me")
	_seed(events_repo, owner, actor, 60)
	service = NotificationService(repository=events_repo)

	page = await service.list_notifications(owner, limit=500, now=NOW)

	assert page.pagination.docs_retrieved == 50
	assert page.pagination.has_next_page is True


@pytest.mark.asyncio
async def test_expired_notifications_are_skipped_and_pruned(events_repo):
	owner = events_repo.add_user("Owner", "owner@zipo.me")
	actor = events_repo.add_user("Actor", "actor@zipo.me")
	_seed(events_repo, owner, actor, 2, expires_at=NOW - timedelta(seconds=1))
	_seed(events_repo, owner, actor, 1)
	service = NotificationService(repository=events_repo)

	page = await service.list_notifications(owner, now=NOW)
	removed = await service.prune_expired(now=NOW)

	assert page.pagination.total_docs == 1
	assert removed == 2
	assert [item.id for item in events_repo.notifications] == [3]


def _job_count(result: str) -> float:
	return obs_metrics.BACKGROUND_RUNS.labels(name="notifications-gc", result=result)._value.get()


@pytest.mark.asyncio
async def test_gc_job_records_runs(events_repo):
	owner = events_repo.add_user("Owner", "owner@zipo.me")
	_seed(events_repo, owner, owner, 1, expires_at=datetime(2000, 1, 1, tzinfo=timezone.utc))
	job = NotificationGarbageCollector(service=NotificationService(repository=events_repo))
	before = _job_count("success")

	removed = await job.run_once()

	assert removed == 1
	assert _job_count("success") == before + 1


@pytest.mark.asyncio
async def test_gc_job_reraises_failures(events_repo, monkeypatch):
	async def _boom(*, now):
		raise RuntimeError("db down")

	monkeypatch.setattr(events_repo, "prune_expired_notifications", _boom)
	job = NotificationGarbageCollector(service=NotificationService(repository=events_repo))
	before = _job_count("error")

	with pytest.raises(RuntimeError):
		await job.run_once()
	assert _job_count("error") == before + 1
