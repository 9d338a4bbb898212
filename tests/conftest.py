import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-entropy-for-hs256")
os.environ.setdefault("ENV", "test")

from collections import Counter
from datetime import datetime, timezone
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from fakeredis.aioredis import FakeRedis
from httpx import ASGITransport, AsyncClient

from zipo.events.domain import models as event_models
from zipo.exceptions import UpstreamError
from zipo.infra import postgres
from zipo.infra.auth import AuthenticatedUser
from zipo.main import app
from zipo.settings import settings


@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
	from zipo.infra.redis import redis_client, set_redis_client
	original = redis_client.client
	client = FakeRedis(decode_responses=True)
	set_redis_client(client)
	try:
		yield client
	finally:
		set_redis_client(original)
		await client.flushall()


@pytest.fixture(autouse=True)
def patch_postgres(monkeypatch):
	async def _noop():
		return None

	monkeypatch.setattr(postgres, "init_pool", _noop)
	monkeypatch.setattr(postgres, "close_pool", _noop)
	monkeypatch.setattr(postgres, "ensure_schema", _noop)


@pytest.fixture(autouse=True)
def force_test_settings():
	"""Background jobs stay off so the scheduler never starts in tests."""
	original_env = settings.environment
	original_jobs = settings.jobs_enabled
	settings.environment = "test"
	settings.jobs_enabled = False
	try:
		yield
	finally:
		settings.environment = original_env
		settings.jobs_enabled = original_jobs


@pytest_asyncio.fixture
async def api_client():
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client


# --- In-memory stand-ins for the events store ------------------------------


class _StagingTransaction:
	"""Applies staged writes on a clean exit and discards them on error."""

	def __init__(self, conn):
		self.conn = conn

	async def __aenter__(self):
		self.conn.staged = []
		return self

	async def __aexit__(self, exc_type, exc, tb):
		staged, self.conn.staged = self.conn.staged, []
		if exc_type is None:
			for apply in staged:
				apply()
			self.conn.commits += 1
		else:
			self.conn.rollbacks += 1
		return False


class _StagingConnection:
	def __init__(self):
		self.staged = []
		self.commits = 0
		self.rollbacks = 0

	def transaction(self):
		return _StagingTransaction(self)


class _FakeAcquire:
	def __init__(self, conn):
		self._conn = conn

	async def __aenter__(self):
		return self._conn

	async def __aexit__(self, exc_type, exc, tb):
		return False


class _FakePool:
	def __init__(self):
		self.conn = _StagingConnection()

	def acquire(self):
		return _FakeAcquire(self.conn)


class FakeEventsRepository:
	def __init__(self, pool: _FakePool):
		self.pool = pool
		self.events: dict[UUID, event_models.Event] = {}
		self.notifications: list[event_models.Notification] = []
		self.new_notifications: Counter = Counter()
		self.users: dict[UUID, tuple[event_models.UserSummary, bool]] = {}
		self.fail_on: str | None = None
		self._next_notification_id = 1

	def _maybe_fail(self, name: str) -> None:
		if self.fail_on == name:
			raise RuntimeError(f"{name} failed")

	def add_user(self, name: str, email: str, *, registered: bool = True) -> AuthenticatedUser:
		summary = event_models.UserSummary(id=uuid4(), name=name, email=email)
		self.users[summary.id] = (summary, registered)
		return AuthenticatedUser(id=str(summary.id), email=email, name=name)

	def seed_event(self, event: event_models.Event) -> event_models.Event:
		self.events[event.id] = event.model_copy(deep=True)
		return event

	async def get_event(self, event_id, *, conn=None):
		event = self.events.get(event_id)
		return event.model_copy(deep=True) if event else None

	async def list_events_for_user(self, user_id):
		return [
			event.model_copy(deep=True)
			for event in self.events.values()
			if event.owner_id == user_id or user_id in event.invitees
		]

	async def invite_link_taken(self, invite_link_id, *, conn=None):
		return any(event.invite_link_id == invite_link_id for event in self.events.values())

	async def latest_invite_link_id(self):
		if not self.events:
			return None
		return max(self.events.values(), key=lambda event: event.created_at).invite_link_id

	async def insert_event(self, conn, event):
		self._maybe_fail("insert_event")
		stored = event.model_copy(deep=True, update={"version": 1})
		conn.staged.append(lambda: self.events.__setitem__(stored.id, stored))
		return stored.model_copy(deep=True)

	async def update_event(self, conn, event):
		self._maybe_fail("update_event")
		current = self.events.get(event.id)
		if current is None or current.version != event.version:
			return None
		stored = event.model_copy(deep=True, update={"version": event.version + 1})
		conn.staged.append(lambda: self.events.__setitem__(stored.id, stored))
		return stored.model_copy(deep=True)

	async def delete_event(self, conn, event_id, *, expected_version):
		current = self.events.get(event_id)
		if current is None or current.version != expected_version:
			return False
		conn.staged.append(lambda: self.events.pop(event_id, None))
		return True

	async def insert_notifications(self, conn, drafts, *, created_at, expires_at):
		self._maybe_fail("insert_notifications")
		created = []
		for draft in drafts:
			created.append(
				event_models.Notification(
					**draft.model_dump(),
					id=self._next_notification_id,
					created_at=created_at,
					expires_at=expires_at,
				)
			)
			self._next_notification_id += 1
		conn.staged.append(lambda: self.notifications.extend(created))
		return list(created)

	async def increment_new_notifications(self, conn, counts):
		self._maybe_fail("increment_new_notifications")
		snapshot = dict(counts)
		conn.staged.append(lambda: self.new_notifications.update(snapshot))

	async def mark_invite_action_taken(self, conn, *, owner_id, initiator_id, resource_id):
		self._maybe_fail("mark_invite_action_taken")
		matches = [
			item
			for item in self.notifications
			if item.owner == owner_id
			and item.initiator == initiator_id
			and item.resource_id == resource_id
			and item.type is event_models.NotificationType.EVENT_INVITE
		]

		def _apply():
			for item in matches:
				item.action_taken = True

		conn.staged.append(_apply)
		return len(matches)

	async def list_notifications(self, owner_id, *, limit, before_id, now):
		items = [
			item
			for item in self.notifications
			if item.owner == owner_id and item.expires_at > now and (before_id is None or item.id < before_id)
		]
		items.sort(key=lambda item: item.id, reverse=True)
		return items[:limit]

	async def count_notifications(self, owner_id, *, now):
		return sum(1 for item in self.notifications if item.owner == owner_id and item.expires_at > now)

	async def reset_new_notifications(self, user_id):
		self.new_notifications[user_id] = 0

	async def prune_expired_notifications(self, *, now):
		before = len(self.notifications)
		self.notifications = [item for item in self.notifications if item.expires_at > now]
		return before - len(self.notifications)

	async def find_registered_users_by_emails(self, emails):
		wanted = set(emails)
		return [summary for summary, registered in self.users.values() if registered and summary.email in wanted]

	async def get_user_summaries(self, user_ids):
		found = {}
		for user_id in user_ids:
			entry = self.users.get(user_id)
			if entry is not None:
				found[user_id] = entry[0]
		return found


class RecordingMailer:
	def __init__(self):
		self.sent: list[dict] = []
		self.fail = False

	async def send(self, to, subject, body_html, *, template="generic"):
		if self.fail:
			raise UpstreamError("Please check that your email is correct and try again.")
		self.sent.append({"to": to, "subject": subject, "body": body_html, "template": template})

	async def send_best_effort(self, to, subject, body_html, *, template="generic"):
		try:
			await self.send(to, subject, body_html, template=template)
		except UpstreamError:
			return False
		return True


@pytest.fixture
def staging_pool(monkeypatch):
	pool = _FakePool()

	async def _get_pool():
		return pool

	monkeypatch.setattr("zipo.events.domain.coordinator.get_pool", _get_pool)
	return pool


@pytest.fixture
def events_repo(staging_pool):
	return FakeEventsRepository(staging_pool)


@pytest.fixture
def mailer():
	return RecordingMailer()


@pytest.fixture
def make_event():
	def _make(owner: AuthenticatedUser, **overrides) -> event_models.Event:
		date = overrides.pop("date", datetime(2030, 6, 10, 18, 0, tzinfo=timezone.utc))
		fields = {
			"id": uuid4(),
			"title": "Launch party",
			"date": date,
			"reminder_date": date,
			"bg_cover": "/event/cover.png",
			"owner_id": UUID(owner.id),
			"invite_link_id": "00000001",
			"created_at": datetime(2030, 1, 1, tzinfo=timezone.utc),
		}
		fields.update(overrides)
		event = event_models.Event(**fields)
		event.todo_count = len(event.todos)
		return event

	return _make
