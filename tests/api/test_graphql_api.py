import logging
from datetime import datetime, timezone
from uuid import UUID, uuid4

import pytest
from httpx import AsyncClient

from zipo.api.graphql import events as events_api
from zipo.api.graphql import guards
from zipo.api.graphql import links as links_api
from zipo.api.graphql import users as users_api
from zipo.events.domain.events_service import EventsService
from zipo.identity import models as identity_models
from zipo.identity.service import IdentityService
from zipo.infra.jwt import encode_access
from zipo.links.service import LinksService


class _GuardUsers:
	"""Resolves guard lookups from the fake events store's user table."""

	def __init__(self, events_repo):
		self.events_repo = events_repo

	async def get_user(self, user_id):
		entry = self.events_repo.users.get(user_id)
		if entry is None:
			return None
		summary, _ = entry
		return identity_models.User(
			id=summary.id,
			email=summary.email,
			name=summary.name,
			photo=None,
			password_hash=None,
			is_email_verified=True,
			is_signup_completed=True,
			receive_newsletter=False,
			new_notifications=0,
			created_at=datetime(2030, 1, 1, tzinfo=timezone.utc),
		)

	async def find_completed_by_email(self, email):
		return None


class _EmptyLinks:
	async def get_by_path(self, path):
		return None


@pytest.fixture
def wired(monkeypatch, events_repo, mailer):
	monkeypatch.setattr(guards, "_users", _GuardUsers(events_repo))
	monkeypatch.setattr(events_api, "_service", EventsService(events_repo, mailer=mailer))
	monkeypatch.setattr(users_api, "_service", IdentityService(_GuardUsers(events_repo), mailer=mailer))
	monkeypatch.setattr(links_api, "_service", LinksService(_EmptyLinks()))
	return events_repo


def _auth(user) -> dict[str, str]:
	return {"Authorization": f"Bearer {encode_access(user_id=user.id, email=user.email)}"}


@pytest.mark.asyncio
async def test_protected_query_requires_login(api_client: AsyncClient, wired):
	response = await api_client.post("/graphql", json={"query": "{ events { id } }"})

	body = response.json()
	assert response.status_code == 200
	assert body["errors"][0]["message"] == "Please log in to continue"
	assert body["errors"][0]["extensions"]["code"] == "UNAUTHENTICATED"
	assert body["errors"][0]["extensions"]["status"] == 401


@pytest.mark.asyncio
async def test_token_for_unknown_user_is_rejected(api_client: AsyncClient, wired):
	token = encode_access(user_id=str(uuid4()), email="ghost@zipo.me")

	response = await api_client.post(
		"/graphql",
		json={"query": "{ user { id } }"},
		headers={"Authorization": f"Bearer {token}"},
	)

	assert response.json()["errors"][0]["extensions"]["code"] == "UNAUTHENTICATED"


@pytest.mark.asyncio
async def test_event_get_by_id_uses_camel_case(api_client: AsyncClient, wired, make_event):
	owner = wired.add_user("Owner", "owner@zipo.me")
	event = wired.seed_event(make_event(owner, todos=[{"title": "Tent", "note": ""}]))
	query = """
		query Event($id: ID!) {
			event_getById(id: $id) {
				id
				title
				todoCount
				inviteLinkId
				isInviteLinkActive
				owner { name email }
				todos { title isCompleted }
			}
		}
	"""

	response = await api_client.post(
		"/graphql",
		json={"query": query, "variables": {"id": str(event.id)}},
		headers=_auth(owner),
	)

	assert response.status_code == 200
	data = response.json()["data"]["event_getById"]
	assert data["id"] == str(event.id)
	assert data["todoCount"] == 1
	assert data["inviteLinkId"] == "00000001"
	assert data["isInviteLinkActive"] is True
	assert data["owner"] == {"name": "Owner", "email": "owner@zipo.me"}
	assert data["todos"] == [{"title": "Tent", "isCompleted": False}]


@pytest.mark.asyncio
async def test_stranger_gets_forbidden(api_client: AsyncClient, wired, make_event, caplog):
	caplog.set_level(logging.INFO, logger="zipo.graphql")
	owner = wired.add_user("Owner", "owner@zipo.me")
	stranger = wired.add_user("Stranger", "stranger@zipo.me")
	event = wired.seed_event(make_event(owner))

	response = await api_client.post(
		"/graphql",
		json={"query": f'{{ event_getById(id: "{event.id}") {{ id }} }}'},
		headers=_auth(stranger),
	)

	assert response.status_code == 200
	body = response.json()
	assert body["data"] is None
	error = body["errors"][0]
	assert error["extensions"]["code"] == "FORBIDDEN"
	assert error["message"] == "You are not authorized to view this event."
	assert [record for record in caplog.records if record.name == "zipo.graphql"] == []


@pytest.mark.asyncio
async def test_add_todo_returns_created_envelope(api_client: AsyncClient, wired, make_event):
	owner = wired.add_user("Owner", "owner@zipo.me")
	event = wired.seed_event(make_event(owner))
	mutation = """
		mutation Add($id: ID!) {
			event_addTodo(id: $id, title: "Stove", note: "gas") {
				code
				success
				data { title note isCompleted }
			}
		}
	"""

	response = await api_client.post(
		"/graphql",
		json={"query": mutation, "variables": {"id": str(event.id)}},
		headers=_auth(owner),
	)

	payload = response.json()["data"]["event_addTodo"]
	assert payload["code"] == 201
	assert payload["success"] is True
	assert payload["data"] == {"title": "Stove", "note": "gas", "isCompleted": False}
	assert wired.events[event.id].todo_count == 1


@pytest.mark.asyncio
async def test_original_link_not_found(api_client: AsyncClient, wired):
	response = await api_client.post("/graphql", json={"query": '{ getOriginalLink(path: "nope") { link } }'})

	error = response.json()["errors"][0]
	assert error["message"] == "link not found"
	assert error["extensions"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_login_with_invalid_credentials(api_client: AsyncClient, wired):
	mutation = 'mutation { auth_login(email: "ghost@zipo.me", password: "secret1") { code token } }'

	response = await api_client.post("/graphql", json={"query": mutation})

	error = response.json()["errors"][0]
	assert error["message"] == "Invalid credentials"
	assert error["extensions"]["status"] == 401


@pytest.mark.asyncio
async def test_malformed_query_is_bad_request(api_client: AsyncClient):
	response = await api_client.post("/graphql", json={"query": "{ events { "})

	assert response.status_code == 400
	assert response.json()["errors"][0]["extensions"]["code"] == "GRAPHQL_VALIDATION_FAILED"


@pytest.mark.asyncio
async def test_non_json_body_is_bad_request(api_client: AsyncClient):
	response = await api_client.post("/graphql", content=b"not json", headers={"Content-Type": "application/json"})

	assert response.status_code == 400


@pytest.mark.asyncio
async def test_liveness_check(api_client: AsyncClient):
	response = await api_client.get("/health/live")

	assert response.status_code == 200


@pytest.mark.asyncio
async def test_metrics_endpoint_exposes_counters(api_client: AsyncClient):
	await api_client.post("/graphql", json={"query": "{ events { "})

	response = await api_client.get("/metrics")

	assert response.status_code == 200
	assert "zipo_graphql_errors_total" in response.text
