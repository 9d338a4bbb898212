from datetime import datetime, timezone
from uuid import uuid4

import asyncpg
import pytest

from zipo.exceptions import ConflictError, NotFoundError, ValidationError
from zipo.infra.auth import AuthenticatedUser
from zipo.links import models
from zipo.links.service import LinksService, for_listing, generate_path


class FakeLinksRepository:
	def __init__(self):
		self.links: list[models.Link] = []
		self.visits: list[tuple[str, object]] = []
		self.stats_error: Exception | None = None

	async def get_by_path(self, path):
		for link in self.links:
			if link.path == path or path in link.alternators:
				return link
		return None

	async def path_taken(self, path):
		return await self.get_by_path(path) is not None

	async def find_shortened_by_url(self, url):
		for link in self.links:
			if link.type is models.LinkType.SHORTENED and link.link == url:
				return link
		return None

	async def list_for_owner(self, owner_id):
		return [link for link in self.links if link.owner_id == owner_id]

	async def insert_link(self, link):
		self.links.append(link)
		return link

	async def record_visit(self, ip, link_id, *, at):
		if self.stats_error is not None:
			raise self.stats_error
		self.visits.append((ip, link_id))


@pytest.fixture
def links_repo():
	return FakeLinksRepository()


@pytest.fixture
def user():
	return AuthenticatedUser(id=str(uuid4()), email="ada@zipo.me", name="Ada")


def test_generate_path_is_six_alphanumerics():
	path = generate_path()

	assert len(path) == 6
	assert path.isalnum()


@pytest.mark.asyncio
async def test_shorten_reuses_existing_link(links_repo):
	service = LinksService(links_repo)

	first, created = await service.shorten("https://example.com/a")
	again, created_again = await service.shorten("https://example.com/a")

	assert created is True
	assert created_again is False
	assert again.id == first.id
	assert first.owner_id is None
	assert len(links_repo.links) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["example.com", "ftp://example.com/file", "https://"])
async def test_shorten_rejects_invalid_urls(links_repo, url):
	with pytest.raises(ValidationError) as exc:
		await LinksService(links_repo).shorten(url)
	assert exc.value.detail == "Please add a valid url"


@pytest.mark.asyncio
async def test_resolve_records_visit(links_repo):
	service = LinksService(links_repo)
	link, _ = await service.shorten("https://example.com/a")

	resolved = await service.resolve(link.path, client_ip="10.0.0.1")

	assert resolved.link == "https://example.com/a"
	assert links_repo.visits == [("10.0.0.1", link.id)]


@pytest.mark.asyncio
async def test_resolve_by_alternator(links_repo):
	links_repo.links.append(
		models.Link(
			id=uuid4(),
			path="main",
			alternators=["alias"],
			type=models.LinkType.SHORTENED,
			link="https://example.com",
			created_at=datetime.now(timezone.utc),
		)
	)

	resolved = await LinksService(links_repo).resolve("alias", client_ip=None)

	assert resolved.path == "main"
	assert links_repo.visits == []


@pytest.mark.asyncio
async def test_resolve_survives_stat_failure(links_repo):
	service = LinksService(links_repo)
	link, _ = await service.shorten("https://example.com/a")
	links_repo.stats_error = asyncpg.PostgresError("stats down")

	resolved = await service.resolve(link.path, client_ip="10.0.0.1")

	assert resolved.id == link.id


@pytest.mark.asyncio
async def test_resolve_unknown_path(links_repo):
	with pytest.raises(NotFoundError) as exc:
		await LinksService(links_repo).resolve("nope", client_ip=None)
	assert exc.value.detail == "link not found"


@pytest.mark.asyncio
async def test_custom_paths_are_claimed_once(links_repo, user):
	service = LinksService(links_repo)

	link = await service.shorten_custom(user, "my-page", "https://example.com/me")

	assert link.owner_id is not None
	assert str(link.owner_id) == user.id
	assert await service.is_customizable("my-page") is False
	assert await service.is_customizable("other_page") is True
	assert await service.is_customizable("has space") is False
	with pytest.raises(ConflictError) as exc:
		await service.combine_custom(user, "my-page", models.CombinedLink(links=[]))
	assert exc.value.detail == "'my-page' is taken"


@pytest.mark.asyncio
async def test_custom_path_pattern(links_repo, user):
	with pytest.raises(ValidationError):
		await LinksService(links_repo).shorten_custom(user, "bad/path", "https://example.com")


@pytest.mark.asyncio
async def test_combine_custom_validates_every_url(links_repo, user):
	service = LinksService(links_repo)
	payload = models.CombinedLink(
		title="Mine",
		links=[models.CombinedLinkItem(title="ok", url="https://a.example"), models.CombinedLinkItem(url="nope")],
	)

	with pytest.raises(ValidationError):
		await service.combine_custom(user, "bundle", payload)
	assert links_repo.links == []


@pytest.mark.asyncio
async def test_list_links_hides_combined_payload_on_shortened(links_repo, user):
	service = LinksService(links_repo)
	combined = await service.combine_custom(
		user,
		"bundle",
		models.CombinedLink(title="Mine", links=[models.CombinedLinkItem(title="a", url="https://a.example")]),
	)
	await service.shorten_custom(user, "single", "https://b.example")
	await service.shorten("https://anonymous.example")

	listed = await service.list_links(user)

	assert {link.path for link in listed} == {"bundle", "single"}
	assert next(link for link in listed if link.id == combined.id).combined_link.title == "Mine"


def test_for_listing_strips_stray_combined_link():
	link = models.Link(
		id=uuid4(),
		path="x",
		type=models.LinkType.SHORTENED,
		link="https://example.com",
		combined_link=models.CombinedLink(title="stray"),
		created_at=datetime.now(timezone.utc),
	)

	assert for_listing(link).combined_link is None
	assert link.combined_link is not None
