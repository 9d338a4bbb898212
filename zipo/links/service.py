"""Short link creation and resolution."""

from __future__ import annotations

import logging
import re
import secrets
import string
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse
from uuid import UUID, uuid4

import asyncpg

from zipo.exceptions import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from zipo.infra.auth import AuthenticatedUser
from zipo.links import models
from zipo.links.repo import LinksRepository
from zipo.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

PATH_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")
GENERATED_PATH_LENGTH = 6
_PATH_ALPHABET = string.ascii_letters + string.digits


def generate_path(length: int = GENERATED_PATH_LENGTH) -> str:
	return "".join(secrets.choice(_PATH_ALPHABET) for _ in range(length))


def _guard_url(url: str) -> str:
	candidate = url.strip()
	parsed = urlparse(candidate)
	if parsed.scheme not in ("http", "https") or not parsed.netloc:
		raise ValidationError("Please add a valid url")
	return candidate


def _guard_path(path: str) -> str:
	candidate = path.strip()
	if not PATH_PATTERN.match(candidate):
		raise ValidationError("Path may only contain letters, numbers, '-' and '_'")
	return candidate


def _owner(user: AuthenticatedUser) -> UUID:
	try:
		return UUID(str(user.id))
	except ValueError as exc:
		raise UnauthorizedError() from exc


def for_listing(link: models.Link) -> models.Link:
	"""Shortened links never expose a combined payload."""
	if link.type is models.LinkType.SHORTENED and link.combined_link is not None:
		return link.model_copy(update={"combined_link": None})
	return link


class LinksService:
	def __init__(self, repository: LinksRepository | None = None) -> None:
		self.repo = repository or LinksRepository()

	async def resolve(self, path: str, *, client_ip: Optional[str]) -> models.Link:
		link = await self.repo.get_by_path(path.strip())
		if link is None:
			obs_metrics.link_resolved("not_found")
			raise NotFoundError("link not found")
		obs_metrics.link_resolved("found")
		if client_ip:
			try:
				await self.repo.record_visit(client_ip, link.id, at=datetime.now(timezone.utc))
			except (asyncpg.PostgresError, OSError) as exc:
				logger.warning("link_stat_failed", extra={"link_id": str(link.id), "error": str(exc)})
		return link

	async def is_customizable(self, path: str) -> bool:
		candidate = path.strip()
		if not PATH_PATTERN.match(candidate):
			return False
		return not await self.repo.path_taken(candidate)

	async def list_links(self, user: AuthenticatedUser) -> list[models.Link]:
		return [for_listing(link) for link in await self.repo.list_for_owner(_owner(user))]

	async def shorten(self, url: str) -> tuple[models.Link, bool]:
		"""Return the link for `url` and whether it was newly created."""
		target = _guard_url(url)
		existing = await self.repo.find_shortened_by_url(target)
		if existing is not None:
			return for_listing(existing), False
		path = generate_path()
		while await self.repo.path_taken(path):
			path = generate_path()
		link = await self.repo.insert_link(
			models.Link(
				id=uuid4(),
				path=path,
				type=models.LinkType.SHORTENED,
				link=target,
				created_at=datetime.now(timezone.utc),
			)
		)
		obs_metrics.link_created(link.type.value)
		return link, True

	async def shorten_custom(self, user: AuthenticatedUser, path: str, url: str) -> models.Link:
		candidate = await self._claim(path)
		link = await self.repo.insert_link(
			models.Link(
				id=uuid4(),
				path=candidate,
				type=models.LinkType.SHORTENED,
				link=_guard_url(url),
				owner_id=_owner(user),
				created_at=datetime.now(timezone.utc),
			)
		)
		obs_metrics.link_created(link.type.value)
		return link

	async def combine_custom(
		self,
		user: AuthenticatedUser,
		path: str,
		combined_link: models.CombinedLink,
	) -> models.Link:
		candidate = await self._claim(path)
		for item in combined_link.links:
			_guard_url(item.url)
		link = await self.repo.insert_link(
			models.Link(
				id=uuid4(),
				path=candidate,
				type=models.LinkType.COMBINED,
				combined_link=combined_link,
				owner_id=_owner(user),
				created_at=datetime.now(timezone.utc),
			)
		)
		obs_metrics.link_created(link.type.value)
		return link

	async def _claim(self, path: str) -> str:
		candidate = _guard_path(path)
		if await self.repo.path_taken(candidate):
			raise ConflictError(f"'{candidate}' is taken")
		return candidate
