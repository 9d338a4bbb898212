"""asyncpg data access for links and per-ip click statistics."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

import asyncpg

from zipo.exceptions import ConflictError
from zipo.infra.postgres import get_pool
from zipo.links import models

_LINK_COLUMNS = "id, path, alternators, type, link, combined_link, owner_id, created_at"


def _link(row) -> Optional[models.Link]:
	return models.Link.model_validate(dict(row)) if row else None


class LinksRepository:
	async def get_by_path(self, path: str) -> Optional[models.Link]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(
				f"SELECT {_LINK_COLUMNS} FROM links WHERE path = $1 OR $1 = ANY(alternators) LIMIT 1",
				path,
			)
		return _link(row)

	async def path_taken(self, path: str) -> bool:
		pool = await get_pool()
		async with pool.acquire() as conn:
			found = await conn.fetchval(
				"SELECT 1 FROM links WHERE path = $1 OR $1 = ANY(alternators) LIMIT 1",
				path,
			)
		return found is not None

	async def find_shortened_by_url(self, url: str) -> Optional[models.Link]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(
				f"SELECT {_LINK_COLUMNS} FROM links WHERE link = $1 AND type = $2 ORDER BY created_at ASC LIMIT 1",
				url,
				models.LinkType.SHORTENED.value,
			)
		return _link(row)

	async def list_for_owner(self, owner_id: UUID) -> list[models.Link]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				f"SELECT {_LINK_COLUMNS} FROM links WHERE owner_id = $1 ORDER BY created_at DESC",
				owner_id,
			)
		return [models.Link.model_validate(dict(row)) for row in rows]

	async def insert_link(self, link: models.Link) -> models.Link:
		combined = link.combined_link.model_dump(mode="json") if link.combined_link else None
		pool = await get_pool()
		try:
			async with pool.acquire() as conn:
				row = await conn.fetchrow(
					f"""
					INSERT INTO links (id, path, alternators, type, link, combined_link, owner_id, created_at)
					VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
					RETURNING {_LINK_COLUMNS}
					""",
					link.id,
					link.path,
					list(link.alternators),
					link.type.value,
					link.link,
					combined,
					link.owner_id,
					link.created_at,
				)
		except asyncpg.UniqueViolationError as exc:
			raise ConflictError(f"'{link.path}' is taken") from exc
		return models.Link.model_validate(dict(row))

	async def record_visit(self, ip: str, link_id: UUID, *, at: datetime) -> None:
		"""Count a click for the ip and remember the link the first time it is visited."""
		entry = {"link": str(link_id), "date": at.isoformat()}
		pool = await get_pool()
		async with pool.acquire() as conn:
			await conn.execute(
				"""
				INSERT INTO link_stats (ip, links, clicks)
				VALUES ($1, jsonb_build_array($2::jsonb), 1)
				ON CONFLICT (ip) DO UPDATE
				SET clicks = link_stats.clicks + 1,
					links = CASE
						WHEN link_stats.links @> jsonb_build_array(jsonb_build_object('link', $3::text))
						THEN link_stats.links
						ELSE link_stats.links || jsonb_build_array($2::jsonb)
					END
				""",
				ip,
				entry,
				str(link_id),
			)
