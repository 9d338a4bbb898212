"""asyncpg data access for users and their verification sessions."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

import asyncpg

from zipo.exceptions import ConflictError
from zipo.identity import models
from zipo.infra.postgres import get_pool

_USER_COLUMNS = """
	id, email, name, photo, password_hash, is_email_verified, is_signup_completed,
	receive_newsletter, new_notifications, created_at, verify_email_code, verify_email_expire,
	reset_password_code, reset_password_expire, is_reset_password_code_verified
"""


def _user(row) -> models.User | None:
	return models.User.from_record(row) if row else None


class UsersRepository:
	"""Reads and writes rows of the users table."""

	async def _fetchrow(self, query: str, *args):
		pool = await get_pool()
		async with pool.acquire() as conn:
			return await conn.fetchrow(query, *args)

	async def _execute(self, query: str, *args) -> str:
		pool = await get_pool()
		async with pool.acquire() as conn:
			return await conn.execute(query, *args)

	async def get_user(self, user_id: UUID) -> models.User | None:
		row = await self._fetchrow(
			f"SELECT {_USER_COLUMNS} FROM users WHERE id = $1 AND is_signup_completed",
			user_id,
		)
		return _user(row)

	async def find_completed_by_email(self, email: str) -> models.User | None:
		row = await self._fetchrow(
			f"SELECT {_USER_COLUMNS} FROM users WHERE email = $1 AND is_signup_completed",
			email,
		)
		return _user(row)

	# --- Registration sessions ---------------------------------------------

	async def upsert_pending(self, email: str, *, token_hash: str, code: str, expires_at: datetime) -> models.User:
		"""Refresh the pending registration for an email, creating one if needed."""
		pool = await get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				row = await conn.fetchrow(
					f"""
					UPDATE users
					SET verify_email_token = $2, verify_email_code = $3, verify_email_expire = $4,
						is_email_verified = FALSE
					WHERE id = (
						SELECT id FROM users
						WHERE email = $1 AND NOT is_signup_completed
						ORDER BY created_at DESC
						LIMIT 1
					)
					RETURNING {_USER_COLUMNS}
					""",
					email,
					token_hash,
					code,
					expires_at,
				)
				if row is None:
					row = await conn.fetchrow(
						f"""
						INSERT INTO users (id, email, verify_email_token, verify_email_code, verify_email_expire)
						VALUES ($1, $2, $3, $4, $5)
						RETURNING {_USER_COLUMNS}
						""",
						uuid4(),
						email,
						token_hash,
						code,
						expires_at,
					)
		return models.User.from_record(row)

	async def find_by_verify_token(self, token_hash: str, *, now: datetime) -> models.User | None:
		row = await self._fetchrow(
			f"""
			SELECT {_USER_COLUMNS}
			FROM users
			WHERE verify_email_token = $1 AND verify_email_expire > $2 AND NOT is_signup_completed
			""",
			token_hash,
			now,
		)
		return _user(row)

	async def extend_verify_session(self, user_id: UUID, *, expires_at: datetime) -> None:
		await self._execute("UPDATE users SET verify_email_expire = $2 WHERE id = $1", user_id, expires_at)

	async def mark_email_verified(self, user_id: UUID) -> None:
		await self._execute("UPDATE users SET is_email_verified = TRUE WHERE id = $1", user_id)

	async def complete_signup(self, user_id: UUID, *, name: str, password_hash: str) -> models.User:
		try:
			row = await self._fetchrow(
				f"""
				UPDATE users
				SET name = $2, password_hash = $3, is_signup_completed = TRUE,
					verify_email_token = NULL, verify_email_code = NULL, verify_email_expire = NULL
				WHERE id = $1
				RETURNING {_USER_COLUMNS}
				""",
				user_id,
				name,
				password_hash,
			)
		except asyncpg.UniqueViolationError as exc:
			raise ConflictError("Email taken.") from exc
		return models.User.from_record(row)

	async def delete_expired_pending(self, *, now: datetime) -> int:
		status = await self._execute(
			"DELETE FROM users WHERE NOT is_signup_completed AND (verify_email_expire IS NULL OR verify_email_expire <= $1)",
			now,
		)
		try:
			return int(status.split()[-1])
		except (ValueError, IndexError):
			return 0

	# --- Password sessions -------------------------------------------------

	async def update_password_hash(self, user_id: UUID, password_hash: str) -> None:
		await self._execute("UPDATE users SET password_hash = $2 WHERE id = $1", user_id, password_hash)

	async def set_reset_session(self, user_id: UUID, *, token_hash: str, code: str, expires_at: datetime) -> None:
		await self._execute(
			"""
			UPDATE users
			SET reset_password_token = $2, reset_password_code = $3, reset_password_expire = $4,
				is_reset_password_code_verified = FALSE
			WHERE id = $1
			""",
			user_id,
			token_hash,
			code,
			expires_at,
		)

	async def find_by_reset_token(self, token_hash: str, *, now: datetime) -> models.User | None:
		row = await self._fetchrow(
			f"""
			SELECT {_USER_COLUMNS}
			FROM users
			WHERE reset_password_token = $1 AND reset_password_expire > $2
			""",
			token_hash,
			now,
		)
		return _user(row)

	async def extend_reset_session(self, user_id: UUID, *, expires_at: datetime) -> None:
		await self._execute("UPDATE users SET reset_password_expire = $2 WHERE id = $1", user_id, expires_at)

	async def mark_reset_code_verified(self, user_id: UUID) -> None:
		await self._execute("UPDATE users SET is_reset_password_code_verified = TRUE WHERE id = $1", user_id)

	async def reset_password(self, user_id: UUID, password_hash: str) -> None:
		await self._execute(
			"""
			UPDATE users
			SET password_hash = $2, reset_password_token = NULL, reset_password_code = NULL,
				reset_password_expire = NULL, is_reset_password_code_verified = FALSE
			WHERE id = $1
			""",
			user_id,
			password_hash,
		)
