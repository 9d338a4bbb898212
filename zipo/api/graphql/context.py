"""Per-request GraphQL context."""

from __future__ import annotations

from typing import Any, Optional

from starlette.requests import Request

from zipo.infra.auth import AuthenticatedUser, resolve_user
from zipo.obs.middleware import client_ip


def build_context(request: Request) -> dict[str, Any]:
	return {
		"request": request,
		"user": resolve_user(request),
		"client_ip": client_ip(request),
	}


def token_user(info) -> Optional[AuthenticatedUser]:
	return info.context.get("user")
