"""Notification resolvers."""

from __future__ import annotations

from ariadne import QueryType

from zipo.api.graphql.guards import protect
from zipo.api.graphql.responses import dump
from zipo.events.domain.notifications_service import NotificationService

query = QueryType()
_service = NotificationService()


@query.field("notifications")
@protect
async def resolve_notifications(_, info, user, pagination=None):
	options = pagination or {}
	page = await _service.list_notifications(user, limit=options.get("limit"), cursor=options.get("cursor"))
	return dump(page)
