"""File upload resolvers."""

from __future__ import annotations

from ariadne import QueryType

from zipo.api.graphql.guards import protect
from zipo.uploads.service import UploadPurpose, get_upload_url

query = QueryType()


@query.field("file_getUploadUrl")
@protect
async def resolve_upload_url(_, info, user, purpose, content_type):
	ticket = get_upload_url(user, UploadPurpose(purpose), content_type)
	return {"key": ticket.key, "upload_url": ticket.upload_url}
