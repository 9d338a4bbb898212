"""Link shortener resolvers."""

from __future__ import annotations

from ariadne import MutationType, QueryType

from zipo.api.graphql.guards import protect
from zipo.api.graphql.responses import dump, success
from zipo.links.models import CombinedLink
from zipo.links.service import LinksService

query = QueryType()
mutation = MutationType()
_service = LinksService()


@query.field("links")
@protect
async def resolve_links(_, info, user):
	return [dump(link) for link in await _service.list_links(user)]


@query.field("link_isCustomizable")
async def resolve_is_customizable(_, info, path):
	return await _service.is_customizable(path)


@query.field("getOriginalLink")
async def resolve_original_link(_, info, path):
	return dump(await _service.resolve(path, client_ip=info.context.get("client_ip")))


@mutation.field("link_shorten")
async def resolve_shorten(_, info, link):
	shortened, created = await _service.shorten(link)
	return success(201 if created else 200, shortened)


@mutation.field("link_shortenCustom")
@protect
async def resolve_shorten_custom(_, info, user, path, link):
	return success(201, await _service.shorten_custom(user, path, link))


@mutation.field("link_combineCustom")
@protect
async def resolve_combine_custom(_, info, user, path, combined_link):
	payload = CombinedLink.model_validate(combined_link)
	return success(201, await _service.combine_custom(user, path, payload))
