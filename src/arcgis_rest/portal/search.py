"""Search items, groups, users and group content in a portal.

Every search accepts either a plain query string or a mapping of search
options. Results with more pages carry a ``next_page`` coroutine function
that runs the same search from ``nextStart``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Literal

from arcgis_rest.portal.helpers import get_portal_url
from arcgis_rest.request.params import append_custom_params
from arcgis_rest.request.transport import (
    AuthenticationProvider,
    RequestOptions,
    Transport,
)

logger = logging.getLogger(__name__)

SearchType = Literal["item", "group", "groupContent", "user"]
SearchOptions = str | Mapping[str, Any]

SEARCH_PARAMS = (
    "q",
    "num",
    "start",
    "sortField",
    "sortOrder",
    "searchUserAccess",
    "searchUserName",
    "filter",
    "countFields",
    "countSize",
    "categories",
    "categoryFilters",
)


def _search_path(search: SearchOptions, search_type: SearchType) -> str:
    if search_type == "item":
        return "/search"
    if search_type == "group":
        return "/community/groups"
    if search_type == "groupContent":
        if isinstance(search, str) or not search.get("groupId"):
            raise ValueError(
                "you must pass a `groupId` option to `search_group_content`"
            )
        return f"/content/groups/{search['groupId']}/search"
    return "/portals/self/users/search"


async def _generic_search(
    transport: Transport,
    search: SearchOptions,
    search_type: SearchType,
    authentication: AuthenticationProvider | None,
    portal: str | None,
) -> dict[str, Any]:
    if isinstance(search, str):
        params: dict[str, Any] = {"q": search}
    else:
        params = append_custom_params(search, SEARCH_PARAMS)
        portal = portal or search.get("portal")

    url = get_portal_url(portal, authentication) + _search_path(search, search_type)
    logger.debug(f"Searching {search_type} at {url}")

    response = await transport.request(
        url,
        RequestOptions(http_method="GET", params=params, authentication=authentication),
    )

    next_start = response.get("nextStart")
    if next_start and next_start != -1:

        async def next_page() -> dict[str, Any]:
            if isinstance(search, str):
                next_search: dict[str, Any] = {"q": search, "start": next_start}
            else:
                next_search = {**search, "start": next_start}
            return await _generic_search(
                transport, next_search, search_type, authentication, portal
            )

        response["next_page"] = next_page

    return response


async def search_items(
    transport: Transport,
    search: SearchOptions,
    authentication: AuthenticationProvider | None = None,
    portal: str | None = None,
) -> dict[str, Any]:
    """Search a portal for items.

    Args:
        transport: Transport used to send the request
        search: Query string or search options (``q``, ``num``, ``start``,
            ``sortField``, ...)
        authentication: Provider used to authenticate the request
        portal: Portal REST URL, defaults to the provider's portal

    Returns:
        Search response with ``results``, ``total`` and ``nextStart``
    """
    return await _generic_search(transport, search, "item", authentication, portal)


async def search_groups(
    transport: Transport,
    search: SearchOptions,
    authentication: AuthenticationProvider | None = None,
    portal: str | None = None,
) -> dict[str, Any]:
    return await _generic_search(transport, search, "group", authentication, portal)


async def search_group_content(
    transport: Transport,
    search: Mapping[str, Any],
    authentication: AuthenticationProvider | None = None,
    portal: str | None = None,
) -> dict[str, Any]:
    """Search the content of the group named by ``search["groupId"]``.

    Raises:
        ValueError: If no ``groupId`` is given
    """
    return await _generic_search(
        transport, search, "groupContent", authentication, portal
    )


async def search_users(
    transport: Transport,
    search: SearchOptions,
    authentication: AuthenticationProvider | None = None,
    portal: str | None = None,
) -> dict[str, Any]:
    return await _generic_search(transport, search, "user", authentication, portal)
