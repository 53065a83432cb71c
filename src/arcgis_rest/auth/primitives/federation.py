"""Federation and ArcGIS Online URL predicates.

Decides whether a home portal token can be used for a request URL, whether a
server is federated with a portal, and normalizes server URLs to the root used
as the federation cache key.
"""

from __future__ import annotations

import re

from arcgis_rest.request.params import clean_url

_ONLINE_URL = re.compile(r"^https?://(\S+)\.arcgis\.com.+")
_SERVICES_SUFFIX = re.compile(r"/rest(?:/admin)?/services(?:/|#|\?|$)")
_PROTOCOL = re.compile(r"^https?://")

_ONLINE_PORTALS = {
    "dev": "https://devext.arcgis.com/sharing/rest",
    "qa": "https://qaext.arcgis.com/sharing/rest",
    "production": "https://www.arcgis.com/sharing/rest",
}


def is_online(url: str) -> bool:
    """Check if a URL points at ArcGIS Online."""
    return _ONLINE_URL.match(url) is not None


def get_online_environment(url: str) -> str | None:
    """Return ``"dev"``, ``"qa"`` or ``"production"`` for ArcGIS Online URLs."""
    match = _ONLINE_URL.match(url)
    if match is None:
        return None
    subdomain = match.group(1).split(".")[-1]
    if "dev" in subdomain:
        return "dev"
    if "qa" in subdomain:
        return "qa"
    return "production"


def normalize_online_portal_url(portal_url: str) -> str:
    """Map any ArcGIS Online org URL to the environment's canonical portal."""
    environment = get_online_environment(portal_url)
    if environment is None:
        return portal_url
    return _ONLINE_PORTALS[environment]


def can_use_online_token(portal_url: str, request_url: str) -> bool:
    """Check if a portal token is valid for a request in the same Online environment."""
    if not (is_online(portal_url) and is_online(request_url)):
        return False
    return get_online_environment(portal_url) == get_online_environment(request_url)


def is_federated(owning_system_url: str, portal_url: str) -> bool:
    """Check if a server owned by ``owning_system_url`` trusts ``portal_url``.

    Protocols are ignored and the comparison is case-insensitive.
    """
    portal = _PROTOCOL.sub("", clean_url(normalize_online_portal_url(portal_url)))
    owner = _PROTOCOL.sub("", clean_url(owning_system_url))
    return owner.lower() in portal.lower()


def get_server_root_url(url: str) -> str:
    """Return the root of the ArcGIS Server or Portal for a URL.

    Everything from ``/rest/services`` or ``/rest/admin/services`` onward is
    stripped. Only the host is lower-cased since the path may contain a
    case-sensitive organization id.

    Raises:
        ValueError: If the URL has no http(s) protocol
    """
    root = _SERVICES_SUFFIX.split(clean_url(url), maxsplit=1)[0]
    match = re.match(r"(https?://)(.+)", root)
    if match is None:
        raise ValueError(f"Not an http(s) URL: {url}")
    protocol, domain_and_path = match.groups()
    domain, _, path = domain_and_path.partition("/")
    return f"{protocol}{domain.lower()}/{path}"
