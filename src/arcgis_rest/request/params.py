"""URL and parameter helpers shared by the transport and endpoint wrappers."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any


def clean_url(url: str) -> str:
    """Trim whitespace and a single trailing slash from a URL."""
    url = url.strip()
    if url.endswith("/"):
        url = url[:-1]
    return url


def encode_param(value: Any) -> str:
    """Encode a single parameter value the way ArcGIS REST endpoints expect."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return str(int(value.timestamp() * 1000))
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value)
    return str(value)


def encode_params(params: Mapping[str, Any]) -> dict[str, str]:
    """Encode a parameter mapping, dropping ``None`` values."""
    return {key: encode_param(value) for key, value in params.items() if value is not None}


def append_custom_params(
    options: Mapping[str, Any],
    keys: Iterable[str],
    base_params: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Collect the named top-level options into a params dictionary.

    Values already present in ``base_params`` are kept unless the option is
    set explicitly.

    Args:
        options: Caller options, e.g. ``{"q": "parks", "num": 10}``
        keys: Option names that should become request parameters
        base_params: Parameters to start from

    Returns:
        Merged parameter dictionary
    """
    params = dict(base_params or {})
    params.update(options.get("params") or {})
    for key in keys:
        if options.get(key) is not None:
            params[key] = options[key]
    return params
