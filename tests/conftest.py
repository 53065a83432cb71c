import asyncio
from typing import Any

import pytest

from arcgis_rest.request.transport import RequestOptions


class MockTransport:
    """In-memory transport returning scripted responses per URL.

    A scripted value may be a dict (returned as is), an exception instance
    (raised) or a list of those (consumed in order, the last one repeats).
    Like the real transport it asks the authentication provider for a token
    when the request has none.
    """

    def __init__(self, responses: dict[str, Any] | None = None):
        self.responses: dict[str, Any] = dict(responses or {})
        self.calls: list[tuple[str, RequestOptions, dict[str, Any]]] = []

    def add(self, url: str, response: Any) -> None:
        self.responses[url] = response

    async def request(self, url: str, options: RequestOptions | None = None) -> Any:
        options = options or RequestOptions()
        params = dict(options.params)
        if options.authentication is not None and not params.get("token"):
            token = await options.authentication.get_token(url)
            if token:
                params["token"] = token

        self.calls.append((url, options, params))

        # Yield so concurrent callers interleave the way real I/O would
        await asyncio.sleep(0)

        if url not in self.responses:
            raise AssertionError(f"Unexpected request to {url}")

        scripted = self.responses[url]
        if isinstance(scripted, list):
            response = scripted.pop(0) if len(scripted) > 1 else scripted[0]
        else:
            response = scripted

        if isinstance(response, Exception):
            raise response
        return dict(response) if isinstance(response, dict) else response

    def calls_to(self, url: str) -> list[tuple[str, RequestOptions, dict[str, Any]]]:
        return [call for call in self.calls if call[0] == url]

    def last_params(self, url: str) -> dict[str, Any]:
        return self.calls_to(url)[-1][2]


@pytest.fixture
def mock_transport() -> MockTransport:
    return MockTransport()
