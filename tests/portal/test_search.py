"""Tests for portal search endpoints and paging."""

import pytest
from conftest import MockTransport

from arcgis_rest.portal.search import (
    search_group_content,
    search_groups,
    search_items,
    search_users,
)

PORTAL = "https://www.arcgis.com/sharing/rest"


class TestSearchItems:
    def setup_method(self):
        # Arrange
        self.transport = MockTransport()

    async def test_query_string(self):
        # Arrange
        self.transport.add(
            f"{PORTAL}/search", {"results": [{"id": "1"}], "total": 1, "nextStart": -1}
        )

        # Act
        response = await search_items(self.transport, "parks")

        # Assert
        assert response["results"] == [{"id": "1"}]
        assert "next_page" not in response
        url, options, params = self.transport.calls[0]
        assert options.http_method == "GET"
        assert params == {"q": "parks"}

    async def test_options_are_collected_into_params(self):
        # Arrange
        self.transport.add(
            "https://portal.example.com/gis/sharing/rest/search", {"results": []}
        )

        # Act
        await search_items(
            self.transport,
            {
                "q": "owner:casey",
                "num": 50,
                "sortField": "modified",
                "sortOrder": "desc",
                "unknown": "ignored",
                "params": {"filter": 'type:"Web Map"'},
                "portal": "https://portal.example.com/gis/sharing/rest/",
            },
        )

        # Assert
        _, _, params = self.transport.calls[0]
        assert params == {
            "q": "owner:casey",
            "num": 50,
            "sortField": "modified",
            "sortOrder": "desc",
            "filter": 'type:"Web Map"',
        }

    async def test_next_page_continues_from_next_start(self):
        # Arrange
        self.transport.add(
            f"{PORTAL}/search",
            [
                {"results": [{"id": "1"}], "nextStart": 2},
                {"results": [{"id": "2"}], "nextStart": -1},
            ],
        )

        # Act
        first = await search_items(self.transport, {"q": "parks", "num": 1})
        second = await first["next_page"]()

        # Assert
        assert second["results"] == [{"id": "2"}]
        assert "next_page" not in second
        assert self.transport.calls[1][2] == {"q": "parks", "num": 1, "start": 2}

    async def test_next_page_for_query_string(self):
        # Arrange
        self.transport.add(
            f"{PORTAL}/community/groups",
            [{"results": [], "nextStart": 11}, {"results": [], "nextStart": -1}],
        )

        # Act
        first = await search_groups(self.transport, "water")
        await first["next_page"]()

        # Assert
        assert self.transport.calls[1][2] == {"q": "water", "start": 11}


class TestSearchPaths:
    def setup_method(self):
        # Arrange
        self.transport = MockTransport()

    async def test_users(self):
        # Arrange
        self.transport.add(f"{PORTAL}/portals/self/users/search", {"results": []})

        # Act
        await search_users(self.transport, "casey")

        # Assert
        assert self.transport.calls[0][0] == f"{PORTAL}/portals/self/users/search"

    async def test_group_content(self):
        # Arrange
        self.transport.add(f"{PORTAL}/content/groups/abc123/search", {"results": []})

        # Act
        await search_group_content(self.transport, {"q": "*", "groupId": "abc123"})

        # Assert
        assert self.transport.calls[0][0] == f"{PORTAL}/content/groups/abc123/search"

    async def test_group_content_requires_group_id(self):
        with pytest.raises(ValueError, match="groupId"):
            await search_group_content(self.transport, {"q": "*"})

        assert self.transport.calls == []
