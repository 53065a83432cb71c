from unittest.mock import AsyncMock, MagicMock

import pytest

from arcgis_rest.portal.helpers import (
    bbox_to_string,
    determine_owner,
    get_portal_url,
    is_bbox,
)


class TestDetermineOwner:
    async def test_explicit_owner_wins(self):
        assert await determine_owner(owner="casey", item={"owner": "jo"}) == "casey"

    async def test_item_owner(self):
        assert await determine_owner(item={"owner": "jo"}) == "jo"

    async def test_authenticated_user(self):
        # Arrange
        authentication = MagicMock()
        authentication.get_username = AsyncMock(return_value="casey")

        # Act
        owner = await determine_owner(authentication=authentication)

        # Assert
        assert owner == "casey"

    async def test_nothing_to_go_on(self):
        with pytest.raises(ValueError, match="Could not determine the owner"):
            await determine_owner()


class TestBBox:
    def test_is_bbox(self):
        assert is_bbox([[-117.2, 34.0], [-117.1, 34.1]])
        assert not is_bbox([-117.2, 34.0, -117.1, 34.1])
        assert not is_bbox("-117.2,34.0,-117.1,34.1")

    def test_bbox_to_string(self):
        assert bbox_to_string([[-117.2, 34.0], [-117.1, 34.1]]) == "-117.2,34.0,-117.1,34.1"


class TestGetPortalUrl:
    def test_resolution_order(self):
        authentication = MagicMock()
        authentication.portal = "https://portal.example.com/gis/sharing/rest"

        assert get_portal_url("https://other.example.com/sharing/rest/") == (
            "https://other.example.com/sharing/rest"
        )
        assert get_portal_url(authentication=authentication) == authentication.portal
        assert get_portal_url() == "https://www.arcgis.com/sharing/rest"
