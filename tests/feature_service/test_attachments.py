from conftest import MockTransport

from arcgis_rest.auth.api_key import ApiKeyManager
from arcgis_rest.feature_service.attachments import get_attachments

LAYER_URL = "https://sampleserver6.arcgisonline.com/arcgis/rest/services/ServiceRequest/FeatureServer/0"


class TestGetAttachments:
    async def test_requests_attachment_infos(self):
        # Arrange
        transport = MockTransport(
            {f"{LAYER_URL}/8484/attachments": {"attachmentInfos": [{"id": 1}]}}
        )

        # Act
        response = await get_attachments(transport, f"{LAYER_URL}/", 8484)

        # Assert
        assert response["attachmentInfos"] == [{"id": 1}]
        url, options, params = transport.calls[0]
        assert url == f"{LAYER_URL}/8484/attachments"
        assert options.http_method == "GET"
        assert params == {}

    async def test_authenticated_request(self):
        # Arrange
        transport = MockTransport({f"{LAYER_URL}/1/attachments": {"attachmentInfos": []}})

        # Act
        await get_attachments(
            transport,
            LAYER_URL,
            1,
            authentication=ApiKeyManager("key"),
            params={"keywords": "photo"},
        )

        # Assert
        assert transport.calls[0][2] == {"keywords": "photo", "token": "key"}
