import pytest

from arcgis_rest.auth.primitives.federation import (
    can_use_online_token,
    get_online_environment,
    get_server_root_url,
    is_federated,
    is_online,
    normalize_online_portal_url,
)


class TestGetServerRootUrl:
    def test_services_suffix_is_stripped_and_host_lowercased(self):
        assert (
            get_server_root_url("https://Foo.Com/arcgis/rest/services/X/FeatureServer")
            == "https://foo.com/arcgis"
        )

    def test_admin_services_suffix_is_stripped(self):
        assert (
            get_server_root_url("https://gis.example.com/server/rest/admin/services/Y")
            == "https://gis.example.com/server"
        )

    def test_path_case_is_preserved(self):
        assert (
            get_server_root_url(
                "https://services1.arcgis.com/AbCdEf/arcgis/rest/services/Z/FeatureServer/0"
            )
            == "https://services1.arcgis.com/AbCdEf/arcgis"
        )

    def test_url_ending_at_services(self):
        assert (
            get_server_root_url("https://gis.example.com/arcgis/rest/services/")
            == "https://gis.example.com/arcgis"
        )

    def test_url_without_services_is_kept(self):
        assert (
            get_server_root_url("https://gis.example.com/arcgis")
            == "https://gis.example.com/arcgis"
        )

    def test_non_http_url_is_rejected(self):
        with pytest.raises(ValueError):
            get_server_root_url("ftp://gis.example.com/arcgis")


class TestOnlineEnvironments:
    def test_is_online(self):
        assert is_online("https://www.arcgis.com/sharing/rest")
        assert is_online("https://services1.arcgis.com/abc/arcgis/rest/services")
        assert not is_online("https://gis.example.com/arcgis/rest/services")

    def test_environment_from_subdomain(self):
        assert get_online_environment("https://myorg.mapsdevext.arcgis.com/sharing") == "dev"
        assert get_online_environment("https://myorg.mapsqa.arcgis.com/sharing") == "qa"
        assert get_online_environment("https://myorg.maps.arcgis.com/sharing") == "production"
        assert get_online_environment("https://gis.example.com/portal") is None

    def test_normalize_online_portal_url(self):
        assert (
            normalize_online_portal_url("https://myorg.maps.arcgis.com/sharing/rest")
            == "https://www.arcgis.com/sharing/rest"
        )
        assert (
            normalize_online_portal_url("https://myorg.mapsdevext.arcgis.com/sharing/rest")
            == "https://devext.arcgis.com/sharing/rest"
        )
        assert (
            normalize_online_portal_url("https://portal.example.com/gis/sharing/rest")
            == "https://portal.example.com/gis/sharing/rest"
        )

    def test_can_use_online_token_within_environment_only(self):
        portal = "https://myorg.maps.arcgis.com/sharing/rest"
        assert can_use_online_token(
            portal, "https://services1.arcgis.com/abc/arcgis/rest/services/X"
        )
        assert not can_use_online_token(
            portal, "https://servicesdev.arcgis.com/abc/arcgis/rest/services/X"
        )
        assert not can_use_online_token(
            "https://portal.example.com/gis/sharing/rest",
            "https://services1.arcgis.com/abc/arcgis/rest/services/X",
        )


class TestIsFederated:
    def test_enterprise_portal(self):
        assert is_federated(
            "https://portal.example.com/gis", "https://portal.example.com/gis/sharing/rest"
        )

    def test_protocol_and_case_are_ignored(self):
        assert is_federated(
            "http://PORTAL.example.com/gis/", "https://portal.example.com/gis/sharing/rest"
        )

    def test_online_org_is_federated_with_online(self):
        assert is_federated(
            "https://www.arcgis.com", "https://myorg.maps.arcgis.com/sharing/rest"
        )

    def test_other_portal_is_not_federated(self):
        assert not is_federated(
            "https://other.example.com/portal",
            "https://portal.example.com/gis/sharing/rest",
        )
