"""Unit tests for CountryScope."""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from application.services.country_scope import DEFAULT_COUNTRY, CountryScope, country_code
from application.services.query import QueryClient
from tests.fixtures.portal_fixtures import envelope, settle


def make_package_ops():
    packages = Mock()

    async def by_country(shipping_method=None):
        return envelope([{"id": 1, "country": shipping_method}])

    packages.get_packages = AsyncMock(side_effect=by_country)
    packages.get_shipments = AsyncMock(side_effect=by_country)
    packages.get_archived_shipments = AsyncMock(side_effect=by_country)
    packages.get_returned_packages = AsyncMock(side_effect=by_country)
    packages.request_return = AsyncMock(return_value=envelope({}))
    packages.request_shipping = AsyncMock(return_value=envelope({}))
    return packages


class TestCountryScope:
    @pytest.mark.asyncio
    async def test_watch_fetches_for_selected_country(self):
        client = QueryClient()
        packages = make_package_ops()
        scope = CountryScope(client, packages)

        sub = scope.watch("packages")
        await settle()

        assert scope.country == DEFAULT_COUNTRY
        assert sub.key == ("packages", "Belgium")
        packages.get_packages.assert_called_once_with("Belgium")
        assert sub.data["data"][0]["country"] == "Belgium"
        client.close()

    @pytest.mark.asyncio
    async def test_country_change_rekeys_every_subscription(self):
        client = QueryClient()
        packages = make_package_ops()
        scope = CountryScope(client, packages)
        pkg_sub = scope.watch("packages")
        ship_sub = scope.watch("shipments")
        await settle()

        scope.set_country("Germany")

        assert pkg_sub.data is None
        await settle()
        assert pkg_sub.key == ("packages", "Germany")
        assert ship_sub.key == ("shipments", "Germany")
        assert pkg_sub.data["data"][0]["country"] == "Germany"
        packages.get_shipments.assert_called_with("Germany")
        client.close()

    @pytest.mark.asyncio
    async def test_late_response_for_previous_country_is_not_shown(self):
        client = QueryClient()
        packages = make_package_ops()
        gate = asyncio.Event()

        async def slow(shipping_method=None):
            if shipping_method == "Belgium":
                await gate.wait()
            return envelope([{"country": shipping_method}])

        packages.get_packages = AsyncMock(side_effect=slow)
        scope = CountryScope(client, packages)
        sub = scope.watch("packages")
        await settle()

        scope.set_country("Turkey")
        await settle()
        gate.set()
        await settle()

        assert sub.data["data"][0]["country"] == "Turkey"
        client.close()

    @pytest.mark.asyncio
    async def test_watch_same_resource_reuses_subscription(self):
        client = QueryClient()
        scope = CountryScope(client, make_package_ops())

        assert scope.watch("archive") is scope.watch("archive")
        with pytest.raises(ValueError):
            scope.watch("wallet")
        client.close()

    @pytest.mark.asyncio
    async def test_return_request_invalidates_scoped_packages(self):
        client = QueryClient(stale_time=60)
        packages = make_package_ops()
        scope = CountryScope(client, packages, country="India")
        scope.watch("packages")
        scope.watch("shipments")
        await settle()

        await scope.request_return().mutate(5)
        await settle()

        packages.request_return.assert_called_once_with(5)
        assert packages.get_packages.call_count == 2
        assert packages.get_shipments.call_count == 1
        client.close()

    def test_country_code(self):
        assert country_code("United Kingdom") == "UK"
        assert country_code("Belgium") == "BLG"
        assert country_code("China-Sea-KG") == "CHI"
