"""
Country-scoped read models.

Customers pick a shipping method (a warehouse country). Packages,
shipments, the archive and returned packages are all fetched for that
country and cached under ``(resource, country)``. Changing the country
re-keys every scoped subscription so the new country's data is fetched
immediately and the previous country's list is never shown under it.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from application.services.api.packages import PackageOperations
from application.services.query import (
    Mutation,
    QueryClient,
    QueryOptions,
    QuerySubscription,
    make_key,
)
from application.services.query.keys import ARCHIVE, PACKAGES, RETURNED_PACKAGES, SHIPMENTS

logger = logging.getLogger(__name__)

SHIPPING_OPTIONS = [
    "Belgium",
    "China Air",
    "China-Sea-KG",
    "Germany",
    "India",
    "Saudi Arabia",
    "SHEIN - United Arab Emirates - Sea",
    "Turkey",
    "United Arab Emirates - Air",
    "United Arab Emirates - Sea",
    "United Kingdom",
    "United States",
    "USA - Sea",
]
DEFAULT_COUNTRY = SHIPPING_OPTIONS[0]

_COUNTRY_CODES = {
    "Belgium": "BLG",
    "Germany": "GER",
    "United States": "USA",
    "United Kingdom": "UK",
    "China Air": "CHN",
    "Turkey": "TUR",
    "India": "IND",
    "Saudi Arabia": "SA",
}


def country_code(country: str) -> str:
    """Short warehouse code shown next to the selected country."""
    return _COUNTRY_CODES.get(country, country[:3].upper())


class CountryScope:
    """Holds the selected country and the subscriptions scoped to it."""

    def __init__(
        self,
        query_client: QueryClient,
        packages: PackageOperations,
        country: str = DEFAULT_COUNTRY,
    ):
        self.query_client = query_client
        self.packages = packages
        self.country = country
        self._fetchers: Dict[str, Callable[[Optional[str]], Awaitable[Any]]] = {
            PACKAGES: packages.get_packages,
            SHIPMENTS: packages.get_shipments,
            ARCHIVE: packages.get_archived_shipments,
            RETURNED_PACKAGES: packages.get_returned_packages,
        }
        self._subscriptions: Dict[str, QuerySubscription] = {}

    @property
    def resources(self) -> List[str]:
        return list(self._fetchers)

    def key(self, resource: str) -> tuple:
        return make_key(resource, self.country)

    def watch(self, resource: str, options: Optional[QueryOptions] = None) -> QuerySubscription:
        """Subscribe to a scoped resource for the current country.

        Watching the same resource twice returns the existing subscription.
        """
        if resource not in self._fetchers:
            raise ValueError(f"Unknown country-scoped resource: {resource}")
        subscription = self._subscriptions.get(resource)
        if subscription is None or subscription.closed:
            subscription = self.query_client.subscribe(
                self.key(resource), self._fetcher(resource, self.country), options
            )
            self._subscriptions[resource] = subscription
        return subscription

    def set_country(self, country: str) -> None:
        if country == self.country:
            return
        logger.info(f"Switching shipping country from {self.country} to {country}")
        self.country = country
        for resource, subscription in self._subscriptions.items():
            if not subscription.closed:
                subscription.set_key(self.key(resource), self._fetcher(resource, country))

    def request_return(self) -> Mutation:
        """Mutation for ``request_return(package_id)`` in the current country."""
        return Mutation(
            self.query_client,
            self.packages.request_return,
            invalidates=[self.key(PACKAGES), self.key(RETURNED_PACKAGES)],
        )

    def request_shipping(self) -> Mutation:
        """Mutation for ``request_shipping(package_id)`` in the current country."""
        return Mutation(
            self.query_client,
            self.packages.request_shipping,
            invalidates=[self.key(PACKAGES), self.key(SHIPMENTS)],
        )

    def close(self) -> None:
        for subscription in self._subscriptions.values():
            subscription.unsubscribe()
        self._subscriptions.clear()

    def _fetcher(self, resource: str, country: str):
        fetch = self._fetchers[resource]

        async def fetcher():
            return await fetch(country)

        return fetcher
