from typing import List, Optional
from marketplace.schemas.result_schema import ErrorKind, Result
from marketplace.schemas.service_schema import ListingFilter, ListingView
from marketplace.services.listing_store import ListingStore, StoreError, error_kind_for, listing_store
from marketplace.logger import get_logger

logger = get_logger(__name__)


class ListingComposer:
    """Joins active services with their provider's display name."""

    def __init__(self, store: ListingStore):
        self.store = store

    async def query(self, listing_filter: Optional[ListingFilter] = None) -> Result[List[ListingView]]:
        listing_filter = listing_filter or ListingFilter()

        try:
            services = await self.store.fetch_services(listing_filter)
        except StoreError as e:
            logger.error(f"Services query error for {listing_filter.model_dump()}: {str(e)}")
            return Result.failure(error_kind_for(e, ErrorKind.fetch_failed), "Error occurred while fetching services")

        if not services:
            return Result.success([])

        provider_ids = {service.provider_id for service in services}
        try:
            providers = await self.store.fetch_providers(provider_ids)
        except StoreError as e:
            logger.error(f"Providers query error for {len(provider_ids)} providers: {str(e)}")
            return Result.failure(error_kind_for(e, ErrorKind.fetch_failed), "Error occurred while fetching providers")

        providers_by_id = {provider.id: provider for provider in providers}
        listings = [
            ListingView(**service.model_dump(), provider=providers_by_id.get(service.provider_id))
            for service in services
        ]
        logger.debug(f"Found {len(listings)} services for {listing_filter.model_dump()}")
        return Result.success(listings)

    async def list_services(self, category: Optional[str] = None, city: Optional[str] = None):
        return await self.query(ListingFilter(category=category, city=city))


listing_composer = ListingComposer(listing_store)
