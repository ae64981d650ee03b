from dataclasses import dataclass
from typing import List, Optional
from marketplace.schemas.result_schema import Result
from marketplace.schemas.service_schema import ListingFilter, ListingView


@dataclass
class ViewState:
    """Current category/city selection on the discover page."""

    category: Optional[str] = None
    city: Optional[str] = None

    def select_category(self, category: str) -> None:
        # City filtering only applies within the chosen category's listing
        self.category = category
        self.city = None

    def select_city(self, city: Optional[str]) -> None:
        self.city = city

    def clear_category(self) -> None:
        self.category = None

    def listing_filter(self) -> ListingFilter:
        return ListingFilter(category=self.category, city=self.city)

    async def refresh(self, composer) -> Result[List[ListingView]]:
        return await composer.query(self.listing_filter())
