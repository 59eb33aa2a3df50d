"""
Facebook Marketplace 爬取器

刊登元素本身就是連結，標題放在 title 屬性，價格在第一層巢狀 div 中。
"""

from urllib.parse import urlencode

from classifieds.base_extractor import ListingExtractor
from classifieds.models import FACEBOOK_MARKETPLACE, Listing


class FacebookMarketplaceExtractor(ListingExtractor):
    """Facebook Marketplace 爬取器"""

    LISTING_SELECTOR = '[data-testid="marketplace_feed_item"]'

    def __init__(
        self,
        location_id: str = "105496622817769",
        latitude: float = 40.5724,
        longitude: float = -111.86,
        radius_km: int = 97,
    ):
        self.location_id = location_id
        self.latitude = latitude
        self.longitude = longitude
        self.radius_km = radius_km

    @property
    def source_name(self) -> str:
        return FACEBOOK_MARKETPLACE

    def build_search_url(self, query: str) -> str:
        params = {
            "query": query,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "radiusKM": self.radius_km,
            "vertical": "C2C",
            "sort": "CREATION_TIME_DESCEND",
        }
        return (
            f"https://www.facebook.com/marketplace/{self.location_id}/search/"
            f"?{urlencode(params)}"
        )

    def parse_listing(self, element, base_url: str) -> Listing:
        title = element.get_attribute("title")
        if title is None:
            raise ValueError("missing title attribute on listing element")

        return Listing(
            title=title,
            price=self._text(element, "div > div > div > div"),
            url=self._href(element, base_url),
        )
