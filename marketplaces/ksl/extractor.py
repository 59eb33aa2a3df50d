"""
KSL Classifieds 爬取器

搜尋結果頁每筆刊登為 .listing-item，標題、價格和連結各自在子元素中。
"""

from urllib.parse import urlencode

from classifieds.base_extractor import ListingExtractor
from classifieds.models import KSL, Listing


class KslExtractor(ListingExtractor):
    """KSL Classifieds 爬取器"""

    SEARCH_URL = "https://classifieds.ksl.com/search/"
    LISTING_SELECTOR = ".listing-item"

    def __init__(self, zip_code: str = "84093", miles: int = 60, per_page: int = 96):
        self.zip_code = zip_code
        self.miles = miles
        self.per_page = per_page

    @property
    def source_name(self) -> str:
        return KSL

    def build_search_url(self, query: str) -> str:
        params = {
            "keyword": query,
            "zip": self.zip_code,
            "miles": self.miles,
            "priceFrom": "",
            "priceTo": "",
            "city": "",
            "state": "",
            "sort": "",
            "perPage": self.per_page,
        }
        return f"{self.SEARCH_URL}?{urlencode(params)}"

    def parse_listing(self, element, base_url: str) -> Listing:
        return Listing(
            title=self._text(element, ".item-info-title-link"),
            price=self._text(element, ".item-info-price.info-line"),
            url=self._href(element, base_url, ".listing-item-link"),
        )
