"""
Craigslist 爬取器

以地區子網域搜尋 (sss = for sale)，依刊登日期排序。
"""

from urllib.parse import urlencode

from classifieds.base_extractor import ListingExtractor
from classifieds.models import CRAIGSLIST, Listing


class CraigslistExtractor(ListingExtractor):
    """Craigslist 爬取器"""

    LISTING_SELECTOR = ".result-row"

    def __init__(self, region: str = "saltlakecity", postal: str = "84093", search_distance: int = 60):
        self.region = region
        self.postal = postal
        self.search_distance = search_distance

    @property
    def source_name(self) -> str:
        return CRAIGSLIST

    def build_search_url(self, query: str) -> str:
        params = {
            "sort": "date",
            "postal": self.postal,
            "query": query,
            "search_distance": self.search_distance,
        }
        return f"https://{self.region}.craigslist.org/search/sss?{urlencode(params)}"

    def parse_listing(self, element, base_url: str) -> Listing:
        # .result-row 可能是 <li>，此時連結在標題 anchor 上
        if element.get_attribute("href"):
            url = self._href(element, base_url)
        else:
            url = self._href(element, base_url, ".result-title")

        return Listing(
            title=self._text(element, ".result-title"),
            price=self._text(element, ".result-price"),
            url=url,
        )
