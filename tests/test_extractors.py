#!/usr/bin/env python3
"""
測試各來源的爬取器

使用假的 Playwright 元素，不啟動瀏覽器。
"""
import unittest
from unittest.mock import MagicMock

from playwright.sync_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from classifieds.errors import ExtractionError
from classifieds.models import Listing
from marketplaces.craigslist.extractor import CraigslistExtractor
from marketplaces.facebook_marketplace.extractor import FacebookMarketplaceExtractor
from marketplaces.ksl.extractor import KslExtractor


class FakeElement:
    """模擬 ElementHandle 的最小介面"""

    def __init__(self, text=None, attrs=None, children=None):
        self._text = text
        self._attrs = attrs or {}
        self._children = children or {}

    def text_content(self):
        return self._text

    def get_attribute(self, name):
        return self._attrs.get(name)

    def query_selector(self, selector):
        return self._children.get(selector)


def make_session(elements, page_url):
    page = MagicMock()
    page.url = page_url
    page.query_selector_all.return_value = elements
    session = MagicMock()
    session.page = page
    return session


class TestKslExtractor(unittest.TestCase):
    def setUp(self):
        self.extractor = KslExtractor()

    def test_source_name(self):
        self.assertEqual(self.extractor.source_name, "ksl")

    def test_build_search_url(self):
        self.assertEqual(
            self.extractor.build_search_url("SNES"),
            "https://classifieds.ksl.com/search/?keyword=SNES&zip=84093&miles=60"
            "&priceFrom=&priceTo=&city=&state=&sort=&perPage=96",
        )

    def test_build_search_url_encodes_query(self):
        url = self.extractor.build_search_url("super nintendo & games")
        self.assertIn("keyword=super+nintendo+%26+games", url)

    def test_extract(self):
        """測試讀取刊登並轉換相對連結；文字保持原樣"""
        element = FakeElement(children={
            ".item-info-title-link": FakeElement(text="  SNES Console \n"),
            ".item-info-price.info-line": FakeElement(text=" $80 "),
            ".listing-item-link": FakeElement(attrs={"href": "/listing/123"}),
        })
        session = make_session([element], "https://classifieds.ksl.com/search/?keyword=SNES")

        listings = self.extractor.extract(session, "SNES")

        self.assertEqual(listings, [
            Listing(title="  SNES Console \n", price=" $80 ", url="https://classifieds.ksl.com/listing/123"),
        ])
        session.page.goto.assert_called_once_with(
            self.extractor.build_search_url("SNES"), wait_until="networkidle"
        )
        session.page.query_selector_all.assert_called_once_with(".listing-item")

    def test_no_results_is_empty(self):
        session = make_session([], "https://classifieds.ksl.com/search/")
        self.assertEqual(self.extractor.extract(session, "SNES"), [])

    def test_missing_field_raises_extraction_error(self):
        """缺少必要欄位視為頁面結構改變"""
        element = FakeElement(children={
            ".item-info-title-link": FakeElement(text="SNES"),
            ".listing-item-link": FakeElement(attrs={"href": "/listing/1"}),
        })
        session = make_session([element], "https://classifieds.ksl.com/search/")

        with self.assertRaises(ExtractionError) as ctx:
            self.extractor.extract(session, "SNES")
        self.assertEqual(ctx.exception.source, "ksl")
        self.assertEqual(ctx.exception.query, "SNES")

    def test_navigation_timeout_raises_extraction_error(self):
        session = make_session([], "about:blank")
        session.page.goto.side_effect = PlaywrightTimeoutError("Timeout 60000ms exceeded")

        with self.assertRaises(ExtractionError):
            self.extractor.extract(session, "SNES")

    def test_browser_error_raises_extraction_error(self):
        session = make_session([], "about:blank")
        session.page.goto.side_effect = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")

        with self.assertRaises(ExtractionError):
            self.extractor.extract(session, "SNES")


class TestFacebookMarketplaceExtractor(unittest.TestCase):
    def setUp(self):
        self.extractor = FacebookMarketplaceExtractor()

    def test_build_search_url(self):
        self.assertEqual(
            self.extractor.build_search_url("SNES"),
            "https://www.facebook.com/marketplace/105496622817769/search/"
            "?query=SNES&latitude=40.5724&longitude=-111.86&radiusKM=97"
            "&vertical=C2C&sort=CREATION_TIME_DESCEND",
        )

    def test_extract(self):
        element = FakeElement(
            attrs={"title": "SNES with 2 controllers", "href": "/marketplace/item/42/"},
            children={"div > div > div > div": FakeElement(text="$95")},
        )
        session = make_session([element], "https://www.facebook.com/marketplace/105496622817769/search/")

        listings = self.extractor.extract(session, "SNES")

        self.assertEqual(listings, [
            Listing(
                title="SNES with 2 controllers",
                price="$95",
                url="https://www.facebook.com/marketplace/item/42/",
            ),
        ])
        session.page.query_selector_all.assert_called_once_with('[data-testid="marketplace_feed_item"]')

    def test_title_and_price_are_not_trimmed(self):
        element = FakeElement(
            attrs={"title": " SNES  boxed ", "href": "/marketplace/item/7/"},
            children={"div > div > div > div": FakeElement(text="$95\n")},
        )
        session = make_session([element], "https://www.facebook.com/")

        listing = self.extractor.extract(session, "SNES")[0]

        self.assertEqual((listing.title, listing.price), (" SNES  boxed ", "$95\n"))

    def test_missing_title_raises_extraction_error(self):
        element = FakeElement(
            attrs={"href": "/marketplace/item/42/"},
            children={"div > div > div > div": FakeElement(text="$95")},
        )
        session = make_session([element], "https://www.facebook.com/")

        with self.assertRaises(ExtractionError):
            self.extractor.extract(session, "SNES")


class TestCraigslistExtractor(unittest.TestCase):
    def setUp(self):
        self.extractor = CraigslistExtractor()

    def test_build_search_url(self):
        self.assertEqual(
            self.extractor.build_search_url("SNES"),
            "https://saltlakecity.craigslist.org/search/sss"
            "?sort=date&postal=84093&query=SNES&search_distance=60",
        )

    def test_custom_region(self):
        extractor = CraigslistExtractor(region="boston", postal="02110", search_distance=10)
        self.assertTrue(extractor.build_search_url("x").startswith("https://boston.craigslist.org/"))

    def test_extract_row_link(self):
        """連結在 .result-row 本身"""
        element = FakeElement(
            attrs={"href": "https://saltlakecity.craigslist.org/vgm/d/snes/1.html"},
            children={
                ".result-title": FakeElement(text="SNES"),
                ".result-price": FakeElement(text="$70"),
            },
        )
        session = make_session([element], "https://saltlakecity.craigslist.org/search/sss")

        listings = self.extractor.extract(session, "SNES")

        self.assertEqual(listings[0].url, "https://saltlakecity.craigslist.org/vgm/d/snes/1.html")
        self.assertEqual(listings[0].price, "$70")

    def test_extract_title_link(self):
        """連結在標題 anchor 上"""
        element = FakeElement(children={
            ".result-title": FakeElement(text="SNES", attrs={"href": "/vgm/d/snes/2.html"}),
            ".result-price": FakeElement(text="$60"),
        })
        session = make_session([element], "https://saltlakecity.craigslist.org/search/sss")

        listings = self.extractor.extract(session, "SNES")

        self.assertEqual(listings[0].url, "https://saltlakecity.craigslist.org/vgm/d/snes/2.html")


if __name__ == "__main__":
    unittest.main()
