"""
刊登爬取基礎類別模組

定義所有網站爬取器的共用介面和行為，包括：
- 抽象方法定義 (source_name, build_search_url, parse_listing)
- 共用的頁面導覽和元素讀取流程
- Playwright 錯誤轉換為 ExtractionError
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional
from urllib.parse import urljoin

from playwright.sync_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from .errors import ExtractionError
from .models import Listing

logger = logging.getLogger(__name__)


class ListingExtractor(ABC):
    """
    刊登爬取器

    每個來源繼承此類別並實作抽象方法。extract() 使用呼叫端提供的
    session，不自行啟動瀏覽器。
    """

    # 每筆刊登對應的元素選擇器
    LISTING_SELECTOR = ""

    # 'networkidle' 等到頁面的動態內容載入完成
    WAIT_UNTIL = "networkidle"

    @property
    @abstractmethod
    def source_name(self) -> str:
        """
        返回來源名稱

        例如: 'ksl', 'craigslist'
        """
        pass

    @abstractmethod
    def build_search_url(self, query: str) -> str:
        """
        組出查詢的搜尋結果頁面 URL

        Args:
            query: 查詢字串（尚未編碼）

        Returns:
            完整 URL
        """
        pass

    @abstractmethod
    def parse_listing(self, element, base_url: str) -> Listing:
        """
        解析單一刊登元素

        Args:
            element: Playwright ElementHandle
            base_url: 目前頁面 URL，用於轉換相對連結

        Returns:
            Listing

        Raises:
            ValueError: 缺少必要欄位時
        """
        pass

    def extract(self, session, query: str) -> List[Listing]:
        """
        在 session 的頁面上載入搜尋結果並讀取所有刊登

        找不到任何刊登元素視為零筆結果，不是錯誤。

        Args:
            session: BrowserSession（或任何提供 page 屬性的物件）
            query: 查詢字串

        Returns:
            刊登列表（頁面順序）

        Raises:
            ExtractionError: 導覽逾時、網路錯誤或元素缺少必要欄位
        """
        url = self.build_search_url(query)
        page = session.page

        try:
            logger.info("[%s] Loading %s", self.source_name, url)
            page.goto(url, wait_until=self.WAIT_UNTIL)

            elements = page.query_selector_all(self.LISTING_SELECTOR)
            base_url = page.url or url
            listings = [self.parse_listing(element, base_url) for element in elements]
        except PlaywrightTimeoutError as e:
            raise ExtractionError(
                f"Timed out loading {url}: {e}", source=self.source_name, query=query
            ) from e
        except PlaywrightError as e:
            raise ExtractionError(
                f"Browser error on {url}: {e}", source=self.source_name, query=query
            ) from e
        except ValueError as e:
            raise ExtractionError(
                f"Unexpected page structure on {url}: {e}", source=self.source_name, query=query
            ) from e

        logger.info("[%s] Found %d listings for %r", self.source_name, len(listings), query)
        return listings

    def _text(self, element, selector: str) -> str:
        """讀取子元素原始文字（不做修剪）；找不到時拋出 ValueError"""
        child = element.query_selector(selector)
        if child is None:
            raise ValueError(f"missing element {selector!r}")
        return child.text_content() or ""

    def _href(self, element, base_url: str, selector: Optional[str] = None) -> str:
        """讀取連結並轉為絕對 URL；selector 為 None 時讀取元素本身"""
        target = element if selector is None else element.query_selector(selector)
        href = target.get_attribute("href") if target is not None else None
        if not href:
            where = selector or "listing element"
            raise ValueError(f"missing href on {where!r}")
        return urljoin(base_url, href)
