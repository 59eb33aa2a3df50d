"""
瀏覽器 session 模組

一次執行只啟動一個 Chromium，所有 (查詢, 來源) 共用同一個頁面：
- 瀏覽器初始化和關閉邏輯
- User-Agent 隨機選擇
- context manager 用法
"""

import logging
import random
from typing import List, Optional

from playwright.sync_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    sync_playwright,
)

from .errors import SessionError

logger = logging.getLogger(__name__)


class BrowserSession:
    """
    共用的瀏覽器 session

    open() 之後透過 page 屬性取得頁面；close() 可重複呼叫。
    """

    # 預設 User-Agent 列表
    DEFAULT_USER_AGENTS = [
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.1 Safari/605.1.15",
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    ]

    # 頁面導覽逾時（毫秒）
    DEFAULT_NAVIGATION_TIMEOUT_MS = 60000

    def __init__(
        self,
        headless: bool = True,
        user_agents: Optional[List[str]] = None,
        navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS,
    ):
        """
        Args:
            headless: 是否以無頭模式運行瀏覽器
            user_agents: 自訂 User-Agent 列表，若為 None 則使用預設列表
            navigation_timeout_ms: page.goto 的逾時
        """
        self.headless = headless
        self.user_agents = user_agents or self.DEFAULT_USER_AGENTS.copy()
        self.navigation_timeout_ms = navigation_timeout_ms

        # 延遲初始化
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

        self._current_user_agent: Optional[str] = None

    @property
    def page(self) -> Page:
        """取得當前頁面實例"""
        if self._page is None:
            raise SessionError("Browser session is not open")
        return self._page

    @property
    def is_open(self) -> bool:
        return self._page is not None

    def _get_user_agent(self) -> str:
        """隨機選擇一個 User-Agent"""
        self._current_user_agent = random.choice(self.user_agents)
        return self._current_user_agent

    def open(self) -> "BrowserSession":
        """
        啟動 Playwright 和 Chromium，建立上下文和頁面

        Raises:
            SessionError: 瀏覽器無法啟動時
        """
        if self.is_open:
            return self

        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(headless=self.headless)
            self._context = self._browser.new_context(
                user_agent=self._get_user_agent()
            )
            self._context.set_default_navigation_timeout(self.navigation_timeout_ms)
            self._page = self._context.new_page()
        except PlaywrightError as e:
            self.close()
            raise SessionError(f"Failed to launch browser: {e}") from e

        logger.info("Browser session opened (headless=%s)", self.headless)
        return self

    def close(self) -> None:
        """依序關閉頁面、上下文、瀏覽器和 Playwright 實例"""
        for name in ("_page", "_context", "_browser"):
            resource = getattr(self, name)
            if resource is not None:
                try:
                    resource.close()
                except PlaywrightError as e:
                    logger.debug("Ignoring error while closing %s: %s", name, e)
                setattr(self, name, None)

        if self._playwright is not None:
            try:
                self._playwright.stop()
            except PlaywrightError as e:
                logger.debug("Ignoring error while stopping playwright: %s", e)
            self._playwright = None

    def __enter__(self):
        """支援 context manager 用法"""
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        """支援 context manager 用法"""
        self.close()
        return False
