"""
設定檔載入模組

搜尋設定（啟用哪些來源、查詢字串、各來源的地區參數）來自 JSON 設定檔，
並以預設值填充；傳輸憑證來自環境變數（.env）。
"""

import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .models import ALL_SOURCES, CRAIGSLIST, FACEBOOK_MARKETPLACE, KSL


DEFAULT_CONFIG_PATH = "config/notifier.json"

# 預設值定義
DEFAULT_CONFIG = {
    "searchKsl": True,
    "searchFacebookMarketplace": True,
    "searchCraigslist": True,
    "queries": ["SNES"],
    "ksl": {
        "zip_code": "84093",
        "miles": 60,
        "per_page": 96,
    },
    "facebookMarketplace": {
        "location_id": "105496622817769",
        "latitude": 40.5724,
        "longitude": -111.86,
        "radius_km": 97,
    },
    "craigslist": {
        "region": "saltlakecity",
        "postal": "84093",
        "search_distance": 60,
    },
}

# 來源名稱到啟用旗標的映射
SOURCE_TO_FLAG = {
    KSL: "searchKsl",
    FACEBOOK_MARKETPLACE: "searchFacebookMarketplace",
    CRAIGSLIST: "searchCraigslist",
}

TRANSPORTS = ("twilio", "telegram")


@dataclass
class SearchConfig:
    """搜尋設定"""
    search_ksl: bool = True
    search_facebook_marketplace: bool = True
    search_craigslist: bool = True
    queries: List[str] = field(default_factory=list)
    source_options: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def __post_init__(self):
        if not self.queries:
            raise ValueError("At least one query must be configured")
        for query in self.queries:
            if not isinstance(query, str) or not query.strip():
                raise ValueError(f"Queries must be non-empty strings, got {query!r}")

    def is_enabled(self, source: str) -> bool:
        flags = {
            KSL: self.search_ksl,
            FACEBOOK_MARKETPLACE: self.search_facebook_marketplace,
            CRAIGSLIST: self.search_craigslist,
        }
        if source not in flags:
            raise ValueError(f"Unknown source: {source}. Valid sources: {list(ALL_SOURCES)}")
        return flags[source]

    def enabled_sources(self) -> List[str]:
        """依固定順序返回啟用的來源"""
        return [source for source in ALL_SOURCES if self.is_enabled(source)]


@dataclass
class TransportSettings:
    """通知傳輸設定（對核心流程不透明）"""
    transport: str = "twilio"
    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    from_number: Optional[str] = None
    to_number: Optional[str] = None
    telegram_bot_token: Optional[str] = None
    telegram_chat_id: Optional[str] = None


def load_search_config(config_path: str = DEFAULT_CONFIG_PATH) -> SearchConfig:
    """
    載入搜尋設定

    設定檔不存在時使用全部預設值。

    Args:
        config_path: 設定檔路徑

    Returns:
        SearchConfig

    Raises:
        ValueError: 當設定內容無效時
    """
    if os.path.exists(config_path):
        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = json.load(f)
    else:
        config_data = {}

    if not isinstance(config_data, dict):
        raise ValueError(f"Config file {config_path} must contain a JSON object")

    # 合併預設值（各來源的地區參數逐欄合併）
    merged = {**DEFAULT_CONFIG, **config_data}
    source_options = {}
    for source in ALL_SOURCES:
        overrides = config_data.get(source) or {}
        source_options[source] = {**DEFAULT_CONFIG[source], **overrides}

    queries = merged["queries"] or []
    if isinstance(queries, str):
        queries = [queries]

    return SearchConfig(
        search_ksl=bool(merged[SOURCE_TO_FLAG[KSL]]),
        search_facebook_marketplace=bool(merged[SOURCE_TO_FLAG[FACEBOOK_MARKETPLACE]]),
        search_craigslist=bool(merged[SOURCE_TO_FLAG[CRAIGSLIST]]),
        queries=list(queries),
        source_options=source_options,
    )


def load_transport_settings() -> TransportSettings:
    """
    從環境變數讀取傳輸設定

    呼叫端應先執行 load_dotenv()。

    Raises:
        ValueError: 當 NOTIFIER_TRANSPORT 不是已知的傳輸方式時
    """
    transport = os.getenv("NOTIFIER_TRANSPORT", "twilio").strip().lower()
    if transport not in TRANSPORTS:
        raise ValueError(f"Unknown NOTIFIER_TRANSPORT: {transport}. Valid: {list(TRANSPORTS)}")

    return TransportSettings(
        transport=transport,
        twilio_account_sid=os.getenv("TWILIO_ACCOUNT_SID"),
        twilio_auth_token=os.getenv("TWILIO_AUTH_TOKEN"),
        from_number=os.getenv("FROM_NUMBER"),
        to_number=os.getenv("TO_NUMBER"),
        telegram_bot_token=os.getenv("TELEGRAM_BOT_TOKEN"),
        telegram_chat_id=os.getenv("TELEGRAM_CHAT_ID"),
    )


def get_extractor_for_source(source: str, config: Optional[SearchConfig] = None):
    """
    根據來源名稱取得對應的爬取器實例

    Args:
        source: 來源名稱 (ksl, facebookMarketplace, craigslist)
        config: 搜尋設定，提供各來源的地區參數

    Returns:
        對應的 ListingExtractor

    Raises:
        ValueError: 當來源名稱無效時
    """
    if config is not None:
        options = config.source_options.get(source, {})
    else:
        options = DEFAULT_CONFIG.get(source, {})

    if source == KSL:
        from marketplaces.ksl.extractor import KslExtractor
        return KslExtractor(**options)
    elif source == FACEBOOK_MARKETPLACE:
        from marketplaces.facebook_marketplace.extractor import FacebookMarketplaceExtractor
        return FacebookMarketplaceExtractor(**options)
    elif source == CRAIGSLIST:
        from marketplaces.craigslist.extractor import CraigslistExtractor
        return CraigslistExtractor(**options)
    else:
        raise ValueError(f"Unknown source: {source}")


def build_extractors(config: SearchConfig) -> Dict[str, Any]:
    """為所有啟用的來源建立爬取器（保持固定順序）"""
    return {
        source: get_extractor_for_source(source, config)
        for source in config.enabled_sources()
    }
