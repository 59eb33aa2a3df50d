"""
資料模型模組

定義刊登資料結構和來源名稱常數。
"""

from dataclasses import dataclass


# 來源名稱（同時也是 SeenStore 的分區名稱）
KSL = "ksl"
FACEBOOK_MARKETPLACE = "facebookMarketplace"
CRAIGSLIST = "craigslist"

# 固定的處理順序
ALL_SOURCES = (KSL, FACEBOOK_MARKETPLACE, CRAIGSLIST)


@dataclass(frozen=True)
class Listing:
    """
    單一刊登

    url 是同一來源內的識別鍵；title 和 price 只作為顯示字串，不做解析。
    """
    title: str
    price: str
    url: str
