"""
新刊登判定

以 url 為識別鍵，將爬取到的刊登分為「已看過」和「新刊登」。
"""

from typing import Iterable, List, Set

from .models import Listing


def filter_novel(raw_listings: Iterable[Listing], seen_urls: Set[str]) -> List[Listing]:
    """
    過濾出 url 不在 seen_urls 中的刊登

    保留原始順序，不修改 seen_urls。同一批次中重複 url 的刊登
    都會以原始的 seen_urls 判斷，因此可能同時出現在結果中。

    Args:
        raw_listings: 爬取到的刊登
        seen_urls: 該來源已記錄的 url 集合

    Returns:
        新刊登列表
    """
    return [listing for listing in raw_listings if listing.url not in seen_urls]


def collapse_duplicate_urls(listings: Iterable[Listing]) -> List[Listing]:
    """同一 url 只保留第一筆，保留原始順序"""
    unique = []
    urls = set()
    for listing in listings:
        if listing.url in urls:
            continue
        urls.add(listing.url)
        unique.append(listing)
    return unique


def select_novel(raw_listings: Iterable[Listing], seen_urls: Set[str]) -> List[Listing]:
    """
    取得要記錄和通知的新刊登

    先以 filter_novel 判定，再合併批次內重複的 url，
    讓每個 url 在一次執行中只寫入一次、只通知一次。
    """
    return collapse_duplicate_urls(filter_novel(raw_listings, seen_urls))
