"""
通知報告彙整

把一次執行中所有 (查詢, 來源) 的新刊登累積成單一報告，依查詢分組。
查詢依處理順序排列（先處理的在前），同一查詢的多個來源合併在同一段落。
"""

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from .models import Listing


@dataclass(frozen=True)
class ReportSection:
    """單一查詢的結果段落"""
    query: str
    listings: Tuple[Listing, ...]


@dataclass(frozen=True)
class Report:
    """依處理順序排列的段落"""
    sections: Tuple[ReportSection, ...] = field(default_factory=tuple)

    @property
    def listing_count(self) -> int:
        return sum(len(section.listings) for section in self.sections)

    def is_empty(self) -> bool:
        return not self.sections


def append_query_results(
    report: Report,
    query: str,
    novel_listings: Sequence[Listing]
) -> Report:
    """
    將查詢結果加入報告

    沒有新刊登時原樣返回 report，不產生空段落。
    若該查詢已有段落（另一個來源先產生了結果），刊登會接在該段落之後。

    Args:
        report: 目前的報告
        query: 查詢字串
        novel_listings: 該查詢在某一來源的新刊登

    Returns:
        新的報告
    """
    if not novel_listings:
        return report

    sections = list(report.sections)
    for index, section in enumerate(sections):
        if section.query == query:
            sections[index] = ReportSection(
                query=query,
                listings=section.listings + tuple(novel_listings),
            )
            return Report(sections=tuple(sections))

    sections.append(ReportSection(query=query, listings=tuple(novel_listings)))
    return Report(sections=tuple(sections))


def format_listing(listing: Listing) -> str:
    """格式化單一刊登區塊（結尾空行分隔下一筆）"""
    return (
        f"Title: {listing.title}\n"
        f"Price: {listing.price}\n"
        f"Url: {listing.url}\n"
        "\n"
    )


def render_report(report: Report) -> str:
    """產生報告文字；空報告返回空字串"""
    parts: List[str] = []
    for section in report.sections:
        parts.append(f"Query {section.query} Results:\n")
        parts.extend(format_listing(listing) for listing in section.listings)
    return "".join(parts)
