"""
單次執行流程

依序處理每個查詢 × 每個啟用的來源：
爬取 → 判定新刊登 → 寫入 SeenStore → 加入報告，
全部處理完後切割報告並依序發送。

單一 (查詢, 來源) 的失敗不會中斷整次執行；
只有瀏覽器 session 無法建立和最終發送失敗會讓執行結束於 FAILED。
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Set

from .base_extractor import ListingExtractor
from .chunker import MAX_FRAGMENT_LEN, chunk_message
from .errors import ExtractionError, PersistenceError, SessionError, TransportError
from .novelty import select_novel
from .report import Report, append_query_results, render_report
from .storage import ListingStorage

logger = logging.getLogger(__name__)


class RunState(Enum):
    IDLE = "idle"
    ACQUIRING = "acquiring"
    PROCESSING = "processing"
    AGGREGATING = "aggregating"
    CHUNKING = "chunking"
    SENDING = "sending"
    DONE = "done"
    FAILED = "failed"


@dataclass
class StageFailure:
    """執行過程中記錄的失敗"""
    stage: str
    message: str
    source: Optional[str] = None
    query: Optional[str] = None


@dataclass
class RunResult:
    """單次執行的結果"""
    state: RunState = RunState.IDLE
    report_text: str = ""
    fragments: List[str] = field(default_factory=list)
    fragments_sent: int = 0
    novel_count: int = 0
    failures: List[StageFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state is RunState.DONE


class RunOrchestrator:
    """
    執行協調器

    所有外部協作者都由建構子注入：
    - session_factory: 無參數呼叫後返回尚未開啟的 session（open/close/page）
    - extractors: 來源名稱 → ListingExtractor，依字典順序處理
    - storage: 提供 get_seen_urls / record_seen 的 SeenStore
    - notifier: 提供 send(body) 的通知服務；None 代表 dry run，只記錄不發送
    """

    def __init__(
        self,
        session_factory: Callable[[], object],
        extractors: Dict[str, ListingExtractor],
        storage: ListingStorage,
        queries: Sequence[str],
        notifier=None,
        max_fragment_length: int = MAX_FRAGMENT_LEN,
    ):
        self.session_factory = session_factory
        self.extractors = dict(extractors)
        self.storage = storage
        self.queries = list(queries)
        self.notifier = notifier

        # 片段長度不可超過傳輸方式本身的上限
        transport_limit = getattr(notifier, "max_message_length", None)
        if transport_limit is not None:
            max_fragment_length = min(max_fragment_length, transport_limit)
        self.max_fragment_length = max_fragment_length

        self.state = RunState.IDLE

    def _transition(self, state: RunState, result: RunResult) -> None:
        logger.debug("Run state: %s -> %s", self.state.value, state.value)
        self.state = state
        result.state = state

    def _fail(self, result: RunResult, stage: str, message: str, source=None, query=None) -> None:
        result.failures.append(StageFailure(stage=stage, message=message, source=source, query=query))
        self._transition(RunState.FAILED, result)

    def run(self) -> RunResult:
        """
        執行一次完整流程

        四種執行期錯誤都不會向外拋出，而是記錄在 RunResult.failures，
        並以 RunResult.state 表示結束狀態。
        """
        result = RunResult()
        self.state = RunState.IDLE

        self._transition(RunState.ACQUIRING, result)
        try:
            session = self.session_factory()
            session.open()
        except SessionError as e:
            logger.error("Could not acquire browser session, nothing processed: %s", e)
            self._fail(result, "acquire_session", str(e))
            return result

        report = Report()
        aborted_sources: Set[str] = set()
        reported_urls: Dict[str, Set[str]] = {source: set() for source in self.extractors}
        try:
            self._transition(RunState.PROCESSING, result)
            for query in self.queries:
                for source, extractor in self.extractors.items():
                    if source in aborted_sources:
                        continue
                    report = self._process_pair(
                        session, query, source, extractor, report, result,
                        aborted_sources, reported_urls[source],
                    )
        finally:
            session.close()
            logger.debug("Browser session released")

        self._transition(RunState.AGGREGATING, result)
        result.report_text = render_report(report)
        result.novel_count = report.listing_count

        self._transition(RunState.CHUNKING, result)
        result.fragments = chunk_message(result.report_text, self.max_fragment_length)

        self._transition(RunState.SENDING, result)
        if not self._send_fragments(result):
            return result

        self._transition(RunState.DONE, result)
        logger.info(
            "Run finished: %d new listings, %d/%d messages sent, %d failures",
            result.novel_count, result.fragments_sent, len(result.fragments), len(result.failures)
        )
        return result

    def _process_pair(
        self,
        session,
        query: str,
        source: str,
        extractor: ListingExtractor,
        report: Report,
        result: RunResult,
        aborted_sources: Set[str],
        reported_urls: Set[str],
    ) -> Report:
        """
        處理單一 (查詢, 來源)，失敗時記錄並返回原報告

        Args:
            aborted_sources: 本次執行中已放棄的來源；讀取 SeenStore 失敗時加入
            reported_urls: 該來源本次執行已加入報告的 url（含寫入失敗者）
        """
        # 先讀取已記錄集合，讀取失敗就不必載入頁面
        try:
            seen_urls = self.storage.get_seen_urls(source)
        except PersistenceError as e:
            logger.error(
                "[%s] Cannot read seen listings at query %r, skipping source for the rest of the run: %s",
                source, query, e
            )
            result.failures.append(StageFailure("read_seen", str(e), source, query))
            aborted_sources.add(source)
            return report

        try:
            raw_listings = extractor.extract(session, query)
        except ExtractionError as e:
            logger.error("[%s] Extraction failed for query %r, skipping: %s", source, query, e)
            result.failures.append(StageFailure("extract", str(e), source, query))
            return report

        # 寫入失敗的 url 不在 SeenStore 中，仍需排除以免同一次通知重複出現
        novel = select_novel(raw_listings, seen_urls | reported_urls)
        logger.info(
            "[%s] %d new of %d listings for query %r", source, len(novel), len(raw_listings), query
        )

        # 先寫入再通知：寫入後當機只會漏掉通知，不會重複通知
        for listing in novel:
            try:
                self.storage.record_seen(source, listing)
            except PersistenceError as e:
                logger.error(
                    "[%s] Failed to record %s for query %r; it may be notified again next run: %s",
                    source, listing.url, query, e
                )
                result.failures.append(StageFailure("record_seen", str(e), source, query))
            reported_urls.add(listing.url)

        return append_query_results(report, query, novel)

    def _send_fragments(self, result: RunResult) -> bool:
        """依序發送所有片段；任一片段失敗即停止並返回 False"""
        if not result.fragments:
            logger.info("No new listings, nothing to send")
            return True

        if self.notifier is None:
            logger.info("Dry run: %d message(s) not sent", len(result.fragments))
            for index, fragment in enumerate(result.fragments, start=1):
                logger.info("Message %d/%d:\n%s", index, len(result.fragments), fragment)
            return True

        logger.info("Sending %d message(s)...", len(result.fragments))
        for index, fragment in enumerate(result.fragments, start=1):
            try:
                self.notifier.send(fragment)
            except TransportError as e:
                logger.error(
                    "Failed to send message %d/%d, stored listings are kept: %s",
                    index, len(result.fragments), e
                )
                self._fail(result, "send", str(e))
                return False
            result.fragments_sent += 1
        return True
