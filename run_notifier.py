#!/usr/bin/env python3
"""
分類廣告通知執行腳本

執行一次完整流程（所有查詢 × 所有啟用的來源），或以 --every 定期執行。
排程通常由 cron 負責（每 15 分鐘）。
"""
import argparse
import logging
import sys
import time
from functools import partial

from dotenv import load_dotenv

from classifieds.config import (
    DEFAULT_CONFIG_PATH,
    build_extractors,
    load_search_config,
    load_transport_settings,
)
from classifieds.errors import PersistenceError
from classifieds.models import ALL_SOURCES
from classifieds.notifier import create_notifier
from classifieds.orchestrator import RunOrchestrator, RunState
from classifieds.session import BrowserSession
from classifieds.storage import ListingStorage

# 載入 .env 檔案
load_dotenv()

DEFAULT_DB_PATH = "data/listings.db"


def run_once(
    config_path: str = DEFAULT_CONFIG_PATH,
    db_path: str = DEFAULT_DB_PATH,
    headless: bool = True,
    dry_run: bool = False
) -> bool:
    """
    執行一次

    Args:
        config_path: 搜尋設定檔路徑
        db_path: SQLite 資料庫路徑
        headless: 是否以無頭模式運行
        dry_run: 是否為測試模式（不發送通知）

    Returns:
        是否成功執行
    """
    # 載入設定
    try:
        config = load_search_config(config_path)
    except (ValueError, OSError) as e:
        print(f"Error loading config {config_path}: {e}")
        return False

    sources = config.enabled_sources()
    if not sources:
        print("No sources enabled")
        return False

    print(f"\n{'='*60}")
    print(f"Sources: {', '.join(sources)}")
    print(f"Queries: {', '.join(config.queries)}")
    if dry_run:
        print("Mode: DRY RUN (no notifications)")
    print(f"{'='*60}\n")

    # 初始化元件
    notifier = None
    if not dry_run:
        try:
            notifier = create_notifier(load_transport_settings())
        except ValueError as e:
            print(f"Error: notifier not configured: {e}")
            return False

    try:
        storage = ListingStorage(db_path=db_path)
    except PersistenceError as e:
        print(f"Error opening storage: {e}")
        return False

    orchestrator = RunOrchestrator(
        session_factory=partial(BrowserSession, headless=headless),
        extractors=build_extractors(config),
        storage=storage,
        queries=config.queries,
        notifier=notifier,
    )
    result = orchestrator.run()

    print(f"\n{'='*60}")
    print(f"New listings: {result.novel_count}")
    print(f"Messages sent: {result.fragments_sent}/{len(result.fragments)}")
    for failure in result.failures:
        where = " ".join(filter(None, [failure.source, repr(failure.query) if failure.query else None]))
        print(f"  [{failure.stage}] {where}: {failure.message}")
    print(f"Result: {result.state.value}")
    print(f"{'='*60}\n")

    return result.state is RunState.DONE


def show_status(db_path: str = DEFAULT_DB_PATH) -> int:
    """顯示各來源已記錄的刊登數量"""
    try:
        storage = ListingStorage(db_path=db_path)
        print(f"\n=== Seen listings ({db_path}) ===")
        for source in ALL_SOURCES:
            print(f"  {source}: {storage.get_listing_count(source)}")
    except PersistenceError as e:
        print(f"Error reading storage: {e}")
        return 1
    return 0


def main():
    """主程式"""
    parser = argparse.ArgumentParser(
        description="分類廣告新刊登通知",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
範例:
  %(prog)s                        # 執行一次並發送通知
  %(prog)s --dry-run              # 測試模式（不發送通知，但仍記錄刊登）
  %(prog)s --every 15             # 每 15 分鐘執行一次
  %(prog)s --status               # 顯示各來源已記錄數量
  %(prog)s --list                 # 列出所有可用來源
        """
    )

    parser.add_argument(
        "--config", "-c",
        default=DEFAULT_CONFIG_PATH,
        help="搜尋設定檔路徑"
    )
    parser.add_argument(
        "--db",
        default=DEFAULT_DB_PATH,
        help="SQLite 資料庫路徑"
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="以有頭模式運行瀏覽器（用於除錯）"
    )
    parser.add_argument(
        "--dry-run", "-n",
        action="store_true",
        help="測試模式，不發送通知"
    )
    parser.add_argument(
        "--every",
        type=float,
        metavar="MINUTES",
        help="持續執行，每次間隔 MINUTES 分鐘"
    )
    parser.add_argument(
        "--status", "-s",
        action="store_true",
        help="顯示各來源已記錄的刊登數量"
    )
    parser.add_argument(
        "--list", "-l",
        action="store_true",
        help="列出所有可用來源"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="顯示除錯日誌"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # 列出所有來源
    if args.list:
        print("Available sources:")
        for source in ALL_SOURCES:
            print(f"  - {source}")
        return 0

    if args.status:
        return show_status(args.db)

    if args.every is not None and args.every <= 0:
        parser.error("--every must be a positive number of minutes")

    headless = not args.headed
    while True:
        success = run_once(
            config_path=args.config,
            db_path=args.db,
            headless=headless,
            dry_run=args.dry_run
        )
        if args.every is None:
            return 0 if success else 1

        print(f"Next run in {args.every:g} minutes")
        time.sleep(args.every * 60)


if __name__ == "__main__":
    sys.exit(main())
