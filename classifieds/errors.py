"""
錯誤類型定義

所有執行期錯誤都繼承 ClassifiedsError，並帶有足夠的上下文
（來源、查詢字串）以便在日誌中診斷。
"""

from typing import Optional


class ClassifiedsError(Exception):
    """所有錯誤的基礎類別"""
    pass


class ExtractionError(ClassifiedsError):
    """單一 (查詢, 來源) 的爬取失敗：選擇器找不到、導覽逾時、網路錯誤"""

    def __init__(self, message: str, source: Optional[str] = None, query: Optional[str] = None):
        super().__init__(message)
        self.source = source
        self.query = query


class PersistenceError(ClassifiedsError):
    """SeenStore 無法讀取或寫入"""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class TransportError(ClassifiedsError):
    """通知發送失敗"""
    pass


class SessionError(ClassifiedsError):
    """瀏覽器 session 無法建立"""
    pass
