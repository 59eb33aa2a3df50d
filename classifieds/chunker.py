"""
訊息切割

將報告文字切成不超過傳輸上限的片段。只做字元切割，
可能在單字或刊登區塊中間斷開，但片段依序串接後與原文完全相同。

長度以 UTF-16 code unit 計算（Twilio 的計算方式），
BMP 以外的字元（例如 emoji）佔 2 個單位，且不會被切成兩半。
"""

from typing import List

# Twilio 單則訊息的上限（UTF-16 code unit）
MAX_FRAGMENT_LEN = 1600


def utf16_length(text: str) -> int:
    """返回 text 的 UTF-16 code unit 數"""
    return len(text) + sum(1 for ch in text if ord(ch) > 0xFFFF)


def chunk_message(text: str, max_len: int = MAX_FRAGMENT_LEN) -> List[str]:
    """
    切割訊息

    Args:
        text: 完整訊息
        max_len: 每個片段的最大 UTF-16 code unit 數

    Returns:
        片段列表；空字串返回空列表。
        max_len 為 1 時，BMP 以外的字元單獨成為一個片段（2 個單位）。

    Raises:
        ValueError: 當 max_len 小於 1 時
    """
    if max_len < 1:
        raise ValueError(f"max_len must be positive, got {max_len}")

    fragments = []
    start = 0
    units = 0
    for i, ch in enumerate(text):
        width = 2 if ord(ch) > 0xFFFF else 1
        if units + width > max_len and i > start:
            fragments.append(text[start:i])
            start = i
            units = 0
        units += width
    if start < len(text):
        fragments.append(text[start:])
    return fragments
