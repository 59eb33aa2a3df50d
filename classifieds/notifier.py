"""
通知服務模組

提供 Twilio SMS 和 Telegram 兩種傳輸方式。每次 send() 發送一個片段，
失敗時拋出 TransportError，不自動重試。
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import requests

from .chunker import MAX_FRAGMENT_LEN, utf16_length
from .config import TransportSettings
from .errors import TransportError

logger = logging.getLogger(__name__)


class Notifier(ABC):
    """通知傳輸介面"""

    # 單則訊息的上限（UTF-16 code unit）
    max_message_length = MAX_FRAGMENT_LEN

    @abstractmethod
    def send(self, body: str) -> None:
        """
        發送一則訊息

        Raises:
            ValueError: 訊息超過 max_message_length 時
            TransportError: 傳輸失敗時
        """
        pass

    def _check_length(self, body: str) -> None:
        length = utf16_length(body)
        if length > self.max_message_length:
            raise ValueError(
                f"Message of {length} UTF-16 units exceeds limit of {self.max_message_length}"
            )


class TwilioSmsNotifier(Notifier):
    """Twilio SMS 通知服務"""

    API_BASE = "https://api.twilio.com/2010-04-01"
    max_message_length = 1600

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        to_number: str,
        timeout: float = 10,
    ):
        if not account_sid or not auth_token:
            raise ValueError("TWILIO_ACCOUNT_SID and TWILIO_AUTH_TOKEN must be set")
        if not from_number or not to_number:
            raise ValueError("FROM_NUMBER and TO_NUMBER must be set")

        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.to_number = to_number
        self.timeout = timeout

    @property
    def messages_url(self) -> str:
        return f"{self.API_BASE}/Accounts/{self.account_sid}/Messages.json"

    def send(
        self,
        body: str,
        from_number: Optional[str] = None,
        to_number: Optional[str] = None,
    ) -> None:
        """
        發送 SMS

        Args:
            body: 訊息內容
            from_number: 發送號碼，預設使用建構時的號碼
            to_number: 接收號碼，預設使用建構時的號碼
        """
        self._check_length(body)

        data = {
            "Body": body,
            "From": from_number or self.from_number,
            "To": to_number or self.to_number,
        }
        try:
            response = requests.post(
                self.messages_url,
                data=data,
                auth=(self.account_sid, self.auth_token),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(f"Failed to send SMS to {data['To']}: {e}") from e

        logger.debug("SMS sent to %s (%d characters)", data["To"], len(body))


class TelegramNotifier(Notifier):
    """Telegram 通知服務"""

    max_message_length = 4096

    def __init__(self, bot_token: str, chat_id: str, timeout: float = 10):
        if not bot_token or not chat_id:
            raise ValueError("TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID must be set")
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.timeout = timeout

    def send(self, body: str) -> None:
        """發送純文字訊息（不使用 parse_mode，刊登標題不需跳脫）"""
        self._check_length(body)

        url = f"https://api.telegram.org/bot{self.bot_token}/sendMessage"
        data = {"chat_id": self.chat_id, "text": body, "disable_web_page_preview": True}

        try:
            response = requests.post(url, json=data, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(f"Failed to send Telegram message: {e}") from e

        logger.debug("Telegram message sent to %s (%d characters)", self.chat_id, len(body))


def create_notifier(settings: TransportSettings) -> Notifier:
    """
    根據設定建立通知服務

    Raises:
        ValueError: 憑證不完整或傳輸方式未知時
    """
    if settings.transport == "twilio":
        return TwilioSmsNotifier(
            account_sid=settings.twilio_account_sid,
            auth_token=settings.twilio_auth_token,
            from_number=settings.from_number,
            to_number=settings.to_number,
        )
    elif settings.transport == "telegram":
        return TelegramNotifier(
            bot_token=settings.telegram_bot_token,
            chat_id=settings.telegram_chat_id,
        )
    else:
        raise ValueError(f"Unknown transport: {settings.transport}")
