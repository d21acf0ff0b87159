"""
Reporting - Report Publisher.

============================================================
PURPOSE
============================================================
Posts a short epoch summary to Discord and/or Telegram.

This is a notification-only client. A failed post is logged
and reported as False; it never fails the epoch.

============================================================
"""

import asyncio
import html
import logging
from typing import Dict, Optional

import aiohttp

from .types import EpochReport


logger = logging.getLogger(__name__)


TELEGRAM_BASE_URL = "https://api.telegram.org/bot"


def format_report_summary(report: EpochReport) -> str:
    """Short multi-line summary for chat channels."""
    a = report.allocations
    failed = sum(1 for action in report.actions if action.error)

    lines = [
        f"Ice Protocol - Epoch {report.epoch_number}",
        f"Health: {report.ice_health.health:.2f}/100 ({report.ice_health.status.value})",
        f"Fees: {report.fees_detected:.4f} SOL",
        f"Buyback {a.buyback:.4f} | LP {a.lp:.4f} | Burn {a.burn:.4f} | Cooling {a.cooling:.4f}",
        f"Actions: {len(report.actions)} ({failed} failed)",
    ]
    return "\n".join(lines)


class ReportPublisher:
    """Publishes epoch summaries to configured chat channels."""

    def __init__(
        self,
        discord_webhook_url: Optional[str] = None,
        telegram_bot_token: Optional[str] = None,
        telegram_chat_id: Optional[str] = None,
        timeout_seconds: float = 10.0,
    ):
        self._discord_webhook_url = discord_webhook_url or ""
        self._telegram_bot_token = telegram_bot_token or ""
        self._telegram_chat_id = telegram_chat_id or ""
        self._timeout_seconds = timeout_seconds
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def discord_enabled(self) -> bool:
        return bool(self._discord_webhook_url)

    @property
    def telegram_enabled(self) -> bool:
        return bool(self._telegram_bot_token and self._telegram_chat_id)

    @property
    def enabled(self) -> bool:
        return self.discord_enabled or self.telegram_enabled

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout_seconds),
            )
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def publish(self, report: EpochReport) -> Dict[str, bool]:
        """Publish to every configured channel; returns per-channel success."""
        results: Dict[str, bool] = {}
        message = format_report_summary(report)

        if self.discord_enabled:
            results["discord"] = await self.publish_to_discord(message)
        if self.telegram_enabled:
            results["telegram"] = await self.publish_to_telegram(message)

        return results

    async def publish_to_discord(self, message: str) -> bool:
        return await self._post(
            "Discord",
            self._discord_webhook_url,
            {"content": message},
        )

    async def publish_to_telegram(self, message: str) -> bool:
        return await self._post(
            "Telegram",
            f"{TELEGRAM_BASE_URL}{self._telegram_bot_token}/sendMessage",
            {
                "chat_id": self._telegram_chat_id,
                "text": html.escape(message),
                "parse_mode": "HTML",
                "disable_web_page_preview": True,
            },
        )

    async def _post(self, channel: str, url: str, payload: Dict) -> bool:
        try:
            session = await self._get_session()

            async with session.post(url, json=payload) as response:
                if response.status in (200, 204):
                    logger.debug(f"{channel} report published")
                    return True

                body = await response.text()
                logger.error(f"{channel} API error: {response.status} - {body}")
                return False

        except aiohttp.ClientError as e:
            logger.error(f"Error publishing report to {channel}: {e}")
            return False
        except asyncio.TimeoutError:
            logger.error(f"Timed out publishing report to {channel}")
            return False


__all__ = [
    "TELEGRAM_BASE_URL",
    "format_report_summary",
    "ReportPublisher",
]
