"""
Slack Notifier
Posts deployment outcomes to a Slack incoming webhook
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

import aiohttp

logger = logging.getLogger(__name__)


class SlackNotifier:
    def __init__(self, webhook_url: Optional[str] = None, timeout: float = 10.0):
        self.webhook_url = webhook_url
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    async def send(self, message: str, color: str = "good"):
        """Send notification to Slack; failures are logged, never raised"""
        if not self.enabled:
            return

        payload = {
            "text": "🚀 Stablecoin Deployment",
            "attachments": [
                {
                    "color": color,
                    "fields": [
                        {
                            "title": "Message",
                            "value": message,
                            "short": False
                        },
                        {
                            "title": "Time",
                            "value": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
                            "short": True
                        }
                    ]
                }
            ]
        }

        try:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.webhook_url, json=payload) as response:
                    if response.status == 200:
                        logger.info("Slack notification sent successfully")
                    else:
                        logger.error(f"Failed to send Slack notification: {response.status}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Error sending Slack notification: {e}")
