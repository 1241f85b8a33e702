"""
Staff notification for tables asking for a human server
"""
import logging
from typing import Optional

import aiohttp

from tableside.config.settings import STAFF_WEBHOOK_URL
from tableside.models.order_models import utc_now

logger = logging.getLogger(__name__)


class StaffNotifier:
    def __init__(self, webhook_url: Optional[str] = STAFF_WEBHOOK_URL, timeout: float = 5.0):
        self.webhook_url = webhook_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def notify(self, session_id: str, table_id: Optional[str], reason: str) -> bool:
        """Tell staff a table needs help; returns whether a channel accepted it"""
        logger.warning(f"Human assistance requested at table {table_id} (session {session_id}): {reason}")

        if not self.webhook_url:
            return False

        payload = {
            "sessionId": session_id,
            "tableId": table_id,
            "reason": reason,
            "requestedAt": utc_now(),
        }
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(self.webhook_url, json=payload) as response:
                    if response.status >= 400:
                        logger.error(f"Staff webhook returned {response.status}")
                        return False
                    return True
        except aiohttp.ClientError as e:
            logger.error(f"Error notifying staff: {str(e)}")
            return False
