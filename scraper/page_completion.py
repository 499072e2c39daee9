"""
PageCompletionService Module
============================

Visits a resource page so Moodle records it as viewed. This is best effort:
failures are logged and never reach the caller.
"""

import logging
from typing import Optional

import httpx

from models.exam_errors import NetworkError
from scraper.request_manager import RequestManager


class PageCompletionService:
    def __init__(self, request_manager: RequestManager, logger: Optional[logging.Logger] = None):
        self.request_manager = request_manager
        self.logger = logger or logging.getLogger(__name__)

    async def mark_page_as_completed(self, page_id: str) -> bool:
        url = self.request_manager.create_url("/mod/resource/view.php", {"id": page_id})
        try:
            await self.request_manager.fetch_with_retry(url, headers={"Accept": "text/html"})
        except (NetworkError, httpx.HTTPError) as e:
            self.logger.error("Failed to mark page %s as completed: %s", page_id, e)
            return False
        self.logger.info("Page %s marked as completed", page_id)
        return True
