"""Tests for the best-effort page completion service."""

from unittest.mock import MagicMock

import httpx
import pytest

from scraper.page_completion import PageCompletionService


class TestMarkPageAsCompleted:
    """Test that page visits never raise."""

    @pytest.mark.asyncio
    async def test_visits_resource_page(self, make_manager):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, text="<html></html>")

        service = PageCompletionService(make_manager(handler), logger=MagicMock())

        assert await service.mark_page_as_completed("314") is True
        assert str(seen[0].url) == "https://moodle.test/mod/resource/view.php?id=314"
        assert seen[0].headers["accept"] == "text/html"

    @pytest.mark.asyncio
    async def test_http_failure_is_logged_and_swallowed(self, make_manager):
        logger = MagicMock()
        service = PageCompletionService(make_manager(lambda request: httpx.Response(404)), logger=logger)

        assert await service.mark_page_as_completed("314") is False
        logger.error.assert_called_once()

    @pytest.mark.asyncio
    async def test_transport_failure_is_logged_and_swallowed(self, make_manager):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        logger = MagicMock()
        service = PageCompletionService(make_manager(handler), logger=logger)

        assert await service.mark_page_as_completed("314") is False
        logger.error.assert_called_once()
