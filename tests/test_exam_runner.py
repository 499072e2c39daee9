"""Tests for the Streamlit front-end helpers."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from exam_runner import parse_activity_lines, run_activities_async
from scraper.request_manager import RequestManager


class TestParseActivityLines:
    """Test splitting of the activity text areas."""

    def test_skips_blank_lines_and_comments(self):
        text = "\n https://moodle.test/mod/quiz/view.php?id=1 \n# later\n\n2\n"

        assert parse_activity_lines(text) == ["https://moodle.test/mod/quiz/view.php?id=1", "2"]

    def test_handles_empty_input(self):
        assert parse_activity_lines(None) == []
        assert parse_activity_lines("") == []


class TestRunActivities:
    """Test the sequential activity loop."""

    @pytest.mark.asyncio
    async def test_failed_exam_does_not_stop_remaining_activities(self):
        def handler(request):
            if request.url.path == "/mod/resource/view.php":
                return httpx.Response(200)
            return httpx.Response(500)

        def build_manager(base_url, cookies):
            client = httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)
            return RequestManager(base_url=base_url, cookies=cookies, client=client)

        settings = {"base_url": "https://moodle.test", "user": "", "password": "", "session": "abc"}
        status_box = MagicMock()

        with patch("exam_runner.RequestManager", side_effect=build_manager), patch("exam_runner.st"):
            results = await run_activities_async(
                settings,
                ["https://moodle.test/mod/quiz/view.php?id=1", "https://moodle.test/mod/quiz/view.php?id=2"],
                ["10"],
                status_box,
            )

        assert [r["Activity"] for r in results] == [
            "Page 10",
            "https://moodle.test/mod/quiz/view.php?id=1",
            "https://moodle.test/mod/quiz/view.php?id=2",
        ]
        assert results[0]["Result"] == "Completed"
        assert all(r["Result"].startswith("Error") for r in results[1:])
