"""Shared test fixtures and configuration for pytest."""

import httpx
import pytest
import pytest_asyncio

from scraper.request_manager import RequestManager

BASE_URL = "https://moodle.test"


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest_asyncio.fixture
async def make_manager():
    """Build RequestManagers whose clients answer through an httpx.MockTransport handler."""
    managers = []

    def _make(handler, **kwargs) -> RequestManager:
        kwargs.setdefault("base_url", BASE_URL)
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)
        manager = RequestManager(client=client, **kwargs)
        managers.append(manager)
        return manager

    yield _make

    for manager in managers:
        await manager.close()


@pytest.fixture
def question_page():
    """Render a minimal quiz attempt form from hidden (name, value) and radio (name, value) pairs."""

    def _render(hidden=(), radios=()) -> str:
        inputs = [f'<input type="hidden" name="{name}" value="{value}">' for name, value in hidden]
        inputs += [f'<input type="radio" name="{name}" value="{value}">' for name, value in radios]
        return (
            "<html><body><form action=\"processattempt.php\" method=\"post\">"
            + "".join(inputs)
            + "</form></body></html>"
        )

    return _render


@pytest.fixture
def sample_question_html(question_page) -> str:
    """A single multiple-choice question with three real options and the clear-choice entry."""
    return question_page(
        hidden=[
            ("q12:1_:sequencecheck", "1"),
            ("attempt", "99"),
            ("sesskey", "abc"),
            ("thispage", "0"),
            ("nextpage", "-1"),
            ("timeup", "0"),
            ("mdlscrollto", ""),
            ("slots", "1"),
            ("q12:1_:flagged", "0"),
        ],
        radios=[
            ("q12:1_answer", "-1"),
            ("q12:1_answer", "0"),
            ("q12:1_answer", "1"),
            ("q12:1_answer", "2"),
        ],
    )
