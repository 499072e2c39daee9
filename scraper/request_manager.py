"""
RequestManager Module
=====================

Wraps a single httpx.AsyncClient carrying the user's Moodle session cookies.
Requests that are rate limited (HTTP 429) are retried with exponential backoff;
every other failure is raised to the caller.
"""

import asyncio
from typing import Mapping, Optional
from urllib.parse import urlencode, urljoin, urlsplit

import httpx

from models.exam_errors import NetworkError
from scraper.extractor import extract_login_token

DEFAULT_BASE_URL = "https://expansao.educacao.sp.gov.br"
DEFAULT_MAX_RETRIES = 3
TOO_MANY_REQUESTS = 429


class RequestManager:
    def __init__(self, base_url: str = DEFAULT_BASE_URL, max_retries: int = DEFAULT_MAX_RETRIES,
                 cookies: Optional[Mapping[str, str]] = None, client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url
        self.max_retries = max_retries
        if client is None:
            client = httpx.AsyncClient(
                headers={
                    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64)"
                },
                follow_redirects=True,
                timeout=60.0
            )
        if cookies:
            client.cookies.update(cookies)
        self.client = client

    async def fetch_with_retry(self, url: str, method: str = "GET", retries: Optional[int] = None,
                               **options) -> httpx.Response:
        """
        Sends a request and returns the final response of the redirect chain.

        A 429 answer with retries left waits 2 ** (max_retries - retries) seconds
        before trying again, so successive delays are 1s, 2s, 4s, ...
        """
        if retries is None:
            retries = self.max_retries

        try:
            response = await self.client.request(method, url, **options)
            if not response.is_success:
                raise NetworkError(response.status_code, str(response.url))
            return response
        except NetworkError as e:
            if retries > 0 and e.status_code == TOO_MANY_REQUESTS:
                delay = 2 ** (self.max_retries - retries)
                await asyncio.sleep(delay)
                return await self.fetch_with_retry(url, method, retries - 1, **options)
            raise

    def create_url(self, path: str, params: Optional[Mapping[str, str]] = None) -> str:
        url = urljoin(self.base_url, path)
        if params:
            separator = "&" if urlsplit(url).query else "?"
            url = f"{url}{separator}{urlencode(list(params.items()))}"
        return url

    async def login(self, username: str, password: str) -> bool:
        """Opens a Moodle session with username and password instead of a browser cookie."""
        login_url = self.create_url("/login/index.php")
        resp = await self.fetch_with_retry(login_url)
        token = extract_login_token(resp.text)
        if not token:
            return False

        payload = {
            "username": username,
            "password": password,
            "logintoken": token
        }
        r2 = await self.fetch_with_retry(login_url, method="POST", data=payload)
        return "sesskey" in r2.text or "login/logout.php" in r2.text

    async def close(self):
        """Closes the async client session."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
