import asyncio
import logging
from typing import Any, Hashable, List, Optional

import aiohttp

from core.models import Article, Comment, article_from_json, comment_from_json

log = logging.getLogger("smartreader.service")


class ServiceError(Exception):
    """A failed call to the article service, with a reason fit for display."""

    def __init__(self, reason: str, status: Optional[int] = None):
        super().__init__(reason)
        self.reason = reason
        self.status = status


class ArticleServiceClient:
    """Thin async client for the article, summary and comment endpoints."""

    name = "article-service"

    def __init__(self, base_url: str, timeout: float = 20):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def _request(self, method: str, path: str, failure: str,
                       json_body: Any = None, as_text: bool = False) -> Any:
        sess = await self._ensure_session()
        url = f"{self.base_url}{path}"
        try:
            async with sess.request(method, url, json=json_body) as resp:
                if resp.status < 200 or resp.status >= 300:
                    body = await resp.text()
                    log.warning("%s %s -> status=%s body=%s", method, url, resp.status, body[:600])
                    raise ServiceError(f"{failure} (HTTP {resp.status})", status=resp.status)
                if as_text:
                    return await resp.text()
                return await resp.json(content_type=None)
        except ServiceError:
            raise
        except asyncio.TimeoutError:
            log.warning("%s %s -> timeout after %ss", method, url, self.timeout)
            raise ServiceError(f"{failure} (timed out)")
        except aiohttp.ClientError as e:
            log.warning("%s %s -> %s", method, url, e)
            raise ServiceError(f"{failure} ({e.__class__.__name__})")
        except ValueError as e:
            log.warning("%s %s -> undecodable body: %s", method, url, e)
            raise ServiceError(f"{failure} (invalid response)")

    async def fetch_articles(self) -> List[Article]:
        data = await self._request(
            "GET", "/articles",
            failure="Could not reach the article server. Make sure the backend is running",
        )
        if not isinstance(data, list):
            raise ServiceError("Could not read the article list (invalid response)")
        try:
            return [article_from_json(item) for item in data]
        except ValueError as e:
            log.warning("Malformed article payload: %s", e)
            raise ServiceError("Could not read the article list (invalid response)")

    async def fetch_summary(self, article_id: Hashable) -> str:
        return await self._request(
            "GET", f"/ai/articles/{article_id}/summary",
            failure="Could not fetch the summary from the server",
            as_text=True,
        )

    async def post_comment(self, article_id: Hashable, text: str, user_id: Hashable) -> Comment:
        payload = {
            "text": text,
            "user": {"id": user_id},
            "article": {"id": article_id},
        }
        data = await self._request(
            "POST", "/comments",
            failure="Could not save the comment",
            json_body=payload,
        )
        try:
            return comment_from_json(data)
        except ValueError as e:
            log.warning("Malformed comment payload: %s", e)
            raise ServiceError("Could not save the comment (invalid response)")
