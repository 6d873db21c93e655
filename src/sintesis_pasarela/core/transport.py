"""
HTTP transport for the Sintesis gateway API.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Mapping, Optional

import requests

from .errors import NetworkError, RequestTimeoutError

__all__ = ["Transport"]

logger = logging.getLogger(__name__)

_DEFAULT_HEADERS = {"Content-Type": "application/json"}


def _encode_body(body: Any) -> Optional[str]:
    if body is None:
        return None
    if isinstance(body, str):
        return body
    return json.dumps(body)


class Transport:
    """
    Issues JSON requests against the gateway and normalizes every failure into
    :class:`NetworkError`.

    ``requests`` is blocking, so each call runs in a worker thread and the
    awaiting coroutine is bounded by the same timeout.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 30.0,
        session: Optional[requests.Session] = None,
        debug: bool = False,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()
        self.debug = debug

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def request(
        self,
        path: str,
        *,
        method: str = "GET",
        headers: Optional[Mapping[str, str]] = None,
        body: Any = None,
    ) -> Any:
        url = self.url_for(path)
        if self.debug:
            logger.debug("HTTP %s %s", method, path)
        try:
            payload = await asyncio.wait_for(
                asyncio.to_thread(self._send, method, url, headers, body),
                timeout=self.timeout_seconds,
            )
        except RequestTimeoutError:
            raise
        except asyncio.TimeoutError as exc:
            raise RequestTimeoutError(
                f"{method} {path} timed out after {self.timeout_seconds:g}s",
                url=url,
            ) from exc
        if self.debug:
            logger.debug("Response from %s: %s", path, payload)
        return payload

    def _send(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]],
        body: Any,
    ) -> Any:
        merged: Dict[str, str] = dict(_DEFAULT_HEADERS)
        if headers:
            merged.update(headers)

        try:
            response = self.session.request(
                method,
                url,
                headers=merged,
                data=_encode_body(body),
                timeout=self.timeout_seconds,
            )
        except requests.Timeout as exc:
            raise RequestTimeoutError(
                f"{method} {url} timed out after {self.timeout_seconds:g}s",
                url=url,
            ) from exc
        except requests.RequestException as exc:
            raise NetworkError(f"{method} {url} failed: {exc}", url=url) from exc

        if response.status_code >= 400:
            raise NetworkError(
                f"Gateway responded with {response.status_code}: {response.text}",
                status_code=response.status_code,
                url=url,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise NetworkError(
                f"Invalid JSON from gateway at {url}: {response.text[:100]}",
                status_code=response.status_code,
                url=url,
            ) from exc
