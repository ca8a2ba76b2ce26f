"""Thin JSON-over-HTTP client on urllib, shared by the provider adapters."""

from __future__ import annotations

import json
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Mapping
from typing import Any

from loguru import logger

from resolve.errors import HTTPStatusError, TransportError


class JsonHTTPClient:
    def __init__(self, *, timeout: float = 15, user_agent: str = "broadcast-finder/0.1") -> None:
        self.timeout = timeout
        self.user_agent = user_agent

    @staticmethod
    def build_url(url: str, params: Mapping[str, Any] | None = None) -> str:
        if not params:
            return url
        query = urllib.parse.urlencode({k: v for k, v in params.items() if v is not None})
        return f"{url}?{query}"

    def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        body: Mapping[str, Any] | None = None,
    ) -> dict:
        full_url = self.build_url(url, params)
        hdrs = {"Accept": "application/json", "User-Agent": self.user_agent}
        hdrs.update(headers or {})
        data = None
        if body is not None:
            data = json.dumps(body).encode("utf-8")
            hdrs["Content-Type"] = "application/json"
        elif method.upper() == "POST":
            data = b""
        req = urllib.request.Request(full_url, data=data, headers=hdrs, method=method.upper())
        logger.debug("HTTP {} {}", method.upper(), url)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                payload = resp.read()
        except urllib.error.HTTPError as e:
            try:
                txt = e.read().decode("utf-8", errors="ignore")
            except Exception:
                txt = str(e.reason)
            logger.warning("HTTP {} {} -> {}", method.upper(), url, e.code)
            raise HTTPStatusError(e.code, txt, url=url) from e
        except (urllib.error.URLError, TimeoutError, OSError) as e:
            logger.warning("通信エラー {} {}: {}", method.upper(), url, e)
            raise TransportError(f"{method.upper()} {url}: {e}") from e

        if not payload:
            return {}
        try:
            return json.loads(payload)
        except ValueError as e:
            raise TransportError(f"不正な JSON 応答: {url}") from e

    def get(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> dict:
        return self.request("GET", url, params=params, headers=headers)

    def post(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        body: Mapping[str, Any] | None = None,
    ) -> dict:
        return self.request("POST", url, params=params, headers=headers, body=body)
