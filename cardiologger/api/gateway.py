from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from http.client import HTTPException
from typing import Any, Literal
from urllib.parse import quote

from ..credentials import CredentialStore
from ..errors import ApiResponseError, MissingApiKeyError, TransportError
from . import http_client

logger = logging.getLogger("cardiologger.api")

Method = Literal["GET", "POST"]

API_KEY_HEADER = "X-API-Key"


def endpoint(*segments: str) -> str:
    """Join path segments, percent-encoding each one so ids cannot add path parts."""

    return "/" + "/".join(quote(str(segment), safe="") for segment in segments)


class ApiGateway:
    """Authenticated JSON calls against the cardio logger API.

    The API key is read from the credential store on every call so that a
    login or logout takes effect on the very next request.
    """

    def __init__(
        self,
        base_url: str,
        credentials: CredentialStore,
        *,
        timeout_s: float = 10.0,
    ) -> None:
        self.base_url = http_client.build_base_url(base_url)
        self.credentials = credentials
        self.timeout_s = timeout_s

    async def call(
        self,
        endpoint: str,
        method: Method = "GET",
        params: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        api_key = self.credentials.get().api_key
        if not api_key:
            raise MissingApiKeyError("no API key stored")

        headers = {API_KEY_HEADER: api_key}
        if method == "GET":
            url = http_client.build_url(self.base_url, endpoint, params)
            body = None
        else:
            url = http_client.build_url(self.base_url, endpoint)
            body = dict(params) if params else None

        logger.debug("%s %s", method, url)
        try:
            status, payload = await asyncio.to_thread(
                http_client.request_json,
                method,
                url,
                headers=headers,
                body=body,
                timeout_s=self.timeout_s,
            )
        except (OSError, ValueError, HTTPException) as exc:
            raise TransportError(f"{method} {endpoint} failed: {exc}") from exc

        if payload is not None and payload.get("error"):
            raise ApiResponseError(
                f"{method} {endpoint} returned error: {payload['error']}",
                status=status,
                error=payload["error"],
            )
        if status >= 400:
            raise TransportError(f"{method} {endpoint} returned HTTP {status}", status=status)
        return payload or {}
