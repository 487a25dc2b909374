"""
HTTP client for the auth endpoints.

Every non-2xx answer is raised as ``AuthRequestError`` carrying the server's
``message`` verbatim, so the UI can show it as-is.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

UNREACHABLE_MESSAGE = "Unable to reach the server"
UNEXPECTED_RESPONSE_MESSAGE = "Unexpected response from server"


class AuthRequestError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class AuthClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def register(
        self, first_name: str, last_name: str, email: str, password: str
    ) -> Dict[str, Any]:
        return await self._post(
            "/api/auth/register",
            {"firstName": first_name, "lastName": last_name, "email": email, "password": password},
        )

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        return await self._post("/api/auth/login", {"email": email, "password": password})

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"Accept": "application/json"},
            ) as client:
                resp = await client.post(path, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("POST %s failed: %s", path, exc.__class__.__name__)
            raise AuthRequestError(UNREACHABLE_MESSAGE) from exc

        try:
            body = resp.json()
        except ValueError:
            body = {}

        if not isinstance(body, dict):
            body = {}

        if resp.is_error:
            raise AuthRequestError(
                body.get("message") or resp.reason_phrase, status_code=resp.status_code
            )

        data = body.get("data")
        if not body.get("token") or not isinstance(data, dict) or not isinstance(data.get("user"), dict):
            raise AuthRequestError(UNEXPECTED_RESPONSE_MESSAGE, status_code=resp.status_code)
        return body
