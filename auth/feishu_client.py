"""
Feishu Open API Client

Thin async HTTP client for the Feishu/Lark open platform. Every response is
checked for a zero ``code``; anything else raises FeishuAPIError with the
remote message. No retries are attempted here.
"""
import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from core.config import FeishuConfig

logger = logging.getLogger(__name__)

TENANT_TOKEN_PATH = "/open-apis/auth/v3/tenant_access_token/internal"


class FeishuAPIError(RuntimeError):
    """Raised when the Feishu open API answers with a non-zero code."""

    def __init__(self, code: int, msg: str):
        super().__init__(msg or f"Feishu API error (code {code})")
        self.code = code
        self.msg = msg


def check_response(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Raise FeishuAPIError unless payload['code'] == 0, else return payload['data'] (or {})."""
    code = payload.get("code", -1)
    if code != 0:
        raise FeishuAPIError(code, payload.get("msg", ""))
    return payload.get("data") or {}


class FeishuClient:
    """
    Async client bound to one Feishu application.

    Use as an async context manager; the tenant access token is fetched lazily
    on the first request and reused for the lifetime of the handle.
    """

    def __init__(self, config: FeishuConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.base_url = config.base_url
        self._tenant_token: Optional[str] = None
        self._token_lock = asyncio.Lock()
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(config.request_timeout, connect=10.0),
            transport=transport,
        )

    async def __aenter__(self) -> "FeishuClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.aclose()

    async def _get_tenant_token(self) -> str:
        async with self._token_lock:
            if self._tenant_token:
                return self._tenant_token

            response = await self._http.post(
                TENANT_TOKEN_PATH,
                json={"app_id": self.config.app_id, "app_secret": self.config.app_secret},
            )
            response.raise_for_status()
            payload = response.json()
            if payload.get("code", -1) != 0:
                raise FeishuAPIError(payload.get("code", -1), payload.get("msg", ""))

            self._tenant_token = payload["tenant_access_token"]
            logger.debug(f"[FeishuClient] Obtained tenant access token (expires in {payload.get('expire')}s)")
            return self._tenant_token

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Call an open API endpoint and return its ``data`` object.

        Args:
            method: HTTP method
            path: Path below /open-apis (e.g. "/docx/v1/documents")
            params: Query parameters
            json: JSON body
            data: Form fields (multipart uploads)
            files: Multipart files

        Raises:
            FeishuAPIError: If the API reports a non-zero code
            httpx.HTTPError: On transport failures or non-JSON error responses
        """
        token = await self._get_tenant_token()
        url = f"/open-apis{path}"
        logger.debug(f"[FeishuClient] {method} {url}")

        response = await self._http.request(
            method,
            url,
            params=params,
            json=json,
            data=data,
            files=files,
            headers={"Authorization": f"Bearer {token}"},
        )

        try:
            payload = response.json()
        except ValueError:
            response.raise_for_status()
            raise

        return check_response(payload)

    async def paginate(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        key: str = "items",
        page_size: int = 500,
    ) -> list:
        """GET a paged list endpoint, following page_token until has_more is false."""
        query = dict(params or {})
        query.setdefault("page_size", page_size)
        results: list = []

        while True:
            data = await self.request("GET", path, params=query)
            results.extend(data.get(key) or [])

            page_token = data.get("page_token") or data.get("next_page_token")
            if not data.get("has_more") or not page_token:
                break
            query["page_token"] = page_token

        return results
