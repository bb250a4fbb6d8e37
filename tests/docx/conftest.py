"""
Shared fixtures: an in-process fake of the Feishu open API served through httpx.MockTransport.
"""
import json
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest

from auth.feishu_client import FeishuClient, TENANT_TOKEN_PATH
from core.config import FeishuConfig

DOC = "D1"
API = "/open-apis"

Payload = Union[Dict[str, Any], Callable[[httpx.Request], Dict[str, Any]]]


def ok(data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {"code": 0, "msg": "success", "data": data or {}}


def fail(code: int, msg: str) -> Dict[str, Any]:
    return {"code": code, "msg": msg}


class FakeFeishuApi:
    """Routes requests by (method, path) to canned payloads and records every call."""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Payload] = {}
        self.calls: List[Tuple[str, str, Any]] = []
        self.token_requests = 0

    def on(self, method: str, path: str, payload: Payload) -> "FakeFeishuApi":
        self.routes[(method, API + path)] = payload
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == TENANT_TOKEN_PATH:
            self.token_requests += 1
            return httpx.Response(200, json={"code": 0, "tenant_access_token": "t-token", "expire": 7200})

        assert request.headers["Authorization"] == "Bearer t-token"

        body: Any = None
        if request.headers.get("content-type", "").startswith("application/json"):
            body = json.loads(request.content)
        self.calls.append((request.method, path, body))

        payload = self.routes.get((request.method, path))
        if payload is None:
            return httpx.Response(404, json=fail(404, f"no route for {request.method} {path}"))
        if callable(payload):
            payload = payload(request)
        return httpx.Response(200, json=payload)

    def client(self) -> FeishuClient:
        return FeishuClient(CONFIG, transport=httpx.MockTransport(self.handler))

    def calls_to(self, method: str, path: str) -> List[Any]:
        return [body for m, p, body in self.calls if m == method and p == API + path]


CONFIG = FeishuConfig(app_id="cli_test", app_secret="secret")


@pytest.fixture
def api() -> FakeFeishuApi:
    return FakeFeishuApi()


@pytest.fixture
async def client(api):
    async with api.client() as c:
        yield c


def text_block(block_id: str, parent_id: str = DOC, content: str = "text") -> Dict[str, Any]:
    return {
        "block_id": block_id,
        "parent_id": parent_id,
        "block_type": 2,
        "text": {"elements": [{"text_run": {"content": content}}]},
    }


def image_block(block_id: str, parent_id: str = DOC) -> Dict[str, Any]:
    return {"block_id": block_id, "parent_id": parent_id, "block_type": 27, "image": {}}


def page_block(document_id: str = DOC, children: Optional[List[str]] = None) -> Dict[str, Any]:
    return {"block_id": document_id, "block_type": 1, "children": children or [], "page": {}}


def echo_children(request: httpx.Request) -> Dict[str, Any]:
    """Create-children handler returning the submitted blocks with fresh IDs."""
    children = json.loads(request.content)["children"]
    inserted = [
        dict(block, block_id=f"new_{i}", parent_id=DOC)
        for i, block in enumerate(children)
    ]
    return ok({"children": inserted, "document_revision_id": 2})


def make_downloader(images: Dict[str, bytes], failing: Optional[Dict[str, str]] = None):
    failing = failing or {}
    fetched: List[str] = []

    async def downloader(url: str) -> bytes:
        fetched.append(url)
        if url in failing:
            raise RuntimeError(failing[url])
        return images[url]

    downloader.fetched = fetched
    return downloader
