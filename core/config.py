"""
Feishu Plugin Configuration

Loads the Feishu application credentials and server settings from the environment.
"""
import os
import logging
from typing import Literal, Optional, Tuple

from dotenv import load_dotenv, find_dotenv
from pydantic import BaseModel, ConfigDict, Field

# Load environment variables from .env file
load_dotenv(find_dotenv())

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

FEISHU_DOMAINS = {
    "feishu": "https://open.feishu.cn",
    "lark": "https://open.larksuite.com",
}

DOC_URL_BASES = {
    "feishu": "https://feishu.cn/docx",
    "lark": "https://larksuite.com/docx",
}


class FeishuConfig(BaseModel):
    """Feishu channel configuration (only the fields the doc tools need)"""
    model_config = ConfigDict(populate_by_name=True)

    enabled: bool = Field(default=True, description="Whether the Feishu channel is enabled")
    app_id: Optional[str] = Field(default=None, alias="appId", description="Feishu application ID")
    app_secret: Optional[str] = Field(default=None, alias="appSecret", description="Feishu application secret")
    domain: Literal["feishu", "lark"] = Field(default="feishu", description="Feishu (China) or Lark (international)")
    request_timeout: float = Field(default=30.0, alias="requestTimeout", description="HTTP timeout in seconds")

    @property
    def base_url(self) -> str:
        return FEISHU_DOMAINS[self.domain]

    def doc_url(self, document_id: str) -> str:
        return f"{DOC_URL_BASES[self.domain]}/{document_id}"


def check_doc_tools_capability(config: Optional[FeishuConfig]) -> Tuple[bool, str]:
    """
    Decide whether the document tools can be registered.

    Returns:
        Tuple of (enabled, reason). The reason explains why the tools are disabled,
        or is "ok" when they are enabled.
    """
    if config is None:
        return False, "Feishu channel is not configured"
    if not config.enabled:
        return False, "Feishu channel is disabled"
    if not config.app_id or not config.app_secret:
        return False, "Feishu credentials not configured"
    return True, "ok"


def load_config() -> FeishuConfig:
    """Build a FeishuConfig from FEISHU_* environment variables."""
    return FeishuConfig(
        enabled=os.getenv("FEISHU_ENABLED", "true").lower() not in ("0", "false", "no"),
        app_id=os.getenv("FEISHU_APP_ID") or None,
        app_secret=os.getenv("FEISHU_APP_SECRET") or None,
        domain=os.getenv("FEISHU_DOMAIN", "feishu").lower(),
        request_timeout=float(os.getenv("FEISHU_REQUEST_TIMEOUT", 30)),
    )


def setup_logging():
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
