"""
Shared tool utilities.
"""
import functools
import logging
from typing import Any, Callable, Dict

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """Error response for any operation"""
    error: str = Field(description="Error message describing what went wrong")


def handle_feishu_errors(tool_name: str) -> Callable:
    """
    Decorator for MCP tool functions talking to the Feishu open API.

    Pydantic results are dumped to plain dicts (unset optional fields dropped).
    Any exception raised by the wrapped coroutine is logged and converted into
    an ``{"error": message}`` payload so nothing escapes the tool boundary.
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Dict[str, Any]:
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                message = str(e) or e.__class__.__name__
                logger.error(f"[{tool_name}] Failed: {message}", exc_info=True)
                return ErrorResponse(error=message).model_dump()
            if isinstance(result, BaseModel):
                return result.model_dump(exclude_none=True)
            return result
        return wrapper
    return decorator
