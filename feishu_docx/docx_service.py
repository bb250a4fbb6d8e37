"""
Feishu Docx Service Helper Functions

One function per open API endpoint used by the document tools. Each performs
a single call (list endpoints follow pagination), lets FeishuAPIError
propagate on a non-zero code, and returns only the part of the payload its
caller needs.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from auth.feishu_client import FeishuClient

logger = logging.getLogger(__name__)

IMAGE_PARENT_TYPE = "docx_image"


@dataclass
class ConvertResult:
    """Blocks produced by the markdown convert endpoint (not yet persisted)"""
    blocks: List[Dict[str, Any]] = field(default_factory=list)
    first_level_block_ids: List[str] = field(default_factory=list)


async def convert_markdown(client: FeishuClient, markdown: str) -> ConvertResult:
    """
    Convert markdown into docx blocks using the convert endpoint.

    Args:
        client: Feishu client
        markdown: Markdown source

    Returns:
        ConvertResult with the flat block list and the top-level block IDs
    """
    data = await client.request(
        "POST",
        "/docx/v1/documents/blocks/convert",
        json={"content_type": "markdown", "content": markdown},
    )
    return ConvertResult(
        blocks=data.get("blocks") or [],
        first_level_block_ids=data.get("first_level_block_ids") or [],
    )


async def create_block_children(
    client: FeishuClient,
    document_id: str,
    blocks: List[Dict[str, Any]],
    parent_block_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Insert blocks as children of a parent block (the page root by default).

    Returns:
        The inserted blocks, with their persisted block IDs
    """
    block_id = parent_block_id or document_id
    data = await client.request(
        "POST",
        f"/docx/v1/documents/{document_id}/blocks/{block_id}/children",
        json={"children": blocks},
    )
    children = data.get("children") or []
    logger.info(f"[create_block_children] Inserted {len(children)} block(s) under {block_id}")
    return children


async def list_document_blocks(client: FeishuClient, document_id: str) -> List[Dict[str, Any]]:
    """List every block of a document as a flat list (parent_id / block_type annotated)."""
    return await client.paginate(f"/docx/v1/documents/{document_id}/blocks")


async def list_block_children(client: FeishuClient, document_id: str, block_id: str) -> List[Dict[str, Any]]:
    """List the direct children of a block, in sibling order."""
    return await client.paginate(f"/docx/v1/documents/{document_id}/blocks/{block_id}/children")


async def delete_block_children(
    client: FeishuClient,
    document_id: str,
    parent_block_id: str,
    start_index: int,
    end_index: int,
) -> int:
    """
    Delete the children of a parent block in the half-open range [start_index, end_index).

    Returns:
        Number of blocks deleted
    """
    await client.request(
        "DELETE",
        f"/docx/v1/documents/{document_id}/blocks/{parent_block_id}/children/batch_delete",
        json={"start_index": start_index, "end_index": end_index},
    )
    return end_index - start_index


async def get_block(client: FeishuClient, document_id: str, block_id: str) -> Dict[str, Any]:
    data = await client.request("GET", f"/docx/v1/documents/{document_id}/blocks/{block_id}")
    return data.get("block") or {}


async def patch_block(
    client: FeishuClient,
    document_id: str,
    block_id: str,
    patch: Dict[str, Any],
) -> Dict[str, Any]:
    """Apply an update request (replace_image, update_text_elements, ...) to one block."""
    return await client.request(
        "PATCH",
        f"/docx/v1/documents/{document_id}/blocks/{block_id}",
        json=patch,
    )


async def upload_docx_image(
    client: FeishuClient,
    parent_block_id: str,
    content: bytes,
    file_name: str,
) -> str:
    """
    Upload image bytes as media attached to an image block.

    Returns:
        The media file token

    Raises:
        FeishuAPIError: If the upload fails or no file token is returned
    """
    data = await client.request(
        "POST",
        "/drive/v1/medias/upload_all",
        data={
            "file_name": file_name,
            "parent_type": IMAGE_PARENT_TYPE,
            "parent_node": parent_block_id,
            "size": str(len(content)),
        },
        files={"file": (file_name, content)},
    )
    file_token = data.get("file_token")
    if not file_token:
        raise RuntimeError("Image upload failed: no file_token returned")
    return file_token


async def create_document(
    client: FeishuClient,
    title: str,
    folder_token: Optional[str] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"title": title}
    if folder_token:
        body["folder_token"] = folder_token
    data = await client.request("POST", "/docx/v1/documents", json=body)
    return data.get("document") or {}


async def get_document(client: FeishuClient, document_id: str) -> Dict[str, Any]:
    data = await client.request("GET", f"/docx/v1/documents/{document_id}")
    return data.get("document") or {}


async def get_raw_content(client: FeishuClient, document_id: str) -> str:
    data = await client.request("GET", f"/docx/v1/documents/{document_id}/raw_content")
    return data.get("content") or ""


async def list_folder_files(client: FeishuClient, folder_token: str) -> List[Dict[str, Any]]:
    return await client.paginate(
        "/drive/v1/files",
        params={"folder_token": folder_token},
        key="files",
        page_size=200,
    )


async def list_app_scopes(client: FeishuClient) -> List[Dict[str, Any]]:
    data = await client.request("GET", "/application/v6/scopes")
    return data.get("scopes") or []
