"""
Feishu Docx Synchronization Operations

The document flows behind the MCP tools: create, replace (write), append,
single block update/delete, plus the read-only helpers. Each flow is a fixed
sequence of remote calls; remote failures propagate as exceptions.
"""
import logging
from typing import Any, Dict, List, Optional

from auth.feishu_client import FeishuClient
from auth.scopes import GRANT_STATUS_GRANTED, get_tools_missing_scopes
from core.config import FeishuConfig
from feishu_docx.docx_blocks import (
    BLOCK_TYPE_PAGE,
    filter_blocks_for_insert,
    structured_type_names,
    summarize_block_types,
)
from feishu_docx.docx_images import Downloader, ImageResolutionReport, download_image, resolve_images
from feishu_docx.docx_models import (
    AppendDocResponse,
    AppScope,
    AppScopesResponse,
    CreateDocResponse,
    DeleteBlockResponse,
    FolderFile,
    FolderListResponse,
    GetBlockResponse,
    ImageFailure,
    ListBlocksResponse,
    ReadDocResponse,
    UpdateBlockResponse,
    WriteDocResponse,
)
from feishu_docx.docx_service import (
    convert_markdown,
    create_block_children,
    create_document,
    delete_block_children,
    get_block,
    get_document,
    get_raw_content,
    list_app_scopes,
    list_block_children,
    list_document_blocks,
    list_folder_files,
    patch_block,
)

logger = logging.getLogger(__name__)


class DocxSyncError(RuntimeError):
    """Base class for precondition failures detected by the sync flows."""


class EmptyContentError(DocxSyncError):
    def __init__(self):
        super().__init__("Content is empty")


class BlockNotFoundError(DocxSyncError):
    def __init__(self, block_id: str):
        super().__init__("Block not found")
        self.block_id = block_id


class DocumentClearedError(DocxSyncError):
    """The document was emptied but the new content could not be inserted."""

    def __init__(self, document_id: str, blocks_deleted: int, cause: Exception):
        super().__init__(
            f"Document {document_id} was cleared ({blocks_deleted} blocks deleted) "
            f"but not repopulated: {cause}"
        )
        self.document_id = document_id
        self.blocks_deleted = blocks_deleted


def skipped_types_warning(skipped: List[str]) -> Optional[str]:
    if not skipped:
        return None
    return f"Skipped unsupported block types: {', '.join(skipped)}. Tables are not supported via this API."


def image_failures(report: ImageResolutionReport) -> Optional[List[ImageFailure]]:
    failed = report.failed
    if not failed:
        return None
    return [ImageFailure(url=o.url, block_id=o.block_id, error=o.error or "unknown error") for o in failed]


async def insert_markdown_blocks(client: FeishuClient, document_id: str, blocks: List[Dict[str, Any]]):
    """Filter converted blocks and insert the remaining ones under the page root."""
    filtered = filter_blocks_for_insert(blocks)
    if not filtered.blocks:
        return [], filtered.skipped
    inserted = await create_block_children(client, document_id, filtered.blocks)
    return inserted, filtered.skipped


async def clear_document(client: FeishuClient, document_id: str) -> int:
    """
    Delete every direct child of the page root.

    Returns:
        Number of blocks deleted
    """
    items = await list_document_blocks(client, document_id)
    child_ids = [
        b.get("block_id") for b in items
        if b.get("parent_id") == document_id and b.get("block_type") != BLOCK_TYPE_PAGE and b.get("block_id")
    ]

    if child_ids:
        await delete_block_children(client, document_id, document_id, 0, len(child_ids))

    logger.info(f"[clear_document] Deleted {len(child_ids)} block(s) from {document_id}")
    return len(child_ids)


async def read_doc(client: FeishuClient, document_id: str) -> ReadDocResponse:
    content = await get_raw_content(client, document_id)
    document = await get_document(client, document_id)
    blocks = await list_document_blocks(client, document_id)

    structured = structured_type_names(blocks)
    hint = None
    if structured:
        hint = (
            f"This document contains {', '.join(structured)} which are NOT included in the plain text above. "
            f"Use feishu_doc_list_blocks to get full content."
        )

    return ReadDocResponse(
        title=document.get("title"),
        content=content,
        revision_id=document.get("revision_id"),
        block_count=len(blocks),
        block_types=summarize_block_types(blocks),
        hint=hint,
    )


async def create_doc(
    client: FeishuClient,
    config: FeishuConfig,
    title: str,
    folder_token: Optional[str] = None,
) -> CreateDocResponse:
    document = await create_document(client, title, folder_token)
    document_id = document.get("document_id")
    logger.info(f"[create_doc] Created document {document_id} '{title}'")
    return CreateDocResponse(
        document_id=document_id,
        title=document.get("title"),
        url=config.doc_url(document_id),
    )


async def write_doc(
    client: FeishuClient,
    document_id: str,
    markdown: str,
    downloader: Downloader = download_image,
) -> WriteDocResponse:
    """
    Replace the whole document with markdown content.

    Clearing and inserting are separate remote operations. If conversion or
    insertion fails after existing blocks were deleted, DocumentClearedError
    is raised and the document is left empty.
    """
    deleted = await clear_document(client, document_id)

    try:
        converted = await convert_markdown(client, markdown)
        if not converted.blocks:
            logger.info(f"[write_doc] Markdown converted to no blocks; {document_id} left empty")
            return WriteDocResponse(success=True, blocks_deleted=deleted, blocks_added=0, images_processed=0)

        inserted, skipped = await insert_markdown_blocks(client, document_id, converted.blocks)
    except Exception as e:
        if deleted:
            raise DocumentClearedError(document_id, deleted, e) from e
        raise

    report = await resolve_images(client, document_id, markdown, inserted, downloader=downloader)

    return WriteDocResponse(
        success=True,
        blocks_deleted=deleted,
        blocks_added=len(inserted),
        images_processed=report.processed,
        warning=skipped_types_warning(skipped),
        image_failures=image_failures(report),
    )


async def append_doc(
    client: FeishuClient,
    document_id: str,
    markdown: str,
    downloader: Downloader = download_image,
) -> AppendDocResponse:
    converted = await convert_markdown(client, markdown)
    if not converted.blocks:
        raise EmptyContentError()

    inserted, skipped = await insert_markdown_blocks(client, document_id, converted.blocks)
    report = await resolve_images(client, document_id, markdown, inserted, downloader=downloader)

    return AppendDocResponse(
        success=True,
        blocks_added=len(inserted),
        images_processed=report.processed,
        block_ids=[b.get("block_id") for b in inserted if b.get("block_id")],
        warning=skipped_types_warning(skipped),
        image_failures=image_failures(report),
    )


async def update_block(client: FeishuClient, document_id: str, block_id: str, content: str) -> UpdateBlockResponse:
    # Fails with the remote error if the block does not exist
    await get_block(client, document_id, block_id)

    await patch_block(client, document_id, block_id, {
        "update_text_elements": {
            "elements": [{"text_run": {"content": content}}],
        },
    })
    return UpdateBlockResponse(success=True, block_id=block_id)


async def delete_block(client: FeishuClient, document_id: str, block_id: str) -> DeleteBlockResponse:
    """Delete one block, locating its position among its parent's current children."""
    block = await get_block(client, document_id, block_id)
    parent_id = block.get("parent_id") or document_id

    siblings = await list_block_children(client, document_id, parent_id)
    index = next((i for i, item in enumerate(siblings) if item.get("block_id") == block_id), -1)
    if index == -1:
        raise BlockNotFoundError(block_id)

    await delete_block_children(client, document_id, parent_id, index, index + 1)
    logger.info(f"[delete_block] Deleted {block_id} at index {index} under {parent_id}")
    return DeleteBlockResponse(success=True, deleted_block_id=block_id)


async def list_blocks(client: FeishuClient, document_id: str) -> ListBlocksResponse:
    return ListBlocksResponse(blocks=await list_document_blocks(client, document_id))


async def get_block_detail(client: FeishuClient, document_id: str, block_id: str) -> GetBlockResponse:
    return GetBlockResponse(block=await get_block(client, document_id, block_id))


async def list_folder(client: FeishuClient, folder_token: str) -> FolderListResponse:
    files = await list_folder_files(client, folder_token)
    return FolderListResponse(files=[
        FolderFile(token=f.get("token"), name=f.get("name"), type=f.get("type"), url=f.get("url"))
        for f in files
    ])


async def list_scopes(client: FeishuClient) -> AppScopesResponse:
    scopes = await list_app_scopes(client)
    granted = [s for s in scopes if s.get("grant_status") == GRANT_STATUS_GRANTED]
    pending = [s for s in scopes if s.get("grant_status") != GRANT_STATUS_GRANTED]

    missing = get_tools_missing_scopes(s.get("scope_name") for s in granted)

    return AppScopesResponse(
        granted=[AppScope(name=s.get("scope_name"), type=s.get("scope_type")) for s in granted],
        pending=[AppScope(name=s.get("scope_name"), type=s.get("scope_type")) for s in pending],
        summary=f"{len(granted)} granted, {len(pending)} pending",
        missing_for_tools=missing or None,
    )
