"""
Feishu Docx MCP Tools

This module provides MCP tools for reading and writing Feishu/Lark documents
(docx), listing drive folders and inspecting the application's permission scopes.
"""
import logging
from typing import Annotated, Any, Callable, Dict, Optional, Type, Union

from fastmcp import FastMCP
from pydantic import BaseModel, Field, TypeAdapter

from auth.feishu_client import FeishuClient
from core.config import FeishuConfig, check_doc_tools_capability
from core.utils import ErrorResponse, handle_feishu_errors
from feishu_docx import docx_sync
from feishu_docx.docx_models import (
    AppendDocResponse,
    AppScopesResponse,
    CreateDocResponse,
    DeleteBlockResponse,
    FolderListResponse,
    GetBlockResponse,
    ListBlocksResponse,
    ReadDocResponse,
    UpdateBlockResponse,
    WriteDocResponse,
)

logger = logging.getLogger(__name__)

DocToken = Annotated[str, Field(description="Document token (extract from URL /docx/XXX)")]
BlockId = Annotated[str, Field(description="Block ID (get from feishu_doc_list_blocks)")]

ClientFactory = Callable[[], FeishuClient]

TOOL_RESPONSE_MODELS: Dict[str, Type[BaseModel]] = {
    'feishu_doc_read': ReadDocResponse,
    'feishu_doc_create': CreateDocResponse,
    'feishu_doc_write': WriteDocResponse,
    'feishu_doc_append': AppendDocResponse,
    'feishu_doc_update_block': UpdateBlockResponse,
    'feishu_doc_delete_block': DeleteBlockResponse,
    'feishu_doc_list_blocks': ListBlocksResponse,
    'feishu_doc_get_block': GetBlockResponse,
    'feishu_folder_list': FolderListResponse,
    'feishu_app_scopes': AppScopesResponse,
}


def tool_output_schema(model: Type[BaseModel]) -> Dict[str, Any]:
    """Output schema for a tool that returns either the model or an ErrorResponse payload."""
    schema = TypeAdapter(Union[model, ErrorResponse]).json_schema(mode="serialization")
    schema["type"] = "object"
    return schema


def create_doc_tools(config: FeishuConfig, client_factory: Optional[ClientFactory] = None) -> Dict[str, Callable]:
    """
    Build the document tool functions bound to one Feishu configuration.

    Every call opens its own client via client_factory and closes it when done.

    Args:
        config: Feishu configuration with credentials
        client_factory: Returns a new FeishuClient; defaults to FeishuClient(config)

    Returns:
        Dict mapping tool name to the (error-handled) tool coroutine function
    """
    get_client = client_factory or (lambda: FeishuClient(config))

    @handle_feishu_errors("feishu_doc_read")
    async def feishu_doc_read(doc_token: DocToken) -> Dict[str, Any]:
        """
        <description>Reads plain text content and metadata from a Feishu document: title, revision, block count and a per-type block breakdown.</description>

        <limitation>Code blocks, images, tables, sheets, bitables, diagrams and files are not part of the plain text. A hint is returned when such blocks exist; use feishu_doc_list_blocks to read them.</limitation>
        """
        logger.info(f"[feishu_doc_read] Invoked. Doc: '{doc_token}'")
        async with get_client() as client:
            return await docx_sync.read_doc(client, doc_token)

    @handle_feishu_errors("feishu_doc_create")
    async def feishu_doc_create(
        title: Annotated[str, Field(description="Document title")],
        folder_token: Annotated[Optional[str], Field(description="Target folder token (optional)")] = None,
    ) -> Dict[str, Any]:
        """
        <description>Creates a new empty Feishu document, optionally inside a folder. Returns the document ID and URL.</description>
        """
        logger.info(f"[feishu_doc_create] Invoked. Title: '{title}', Folder: '{folder_token}'")
        async with get_client() as client:
            return await docx_sync.create_doc(client, config, title, folder_token)

    @handle_feishu_errors("feishu_doc_write")
    async def feishu_doc_write(
        doc_token: DocToken,
        content: Annotated[str, Field(description="Markdown content to write (replaces entire document content)")],
    ) -> Dict[str, Any]:
        """
        <description>Writes markdown content to a Feishu document, replacing all existing content. Supports headings, lists, code blocks, quotes, links, images and text styling.</description>

        <limitation>Tables are not supported and are skipped with a warning. Images must be reachable http(s) URLs.</limitation>

        <failure_cases>If insertion fails after the existing content was deleted, the document is left empty and the error says so.</failure_cases>
        """
        logger.info(f"[feishu_doc_write] Invoked. Doc: '{doc_token}', Content length: {len(content)}")
        async with get_client() as client:
            return await docx_sync.write_doc(client, doc_token, content)

    @handle_feishu_errors("feishu_doc_append")
    async def feishu_doc_append(
        doc_token: DocToken,
        content: Annotated[str, Field(description="Markdown content to append to end of document")],
    ) -> Dict[str, Any]:
        """
        <description>Appends markdown content to the end of a Feishu document. Supports the same markdown as feishu_doc_write.</description>

        <failure_cases>Fails when the content converts to no blocks.</failure_cases>
        """
        logger.info(f"[feishu_doc_append] Invoked. Doc: '{doc_token}', Content length: {len(content)}")
        async with get_client() as client:
            return await docx_sync.append_doc(client, doc_token, content)

    @handle_feishu_errors("feishu_doc_update_block")
    async def feishu_doc_update_block(
        doc_token: DocToken,
        block_id: BlockId,
        content: Annotated[str, Field(description="New text content")],
    ) -> Dict[str, Any]:
        """
        <description>Replaces the text content of a specific block in a Feishu document.</description>
        """
        logger.info(f"[feishu_doc_update_block] Invoked. Doc: '{doc_token}', Block: '{block_id}'")
        async with get_client() as client:
            return await docx_sync.update_block(client, doc_token, block_id, content)

    @handle_feishu_errors("feishu_doc_delete_block")
    async def feishu_doc_delete_block(doc_token: DocToken, block_id: BlockId) -> Dict[str, Any]:
        """
        <description>Deletes a specific block from a Feishu document.</description>
        """
        logger.info(f"[feishu_doc_delete_block] Invoked. Doc: '{doc_token}', Block: '{block_id}'")
        async with get_client() as client:
            return await docx_sync.delete_block(client, doc_token, block_id)

    @handle_feishu_errors("feishu_doc_list_blocks")
    async def feishu_doc_list_blocks(doc_token: DocToken) -> Dict[str, Any]:
        """
        <description>Lists all blocks in a Feishu document with full content. Use this to read structured content like tables. Returns block_id for use with update/delete/get_block.</description>
        """
        logger.info(f"[feishu_doc_list_blocks] Invoked. Doc: '{doc_token}'")
        async with get_client() as client:
            return await docx_sync.list_blocks(client, doc_token)

    @handle_feishu_errors("feishu_doc_get_block")
    async def feishu_doc_get_block(doc_token: DocToken, block_id: BlockId) -> Dict[str, Any]:
        """
        <description>Gets the detailed content of a specific block by ID.</description>
        """
        logger.info(f"[feishu_doc_get_block] Invoked. Doc: '{doc_token}', Block: '{block_id}'")
        async with get_client() as client:
            return await docx_sync.get_block_detail(client, doc_token, block_id)

    @handle_feishu_errors("feishu_folder_list")
    async def feishu_folder_list(
        folder_token: Annotated[str, Field(description="Folder token")],
    ) -> Dict[str, Any]:
        """
        <description>Lists documents and subfolders in a Feishu drive folder.</description>
        """
        logger.info(f"[feishu_folder_list] Invoked. Folder: '{folder_token}'")
        async with get_client() as client:
            return await docx_sync.list_folder(client, folder_token)

    @handle_feishu_errors("feishu_app_scopes")
    async def feishu_app_scopes() -> Dict[str, Any]:
        """
        <description>Lists the app's current permission scopes, granted and pending, and which document tools lack a required scope.</description>

        <use_case>Debugging permission errors or checking available capabilities.</use_case>
        """
        logger.info(f"[feishu_app_scopes] Invoked")
        async with get_client() as client:
            return await docx_sync.list_scopes(client)

    return {
        'feishu_doc_read': feishu_doc_read,
        'feishu_doc_create': feishu_doc_create,
        'feishu_doc_write': feishu_doc_write,
        'feishu_doc_append': feishu_doc_append,
        'feishu_doc_update_block': feishu_doc_update_block,
        'feishu_doc_delete_block': feishu_doc_delete_block,
        'feishu_doc_list_blocks': feishu_doc_list_blocks,
        'feishu_doc_get_block': feishu_doc_get_block,
        'feishu_folder_list': feishu_folder_list,
        'feishu_app_scopes': feishu_app_scopes,
    }


def register_doc_tools(
    server: FastMCP,
    config: Optional[FeishuConfig],
    client_factory: Optional[ClientFactory] = None,
) -> Dict[str, Callable]:
    """
    Register the document tools on the MCP server when credentials are configured.

    Returns:
        The registered tool functions by name (empty when the tools are disabled)
    """
    enabled, reason = check_doc_tools_capability(config)
    if not enabled:
        logger.debug(f"[register_doc_tools] {reason}, skipping doc tools")
        return {}

    tools = create_doc_tools(config, client_factory)
    for name, fn in tools.items():
        server.tool(fn, name=name, output_schema=tool_output_schema(TOOL_RESPONSE_MODELS[name]))

    logger.info(f"[register_doc_tools] Registered {len(tools)} document tools")
    return tools
