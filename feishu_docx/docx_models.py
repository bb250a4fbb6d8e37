"""
Feishu Docx Response Models

Pydantic models for the document tool responses.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ReadDocResponse(BaseModel):
    """Response from feishu_doc_read"""
    title: Optional[str] = Field(default=None, description="Document title")
    content: Optional[str] = Field(default=None, description="Plain text content of the document")
    revision_id: Optional[int] = Field(default=None, description="Current document revision")
    block_count: int = Field(description="Total number of blocks in the document")
    block_types: Dict[str, int] = Field(default_factory=dict, description="Block count per block type name")
    hint: Optional[str] = Field(default=None, description="Set when the plain text omits structured blocks")


class CreateDocResponse(BaseModel):
    """Response from feishu_doc_create"""
    document_id: Optional[str] = Field(default=None, description="The ID of the created document")
    title: Optional[str] = Field(default=None, description="The title of the document")
    url: str = Field(description="The URL to open the document")


class ImageFailure(BaseModel):
    """An image that could not be resolved"""
    url: str = Field(description="Source image URL")
    block_id: Optional[str] = Field(default=None, description="Image block the URL was paired with")
    error: str = Field(description="What went wrong")


class WriteDocResponse(BaseModel):
    """Response from feishu_doc_write"""
    success: bool = Field(description="Whether the operation succeeded")
    blocks_deleted: int = Field(description="Number of existing blocks removed")
    blocks_added: int = Field(description="Number of blocks inserted")
    images_processed: int = Field(description="Number of images uploaded and attached")
    warning: Optional[str] = Field(default=None, description="Set when block types were skipped")
    image_failures: Optional[List[ImageFailure]] = Field(default=None, description="Images that failed to resolve")


class AppendDocResponse(BaseModel):
    """Response from feishu_doc_append"""
    success: bool = Field(description="Whether the operation succeeded")
    blocks_added: int = Field(description="Number of blocks inserted")
    images_processed: int = Field(description="Number of images uploaded and attached")
    block_ids: List[str] = Field(default_factory=list, description="IDs of the inserted blocks")
    warning: Optional[str] = Field(default=None, description="Set when block types were skipped")
    image_failures: Optional[List[ImageFailure]] = Field(default=None, description="Images that failed to resolve")


class UpdateBlockResponse(BaseModel):
    """Response from feishu_doc_update_block"""
    success: bool = Field(description="Whether the operation succeeded")
    block_id: str = Field(description="The ID of the updated block")


class DeleteBlockResponse(BaseModel):
    """Response from feishu_doc_delete_block"""
    success: bool = Field(description="Whether the operation succeeded")
    deleted_block_id: str = Field(description="The ID of the deleted block")


class ListBlocksResponse(BaseModel):
    """Response from feishu_doc_list_blocks"""
    blocks: List[Dict[str, Any]] = Field(default_factory=list, description="Raw blocks of the document")


class GetBlockResponse(BaseModel):
    """Response from feishu_doc_get_block"""
    block: Dict[str, Any] = Field(default_factory=dict, description="Raw block data")


class FolderFile(BaseModel):
    token: Optional[str] = Field(default=None, description="File token")
    name: Optional[str] = Field(default=None, description="File name")
    type: Optional[str] = Field(default=None, description="File type (docx, folder, sheet, ...)")
    url: Optional[str] = Field(default=None, description="File URL")


class FolderListResponse(BaseModel):
    """Response from feishu_folder_list"""
    files: List[FolderFile] = Field(default_factory=list, description="Files in the folder")


class AppScope(BaseModel):
    name: Optional[str] = Field(default=None, description="Scope name")
    type: Optional[str] = Field(default=None, description="Scope type (tenant or user)")


class AppScopesResponse(BaseModel):
    """Response from feishu_app_scopes"""
    granted: List[AppScope] = Field(default_factory=list, description="Granted scopes")
    pending: List[AppScope] = Field(default_factory=list, description="Requested but not granted scopes")
    summary: str = Field(description="Human-readable count summary")
    missing_for_tools: Optional[Dict[str, List[str]]] = Field(
        default=None,
        description="Document tools whose required scopes are not granted"
    )
