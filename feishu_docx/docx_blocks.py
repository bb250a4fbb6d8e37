"""
Feishu Docx Block Types

Static knowledge about docx block type codes and the filter applied to
converted blocks before they are inserted into a document.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

BLOCK_TYPE_PAGE = 1
BLOCK_TYPE_IMAGE = 27
BLOCK_TYPE_TABLE = 31
BLOCK_TYPE_TABLE_CELL = 32

BLOCK_TYPE_NAMES: Dict[int, str] = {
    1: "Page",
    2: "Text",
    3: "Heading1",
    4: "Heading2",
    5: "Heading3",
    12: "Bullet",
    13: "Ordered",
    14: "Code",
    15: "Quote",
    17: "Todo",
    18: "Bitable",
    21: "Diagram",
    22: "Divider",
    23: "File",
    27: "Image",
    30: "Sheet",
    31: "Table",
    32: "TableCell",
}

# Rejected by the create-children endpoint
UNSUPPORTED_CREATE_TYPES = frozenset({
    BLOCK_TYPE_TABLE,
    BLOCK_TYPE_TABLE_CELL,
})

# Not present in the raw_content (plain text) output
# 14=Code, 18=Bitable, 21=Diagram, 23=File, 27=Image, 30=Sheet, 31=Table, 32=TableCell
STRUCTURED_BLOCK_TYPES = frozenset({14, 18, 21, 23, 27, 30, 31, 32})

# Read-only sub-fields the API returns but refuses on insert, keyed by block type
READ_ONLY_FIELDS: Dict[int, Dict[str, List[str]]] = {
    BLOCK_TYPE_TABLE: {"table": ["merge_info"]},
}


def block_type_name(block_type: int) -> str:
    return BLOCK_TYPE_NAMES.get(block_type, f"type_{block_type}")


def is_uninsertable(block_type: int) -> bool:
    return block_type in UNSUPPORTED_CREATE_TYPES


def is_structured(block_type: int) -> bool:
    return block_type in STRUCTURED_BLOCK_TYPES


@dataclass
class BlockFilterResult:
    """Blocks that can be inserted, plus the display names of the types that were dropped"""
    blocks: List[Dict[str, Any]] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


def strip_read_only_fields(block: Dict[str, Any]) -> Dict[str, Any]:
    """Return a shallow copy of block without read-only nested fields, or block itself if it has none."""
    read_only = READ_ONLY_FIELDS.get(block.get("block_type"))
    if not read_only:
        return block

    cleaned = block
    for payload_key, fields in read_only.items():
        payload = block.get(payload_key)
        if not isinstance(payload, dict) or not any(f in payload for f in fields):
            continue
        if cleaned is block:
            cleaned = dict(block)
        cleaned[payload_key] = {k: v for k, v in payload.items() if k not in fields}
    return cleaned


def filter_blocks_for_insert(blocks: List[Dict[str, Any]]) -> BlockFilterResult:
    """
    Drop blocks the insert API cannot create and strip read-only fields from the rest.

    Args:
        blocks: Flat list of blocks as returned by the convert endpoint

    Returns:
        BlockFilterResult with kept blocks in original order and the distinct
        skipped type names in first-occurrence order
    """
    result = BlockFilterResult()

    for block in blocks:
        block_type = block.get("block_type")
        if is_uninsertable(block_type):
            name = block_type_name(block_type)
            if name not in result.skipped:
                result.skipped.append(name)
            continue
        result.blocks.append(strip_read_only_fields(block))

    if result.skipped:
        logger.info(f"[filter_blocks_for_insert] Kept {len(result.blocks)} block(s), skipped types: {', '.join(result.skipped)}")

    return result


def summarize_block_types(blocks: List[Dict[str, Any]]) -> Dict[str, int]:
    """Count blocks per type display name."""
    counts: Dict[str, int] = {}
    for block in blocks:
        name = block_type_name(block.get("block_type") or 0)
        counts[name] = counts.get(name, 0) + 1
    return counts


def structured_type_names(blocks: List[Dict[str, Any]]) -> List[str]:
    """Distinct names of structured block types present, in first-occurrence order."""
    names: List[str] = []
    for block in blocks:
        block_type = block.get("block_type") or 0
        if is_structured(block_type):
            name = block_type_name(block_type)
            if name not in names:
                names.append(name)
    return names
