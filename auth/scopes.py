"""
Feishu Open Platform Permission Scopes

This module centralizes the permission scopes the document tools depend on.
Separated from the client so tool modules can import it without side effects.
"""
import logging
from typing import Dict, Iterable, List

logger = logging.getLogger(__name__)

# Docx scopes
DOCX_READONLY_SCOPE = 'docx:document:readonly'
DOCX_WRITE_SCOPE = 'docx:document'

# Drive scopes (folder listing, media upload)
DRIVE_READONLY_SCOPE = 'drive:drive:readonly'
DRIVE_SCOPE = 'drive:drive'

# Scope grant status as reported by /application/v6/scopes
GRANT_STATUS_GRANTED = 1

DOCX_SCOPES = [
    DOCX_READONLY_SCOPE,
    DOCX_WRITE_SCOPE
]

DRIVE_SCOPES = [
    DRIVE_READONLY_SCOPE,
    DRIVE_SCOPE
]

# Scopes each tool needs; a write scope also satisfies its readonly counterpart
TOOL_SCOPES: Dict[str, List[str]] = {
    'feishu_doc_read': [DOCX_READONLY_SCOPE],
    'feishu_doc_create': [DOCX_WRITE_SCOPE],
    'feishu_doc_write': [DOCX_WRITE_SCOPE, DRIVE_SCOPE],
    'feishu_doc_append': [DOCX_WRITE_SCOPE, DRIVE_SCOPE],
    'feishu_doc_update_block': [DOCX_WRITE_SCOPE],
    'feishu_doc_delete_block': [DOCX_WRITE_SCOPE],
    'feishu_doc_list_blocks': [DOCX_READONLY_SCOPE],
    'feishu_doc_get_block': [DOCX_READONLY_SCOPE],
    'feishu_folder_list': [DRIVE_READONLY_SCOPE],
}

_SATISFIED_BY = {
    DOCX_READONLY_SCOPE: set(DOCX_SCOPES),
    DRIVE_READONLY_SCOPE: set(DRIVE_SCOPES),
}


def is_scope_satisfied(required: str, granted: Iterable[str]) -> bool:
    granted = set(granted)
    return bool(_SATISFIED_BY.get(required, {required}) & granted)


def get_tools_missing_scopes(granted: Iterable[str]) -> Dict[str, List[str]]:
    """Map each doc tool to the required scopes that have not been granted (tools with none missing are omitted)."""
    granted = list(granted)
    missing: Dict[str, List[str]] = {}
    for tool_name, required in TOOL_SCOPES.items():
        not_granted = [scope for scope in required if not is_scope_satisfied(scope, granted)]
        if not_granted:
            missing[tool_name] = not_granted
    if missing:
        logger.info(f"[get_tools_missing_scopes] {len(missing)} tool(s) lack scopes")
    return missing
