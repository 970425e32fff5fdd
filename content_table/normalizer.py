"""Normalization of partial or malformed content tables.

``normalize_content_table`` is total and idempotent: it deep-copies its input
and fills every missing or malformed required field with a safe default. It
only fills gaps; the one place where data is dropped is a
``designSystemByNodeId`` value that is not a mapping.
"""

import copy
import logging
from typing import Any, Dict, Mapping, Optional

from models import (
    CONTENT_TABLE_TYPE,
    CONTENT_TABLE_VERSION,
    DEFAULT_CONTENT_MODEL,
    DEFAULT_CONTENT_STAGE,
    DEFAULT_SCHEMA_VERSION,
    PENDING_STATUS,
    as_wire_dict,
    utc_now_iso,
)

logger = logging.getLogger('content_table_export.content_table.normalizer')

UNKNOWN_PAGE = 'Unknown Page'
UNKNOWN_SELECTION = 'Unknown Selection'
UNKNOWN_COMPONENT = 'Unknown Component'
UNKNOWN_FIELD = 'Unknown Field'


def _string_or(value: Any, default: str) -> str:
    """Keep strings, render numbers as strings, replace anything else."""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def _non_empty_or(value: Any, default: str) -> str:
    return _string_or(value, '') or default


def _with_leading(required: Dict[str, Any], original: Mapping) -> Dict[str, Any]:
    """Required keys first, then every other key of the original untouched."""
    merged = dict(required)
    for key, value in original.items():
        if key not in merged:
            merged[key] = value
    return merged


def build_source(source: Any) -> Dict[str, Any]:
    """Source record with placeholder page and selection names."""
    original = source if isinstance(source, Mapping) else {}
    return _with_leading({
        'pageId': _string_or(original.get('pageId'), ''),
        'pageName': _string_or(original.get('pageName'), UNKNOWN_PAGE),
        'selectionNodeId': _string_or(original.get('selectionNodeId'), ''),
        'selectionName': _string_or(original.get('selectionName'), UNKNOWN_SELECTION),
    }, original)


def build_table_meta(meta: Any, source: Any) -> Dict[str, Any]:
    """
    Table metadata record.

    Root node id/name default to the selection recorded in the raw source,
    stage and statuses default to a fresh draft.
    """
    original = meta if isinstance(meta, Mapping) else {}
    raw_source = source if isinstance(source, Mapping) else {}

    return _with_leading({
        'contentModel': _string_or(original.get('contentModel'), DEFAULT_CONTENT_MODEL),
        'contentStage': _string_or(original.get('contentStage'), DEFAULT_CONTENT_STAGE),
        'adaStatus': _string_or(original.get('adaStatus'), PENDING_STATUS),
        'legalStatus': _string_or(original.get('legalStatus'), PENDING_STATUS),
        'lastUpdated': _string_or(original.get('lastUpdated'), '') or utc_now_iso(),
        'version': _string_or(original.get('version'), DEFAULT_SCHEMA_VERSION),
        'rootNodeId': _string_or(original.get('rootNodeId'), _string_or(raw_source.get('selectionNodeId'), '')),
        'rootNodeName': _string_or(original.get('rootNodeName'), _string_or(raw_source.get('selectionName'), '')),
        'rootNodeUrl': _string_or(original.get('rootNodeUrl'), ''),
    }, original)


def build_component(component: Any) -> Dict[str, Any]:
    """Component record; ``key`` and ``variantProperties`` pass through."""
    original = component if isinstance(component, Mapping) else {}
    return _with_leading({
        'kind': _non_empty_or(original.get('kind'), 'custom'),
        'name': _non_empty_or(original.get('name'), UNKNOWN_COMPONENT),
    }, original)


def build_field(field_ref: Any) -> Dict[str, Any]:
    original = field_ref if isinstance(field_ref, Mapping) else {}
    return _with_leading({
        'label': _non_empty_or(original.get('label'), UNKNOWN_FIELD),
        'path': _string_or(original.get('path'), ''),
    }, original)


def build_content(content: Any) -> Dict[str, Any]:
    """Content record. Only text content exists in schema v1."""
    original = content if isinstance(content, Mapping) else {}
    return _with_leading({
        'type': 'text',
        'value': _string_or(original.get('value'), ''),
    }, original)


def build_item_meta(meta: Any) -> Dict[str, Any]:
    original = meta if isinstance(meta, Mapping) else {}
    visible = original.get('visible')
    locked = original.get('locked')
    return _with_leading({
        'visible': visible if isinstance(visible, bool) else True,
        'locked': locked if isinstance(locked, bool) else False,
    }, original)


def build_item(item: Any, index: int) -> Dict[str, Any]:
    """
    Normalize one content item.

    Args:
        item: Item in wire shape (anything that is not a mapping counts as empty)
        index: Position in the table, used for the placeholder id

    Returns:
        Item with all seven required sub-records present
    """
    original = item if isinstance(item, Mapping) else {}

    item_id = (
        _non_empty_or(original.get('id'), '')
        or _non_empty_or(original.get('nodeId'), '')
        or f'item_{index}'
    )

    return _with_leading({
        'id': item_id,
        'nodeId': _non_empty_or(original.get('nodeId'), item_id),
        'nodeUrl': _string_or(original.get('nodeUrl'), ''),
        'component': build_component(original.get('component')),
        'field': build_field(original.get('field')),
        'content': build_content(original.get('content')),
        'meta': build_item_meta(original.get('meta')),
    }, original)


def normalize_content_table(table: Any) -> Dict[str, Any]:
    """
    Normalize a table so it satisfies the schema.

    Args:
        table: Table dictionary or ContentTable; never mutated

    Returns:
        A new, fully-populated table dictionary
    """
    data = as_wire_dict(table)
    original: Dict[str, Any] = copy.deepcopy(dict(data)) if isinstance(data, Mapping) else {}

    raw_items = original.get('items')
    if not isinstance(raw_items, (list, tuple)):
        if raw_items is not None:
            logger.debug(f"Replacing non-list items value of type {type(raw_items).__name__}")
        raw_items = []

    generated_at = _string_or(original.get('generatedAtISO'), '') or utc_now_iso()

    normalized = _with_leading({
        'type': CONTENT_TABLE_TYPE,
        'version': CONTENT_TABLE_VERSION,
        'generatedAtISO': generated_at,
        'source': build_source(original.get('source')),
        'meta': build_table_meta(original.get('meta'), original.get('source')),
        'items': [build_item(item, index) for index, item in enumerate(raw_items)],
    }, original)

    design_system: Optional[Any] = normalized.get('designSystemByNodeId')
    if 'designSystemByNodeId' in normalized and not isinstance(design_system, Mapping):
        logger.debug("Dropping designSystemByNodeId: not an object map")
        del normalized['designSystemByNodeId']

    return normalized


__all__ = [
    'build_source',
    'build_table_meta',
    'build_component',
    'build_field',
    'build_content',
    'build_item_meta',
    'build_item',
    'normalize_content_table'
]
