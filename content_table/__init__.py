"""Content table model operations.

Validation, normalization, preset resolution, rendering and recovery of
universal content tables. Every clipboard and export format is a projection
of the same normalized table through the same preset columns.
"""

import logging

from .html_transform import extract_from_html, has_embedded_table
from .normalizer import normalize_content_table
from .presets import (
    FALLBACK_PRESET,
    ColumnDef,
    PresetCatalogue,
    PresetDefinition,
    default_catalogue,
    load_catalogue,
    parse_content_models,
    resolve_path,
)
from .renderers import (
    EMBEDDED_JSON_ELEMENT_ID,
    RenderedTable,
    TableRenderer,
    to_html,
    to_json,
    to_plain_text,
    to_tsv,
)
from .validator import ContentTableValidator, validate_content_table

logger = logging.getLogger('content_table_export.content_table')

__all__ = [
    'ContentTableValidator',
    'validate_content_table',
    'normalize_content_table',
    'FALLBACK_PRESET',
    'ColumnDef',
    'PresetDefinition',
    'PresetCatalogue',
    'default_catalogue',
    'load_catalogue',
    'parse_content_models',
    'resolve_path',
    'EMBEDDED_JSON_ELEMENT_ID',
    'RenderedTable',
    'TableRenderer',
    'to_html',
    'to_tsv',
    'to_plain_text',
    'to_json',
    'extract_from_html',
    'has_embedded_table'
]
