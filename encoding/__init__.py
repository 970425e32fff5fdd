"""Output encodings for export targets."""

from .xhtml import (
    VALID_ENTITY_PATTERN,
    VOID_ELEMENTS,
    encode_cell_value,
    encode_document,
    encode_url_for_attribute,
    escape_ampersands,
)

__all__ = [
    'VALID_ENTITY_PATTERN',
    'VOID_ELEMENTS',
    'encode_document',
    'encode_cell_value',
    'encode_url_for_attribute',
    'escape_ampersands'
]
