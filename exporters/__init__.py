"""File export package for content tables.

Writes the clipboard projections of a table (HTML, TSV, JSON, plain text) and
the encoded Confluence document to a local output directory.

Configuration Referenced:
- export.output_directory: Base output path for exported files
- export.formats: Formats to write (html, tsv, json, txt, xhtml)
- export.embed_json / export.full_document: HTML rendering options
"""

from .table_exporter import FILE_EXTENSIONS, TableExporter

__all__ = [
    'TableExporter',
    'FILE_EXTENSIONS'
]
