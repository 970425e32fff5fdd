"""Content table renderers.

HTML, TSV, plain text and JSON are all produced from the same table through a
single column-resolution step, so the paste targets never drift apart.
"""

import html
import json
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, List, Mapping, Optional, Tuple, Union

from models import TableFormatPreset, as_wire_dict
from .presets import ColumnDef, PresetCatalogue, default_catalogue

EMBEDDED_JSON_ELEMENT_ID = 'universal-content-json'

TABLE_STYLE = 'border-collapse: collapse; width: 100%; font-size: 12px;'
HEADER_CELL_STYLE = (
    'border: 1px solid #000000; padding: 6px 8px; vertical-align: top; '
    'font-weight: 600; background-color: #f0f0f0;'
)
BODY_CELL_STYLE = 'border: 1px solid #000000; padding: 6px 8px; vertical-align: top;'

PLAIN_TEXT_MAX_COLUMN_WIDTH = 50

_NEWLINE_PATTERN = re.compile(r'\r\n|\r|\n')
_TSV_BREAKING_PATTERN = re.compile(r'[\t\r\n]')

Preset = Union[str, TableFormatPreset, None]


@dataclass
class RenderedTable:
    """Every clipboard projection of one table for one preset."""

    html: str
    tsv: str
    json: str
    plain_text: str


def escape_html(text: str) -> str:
    """Escape ``& < > " '`` for element content."""
    return html.escape(text, quote=True)


class TableRenderer:
    """Renders normalized content tables for a preset."""

    def __init__(self, catalogue: Optional[PresetCatalogue] = None, logger: logging.Logger = None):
        """
        Initialize renderer.

        Args:
            catalogue: Preset catalogue (defaults to the generated catalogue)
            logger: Optional logger instance
        """
        self.catalogue = catalogue or default_catalogue()
        self.logger = logger or logging.getLogger('content_table_export.content_table.renderers')

    def resolve_rows(self, table: Any, preset: Preset) -> Tuple[List[ColumnDef], List[List[str]]]:
        """
        Resolve columns and raw cell values for a table.

        Args:
            table: Normalized table
            preset: Preset id or TableFormatPreset

        Returns:
            Tuple of (columns, rows) where each row holds one string per column
        """
        data = as_wire_dict(table)
        columns = self.catalogue.columns_for(preset)
        items = data.get('items') if isinstance(data, Mapping) else None
        if not isinstance(items, (list, tuple)):
            items = []

        rows = [[column.extract(item) for column in columns] for item in items]
        return columns, rows

    def to_html(
        self,
        table: Any,
        preset: Preset = TableFormatPreset.UNIVERSAL,
        embed_json: bool = True,
        full_document: bool = False
    ) -> str:
        """
        Render a self-contained, inline-styled HTML table.

        Args:
            table: Normalized table
            preset: Preset id or TableFormatPreset
            embed_json: Append the canonical JSON in a script element so the
                table can be recovered from pasted HTML
            full_document: Wrap the table in a complete HTML document

        Returns:
            HTML string
        """
        columns, rows = self.resolve_rows(table, preset)

        parts = [f'<table style="{TABLE_STYLE}">', '<thead><tr>']
        for column in columns:
            parts.append(f'<th style="{HEADER_CELL_STYLE}">{escape_html(column.label)}</th>')
        parts.append('</tr></thead>')

        parts.append('<tbody>')
        for row in rows:
            parts.append('<tr>')
            for cell in row:
                escaped = _NEWLINE_PATTERN.sub('<br>', escape_html(cell))
                parts.append(f'<td style="{BODY_CELL_STYLE}">{escaped}</td>')
            parts.append('</tr>')
        parts.append('</tbody></table>')

        if embed_json:
            payload = self.to_json(table).replace('</', '<\\/')
            parts.append(
                f'\n<script type="application/json" id="{EMBEDDED_JSON_ELEMENT_ID}">\n'
                f'{payload}\n</script>'
            )

        fragment = ''.join(parts)
        if not full_document:
            return fragment

        return (
            '<!DOCTYPE html>\n<html>\n<head>\n<meta charset="UTF-8">\n'
            '<title>Content Table</title>\n</head>\n<body>\n'
            f'{fragment}\n</body>\n</html>'
        )

    def to_tsv(self, table: Any, preset: Preset = TableFormatPreset.UNIVERSAL) -> str:
        """Render tab-separated values; tabs and newlines inside cells become spaces."""
        columns, rows = self.resolve_rows(table, preset)

        lines = ['\t'.join(_TSV_BREAKING_PATTERN.sub(' ', column.label) for column in columns)]
        for row in rows:
            lines.append('\t'.join(_TSV_BREAKING_PATTERN.sub(' ', cell) for cell in row))

        # Trailing tabs are delimiters of empty cells, not padding
        return '\n'.join(lines).rstrip(' \r\n')

    def to_plain_text(self, table: Any, preset: Preset = TableFormatPreset.UNIVERSAL) -> str:
        """Render a fixed-width text table for plain text editors and email."""
        columns, rows = self.resolve_rows(table, preset)
        headers = [column.label for column in columns]
        flat_rows = [[_NEWLINE_PATTERN.sub(' ', cell) for cell in row] for row in rows]

        widths = []
        for index, header in enumerate(headers):
            longest = max([len(header)] + [len(row[index]) for row in flat_rows])
            widths.append(min(longest, PLAIN_TEXT_MAX_COLUMN_WIDTH))

        lines = [
            ' | '.join(header[:widths[i]].ljust(widths[i]) for i, header in enumerate(headers)),
            '-+-'.join('-' * width for width in widths)
        ]
        for row in flat_rows:
            lines.append(' | '.join(cell[:widths[i]].ljust(widths[i]) for i, cell in enumerate(row)))

        return '\n'.join(line.rstrip() for line in lines).strip()

    @staticmethod
    def to_json(table: Any) -> str:
        """Canonical two-space-indented JSON of the full table (preset independent)."""
        return json.dumps(as_wire_dict(table), indent=2, ensure_ascii=False, default=str)

    def render_all(self, table: Any, preset: Preset = TableFormatPreset.UNIVERSAL) -> RenderedTable:
        """Render every clipboard format at once."""
        self.logger.debug(f"Rendering table for preset '{preset}'")
        return RenderedTable(
            html=self.to_html(table, preset),
            tsv=self.to_tsv(table, preset),
            json=self.to_json(table),
            plain_text=self.to_plain_text(table, preset)
        )


@lru_cache(maxsize=1)
def _renderer() -> TableRenderer:
    return TableRenderer()


def to_html(table: Any, preset: Preset = TableFormatPreset.UNIVERSAL, **options) -> str:
    return _renderer().to_html(table, preset, **options)


def to_tsv(table: Any, preset: Preset = TableFormatPreset.UNIVERSAL) -> str:
    return _renderer().to_tsv(table, preset)


def to_plain_text(table: Any, preset: Preset = TableFormatPreset.UNIVERSAL) -> str:
    return _renderer().to_plain_text(table, preset)


def to_json(table: Any) -> str:
    return TableRenderer.to_json(table)


__all__ = [
    'EMBEDDED_JSON_ELEMENT_ID',
    'RenderedTable',
    'TableRenderer',
    'escape_html',
    'to_html',
    'to_tsv',
    'to_plain_text',
    'to_json'
]
