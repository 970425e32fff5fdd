"""File exporter writing every projection of a content table to disk."""

import hashlib
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from config_loader import EXPORT_FORMATS, get_nested
from models import TableFormatPreset
from content_table import TableRenderer, load_catalogue

FILE_EXTENSIONS = {
    'html': '.html',
    'tsv': '.tsv',
    'json': '.json',
    'txt': '.txt',
    'xhtml': '.xhtml',
}


class TableExporter:
    """
    Writes the configured formats of a table to the output directory.

    One file per format, named ``<basename>.<preset>.<ext>`` (JSON is preset
    independent and written as ``<basename>.json``). Files whose content is
    unchanged are left untouched.
    """

    def __init__(
        self,
        config: Dict[str, Any],
        renderer: Optional[TableRenderer] = None,
        logger: Optional[logging.Logger] = None,
        output_dir: Optional[Union[str, Path]] = None
    ):
        """
        Initialize the table exporter.

        Args:
            config: Configuration dictionary with export settings
            renderer: Optional renderer; built from ``presets.catalogue_path``
                when not given
            logger: Logger instance
            output_dir: Optional output directory override (takes precedence over config)
        """
        self.config = config
        self.logger = logger or logging.getLogger('content_table_export.exporters.table_exporter')

        export_config = config.get('export', {})
        self.output_directory = Path(output_dir) if output_dir else Path(
            export_config.get('output_directory', './content-table-export')
        )
        self.formats: List[str] = list(export_config.get('formats', ['html', 'tsv', 'json']))
        self.embed_json = export_config.get('embed_json', True)
        self.full_document = export_config.get('full_document', False)

        self.renderer = renderer or TableRenderer(
            catalogue=load_catalogue(get_nested(config, 'presets.catalogue_path'), logger=self.logger),
            logger=self.logger
        )

        self.stats = {
            'tables_exported': 0,
            'files_written': 0,
            'files_unchanged': 0,
            'total_errors': 0
        }

    def export(
        self,
        table: Any,
        preset: Union[str, TableFormatPreset, None],
        basename: str,
        xhtml_document: Optional[str] = None
    ) -> Dict[str, Path]:
        """
        Export one normalized table.

        Args:
            table: Normalized table
            preset: Preset id or TableFormatPreset
            basename: Base file name (sanitized before use)
            xhtml_document: Encoded document from the export orchestrator;
                required for the ``xhtml`` format, which is skipped otherwise

        Returns:
            Mapping of format name to written (or unchanged) file path

        Raises:
            OSError: If the output directory or a file cannot be written
        """
        preset_id = preset.value if isinstance(preset, TableFormatPreset) else (preset or 'universal')
        stem = self._sanitize_filename(basename)

        try:
            self.output_directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.logger.error(f"Failed to create output directory: {e}")
            self.stats['total_errors'] += 1
            raise

        written: Dict[str, Path] = {}
        for fmt in self.formats:
            if fmt not in EXPORT_FORMATS:
                self.logger.warning(f"Skipping unknown export format '{fmt}'")
                continue

            if fmt == 'xhtml' and xhtml_document is None:
                self.logger.warning(f"No XHTML document for '{stem}', skipping xhtml format")
                continue

            content = self._render(fmt, table, preset_id, xhtml_document)
            if fmt == 'json':
                path = self.output_directory / f"{stem}{FILE_EXTENSIONS[fmt]}"
            else:
                path = self.output_directory / f"{stem}.{preset_id}{FILE_EXTENSIONS[fmt]}"

            self._write_if_changed(path, content)
            written[fmt] = path

        self.stats['tables_exported'] += 1
        self.logger.info(f"Exported '{stem}' ({preset_id}): {', '.join(written) or 'no formats'}")
        return written

    def _render(self, fmt: str, table: Any, preset_id: str, xhtml_document: Optional[str]) -> str:
        if fmt == 'html':
            return self.renderer.to_html(
                table, preset_id, embed_json=self.embed_json, full_document=self.full_document
            )
        if fmt == 'tsv':
            return self.renderer.to_tsv(table, preset_id)
        if fmt == 'json':
            return self.renderer.to_json(table)
        if fmt == 'txt':
            return self.renderer.to_plain_text(table, preset_id)
        return xhtml_document

    def _write_if_changed(self, path: Path, content: str) -> None:
        data = content.encode('utf-8')
        if path.exists():
            existing_hash = hashlib.sha256(path.read_bytes()).hexdigest()
            if existing_hash == hashlib.sha256(data).hexdigest():
                self.logger.debug(f"Unchanged: {path}")
                self.stats['files_unchanged'] += 1
                return

        try:
            path.write_bytes(data)
        except OSError as e:
            self.logger.error(f"Failed to write {path}: {e}")
            self.stats['total_errors'] += 1
            raise

        self.logger.debug(f"Wrote {path} ({len(data)} bytes)")
        self.stats['files_written'] += 1

    @staticmethod
    def _sanitize_filename(name: str) -> str:
        """
        Convert a table name to a filesystem-safe file name.

        Args:
            name: Table or input file name

        Returns:
            Sanitized file name
        """
        if not name:
            return "content-table"

        sanitized = name.lower()
        sanitized = re.sub(r'[^a-z0-9\-_]', '-', sanitized)
        sanitized = re.sub(r'-+', '-', sanitized)
        sanitized = sanitized.strip('-')[:100]

        return sanitized or "content-table"


__all__ = ['TableExporter', 'FILE_EXTENSIONS']
