"""Preset catalogue and column path resolution.

Every renderer gets its columns from here so that HTML, TSV and plain-text
projections of a table can never disagree on which columns exist, their order,
or how a cell value is derived from an item.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from models import TableFormatPreset
from .presets_generated import PRESET_RECORDS

logger = logging.getLogger('content_table_export.content_table.presets')

FALLBACK_PRESET = TableFormatPreset.UNIVERSAL.value
VARIANT_PROPERTIES_PREFIX = 'variantProperties.'

# Sections of content-models.md that describe the format rather than a model
_NON_MODEL_SECTIONS = {'Content Models', 'Format', 'Value Path Expressions'}
_COLUMN_LINE_PATTERN = re.compile(r'key:\s*([^,]+),\s*label:\s*([^,]+),\s*path:\s*(.+)')


def _format_leaf(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'Yes' if value else 'No'
    return str(value)


def resolve_path(item: Any, path: str) -> str:
    """
    Resolve a value path expression against a content item.

    Supported forms:
    - ``variantProperties.<key>`` looks up ``item.component.variantProperties[key]``
    - dotted member access such as ``field.path`` or ``meta.visible``

    Missing or null intermediates resolve to an empty string. Booleans render
    as "Yes"/"No", everything else through ``str()``.

    Args:
        item: Content item in wire shape
        path: Value path expression

    Returns:
        Display string for the cell
    """
    if path.startswith(VARIANT_PROPERTIES_PREFIX):
        key = path[len(VARIANT_PROPERTIES_PREFIX):]
        component = item.get('component') if isinstance(item, Mapping) else None
        variants = component.get('variantProperties') if isinstance(component, Mapping) else None
        if not isinstance(variants, Mapping):
            return ''
        return _format_leaf(variants.get(key))

    current = item
    for part in path.split('.'):
        if not isinstance(current, Mapping):
            return ''
        current = current.get(part)
        if current is None:
            return ''

    return _format_leaf(current)


@dataclass(frozen=True)
class ColumnDef:
    """A rendered column: stable key, header label and value path."""

    key: str
    label: str
    path: str

    def extract(self, item: Any) -> str:
        return resolve_path(item, self.path)

    def to_dict(self) -> Dict[str, str]:
        return {'key': self.key, 'label': self.label, 'path': self.path}


@dataclass
class PresetDefinition:
    """A named preset with its display metadata and ordered columns."""

    id: str
    label: str = ''
    description: str = ''
    enabled: bool = False
    columns: List[ColumnDef] = field(default_factory=list)

    @property
    def usable(self) -> bool:
        """True when the preset can be rendered with its own columns."""
        return self.enabled and len(self.columns) > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'label': self.label,
            'description': self.description,
            'enabled': self.enabled,
            'columns': [column.to_dict() for column in self.columns]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PresetDefinition':
        return cls(
            id=data['id'],
            label=data.get('label', ''),
            description=data.get('description', ''),
            enabled=bool(data.get('enabled', False)),
            columns=[
                ColumnDef(key=col['key'], label=col['label'], path=col['path'])
                for col in data.get('columns', [])
            ]
        )


class PresetCatalogue:
    """Read-only mapping of preset id to definition, with universal fallback."""

    def __init__(self, definitions: Iterable[PresetDefinition], logger: logging.Logger = None):
        """
        Initialize catalogue.

        Args:
            definitions: Preset definitions, in display order
            logger: Optional logger instance

        Raises:
            ValueError: If the universal preset is missing or has no columns
        """
        self.logger = logger or logging.getLogger('content_table_export.content_table.presets')
        self._presets: Dict[str, PresetDefinition] = {}
        for definition in definitions:
            self._presets[definition.id] = definition

        universal = self._presets.get(FALLBACK_PRESET)
        if universal is None or not universal.columns:
            raise ValueError(
                f"Preset catalogue must define the '{FALLBACK_PRESET}' preset with at least one column"
            )

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]], logger: logging.Logger = None) -> 'PresetCatalogue':
        """Build a catalogue from plain dictionaries (the generated artifact)."""
        return cls([PresetDefinition.from_dict(record) for record in records], logger=logger)

    @classmethod
    def from_markdown(cls, markdown: str, logger: logging.Logger = None) -> 'PresetCatalogue':
        """Build a catalogue directly from a content-models.md document."""
        return cls(parse_content_models(markdown), logger=logger)

    def get(self, preset: Union[str, TableFormatPreset]) -> Optional[PresetDefinition]:
        return self._presets.get(_preset_id(preset))

    def preset_ids(self) -> List[str]:
        return list(self._presets)

    def enabled_presets(self) -> List[PresetDefinition]:
        return [definition for definition in self._presets.values() if definition.usable]

    def columns_for(self, preset: Union[str, TableFormatPreset, None]) -> List[ColumnDef]:
        """
        Get the column definitions for a preset.

        Unknown, disabled and empty presets fall back to the universal columns.
        Never raises.
        """
        preset_id = _preset_id(preset)
        definition = self._presets.get(preset_id)

        if definition is None or not definition.usable:
            if preset_id != FALLBACK_PRESET:
                self.logger.debug(f"Preset '{preset_id}' unavailable, using '{FALLBACK_PRESET}' columns")
            definition = self._presets[FALLBACK_PRESET]

        return list(definition.columns)

    def __contains__(self, preset: Union[str, TableFormatPreset]) -> bool:
        return _preset_id(preset) in self._presets

    def __len__(self) -> int:
        return len(self._presets)


def _preset_id(preset: Union[str, TableFormatPreset, None]) -> str:
    if isinstance(preset, TableFormatPreset):
        return preset.value
    if preset is None:
        return FALLBACK_PRESET
    return str(preset)


def parse_content_models(markdown: str) -> List[PresetDefinition]:
    """
    Parse the human-authored content-models.md document.

    Args:
        markdown: Document text

    Returns:
        Preset definitions in document order
    """
    models: List[PresetDefinition] = []
    current: Optional[PresetDefinition] = None
    in_columns = False

    for raw_line in markdown.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        if line.startswith('## '):
            section = line[3:].strip()
            if current is not None:
                models.append(current)
                current = None
            if section not in _NON_MODEL_SECTIONS:
                current = PresetDefinition(id='')
            in_columns = False
            continue

        if line.startswith('#') or line.startswith('---'):
            continue

        if current is None:
            continue

        if line.startswith('**id:**'):
            current.id = line[len('**id:**'):].strip()
        elif line.startswith('**label:**'):
            current.label = line[len('**label:**'):].strip()
        elif line.startswith('**description:**'):
            current.description = line[len('**description:**'):].strip()
        elif line.startswith('**enabled:**'):
            current.enabled = line[len('**enabled:**'):].strip().lower() == 'true'
        elif line == '**columns:**':
            in_columns = True
        elif in_columns and line.startswith('- key:'):
            match = _COLUMN_LINE_PATTERN.search(line)
            if match:
                current.columns.append(ColumnDef(
                    key=match.group(1).strip(),
                    label=match.group(2).strip(),
                    path=match.group(3).strip()
                ))
            else:
                logger.warning(f"Unparseable column line in model '{current.id}': {line}")
        elif in_columns and not line.startswith('-'):
            # "(empty - not yet defined)" or any prose ends the column list
            in_columns = False

    if current is not None:
        models.append(current)

    return [model for model in models if model.id]


def default_catalogue() -> PresetCatalogue:
    """Catalogue built from the generated preset records."""
    return PresetCatalogue.from_records(PRESET_RECORDS)


def load_catalogue(catalogue_path: Optional[Union[str, Path]] = None, logger: logging.Logger = None) -> PresetCatalogue:
    """
    Load a preset catalogue.

    Args:
        catalogue_path: Optional path to a content-models.md document
            (the ``presets.catalogue_path`` setting); the generated
            catalogue is used when not given
        logger: Optional logger instance

    Returns:
        PresetCatalogue

    Raises:
        FileNotFoundError: If catalogue_path does not exist
        ValueError: If the document defines no usable universal preset
    """
    if not catalogue_path:
        return default_catalogue()

    path = Path(catalogue_path)
    if not path.is_file():
        raise FileNotFoundError(f"Preset catalogue not found: {path}")

    log = logger or logging.getLogger('content_table_export.content_table.presets')
    log.info(f"Loading preset catalogue from {path}")
    return PresetCatalogue.from_markdown(path.read_text(encoding='utf-8'), logger=logger)


__all__ = [
    'FALLBACK_PRESET',
    'ColumnDef',
    'PresetDefinition',
    'PresetCatalogue',
    'resolve_path',
    'parse_content_models',
    'default_catalogue',
    'load_catalogue'
]
