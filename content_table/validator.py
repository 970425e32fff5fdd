"""Structural validation of content tables against the v1 schema."""

import logging
from typing import Any, List, Mapping

from models import CONTENT_TABLE_TYPE, CONTENT_TABLE_VERSION, ValidationResult, as_wire_dict

SOURCE_FIELDS = ('pageId', 'pageName', 'selectionNodeId', 'selectionName')

META_FIELDS = (
    'contentModel', 'contentStage', 'adaStatus', 'legalStatus', 'lastUpdated',
    'version', 'rootNodeId', 'rootNodeName', 'rootNodeUrl'
)

ITEM_FIELDS = ('id', 'nodeId', 'nodeUrl', 'component', 'field', 'content', 'meta')


class ContentTableValidator:
    """
    Reports whether a value conforms to the content table schema.

    Validation never raises; problems are returned as human-readable strings
    and callers decide whether to reject, warn or normalize.
    """

    def __init__(self, enable_logging: bool = False, logger: logging.Logger = None):
        """
        Initialize validator.

        Args:
            enable_logging: Log errors and warnings of every validation
                (the ``dev.enable_validation_logging`` setting)
            logger: Optional logger instance
        """
        self.enable_logging = enable_logging
        self.logger = logger or logging.getLogger('content_table_export.content_table.validator')

    def validate(self, value: Any) -> ValidationResult:
        """
        Validate a table.

        Args:
            value: Anything; typically a table dictionary decoded from JSON

        Returns:
            ValidationResult with ok set iff no errors were found
        """
        errors: List[str] = []
        warnings: List[str] = []

        self._check(as_wire_dict(value), errors)
        result = ValidationResult(ok=not errors, errors=errors, warnings=warnings)

        if self.enable_logging:
            if warnings:
                self.logger.warning(f"Content table validation warnings: {warnings}")
            if errors:
                self.logger.error(f"Content table validation errors: {errors}")

        return result

    def _check(self, table: Any, errors: List[str]) -> None:
        if not isinstance(table, Mapping):
            errors.append('Table is not an object')
            return

        if table.get('type') != CONTENT_TABLE_TYPE:
            errors.append(f'Missing or invalid type field (must be "{CONTENT_TABLE_TYPE}")')

        version = table.get('version')
        if isinstance(version, bool) or not isinstance(version, (int, float)) or version != CONTENT_TABLE_VERSION:
            errors.append(f'Missing or invalid version field (must be {CONTENT_TABLE_VERSION})')

        generated_at = table.get('generatedAtISO')
        if not generated_at or not isinstance(generated_at, str):
            errors.append('Missing or invalid generatedAtISO field')

        source = table.get('source')
        if not isinstance(source, Mapping):
            errors.append('Missing or invalid source field')
        else:
            for name in SOURCE_FIELDS:
                if not isinstance(source.get(name), str):
                    errors.append(f'source.{name} is missing or invalid')

        meta = table.get('meta')
        if not isinstance(meta, Mapping):
            errors.append('Missing or invalid meta field')
        else:
            for name in META_FIELDS:
                if not isinstance(meta.get(name), str):
                    errors.append(f'meta.{name} is missing or invalid')

        items = table.get('items')
        if not isinstance(items, (list, tuple)):
            errors.append('items is not an array')
            return

        for index, item in enumerate(items):
            self._check_item(index, item, errors)

        if 'designSystemByNodeId' in table and not isinstance(table['designSystemByNodeId'], Mapping):
            errors.append('designSystemByNodeId must be an object map of node id to detection result')

    @staticmethod
    def _check_item(index: int, item: Any, errors: List[str]) -> None:
        prefix = f'items[{index}]'
        if not isinstance(item, Mapping):
            errors.append(f'{prefix} is not an object')
            return

        for name in ITEM_FIELDS:
            if name not in item:
                errors.append(f'{prefix}.{name} is missing')

        component = item.get('component')
        if isinstance(component, Mapping):
            if not isinstance(component.get('kind'), str):
                errors.append(f'{prefix}.component.kind is missing or invalid')
            if not isinstance(component.get('name'), str):
                errors.append(f'{prefix}.component.name is missing or invalid')

        field_ref = item.get('field')
        if isinstance(field_ref, Mapping):
            if not isinstance(field_ref.get('label'), str):
                errors.append(f'{prefix}.field.label is missing or invalid')
            if not isinstance(field_ref.get('path'), str):
                errors.append(f'{prefix}.field.path is missing or invalid')

        content = item.get('content')
        if isinstance(content, Mapping):
            if content.get('type') != 'text':
                errors.append(f'{prefix}.content.type is missing or invalid (must be "text")')
            if not isinstance(content.get('value'), str):
                errors.append(f'{prefix}.content.value is missing or invalid')

        meta = item.get('meta')
        if isinstance(meta, Mapping):
            if not isinstance(meta.get('visible'), bool):
                errors.append(f'{prefix}.meta.visible is missing or invalid')
            if not isinstance(meta.get('locked'), bool):
                errors.append(f'{prefix}.meta.locked is missing or invalid')


def validate_content_table(value: Any, enable_logging: bool = False) -> ValidationResult:
    """Convenience wrapper around ContentTableValidator.validate()."""
    return ContentTableValidator(enable_logging=enable_logging).validate(value)


__all__ = ['ContentTableValidator', 'validate_content_table']
