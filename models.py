"""Data models for the content table export pipeline."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger('content_table_export')

CONTENT_TABLE_TYPE = "universal-content-table"
CONTENT_TABLE_VERSION = 1

DEFAULT_CONTENT_MODEL = "Universal v2"
DEFAULT_CONTENT_STAGE = "Draft"
DEFAULT_SCHEMA_VERSION = "v1"
PENDING_STATUS = "⏳ Pending"

# Optional free-text annotations carried on each item
ITEM_ANNOTATION_FIELDS = (
    'textLayerName',
    'notes',
    'contentKey',
    'jiraTicket',
    'adaNotes',
    'errorMessage',
)

_ITEM_KEYS = frozenset((
    'id', 'nodeId', 'nodeUrl', 'component', 'field', 'content', 'meta', 'designSystem'
) + ITEM_ANNOTATION_FIELDS)
_TABLE_KEYS = frozenset((
    'type', 'version', 'generatedAtISO', 'source', 'meta', 'items', 'designSystemByNodeId'
))


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


class TableFormatPreset(Enum):
    """Named column presets for rendering a content table."""
    UNIVERSAL = "universal"
    CONTENT_MODEL_1 = "content-model-1"
    CONTENT_MODEL_2 = "content-model-2"
    CONTENT_MODEL_3 = "content-model-3"
    CONTENT_MODEL_4 = "content-model-4"
    CONTENT_MODEL_5 = "content-model-5"
    ADA_ONLY = "ada-only"
    DEV_ONLY = "dev-only"


class ComponentKind(Enum):
    """Kind of design node an item was extracted from."""
    COMPONENT = "component"
    COMPONENT_SET = "componentSet"
    INSTANCE = "instance"
    CUSTOM = "custom"


@dataclass
class TableSource:
    """Provenance of an extraction: the page and selection it came from."""

    page_id: str = ""
    page_name: str = "Unknown Page"
    selection_node_id: str = ""
    selection_name: str = "Unknown Selection"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pageId': self.page_id,
            'pageName': self.page_name,
            'selectionNodeId': self.selection_node_id,
            'selectionName': self.selection_name
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TableSource':
        return cls(
            page_id=data.get('pageId', ''),
            page_name=data.get('pageName', 'Unknown Page'),
            selection_node_id=data.get('selectionNodeId', ''),
            selection_name=data.get('selectionName', 'Unknown Selection')
        )


@dataclass
class TableMeta:
    """Table-level metadata: review stage, compliance status and root node."""

    content_model: str = DEFAULT_CONTENT_MODEL
    content_stage: str = DEFAULT_CONTENT_STAGE
    ada_status: str = PENDING_STATUS
    legal_status: str = PENDING_STATUS
    last_updated: str = field(default_factory=utc_now_iso)
    version: str = DEFAULT_SCHEMA_VERSION
    root_node_id: str = ""
    root_node_name: str = ""
    root_node_url: str = ""
    thumbnail_data_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'contentModel': self.content_model,
            'contentStage': self.content_stage,
            'adaStatus': self.ada_status,
            'legalStatus': self.legal_status,
            'lastUpdated': self.last_updated,
            'version': self.version,
            'rootNodeId': self.root_node_id,
            'rootNodeName': self.root_node_name,
            'rootNodeUrl': self.root_node_url
        }
        if self.thumbnail_data_url is not None:
            data['thumbnailDataUrl'] = self.thumbnail_data_url
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TableMeta':
        return cls(
            content_model=data.get('contentModel', DEFAULT_CONTENT_MODEL),
            content_stage=data.get('contentStage', DEFAULT_CONTENT_STAGE),
            ada_status=data.get('adaStatus', PENDING_STATUS),
            legal_status=data.get('legalStatus', PENDING_STATUS),
            last_updated=data.get('lastUpdated') or utc_now_iso(),
            version=data.get('version', DEFAULT_SCHEMA_VERSION),
            root_node_id=data.get('rootNodeId', ''),
            root_node_name=data.get('rootNodeName', ''),
            root_node_url=data.get('rootNodeUrl', ''),
            thumbnail_data_url=data.get('thumbnailDataUrl')
        )


@dataclass
class ComponentRef:
    """The component an item belongs to. Kinds outside ComponentKind stay plain strings."""

    kind: Union[ComponentKind, str] = ComponentKind.CUSTOM
    name: str = "Unknown Component"
    key: Optional[str] = None
    variant_properties: Optional[Dict[str, str]] = None

    def to_dict(self) -> Dict[str, Any]:
        kind = self.kind.value if isinstance(self.kind, ComponentKind) else self.kind
        data: Dict[str, Any] = {'kind': kind, 'name': self.name}
        if self.key is not None:
            data['key'] = self.key
        if self.variant_properties is not None:
            data['variantProperties'] = dict(self.variant_properties)
        return data


@dataclass
class FieldRef:
    """Label and breadcrumb path of the text field within its component."""

    label: str = "Unknown Field"
    path: str = ""
    role: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'label': self.label, 'path': self.path}
        if self.role is not None:
            data['role'] = self.role
        return data


@dataclass
class ItemContent:
    """Text content of an item."""

    value: str = ""
    type: str = "text"

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type, 'value': self.value}


@dataclass
class ItemMeta:
    visible: bool = True
    locked: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {'visible': self.visible, 'locked': self.locked}


@dataclass
class ContentItem:
    """A single row of the content inventory, tied to one canvas node."""

    id: str
    node_id: str
    node_url: str = ""
    component: ComponentRef = field(default_factory=ComponentRef)
    field_ref: FieldRef = field(default_factory=FieldRef)
    content: ItemContent = field(default_factory=ItemContent)
    meta: ItemMeta = field(default_factory=ItemMeta)
    annotations: Dict[str, str] = field(default_factory=dict)
    design_system: Optional[Dict[str, Any]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize item to the JSON wire shape."""
        data: Dict[str, Any] = {
            'id': self.id,
            'nodeId': self.node_id,
            'nodeUrl': self.node_url,
            'component': self.component.to_dict(),
            'field': self.field_ref.to_dict(),
            'content': self.content.to_dict(),
            'meta': self.meta.to_dict()
        }
        for name in ITEM_ANNOTATION_FIELDS:
            if name in self.annotations:
                data[name] = self.annotations[name]
        if self.design_system is not None:
            data['designSystem'] = self.design_system
        for key, value in self.extra.items():
            data.setdefault(key, value)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ContentItem':
        """Build an item from a normalized wire-shape dictionary."""
        component = data.get('component', {})
        field_data = data.get('field', {})
        content = data.get('content', {})
        meta = data.get('meta', {})

        raw_kind = component.get('kind', ComponentKind.CUSTOM.value)
        try:
            kind = ComponentKind(raw_kind)
        except ValueError:
            logger.debug(f"Component kind '{raw_kind}' is not a known kind, keeping it as is")
            kind = raw_kind

        return cls(
            id=data['id'],
            node_id=data.get('nodeId', data['id']),
            node_url=data.get('nodeUrl', ''),
            component=ComponentRef(
                kind=kind,
                name=component.get('name', 'Unknown Component'),
                key=component.get('key'),
                variant_properties=component.get('variantProperties')
            ),
            field_ref=FieldRef(
                label=field_data.get('label', 'Unknown Field'),
                path=field_data.get('path', ''),
                role=field_data.get('role')
            ),
            content=ItemContent(value=content.get('value', ''), type=content.get('type', 'text')),
            meta=ItemMeta(visible=meta.get('visible', True), locked=meta.get('locked', False)),
            annotations={
                name: data[name] for name in ITEM_ANNOTATION_FIELDS
                if data.get(name) is not None
            },
            design_system=data.get('designSystem'),
            extra={key: value for key, value in data.items() if key not in _ITEM_KEYS}
        )


@dataclass
class ContentTable:
    """Canonical, versioned record of the content items extracted from a selection."""

    source: TableSource = field(default_factory=TableSource)
    meta: TableMeta = field(default_factory=TableMeta)
    items: List[ContentItem] = field(default_factory=list)
    generated_at_iso: str = field(default_factory=utc_now_iso)
    design_system_by_node_id: Optional[Dict[str, Any]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def add_item(self, item: ContentItem) -> None:
        self.items.append(item)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize table to the JSON wire shape."""
        data: Dict[str, Any] = {
            'type': CONTENT_TABLE_TYPE,
            'version': CONTENT_TABLE_VERSION,
            'generatedAtISO': self.generated_at_iso,
            'source': self.source.to_dict(),
            'meta': self.meta.to_dict(),
            'items': [item.to_dict() for item in self.items]
        }
        if self.design_system_by_node_id is not None:
            data['designSystemByNodeId'] = self.design_system_by_node_id
        for key, value in self.extra.items():
            data.setdefault(key, value)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ContentTable':
        """Deserialize from a normalized wire-shape dictionary."""
        return cls(
            source=TableSource.from_dict(data.get('source', {})),
            meta=TableMeta.from_dict(data.get('meta', {})),
            items=[ContentItem.from_dict(item) for item in data.get('items', [])],
            generated_at_iso=data.get('generatedAtISO') or utc_now_iso(),
            design_system_by_node_id=data.get('designSystemByNodeId'),
            extra={key: value for key, value in data.items() if key not in _TABLE_KEYS}
        )


@dataclass
class ValidationResult:
    """Outcome of a schema check. ``warnings`` is reserved for non-fatal issues."""

    ok: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'ok': self.ok, 'errors': list(self.errors), 'warnings': list(self.warnings)}


def as_wire_dict(table: Any) -> Any:
    """Return the wire-shape dictionary for a ContentTable, or the value unchanged."""
    if isinstance(table, ContentTable):
        return table.to_dict()
    return table


__all__ = [
    'CONTENT_TABLE_TYPE',
    'CONTENT_TABLE_VERSION',
    'DEFAULT_CONTENT_MODEL',
    'DEFAULT_CONTENT_STAGE',
    'DEFAULT_SCHEMA_VERSION',
    'PENDING_STATUS',
    'ITEM_ANNOTATION_FIELDS',
    'utc_now_iso',
    'TableFormatPreset',
    'ComponentKind',
    'TableSource',
    'TableMeta',
    'ComponentRef',
    'FieldRef',
    'ItemContent',
    'ItemMeta',
    'ContentItem',
    'ContentTable',
    'ValidationResult',
    'as_wire_dict'
]
