"""
Export orchestrator for producing Confluence-ready documents from content tables.

Sequences the export pipeline: post-process hook -> normalize -> render ->
XHTML encode. The optional hook is the only asynchronous step; its failures
are isolated and the export continues with the table as it was before the hook.
"""

import asyncio
import copy
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from config_loader import get_nested
from models import TableFormatPreset, as_wire_dict
from content_table import (
    ContentTableValidator,
    TableRenderer,
    load_catalogue,
    normalize_content_table,
)
from encoding import encode_document

logger = logging.getLogger('content_table_export.orchestrator')

PostProcessHook = Callable[..., Union[Any, Awaitable[Any]]]


@dataclass
class SelectionContext:
    """Where on the canvas a table came from, as passed to post-process hooks."""

    page_id: str = ''
    page_name: str = ''
    root_node_id: str = ''

    @classmethod
    def from_table(cls, table: Any) -> 'SelectionContext':
        """Derive the context from a table's source and meta records."""
        data = as_wire_dict(table)
        if not isinstance(data, Mapping):
            return cls()

        source = data.get('source') if isinstance(data.get('source'), Mapping) else {}
        meta = data.get('meta') if isinstance(data.get('meta'), Mapping) else {}
        root_node_id = meta.get('rootNodeId') or source.get('selectionNodeId') or ''

        return cls(
            page_id=str(source.get('pageId') or ''),
            page_name=str(source.get('pageName') or ''),
            root_node_id=str(root_node_id)
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            'pageId': self.page_id,
            'pageName': self.page_name,
            'rootNodeId': self.root_node_id
        }


class PostProcessHookError(Exception):
    """A post-process hook raised or returned something that is not a table."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


@dataclass
class HookResult:
    """Outcome of a hook call: either a replacement table or an error."""

    table: Optional[Dict[str, Any]] = None
    error: Optional[PostProcessHookError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.table is not None


@dataclass
class ExportResult:
    """The encoded document and the exact table it was rendered from."""

    document: str
    table_used: Dict[str, Any]
    hook_error: Optional[PostProcessHookError] = None


class ExportOrchestrator:
    """Coordinates the export pipeline for a single table."""

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        renderer: Optional[TableRenderer] = None,
        validator: Optional[ContentTableValidator] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize export orchestrator.

        Args:
            config: Configuration dictionary (``export.*``, ``dev.*`` and
                ``presets.*`` settings are read)
            renderer: Optional renderer; built from ``presets.catalogue_path``
                when not given
            validator: Optional validator used for hook diagnostics
            logger: Optional logger instance
        """
        self.config = config or {}
        self.logger = logger or logging.getLogger('content_table_export.orchestrator')

        self.diagnostics = bool(get_nested(self.config, 'dev.enable_validation_logging', False))
        self.default_preset = get_nested(
            self.config, 'export.default_preset', TableFormatPreset.UNIVERSAL.value
        )

        if renderer is None:
            catalogue = load_catalogue(get_nested(self.config, 'presets.catalogue_path'), logger=self.logger)
            renderer = TableRenderer(catalogue=catalogue, logger=self.logger)
        self.renderer = renderer
        self.validator = validator or ContentTableValidator(
            enable_logging=self.diagnostics, logger=self.logger
        )

    async def run_post_process_hook(
        self,
        hook: PostProcessHook,
        table: Any,
        selection_context: SelectionContext
    ) -> HookResult:
        """
        Call a post-process hook in isolation.

        The hook receives a deep copy of the table, so a failing hook cannot
        leave the caller's table half-modified. Sync and async hooks are both
        accepted.

        Args:
            hook: Callable taking ``table`` and ``selection_context`` keywords
            table: Table dictionary or ContentTable
            selection_context: Context derived from the table

        Returns:
            HookResult with the replacement table, or with an error
        """
        table_copy = copy.deepcopy(as_wire_dict(table))

        try:
            returned = hook(table=table_copy, selection_context=selection_context)
            if inspect.isawaitable(returned):
                returned = await returned
        except Exception as e:
            return HookResult(error=PostProcessHookError(f"Post-process hook failed: {e}", cause=e))

        returned = as_wire_dict(returned)
        if not isinstance(returned, Mapping):
            return HookResult(error=PostProcessHookError(
                f"Post-process hook returned {type(returned).__name__}, expected a table"
            ))

        return HookResult(table=dict(returned))

    async def build_export_document(
        self,
        table: Any,
        preset: Union[str, TableFormatPreset, None] = None,
        post_process_hook: Optional[PostProcessHook] = None,
        selection_context: Optional[SelectionContext] = None
    ) -> ExportResult:
        """
        Build the XHTML document for a table.

        Args:
            table: Table dictionary or ContentTable
            preset: Preset id; ``export.default_preset`` when not given
            post_process_hook: Optional hook that may replace the table
            selection_context: Optional context; derived from the table when
                not given

        Returns:
            ExportResult with the encoded document and the normalized table used
        """
        preset = preset or self.default_preset
        working = as_wire_dict(table)
        hook_error = None

        if post_process_hook is not None:
            context = selection_context or SelectionContext.from_table(working)
            self.logger.debug(f"Running post-process hook for page '{context.page_name}'")
            result = await self.run_post_process_hook(post_process_hook, working, context)

            if result.ok:
                working = result.table
                if self.diagnostics:
                    report = self.validator.validate(working)
                    if not report.ok:
                        self.logger.debug(
                            f"Post-process hook output has {len(report.errors)} schema errors; "
                            "normalizing"
                        )
            else:
                hook_error = result.error
                self.logger.error(
                    f"{hook_error}; exporting the table without post-processing",
                    exc_info=hook_error.cause
                )

        normalized = normalize_content_table(working)
        html = self.renderer.to_html(normalized, preset, embed_json=False)
        document = encode_document(html)

        self.logger.info(
            f"Built export document: {len(normalized['items'])} items, preset '{preset}', "
            f"{len(document)} characters"
        )
        return ExportResult(document=document, table_used=normalized, hook_error=hook_error)

    def build_export_document_sync(self, table: Any, **kwargs) -> ExportResult:
        """Run build_export_document() to completion from synchronous code."""
        return asyncio.run(self.build_export_document(table, **kwargs))


async def build_export_document(
    table: Any,
    preset: Union[str, TableFormatPreset, None] = None,
    post_process_hook: Optional[PostProcessHook] = None,
    config: Optional[Dict[str, Any]] = None
) -> ExportResult:
    """
    Convenience function to build an export document with a fresh orchestrator.

    Example:
        >>> result = asyncio.run(build_export_document(table, preset='content-model-1'))
        >>> client.update_page(page_id, result.document)
    """
    orchestrator = ExportOrchestrator(config=config)
    return await orchestrator.build_export_document(
        table, preset=preset, post_process_hook=post_process_hook
    )


__all__ = [
    'SelectionContext',
    'PostProcessHookError',
    'HookResult',
    'ExportResult',
    'ExportOrchestrator',
    'build_export_document'
]
