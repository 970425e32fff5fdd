"""
Orchestration package for the content table export pipeline.

Sequences the export phases: post-process hook -> normalize -> render ->
XHTML encode, producing a payload for the Confluence document API.
"""

from .export_orchestrator import (
    ExportOrchestrator,
    ExportResult,
    HookResult,
    PostProcessHookError,
    SelectionContext,
    build_export_document,
)

__all__ = [
    'ExportOrchestrator',
    'ExportResult',
    'HookResult',
    'PostProcessHookError',
    'SelectionContext',
    'build_export_document'
]
