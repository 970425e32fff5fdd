"""Tests for the async export pipeline."""

import asyncio
import logging

import pytest

from content_table.validator import validate_content_table
from orchestrator import (
    ExportOrchestrator,
    PostProcessHookError,
    SelectionContext,
    build_export_document,
)
from factories import make_item, make_table

ORCHESTRATOR_LOGGER = 'content_table_export.orchestrator'


def run(coroutine):
    return asyncio.run(coroutine)


@pytest.fixture
def orchestrator():
    return ExportOrchestrator()


class TestBuildExportDocument:
    def test_without_hook(self, orchestrator):
        table = make_table()

        result = run(orchestrator.build_export_document(table, preset='universal'))

        assert result.document.startswith("<table style='border-collapse: collapse;")
        assert '<script' not in result.document
        assert '"' not in result.document.split('>', 1)[0]
        assert result.table_used == table
        assert result.hook_error is None

    def test_table_used_is_normalized(self, orchestrator):
        result = run(orchestrator.build_export_document({'items': [{'content': {'value': 'Hi'}}]}))

        assert validate_content_table(result.table_used).ok
        assert result.table_used['items'][0]['id'] == 'item_0'
        assert '>Hi<' in result.document

    def test_document_is_xhtml_encoded(self, orchestrator):
        item = make_item(content={'type': 'text', 'value': 'Line 1\nTom & Jerry (café)'})

        result = run(orchestrator.build_export_document(make_table(items=[item])))

        assert 'Line 1<br />Tom &amp; Jerry caf </td>' in result.document
        assert result.table_used['items'][0]['content']['value'] == 'Line 1\nTom & Jerry (café)'

    def test_default_preset_from_config(self):
        orchestrator = ExportOrchestrator(config={'export': {'default_preset': 'dev-only'}})

        result = run(orchestrator.build_export_document(make_table()))

        assert '>Field Label</th>' in result.document
        assert 'Component Kind' not in result.document

    def test_unknown_preset_falls_back(self, orchestrator):
        fallback = run(orchestrator.build_export_document(make_table(), preset='content-model-9'))
        universal = run(orchestrator.build_export_document(make_table(), preset='universal'))

        assert fallback.document == universal.document

    def test_module_level_function(self):
        result = run(build_export_document(make_table(), preset='ada-only'))

        assert '>Path</th>' in result.document

    def test_sync_wrapper(self, orchestrator):
        result = orchestrator.build_export_document_sync(make_table(), preset='universal')

        assert result.table_used['items'][0]['id'] == 'item-1'


class TestPostProcessHook:
    def test_sync_hook_replaces_table(self, orchestrator):
        def hook(table, selection_context):
            table['items'][0]['content']['value'] = 'Reviewed copy'
            return table

        result = run(orchestrator.build_export_document(make_table(), post_process_hook=hook))

        assert 'Reviewed copy' in result.document
        assert result.table_used['items'][0]['content']['value'] == 'Reviewed copy'

    def test_async_hook_replaces_table(self, orchestrator):
        async def hook(table, selection_context):
            await asyncio.sleep(0)
            table['items'].append(make_item('item-2', content={'type': 'text', 'value': 'Second'}))
            return table

        result = run(orchestrator.build_export_document(make_table(), post_process_hook=hook))

        assert len(result.table_used['items']) == 2
        assert 'Second' in result.document

    def test_hook_receives_selection_context(self, orchestrator):
        seen = []

        def hook(table, selection_context):
            seen.append(selection_context)
            return table

        run(orchestrator.build_export_document(make_table(), post_process_hook=hook))

        assert seen == [SelectionContext(page_id='0:1', page_name='Checkout', root_node_id='1:2')]

    def test_explicit_selection_context(self, orchestrator):
        seen = []
        context = SelectionContext(page_id='9:9', page_name='Other', root_node_id='9:10')

        def hook(table, selection_context):
            seen.append(selection_context)
            return table

        run(orchestrator.build_export_document(
            make_table(), post_process_hook=hook, selection_context=context
        ))

        assert seen == [context]

    def test_failing_hook_falls_back(self, orchestrator, caplog):
        table = make_table()

        def hook(table, selection_context):
            table['items'][0]['content']['value'] = 'half-modified'
            raise RuntimeError('service unavailable')

        with caplog.at_level(logging.ERROR, logger=ORCHESTRATOR_LOGGER):
            result = run(orchestrator.build_export_document(table, post_process_hook=hook))

        assert result.table_used == table
        assert table['items'][0]['content']['value'] == 'Buy\tNow'
        assert isinstance(result.hook_error, PostProcessHookError)
        assert isinstance(result.hook_error.cause, RuntimeError)
        assert 'service unavailable' in caplog.text

    def test_rejected_async_hook_falls_back(self, orchestrator):
        async def hook(table, selection_context):
            raise ValueError('bad response')

        result = run(orchestrator.build_export_document(make_table(), post_process_hook=hook))

        assert result.table_used == make_table()
        assert result.hook_error is not None

    def test_hook_returning_non_table_falls_back(self, orchestrator):
        result = run(orchestrator.build_export_document(
            make_table(), post_process_hook=lambda table, selection_context: None
        ))

        assert result.table_used == make_table()
        assert 'NoneType' in str(result.hook_error)

    def test_hook_output_is_normalized(self, orchestrator):
        def hook(table, selection_context):
            del table['meta']
            table['items'][0].pop('content')
            return table

        result = run(orchestrator.build_export_document(make_table(), post_process_hook=hook))

        assert validate_content_table(result.table_used).ok
        assert result.table_used['items'][0]['content'] == {'type': 'text', 'value': ''}

    def test_hook_diagnostics(self, caplog):
        orchestrator = ExportOrchestrator(config={'dev': {'enable_validation_logging': True}})

        def hook(table, selection_context):
            table['version'] = 7
            return table

        with caplog.at_level(logging.DEBUG, logger=ORCHESTRATOR_LOGGER):
            result = run(orchestrator.build_export_document(make_table(), post_process_hook=hook))

        assert result.table_used['version'] == 1
        assert 'schema errors' in caplog.text

    def test_cancellation_not_swallowed(self, orchestrator):
        async def hook(table, selection_context):
            raise asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            run(orchestrator.build_export_document(make_table(), post_process_hook=hook))


class TestRunPostProcessHook:
    def test_hook_gets_a_copy(self, orchestrator):
        table = make_table()

        def hook(table, selection_context):
            table['items'].clear()
            return table

        result = run(orchestrator.run_post_process_hook(hook, table, SelectionContext()))

        assert result.ok
        assert result.table['items'] == []
        assert len(table['items']) == 1

    def test_error_result(self, orchestrator):
        def hook(table, selection_context):
            raise KeyError('items')

        result = run(orchestrator.run_post_process_hook(hook, make_table(), SelectionContext()))

        assert not result.ok
        assert result.table is None
        assert isinstance(result.error.cause, KeyError)


class TestSelectionContext:
    def test_from_table(self):
        context = SelectionContext.from_table(make_table())

        assert context.to_dict() == {'pageId': '0:1', 'pageName': 'Checkout', 'rootNodeId': '1:2'}

    def test_root_falls_back_to_selection(self):
        table = make_table()
        table['meta']['rootNodeId'] = ''

        assert SelectionContext.from_table(table).root_node_id == '1:2'

    def test_malformed_table(self):
        assert SelectionContext.from_table(None) == SelectionContext()
        assert SelectionContext.from_table({'source': 'x', 'meta': 3}) == SelectionContext()
