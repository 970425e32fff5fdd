"""Tests for content table normalization."""

import copy

import pytest

from content_table.normalizer import build_item, build_table_meta, normalize_content_table
from content_table.validator import validate_content_table
from models import CONTENT_TABLE_TYPE, PENDING_STATUS, ContentTable
from factories import make_item, make_table

PARTIAL_TABLES = [
    {'items': None},
    {'items': 'not a list'},
    {'items': [None, 5, 'text', {}]},
    {'items': [{'nodeId': '3:4', 'content': {'value': 7}}], 'source': 'nowhere'},
    {'items': [], 'meta': {'contentStage': 'Review', 'version': 2}, 'designSystemByNodeId': None},
    {'items': [{'component': {'name': '', 'variantProperties': {'Size': 'L'}}}]},
    make_table(),
]


class TestNormalizationProperties:
    """Invariants that hold for every input."""

    @pytest.mark.parametrize('table', PARTIAL_TABLES)
    def test_result_validates(self, table):
        assert validate_content_table(normalize_content_table(table)).ok

    @pytest.mark.parametrize('table', PARTIAL_TABLES)
    def test_idempotent(self, table):
        once = normalize_content_table(table)
        assert normalize_content_table(once) == once

    @pytest.mark.parametrize('table', PARTIAL_TABLES)
    def test_input_not_mutated(self, table):
        before = copy.deepcopy(table)
        normalize_content_table(table)
        assert table == before

    def test_valid_table_unchanged(self):
        table = make_table()
        assert normalize_content_table(table) == table


class TestNormalizationDefaults:
    """Default values filled in for missing or malformed fields."""

    def test_empty_table(self):
        result = normalize_content_table({'items': []})

        assert result['type'] == CONTENT_TABLE_TYPE
        assert result['version'] == 1
        assert result['generatedAtISO']
        assert result['source']['pageName'] == 'Unknown Page'
        assert result['source']['selectionName'] == 'Unknown Selection'
        assert result['meta']['adaStatus'] == PENDING_STATUS
        assert result['meta']['contentModel'] == 'Universal v2'
        assert result['meta']['version'] == 'v1'
        assert result['items'] == []

    def test_non_mapping_input(self):
        result = normalize_content_table(None)

        assert result['items'] == []
        assert validate_content_table(result).ok

    def test_item_ids(self):
        result = normalize_content_table({'items': [{}, {'nodeId': '5:6'}, {'id': 'a'}]})
        items = result['items']

        assert (items[0]['id'], items[0]['nodeId']) == ('item_0', 'item_0')
        assert (items[1]['id'], items[1]['nodeId']) == ('5:6', '5:6')
        assert (items[2]['id'], items[2]['nodeId']) == ('a', 'a')

    def test_item_sub_records(self):
        item = build_item({'component': {'kind': ''}, 'meta': {'visible': 'no'}}, 3)

        assert item['component'] == {'kind': 'custom', 'name': 'Unknown Component'}
        assert item['field'] == {'label': 'Unknown Field', 'path': ''}
        assert item['content'] == {'type': 'text', 'value': ''}
        assert item['meta'] == {'visible': True, 'locked': False}

    def test_content_type_forced_to_text(self):
        item = build_item(make_item(content={'type': 'image', 'value': 'Hi'}), 0)

        assert item['content'] == {'type': 'text', 'value': 'Hi'}

    def test_numbers_become_strings(self):
        item = build_item({'id': 12, 'content': {'value': 3.5}}, 0)

        assert item['id'] == '12'
        assert item['content']['value'] == '3.5'

    def test_root_node_defaults_to_selection(self):
        meta = build_table_meta({}, {'selectionNodeId': '1:2', 'selectionName': 'Hero'})

        assert meta['rootNodeId'] == '1:2'
        assert meta['rootNodeName'] == 'Hero'
        assert meta['rootNodeUrl'] == ''

    def test_extra_keys_preserved(self):
        item = make_item(notes='Check tone', component={'kind': 'instance', 'name': 'Button', 'key': 'k1'})
        result = normalize_content_table(make_table(items=[item], customField={'a': 1}))

        assert result['customField'] == {'a': 1}
        assert result['items'][0]['notes'] == 'Check tone'
        assert result['items'][0]['component']['key'] == 'k1'

    def test_design_system_map(self):
        kept = normalize_content_table(make_table(designSystemByNodeId={'1:2': {'system': 'DS'}}))
        dropped = normalize_content_table(make_table(designSystemByNodeId=['not', 'a', 'map']))

        assert kept['designSystemByNodeId'] == {'1:2': {'system': 'DS'}}
        assert 'designSystemByNodeId' not in dropped

    def test_canonical_key_order(self):
        result = normalize_content_table({'items': [], 'zeta': 1, 'source': {}})

        assert list(result)[:6] == ['type', 'version', 'generatedAtISO', 'source', 'meta', 'items']
        assert list(result)[-1] == 'zeta'

    def test_dataclass_input(self):
        table = ContentTable.from_dict(make_table())

        result = normalize_content_table(table)

        assert result['items'][0]['content']['value'] == 'Buy\tNow'
        assert result['generatedAtISO'] == '2024-05-01T12:00:00.000Z'
