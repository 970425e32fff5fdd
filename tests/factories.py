"""Builders for content tables used across the test suite."""

import copy

from models import CONTENT_TABLE_TYPE, CONTENT_TABLE_VERSION


def make_item(item_id='item-1', **overrides):
    item = {
        'id': item_id,
        'nodeId': '10:' + item_id.split('-')[-1],
        'nodeUrl': f'https://www.figma.com/file/abc?node-id={item_id}',
        'component': {'kind': 'instance', 'name': 'Button'},
        'field': {'label': 'CTA', 'path': 'Button/CTA'},
        'content': {'type': 'text', 'value': 'Buy\tNow'},
        'meta': {'visible': True, 'locked': False},
    }
    item.update(copy.deepcopy(overrides))
    return item


def make_table(items=None, **overrides):
    table = {
        'type': CONTENT_TABLE_TYPE,
        'version': CONTENT_TABLE_VERSION,
        'generatedAtISO': '2024-05-01T12:00:00.000Z',
        'source': {
            'pageId': '0:1',
            'pageName': 'Checkout',
            'selectionNodeId': '1:2',
            'selectionName': 'Payment Form',
        },
        'meta': {
            'contentModel': 'Universal v2',
            'contentStage': 'Draft',
            'adaStatus': '⏳ Pending',
            'legalStatus': '⏳ Pending',
            'lastUpdated': '2024-05-01T12:00:00.000Z',
            'version': 'v1',
            'rootNodeId': '1:2',
            'rootNodeName': 'Payment Form',
            'rootNodeUrl': 'https://www.figma.com/file/abc?node-id=1-2',
        },
        'items': [make_item()] if items is None else items,
    }
    table.update(copy.deepcopy(overrides))
    return table
