"""Generated content table presets.

This file is generated from content-models.md by tools/generate_presets.py.
Edit content-models.md and regenerate instead of editing it by hand.
"""

PRESET_RECORDS = [
    {
        'id': 'universal',
        'label': 'Universal Table',
        'description': 'Every column of the canonical schema.',
        'enabled': True,
        'columns': [
            {'key': 'id', 'label': 'ID', 'path': 'id'},
            {'key': 'component', 'label': 'Component', 'path': 'component.name'},
            {'key': 'componentKind', 'label': 'Component Kind', 'path': 'component.kind'},
            {'key': 'fieldLabel', 'label': 'Field Label', 'path': 'field.label'},
            {'key': 'path', 'label': 'Path', 'path': 'field.path'},
            {'key': 'content', 'label': 'Content', 'path': 'content.value'},
            {'key': 'visible', 'label': 'Visible', 'path': 'meta.visible'},
            {'key': 'locked', 'label': 'Locked', 'path': 'meta.locked'},
            {'key': 'nodeUrl', 'label': 'Node URL', 'path': 'nodeUrl'},
        ],
    },
    {
        'id': 'content-model-1',
        'label': 'Universal v2',
        'description': 'Copy review sheet with CMS keys, tickets and accessibility notes.',
        'enabled': True,
        'columns': [
            {'key': 'nodeUrl', 'label': 'Design Ref', 'path': 'nodeUrl'},
            {'key': 'component', 'label': 'Component Name', 'path': 'component.name'},
            {'key': 'textLayerName', 'label': 'Text Layer Name', 'path': 'textLayerName'},
            {'key': 'role', 'label': 'Field / Role', 'path': 'field.role'},
            {'key': 'content', 'label': 'Content', 'path': 'content.value'},
            {'key': 'notes', 'label': 'Notes', 'path': 'notes'},
            {'key': 'contentKey', 'label': 'Content Key (CMS)', 'path': 'contentKey'},
            {'key': 'jiraTicket', 'label': 'Jira / Ticket', 'path': 'jiraTicket'},
            {'key': 'adaNotes', 'label': 'ADA Notes / Flags', 'path': 'adaNotes'},
            {'key': 'errorMessage', 'label': 'Error Message', 'path': 'errorMessage'},
        ],
    },
    {
        'id': 'content-model-2',
        'label': 'Component Variants',
        'description': 'Content grouped by component variant.',
        'enabled': True,
        'columns': [
            {'key': 'component', 'label': 'Component', 'path': 'component.name'},
            {'key': 'size', 'label': 'Size', 'path': 'variantProperties.Size'},
            {'key': 'state', 'label': 'State', 'path': 'variantProperties.State'},
            {'key': 'fieldLabel', 'label': 'Field Label', 'path': 'field.label'},
            {'key': 'content', 'label': 'Content', 'path': 'content.value'},
        ],
    },
    {
        'id': 'content-model-3',
        'label': 'Content Model 3',
        'description': 'Reserved.',
        'enabled': False,
        'columns': [],
    },
    {
        'id': 'content-model-4',
        'label': 'Content Model 4',
        'description': 'Reserved.',
        'enabled': False,
        'columns': [],
    },
    {
        'id': 'content-model-5',
        'label': 'Content Model 5',
        'description': 'Reserved.',
        'enabled': False,
        'columns': [],
    },
    {
        'id': 'ada-only',
        'label': 'ADA Only',
        'description': 'Accessibility review columns.',
        'enabled': True,
        'columns': [
            {'key': 'fieldLabel', 'label': 'Field Label', 'path': 'field.label'},
            {'key': 'content', 'label': 'Content', 'path': 'content.value'},
            {'key': 'path', 'label': 'Path', 'path': 'field.path'},
            {'key': 'nodeUrl', 'label': 'Node URL', 'path': 'nodeUrl'},
        ],
    },
    {
        'id': 'dev-only',
        'label': 'Dev Only',
        'description': 'Minimal hand-off columns for engineering.',
        'enabled': True,
        'columns': [
            {'key': 'component', 'label': 'Component', 'path': 'component.name'},
            {'key': 'fieldLabel', 'label': 'Field Label', 'path': 'field.label'},
            {'key': 'content', 'label': 'Content', 'path': 'content.value'},
            {'key': 'nodeUrl', 'label': 'Node URL', 'path': 'nodeUrl'},
        ],
    },
]
