#!/usr/bin/env python3
"""
Generate content_table/presets_generated.py from content-models.md.

The preset catalogue is authored by hand as markdown and compiled into a
Python module at build time, so the runtime never parses markdown unless a
custom catalogue is configured.

Usage:
    python tools/generate_presets.py
    python tools/generate_presets.py --input content-models.md --check
"""

import argparse
import sys
from pathlib import Path
from typing import List

# Add project root to Python path for top-level imports
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from content_table.presets import PresetCatalogue, PresetDefinition, parse_content_models  # noqa: E402

HEADER = '''"""Generated content table presets.

This file is generated from content-models.md by tools/generate_presets.py.
Edit content-models.md and regenerate instead of editing it by hand.
"""
'''


def render_module(definitions: List[PresetDefinition]) -> str:
    """Render preset definitions as the generated module source."""
    lines = [HEADER, 'PRESET_RECORDS = [']
    for definition in definitions:
        lines.append('    {')
        lines.append(f"        'id': {definition.id!r},")
        lines.append(f"        'label': {definition.label!r},")
        lines.append(f"        'description': {definition.description!r},")
        lines.append(f"        'enabled': {definition.enabled!r},")
        if definition.columns:
            lines.append("        'columns': [")
            for column in definition.columns:
                lines.append(f"            {column.to_dict()!r},")
            lines.append('        ],')
        else:
            lines.append("        'columns': [],")
        lines.append('    },')
    lines.append(']')
    return '\n'.join(lines) + '\n'


def main() -> int:
    parser = argparse.ArgumentParser(description="Compile content-models.md into the preset module")
    parser.add_argument(
        '--input',
        default=str(PROJECT_ROOT / 'content-models.md'),
        help='Path to content-models.md'
    )
    parser.add_argument(
        '--output',
        default=str(PROJECT_ROOT / 'content_table' / 'presets_generated.py'),
        help='Path of the generated module'
    )
    parser.add_argument(
        '--check',
        action='store_true',
        help='Exit with status 1 if the generated module is out of date'
    )
    args = parser.parse_args()

    input_path = Path(args.input)
    output_path = Path(args.output)

    if not input_path.is_file():
        print(f"ERROR: {input_path} not found", file=sys.stderr)
        return 2

    definitions = parse_content_models(input_path.read_text(encoding='utf-8'))

    try:
        PresetCatalogue(definitions)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    source = render_module(definitions)

    if args.check:
        current = output_path.read_text(encoding='utf-8') if output_path.exists() else ''
        if current != source:
            print(f"{output_path} is out of date; run tools/generate_presets.py")
            return 1
        print(f"{output_path} is up to date")
        return 0

    output_path.write_text(source, encoding='utf-8')
    enabled = sum(1 for definition in definitions if definition.usable)
    print(f"Wrote {len(definitions)} presets ({enabled} enabled) to {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
