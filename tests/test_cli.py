"""Tests for the content-table-export command line."""

import json
import logging

import pytest

import export_table
from content_table.renderers import to_html
from content_table.normalizer import normalize_content_table
from factories import make_item, make_table


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Run in an empty directory and drop handlers the CLI installs."""
    monkeypatch.chdir(tmp_path)
    yield
    root = logging.getLogger('content_table_export')
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()


def _write_table(path, table):
    path.write_text(json.dumps(table), encoding='utf-8')
    return str(path)


class TestExport:
    def test_exports_configured_formats(self, tmp_path):
        source = _write_table(tmp_path / 'Checkout.json', make_table())
        out = tmp_path / 'out'

        code = export_table.main([source, '--output-dir', str(out), '--format', 'tsv', '--format', 'xhtml'])

        assert code == 0
        assert (out / 'checkout.universal.tsv').read_text(encoding='utf-8').startswith('ID\t')
        assert "<table style='" in (out / 'checkout.universal.xhtml').read_text(encoding='utf-8')

    def test_preset_option(self, tmp_path):
        source = _write_table(tmp_path / 'table.json', make_table())
        out = tmp_path / 'out'

        code = export_table.main([source, '--output-dir', str(out), '--preset', 'dev-only', '--format', 'tsv'])

        assert code == 0
        tsv = (out / 'table.dev-only.tsv').read_text(encoding='utf-8')
        assert tsv.split('\n')[0] == 'Component\tField Label\tContent\tNode URL'

    def test_partial_table_is_normalized(self, tmp_path):
        source = _write_table(tmp_path / 'partial.json', {'items': [{'content': {'value': 'Hello'}}]})
        out = tmp_path / 'out'

        code = export_table.main([source, '--output-dir', str(out), '--format', 'json'])

        data = json.loads((out / 'partial.json').read_text(encoding='utf-8'))
        assert code == 0
        assert data['items'][0]['id'] == 'item_0'
        assert data['type'] == 'universal-content-table'

    def test_html_input(self, tmp_path, capsys):
        table = normalize_content_table(make_table(items=[make_item(content={'type': 'text', 'value': 'From paste'})]))
        source = tmp_path / 'pasted.html'
        source.write_text('<html><body>' + to_html(table) + '</body></html>', encoding='utf-8')

        code = export_table.main([str(source), '--stdout', '--format', 'tsv'])

        assert code == 0
        assert 'From paste' in capsys.readouterr().out

    def test_stdout_formats(self, tmp_path, capsys):
        source = _write_table(tmp_path / 'table.json', make_table())

        assert export_table.main([source, '--stdout', '--format', 'tsv']) == 0
        assert 'Buy Now' in capsys.readouterr().out

        assert export_table.main([source, '--stdout', '--format', 'xhtml']) == 0
        assert capsys.readouterr().out.startswith("<table style='")

        assert export_table.main([source, '--stdout', '--format', 'html', '--no-embed-json']) == 0
        assert '<script' not in capsys.readouterr().out

        assert not (tmp_path / 'content-table-export').exists()

    def test_bad_inputs_fail(self, tmp_path):
        good = _write_table(tmp_path / 'good.json', make_table())
        bad = tmp_path / 'bad.json'
        bad.write_text('{not json', encoding='utf-8')
        missing = str(tmp_path / 'missing.json')

        code = export_table.main([good, str(bad), missing, '--output-dir', str(tmp_path / 'out')])

        assert code == 1
        assert (tmp_path / 'out' / 'good.json').exists()

    def test_html_without_table_fails(self, tmp_path):
        source = tmp_path / 'plain.html'
        source.write_text('<table><tr><td>x</td></tr></table>', encoding='utf-8')

        assert export_table.main([str(source), '--stdout']) == 1


class TestValidateOnly:
    def test_valid(self, tmp_path, capsys):
        source = _write_table(tmp_path / 'table.json', make_table())

        assert export_table.main([source, '--validate-only']) == 0
        assert 'OK' in capsys.readouterr().out
        assert not (tmp_path / 'content-table-export').exists()

    def test_invalid(self, tmp_path, capsys):
        source = _write_table(tmp_path / 'table.json', make_table(version=3))

        assert export_table.main([source, '--validate-only']) == 1
        assert 'Missing or invalid version field' in capsys.readouterr().err


class TestUsageAndConfiguration:
    def test_list_presets(self, capsys):
        assert export_table.main(['--list-presets']) == 0

        out = capsys.readouterr().out
        assert 'universal' in out
        assert 'content-model-3' in out
        assert 'disabled' in out

    def test_no_inputs(self):
        assert export_table.main([]) == 2

    def test_missing_config(self, tmp_path):
        source = _write_table(tmp_path / 'table.json', make_table())

        assert export_table.main([source, '--config', str(tmp_path / 'nope.yaml')]) == 2

    def test_invalid_config(self, tmp_path):
        source = _write_table(tmp_path / 'table.json', make_table())
        (tmp_path / 'config.yaml').write_text('export:\n  formats: [pdf]\n', encoding='utf-8')

        assert export_table.main([source]) == 2

    def test_config_file_used(self, tmp_path):
        source = _write_table(tmp_path / 'table.json', make_table())
        (tmp_path / 'config.yaml').write_text(
            'export:\n  default_preset: ada-only\n  output_directory: exported\n  formats: [tsv]\n',
            encoding='utf-8'
        )

        assert export_table.main([source]) == 0
        assert (tmp_path / 'exported' / 'table.ada-only.tsv').exists()

    def test_unreadable_yaml(self, tmp_path):
        source = _write_table(tmp_path / 'table.json', make_table())
        (tmp_path / 'config.yaml').write_text('export: [unclosed\n', encoding='utf-8')

        assert export_table.main([source]) == 2
