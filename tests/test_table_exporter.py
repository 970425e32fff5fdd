"""Tests for writing table projections to disk."""

import json

import pytest

from config_loader import ConfigLoader
from content_table.html_transform import extract_from_html
from content_table.normalizer import normalize_content_table
from exporters import TableExporter
from factories import make_table


def _config(**export):
    return ConfigLoader.with_defaults({'export': export})


@pytest.fixture
def table():
    return normalize_content_table(make_table())


class TestTableExporter:
    def test_default_formats(self, tmp_path, table):
        exporter = TableExporter(_config(), output_dir=tmp_path)

        written = exporter.export(table, 'universal', 'Payment Form')

        assert sorted(written) == ['html', 'json', 'tsv']
        assert written['html'] == tmp_path / 'payment-form.universal.html'
        assert written['tsv'] == tmp_path / 'payment-form.universal.tsv'
        assert written['json'] == tmp_path / 'payment-form.json'
        assert json.loads(written['json'].read_text(encoding='utf-8')) == table
        assert written['tsv'].read_text(encoding='utf-8').startswith('ID\tComponent')

    def test_html_options(self, tmp_path, table):
        exporter = TableExporter(_config(embed_json=False, full_document=True, formats=['html']), output_dir=tmp_path)

        html = exporter.export(table, 'dev-only', 'table')['html'].read_text(encoding='utf-8')

        assert html.startswith('<!DOCTYPE html>')
        assert extract_from_html(html) is None

    def test_embedded_json_recoverable(self, tmp_path, table):
        exporter = TableExporter(_config(formats=['html']), output_dir=tmp_path)

        html = exporter.export(table, 'dev-only', 'table')['html'].read_text(encoding='utf-8')

        assert extract_from_html(html) == table

    def test_xhtml_requires_document(self, tmp_path, table):
        exporter = TableExporter(_config(formats=['txt', 'xhtml']), output_dir=tmp_path)

        skipped = exporter.export(table, 'universal', 'table')
        written = exporter.export(table, 'universal', 'table', xhtml_document="<table style='x'></table>")

        assert sorted(skipped) == ['txt']
        assert written['xhtml'].read_text(encoding='utf-8') == "<table style='x'></table>"

    def test_unchanged_files_not_rewritten(self, tmp_path, table):
        exporter = TableExporter(_config(), output_dir=tmp_path)

        exporter.export(table, 'universal', 'table')
        exporter.export(table, 'universal', 'table')

        assert exporter.stats['tables_exported'] == 2
        assert exporter.stats['files_written'] == 3
        assert exporter.stats['files_unchanged'] == 3

    def test_output_directory_created(self, tmp_path, table):
        target = tmp_path / 'nested' / 'out'
        exporter = TableExporter(_config(output_directory=str(target), formats=['json']))

        written = exporter.export(table, None, 'table')

        assert written['json'].parent == target
        assert target.is_dir()

    @pytest.mark.parametrize('name, expected', [
        ('Payment Form', 'payment-form'),
        ('  ../etc/passwd ', 'etc-passwd'),
        ('Café (v2)', 'caf-v2'),
        ('', 'content-table'),
        ('***', 'content-table'),
    ])
    def test_sanitize_filename(self, name, expected):
        assert TableExporter._sanitize_filename(name) == expected
