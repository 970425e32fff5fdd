"""Tests for logging helpers."""

import logging

from config_loader import ConfigLoader
from logger import ROOT_LOGGER_NAME, log_config


class TestLogConfig:
    def test_effective_settings_logged(self, caplog):
        config = ConfigLoader.with_defaults({
            'export': {'default_preset': 'ada-only', 'formats': ['tsv']},
            'presets': {'catalogue_path': 'models.md'},
        })

        with caplog.at_level(logging.INFO, logger=ROOT_LOGGER_NAME):
            log_config(config)

        assert 'Default Preset: ada-only' in caplog.text
        assert "Formats: ['tsv']" in caplog.text
        assert 'Preset Catalogue: models.md' in caplog.text
        assert 'Log File: Not Set' in caplog.text

    def test_builtin_catalogue_label(self, caplog):
        with caplog.at_level(logging.INFO, logger=ROOT_LOGGER_NAME):
            log_config(ConfigLoader.with_defaults({}))

        assert 'Preset Catalogue: built-in' in caplog.text
