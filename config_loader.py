"""Configuration loader with YAML support and environment variable substitution."""

import copy
import os
import re
from typing import Any, Dict

import yaml

from models import TableFormatPreset

EXPORT_FORMATS = ('html', 'tsv', 'json', 'txt', 'xhtml')

DEFAULT_CONFIG: Dict[str, Any] = {
    'logging': {
        'level': None,
        'file': None,
    },
    'dev': {
        'enable_validation_logging': False,
    },
    'export': {
        'default_preset': TableFormatPreset.UNIVERSAL.value,
        'embed_json': True,
        'full_document': False,
        'output_directory': './content-table-export',
        'formats': ['html', 'tsv', 'json'],
    },
    'presets': {
        'catalogue_path': None,
    },
}


class ConfigLoader:
    """Handles loading and validation of configuration files."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')

    @classmethod
    def load(cls, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from YAML file with environment variable substitution.

        Missing sections and keys are filled from DEFAULT_CONFIG.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Parsed configuration dictionary

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
            ValueError: If the file does not contain a mapping
        """
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)

        # An empty file is an empty configuration
        if config_data is None:
            config_data = {}

        if not isinstance(config_data, dict):
            raise ValueError("Configuration file must contain a dictionary")

        config_data = cls._substitute_env_vars_recursive(config_data)

        return cls.with_defaults(config_data)

    @classmethod
    def with_defaults(cls, config: Dict[str, Any]) -> Dict[str, Any]:
        """Return a copy of config with DEFAULT_CONFIG filled in underneath."""
        return _deep_merge(DEFAULT_CONFIG, config)

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> None:
        """
        Validate configuration values.

        Args:
            config: Configuration dictionary to validate

        Raises:
            ValueError: If validation fails
        """
        level = get_nested(config, 'logging.level')
        if level is not None:
            allowed_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
            if not isinstance(level, str) or level.upper() not in allowed_levels:
                raise ValueError(f"logging.level must be one of: {sorted(allowed_levels)}")

        for path in ('dev.enable_validation_logging', 'export.embed_json', 'export.full_document'):
            value = get_nested(config, path)
            if value is not None and not isinstance(value, bool):
                raise ValueError(f"{path} must be a boolean")

        default_preset = get_nested(config, 'export.default_preset', TableFormatPreset.UNIVERSAL.value)
        if not isinstance(default_preset, str) or not default_preset:
            raise ValueError("export.default_preset must be a non-empty string")

        formats = get_nested(config, 'export.formats', [])
        if not isinstance(formats, list) or not formats:
            raise ValueError(f"export.formats must be a non-empty list of: {list(EXPORT_FORMATS)}")
        unknown = [fmt for fmt in formats if fmt not in EXPORT_FORMATS]
        if unknown:
            raise ValueError(
                f"export.formats contains unknown formats {unknown}; allowed: {list(EXPORT_FORMATS)}"
            )

        output_dir = get_nested(config, 'export.output_directory')
        if output_dir:
            cls._check_unsubstituted(output_dir, 'export.output_directory')
            if os.path.exists(output_dir) and not os.path.isdir(output_dir):
                raise ValueError(f"export.output_directory '{output_dir}' is not a directory")

        catalogue_path = get_nested(config, 'presets.catalogue_path')
        if catalogue_path:
            cls._check_unsubstituted(catalogue_path, 'presets.catalogue_path')
            if not os.path.isfile(catalogue_path):
                raise ValueError(f"presets.catalogue_path '{catalogue_path}' is not a file")

    @classmethod
    def merge_with_args(cls, config: Dict[str, Any], args) -> Dict[str, Any]:
        """
        Merge configuration file with CLI arguments.
        CLI arguments take precedence over config file values.

        Args:
            config: Base configuration dictionary
            args: CLI arguments with attributes matching config keys

        Returns:
            Merged configuration dictionary
        """
        merged = copy.deepcopy(config)

        for section in ('export', 'logging', 'dev'):
            if section not in merged or not isinstance(merged[section], dict):
                merged[section] = {}

        if getattr(args, 'preset', None):
            merged['export']['default_preset'] = args.preset

        if getattr(args, 'output_dir', None):
            merged['export']['output_directory'] = args.output_dir

        if getattr(args, 'formats', None):
            merged['export']['formats'] = list(args.formats)

        if getattr(args, 'embed_json', None) is not None:
            merged['export']['embed_json'] = args.embed_json

        if getattr(args, 'full_document', None) is not None:
            merged['export']['full_document'] = args.full_document

        verbose = getattr(args, 'verbose', 0) or 0
        if verbose >= 2:
            merged['logging']['level'] = 'DEBUG'
            merged['dev']['enable_validation_logging'] = True
        elif verbose >= 1:
            merged['logging']['level'] = 'INFO'

        return merged

    @classmethod
    def _substitute_env_vars_recursive(cls, data: Any) -> Any:
        """Recursively substitute environment variables in data structure."""
        if isinstance(data, dict):
            return {key: cls._substitute_env_vars_recursive(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [cls._substitute_env_vars_recursive(item) for item in data]
        elif isinstance(data, str):
            return cls._substitute_env_vars(data)
        else:
            return data

    @classmethod
    def _substitute_env_vars(cls, value: str) -> str:
        """Substitute environment variables in a string value."""
        def replace_match(match):
            var_name = match.group(1)
            env_value = os.getenv(var_name)
            return env_value if env_value is not None else match.group(0)

        return cls.ENV_VAR_PATTERN.sub(replace_match, value)

    @classmethod
    def _check_unsubstituted(cls, value: Any, field: str) -> None:
        """Reject values that still reference an unset environment variable."""
        if isinstance(value, str):
            match = cls.ENV_VAR_PATTERN.search(value)
            if match:
                raise ValueError(
                    f"Configuration field '{field}' contains unsubstituted environment variable: {value}. "
                    f"Please set the {match.group(1)} environment variable or provide a value in config file."
                )


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def get_nested(config: dict, path: str, default: Any = None) -> Any:
    """Safely retrieve nested configuration values using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "export.default_preset")
        default: Default value if path doesn't exist

    Returns:
        Value at the nested path or default
    """
    keys = path.split('.')
    value = config

    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


__all__ = ['ConfigLoader', 'DEFAULT_CONFIG', 'EXPORT_FORMATS', 'get_nested']
