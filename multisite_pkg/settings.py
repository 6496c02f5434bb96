#!/usr/bin/env python3
"""
Settings loader for Multisite.
Supports configuration from multisite.yml, multisite.yaml, or multisite.json files.
"""

import os
import json
import yaml
from typing import Dict, Any, Optional

from .config import ConfigError, GlobalConfig, merge_config, CONFIG_KEYS


class MultisiteSettings:
    """Load and manage Multisite configuration settings."""

    # Default settings; GlobalConfig fields left as None inherit DEFAULT_CONFIG
    DEFAULT_SETTINGS = {
        'base_dir': None,
        'out_dir': None,
        'sites': None,
        'path_prefix': None,
        'template_formats': None,
        'excludes': None,
        'includes_dir': None,
        'layouts_dir': None,
        'generator': None,
        'global_config': None,
        'port': None,
    }

    # Config file names to look for (in order of preference)
    CONFIG_FILES = ['multisite.yml', 'multisite.yaml', 'multisite.json']

    def __init__(self, config_dir: str = None):
        """
        Initialize settings loader.

        Args:
            config_dir: Directory to look for config files. Defaults to current directory.
        """
        self.config_dir = config_dir or os.getcwd()
        self.settings = self.DEFAULT_SETTINGS.copy()
        self.config_file_path = None

    def load_settings(self) -> Dict[str, Any]:
        """
        Load settings from configuration file if it exists.

        Returns:
            Dictionary of configuration settings

        Raises:
            ConfigError: If the file exists but cannot be read or parsed
        """
        config_file = self._find_config_file()

        if config_file:
            self.config_file_path = config_file
            loaded_settings = self._load_config_file(config_file)
            if not isinstance(loaded_settings, dict):
                raise ConfigError(f"Configuration file {config_file} must contain a mapping")
            unknown = set(loaded_settings) - set(self.DEFAULT_SETTINGS)
            if unknown:
                raise ConfigError(f"Unknown settings in {config_file}: {', '.join(sorted(unknown))}")
            self.settings.update(loaded_settings)

        return self.settings.copy()

    def _find_config_file(self) -> Optional[str]:
        """
        Find the first available configuration file.

        Returns:
            Path to config file or None if not found
        """
        for filename in self.CONFIG_FILES:
            config_path = os.path.join(self.config_dir, filename)
            if os.path.exists(config_path):
                return config_path
        return None

    def _load_config_file(self, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from a file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Dictionary of configuration settings
        """
        file_ext = os.path.splitext(config_path)[1].lower()
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                if file_ext in ['.yml', '.yaml']:
                    return yaml.safe_load(f) or {}
                elif file_ext == '.json':
                    return json.load(f) or {}
                else:
                    raise ConfigError(f"Unsupported config file format: {file_ext}")
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in configuration file {config_path}: {e}")
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {config_path}: {e}")
        except (IOError, OSError) as e:
            raise ConfigError(f"Error reading configuration file {config_path}: {e}")

    def create_sample_config(self, file_format: str = 'yml') -> str:
        """
        Create a sample configuration file.

        Args:
            file_format: Format for config file ('yml', 'yaml', or 'json')

        Returns:
            Path to created sample config file
        """
        if file_format not in ['yml', 'yaml', 'json']:
            raise ConfigError(f"Unsupported config file format: {file_format}")

        filename = f'multisite.{file_format}'
        config_path = os.path.join(self.config_dir, filename)

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                if file_format in ['yml', 'yaml']:
                    f.write("# Multisite Configuration File\n")
                    f.write("# Every site under base_dir is built on its own\n\n")
                    f.write("# Generator factory, as module:attribute\n")
                    f.write("generator: mygenerator:Generator\n\n")
                    f.write("# Layout\n")
                    f.write("base_dir: sites/\n")
                    f.write("out_dir: _out/\n")
                    f.write("includes_dir: _includes/\n")
                    f.write("layouts_dir: _layouts/\n\n")
                    f.write("# Sites, first match wins\n")
                    f.write("sites:\n")
                    f.write("  - blog/*\n")
                    f.write("  - docs:\n")
                    f.write("      config_path: sites/docs/site_config.py\n")
                    f.write("      path_prefix: /docs/\n")
                    f.write("  - '*'\n\n")
                    f.write("# Defaults for every site\n")
                    f.write("path_prefix: /\n")
                    f.write("template_formats:\n")
                    f.write("  - md\n")
                    f.write("  - html\n")
                    f.write("excludes: []\n")
                elif file_format == 'json':
                    sample_config = {
                        'generator': 'mygenerator:Generator',
                        'base_dir': 'sites/',
                        'out_dir': '_out/',
                        'includes_dir': '_includes/',
                        'layouts_dir': '_layouts/',
                        'sites': [
                            'blog/*',
                            ['docs', {'config_path': 'sites/docs/site_config.py', 'path_prefix': '/docs/'}],
                            '*',
                        ],
                        'path_prefix': '/',
                        'template_formats': ['md', 'html'],
                        'excludes': [],
                    }
                    json.dump(sample_config, f, indent=2)
        except (IOError, OSError) as e:
            raise ConfigError(f"Error writing configuration file {config_path}: {e}")

        return config_path

    def merge_with_args(self, args_dict: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge configuration settings with command-line arguments.
        Command-line arguments take precedence over config file settings.

        Args:
            args_dict: Dictionary of command-line arguments

        Returns:
            Merged configuration dictionary
        """
        merged = self.settings.copy()

        for key, value in args_dict.items():
            if value is not None:
                if key == 'template_formats' and isinstance(value, str):
                    # Convert comma-separated string to list
                    merged[key] = [fmt.strip() for fmt in value.split(',') if fmt.strip()]
                else:
                    merged[key] = value

        return merged

    @staticmethod
    def to_config(settings: Dict[str, Any]) -> GlobalConfig:
        """Build the immutable GlobalConfig from merged settings."""
        return merge_config({key: value for key, value in settings.items() if key in CONFIG_KEYS})
