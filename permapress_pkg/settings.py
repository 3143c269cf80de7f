#!/usr/bin/env python3
"""
Settings loader for Permapress.
Supports configuration from permapress.yml, permapress.yaml or permapress.json files.
"""

import os
import json
import yaml
from typing import Dict, Any, Optional


class PermapressSettings:
    """Load and manage Permapress configuration settings."""

    # Default configuration
    DEFAULT_SETTINGS = {
        'content': 'content',
        'output': 'output',
        'layouts': 'layouts',
        'site_url': None,
        'site_title': None,
        'site_tagline': None,
        'tag_base': 'tags',
        'generate_index': True,
        'include_drafts': False,
        'failure_policy': 'collect',
        'workers': 1,
        'parallel_threshold': 12,
        'feed_limit': 20,
        'log_dir': 'logs',
    }

    # Config file names to look for (in order of preference)
    CONFIG_FILES = ['permapress.yml', 'permapress.yaml', 'permapress.json']

    INTEGER_SETTINGS = ('workers', 'parallel_threshold', 'feed_limit')
    BOOLEAN_SETTINGS = ('generate_index', 'include_drafts')

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
        """
        config_file = self._find_config_file()

        if config_file:
            self.config_file_path = config_file
            loaded_settings = self._load_config_file(config_file)
            if loaded_settings:
                unknown = sorted(set(loaded_settings) - set(self.DEFAULT_SETTINGS))
                if unknown:
                    print(f"Warning: Ignoring unknown settings in {os.path.relpath(config_file)}: {', '.join(unknown)}")
                # Merge with defaults, giving preference to loaded settings
                known = {k: v for k, v in loaded_settings.items() if k in self.DEFAULT_SETTINGS}
                self.settings.update(self._validate(known, os.path.relpath(config_file)))
                print(f"Loaded configuration from: {os.path.relpath(config_file)}")

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
                    loaded = yaml.safe_load(f) or {}
                elif file_ext == '.json':
                    loaded = json.load(f) or {}
                else:
                    raise ValueError(f"Unsupported config file format: {file_ext}")
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file {config_path}: {e}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file {config_path}: {e}")
        except PermissionError:
            raise PermissionError(f"Permission denied reading configuration file: {config_path}")
        except (IOError, OSError) as e:
            raise IOError(f"Error reading configuration file {config_path}: {e}")

        if not isinstance(loaded, dict):
            raise ValueError(f"Configuration file {config_path} must contain a mapping")
        return loaded

    def _validate(self, settings: Dict[str, Any], config_path: str) -> Dict[str, Any]:
        """
        Coerce typed settings from a configuration file.

        Raises:
            ValueError: If a value cannot be read as the expected type
        """
        validated = dict(settings)
        for key in self.INTEGER_SETTINGS:
            if key not in validated:
                continue
            value = validated[key]
            if isinstance(value, bool):
                raise ValueError(f"Setting '{key}' in {config_path} must be an integer, got {value!r}")
            try:
                validated[key] = int(value)
            except (TypeError, ValueError):
                raise ValueError(f"Setting '{key}' in {config_path} must be an integer, got {value!r}")
            if validated[key] < 1:
                raise ValueError(f"Setting '{key}' in {config_path} must be at least 1, got {value!r}")

        for key in self.BOOLEAN_SETTINGS:
            if key in validated and not isinstance(validated[key], bool):
                raise ValueError(f"Setting '{key}' in {config_path} must be true or false, got {validated[key]!r}")

        policy = validated.get('failure_policy')
        if policy is not None and policy not in ('collect', 'fail-fast'):
            raise ValueError(f"Setting 'failure_policy' in {config_path} must be 'collect' or 'fail-fast', got {policy!r}")
        return validated

    def create_sample_config(self, file_format: str = 'yml') -> str:
        """
        Create a sample configuration file.

        Args:
            file_format: Format for config file ('yml', 'yaml', or 'json')

        Returns:
            Path to created sample config file
        """
        if file_format not in ['yml', 'yaml', 'json']:
            raise ValueError(f"Unsupported config file format: {file_format}")

        filename = f'permapress.{file_format}'
        config_path = os.path.join(self.config_dir, filename)

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                if file_format in ['yml', 'yaml']:
                    # Custom YAML output with comments
                    f.write("# Permapress Configuration File\n\n")
                    f.write("# Site information\n")
                    f.write("site_url: https://example.com\n")
                    f.write("site_title: My Blog\n")
                    f.write("site_tagline: Notes on software engineering\n\n")
                    f.write("# Build settings\n")
                    f.write("content: content\n")
                    f.write("output: output\n")
                    f.write("layouts: layouts\n")
                    f.write("tag_base: tags\n\n")
                    f.write("# Content settings\n")
                    f.write("generate_index: true\n")
                    f.write("include_drafts: false\n")
                    f.write("feed_limit: 20\n\n")
                    f.write("# Build behaviour\n")
                    f.write("failure_policy: collect  # collect or fail-fast\n")
                    f.write("workers: 1\n")
                    f.write("parallel_threshold: 12\n")
                    f.write("log_dir: logs\n")
                elif file_format == 'json':
                    sample_config = dict(self.DEFAULT_SETTINGS)
                    sample_config.update({
                        'site_url': 'https://example.com',
                        'site_title': 'My Blog',
                        'site_tagline': 'Notes on software engineering',
                    })
                    json.dump(sample_config, f, indent=2)
        except PermissionError:
            raise PermissionError(f"Permission denied creating configuration file: {config_path}")
        except (IOError, OSError) as e:
            raise IOError(f"Error writing configuration file {config_path}: {e}")

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

        # Override with non-None command line arguments
        for key, value in args_dict.items():
            if value is not None and key in self.DEFAULT_SETTINGS:
                merged[key] = value

        return merged
