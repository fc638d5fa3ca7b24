#!/usr/bin/env python3
"""
Settings loader for SiteHammer.
Supports configuration from sitehammer.yml, sitehammer.yaml, or sitehammer.json files.
"""

import os
import json
import logging
import yaml
from typing import Dict, Any, Optional


class SiteHammerSettings:
    """Load and manage SiteHammer configuration settings."""

    # Default configuration
    DEFAULT_SETTINGS = {
        'source': 'src',
        'templates': 'templates',
        'article_template': 'blog-article.html',
        'index_template': 'blog-index.html',
        'article_dir': 'articles',
        'index_file': 'index.html',
        'index_size': 5,
        'site_url': '',
        'strict': False,
        'output': '_site',
        'log_dir': 'logs',
    }

    # Config file names to look for (in order of preference)
    CONFIG_FILES = ['sitehammer.yml', 'sitehammer.yaml', 'sitehammer.json']

    def __init__(self, config_dir: str = None):
        """
        Initialize settings loader.

        Args:
            config_dir: Directory to look for config files. Defaults to current directory.
        """
        self.config_dir = config_dir or os.getcwd()
        self.settings = self.DEFAULT_SETTINGS.copy()
        self.config_file_path = None
        self.logger = logging.getLogger('SiteHammer')

    def load_settings(self) -> Dict[str, Any]:
        """
        Load settings from configuration file if it exists.

        Returns:
            Dictionary of configuration settings
        """
        config_file = self._find_config_file()

        if config_file:
            self.config_file_path = config_file
            try:
                loaded_settings = self._load_config_file(config_file)
                if loaded_settings:
                    self.settings.update(loaded_settings)
                    print(f"Loaded configuration from: {os.path.relpath(config_file)}")
            except (ValueError, OSError) as e:
                self.logger.warning(f"Warning: Failed to load config file {config_file}: {e}")

        return self.settings.copy()

    def _find_config_file(self) -> Optional[str]:
        """Return the path of the first configuration file found, or None."""
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
                    data = yaml.safe_load(f) or {}
                elif file_ext == '.json':
                    data = json.load(f) or {}
                else:
                    raise ValueError(f"Unsupported config file format: {file_ext}")
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file {config_path}: {e}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file {config_path}: {e}")
        except PermissionError:
            raise PermissionError(f"Permission denied reading configuration file: {config_path}")

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {config_path} must contain a mapping")

        unknown = set(data) - set(self.DEFAULT_SETTINGS)
        if unknown:
            self.logger.warning(f"Ignoring unknown settings in {config_path}: {', '.join(sorted(unknown))}")
        return {k: v for k, v in data.items() if k in self.DEFAULT_SETTINGS}

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

        filename = f'sitehammer.{file_format}'
        config_path = os.path.join(self.config_dir, filename)

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                if file_format in ['yml', 'yaml']:
                    f.write("# SiteHammer Configuration File\n\n")
                    f.write("# Blog sources\n")
                    f.write("source: src\n")
                    f.write("templates: templates\n")
                    f.write("article_template: blog-article.html\n")
                    f.write("index_template: blog-index.html\n\n")
                    f.write("# Blog output\n")
                    f.write("article_dir: articles\n")
                    f.write("index_file: index.html\n")
                    f.write("index_size: 5  # articles listed on the front page\n")
                    f.write("site_url: https://example.com\n")
                    f.write("strict: false  # fail when an article has no abstract\n\n")
                    f.write("# Site copy output\n")
                    f.write("output: _site\n\n")
                    f.write("# Logging\n")
                    f.write("log_dir: logs\n")
                elif file_format == 'json':
                    sample_config = self.DEFAULT_SETTINGS.copy()
                    sample_config['site_url'] = 'https://example.com'
                    json.dump(sample_config, f, indent=2)
        except PermissionError:
            raise PermissionError(f"Permission denied creating configuration file: {config_path}")

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
            if value is not None and key in self.DEFAULT_SETTINGS:
                merged[key] = value

        return merged
