#!/usr/bin/env python3
"""
Settings loader for Folio.
Supports configuration from folio.yml, folio.yaml, or folio.json files.
"""

import os
import json
import yaml
from typing import Dict, Any, Optional


class FolioSettings:
    """Load and manage Folio configuration settings."""

    DEFAULT_SETTINGS = {
        'content': os.path.join('src', 'content'),
        'images': os.path.join('public', 'images'),
        'output': 'output',
        'templates': None,
        'source': 'local',
        'cms_service_domain': None,
        'cms_api_key': None,
        'projects_limit': 100,
        'site_url': None,
        'site_title': None,
        'site_tagline': None,
        'robots': 'public',
        'minify': False,
        'log_dir': 'logs',
        'download_timeout': 30,
        'gallery_workers': 4,
        'validate_urls': True,
    }

    # Config file names to look for (in order of preference)
    CONFIG_FILES = ['folio.yml', 'folio.yaml', 'folio.json']

    # Environment variables that override config file values
    ENV_OVERRIDES = {
        'FOLIO_CMS_SERVICE_DOMAIN': 'cms_service_domain',
        'FOLIO_CMS_API_KEY': 'cms_api_key',
    }

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
        Load settings from configuration file if it exists, then apply
        environment overrides.

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
                print(f"Warning: Failed to load config file {config_file}: {e}")

        for env_name, key in self.ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value:
                self.settings[key] = value

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

        if not isinstance(loaded, dict):
            raise ValueError(f"Configuration file {config_path} must contain a mapping")
        return loaded

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

        filename = f'folio.{file_format}'
        config_path = os.path.join(self.config_dir, filename)

        with open(config_path, 'w', encoding='utf-8') as f:
            if file_format in ['yml', 'yaml']:
                f.write("# Folio Configuration File\n\n")
                f.write("# Site information\n")
                f.write("site_url: https://example.com\n")
                f.write("site_title: My Portfolio\n")
                f.write("site_tagline: Selected works\n\n")
                f.write("# Content\n")
                f.write("source: local  # local or cms\n")
                f.write("content: src/content\n")
                f.write("images: public/images\n")
                f.write("# cms_service_domain: my-service\n")
                f.write("# Set FOLIO_CMS_API_KEY in the environment for the API key\n\n")
                f.write("# Build settings\n")
                f.write("output: output\n")
                f.write("minify: false\n")
                f.write("robots: public  # public or private\n\n")
                f.write("# Asset downloads\n")
                f.write("download_timeout: 30\n")
                f.write("gallery_workers: 4\n")
            elif file_format == 'json':
                sample = {k: v for k, v in self.DEFAULT_SETTINGS.items() if k != 'cms_api_key'}
                sample.update({
                    'site_url': 'https://example.com',
                    'site_title': 'My Portfolio',
                    'site_tagline': 'Selected works',
                })
                json.dump(sample, f, indent=2)

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
                merged[key] = value

        return merged
