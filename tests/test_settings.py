"""Tests for FolioSettings."""

import json
import os

import pytest
import yaml

from folio_pkg.settings import FolioSettings


class TestFolioSettings:
    """Test cases for FolioSettings."""

    def test_defaults_without_config(self, temp_dir, monkeypatch):
        monkeypatch.delenv('FOLIO_CMS_API_KEY', raising=False)
        monkeypatch.delenv('FOLIO_CMS_SERVICE_DOMAIN', raising=False)

        settings = FolioSettings(temp_dir).load_settings()

        assert settings['content'] == os.path.join('src', 'content')
        assert settings['images'] == os.path.join('public', 'images')
        assert settings['source'] == 'local'
        assert settings['cms_api_key'] is None

    def test_load_yaml(self, temp_dir):
        with open(os.path.join(temp_dir, 'folio.yml'), 'w', encoding='utf-8') as f:
            f.write("source: cms\ncms_service_domain: kuyuri\ngallery_workers: 8\n")

        loader = FolioSettings(temp_dir)
        settings = loader.load_settings()

        assert settings['source'] == 'cms'
        assert settings['cms_service_domain'] == 'kuyuri'
        assert settings['gallery_workers'] == 8
        assert settings['output'] == 'output'
        assert loader.config_file_path.endswith('folio.yml')

    def test_yml_preferred_over_json(self, temp_dir):
        with open(os.path.join(temp_dir, 'folio.yml'), 'w', encoding='utf-8') as f:
            f.write("output: from-yaml\n")
        with open(os.path.join(temp_dir, 'folio.json'), 'w', encoding='utf-8') as f:
            json.dump({'output': 'from-json'}, f)

        assert FolioSettings(temp_dir).load_settings()['output'] == 'from-yaml'

    def test_invalid_yaml_falls_back_to_defaults(self, temp_dir, capsys):
        with open(os.path.join(temp_dir, 'folio.yml'), 'w', encoding='utf-8') as f:
            f.write("output: [unclosed\n")

        settings = FolioSettings(temp_dir).load_settings()

        assert settings['output'] == 'output'
        assert 'Warning: Failed to load config file' in capsys.readouterr().out

    def test_environment_overrides(self, temp_dir, monkeypatch):
        with open(os.path.join(temp_dir, 'folio.yml'), 'w', encoding='utf-8') as f:
            f.write("cms_api_key: from-file\n")
        monkeypatch.setenv('FOLIO_CMS_API_KEY', 'from-env')

        assert FolioSettings(temp_dir).load_settings()['cms_api_key'] == 'from-env'

    def test_merge_with_args(self, temp_dir):
        loader = FolioSettings(temp_dir)
        loader.load_settings()

        merged = loader.merge_with_args({'output': 'dist', 'site_url': None, 'minify': True})

        assert merged['output'] == 'dist'
        assert merged['site_url'] is None
        assert merged['minify'] is True

    def test_create_sample_yaml(self, temp_dir):
        path = FolioSettings(temp_dir).create_sample_config('yml')

        with open(path, 'r', encoding='utf-8') as f:
            sample = yaml.safe_load(f)
        assert sample['source'] == 'local'
        assert sample['site_title'] == 'My Portfolio'

    def test_create_sample_json(self, temp_dir):
        path = FolioSettings(temp_dir).create_sample_config('json')

        with open(path, 'r', encoding='utf-8') as f:
            sample = json.load(f)
        assert 'cms_api_key' not in sample
        assert sample['images'] == os.path.join('public', 'images')

    def test_create_sample_unknown_format(self, temp_dir):
        with pytest.raises(ValueError, match="Unsupported config file format"):
            FolioSettings(temp_dir).create_sample_config('toml')
        assert os.listdir(temp_dir) == []
