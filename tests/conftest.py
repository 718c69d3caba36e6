"""Test configuration and fixtures for Folio tests."""

import io
import os
import shutil
import sys
import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest
import yaml
from PIL import Image

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

CMS = 'https://images.microcms-assets.io/assets/0a1b2c'


def write_yaml(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data, allow_unicode=True, sort_keys=False), encoding='utf-8')


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def images_dir(temp_dir):
    return str(Path(temp_dir) / 'public' / 'images')


@pytest.fixture
def content_dir(temp_dir):
    """Create a content directory with about, business and three projects."""
    content_dir = Path(temp_dir) / 'src' / 'content'

    write_yaml(content_dir / 'about.yml', {
        'name': 'Kuyuri Iroha',
        'summary': ['リアルタイムVFXと演出設計'],
        'skills': ['Unity', 'TouchDesigner'],
        'contacts': [{'label': 'X', 'value': '@kuyuri', 'href': 'https://x.com/kuyuri'}],
        'icon': {'url': f'{CMS}/icon.png', 'width': 400, 'height': 400},
    })

    write_yaml(content_dir / 'business.yml', {
        'pageTitle': 'Business',
        'subTitle': 'Services',
        'heroImage': f'{CMS}/hero.webp',
        'lead': 'Real-time visuals for live events.',
        'points': [{'title': 'Speed', 'description': 'Fast iteration'}],
        'services': [{
            'id': 'live-vfx',
            'title': 'Live VFX',
            'catchphrase': 'Visuals that react',
            'relatedProjectIds': ['vr-live'],
            'image': {'url': f'{CMS}/service.png'},
        }],
        'contactMessage': 'Get in touch.',
    })

    projects_dir = content_dir / 'projects'
    write_yaml(projects_dir / 'spring-show.yml', {
        'id': 'spring-show',
        'title': '「花見」プロジェクト',
        'date': '2024-03-10',
        'description': '<p>Cherry blossom <strong>projection</strong>.</p>',
        'genre': ['Installation'],
        'mainVisual': {'url': f'{CMS}/main.png', 'width': 1920, 'height': 1080},
        'images': [
            {'url': f'{CMS}/shot-a.png'},
            {'url': f'{CMS}/shot-b', 'width': 800, 'height': 600},
            {'caption': 'pending'},
        ],
    })
    write_yaml(projects_dir / 'vr-live.yml', {
        'id': 'vr-live',
        'title': 'VR Live',
        'date': '2023-11-01T10:00:00.000Z',
        'description': 'A **virtual** concert.',
        'mainVisual': {'url': f'{CMS}/vr.jpg', 'width': 1280, 'height': 720},
    })
    write_yaml(projects_dir / 'draft.yml', {
        'id': 'draft',
        'title': 'Draft',
    })

    return str(content_dir)


@pytest.fixture
def sample_image_data():
    """A small real PNG (3x2 pixels)."""
    img = Image.new('RGB', (3, 2), color='red')
    img_bytes = io.BytesIO()
    img.save(img_bytes, format='PNG')
    return img_bytes.getvalue()


@pytest.fixture
def mock_session(sample_image_data):
    """A requests session whose GETs all succeed with the sample PNG."""
    session = Mock()
    session.get.return_value = Mock(status_code=200, content=sample_image_data, reason='OK')
    return session


@pytest.fixture
def read_yaml():
    def _read(path):
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)
    return _read
