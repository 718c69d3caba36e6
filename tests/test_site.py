"""Tests for the static site builder."""

import os
from pathlib import Path

import pytest

from folio_pkg.content import ContentRepository
from folio_pkg.errors import ContentMissingError
from folio_pkg.site import SiteBuilder
from folio_pkg.sources import LocalFileSource


@pytest.fixture
def output_dir(temp_dir):
    return os.path.join(temp_dir, 'output')


def make_builder(content_dir, output_dir, images_dir=None, **kwargs):
    repository = ContentRepository(LocalFileSource(content_dir))
    return SiteBuilder(repository, output_dir=output_dir, images_dir=images_dir, **kwargs)


def read(path):
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


class TestSiteBuilder:
    """Test cases for SiteBuilder."""

    def test_build_writes_pages(self, content_dir, output_dir):
        make_builder(content_dir, output_dir, site_title='Kuyuri Iroha').build()

        for page in ['index.html', 'about/index.html', 'business/index.html', '404.html', 'robots.txt',
                     'projects/spring-show/index.html', 'projects/vr-live/index.html',
                     'projects/draft/index.html', 'assets/css/style.css']:
            assert os.path.isfile(os.path.join(output_dir, page)), page

    def test_index_lists_projects_newest_first(self, content_dir, output_dir):
        make_builder(content_dir, output_dir).build()

        index = read(os.path.join(output_dir, 'index.html'))
        positions = [index.index(f'/projects/{pid}/') for pid in ('spring-show', 'vr-live', 'draft')]
        assert positions == sorted(positions)
        assert 'Kuyuri Iroha' in index

    def test_project_page_renders_description(self, content_dir, output_dir):
        make_builder(content_dir, output_dir).build()

        html_page = read(os.path.join(output_dir, 'projects', 'vr-live', 'index.html'))
        assert '<strong>virtual</strong>' in html_page
        raw_html_page = read(os.path.join(output_dir, 'projects', 'spring-show', 'index.html'))
        assert '<strong>projection</strong>' in raw_html_page
        assert '2024.03.10' in raw_html_page

    def test_titles_are_escaped(self, content_dir, output_dir):
        with open(os.path.join(content_dir, 'projects', 'xss.yml'), 'w', encoding='utf-8') as f:
            f.write("id: xss\ntitle: '<script>alert(1)</script>'\n")

        make_builder(content_dir, output_dir).build()

        page = read(os.path.join(output_dir, 'projects', 'xss', 'index.html'))
        assert '<script>alert(1)</script>' not in page
        assert '&lt;script&gt;' in page

    def test_business_page_lists_related_projects(self, content_dir, output_dir):
        make_builder(content_dir, output_dir).build()

        business = read(os.path.join(output_dir, 'business', 'index.html'))
        assert 'Live VFX' in business
        assert '/projects/vr-live/' in business
        assert '/projects/spring-show/' not in business

    def test_no_business_page_without_data(self, content_dir, output_dir):
        os.remove(os.path.join(content_dir, 'business.yml'))

        make_builder(content_dir, output_dir).build()

        assert not os.path.exists(os.path.join(output_dir, 'business'))

    def test_missing_about_fails_before_output(self, content_dir, output_dir):
        os.remove(os.path.join(content_dir, 'about.yml'))

        with pytest.raises(ContentMissingError):
            make_builder(content_dir, output_dir).build()

        assert not os.path.exists(output_dir)

    def test_copies_images(self, content_dir, output_dir, images_dir):
        icon = Path(images_dir) / 'about' / 'icon.png'
        icon.parent.mkdir(parents=True)
        icon.write_bytes(b'png')

        make_builder(content_dir, output_dir, images_dir=images_dir).build()

        assert (Path(output_dir) / 'images' / 'about' / 'icon.png').read_bytes() == b'png'

    def test_rebuild_preserves_custom_files(self, content_dir, output_dir):
        os.makedirs(output_dir)
        Path(output_dir, 'CNAME').write_text('example.com')
        Path(output_dir, 'index.html').write_text('stale')

        make_builder(content_dir, output_dir).build()

        assert Path(output_dir, 'CNAME').read_text() == 'example.com'
        assert read(os.path.join(output_dir, 'index.html')) != 'stale'

    def test_sitemap_with_site_url(self, content_dir, output_dir):
        make_builder(content_dir, output_dir, site_url='https://example.com/').build()

        sitemap = read(os.path.join(output_dir, 'sitemap.xml'))
        assert '<loc>https://example.com/projects/spring-show/</loc>' in sitemap
        assert '<loc>https://example.com/business/</loc>' in sitemap
        assert '<lastmod>2024-03-10</lastmod>' in sitemap
        assert 'Sitemap: https://example.com/sitemap.xml' in read(os.path.join(output_dir, 'robots.txt'))

    def test_no_sitemap_without_site_url(self, content_dir, output_dir):
        make_builder(content_dir, output_dir).build()

        assert not os.path.exists(os.path.join(output_dir, 'sitemap.xml'))

    def test_private_robots(self, content_dir, output_dir):
        make_builder(content_dir, output_dir).build(robots='private')

        assert 'Disallow: /' in read(os.path.join(output_dir, 'robots.txt'))

    def test_minify(self, content_dir, output_dir):
        make_builder(content_dir, output_dir, minify=True).build()

        minified = read(os.path.join(output_dir, 'assets', 'css', 'style.min.css'))
        assert minified
        assert '\n    ' not in minified
        assert 'style.min.css' in read(os.path.join(output_dir, 'index.html'))

    def test_invalid_templates_dir(self, content_dir, output_dir):
        with pytest.raises(FileNotFoundError, match="Templates directory"):
            make_builder(content_dir, output_dir, templates_dir='/nonexistent')
