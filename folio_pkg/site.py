import os
import shutil
import time
from datetime import datetime
from xml.sax.saxutils import escape

import csscompressor
import mistune
from jinja2 import Environment, FileSystemLoader, TemplateNotFound, TemplateSyntaxError, select_autoescape

from .logs import get_logger
from .records import parse_date

PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
PACKAGE_TEMPLATES = os.path.join(PACKAGE_DIR, 'templates')
PACKAGE_STATIC = os.path.join(PACKAGE_DIR, 'static')

# Output entries owned by the builder; anything else in the output dir is kept.
GENERATED_ITEMS = {
    'index.html', '404.html', 'sitemap.xml', 'robots.txt',
    'about', 'business', 'projects', 'images', 'assets',
}


class SiteBuilder:
    """Render the portfolio pages from the content facade into static HTML."""

    def __init__(self, repository, output_dir='output', images_dir=None, templates_dir=None,
                 site_url=None, site_title=None, site_tagline=None, minify=False):
        self.repository = repository
        self.output_dir = output_dir
        self.images_dir = images_dir
        self.templates_dir = templates_dir or PACKAGE_TEMPLATES
        self.site_url = site_url.rstrip('/') if site_url else None
        self.site_title = site_title
        self.site_tagline = site_tagline
        self.minify = minify
        self.projects_rendered = 0
        self.logger = get_logger('SiteBuilder')

        if not os.path.isdir(self.templates_dir):
            raise FileNotFoundError(f"Templates directory not found: {self.templates_dir}")

        self.markdown_parser = self.create_markdown_parser()
        self.env = Environment(
            loader=FileSystemLoader(self.templates_dir),
            autoescape=select_autoescape(['html']),
        )
        self.env.filters['markdown'] = self.markdown_filter
        self.env.filters['format_date'] = self.format_date

    def create_markdown_parser(self):
        """Create a Mistune markdown parser with a custom renderer."""
        class CustomRenderer(mistune.HTMLRenderer):
            def __init__(self):
                # CMS descriptions arrive as HTML and must pass through untouched.
                super().__init__(escape=False)

            def block_code(self, code, info=None):
                escaped_code = mistune.escape(code)
                return '<pre style="white-space: pre-wrap;"><code>{}</code></pre>'.format(escaped_code)
        return mistune.create_markdown(
            renderer=CustomRenderer(),
            plugins=['table', 'strikethrough']
        )

    def markdown_filter(self, text):
        """Convert markdown (or raw HTML) text to HTML."""
        if not text:
            return ''
        return self.markdown_parser(str(text))

    def format_date(self, value, fmt='%Y.%m.%d'):
        parsed = parse_date(value)
        return parsed.strftime(fmt) if parsed else ''

    def render_template(self, template_name, **context):
        """Render a Jinja2 template with the site-wide context."""
        context.setdefault('site_title', self.site_title)
        context.setdefault('site_tagline', self.site_tagline)
        context.setdefault('site_url', self.site_url)
        context.setdefault('minify', self.minify)
        try:
            template = self.env.get_template(template_name)
            return template.render(**context)
        except (TemplateNotFound, TemplateSyntaxError) as e:
            self.logger.error(f"Template error: {e}")
            return None

    def write_page(self, relative_path, html):
        if html is None:
            return None
        output_file = os.path.join(self.output_dir, relative_path)
        os.makedirs(os.path.dirname(output_file), exist_ok=True)
        with open(output_file, 'w', encoding='utf-8') as f:
            f.write(html)
        return output_file

    def create_output_dir(self):
        """Create the output directory, removing only what a previous build wrote."""
        if not os.path.exists(self.output_dir):
            os.makedirs(self.output_dir, exist_ok=True)
            return

        preserved_items = []
        for item in os.listdir(self.output_dir):
            item_path = os.path.join(self.output_dir, item)
            if item in GENERATED_ITEMS:
                if os.path.isdir(item_path):
                    shutil.rmtree(item_path)
                else:
                    os.remove(item_path)
            else:
                preserved_items.append(item)

        if preserved_items:
            self.logger.debug(f"Preserved non-Folio files: {', '.join(preserved_items)}")

    def copy_images(self):
        """Copy the local images directory so root-relative /images/ paths resolve."""
        if not self.images_dir or not os.path.isdir(self.images_dir):
            self.logger.debug("No local images directory to copy")
            return
        shutil.copytree(self.images_dir, os.path.join(self.output_dir, 'images'))
        self.logger.debug(f"Copied images from {self.images_dir}")

    def copy_static_assets(self):
        """Copy the packaged stylesheet, writing a .min.css next to it when minifying."""
        assets_dir = os.path.join(self.output_dir, 'assets')
        shutil.copytree(PACKAGE_STATIC, assets_dir)
        if not self.minify:
            return

        css_dir = os.path.join(assets_dir, 'css')
        for file in os.listdir(css_dir):
            if file.endswith('.css') and not file.endswith('.min.css'):
                css_path = os.path.join(css_dir, file)
                with open(css_path, 'r', encoding='utf-8') as f:
                    minified_css = csscompressor.compress(f.read())
                minified_path = os.path.join(css_dir, file.replace('.css', '.min.css'))
                with open(minified_path, 'w', encoding='utf-8') as f:
                    f.write(minified_css)
                self.logger.debug(f"Minified CSS: {file}")

    def build_index_page(self):
        self.logger.info("Building index page")
        html = self.render_template(
            'index.html',
            about=self.repository.get_about(),
            projects=self.repository.get_projects(),
        )
        return self.write_page('index.html', html)

    def build_about_page(self):
        self.logger.info("Building about page")
        html = self.render_template('about.html', about=self.repository.get_about())
        return self.write_page(os.path.join('about', 'index.html'), html)

    def build_project_pages(self):
        for project in self.repository.get_projects():
            html = self.render_template('project.html', project=project)
            if self.write_page(os.path.join('projects', str(project['id']), 'index.html'), html):
                self.projects_rendered += 1
        self.logger.info(f"Total projects rendered: {self.projects_rendered}")

    def build_business_page(self):
        business = self.repository.get_business_page_data()
        if business is None:
            self.logger.debug("No business page data; skipping business page")
            return None

        self.logger.info("Building business page")
        projects = self.repository.get_projects()
        services = []
        for service in business.get('services') or []:
            related_ids = set(str(i) for i in service.get('relatedProjectIds') or [])
            related = [p for p in projects if str(p.get('id')) in related_ids]
            services.append(dict(service, related_projects=related))

        html = self.render_template('business.html', business=business, services=services)
        return self.write_page(os.path.join('business', 'index.html'), html)

    def build_404_page(self):
        self.logger.info("Building 404 page")
        return self.write_page('404.html', self.render_template('404.html'))

    def generate_xml_sitemap(self):
        """Generate XML sitemap."""
        if not self.site_url:
            self.logger.debug("Skipping XML sitemap (no site_url).")
            return None

        self.logger.info("Generating XML sitemap")
        now = datetime.now()
        entries = [(f"{self.site_url}/", now), (f"{self.site_url}/about/", now)]
        if self.repository.get_business_page_data() is not None:
            entries.append((f"{self.site_url}/business/", now))
        for project in self.repository.get_projects():
            lastmod = parse_date(project.get('updatedAt')) or parse_date(project.get('date')) or now
            entries.append((f"{self.site_url}/projects/{project['id']}/", lastmod))

        sitemap_content = '<?xml version="1.0" encoding="UTF-8"?>\n'
        sitemap_content += '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        for url, lastmod in entries:
            sitemap_content += self.format_xml_sitemap_entry(url, lastmod)
        sitemap_content += '</urlset>\n'

        return self.write_page('sitemap.xml', sitemap_content)

    def format_xml_sitemap_entry(self, url, lastmod):
        """Format a single sitemap entry."""
        return f'''<url>
<loc>{escape(url)}</loc>
<lastmod>{lastmod.strftime('%Y-%m-%d')}</lastmod>
</url>
'''

    def generate_robots_txt(self, mode='public'):
        """Generate robots.txt file."""
        self.logger.info("Generating robots.txt")
        if mode == 'public':
            robots_content = "User-agent: *\nAllow: /\n"
            if self.site_url:
                robots_content += f"\nSitemap: {self.site_url}/sitemap.xml\n"
        else:
            robots_content = "User-agent: *\nDisallow: /\n"
        return self.write_page('robots.txt', robots_content)

    def build(self, robots='public'):
        """Main build process."""
        start_time = time.time()

        # Fail before touching the output directory if the site cannot render.
        self.repository.get_about()

        self.create_output_dir()
        self.copy_static_assets()
        self.copy_images()

        self.build_index_page()
        self.build_about_page()
        self.build_project_pages()
        self.build_business_page()
        self.build_404_page()

        self.generate_xml_sitemap()
        self.generate_robots_txt(robots)

        self.logger.info(f"Site build completed in {time.time() - start_time:.6f} seconds.")
