"""
Asset localization: copy every remote image referenced by the content files
into the public images directory and point the records at the local copies.

Layout under the images directory::

    about/icon<ext>
    business/hero<ext>
    business/services/<service id><ext>
    projects/<project id>/main<ext>
    projects/<project id>/gallery-<n><ext>

All downloads happen before any content file is rewritten. If one download
fails the run stops and no YAML file is touched; images already fetched stay
on disk and are overwritten by the next run. References that already hold a
local path are left alone, so a second run downloads nothing.
"""

import os
import threading
from concurrent.futures import ThreadPoolExecutor

from tqdm import tqdm

from .downloader import AssetDownloader, extension_for, read_dimensions
from .logs import get_logger
from .records import absolute_url, check_path_segment, image_url, is_remote_url, write_record
from .sources import LocalFileSource

PUBLIC_PREFIX = '/images'


class AssetLocalizer:
    def __init__(self, content_dir, images_dir, downloader=None, gallery_workers=4):
        self.source = LocalFileSource(content_dir)
        self.images_dir = images_dir
        self.downloader = downloader or AssetDownloader()
        self.gallery_workers = max(1, gallery_workers)
        self.logger = get_logger('AssetLocalizer')
        self.downloaded = 0
        self._count_lock = threading.Lock()

    def public_path(self, relative_path):
        return f"{PUBLIC_PREFIX}/{relative_path}"

    def fetch(self, url, relative_path):
        """Download ``url`` to ``images_dir/relative_path``; return its public path."""
        destination = os.path.join(self.images_dir, *relative_path.split('/'))
        self.downloader.download(absolute_url(url), destination)
        with self._count_lock:
            self.downloaded += 1
        return self.public_path(relative_path), destination

    def localize_reference(self, reference, relative_stem):
        """
        Localize one ``{url, width?, height?}`` mapping.

        Returns a new mapping when the reference pointed at a remote URL,
        otherwise the reference unchanged.
        """
        url = image_url(reference)
        if not is_remote_url(url):
            return reference

        public_path, destination = self.fetch(url, relative_stem + extension_for(url))
        localized = dict(reference)
        localized['url'] = public_path
        if 'width' not in localized or 'height' not in localized:
            size = read_dimensions(destination)
            if size:
                localized.setdefault('width', size[0])
                localized.setdefault('height', size[1])
            else:
                self.logger.warning(f"Could not read image dimensions of {destination}")
        return localized

    def localize_about(self, about):
        if 'icon' not in about:
            return False
        icon = self.localize_reference(about['icon'], 'about/icon')
        if icon is about['icon']:
            return False
        about['icon'] = icon
        return True

    def localize_business(self, business):
        changed = False

        hero = business.get('heroImage')
        if is_remote_url(hero):
            business['heroImage'], _ = self.fetch(hero, 'business/hero' + extension_for(hero))
            changed = True

        services = business.get('services')
        if isinstance(services, list):
            for index, service in enumerate(services, start=1):
                if not isinstance(service, dict) or 'image' not in service:
                    continue
                name = check_path_segment(service.get('id') or index, self.source.business_path)
                image = self.localize_reference(service['image'], f'business/services/{name}')
                if image is not service['image']:
                    service['image'] = image
                    changed = True
        return changed

    def localize_project(self, filepath, project):
        """Localize the main visual and gallery of one project."""
        project_id = check_path_segment(project.get('id'), filepath)
        base = f'projects/{project_id}'
        changed = False

        if 'mainVisual' in project:
            main = self.localize_reference(project['mainVisual'], f'{base}/main')
            if main is not project['mainVisual']:
                project['mainVisual'] = main
                changed = True

        images = project.get('images')
        if isinstance(images, list) and images:
            def localize_gallery_item(item):
                index, image = item
                return self.localize_reference(image, f'{base}/gallery-{index}')

            # Gallery downloads run concurrently; every one must finish
            # before the record counts as migrated.
            with ThreadPoolExecutor(max_workers=self.gallery_workers) as executor:
                localized = list(executor.map(localize_gallery_item, enumerate(images, start=1)))

            if any(new is not old for new, old in zip(localized, images)):
                project['images'] = localized
                changed = True

        return changed

    def run(self):
        """
        Localize about, business and project assets, then rewrite the
        changed content files.

        Returns:
            Number of content files rewritten.
        """
        staged = []

        about = self.source.get_about()
        if self.localize_about(about):
            staged.append((self.source.about_path, about))

        business = self.source.get_business()
        if business is not None and self.localize_business(business):
            staged.append((self.source.business_path, business))

        projects = self.source.load_all()
        for filepath, project in tqdm(projects, desc="Localizing project assets", unit="project", leave=False):
            if self.localize_project(filepath, project):
                staged.append((filepath, project))

        for filepath, record in staged:
            write_record(filepath, record)
            self.logger.debug(f"Rewrote {filepath}")

        self.logger.info(f"Localized {self.downloaded} assets across {len(staged)} content files")
        return len(staged)
