"""
Project id migration.

Every project gets a new id built from its date and romanized title. All ids
are computed before anything on disk moves, so collisions are resolved
against the whole batch. A project whose id changes has its ``id`` field,
its image URLs, its YAML file name and its asset directory renamed together.
"""

import os
from collections import namedtuple

from tqdm import tqdm

from .errors import FolioError, TransliterationError
from .logs import get_logger
from .records import check_path_segment, image_url, write_record
from .slugs import Romanizer, date_component, ensure_unique, slugify, title_basis
from .sources import LocalFileSource

ProjectRename = namedtuple('ProjectRename', ['filepath', 'project', 'old_id', 'new_id'])

STAGING_SUFFIX = '.migrating'


def update_image_path(url, old_id, new_id):
    """Swap the ``/projects/<old_id>/`` segment of a URL for the new id."""
    if not url or not isinstance(url, str):
        return url
    return url.replace(f'/projects/{old_id}/', f'/projects/{new_id}/', 1)


def rewrite_project(project, old_id, new_id):
    """Apply a rename to the record's id and image URLs in place."""
    project['id'] = new_id

    main_visual = project.get('mainVisual')
    if isinstance(main_visual, dict) and main_visual.get('url'):
        main_visual['url'] = update_image_path(main_visual['url'], old_id, new_id)

    images = project.get('images')
    if isinstance(images, list):
        project['images'] = [
            dict(image, url=update_image_path(image['url'], old_id, new_id)) if image_url(image) else image
            for image in images
        ]
    return project


class IdMigrator:
    def __init__(self, content_dir, images_dir, romanizer=None):
        self.source = LocalFileSource(content_dir)
        self.projects_images_dir = os.path.join(images_dir, 'projects')
        self.romanizer = romanizer or Romanizer()
        self.logger = get_logger('IdMigrator')

    def title_slug(self, title):
        basis = title_basis(title)
        try:
            romanized = self.romanizer.romanize(basis)
        except TransliterationError as e:
            self.logger.warning(f"{e}; using the original title text")
            romanized = basis
        return slugify(romanized)

    def compute_id(self, project, used):
        base_id = f"{date_component(project)}_{self.title_slug(project.get('title'))}"
        return ensure_unique(base_id, used)

    def plan(self, projects):
        """
        Compute the new id of every project in the batch.

        Every current id is checked here, before anything on disk moves.
        """
        used = set()
        renames = []
        for filepath, project in tqdm(projects, desc="Computing project ids", unit="project", leave=False):
            old_id = check_path_segment(project.get('id'), filepath)
            new_id = self.compute_id(project, used)
            renames.append(ProjectRename(filepath, project, old_id, new_id))
        return renames

    def target_path(self, project_id):
        return os.path.join(self.source.projects_dir, f'{project_id}.yml')

    def needs_move(self, rename):
        """True when the id changes or the file name does not match the id."""
        if rename.old_id != rename.new_id:
            return True
        stem = os.path.splitext(os.path.basename(rename.filepath))[0]
        return stem != rename.new_id

    def check_asset_targets(self, moves):
        """Refuse to start when a new asset directory name is already taken."""
        vacated = {rename.old_id for rename in moves if rename.old_id != rename.new_id}
        for rename in moves:
            if rename.old_id == rename.new_id or rename.new_id in vacated:
                continue
            if not os.path.isdir(os.path.join(self.projects_images_dir, rename.old_id)):
                continue
            target = os.path.join(self.projects_images_dir, rename.new_id)
            if os.path.exists(target):
                raise FolioError(f"Cannot rename assets of {rename.old_id}: {target} already exists")

    def apply(self, renames):
        """
        Move files and asset directories for every changed id.

        New YAML files and asset directories are first written under staging
        names, then old paths are vacated, then staging names are promoted,
        so one project can take over an id another project is giving up.
        A project whose id stays the same but whose file is named after
        something else is moved to ``<id>.yml`` in the same pass.
        """
        moves = [rename for rename in renames if self.needs_move(rename)]
        self.check_asset_targets(moves)
        staged = []

        for rename in moves:
            id_changed = rename.old_id != rename.new_id
            if id_changed:
                rewrite_project(rename.project, rename.old_id, rename.new_id)
            new_path = self.target_path(rename.new_id)
            staging_path = new_path + STAGING_SUFFIX
            write_record(staging_path, rename.project)

            old_dir = os.path.join(self.projects_images_dir, rename.old_id)
            staging_dir = None
            if id_changed and os.path.isdir(old_dir):
                staging_dir = os.path.join(self.projects_images_dir, rename.new_id + STAGING_SUFFIX)
                os.rename(old_dir, staging_dir)

            staged.append((rename, new_path, staging_path, staging_dir))

        for rename, new_path, _, _ in staged:
            if os.path.abspath(rename.filepath) != os.path.abspath(new_path) and os.path.exists(rename.filepath):
                os.remove(rename.filepath)

        for rename, new_path, staging_path, staging_dir in staged:
            os.replace(staging_path, new_path)
            if staging_dir:
                os.rename(staging_dir, os.path.join(self.projects_images_dir, rename.new_id))
            if rename.old_id != rename.new_id:
                self.logger.info(f"Renamed project {rename.old_id} -> {rename.new_id}")
            else:
                self.logger.info(f"Moved project file {os.path.basename(rename.filepath)} -> {os.path.basename(new_path)}")

        return sum(1 for rename in moves if rename.old_id != rename.new_id)

    def run(self):
        """Recompute ids for every project file. Returns the number of ids changed."""
        renames = self.plan(self.source.load_all())
        count = self.apply(renames)
        self.logger.info(f"ID migration completed: {count} of {len(renames)} projects renamed")
        return count
