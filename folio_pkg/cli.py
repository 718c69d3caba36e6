#!/usr/bin/env python3
"""
Command-line interface for Folio.

``folio`` builds the static site; ``folio-localize-assets`` and
``folio-migrate-ids`` are one-shot batch jobs over the YAML content.
"""

import argparse
import os
import sys
import time
from typing import Any, Callable, Dict

from . import __version__
from .content import ContentRepository
from .downloader import AssetDownloader
from .localize import AssetLocalizer
from .logs import configure_logging
from .migrate_ids import IdMigrator
from .settings import FolioSettings
from .site import SiteBuilder


def load_settings(args_dict: Dict[str, Any] = None) -> Dict[str, Any]:
    """Config file settings, overridden by any non-None command line values."""
    settings_loader = FolioSettings()
    settings_loader.load_settings()
    final_settings = settings_loader.merge_with_args(args_dict or {})

    for key in ('content', 'images', 'output'):
        if final_settings.get(key):
            final_settings[key] = os.path.expanduser(final_settings[key])
    return final_settings


def run_batch(job: Callable[[Dict[str, Any]], Any]) -> int:
    """Run a batch job, reporting any failure on stderr with exit status 1."""
    try:
        settings = load_settings()
        configure_logging(settings.get('log_dir'))
        job(settings)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def localize_assets(settings: Dict[str, Any]) -> int:
    downloader = AssetDownloader(
        timeout=settings['download_timeout'],
        validate_urls=settings['validate_urls'],
    )
    try:
        localizer = AssetLocalizer(
            settings['content'],
            settings['images'],
            downloader=downloader,
            gallery_workers=settings['gallery_workers'],
        )
        return localizer.run()
    finally:
        downloader.close()


def migrate_ids(settings: Dict[str, Any]) -> int:
    return IdMigrator(settings['content'], settings['images']).run()


def localize_assets_main() -> None:
    """Entry point: download remote images and point content at the local copies."""
    sys.exit(run_batch(localize_assets))


def migrate_ids_main() -> None:
    """Entry point: recompute project ids from date and romanized title."""
    sys.exit(run_batch(migrate_ids))


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description='Folio - portfolio site builder')
    parser.add_argument('--content', type=str,
                        help='Content directory containing about.yml, business.yml and projects/')
    parser.add_argument('--images', type=str,
                        help='Local images directory copied to the output')
    parser.add_argument('--output', type=str,
                        help='Output directory for generated site')
    parser.add_argument('--templates', type=str,
                        help='Templates directory (defaults to the packaged templates)')
    parser.add_argument('--source', type=str, choices=['local', 'cms'],
                        help='Read content from local YAML files or from the CMS')
    parser.add_argument('--site-url', type=str,
                        help='Site URL for the sitemap and robots.txt')
    parser.add_argument('--site-title', type=str, help='Site title for metadata')
    parser.add_argument('--site-tagline', type=str, help='Site tagline for metadata')
    parser.add_argument('--robots', type=str, choices=['public', 'private'],
                        help='Robots.txt configuration')
    parser.add_argument('--minify', action='store_true', default=None,
                        help='Write minified CSS')
    parser.add_argument('--init', type=str, choices=['yml', 'yaml', 'json'],
                        help='Create a sample configuration file')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    args = parser.parse_args()

    if args.init:
        config_path = FolioSettings().create_sample_config(args.init)
        print(f"Created sample configuration file: {config_path}")
        return

    args_dict = {k: v for k, v in vars(args).items() if v is not None and k != 'init'}
    final_settings = load_settings(args_dict)
    logger = configure_logging(final_settings['log_dir'])

    overall_start_time = time.time()
    try:
        repository = ContentRepository.from_settings(final_settings)
        builder = SiteBuilder(
            repository,
            output_dir=final_settings['output'],
            images_dir=final_settings['images'],
            templates_dir=final_settings['templates'],
            site_url=final_settings['site_url'],
            site_title=final_settings['site_title'],
            site_tagline=final_settings['site_tagline'],
            minify=final_settings['minify'],
        )
        builder.build(robots=final_settings['robots'])
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    logger.debug(f"Total run time {time.time() - overall_start_time:.6f} seconds")


if __name__ == '__main__':
    main()
