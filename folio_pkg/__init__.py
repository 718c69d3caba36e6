"""
Folio - content pipeline and static renderer for a personal portfolio site.

Content (an about profile, a business page and project case studies) lives
in YAML files or in a microCMS service. Folio renders it to static HTML and
ships two batch jobs: one that copies remote CMS images into the site, and
one that renames projects to date-and-title ids.
"""

__version__ = "1.0.0"

from .content import ContentRepository
from .errors import (
    AssetFetchError,
    ContentFetchError,
    ContentMissingError,
    ContentParseError,
    FolioError,
    TransliterationError,
)

__all__ = [
    'ContentRepository',
    'FolioError',
    'ContentMissingError',
    'ContentParseError',
    'ContentFetchError',
    'AssetFetchError',
    'TransliterationError',
]
