"""
The content facade used by the site renderer.

Callers ask for the about record, the business page, the sorted project list
or a single project; which source backs them is decided once, from settings.
Records are loaded on first use and kept for the life of the facade.
"""

from typing import Any, Dict, List, Optional

from .errors import ContentMissingError
from .logs import get_logger
from .records import sort_date
from .sources import ContentSource, LocalFileSource, RemoteApiSource

Record = Dict[str, Any]

_UNSET = object()


def sort_projects(projects: List[Record]) -> List[Record]:
    """Newest first; undated projects last. Ties keep their input order."""
    return sorted(projects, key=sort_date, reverse=True)


def build_source(settings: Dict[str, Any]) -> ContentSource:
    """Create the content source named by the ``source`` setting."""
    source = settings.get('source', 'local')
    if source == 'local':
        return LocalFileSource(settings['content'])
    if source == 'cms':
        return RemoteApiSource(
            service_domain=settings.get('cms_service_domain'),
            api_key=settings.get('cms_api_key'),
            timeout=settings.get('download_timeout', 30),
            projects_limit=settings.get('projects_limit', 100),
        )
    raise ValueError(f"Unknown content source: {source!r} (expected 'local' or 'cms')")


class ContentRepository:
    """Single access point for site content."""

    def __init__(self, source: ContentSource):
        self.source = source
        self.logger = get_logger('ContentRepository')
        self._about = None
        self._business = _UNSET
        self._projects = None

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> 'ContentRepository':
        return cls(build_source(settings))

    def get_about(self) -> Record:
        """
        Return the about record.

        Raises:
            ContentMissingError: the site cannot render without it.
        """
        if self._about is None:
            about = self.source.get_about()
            if not about:
                raise ContentMissingError('about')
            self._about = about
        return self._about

    def get_business_page_data(self) -> Optional[Record]:
        if self._business is _UNSET:
            self._business = self.source.get_business()
        return self._business

    def get_projects(self) -> List[Record]:
        if self._projects is None:
            self._projects = sort_projects(self.source.list_projects())
            self.logger.debug(f"Loaded {len(self._projects)} projects")
        return list(self._projects)

    def get_project_by_id(self, project_id: str) -> Optional[Record]:
        for project in self.get_projects():
            if str(project.get('id')) == project_id:
                return project
        return self.source.get_project(project_id)
