"""
Content sources behind the content facade.

``LocalFileSource`` reads one YAML document per entity from a content
directory; ``RemoteApiSource`` reads the same records from the microCMS REST
API. Both hand back plain record mappings.
"""

import os
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

import requests

from .errors import ContentFetchError, ContentMissingError
from .logs import get_logger
from .records import is_yaml_file, read_record

Record = Dict[str, Any]


class ContentSource(ABC):
    """Where content records come from."""

    @abstractmethod
    def get_about(self) -> Record:
        """Return the about record. Raises ContentMissingError if absent."""

    @abstractmethod
    def get_business(self) -> Optional[Record]:
        """Return the business page record, or None."""

    @abstractmethod
    def list_projects(self) -> List[Record]:
        """Return every project record, in source order."""

    @abstractmethod
    def get_project(self, project_id: str) -> Optional[Record]:
        """Return the project with the given id, or None."""


class LocalFileSource(ContentSource):
    """Content stored as YAML files under a content directory."""

    ABOUT_FILE = 'about.yml'
    BUSINESS_FILE = 'business.yml'
    PROJECTS_DIR = 'projects'

    def __init__(self, content_dir: str):
        self.content_dir = content_dir
        self.about_path = os.path.join(content_dir, self.ABOUT_FILE)
        self.business_path = os.path.join(content_dir, self.BUSINESS_FILE)
        self.projects_dir = os.path.join(content_dir, self.PROJECTS_DIR)
        self.logger = get_logger('LocalFileSource')

    def get_about(self) -> Record:
        return read_record(self.about_path)

    def get_business(self) -> Optional[Record]:
        if not os.path.exists(self.business_path):
            self.logger.debug(f"No business content at {self.business_path}")
            return None
        return read_record(self.business_path)

    def get_project_files(self) -> List[str]:
        """Get all YAML files from the projects directory."""
        if not os.path.isdir(self.projects_dir):
            return []
        return [
            os.path.join(self.projects_dir, name)
            for name in sorted(os.listdir(self.projects_dir))
            if is_yaml_file(name)
        ]

    def load_all(self) -> List[Tuple[str, Record]]:
        """
        Read every project file.

        Projects without an ``id`` field take the file name stem as their id.
        A file that fails to parse stops the whole load.

        Returns:
            List of (file path, project record) pairs.
        """
        loaded = []
        for filepath in self.get_project_files():
            project = read_record(filepath)
            stem = os.path.splitext(os.path.basename(filepath))[0]
            project_id = project.setdefault('id', stem)
            if str(project_id) != stem:
                self.logger.warning(f"Project id {project_id!r} does not match file name {os.path.basename(filepath)}")
            loaded.append((filepath, project))
        self.logger.debug(f"Loaded {len(loaded)} project files from {self.projects_dir}")
        return loaded

    def list_projects(self) -> List[Record]:
        return [project for _, project in self.load_all()]

    def get_project(self, project_id: str) -> Optional[Record]:
        for project in self.list_projects():
            if str(project.get('id')) == project_id:
                return project
        return None


class RemoteApiSource(ContentSource):
    """Content served by a microCMS service."""

    API_URL = 'https://{domain}.microcms.io/api/v1/{endpoint}'

    def __init__(self, service_domain: str, api_key: str, session=None, timeout: int = 30, projects_limit: int = 100):
        if not service_domain:
            raise ValueError("A CMS service domain is required for the remote content source")
        self.service_domain = service_domain
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout
        self.projects_limit = projects_limit
        self.logger = get_logger('RemoteApiSource')
        if not api_key:
            self.logger.warning("CMS API key is not set; requests will likely be rejected")

    def _url(self, endpoint: str, content_id: str = None) -> str:
        url = self.API_URL.format(domain=self.service_domain, endpoint=endpoint)
        if content_id:
            url = f"{url}/{content_id}"
        return url

    def _get(self, endpoint: str, content_id: str = None, params: Dict[str, Any] = None, allow_missing: bool = False):
        url = self._url(endpoint, content_id)
        try:
            response = self.session.get(
                url,
                params=params,
                headers={'X-MICROCMS-API-KEY': self.api_key or ''},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Error fetching {url}: {e}")
            raise ContentFetchError(url, reason=str(e)) from e

        if allow_missing and response.status_code == 404:
            return None
        if not 200 <= response.status_code < 300:
            self.logger.error(f"Error fetching {url}: HTTP {response.status_code}")
            raise ContentFetchError(url, response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise ContentFetchError(url, response.status_code, f"invalid JSON: {e}") from e

    def get_about(self) -> Record:
        data = self._get('about', allow_missing=True)
        if not data:
            raise ContentMissingError(self._url('about'))
        return data

    def get_business(self) -> Optional[Record]:
        # The CMS schema has no business endpoint.
        return None

    def list_projects(self) -> List[Record]:
        data = self._get('projects', params={'limit': self.projects_limit, 'orders': '-date'})
        return list(data.get('contents', []))

    def get_project(self, project_id: str) -> Optional[Record]:
        return self._get('projects', content_id=project_id, allow_missing=True)
