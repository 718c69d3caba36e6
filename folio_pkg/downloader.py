import os
from urllib.parse import urlparse

import requests
from PIL import Image, UnidentifiedImageError

from .logs import get_logger
from .url_validator import SafeRequestor, URLValidator

DEFAULT_EXTENSION = '.jpg'


def extension_for(url):
    """File extension of the URL path component, ``.jpg`` when there is none."""
    ext = os.path.splitext(urlparse(url).path)[1]
    return ext or DEFAULT_EXTENSION


def read_dimensions(image_path):
    """Return (width, height) of an image file, or None if Pillow cannot read it."""
    try:
        with Image.open(image_path) as img:
            return img.size
    except (UnidentifiedImageError, OSError):
        return None


class AssetDownloader:
    """Fetch remote images onto local disk."""

    def __init__(self, session=None, timeout=30, validate_urls=True):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.requestor = SafeRequestor(URLValidator(), self.session, validate=validate_urls)
        self.logger = get_logger('AssetDownloader')

    def download(self, url, destination_path):
        """
        Download ``url`` and write the whole body to ``destination_path``.

        Parent directories are created as needed. There is no retry; any
        failure raises AssetFetchError.
        """
        response = self.requestor.get(url, timeout=self.timeout)

        parent = os.path.dirname(destination_path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(destination_path, 'wb') as f:
            f.write(response.content)

        self.logger.debug(f"Downloaded {url} -> {destination_path}")
        return destination_path

    def close(self):
        self.session.close()
