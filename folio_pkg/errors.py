"""
Error types raised by the Folio content pipeline.

The serving path fails fast on ContentMissingError; batch jobs halt on
ContentParseError and AssetFetchError. TransliterationError never leaves
the ID migration pipeline.
"""


class FolioError(Exception):
    """Base class for all Folio errors."""


class ContentMissingError(FolioError):
    """A required content record does not exist."""

    def __init__(self, name):
        self.name = name
        super().__init__(f"Content not found: {name}")


class ContentParseError(FolioError):
    """A content file could not be parsed into a record."""

    def __init__(self, file, reason=None):
        self.file = file
        self.reason = reason
        message = f"Failed to parse content file {file}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ContentFetchError(FolioError):
    """The remote content API returned an error or could not be reached."""

    def __init__(self, url, status=None, reason=None):
        self.url = url
        self.status = status
        self.reason = reason
        super().__init__(_fetch_message('content', url, status, reason))


class AssetFetchError(FolioError):
    """A remote asset could not be downloaded."""

    def __init__(self, url, status=None, reason=None):
        self.url = url
        self.status = status
        self.reason = reason
        super().__init__(_fetch_message('asset', url, status, reason))


class TransliterationError(FolioError):
    """Text could not be romanized."""

    def __init__(self, text, reason=None):
        self.text = text
        self.reason = reason
        super().__init__(f"Failed to romanize {text!r}: {reason}")


def _fetch_message(kind, url, status, reason):
    message = f"Failed to fetch {kind} {url}"
    if status is not None:
        message = f"{message}: HTTP {status}"
    if reason:
        message = f"{message} ({reason})"
    return message
