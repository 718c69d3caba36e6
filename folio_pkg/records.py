"""
Reading and writing content records.

A record is a plain mapping loaded from one YAML document. Image references
inside records are mappings of the form ``{url, width?, height?}``; the
helpers here deal with their URL forms and with the dates used for ordering.
"""

import os
from datetime import date, datetime, timezone
from urllib.parse import urlparse

import yaml

from .errors import ContentMissingError, ContentParseError

YAML_EXTENSIONS = ('.yml', '.yaml')
YAML_LINE_WIDTH = 80
UNDATED = datetime.min

DATE_FORMATS = ['%Y-%m-%dT%H:%M:%S', '%Y-%m-%d', '%Y/%m/%d', '%b %d, %Y']


def read_record(filepath):
    """
    Load a single YAML content file.

    Raises:
        ContentMissingError: the file does not exist.
        ContentParseError: the file is not valid YAML or not a mapping.
    """
    if not os.path.exists(filepath):
        raise ContentMissingError(filepath)

    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ContentParseError(filepath, str(e)) from e
    except UnicodeDecodeError as e:
        raise ContentParseError(filepath, f"not UTF-8 text: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ContentParseError(filepath, f"expected a mapping, got {type(data).__name__}")
    return data


def dump_record(data):
    """Serialize a record with insertion key order and a fixed line width."""
    return yaml.safe_dump(
        data,
        allow_unicode=True,
        sort_keys=False,
        default_flow_style=False,
        width=YAML_LINE_WIDTH,
    )


def write_record(filepath, data):
    """Write a record back to disk, creating parent directories as needed."""
    parent = os.path.dirname(filepath)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(filepath, 'w', encoding='utf-8') as f:
        f.write(dump_record(data))


def is_yaml_file(filename):
    return filename.lower().endswith(YAML_EXTENSIONS)


def parse_date(value):
    """
    Parse a record date into a naive UTC datetime.

    Accepts ``datetime``/``date`` objects (as produced by YAML) and ISO-like
    strings, including a trailing ``Z``. Returns None when nothing parses.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        parsed = _parse_date_string(value.strip())
        if parsed is None:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _parse_date_string(text):
    iso_text = text[:-1] + '+00:00' if text.endswith(('Z', 'z')) else text
    try:
        return datetime.fromisoformat(iso_text)
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def sort_date(record):
    """Ordering key for projects; undated records sort before any real date."""
    return parse_date(record.get('date')) or UNDATED


def is_remote_url(url):
    """True for absolute http(s) and protocol-relative URLs, False for local paths."""
    if not isinstance(url, str):
        return False
    parsed = urlparse(url)
    if parsed.scheme:
        return parsed.scheme in ('http', 'https')
    return bool(parsed.netloc)


def absolute_url(url):
    """Resolve a protocol-relative URL to https; other URLs pass through."""
    if url.startswith('//'):
        return 'https:' + url
    return url


def image_url(reference):
    """Return the URL of an image reference, or None."""
    if isinstance(reference, dict):
        url = reference.get('url')
        return url if isinstance(url, str) and url else None
    return None


def check_path_segment(value, filepath):
    """
    Reject identifiers that cannot be used as a single directory name.

    Raises:
        ContentParseError: the value is empty or contains path separators.
    """
    segment = str(value) if value is not None else ''
    if not segment or segment in ('.', '..') or '/' in segment or '\\' in segment:
        raise ContentParseError(filepath, f"unsafe identifier {value!r}")
    return segment
