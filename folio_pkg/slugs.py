"""
Project id generation.

An id is ``<YYYYMMDD>_<slug>``: the date comes from the first of ``date``,
``publishedAt`` or ``createdAt`` that parses, the slug from the romanized
title (or from its last 「…」/『…』 quotation when there is one).
"""

import re
import unicodedata

import pykakasi

from .errors import TransliterationError
from .records import parse_date

UNDATED = 'undated'
DEFAULT_SLUG = 'project'
MAX_SLUG_LENGTH = 60
DATE_FIELDS = ('date', 'publishedAt', 'createdAt')

QUOTED = re.compile(r'[「『](.+?)[」』]')
NON_ALNUM = re.compile(r'[^A-Za-z0-9]+')


def date_component(record):
    """``YYYYMMDD`` from the first parseable date field, else ``undated``."""
    for field in DATE_FIELDS:
        parsed = parse_date(record.get(field))
        if parsed is not None:
            return parsed.strftime('%Y%m%d')
    return UNDATED


def title_basis(title):
    """The last bracket-quoted phrase of a title, or the whole title."""
    if not title:
        return DEFAULT_SLUG
    title = str(title)
    quoted = QUOTED.findall(title)
    if quoted:
        return re.sub(r'[「」『』]', '', quoted[-1])
    return title


def slugify(text):
    slug = unicodedata.normalize('NFKD', text)
    slug = NON_ALNUM.sub('_', slug).strip('_').lower()
    return slug[:MAX_SLUG_LENGTH] or DEFAULT_SLUG


def ensure_unique(base_id, used):
    """Return ``base_id`` or ``base_id_2``, ``base_id_3``... and record it in ``used``."""
    candidate = base_id
    counter = 2
    while candidate in used:
        candidate = f'{base_id}_{counter}'
        counter += 1
    used.add(candidate)
    return candidate


class Romanizer:
    """Japanese to Latin script using the passport romanization system."""

    def __init__(self, system='passport'):
        self.system = system
        self._kakasi = None

    def romanize(self, text):
        if not text:
            return DEFAULT_SLUG
        try:
            if self._kakasi is None:
                self._kakasi = pykakasi.kakasi()
            converted = ''.join(item[self.system] for item in self._kakasi.convert(text))
        except Exception as e:
            raise TransliterationError(text, str(e)) from e
        return converted or text
