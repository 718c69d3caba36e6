"""
URL checks applied before Folio downloads a remote asset.

Content records come from a CMS or from hand-edited YAML, so an image URL is
only fetched when it is an http(s) URL to a public host.
"""

import ipaddress
import re
import socket
from typing import List, Set, Tuple
from urllib.parse import urlparse

import requests

from .errors import AssetFetchError


class URLValidator:
    """
    Reject asset URLs that point at local or private network addresses.
    """

    ALLOWED_SCHEMES: Set[str] = {'http', 'https'}

    # Private/Reserved IP ranges (RFC 1918, RFC 3927, RFC 6598, etc.)
    BLOCKED_IP_RANGES: List[str] = [
        '0.0.0.0/8',
        '10.0.0.0/8',
        '100.64.0.0/10',
        '127.0.0.0/8',
        '169.254.0.0/16',
        '172.16.0.0/12',
        '192.0.0.0/24',
        '192.168.0.0/16',
        '198.18.0.0/15',
        '224.0.0.0/4',
        '240.0.0.0/4',
        '255.255.255.255/32',
        '::1/128',
        '::/128',
        'fe80::/10',
        'fc00::/7',
        'ff00::/8',
    ]

    BLOCKED_HOSTNAMES: Set[str] = {
        'localhost',
        'localhost.localdomain',
        'ip6-localhost',
        'ip6-loopback',
        'metadata.google.internal',
        '169.254.169.254',
    }

    SUSPICIOUS_PATTERNS = [
        r'%2f%2f',
        r'%5c%5c',
        r'\.\./',
        r'%2e%2e%2f',
    ]

    def __init__(self):
        self._blocked_networks = [ipaddress.ip_network(cidr) for cidr in self.BLOCKED_IP_RANGES]

    def validate_url(self, url: str) -> Tuple[bool, str]:
        """
        Validate a URL before fetching it.

        Args:
            url: The URL to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        parsed = urlparse(url)
        if not parsed.scheme or not parsed.netloc:
            return False, "Invalid URL format"

        if parsed.scheme.lower() not in self.ALLOWED_SCHEMES:
            return False, f"Unsupported URL scheme: {parsed.scheme}"

        hostname = parsed.hostname
        if not hostname:
            return False, "Invalid hostname in URL"

        if hostname.lower() in self.BLOCKED_HOSTNAMES:
            return False, f"Blocked hostname: {hostname}"

        if '@' in parsed.netloc:
            return False, "Credentials in URL are not allowed"

        url_lower = url.lower()
        for pattern in self.SUSPICIOUS_PATTERNS:
            if re.search(pattern, url_lower):
                return False, "URL contains suspicious patterns"

        try:
            for ip_str in self._resolve_hostname(hostname):
                if not self._is_ip_allowed(ip_str):
                    return False, f"Blocked IP address: {ip_str}"
        except socket.gaierror:
            return False, f"Cannot resolve hostname: {hostname}"

        return True, "URL is valid"

    def _resolve_hostname(self, hostname: str) -> List[str]:
        """Resolve hostname to its unique IP addresses."""
        addr_info = socket.getaddrinfo(hostname, None, family=socket.AF_UNSPEC, type=socket.SOCK_STREAM)
        return list(set(info[4][0] for info in addr_info))

    def _is_ip_allowed(self, ip_str: str) -> bool:
        try:
            ip = ipaddress.ip_address(ip_str.split('%', 1)[0])
        except ValueError:
            return False
        if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped:
            ip = ip.ipv4_mapped
        return not any(ip in network for network in self._blocked_networks)


class SafeRequestor:
    """
    HTTP GET that validates the URL first and turns every failure into an
    AssetFetchError.
    """

    USER_AGENT = 'Folio/1.0.0 (Portfolio Content Pipeline)'

    def __init__(self, validator: URLValidator = None, session=None, validate: bool = True):
        self.validator = validator or URLValidator()
        self.session = session or requests.Session()
        self.validate = validate

    def get(self, url: str, **kwargs):
        """
        Fetch a URL.

        Args:
            url: URL to request
            **kwargs: Additional arguments for session.get()

        Returns:
            The successful (2xx) response.

        Raises:
            AssetFetchError: the URL was rejected, the request failed or the
                server answered with a non-2xx status.
        """
        if self.validate:
            is_valid, error_msg = self.validator.validate_url(url)
            if not is_valid:
                raise AssetFetchError(url, reason=f"URL validation failed: {error_msg}")

        kwargs.setdefault('timeout', 30)
        kwargs.setdefault('headers', {})
        kwargs['headers'].setdefault('User-Agent', self.USER_AGENT)

        try:
            response = self.session.get(url, **kwargs)
        except requests.exceptions.RequestException as e:
            raise AssetFetchError(url, reason=str(e)) from e

        if not 200 <= response.status_code < 300:
            raise AssetFetchError(url, response.status_code, getattr(response, 'reason', None))
        return response
