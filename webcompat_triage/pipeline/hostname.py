"""
Hostname Normalizer
===================
Maps a hostname to its registrable ("root") domain using the public-suffix
list, so that www.example.co.uk and m.example.co.uk land in the same group.

Rules:
    - IPv4 / IPv6 literals are returned unchanged (no suffix parsing).
    - Otherwise the registrable domain is returned (example.co.uk).
    - Unlisted TLDs follow the default "*" rule (www.router.lan → router.lan).
    - No registrable domain (localhost, bare suffixes, garbage) → "[unknown]".
    - Never raises.

Memoization:
    Results are cached on the HostnameNormalizer instance. The orchestrator
    creates one normaliser per pipeline run, so nothing leaks between runs
    when a worker process is reused.

The suffix list comes from tldextract's bundled snapshot; no network fetch
and no on-disk cache.
"""
import ipaddress
import logging
from typing import Optional
from urllib.parse import urlsplit

import tldextract

from webcompat_triage.core.constants import UNKNOWN_DOMAIN

logger = logging.getLogger(__name__)

_EXTRACTOR = tldextract.TLDExtract(
    cache_dir=None,
    suffix_list_urls=(),
    fallback_to_snapshot=True,
    include_psl_private_domains=True,
)


def _is_ip_literal(hostname: str) -> bool:
    try:
        ipaddress.ip_address(hostname)
    except ValueError:
        return False
    return True


class HostnameNormalizer:
    """
    Per-run memoizing hostname → root domain mapper.

    Usage:
        normalizer = HostnameNormalizer()
        normalizer.normalize("www.example.co.uk")   # "example.co.uk"
        normalizer.normalize("192.168.0.1")         # "192.168.0.1"
    """

    def __init__(self, extractor: Optional[tldextract.TLDExtract] = None) -> None:
        self._extractor = extractor or _EXTRACTOR
        self._cache: dict[str, str] = {}

    def normalize(self, hostname: str) -> str:
        """
        Return the registrable domain for *hostname*.

        Parameters
        ----------
        hostname : str
            Hostname as parsed out of a report URL.

        Returns
        -------
        str
            Root domain, the IP literal itself, or "[unknown]".
        """
        cached = self._cache.get(hostname)
        if cached is not None:
            return cached

        result = self._parse(hostname)
        self._cache[hostname] = result
        return result

    def root_domain_for_url(self, url: str) -> str:
        """Parse *url* and normalise its hostname; parse failures map to "[unknown]"."""
        try:
            hostname = urlsplit(url).hostname
        except ValueError:
            logger.debug("Could not parse report URL %r", url)
            return UNKNOWN_DOMAIN
        if not hostname:
            return UNKNOWN_DOMAIN
        return self.normalize(hostname)

    def _parse(self, hostname: str) -> str:
        if not hostname:
            return UNKNOWN_DOMAIN
        if _is_ip_literal(hostname):
            return hostname

        try:
            extracted = self._extractor(hostname)
        except ValueError:
            return UNKNOWN_DOMAIN

        if extracted.domain and extracted.suffix:
            return f"{extracted.domain}.{extracted.suffix}"
        if extracted.domain:
            # TLD not on the list: default "*" rule, last label is the suffix
            labels = [label for label in hostname.split(".") if label]
            if len(labels) >= 2:
                return ".".join(labels[-2:])
        return UNKNOWN_DOMAIN

    def __len__(self) -> int:
        """Number of distinct hostnames resolved in this run."""
        return len(self._cache)
