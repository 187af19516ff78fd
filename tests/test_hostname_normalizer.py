"""
Unit Tests — Hostname Normalizer
================================
Root-domain extraction, IP literal pass-through, "[unknown]" fallback and
per-instance memoization. Uses tldextract's bundled suffix snapshot only.
"""
import pytest
from unittest.mock import MagicMock

from webcompat_triage.core.constants import UNKNOWN_DOMAIN
from webcompat_triage.pipeline.hostname import HostnameNormalizer


@pytest.fixture
def normalizer():
    return HostnameNormalizer()


class TestRegistrableDomain:

    def test_strips_subdomain(self, normalizer):
        assert normalizer.normalize("www.example.com") == "example.com"

    def test_multi_label_suffix(self, normalizer):
        assert normalizer.normalize("www.example.co.uk") == "example.co.uk"

    def test_deep_subdomain(self, normalizer):
        assert normalizer.normalize("a.b.c.example.org") == "example.org"

    def test_bare_domain_unchanged(self, normalizer):
        assert normalizer.normalize("example.com") == "example.com"


class TestUnlistedSuffix:

    @pytest.mark.parametrize("hostname, expected", [
        ("www.router.lan", "router.lan"),
        ("intranet.corp", "intranet.corp"),
        ("a.b.example.internal", "example.internal"),
    ])
    def test_default_rule_keeps_last_two_labels(self, normalizer, hostname, expected):
        assert normalizer.normalize(hostname) == expected

    def test_distinct_private_sites_not_merged(self, normalizer):
        assert normalizer.root_domain_for_url("http://nas.home.lan/") != normalizer.root_domain_for_url(
            "http://printer.office.lan/"
        )

    def test_single_label_host_still_unknown(self, normalizer):
        assert normalizer.normalize("localhost") == UNKNOWN_DOMAIN
        assert normalizer.normalize("intranet") == UNKNOWN_DOMAIN


class TestIpLiterals:

    @pytest.mark.parametrize("hostname", ["192.168.0.1", "10.0.0.254", "::1", "2001:db8::42"])
    def test_ip_returned_unchanged(self, normalizer, hostname):
        assert normalizer.normalize(hostname) == hostname

    def test_ipv6_url_hostname(self, normalizer):
        assert normalizer.root_domain_for_url("http://[2001:db8::1]:8080/path") == "2001:db8::1"


class TestUnknownFallback:

    def test_localhost(self, normalizer):
        assert normalizer.normalize("localhost") == UNKNOWN_DOMAIN

    def test_empty_hostname(self, normalizer):
        assert normalizer.normalize("") == UNKNOWN_DOMAIN

    def test_bare_public_suffix(self, normalizer):
        assert normalizer.normalize("co.uk") == UNKNOWN_DOMAIN

    def test_url_without_host(self, normalizer):
        assert normalizer.root_domain_for_url("about:blank") == UNKNOWN_DOMAIN

    def test_malformed_url_does_not_raise(self, normalizer):
        # Unbalanced IPv6 bracket makes urlsplit raise ValueError
        assert normalizer.root_domain_for_url("http://[::1/oops") == UNKNOWN_DOMAIN

    def test_url_hostname_is_lowercased(self, normalizer):
        assert normalizer.root_domain_for_url("https://WWW.Example.COM/Page") == "example.com"


class TestMemoization:

    def test_repeated_hostname_parsed_once(self):
        extractor = MagicMock(return_value=MagicMock(domain="example", suffix="com"))
        normalizer = HostnameNormalizer(extractor=extractor)

        for _ in range(50):
            assert normalizer.normalize("www.example.com") == "example.com"

        extractor.assert_called_once_with("www.example.com")
        assert len(normalizer) == 1

    def test_cache_is_per_instance(self):
        extractor = MagicMock(return_value=MagicMock(domain="example", suffix="com"))
        first = HostnameNormalizer(extractor=extractor)
        second = HostnameNormalizer(extractor=extractor)

        first.normalize("www.example.com")
        second.normalize("www.example.com")

        assert extractor.call_count == 2
        assert len(first) == 1 and len(second) == 1

    def test_unknown_results_are_cached_too(self):
        extractor = MagicMock(return_value=MagicMock(domain="", suffix=""))
        normalizer = HostnameNormalizer(extractor=extractor)

        assert normalizer.normalize("intranet") == UNKNOWN_DOMAIN
        assert normalizer.normalize("intranet") == UNKNOWN_DOMAIN
        extractor.assert_called_once()
