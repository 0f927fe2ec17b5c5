from __future__ import annotations

import pytest

from examfeed.normalize.canonical_url import canonicalize_url, is_http_url


def test_canonicalize_url_resolves_relative_links_against_base() -> None:
    assert (
        canonicalize_url("/notice-board/view/123", "https://ssc.gov.in")
        == "https://ssc.gov.in/notice-board/view/123"
    )
    assert (
        canonicalize_url("page.php?id=7", "https://www.time4education.com/local/articlecms/all.php")
        == "https://www.time4education.com/local/articlecms/page.php?id=7"
    )


def test_canonicalize_url_folds_scheme_and_host_only() -> None:
    assert (
        canonicalize_url("HTTPS://SSC.GOV.IN:443/Files/CGL_Notice.PDF#page=2")
        == "https://ssc.gov.in/Files/CGL_Notice.PDF"
    )
    assert canonicalize_url("http://example.com:8080") == "http://example.com:8080/"


@pytest.mark.parametrize(
    "href",
    [None, "", "   ", "#top", "javascript:void(0)", "mailto:help@ssc.gov.in", "tel:12345", "ftp://x.org/a.pdf"],
)
def test_canonicalize_url_rejects_non_http_links(href: str | None) -> None:
    assert canonicalize_url(href, "https://ssc.gov.in") is None


def test_canonicalize_url_rejects_unresolvable_relative_links() -> None:
    assert canonicalize_url("/notice-board") is None
    assert canonicalize_url("http://example.com:notaport/") is None


def test_canonicalize_url_is_stable_on_its_own_output() -> None:
    first = canonicalize_url("//Testbook.com/blog/ssc-cgl/", "https://testbook.com")

    assert first == "https://testbook.com/blog/ssc-cgl/"
    assert canonicalize_url(first) == first


def test_is_http_url() -> None:
    assert is_http_url("https://ssc.gov.in/")
    assert not is_http_url("ssc.gov.in/notice-board")
