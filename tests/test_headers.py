import pytest

from wwwsite.headers import (
    CSP_NORMAL,
    CSP_PONTOON,
    CSP_SVG,
    cache_control,
    security_headers,
)


def test_fixed_security_headers_present():
    headers = security_headers("text/html", False)
    assert headers["x-xss-protection"] == "1; mode=block"
    assert headers["strict-transport-security"] == "max-age=63072000"
    assert headers["x-content-type-options"] == "nosniff"
    assert headers["referrer-policy"] == "no-referrer, strict-origin-when-cross-origin"


def test_normal_csp():
    assert security_headers("text/html; charset=utf-8", False)["content-security-policy"] == CSP_NORMAL
    assert "player.vimeo.com" in CSP_NORMAL


def test_pontoon_csp():
    assert security_headers("text/html", True)["content-security-policy"] == CSP_PONTOON


@pytest.mark.parametrize("pontoon", [False, True])
@pytest.mark.parametrize("content_type", ["image/svg+xml", "IMAGE/SVG+XML", "image/svg+xml; charset=utf-8"])
def test_svg_csp_wins(content_type, pontoon):
    assert security_headers(content_type, pontoon)["content-security-policy"] == CSP_SVG


def test_missing_content_type_uses_normal_csp():
    assert security_headers(None, False)["content-security-policy"] == CSP_NORMAL


def test_header_count_is_stable():
    assert len(security_headers("image/png", False)) == len(security_headers("image/svg+xml", True))


def test_cache_control():
    assert cache_control(3600) == {"cache-control": "max-age=3600"}
    assert cache_control(0)["cache-control"].endswith("=0")