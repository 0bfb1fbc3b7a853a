import json
from unittest.mock import patch

import httpx
import pytest

from wwwsite import rust_version
from wwwsite.rust_version import (
    MANIFEST_URL,
    RELEASES_FEED_URL,
    fetch_release_post,
    fetch_rust_version,
    parse_release_post,
    parse_rust_version,
    proxy_from_env,
)

MANIFEST = """
manifest-version = "2"

[pkg.rust]
version = "1.75.0 (82e1608df 2023-12-21)"
"""

FEED = json.dumps(
    {
        "releases": [
            {"url": "2023/12/28/Rust-1.75.0.html"},
            {"url": "2023/11/16/Rust-1.74.0.html"},
        ]
    }
)


def test_proxy_prefers_http_proxy():
    env = {"http_proxy": "http://a.example.com", "HTTPS_PROXY": "http://b.example.com"}
    assert proxy_from_env(env) == "http://a.example.com"


def test_proxy_falls_back_to_https_proxy():
    assert proxy_from_env({"HTTPS_PROXY": "http://b.example.com"}) == "http://b.example.com"


def test_proxy_absent():
    assert proxy_from_env({}) is None


def test_parse_rust_version_strips_commit_info():
    assert parse_rust_version(MANIFEST) == "1.75.0"


def test_parse_rust_version_without_suffix():
    assert parse_rust_version('[pkg.rust]\nversion = "1.80.1"\n') == "1.80.1"


def test_parse_rust_version_missing_key():
    with pytest.raises(ValueError):
        parse_rust_version('[pkg.cargo]\nversion = "1.0.0"\n')


def test_parse_rust_version_invalid_toml():
    with pytest.raises(ValueError):
        parse_rust_version("this is = = not toml")


def test_parse_release_post_takes_first():
    assert parse_release_post(FEED) == "2023/12/28/Rust-1.75.0.html"


def test_parse_release_post_empty_feed():
    with pytest.raises(ValueError):
        parse_release_post('{"releases": []}')


def _responder(bodies):
    def fake_get(self, url, *args, **kwargs):
        return httpx.Response(200, text=bodies[url], request=httpx.Request("GET", url))

    return fake_get


def test_fetch_rust_version(monkeypatch):
    monkeypatch.delenv("http_proxy", raising=False)
    monkeypatch.delenv("HTTPS_PROXY", raising=False)
    with patch.object(httpx.Client, "get", _responder({MANIFEST_URL: MANIFEST})):
        assert fetch_rust_version() == "1.75.0"


def test_fetch_release_post(monkeypatch):
    monkeypatch.delenv("http_proxy", raising=False)
    monkeypatch.delenv("HTTPS_PROXY", raising=False)
    with patch.object(httpx.Client, "get", _responder({RELEASES_FEED_URL: FEED})):
        assert fetch_release_post() == "2023/12/28/Rust-1.75.0.html"


def test_fetch_with_proxy_configured(monkeypatch):
    monkeypatch.setenv("http_proxy", "http://proxy.example.com:3128")
    with patch.object(httpx.Client, "get", _responder({MANIFEST_URL: MANIFEST})):
        assert rust_version.fetch_rust_version() == "1.75.0"