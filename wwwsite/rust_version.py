"""The current stable toolchain version and the newest release announcement."""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping

import httpx

MANIFEST_URL = "https://static.rust-lang.org/dist/channel-rust-stable.toml"
RELEASES_FEED_URL = "https://blog.rust-lang.org/releases.json"


def proxy_from_env(environ: Mapping[str, str] | None = None) -> str | None:
    """The HTTPS proxy named by ``http_proxy`` or, failing that, ``HTTPS_PROXY``."""
    if environ is None:
        environ = os.environ
    if "http_proxy" in environ:
        return environ["http_proxy"]
    return environ.get("HTTPS_PROXY")


def _client() -> httpx.Client:
    proxy = proxy_from_env()
    if proxy is None:
        return httpx.Client()
    return httpx.Client(mounts={"https://": httpx.HTTPTransport(proxy=proxy)})


def _fetch_text(url: str) -> str:
    with _client() as client:
        return client.get(url).text


def parse_rust_version(manifest_text: str) -> str:
    """The bare version number from a stable channel manifest."""
    manifest = tomllib.loads(manifest_text)
    try:
        version = manifest["pkg"]["rust"]["version"]
    except (KeyError, TypeError) as exc:
        raise ValueError("manifest has no pkg.rust.version") from exc
    if not isinstance(version, str):
        raise ValueError("pkg.rust.version is not a string")
    return version.split(" ", 1)[0]


def parse_release_post(feed_text: str) -> str:
    """The URL of the newest post in the releases feed."""
    feed = json.loads(feed_text)
    try:
        url = feed["releases"][0]["url"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ValueError("releases feed has no release url") from exc
    if not isinstance(url, str):
        raise ValueError("release url is not a string")
    return url


def fetch_rust_version() -> str:
    """Download the stable channel manifest and return its version number."""
    return parse_rust_version(_fetch_text(MANIFEST_URL))


def fetch_release_post() -> str:
    """Download the releases feed and return the newest post's URL."""
    return parse_release_post(_fetch_text(RELEASES_FEED_URL))