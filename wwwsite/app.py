"""The web application: routes, page contexts, assets and error pages."""

from __future__ import annotations

import argparse
import hashlib
import os
import sys
from collections.abc import Iterable
from os import PathLike
from pathlib import Path
from typing import Any

from flask import Flask, Response, abort, redirect, render_template, send_from_directory

from wwwsite.cache import Cache
from wwwsite.category import Category, UnknownCategory, is_category
from wwwsite.headers import cache_control, security_headers
from wwwsite.i18n import EXPLICIT_LOCALE_INFO, ENGLISH, FluentLoader, is_supported_locale, team_text
from wwwsite.redirect import maybe_redirect
from wwwsite.rust_version import fetch_release_post, fetch_rust_version
from wwwsite.teams import TeamNotFound, encode_zulip_stream, fetch_teams, index_data, page_data

LAYOUT = "components/layout"
BLOG_URL = "https://blog.rust-lang.org"
STATIC_MAX_AGE = 3600
ROBOTS_DISALLOW_ALL = "User-agent: *\nDisallow: /"
EXTENSION = "wwwsite"

_ASSET_EXTENSIONS = {"styles": "css", "scripts": "js"}


def baseurl(lang: str) -> str:
    """The URL prefix of pages in ``lang``: empty for English."""
    return "" if lang == ENGLISH else f"/{lang}"


def hash_css(css: str) -> str:
    """A short decimal content hash used to name generated asset files."""
    digest = hashlib.blake2b(css.encode("utf-8"), digest_size=8).digest()
    return str(int.from_bytes(digest, "big"))


def _write_hashed(root: Path, kind: str, prefix: str, content: str) -> str:
    ext = _ASSET_EXTENSIONS[kind]
    name = f"{prefix}_{hash_css(content)}.{ext}"
    target = root / "static" / kind / name
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    return f"/static/{kind}/{name}"


def concat_assets(
    root: str | PathLike[str], kind: str, stems: Iterable[str], prefix: str
) -> str:
    """Join ``static/<kind>/<stem>`` files into one hashed file; return its URL path."""
    if kind not in _ASSET_EXTENSIONS:
        raise ValueError(f"unknown asset kind {kind!r}")
    base = Path(root)
    ext = _ASSET_EXTENSIONS[kind]
    content = "".join(
        (base / "static" / kind / f"{stem}.{ext}").read_text(encoding="utf-8") for stem in stems
    )
    return _write_hashed(base, kind, prefix, content)


def _stylesheet(root: Path, name: str) -> str:
    # Stylesheets from src/styles are published as written, under a hashed name.
    source = root / "src" / "styles" / f"{name}.scss"
    return _write_hashed(root, "styles", name, source.read_text(encoding="utf-8"))


def _build_assets(root: Path) -> dict[str, Any]:
    return {
        "css": {
            "app": _stylesheet(root, "app"),
            "fonts": _stylesheet(root, "fonts"),
            "vendor": concat_assets(root, "styles", ["tachyons"], "vendor"),
        },
        "js": {"app": concat_assets(root, "scripts", ["tools-install"], "app")},
    }


def build_context(
    page: str,
    title: str,
    is_landing: bool,
    data: Any,
    lang: str,
    pontoon_enabled: bool,
    assets: dict[str, Any],
) -> dict[str, Any]:
    """The variables every page template is rendered with."""
    return {
        "page": page,
        "title": title,
        "parent": LAYOUT,
        "is_landing": is_landing,
        "data": data,
        "lang": lang,
        "baseurl": baseurl(lang),
        "pontoon_enabled": pontoon_enabled,
        "assets": assets,
        "locales": [{"lang": info.lang, "text": info.text} for info in EXPLICIT_LOCALE_INFO],
        "is_translation": lang != ENGLISH,
    }


def lang_from_path(path: str) -> str:
    """The locale named by the first path segment, or English."""
    first = next((segment for segment in path.split("/") if segment), None)
    if first is not None and is_supported_locale(first):
        return first
    return ENGLISH


def create_app(
    root: str | PathLike[str] = ".",
    pontoon_enabled: bool = False,
    robots_disallow_all: bool = False,
) -> Flask:
    """Build the site application serving the files under ``root``."""
    base = Path(root).resolve()
    templates = base / "templates"
    app = Flask(__name__, template_folder=str(templates), static_folder=None)
    loader = FluentLoader(base / "locales")
    assets = _build_assets(base)
    state: dict[str, Any] = {
        "version": Cache(fetch_rust_version, ""),
        "release_post": Cache(fetch_release_post, ""),
        "teams": Cache(fetch_teams, None),
        "loader": loader,
    }
    app.extensions[EXTENSION] = state

    def fluent(message_id: str, lang: str = ENGLISH, **args: Any) -> str:
        return loader.lookup(lang, message_id, args)

    def team_text_helper(team: Any, param: str, lang: str, role_id: str | None = None) -> str:
        return team_text(loader, team, param, lang, role_id)

    app.jinja_env.globals.update(
        fluent=fluent, team_text=team_text_helper, encode_zulip_stream=encode_zulip_stream
    )

    def render(page: str, template: str, title_id: str, data: Any, lang: str, landing=False) -> str:
        title = loader.lookup(lang, title_id) if title_id else ""
        context = build_context(page, title, landing, data, lang, pontoon_enabled, assets)
        return render_template(f"{template}.html.hbs", **context)

    def render_index(lang: str) -> str:
        post = state["release_post"].get()
        data = {
            "rust_version": state["version"].get(),
            "rust_release_post": f"{BLOG_URL}/{post}" if post else "",
        }
        return render("index", "index", "", data, lang, landing=True)

    def render_category(category: Category, lang: str) -> str:
        return render(category.name, category.index(), f"{category.name}-page-title", None, lang)

    def render_subject(category: Category, subject: str, lang: str) -> str:
        if not (templates / category.name / f"{subject}.html.hbs").is_file():
            abort(404)
        return render(
            subject, f"{category.name}/{subject}", f"{category.name}-{subject}-page-title", None, lang
        )

    def render_governance(lang: str) -> str:
        try:
            data = index_data(state["teams"])
        except Exception as exc:  # noqa: BLE001
            print(f"error while loading the governance page: {exc}", file=sys.stderr)
            abort(500)
        page = "governance/index"
        return render(page, page, "governance-page-title", data.to_json(), lang)

    def render_team(section: str, team: str, lang: str) -> str:
        try:
            data = page_data(section, team, state["teams"])
        except TeamNotFound:
            abort(404)
        except Exception as exc:  # noqa: BLE001
            print(f"error while loading the team page: {exc}", file=sys.stderr)
            abort(500)
        page = "governance/group"
        title_id = f"governance-team-{data.team.name}-name"
        return render(page, page, title_id, data.to_json(), lang)

    def category_of(name: str) -> Category | None:
        try:
            return Category.from_param(name, templates)
        except UnknownCategory:
            return None

    def cached_file(directory: Path, path: str) -> Response:
        response = send_from_directory(directory, path)
        response.headers.update(cache_control(STATIC_MAX_AGE))
        return response

    @app.route("/logos/<path:path>")
    def logos(path: str) -> Response:
        return cached_file(base / "static" / "logos", path)

    @app.route("/static/<path:path>")
    def files(path: str) -> Response:
        return cached_file(base / "static", path)

    @app.route("/robots.txt")
    def robots_txt() -> Response:
        if not robots_disallow_all:
            abort(404)
        return Response(ROBOTS_DISALLOW_ALL, mimetype="text/plain")

    @app.route("/.well-known/security.txt")
    def well_known_security() -> Response:
        text = (base / "static" / "text" / "well_known_security.txt").read_text(encoding="utf-8")
        return Response(text, mimetype="text/plain")

    @app.route("/en-US")
    def redirect_bare_en_us() -> Response:
        return redirect("/", 308)

    @app.route("/")
    def index() -> str:
        return render_index(ENGLISH)

    @app.route("/<path:path>")
    def dispatch(path: str) -> str:
        segments = path.split("/")
        match segments:
            case ["governance"]:
                return render_governance(ENGLISH)
            case [name]:
                category = category_of(name)
                if category is not None:
                    return render_category(category, ENGLISH)
                if is_supported_locale(name):
                    return render_index(name)
            case ["governance", section, team]:
                return render_team(section, team, ENGLISH)
            case [first, second]:
                category = category_of(first)
                if category is not None:
                    return render_subject(category, second, ENGLISH)
                if is_supported_locale(first):
                    if second == "governance":
                        return render_governance(first)
                    category = category_of(second)
                    if category is not None:
                        return render_category(category, first)
            case [locale, "governance", section, team] if is_supported_locale(locale):
                return render_team(section, team, locale)
            case [locale, name, subject] if is_supported_locale(locale) and is_category(
                name, templates
            ):
                return render_subject(Category(name), subject, locale)
        abort(404)

    def not_found_page(lang: str) -> str:
        return render("404", "404", "error404-page-title", None, lang)

    from flask import request

    @app.errorhandler(404)
    def not_found(_error: Exception) -> Any:
        moved = maybe_redirect(request.path)
        if moved is not None:
            return redirect(moved.location, moved.status)
        return not_found_page(lang_from_path(request.path)), 404

    @app.errorhandler(500)
    def catch_error(_error: Exception) -> Any:
        return not_found_page(ENGLISH), 500

    @app.after_request
    def inject_headers(response: Response) -> Response:
        response.headers.update(security_headers(response.content_type, pontoon_enabled))
        return response

    return app


def main(argv: list[str] | None = None) -> int:
    """Run the site with a development server."""
    parser = argparse.ArgumentParser(description="Serve the website.")
    parser.add_argument("--root", default=".", help="directory holding templates, locales, static")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args(argv)

    app = create_app(
        args.root,
        pontoon_enabled="RUST_WWW_PONTOON" in os.environ,
        robots_disallow_all="ROBOTS_TXT_DISALLOW_ALL" in os.environ,
    )
    state = app.extensions[EXTENSION]
    for key in ("version", "release_post", "teams"):
        state[key].refresh()
    app.run(host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())