"""Redirects for pages, files and locales moved since older versions of the site."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from urllib.parse import unquote

SUPPORTED_LOCALES = frozenset(
    {"en-US", "es", "fr", "it", "ja", "pt-BR", "ru", "tr", "zh-CN", "zh-TW"}
)

PAGE_REDIRECTS: dict[str, str] = {
    # Old locale prefix on the index page
    "": "",
    # Pages from before the 2018 redesign
    "community.html": "community",
    "conduct.html": "policies/code-of-conduct",
    "contribute-bugs.html": "community",
    "contribute-community.html": "community",
    "contribute-compiler.html": "governance/teams/compiler",
    "contribute-docs.html": "governance/teams/dev-tools#team-rustdoc",
    "contribute-libs.html": "governance/teams/library",
    "contribute-tools.html": "governance/teams/dev-tools",
    "contribute.html": "community",
    "documentation.html": "learn",
    "downloads.html": "tools/install",
    "friends.html": "production",
    "index.html": "",
    "install.html": "tools/install",
    "legal.html": "policies",
    "security.html": "policies/security",
    "team.html": "governance",
    "user-groups.html": "community",
    # Team changes
    "governance/teams/release": "governance/teams/infra#team-release",
    "governance/teams/crates-io": "governance/teams/dev-tools#team-crates-io",
    "governance/teams/language-and-compiler": "governance#teams",
    "governance/teams/operations": "governance#teams",
    "governance/wgs/wg-async": "governance/teams/lang#team-wg-async",
    # Miscellaneous
    "governance/teams": "governance#teams",
    "governance/wgs": "governance#working-groups",
}

STATIC_FILES_REDIRECTS: dict[str, str] = {
    "pdfs/Rust-npm-Whitepaper.pdf": "/static/pdfs/Rust-npm-Whitepaper.pdf",
    "pdfs/Rust-Tilde-Whitepaper.pdf": "/static/pdfs/Rust-Tilde-Whitepaper.pdf",
}

EXTERNAL_REDIRECTS: dict[str, str] = {
    "other-installers.html": "https://forge.rust-lang.org/infra/other-installation-methods.html",
    "policies/privacy": "https://foundation.rust-lang.org/policies/privacy-policy/",
    "policies/media-guide": "https://foundation.rust-lang.org/policies/logo-policy-and-media-guide/",
    "sponsors": "https://foundation.rust-lang.org/members/",
}

# Locales the site had before the 2018 redesign. Those with a current
# equivalent are migrated to it.
PRE_2018_LOCALES = frozenset(
    {
        "de-DE", "en-US", "es-ES", "fr-FR", "id-ID", "it-IT", "ja-JP",
        "ko-KR", "pl-PL", "pt-BR", "ru-RU", "sv-SE", "vi-VN",
    }
)


@dataclass(frozen=True)
class Redirect:
    """A redirect to ``location``, permanent or temporary."""

    location: str
    permanent: bool

    @property
    def status(self) -> int:
        return 308 if self.permanent else 307


class _LocaleState(enum.Enum):
    PRESENT = enum.auto()
    SPECIFIED_BUT_MISSING = enum.auto()
    NOT_SPECIFIED = enum.auto()


def convert_locale_from_pre_2018(pre_2018: str) -> str | None:
    """The current locale for a pre-2018 one, if its language is still supported."""
    language = pre_2018.split("-", 1)[0]
    return language if language in SUPPORTED_LOCALES else None


def _pre_2018(locale: str) -> tuple[_LocaleState, str | None]:
    converted = convert_locale_from_pre_2018(locale)
    if converted is None:
        return _LocaleState.SPECIFIED_BUT_MISSING, None
    return _LocaleState.PRESENT, converted


def _split_locale(path: str) -> tuple[_LocaleState, str | None, str]:
    first, sep, rest = path.partition("/")
    if sep:
        if first in SUPPORTED_LOCALES:
            return _LocaleState.PRESENT, first, rest
        if first in PRE_2018_LOCALES:
            # Some old locales were renamed (country code dropped), others removed.
            state, locale = _pre_2018(first)
            return state, locale, rest
        return _LocaleState.NOT_SPECIFIED, None, path
    if path in PRE_2018_LOCALES:
        # A bare old locale is its localized index page.
        state, locale = _pre_2018(path)
        return state, locale, ""
    return _LocaleState.NOT_SPECIFIED, None, path


def maybe_redirect(path: str) -> Redirect | None:
    """The redirect for a request path that matched no page, if there is one."""
    path = "/".join(unquote(segment) for segment in path.split("/") if segment)

    if path in STATIC_FILES_REDIRECTS:
        return Redirect(STATIC_FILES_REDIRECTS[path], True)

    state, locale, path = _split_locale(path)

    if path in EXTERNAL_REDIRECTS:
        return Redirect(EXTERNAL_REDIRECTS[path], True)
    if path not in PAGE_REDIRECTS:
        return None

    dest = f"/{PAGE_REDIRECTS[path]}"
    if state is _LocaleState.SPECIFIED_BUT_MISSING:
        return Redirect(dest, False)
    if state is _LocaleState.PRESENT and locale != "en-US":
        return Redirect(f"/{locale}{dest}", True)
    return Redirect(dest, True)