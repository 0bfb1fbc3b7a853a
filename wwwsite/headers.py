"""HTTP response headers added to every page and static file."""

from __future__ import annotations

SECURITY_HEADERS: tuple[tuple[str, str], ...] = (
    ("x-xss-protection", "1; mode=block"),
    ("strict-transport-security", "max-age=63072000"),
    ("x-content-type-options", "nosniff"),
    ("referrer-policy", "no-referrer, strict-origin-when-cross-origin"),
)

CSP_NORMAL = (
    "default-src 'self'; frame-ancestors 'self'; img-src 'self' avatars.githubusercontent.com; "
    "frame-src 'self' player.vimeo.com"
)
CSP_SVG = "default-src 'self'; style-src 'self' 'unsafe-inline'; script-src 'none'"
CSP_PONTOON = (
    "default-src 'self' pontoon.rust-lang.org pontoon.mozilla.org; "
    "frame-ancestors 'self' pontoon.rust-lang.org; "
    "img-src 'self' avatars.githubusercontent.com pontoon.rust-lang.org pontoon.mozilla.org; "
    "frame-src 'self' pontoon.rust-lang.org player.vimeo.com"
)

SVG_MEDIA_TYPE = "image/svg+xml"


def _is_svg(content_type: str | None) -> bool:
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == SVG_MEDIA_TYPE


def security_headers(content_type: str | None, pontoon_enabled: bool) -> dict[str, str]:
    """Headers to set on a response with the given Content-Type."""
    headers = dict(SECURITY_HEADERS)
    if _is_svg(content_type):
        # SVGs follow the Content Security Policy and often carry inline styles.
        csp = CSP_SVG
    elif pontoon_enabled:
        csp = CSP_PONTOON
    else:
        csp = CSP_NORMAL
    headers["content-security-policy"] = csp
    return headers


def cache_control(max_age: int) -> dict[str, str]:
    """The Cache-Control header allowing caching for ``max_age`` seconds."""
    return {"cache-control": f"max-age={max_age}"}