"""HTML utility functions for Folio.

This module provides the HTML string helpers shared by the renderers,
templates and feeds: escaping, URL joining and URL absolutization.

Functions:
    escape_html: Escape special HTML/XML characters in a string.
    join_root_url: Join a base URL with a path.
    absolutize_html_urls: Convert root-relative URLs to absolute in HTML.
"""

from __future__ import annotations

import re

_URL_ATTR_RE = re.compile(
    r'(?P<prefix>\b(?:href|src|action)=["\'])(?P<url>[^"\']+)(?P<suffix>["\'])'
)

# Only root-relative URLs are rewritten; these are left alone.
_URL_SKIP_PREFIXES = (
    "http://",
    "https://",
    "//",
    "mailto:",
    "tel:",
    "#",
    "javascript:",
    "data:",
)


def escape_html(text: str) -> str:
    """Escape special HTML characters in a string.

    Examples:
        >>> escape_html('<T : Any> "bound"')
        '&lt;T : Any&gt; &quot;bound&quot;'

        >>> escape_html("Flow & Channel")
        'Flow &amp; Channel'
    """
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def join_root_url(root_url: str, path: str) -> str:
    """Safely join a root URL and a path, avoiding double slashes.

    Examples:
        >>> join_root_url("https://me.github.io/blog/", "/articles/flows/")
        'https://me.github.io/blog/articles/flows/'
    """
    if not root_url:
        return path
    base = root_url.rstrip("/")
    suffix = path if path.startswith("/") else f"/{path}"
    return f"{base}{suffix}"


def absolutize_html_urls(html: str, root_url: str) -> str:
    """Rewrite root-relative URLs in href/src/action attributes.

    Needed when the site is hosted under a sub-path (a GitHub Pages project
    site, for instance). External URLs, anchors and special schemes are left
    unchanged.

    Examples:
        >>> absolutize_html_urls('<a href="/tags/">Tags</a>', "https://me.github.io/blog")
        '<a href="https://me.github.io/blog/tags/">Tags</a>'
    """
    if not root_url:
        return html

    def repl(match: re.Match) -> str:
        url = match.group("url")
        if not url.startswith("/") or url.startswith(_URL_SKIP_PREFIXES):
            return match.group(0)
        return f"{match.group('prefix')}{join_root_url(root_url, url)}{match.group('suffix')}"

    return _URL_ATTR_RE.sub(repl, html)
