"""Sitemap URL composition and request parsing.

Pretty routes:

    /sitemap-index.xml                         index
    /sitemap-{name}-{sub_type}-{page}.xml      leaf with sub-type
    /sitemap-{name}-{page}.xml                 leaf without sub-type
    /sitemap-{name}.xml                        leaf without sub-type, page 1
    /sitemap.xsl, /sitemap-index.xsl           stylesheets
    /sitemap.xml                               legacy alias, redirects to the index

Without pretty routing everything goes through the home URL with the
``sitemap``, ``sub_type``, ``paged`` and ``sitemap-stylesheet`` parameters.
"""

import re
from dataclasses import dataclass
from typing import Mapping
from urllib.parse import urlencode

INDEX_NAME = "index"

# Page numbers past this many digits cannot address real content and would
# overflow integer columns in the store.
MAX_PAGE_DIGITS = 9

STYLESHEET_SITEMAP = "xsl"
STYLESHEET_INDEX = "index"

_LEAF_WITH_SUB_TYPE = re.compile(r"^/sitemap-([a-z]+?)-([a-z\d_-]+?)-(\d+?)\.xml$")
_LEAF = re.compile(r"^/sitemap-([a-z]+?)-(\d+?)\.xml$")
_LEAF_FIRST_PAGE = re.compile(r"^/sitemap-([a-z]+?)\.xml$")
_CATEGORY_NAME = re.compile(r"[a-z]+")

_STYLESHEET_PATHS = {
    "/sitemap.xsl": STYLESHEET_SITEMAP,
    "/sitemap-index.xsl": STYLESHEET_INDEX,
}


@dataclass(frozen=True)
class SitemapRequest:
    """A request resolved to a sitemap route."""
    sitemap: str = ""             # Provider name, or "index"
    sub_type: str | None = None
    page: int | None = None
    stylesheet: str | None = None  # "xsl" or "index"
    redirect: bool = False         # Legacy /sitemap.xml

    @property
    def is_index(self) -> bool:
        return self.sitemap == INDEX_NAME


def is_valid_category(name: str) -> bool:
    """True if a category name can appear in a pretty sitemap URL.

    Hyphens separate URL segments, so names are plain lowercase letters.
    "index" is taken by the sitemap index.
    """
    return bool(_CATEGORY_NAME.fullmatch(name)) and name != INDEX_NAME


def _to_page(value: str | None) -> int | None:
    """Parse a page number; non-numeric or oversized input is treated as absent."""
    if value is None or value == "":
        return None
    if len(value.strip().lstrip("+-")) > MAX_PAGE_DIGITS:
        return None
    try:
        return abs(int(value))
    except ValueError:
        return None


class SitemapUrls:
    """Builds and parses sitemap URLs for one site."""

    def __init__(self, home_url: str, pretty: bool = True):
        self.home_url = home_url.rstrip("/")
        self.pretty = pretty

    def absolute(self, path: str) -> str:
        """Turn a site-relative path into an absolute URL."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.home_url}/{path.lstrip('/')}"

    def _query_url(self, params: dict[str, str | int | None]) -> str:
        query = urlencode({k: v for k, v in params.items() if v})
        return f"{self.home_url}/?{query}"

    def index_url(self) -> str:
        if self.pretty:
            return self.absolute("/sitemap-index.xml")
        return self._query_url({"sitemap": INDEX_NAME})

    def sitemap_url(self, name: str, sub_type: str | None, page: int | None) -> str:
        """URL of a leaf sitemap.

        Empty parts are dropped, so a provider without sub-types gets
        ``/sitemap-users-1.xml`` and a missing page number is left out.
        """
        if self.pretty:
            parts = [p for p in (name, sub_type, str(page) if page else "") if p]
            return self.absolute(f"/sitemap-{'-'.join(parts)}.xml")

        return self._query_url({"sitemap": name, "sub_type": sub_type, "paged": page})

    def stylesheet_url(self, kind: str = STYLESHEET_SITEMAP) -> str:
        if self.pretty:
            path = "/sitemap-index.xsl" if kind == STYLESHEET_INDEX else "/sitemap.xsl"
            return self.absolute(path)
        return self._query_url({"sitemap-stylesheet": kind})

    def parse(self, path: str, query: Mapping[str, str] | None = None) -> SitemapRequest | None:
        """Resolve a request path and query to a sitemap route.

        Returns None when the request is not a sitemap route.
        """
        query = query or {}

        if path in _STYLESHEET_PATHS:
            return SitemapRequest(stylesheet=_STYLESHEET_PATHS[path])
        if path == "/sitemap-index.xml":
            return SitemapRequest(sitemap=INDEX_NAME)
        if path == "/sitemap.xml":
            return SitemapRequest(sitemap=INDEX_NAME, redirect=True)

        if match := _LEAF_WITH_SUB_TYPE.match(path):
            page = _to_page(match.group(3))
            if page is None:
                return None
            return SitemapRequest(sitemap=match.group(1), sub_type=match.group(2), page=page)
        if match := _LEAF.match(path):
            page = _to_page(match.group(2))
            if page is None:
                return None
            return SitemapRequest(sitemap=match.group(1), page=page)
        if match := _LEAF_FIRST_PAGE.match(path):
            return SitemapRequest(sitemap=match.group(1))

        if path in ("", "/"):
            stylesheet = query.get("sitemap-stylesheet")
            if stylesheet in (STYLESHEET_SITEMAP, STYLESHEET_INDEX):
                return SitemapRequest(stylesheet=stylesheet)
            sitemap = query.get("sitemap", "").strip()
            if sitemap:
                return SitemapRequest(
                    sitemap=sitemap,
                    sub_type=query.get("sub_type") or None,
                    page=_to_page(query.get("paged")),
                )

        return None
