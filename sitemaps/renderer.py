"""XML rendering for sitemaps and the sitemap index."""

import html
import xml.etree.ElementTree as ET

from sitemaps.lastmod import to_w3c
from sitemaps.models import SitemapEntry
from sitemaps.urls import STYLESHEET_INDEX, STYLESHEET_SITEMAP, SitemapUrls

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
XML_MEDIA_TYPE = "application/xml; charset=UTF-8"


class SitemapRenderer:
    """Serializes entry lists to sitemap XML.

    Output is bytes, UTF-8, with an xml-stylesheet instruction so browsers
    show a readable table instead of raw XML.
    """

    def __init__(self, urls: SitemapUrls):
        self.urls = urls

    def render_index(self, entries: list[SitemapEntry]) -> bytes:
        """Render a <sitemapindex> document."""
        root = self._build("sitemapindex", "sitemap", entries)
        return self._serialize(root, self.urls.stylesheet_url(STYLESHEET_INDEX))

    def render_sitemap(self, entries: list[SitemapEntry]) -> bytes:
        """Render a <urlset> document."""
        root = self._build("urlset", "url", entries)
        return self._serialize(root, self.urls.stylesheet_url(STYLESHEET_SITEMAP))

    def _build(self, root_tag: str, entry_tag: str, entries: list[SitemapEntry]) -> ET.Element:
        root = ET.Element(root_tag, {"xmlns": SITEMAP_NS})
        for entry in entries:
            node = ET.SubElement(root, entry_tag)
            ET.SubElement(node, "loc").text = entry.location
            if entry.last_modified:
                ET.SubElement(node, "lastmod").text = to_w3c(entry.last_modified)
        return root

    def _serialize(self, root: ET.Element, stylesheet_url: str) -> bytes:
        body = ET.tostring(root, encoding="unicode")
        href = html.escape(stylesheet_url, quote=True)
        return (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            f'<?xml-stylesheet type="text/xsl" href="{href}" ?>\n'
            f"{body}\n"
        ).encode("utf-8")
