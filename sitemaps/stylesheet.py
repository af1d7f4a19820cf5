"""XSL stylesheets that make sitemaps readable in a browser."""

from sitemaps.urls import SitemapUrls

XSL_MEDIA_TYPE = "text/xsl; charset=UTF-8"

_CSS = """
body { font: 14px/1.5 -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif; color: #444; margin: 0 2em; }
#sitemap__table { border: solid 1px #ccc; border-collapse: collapse; }
#sitemap__table tr th, #sitemap__table tr td { padding: 10px; text-align: left; }
#sitemap__table tr:nth-child(odd) td { background-color: #eee; }
a:hover { text-decoration: none; }
"""

_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<xsl:stylesheet
    version="1.0"
    xmlns:xsl="http://www.w3.org/1999/XSL/Transform"
    xmlns:sitemap="http://www.sitemaps.org/schemas/sitemap/0.9"
    exclude-result-prefixes="sitemap">

  <xsl:output method="html" encoding="UTF-8" indent="yes" />

  <xsl:template match="/">
    <html lang="en">
      <head>
        <title>{title}</title>
        <style type="text/css">{css}</style>
      </head>
      <body>
        <div id="sitemap__header">
          <h1>{title}</h1>
          <p>{description}</p>
          <p>Number of URLs in this sitemap: <xsl:value-of select="count({count_path})" />.</p>
        </div>
        <table id="sitemap__table">
          <thead>
            <tr>
              <th>URL</th>
              <th>Last Modified</th>
            </tr>
          </thead>
          <tbody>
            <xsl:for-each select="{count_path}">
              <tr>
                <td><a href="{{sitemap:loc}}"><xsl:value-of select="sitemap:loc" /></a></td>
                <td><xsl:value-of select="sitemap:lastmod" /></td>
              </tr>
            </xsl:for-each>
          </tbody>
        </table>
        <p><a href="{index_url}">Back to the sitemap index</a></p>
      </body>
    </html>
  </xsl:template>
</xsl:stylesheet>
"""


class SitemapStylesheet:
    """Renders the leaf and index XSL documents."""

    def __init__(self, urls: SitemapUrls):
        self.urls = urls

    def render_stylesheet(self) -> bytes:
        """Stylesheet for leaf sitemaps (<urlset>)."""
        return self._render(
            title="XML Sitemap",
            description="This XML sitemap lists the pages of this site for search engines.",
            count_path="sitemap:urlset/sitemap:url",
        )

    def render_index_stylesheet(self) -> bytes:
        """Stylesheet for the sitemap index (<sitemapindex>)."""
        return self._render(
            title="XML Sitemap Index",
            description="This sitemap index lists every sitemap of this site.",
            count_path="sitemap:sitemapindex/sitemap:sitemap",
        )

    def _render(self, title: str, description: str, count_path: str) -> bytes:
        return _TEMPLATE.format(
            title=title,
            description=description,
            css=_CSS,
            count_path=count_path,
            index_url=self.urls.index_url().replace("&", "&amp;"),
        ).encode("utf-8")
