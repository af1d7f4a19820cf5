"""Process-wide sitemap state and request dispatch.

A single Sitemaps instance is built at startup and handed to whatever
serves requests (the FastAPI app, the CLI). It owns the registry, the URL
composer, the lastmod cache, and the index/renderer/stylesheet helpers.

Extension points:

- extensions: ``(sitemaps) -> None`` callables run once during init(),
  after the built-in providers are registered. They may add or replace
  providers through ``sitemaps.registry``.
- URL list filters: ``(entries, name, sub_type, page) -> entries``
  callables applied in registration order before a leaf is rendered.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable

from sitemaps.config import Config
from sitemaps.index import SitemapIndex
from sitemaps.lastmod import CALCULATE_LASTMOD_JOB, LastmodCache
from sitemaps.models import SitemapEntry
from sitemaps.providers import BUILTIN_PROVIDERS, SitemapProvider
from sitemaps.registry import SitemapRegistry
from sitemaps.renderer import XML_MEDIA_TYPE, SitemapRenderer
from sitemaps.scheduler import Scheduler
from sitemaps.store.base import Store
from sitemaps.stylesheet import XSL_MEDIA_TYPE, SitemapStylesheet
from sitemaps.urls import STYLESHEET_INDEX, SitemapRequest, SitemapUrls

logger = logging.getLogger(__name__)


Extension = Callable[["Sitemaps"], None]
UrlListFilter = Callable[[list[SitemapEntry], str, str | None, int], list[SitemapEntry]]


@dataclass(frozen=True)
class SitemapResponse:
    """What a dispatcher should send back."""
    status: int
    body: bytes = b""
    media_type: str = XML_MEDIA_TYPE
    location: str | None = None   # Redirect target

    @property
    def is_not_found(self) -> bool:
        return self.status == 404


class Sitemaps:
    """Registry, index and rendering for one site."""

    def __init__(
        self,
        config: Config,
        store: Store,
        scheduler: Scheduler | None = None,
        extensions: Iterable[Extension] = (),
        url_list_filters: Iterable[UrlListFilter] = (),
    ):
        self.config = config
        self.store = store
        self.scheduler = scheduler

        self.urls = SitemapUrls(config.home_url, pretty=config.pretty_urls)
        self.lastmod = LastmodCache(store, scheduler, delay=config.lastmod_delay_seconds)
        self.registry = SitemapRegistry()
        self.index = SitemapIndex(self.registry, self.urls)
        self.renderer = SitemapRenderer(self.urls)
        self.stylesheet = SitemapStylesheet(self.urls)

        self._extensions: list[Extension] = list(extensions)
        self._url_list_filters: list[UrlListFilter] = list(url_list_filters)
        self._initialized = False

    # Setup

    def add_extension(self, extension: Extension) -> None:
        """Add a provider-registration callback. Must be called before init()."""
        if self._initialized:
            raise RuntimeError("Extensions must be added before init()")
        self._extensions.append(extension)

    def add_url_list_filter(self, url_list_filter: UrlListFilter) -> None:
        """Add a transform applied to leaf URL lists before rendering."""
        self._url_list_filters.append(url_list_filter)

    def create_provider(self, provider_cls: type[SitemapProvider], **kwargs) -> SitemapProvider:
        """Build a provider wired to this site's store, URLs and lastmod cache."""
        kwargs.setdefault("max_urls", self.config.max_urls_for(provider_cls.name))
        return provider_cls(self.store, self.urls, self.lastmod, **kwargs)

    def init(self) -> "Sitemaps":
        """Register providers and the lastmod job. Safe to call twice."""
        if self._initialized:
            return self

        self.register_sitemaps()

        if self.scheduler is not None:
            self.scheduler.register(CALCULATE_LASTMOD_JOB, self.calculate_sitemap_lastmod)

        self._initialized = True
        return self

    def register_sitemaps(self) -> None:
        """Register the configured built-in providers, then extensions."""
        for name in self.config.providers:
            provider_cls = BUILTIN_PROVIDERS.get(name)
            if provider_cls is None:
                logger.warning(f"Unknown sitemap provider in config: {name}")
                continue
            self.registry.add(name, self.create_provider(provider_cls))

        for extension in self._extensions:
            extension(self)

    # Core operations

    def resolve(self, name: str) -> SitemapProvider | None:
        """Provider registered under a name."""
        return self.registry.get(name)

    def build_index(self) -> list[SitemapEntry]:
        return self.index.build_index()

    def get_url_list(self, name: str, page: int, sub_type: str | None = None) -> list[SitemapEntry] | None:
        """Filtered URL list for a leaf sitemap.

        Returns None for an unknown provider and an empty list when the
        sub-type is not one the provider exposes or the page is out of range.
        """
        provider = self.resolve(name)
        if provider is None:
            return None

        if sub_type:
            supported = {s.name for s in provider.get_object_sub_types() if s}
            if sub_type not in supported:
                logger.debug(f"Sub-type {sub_type!r} not supported by {name}")
                return []

        entries = provider.get_url_list(page, sub_type or None)
        for url_list_filter in self._url_list_filters:
            entries = url_list_filter(entries, name, sub_type or None, page)
        return entries

    def calculate_sitemap_lastmod(self, name: str, sub_type: str | None, page: int) -> None:
        """Job handler: let every provider recompute; only the owner acts.

        The page is read through get_url_list() so the cached lastmod matches
        what the filtered leaf sitemap serves.
        """
        entries = self.get_url_list(name, page, sub_type)
        if entries is None:
            logger.debug(f"No provider for lastmod job: {name}")
            return
        for provider in self.registry:
            provider.calculate_sitemap_lastmod(name, sub_type, page, entries)

    # Dispatch

    def dispatch(self, request: SitemapRequest) -> SitemapResponse | None:
        """Turn a parsed request into a response.

        Returns None when the request names no registered provider, so the
        caller can fall through to its other routes.
        """
        if request.stylesheet:
            if request.stylesheet == STYLESHEET_INDEX:
                body = self.stylesheet.render_index_stylesheet()
            else:
                body = self.stylesheet.render_stylesheet()
            return SitemapResponse(status=200, body=body, media_type=XSL_MEDIA_TYPE)

        if request.redirect:
            return SitemapResponse(status=301, location=self.index.get_index_url())

        if request.is_index:
            body = self.renderer.render_index(self.build_index())
            return SitemapResponse(status=200, body=body)

        entries = self.get_url_list(request.sitemap, request.page or 1, request.sub_type)
        if entries is None:
            return None
        if not entries:
            return SitemapResponse(status=404)

        return SitemapResponse(status=200, body=self.renderer.render_sitemap(entries))
