"""FastAPI server exposing sitemaps over HTTP."""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import RedirectResponse, Response
from pydantic import BaseModel

from sitemaps.config import CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH, Config
from sitemaps.core import Sitemaps
from sitemaps.log import setup_logging
from sitemaps.scheduler import ThreadScheduler

logger = logging.getLogger(__name__)


# =============================================================================
# Pydantic models for API
# =============================================================================


class SitemapEntryResponse(BaseModel):
    location: str
    last_modified: datetime | None


class SubTypeResponse(BaseModel):
    name: str | None
    pages: int
    url: str | None


class ProviderResponse(BaseModel):
    name: str
    max_urls: int
    sub_types: list[SubTypeResponse]


class SitemapsSummaryResponse(BaseModel):
    index_url: str
    providers: list[ProviderResponse]


# =============================================================================
# Application state
# =============================================================================


class AppState:
    sitemaps: Sitemaps
    scheduler: ThreadScheduler


state = AppState()


def create_sitemaps(config: Config, scheduler: ThreadScheduler) -> Sitemaps:
    """Build the process-wide Sitemaps instance."""
    return Sitemaps(config, config.create_store(), scheduler).init()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup application state."""
    setup_logging(logging.INFO)
    config = Config.load(os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH))
    state.scheduler = ThreadScheduler()
    state.sitemaps = create_sitemaps(config, state.scheduler)
    logger.info(f"Serving sitemaps for {config.home_url}")

    yield
    state.scheduler.shutdown(wait=False)
    state.sitemaps.store.close()


# =============================================================================
# FastAPI app
# =============================================================================


app = FastAPI(
    title="Sitemaps API",
    description="Paginated XML sitemaps",
    version="0.1.0",
    lifespan=lifespan,
)


# =============================================================================
# Routes: JSON
# =============================================================================


@app.get("/api/sitemaps", response_model=SitemapsSummaryResponse)
def sitemaps_summary():
    """Registered providers with their sub-types and page counts."""
    sitemaps = state.sitemaps
    providers = []
    for name, provider in sitemaps.registry.all():
        sub_types = []
        for sub_type in provider.get_object_sub_types():
            sub_name = sub_type.name or None
            pages = provider.max_num_pages(sub_name)
            sub_types.append(SubTypeResponse(
                name=sub_name,
                pages=pages,
                url=provider.get_sitemap_url(sub_name, 1) if pages else None,
            ))
        providers.append(ProviderResponse(name=name, max_urls=provider.max_urls, sub_types=sub_types))

    return SitemapsSummaryResponse(index_url=sitemaps.index.get_index_url(), providers=providers)


@app.get("/api/sitemaps/index", response_model=list[SitemapEntryResponse])
def sitemaps_index():
    """Index entries as JSON."""
    return [
        SitemapEntryResponse(location=e.location, last_modified=e.last_modified)
        for e in state.sitemaps.build_index()
    ]


# =============================================================================
# Routes: XML
# =============================================================================


@app.get("/{path:path}")
def sitemap_route(path: str, request: Request):
    """Serve the index, leaf sitemaps, stylesheets and the query fallback."""
    sitemaps = state.sitemaps
    parsed = sitemaps.urls.parse(f"/{path}", dict(request.query_params))
    if parsed is None:
        raise HTTPException(status_code=404, detail="Not found")

    result = sitemaps.dispatch(parsed)
    if result is None:
        raise HTTPException(status_code=404, detail="Not found")

    if result.location:
        return RedirectResponse(result.location, status_code=result.status)
    if result.is_not_found:
        raise HTTPException(status_code=404, detail="Sitemap not found")

    return Response(content=result.body, media_type=result.media_type, status_code=result.status)
