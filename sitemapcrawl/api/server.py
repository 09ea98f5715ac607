from contextlib import asynccontextmanager

from fastapi import FastAPI

from sitemapcrawl.api.routers import create_auth_router, create_sitemaps_router, create_systems_router
from sitemapcrawl.container import ENV, Container


def create_app(container: Container) -> FastAPI:
    """Build the FastAPI app around the services held by `container`."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        container.job_runner().shutdown(wait=False)

    app = FastAPI(title="sitemapcrawl", description="Crawl a site and generate sitemap XML", lifespan=lifespan)
    app.state.container = container

    app.include_router(create_auth_router())
    app.include_router(create_sitemaps_router(container.job_runner(), container.crawl_registry()))
    app.include_router(create_systems_router(ENV, container.crawl_registry()))
    return app
