from typing import Optional

from fastapi import APIRouter, Depends

from sitemapcrawl.api.auth import require_admin
from sitemapcrawl.services.crawl_registry import InMemoryCrawlRegistry
from sitemapcrawl.utils.datetime_utils import to_iso8601


def create_systems_router(settings: dict, crawl_registry: Optional[InMemoryCrawlRegistry] = None) -> APIRouter:
    router = APIRouter(prefix="/systems", tags=["System"])

    @router.get("/health")
    def health():
        body = {"status": "ok", "timestamp": to_iso8601()}
        if crawl_registry is not None:
            body["activeJobs"] = len(crawl_registry.list_active())
        return body

    @router.get("/config", dependencies=[Depends(require_admin)])
    def get_config():
        """Effective settings; values are stringified, unset ones are null."""
        return {"settings": {k: None if v is None else str(v) for k, v in settings.items()}}

    return router
