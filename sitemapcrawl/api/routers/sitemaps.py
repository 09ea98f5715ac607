import json
import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from starlette.responses import Response, StreamingResponse

from sitemapcrawl.api.auth import require_admin
from sitemapcrawl.exceptions import InvalidURLError, JobNotCompletedError, JobNotFoundError, SitemapNotFoundError
from sitemapcrawl.services.crawl_registry import InMemoryCrawlRegistry
from sitemapcrawl.services.sitemap_job_runner import SitemapJobRunner

logger = logging.getLogger(__name__)


class GenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    max_urls: Optional[int] = Field(default=None, alias="maxUrls", ge=1)
    crawl_depth: Optional[int] = Field(default=None, alias="crawlDepth", ge=0)
    concurrency: Optional[int] = Field(default=None, ge=1)


def create_sitemaps_router(job_runner: SitemapJobRunner, crawl_registry: InMemoryCrawlRegistry, poll_interval: float = 0.5):
    router = APIRouter(prefix="/sitemaps", tags=["Sitemaps"], dependencies=[Depends(require_admin)])

    def _result_or_http_error(job_id: str):
        try:
            return crawl_registry.get_result(job_id)
        except JobNotFoundError:
            raise HTTPException(status_code=404, detail="Job not found")
        except JobNotCompletedError:
            raise HTTPException(status_code=400, detail="Job not completed yet")

    @router.post("/generate")
    def generate(req: GenerateRequest):
        if not req.url:
            raise HTTPException(status_code=400, detail="URL is required")
        try:
            options = job_runner.build_options(req.max_urls, req.crawl_depth, req.concurrency)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        try:
            started = job_runner.submit(req.url, options)
        except InvalidURLError:
            raise HTTPException(status_code=400, detail="Invalid URL format")

        if started.get("cached"):
            sitemaps = started["result"]
            return {
                "cached": True,
                "jobId": started["jobId"],
                "urlCount": started["urlCount"],
                "completedAt": started["completedAt"],
                "result": sitemaps.to_dict(),
            }
        return {
            **started,
            "message": "Crawling started. Follow /sitemaps/progress/{jobId} for live updates.",
        }

    @router.get("/status/{job_id}")
    def status(job_id: str):
        rec = crawl_registry.get(job_id)
        if not rec:
            raise HTTPException(status_code=404, detail="Job not found")
        return rec

    @router.get(
        "/progress/{job_id}",
        responses={
            200: {
                "content": {
                    "application/x-ndjson": {
                        "schema": {"type": "string", "format": "binary"}
                    }
                },
                "description": "NDJSON stream of progress events, one per processed URL"
            }
        },
    )
    def progress(job_id: str, offset: int = 0):
        if crawl_registry.get(job_id) is None:
            raise HTTPException(status_code=404, detail="Job not found")

        def gen_ndjson():
            cursor = offset
            while True:
                try:
                    events, finished = crawl_registry.events_since(job_id, cursor)
                except JobNotFoundError:
                    return
                for event in events:
                    yield (json.dumps({"type": "progress", "jobId": job_id, "data": event}) + "\n").encode("utf-8")
                cursor += len(events)
                if finished:
                    final = crawl_registry.get(job_id) or {"status": "unknown"}
                    yield (json.dumps({"type": final["status"], "jobId": job_id, "data": final}, default=str) + "\n").encode("utf-8")
                    return
                time.sleep(poll_interval)

        return StreamingResponse(gen_ndjson(), media_type="application/x-ndjson")

    @router.get("/files/{job_id}")
    def files(job_id: str):
        result = _result_or_http_error(job_id)
        return {"jobId": job_id, "files": result.files()}

    @router.get("/download/{job_id}")
    def download(job_id: str, file: Optional[str] = None):
        try:
            doc = crawl_registry.get_document(job_id, file)
        except JobNotFoundError:
            raise HTTPException(status_code=404, detail="Job not found")
        except JobNotCompletedError:
            raise HTTPException(status_code=400, detail="Job not completed yet")
        except SitemapNotFoundError:
            raise HTTPException(status_code=404, detail="Sitemap file not found")
        return Response(
            content=doc.content,
            media_type="application/xml",
            headers={"Content-Disposition": f'attachment; filename="{doc.name}"'},
        )

    @router.post("/cancel/{job_id}")
    def cancel(job_id: str):
        if not crawl_registry.cancel(job_id):
            raise HTTPException(status_code=404, detail="Job not found or cannot cancel")
        return {"status": "cancelling", "jobId": job_id}

    @router.get("/active")
    def list_active():
        return {"active": crawl_registry.list_active()}

    return router
