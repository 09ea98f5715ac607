import threading

import pytest

from sitemapcrawl.domain.crawl_options import CrawlOptions
from sitemapcrawl.domain.sitemap import SitemapDocument, SitemapSet
from sitemapcrawl.exceptions import JobNotCompletedError, JobNotFoundError, SitemapNotFoundError
from sitemapcrawl.services.crawl_registry import InMemoryCrawlRegistry

OPTIONS = CrawlOptions(100, 3, 5)


def _sitemaps():
    return SitemapSet(documents=[SitemapDocument("sitemap.xml", "<urlset/>")])


def test_start_registers_running_job():
    registry = InMemoryCrawlRegistry()
    handle = registry.start("https://example.com", OPTIONS)
    rec = registry.get(handle.job_id)
    assert rec["status"] == "running"
    assert rec["url"] == "https://example.com"
    assert rec["options"] == {"maxUrls": 100, "crawlDepth": 3, "concurrency": 5}
    assert rec["completedAt"] is None
    assert [r["jobId"] for r in registry.list_active()] == [handle.job_id]


def test_complete_exposes_counts_and_documents():
    registry = InMemoryCrawlRegistry()
    handle = registry.start("https://example.com", OPTIONS)
    assert registry.complete(handle.job_id, result=_sitemaps(), url_count=7)

    rec = registry.get(handle.job_id)
    assert rec["status"] == "completed"
    assert rec["urlCount"] == 7
    assert rec["sitemapCount"] == 1
    assert rec["hasIndex"] is False
    assert registry.get_document(handle.job_id).name == "sitemap.xml"
    assert registry.list_active() == []


def test_fail_records_error():
    registry = InMemoryCrawlRegistry()
    handle = registry.start("https://example.com", OPTIONS)
    assert registry.fail(handle.job_id, "boom")
    rec = registry.get(handle.job_id)
    assert rec["status"] == "failed"
    assert rec["error"] == "boom"


def test_documents_of_running_job_are_not_available():
    registry = InMemoryCrawlRegistry()
    handle = registry.start("https://example.com", OPTIONS)
    with pytest.raises(JobNotCompletedError):
        registry.get_document(handle.job_id)
    with pytest.raises(JobNotFoundError):
        registry.get_document("missing")


def test_unknown_document_name():
    registry = InMemoryCrawlRegistry()
    handle = registry.start("https://example.com", OPTIONS)
    registry.complete(handle.job_id, result=_sitemaps(), url_count=1)
    with pytest.raises(SitemapNotFoundError) as e:
        registry.get_document(handle.job_id, "sitemap-9.xml")
    assert e.value.name == "sitemap-9.xml"
    assert e.value.job_id == handle.job_id


def test_progress_events_since_offset():
    registry = InMemoryCrawlRegistry()
    handle = registry.start("https://example.com", OPTIONS)
    for i in range(3):
        registry.record_progress(handle.job_id, {"type": "crawled", "n": i})

    events, finished = registry.events_since(handle.job_id, 1)
    assert [e["n"] for e in events] == [1, 2]
    assert finished is False

    registry.complete(handle.job_id, result=_sitemaps(), url_count=3)
    events, finished = registry.events_since(handle.job_id, 3)
    assert events == []
    assert finished is True


def test_registry_bounded_completed_retention():
    registry = InMemoryCrawlRegistry(max_completed_records=2)

    a = registry.start("https://a.example", OPTIONS)
    b = registry.start("https://b.example", OPTIONS)
    c = registry.start("https://c.example", OPTIONS)

    assert registry.complete(a.job_id, result=_sitemaps(), url_count=1)
    assert registry.complete(b.job_id, result=_sitemaps(), url_count=1)
    assert registry.fail(c.job_id, "x")

    assert registry.get(a.job_id) is None
    assert registry.get(b.job_id) is not None
    assert registry.get(c.job_id) is not None


def test_finish_twice_is_rejected():
    registry = InMemoryCrawlRegistry()
    handle = registry.start("https://example.com", OPTIONS)
    assert registry.fail(handle.job_id, "first")
    assert not registry.complete(handle.job_id, result=_sitemaps(), url_count=1)
    assert registry.get(handle.job_id)["status"] == "failed"


def test_cancel_sets_event_and_cleans_mapping():
    registry = InMemoryCrawlRegistry(max_completed_records=10)

    handle = registry.start("https://example.com", OPTIONS)
    assert isinstance(handle.stop_event, threading.Event)

    assert registry.cancel(handle.job_id)
    assert handle.stop_event.is_set()
    assert registry._cancellation.request_cancel(handle.job_id) is False
    assert registry.get(handle.job_id)["status"] == "cancelled"

    # a crawl finishing after cancellation cannot overwrite the cancelled state
    assert not registry.complete(handle.job_id, result=_sitemaps(), url_count=1)
    assert not registry.cancel(handle.job_id)
