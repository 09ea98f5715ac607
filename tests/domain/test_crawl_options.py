from sitemapcrawl.domain.crawl_options import CrawlOptions
from sitemapcrawl.services.result_cache import cache_key


def test_cache_key_format():
    options = CrawlOptions(max_urls=100, crawl_depth=3, concurrency=5)
    assert cache_key("https://example.com", options) == "sitemap:https://example.com:100:3:5"


def test_cache_key_is_deterministic():
    assert cache_key("https://example.com", CrawlOptions(100, 3, 5)) == cache_key("https://example.com", CrawlOptions(100, 3, 5))


def test_cache_key_changes_with_each_option():
    base = cache_key("https://example.com", CrawlOptions(100, 3, 5))
    assert cache_key("https://example.com", CrawlOptions(200, 3, 5)) != base
    assert cache_key("https://example.com", CrawlOptions(100, 4, 5)) != base
    assert cache_key("https://example.com", CrawlOptions(100, 3, 6)) != base
    assert cache_key("https://example.org", CrawlOptions(100, 3, 5)) != base


def test_to_dict_uses_wire_names():
    assert CrawlOptions(10, 2, 1).to_dict() == {"maxUrls": 10, "crawlDepth": 2, "concurrency": 1}
