"""Dependency injection container for the application."""
from dependency_injector import containers, providers

from sitemapcrawl import config as env
from sitemapcrawl.services.crawl_engine import CrawlEngine
from sitemapcrawl.services.crawl_policy import CrawlPolicy
from sitemapcrawl.services.crawl_registry import InMemoryCrawlRegistry
from sitemapcrawl.services.fetcher import HttpServiceFetcher
from sitemapcrawl.services.http_service import HttpService, make_http_session
from sitemapcrawl.services.link_extractor import LinkExtractor
from sitemapcrawl.services.result_cache import ResultCache
from sitemapcrawl.services.robots_fetcher import RobotsFetcher
from sitemapcrawl.services.robots_service import RobotsService
from sitemapcrawl.services.sitemap_builder import MAX_URLS_PER_SITEMAP, SitemapBuilder
from sitemapcrawl.services.sitemap_job_runner import SitemapJobRunner


# Environment variables used by the container (read via `sitemapcrawl.config` helpers).
#
# USER_AGENT (str, default: "SitemapGenerator/1.0")
#   User-Agent header for page and robots.txt fetches; also the robots.txt agent name.
#
# REQUEST_TIMEOUT (float seconds, default: 10)
#   Hard timeout for every outbound request. A timed out request is a failed fetch.
#
# MAX_REDIRECTS (int, default: 5)
#   Redirects followed per page fetch before the fetch fails.
#
# DEFAULT_MAX_URLS / DEFAULT_CRAWL_DEPTH / DEFAULT_CONCURRENCY (int, defaults: 10000 / 3 / 5)
#   Crawl options used when a request omits them.
#
# MAX_URLS_PER_SITEMAP (int, default: 50000)
#   Sitemap chunk size. The protocol limit is 50000; lower values are for testing.
#
# CACHE_TTL_SECONDS (int seconds, default: 3600)
#   Lifetime of cached job results. Non-positive disables caching.
#
# CACHE_MAX_ENTRIES (int, default: 256)
#   Max cached results (LRU eviction).
#
# SITEMAPCRAWL_MAX_COMPLETED_JOBS (int, default: 1000)
#   Finished jobs kept in the in-memory job registry.
#
# SITEMAPCRAWL_JOB_WORKERS (int, default: 4)
#   Jobs that may crawl at the same time.
#
# HOST / PORT (default: "0.0.0.0" / 8000)
#   Bind address for the API server.
ENV = {
    "USER_AGENT": env.get_str_env("USER_AGENT", "SitemapGenerator/1.0"),
    "REQUEST_TIMEOUT": env.get_float_env("REQUEST_TIMEOUT", 10.0),
    "MAX_REDIRECTS": env.get_int_env("MAX_REDIRECTS", 5),
    "DEFAULT_MAX_URLS": env.get_int_env("DEFAULT_MAX_URLS", 10000),
    "DEFAULT_CRAWL_DEPTH": env.get_int_env("DEFAULT_CRAWL_DEPTH", 3),
    "DEFAULT_CONCURRENCY": env.get_int_env("DEFAULT_CONCURRENCY", 5),
    "MAX_URLS_PER_SITEMAP": env.get_int_env("MAX_URLS_PER_SITEMAP", MAX_URLS_PER_SITEMAP),
    "CACHE_TTL_SECONDS": env.get_int_env("CACHE_TTL_SECONDS", 3600),
    "CACHE_MAX_ENTRIES": env.get_int_env("CACHE_MAX_ENTRIES", 256),
    "SITEMAPCRAWL_MAX_COMPLETED_JOBS": env.get_int_env("SITEMAPCRAWL_MAX_COMPLETED_JOBS", 1000),
    "SITEMAPCRAWL_JOB_WORKERS": env.get_int_env("SITEMAPCRAWL_JOB_WORKERS", 4),
    "HOST": env.get_str_env("HOST", "0.0.0.0"),
    "PORT": env.get_int_env("PORT", 8000),
}


class Container(containers.DeclarativeContainer):
    """Dependency injection container for the sitemap crawler."""

    # Configuration
    config = providers.Configuration(default=ENV)

    # Shared session so connections are pooled across fetches
    http_session = providers.Singleton(
        make_http_session,
        max_redirects=config.MAX_REDIRECTS.as_(int),
    )

    http_service = providers.Singleton(
        HttpService,
        user_agent=config.USER_AGENT.as_(str),
        http_client=http_session.provided.get,
        timeout=config.REQUEST_TIMEOUT.as_(float),
    )

    page_fetcher = providers.Singleton(
        HttpServiceFetcher,
        http_service=http_service,
    )

    robots_fetcher = providers.Singleton(
        RobotsFetcher,
        http_service=http_service,
    )

    robots_service = providers.Singleton(
        RobotsService,
        http_service=http_service,
        user_agent=config.USER_AGENT.as_(str),
        robots_fetcher=robots_fetcher,
    )

    link_extractor = providers.Singleton(LinkExtractor)

    crawl_policy = providers.Singleton(CrawlPolicy)

    crawl_engine = providers.Singleton(
        CrawlEngine,
        fetcher=page_fetcher,
        robots_service=robots_service,
        link_extractor=link_extractor,
        crawl_policy=crawl_policy,
    )

    sitemap_builder = providers.Singleton(
        SitemapBuilder,
        max_urls_per_sitemap=config.MAX_URLS_PER_SITEMAP.as_(int),
    )

    crawl_registry = providers.Singleton(
        InMemoryCrawlRegistry,
        max_completed_records=config.SITEMAPCRAWL_MAX_COMPLETED_JOBS.as_(int),
    )

    result_cache = providers.Singleton(
        ResultCache,
        max_size=config.CACHE_MAX_ENTRIES.as_(int),
        ttl_seconds=config.CACHE_TTL_SECONDS.as_(int),
    )

    job_runner = providers.Singleton(
        SitemapJobRunner,
        crawl_engine=crawl_engine,
        sitemap_builder=sitemap_builder,
        crawl_registry=crawl_registry,
        result_cache=result_cache,
        default_max_urls=config.DEFAULT_MAX_URLS.as_(int),
        default_crawl_depth=config.DEFAULT_CRAWL_DEPTH.as_(int),
        default_concurrency=config.DEFAULT_CONCURRENCY.as_(int),
        max_workers=config.SITEMAPCRAWL_JOB_WORKERS.as_(int),
    )
