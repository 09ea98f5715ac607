"""Custom exceptions for the sitemap crawler."""
from typing import Optional


class InvalidURLError(ValueError):
    """Raised when a crawl start URL is not an absolute http(s) URL."""

    def __init__(self, url: str, reason: str = "invalid URL"):
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid start URL '{url}': {reason}")


class FetchError(Exception):
    """Raised when a page fetch fails (transport error, timeout, redirects or status >= 400)."""

    def __init__(self, url: str, cause):
        self.url = url
        self.cause = cause
        super().__init__(f"HTTP fetch failed for {url}: {cause}")


class RobotsFetchError(Exception):
    """Raised when robots.txt cannot be retrieved. Callers treat it as allow-all."""

    def __init__(self, robots_url: str, cause):
        self.robots_url = robots_url
        self.cause = cause
        super().__init__(f"robots.txt fetch failed for {robots_url}: {cause}")


class RobotsDenied(Exception):
    """Raised when robots.txt disallows a URL for the crawler's user agent."""

    reason = "Blocked by robots.txt"

    def __init__(self, url: str, user_agent: str):
        self.url = url
        self.user_agent = user_agent
        super().__init__(f"{url} disallowed by robots.txt for {user_agent}")


class JobNotFoundError(Exception):
    """Raised when a sitemap job id is unknown to the registry."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Job '{job_id}' not found")


class JobNotCompletedError(Exception):
    """Raised when sitemap documents are requested for a job that has not completed."""

    def __init__(self, job_id: str, status: str):
        self.job_id = job_id
        self.status = status
        super().__init__(f"Job '{job_id}' not completed (status={status})")


class SitemapNotFoundError(Exception):
    """Raised when a named sitemap document does not exist in a job's result."""

    def __init__(self, name: str, job_id: Optional[str] = None):
        self.name = name
        self.job_id = job_id
        where = f" in job '{job_id}'" if job_id else ""
        super().__init__(f"Sitemap file '{name}' not found{where}")
