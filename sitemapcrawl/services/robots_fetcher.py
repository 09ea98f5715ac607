import logging
from typing import Optional

from protego import Protego

from sitemapcrawl.exceptions import FetchError, RobotsFetchError

logger = logging.getLogger(__name__)


class RobotsFetcher:
    """Fetch robots.txt content and return a parsed Protego ruleset.

    Uses an `http_service` with a `fetch_robots(url)` method that returns
    an HttpResponse. Returns None when the origin has no usable robots.txt
    (non-200 status or empty body); raises RobotsFetchError on network failure.
    """
    def __init__(self, http_service):
        self.http_service = http_service

    def fetch(self, robots_url: str) -> Optional[Protego]:
        try:
            response = self.http_service.fetch_robots(robots_url)
        except FetchError as e:
            raise RobotsFetchError(robots_url, e.cause) from e

        if response.status_code != 200 or not response.text:
            logger.debug("No robots.txt at %s (status %s)", robots_url, response.status_code)
            return None

        # Rules resolve by longest match and understand the * and $ wildcards.
        return Protego.parse(response.text)
