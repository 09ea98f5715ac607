import logging
from typing import Optional

from protego import Protego

from sitemapcrawl.exceptions import RobotsDenied, RobotsFetchError
from sitemapcrawl.services.robots_fetcher import RobotsFetcher

logger = logging.getLogger(__name__)


class RobotsPolicy:
    """Parsed robots.txt policy for one origin. Read-only once built.

    A policy without a parser allows everything.
    """

    def __init__(self, origin: str, user_agent: str, parser: Optional[Protego] = None):
        self.origin = origin
        self.user_agent = user_agent
        self._parser = parser

    @property
    def allow_all(self) -> bool:
        return self._parser is None

    def is_allowed(self, url: str, user_agent: Optional[str] = None) -> bool:
        if self._parser is None:
            return True
        return self._parser.can_fetch(url, user_agent or self.user_agent)

    def check(self, url: str) -> None:
        """Raise RobotsDenied if `url` is disallowed for the configured user agent."""
        if not self.is_allowed(url):
            raise RobotsDenied(url, self.user_agent)


class RobotsService:
    """
    Service for checking robots.txt permissions.

    `prepare` fetches an origin's robots.txt exactly once and returns a
    `RobotsPolicy`. Any failure yields an allow-all policy; there are no retries.
    """

    def __init__(self, http_service, user_agent: str,
                 robots_fetcher: Optional[RobotsFetcher] = None):
        self.http_service = http_service
        self.user_agent = user_agent
        self.robots_fetcher = robots_fetcher if robots_fetcher is not None else RobotsFetcher(http_service)

    def prepare(self, origin: str) -> RobotsPolicy:
        robots_url = f"{origin.rstrip('/')}/robots.txt"
        try:
            parser = self.robots_fetcher.fetch(robots_url)
        except RobotsFetchError as e:
            logger.warning("Could not fetch %s, allowing all: %s", robots_url, e)
            parser = None
        except Exception:
            logger.exception("Error parsing robots.txt from %s, allowing all", robots_url)
            parser = None

        if parser is None:
            logger.info("No robots policy for %s; all URLs allowed", origin)
        else:
            logger.info("Loaded robots policy for %s", origin)
        return RobotsPolicy(origin, self.user_agent, parser)
