from typing import NamedTuple


class FrontierItem(NamedTuple):
    """A queued URL awaiting dispatch, with its path-derived depth."""
    url: str
    depth: int
