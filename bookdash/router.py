"""Client-side routing between the list view and the detail view."""
import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from bookdash.parse import work_id_from_key

logger = logging.getLogger(__name__)

ROOT = "root"
BOOK = "book"

ROOT_PATH = "/"
_BOOK_PATTERN = re.compile(r"^/book/(?P<work_id>[^/]+)/?$")


@dataclass(frozen=True)
class Route:
    name: str
    work_id: Optional[str] = None
    
    @property
    def path(self) -> str:
        if self.name == BOOK:
            return f"/book/{self.work_id}"
        return ROOT_PATH


ROOT_ROUTE = Route(ROOT)


def resolve(path: Optional[str]) -> Route:
    """
    Map a URL path onto one of the two routes.
    
    Args:
        path: ``/`` or ``/book/{workId}``; empty means root
        
    Returns:
        Matching Route (root for anything unknown)
    """
    path = (path or ROOT_PATH).strip()
    if path in ("", ROOT_PATH):
        return ROOT_ROUTE
    
    match = _BOOK_PATTERN.match(path)
    if match:
        return Route(BOOK, match.group("work_id"))
    
    logger.warning(f"Unknown path {path!r}, showing the list view")
    return ROOT_ROUTE


def book_path(key: str) -> str:
    """Detail path for a catalog key or bare work id."""
    return Route(BOOK, work_id_from_key(key)).path


class Navigator:
    """In-memory history of visited routes."""
    
    def __init__(self, start: Route = ROOT_ROUTE):
        self._history: List[Route] = [start]
    
    @property
    def current(self) -> Route:
        return self._history[-1]
    
    def push(self, route: Route) -> Route:
        if route != self.current:
            self._history.append(route)
        return self.current
    
    def back(self) -> Route:
        """Return to the previous route; stays on the first entry."""
        if len(self._history) > 1:
            self._history.pop()
        return self.current
    
    def __len__(self):
        return len(self._history)
