"""Fetch lifecycle for the list and detail views.

Every fetch captures a token from a ``RequestGeneration`` when it is issued.
A result is applied only while that token is still current; a newer fetch or
a teardown makes it stale and its result is dropped.
"""
import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional

from bookdash.aggregate import ALL_AUTHORS, apply_filter, author_options
from bookdash.errors import user_message
from bookdash.models import BookSummary, WorkDetail
from bookdash.parse import parse_docs, parse_work_detail, work_id_from_key

logger = logging.getLogger(__name__)


class LoadStatus(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class ViewState:
    status: LoadStatus = LoadStatus.IDLE
    data: Any = None
    error: Optional[str] = None
    
    @property
    def loading(self) -> bool:
        return self.status is LoadStatus.LOADING


class RequestGeneration:
    """Monotonic counter identifying the most recently issued request."""
    
    def __init__(self):
        self._value = 0
    
    def issue(self) -> int:
        self._value += 1
        return self._value
    
    def is_current(self, token: int) -> bool:
        return token == self._value
    
    def invalidate(self):
        """Make every outstanding token stale (view torn down)."""
        self._value += 1


class _Controller:
    """Shared loading/success/error transitions."""
    
    def __init__(self):
        self.generation = RequestGeneration()
        self.state = ViewState()
    
    def begin(self) -> int:
        token = self.generation.issue()
        self.state = ViewState(LoadStatus.LOADING, data=self.state.data)
        return token
    
    def complete(self, token: int, data: Any) -> bool:
        if not self.generation.is_current(token):
            logger.debug(f"Discarding stale result for request {token}")
            return False
        self.state = ViewState(LoadStatus.SUCCESS, data=data)
        return True
    
    def fail(self, token: int, exc: BaseException) -> bool:
        if not self.generation.is_current(token):
            logger.debug(f"Discarding stale failure for request {token}: {exc}")
            return False
        logger.error(f"Fetch failed: {exc}")
        self.state = ViewState(LoadStatus.ERROR, data=self._empty(), error=user_message(exc))
        return True
    
    def teardown(self):
        self.generation.invalidate()
    
    def _empty(self):
        return None


class ListViewController(_Controller):
    """State of the dashboard list view: query, author filter and fetched books."""
    
    def __init__(self, query: str = ""):
        super().__init__()
        self.query = query
        self.selected_author: Optional[str] = ALL_AUTHORS
        self.state = ViewState(data=[])
        self._needs_fetch = True
    
    def _empty(self):
        return []
    
    @property
    def books(self) -> List[BookSummary]:
        return self.state.data or []
    
    @property
    def needs_fetch(self) -> bool:
        return self._needs_fetch
    
    def set_query(self, query: str) -> bool:
        """Record new query text; returns True when a re-fetch is due."""
        if query != self.query:
            self.query = query
            self._needs_fetch = True
        return self._needs_fetch
    
    def select_author(self, author: Optional[str]):
        self.selected_author = author
    
    def begin(self) -> int:
        self._needs_fetch = False
        return super().begin()
    
    def complete(self, token: int, data: List[BookSummary]) -> bool:
        applied = super().complete(token, data)
        if applied and self.selected_author not in author_options(data):
            self.selected_author = ALL_AUTHORS
        return applied
    
    def fail(self, token: int, exc: BaseException) -> bool:
        applied = super().fail(token, exc)
        if applied:
            self.selected_author = ALL_AUTHORS
        return applied
    
    @property
    def visible_books(self) -> List[BookSummary]:
        return apply_filter(self.books, self.selected_author)
    
    def load(self, client) -> ViewState:
        """Run one synchronous search for the current query."""
        token = self.begin()
        try:
            raw = client.search_books(self.query)
            books = parse_docs(raw)
        except Exception as e:
            self.fail(token, e)
        else:
            self.complete(token, books)
        return self.state


class DetailViewController(_Controller):
    """State of the detail view for one work id at a time."""
    
    def __init__(self):
        super().__init__()
        self.work_id: Optional[str] = None
    
    @property
    def detail(self) -> Optional[WorkDetail]:
        return self.state.data
    
    def open(self, work_id: str) -> bool:
        """Switch to ``work_id``; returns True when it has to be fetched."""
        work_id = work_id_from_key(work_id)
        if work_id == self.work_id:
            return False
        self.teardown()
        self.work_id = work_id
        self.state = ViewState()
        return True
    
    def close(self):
        """Leave the detail view; the next visit fetches again."""
        self.teardown()
        self.work_id = None
        self.state = ViewState()
    
    def load(self, client, work_id: str) -> ViewState:
        """Fetch ``work_id`` once; repeated calls for the same id are no-ops."""
        if not self.open(work_id):
            return self.state
        token = self.begin()
        try:
            detail = parse_work_detail(client.get_work_detail(self.work_id))
        except Exception as e:
            self.fail(token, e)
        else:
            self.complete(token, detail)
        return self.state


class AsyncSearchRunner:
    """Runs list-view searches on an event loop, one live request at a time.
    
    Submitting a new query cancels the task of the superseded one, which
    aborts its transport request. The generation check still guards against
    a result that was already resolved when the cancel arrived.
    """
    
    def __init__(
        self,
        controller: ListViewController,
        search: Callable[[str], Awaitable[List[dict]]]
    ):
        self.controller = controller
        self.search = search
        self._task: Optional[asyncio.Task] = None
    
    def submit(self, query: str) -> Optional[asyncio.Task]:
        """Schedule a fetch for ``query`` if it differs from the last one."""
        if not self.controller.set_query(query):
            return self._task
        self._cancel()
        token = self.controller.begin()
        self._task = asyncio.ensure_future(self._run(token, query))
        return self._task
    
    async def _run(self, token: int, query: str):
        try:
            raw = await self.search(query)
            books = parse_docs(raw)
        except asyncio.CancelledError:
            logger.debug(f"Search for {query!r} cancelled")
            raise
        except Exception as e:
            self.controller.fail(token, e)
        else:
            self.controller.complete(token, books)
    
    def _cancel(self):
        if self._task is not None and not self._task.done():
            self._task.cancel()
    
    async def wait(self):
        """Wait for the live task, if any."""
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                pass
    
    def close(self):
        self._cancel()
        self.controller.teardown()
