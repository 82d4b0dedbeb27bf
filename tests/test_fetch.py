"""Tests for the list and detail fetch lifecycles."""
import asyncio
from unittest.mock import MagicMock

from bookdash.aggregate import ALL_AUTHORS
from bookdash.errors import HttpError
from bookdash.fetch import (
    AsyncSearchRunner,
    DetailViewController,
    ListViewController,
    LoadStatus,
    RequestGeneration,
)
from bookdash.models import BookSummary

DOCS = [
    {"key": "/works/OL1W", "title": "A Wizard of Earthsea", "author_name": ["Ursula K. Le Guin"], "first_publish_year": 1968},
    {"key": "/works/OL2W", "title": "The Hobbit", "author_name": ["J.R.R. Tolkien"], "first_publish_year": 1937},
]


def test_request_generation():
    """Test that only the latest token is current."""
    generation = RequestGeneration()
    first = generation.issue()
    second = generation.issue()

    assert not generation.is_current(first)
    assert generation.is_current(second)

    generation.invalidate()
    assert not generation.is_current(second)


def test_list_load_success():
    """Test idle -> loading -> success with normalized books."""
    client = MagicMock()
    client.search_books.return_value = DOCS
    controller = ListViewController(query="fantasy")

    assert controller.state.status is LoadStatus.IDLE
    state = controller.load(client)

    client.search_books.assert_called_once_with("fantasy")
    assert state.status is LoadStatus.SUCCESS
    assert [b.title for b in controller.books] == ["A Wizard of Earthsea", "The Hobbit"]
    assert not controller.needs_fetch


def test_list_load_error_clears_previous_books():
    """Test that a failed fetch shows the error and never the stale list."""
    client = MagicMock()
    client.search_books.return_value = DOCS
    controller = ListViewController(query="fantasy")
    controller.load(client)

    client.search_books.side_effect = HttpError(500)
    controller.set_query("fantasy novels")
    state = controller.load(client)

    assert state.status is LoadStatus.ERROR
    assert state.error == "HTTP 500"
    assert controller.books == []
    assert controller.visible_books == []


def test_set_query_only_refetches_on_change():
    """Test that re-entering the same query does not require a fetch."""
    client = MagicMock()
    client.search_books.return_value = DOCS
    controller = ListViewController(query="fantasy")
    controller.load(client)

    assert controller.set_query("fantasy") is False
    assert controller.set_query("space") is True


def test_stale_result_is_discarded():
    """Test that a response for a superseded request does not update state."""
    controller = ListViewController(query="a")
    old = controller.begin()
    new = controller.begin()

    fresh = [BookSummary("/works/OL2W", "New")]
    assert controller.complete(new, fresh) is True
    assert controller.complete(old, [BookSummary("/works/OL1W", "Old")]) is False
    assert controller.fail(old, HttpError(500)) is False
    assert controller.books == fresh
    assert controller.state.status is LoadStatus.SUCCESS


def test_teardown_discards_in_flight_result():
    """Test that a result arriving after teardown is ignored."""
    controller = ListViewController(query="a")
    token = controller.begin()
    controller.teardown()

    assert controller.complete(token, [BookSummary("/works/OL1W", "Late")]) is False
    assert controller.state.status is LoadStatus.LOADING


def test_author_filter_is_local():
    """Test that selecting an author filters without touching the network."""
    client = MagicMock()
    client.search_books.return_value = DOCS
    controller = ListViewController(query="fantasy")
    controller.load(client)

    controller.select_author("J.R.R. Tolkien")

    assert [b.title for b in controller.visible_books] == ["The Hobbit"]
    assert client.search_books.call_count == 1


def test_missing_author_selection_reset_on_new_results():
    """Test that a selection absent from the new results falls back to all."""
    controller = ListViewController(query="a")
    controller.select_author("Nobody")
    token = controller.begin()
    controller.complete(token, [BookSummary("/works/OL1W", "X", ["Somebody"])])

    assert controller.selected_author is ALL_AUTHORS


def test_detail_load_once_per_work_id():
    """Test that the same work id is fetched once, a new one again."""
    client = MagicMock()
    client.get_work_detail.return_value = {
        "title": "The Hobbit",
        "description": {"type": "/type/text", "value": "There and back again."},
    }
    controller = DetailViewController()

    controller.load(client, "OL82563W")
    controller.load(client, "/works/OL82563W")
    assert client.get_work_detail.call_count == 1
    assert controller.detail.description == "There and back again."

    controller.load(client, "OL2W")
    assert client.get_work_detail.call_count == 2


def test_detail_close_refetches_on_next_visit():
    """Test that leaving the detail view forgets the fetched work."""
    client = MagicMock()
    client.get_work_detail.return_value = {"title": "The Hobbit"}
    controller = DetailViewController()

    controller.load(client, "OL1W")
    controller.close()
    controller.load(client, "OL1W")

    assert client.get_work_detail.call_count == 2


def test_detail_error():
    """Test that a detail failure ends in the error state."""
    client = MagicMock()
    client.get_work_detail.side_effect = HttpError(404)
    controller = DetailViewController()

    state = controller.load(client, "OL0W")

    assert state.status is LoadStatus.ERROR
    assert state.error == "HTTP 404"
    assert controller.detail is None


def test_async_runner_cancels_superseded_search():
    """Test that a newer query cancels the older request and wins."""
    started = []
    release = {}

    async def search(query):
        started.append(query)
        release[query] = asyncio.Event()
        await release[query].wait()
        return [{"key": f"/works/{query}", "title": query}]

    async def scenario():
        controller = ListViewController()
        runner = AsyncSearchRunner(controller, search)

        first = runner.submit("OL1W")
        await asyncio.sleep(0)
        runner.submit("OL2W")
        await asyncio.sleep(0)
        release["OL2W"].set()
        await runner.wait()
        return controller, first

    controller, first = asyncio.run(scenario())

    assert started == ["OL1W", "OL2W"]
    assert first.cancelled()
    assert [b.title for b in controller.books] == ["OL2W"]
    assert controller.state.status is LoadStatus.SUCCESS


def test_async_runner_error():
    """Test that an async failure becomes the error state."""
    async def search(query):
        raise HttpError(503)

    async def scenario():
        controller = ListViewController()
        runner = AsyncSearchRunner(controller, search)
        runner.submit("anything")
        await runner.wait()
        return controller

    controller = asyncio.run(scenario())

    assert controller.state.status is LoadStatus.ERROR
    assert controller.state.error == "HTTP 503"
