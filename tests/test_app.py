"""Tests for the Streamlit dashboard wiring."""
from unittest.mock import MagicMock, patch

import pytest
import streamlit as st
from streamlit.testing.v1 import AppTest

from bookdash.errors import HttpError

DOCS = [
    {"key": "/works/OL1W", "title": "Mort", "author_name": ["Terry Pratchett"], "first_publish_year": 1987},
    {"key": "/works/OL2W", "title": "Good Omens", "author_name": ["Terry Pratchett", "Neil Gaiman"], "first_publish_year": 1990},
    {"key": "/works/OL3W", "title": "Coraline", "author_name": ["Neil Gaiman"], "first_publish_year": 2002},
]

OTHER_DOCS = [
    {"key": "/works/OL9W", "title": "Dune", "author_name": ["Frank Herbert"], "first_publish_year": 1965},
]


@pytest.fixture
def client():
    client = MagicMock()
    client.search_books.return_value = DOCS
    client.get_work_detail.return_value = {
        "title": "Good Omens",
        "description": {"type": "/type/text", "value": "The world ends on a Saturday."},
    }
    # the dashboard keeps one client per process
    st.cache_resource.clear()
    with patch("bookdash.client.OpenLibraryClient", return_value=client):
        yield client
    st.cache_resource.clear()


def run_app():
    at = AppTest.from_file("../app.py", default_timeout=10)
    at.run()
    assert not at.exception
    return at


def test_back_to_results_does_not_refetch(client):
    """Test that opening a work and going back keeps the list without a new search."""
    at = run_app()
    assert client.search_books.call_count == 1

    at.button(key="open_/book/OL2W").click().run()

    assert not at.exception
    client.get_work_detail.assert_called_once_with("OL2W")
    assert at.header[0].value == "Good Omens"
    assert "The world ends on a Saturday." in [md.value for md in at.markdown]

    at.button(key="back").click().run()

    assert not at.exception
    assert client.search_books.call_count == 1
    assert at.metric[0].value == "3"


def test_author_selection_resets_after_new_search(client):
    """Test that an author missing from new results falls back to All."""
    at = run_app()

    at.selectbox(key="author").select("Neil Gaiman").run()
    assert at.metric[0].value == "2"

    client.search_books.return_value = OTHER_DOCS
    at.text_input(key="query").input("dune").run()

    assert not at.exception
    assert client.search_books.call_count == 2
    assert at.selectbox(key="author").value == "All"
    assert at.metric[0].value == "1"


def test_search_error_shows_message_without_rows(client):
    """Test that a failed search shows the error and no result rows."""
    client.search_books.side_effect = HttpError(500)

    at = run_app()

    assert at.error[0].value == "Error: HTTP 500"
    assert at.metric[0].value == "0"
    assert not [b for b in at.button if b.key and b.key.startswith("open_")]
