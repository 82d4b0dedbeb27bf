"""View models shared by the Streamlit dashboard and the terminal explorer.

This is the only place where "no data" turns into ``MISSING`` and "no author
filter" into ``ALL_LABEL``.
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple

import pandas as pd

from bookdash.aggregate import ALL_AUTHORS
from bookdash.fetch import LoadStatus, ViewState
from bookdash.models import AuthorFrequency, BookSummary, DecadeBucket, Stats, WorkDetail
from bookdash.parse import cover_url
from bookdash.router import book_path

MISSING = "—"
ALL_LABEL = "All"
UNTITLED = "Untitled"
NO_COVER = "No cover"
LOADING_MESSAGE = "Loading…"
EMPTY_MESSAGE = "No results. Try a different search or author."

TABLE_LIMIT = 50
ROW_SUBJECTS = 3
DETAIL_SUBJECTS = 15


def display(value) -> str:
    return MISSING if value is None else str(value)


def author_label(author: Optional[str]) -> str:
    return ALL_LABEL if author is ALL_AUTHORS else author


def author_value(label: str) -> Optional[str]:
    return ALL_AUTHORS if label == ALL_LABEL else label


def summary_cards(stats: Stats) -> List[Tuple[str, str]]:
    return [
        ("Total Books", str(stats.total)),
        ("Earliest Year", display(stats.earliest)),
        ("Latest Year", display(stats.latest)),
        ("Average Year", display(stats.average)),
        ("Top Author (filtered)", display(stats.top_author)),
    ]


def status_message(state: ViewState, visible_count: int) -> Optional[str]:
    """Loading, error or empty-state text; None when rows should be shown."""
    if state.status is LoadStatus.LOADING:
        return LOADING_MESSAGE
    if state.status is LoadStatus.ERROR:
        return f"Error: {state.error}"
    if visible_count == 0:
        return EMPTY_MESSAGE
    return None


def _joined(items: List[str], limit: Optional[int] = None) -> str:
    return ", ".join(items[:limit]) or MISSING


@dataclass
class BookRow:
    cover_url: Optional[str]
    title: str
    authors: str
    year: str
    subjects: str
    path: str
    
    @property
    def cover(self) -> str:
        """Image URL, or the textual placeholder when there is no cover."""
        return self.cover_url or NO_COVER


def table_rows(books: List[BookSummary], limit: int = TABLE_LIMIT) -> List[BookRow]:
    return [
        BookRow(
            cover_url=cover_url(book.cover_ref, "M"),
            title=book.title or UNTITLED,
            authors=book.authors_str or MISSING,
            year=display(book.year),
            subjects=_joined(book.subjects, ROW_SUBJECTS),
            path=book_path(book.work_id),
        )
        for book in books[:limit]
    ]


def decade_frame(buckets: List[DecadeBucket]) -> pd.DataFrame:
    """Decade histogram data, indexed by decade label (e.g. ``1980s``)."""
    frame = pd.DataFrame(
        {
            "decade": [f"{b.decade}s" for b in buckets],
            "count": [b.count for b in buckets],
        }
    )
    return frame.set_index("decade")


def author_frame(freqs: List[AuthorFrequency]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "author": [f.name for f in freqs],
            "count": [f.count for f in freqs],
        }
    )


@dataclass
class DetailFields:
    title: str
    description: str
    subjects: str
    excerpts: List[str]


def detail_fields(detail: WorkDetail) -> DetailFields:
    return DetailFields(
        title=detail.title or UNTITLED,
        description=detail.description or MISSING,
        subjects=_joined(detail.subjects, DETAIL_SUBJECTS),
        excerpts=[excerpt.text for excerpt in detail.excerpts],
    )
