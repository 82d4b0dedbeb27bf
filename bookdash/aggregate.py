"""Pure aggregation functions over a set of normalized books.

"No author filter" is represented by ``ALL_AUTHORS`` (``None``) and missing
statistics by ``None``; display strings are chosen by ``bookdash.views``.
"""
import math
import unicodedata
from collections import Counter
from typing import Iterable, List, Optional

from bookdash.models import AuthorFrequency, BookSummary, DecadeBucket, Stats

ALL_AUTHORS = None
TOP_AUTHOR_LIMIT = 5


def _collation_key(name: str):
    # Accents and case are secondary: "Émile" sorts with "E", not after "Z"
    decomposed = unicodedata.normalize("NFKD", name.casefold())
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base, name)


def author_options(books: Iterable[BookSummary]) -> List[Optional[str]]:
    """Unique author names in collation order, preceded by ALL_AUTHORS."""
    names = {name for book in books for name in book.author_names}
    return [ALL_AUTHORS] + sorted(names, key=_collation_key)


def apply_filter(
    books: List[BookSummary],
    selected_author: Optional[str]
) -> List[BookSummary]:
    """Keep books written (at least partly) by ``selected_author``."""
    if selected_author is ALL_AUTHORS:
        return list(books)
    return [book for book in books if selected_author in book.author_names]


def _years(books: Iterable[BookSummary]) -> List[int]:
    return [book.year for book in books if book.year is not None]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _author_counts(books: Iterable[BookSummary]) -> Counter:
    # Counter keeps first-insertion order, which breaks ties below
    counts = Counter()
    for book in books:
        counts.update(dict.fromkeys(book.author_names, 1))
    return counts


def top_author_frequencies(
    books: List[BookSummary],
    limit: int = TOP_AUTHOR_LIMIT
) -> List[AuthorFrequency]:
    """Most frequent authors, descending by count, first-seen order on ties."""
    ranked = sorted(_author_counts(books).items(), key=lambda item: -item[1])
    return [AuthorFrequency(name=name, count=count) for name, count in ranked[:limit]]


def compute_stats(books: List[BookSummary]) -> Stats:
    years = _years(books)
    earliest = latest = average = None
    if years:
        earliest = min(years)
        latest = max(years)
        average = round_half_up(sum(years) / len(years))
    
    top = top_author_frequencies(books, limit=1)
    return Stats(
        total=len(books),
        earliest=earliest,
        latest=latest,
        average=average,
        top_author=top[0].name if top else None,
    )


def decade_of(year: int) -> int:
    return (year // 10) * 10


def bucket_by_decade(books: List[BookSummary]) -> List[DecadeBucket]:
    """Count books per publication decade, ascending; books without a year are skipped."""
    counts = Counter(decade_of(year) for year in _years(books))
    return [DecadeBucket(decade=decade, count=counts[decade]) for decade in sorted(counts)]
