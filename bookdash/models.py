"""Data models for books and derived statistics."""
from dataclasses import dataclass, field
from typing import Optional, List


@dataclass(frozen=True)
class BookSummary:
    """Normalized search record."""
    key: str
    title: Optional[str]
    author_names: List[str] = field(default_factory=list)
    year: Optional[int] = None
    cover_ref: Optional[int] = None
    subjects: List[str] = field(default_factory=list)
    
    @property
    def work_id(self) -> str:
        """Trailing segment of the catalog key, e.g. OL82563W."""
        return self.key.rstrip("/").split("/")[-1]
    
    @property
    def authors_str(self) -> str:
        """Format authors as comma-separated string."""
        return ", ".join(self.author_names)


@dataclass(frozen=True)
class Excerpt:
    text: str


@dataclass(frozen=True)
class WorkDetail:
    """Extra information about a single work."""
    title: Optional[str]
    description: Optional[str]
    subjects: List[str] = field(default_factory=list)
    excerpts: List[Excerpt] = field(default_factory=list)


@dataclass
class Stats:
    """Summary statistics over the currently visible books.
    
    ``earliest``, ``latest`` and ``average`` are either all set or all
    ``None`` (no book in the set has a year).
    """
    total: int
    earliest: Optional[int]
    latest: Optional[int]
    average: Optional[int]
    top_author: Optional[str]


@dataclass
class DecadeBucket:
    decade: int
    count: int


@dataclass
class AuthorFrequency:
    name: str
    count: int
