"""Parse and normalize OpenLibrary API responses."""
import logging
from typing import Dict, Any, List, Optional

from bookdash.config import Config
from bookdash.models import BookSummary, Excerpt, WorkDetail

logger = logging.getLogger(__name__)

COVER_SIZES = ("S", "M", "L")


def _optional_int(value: Any) -> Optional[int]:
    """Keep real integers only; anything else means "no data"."""
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _string_list(value: Any, unique: bool = False) -> List[str]:
    """Return the string entries of a list field, or an empty list."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    items = [v for v in value if isinstance(v, str) and v.strip()]
    if unique:
        items = list(dict.fromkeys(items))
    return items


def work_id_from_key(key: str) -> str:
    """Return the trailing path segment of a catalog key."""
    return key.strip().rstrip("/").split("/")[-1]


def normalize(raw: Dict[str, Any]) -> BookSummary:
    """
    Map a raw search record into a BookSummary.
    
    Args:
        raw: Single entry of the search response ``docs`` array
        
    Returns:
        BookSummary with ``None`` for every missing optional field
    """
    title = raw.get("title")
    return BookSummary(
        key=raw.get("key", ""),
        title=title if isinstance(title, str) and title else None,
        author_names=_string_list(raw.get("author_name"), unique=True),
        year=_optional_int(raw.get("first_publish_year")),
        cover_ref=_optional_int(raw.get("cover_i")),
        subjects=_string_list(raw.get("subject")),
    )


def parse_docs(docs: List[Any]) -> List[BookSummary]:
    """Normalize a ``docs`` array, skipping keyless records and duplicate keys."""
    books = []
    
    for doc in docs:
        if not isinstance(doc, dict) or not isinstance(doc.get("key"), str):
            logger.warning(f"Skipping search record without a key: {doc!r:.80}")
            continue
        books.append(normalize(doc))
    
    return deduplicate_books(books)


def deduplicate_books(books: List[BookSummary]) -> List[BookSummary]:
    """
    Remove duplicate books by catalog key.
    
    Args:
        books: List of BookSummary objects
        
    Returns:
        Deduplicated list of books, first occurrence wins
    """
    seen_keys = set()
    unique_books = []
    
    for book in books:
        if book.key not in seen_keys:
            seen_keys.add(book.key)
            unique_books.append(book)
    
    return unique_books


def _description_text(value: Any) -> Optional[str]:
    # Either a plain string or {"type": "/type/text", "value": "..."}
    if isinstance(value, dict):
        value = value.get("value")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def parse_work_detail(raw: Dict[str, Any]) -> WorkDetail:
    """Parse a works endpoint response into a WorkDetail."""
    excerpts = []
    for entry in raw.get("excerpts") or []:
        if isinstance(entry, dict) and isinstance(entry.get("excerpt"), str):
            excerpts.append(Excerpt(text=entry["excerpt"]))
    
    title = raw.get("title")
    return WorkDetail(
        title=title if isinstance(title, str) and title else None,
        description=_description_text(raw.get("description")),
        subjects=_string_list(raw.get("subjects")),
        excerpts=excerpts,
    )


def cover_url(cover_ref: Optional[int], size: str = "M") -> Optional[str]:
    """
    Build a cover image URL.
    
    Args:
        cover_ref: Numeric cover id (``cover_i``) or None
        size: One of S, M, L
        
    Returns:
        Image URL, or None when there is no cover to request
    """
    if size not in COVER_SIZES:
        raise ValueError(f"Unknown cover size: {size}")
    if cover_ref is None:
        return None
    return f"{Config.COVERS_BASE_URL}/b/id/{cover_ref}-{size}.jpg"
