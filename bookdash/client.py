"""HTTP client for the OpenLibrary search and works APIs."""
import json
import requests
from typing import Optional, Dict, Any, List
import logging

from bookdash.config import Config
from bookdash.errors import FetchError, HttpError, ParseError
from bookdash.parse import work_id_from_key

logger = logging.getLogger(__name__)


def decode_json_object(response_text: str, url: str) -> Dict[str, Any]:
    """
    Decode a response body that must be a JSON object.
    
    Raises:
        ParseError: body is not JSON, or not an object
    """
    try:
        data = json.loads(response_text)
    except ValueError as e:
        raise ParseError(f"Invalid JSON from {url}: {e}") from e
    
    if not isinstance(data, dict):
        raise ParseError(f"Expected a JSON object from {url}")
    return data


def search_docs(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Return the ``docs`` array of a search response, or an empty list."""
    docs = data.get("docs")
    if not isinstance(docs, list):
        return []
    return docs


class OpenLibraryClient:
    """Client for the OpenLibrary API: one round trip per call, no retries."""
    
    def __init__(
        self,
        config: Optional[Config] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize OpenLibrary client.
        
        Args:
            config: Endpoint configuration (defaults to Config())
            timeout: Request timeout in seconds
            session: Existing session to reuse
        """
        self.config = config or Config()
        self.timeout = timeout or self.config.DEFAULT_TIMEOUT
        
        # Create session for connection pooling
        self.session = session or requests.Session()
    
    def search_books(self, query: str) -> List[Dict[str, Any]]:
        """
        Search for books.
        
        Args:
            query: Free text search query
            
        Returns:
            Raw ``docs`` records (at most SEARCH_LIMIT)
        """
        params = {
            "q": query,
            "limit": self.config.SEARCH_LIMIT,
        }
        data = self._get_json(self.config.SEARCH_URL, params)
        return search_docs(data)
    
    def get_work_detail(self, work_id: str) -> Dict[str, Any]:
        """
        Fetch the works record for one identifier.
        
        Args:
            work_id: Work id (OL82563W) or catalog key (/works/OL82563W)
            
        Returns:
            Raw works JSON object
        """
        url = self.config.work_url(work_id_from_key(work_id))
        return self._get_json(url)
    
    def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Make a single GET request and decode its JSON body.
        
        Raises:
            FetchError: connection failure or timeout
            HttpError: non-success status code
            ParseError: body is not a JSON object
        """
        logger.info(f"GET {url} params={params}")
        
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.warning(f"Request to {url} failed: {e}")
            raise FetchError(str(e)) from e
        
        if not response.ok:
            logger.warning(f"Status {response.status_code} for {url}")
            raise HttpError(response.status_code, url)
        
        return decode_json_object(response.text, url)
    
    def close(self):
        """Close the session."""
        self.session.close()
    
    def __enter__(self):
        """Context manager entry."""
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
