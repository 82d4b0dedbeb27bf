"""Async HTTP client whose requests can be aborted by task cancellation."""
import httpx
from typing import Optional, Dict, Any, List
import logging

from bookdash.client import decode_json_object, search_docs
from bookdash.config import Config
from bookdash.errors import FetchError, HttpError
from bookdash.parse import work_id_from_key

logger = logging.getLogger(__name__)


class AsyncOpenLibraryClient:
    """Async counterpart of OpenLibraryClient."""
    
    def __init__(
        self,
        config: Optional[Config] = None,
        timeout: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize async client.
        
        Args:
            config: Endpoint configuration (defaults to Config())
            timeout: Request timeout
            transport: Custom httpx transport (tests pass a MockTransport)
        """
        self.config = config or Config()
        self.timeout = timeout or self.config.DEFAULT_TIMEOUT
        
        # Create async HTTP client
        self.client = httpx.AsyncClient(timeout=self.timeout, transport=transport)
    
    async def search_books(self, query: str) -> List[Dict[str, Any]]:
        """
        Search for books asynchronously.
        
        Args:
            query: Free text search query
            
        Returns:
            Raw ``docs`` records
        """
        params = {
            "q": query,
            "limit": self.config.SEARCH_LIMIT,
        }
        data = await self._get_json(self.config.SEARCH_URL, params)
        return search_docs(data)
    
    async def get_work_detail(self, work_id: str) -> Dict[str, Any]:
        """Fetch the works record for one identifier."""
        url = self.config.work_url(work_id_from_key(work_id))
        return await self._get_json(url)
    
    async def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        logger.info(f"Async GET {url} params={params}")
        
        try:
            response = await self.client.get(url, params=params)
        except httpx.HTTPError as e:
            logger.warning(f"Async request to {url} failed: {e}")
            raise FetchError(str(e) or type(e).__name__) from e
        
        if not response.is_success:
            logger.warning(f"Status {response.status_code} for {url}")
            raise HttpError(response.status_code, url)
        
        return decode_json_object(response.text, url)
    
    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()
    
    async def __aenter__(self):
        """Async context manager entry."""
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
