"""Configuration management."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration."""
    
    # API
    OPENLIBRARY_BASE_URL = os.getenv("OPENLIBRARY_BASE_URL", "https://openlibrary.org").rstrip("/")
    COVERS_BASE_URL = os.getenv("COVERS_BASE_URL", "https://covers.openlibrary.org").rstrip("/")
    
    # Search endpoint always returns at most this many records
    SEARCH_LIMIT = 50
    
    # Defaults
    DEFAULT_TIMEOUT = int(os.getenv("DEFAULT_TIMEOUT", "10"))
    DEFAULT_QUERY = os.getenv("DEFAULT_QUERY", "fantasy")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    
    @property
    def SEARCH_URL(self):
        """Build the search endpoint URL."""
        return f"{self.OPENLIBRARY_BASE_URL}/search.json"
    
    def work_url(self, work_id: str) -> str:
        """Build the per-work endpoint URL."""
        return f"{self.OPENLIBRARY_BASE_URL}/works/{work_id}.json"
