"""Error types raised by the API clients."""
from typing import Optional


class DashboardError(Exception):
    """Base class for every error the dashboard knows how to display."""


class FetchError(DashboardError):
    """The request never produced a usable HTTP response."""


class HttpError(FetchError):
    """The server answered with a non-success status."""
    
    def __init__(self, status_code: int, url: Optional[str] = None):
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code
        self.url = url


class ParseError(DashboardError):
    """The response body was not a JSON object."""


DEFAULT_MESSAGE = "Failed to fetch data."


def user_message(exc: BaseException) -> str:
    """Collapse any fetch failure into the single string shown to the user."""
    message = str(exc).strip()
    return message or DEFAULT_MESSAGE
