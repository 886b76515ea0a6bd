from .client import get_http_client, request_with_retry
from .errors import StoryArcadeHTTPError, StoryArcadeHTTPNetworkError, StoryArcadeHTTPStatusError

__all__ = [
    "get_http_client",
    "request_with_retry",
    "StoryArcadeHTTPError",
    "StoryArcadeHTTPNetworkError",
    "StoryArcadeHTTPStatusError",
]
