from bskyclient.client import (
    DEFAULT_BASE_URL,
    BlueskyClient,
    ClientConfig,
    handle_response,
    normalize_base_url,
)
from bskyclient.errors import (
    AuthError,
    BlueSkyError,
    BlueskyClientError,
    ClientUsageError,
    EmbedValidationError,
    MalformedResponseError,
    NotAuthenticatedError,
    TranscodeError,
    TransportError,
)
from bskyclient.result import Outcome, attempt
from bskyclient.types import (
    AspectRatio,
    ImagesEmbed,
    PostReference,
    Session,
    VideoEmbed,
)

__version__ = "1.0.0"

__all__ = [
    "DEFAULT_BASE_URL",
    "AspectRatio",
    "AuthError",
    "BlueSkyError",
    "BlueskyClient",
    "BlueskyClientError",
    "ClientConfig",
    "ClientUsageError",
    "EmbedValidationError",
    "ImagesEmbed",
    "MalformedResponseError",
    "NotAuthenticatedError",
    "Outcome",
    "PostReference",
    "Session",
    "TranscodeError",
    "TransportError",
    "VideoEmbed",
    "attempt",
    "handle_response",
    "normalize_base_url",
]
