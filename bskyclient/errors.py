# bskyclient/errors.py
"""
Error taxonomy for the Bluesky client.

The families are kept apart so callers can decide policy per family:

- ClientUsageError: raised locally before any network I/O (no session,
  bad image counts). Never retried.
- BlueSkyError: any non-2xx response from the PDS, carrying the HTTP status,
  the optional lexicon error code and the server message.
- TransportError: the request never got a response.
- TranscodeError (from transcode.gif_video): ffmpeg could not be run or
  exited non-zero.
"""

from __future__ import annotations

from typing import Optional

from transcode.gif_video import TranscodeError  # noqa: F401  re-exported


class BlueskyClientError(Exception):
    """Base class for every error raised by bskyclient."""

    pass


# =============================================================================
# Local usage errors
# =============================================================================


class ClientUsageError(BlueskyClientError):
    """Raised when the client is used incorrectly; nothing was sent."""

    pass


class NotAuthenticatedError(ClientUsageError):
    """Raised when an authenticated call is made before login()."""

    pass


class EmbedValidationError(ClientUsageError, ValueError):
    """Raised when an embed cannot be built from the supplied media."""

    pass


# =============================================================================
# Protocol errors
# =============================================================================


class BlueSkyError(BlueskyClientError):
    """A non-success response returned by a Personal Data Server."""

    def __init__(self, status: int, code: Optional[str], message: str):
        super().__init__(message)
        self.status = status
        self.code = code
        self.message = message

    def __str__(self) -> str:
        if self.code is not None:
            return f"{type(self).__name__}({self.status}, code={self.code}): {self.message}"
        return f"{type(self).__name__}({self.status}): {self.message}"

    @property
    def is_rate_limited(self) -> bool:
        return self.status == 429


class AuthError(BlueSkyError):
    """Raised when createSession rejects the supplied credentials."""

    @classmethod
    def from_error(cls, err: BlueSkyError) -> AuthError:
        return cls(err.status, err.code, err.message)


class MalformedResponseError(BlueskyClientError):
    """Raised when a 2xx response is missing a field the client needs."""

    pass


class TransportError(BlueskyClientError):
    """Raised when no response was received (connection refused, DNS failure, timeout)."""

    pass

