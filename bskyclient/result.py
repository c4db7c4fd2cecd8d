# bskyclient/result.py
"""
Explicit success/failure values for API boundaries.

The client itself raises. Code that must not let a network-observable
failure escape (a CLI, a job runner) wraps calls with attempt() and then
branches on Outcome.kind instead of writing its own except clauses.
Programming errors such as TypeError are not captured.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar, Union

from bskyclient.errors import (
    BlueSkyError,
    BlueskyClientError,
    ClientUsageError,
    MalformedResponseError,
    TranscodeError,
    TransportError,
)

T = TypeVar("T")

CapturedError = Union[BlueskyClientError, TranscodeError]


@dataclass(frozen=True)
class Outcome(Generic[T]):
    value: Optional[T] = None
    error: Optional[CapturedError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[str]:
        """None on success, else one of "protocol", "usage", "transcode",
        "response", "transport" or "client"."""
        if self.error is None:
            return None
        if isinstance(self.error, BlueSkyError):
            return "protocol"
        if isinstance(self.error, ClientUsageError):
            return "usage"
        if isinstance(self.error, TranscodeError):
            return "transcode"
        if isinstance(self.error, MalformedResponseError):
            return "response"
        if isinstance(self.error, TransportError):
            return "transport"
        return "client"

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value


def attempt(func: Callable[..., T], *args, **kwargs) -> Outcome[T]:
    try:
        return Outcome(value=func(*args, **kwargs))
    except (BlueskyClientError, TranscodeError) as exc:
        return Outcome(error=exc)
