# bskyclient/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from bskyclient.errors import EmbedValidationError, MalformedResponseError

# Lexicon identifiers used by the records we build.
FEED_POST_TYPE = "app.bsky.feed.post"
IMAGES_EMBED_TYPE = "app.bsky.embed.images"
IMAGE_BLOCK_TYPE = "app.bsky.embed.images#image"
VIDEO_EMBED_TYPE = "app.bsky.embed.video"
ASPECT_RATIO_TYPE = "app.bsky.embed.defs#aspectRatio"

# Hard per-post cap enforced by the app.bsky.embed.images lexicon.
MAX_IMAGES_PER_POST = 4

# Server-issued blob reference, e.g.
#   {"$type": "blob", "ref": {"$link": "bafy..."}, "mimeType": "image/png", "size": 1234}
BlobRef = Dict[str, Any]


def _require_fields(data: Dict[str, Any], *names: str) -> None:
    missing = [name for name in names if data.get(name) is None]
    if missing:
        raise MalformedResponseError(f"Response is missing field(s): {', '.join(missing)}")


@dataclass(frozen=True)
class Session:
    """Tokens returned by com.atproto.server.createSession.

    did:          decentralized identifier of the account (default repo for writes)
    handle:       account handle, e.g. "alice.bsky.social"
    access_jwt:   bearer token sent on authenticated calls
    refresh_jwt:  kept for completeness; no operation refreshes the session
    """

    did: str
    handle: str
    access_jwt: str = field(repr=False)
    refresh_jwt: str = field(repr=False)

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> Session:
        _require_fields(data, "did", "handle", "accessJwt", "refreshJwt")
        return cls(
            did=str(data["did"]),
            handle=str(data["handle"]),
            access_jwt=str(data["accessJwt"]),
            refresh_jwt=str(data["refreshJwt"]),
        )


@dataclass(frozen=True)
class PostReference:
    """Reference to a created app.bsky.feed.post record."""

    uri: str
    cid: str

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> PostReference:
        _require_fields(data, "uri", "cid")
        return cls(uri=str(data["uri"]), cid=str(data["cid"]))


@dataclass(frozen=True)
class AspectRatio:
    """Width/height metadata for video embeds. Both sides must be integers >= 1."""

    width: int
    height: int

    def __post_init__(self):
        for name, value in (("width", self.width), ("height", self.height)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"Aspect ratio {name} must be an int, got {type(value).__name__}")
        if self.width < 1:
            raise ValueError(f"Aspect ratio width must be >= 1, got {self.width}")
        if self.height < 1:
            raise ValueError(f"Aspect ratio height must be >= 1, got {self.height}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "$type": ASPECT_RATIO_TYPE,
            "width": self.width,
            "height": self.height,
        }


@dataclass(frozen=True)
class ImagesEmbed:
    """app.bsky.embed.images: uploaded blobs paired positionally with ALT text."""

    blobs: List[BlobRef]
    alts: List[str]

    def __post_init__(self):
        if len(self.blobs) != len(self.alts):
            raise EmbedValidationError(
                f"ALT count must match blob count ({len(self.alts)} != {len(self.blobs)})"
            )
        if not self.blobs:
            raise EmbedValidationError("An images embed needs at least one image.")
        if len(self.blobs) > MAX_IMAGES_PER_POST:
            raise EmbedValidationError(
                f"The AT Protocol allows up to {MAX_IMAGES_PER_POST} images per post, got {len(self.blobs)}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "$type": IMAGES_EMBED_TYPE,
            "images": [
                {"$type": IMAGE_BLOCK_TYPE, "image": blob, "alt": alt}
                for blob, alt in zip(self.blobs, self.alts)
            ],
        }


@dataclass(frozen=True)
class VideoEmbed:
    """app.bsky.embed.video: one blob, optional ALT text and aspect ratio."""

    video: BlobRef
    alt: str = ""
    aspect_ratio: Optional[AspectRatio] = None

    def to_dict(self) -> Dict[str, Any]:
        embed: Dict[str, Any] = {"$type": VIDEO_EMBED_TYPE, "video": self.video}
        # An empty ALT is omitted rather than sent as ""
        if self.alt:
            embed["alt"] = self.alt
        if self.aspect_ratio is not None:
            embed["aspectRatio"] = self.aspect_ratio.to_dict()
        return embed


Embed = Union[ImagesEmbed, VideoEmbed]
