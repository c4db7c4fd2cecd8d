# bskyclient/records.py
"""
Pure builders that turn loose call arguments into app.bsky records.

Nothing in here performs I/O. The client uploads blobs and then hands the
resulting references to these helpers, which keeps every payload shape
testable on its own.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional, Sequence, Union

import pytz

from bskyclient.types import (
    FEED_POST_TYPE,
    AspectRatio,
    BlobRef,
    Embed,
    ImagesEmbed,
    VideoEmbed,
)

DEFAULT_LANGUAGE_CODE = "en"
DEFAULT_IMAGE_MIME_TYPE = "image/jpeg"

TimestampLike = Union[None, str, datetime, date]
EmbedLike = Union[Embed, Mapping, None]


def _format_timestamp(dt: datetime) -> str:
    """Format as YYYY-MM-DDTHH:MM:SS.sssZ (always UTC, always 3 fractional digits)."""
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    else:
        dt = dt.astimezone(pytz.utc)
    return f"{dt.strftime('%Y-%m-%dT%H:%M:%S')}.{dt.microsecond // 1000:03d}Z"


def coerce_timestamp(value: TimestampLike = None) -> str:
    """
    Normalize a createdAt value.

    Args:
        value: None for "now", a datetime (naive values are taken as UTC), a date
            (midnight UTC), or a pre-formatted string which is passed through untouched.

    Returns:
        str: The createdAt string to send.
    """
    if value is None:
        return _format_timestamp(datetime.now(pytz.utc))
    if isinstance(value, str):
        return value
    if isinstance(value, datetime):
        return _format_timestamp(value)
    if isinstance(value, date):
        return _format_timestamp(datetime.combine(value, time.min))
    raise TypeError(f"Unsupported timestamp type: {type(value).__name__}")


def coerce_langs(langs: Optional[Iterable[str]] = None) -> List[str]:
    """None -> ["en"]; anything else is copied through as given, even when empty."""
    if langs is None:
        return [DEFAULT_LANGUAGE_CODE]
    if isinstance(langs, str):
        return [langs]
    return [str(lang) for lang in langs]


def embed_to_dict(embed: EmbedLike) -> Optional[Dict[str, Any]]:
    if embed is None:
        return None
    if isinstance(embed, (ImagesEmbed, VideoEmbed)):
        return embed.to_dict()
    if isinstance(embed, Mapping):
        return dict(embed)
    raise TypeError(f"Unsupported embed type: {type(embed).__name__}")


def build_post_record(
    text: str,
    created_at: str,
    langs: Sequence[str],
    embed: EmbedLike = None,
) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        "$type": FEED_POST_TYPE,
        "text": text,
        "createdAt": created_at,
    }

    if langs:
        record["langs"] = list(langs)

    embed_dict = embed_to_dict(embed)
    if embed_dict is not None:
        record["embed"] = embed_dict

    return record


def _fit(values: Optional[Iterable[str]], count: int, fill: str) -> List[str]:
    if isinstance(values, str):
        values = [values]
    source = [] if values is None else [str(v) for v in values]
    if len(source) >= count:
        return source[:count]
    return source + [fill] * (count - len(source))


def normalize_alts(alts: Optional[Iterable[str]], count: int) -> List[str]:
    """
    Pad ALT texts with "" (or truncate them) to exactly `count` entries.

    Surplus ALT texts are dropped silently rather than rejected.
    """
    return _fit(alts, count, "")


def normalize_mime_types(mime_types: Optional[Iterable[str]], count: int) -> List[str]:
    """Pad with image/jpeg (or truncate) to exactly `count` entries."""
    return _fit(mime_types, count, DEFAULT_IMAGE_MIME_TYPE)


def build_images_embed(blobs: Sequence[BlobRef], alts: Sequence[str]) -> ImagesEmbed:
    return ImagesEmbed(blobs=list(blobs), alts=list(alts))


def build_video_embed(
    blob: BlobRef,
    alt: str = "",
    aspect_ratio: Optional[AspectRatio] = None,
) -> VideoEmbed:
    return VideoEmbed(video=blob, alt=alt or "", aspect_ratio=aspect_ratio)
