# bskyclient/client.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

import requests

from bskyclient.errors import (
    AuthError,
    BlueSkyError,
    EmbedValidationError,
    MalformedResponseError,
    NotAuthenticatedError,
    TransportError,
)
from bskyclient.records import (
    DEFAULT_IMAGE_MIME_TYPE,
    EmbedLike,
    TimestampLike,
    build_images_embed,
    build_post_record,
    build_video_embed,
    coerce_langs,
    coerce_timestamp,
    normalize_alts,
    normalize_mime_types,
)
from bskyclient.types import (
    FEED_POST_TYPE,
    MAX_IMAGES_PER_POST,
    AspectRatio,
    BlobRef,
    PostReference,
    Session,
)
from transcode.gif_video import FFmpegTranscoder, VideoTranscoder, transcode_gif_to_mp4
from utils.sessions import SessionFactory

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://bsky.social"
XRPC_SUFFIX = "/xrpc"
DEFAULT_TIMEOUT = 30.0  # seconds, per request

CREATE_SESSION = "com.atproto.server.createSession"
CREATE_RECORD = "com.atproto.repo.createRecord"
UPLOAD_BLOB = "com.atproto.repo.uploadBlob"

# createSession statuses that mean "credentials rejected" rather than an outage.
AUTH_FAILURE_STATUSES = (400, 401)


def normalize_base_url(url: Optional[str]) -> str:
    """
    Normalize a PDS URL so that it always ends in `/xrpc`.

    "https://example.com/"      -> "https://example.com/xrpc"
    "https://example.com/xrpc"  -> unchanged
    "" / None                   -> "https://bsky.social/xrpc"

    Applying it twice gives the same result as applying it once.
    """
    stripped = (url or "").strip() or DEFAULT_BASE_URL
    if stripped.endswith(XRPC_SUFFIX):
        return stripped
    return stripped.rstrip("/") + XRPC_SUFFIX


def _parse_json_body(body: Optional[bytes]) -> Dict[str, Any]:
    if not body:
        return {}
    try:
        parsed = json.loads(body)
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


def handle_response(response) -> Dict[str, Any]:
    """
    Decode an XRPC response.

    2xx: the JSON body, or {} when the body is empty or not a JSON object.
    Anything else raises BlueSkyError(status, error, message). An unreadable
    error body produces the same exception type with a generic message.
    """
    status = response.status_code
    data = _parse_json_body(response.content)
    if 200 <= status < 300:
        return data

    code = data.get("error")
    message = data.get("message") or f"HTTP {status} error"
    raise BlueSkyError(status, None if code is None else str(code), str(message))


@dataclass
class ClientConfig:
    """Where to send requests and who we are.

    base_url:  normalized PDS endpoint, always ending in /xrpc
    session:   set by login(); replaced wholesale on every login
    timeout:   per-request timeout handed to the transport
    """

    base_url: str = DEFAULT_BASE_URL
    session: Optional[Session] = None
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        self.base_url = normalize_base_url(self.base_url)


class BlueskyClient:
    """
    Write-path client for a Personal Data Server.

    - login() creates a session with an identifier (handle/email) and an app password.
    - send_post() creates an app.bsky.feed.post record, optionally with an embed.
    - send_image()/send_images() upload up to four images and post them with ALT text.
    - send_video() uploads one video; send_gif() transcodes a GIF to MP4 first.

    Every call blocks until the server answers. The session lives in a single
    unguarded field: logging in on one thread while posting on another needs
    external locking (or one client per worker).

    Example Usage:
        client = BlueskyClient()
        client.login("alice.bsky.social", "app-password")
        ref = client.send_images("Two photos", [png_bytes, jpg_bytes],
                                 alts=["A cat", "A dog"], mime_types=["image/png"])
        print(ref.uri)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        http=None,
        transcoder: Optional[VideoTranscoder] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.config = ClientConfig(base_url=base_url, timeout=timeout)
        self.http = http if http is not None else SessionFactory().get()
        self.transcoder = transcoder if transcoder is not None else FFmpegTranscoder()

    # ---------------- Config / session helpers ----------------

    @property
    def base_url(self) -> str:
        return self.config.base_url

    @property
    def session(self) -> Optional[Session]:
        return self.config.session

    @session.setter
    def session(self, value: Optional[Session]) -> None:
        self.config.session = value

    def api_url(self, nsid: str) -> str:
        return f"{self.config.base_url}/{nsid}"

    def _require_session(self) -> Session:
        session = self.config.session
        if session is None:
            raise NotAuthenticatedError("Client is not authenticated. Call login() first.")
        return session

    @staticmethod
    def _json_headers() -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _auth_headers(self, content_type: Optional[str] = "application/json") -> Dict[str, str]:
        session = self._require_session()
        headers: Dict[str, str] = {}
        if content_type is not None:
            headers["Content-Type"] = content_type
        headers["Accept"] = "application/json"
        headers["Authorization"] = f"Bearer {session.access_jwt}"
        return headers

    def _post(self, nsid: str, headers: Dict[str, str], **kwargs) -> Dict[str, Any]:
        try:
            response = self.http.post(self.api_url(nsid), headers=headers, timeout=self.config.timeout, **kwargs)
        except requests.RequestException as err:
            logger.warning("Bluesky %s failed: no response from %s (%s)", nsid, self.config.base_url, err)
            raise TransportError(f"{nsid}: {err}") from err

        try:
            return handle_response(response)
        except BlueSkyError as err:
            logger.warning(
                "Bluesky %s failed: status=%s code=%s message=%s",
                nsid,
                err.status,
                err.code,
                err.message,
            )
            raise

    # ---------------- Public API ----------------

    def login(self, identifier: str, password: str, auth_factor_token: Optional[str] = None) -> Session:
        """
        Authenticate against the configured PDS and keep the resulting session.

        Args:
            identifier (str): Handle, DID or email of the account.
            password (str): Account or app password.
            auth_factor_token (str): Optional emailed 2FA code.

        Returns:
            Session: The new session (also stored on the client).

        Raises:
            AuthError: The server rejected the credentials with a 400/401 (e.g.
                code "AuthFactorTokenRequired" or "AuthenticationRequired").
            BlueSkyError: Any other non-2xx answer, such as 429 or 5xx.
            TransportError: No response was received.
        """
        payload: Dict[str, Any] = {"identifier": identifier, "password": password}
        if auth_factor_token is not None:
            payload["authFactorToken"] = auth_factor_token

        try:
            data = self._post(CREATE_SESSION, self._json_headers(), json=payload)
        except BlueSkyError as err:
            if err.status in AUTH_FAILURE_STATUSES:
                raise AuthError.from_error(err) from err
            raise

        session = Session.from_response(data)
        self.config.session = session
        logger.info("Bluesky: logged in as %s (%s)", session.handle, session.did)
        return session

    def send_post(
        self,
        text: str,
        *,
        repo: Optional[str] = None,
        langs: Optional[Iterable[str]] = None,
        created_at: TimestampLike = None,
        embed: EmbedLike = None,
    ) -> PostReference:
        """
        Create an app.bsky.feed.post record.

        `repo` defaults to the session DID, `langs` to ["en"] and `created_at`
        to now (UTC). `embed` may be an ImagesEmbed, a VideoEmbed or a
        ready-made embed mapping.
        """
        session = self._require_session()
        record = build_post_record(
            text,
            coerce_timestamp(created_at),
            coerce_langs(langs),
            embed,
        )
        payload = {
            "repo": repo if repo is not None else session.did,
            "collection": FEED_POST_TYPE,
            "record": record,
        }

        data = self._post(CREATE_RECORD, self._auth_headers(), json=payload)
        ref = PostReference.from_response(data)
        logger.info("Bluesky: created post %s", ref.uri)
        return ref

    def upload_blob(self, data: bytes, content_type: str = "application/octet-stream") -> Dict[str, Any]:
        """Upload raw bytes and return the decoded response ({"blob": {...}})."""
        headers = self._auth_headers(content_type=content_type)
        logger.debug("Bluesky: uploading %d bytes as %s", len(data), content_type)
        return self._post(UPLOAD_BLOB, headers, data=bytes(data))

    def _upload_for_blob(self, data: bytes, content_type: str) -> BlobRef:
        upload = self.upload_blob(data, content_type=content_type)
        blob = upload.get("blob")
        if blob is None:
            raise MalformedResponseError("uploadBlob response is missing field(s): blob")
        return blob

    def send_image(
        self,
        text: str,
        image: bytes,
        alt: str = "",
        *,
        mime_type: str = DEFAULT_IMAGE_MIME_TYPE,
        **kwargs,
    ) -> PostReference:
        """Upload a single image with ALT text and post it alongside `text`."""
        return self.send_images(text, [image], alts=[alt], mime_types=[mime_type], **kwargs)

    def send_images(
        self,
        text: str,
        images: Sequence[bytes],
        *,
        alts: Optional[Iterable[str]] = None,
        mime_types: Optional[Iterable[str]] = None,
        repo: Optional[str] = None,
        langs: Optional[Iterable[str]] = None,
        created_at: TimestampLike = None,
    ) -> PostReference:
        """
        Upload 1-4 images and post them with `text`.

        Missing ALT texts become "" and missing mime types "image/jpeg"; extra
        entries in either list are ignored. Images are uploaded one after the
        other in the order given; any failed upload aborts before the post is created.
        """
        if not images:
            raise EmbedValidationError("At least one image is required.")
        if len(images) > MAX_IMAGES_PER_POST:
            raise EmbedValidationError(f"The AT Protocol allows up to {MAX_IMAGES_PER_POST} images per post.")

        normalized_alts = normalize_alts(alts, len(images))
        normalized_mimes = normalize_mime_types(mime_types, len(images))

        blobs: List[BlobRef] = []
        for image, mime_type in zip(images, normalized_mimes):
            blobs.append(self._upload_for_blob(image, mime_type))

        embed = build_images_embed(blobs, normalized_alts)
        return self.send_post(text, repo=repo, langs=langs, created_at=created_at, embed=embed)

    def send_video(
        self,
        text: str,
        video: bytes,
        *,
        alt: str = "",
        aspect_ratio: Optional[AspectRatio] = None,
        mime_type: str = "video/mp4",
        repo: Optional[str] = None,
        langs: Optional[Iterable[str]] = None,
        created_at: TimestampLike = None,
    ) -> PostReference:
        """Upload a single video with optional ALT text and aspect ratio, then post it."""
        blob = self._upload_for_blob(video, mime_type)
        embed = build_video_embed(blob, alt, aspect_ratio)
        return self.send_post(text, repo=repo, langs=langs, created_at=created_at, embed=embed)

    def send_gif(
        self,
        text: str,
        gif: bytes,
        *,
        alt: str = "",
        aspect_ratio: Optional[AspectRatio] = None,
        repo: Optional[str] = None,
        langs: Optional[Iterable[str]] = None,
        created_at: TimestampLike = None,
    ) -> PostReference:
        """
        Transcode an animated GIF to MP4 (so Bluesky can play it) and post it.

        Without an explicit `aspect_ratio` the MP4 is probed for its size; if
        that fails the aspect ratio is simply left out.
        """
        self._require_session()

        mp4_bytes, dims = transcode_gif_to_mp4(
            bytes(gif),
            self.transcoder,
            detect_dimensions=aspect_ratio is None,
        )
        if aspect_ratio is None and dims is not None:
            aspect_ratio = AspectRatio(*dims)

        return self.send_video(
            text,
            mp4_bytes,
            alt=alt,
            aspect_ratio=aspect_ratio,
            repo=repo,
            langs=langs,
            created_at=created_at,
        )
