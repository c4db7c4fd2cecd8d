import argparse
import logging
import mimetypes
import sys
from pathlib import Path

import utils.others as otherutils
from bskyclient import BlueskyClient, ClientUsageError, attempt
from bskyclient.types import MAX_IMAGES_PER_POST
from transcode import FFmpegTranscoder
from utils.config import DEFAULT_CONFIG_PATH, ConfigurationError, load_config, resolve_credentials

logger = logging.getLogger("bskypost")


def guess_image_type(path: Path) -> str:
    return mimetypes.guess_type(path.name)[0] or "image/jpeg"


def build_parser() -> argparse.ArgumentParser:
    # fmt: off
    parser = argparse.ArgumentParser(description="Post text, images, a video or a GIF to Bluesky.")
    parser.add_argument("--config", type=str, default=DEFAULT_CONFIG_PATH, help=f"Path to the configuration file (default: {DEFAULT_CONFIG_PATH}).")
    parser.add_argument("--text", type=str, required=True, help="Post text.")
    parser.add_argument("--image", action="append", default=[], help=f"Image file to attach (repeat up to {MAX_IMAGES_PER_POST} times).")
    parser.add_argument("--alt", action="append", default=[], help="ALT text, matched to --image/--video/--gif in order.")
    parser.add_argument("--video", type=str, help="MP4 file to attach.")
    parser.add_argument("--gif", type=str, help="Animated GIF to transcode to MP4 and attach.")
    parser.add_argument("--lang", action="append", default=None, help="Language code (repeatable). Defaults to 'en'.")
    parser.add_argument("--created-at", type=str, help="Pre-formatted createdAt timestamp. Defaults to now (UTC).")
    parser.add_argument("--nosocial", action="store_true", help="Log the post instead of sending it.")
    parser.add_argument("--dry-run", dest="nosocial", action="store_true", help="Alias for --nosocial (no posting).")
    parser.add_argument("--console", action="store_true", help="Write logs to console instead of a file.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    # fmt: on
    return parser


def read_media(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise ClientUsageError(f"Cannot read media file {path}: {e}") from e


def send(client: BlueskyClient, args: argparse.Namespace):
    """Dispatch to the matching client call for the attached media."""
    media_flags = [bool(args.image), bool(args.video), bool(args.gif)]
    if sum(media_flags) > 1:
        raise ClientUsageError("Use only one of --image, --video or --gif per post.")

    common = {"langs": args.lang, "created_at": args.created_at}
    first_alt = args.alt[0] if args.alt else ""

    if args.image:
        paths = [Path(p) for p in args.image]
        return client.send_images(
            args.text,
            [read_media(p) for p in paths],
            alts=args.alt,
            mime_types=[guess_image_type(p) for p in paths],
            **common,
        )
    if args.video:
        return client.send_video(args.text, read_media(Path(args.video)), alt=first_alt, **common)
    if args.gif:
        return client.send_gif(args.text, read_media(Path(args.gif)), alt=first_alt, **common)
    return client.send_post(args.text, **common)


def main(argv=None) -> int:
    """
    Entry point for the bskypost command.

    Loads configuration and credentials, sets up logging, logs in, and sends a
    single post. Returns 0 on success and 1 on any client or configuration error.
    """
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(e, file=sys.stderr)
        return 1

    otherutils.setup_logging(config, console=args.console, debug=args.debug)
    otherutils.log_startup_info(args, config)

    if args.nosocial:
        logger.info(
            "[NOSOCIAL] text=%r images=%s video=%s gif=%s langs=%s",
            args.text,
            args.image,
            args.video,
            args.gif,
            args.lang,
        )
        return 0

    try:
        creds = resolve_credentials(config)
    except ConfigurationError as e:
        logger.error("%s", e)
        return 1

    client = BlueskyClient(
        creds.base_url,
        transcoder=FFmpegTranscoder.from_config(config),
        timeout=creds.timeout,
    )

    login = attempt(client.login, creds.identifier, creds.password, creds.auth_factor_token)
    if not login.ok:
        logger.error("Login failed (%s): %s", login.kind, login.error)
        return 1

    outcome = attempt(send, client, args)
    if not outcome.ok:
        logger.error("Post failed (%s): %s", outcome.kind, outcome.error)
        return 1

    logger.info("Post sent: uri=%s cid=%s", outcome.value.uri, outcome.value.cid)
    print(outcome.value.uri)
    return 0


if __name__ == "__main__":
    sys.exit(main())
