# transcode/gif_video.py
from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

logger = logging.getLogger(__name__)

Dimensions = Tuple[int, int]

# Rounds both sides down to an even number; yuv420p chroma subsampling needs it.
EVEN_SCALE_FILTER = "scale=trunc(iw/2)*2:trunc(ih/2)*2"


class TranscodeError(RuntimeError):
    """Raised when ffmpeg cannot be run or exits non-zero."""

    pass


class VideoTranscoder(Protocol):
    """
    Anything that can turn a GIF file into an MP4 file and report its size.

    transcode() must raise on failure. probe() returns (width, height) of the
    first video stream, or None when it cannot tell.
    """

    def transcode(self, src: Path, dst: Path) -> None: ...

    def probe(self, path: Path) -> Optional[Dimensions]: ...


def parse_dimensions(raw: str) -> Optional[Dimensions]:
    """Parse ffprobe's `WIDTHxHEIGHT` output. Returns None for anything else."""
    parts = raw.strip().split("x")
    if len(parts) != 2:
        return None
    try:
        width, height = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    return width, height


def even_dimensions(width: int, height: int) -> Dimensions:
    return width - width % 2, height - height % 2


def usable_dimensions(dims: Optional[Dimensions]) -> Optional[Dimensions]:
    """Even-rounded dimensions, or None when a side ends up below 1."""
    if dims is None:
        return None
    width, height = even_dimensions(*dims)
    if width < 1 or height < 1:
        return None
    return width, height


@dataclass
class FFmpegTranscoder:
    """Transcoder backed by the system `ffmpeg` / `ffprobe` binaries.

    - pixel format: yuv420p (widely supported)
    - filter: scale=trunc(iw/2)*2:trunc(ih/2)*2 to ensure even dimensions
    - -movflags +faststart for better streamable playback
    - `codec=None` leaves the video codec choice to ffmpeg; preset and crf
      only apply to libx264.
    """

    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    codec: Optional[str] = "libx264"
    crf: int = 23
    preset: str = "medium"
    extra_ffmpeg_args: Sequence[str] = field(default_factory=tuple)

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> FFmpegTranscoder:
        cfg = (config or {}).get("transcode", {}) or {}
        kwargs = {
            key: cfg[key]
            for key in ("ffmpeg_path", "ffprobe_path", "codec", "crf", "preset")
            if key in cfg
        }
        return cls(**kwargs)

    def build_command(self, src: Path, dst: Path) -> List[str]:
        cmd: List[str] = [
            self.ffmpeg_path,
            "-y",  # the output file already exists (reserved temp file)
            "-i",
            str(src),
            "-movflags",
            "+faststart",
            "-pix_fmt",
            "yuv420p",
            "-vf",
            EVEN_SCALE_FILTER,
        ]
        if self.codec:
            cmd.extend(["-c:v", self.codec])
            if self.codec == "libx264":
                cmd.extend(["-preset", self.preset, "-crf", str(self.crf)])
        cmd.extend(self.extra_ffmpeg_args)
        cmd.append(str(dst))
        return cmd

    def transcode(self, src: Path, dst: Path) -> None:
        cmd = self.build_command(src, dst)
        logger.info("Converting GIF to MP4 via ffmpeg: %s -> %s", src, dst)
        logger.debug("ffmpeg command: %s", " ".join(cmd))

        try:
            proc = subprocess.run(
                cmd,
                check=False,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except FileNotFoundError as exc:
            raise TranscodeError(f"{self.ffmpeg_path} not found on PATH; cannot encode video") from exc

        output = proc.stdout.decode("utf-8", errors="ignore")
        if proc.returncode != 0:
            logger.error("ffmpeg exited with code %s when converting %s -> %s", proc.returncode, src, dst)
            logger.debug("ffmpeg output:\n%s", output)
            raise TranscodeError(f"ffmpeg failed with exit code {proc.returncode}")

        logger.debug("ffmpeg output:\n%s", output)

    def probe(self, path: Path) -> Optional[Dimensions]:
        cmd = [
            self.ffprobe_path,
            "-v",
            "error",
            "-select_streams",
            "v:0",
            "-show_entries",
            "stream=width,height",
            "-of",
            "csv=s=x:p=0",
            str(path),
        ]
        try:
            proc = subprocess.run(cmd, check=True, capture_output=True, text=True)
        except (OSError, subprocess.CalledProcessError) as exc:
            logger.warning("ffprobe could not read %s: %s", path, exc)
            return None
        return parse_dimensions(proc.stdout)


def _reserve_temp_file(suffix: str) -> Path:
    fd, name = tempfile.mkstemp(prefix="bskyclient-", suffix=suffix)
    os.close(fd)
    return Path(name)


def _detect_dimensions(transcoder: VideoTranscoder, path: Path) -> Optional[Dimensions]:
    try:
        dims = transcoder.probe(path)
    except Exception as exc:
        logger.warning("Could not probe %s; omitting dimensions: %s", path, exc)
        return None

    usable = usable_dimensions(dims)
    if usable is None:
        logger.warning("Unusable probe result %r for %s; omitting dimensions", dims, path)
    return usable


def transcode_gif_to_mp4(
    gif: bytes,
    transcoder: VideoTranscoder,
    *,
    detect_dimensions: bool = True,
) -> Tuple[bytes, Optional[Dimensions]]:
    """Convert animated GIF bytes to MP4 bytes.

    The GIF is written to a temporary file, the transcoder writes a second
    temporary file, and both are removed before returning or re-raising.

    Args:
        gif: Raw GIF bytes.
        transcoder: See VideoTranscoder.
        detect_dimensions: Probe the MP4 for width/height, rounded down to even
            numbers. A failed or unusable probe yields None instead of an error.

    Returns:
        (mp4_bytes, (width, height) or None)

    Raises:
        TranscodeError (or whatever the transcoder raises) if conversion fails.
    """
    gif_path: Optional[Path] = None
    mp4_path: Optional[Path] = None
    try:
        gif_path = _reserve_temp_file(".gif")
        mp4_path = _reserve_temp_file(".mp4")
        gif_path.write_bytes(gif)

        transcoder.transcode(gif_path, mp4_path)
        mp4_bytes = mp4_path.read_bytes()

        dims = _detect_dimensions(transcoder, mp4_path) if detect_dimensions else None
        logger.info(
            "GIF to MP4 complete: %.2f MB -> %.2f MB (dimensions: %s)",
            len(gif) / (1024 * 1024),
            len(mp4_bytes) / (1024 * 1024),
            dims,
        )
        return mp4_bytes, dims
    finally:
        for path in (gif_path, mp4_path):
            if path is not None:
                path.unlink(missing_ok=True)
