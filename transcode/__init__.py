from transcode.gif_video import (
    FFmpegTranscoder,
    TranscodeError,
    VideoTranscoder,
    transcode_gif_to_mp4,
    usable_dimensions,
)

__all__ = [
    "FFmpegTranscoder",
    "TranscodeError",
    "VideoTranscoder",
    "transcode_gif_to_mp4",
    "usable_dimensions",
]
