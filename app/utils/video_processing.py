"""
Video processing utilities backed by ffprobe and ffmpeg
"""
import json
import logging
import subprocess
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

LANDSCAPE = "16:9"
PORTRAIT = "9:16"
OTHER = "other"

_PREFIXES = {
    LANDSCAPE: "landscape/",
    PORTRAIT: "portrait/",
    OTHER: "other/",
}


class MediaToolError(Exception):
    pass


def classify_aspect_ratio(width: int, height: int) -> str:
    """
    Bucket a frame size into 16:9, 9:16 or other
    """
    if height == 0:
        return OTHER
    ratio = width / height
    if 1.75 < ratio < 1.80:
        return LANDSCAPE
    if 0.53 < ratio < 0.58:
        return PORTRAIT
    return OTHER


def storage_prefix(aspect_ratio: str) -> str:
    return _PREFIXES.get(aspect_ratio, _PREFIXES[OTHER])


class MediaTools:
    """Thin wrapper over the ffprobe and ffmpeg binaries"""

    def __init__(self, ffprobe_path: str = "ffprobe", ffmpeg_path: str = "ffmpeg", timeout: Optional[float] = None):
        self.ffprobe_path = ffprobe_path
        self.ffmpeg_path = ffmpeg_path
        self.timeout = timeout

    def _run(self, cmd) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(cmd, capture_output=True, timeout=self.timeout)
        except FileNotFoundError as e:
            raise MediaToolError(f"{cmd[0]} not found") from e
        except subprocess.TimeoutExpired as e:
            raise MediaToolError(f"{cmd[0]} timed out") from e

    def inspect(self, file_path: str) -> Tuple[int, int]:
        """
        Read the frame size of the first stream
        Returns: (width, height)
        """
        cmd = [
            self.ffprobe_path,
            "-v", "error",
            "-print_format", "json",
            "-show_streams",
            file_path,
        ]
        result = self._run(cmd)
        if result.returncode != 0:
            logger.error(f"ffprobe failed for {file_path}: {result.stderr!r}")
            raise MediaToolError("couldn't execute command")

        try:
            probe = json.loads(result.stdout)
            streams = probe.get("streams") or []
        except (ValueError, AttributeError) as e:
            raise MediaToolError("couldn't unmarshal ffprobe output") from e

        if not isinstance(streams, list) or not streams:
            raise MediaToolError("no streams found in video")

        stream = streams[0]
        try:
            return int(stream.get("width") or 0), int(stream.get("height") or 0)
        except (AttributeError, TypeError, ValueError) as e:
            raise MediaToolError("invalid stream dimensions") from e

    def get_aspect_ratio(self, file_path: str) -> str:
        width, height = self.inspect(file_path)
        return classify_aspect_ratio(width, height)

    def remux(self, file_path: str) -> str:
        """
        Copy streams into a new mp4 with the moov atom moved to the front
        Returns: path of the processed file
        """
        output_path = file_path + ".processing"
        cmd = [
            self.ffmpeg_path,
            "-i", file_path,
            "-c", "copy",
            "-movflags", "faststart",
            "-f", "mp4",
            output_path,
        ]
        result = self._run(cmd)
        if result.returncode != 0:
            logger.error(f"ffmpeg failed for {file_path}: {result.stderr!r}")
            raise MediaToolError("couldn't execute command")
        return output_path
