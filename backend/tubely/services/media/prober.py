"""
Stream geometry inspection via ffprobe
"""

import json
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from tubely.errors import ProbeFailure
from tubely.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StreamGeometry:
    """Pixel dimensions of the first video stream"""
    width: int
    height: int


class MediaProber(ABC):
    """Anything that can report the geometry of a staged media file"""

    @abstractmethod
    def probe(self, path: str) -> StreamGeometry:
        """Return the first video stream's geometry; raises ProbeFailure"""


class FFprobeProber(MediaProber):
    """Reads stream geometry from a local media file"""

    def __init__(self, ffprobe_path: str = "ffprobe", timeout: Optional[float] = None):
        self.ffprobe_path = ffprobe_path
        self.timeout = timeout

    def build_command(self, path: str) -> List[str]:
        return [
            self.ffprobe_path,
            "-v", "error",
            "-print_format", "json",
            "-show_streams",
            path,
        ]

    def probe(self, path: str) -> StreamGeometry:
        """
        Probe a file and return the geometry of its first video stream

        Raises:
            ProbeFailure: the tool could not run, or its output has no usable video stream
        """
        cmd = self.build_command(path)
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                stdin=subprocess.DEVNULL,
            )
        except FileNotFoundError as e:
            raise ProbeFailure(f"ffprobe binary not found: {self.ffprobe_path}", cause=e)
        except subprocess.TimeoutExpired as e:
            raise ProbeFailure(f"ffprobe timed out after {self.timeout}s", cause=e)

        if result.returncode != 0:
            logger.error(f"ffprobe exited with {result.returncode}: {result.stderr.strip()}")
            raise ProbeFailure(
                f"ffprobe exited with status {result.returncode}",
                details={"stderr": result.stderr.strip()},
            )

        try:
            document = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise ProbeFailure("ffprobe output is not valid JSON", cause=e)

        return self.parse_geometry(document)

    @staticmethod
    def parse_geometry(document: Any) -> StreamGeometry:
        """Extract the first video stream's width and height from ffprobe JSON"""
        if not isinstance(document, dict):
            raise ProbeFailure("ffprobe output is not a JSON object")

        streams = document.get("streams") or []
        if not isinstance(streams, list):
            raise ProbeFailure("ffprobe streams is not a list")
        if not streams:
            raise ProbeFailure("ffprobe reported no streams")

        stream = _first_video_stream(streams)
        if stream is None:
            raise ProbeFailure("ffprobe reported no video stream")

        width = stream.get("width")
        height = stream.get("height")
        if not isinstance(width, int) or not isinstance(height, int):
            raise ProbeFailure("video stream has no width/height", details={"stream": stream})
        if width <= 0 or height <= 0:
            raise ProbeFailure(f"video stream has invalid geometry {width}x{height}")

        return StreamGeometry(width=width, height=height)


def _first_video_stream(streams: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    typed = [s for s in streams if isinstance(s, dict) and "codec_type" in s]
    if not typed:
        # Older ffprobe builds may omit codec_type; fall back to the first entry
        first = streams[0]
        return first if isinstance(first, dict) else None

    for stream in typed:
        if stream.get("codec_type") == "video":
            return stream
    return None
