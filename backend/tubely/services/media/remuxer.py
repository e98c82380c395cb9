"""
Fast-start rewriting via ffmpeg stream copy
"""

import subprocess
from abc import ABC, abstractmethod
from typing import List, Optional

from tubely.errors import RemuxFailure
from tubely.utils.logger import get_logger

logger = get_logger(__name__)

OUTPUT_SUFFIX = ".processing"


class FastStartRewriter(ABC):
    """
    Rewrites an MP4 so its moov atom comes first.

    The output is written next to the input with OUTPUT_SUFFIX appended; the
    caller owns it and must remove it, even when remux() fails.
    """

    @staticmethod
    def output_path_for(input_path: str) -> str:
        return input_path + OUTPUT_SUFFIX

    @abstractmethod
    def remux(self, input_path: str) -> str:
        """Rewrite input_path and return the output path; raises RemuxFailure"""


class FFmpegRemuxer(FastStartRewriter):
    """Moves the moov atom to the front with an ffmpeg stream copy, without re-encoding"""

    def __init__(self, ffmpeg_path: str = "ffmpeg", timeout: Optional[float] = None):
        self.ffmpeg_path = ffmpeg_path
        self.timeout = timeout

    def build_command(self, input_path: str, output_path: str) -> List[str]:
        return [
            self.ffmpeg_path,
            "-y",
            "-v", "error",
            "-i", input_path,
            "-c", "copy",
            "-movflags", "faststart",
            "-f", "mp4",
            output_path,
        ]

    def remux(self, input_path: str) -> str:
        """Rewrite input_path for fast start and return the output path"""
        output_path = self.output_path_for(input_path)
        cmd = self.build_command(input_path, output_path)

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                stdin=subprocess.DEVNULL,
            )
        except FileNotFoundError as e:
            raise RemuxFailure(f"ffmpeg binary not found: {self.ffmpeg_path}", cause=e)
        except subprocess.TimeoutExpired as e:
            raise RemuxFailure(f"ffmpeg timed out after {self.timeout}s", cause=e)

        if result.returncode != 0:
            logger.error(f"ffmpeg exited with {result.returncode}: {result.stderr.strip()}")
            raise RemuxFailure(
                f"ffmpeg exited with status {result.returncode}",
                details={"stderr": result.stderr.strip()},
            )

        logger.debug(f"Fast-start copy written to {output_path}")
        return output_path
