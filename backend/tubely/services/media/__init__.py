"""
Media tooling: geometry probing, orientation buckets and fast-start remuxing
"""

from .orientation import Orientation, classify
from .prober import FFprobeProber, MediaProber, StreamGeometry
from .remuxer import FastStartRewriter, FFmpegRemuxer, OUTPUT_SUFFIX

__all__ = [
    "Orientation",
    "classify",
    "MediaProber",
    "FFprobeProber",
    "StreamGeometry",
    "FastStartRewriter",
    "FFmpegRemuxer",
    "OUTPUT_SUFFIX",
]
