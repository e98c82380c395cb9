"""
Coarse orientation buckets used to partition storage keys
"""

from enum import Enum


class Orientation(str, Enum):
    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"
    OTHER = "other"


def classify(width: int, height: int) -> Orientation:
    """
    Map pixel geometry to an orientation bucket.

    Uses the truncated integer ratio width // height: 1 is landscape (this
    includes square and 16:9 content), 0 is portrait, anything wider is other.
    Existing storage keys depend on this exact policy.
    """
    if height <= 0:
        raise ValueError(f"height must be positive, got {height}")

    ratio = width // height
    if ratio == 1:
        return Orientation.LANDSCAPE
    if ratio == 0:
        return Orientation.PORTRAIT
    return Orientation.OTHER
