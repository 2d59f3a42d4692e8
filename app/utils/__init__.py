"""
Utility functions for the application
"""
from .validators import (
    parse_video_id,
    parse_media_type,
    extension_for_content_type
)
from .video_processing import (
    MediaTools,
    MediaToolError,
    classify_aspect_ratio,
    storage_prefix
)

__all__ = [
    # Validators
    "parse_video_id",
    "parse_media_type",
    "extension_for_content_type",
    # Video processing
    "MediaTools",
    "MediaToolError",
    "classify_aspect_ratio",
    "storage_prefix",
]
