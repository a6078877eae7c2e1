from typing import Any, Dict, List
from vidrelay.core.platform import Platform, PRIMARY_PLATFORM
from vidrelay.models.response import FormatDescriptor

PRIMARY_CONTAINER = "mp4"
SECONDARY_CONTAINERS = ("mp4", "webm")

BEST_AVAILABLE = FormatDescriptor(
    format_id="best",
    quality=1,
    quality_label="Best available",
    resolution="Auto",
    filesize=0
)

def _has_stream(codec: Any) -> bool:
    return bool(codec) and codec != "none"

def _filesize(f: Dict[str, Any]) -> int:
    return int(f.get("filesize") or f.get("filesize_approx") or 0)

class FormatDecision:
    """Filter and rank the raw yt-dlp format list"""

    @staticmethod
    def is_eligible(platform: Platform, f: Dict[str, Any]) -> bool:
        """Primary platform needs muxed mp4; others accept mp4 or webm"""
        if platform == PRIMARY_PLATFORM:
            return (
                f.get("ext") == PRIMARY_CONTAINER
                and _has_stream(f.get("vcodec"))
                and _has_stream(f.get("acodec"))
            )
        return f.get("ext") in SECONDARY_CONTAINERS

    @staticmethod
    def filter_raw(platform: Platform, raw_formats: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [f for f in raw_formats if FormatDecision.is_eligible(platform, f)]

    @staticmethod
    def describe(platform: Platform, f: Dict[str, Any]) -> FormatDescriptor:
        """Map one raw format entry to its public descriptor"""
        if platform == PRIMARY_PLATFORM:
            label = f.get("quality_label") or f.get("format_note") or "Unknown"
            resolution = f.get("resolution") or "Unknown"
        else:
            height = f.get("height")
            width = f.get("width")
            label = f"{height}p" if height else "Unknown"
            if f.get("resolution"):
                resolution = f["resolution"]
            elif width and height:
                resolution = f"{width}x{height}"
            else:
                resolution = "Unknown"

        return FormatDescriptor(
            format_id=str(f.get("format_id") or "best"),
            quality=f.get("quality") or 0,
            quality_label=str(label),
            resolution=str(resolution),
            filesize=_filesize(f)
        )

    @staticmethod
    def sort(formats: List[FormatDescriptor]) -> List[FormatDescriptor]:
        """Stable, descending by quality score"""
        return sorted(formats, key=lambda d: d.quality, reverse=True)

    @staticmethod
    def select(platform: Platform, info: Dict[str, Any]) -> List[FormatDescriptor]:
        """
        Build the public format list for a metadata document.
        Falls back to a single best-available entry when nothing qualifies
        but yt-dlp still resolved a playable URL.
        """
        raw_formats = info.get("formats") or []
        formats = FormatDecision.sort([
            FormatDecision.describe(platform, f)
            for f in FormatDecision.filter_raw(platform, raw_formats)
        ])

        if not formats and info.get("url"):
            formats = [BEST_AVAILABLE.model_copy()]

        return formats
