import secrets
from typing import Any, Dict
from vidrelay.core.platform import Platform
from vidrelay.models.response import MediaDescriptor
from vidrelay.services.format import FormatDecision
from vidrelay.services.ytdlp import YtDlpClient

DESCRIPTION_MAX_CHARS = 200

def truncate_description(description: Any) -> str:
    if not description:
        return ""
    text = str(description)
    if len(text) > DESCRIPTION_MAX_CHARS:
        return text[:DESCRIPTION_MAX_CHARS] + "..."
    return text

def build_descriptor(platform: Platform, info: Dict[str, Any]) -> MediaDescriptor:
    """Translate a yt-dlp metadata document into the public response shape"""
    return MediaDescriptor(
        id=str(info.get("id") or secrets.token_hex(6)),
        title=info.get("title") or f"{platform.value} video",
        thumbnail=info.get("thumbnail") or "",
        duration=info.get("duration") or 0,
        description=truncate_description(info.get("description")),
        formats=FormatDecision.select(platform, info),
        platform=platform
    )

class MediaInfoService:
    """Video info fetching service"""

    def __init__(self, extractor: YtDlpClient):
        self.extractor = extractor

    async def fetch(self, url: str, platform: Platform) -> MediaDescriptor:
        """
        Fetch metadata for a recognized URL.
        ExtractionError from yt-dlp propagates to the route.
        """
        info = await self.extractor.fetch_metadata(url)
        return build_descriptor(platform, info)
