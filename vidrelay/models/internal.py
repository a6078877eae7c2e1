from pydantic import BaseModel

from vidrelay.core.platform import Platform


class DownloadIntent(BaseModel):
    """Internal download intent (separated from HTTP concerns)"""
    url: str
    platform: Platform
    format_id: str


class DownloadedFile(BaseModel):
    """A file materialized by yt-dlp, owned by a single request"""
    path: str
    filename: str
    size: int
