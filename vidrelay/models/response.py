from typing import List, Union

from pydantic import BaseModel, ConfigDict, Field

from vidrelay.core.platform import Platform


class FormatDescriptor(BaseModel):
    """One selectable rendition"""
    model_config = ConfigDict(populate_by_name=True)

    format_id: str = Field(alias="formatId")
    quality: Union[int, float] = 0
    quality_label: str = Field(default="Unknown", alias="qualityLabel")
    resolution: str = "Unknown"
    filesize: int = 0


class MediaDescriptor(BaseModel):
    """Video information response"""
    id: str
    title: str
    thumbnail: str = ""
    duration: Union[int, float] = 0
    description: str = ""
    formats: List[FormatDescriptor] = []
    platform: Platform


class HealthResponse(BaseModel):
    status: str
